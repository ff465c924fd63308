"""Observability module for scopelog's own diagnostics.

This module provides the structured logger scopelog uses to report failures
of its own pipeline stages (custom masking errors, serializer timeouts,
transport failures, shutdown timeouts).

Example:
    >>> from scopelog.observability import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.warning("scopelog.transport.failed", transport="ConsoleTransport")
"""

from scopelog.observability.logging import (
    configure_logging,
    get_logger,
)

__all__ = [
    "configure_logging",
    "get_logger",
]
