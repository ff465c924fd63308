"""Diagnostic logging for scopelog itself.

scopelog's user-facing pipeline must never log through itself when one of its
own stages fails (a failing transport would otherwise report its failure to
the same failing transport). Internal diagnostics therefore go through a
separate structlog configuration, rendered to stderr.

The logging configuration includes:
- JSON renderer for production environments
- Console renderer with colors for development
- Automatic timestamp, log level and logger name injection

Environment Variables:
    SCOPELOG_LOG_FORMAT: Set to "json" for JSON output, "console" for colored output
    SCOPELOG_LOG_LEVEL: Set log level (DEBUG, INFO, WARNING, ERROR)
    SCOPELOG_SERVICE_NAME: Service name to include in diagnostics

Example:
    >>> from scopelog.observability.logging import get_logger
    >>>
    >>> logger = get_logger("scopelog.masking.engine")
    >>> logger.warning("scopelog.masking.field_failed", field="ssn")
"""

import logging
import os
import sys

import structlog
from structlog.typing import Processor

# Default configuration
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_FORMAT = "console"
DEFAULT_SERVICE_NAME = "scopelog"

# Environment variable names
ENV_LOG_FORMAT = "SCOPELOG_LOG_FORMAT"
ENV_LOG_LEVEL = "SCOPELOG_LOG_LEVEL"
ENV_SERVICE_NAME = "SCOPELOG_SERVICE_NAME"

# stdlib logger that owns the diagnostic handler
DIAGNOSTICS_LOGGER_NAME = "scopelog"

# Module-level flag to track if logging has been configured
_logging_configured = False


def _get_log_level() -> str:
    """Get log level from environment or use default."""
    return os.environ.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper()


def _get_log_format() -> str:
    """Get log format from environment or use default."""
    return os.environ.get(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT).lower()


def _get_service_name() -> str:
    """Get service name from environment or use default."""
    return os.environ.get(ENV_SERVICE_NAME, DEFAULT_SERVICE_NAME)


def _get_shared_processors() -> list[Processor]:
    """Get shared processors for all log formats."""
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _get_renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def configure_logging(
    log_format: str | None = None,
    log_level: str | None = None,
    service_name: str | None = None,
    force: bool = False,
) -> None:
    """Configure scopelog's diagnostic logging.

    Only the ``scopelog`` stdlib logger hierarchy is touched; the host
    application's root logger and handlers are left alone.

    Args:
        log_format: Output format - "json" or "console". Defaults to env var or "console"
        log_level: Minimum log level. Defaults to env var or "WARNING"
        service_name: Service name bound to every diagnostic. Defaults to env var or "scopelog"
        force: If True, reconfigure even if already configured

    Example:
        >>> configure_logging(log_format="json", log_level="DEBUG", force=True)
    """
    global _logging_configured

    if _logging_configured and not force:
        return

    log_format = log_format or _get_log_format()
    log_level = log_level or _get_log_level()
    service_name = service_name or _get_service_name()

    shared_processors = _get_shared_processors()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _get_renderer(log_format),
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    diagnostics = logging.getLogger(DIAGNOSTICS_LOGGER_NAME)
    diagnostics.handlers.clear()
    diagnostics.addHandler(handler)
    diagnostics.setLevel(getattr(logging, log_level))
    diagnostics.propagate = False

    structlog.contextvars.bind_contextvars(service=service_name)

    _logging_configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a diagnostic logger for the given name.

    If logging has not been configured, it will be configured with default
    settings.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Bound structlog logger
    """
    if not _logging_configured:
        configure_logging()

    return structlog.stdlib.get_logger(name)
