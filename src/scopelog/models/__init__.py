"""scopelog models.

This module provides the Pydantic models, enums and constants shared by the
context, masking, logger and instrumentation layers.
"""

# Base models
from scopelog.models.base import ScopeLogBaseModel

# Constants
from scopelog.models.constants import (
    CORRELATION_ID_FIELD,
    DEFAULT_CORRELATION_ID_HEADER,
    DEFAULT_TRANSACTION_ID_HEADER,
    TRANSACTION_ID_FIELD,
)

# Enums
from scopelog.models.enums import LifecycleState, LogLevel, MaskingStrategy, PropagationMode

# ID utilities
from scopelog.models.ids import generate_id

# Entries
from scopelog.models.entry import LogCall, LogEntry

__all__ = [
    "CORRELATION_ID_FIELD",
    "DEFAULT_CORRELATION_ID_HEADER",
    "DEFAULT_TRANSACTION_ID_HEADER",
    "LifecycleState",
    "LogCall",
    "LogEntry",
    "LogLevel",
    "MaskingStrategy",
    "PropagationMode",
    "ScopeLogBaseModel",
    "TRANSACTION_ID_FIELD",
    "generate_id",
]
