"""Enumerations for scopelog.

This module defines all enum types used by the library to ensure
type safety and prevent magic strings.
"""

import math
from enum import Enum


class LogLevel(str, Enum):
    """Log severities, lowest to highest.

    Numeric severities follow the pino convention used by the wire format of
    the entries (trace=10 ... fatal=60). ``SILENT`` disables output.

    Example:
        >>> LogLevel.WARN.severity > LogLevel.INFO.severity
        True
        >>> LogLevel.parse("WARNING")
        <LogLevel.WARN: 'warn'>
    """

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"
    SILENT = "silent"

    @property
    def severity(self) -> float:
        """Numeric severity of this level."""
        return _SEVERITIES[self]

    @classmethod
    def parse(cls, value: "str | LogLevel") -> "LogLevel":
        """Parse a level name, accepting stdlib spellings (WARNING, CRITICAL).

        Raises:
            ValueError: If the name is not a known level
        """
        if isinstance(value, LogLevel):
            return value
        name = value.strip().lower()
        return cls(_ALIASES.get(name, name))


_SEVERITIES = {
    LogLevel.TRACE: 10,
    LogLevel.DEBUG: 20,
    LogLevel.INFO: 30,
    LogLevel.WARN: 40,
    LogLevel.ERROR: 50,
    LogLevel.FATAL: 60,
    LogLevel.SILENT: math.inf,
}

_ALIASES = {"warning": "warn", "critical": "fatal"}


class MaskingStrategy(str, Enum):
    """Redaction transforms a masking rule can apply to a matched value."""

    FULL = "full"
    PRESERVE_LENGTH = "preserve_length"
    CREDIT_CARD = "credit_card"
    SSN = "ssn"
    EMAIL = "email"
    PHONE = "phone"
    TOKEN = "token"
    PASSWORD = "password"
    CUSTOM = "custom"


class PropagationMode(str, Enum):
    """Which context fields an instrumented client injects into outbound headers.

    Identity headers (correlation/transaction id) are injected in every mode.
    """

    NONE = "none"
    SELECT = "select"
    WILDCARD = "wildcard"


class LifecycleState(str, Enum):
    """States of the ScopeLog facade."""

    NOT_INITIALIZED = "not_initialized"
    INITIALIZING = "initializing"
    READY = "ready"
    ERROR = "error"
    SHUTTING_DOWN = "shutting_down"
    SHUTDOWN = "shutdown"
