"""Log entry and normalized log-call models.

A ``LogCall`` is what a logger method receives once its loosely-typed
arguments have been normalized; a ``LogEntry`` is the finished, immutable
record handed to transports.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import Field

from scopelog.models.base import ScopeLogBaseModel
from scopelog.models.enums import LogLevel


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


class LogCall(ScopeLogBaseModel):
    """Canonical form of a logger call's arguments.

    Attributes:
        metadata: Structured fields passed as the first (mapping) argument
        template: Message template (``%``-style placeholders)
        args: Values interpolated into the template
    """

    metadata: dict[str, Any] = Field(default_factory=dict)
    template: str = ""
    args: tuple[Any, ...] = ()


class LogEntry(ScopeLogBaseModel):
    """A structured log record.

    Attributes:
        timestamp: ISO 8601 UTC time of the call
        level: Severity of the record
        message: Formatted message
        service: Service (or logger) name that produced the record
        bindings: Persistent bindings of the logger handle
        context: Context snapshot filtered through the logging matrix
        extra_fields: Metadata passed with this call

    Example:
        >>> entry = LogEntry(level=LogLevel.INFO, message="hi", service="api")
        >>> entry.to_dict()["msg"]
        'hi'
    """

    timestamp: str = Field(default_factory=utc_timestamp)
    level: LogLevel
    message: str = ""
    service: str
    bindings: dict[str, Any] = Field(default_factory=dict)
    context: dict[str, Any] = Field(default_factory=dict)
    extra_fields: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Flatten into a single mapping.

        Precedence, low to high: context, bindings, extra fields, then the entry's
        own ``timestamp``/``level``/``service``/``msg``.
        """
        flat: dict[str, Any] = {}
        flat.update(self.context)
        flat.update(self.bindings)
        flat.update(self.extra_fields)
        flat.update(
            {
                "timestamp": self.timestamp,
                "level": self.level.value,
                "service": self.service,
                "msg": self.message,
            }
        )
        return flat
