"""Transport contract.

A transport is the sink that persists or displays finished log entries. The
pipeline sends each entry concurrently to every transport whose own level
gate accepts it; failures are isolated per transport.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from scopelog.models.entry import LogEntry
from scopelog.models.enums import LogLevel


class Transport(ABC):
    """Base class for log sinks.

    Args:
        level: Minimum level this transport accepts; None accepts everything
        name: Name used in diagnostics (defaults to the class name)
    """

    def __init__(self, level: str | LogLevel | None = None, name: str | None = None) -> None:
        self.level = LogLevel.parse(level) if level is not None else None
        self.name = name or type(self).__name__

    @abstractmethod
    async def log(self, entry: LogEntry) -> None:
        """Persist or display one entry."""

    def is_level_enabled(self, level: str | LogLevel) -> bool:
        if self.level is None:
            return True
        return LogLevel.parse(level).severity >= self.level.severity

    async def flush(self) -> None:
        """Write out anything buffered. No-op by default."""
