"""Console transport rendered with structlog's processors.

Example:
    >>> transport = ConsoleTransport(log_format="console", level="info")
"""

from __future__ import annotations

import sys
from typing import Any, TextIO

import structlog
from structlog.typing import Processor

from scopelog.models.entry import LogEntry
from scopelog.models.enums import LogLevel
from scopelog.transports.base import Transport


class ConsoleTransport(Transport):
    """Writes one rendered line per entry to a text stream.

    Args:
        level: Minimum level accepted
        log_format: "json" for one JSON object per line, "console" for
            structlog's human-readable rendering
        stream: Target stream; defaults to ``sys.stdout`` looked up at write time
        colors: Colorize console output
    """

    def __init__(
        self,
        level: str | LogLevel | None = None,
        log_format: str = "json",
        stream: TextIO | None = None,
        colors: bool = False,
        name: str | None = None,
    ) -> None:
        super().__init__(level=level, name=name or "console")
        if log_format not in ("json", "console"):
            raise ValueError(f"Unknown console log format: {log_format!r}")
        self.log_format = log_format
        self._stream = stream
        self._renderer: Processor
        if log_format == "json":
            self._renderer = structlog.processors.JSONRenderer()
        else:
            self._renderer = structlog.dev.ConsoleRenderer(colors=colors)

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def render(self, entry: LogEntry) -> str:
        event: dict[str, Any] = entry.to_dict()
        if self.log_format == "console":
            event["event"] = event.pop("msg")
        rendered = self._renderer(None, entry.level.value, event)
        return rendered if isinstance(rendered, str) else str(rendered)

    async def log(self, entry: LogEntry) -> None:
        self.stream.write(self.render(entry) + "\n")

    async def flush(self) -> None:
        self.stream.flush()
