"""In-memory transport for tests."""

from __future__ import annotations

from typing import Any, Callable

from scopelog.models.entry import LogEntry
from scopelog.models.enums import LogLevel
from scopelog.transports.base import Transport


class SpyTransport(Transport):
    """Records every entry it receives.

    Example:
        >>> spy = SpyTransport()
        >>> await logger.info({"order_id": "o1"}, "created")
        >>> spy.find_entries(message="created")[0].extra_fields
        {'order_id': 'o1'}
    """

    def __init__(self, level: str | LogLevel | None = None, name: str | None = None) -> None:
        super().__init__(level=level, name=name or "spy")
        self.entries: list[LogEntry] = []
        self.flush_count = 0

    async def log(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    async def flush(self) -> None:
        self.flush_count += 1

    def find_entries(
        self,
        predicate: Callable[[LogEntry], bool] | None = None,
        **fields: Any,
    ) -> list[LogEntry]:
        """Return entries matching ``predicate`` and every given attribute.

        Keyword arguments are compared against ``LogEntry`` attributes first
        and against the flattened ``to_dict()`` view otherwise.
        """
        matches = []
        for entry in self.entries:
            if predicate is not None and not predicate(entry):
                continue
            flat = entry.to_dict()
            if all(_field(entry, flat, key) == value for key, value in fields.items()):
                matches.append(entry)
        return matches

    @property
    def last(self) -> LogEntry | None:
        return self.entries[-1] if self.entries else None

    def clear(self) -> None:
        self.entries.clear()


_MISSING = object()


def _field(entry: LogEntry, flat: dict[str, Any], key: str) -> Any:
    if key in LogEntry.model_fields:
        return getattr(entry, key)
    return flat.get(key, _MISSING)
