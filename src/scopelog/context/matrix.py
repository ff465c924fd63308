"""Logging matrix: per-severity allowlist of context fields.

Example:
    >>> matrix = LoggingMatrix({"default": ["correlationId"], "error": ["*"]})
    >>> matrix.filter({"correlationId": "c1", "userId": "u1"}, "info")
    {'correlationId': 'c1'}
    >>> matrix.filter({"correlationId": "c1", "userId": "u1"}, "error")
    {'correlationId': 'c1', 'userId': 'u1'}
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from scopelog.models.constants import MATRIX_DEFAULT_KEY, MATRIX_WILDCARD
from scopelog.models.enums import LogLevel


class LoggingMatrix:
    """Maps a log level to the context fields surfaced at that level.

    A level without its own rule falls back to the ``default`` rule; a level
    with neither surfaces no context fields.

    Raises:
        ValueError: If a key is neither ``default`` nor a known level name
    """

    def __init__(self, rules: Mapping[str, Iterable[str]]) -> None:
        self._rules: dict[str, frozenset[str]] = {}
        for key, fields in rules.items():
            name = key if key == MATRIX_DEFAULT_KEY else LogLevel.parse(key).value
            self._rules[name] = frozenset(fields)

    def fields_for(self, level: str | LogLevel) -> frozenset[str]:
        """Return the allowlist for ``level`` (after the ``default`` fallback)."""
        name = LogLevel.parse(level).value
        if name in self._rules:
            return self._rules[name]
        return self._rules.get(MATRIX_DEFAULT_KEY, frozenset())

    def filter(self, context: Mapping[str, Any], level: str | LogLevel) -> dict[str, Any]:
        """Return the subset of ``context`` allowed at ``level``."""
        allowed = self.fields_for(level)
        if MATRIX_WILDCARD in allowed:
            return dict(context)
        return {key: value for key, value in context.items() if key in allowed}

    def to_dict(self) -> dict[str, list[str]]:
        return {key: sorted(fields) for key, fields in self._rules.items()}
