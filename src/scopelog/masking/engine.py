"""Masking engine.

Walks a value tree and returns a redacted copy. Mapping keys are matched
against the rule list (custom rules first, then the default rules, each group
in registration order); the first matching rule masks the whole value under
that key. Unmatched values are walked recursively, and string leaves that
look like URLs get their matching query parameters masked in place.

The input is never mutated. Cycles are replaced by ``"[Circular]"`` and
containers nested deeper than ``max_depth`` by ``"[MAX_DEPTH_REACHED]"``.

Example:
    >>> engine = MaskingEngine([MaskingRule("password", MaskingStrategy.FULL, mask_char="***")])
    >>> engine.process({"user": "al", "password": "hunter2"})
    {'user': 'al', 'password': '***'}
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Iterable
from urllib.parse import quote, unquote_plus, urlsplit, urlunsplit

from scopelog.errors import MaskingFieldFailure
from scopelog.masking.rules import DEFAULT_RULES, MaskingRule
from scopelog.masking.strategies import apply_strategy
from scopelog.models.constants import (
    CIRCULAR_PLACEHOLDER,
    DEFAULT_FULL_MASK,
    DEFAULT_MASK_CHAR,
    DEFAULT_MAX_DEPTH,
    MAX_DEPTH_PLACEHOLDER,
)
from scopelog.models.enums import MaskingStrategy
from scopelog.observability.logging import get_logger
from scopelog.utils.outcome import Outcome

logger = get_logger(__name__)

URL_PATTERN = re.compile(r"^(https?|ftp)://[^\s/$.?#].[^\s]*$", re.IGNORECASE)

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


class MaskingEngine:
    """Recursive redaction under an ordered rule list.

    Args:
        rules: Custom rules, evaluated before the default rules
        mask_char: Glyph written over hidden characters
        full_mask: Replacement used by the FULL strategy when a rule has no mask_char
        max_depth: Maximum container nesting that is walked
        enable_default_rules: Append the built-in rules for passwords, emails,
            card numbers, SSNs, phones, tokens and credentials
    """

    def __init__(
        self,
        rules: Iterable[MaskingRule] = (),
        mask_char: str = DEFAULT_MASK_CHAR,
        full_mask: str = DEFAULT_FULL_MASK,
        max_depth: int = DEFAULT_MAX_DEPTH,
        enable_default_rules: bool = True,
    ) -> None:
        self._custom_rules: list[MaskingRule] = list(rules)
        self._default_rules: list[MaskingRule] = list(DEFAULT_RULES) if enable_default_rules else []
        self._mask_char = mask_char
        self._full_mask = full_mask
        self._max_depth = max_depth

    @property
    def rules(self) -> tuple[MaskingRule, ...]:
        """All rules in evaluation order."""
        return (*self._custom_rules, *self._default_rules)

    def add_rule(self, rule: MaskingRule) -> None:
        """Register a custom rule after the existing custom rules."""
        self._custom_rules.append(rule)

    def find_rule(self, key: str) -> MaskingRule | None:
        for rule in self.rules:
            if rule.matches(key):
                return rule
        return None

    def get_stats(self) -> dict[str, Any]:
        strategies = []
        for rule in self.rules:
            if rule.strategy not in strategies:
                strategies.append(rule.strategy)
        return {
            "total_rules": len(self._custom_rules) + len(self._default_rules),
            "custom_rules": len(self._custom_rules),
            "default_rules": len(self._default_rules),
            "strategies": strategies,
        }

    def process(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Return a masked copy of a mapping."""
        return self._walk(data, 0, set())

    def process_value(self, value: Any) -> Any:
        """Return a masked copy of any value (mapping, sequence or scalar)."""
        return self._walk(value, 0, set())

    def mask_field(self, key: str, value: Any, rule: MaskingRule) -> Outcome[Any]:
        """Apply ``rule`` to one field.

        If the strategy raises, a CUSTOM rule keeps the original value while a
        built-in strategy falls back to the full mask. Either way the error is
        carried on the returned ``Outcome``.
        """
        try:
            return Outcome.success(apply_strategy(rule, value, self._mask_char, self._full_mask))
        except Exception as exc:
            logger.warning(
                "scopelog.masking.field_failed",
                field=key,
                strategy=rule.strategy.value,
                error=repr(exc),
            )
            failure = MaskingFieldFailure(key, exc)
            if rule.strategy is MaskingStrategy.CUSTOM:
                return Outcome.fallback(value, failure)
            full_mask = self._full_mask
            if rule.strategy is MaskingStrategy.FULL and rule.mask_char:
                full_mask = rule.mask_char
            return Outcome(value=full_mask, error=failure)

    def _walk(self, value: Any, depth: int, ancestors: set[int]) -> Any:
        if isinstance(value, str):
            return self._mask_url(value) if URL_PATTERN.match(value) else value
        if not isinstance(value, (Mapping, *_SEQUENCE_TYPES)):
            return value
        if id(value) in ancestors:
            return CIRCULAR_PLACEHOLDER
        if depth >= self._max_depth:
            return MAX_DEPTH_PLACEHOLDER

        ancestors.add(id(value))
        try:
            if isinstance(value, Mapping):
                masked: dict[Any, Any] = {}
                for key, item in value.items():
                    rule = self.find_rule(str(key))
                    if rule is None:
                        masked[key] = self._walk(item, depth + 1, ancestors)
                    else:
                        masked[key] = self.mask_field(str(key), item, rule).value
                return masked
            return [self._walk(item, depth + 1, ancestors) for item in value]
        finally:
            ancestors.discard(id(value))

    def _mask_url(self, url: str) -> str:
        try:
            parts = urlsplit(url)
        except ValueError:
            return url
        if not parts.query:
            return url

        changed = False
        segments = []
        for segment in parts.query.split("&"):
            name, sep, raw = segment.partition("=")
            rule = self.find_rule(unquote_plus(name)) if sep else None
            if rule is not None:
                outcome = self.mask_field(name, unquote_plus(raw), rule)
                if outcome.ok or rule.strategy is not MaskingStrategy.CUSTOM:
                    segment = f"{name}={quote(str(outcome.value), safe='*@')}"
                    changed = True
            segments.append(segment)
        if not changed:
            return url
        return urlunsplit(parts._replace(query="&".join(segments)))
