"""Masking rules.

A rule pairs a key matcher with a strategy. The matcher is one of two tagged
variants: ``ExactKey`` (string equality with the key) or ``KeyPattern``
(``re.search`` against the key).

Example:
    >>> rule = MaskingRule(KeyPattern.compile("token"), MaskingStrategy.FULL)
    >>> rule.matches("accessToken")
    True
    >>> MaskingRule("password").matches("Password")
    False
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Union

from scopelog.models.enums import MaskingStrategy


@dataclass(frozen=True)
class ExactKey:
    """Matches a key equal to ``key``."""

    key: str

    def matches(self, name: str) -> bool:
        return name == self.key


@dataclass(frozen=True)
class KeyPattern:
    """Matches a key when ``regex`` finds a match anywhere in it."""

    regex: re.Pattern[str]

    @classmethod
    def compile(cls, pattern: str, flags: int = re.IGNORECASE) -> KeyPattern:
        return cls(re.compile(pattern, flags))

    def matches(self, name: str) -> bool:
        return self.regex.search(name) is not None


KeyMatcher = Union[ExactKey, KeyPattern]


@dataclass(frozen=True)
class MaskingRule:
    """A key matcher plus the redaction to apply to matched values.

    Attributes:
        pattern: Which keys the rule applies to. A plain ``str`` is taken as an
            ``ExactKey`` and a compiled regex as a ``KeyPattern``.
        strategy: Redaction transform
        mask_char: For FULL, the replacement token; for the other built-in
            strategies its first character is the mask glyph
        custom: Transform used by the CUSTOM strategy, receives the stringified value

    Raises:
        ValueError: If ``strategy`` is CUSTOM and no ``custom`` function is given
    """

    pattern: KeyMatcher
    strategy: MaskingStrategy = MaskingStrategy.FULL
    mask_char: str | None = None
    custom: Callable[[str], Any] | None = None

    def __post_init__(self) -> None:
        if isinstance(self.pattern, str):
            object.__setattr__(self, "pattern", ExactKey(self.pattern))
        elif isinstance(self.pattern, re.Pattern):
            object.__setattr__(self, "pattern", KeyPattern(self.pattern))
        elif not isinstance(self.pattern, (ExactKey, KeyPattern)):
            raise TypeError(f"Unsupported masking pattern: {self.pattern!r}")
        if not isinstance(self.strategy, MaskingStrategy):
            object.__setattr__(self, "strategy", MaskingStrategy(self.strategy))
        if self.strategy is MaskingStrategy.CUSTOM and self.custom is None:
            raise ValueError("A CUSTOM masking rule requires a custom function")

    def matches(self, key: str) -> bool:
        return self.pattern.matches(key)


def _default(pattern: str, strategy: MaskingStrategy, flags: int = re.IGNORECASE) -> MaskingRule:
    return MaskingRule(KeyPattern.compile(pattern, flags), strategy)


# Short names only match as a whole segment of a snake, kebab, dotted or
# camelCase key, so ``classname`` or ``oauthor`` are left alone.
DEFAULT_RULES: tuple[MaskingRule, ...] = (
    _default(r"password|passwd|pwd|secret", MaskingStrategy.PASSWORD),
    _default(r"e-?mails?([_-]?addr(ess)?)?$", MaskingStrategy.EMAIL),
    _default(r"credit[_-]?card|card[_-]?number", MaskingStrategy.CREDIT_CARD),
    _default(
        r"(^|[_.-])(?i:ssn)($|[_.A-Z-])|[a-z]S(sn|SN)($|[_.A-Z-])|(?i:social[_-]?security)",
        MaskingStrategy.SSN,
        flags=0,
    ),
    _default(r"phone|mobile", MaskingStrategy.PHONE),
    _default(r"token|api[_-]?key|jwt|bearer", MaskingStrategy.TOKEN),
    _default(
        r"authorization|cookie|credential|private[_-]?key|session[_-]?id|(^|[_.-])auth($|[_.-])",
        MaskingStrategy.FULL,
    ),
)
"""Rules applied after the custom rules unless ``enable_default_rules`` is off."""
