"""Per-field result type for the pipeline's silent-recovery stages.

Masking and serialization never raise into application code. Each field they
touch produces an ``Outcome``: either the transformed value, or the original
value together with the error that prevented the transform. Callers collapse
an outcome to its ``value`` at the boundary of that one field.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of transforming one field.

    Attributes:
        value: Transformed value on success, original value on fallback
        error: The error that caused the fallback, or None

    Example:
        >>> Outcome.attempt(lambda v: v.upper(), "abc").value
        'ABC'
        >>> Outcome.attempt(lambda v: 1 / 0, "abc").value
        'abc'
    """

    value: T
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        """True when the transform succeeded."""
        return self.error is None

    @classmethod
    def success(cls, value: T) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def fallback(cls, original: T, error: BaseException) -> Outcome[T]:
        return cls(value=original, error=error)

    @classmethod
    def attempt(cls, transform: Callable[[Any], T], value: Any) -> Outcome[Any]:
        """Run ``transform(value)``, falling back to ``value`` if it raises."""
        try:
            return cls.success(transform(value))
        except Exception as exc:
            return cls.fallback(value, exc)
