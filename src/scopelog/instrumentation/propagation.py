"""Outbound header propagation.

A client instance decides which context fields travel with its outbound calls:

- ``NONE``: only the identity headers
- ``SELECT``: the listed context keys plus the identity headers
- ``WILDCARD``: every context key plus the identity headers

Only ``str`` and ``bytes`` values are injected; anything else is skipped.

Example:
    >>> policy = PropagationPolicy.from_settings(propagate=["*"])
    >>> with context.scope({"a": "1", "n": 2}):
    ...     context.set_correlation_id("corr-x")
    ...     resolve_headers(context, policy)
    {'a': '1', 'x-correlation-id': 'corr-x'}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from scopelog.context.manager import ContextManager
from scopelog.models.constants import MATRIX_WILDCARD
from scopelog.models.enums import PropagationMode


@dataclass(frozen=True)
class PropagationPolicy:
    """Which context keys a client injects."""

    mode: PropagationMode = PropagationMode.NONE
    keys: tuple[str, ...] = ()

    @classmethod
    def from_settings(
        cls,
        propagate: Sequence[str] | None = None,
        propagate_full_context: bool = False,
    ) -> PropagationPolicy:
        """Build a policy from instance settings.

        An explicit ``propagate`` list always wins: ``["*"]`` (or any list
        containing ``"*"``) selects every key, other lists select their keys,
        and an empty list propagates identity only. The legacy
        ``propagate_full_context`` flag is only consulted when no list is given.
        """
        if propagate is not None:
            if MATRIX_WILDCARD in propagate:
                return cls(PropagationMode.WILDCARD)
            if propagate:
                return cls(PropagationMode.SELECT, tuple(propagate))
            return cls(PropagationMode.NONE)
        if propagate_full_context:
            return cls(PropagationMode.WILDCARD)
        return cls(PropagationMode.NONE)


def _candidates(context: ContextManager, policy: PropagationPolicy) -> Iterable[tuple[str, Any]]:
    if policy.mode is PropagationMode.WILDCARD:
        return context.get_all().items()
    if policy.mode is PropagationMode.SELECT:
        return ((key, context.get(key)) for key in policy.keys)
    return ()


def resolve_headers(context: ContextManager, policy: PropagationPolicy) -> dict[str, str | bytes]:
    """Return the headers to inject into an outbound call made in the active scope."""
    headers: dict[str, str | bytes] = {}
    for key, value in _candidates(context, policy):
        if isinstance(value, (str, bytes)):
            headers[key] = value
    headers.update(context.get_trace_context_headers())
    return headers
