"""Scope storage strategies.

A scope store is the key/value mapping of the innermost live context scope.
The storage strategy decides how "innermost live scope" is tracked:

- ``ContextVarStorage`` uses ``contextvars``, which follows the logical call
  chain: every asyncio task carries its own context, and the binding survives
  every ``await`` inside the task. This is the default.
- ``ThreadLocalStackStorage`` keeps an explicit per-thread stack with a
  save/current/restore discipline. It is suitable for synchronous or
  thread-per-request code, where the physical thread is the logical chain.

Both strategies hand out a token on ``enter`` which must be passed back to
``exit`` (always from a ``finally`` block) to restore the previous scope.
"""

from __future__ import annotations

import threading
from contextvars import ContextVar
from typing import Any, Protocol

ScopeStore = dict[str, Any]


class ScopeStorage(Protocol):
    """Tracks the active scope store."""

    def current(self) -> ScopeStore | None:
        """Return the active store, or None outside any scope."""

    def enter(self, store: ScopeStore) -> Any:
        """Make ``store`` active and return a token restoring the previous one."""

    def exit(self, token: Any) -> None:
        """Restore the store that was active before the matching ``enter``."""


class ContextVarStorage:
    """Scope storage backed by a ``ContextVar`` (native async-aware strategy)."""

    def __init__(self, name: str = "scopelog_scope") -> None:
        self._var: ContextVar[ScopeStore | None] = ContextVar(name, default=None)

    def current(self) -> ScopeStore | None:
        return self._var.get()

    def enter(self, store: ScopeStore) -> Any:
        return self._var.set(store)

    def exit(self, token: Any) -> None:
        self._var.reset(token)


class ThreadLocalStackStorage:
    """Scope storage with an explicit per-thread stack.

    ``enter`` pushes the store and returns the stack depth it was pushed at;
    ``exit`` truncates the stack back to that depth, so an inner scope that
    was never exited (e.g. a leaked generator) is discarded together with it.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def _stack(self) -> list[ScopeStore]:
        stack: list[ScopeStore] | None = getattr(self._local, "stack", None)
        if stack is None:
            stack = []
            self._local.stack = stack
        return stack

    def current(self) -> ScopeStore | None:
        stack = self._stack()
        return stack[-1] if stack else None

    def enter(self, store: ScopeStore) -> int:
        stack = self._stack()
        stack.append(store)
        return len(stack) - 1

    def exit(self, token: int) -> None:
        del self._stack()[token:]
