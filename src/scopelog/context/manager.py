"""Context scope manager.

A context scope is a key/value store bound to one logical unit of work (an
inbound request, a consumed message, a background job). Scopes nest: a new
scope starts as a shallow copy of the enclosing one, so a child sees what its
parent had at creation time while its own writes stay invisible to the parent
and to its siblings.

Example:
    >>> manager = ContextManager()
    >>> with manager.scope({"tenant": "acme"}):
    ...     manager.set_correlation_id("corr-1")
    ...     manager.get_trace_context_headers()
    {'x-correlation-id': 'corr-1'}
    >>> manager.get("tenant") is None
    True
"""

from __future__ import annotations

import inspect
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Iterator, Mapping, Sequence

from scopelog.context.matrix import LoggingMatrix
from scopelog.context.storage import ContextVarStorage, ScopeStorage, ScopeStore
from scopelog.models.constants import (
    CORRELATION_ID_FIELD,
    DEFAULT_CORRELATION_ID_HEADER,
    DEFAULT_TRANSACTION_ID_HEADER,
    TRANSACTION_ID_FIELD,
)
from scopelog.models.enums import LogLevel
from scopelog.models.ids import generate_id


class ContextManager:
    """Owns the active scope and the identity header configuration.

    Args:
        storage: Scope storage strategy (defaults to ``ContextVarStorage``)
        correlation_id_header: Key (and wire header) holding the correlation id
        transaction_id_header: Key (and wire header) holding the transaction id
        logging_matrix: Per-level allowlist of context fields; None surfaces all
    """

    def __init__(
        self,
        storage: ScopeStorage | None = None,
        correlation_id_header: str = DEFAULT_CORRELATION_ID_HEADER,
        transaction_id_header: str = DEFAULT_TRANSACTION_ID_HEADER,
        logging_matrix: LoggingMatrix | Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        self._storage: ScopeStorage = storage or ContextVarStorage()
        self._correlation_id_header = correlation_id_header
        self._transaction_id_header = transaction_id_header
        self._matrix = _as_matrix(logging_matrix)

    def configure(
        self,
        correlation_id_header: str | None = None,
        transaction_id_header: str | None = None,
        logging_matrix: LoggingMatrix | Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        """Update the process-wide identity headers and/or logging matrix."""
        if correlation_id_header:
            self._correlation_id_header = correlation_id_header
        if transaction_id_header:
            self._transaction_id_header = transaction_id_header
        if logging_matrix is not None:
            self._matrix = _as_matrix(logging_matrix)

    @property
    def logging_matrix(self) -> LoggingMatrix | None:
        return self._matrix

    # Scopes

    def _new_store(self, values: Mapping[str, Any] | None, fresh: bool) -> ScopeStore:
        parent = self._storage.current()
        store: ScopeStore = {} if fresh or parent is None else dict(parent)
        if values:
            store.update(values)
        return store

    @contextmanager
    def scope(self, values: Mapping[str, Any] | None = None, *, fresh: bool = False) -> Iterator[None]:
        """Open a nested scope for the body of a ``with`` block.

        Args:
            values: Seed values written into the new scope
            fresh: Start from an empty store instead of inheriting the active one

        Example:
            >>> with manager.scope({"user_id": "u1"}):
            ...     await handle_request()
        """
        token = self._storage.enter(self._new_store(values, fresh))
        try:
            yield
        finally:
            self._storage.exit(token)

    def run(self, callback: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run ``callback`` inside a new child scope.

        Synchronous callables run immediately and their result is returned. For
        a coroutine function (or a callable returning an awaitable) an awaitable
        is returned instead; the scope is active for every step of the awaited
        work and the previous scope is restored however it ends.

        Args:
            callback: Callable to run
            *args: Positional arguments for ``callback``
            **kwargs: Keyword arguments for ``callback``

        Returns:
            The callback's result, or an awaitable resolving to it
        """
        store = self._new_store(None, fresh=False)
        if inspect.iscoroutinefunction(callback):
            return self._run_coroutine(store, callback, args, kwargs)

        token = self._storage.enter(store)
        try:
            result = callback(*args, **kwargs)
        finally:
            self._storage.exit(token)
        if inspect.isawaitable(result):
            return self._await_in(store, result)
        return result

    async def _run_coroutine(
        self,
        store: ScopeStore,
        callback: Callable[..., Awaitable[Any]],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        token = self._storage.enter(store)
        try:
            return await callback(*args, **kwargs)
        finally:
            self._storage.exit(token)

    async def _await_in(self, store: ScopeStore, awaitable: Awaitable[Any]) -> Any:
        token = self._storage.enter(store)
        try:
            return await awaitable
        finally:
            self._storage.exit(token)

    def in_scope(self) -> bool:
        """True when a scope is active."""
        return self._storage.current() is not None

    # Key/value access

    def get(self, key: str) -> Any:
        store = self._storage.current()
        if store is None:
            return None
        return store.get(key)

    def set(self, key: str, value: Any) -> None:
        """Write ``key`` into the active scope; no-op outside any scope."""
        store = self._storage.current()
        if store is not None:
            store[key] = value

    def get_all(self) -> dict[str, Any]:
        store = self._storage.current()
        return dict(store) if store is not None else {}

    # Identity

    def get_correlation_id_header_name(self) -> str:
        return self._correlation_id_header

    def get_transaction_id_header_name(self) -> str:
        return self._transaction_id_header

    def get_correlation_id(self) -> Any:
        return self.get(self._correlation_id_header)

    def get_transaction_id(self) -> Any:
        return self.get(self._transaction_id_header)

    def set_correlation_id(self, value: str) -> None:
        self.set(self._correlation_id_header, value)

    def set_transaction_id(self, value: str) -> None:
        self.set(self._transaction_id_header, value)

    def new_correlation_id(self) -> str:
        """Generate a correlation id, store it in the active scope and return it.

        Reading the correlation id never generates one; whoever opens a scope
        for a new unit of work (e.g. the inbound middleware) calls this once.
        """
        correlation_id = generate_id()
        self.set_correlation_id(correlation_id)
        return correlation_id

    def get_filtered_context(self, level: str | LogLevel) -> dict[str, Any]:
        """Return the active scope as it should appear in an entry at ``level``.

        Identity keys are renamed from their wire header names to
        ``correlationId``/``transactionId`` before the logging matrix is applied.
        """
        context: dict[str, Any] = {}
        for key, value in self.get_all().items():
            if key == self._correlation_id_header:
                key = CORRELATION_ID_FIELD
            elif key == self._transaction_id_header:
                key = TRANSACTION_ID_FIELD
            context[key] = value
        if self._matrix is None:
            return context
        return self._matrix.filter(context, level)

    def get_trace_context_headers(self) -> dict[str, str | bytes]:
        """Return the identity headers to inject into an outbound call."""
        headers: dict[str, str | bytes] = {}
        for header in (self._correlation_id_header, self._transaction_id_header):
            value = self.get(header)
            if value is None:
                continue
            headers[header] = value if isinstance(value, (str, bytes)) else str(value)
        return headers


def _as_matrix(
    matrix: LoggingMatrix | Mapping[str, Sequence[str]] | None,
) -> LoggingMatrix | None:
    if matrix is None or isinstance(matrix, LoggingMatrix):
        return matrix
    return LoggingMatrix(matrix)
