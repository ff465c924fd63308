"""Serializer registry.

Turns rich field values into log-friendly shapes before masking. A serializer
is registered for a field key (``{"user": lambda u: {"id": u.id}}``); fields
holding an exception are handled by the built-in exception serializer unless
a key-specific one exists.

Each serializer runs under a time budget. A serializer that raises or exceeds
the budget leaves that one field with its original value; the rest of the
entry is unaffected.

Synchronous serializers run on a small thread pool owned by the registry. A
timed-out call cannot be interrupted and keeps its worker until it returns,
so a stuck serializer only ever occupies this pool and never the event
loop's default executor.
"""

from __future__ import annotations

import asyncio
import inspect
import threading
import traceback
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Mapping

from scopelog.errors import SerializationTimeoutError
from scopelog.models.constants import DEFAULT_SERIALIZER_TIMEOUT_MS, DEFAULT_SERIALIZER_WORKERS
from scopelog.observability.logging import get_logger
from scopelog.utils.outcome import Outcome

logger = get_logger(__name__)

Serializer = Callable[[Any], Any]


def serialize_exception(error: BaseException) -> dict[str, Any]:
    """Render an exception as ``{name, message, stack}``."""
    return {
        "name": type(error).__name__,
        "message": str(error),
        "stack": "".join(traceback.format_exception(error)),
    }


class SerializerRegistry:
    """Per-key serializers with a per-field timeout.

    Args:
        serializers: Mapping of field key to serializer (sync or async)
        timeout_ms: Budget for a single serializer call, in milliseconds
        max_workers: Threads available to synchronous serializers
    """

    def __init__(
        self,
        serializers: Mapping[str, Serializer] | None = None,
        timeout_ms: float = DEFAULT_SERIALIZER_TIMEOUT_MS,
        max_workers: int = DEFAULT_SERIALIZER_WORKERS,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._serializers: dict[str, Serializer] = dict(serializers or {})
        self._timeout = timeout_ms / 1000
        self._max_workers = max_workers
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    @property
    def timeout(self) -> float:
        """Per-field budget in seconds."""
        return self._timeout

    def register(self, key: str, serializer: Serializer) -> None:
        self._serializers[key] = serializer

    def serializer_for(self, key: str, value: Any) -> Serializer | None:
        serializer = self._serializers.get(key)
        if serializer is None and isinstance(value, BaseException):
            return serialize_exception
        return serializer

    async def process(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Return a copy of ``fields`` with every serializable value transformed."""
        serialized: dict[str, Any] = {}
        for key, value in fields.items():
            serializer = self.serializer_for(key, value)
            if serializer is None:
                serialized[key] = value
            else:
                serialized[key] = (await self.serialize_field(key, value, serializer)).value
        return serialized

    async def serialize_field(self, key: str, value: Any, serializer: Serializer) -> Outcome[Any]:
        try:
            result = await asyncio.wait_for(self._invoke(serializer, value), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "scopelog.serialization.timeout",
                field=key,
                timeout_ms=self._timeout * 1000,
            )
            return Outcome.fallback(value, SerializationTimeoutError(key, self._timeout))
        except Exception as exc:
            logger.warning("scopelog.serialization.failed", field=key, error=repr(exc))
            return Outcome.fallback(value, exc)
        return Outcome.success(result)

    async def _invoke(self, serializer: Serializer, value: Any) -> Any:
        if serializer is serialize_exception:
            return serializer(value)
        if inspect.iscoroutinefunction(serializer):
            return await serializer(value)
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(self._get_executor(), serializer, value)
        if inspect.isawaitable(result):
            return await result
        return result

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix="scopelog-serializer",
                )
            return self._executor

    def close(self) -> None:
        """Release the serializer threads without waiting for stuck calls.

        The registry stays usable; a later synchronous serializer starts a
        fresh pool.
        """
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)
