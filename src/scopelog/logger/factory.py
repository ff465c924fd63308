"""Logger factory: a process-wide, lock-protected pool of named handles."""

from __future__ import annotations

import asyncio
import threading
from typing import Sequence

from scopelog.context.manager import ContextManager
from scopelog.errors import TransportFailure
from scopelog.logger.logger import Logger
from scopelog.masking.engine import MaskingEngine
from scopelog.models.constants import DEFAULT_LOGGER_NAME, DEFAULT_SERVICE_NAME
from scopelog.models.enums import LogLevel
from scopelog.observability.logging import get_logger
from scopelog.serialization.registry import SerializerRegistry
from scopelog.transports.base import Transport

diagnostics = get_logger(__name__)


class LoggerFactory:
    """Creates loggers lazily and caches them by name.

    Every logger from one factory shares the same context manager, masking
    engine, serializer registry and transports. The logger named ``default``
    reports ``service_name`` as its service; other loggers report their name.

    Args:
        context: Context manager shared by every logger
        transports: Sinks shared by every logger
        masking: Masking engine (None disables masking)
        serializers: Serializer registry
        level: Initial threshold of new loggers
        service_name: Service reported by the default logger
    """

    def __init__(
        self,
        context: ContextManager,
        transports: Sequence[Transport] = (),
        masking: MaskingEngine | None = None,
        serializers: SerializerRegistry | None = None,
        level: str | LogLevel = LogLevel.INFO,
        service_name: str = DEFAULT_SERVICE_NAME,
    ) -> None:
        self.context = context
        self.transports = tuple(transports)
        self.masking = masking
        self.serializers = serializers or SerializerRegistry()
        self.level = LogLevel.parse(level)
        self.service_name = service_name
        self._pool: dict[str, Logger] = {}
        self._lock = threading.Lock()

    def get_logger(self, name: str = DEFAULT_LOGGER_NAME) -> Logger:
        """Return the logger for ``name``, creating it on first use."""
        logger = self._pool.get(name)
        if logger is not None:
            return logger
        with self._lock:
            logger = self._pool.get(name)
            if logger is None:
                logger = Logger(
                    name,
                    context=self.context,
                    transports=self.transports,
                    masking=self.masking,
                    serializers=self.serializers,
                    level=self.level,
                    service_name=self.service_name if name == DEFAULT_LOGGER_NAME else name,
                )
                self._pool[name] = logger
        return logger

    def __len__(self) -> int:
        return len(self._pool)

    async def flush_all_transports(self) -> None:
        """Flush every transport; one failing transport does not stop the others."""
        await asyncio.gather(*(self._flush(transport) for transport in self.transports))

    async def _flush(self, transport: Transport) -> None:
        try:
            await transport.flush()
        except Exception as exc:
            failure = TransportFailure(transport.name, exc)
            diagnostics.error(
                "scopelog.transport.flush_failed",
                transport=transport.name,
                code=failure.code,
                error=repr(exc),
            )
