"""Logger handle and the per-call entry pipeline.

Every logger method is a coroutine. A call is either filtered out by the
handle's threshold, or goes through build, serialize, mask and dispatch:

1. The filtered context snapshot, the handle's bindings and the call's
   metadata are collected and the message is formatted.
2. The serializer registry transforms rich values (exceptions, registered keys).
3. The masking engine redacts context, bindings, metadata and message.
4. The finished ``LogEntry`` is sent concurrently to every transport whose
   level gate accepts it.

No stage raises into the caller: serializer, masking and transport failures
are logged through scopelog's own diagnostic logger and the entry proceeds.

Example:
    >>> logger = factory.get_logger("payments")
    >>> await logger.info({"order_id": "o-1"}, "charged %s", "card")
    >>> child = logger.child(region="eu")
    >>> await child.warn("retrying")
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Sequence

from scopelog.context.manager import ContextManager
from scopelog.errors import TransportFailure
from scopelog.logger.arguments import format_message, normalize_log_call
from scopelog.masking.engine import MaskingEngine
from scopelog.models.constants import TRANSACTION_ID_FIELD
from scopelog.models.entry import LogEntry
from scopelog.models.enums import LogLevel
from scopelog.observability.logging import get_logger
from scopelog.serialization.registry import SerializerRegistry
from scopelog.transports.base import Transport

diagnostics = get_logger(__name__)

SOURCE_FIELD = "source"


class Logger:
    """A named logging handle.

    Handles are cheap: ``child`` and the ``with_*`` helpers return new handles
    that share the pipeline stages and transports of their parent.

    Args:
        name: Logger name
        context: Context manager supplying the scope snapshot
        transports: Sinks receiving finished entries
        masking: Masking engine; None disables masking
        serializers: Serializer registry; None uses an empty registry
        level: Threshold below which calls are dropped
        service_name: Value of the entry's ``service`` field (defaults to ``name``)
        bindings: Fields attached to every entry of this handle
    """

    def __init__(
        self,
        name: str,
        context: ContextManager,
        transports: Sequence[Transport] = (),
        masking: MaskingEngine | None = None,
        serializers: SerializerRegistry | None = None,
        level: str | LogLevel = LogLevel.INFO,
        service_name: str | None = None,
        bindings: Mapping[str, Any] | None = None,
    ) -> None:
        self.name = name
        self.service_name = service_name or name
        self.level = LogLevel.parse(level)
        self._context = context
        self._transports = tuple(transports)
        self._masking = masking
        self._serializers = serializers or SerializerRegistry()
        self._bindings: dict[str, Any] = dict(bindings or {})

    @property
    def bindings(self) -> dict[str, Any]:
        return dict(self._bindings)

    @property
    def transports(self) -> tuple[Transport, ...]:
        return self._transports

    def is_level_enabled(self, level: str | LogLevel) -> bool:
        target = LogLevel.parse(level)
        if target is LogLevel.SILENT or self.level is LogLevel.SILENT:
            return False
        return target.severity >= self.level.severity

    def set_level(self, level: str | LogLevel) -> None:
        self.level = LogLevel.parse(level)

    def child(self, **bindings: Any) -> Logger:
        """Return a handle carrying this handle's bindings plus ``bindings``."""
        return Logger(
            self.name,
            context=self._context,
            transports=self._transports,
            masking=self._masking,
            serializers=self._serializers,
            level=self.level,
            service_name=self.service_name,
            bindings={**self._bindings, **bindings},
        )

    def with_source(self, source: str) -> Logger:
        return self.child(**{SOURCE_FIELD: source})

    def with_transaction_id(self, transaction_id: str) -> Logger:
        return self.child(**{TRANSACTION_ID_FIELD: transaction_id})

    async def trace(self, *args: Any) -> None:
        await self.log(LogLevel.TRACE, *args)

    async def debug(self, *args: Any) -> None:
        await self.log(LogLevel.DEBUG, *args)

    async def info(self, *args: Any) -> None:
        await self.log(LogLevel.INFO, *args)

    async def warn(self, *args: Any) -> None:
        await self.log(LogLevel.WARN, *args)

    warning = warn

    async def error(self, *args: Any) -> None:
        await self.log(LogLevel.ERROR, *args)

    async def fatal(self, *args: Any) -> None:
        await self.log(LogLevel.FATAL, *args)

    async def log(self, level: str | LogLevel, *args: Any) -> None:
        """Log ``args`` at ``level``. Never raises."""
        try:
            level = LogLevel.parse(level)
            enabled = self.is_level_enabled(level)
        except Exception as exc:
            diagnostics.error(
                "scopelog.logger.invalid_level", logger=self.name, level=repr(level), error=repr(exc)
            )
            return
        if not enabled:
            return
        try:
            entry = await self.build_entry(level, args)
        except Exception as exc:
            diagnostics.error("scopelog.logger.build_failed", logger=self.name, error=repr(exc))
            return
        await self.dispatch(entry)

    async def build_entry(self, level: LogLevel, args: Sequence[Any]) -> LogEntry:
        """Run the build, serialize and mask stages for one call."""
        call = normalize_log_call(args)
        message = format_message(call.template, call.args)
        context = self._context.get_filtered_context(level)
        bindings = await self._serializers.process(self._bindings)
        fields = await self._serializers.process(call.metadata)

        if self._masking is not None:
            context = self._masking.process(context)
            bindings = self._masking.process(bindings)
            fields = self._masking.process(fields)
            message = self._masking.process_value(message)

        return LogEntry(
            level=level,
            message=message,
            service=self.service_name,
            bindings=bindings,
            context=context,
            extra_fields=fields,
        )

    async def dispatch(self, entry: LogEntry) -> None:
        """Send ``entry`` to every transport accepting its level."""
        await asyncio.gather(*(self._send(transport, entry) for transport in self._transports))

    async def _send(self, transport: Transport, entry: LogEntry) -> None:
        try:
            if not transport.is_level_enabled(entry.level):
                return
            await transport.log(entry)
        except Exception as exc:
            failure = TransportFailure(transport.name, exc)
            diagnostics.error(
                "scopelog.transport.log_failed",
                transport=transport.name,
                code=failure.code,
                error=repr(exc),
            )
