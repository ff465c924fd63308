"""The ScopeLog facade.

``ScopeLog`` wires the configured pieces together (context manager, masking
engine, serializer registry, transports, logger factory and the managers of
instrumented clients) and owns their lifecycle::

    NOT_INITIALIZED -> INITIALIZING -> READY -> SHUTTING_DOWN -> SHUTDOWN
                                   \\-> ERROR

Example:
    >>> scopelog = get_scopelog()
    >>> await scopelog.init({"logger": {"service_name": "orders"}})
    >>> logger = scopelog.get_logger()
    >>> with scopelog.get_context_manager().scope():
    ...     await logger.info("ready")
    >>> await scopelog.shutdown()
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping

from scopelog.config import ScopeLogConfig, load_config
from scopelog.context.manager import ContextManager
from scopelog.errors import NotInitializedError
from scopelog.instrumentation.broker import InstrumentedBrokerClient
from scopelog.instrumentation.http import InstrumentedHttpClient
from scopelog.instrumentation.manager import BrokerManager, HttpManager
from scopelog.logger.factory import LoggerFactory
from scopelog.logger.logger import Logger
from scopelog.masking.engine import MaskingEngine
from scopelog.models.constants import DEFAULT_LOGGER_NAME
from scopelog.models.enums import LifecycleState
from scopelog.observability.logging import get_logger
from scopelog.serialization.registry import SerializerRegistry
from scopelog.transports.base import Transport
from scopelog.transports.console import ConsoleTransport
from scopelog.utils.sanitization import sanitize_config

diagnostics = get_logger(__name__)

INTERNAL_LOGGER_NAME = "scopelog"


class ScopeLog:
    """Entry point owning every scopelog component.

    Args:
        context: Context manager to use; a new one is created when omitted
    """

    def __init__(self, context: ContextManager | None = None) -> None:
        self._state = LifecycleState.NOT_INITIALIZED
        self._context = context or ContextManager()
        self._config: ScopeLogConfig | None = None
        self._masking: MaskingEngine | None = None
        self._factory: LoggerFactory | None = None
        self._http: HttpManager | None = None
        self._brokers: BrokerManager | None = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def config(self) -> ScopeLogConfig | None:
        return self._config

    async def init(self, config: Mapping[str, Any] | ScopeLogConfig | None = None) -> None:
        """Validate ``config`` and build every component.

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        if self._state is LifecycleState.READY:
            diagnostics.warning("scopelog.init.already_ready")
            return
        self._state = LifecycleState.INITIALIZING
        try:
            settings = load_config(config)
            await self._build(settings)
        except Exception:
            self._state = LifecycleState.ERROR
            raise
        self._config = settings
        self._state = LifecycleState.READY
        await self.get_logger(INTERNAL_LOGGER_NAME).debug(
            {"config": sanitize_config(settings.model_dump())}, "scopelog initialized"
        )

    async def _build(self, settings: ScopeLogConfig) -> None:
        self._context.configure(
            correlation_id_header=settings.context.correlation_id_header,
            transaction_id_header=settings.context.transaction_id_header,
            logging_matrix=settings.logging_matrix,
        )
        self._masking = MaskingEngine(
            rules=[rule.to_rule() for rule in settings.masking.rules],
            mask_char=settings.masking.mask_char,
            full_mask=settings.masking.full_mask,
            max_depth=settings.masking.max_depth,
            enable_default_rules=settings.masking.enable_default_rules,
        )
        transports: list[Transport] = list(settings.logger.transports) or [ConsoleTransport()]
        self._factory = LoggerFactory(
            context=self._context,
            transports=transports,
            masking=self._masking,
            serializers=SerializerRegistry(
                settings.logger.serializers, settings.logger.serializer_timeout_ms
            ),
            level=settings.logger.level,
            service_name=settings.logger.service_name,
        )
        internal = self._factory.get_logger(INTERNAL_LOGGER_NAME)
        self._http = HttpManager(settings.http, internal, self._context)
        self._brokers = BrokerManager(settings.brokers, internal, self._context)
        await self._http.init()
        await self._brokers.init()

    def _require_ready(self) -> None:
        if self._state is not LifecycleState.READY:
            raise NotInitializedError(self._state.value)

    def get_logger(self, name: str = DEFAULT_LOGGER_NAME) -> Logger:
        """Return the pooled logger called ``name``.

        Raises:
            NotInitializedError: Before ``init`` completed or after ``shutdown``
        """
        self._require_ready()
        assert self._factory is not None
        return self._factory.get_logger(name)

    def get_context_manager(self) -> ContextManager:
        return self._context

    def get_masking_engine(self) -> MaskingEngine:
        self._require_ready()
        assert self._masking is not None
        return self._masking

    def get_http(self, name: str | None = None) -> InstrumentedHttpClient:
        """Return the named (or default) instrumented HTTP client.

        Raises:
            NotInitializedError: Before ``init`` completed
            InstanceNotFoundError: If no such client is configured
        """
        self._require_ready()
        assert self._http is not None
        return self._http.get_instance(name)

    def get_broker(self, name: str | None = None) -> InstrumentedBrokerClient:
        """Return the named (or default) instrumented broker client.

        Raises:
            NotInitializedError: Before ``init`` completed
            InstanceNotFoundError: If no such client is configured
        """
        self._require_ready()
        assert self._brokers is not None
        return self._brokers.get_instance(name)

    async def shutdown(self) -> None:
        """Disconnect every client and flush every transport.

        The drain is bounded by ``shutdown_timeout_ms``; if it does not finish
        in time a warning is logged and shutdown completes anyway.
        """
        if self._state is not LifecycleState.READY:
            return
        self._state = LifecycleState.SHUTTING_DOWN
        assert self._config is not None
        timeout = self._config.shutdown_timeout_ms / 1000
        try:
            await asyncio.wait_for(self._drain(), timeout=timeout)
        except asyncio.TimeoutError:
            diagnostics.warning(
                "scopelog.shutdown.timeout", timeout_ms=self._config.shutdown_timeout_ms
            )
        self._state = LifecycleState.SHUTDOWN

    async def _drain(self) -> None:
        if self._http is not None:
            await self._http.shutdown()
        if self._brokers is not None:
            await self._brokers.shutdown()
        if self._factory is not None:
            await self._factory.flush_all_transports()
            self._factory.serializers.close()


_scopelog: ScopeLog | None = None


def get_scopelog() -> ScopeLog:
    """Return the process-wide ScopeLog instance."""
    global _scopelog
    if _scopelog is None:
        _scopelog = ScopeLog()
    return _scopelog
