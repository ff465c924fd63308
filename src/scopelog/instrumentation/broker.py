"""Instrumented pub/sub client.

Outbound, ``publish`` injects the propagated context and identity headers into
a copy of the message and logs the publish with its duration. Inbound, every
handler passed to ``subscribe`` runs inside a fresh context scope seeded with
all the headers of the received message, so concurrent handlers never share
identity.
"""

from __future__ import annotations

import time
from typing import Any

from scopelog.config import InstrumentationSettings
from scopelog.context.manager import ContextManager
from scopelog.instrumentation.adapters import (
    BrokerAdapter,
    BrokerMessage,
    MessageControls,
    MessageHandler,
)
from scopelog.instrumentation.http import elapsed_ms
from scopelog.instrumentation.propagation import PropagationPolicy, resolve_headers
from scopelog.logger.logger import Logger

MESSAGE_ID_HEADER = "id"


def _header_text(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


class InstrumentedControls:
    """Completion controls that log after the underlying control succeeds."""

    def __init__(self, controls: MessageControls, logger: Logger, topic: str) -> None:
        self._controls = controls
        self._logger = logger
        self._topic = topic

    async def ack(self) -> None:
        await self._controls.ack()
        await self._logger.debug({"topic": self._topic}, "Message acknowledged (ack)")

    async def nack(self, requeue: bool = False) -> None:
        await self._controls.nack(requeue)
        await self._logger.warn(
            {"topic": self._topic, "requeue": requeue}, "Message negatively acknowledged (nack)"
        )


class InstrumentedBrokerClient:
    """Logging and context propagation around a ``BrokerAdapter``.

    Args:
        adapter: The wrapped adapter
        logger: Logger receiving the broker records
        context: Context manager used for propagation and inbound scopes
        settings: Per-instance log levels and propagation policy
        instance_name: Name of this client in its manager
    """

    def __init__(
        self,
        adapter: BrokerAdapter,
        logger: Logger,
        context: ContextManager,
        settings: InstrumentationSettings | None = None,
        instance_name: str = "default",
    ) -> None:
        self.adapter = adapter
        self.instance_name = instance_name
        self.settings = settings or InstrumentationSettings()
        self.policy = PropagationPolicy.from_settings(
            self.settings.propagate, self.settings.propagate_full_context
        )
        self._logger = logger
        self._context = context

    async def connect(self) -> None:
        await self._logger.info("Connecting to broker")
        await self.adapter.connect()
        await self._logger.info("Connected to broker")

    async def disconnect(self) -> None:
        await self._logger.info("Disconnecting from broker")
        await self.adapter.disconnect()
        await self._logger.info("Disconnected from broker")

    def prepare(self, message: BrokerMessage) -> BrokerMessage:
        """Return a copy of ``message`` carrying the propagated headers."""
        headers = {**message.headers, **resolve_headers(self._context, self.policy)}
        return message.model_copy(update={"headers": headers})

    async def publish(self, topic: str, message: BrokerMessage) -> None:
        """Publish ``message`` to ``topic`` with context headers injected.

        Raises:
            Exception: Whatever the adapter raised, after it has been logged
        """
        outbound = self.prepare(message)
        payload: dict[str, Any] = {
            "topic": topic,
            "message_id": _header_text(outbound.headers.get(MESSAGE_ID_HEADER)),
        }
        await self._logger.log(self.settings.on_request, payload, "Publishing message")
        started = time.perf_counter()
        try:
            await self.adapter.publish(topic, outbound)
        except Exception as exc:
            await self._logger.log(
                self.settings.on_error,
                {**payload, "err": exc, "duration_ms": elapsed_ms(started)},
                "Message publish failed",
            )
            raise
        await self._logger.log(
            self.settings.on_success,
            {**payload, "duration_ms": elapsed_ms(started)},
            "Message published",
        )

    async def subscribe(self, topic: str, handler: MessageHandler) -> None:
        """Subscribe ``handler`` to ``topic`` with per-message context scopes."""
        await self._logger.info({"topic": topic}, "Subscribing to topic")
        await self.adapter.subscribe(topic, self.wrap_handler(topic, handler))
        await self._logger.info({"topic": topic}, "Subscribed to topic")

    def wrap_handler(self, topic: str, handler: MessageHandler) -> MessageHandler:
        async def instrumented(message: BrokerMessage, controls: MessageControls) -> None:
            with self._context.scope(message.headers, fresh=True):
                await self._logger.info({"topic": topic}, "Received message")
                try:
                    await handler(message, InstrumentedControls(controls, self._logger, topic))
                except Exception as exc:
                    await self._logger.log(
                        self.settings.on_error, {"topic": topic, "err": exc}, "Message handler failed"
                    )
                    raise

        return instrumented
