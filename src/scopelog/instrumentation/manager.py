"""Managers for named instrumented clients.

Each manager builds its clients from configuration, connects their adapters,
tracks which instance is the default one and disconnects everything on
shutdown. An instance whose adapter fails to connect is logged and skipped;
the remaining instances stay usable.
"""

from __future__ import annotations

from typing import Generic, Sequence, TypeVar, Union

from scopelog.config import BrokerInstanceSettings, HttpInstanceSettings
from scopelog.context.manager import ContextManager
from scopelog.errors import InstanceNotFoundError
from scopelog.instrumentation.broker import InstrumentedBrokerClient
from scopelog.instrumentation.http import InstrumentedHttpClient
from scopelog.logger.logger import Logger

ClientT = TypeVar("ClientT", InstrumentedHttpClient, InstrumentedBrokerClient)
InstanceSettings = Union[HttpInstanceSettings, BrokerInstanceSettings]


class _InstanceManager(Generic[ClientT]):
    kind = ""

    def __init__(
        self,
        instances: Sequence[InstanceSettings],
        logger: Logger,
        context: ContextManager,
    ) -> None:
        self._settings = list(instances)
        self._logger = logger.child(module=type(self).__name__)
        self._context = context
        self._clients: dict[str, ClientT] = {}
        self._default_name: str | None = None

    def _build(self, settings: InstanceSettings) -> ClientT:
        raise NotImplementedError

    @property
    def default_name(self) -> str | None:
        return self._default_name

    @property
    def instance_names(self) -> list[str]:
        return list(self._clients)

    async def init(self) -> None:
        if not self._settings:
            await self._logger.debug(f"No {self.kind} instances configured")
            return

        for settings in self._settings:
            client = self._build(settings)
            try:
                await client.connect()
            except Exception as exc:
                await self._logger.error(
                    {"instance": settings.instance_name, "err": exc},
                    f"Failed to connect {self.kind} instance",
                )
                continue
            self._clients[settings.instance_name] = client
            await self._logger.info({"instance": settings.instance_name}, f"{self.kind} instance ready")
            if settings.is_default:
                if self._default_name is not None:
                    await self._logger.warn(
                        {"previous": self._default_name, "instance": settings.instance_name},
                        f"Multiple default {self.kind} instances configured, using the last one",
                    )
                self._default_name = settings.instance_name

        if self._default_name is None and self._clients:
            self._default_name = next(iter(self._clients))

    def get_instance(self, name: str | None = None) -> ClientT:
        """Return the client called ``name``, or the default client.

        Raises:
            InstanceNotFoundError: If no such instance (or no default) exists
        """
        instance_name = name if name is not None else self._default_name
        if instance_name is None or instance_name not in self._clients:
            raise InstanceNotFoundError(self.kind, instance_name)
        return self._clients[instance_name]

    async def shutdown(self) -> None:
        await self._logger.info(f"Shutting down {self.kind} instances")
        for name, client in list(self._clients.items()):
            try:
                await client.disconnect()
            except Exception as exc:
                await self._logger.error(
                    {"instance": name, "err": exc}, f"Failed to disconnect {self.kind} instance"
                )
        self._clients.clear()
        self._default_name = None


class HttpManager(_InstanceManager[InstrumentedHttpClient]):
    """Named ``InstrumentedHttpClient`` instances."""

    kind = "http"

    def _build(self, settings: InstanceSettings) -> InstrumentedHttpClient:
        return InstrumentedHttpClient(
            settings.adapter,
            self._logger.child(instance=settings.instance_name),
            self._context,
            settings.instrumentation,
            instance_name=settings.instance_name,
        )


class BrokerManager(_InstanceManager[InstrumentedBrokerClient]):
    """Named ``InstrumentedBrokerClient`` instances."""

    kind = "broker"

    def _build(self, settings: InstanceSettings) -> InstrumentedBrokerClient:
        return InstrumentedBrokerClient(
            settings.adapter,
            self._logger.child(instance=settings.instance_name),
            self._context,
            settings.instrumentation,
            instance_name=settings.instance_name,
        )
