"""Adapter contracts.

An adapter is the thin glue between scopelog and a concrete client library.
Request/response adapters implement ``connect``/``disconnect``/``execute``;
pub/sub adapters implement ``connect``/``disconnect``/``publish``/``subscribe``.
The instrumented clients only ever talk to these protocols.

Adapters signal a failure they understand by raising ``AdapterError`` (or any
exception with a truthy ``is_adapter_error`` attribute and an optional
``response``) so the failure can be logged with the response received.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

from pydantic import Field

from scopelog.models.base import ScopeLogBaseModel


class AdapterRequest(ScopeLogBaseModel):
    """Client-agnostic outbound request.

    Attributes:
        url: Target URL
        method: HTTP method
        headers: Request headers
        body: Request body (any JSON-like value or bytes)
        query_params: Query parameters merged into the URL by the adapter
        timeout: Per-request timeout in seconds, if the adapter supports it
    """

    url: str
    method: str = "GET"
    headers: dict[str, str | bytes] = Field(default_factory=dict)
    body: Any = None
    query_params: dict[str, Any] = Field(default_factory=dict)
    timeout: float | None = None


class AdapterResponse(ScopeLogBaseModel):
    """Client-agnostic response."""

    status_code: int
    data: Any = None
    headers: dict[str, str] = Field(default_factory=dict)


class BrokerMessage(ScopeLogBaseModel):
    """A pub/sub message: raw payload plus string or bytes headers."""

    payload: bytes
    headers: dict[str, str | bytes] = Field(default_factory=dict)


class MessageControls(Protocol):
    """Completion controls handed to a message handler."""

    async def ack(self) -> None: ...

    async def nack(self, requeue: bool = False) -> None: ...


MessageHandler = Callable[[BrokerMessage, MessageControls], Awaitable[None]]


@runtime_checkable
class RequestAdapter(Protocol):
    """Request/response client contract."""

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def execute(self, request: AdapterRequest) -> AdapterResponse: ...


@runtime_checkable
class BrokerAdapter(Protocol):
    """Pub/sub client contract."""

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def publish(self, topic: str, message: BrokerMessage) -> None: ...

    async def subscribe(self, topic: str, handler: MessageHandler) -> None: ...
