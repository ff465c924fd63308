"""Instrumented request/response client.

Wraps a ``RequestAdapter`` so that every call made through it:

1. carries the propagated context and identity headers (on a copy of the
   request; the caller's request is never modified),
2. logs a start record,
3. is timed,
4. logs a success record with status and duration, or a failure record with
   duration and whatever response the adapter received.

Failures are always re-raised to the caller unchanged.

Example:
    >>> client = InstrumentedHttpClient(HttpxAdapter(), logger, context)
    >>> response = await client.request(AdapterRequest(url="https://api.example.com/users"))
"""

from __future__ import annotations

import time
from typing import Any

from scopelog.config import InstrumentationSettings
from scopelog.context.manager import ContextManager
from scopelog.errors import AdapterError
from scopelog.instrumentation.adapters import AdapterRequest, AdapterResponse, RequestAdapter
from scopelog.instrumentation.propagation import PropagationPolicy, resolve_headers
from scopelog.logger.logger import Logger


def elapsed_ms(started: float) -> float:
    """Milliseconds since ``started`` (a ``time.perf_counter()`` reading)."""
    return round((time.perf_counter() - started) * 1000, 3)


def is_adapter_error(error: BaseException) -> bool:
    return bool(getattr(error, "is_adapter_error", False))


def describe_response(response: Any) -> dict[str, Any]:
    """Extract status, headers and body from an adapter response of any shape."""
    return {
        "status_code": getattr(response, "status_code", None),
        "headers": getattr(response, "headers", None),
        "body": getattr(response, "data", None),
    }


class InstrumentedHttpClient:
    """Logging, timing and header propagation around a ``RequestAdapter``.

    Args:
        adapter: The wrapped adapter
        logger: Logger receiving the request records
        context: Context manager supplying the headers to propagate
        settings: Per-instance log levels, header/body toggles and propagation policy
        instance_name: Name of this client in its manager
    """

    def __init__(
        self,
        adapter: RequestAdapter,
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
        await self.adapter.connect()

    async def disconnect(self) -> None:
        await self.adapter.disconnect()

    def prepare(self, request: AdapterRequest) -> AdapterRequest:
        """Return a copy of ``request`` carrying the propagated headers."""
        headers = {**request.headers, **resolve_headers(self._context, self.policy)}
        return request.model_copy(update={"headers": headers})

    async def request(self, request: AdapterRequest) -> AdapterResponse:
        """Execute ``request`` through the adapter.

        Returns:
            The adapter's response, unchanged

        Raises:
            Exception: Whatever the adapter raised, after it has been logged
        """
        outbound = self.prepare(request)
        await self._log_start(outbound)
        started = time.perf_counter()
        try:
            response = await self.adapter.execute(outbound)
        except Exception as exc:
            await self._log_failure(outbound, exc, elapsed_ms(started))
            raise
        await self._log_success(outbound, response, elapsed_ms(started))
        return response

    async def _log_start(self, request: AdapterRequest) -> None:
        payload: dict[str, Any] = {"method": request.method, "url": request.url}
        if self.settings.log_request_headers:
            payload["headers"] = dict(request.headers)
        if self.settings.log_request_body:
            payload["body"] = request.body
        await self._logger.log(self.settings.on_request, payload, "Starting HTTP request")

    async def _log_success(
        self, request: AdapterRequest, response: AdapterResponse, duration_ms: float
    ) -> None:
        payload: dict[str, Any] = {
            "status_code": response.status_code,
            "method": request.method,
            "url": request.url,
            "duration_ms": duration_ms,
        }
        if self.settings.log_success_headers:
            payload["headers"] = dict(response.headers)
        if self.settings.log_success_body:
            payload["body"] = response.data
        await self._logger.log(self.settings.on_success, payload, "HTTP response received")

    async def _log_failure(
        self, request: AdapterRequest, error: Exception, duration_ms: float
    ) -> None:
        payload: dict[str, Any] = {
            "err": error,
            "method": request.method,
            "url": request.url,
            "duration_ms": duration_ms,
        }
        if is_adapter_error(error):
            normalized = AdapterError.from_exception(error, request)
            if normalized.response is not None:
                payload["response"] = describe_response(normalized.response)
            else:
                payload["response"] = "No response"
            await self._logger.log(self.settings.on_error, payload, "HTTP request failed")
        else:
            await self._logger.log(
                self.settings.on_error, payload, "HTTP request failed with an unexpected error"
            )
