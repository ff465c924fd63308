"""Request/response adapter over ``httpx.AsyncClient``.

Example:
    >>> adapter = HttpxAdapter(base_url="https://api.example.com")
    >>> client = InstrumentedHttpClient(adapter, logger, context)
    >>> await client.connect()
    >>> response = await client.request(AdapterRequest(url="/users", method="GET"))

For tests, pass ``transport=httpx.MockTransport(handler)``.
"""

from __future__ import annotations

from typing import Any, Mapping

import httpx

from scopelog.errors import AdapterError
from scopelog.instrumentation.adapters import AdapterRequest, AdapterResponse

DEFAULT_TIMEOUT = 30.0


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        try:
            return response.json()
        except ValueError:
            return response.text
    if content_type.startswith("text/") or "xml" in content_type:
        return response.text
    return response.content


class HttpxAdapter:
    """``RequestAdapter`` implementation backed by httpx.

    Args:
        base_url: Prefix for relative request URLs
        timeout: Default request timeout in seconds
        headers: Headers sent with every request
        transport: Custom httpx transport (e.g. ``httpx.MockTransport``)
        raise_for_status: Raise ``AdapterError`` (carrying the response) for 4xx/5xx
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        headers: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        raise_for_status: bool = True,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.raise_for_status = raise_for_status
        self._headers = dict(headers or {})
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            headers=self._headers,
            transport=self._transport,
        )

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpxAdapter:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.disconnect()

    async def execute(self, request: AdapterRequest) -> AdapterResponse:
        """Send ``request`` and normalize the response.

        Raises:
            AdapterError: On transport failures and, with ``raise_for_status``,
                on error status codes (the normalized response is attached)
        """
        if self._client is None:
            await self.connect()
        assert self._client is not None

        kwargs: dict[str, Any] = {
            "headers": request.headers,
            "params": request.query_params or None,
        }
        if isinstance(request.body, (bytes, str)):
            kwargs["content"] = request.body
        elif request.body is not None:
            kwargs["json"] = request.body
        if request.timeout is not None:
            kwargs["timeout"] = request.timeout

        try:
            response = await self._client.request(request.method, request.url, **kwargs)
        except httpx.TimeoutException as exc:
            raise AdapterError(
                f"Request to {request.url} timed out", request=request, cause=exc
            ) from exc
        except httpx.HTTPError as exc:
            raise AdapterError(
                f"Request to {request.url} failed: {exc}", request=request, cause=exc
            ) from exc

        normalized = AdapterResponse(
            status_code=response.status_code,
            data=_decode_body(response),
            headers=dict(response.headers),
        )
        if self.raise_for_status and response.is_error:
            raise AdapterError(
                f"Request to {request.url} returned HTTP {response.status_code}",
                request=request,
                response=normalized,
            )
        return normalized
