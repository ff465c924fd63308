"""Inbound context middleware for Starlette (and FastAPI) applications.

Opens a fresh context scope per request, seeded with the identity headers of
the inbound request. When the caller sent no correlation id a new one is
generated, and the correlation id is echoed back on the response.

Example:
    >>> from starlette.applications import Starlette
    >>> app = Starlette(routes=routes)
    >>> app.add_middleware(ContextMiddleware, context=scopelog.get_context_manager())
"""

from __future__ import annotations

import time
from typing import Any, Awaitable, Callable, Sequence

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from scopelog.context.manager import ContextManager
from scopelog.logger.logger import Logger


class ContextMiddleware(BaseHTTPMiddleware):
    """Run every request inside its own context scope.

    Attributes:
        context: Context manager owning the scopes
        logger: Optional logger receiving one record per completed request
        extra_headers: Additional inbound headers copied into the scope

    Example:
        >>> app.add_middleware(ContextMiddleware, context=context, extra_headers=["x-tenant-id"])
    """

    def __init__(
        self,
        app: Any,
        context: ContextManager,
        logger: Logger | None = None,
        extra_headers: Sequence[str] = (),
    ) -> None:
        super().__init__(app)
        self.context = context
        self.logger = logger
        self.extra_headers = tuple(header.lower() for header in extra_headers)

    def _seed(self, request: Request) -> dict[str, str]:
        names = (
            self.context.get_correlation_id_header_name(),
            self.context.get_transaction_id_header_name(),
            *self.extra_headers,
        )
        values: dict[str, str] = {}
        for name in names:
            value = request.headers.get(name)
            if value:
                values[name] = value
        return values

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        with self.context.scope(self._seed(request), fresh=True):
            correlation_id = self.context.get_correlation_id() or self.context.new_correlation_id()
            started = time.perf_counter()
            response = await call_next(request)
            response.headers[self.context.get_correlation_id_header_name()] = str(correlation_id)
            if self.logger is not None:
                await self.logger.info(
                    {
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": response.status_code,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 3),
                    },
                    "Request completed",
                )
            return response
