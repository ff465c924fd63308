"""Framework integrations."""

from scopelog.integrations.starlette import ContextMiddleware

__all__ = ["ContextMiddleware"]
