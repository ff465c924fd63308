"""Reference adapters for concrete client libraries."""

from scopelog.adapters.httpx_adapter import HttpxAdapter

__all__ = ["HttpxAdapter"]
