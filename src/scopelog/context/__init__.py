"""Context scopes: isolated, inheritable key/value state per unit of work."""

from scopelog.context.manager import ContextManager
from scopelog.context.matrix import LoggingMatrix
from scopelog.context.storage import ContextVarStorage, ScopeStorage, ThreadLocalStackStorage

__all__ = [
    "ContextManager",
    "ContextVarStorage",
    "LoggingMatrix",
    "ScopeStorage",
    "ThreadLocalStackStorage",
]
