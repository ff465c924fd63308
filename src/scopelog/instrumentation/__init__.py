"""Instrumented clients: header propagation, timing and request logging."""

from scopelog.instrumentation.adapters import (
    AdapterRequest,
    AdapterResponse,
    BrokerAdapter,
    BrokerMessage,
    MessageControls,
    MessageHandler,
    RequestAdapter,
)
from scopelog.instrumentation.broker import InstrumentedBrokerClient, InstrumentedControls
from scopelog.instrumentation.http import InstrumentedHttpClient
from scopelog.instrumentation.manager import BrokerManager, HttpManager
from scopelog.instrumentation.propagation import PropagationPolicy, resolve_headers

__all__ = [
    "AdapterRequest",
    "AdapterResponse",
    "BrokerAdapter",
    "BrokerManager",
    "BrokerMessage",
    "HttpManager",
    "InstrumentedBrokerClient",
    "InstrumentedControls",
    "InstrumentedHttpClient",
    "MessageControls",
    "MessageHandler",
    "PropagationPolicy",
    "RequestAdapter",
    "resolve_headers",
]
