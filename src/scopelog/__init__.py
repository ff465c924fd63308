"""scopelog: context-scoped structured logging for asyncio services.

Propagates a correlation identity across asynchronous operations, injects it
into outbound calls made through instrumented clients, redacts sensitive
fields and dispatches structured entries to transports.

Example:
    >>> from scopelog import get_scopelog
    >>> scopelog = get_scopelog()
    >>> await scopelog.init({"logger": {"service_name": "orders"}})
    >>> context = scopelog.get_context_manager()
    >>> with context.scope():
    ...     context.new_correlation_id()
    ...     await scopelog.get_logger().info({"order_id": "o-1"}, "order created")
"""

from scopelog.config import ScopeLogConfig, load_config
from scopelog.context import ContextManager, ContextVarStorage, LoggingMatrix, ThreadLocalStackStorage
from scopelog.core import ScopeLog, get_scopelog
from scopelog.errors import (
    AdapterError,
    ConfigurationError,
    InstanceNotFoundError,
    MaskingFieldFailure,
    NotInitializedError,
    ScopeLogError,
    SerializationTimeoutError,
    TransportFailure,
)
from scopelog.instrumentation import (
    AdapterRequest,
    AdapterResponse,
    BrokerMessage,
    InstrumentedBrokerClient,
    InstrumentedHttpClient,
    PropagationPolicy,
)
from scopelog.logger import Logger, LoggerFactory
from scopelog.masking import ExactKey, KeyPattern, MaskingEngine, MaskingRule
from scopelog.models import LogEntry, LogLevel, MaskingStrategy, PropagationMode
from scopelog.serialization import SerializerRegistry
from scopelog.transports import ConsoleTransport, SpyTransport, Transport

__version__ = "0.1.0"

__all__ = [
    "AdapterError",
    "AdapterRequest",
    "AdapterResponse",
    "BrokerMessage",
    "ConfigurationError",
    "ConsoleTransport",
    "ContextManager",
    "ContextVarStorage",
    "ExactKey",
    "InstanceNotFoundError",
    "InstrumentedBrokerClient",
    "InstrumentedHttpClient",
    "KeyPattern",
    "LogEntry",
    "LogLevel",
    "Logger",
    "LoggerFactory",
    "LoggingMatrix",
    "MaskingEngine",
    "MaskingFieldFailure",
    "MaskingRule",
    "MaskingStrategy",
    "NotInitializedError",
    "PropagationMode",
    "PropagationPolicy",
    "ScopeLog",
    "ScopeLogConfig",
    "ScopeLogError",
    "SerializationTimeoutError",
    "SerializerRegistry",
    "SpyTransport",
    "ThreadLocalStackStorage",
    "Transport",
    "TransportFailure",
    "__version__",
    "get_scopelog",
    "load_config",
]
