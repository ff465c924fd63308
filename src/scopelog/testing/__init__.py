"""Testing helpers for applications instrumented with scopelog.

Mocks:
    MockRequestAdapter: RequestAdapter with pre-set responses and failures.
    MockBrokerAdapter: In-memory BrokerAdapter with explicit delivery.
    MockControls: Completion controls recording ack/nack.

Fixtures live in ``scopelog.testing.fixtures`` and are loaded as a pytest plugin.
"""

from scopelog.testing.mocks import MockBrokerAdapter, MockControls, MockRequestAdapter, make_message
from scopelog.transports.spy import SpyTransport

__all__ = [
    "MockBrokerAdapter",
    "MockControls",
    "MockRequestAdapter",
    "SpyTransport",
    "make_message",
]
