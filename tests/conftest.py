"""Shared pytest fixtures for scopelog tests.

Fixtures from ``scopelog.testing.fixtures`` (spy_transport, context_manager,
masking_engine, logger_factory, logger, mock_request_adapter,
mock_broker_adapter) are loaded as a plugin.
"""

from __future__ import annotations

import pytest

from scopelog.context.manager import ContextManager
from scopelog.instrumentation.broker import InstrumentedBrokerClient
from scopelog.instrumentation.http import InstrumentedHttpClient
from scopelog.logger.logger import Logger
from scopelog.testing.mocks import MockBrokerAdapter, MockRequestAdapter

pytest_plugins = ["scopelog.testing.fixtures"]

CORRELATION_HEADER = "x-correlation-id"
TRANSACTION_HEADER = "x-trace-id"


@pytest.fixture
def http_client(
    mock_request_adapter: MockRequestAdapter,
    logger: Logger,
    context_manager: ContextManager,
) -> InstrumentedHttpClient:
    """InstrumentedHttpClient over a MockRequestAdapter with default settings."""
    return InstrumentedHttpClient(mock_request_adapter, logger, context_manager)


@pytest.fixture
def broker_client(
    mock_broker_adapter: MockBrokerAdapter,
    logger: Logger,
    context_manager: ContextManager,
) -> InstrumentedBrokerClient:
    """InstrumentedBrokerClient over a MockBrokerAdapter with default settings."""
    return InstrumentedBrokerClient(mock_broker_adapter, logger, context_manager)
