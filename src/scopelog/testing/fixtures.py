"""Pytest fixtures for code that logs through scopelog.

Load as a plugin (``pytest_plugins = ["scopelog.testing.fixtures"]``).

Fixtures:
    spy_transport: In-memory transport capturing every entry.
    context_manager: Fresh ContextManager with default header names.
    masking_engine: MaskingEngine with the default rules.
    logger_factory: LoggerFactory wired to the three fixtures above, level trace.
    logger: The ``test`` logger of ``logger_factory``.
    mock_request_adapter: MockRequestAdapter answering HTTP 200.
    mock_broker_adapter: Empty MockBrokerAdapter.
"""

import pytest

from scopelog.context.manager import ContextManager
from scopelog.logger.factory import LoggerFactory
from scopelog.logger.logger import Logger
from scopelog.masking.engine import MaskingEngine
from scopelog.models.enums import LogLevel
from scopelog.testing.mocks import MockBrokerAdapter, MockRequestAdapter
from scopelog.transports.spy import SpyTransport


@pytest.fixture
def spy_transport() -> SpyTransport:
    return SpyTransport()


@pytest.fixture
def context_manager() -> ContextManager:
    return ContextManager()


@pytest.fixture
def masking_engine() -> MaskingEngine:
    return MaskingEngine()


@pytest.fixture
def logger_factory(
    spy_transport: SpyTransport,
    context_manager: ContextManager,
    masking_engine: MaskingEngine,
) -> LoggerFactory:
    """Create a LoggerFactory that records everything into ``spy_transport``."""
    return LoggerFactory(
        context=context_manager,
        transports=[spy_transport],
        masking=masking_engine,
        level=LogLevel.TRACE,
        service_name="test-service",
    )


@pytest.fixture
def logger(logger_factory: LoggerFactory) -> Logger:
    return logger_factory.get_logger("test")


@pytest.fixture
def mock_request_adapter() -> MockRequestAdapter:
    return MockRequestAdapter()


@pytest.fixture
def mock_broker_adapter() -> MockBrokerAdapter:
    return MockBrokerAdapter()
