"""Log transports."""

from scopelog.transports.base import Transport
from scopelog.transports.console import ConsoleTransport
from scopelog.transports.spy import SpyTransport

__all__ = ["ConsoleTransport", "SpyTransport", "Transport"]
