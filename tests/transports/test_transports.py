"""Tests for the console and spy transports."""

import io
import json

import pytest

from scopelog.models.entry import LogEntry
from scopelog.models.enums import LogLevel
from scopelog.transports.console import ConsoleTransport
from scopelog.transports.spy import SpyTransport


def _entry(level: LogLevel = LogLevel.INFO, message: str = "hello", **extra: object) -> LogEntry:
    return LogEntry(
        level=level,
        message=message,
        service="api",
        context={"correlationId": "c1"},
        extra_fields=dict(extra),
    )


class TestConsoleTransport:
    """ConsoleTransport rendering."""

    async def test_json_line(self) -> None:
        """Test that JSON mode writes one parseable object per entry."""
        stream = io.StringIO()
        transport = ConsoleTransport(stream=stream)
        await transport.log(_entry(order_id="o1"))

        line = stream.getvalue()
        assert line.endswith("\n")
        record = json.loads(line)
        assert record["msg"] == "hello"
        assert record["level"] == "info"
        assert record["correlationId"] == "c1"
        assert record["order_id"] == "o1"

    async def test_console_mode(self) -> None:
        """Test that console mode renders the message and fields as text."""
        stream = io.StringIO()
        transport = ConsoleTransport(log_format="console", stream=stream)
        await transport.log(_entry())

        output = stream.getvalue()
        assert "hello" in output
        assert "correlationId" in output

    def test_unknown_format_rejected(self) -> None:
        """Test that an unknown format raises ValueError."""
        with pytest.raises(ValueError, match="yaml"):
            ConsoleTransport(log_format="yaml")

    async def test_flush_flushes_stream(self) -> None:
        """Test that flush reaches the stream."""

        class RecordingStream(io.StringIO):
            flushed = False

            def flush(self) -> None:
                self.flushed = True

        stream = RecordingStream()
        await ConsoleTransport(stream=stream).flush()
        assert stream.flushed is True


class TestLevelGate:
    """Transport.is_level_enabled."""

    @pytest.mark.parametrize(
        ("gate", "level", "expected"),
        [
            (None, "trace", True),
            ("warn", "info", False),
            ("warn", "warn", True),
            ("warn", "fatal", True),
            ("WARNING", "error", True),
        ],
    )
    def test_gate(self, gate: str | None, level: str, expected: bool) -> None:
        """Test the severity comparison."""
        assert SpyTransport(level=gate).is_level_enabled(level) is expected


class TestSpyTransport:
    """SpyTransport helpers."""

    async def test_find_entries(self) -> None:
        """Test matching by entry attribute, flattened field and predicate."""
        spy = SpyTransport()
        await spy.log(_entry(message="a", order_id="o1"))
        await spy.log(_entry(level=LogLevel.ERROR, message="b", order_id="o2"))

        assert [e.message for e in spy.find_entries(level=LogLevel.ERROR)] == ["b"]
        assert [e.message for e in spy.find_entries(order_id="o1")] == ["a"]
        assert spy.find_entries(missing="x") == []
        assert len(spy.find_entries(lambda e: e.service == "api")) == 2

    async def test_last_and_clear(self) -> None:
        """Test last and clear."""
        spy = SpyTransport()
        assert spy.last is None
        await spy.log(_entry(message="x"))
        assert spy.last is not None and spy.last.message == "x"
        spy.clear()
        assert spy.entries == []
