"""
Tests for the structured logging configuration.

Validates:
- JSONFormatter produces valid JSON with required fields
- DevFormatter produces human-readable colored text
- ContextFilter injects the bound agent and run_id
- configure_logging() switches mode based on DASHBOARD_ENV
- Agent runs bind their context so records carry agent/run_id
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from io import StringIO
from unittest.mock import patch

import pytest

from gaming_dashboard.observability.logging_config import (
    ContextFilter,
    DevFormatter,
    JSONFormatter,
    bind_run_context,
    configure_logging,
    get_run_context,
    reset_run_context,
)


# ─── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture
def json_formatter():
    return JSONFormatter()


@pytest.fixture
def dev_formatter():
    return DevFormatter()


@pytest.fixture
def context_filter():
    return ContextFilter()


@pytest.fixture
def restore_root_logger():
    """Put the root logger's handlers and level back after the test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for h in root.handlers[:]:
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


def _make_record(
    msg: str = "test message",
    level: int = logging.INFO,
    name: str = "test.logger",
    extra: dict | None = None,
) -> logging.LogRecord:
    """Create a LogRecord with optional extra fields."""
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    if extra:
        for key, value in extra.items():
            setattr(record, key, value)
    return record


# ─── JSONFormatter Tests ──────────────────────────────────────────────


class TestJSONFormatter:
    """Tests for the production JSON log formatter."""

    def test_produces_valid_json(self, json_formatter):
        """Should output a parseable JSON object."""
        output = json_formatter.format(_make_record("hello world"))
        assert isinstance(json.loads(output), dict)

    def test_includes_required_fields(self, json_formatter):
        """Should include timestamp, level, logger and message."""
        record = _make_record(
            "test", level=logging.WARNING, name="gaming_dashboard.agents.base"
        )
        parsed = json.loads(json_formatter.format(record))

        assert "timestamp" in parsed
        assert parsed["level"] == "WARNING"
        assert parsed["logger"] == "gaming_dashboard.agents.base"
        assert parsed["message"] == "test"

    def test_includes_extra_fields(self, json_formatter):
        """Extra fields passed via logger.info(..., extra={}) appear in JSON."""
        record = _make_record(
            "agent_run_finished",
            extra={"agent": "content", "run_id": "abc-123", "products": 5},
        )
        parsed = json.loads(json_formatter.format(record))

        assert parsed["agent"] == "content"
        assert parsed["run_id"] == "abc-123"
        assert parsed["products"] == 5

    def test_timestamp_is_iso_format(self, json_formatter):
        """Should stamp records in ISO-8601 UTC."""
        parsed = json.loads(json_formatter.format(_make_record("test")))
        assert "T" in parsed["timestamp"]
        assert parsed["timestamp"].endswith("+00:00")

    def test_handles_exception_info(self, json_formatter):
        """Should render exc_info into an exception field."""
        try:
            raise ValueError("test error")
        except ValueError:
            record = _make_record("error occurred")
            record.exc_info = sys.exc_info()

        parsed = json.loads(json_formatter.format(record))

        assert "exception" in parsed
        assert "ValueError" in parsed["exception"]
        assert "test error" in parsed["exception"]

    def test_non_serializable_extra_becomes_string(self, json_formatter):
        """Should stringify extras json cannot encode."""
        record = _make_record("test", extra={"complex_obj": object()})
        parsed = json.loads(json_formatter.format(record))
        assert isinstance(parsed["complex_obj"], str)


# ─── DevFormatter Tests ───────────────────────────────────────────────


class TestDevFormatter:
    """Tests for the local development colored formatter."""

    def test_includes_message_level_and_logger(self, dev_formatter):
        """Should show message, level and logger name."""
        record = _make_record(
            "hello dev world", level=logging.WARNING, name="gaming_dashboard.api"
        )
        output = dev_formatter.format(record)
        assert "hello dev world" in output
        assert "WARNING" in output
        assert "gaming_dashboard.api" in output

    def test_includes_known_extra_fields_inline(self, dev_formatter):
        """Should append agent, run_id and service as key=value."""
        record = _make_record(
            "test",
            extra={"agent": "analytics", "run_id": "r-1", "service": "shopify"},
        )
        output = dev_formatter.format(record)
        assert "agent=analytics" in output
        assert "run_id=r-1" in output
        assert "service=shopify" in output

    def test_unknown_extra_fields_not_inline(self, dev_formatter):
        """Should leave other extras out of the dev line."""
        record = _make_record("test", extra={"products": 3})
        assert "products=3" not in dev_formatter.format(record)

    def test_color_codes_present_for_error(self, dev_formatter):
        """Should color ERROR records red."""
        record = _make_record("error!", level=logging.ERROR)
        assert "\033[31m" in dev_formatter.format(record)


# ─── Run Context ──────────────────────────────────────────────────────


class TestRunContext:
    """Tests for bind_run_context / reset_run_context / ContextFilter."""

    def test_empty_by_default(self):
        """Should have no bound context outside a run."""
        assert get_run_context() == {}

    def test_bind_and_reset(self):
        """Should restore the previous context after reset."""
        tokens = bind_run_context("content", "run-1")
        assert get_run_context() == {"agent": "content", "run_id": "run-1"}
        reset_run_context(tokens)
        assert get_run_context() == {}

    def test_filter_injects_bound_context(self, context_filter):
        """Should copy the bound agent and run_id onto records."""
        tokens = bind_run_context("marketing", "run-2")
        try:
            record = _make_record("test")
            assert context_filter.filter(record) is True
            assert record.agent == "marketing"  # type: ignore[attr-defined]
            assert record.run_id == "run-2"  # type: ignore[attr-defined]
        finally:
            reset_run_context(tokens)

    def test_filter_keeps_explicit_extra(self, context_filter):
        """Should not overwrite an agent passed explicitly via extra."""
        tokens = bind_run_context("marketing", "run-2")
        try:
            record = _make_record("test", extra={"agent": "customer"})
            context_filter.filter(record)
            assert record.agent == "customer"  # type: ignore[attr-defined]
        finally:
            reset_run_context(tokens)

    def test_no_context_no_attributes(self, context_filter):
        """Should add nothing when no context is bound."""
        record = _make_record("test")
        context_filter.filter(record)
        assert not hasattr(record, "agent")
        assert not hasattr(record, "run_id")

    def test_concurrent_tasks_do_not_share_context(self):
        """Should keep each task's bound context separate."""
        async def worker(name):
            tokens = bind_run_context(name, f"run-{name}")
            try:
                await asyncio.sleep(0.01)
                return get_run_context()
            finally:
                reset_run_context(tokens)

        async def main():
            return await asyncio.gather(worker("content"), worker("analytics"))

        first, second = asyncio.run(main())
        assert first == {"agent": "content", "run_id": "run-content"}
        assert second == {"agent": "analytics", "run_id": "run-analytics"}


# ─── configure_logging Tests ──────────────────────────────────────────


class TestConfigureLogging:
    """Tests for the configure_logging() entry point."""

    def test_production_uses_json_formatter(self, restore_root_logger):
        """Should use JSONFormatter in production."""
        configure_logging(env="production")
        assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)

    def test_development_uses_dev_formatter(self, restore_root_logger):
        """Should use DevFormatter in development."""
        configure_logging(env="development")
        assert isinstance(restore_root_logger.handlers[0].formatter, DevFormatter)

    def test_reads_env_var(self, restore_root_logger):
        """Should read the mode from DASHBOARD_ENV."""
        with patch.dict(os.environ, {"DASHBOARD_ENV": "production"}):
            configure_logging()
        assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)

    def test_defaults_to_development(self, restore_root_logger):
        """Should fall back to development when DASHBOARD_ENV is unset."""
        with patch.dict(os.environ, {}, clear=True):
            configure_logging()
        assert isinstance(restore_root_logger.handlers[0].formatter, DevFormatter)

    def test_accepts_level_name(self, restore_root_logger):
        """Should accept a lowercase level name."""
        configure_logging(env="development", level="debug")
        assert restore_root_logger.level == logging.DEBUG

    def test_unknown_level_name_falls_back_to_info(self, restore_root_logger):
        """Should use INFO for an unknown level name."""
        configure_logging(env="development", level="chatty")
        assert restore_root_logger.level == logging.INFO

    def test_removes_existing_handlers(self, restore_root_logger):
        """Should replace existing root handlers, not stack them."""
        restore_root_logger.addHandler(logging.StreamHandler())
        configure_logging(env="development")
        assert len(restore_root_logger.handlers) == 1

    def test_context_filter_attached(self, restore_root_logger):
        """Should attach ContextFilter to the root handler."""
        configure_logging(env="development")
        filter_types = [type(f) for f in restore_root_logger.handlers[0].filters]
        assert ContextFilter in filter_types

    def test_json_output_end_to_end(self, restore_root_logger):
        """logger.info inside a bound run context produces JSON with agent/run_id."""
        configure_logging(env="production")
        stream = StringIO()
        restore_root_logger.handlers[0].stream = stream

        tokens = bind_run_context("analytics", "xyz-789")
        try:
            logging.getLogger("test.e2e").info(
                "analytics_updated", extra={"revenue": 4200}
            )
        finally:
            reset_run_context(tokens)

        parsed = json.loads(stream.getvalue().strip())
        assert parsed["message"] == "analytics_updated"
        assert parsed["agent"] == "analytics"
        assert parsed["run_id"] == "xyz-789"
        assert parsed["revenue"] == 4200
        assert parsed["level"] == "INFO"
