"""Tests for the structured logging system (ledger_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    """Parse all JSON log lines from a stream."""
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "ledger_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("posted", extra={"entry_count": 42, "reference_type": "invoice"})

        record = _parse_log(stream)
        assert record["entry_count"] == 42
        assert record["reference_type"] == "invoice"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        LogContext.set(correlation_id="abc-123", tenant_id="tenant-1")
        logger.info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["tenant_id"] == "tenant-1"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        try:
            raise ValueError("boom")
        except ValueError:
            logger.error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_ledger_exception_code_extracted(self):
        """Ledger exceptions carry a .code attribute and structured fields."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        from ledger_kernel.exceptions import AccountNotFoundError

        try:
            raise AccountNotFoundError("Petty Cash", "tenant-1")
        except AccountNotFoundError:
            logger.error("resolution_error", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "ACCOUNT_NOT_FOUND"
        assert record["exc_type"] == "AccountNotFoundError"
        assert record["exc_account"] == "Petty Cash"
        assert record["exc_tenant_id"] == "tenant-1"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("bare_message")

        record = _parse_log(stream)
        assert "correlation_id" not in record
        assert "tenant_id" not in record

    def test_uuid_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        uid = uuid4()
        logger.info("with_uuid", extra={"account_id": uid})

        record = _parse_log(stream)
        assert record["account_id"] == str(uid)

    def test_decimal_serialized_as_string(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("with_amount", extra={"amount": Decimal("100.50")})

        record = _parse_log(stream)
        assert record["amount"] == "100.50"

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # Default level is INFO, so the debug line is dropped
        assert len(logs) == 2
        for record in logs:
            assert "ts" in record
            assert "level" in record
            assert "logger" in record
            assert "message" in record


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(correlation_id="x", tenant_id="y")
        ctx = LogContext.get_all()
        assert ctx == {"correlation_id": "x", "tenant_id": "y"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(tenant_id="outer")
        with LogContext.bind(tenant_id="inner"):
            assert LogContext.get_all()["tenant_id"] == "inner"
        assert LogContext.get_all()["tenant_id"] == "outer"

    def test_bind_restores_none(self):
        """bind() restores to None if there was no previous value."""
        assert "entry_id" not in LogContext.get_all()
        with LogContext.bind(entry_id="temp"):
            assert LogContext.get_all()["entry_id"] == "temp"
        assert "entry_id" not in LogContext.get_all()

    def test_bind_stringifies_uuid(self):
        uid = uuid4()
        with LogContext.bind(tenant_id=uid):
            assert LogContext.get_all()["tenant_id"] == str(uid)

    def test_bind_restores_after_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(tenant_id="t-1"):
                raise RuntimeError("boom")

        assert LogContext.get_all() == {}

    def test_bind_unknown_field(self):
        with pytest.raises(KeyError):
            with LogContext.bind(request_path="/x"):
                pass

    def test_additive_set(self):
        LogContext.set(correlation_id="a")
        LogContext.set(tenant_id="b")
        ctx = LogContext.get_all()
        assert ctx["correlation_id"] == "a"
        assert ctx["tenant_id"] == "b"

    def test_all_fields(self):
        LogContext.set(
            correlation_id="c",
            tenant_id="t",
            actor_id="a",
            entry_id="n",
        )
        ctx = LogContext.get_all()
        assert len(ctx) == 4
        assert ctx["correlation_id"] == "c"
        assert ctx["entry_id"] == "n"


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        root = logging.getLogger("ledger_kernel")
        assert len(root.handlers) == 1

    def test_get_logger_returns_child(self):
        logger = get_logger("services.journal_posting")
        assert logger.name == "ledger_kernel.services.journal_posting"

    def test_logger_hierarchy(self):
        """Child loggers inherit the ledger_kernel root config."""
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        child = get_logger("deep.nested.module")
        child.debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "ledger_kernel.deep.nested.module"
