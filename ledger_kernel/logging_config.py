"""
Structured logging for the ledger.

Every record under the ``ledger_kernel`` logger namespace is emitted as one
JSON object per line. Request-scoped identifiers (tenant, entry, actor,
correlation id) live in context variables and are merged into each record,
so services only pass the event-specific fields through ``extra=``::

    logger = get_logger("services.journal_posting")
    with LogContext.bind(tenant_id=tenant_id):
        logger.info("journal_entry_posted", extra={"amount": amount})

Message strings are snake_case event keys, never prose.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any, TextIO
from uuid import UUID

ROOT_LOGGER_NAME = "ledger_kernel"

_CONTEXT_FIELDS = ("correlation_id", "tenant_id", "actor_id", "entry_id")

_context_vars: dict[str, ContextVar[str | None]] = {
    field: ContextVar(f"ledger_log_{field}", default=None)
    for field in _CONTEXT_FIELDS
}


class LogContext:
    """Request-scoped log fields, safe across threads and asyncio tasks."""

    @staticmethod
    def set(
        *,
        correlation_id: Any = None,
        tenant_id: Any = None,
        actor_id: Any = None,
        entry_id: Any = None,
    ) -> None:
        """Update the given fields; ``None`` leaves a field untouched."""
        updates = {
            "correlation_id": correlation_id,
            "tenant_id": tenant_id,
            "actor_id": actor_id,
            "entry_id": entry_id,
        }
        for field, value in updates.items():
            if value is not None:
                _context_vars[field].set(str(value))

    @staticmethod
    def get_all() -> dict[str, str]:
        return {
            field: value
            for field, var in _context_vars.items()
            if (value := var.get()) is not None
        }

    @staticmethod
    def clear() -> None:
        for var in _context_vars.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[type["LogContext"]]:
        """
        Set fields for the duration of a ``with`` block.

        Previous values (including "unset") are restored on exit, even when
        the block raises. Unknown field names raise ``KeyError``.
        """
        tokens = [
            (_context_vars[field], _context_vars[field].set(str(value)))
            for field, value in fields.items()
            if value is not None
        ]
        try:
            yield LogContext
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# Attributes every LogRecord carries; anything else arrived through extra=.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return repr(value)


class StructuredFormatter(logging.Formatter):
    """Render a LogRecord as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)

    @staticmethod
    def _exception_fields(exc: BaseException) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # LedgerError subclasses keep their context as public attributes
        for name, value in vars(exc).items():
            if not name.startswith("_"):
                fields[f"exc_{name}"] = value
        return fields


def get_logger(name: str) -> logging.Logger:
    """Return ``ledger_kernel.<name>``."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


_configured = False
_configure_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``ledger_kernel`` logger.

    Only the first call has any effect. Records do not propagate to the
    root logger, so host applications see ledger output exactly once.
    """
    global _configured
    with _configure_lock:
        if _configured:
            return
        _configured = True

        if handler is None:
            handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())

        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(level)
        root.propagate = False
        root.addHandler(handler)


def reset_logging() -> None:
    """Drop handlers and allow ``configure_logging`` to run again (tests)."""
    global _configured
    with _configure_lock:
        _configured = False
        root = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in list(root.handlers):
            root.removeHandler(handler)
        root.setLevel(logging.WARNING)
