"""
Pytest fixtures for the ledger test suite.

Provides:
- An in-memory SQLite engine per test (tables created, listeners registered)
- Sessions, a deterministic clock and wired kernel services
- Tenants with and without a seeded chart of accounts
- Structured-log capture

Every test gets a fresh in-memory database.  The SQLite engine uses one
shared connection (StaticPool), so a test must not keep a ``session``
transaction open while calling ``LedgerAPI``; API tests set up their data
through the API or ``session_scope``.
"""

import json
import logging
from datetime import datetime
from decimal import Decimal
from io import StringIO
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session, sessionmaker

from ledger_kernel.db.engine import build_engine, create_tables, drop_tables
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_kernel.services.account_registry import AccountRegistry
from ledger_kernel.services.journal_posting import JournalPostingService
from ledger_modules.ar.orm import Invoice

TEST_DATABASE_URL = "sqlite:///:memory:"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, poster):
            poster.post_entry(...)
            logs = captured_logs()
            assert any(r["message"] == "journal_entry_posted" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    """Fresh in-memory database with every table created."""
    eng = build_engine(TEST_DATABASE_URL)
    create_tables(eng)
    yield eng
    drop_tables(eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    """Session for service-level tests; rolled back after the test."""
    sess = session_factory()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    """Clock fixed at 2024-01-01 12:00 UTC."""
    return DeterministicClock()


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def registry(session, deterministic_clock) -> AccountRegistry:
    return AccountRegistry(session, deterministic_clock)


@pytest.fixture
def poster(session, deterministic_clock, registry) -> JournalPostingService:
    return JournalPostingService(session, deterministic_clock, registry)


@pytest.fixture
def tenant_id() -> UUID:
    return uuid4()


@pytest.fixture
def other_tenant_id() -> UUID:
    return uuid4()


@pytest.fixture
def seeded_tenant(registry, tenant_id) -> UUID:
    """A tenant with the default chart of accounts."""
    registry.seed_defaults(tenant_id)
    return tenant_id


@pytest.fixture
def make_invoice(session, deterministic_clock):
    """
    Factory inserting an invoice row.

    ``created_at`` defaults to the clock's current time.
    """

    def _make(
        tenant_id: UUID,
        customer_id: UUID | None,
        invoice_number: str,
        final_amount: str | Decimal,
        created_at: datetime | None = None,
    ) -> Invoice:
        invoice = Invoice(
            tenant_id=tenant_id,
            customer_id=customer_id,
            invoice_number=invoice_number,
            final_amount=Decimal(str(final_amount)),
            created_at=created_at or deterministic_clock.now(),
        )
        session.add(invoice)
        session.flush()
        return invoice

    return _make