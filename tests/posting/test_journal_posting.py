"""
Tests for JournalPostingService (ledger_kernel/services/journal_posting.py).

Covers:
- Happy-path posting by name and by id
- Amount validation before any write
- Unknown tenants and unknown accounts
- Tenant isolation of account references
- Same-account warning
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from ledger_kernel.domain.dtos import PostingRequest
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    InvalidAmountError,
    TenantNotFoundError,
)
from ledger_kernel.models.journal import JournalEntry
from ledger_kernel.selectors.journal_selector import JournalSelector


def _entry_count(session) -> int:
    return session.scalar(select(func.count()).select_from(JournalEntry))


class TestPostEntry:
    """Happy path."""

    def test_post_by_name(self, session, poster, registry, seeded_tenant, deterministic_clock):
        entry_id = poster.post_entry(
            tenant_id=seeded_tenant,
            debit_account="Cash",
            credit_account="Sales",
            amount="100.00",
            description="Cash sale",
            reference_id="INV-1",
        )

        entry = session.get(JournalEntry, entry_id)
        assert entry.tenant_id == seeded_tenant
        assert entry.debit_account_id == registry.resolve(seeded_tenant, "Cash")
        assert entry.credit_account_id == registry.resolve(seeded_tenant, "Sales")
        assert entry.amount == Decimal("100.00")
        assert entry.description == "Cash sale"
        assert entry.reference_id == "INV-1"
        assert entry.reference_type == "invoice"
        assert entry.created_at == deterministic_clock.now()

    def test_post_by_id(self, session, poster, registry, seeded_tenant):
        cash_id = registry.resolve(seeded_tenant, "Cash")
        bank_id = registry.resolve(seeded_tenant, "Bank")

        entry_id = poster.post_entry(seeded_tenant, bank_id, str(cash_id), 50, "Deposit")

        entry = session.get(JournalEntry, entry_id)
        assert entry.debit_account_id == bank_id
        assert entry.credit_account_id == cash_id

    def test_names_case_insensitive(self, poster, registry, seeded_tenant, session):
        entry_id = poster.post_entry(seeded_tenant, "CASH", "sales", 1, "x")

        entry = session.get(JournalEntry, entry_id)
        assert entry.debit_account_id == registry.resolve(seeded_tenant, "Cash")

    def test_one_request_one_row(self, session, poster, seeded_tenant):
        poster.post_entry(seeded_tenant, "Cash", "Sales", 1, "a")
        poster.post_entry(seeded_tenant, "Cash", "Sales", 2, "b")

        assert _entry_count(session) == 2

    def test_post_request_object(self, session, poster, seeded_tenant):
        request = PostingRequest(
            tenant_id=seeded_tenant,
            debit_account="Salary Expense",
            credit_account="Bank",
            amount=Decimal("1200.00"),
            description="Payroll",
            reference_id="PAY-3",
            reference_type="payroll",
        )

        entry_id = poster.post(request)

        entry = session.get(JournalEntry, entry_id)
        assert entry.reference_type == "payroll"

    def test_posted_log_carries_context(self, poster, seeded_tenant, captured_logs):
        entry_id = poster.post_entry(seeded_tenant, "Cash", "Sales", "10", "Sale")

        records = [r for r in captured_logs() if r["message"] == "journal_entry_posted"]
        assert len(records) == 1
        assert records[0]["tenant_id"] == str(seeded_tenant)
        assert records[0]["entry_id"] == str(entry_id)
        assert records[0]["amount"] == "10"


class TestAmountValidation:
    """Invalid amounts never reach the journal."""

    @pytest.mark.parametrize(
        "amount",
        [0, -1, "0.00", "-5", "abc", True, None, "NaN", float("inf")],
    )
    def test_rejected(self, session, poster, seeded_tenant, amount):
        with pytest.raises(InvalidAmountError):
            poster.post_entry(seeded_tenant, "Cash", "Sales", amount, "Bad")

        assert _entry_count(session) == 0

    def test_rejected_before_account_resolution(self, poster, seeded_tenant):
        """A bad amount wins over a bad account name."""
        with pytest.raises(InvalidAmountError):
            poster.post_entry(seeded_tenant, "Nope", "Sales", -1, "Bad")

    def test_sub_scale_amount_never_stored_as_zero(self, session, poster, seeded_tenant):
        with pytest.raises(InvalidAmountError, match="decimal places"):
            poster.post_entry(seeded_tenant, "Cash", "Sales", "0.0000000001", "tiny")

        assert _entry_count(session) == 0


class TestResolutionFailures:

    def test_unknown_tenant(self, session, poster, tenant_id):
        with pytest.raises(TenantNotFoundError) as exc_info:
            poster.post_entry(tenant_id, "Cash", "Sales", 10, "Sale")

        assert exc_info.value.tenant_id == str(tenant_id)
        assert _entry_count(session) == 0

    def test_unknown_debit_account(self, session, poster, seeded_tenant):
        with pytest.raises(AccountNotFoundError) as exc_info:
            poster.post_entry(seeded_tenant, "Petty Cash", "Sales", 10, "Sale")

        assert exc_info.value.account == "Petty Cash"
        assert _entry_count(session) == 0

    def test_unknown_credit_account(self, session, poster, seeded_tenant):
        with pytest.raises(AccountNotFoundError):
            poster.post_entry(seeded_tenant, "Cash", "Revenue", 10, "Sale")

        assert _entry_count(session) == 0

    def test_unknown_account_id(self, poster, seeded_tenant):
        with pytest.raises(AccountNotFoundError):
            poster.post_entry(seeded_tenant, uuid4(), "Sales", 10, "Sale")

    def test_other_tenants_account_id_rejected(
        self, session, poster, registry, seeded_tenant, other_tenant_id,
    ):
        registry.seed_defaults(other_tenant_id)
        foreign_cash = registry.resolve(other_tenant_id, "Cash")

        with pytest.raises(AccountNotFoundError):
            poster.post_entry(seeded_tenant, foreign_cash, "Sales", 10, "Sale")

        assert _entry_count(session) == 0


class TestSameAccount:

    def test_same_account_posts_with_warning(self, session, poster, seeded_tenant, captured_logs):
        entry_id = poster.post_entry(seeded_tenant, "Cash", "cash", 10, "Self transfer")

        entry = session.get(JournalEntry, entry_id)
        assert entry.debit_account_id == entry.credit_account_id
        warnings = [
            r for r in captured_logs()
            if r["message"] == "posting_same_account_both_sides"
        ]
        assert len(warnings) == 1
        assert warnings[0]["level"] == "WARNING"


class TestJournalSelector:
    """Read side over posted entries."""

    def test_entries_touching(self, session, poster, registry, seeded_tenant):
        poster.post_entry(seeded_tenant, "Cash", "Sales", 10, "a")
        poster.post_entry(seeded_tenant, "Bank", "Sales", 20, "b")
        selector = JournalSelector(session)

        entries = selector.entries_touching(
            seeded_tenant, [registry.resolve(seeded_tenant, "Cash")],
        )

        assert [e.amount for e in entries] == [Decimal("10")]

    def test_entries_touching_empty_ids(self, session, seeded_tenant):
        assert JournalSelector(session).entries_touching(seeded_tenant, []) == []

    def test_count_is_tenant_scoped(
        self, session, poster, registry, seeded_tenant, other_tenant_id,
    ):
        registry.seed_defaults(other_tenant_id)
        poster.post_entry(seeded_tenant, "Cash", "Sales", 10, "a")
        poster.post_entry(other_tenant_id, "Cash", "Sales", 10, "b")
        poster.post_entry(other_tenant_id, "Cash", "Sales", 10, "c")
        selector = JournalSelector(session)

        assert selector.count(seeded_tenant) == 1
        assert selector.count(other_tenant_id) == 2

    def test_by_reference(self, session, poster, seeded_tenant):
        poster.post_entry(seeded_tenant, "Cash", "Sales", 10, "a", reference_id="INV-9")
        poster.post_entry(
            seeded_tenant, "Cash", "Sales", 5, "b",
            reference_id="INV-9", reference_type="invoice_vat",
        )
        selector = JournalSelector(session)

        entries = selector.by_reference(seeded_tenant, "invoice", "INV-9")

        assert [e.description for e in entries] == ["a"]

    def test_get_is_tenant_scoped(self, session, poster, seeded_tenant, other_tenant_id):
        entry_id = poster.post_entry(seeded_tenant, "Cash", "Sales", 10, "a")
        selector = JournalSelector(session)

        assert selector.get(seeded_tenant, entry_id).id == entry_id
        assert selector.get(other_tenant_id, entry_id) is None
