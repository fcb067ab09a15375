"""
Tests for the aggregation engine (ledger_engines/aggregation.py).

Pure tests: synthetic accounts and entries, no database.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from ledger_engines.aggregation import (
    AccountTotals,
    accumulate,
    compute_natural_balance,
    sum_decimals,
)
from ledger_kernel.domain.dtos import AccountInfo
from ledger_kernel.models.account import AccountType, NormalBalance


@dataclass(frozen=True)
class FakeEntry:
    debit_account_id: UUID
    credit_account_id: UUID
    amount: Decimal


def _account(name: str, account_type: AccountType) -> AccountInfo:
    return AccountInfo(account_id=uuid4(), name=name, account_type=account_type)


class TestComputeNaturalBalance:

    def test_debit_normal(self):
        assert compute_natural_balance(
            Decimal("100"), Decimal("30"), NormalBalance.DEBIT,
        ) == Decimal("70")

    def test_credit_normal(self):
        assert compute_natural_balance(
            Decimal("100"), Decimal("30"), NormalBalance.CREDIT,
        ) == Decimal("-70")

    def test_zero(self):
        assert compute_natural_balance(
            Decimal("0"), Decimal("0"), NormalBalance.CREDIT,
        ) == Decimal("0")


class TestAccumulate:

    def setup_method(self):
        self.cash = _account("Cash", AccountType.ASSET)
        self.sales = _account("Sales", AccountType.INCOME)
        self.rent = _account("Rent", AccountType.EXPENSE)

    def test_each_entry_hits_both_sides(self):
        entries = [FakeEntry(self.cash.account_id, self.sales.account_id, Decimal("100"))]

        totals = accumulate(accounts=[self.cash, self.sales], entries=entries)

        cash, sales = totals
        assert (cash.debit, cash.credit) == (Decimal("100"), Decimal("0"))
        assert (sales.debit, sales.credit) == (Decimal("0"), Decimal("100"))

    def test_multiple_entries_summed(self):
        entries = [
            FakeEntry(self.cash.account_id, self.sales.account_id, Decimal("100")),
            FakeEntry(self.cash.account_id, self.sales.account_id, Decimal("50.25")),
            FakeEntry(self.rent.account_id, self.cash.account_id, Decimal("40")),
        ]

        totals = accumulate(accounts=[self.cash, self.sales, self.rent], entries=entries)

        by_name = {t.account.name: t for t in totals}
        assert by_name["Cash"].debit == Decimal("150.25")
        assert by_name["Cash"].credit == Decimal("40")
        assert by_name["Cash"].balance == Decimal("110.25")
        assert by_name["Sales"].natural_balance == Decimal("150.25")
        assert by_name["Rent"].natural_balance == Decimal("40")

    def test_order_follows_accounts_argument(self):
        totals = accumulate(accounts=[self.rent, self.cash, self.sales], entries=[])

        assert [t.account.name for t in totals] == ["Rent", "Cash", "Sales"]

    def test_untracked_side_ignored(self):
        """An entry against an untracked account still counts on the tracked side."""
        entries = [FakeEntry(self.cash.account_id, self.sales.account_id, Decimal("10"))]

        totals = accumulate(accounts=[self.sales], entries=entries)

        assert len(totals) == 1
        assert totals[0].credit == Decimal("10")
        assert totals[0].debit == Decimal("0")

    def test_no_activity_zero_totals(self):
        totals = accumulate(accounts=[self.cash], entries=[])

        assert totals == [AccountTotals(account=self.cash, debit=Decimal("0"), credit=Decimal("0"))]

    def test_no_rounding_during_accumulation(self):
        entries = [
            FakeEntry(self.cash.account_id, self.sales.account_id, Decimal("0.005")),
            FakeEntry(self.cash.account_id, self.sales.account_id, Decimal("0.005")),
        ]

        totals = accumulate(accounts=[self.cash], entries=entries)

        assert totals[0].debit == Decimal("0.010")

    def test_same_account_both_sides_nets_to_zero(self):
        entries = [FakeEntry(self.cash.account_id, self.cash.account_id, Decimal("5"))]

        totals = accumulate(accounts=[self.cash], entries=entries)

        assert totals[0].debit == totals[0].credit == Decimal("5")
        assert totals[0].balance == Decimal("0")

    def test_accepts_generator(self):
        entries = (
            FakeEntry(self.cash.account_id, self.sales.account_id, Decimal(n))
            for n in range(1, 4)
        )

        totals = accumulate(accounts=[self.cash], entries=entries)

        assert totals[0].debit == Decimal("6")

    def test_positional_arguments_rejected(self):
        with pytest.raises(TypeError):
            accumulate([self.cash], [])  # type: ignore[misc]

    def test_trace_emitted(self, captured_logs):
        accumulate(accounts=[self.cash], entries=[])

        traces = [r for r in captured_logs() if r["message"] == "engine_invocation"]
        assert traces[0]["engine_name"] == "aggregation"
        assert traces[0]["engine_version"] == "1.0"
        assert len(traces[0]["input_fingerprint"]) == 16


class TestSumDecimals:

    def test_empty(self):
        assert sum_decimals([]) == Decimal("0")

    def test_values(self):
        assert sum_decimals([Decimal("1.10"), Decimal("2.20")]) == Decimal("3.30")
