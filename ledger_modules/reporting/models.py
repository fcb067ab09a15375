"""
Financial Reporting Domain Models (``ledger_modules.reporting.models``).

Responsibility
--------------
Frozen dataclass value objects representing report outputs: trial
balance, balance sheet, profit & loss, the per-account ledger, the VAT
summary and the daybook.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Built by the
pure functions in ``statements.py`` and returned by ``ReportingService``.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* All monetary fields are raw (unrounded) ``Decimal``; rounding happens in
  ``render_to_dict`` only.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from ledger_kernel.db.types import ZERO
from ledger_kernel.models.account import AccountType


class ReportType(str, Enum):
    """Types of financial reports."""

    TRIAL_BALANCE = "trial_balance"
    BALANCE_SHEET = "balance_sheet"
    PROFIT_AND_LOSS = "profit_and_loss"
    ACCOUNT_LEDGER = "account_ledger"
    VAT_SUMMARY = "vat_summary"
    DAYBOOK = "daybook"


# =========================================================================
# Trial Balance
# =========================================================================


@dataclass(frozen=True)
class TrialBalanceLine:
    """A single line in the trial balance."""

    account_id: UUID
    name: str
    account_type: AccountType
    debit: Decimal
    credit: Decimal
    balance: Decimal  # debit - credit
    natural_balance: Decimal  # Normal-balance-adjusted


@dataclass(frozen=True)
class TrialBalanceReport:
    """Complete trial balance."""

    lines: tuple[TrialBalanceLine, ...]
    total_debit: Decimal
    total_credit: Decimal
    entry_count: int = 0

    @property
    def difference(self) -> Decimal:
        return self.total_debit - self.total_credit

    @property
    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit


# =========================================================================
# Balance Sheet
# =========================================================================


@dataclass(frozen=True)
class StatementLine:
    """An account and its normal-balance amount."""

    account_id: UUID
    name: str
    amount: Decimal


@dataclass(frozen=True)
class BalanceSheetReport:
    """
    Unclassified balance sheet: assets, liabilities, equity.

    Sections hold every account of their type, zero balances included;
    hiding zero lines is a rendering concern.
    """

    assets: tuple[StatementLine, ...]
    liabilities: tuple[StatementLine, ...]
    equity: tuple[StatementLine, ...]
    asset_total: Decimal
    liability_total: Decimal
    equity_total: Decimal

    @property
    def balance_check(self) -> Decimal:
        """Assets minus (liabilities + equity).  Non-zero until books close."""
        return self.asset_total - (self.liability_total + self.equity_total)


# =========================================================================
# Profit & Loss
# =========================================================================


@dataclass(frozen=True)
class ProfitAndLossReport:
    """Income and expense accounts with their totals."""

    income_accounts: tuple[StatementLine, ...]
    expense_accounts: tuple[StatementLine, ...]
    income_total: Decimal
    expense_total: Decimal

    @property
    def net_profit(self) -> Decimal:
        return self.income_total - self.expense_total


# =========================================================================
# Account Ledger
# =========================================================================


@dataclass(frozen=True)
class AccountLedgerLine:
    """
    One journal entry as seen from a single account.

    ``balance`` is the running balance on the account's normal side after
    this entry.  An entry posted to the account on both sides shows the
    amount in both columns and leaves the balance unchanged.
    """

    entry_id: UUID
    date: datetime
    description: str
    reference_type: str
    reference_id: str | None
    counter_account: str
    debit: Decimal
    credit: Decimal
    balance: Decimal


@dataclass(frozen=True)
class AccountLedgerReport:
    """Chronological activity of one account."""

    account_id: UUID
    name: str
    account_type: AccountType
    lines: tuple[AccountLedgerLine, ...]
    total_debit: Decimal
    total_credit: Decimal
    closing_balance: Decimal


# =========================================================================
# VAT Summary
# =========================================================================


@dataclass(frozen=True)
class VatSummaryReport:
    """
    VAT collected on sales against VAT paid on purchases.

    A negative ``vat_payable`` is a reclaim.
    """

    total_sales: Decimal
    sales_vat: Decimal
    purchase_vat: Decimal
    start: datetime | None = None
    end: datetime | None = None

    @property
    def vat_payable(self) -> Decimal:
        return self.sales_vat - self.purchase_vat


# =========================================================================
# Daybook
# =========================================================================


@dataclass(frozen=True)
class DaybookLine:
    entry_id: UUID
    date: datetime
    debit_account: str
    credit_account: str
    amount: Decimal
    description: str
    reference_type: str
    reference_id: str | None


@dataclass(frozen=True)
class DaybookReport:
    """Every journal entry of the tenant in a window, oldest first."""

    lines: tuple[DaybookLine, ...]
    start: datetime | None = None
    end: datetime | None = None

    @property
    def total_amount(self) -> Decimal:
        return sum((line.amount for line in self.lines), ZERO)
