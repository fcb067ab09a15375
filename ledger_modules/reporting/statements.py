"""
Pure financial statement transformation functions.

These functions turn per-account debit/credit totals (from
``ledger_engines.aggregation``) and already-loaded journal entries into
report dataclasses, and render those reports into the plain response
dicts handed to callers.  ZERO I/O.  ZERO side effects.

All monetary values are Decimal.  Accumulated figures stay unrounded in the
report objects; ``render_to_dict`` is the only place that rounds, once per
emitted figure, with ROUND_HALF_UP.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Sequence
from uuid import UUID

from ledger_engines.aggregation import (
    AccountTotals,
    compute_natural_balance,
    sum_decimals,
)
from ledger_kernel.db.types import DISPLAY_DECIMAL_PLACES, ZERO, round_money
from ledger_kernel.domain.dtos import AccountInfo
from ledger_kernel.models.account import (
    NORMAL_BALANCE_BY_TYPE,
    AccountType,
    normalize_account_name,
)
from ledger_modules.reporting.models import (
    AccountLedgerLine,
    AccountLedgerReport,
    BalanceSheetReport,
    DaybookLine,
    DaybookReport,
    ProfitAndLossReport,
    StatementLine,
    TrialBalanceLine,
    TrialBalanceReport,
    VatSummaryReport,
)

if TYPE_CHECKING:
    from ledger_kernel.models.journal import JournalEntry

# =========================================================================
# Helpers
# =========================================================================


def _statement_lines(
    totals: Sequence[AccountTotals],
    account_type: AccountType,
) -> tuple[StatementLine, ...]:
    return tuple(
        StatementLine(
            account_id=t.account.account_id,
            name=t.account.name,
            amount=t.natural_balance,
        )
        for t in totals
        if t.account.account_type == account_type
    )


def _section_total(lines: Sequence[StatementLine]) -> Decimal:
    return sum_decimals(line.amount for line in lines)


# =========================================================================
# 1. TRIAL BALANCE
# =========================================================================


def build_trial_balance(
    totals: Sequence[AccountTotals],
    entry_count: int = 0,
) -> TrialBalanceReport:
    """One line per account, every account included."""
    lines = tuple(
        TrialBalanceLine(
            account_id=t.account.account_id,
            name=t.account.name,
            account_type=t.account.account_type,
            debit=t.debit,
            credit=t.credit,
            balance=t.balance,
            natural_balance=t.natural_balance,
        )
        for t in totals
    )
    return TrialBalanceReport(
        lines=lines,
        total_debit=sum_decimals(line.debit for line in lines),
        total_credit=sum_decimals(line.credit for line in lines),
        entry_count=entry_count,
    )


# =========================================================================
# 2. BALANCE SHEET
# =========================================================================


def build_balance_sheet(totals: Sequence[AccountTotals]) -> BalanceSheetReport:
    """
    Split balance-sheet accounts into sections by type.

    Income and expense accounts are ignored.  No closing entry is synthesized,
    so ``balance_check`` is non-zero while profit sits in P&L accounts.
    """
    assets = _statement_lines(totals, AccountType.ASSET)
    liabilities = _statement_lines(totals, AccountType.LIABILITY)
    equity = _statement_lines(totals, AccountType.EQUITY)
    return BalanceSheetReport(
        assets=assets,
        liabilities=liabilities,
        equity=equity,
        asset_total=_section_total(assets),
        liability_total=_section_total(liabilities),
        equity_total=_section_total(equity),
    )


# =========================================================================
# 3. PROFIT & LOSS
# =========================================================================


def build_profit_and_loss(totals: Sequence[AccountTotals]) -> ProfitAndLossReport:
    """Income and expense accounts, zero-amount accounts included."""
    income = _statement_lines(totals, AccountType.INCOME)
    expense = _statement_lines(totals, AccountType.EXPENSE)
    return ProfitAndLossReport(
        income_accounts=income,
        expense_accounts=expense,
        income_total=_section_total(income),
        expense_total=_section_total(expense),
    )


# =========================================================================
# 4. ACCOUNT LEDGER
# =========================================================================


def build_account_ledger(
    account: AccountInfo,
    entries: Iterable[JournalEntry],
    account_names: Mapping[UUID, str],
) -> AccountLedgerReport:
    """
    Running balance of one account over ``entries`` (already chronological).

    Entries that do not touch the account are skipped.  The balance after
    each line is the natural balance of the cumulative debit and credit
    totals, so it reads positive while the account sits on its normal side.
    """
    total_debit = ZERO
    total_credit = ZERO
    lines: list[AccountLedgerLine] = []
    for entry in entries:
        is_debit = entry.debit_account_id == account.account_id
        is_credit = entry.credit_account_id == account.account_id
        if not (is_debit or is_credit):
            continue
        debit = entry.amount if is_debit else ZERO
        credit = entry.amount if is_credit else ZERO
        total_debit += debit
        total_credit += credit
        counter_id = entry.credit_account_id if is_debit else entry.debit_account_id
        lines.append(
            AccountLedgerLine(
                entry_id=entry.id,
                date=entry.created_at,
                description=entry.description,
                reference_type=entry.reference_type,
                reference_id=entry.reference_id,
                counter_account=account_names.get(counter_id, str(counter_id)),
                debit=debit,
                credit=credit,
                balance=compute_natural_balance(
                    total_debit, total_credit, account.normal_balance,
                ),
            )
        )
    return AccountLedgerReport(
        account_id=account.account_id,
        name=account.name,
        account_type=account.account_type,
        lines=tuple(lines),
        total_debit=total_debit,
        total_credit=total_credit,
        closing_balance=compute_natural_balance(
            total_debit, total_credit, account.normal_balance,
        ),
    )


# =========================================================================
# 5. VAT SUMMARY
# =========================================================================


def build_vat_summary(
    totals: Sequence[AccountTotals],
    *,
    sales_account: str,
    vat_output_account: str,
    vat_input_account: str,
    start: datetime | None = None,
    end: datetime | None = None,
) -> VatSummaryReport:
    """
    Natural balances of the sales and VAT accounts.

    Accounts are matched by name, case-insensitively; a missing account
    contributes zero.
    """
    by_name = {normalize_account_name(t.account.name): t for t in totals}

    def natural(name: str) -> Decimal:
        found = by_name.get(normalize_account_name(name))
        return found.natural_balance if found is not None else ZERO

    return VatSummaryReport(
        total_sales=natural(sales_account),
        sales_vat=natural(vat_output_account),
        purchase_vat=natural(vat_input_account),
        start=start,
        end=end,
    )


# =========================================================================
# 6. DAYBOOK
# =========================================================================


def build_daybook(
    entries: Iterable[JournalEntry],
    account_names: Mapping[UUID, str],
    *,
    start: datetime | None = None,
    end: datetime | None = None,
) -> DaybookReport:
    lines = tuple(
        DaybookLine(
            entry_id=entry.id,
            date=entry.created_at,
            debit_account=account_names.get(
                entry.debit_account_id, str(entry.debit_account_id),
            ),
            credit_account=account_names.get(
                entry.credit_account_id, str(entry.credit_account_id),
            ),
            amount=entry.amount,
            description=entry.description,
            reference_type=entry.reference_type,
            reference_id=entry.reference_id,
        )
        for entry in entries
    )
    return DaybookReport(lines=lines, start=start, end=end)


# =========================================================================
# Rendering
# =========================================================================


def render_to_dict(
    report: Any,
    precision: int = DISPLAY_DECIMAL_PLACES,
    *,
    hide_zero: bool = True,
) -> dict:
    """
    Convert a report dataclass to its response dict.

    Monetary values are Decimals quantized to ``precision`` places; ids are
    strings, timestamps ISO 8601 strings.  Derived figures (difference,
    balance_check, net_profit, closing_balance, vat_payable) are computed
    from the rounded totals so each response is self-consistent.
    ``hide_zero`` only affects the balance sheet sections.
    """
    if isinstance(report, TrialBalanceReport):
        return _render_trial_balance(report, precision)
    if isinstance(report, BalanceSheetReport):
        return _render_balance_sheet(report, precision, hide_zero)
    if isinstance(report, ProfitAndLossReport):
        return _render_profit_and_loss(report, precision)
    if isinstance(report, AccountLedgerReport):
        return _render_account_ledger(report, precision)
    if isinstance(report, VatSummaryReport):
        return _render_vat_summary(report, precision)
    if isinstance(report, DaybookReport):
        return _render_daybook(report, precision)
    raise TypeError(f"Cannot render {type(report).__name__}")


def _render_trial_balance(report: TrialBalanceReport, precision: int) -> dict:
    total_debit = round_money(report.total_debit, precision)
    total_credit = round_money(report.total_credit, precision)
    return {
        "rows": [
            {
                "account_id": str(line.account_id),
                "name": line.name,
                "type": line.account_type.value,
                "debit": round_money(line.debit, precision),
                "credit": round_money(line.credit, precision),
                "balance": round_money(line.balance, precision),
                "natural_balance": round_money(line.natural_balance, precision),
            }
            for line in report.lines
        ],
        "totals": {
            "total_debit": total_debit,
            "total_credit": total_credit,
            "difference": round_money(total_debit - total_credit, precision),
        },
        "entry_count": report.entry_count,
    }


def _section_map(
    lines: Sequence[StatementLine],
    precision: int,
    hide_zero: bool,
) -> dict[str, Decimal]:
    result: dict[str, Decimal] = {}
    for line in lines:
        amount = round_money(line.amount, precision)
        if hide_zero and amount == 0:
            continue
        result[line.name] = amount
    return result


def _render_balance_sheet(
    report: BalanceSheetReport,
    precision: int,
    hide_zero: bool,
) -> dict:
    asset_total = round_money(report.asset_total, precision)
    liability_total = round_money(report.liability_total, precision)
    equity_total = round_money(report.equity_total, precision)
    return {
        "assets": _section_map(report.assets, precision, hide_zero),
        "liabilities": _section_map(report.liabilities, precision, hide_zero),
        "equity": _section_map(report.equity, precision, hide_zero),
        "totals": {
            "asset_total": asset_total,
            "liability_total": liability_total,
            "equity_total": equity_total,
        },
        "balance_check": round_money(
            asset_total - (liability_total + equity_total), precision,
        ),
    }


def _line_list(lines: Sequence[StatementLine], precision: int) -> list[dict]:
    return [
        {
            "account_id": str(line.account_id),
            "name": line.name,
            "amount": round_money(line.amount, precision),
        }
        for line in lines
    ]


def _render_profit_and_loss(report: ProfitAndLossReport, precision: int) -> dict:
    income_total = round_money(report.income_total, precision)
    expense_total = round_money(report.expense_total, precision)
    return {
        "income_total": income_total,
        "expense_total": expense_total,
        "net_profit": round_money(income_total - expense_total, precision),
        "income_accounts": _line_list(report.income_accounts, precision),
        "expense_accounts": _line_list(report.expense_accounts, precision),
    }


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _render_account_ledger(report: AccountLedgerReport, precision: int) -> dict:
    total_debit = round_money(report.total_debit, precision)
    total_credit = round_money(report.total_credit, precision)
    closing = compute_natural_balance(
        total_debit, total_credit, NORMAL_BALANCE_BY_TYPE[report.account_type],
    )
    return {
        "account_id": str(report.account_id),
        "name": report.name,
        "type": report.account_type.value,
        "lines": [
            {
                "entry_id": str(line.entry_id),
                "date": _iso(line.date),
                "description": line.description,
                "reference_type": line.reference_type,
                "reference_id": line.reference_id,
                "counter_account": line.counter_account,
                "debit": round_money(line.debit, precision),
                "credit": round_money(line.credit, precision),
                "balance": round_money(line.balance, precision),
            }
            for line in report.lines
        ],
        "totals": {
            "total_debit": total_debit,
            "total_credit": total_credit,
            "closing_balance": round_money(closing, precision),
        },
    }


def _render_vat_summary(report: VatSummaryReport, precision: int) -> dict:
    sales_vat = round_money(report.sales_vat, precision)
    purchase_vat = round_money(report.purchase_vat, precision)
    return {
        "start": _iso(report.start),
        "end": _iso(report.end),
        "total_sales": round_money(report.total_sales, precision),
        "sales_vat": sales_vat,
        "purchase_vat": purchase_vat,
        "vat_payable": round_money(sales_vat - purchase_vat, precision),
    }


def _render_daybook(report: DaybookReport, precision: int) -> dict:
    rows = [
        {
            "entry_id": str(line.entry_id),
            "date": _iso(line.date),
            "debit_account": line.debit_account,
            "credit_account": line.credit_account,
            "amount": round_money(line.amount, precision),
            "description": line.description,
            "reference_type": line.reference_type,
            "reference_id": line.reference_id,
        }
        for line in report.lines
    ]
    return {
        "start": _iso(report.start),
        "end": _iso(report.end),
        "entries": rows,
        "entry_count": len(rows),
        "total_amount": sum_decimals(row["amount"] for row in rows),
    }
