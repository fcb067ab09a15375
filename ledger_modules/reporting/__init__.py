"""
Financial Reporting Module (``ledger_modules.reporting``).

Responsibility
--------------
Read-only module that derives the trial balance, balance sheet, profit & loss
statement, per-account ledger, VAT summary and daybook from the journal at
request time.

Invariants enforced
-------------------
* No journal entries are created by this module.
* Statements derive entirely from the immutable journal; nothing is cached
  or materialized.
"""

from ledger_modules.reporting.config import ReportingConfig
from ledger_modules.reporting.models import (
    AccountLedgerLine,
    AccountLedgerReport,
    BalanceSheetReport,
    DaybookLine,
    DaybookReport,
    ProfitAndLossReport,
    ReportType,
    StatementLine,
    TrialBalanceLine,
    TrialBalanceReport,
    VatSummaryReport,
)
from ledger_modules.reporting.service import ReportingService
from ledger_modules.reporting.statements import (
    build_account_ledger,
    build_balance_sheet,
    build_daybook,
    build_profit_and_loss,
    build_trial_balance,
    build_vat_summary,
    render_to_dict,
)

__all__ = [
    "AccountLedgerLine",
    "AccountLedgerReport",
    "BalanceSheetReport",
    "DaybookLine",
    "DaybookReport",
    "ProfitAndLossReport",
    "ReportType",
    "ReportingConfig",
    "ReportingService",
    "StatementLine",
    "TrialBalanceLine",
    "TrialBalanceReport",
    "VatSummaryReport",
    "build_account_ledger",
    "build_balance_sheet",
    "build_daybook",
    "build_profit_and_loss",
    "build_trial_balance",
    "build_vat_summary",
    "render_to_dict",
]
