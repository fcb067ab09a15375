"""Domain models for the ledger kernel."""

from ledger_kernel.models.account import (
    BALANCE_SHEET_TYPES,
    NORMAL_BALANCE_BY_TYPE,
    PROFIT_AND_LOSS_TYPES,
    Account,
    AccountType,
    NormalBalance,
    TenantChart,
    normalize_account_name,
)
from ledger_kernel.models.journal import DEFAULT_REFERENCE_TYPE, JournalEntry

__all__ = [
    "Account",
    "AccountType",
    "BALANCE_SHEET_TYPES",
    "DEFAULT_REFERENCE_TYPE",
    "JournalEntry",
    "NORMAL_BALANCE_BY_TYPE",
    "NormalBalance",
    "PROFIT_AND_LOSS_TYPES",
    "TenantChart",
    "normalize_account_name",
]
