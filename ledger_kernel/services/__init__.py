"""Kernel services: write-side operations over the chart and the journal."""

from ledger_kernel.services.account_registry import AccountRegistry
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.journal_posting import JournalPostingService

__all__ = [
    "AccountRegistry",
    "BaseService",
    "JournalPostingService",
]
