"""
Accounts Payable Module (``ledger_modules.ap``).

Purchase and supplier payment posting recipes.
"""

from ledger_modules.ap.service import PurchaseLedgerService

__all__ = ["PurchaseLedgerService"]
