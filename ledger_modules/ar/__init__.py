"""
Accounts Receivable Module (``ledger_modules.ar``).

Customer sub-ledger: per-customer statements with running balance,
receivable ageing, payment recording and sale posting recipes.
"""

from ledger_modules.ar.models import (
    InvoiceInfo,
    PaymentInfo,
    PaymentMethod,
    settlement_account,
)
from ledger_modules.ar.orm import CustomerPayment, Invoice
from ledger_modules.ar.selector import ReceivablesSelector
from ledger_modules.ar.service import CustomerSubledgerService

__all__ = [
    "CustomerPayment",
    "CustomerSubledgerService",
    "Invoice",
    "InvoiceInfo",
    "PaymentInfo",
    "PaymentMethod",
    "ReceivablesSelector",
    "settlement_account",
]
