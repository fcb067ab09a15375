"""
Accounts Receivable Domain Models (``ledger_modules.ar.models``).

Frozen value objects exchanged between the AR selector, the sub-ledger
service and callers.  Zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

# Settlement accounts used when money comes in or goes out.
CASH_ACCOUNT = "Cash"
BANK_ACCOUNT = "Bank"
RECEIVABLE_ACCOUNT = "Accounts Receivable"
SALES_ACCOUNT = "Sales"
VAT_OUTPUT_ACCOUNT = "VAT Output"
COGS_ACCOUNT = "Cost of Goods Sold"
INVENTORY_ACCOUNT = "Inventory"


class PaymentMethod(str, Enum):
    """How a customer settled (part of) an invoice."""

    CASH = "cash"
    UPI = "upi"
    CARD = "card"
    BANK = "bank"
    CREDIT = "credit"


# Methods that land in the bank account; everything else is cash.
BANK_METHODS = frozenset({PaymentMethod.UPI, PaymentMethod.CARD, PaymentMethod.BANK})


def settlement_account(method: str | None) -> str:
    """Account that receives money paid with ``method``."""
    normalized = (method or "").strip().lower()
    if normalized in {m.value for m in BANK_METHODS}:
        return BANK_ACCOUNT
    return CASH_ACCOUNT


@dataclass(frozen=True)
class InvoiceInfo:
    """Read-only snapshot of an invoice."""

    id: UUID
    customer_id: UUID | None
    invoice_number: str
    final_amount: Decimal
    created_at: datetime


@dataclass(frozen=True)
class PaymentInfo:
    """Read-only snapshot of a customer payment."""

    id: UUID
    invoice_id: UUID
    customer_id: UUID | None
    amount: Decimal
    method: str
    note: str
    created_at: datetime

