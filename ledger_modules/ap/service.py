"""
Accounts Payable Module Service - purchase and supplier payment postings.

Thin glue over JournalPostingService:

    Purchase (cash):    Dr Inventory  / Cr Cash               (net)
                        Dr VAT Input  / Cr Cash               (tax)
    Purchase (credit):  Dr Inventory  / Cr Accounts Payable   (net)
                        Dr VAT Input  / Cr Accounts Payable   (tax)
    Supplier payment:   Dr Accounts Payable / Cr Cash

Zero lines are skipped.  The caller owns the transaction.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.db.types import parse_amount
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.journal_posting import JournalPostingService
from ledger_modules._posting_helpers import RecipeLine, coerce_total, post_recipe

logger = get_logger("modules.ap.service")

CASH_ACCOUNT = "Cash"
INVENTORY_ACCOUNT = "Inventory"
VAT_INPUT_ACCOUNT = "VAT Input"
PAYABLE_ACCOUNT = "Accounts Payable"

CREDIT_PAYMENT_METHOD = "credit"


class PurchaseLedgerService:
    """Posts supplier-side documents to the journal."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        poster: JournalPostingService | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._poster = poster or JournalPostingService(session, self._clock)

    def record_purchase(
        self,
        tenant_id: UUID,
        purchase_id,
        invoice_number: str,
        net_total,
        tax_total=None,
        payment_method: str = "cash",
    ) -> list[UUID]:
        """
        Post a supplier invoice.

        Returns:
            Ids of the posted entries (net line first, then tax).
        """
        net = coerce_total(net_total, "net_total")
        tax = coerce_total(tax_total, "tax_total")
        method = (payment_method or "cash").strip().lower()
        credit_account = (
            PAYABLE_ACCOUNT if method == CREDIT_PAYMENT_METHOD else CASH_ACCOUNT
        )

        description = f"Purchase #{invoice_number}"
        entry_ids = post_recipe(
            self._poster,
            tenant_id,
            str(purchase_id),
            [
                RecipeLine(
                    debit_account=INVENTORY_ACCOUNT,
                    credit_account=credit_account,
                    amount=net,
                    description=f"{description} - Inventory",
                    reference_type="purchase",
                ),
                RecipeLine(
                    debit_account=VAT_INPUT_ACCOUNT,
                    credit_account=credit_account,
                    amount=tax,
                    description=f"{description} - VAT",
                    reference_type="purchase",
                ),
            ],
        )
        logger.info(
            "purchase_posted",
            extra={
                "tenant_id": str(tenant_id),
                "purchase_id": str(purchase_id),
                "payment_method": method,
                "entry_count": len(entry_ids),
            },
        )
        return entry_ids

    def record_supplier_payment(
        self,
        tenant_id: UUID,
        purchase_id,
        amount,
    ) -> UUID:
        """Post Dr Accounts Payable / Cr Cash for a payment on a purchase."""
        value = parse_amount(amount)
        entry_id = self._poster.post_entry(
            tenant_id=tenant_id,
            debit_account=PAYABLE_ACCOUNT,
            credit_account=CASH_ACCOUNT,
            amount=value,
            description=f"Payment for Purchase #{purchase_id}",
            reference_id=str(purchase_id),
            reference_type="purchase_payment",
        )
        logger.info(
            "supplier_payment_posted",
            extra={
                "tenant_id": str(tenant_id),
                "purchase_id": str(purchase_id),
                "amount": str(value),
            },
        )
        return entry_id
