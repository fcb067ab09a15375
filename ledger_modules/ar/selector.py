"""
Accounts Receivable selector (``ledger_modules.ar.selector``).

Tenant-scoped read queries over invoices and customer payments.  Returns
frozen DTOs from ``models.py``, never ORM rows.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Collection
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from ledger_kernel.db.types import ZERO
from ledger_kernel.logging_config import get_logger
from ledger_kernel.selectors.base import BaseSelector
from ledger_modules.ar.models import InvoiceInfo, PaymentInfo
from ledger_modules.ar.orm import CustomerPayment, Invoice

logger = get_logger("modules.ar.selector")


class ReceivablesSelector(BaseSelector[Invoice]):
    """Read-only access to a tenant's invoices and payments."""

    def get_invoice(self, tenant_id: UUID, invoice_id: UUID) -> InvoiceInfo | None:
        stmt = (
            select(Invoice)
            .where(Invoice.tenant_id == tenant_id)
            .where(Invoice.id == invoice_id)
        )
        invoice = self.session.scalars(stmt).first()
        return invoice.to_dto() if invoice is not None else None

    def invoices_for_customer(
        self,
        tenant_id: UUID,
        customer_id: UUID,
    ) -> list[InvoiceInfo]:
        """The customer's invoices, oldest first."""
        stmt = (
            select(Invoice)
            .where(Invoice.tenant_id == tenant_id)
            .where(Invoice.customer_id == customer_id)
            .order_by(Invoice.created_at, Invoice.id)
        )
        return [inv.to_dto() for inv in self.session.scalars(stmt)]

    def invoices_for_tenant(self, tenant_id: UUID) -> list[InvoiceInfo]:
        """Every invoice of the tenant, oldest first."""
        stmt = (
            select(Invoice)
            .where(Invoice.tenant_id == tenant_id)
            .order_by(Invoice.created_at, Invoice.id)
        )
        return [inv.to_dto() for inv in self.session.scalars(stmt)]

    def payments_for_invoices(
        self,
        tenant_id: UUID,
        invoice_ids: Collection[UUID],
    ) -> list[PaymentInfo]:
        """Payments against any of ``invoice_ids``, oldest first."""
        if not invoice_ids:
            return []
        stmt = (
            select(CustomerPayment)
            .where(CustomerPayment.tenant_id == tenant_id)
            .where(CustomerPayment.invoice_id.in_(list(invoice_ids)))
            .order_by(CustomerPayment.created_at, CustomerPayment.id)
        )
        return [p.to_dto() for p in self.session.scalars(stmt)]

    def paid_by_invoice(
        self,
        tenant_id: UUID,
        invoice_ids: Collection[UUID],
    ) -> dict[UUID, Decimal]:
        """Total paid per invoice.  Invoices without payments are absent."""
        if not invoice_ids:
            return {}
        stmt = (
            select(CustomerPayment.invoice_id, CustomerPayment.amount)
            .where(CustomerPayment.tenant_id == tenant_id)
            .where(CustomerPayment.invoice_id.in_(list(invoice_ids)))
        )
        totals: dict[UUID, Decimal] = defaultdict(lambda: ZERO)
        for invoice_id, amount in self.session.execute(stmt):
            totals[invoice_id] += amount
        logger.debug(
            "payments_summed",
            extra={
                "tenant_id": str(tenant_id),
                "invoice_count": len(invoice_ids),
                "paid_invoice_count": len(totals),
            },
        )
        return dict(totals)
