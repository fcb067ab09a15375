"""
Accounts Receivable ORM Models (``ledger_modules.ar.orm``).

Responsibility
--------------
SQLAlchemy persistence models for customer invoices and the payments
received against them.  Invoices are written by the billing collaborator;
the ledger only reads them.  Payments are appended by
``CustomerSubledgerService.record_payment``.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``ledger_kernel.db.base``
and sibling ``models.py``.  The kernel only touches ``CustomerPayment``
lazily, to register its immutability listeners.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TenantScopedBase, UUIDString


# ---------------------------------------------------------------------------
# 1. Invoice
# ---------------------------------------------------------------------------


class Invoice(TenantScopedBase):
    """
    ORM model for a customer invoice.

    Guarantees:
        - final_amount is the amount the customer owes for the invoice.
        - customer_id is None for walk-in sales; such invoices never appear
          in a customer ledger but still age.
    """

    __tablename__ = "invoices"

    __table_args__ = (
        Index("idx_invoices_tenant_customer", "tenant_id", "customer_id"),
        Index("idx_invoices_tenant_created", "tenant_id", "created_at"),
    )

    customer_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False)
    final_amount: Mapped[Decimal] = mapped_column(nullable=False)

    def to_dto(self):
        """Convert ORM model to frozen dataclass."""
        from ledger_modules.ar.models import InvoiceInfo

        return InvoiceInfo(
            id=self.id,
            customer_id=self.customer_id,
            invoice_number=self.invoice_number,
            final_amount=self.final_amount,
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        return f"<Invoice #{self.invoice_number}: {self.final_amount}>"


# ---------------------------------------------------------------------------
# 2. CustomerPayment
# ---------------------------------------------------------------------------


class CustomerPayment(TenantScopedBase):
    """
    ORM model for a payment received against an invoice.

    Guarantees:
        - amount > 0 (CHECK constraint).
        - Append-only: immutability listeners reject UPDATE and DELETE.
        - An invoice may receive any number of partial payments.
    """

    __tablename__ = "customer_payments"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_customer_payment_amount_positive"),
        Index("idx_customer_payments_tenant_invoice", "tenant_id", "invoice_id"),
    )

    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("invoices.id"),
        nullable=False,
    )
    customer_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    method: Mapped[str] = mapped_column(String(20), nullable=False, default="cash")
    note: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    def to_dto(self):
        """Convert ORM model to frozen dataclass."""
        from ledger_modules.ar.models import PaymentInfo

        return PaymentInfo(
            id=self.id,
            invoice_id=self.invoice_id,
            customer_id=self.customer_id,
            amount=self.amount,
            method=self.method,
            note=self.note,
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        return f"<CustomerPayment {self.amount} for invoice {self.invoice_id}>"
