"""
Module: ledger_kernel.models.journal
Responsibility: ORM persistence for journal entries -- the single source of
    financial truth in this system.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - Double entry: every row names exactly one debit account, one credit
      account and one positive amount, so it contributes equally to one debit
      accumulator and one credit accumulator.  Trial balance totals therefore
      always agree.
    - amount > 0 (CHECK constraint, and parse_amount() before insert).
    - Immutability: ORM listeners in db/immutability.py reject UPDATE and
      DELETE.  Corrections are new offsetting entries.

Non-goals:
    - debit_account_id != credit_account_id is a correctness expectation,
      not a constraint.  JournalPostingService logs a warning instead.
    - No status lifecycle, no reversal pointer, no period assignment.

Audit relevance:
    Every report is derived from these rows at request time.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TenantScopedBase, UUIDString

DEFAULT_REFERENCE_TYPE = "invoice"


class JournalEntry(TenantScopedBase):
    """
    One balanced double-entry posting.

    Contract:
        Created once by JournalPostingService; never updated or deleted.
    """

    __tablename__ = "journal_entries"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_journal_amount_positive"),
        Index("idx_journal_tenant_debit", "tenant_id", "debit_account_id"),
        Index("idx_journal_tenant_credit", "tenant_id", "credit_account_id"),
        Index("idx_journal_reference", "tenant_id", "reference_type", "reference_id"),
    )

    debit_account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("coa.id"),
        nullable=False,
    )

    credit_account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("coa.id"),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    description: Mapped[str] = mapped_column(String(4000), nullable=False)

    # Opaque id of the business document (invoice, purchase, ...)
    reference_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    reference_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=DEFAULT_REFERENCE_TYPE,
    )

    def __repr__(self) -> str:
        return (
            f"<JournalEntry {self.id}: Dr {self.debit_account_id} "
            f"Cr {self.credit_account_id} {self.amount}>"
        )
