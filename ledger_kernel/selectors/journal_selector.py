"""
Module: ledger_kernel.selectors.journal_selector
Responsibility: Tenant-scoped read queries over journal entries.  Feeds the
    account-centric aggregation used by every report.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - No stored balances.  Callers aggregate the returned rows at request time.
    - Every query filters on tenant_id, including the account-membership
      filter: an entry of another tenant can never match even if account ids
      were somehow shared.

Failure modes:
    - Returns an empty list when account_ids is empty, without querying.
    - SQLAlchemyError propagates; the facade translates it.
"""

from collections.abc import Collection
from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, func, or_, select

from ledger_kernel.db.types import ensure_utc
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import JournalEntry
from ledger_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.journal")


class JournalSelector(BaseSelector[JournalEntry]):
    """Read-only access to a tenant's journal."""

    def entries_touching(
        self,
        tenant_id: UUID,
        account_ids: Collection[UUID],
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[JournalEntry]:
        """
        Entries whose debit or credit account is in ``account_ids``.

        ``start``/``end`` bound ``created_at`` as a half-open interval.
        Ordered by created_at then id for stable iteration.
        """
        if not account_ids:
            return []

        ids = list(account_ids)
        query = self._within(
            select(JournalEntry)
            .where(JournalEntry.tenant_id == tenant_id)
            .where(
                or_(
                    JournalEntry.debit_account_id.in_(ids),
                    JournalEntry.credit_account_id.in_(ids),
                )
            ),
            start,
            end,
        ).order_by(JournalEntry.created_at, JournalEntry.id)
        entries = list(self.session.scalars(query))
        logger.debug(
            "journal_entries_loaded",
            extra={
                "tenant_id": str(tenant_id),
                "account_count": len(ids),
                "entry_count": len(entries),
            },
        )
        return entries

    def listing(
        self,
        tenant_id: UUID,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[JournalEntry]:
        """Every entry of the tenant in ``[start, end)``, oldest first."""
        query = self._within(
            select(JournalEntry).where(JournalEntry.tenant_id == tenant_id),
            start,
            end,
        ).order_by(JournalEntry.created_at, JournalEntry.id)
        return list(self.session.scalars(query))

    @staticmethod
    def _within(query: Select, start: datetime | None, end: datetime | None) -> Select:
        if start is not None:
            query = query.where(JournalEntry.created_at >= ensure_utc(start))
        if end is not None:
            query = query.where(JournalEntry.created_at < ensure_utc(end))
        return query

    def count(self, tenant_id: UUID) -> int:
        """Number of journal entries recorded for the tenant."""
        query = (
            select(func.count())
            .select_from(JournalEntry)
            .where(JournalEntry.tenant_id == tenant_id)
        )
        return int(self.session.scalar(query) or 0)

    def by_reference(
        self,
        tenant_id: UUID,
        reference_type: str,
        reference_id: str,
    ) -> list[JournalEntry]:
        """Entries posted for one business document."""
        query = (
            select(JournalEntry)
            .where(JournalEntry.tenant_id == tenant_id)
            .where(JournalEntry.reference_type == reference_type)
            .where(JournalEntry.reference_id == str(reference_id))
            .order_by(JournalEntry.created_at, JournalEntry.id)
        )
        return list(self.session.scalars(query))

    def get(self, tenant_id: UUID, entry_id: UUID) -> JournalEntry | None:
        """One entry by id, or None if it does not belong to the tenant."""
        query = (
            select(JournalEntry)
            .where(JournalEntry.tenant_id == tenant_id)
            .where(JournalEntry.id == entry_id)
        )
        return self.session.scalars(query).first()
