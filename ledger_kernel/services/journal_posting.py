"""
JournalPostingService -- records double-entry journal entries.

Responsibility:
    Validates a posting request, resolves both account references within the
    tenant, and appends exactly one JournalEntry row.  This is the only write
    path into ``journal_entries``.

Architecture position:
    Kernel > Services.  Uses AccountRegistry for resolution.

Invariants enforced:
    - Amount is a finite positive Decimal before anything is resolved or
      written (InvalidAmountError otherwise).
    - Both accounts belong to the request's tenant.
    - One request produces one row; the service flushes, the caller commits.

Failure modes:
    - InvalidPostingRequestError / InvalidAmountError: malformed request.
    - TenantNotFoundError: tenant has no chart of accounts.
    - AccountNotFoundError: either reference is unknown to the tenant.
    - SQLAlchemyError: propagated from flush; nothing is written.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.dtos import AccountRef, PostingRequest
from ledger_kernel.exceptions import TenantNotFoundError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.journal import DEFAULT_REFERENCE_TYPE, JournalEntry
from ledger_kernel.services.account_registry import AccountRegistry
from ledger_kernel.services.base import BaseService

logger = get_logger("services.journal_posting")


class JournalPostingService(BaseService[JournalEntry]):
    """Append-only writer for the journal."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        registry: AccountRegistry | None = None,
    ):
        super().__init__(session, clock)
        self.registry = registry or AccountRegistry(session, self.clock)

    def post(self, request: PostingRequest) -> UUID:
        """
        Post one entry and return its id.

        Preconditions:
            ``request`` was constructed successfully, so required fields are
            present and ``amount`` is a positive Decimal.
        """
        tenant_id = request.tenant_id
        if not self.registry.has_chart(tenant_id):
            logger.warning(
                "posting_rejected_unknown_tenant",
                extra={"tenant_id": str(tenant_id)},
            )
            raise TenantNotFoundError(str(tenant_id))

        debit_id = self.registry.resolve_ref(tenant_id, request.debit_account)
        credit_id = self.registry.resolve_ref(tenant_id, request.credit_account)

        if debit_id == credit_id:
            logger.warning(
                "posting_same_account_both_sides",
                extra={
                    "tenant_id": str(tenant_id),
                    "account_id": str(debit_id),
                    "reference_id": request.reference_id,
                },
            )

        entry = JournalEntry(
            tenant_id=tenant_id,
            debit_account_id=debit_id,
            credit_account_id=credit_id,
            amount=request.amount,
            description=request.description,
            reference_id=request.reference_id,
            reference_type=request.reference_type,
            created_at=self.clock.now(),
        )
        self.session.add(entry)
        self.session.flush()

        with LogContext.bind(tenant_id=tenant_id, entry_id=entry.id):
            logger.info(
                "journal_entry_posted",
                extra={
                    "debit_account_id": str(debit_id),
                    "credit_account_id": str(credit_id),
                    "amount": str(request.amount),
                    "reference_type": request.reference_type,
                    "reference_id": request.reference_id,
                },
            )
        return entry.id

    def post_entry(
        self,
        tenant_id: UUID,
        debit_account: AccountRef,
        credit_account: AccountRef,
        amount: Decimal | int | str,
        description: str,
        reference_id: str | None = None,
        reference_type: str = DEFAULT_REFERENCE_TYPE,
    ) -> UUID:
        """Keyword form of ``post``."""
        request = PostingRequest(
            tenant_id=tenant_id,
            debit_account=debit_account,
            credit_account=credit_account,
            amount=amount,
            description=description,
            reference_id=reference_id,
            reference_type=reference_type,
        )
        return self.post(request)
