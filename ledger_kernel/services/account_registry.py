"""
AccountRegistry -- the per-tenant chart of accounts.

Responsibility:
    Owns account identity and type.  Seeds a tenant's default account set,
    resolves human-readable account names (case-insensitively) into ids for
    posting, and lists accounts by type for the report engine.

Architecture position:
    Kernel > Services.  Reads and writes ``coa`` / ``coa_tenants``.

Invariants enforced:
    - Tenant scoping: every lookup filters on tenant_id.  An account id that
      belongs to another tenant resolves exactly like an unknown id.
    - Loud resolution: an unknown name raises AccountNotFoundError; a posting
      is never silently skipped.
    - Idempotent seeding: seed_defaults() inserts the default table only when
      the tenant has no accounts, and the unique TenantChart row turns a lost
      concurrent race into a no-op.

Failure modes:
    - AccountNotFoundError from resolve()/get()/resolve_ref().
    - DuplicateAccountError / InvalidAccountTypeError from create_account().
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.dtos import AccountInfo, AccountRef
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    DuplicateAccountError,
    InvalidAccountTypeError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import (
    Account,
    AccountType,
    TenantChart,
    normalize_account_name,
)
from ledger_kernel.services.base import BaseService

logger = get_logger("services.account_registry")


def coerce_account_type(value: AccountType | str) -> AccountType:
    """Return ``value`` as an AccountType or raise InvalidAccountTypeError."""
    if isinstance(value, AccountType):
        return value
    try:
        return AccountType(str(value).strip().lower())
    except ValueError:
        raise InvalidAccountTypeError(str(value)) from None


class AccountRegistry(BaseService[Account]):
    """
    Chart-of-accounts service.

    All public methods return AccountInfo DTOs or ids, never ORM rows.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        default_chart: Mapping[str, AccountType] | None = None,
    ):
        super().__init__(session, clock)
        self._default_chart = default_chart

    # =========================================================================
    # Internal helpers
    # =========================================================================

    @staticmethod
    def _to_info(account: Account) -> AccountInfo:
        return AccountInfo(
            account_id=account.id,
            name=account.name,
            account_type=account.type,
            parent_id=account.parent_id,
        )

    def _chart(self) -> Mapping[str, AccountType]:
        if self._default_chart is None:
            from ledger_config import get_default_chart

            self._default_chart = get_default_chart().accounts
        return self._default_chart

    def _find_by_name(self, tenant_id: UUID, name: str) -> Account | None:
        stmt = (
            select(Account)
            .where(Account.tenant_id == tenant_id)
            .where(Account.name_key == normalize_account_name(name))
        )
        return self.session.scalars(stmt).first()

    def _find_by_id(self, tenant_id: UUID, account_id: UUID) -> Account | None:
        stmt = (
            select(Account)
            .where(Account.tenant_id == tenant_id)
            .where(Account.id == account_id)
        )
        return self.session.scalars(stmt).first()

    # =========================================================================
    # Queries
    # =========================================================================

    def has_chart(self, tenant_id: UUID) -> bool:
        """True if the tenant has at least one account."""
        stmt = select(exists().where(Account.tenant_id == tenant_id))
        return bool(self.session.scalar(stmt))

    def resolve(self, tenant_id: UUID, name: str) -> UUID:
        """
        Resolve an account name to its id (case-insensitive exact match).

        Raises:
            AccountNotFoundError: If no account of the tenant has that name.
        """
        account = self._find_by_name(tenant_id, name)
        if account is None:
            logger.warning(
                "account_name_unresolved",
                extra={"tenant_id": str(tenant_id), "account_name": name},
            )
            raise AccountNotFoundError(name, str(tenant_id))
        return account.id

    def get(self, tenant_id: UUID, account_id: UUID) -> AccountInfo:
        """
        Get one account of the tenant by id.

        Raises:
            AccountNotFoundError: If the id is unknown or belongs to another tenant.
        """
        account = self._find_by_id(tenant_id, account_id)
        if account is None:
            raise AccountNotFoundError(str(account_id), str(tenant_id))
        return self._to_info(account)

    def resolve_ref(self, tenant_id: UUID, ref: AccountRef) -> UUID:
        """
        Resolve an account reference that is either an id or a name.

        Strings that parse as UUIDs are treated as ids.
        """
        if isinstance(ref, UUID):
            return self.get(tenant_id, ref).account_id
        try:
            account_id = UUID(str(ref))
        except ValueError:
            return self.resolve(tenant_id, str(ref))
        return self.get(tenant_id, account_id).account_id

    def list_by_type(
        self,
        tenant_id: UUID,
        types: Collection[AccountType | str] | None = None,
    ) -> list[AccountInfo]:
        """
        Accounts of the tenant whose type is in ``types`` (all when None).

        Ordered by name.
        """
        stmt = select(Account).where(Account.tenant_id == tenant_id)
        if types is not None:
            wanted = sorted({coerce_account_type(t).value for t in types})
            if not wanted:
                return []
            stmt = stmt.where(Account.account_type.in_(wanted))
        stmt = stmt.order_by(Account.name_key, Account.name)
        return [self._to_info(a) for a in self.session.scalars(stmt)]

    # =========================================================================
    # Writes
    # =========================================================================

    def create_account(
        self,
        tenant_id: UUID,
        name: str,
        account_type: AccountType | str,
        parent_id: UUID | None = None,
    ) -> AccountInfo:
        """
        Add a custom account to the tenant's chart.

        Raises:
            InvalidAccountTypeError: If the type is not supported.
            DuplicateAccountError: If the name is taken (case-insensitive).
            AccountNotFoundError: If parent_id is not an account of the tenant.
        """
        acct_type = coerce_account_type(account_type)
        clean_name = name.strip()
        if self._find_by_name(tenant_id, clean_name) is not None:
            raise DuplicateAccountError(clean_name, str(tenant_id))
        if parent_id is not None:
            self.get(tenant_id, parent_id)

        account = Account(
            tenant_id=tenant_id,
            name=clean_name,
            name_key=normalize_account_name(clean_name),
            account_type=acct_type.value,
            parent_id=parent_id,
            created_at=self.clock.now(),
        )
        self.session.add(account)
        self.session.flush()
        logger.info(
            "account_created",
            extra={
                "tenant_id": str(tenant_id),
                "account_id": str(account.id),
                "account_name": clean_name,
                "account_type": acct_type.value,
            },
        )
        return self._to_info(account)

    def seed_defaults(self, tenant_id: UUID) -> int:
        """
        Seed the default chart of accounts for a tenant (idempotent).

        Postconditions:
            The tenant has at least the default accounts.  Returns the number
            of accounts inserted by this call (0 when already seeded or when
            a concurrent call won the TenantChart guard).
        """
        if self.has_chart(tenant_id):
            logger.info(
                "default_chart_already_present",
                extra={"tenant_id": str(tenant_id)},
            )
            return 0

        now = self.clock.now()
        chart = self._chart()
        accounts = [
            Account(
                tenant_id=tenant_id,
                name=name,
                name_key=normalize_account_name(name),
                account_type=account_type.value,
                parent_id=None,
                created_at=now,
            )
            for name, account_type in chart.items()
        ]

        try:
            with self.session.begin_nested():
                # Guard row first: a concurrent seeder fails here, before
                # any account is inserted.
                self.session.add(
                    TenantChart(
                        tenant_id=tenant_id,
                        seeded_accounts=len(accounts),
                        created_at=now,
                    )
                )
                self.session.flush()
                self.session.add_all(accounts)
                self.session.flush()
        except IntegrityError:
            logger.warning(
                "default_chart_seed_skipped",
                extra={
                    "tenant_id": str(tenant_id),
                    "reason": "tenant chart guard already present",
                },
            )
            return 0

        logger.info(
            "default_chart_seeded",
            extra={"tenant_id": str(tenant_id), "account_count": len(accounts)},
        )
        return len(accounts)
