"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for the per-tenant Chart of Accounts (COA) --
    the debit/credit target of every journal entry -- and the TenantChart
    guard row that makes default seeding a conditional insert.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - (tenant_id, name_key) is unique: account names are unique per tenant,
      case-insensitively.  name_key is always name.casefold().strip().
    - account_type is one of asset, liability, equity, income, expense.
    - One TenantChart row per seeded tenant (uq_coa_tenant).

Failure modes:
    - IntegrityError on duplicate (tenant_id, name_key).
    - IntegrityError on a second TenantChart row for the same tenant
      (concurrent onboarding); AccountRegistry turns it into a no-op.

Audit relevance:
    Account type determines the normal-balance convention applied by every
    report.  Accounts are never auto-deleted.
"""

from enum import Enum
from uuid import UUID

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TenantScopedBase, UUIDString


class AccountType(str, Enum):
    """Types of accounts in the chart of accounts."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    INCOME = "income"
    EXPENSE = "expense"


class NormalBalance(str, Enum):
    """Normal balance side for an account."""

    DEBIT = "debit"
    CREDIT = "credit"


NORMAL_BALANCE_BY_TYPE: dict[AccountType, NormalBalance] = {
    AccountType.ASSET: NormalBalance.DEBIT,
    AccountType.LIABILITY: NormalBalance.CREDIT,
    AccountType.EQUITY: NormalBalance.CREDIT,
    AccountType.INCOME: NormalBalance.CREDIT,
    AccountType.EXPENSE: NormalBalance.DEBIT,
}

BALANCE_SHEET_TYPES: frozenset[AccountType] = frozenset(
    {AccountType.ASSET, AccountType.LIABILITY, AccountType.EQUITY}
)

PROFIT_AND_LOSS_TYPES: frozenset[AccountType] = frozenset(
    {AccountType.INCOME, AccountType.EXPENSE}
)


def normalize_account_name(name: str) -> str:
    """Case-insensitive lookup key for an account name."""
    return name.strip().casefold()


class Account(TenantScopedBase):
    """
    Chart of Accounts entry for one tenant.

    Contract:
        name is unique per tenant ignoring case.  parent_id is preserved for
        hierarchy but no report consumes it.

    Non-goals:
        - No active/inactive flag; accounts are never retired by this core.
    """

    __tablename__ = "coa"

    __table_args__ = (
        UniqueConstraint("tenant_id", "name_key", name="uq_coa_tenant_name"),
        Index("idx_coa_tenant_type", "tenant_id", "account_type"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Case-folded name used for lookups and the uniqueness constraint
    name_key: Mapped[str] = mapped_column(String(255), nullable=False)

    account_type: Mapped[str] = mapped_column(String(20), nullable=False)

    parent_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Account {self.name} ({self.account_type})>"

    @property
    def type(self) -> AccountType:
        """Account type as the enum member."""
        return AccountType(self.account_type)

    @property
    def normal_balance(self) -> NormalBalance:
        return NORMAL_BALANCE_BY_TYPE[self.type]


class TenantChart(TenantScopedBase):
    """
    Marker row recording that a tenant's default chart has been seeded.

    The unique constraint on tenant_id is the guard that serializes
    concurrent seeding attempts for the same tenant.
    """

    __tablename__ = "coa_tenants"

    __table_args__ = (
        UniqueConstraint("tenant_id", name="uq_coa_tenant"),
    )

    seeded_accounts: Mapped[int] = mapped_column(nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<TenantChart {self.tenant_id}>"
