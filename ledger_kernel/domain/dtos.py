"""
Request DTOs for the ledger kernel.

Responsibility:
    Typed request structs for the write side.  Callers (HTTP handlers, posting
    recipes) build these instead of passing loose dict payloads, so required
    and optional fields are enumerated in one place and validated before any
    account resolution or database access happens.

Architecture position:
    Kernel > Domain -- pure, zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID

from ledger_kernel.db.types import parse_amount
from ledger_kernel.exceptions import InvalidPostingRequestError
from ledger_kernel.models.account import NORMAL_BALANCE_BY_TYPE, AccountType, NormalBalance
from ledger_kernel.models.journal import DEFAULT_REFERENCE_TYPE

# An account reference is either a chart-of-accounts id or an account name.
AccountRef = UUID | str


@dataclass(frozen=True)
class AccountInfo:
    """
    Snapshot of account metadata needed for classification.

    This is the bridge between the ORM layer (Account model) and the pure
    aggregation functions in ``ledger_engines``.  AccountRegistry converts
    Account rows to AccountInfo before handing them out.
    """

    account_id: UUID
    name: str
    account_type: AccountType
    parent_id: UUID | None = None

    @property
    def normal_balance(self) -> NormalBalance:
        return NORMAL_BALANCE_BY_TYPE[self.account_type]


@dataclass(frozen=True)
class PostingRequest:
    """
    A request to post one double-entry journal entry.

    Required: tenant_id, debit_account, credit_account, amount, description.
    Optional: reference_id, reference_type (defaults to "invoice").

    ``amount`` is normalized by ``parse_amount`` in ``__post_init__``, so a
    constructed request always carries a positive finite Decimal.
    """

    tenant_id: UUID
    debit_account: AccountRef
    credit_account: AccountRef
    amount: Decimal
    description: str
    reference_id: str | None = None
    reference_type: str = DEFAULT_REFERENCE_TYPE

    REQUIRED_FIELDS = (
        "tenant_id",
        "debit_account",
        "credit_account",
        "amount",
        "description",
    )

    def __post_init__(self) -> None:
        missing = [
            name for name in self.REQUIRED_FIELDS
            if name != "amount" and _is_blank(getattr(self, name))
        ]
        if missing:
            raise InvalidPostingRequestError(missing)
        object.__setattr__(self, "amount", parse_amount(self.amount))
        if self.reference_id is not None:
            object.__setattr__(self, "reference_id", str(self.reference_id))
        if not self.reference_type:
            object.__setattr__(self, "reference_type", DEFAULT_REFERENCE_TYPE)

    @classmethod
    def from_dict(cls, tenant_id: UUID, payload: Mapping[str, Any]) -> PostingRequest:
        """
        Build a request from a loose payload (e.g. a parsed request body).

        Unknown keys are ignored.  Missing required keys raise
        InvalidPostingRequestError naming every missing field at once.
        """
        known = {f.name for f in fields(cls)}
        data = {k: v for k, v in payload.items() if k in known and k != "tenant_id"}
        missing = [
            name for name in cls.REQUIRED_FIELDS
            if name != "tenant_id" and _is_blank(data.get(name))
        ]
        if missing:
            raise InvalidPostingRequestError(missing)
        return cls(tenant_id=tenant_id, **data)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False
