"""
Module: ledger_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.  Provides
    the UUID primary key convention, the type annotation map for consistent
    column types, and the TenantScopedBase mixin carrying tenant_id and
    created_at.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - UUID primary keys: every model inherits a uuid4-generated primary key.
    - Decimal precision: type_annotation_map maps Python Decimal to
      Numeric(38, 9).  NEVER use float for monetary amounts.
    - Tenant scoping: every TenantScopedBase row carries a non-null, indexed
      tenant_id.  Queries against these tables MUST filter on it.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import BigInteger, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from ledger_kernel.db.types import UTCDateTime


class UUIDString(TypeDecorator):
    """UUID stored as String(36) so the same schema runs on SQLite and PostgreSQL."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else PyUUID(value)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is always a uuid4-generated UUID stored as String(36).
        - Decimal maps to Numeric(38, 9) -- financial-grade precision.
        - datetime maps to UTCDateTime -- always timezone-aware UTC.
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: UTCDateTime(),
        PyUUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


class TenantScopedBase(Base):
    """
    Abstract base for every tenant-owned row.

    Contract:
        tenant_id is set once at creation and never changes.  created_at is
        normally supplied by the writing service from its injected Clock; the
        column default is a fallback for direct inserts.
    """

    __abstract__ = True

    tenant_id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=_utcnow,
        nullable=False,
    )


# Re-export UUID for convenience
UUID = PyUUID
