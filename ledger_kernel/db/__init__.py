"""Database layer - engine, base classes, types, and immutability."""

from ledger_kernel.db.base import UUID, Base, TenantScopedBase, UUIDString
from ledger_kernel.db.engine import create_tables, get_engine, get_session, session_scope
from ledger_kernel.db.types import Money, UTCDateTime, parse_amount, round_money

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TenantScopedBase",
    "UUIDString",
    "UUID",
    "Money",
    "UTCDateTime",
    "parse_amount",
    "round_money",
]
