"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for every
    write-side service in the kernel.  Services receive a SQLAlchemy
    ``Session`` and use ``session.flush()`` -- never ``session.commit()``.

Invariants enforced:
    Transaction boundaries: services flush within the caller's transaction
    and never commit or rollback it themselves (savepoints they open are
    their own).  The caller (LedgerAPI, a module service, or a test) owns
    commit/rollback.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from ledger_kernel.db.base import Base
from ledger_kernel.domain.clock import Clock, SystemClock

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and an optional
        ``Clock``; persists with ``session.flush()`` inside the active
        transaction.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()
