"""
Module: ledger_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.  Selectors
    form the read side of the kernel, providing tenant-scoped access to ledger
    data without mutation capability.
Architecture position: Kernel > Selectors.  May import from db/ and models/.
    MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors MUST NOT call session.add(), delete(),
      commit() or flush().
    - Tenant scoping: every public selector method takes tenant_id and every
      query it issues filters on it.
    - Session ownership: the caller owns the session and its transaction.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from ledger_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return ORM rows or computed results.  They MUST NOT mutate data.
    """

    def __init__(self, session: Session):
        self.session = session
