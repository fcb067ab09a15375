"""
ORM-Level Immutability Enforcement.

The journal and the customer payment register are append-only.  Corrections
are made with new offsetting rows, never by editing or deleting history.

SQLAlchemy fires events before UPDATE/DELETE operations reach the database.
We register listeners that intercept these events:

    session.flush()
         |
         v
    [before_update event] --> _reject_update() --> ImmutabilityViolationError
         |
         v
    [before_delete event] --> _reject_delete() --> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

If a check fails, ImmutabilityViolationError is raised and the transaction
is aborted.  The database is never modified.

Protected entities:

Entity            | When Immutable | Why
------------------|----------------|----------------------------------------
JournalEntry      | ALWAYS         | Append-only ledger
CustomerPayment   | ALWAYS         | Payment register feeds the sub-ledger

Bulk ``UPDATE``/``DELETE`` statements bypass mapper events; production
databases are expected to revoke those privileges on these tables.
"""

from sqlalchemy import event

from ledger_kernel.exceptions import ImmutabilityViolationError
from ledger_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _reject(target, operation: str) -> None:
    entity_type = type(target).__name__
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(target.id),
            "operation": operation,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=f"{entity_type} rows are append-only ({operation} rejected)",
    )


def _reject_update(mapper, connection, target):
    """Prevent modification of append-only rows."""
    _reject(target, "UPDATE")


def _reject_delete(mapper, connection, target):
    """Prevent deletion of append-only rows."""
    _reject(target, "DELETE")


def _append_only_models() -> tuple:
    from ledger_kernel.models.journal import JournalEntry
    from ledger_modules.ar.orm import CustomerPayment

    return (JournalEntry, CustomerPayment)


def register_immutability_listeners() -> None:
    """
    Register all immutability enforcement event listeners (idempotent).

    Call this after all models are imported but before any database
    operations begin.  create_tables() does so automatically.
    """
    for model in _append_only_models():
        if not event.contains(model, "before_update", _reject_update):
            event.listen(model, "before_update", _reject_update)
        if not event.contains(model, "before_delete", _reject_delete):
            event.listen(model, "before_delete", _reject_delete)
