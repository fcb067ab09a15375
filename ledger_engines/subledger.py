"""
ledger_engines.subledger -- Pure customer sub-ledger merge.

Responsibility:
    Merge a customer's invoice (debit) and payment (credit) movements into a
    single chronological statement with a running balance.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The stateful loading of
    invoices and payments lives in ``ledger_modules.ar.service``.

Invariants enforced:
    - Single-sided movements: each movement is either a debit or a credit,
      never both (ValueError otherwise).
    - Ordering is total and explicit: (timestamp, invoices before payments
      at the same instant, storage sequence).
    - The running balance is ``previous + debit - credit``, unrounded.  The
      final balance equals the sum of debits minus the sum of credits.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable

from ledger_engines.tracer import traced_engine
from ledger_kernel.db.types import ZERO, ensure_utc
from ledger_kernel.logging_config import get_logger

logger = get_logger("engines.subledger")


class MovementType(str, Enum):
    """Kind of sub-ledger movement."""

    INVOICE = "invoice"
    PAYMENT = "payment"


# Invoices sort ahead of payments posted at the same instant.
_TYPE_RANK = {MovementType.INVOICE: 0, MovementType.PAYMENT: 1}


@dataclass(frozen=True)
class Movement:
    """
    One invoice or payment as it enters the statement.

    ``sequence`` is the storage order of the movement within its type and
    breaks ties between movements with the same timestamp and type.
    """

    timestamp: datetime
    movement_type: MovementType
    description: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    sequence: int = 0

    def __post_init__(self) -> None:
        if (self.debit != ZERO) and (self.credit != ZERO):
            raise ValueError("Movement cannot have both debit and credit")

    @property
    def sort_key(self) -> tuple[datetime, int, int]:
        return (
            ensure_utc(self.timestamp),
            _TYPE_RANK[self.movement_type],
            self.sequence,
        )


@dataclass(frozen=True)
class StatementLine:
    """A statement row with the balance after applying it."""

    date: datetime
    type: MovementType
    description: str
    debit: Decimal
    credit: Decimal
    balance: Decimal


def invoice_movement(
    timestamp: datetime,
    invoice_number: str,
    amount: Decimal,
    sequence: int,
) -> Movement:
    return Movement(
        timestamp=timestamp,
        movement_type=MovementType.INVOICE,
        description=f"Invoice #{invoice_number}",
        debit=amount,
        sequence=sequence,
    )


def payment_movement(
    timestamp: datetime,
    note: str | None,
    amount: Decimal,
    sequence: int,
) -> Movement:
    return Movement(
        timestamp=timestamp,
        movement_type=MovementType.PAYMENT,
        description=note or "Payment",
        credit=amount,
        sequence=sequence,
    )


@traced_engine("subledger", "1.0")
def build_statement(movements: Iterable[Movement]) -> tuple[StatementLine, ...]:
    """
    Sort movements and attach a running balance.

    Returns:
        Statement lines oldest first.  Empty input gives an empty tuple.
    """
    ordered = sorted(movements, key=lambda m: m.sort_key)

    balance = ZERO
    lines: list[StatementLine] = []
    for m in ordered:
        balance += m.debit - m.credit
        lines.append(
            StatementLine(
                date=m.timestamp,
                type=m.movement_type,
                description=m.description,
                debit=m.debit,
                credit=m.credit,
                balance=balance,
            )
        )

    logger.debug(
        "customer_statement_built",
        extra={"line_count": len(lines), "closing_balance": str(balance)},
    )
    return tuple(lines)
