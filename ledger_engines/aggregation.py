"""
Module: ledger_engines.aggregation
Responsibility:
    Account-centric accumulation of journal entries into per-account debit
    and credit totals, plus the normal-balance convention that turns those
    totals into a signed balance.  Every report is built on this.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ledger_kernel domain/model types.

Invariants enforced:
    - Decimal-only arithmetic; no rounding during accumulation.
    - One entry adds its amount to the debit accumulator of its debit
      account and, independently, to the credit accumulator of its credit
      account.  Accounts outside the tracked set are ignored, so a report
      over a subset of types still sees every entry touching that subset.
    - Output preserves the order of the ``accounts`` argument.

Usage:
    from ledger_engines.aggregation import accumulate

    totals = accumulate(accounts=accounts, entries=entries)
    for t in totals:
        print(t.account.name, t.debit, t.credit, t.natural_balance)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Protocol, Sequence
from uuid import UUID

from ledger_engines.tracer import traced_engine
from ledger_kernel.db.types import ZERO
from ledger_kernel.domain.dtos import AccountInfo
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import NormalBalance

logger = get_logger("engines.aggregation")


class PostingLike(Protocol):
    """Minimal shape of a journal entry as seen by the aggregation engine."""

    debit_account_id: UUID
    credit_account_id: UUID
    amount: Decimal


def compute_natural_balance(
    debit_total: Decimal,
    credit_total: Decimal,
    normal_balance: NormalBalance,
) -> Decimal:
    """
    Compute balance adjusted for normal balance side.

    DEBIT-normal (ASSET, EXPENSE): balance = debit_total - credit_total
    CREDIT-normal (LIABILITY, EQUITY, INCOME): balance = credit_total - debit_total

    Result is positive when account has its expected normal direction.
    """
    if normal_balance == NormalBalance.DEBIT:
        return debit_total - credit_total
    return credit_total - debit_total


@dataclass(frozen=True)
class AccountTotals:
    """Raw debit/credit sums for one account."""

    account: AccountInfo
    debit: Decimal
    credit: Decimal

    @property
    def balance(self) -> Decimal:
        """Debit-minus-credit balance, regardless of account type."""
        return self.debit - self.credit

    @property
    def natural_balance(self) -> Decimal:
        return compute_natural_balance(
            self.debit, self.credit, self.account.normal_balance,
        )


@traced_engine("aggregation", "1.0", fingerprint_fields=("accounts",))
def accumulate(
    *,
    accounts: Sequence[AccountInfo],
    entries: Iterable[PostingLike],
) -> list[AccountTotals]:
    """
    Sum entry amounts per tracked account.

    Args:
        accounts: The tracked account set (already tenant- and type-filtered).
        entries: Journal entries touching at least one tracked account.

    Returns:
        One AccountTotals per tracked account, in ``accounts`` order.
        Accounts with no activity carry zero totals.
    """
    debits: dict[UUID, Decimal] = {a.account_id: ZERO for a in accounts}
    credits: dict[UUID, Decimal] = {a.account_id: ZERO for a in accounts}

    entry_count = 0
    for entry in entries:
        entry_count += 1
        if entry.debit_account_id in debits:
            debits[entry.debit_account_id] += entry.amount
        if entry.credit_account_id in credits:
            credits[entry.credit_account_id] += entry.amount

    logger.debug(
        "entries_accumulated",
        extra={"account_count": len(accounts), "entry_count": entry_count},
    )

    return [
        AccountTotals(
            account=a,
            debit=debits[a.account_id],
            credit=credits[a.account_id],
        )
        for a in accounts
    ]


def sum_decimals(values: Iterable[Decimal]) -> Decimal:
    """Decimal sum starting from an exact zero."""
    return sum(values, ZERO)
