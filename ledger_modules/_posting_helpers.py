"""
Shared helpers for module posting recipes.

Used by ledger_modules/ar and ledger_modules/ap to turn a business document
(sale, payment, purchase) into a list of journal postings and push them
through JournalPostingService in one session.

Architecture: Modules layer. Imports only from ledger_kernel.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable
from uuid import UUID

from ledger_kernel.db.types import ZERO, check_storable
from ledger_kernel.exceptions import InvalidAmountError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.journal_posting import JournalPostingService

logger = get_logger("modules.posting_helpers")


@dataclass(frozen=True)
class RecipeLine:
    """One debit/credit pair produced by a posting recipe."""

    debit_account: str
    credit_account: str
    amount: Decimal
    description: str
    reference_type: str


def coerce_total(value: object, field_name: str) -> Decimal:
    """
    Convert a document total into a non-negative Decimal.

    ``None`` is zero.  Unlike ``parse_amount``, zero is accepted: recipes skip
    zero lines instead of rejecting the document.

    Raises:
        InvalidAmountError: If the value is boolean, non-numeric, non-finite
            or negative.
    """
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise InvalidAmountError(value, f"{field_name} must be numeric")
    try:
        total = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidAmountError(value, f"{field_name} is not a number") from None
    if not total.is_finite():
        raise InvalidAmountError(value, f"{field_name} must be finite")
    if total < ZERO:
        raise InvalidAmountError(value, f"{field_name} must not be negative")
    check_storable(total, value)
    return total


def post_recipe(
    poster: JournalPostingService,
    tenant_id: UUID,
    reference_id: str,
    lines: Iterable[RecipeLine],
) -> list[UUID]:
    """
    Post every non-zero line; return the new entry ids in line order.

    The caller owns the transaction, so a failure on any line leaves the
    whole recipe to be rolled back together.
    """
    entry_ids: list[UUID] = []
    for line in lines:
        if line.amount <= ZERO:
            logger.debug(
                "recipe_line_skipped_zero",
                extra={
                    "tenant_id": str(tenant_id),
                    "reference_id": reference_id,
                    "reference_type": line.reference_type,
                },
            )
            continue
        entry_ids.append(
            poster.post_entry(
                tenant_id=tenant_id,
                debit_account=line.debit_account,
                credit_account=line.credit_account,
                amount=line.amount,
                description=line.description,
                reference_id=reference_id,
                reference_type=line.reference_type,
            )
        )
    return entry_ids
