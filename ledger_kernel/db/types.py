"""
Module: ledger_kernel.db.types
Responsibility: Annotated type aliases, column types and utility functions for
    financial-grade values.  Centralizes precision, rounding, amount parsing and
    timestamp normalization so that every model and service uses identical
    definitions.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, selectors/ and outer layers.  MUST NOT import from any of them
    (exceptions.py is the one allowed kernel import).

Invariants enforced:
    - No floats in stored or emitted amounts.  All monetary amounts use
      Decimal with explicit precision.
    - round_money() is the ONLY sanctioned rounding function.  It is applied
      at the point of emission, never during accumulation.
    - parse_amount() is the ONLY sanctioned conversion from caller input to a
      postable amount (positive, finite).
    - UTCDateTime always hands back timezone-aware UTC datetimes, including on
      backends (SQLite) that drop tzinfo.

Failure modes:
    - InvalidAmountError from parse_amount() on non-numeric, non-finite or
      non-positive input.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Annotated

from sqlalchemy import DateTime, Numeric, String
from sqlalchemy.types import TypeDecorator

from ledger_kernel.exceptions import InvalidAmountError

# Monetary amount with high precision
# 38 digits total, 9 decimal places
Money = Annotated[Decimal, Numeric(38, 9)]

# Short identifier strings
ShortCode = Annotated[str, String(50)]

# Long text for descriptions
LongText = Annotated[str, String(4000)]

# Rounding constants
MONEY_PRECISION = 38
MONEY_DECIMAL_PLACES = 9
DISPLAY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime column that always round-trips as UTC.

    Contract:
        Naive datetimes are interpreted as UTC on the way in and on the way
        out.  Aware datetimes are converted to UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return ensure_utc(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return ensure_utc(value)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def round_money(
    value: Decimal,
    decimal_places: int = DISPLAY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to specified decimal places.

    This is the ONLY sanctioned rounding function for financial values in the
    entire system.  Reports call it once per emitted figure; accumulators keep
    full precision.

    Args:
        value: The Decimal value to round.
        decimal_places: Number of decimal places to round to.
        rounding: Rounding mode (default: ROUND_HALF_UP).

    Returns:
        Rounded Decimal value.
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places else "1"
    rounded = value.quantize(Decimal(quantize_str), rounding=rounding)
    # Normalize negative zero so "-0.00" never reaches a report
    if rounded == ZERO:
        return abs(rounded)
    return rounded


def parse_amount(value: object) -> Decimal:
    """
    Convert caller input into a postable amount.

    Preconditions: value is a Decimal, int, float or numeric string.
    Postconditions: Returns a finite Decimal strictly greater than zero.

    Floats are converted through ``str`` so that ``0.1`` becomes
    ``Decimal("0.1")`` rather than its binary expansion.

    Raises:
        InvalidAmountError: If value is missing, boolean, non-numeric,
            non-finite, zero or negative.
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmountError(value, "amount is required and must be numeric")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            raise InvalidAmountError(value, "not a number") from None
    else:
        raise InvalidAmountError(value, f"unsupported type {type(value).__name__}")

    if not amount.is_finite():
        raise InvalidAmountError(value, "amount must be finite")
    if amount <= ZERO:
        raise InvalidAmountError(value, "amount must be greater than zero")
    check_storable(amount, value)
    return amount


def check_storable(amount: Decimal, original: object = None) -> None:
    """
    Reject finite amounts that ``Numeric(38, 9)`` cannot hold exactly.

    Trailing zeros do not count against the scale, so ``1.000000000000``
    is fine while ``0.0000000001`` would be stored as zero.

    Raises:
        InvalidAmountError: On more than nine significant decimal places or
            more than 29 integer digits.
    """
    reported = amount if original is None else original
    _, digits, exponent = amount.as_tuple()
    significant = "".join(map(str, digits)).rstrip("0")
    places = -(exponent + len(digits) - len(significant)) if significant else 0
    if places > MONEY_DECIMAL_PLACES:
        raise InvalidAmountError(
            reported, f"more than {MONEY_DECIMAL_PLACES} decimal places",
        )
    if amount.adjusted() >= MONEY_PRECISION - MONEY_DECIMAL_PLACES:
        raise InvalidAmountError(reported, "amount exceeds storage precision")
