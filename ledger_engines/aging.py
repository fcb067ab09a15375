"""
Module: ledger_engines.aging
Responsibility:
    Calculate the age of open receivable documents and classify them into
    ageing buckets.  Used by the customer ageing report.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    The caller supplies ``as_of``; engines never read the clock.

Invariants enforced:
    - Age is whole days, floored: ``floor((as_of - document_time) / 1 day)``.
      Negative ages (documents dated in the future) fall into the first
      bucket.
    - Documents with nothing left to pay (due <= 0) are not aged.
    - Every configured bucket appears in the breakdown, empty or not.
    - Decimal-only arithmetic for amounts.

Failure modes:
    - ValueError from AgeBucket on an inverted or negative range.
    - ValueError from validate_buckets() when buckets do not partition the
      ages from day 0 upward; classify() raises the same for an
      unvalidated sequence with a gap.

Usage:
    from ledger_engines.aging import AgingCalculator, OpenItem

    calculator = AgingCalculator()
    report = calculator.generate_report(items=open_items, as_of=now)
    report.breakdown()["31-60"]
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from ledger_engines.tracer import traced_engine
from ledger_kernel.db.types import ZERO, ensure_utc
from ledger_kernel.logging_config import get_logger

logger = get_logger("engines.aging")

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class AgeBucket:
    """
    Definition of an ageing bucket.

    Contract:
        Frozen dataclass representing a contiguous, inclusive range of days.
    Guarantees:
        - min_days >= 0.
        - max_days >= min_days (when bounded).
    """

    name: str
    min_days: int
    max_days: int | None  # None = unbounded (e.g., 90+)

    def __post_init__(self) -> None:
        if self.min_days < 0:
            raise ValueError("min_days cannot be negative")
        if self.max_days is not None and self.max_days < self.min_days:
            raise ValueError("max_days cannot be less than min_days")

    def contains(self, age_days: int) -> bool:
        """Check if age falls within this bucket."""
        if age_days < self.min_days:
            return False
        if self.max_days is None:
            return True
        return age_days <= self.max_days

    @property
    def is_unbounded(self) -> bool:
        return self.max_days is None


# Customer receivable buckets
CUSTOMER_AGEING_BUCKETS: tuple[AgeBucket, ...] = (
    AgeBucket("0-30", 0, 30),
    AgeBucket("31-60", 31, 60),
    AgeBucket("61-90", 61, 90),
    AgeBucket("90+", 91, None),
)


def validate_buckets(buckets: Sequence[AgeBucket]) -> None:
    """
    Check that ``buckets`` partition every age from day 0 upward.

    Buckets must be listed youngest first, start at 0, follow each other
    with no gap or overlap, and end with the only unbounded bucket.

    Raises:
        ValueError: Describing the first bucket that breaks the partition.
    """
    if not buckets:
        raise ValueError("at least one ageing bucket is required")
    expected_start = 0
    for position, bucket in enumerate(buckets):
        if bucket.min_days != expected_start:
            raise ValueError(
                f"bucket {bucket.name!r} starts at day {bucket.min_days}, "
                f"expected day {expected_start}"
            )
        if bucket.is_unbounded:
            if position != len(buckets) - 1:
                raise ValueError(
                    f"unbounded bucket {bucket.name!r} must be the last bucket"
                )
            return
        expected_start = bucket.max_days + 1
    raise ValueError(f"last bucket {buckets[-1].name!r} must be unbounded")


@dataclass(frozen=True)
class OpenItem:
    """A receivable document with what has been paid against it so far."""

    document_id: UUID
    counterparty_id: UUID | None
    reference: str
    document_time: datetime
    amount: Decimal
    paid: Decimal = ZERO

    @property
    def due(self) -> Decimal:
        return self.amount - self.paid


@dataclass(frozen=True)
class AgedItem:
    """An open item with its computed age and bucket."""

    item: OpenItem
    age_days: int
    bucket: AgeBucket

    @property
    def due(self) -> Decimal:
        return self.item.due


@dataclass(frozen=True)
class AgingReport:
    """
    Ageing snapshot as of one instant.

    Guarantees:
        - ``breakdown()`` has one key per bucket, in bucket order.
    """

    as_of: datetime
    buckets: tuple[AgeBucket, ...]
    items: tuple[AgedItem, ...]

    @property
    def item_count(self) -> int:
        return len(self.items)

    def items_in_bucket(self, bucket_name: str) -> tuple[AgedItem, ...]:
        return tuple(i for i in self.items if i.bucket.name == bucket_name)

    def breakdown(self) -> dict[str, tuple[AgedItem, ...]]:
        return {b.name: self.items_in_bucket(b.name) for b in self.buckets}

    def total_due(self) -> Decimal:
        return sum((i.due for i in self.items), ZERO)


class AgingCalculator:
    """
    Calculate ageing for dated receivable documents.

    Contract:
        Pure functions -- no I/O, no database access, no clock.
    """

    DEFAULT_BUCKETS = CUSTOMER_AGEING_BUCKETS

    def __init__(self, buckets: Sequence[AgeBucket] | None = None):
        self.buckets: tuple[AgeBucket, ...] = tuple(buckets or self.DEFAULT_BUCKETS)

    def calculate_age(self, document_time: datetime, as_of: datetime) -> int:
        """
        Whole days elapsed between ``document_time`` and ``as_of``, floored.

        Naive datetimes are treated as UTC.  Returns a negative number for
        documents dated after ``as_of``.
        """
        delta = ensure_utc(as_of) - ensure_utc(document_time)
        return delta // _ONE_DAY

    def classify(self, age_days: int) -> AgeBucket:
        """
        Classify age into a bucket.

        Postconditions:
            Negative ages map to the bucket starting at day 0 (or the first
            bucket when none does).
        Raises:
            ValueError: If age doesn't fit any bucket.
        """
        if age_days < 0:
            for bucket in self.buckets:
                if bucket.min_days == 0:
                    return bucket
            return self.buckets[0]

        for bucket in self.buckets:
            if bucket.contains(age_days):
                return bucket

        logger.warning("age_classification_no_bucket", extra={
            "age_days": age_days,
            "bucket_count": len(self.buckets),
        })
        raise ValueError(f"Age {age_days} does not fit any bucket")

    def age_item(self, item: OpenItem, as_of: datetime) -> AgedItem:
        age_days = self.calculate_age(item.document_time, as_of)
        return AgedItem(item=item, age_days=age_days, bucket=self.classify(age_days))

    @traced_engine("aging", "1.0", fingerprint_fields=("items", "as_of"))
    def generate_report(
        self,
        *,
        items: Sequence[OpenItem],
        as_of: datetime,
    ) -> AgingReport:
        """
        Age every item that still has an amount due.

        Items with ``due <= 0`` (fully paid or overpaid) are skipped.
        Input order is preserved within each bucket.
        """
        aged = tuple(
            self.age_item(item, as_of) for item in items if item.due > ZERO
        )
        logger.info("aging_report_generated", extra={
            "as_of": ensure_utc(as_of).isoformat(),
            "document_count": len(items),
            "aged_item_count": len(aged),
            "bucket_count": len(self.buckets),
        })
        return AgingReport(as_of=as_of, buckets=self.buckets, items=aged)
