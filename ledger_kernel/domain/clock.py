"""
Injectable time source.

Posting stamps ``created_at`` and the ageing report measures invoice age
against ``Clock.now()``; nothing in the ledger calls ``datetime.now()``
directly, so tests pin time with ``DeterministicClock``.
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta

DEFAULT_TEST_INSTANT = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


class Clock(ABC):
    """Source of timezone-aware UTC instants, injected through constructors."""

    @abstractmethod
    def now(self) -> datetime: ...


class SystemClock(Clock):

    def now(self) -> datetime:
        return datetime.now(UTC)


class DeterministicClock(Clock):
    """
    Frozen clock for tests.

    ``now()`` keeps returning the same instant until it is moved explicitly
    with ``advance`` or ``advance_days``.
    """

    def __init__(self, start: datetime | None = None):
        self._current = start or DEFAULT_TEST_INSTANT

    def now(self) -> datetime:
        return self._current

    def advance(self, seconds: int = 1) -> None:
        self._current += timedelta(seconds=seconds)

    def advance_days(self, days: int) -> None:
        self._current += timedelta(days=days)
