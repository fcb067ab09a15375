"""
Module: ledger_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    ``ledger_modules``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import ledger_kernel domain/model types and sibling engines.
    MUST NOT import ledger_modules or ledger_services.

Invariants enforced:
    - Purity: engines never read the clock.  ``as_of`` instants are
      parameters; services supply them from an injected Clock.
    - Decimal-only arithmetic for all monetary amounts.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from ledger_engines.aggregation import accumulate, compute_natural_balance
    from ledger_engines.aging import AgingCalculator, CUSTOMER_AGEING_BUCKETS
    from ledger_engines.subledger import build_statement, invoice_movement
"""

from ledger_engines.aggregation import (
    AccountTotals,
    PostingLike,
    accumulate,
    compute_natural_balance,
    sum_decimals,
)
from ledger_engines.aging import (
    CUSTOMER_AGEING_BUCKETS,
    AgeBucket,
    AgedItem,
    AgingCalculator,
    AgingReport,
    OpenItem,
    validate_buckets,
)
from ledger_engines.subledger import (
    Movement,
    MovementType,
    StatementLine,
    build_statement,
    invoice_movement,
    payment_movement,
)
from ledger_engines.tracer import traced_engine

__all__ = [
    "AccountTotals",
    "AgeBucket",
    "AgedItem",
    "AgingCalculator",
    "AgingReport",
    "CUSTOMER_AGEING_BUCKETS",
    "Movement",
    "MovementType",
    "OpenItem",
    "PostingLike",
    "StatementLine",
    "accumulate",
    "build_statement",
    "compute_natural_balance",
    "invoice_movement",
    "payment_movement",
    "sum_decimals",
    "traced_engine",
    "validate_buckets",
]
