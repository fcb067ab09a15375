"""
Ledger Kernel

A multi-tenant, append-only double-entry accounting core with:
- Per-tenant chart of accounts with idempotent default seeding
- Single-row atomic journal posting
- Immutable journal entries and customer payments
- Report derivation from stored entries only (no stored balances)
"""

__version__ = "0.1.0"
