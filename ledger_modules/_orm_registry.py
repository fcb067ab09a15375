"""
Module ORM Registry (``ledger_modules._orm_registry``).

Responsibility
--------------
Ensure kernel and module SQLAlchemy ORM models are imported so that
``Base.metadata`` contains their table definitions before
``ledger_kernel.db.engine.create_tables()`` runs ``create_all``.

Usage
-----
``create_tables()`` calls ``import_all_orm_models()`` itself; scripts and
``tests/conftest.py`` only call ``create_tables()``.
"""


def import_all_orm_models() -> None:
    """Import kernel models and every ``ledger_modules.*.orm`` module (idempotent)."""
    # Kernel tables first (coa, coa_tenants, journal_entries)
    import ledger_kernel.models  # noqa: F401
    import ledger_modules.ar.orm  # noqa: F401
