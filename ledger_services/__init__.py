"""
ledger_services -- outer facade for collaborators (HTTP handlers, jobs).

Owns transaction scope and storage-failure translation; everything below
it only flushes.
"""

from ledger_services.ledger_api import LedgerAPI

__all__ = ["LedgerAPI"]
