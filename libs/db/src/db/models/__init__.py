"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the ledger tables used by ``finance_tracker``.
"""

from .ledger import Base, LedgerCategory, LedgerTransaction

__all__ = [
    "Base",
    "LedgerCategory",
    "LedgerTransaction",
]
