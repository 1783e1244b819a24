from .ledger import LedgerService
from .repository import InMemoryLedgerRepository, LedgerRepository, SqlLedgerRepository

__all__ = [
    "InMemoryLedgerRepository",
    "LedgerRepository",
    "LedgerService",
    "SqlLedgerRepository",
]
