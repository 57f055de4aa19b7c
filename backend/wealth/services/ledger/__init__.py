"""Transaction ledger: store, FIFO lot matching, simulation and direct writes."""

from .errors import (
    BatchPersistenceError,
    EntryValidationError,
    ImportValidationError,
    LedgerError,
    OversellError,
    ReversalError,
    RowParseError,
)
from .ledger_store import CorporateActionEvent, LedgerEntry, LedgerStore
from .lot_matcher import LotMatcher, replay
from .memory_store import InMemoryLedgerStore
from .sql_ledger_store import SqlLedgerStore

__all__ = [
    "BatchPersistenceError",
    "CorporateActionEvent",
    "EntryValidationError",
    "ImportValidationError",
    "InMemoryLedgerStore",
    "LedgerEntry",
    "LedgerError",
    "LedgerStore",
    "LotMatcher",
    "OversellError",
    "ReversalError",
    "RowParseError",
    "SqlLedgerStore",
    "replay",
]
