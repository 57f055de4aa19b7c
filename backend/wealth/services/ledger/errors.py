"""Ledger and import exceptions.

Row-level errors (RowParseError, OversellError during imports) are collected
into the import result. The rest abort the operation they were raised from.
"""

from datetime import date
from decimal import Decimal


class LedgerError(Exception):
    """Base exception for ledger operations."""


class ImportValidationError(LedgerError):
    """The import payload is unusable as a whole (empty, oversized, bad header)."""

    def __init__(self, message: str, *, too_large: bool = False):
        self.too_large = too_large
        super().__init__(message)


class RowParseError(LedgerError):
    """A single CSV row failed structural validation."""

    def __init__(self, row_number: int, message: str):
        self.row_number = row_number
        self.message = message
        super().__init__(f"Row {row_number}: {message}")


class OversellError(LedgerError):
    """A SELL needs more quantity than the position holds at its trade date."""

    def __init__(
        self,
        position_key: tuple,
        trade_date: date,
        requested: Decimal,
        available: Decimal,
        transaction_id: int | None = None,
        seq: int | None = None,
    ):
        self.position_key = position_key
        self.trade_date = trade_date
        self.requested = requested
        self.available = available
        self.transaction_id = transaction_id
        self.seq = seq
        super().__init__(
            f"Sell of {requested.normalize():f} on {trade_date.isoformat()} exceeds "
            f"open quantity {available.normalize():f}"
        )


class BatchPersistenceError(LedgerError):
    """Writing an import batch failed; nothing from the batch was kept."""


class ReversalError(LedgerError):
    """A transaction cannot be reversed."""


class EntryValidationError(LedgerError):
    """A directly entered transaction breaks a ledger invariant."""
