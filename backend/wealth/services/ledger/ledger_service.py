"""Direct ledger writes: single transactions and reversals.

Both go through the same simulation as CSV imports, under the same write
lock, so a hand-entered SELL can never oversell and a reversal can never
pull the lots out from under a later SELL.
"""

import logging
import threading
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal

from wealth.config import settings
from wealth.services.imports.csv_transaction_parser import normalize_type, validate_amounts
from wealth.services.ledger.errors import EntryValidationError, ReversalError
from wealth.services.ledger.ledger_store import LedgerEntry, LedgerStore
from wealth.services.ledger.simulation import LedgerSimulation
from wealth.services.ledger.write_lock import ledger_write_lock, ledger_write_scope
from wealth.services.transaction_hash_service import compute_transaction_hash

logger = logging.getLogger(__name__)


@dataclass
class TransactionDraft:
    """A transaction as entered by hand, before validation."""

    trade_date: date
    type: str
    quantity: Decimal = Decimal("0")
    price: Decimal = Decimal("0")
    fees: Decimal = Decimal("0")
    account_name: str | None = None
    isin: str | None = None
    symbol: str | None = None
    name: str | None = None
    notes: str | None = None


class LedgerService:
    """Records and reverses individual ledger transactions.

    Example usage:
        service = LedgerService(SqlLedgerStore(db))
        entry = service.record_transaction(TransactionDraft(...))
        service.reverse_transaction(entry.id, notes="Entered twice")
    """

    def __init__(self, store: LedgerStore, lock: "threading.Lock | None" = None) -> None:
        self.store = store
        self._lock = lock or ledger_write_lock

    def _validate(self, draft: TransactionDraft) -> LedgerEntry:
        txn_type = normalize_type(draft.type or "")
        if txn_type is None:
            raise EntryValidationError(f"Unknown transaction type '{draft.type}'")
        isin = (draft.isin or "").strip().upper() or None
        symbol = (draft.symbol or "").strip().upper() or None
        if not isin and not symbol:
            raise EntryValidationError("Missing security identifier (isin or symbol)")
        problem = validate_amounts(txn_type, draft.quantity, draft.price, draft.fees)
        if problem:
            raise EntryValidationError(problem)

        return LedgerEntry(
            trade_date=draft.trade_date,
            type=txn_type,
            quantity=draft.quantity,
            price=draft.price,
            fees=draft.fees,
            account_name=(draft.account_name or "").strip() or settings.default_account_name,
            isin=isin,
            symbol=symbol,
            name=draft.name,
            notes=draft.notes,
        )

    def record_transaction(self, draft: TransactionDraft) -> LedgerEntry:
        """Validate, simulate and append one transaction (no import batch).

        Raises:
            EntryValidationError: the draft breaks a transaction invariant
            OversellError: the transaction (or a later SELL) would oversell
            BatchPersistenceError: the write failed and was rolled back
        """
        entry = self._validate(draft)
        content_hash = compute_transaction_hash(
            external_txn_id=None,
            txn_date=entry.trade_date,
            txn_type=entry.type,
            account=entry.account_name,
            security=entry.isin or entry.symbol,
            quantity=entry.quantity,
            price=entry.price,
            fees=entry.fees,
        )

        with ledger_write_scope(self.store, self._lock):
            account_id = self.store.find_account_id(entry.account_name)
            ref = self.store.find_security(entry.isin, entry.symbol)
            if ref is not None:
                entry = replace(
                    entry,
                    security_id=ref.id,
                    isin=ref.isin,
                    symbol=ref.symbol,
                    name=ref.name,
                )
            entry = replace(entry, account_id=account_id, content_hash=content_hash)

            simulation = LedgerSimulation(
                self.store.read_all(), self.store.read_corporate_actions()
            )
            entry = replace(entry, seq=simulation.next_seq())
            simulation.try_add(entry)

            with self.store.atomic():
                result = self.store.append([entry])

        stored = result.entries[0]
        logger.info(f"Recorded {stored.type} #{stored.id} on {stored.trade_date}")
        return stored

    def reverse_transaction(self, transaction_id: int, notes: str | None = None) -> LedgerEntry:
        """Append a reversal entry that cancels ``transaction_id``.

        Raises:
            ReversalError: unknown transaction, already reversed, or itself a reversal
            OversellError: removing it would leave a later SELL uncovered
            BatchPersistenceError: the write failed and was rolled back
        """
        with ledger_write_scope(self.store, self._lock):
            original = self.store.get(transaction_id)
            if original is None:
                raise ReversalError(f"Transaction {transaction_id} not found")
            if original.is_reversal:
                raise ReversalError(f"Transaction {transaction_id} is a reversal and cannot be reversed")

            entries = self.store.read_all()
            if any(e.reverses_id == transaction_id for e in entries):
                raise ReversalError(f"Transaction {transaction_id} is already reversed")

            simulation = LedgerSimulation(entries, self.store.read_corporate_actions())
            simulation.try_remove(transaction_id)

            reversal = replace(
                original,
                id=None,
                seq=0,
                batch_id=None,
                content_hash=None,
                reverses_id=transaction_id,
                notes=notes or f"Reversal of transaction {transaction_id}",
            )
            with self.store.atomic():
                result = self.store.append([reversal])

        stored = result.entries[0]
        logger.info(f"Reversed transaction {transaction_id} with #{stored.id}")
        return stored
