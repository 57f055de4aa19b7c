"""Transaction import orchestration.

parse -> resolve -> dedupe -> simulate -> (commit)

Every row ends up either insertable or skipped with a message. A dry run
goes through exactly the same steps and stops before the commit, so its
counts are what a real import would produce against the same ledger.
"""

import logging
import threading
from dataclasses import dataclass, field, replace
from decimal import Decimal

from wealth.config import settings
from wealth.constants import DuplicatePolicy, TransactionType
from wealth.services.imports.csv_transaction_parser import (
    CsvTransactionParser,
    ParsedRow,
    ParserOptions,
)
from wealth.services.ledger.errors import ImportValidationError, OversellError
from wealth.services.ledger.ledger_store import LedgerEntry, LedgerStore, SecurityRef
from wealth.services.ledger.simulation import LedgerSimulation, describe_oversell
from wealth.services.ledger.write_lock import ledger_write_lock, ledger_write_scope
from wealth.services.transaction_hash_service import compute_transaction_hash

logger = logging.getLogger(__name__)

BATCH_SOURCE = "csv"


@dataclass
class ImportRowError:
    """A skipped row and the reason it was skipped."""

    row: int
    message: str


@dataclass
class ImportOutcome:
    """Counts, errors and optional preview of one import call."""

    parsed: int = 0
    inserted: int = 0
    skipped: int = 0
    errors: list[ImportRowError] = field(default_factory=list)
    preview: list[ParsedRow] | None = None
    batch_id: int | None = None
    dry_run: bool = True


class _Resolver:
    """Resolves row accounts and securities against the store, with caching.

    Securities that do not exist yet get one provisional identity per batch,
    so an ISIN row and a later symbol-only row of the same new security land
    in the same position.
    """

    def __init__(self, store: LedgerStore) -> None:
        self._store = store
        self._accounts: dict[str, int | None] = {}
        self._securities: dict[tuple[str | None, str | None], SecurityRef | None] = {}
        self._new_by_symbol: dict[str, tuple[str | None, str | None, str | None]] = {}
        self._new_by_isin: dict[str, tuple[str | None, str | None, str | None]] = {}

    def account_id(self, name: str) -> int | None:
        key = name.strip().lower()
        if key not in self._accounts:
            self._accounts[key] = self._store.find_account_id(name)
        return self._accounts[key]

    def resolve(self, row: ParsedRow) -> LedgerEntry:
        account_id = self.account_id(row.account_name)
        key = (row.isin, row.symbol)
        if key not in self._securities:
            self._securities[key] = self._store.find_security(row.isin, row.symbol)
        ref = self._securities[key]

        if ref is not None:
            return row.to_entry(
                account_id=account_id,
                security_id=ref.id,
                isin=ref.isin,
                symbol=ref.symbol,
                name=ref.name,
            )

        identity = None
        if row.isin:
            identity = self._new_by_isin.get(row.isin)
        if identity is None and row.symbol:
            identity = self._new_by_symbol.get(row.symbol)
        if identity is None:
            identity = (row.isin, row.symbol, row.name)
            if row.isin:
                self._new_by_isin[row.isin] = identity
            if row.symbol:
                self._new_by_symbol[row.symbol] = identity

        isin, symbol, name = identity
        return row.to_entry(
            account_id=account_id,
            isin=isin or row.isin,
            symbol=symbol or row.symbol,
            name=name or row.name,
        )


class TransactionImportService:
    """Imports transaction CSV text into the ledger.

    Example usage:
        service = TransactionImportService(SqlLedgerStore(db))
        outcome = service.import_transactions(csv_text, dry_run=False)
        print(outcome.inserted, outcome.skipped, outcome.batch_id)
    """

    def __init__(
        self,
        store: LedgerStore,
        lock: "threading.Lock | None" = None,
        preview_limit: int | None = None,
        duplicate_policy: str | None = None,
    ) -> None:
        self.store = store
        self._lock = lock or ledger_write_lock
        self.preview_limit = preview_limit or settings.import_preview_max_rows
        self.duplicate_policy = duplicate_policy or settings.import_duplicate_policy

    def import_transactions(
        self,
        csv_text: str,
        dry_run: bool = True,
        preview: bool = False,
        options: ParserOptions | None = None,
        duplicate_policy: str | None = None,
    ) -> ImportOutcome:
        """Parse, validate and (unless ``dry_run``) commit a CSV payload.

        Raises:
            ImportValidationError: empty or oversized payload, bad header,
                unknown duplicate policy
            BatchPersistenceError: the commit failed and was rolled back
        """
        if not csv_text or not csv_text.strip():
            raise ImportValidationError("CSV text is empty")

        policy = duplicate_policy or self.duplicate_policy
        if policy not in DuplicatePolicy.ALL:
            raise ImportValidationError(f"Unknown duplicate policy '{policy}'")

        parsed = CsvTransactionParser(options or ParserOptions.from_settings()).parse(csv_text)
        rows = parsed.rows

        with ledger_write_scope(self.store, self._lock):
            simulation = LedgerSimulation(
                self.store.read_all(), self.store.read_corporate_actions()
            )
            existing_hashes = (
                self.store.existing_hashes() if policy == DuplicatePolicy.REJECT else set()
            )
            resolver = _Resolver(self.store)
            insertable = self._classify(rows, simulation, resolver, existing_hashes, policy)

            outcome = ImportOutcome(parsed=len(rows), inserted=len(insertable), dry_run=dry_run)
            if not dry_run and insertable:
                with self.store.atomic():
                    result = self.store.append(insertable, batch_source=BATCH_SOURCE)
                outcome.batch_id = result.batch_id
                logger.info(
                    f"Committed import batch {result.batch_id} with {len(insertable)} transactions"
                )

        outcome.skipped = outcome.parsed - outcome.inserted
        outcome.errors = [
            ImportRowError(row=row.row_number, message=row.error) for row in rows if not row.valid
        ]
        if preview:
            outcome.preview = rows[: self.preview_limit]

        logger.info(
            f"CSV import ({'dry run' if dry_run else 'commit'}): parsed={outcome.parsed} "
            f"inserted={outcome.inserted} skipped={outcome.skipped}"
        )
        return outcome

    def _classify(
        self,
        rows: list[ParsedRow],
        simulation: LedgerSimulation,
        resolver: _Resolver,
        existing_hashes: set[str],
        policy: str,
    ) -> list[LedgerEntry]:
        """Mark skipped rows in place and return the insertable entries in row order.

        Lot-adding rows enter the simulation first. Lot-reducing rows are then
        checked in replay order (trade date, then row), so a SELL sees every
        earlier-dated BUY of the batch whatever the CSV row order.
        """
        candidates: list[tuple[ParsedRow, LedgerEntry]] = []
        seen: dict[str, int] = {}

        for row in rows:
            if not row.valid:
                continue

            content_hash = compute_transaction_hash(
                external_txn_id=row.ref,
                txn_date=row.trade_date,
                txn_type=row.type,
                account=row.account_name,
                security=row.security_identifier,
                quantity=row.quantity,
                price=row.price,
                fees=row.fees or Decimal("0"),
            )
            if policy == DuplicatePolicy.REJECT:
                if content_hash in existing_hashes:
                    row.error = "Duplicate of existing transaction"
                    continue
                if content_hash in seen:
                    row.error = f"Duplicate of row {seen[content_hash]}"
                    continue

            seen[content_hash] = row.row_number
            entry = resolver.resolve(row)
            entry = replace(entry, seq=simulation.next_seq(), content_hash=content_hash)
            candidates.append((row, entry))

        accepted: set[int] = set()
        for row, entry in candidates:
            if entry.type not in TransactionType.LOT_REDUCING:
                simulation.try_add(entry)
                accepted.add(entry.seq)

        reducing = sorted(
            (pair for pair in candidates if pair[1].type in TransactionType.LOT_REDUCING),
            key=lambda pair: (pair[1].trade_date, pair[1].seq),
        )
        for row, entry in reducing:
            try:
                simulation.try_add(entry)
            except OversellError as e:
                row.error = describe_oversell(e, entry)
                logger.warning(f"Row {row.row_number} rejected: {row.error}")
                continue
            accepted.add(entry.seq)

        return [entry for _, entry in candidates if entry.seq in accepted]
