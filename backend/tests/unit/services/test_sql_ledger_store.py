"""Tests for the database-backed ledger store and import/holdings over SQLite."""

import threading
from dataclasses import replace
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from wealth.models import Account, ImportBatch, Security, Transaction
from wealth.services.imports.transaction_import_service import TransactionImportService
from wealth.services.ledger.errors import BatchPersistenceError
from wealth.services.ledger.ledger_store import LedgerEntry
from wealth.services.ledger.sql_ledger_store import SqlLedgerStore
from wealth.services.portfolio.holdings_projector import HoldingsProjector
from wealth.services.repositories.price_repository import PriceRepository

CSV = (
    "tdate,ttype,isin,symbol,name,qty,price,fees,account\n"
    "2024-01-10,BUY,US0378331005,AAPL,Apple,10,100,1,Broker\n"
    "2024-02-10,SELL,US0378331005,AAPL,Apple,4,120,1,Broker\n"
)


def buy(**kwargs):
    values = {
        "trade_date": date(2024, 1, 10),
        "type": "BUY",
        "quantity": Decimal("10"),
        "price": Decimal("100"),
        "account_name": "Broker",
        "symbol": "AAPL",
        "name": "Apple",
    }
    values.update(kwargs)
    return LedgerEntry(**values)


class TestAppend:
    def test_append_outside_atomic_is_refused(self, db):
        with pytest.raises(BatchPersistenceError):
            SqlLedgerStore(db).append([buy()])

    def test_append_creates_reference_data(self, db):
        store = SqlLedgerStore(db)
        with store.atomic():
            result = store.append([buy()], batch_source="csv")

        entry = result.entries[0]
        assert entry.id is not None
        assert entry.seq == entry.id
        assert db.query(Account).one().name == "Broker"
        assert db.query(Security).one().symbol == "AAPL"
        batch = db.get(ImportBatch, result.batch_id)
        assert batch.row_count == 1

    def test_append_without_batch(self, db):
        store = SqlLedgerStore(db)
        with store.atomic():
            result = store.append([buy()])

        assert result.batch_id is None
        assert db.query(ImportBatch).count() == 0

    def test_failure_inside_atomic_rolls_back(self, db):
        store = SqlLedgerStore(db)
        with pytest.raises(RuntimeError):
            with store.atomic():
                store.append([buy()], batch_source="csv")
                raise RuntimeError("boom")

        assert db.query(Transaction).count() == 0
        assert db.query(ImportBatch).count() == 0
        assert db.query(Account).count() == 0


class TestRead:
    @pytest.fixture
    def stored(self, db):
        store = SqlLedgerStore(db)
        with store.atomic():
            store.append([buy(), buy(trade_date=date(2024, 3, 1), type="SELL", quantity=Decimal("2"))])
        return store

    def test_read_all_in_insertion_order(self, stored):
        entries = stored.read_all()

        assert [e.type for e in entries] == ["BUY", "SELL"]
        assert entries[0].account_name == "Broker"
        assert entries[0].symbol == "AAPL"
        assert entries[0].quantity == Decimal("10")

    def test_read_all_as_of(self, stored):
        assert [e.type for e in stored.read_all(as_of=date(2024, 2, 1))] == ["BUY"]

    def test_read_since(self, stored):
        assert [e.type for e in stored.read_since(date(2024, 2, 1))] == ["SELL"]

    def test_get(self, stored):
        first = stored.read_all()[0]
        assert stored.get(first.id) == first
        assert stored.get(99999) is None

    def test_find_account_and_security(self, stored):
        assert stored.find_account_id("BROKER") is not None
        assert stored.find_account_id("Nope") is None
        assert stored.find_security(None, "aapl").name == "Apple"
        assert stored.find_security("XX0000000000", None) is None

    def test_existing_hashes_skip_reversed(self, db):
        store = SqlLedgerStore(db)
        with store.atomic():
            kept, reversed_entry = store.append(
                [buy(content_hash="a" * 64), buy(content_hash="b" * 64)]
            ).entries
        with store.atomic():
            store.append([replace(reversed_entry, id=None, content_hash=None, reverses_id=reversed_entry.id)])

        assert store.existing_hashes() == {"a" * 64}


class TestImportOverDatabase:
    def test_end_to_end_import_and_holdings(self, db):
        store = SqlLedgerStore(db)
        service = TransactionImportService(store, lock=threading.Lock())

        outcome = service.import_transactions(CSV, dry_run=False)

        assert outcome.inserted == 2
        assert outcome.batch_id is not None
        holding = HoldingsProjector(store, PriceRepository(db)).compute_holdings()[0]
        assert holding.quantity == Decimal("6")
        assert holding.avg_cost == Decimal("100.1")

    def test_dry_run_writes_nothing(self, db):
        store = SqlLedgerStore(db)

        TransactionImportService(store, lock=threading.Lock()).import_transactions(CSV, dry_run=True)

        assert db.query(Transaction).count() == 0
        assert db.query(Account).count() == 0
        assert db.query(Security).count() == 0
        assert db.query(ImportBatch).count() == 0

    def test_reimport_is_rejected_as_duplicate(self, db):
        service = TransactionImportService(SqlLedgerStore(db), lock=threading.Lock())
        service.import_transactions(CSV, dry_run=False)

        outcome = service.import_transactions(CSV, dry_run=False)

        assert outcome.inserted == 0
        assert outcome.skipped == 2
        assert db.query(Transaction).count() == 2


class TestLocked:
    """Cross-process ledger lock scope."""

    @staticmethod
    def postgres_session(in_transaction):
        session = MagicMock()
        session.get_bind.return_value.dialect.name = "postgresql"
        session.in_transaction.return_value = in_transaction
        return session

    def test_postgres_takes_advisory_lock_on_entry(self):
        session = self.postgres_session(in_transaction=True)

        with SqlLedgerStore(session).locked():
            statement = session.execute.call_args.args[0]
            assert "pg_advisory_xact_lock" in str(statement)
            session.rollback.assert_not_called()

    def test_leaving_without_commit_releases_lock(self):
        session = self.postgres_session(in_transaction=True)

        with pytest.raises(RuntimeError):
            with SqlLedgerStore(session).locked():
                raise RuntimeError("simulation refused")

        session.rollback.assert_called_once()

    def test_committed_scope_is_not_rolled_back(self):
        session = self.postgres_session(in_transaction=False)

        with SqlLedgerStore(session).locked():
            pass

        session.rollback.assert_not_called()

    def test_atomic_commits_without_taking_lock(self):
        session = self.postgres_session(in_transaction=False)
        store = SqlLedgerStore(session)

        with store.atomic():
            pass

        session.execute.assert_not_called()
        session.commit.assert_called_once()
