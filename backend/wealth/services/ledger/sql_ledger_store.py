"""Database-backed ledger store."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import date

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wealth.models import Account, CorporateAction, ImportBatch, Security, Transaction
from wealth.services.ledger.errors import BatchPersistenceError
from wealth.services.ledger.ledger_store import (
    AppendResult,
    CorporateActionEvent,
    LedgerEntry,
    LedgerStore,
    SecurityRef,
)
from wealth.services.repositories import AccountRepository, SecurityRepository

logger = logging.getLogger(__name__)

# Arbitrary application-wide key for pg_advisory_xact_lock
LEDGER_ADVISORY_LOCK_KEY = 7_310_042


class SqlLedgerStore(LedgerStore):
    """Ledger store over the ``transactions`` table.

    The session is owned by the caller (a request-scoped ``get_db`` session);
    ``atomic()`` commits or rolls it back.
    """

    def __init__(self, db: Session) -> None:
        self._db = db
        self._accounts = AccountRepository(db)
        self._securities = SecurityRepository(db)
        self._in_atomic = False

    def _query(self):
        return (
            self._db.query(Transaction, Account.name, Security.isin, Security.symbol, Security.name)
            .join(Account, Transaction.account_id == Account.id)
            .join(Security, Transaction.security_id == Security.id)
        )

    @staticmethod
    def _to_entry(row) -> LedgerEntry:
        txn, account_name, isin, symbol, security_name = row
        return LedgerEntry(
            id=txn.id,
            seq=txn.id,
            trade_date=txn.trade_date,
            type=txn.type,
            quantity=txn.quantity,
            price=txn.price,
            fees=txn.fees,
            notes=txn.notes,
            account_id=txn.account_id,
            account_name=account_name,
            security_id=txn.security_id,
            isin=isin,
            symbol=symbol,
            name=security_name,
            batch_id=txn.import_batch_id,
            content_hash=txn.content_hash,
            reverses_id=txn.reverses_id,
        )

    def read_all(self, as_of: date | None = None) -> list[LedgerEntry]:
        query = self._query()
        if as_of is not None:
            query = query.filter(Transaction.trade_date <= as_of)
        return [self._to_entry(row) for row in query.order_by(Transaction.id).all()]

    def read_since(self, since: date) -> list[LedgerEntry]:
        rows = (
            self._query()
            .filter(Transaction.trade_date >= since)
            .order_by(Transaction.id)
            .all()
        )
        return [self._to_entry(row) for row in rows]

    def get(self, entry_id: int) -> LedgerEntry | None:
        row = self._query().filter(Transaction.id == entry_id).first()
        return self._to_entry(row) if row else None

    def read_corporate_actions(self) -> list[CorporateActionEvent]:
        actions = self._db.query(CorporateAction).order_by(CorporateAction.id).all()
        return [
            CorporateActionEvent(
                id=action.id,
                security_id=action.security_id,
                action_date=action.action_date,
                action_type=action.action_type,
                ratio=action.ratio,
            )
            for action in actions
        ]

    def find_account_id(self, name: str) -> int | None:
        account = self._accounts.find_by_name(name)
        return account.id if account else None

    def find_security(self, isin: str | None, symbol: str | None) -> SecurityRef | None:
        security = self._securities.find_by_identifiers(isin, symbol)
        if security is None:
            return None
        return SecurityRef(
            id=security.id, isin=security.isin, symbol=security.symbol, name=security.name
        )

    def existing_hashes(self) -> set[str]:
        reversed_ids = select(Transaction.reverses_id).where(Transaction.reverses_id.is_not(None))
        rows = (
            self._db.query(Transaction.content_hash)
            .filter(
                Transaction.content_hash.is_not(None),
                Transaction.reverses_id.is_(None),
                Transaction.id.not_in(reversed_ids),
            )
            .all()
        )
        return {content_hash for (content_hash,) in rows}

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the ledger advisory lock from the first read through the commit.

        On PostgreSQL the lock is transaction-scoped: the commit in ``atomic()``
        releases it, and leaving the scope without a commit (dry run, rejected
        entry) rolls the read transaction back.
        """
        if self._db.get_bind().dialect.name != "postgresql":
            yield
            return

        self._db.execute(
            text("SELECT pg_advisory_xact_lock(:key)"), {"key": LEDGER_ADVISORY_LOCK_KEY}
        )
        try:
            yield
        finally:
            if self._db.in_transaction():
                self._db.rollback()

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Run the enclosed writes as one database transaction.

        Raises:
            BatchPersistenceError: the database rejected the write; the
                session has been rolled back
        """
        self._in_atomic = True
        try:
            yield
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.warning(f"Ledger write rolled back: {e}")
            raise BatchPersistenceError(f"Failed to persist ledger entries: {e}") from e
        except Exception:
            self._db.rollback()
            logger.warning("Ledger write rolled back")
            raise
        finally:
            self._in_atomic = False

    def append(self, entries: list[LedgerEntry], *, batch_source: str | None = None) -> AppendResult:
        if not self._in_atomic:
            raise BatchPersistenceError("append() must run inside atomic()")

        batch_id = None
        if batch_source is not None:
            batch = ImportBatch(source=batch_source, row_count=len(entries))
            self._db.add(batch)
            self._db.flush()
            batch_id = batch.id

        stored = []
        for entry in entries:
            account_id = entry.account_id
            if account_id is None:
                account, created = self._accounts.find_or_create(entry.account_name)
                if created:
                    logger.info(f"Created account '{account.name}'")
                account_id = account.id

            security_id = entry.security_id
            if security_id is None:
                security, created = self._securities.find_or_create(
                    isin=entry.isin, symbol=entry.symbol, name=entry.name
                )
                if created:
                    logger.info(f"Created security {security.symbol or security.isin}")
                security_id = security.id

            txn = Transaction(
                trade_date=entry.trade_date,
                type=entry.type,
                account_id=account_id,
                security_id=security_id,
                quantity=entry.quantity,
                price=entry.price,
                fees=entry.fees,
                notes=entry.notes,
                import_batch_id=batch_id,
                content_hash=entry.content_hash,
                reverses_id=entry.reverses_id,
            )
            self._db.add(txn)
            self._db.flush()
            stored.append(
                replace(
                    entry,
                    id=txn.id,
                    seq=txn.id,
                    account_id=account_id,
                    security_id=security_id,
                    batch_id=batch_id,
                )
            )

        return AppendResult(batch_id=batch_id, entries=stored)
