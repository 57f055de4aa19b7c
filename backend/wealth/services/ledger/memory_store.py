"""In-memory ledger store.

Same contract as the database-backed store; used for tests and for
simulations that must not touch the database.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import date

from wealth.services.ledger.errors import BatchPersistenceError
from wealth.services.ledger.ledger_store import (
    AppendResult,
    CorporateActionEvent,
    LedgerEntry,
    LedgerStore,
    SecurityRef,
)

logger = logging.getLogger(__name__)


class InMemoryLedgerStore(LedgerStore):
    """Ledger kept in Python lists; ``atomic()`` stages writes until exit."""

    def __init__(self) -> None:
        self._entries: list[LedgerEntry] = []
        self._accounts: dict[int, str] = {}
        self._securities: dict[int, SecurityRef] = {}
        self._corporate_actions: list[CorporateActionEvent] = []
        self._batches: dict[int, int] = {}  # batch_id -> row_count
        self._staged: dict | None = None
        self._next_id = 1

    # -- reference data --------------------------------------------------

    def add_account(self, name: str) -> int:
        account_id = self._new_id()
        self._accounts[account_id] = name
        return account_id

    def add_security(self, *, name: str, isin: str | None = None, symbol: str | None = None) -> int:
        security_id = self._new_id()
        self._securities[security_id] = SecurityRef(
            id=security_id, isin=isin, symbol=symbol, name=name
        )
        return security_id

    def add_corporate_action(self, action: CorporateActionEvent) -> None:
        self._corporate_actions.append(action)

    @property
    def batch_count(self) -> int:
        return len(self._batches)

    @property
    def account_count(self) -> int:
        return len(self._accounts)

    @property
    def security_count(self) -> int:
        return len(self._securities)

    def _new_id(self) -> int:
        new_id = self._next_id
        self._next_id += 1
        return new_id

    # -- LedgerStore -----------------------------------------------------

    def find_account_id(self, name: str) -> int | None:
        wanted = name.strip().lower()
        for account_id, account_name in self._accounts.items():
            if account_name.lower() == wanted:
                return account_id
        return None

    def find_security(self, isin: str | None, symbol: str | None) -> SecurityRef | None:
        if isin:
            for ref in self._securities.values():
                if ref.isin and ref.isin.upper() == isin.upper():
                    return ref
        if symbol:
            for ref in self._securities.values():
                if ref.symbol and ref.symbol.upper() == symbol.upper():
                    return ref
        return None

    def read_all(self, as_of: date | None = None) -> list[LedgerEntry]:
        return [e for e in self._entries if as_of is None or e.trade_date <= as_of]

    def read_since(self, since: date) -> list[LedgerEntry]:
        return [e for e in self._entries if e.trade_date >= since]

    def get(self, entry_id: int) -> LedgerEntry | None:
        return next((e for e in self._entries if e.id == entry_id), None)

    def read_corporate_actions(self) -> list[CorporateActionEvent]:
        return list(self._corporate_actions)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        snapshot = {
            "entries": list(self._entries),
            "accounts": dict(self._accounts),
            "securities": dict(self._securities),
            "batches": dict(self._batches),
            "next_id": self._next_id,
        }
        self._staged = snapshot
        try:
            yield
        except Exception:
            self._entries = snapshot["entries"]
            self._accounts = snapshot["accounts"]
            self._securities = snapshot["securities"]
            self._batches = snapshot["batches"]
            self._next_id = snapshot["next_id"]
            logger.warning("In-memory ledger write rolled back")
            raise
        finally:
            self._staged = None

    def append(self, entries: list[LedgerEntry], *, batch_source: str | None = None) -> AppendResult:
        if self._staged is None:
            raise BatchPersistenceError("append() must run inside atomic()")

        batch_id = None
        if batch_source is not None:
            batch_id = self._new_id()
            self._batches[batch_id] = len(entries)

        stored = []
        for entry in entries:
            account_id = entry.account_id or self.find_account_id(entry.account_name)
            if account_id is None:
                account_id = self.add_account(entry.account_name)

            security_id = entry.security_id
            if security_id is None:
                ref = self.find_security(entry.isin, entry.symbol)
                security_id = ref.id if ref else self.add_security(
                    name=entry.name or entry.symbol or entry.isin or "",
                    isin=entry.isin,
                    symbol=entry.symbol,
                )

            entry_id = self._new_id()
            saved = replace(
                entry,
                id=entry_id,
                seq=entry_id,
                account_id=account_id,
                security_id=security_id,
                batch_id=batch_id,
            )
            self._entries.append(saved)
            stored.append(saved)

        return AppendResult(batch_id=batch_id, entries=stored)
