"""Ledger store interface.

The lot matcher, the import orchestrator and the read models only talk to a
``LedgerStore``. ``SqlLedgerStore`` backs it with the database and
``InMemoryLedgerStore`` keeps everything in process memory.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class LedgerEntry:
    """Store-neutral view of one ledger transaction.

    ``account_id``/``security_id`` are None for entries that reference an
    account or security that does not exist yet (import candidates); their
    position key then falls back to provisional tokens built from the names.
    """

    trade_date: date
    type: str
    quantity: Decimal
    price: Decimal = Decimal("0")
    fees: Decimal = Decimal("0")
    account_name: str = ""
    isin: str | None = None
    symbol: str | None = None
    name: str | None = None
    notes: str | None = None
    account_id: int | None = None
    security_id: int | None = None
    id: int | None = None
    seq: int = 0
    batch_id: int | None = None
    content_hash: str | None = None
    reverses_id: int | None = None

    @property
    def account_key(self) -> int | str:
        if self.account_id is not None:
            return self.account_id
        return f"new:{self.account_name.strip().lower()}"

    @property
    def security_key(self) -> int | str:
        if self.security_id is not None:
            return self.security_id
        return f"new:{(self.isin or self.symbol or '').strip().upper()}"

    @property
    def position_key(self) -> tuple[int | str, int | str]:
        return (self.account_key, self.security_key)

    @property
    def is_reversal(self) -> bool:
        return self.reverses_id is not None


@dataclass(frozen=True)
class CorporateActionEvent:
    """Corporate action as seen by the lot matcher."""

    security_id: int
    action_date: date
    action_type: str
    ratio: Decimal | None = None
    id: int | None = None


@dataclass
class AppendResult:
    """Outcome of a successful append."""

    batch_id: int | None
    entries: list[LedgerEntry] = field(default_factory=list)


@dataclass(frozen=True)
class SecurityRef:
    """Resolved security identity."""

    id: int
    isin: str | None
    symbol: str | None
    name: str


def effective_entries(entries: list[LedgerEntry]) -> list[LedgerEntry]:
    """Drop reversal rows and the rows they reverse."""
    reversed_ids = {e.reverses_id for e in entries if e.reverses_id is not None}
    return [e for e in entries if e.reverses_id is None and e.id not in reversed_ids]


class LedgerStore(ABC):
    """Abstract append-only transaction ledger."""

    @abstractmethod
    def append(self, entries: list[LedgerEntry], *, batch_source: str | None = None) -> AppendResult:
        """Append entries; with ``batch_source`` they are grouped into a new import batch.

        Accounts and securities that do not exist yet are created. Must be
        called inside ``atomic()`` so the write is all-or-nothing.
        """

    @abstractmethod
    def read_all(self, as_of: date | None = None) -> list[LedgerEntry]:
        """Return every entry (reversals included) in insertion order."""

    @abstractmethod
    def read_since(self, since: date) -> list[LedgerEntry]:
        """Return entries whose trade date is on or after ``since``."""

    @abstractmethod
    def get(self, entry_id: int) -> LedgerEntry | None:
        """Return one entry by id."""

    @abstractmethod
    def read_corporate_actions(self) -> list[CorporateActionEvent]:
        """Return all recorded corporate actions."""

    @abstractmethod
    def find_account_id(self, name: str) -> int | None:
        """Resolve an account by name (case-insensitive)."""

    @abstractmethod
    def find_security(self, isin: str | None, symbol: str | None) -> SecurityRef | None:
        """Resolve a security, preferring ISIN over symbol."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Write scope: commits on success, discards everything on error."""

    def existing_hashes(self) -> set[str]:
        """Content hashes of effective (non-reversed) entries."""
        return {e.content_hash for e in effective_entries(self.read_all()) if e.content_hash}

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Cross-process write scope, held from the first ledger read through the commit.

        Stores that live in one process need nothing beyond ``ledger_write_lock``.
        """
        yield
