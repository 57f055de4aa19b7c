"""Account data access layer."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func
from sqlalchemy.orm import Session

from wealth.models import Account, Transaction
from wealth.services.repositories.exceptions import (
    DuplicateError,
    NotFoundError,
    ReferenceInUseError,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class AccountRepository:
    """Centralized account data access.

    Naming conventions:
    - find_* : Query that may return None
    - get_* : Query that raises NotFoundError if missing
    - create_* : Insert new record
    - update_* : Modify existing record
    - find_or_create_* : Upsert pattern
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_id(self, account_id: int) -> Account | None:
        """Find account by primary key."""
        return self._db.query(Account).filter(Account.id == account_id).first()

    def get_by_id(self, account_id: int) -> Account:
        account = self.find_by_id(account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        return account

    def find_by_name(self, name: str) -> Account | None:
        """Find account by name, case-insensitively."""
        return (
            self._db.query(Account)
            .filter(func.lower(Account.name) == name.strip().lower())
            .first()
        )

    def find_all(self) -> "Sequence[Account]":
        return self._db.query(Account).order_by(Account.name).all()

    def create(self, name: str, currency: str = "USD") -> Account:
        if self.find_by_name(name):
            raise DuplicateError("Account", "name", name)
        account = Account(name=name.strip(), currency=currency, is_active=True)
        self._db.add(account)
        self._db.flush()
        logger.debug(f"Created account {account.name}")
        return account

    def find_or_create(self, name: str) -> tuple[Account, bool]:
        """Find existing account or create new one.

        Returns:
            Tuple of (account, created) where created is True if new record.
        """
        existing = self.find_by_name(name)
        if existing:
            return existing, False
        return self.create(name), True

    def update(self, account_id: int, *, name: str | None = None, currency: str | None = None,
               is_active: bool | None = None) -> Account:
        account = self.get_by_id(account_id)
        if name is not None and name.strip().lower() != account.name.lower():
            if self.find_by_name(name):
                raise DuplicateError("Account", "name", name)
            account.name = name.strip()
        if currency is not None:
            account.currency = currency
        if is_active is not None:
            account.is_active = is_active
        self._db.flush()
        return account

    def delete(self, account_id: int) -> None:
        """Delete an account that no transaction references."""
        account = self.get_by_id(account_id)
        usage = (
            self._db.query(func.count(Transaction.id))
            .filter(Transaction.account_id == account_id)
            .scalar()
        )
        if usage:
            raise ReferenceInUseError("Account", account_id, usage)
        self._db.delete(account)
        self._db.flush()
