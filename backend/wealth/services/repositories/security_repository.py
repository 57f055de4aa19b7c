"""Security data access layer."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func
from sqlalchemy.orm import Session

from wealth.models import Security, Transaction
from wealth.services.repositories.exceptions import (
    DuplicateError,
    NotFoundError,
    ReferenceInUseError,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class SecurityRepository:
    """Centralized security data access.

    Lookups prefer the ISIN; the symbol is only a fallback because tickers
    get reused and renamed.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_id(self, security_id: int) -> Security | None:
        return self._db.query(Security).filter(Security.id == security_id).first()

    def get_by_id(self, security_id: int) -> Security:
        security = self.find_by_id(security_id)
        if security is None:
            raise NotFoundError("Security", security_id)
        return security

    def find_by_isin(self, isin: str) -> Security | None:
        return (
            self._db.query(Security)
            .filter(func.upper(Security.isin) == isin.strip().upper())
            .first()
        )

    def find_by_symbol(self, symbol: str) -> Security | None:
        return (
            self._db.query(Security)
            .filter(func.upper(Security.symbol) == symbol.strip().upper())
            .order_by(Security.id)
            .first()
        )

    def find_by_identifiers(self, isin: str | None, symbol: str | None) -> Security | None:
        """Resolve by ISIN first, then by symbol."""
        if isin:
            security = self.find_by_isin(isin)
            if security:
                return security
        if symbol:
            return self.find_by_symbol(symbol)
        return None

    def find_all(self) -> "Sequence[Security]":
        return self._db.query(Security).order_by(Security.symbol, Security.isin).all()

    def create(
        self,
        *,
        name: str,
        isin: str | None = None,
        symbol: str | None = None,
        currency: str = "USD",
    ) -> Security:
        if isin and self.find_by_isin(isin):
            raise DuplicateError("Security", "isin", isin)
        security = Security(
            name=name,
            isin=isin.strip().upper() if isin else None,
            symbol=symbol.strip().upper() if symbol else None,
            currency=currency,
        )
        self._db.add(security)
        self._db.flush()
        logger.debug(f"Created security {security.symbol or security.isin}")
        return security

    def find_or_create(
        self, *, isin: str | None, symbol: str | None, name: str | None = None
    ) -> tuple[Security, bool]:
        """Find a security by its identifiers or create it.

        Returns:
            Tuple of (security, created) where created is True if new record.
        """
        existing = self.find_by_identifiers(isin, symbol)
        if existing:
            return existing, False
        security = self.create(name=name or symbol or isin or "", isin=isin, symbol=symbol)
        return security, True

    def update(
        self,
        security_id: int,
        *,
        name: str | None = None,
        isin: str | None = None,
        symbol: str | None = None,
        currency: str | None = None,
    ) -> Security:
        security = self.get_by_id(security_id)
        if isin is not None:
            other = self.find_by_isin(isin) if isin else None
            if other and other.id != security.id:
                raise DuplicateError("Security", "isin", isin)
            security.isin = isin.strip().upper() or None
        if symbol is not None:
            security.symbol = symbol.strip().upper() or None
        if name is not None:
            security.name = name
        if currency is not None:
            security.currency = currency
        self._db.flush()
        return security

    def delete(self, security_id: int) -> None:
        """Delete a security (and its prices) that no transaction references."""
        security = self.get_by_id(security_id)
        usage = (
            self._db.query(func.count(Transaction.id))
            .filter(Transaction.security_id == security_id)
            .scalar()
        )
        if usage:
            raise ReferenceInUseError("Security", security_id, usage)
        self._db.delete(security)
        self._db.flush()
