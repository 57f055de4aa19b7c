"""Security price data access layer."""

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from wealth.models import SecurityPrice
from wealth.services.repositories.exceptions import NotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class PriceRepository:
    """Centralized security price data access.

    Naming conventions:
    - find_* : Query that may return None or empty list
    - get_* : Query that raises exception if missing
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_security_and_date(self, security_id: int, price_date: date) -> SecurityPrice | None:
        """Find price for a specific security and date."""
        return (
            self._db.query(SecurityPrice)
            .filter(SecurityPrice.security_id == security_id, SecurityPrice.price_date == price_date)
            .first()
        )

    def find_history(self, security_id: int) -> "Sequence[SecurityPrice]":
        return (
            self._db.query(SecurityPrice)
            .filter(SecurityPrice.security_id == security_id)
            .order_by(desc(SecurityPrice.price_date))
            .all()
        )

    def find_latest_by_securities(
        self, security_ids: list[int], as_of: date | None = None
    ) -> dict[int, Decimal]:
        """Latest close on or before ``as_of`` for each security.

        Securities without any price are absent from the result.
        """
        if not security_ids:
            return {}

        latest = self._db.query(
            SecurityPrice.security_id,
            func.max(SecurityPrice.price_date).label("latest_date"),
        ).filter(SecurityPrice.security_id.in_(security_ids))
        if as_of is not None:
            latest = latest.filter(SecurityPrice.price_date <= as_of)
        subquery = latest.group_by(SecurityPrice.security_id).subquery()

        rows = (
            self._db.query(SecurityPrice.security_id, SecurityPrice.close_price)
            .join(
                subquery,
                (SecurityPrice.security_id == subquery.c.security_id)
                & (SecurityPrice.price_date == subquery.c.latest_date),
            )
            .all()
        )
        return {security_id: close_price for security_id, close_price in rows}

    def upsert(
        self, security_id: int, price_date: date, close_price: Decimal, source: str | None = None
    ) -> SecurityPrice:
        """Insert or replace the close price for (security, date)."""
        price = self.find_by_security_and_date(security_id, price_date)
        if price is None:
            price = SecurityPrice(security_id=security_id, price_date=price_date)
            self._db.add(price)
        price.close_price = close_price
        price.source = source
        self._db.flush()
        return price

    def delete(self, security_id: int, price_date: date) -> None:
        price = self.find_by_security_and_date(security_id, price_date)
        if price is None:
            raise NotFoundError("SecurityPrice", f"{security_id}@{price_date.isoformat()}")
        self._db.delete(price)
        self._db.flush()
