"""Pydantic schemas for stored closing prices."""

from datetime import date
from decimal import Decimal

from pydantic import Field

from wealth.schemas.common import CamelModel


class PriceUpsert(CamelModel):
    """Insert or replace the close of one security on one date."""

    security_id: int
    price_date: date
    close_price: Decimal = Field(..., gt=0)
    source: str | None = Field(None, max_length=50)


class Price(CamelModel):
    """Schema for price responses."""

    security_id: int
    price_date: date
    close_price: Decimal
    source: str | None = None
