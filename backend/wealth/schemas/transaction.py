"""Pydantic schemas for ledger transactions."""

from datetime import date
from decimal import Decimal

from pydantic import Field

from wealth.schemas.common import CamelModel
from wealth.services.ledger.ledger_store import LedgerEntry


class TransactionCreate(CamelModel):
    """Schema for entering a single transaction by hand.

    The security is identified by ``security_id`` or by isin/symbol; an
    unknown isin/symbol creates the security. The account is identified by
    ``account_id`` or ``account_name`` (default account when both are empty).
    """

    tdate: date
    ttype: str = Field(..., description="BUY, SELL, DIVIDEND, FEE, SPLIT or OTHER")
    qty: Decimal = Field(Decimal("0"), description="Quantity; split ratio for SPLIT")
    price: Decimal = Field(Decimal("0"), ge=0, description="Price per unit")
    fees: Decimal = Field(Decimal("0"), ge=0, description="Transaction fees")
    account_id: int | None = None
    account_name: str | None = Field(None, max_length=100)
    security_id: int | None = None
    isin: str | None = Field(None, max_length=20)
    symbol: str | None = Field(None, max_length=50)
    name: str | None = Field(None, max_length=200)
    notes: str | None = None


class TransactionReverse(CamelModel):
    """Optional note recorded on the reversal entry."""

    notes: str | None = None


class Transaction(CamelModel):
    """Schema for Transaction responses."""

    id: int
    tdate: date
    ttype: str
    account_id: int
    account_name: str
    security_id: int
    symbol: str | None = None
    isin: str | None = None
    name: str | None = None
    qty: Decimal
    price: Decimal
    fees: Decimal
    notes: str | None = None
    batch_id: int | None = None
    reverses_id: int | None = None

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "Transaction":
        return cls(
            id=entry.id,
            tdate=entry.trade_date,
            ttype=entry.type,
            account_id=entry.account_id,
            account_name=entry.account_name,
            security_id=entry.security_id,
            symbol=entry.symbol,
            isin=entry.isin,
            name=entry.name,
            qty=entry.quantity,
            price=entry.price,
            fees=entry.fees,
            notes=entry.notes,
            batch_id=entry.batch_id,
            reverses_id=entry.reverses_id,
        )
