"""Pydantic schemas for realized P&L."""

from datetime import date
from decimal import Decimal

from wealth.schemas.common import CamelModel
from wealth.services.portfolio.valuation_types import RealizedRow as RealizedRowView
from wealth.services.portfolio.valuation_types import RealizedSummary as RealizedSummaryView


class ConsumedLot(CamelModel):
    """Part of a BUY lot closed by a SELL."""

    buy_transaction_id: int | None = None
    buy_date: date
    qty: Decimal
    unit_cost: Decimal
    cost_basis: Decimal
    fees: Decimal


class RealizedRow(CamelModel):
    """Realized gain or loss of one SELL."""

    sell_transaction_id: int
    tdate: date
    account_id: int
    account_name: str
    security_id: int
    symbol: str | None = None
    isin: str | None = None
    name: str | None = None
    qty: Decimal
    sell_price: Decimal
    sell_value: Decimal
    cost_basis: Decimal
    fees: Decimal
    realized: Decimal
    lots: list[ConsumedLot] = []

    @classmethod
    def from_view(cls, row: RealizedRowView) -> "RealizedRow":
        return cls(
            sell_transaction_id=row.sell_transaction_id,
            tdate=row.trade_date,
            account_id=row.account_id,
            account_name=row.account_name,
            security_id=row.security_id,
            symbol=row.symbol,
            isin=row.isin,
            name=row.name,
            qty=row.quantity,
            sell_price=row.sell_price,
            sell_value=row.sell_value,
            cost_basis=row.cost_basis,
            fees=row.fees,
            realized=row.realized,
            lots=[
                ConsumedLot(
                    buy_transaction_id=lot.buy_transaction_id,
                    buy_date=lot.buy_date,
                    qty=lot.quantity,
                    unit_cost=lot.unit_cost,
                    cost_basis=lot.cost_basis,
                    fees=lot.fees,
                )
                for lot in row.lots
            ],
        )


class RealizedSummary(CamelModel):
    """Realized totals for one security."""

    security_id: int
    symbol: str | None = None
    realized: Decimal
    qty_sold: Decimal

    @classmethod
    def from_view(cls, summary: RealizedSummaryView) -> "RealizedSummary":
        return cls(
            security_id=summary.security_id,
            symbol=summary.symbol,
            realized=summary.realized,
            qty_sold=summary.qty_sold,
        )
