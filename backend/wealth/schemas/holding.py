"""Pydantic schemas for holdings."""

from decimal import Decimal

from wealth.schemas.common import CamelModel
from wealth.services.portfolio.valuation_types import HoldingView


class Holding(CamelModel):
    """Open position of one security; market fields are null without a stored price."""

    security_id: int
    symbol: str | None = None
    isin: str | None = None
    name: str | None = None
    qty: Decimal
    avg_cost: Decimal
    buy_value: Decimal
    cmp: Decimal | None = None
    current_value: Decimal | None = None
    total_pnl: Decimal | None = None
    change_pct: Decimal | None = None
    account_count: int = 1

    @classmethod
    def from_view(cls, view: HoldingView) -> "Holding":
        return cls(
            security_id=view.security_id,
            symbol=view.symbol,
            isin=view.isin,
            name=view.name,
            qty=view.quantity,
            avg_cost=view.avg_cost,
            buy_value=view.buy_value,
            cmp=view.current_price,
            current_value=view.current_value,
            total_pnl=view.total_pnl,
            change_pct=view.change_pct,
            account_count=view.account_count,
        )
