"""Value objects for holdings and realized P&L read models."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


@dataclass
class HoldingView:
    """Open position of one security, across accounts or for one account."""

    security_id: int
    symbol: str | None
    isin: str | None
    name: str | None
    quantity: Decimal
    avg_cost: Decimal
    buy_value: Decimal

    # Market values; None when no stored price is known
    current_price: Decimal | None = None
    current_value: Decimal | None = None
    total_pnl: Decimal | None = None
    change_pct: Decimal | None = None

    account_count: int = 1


@dataclass
class ConsumedLot:
    """Part of a BUY lot closed by a SELL."""

    buy_transaction_id: int | None
    buy_date: date
    quantity: Decimal
    unit_cost: Decimal
    cost_basis: Decimal
    fees: Decimal


@dataclass
class RealizedRow:
    """Realized gain or loss of one SELL."""

    sell_transaction_id: int
    trade_date: date
    account_id: int
    account_name: str
    security_id: int
    symbol: str | None
    isin: str | None
    name: str | None
    quantity: Decimal
    sell_price: Decimal
    sell_value: Decimal
    cost_basis: Decimal
    fees: Decimal
    realized: Decimal
    lots: list[ConsumedLot] = field(default_factory=list)


@dataclass
class RealizedSummary:
    """Realized totals for one security."""

    security_id: int
    symbol: str | None
    realized: Decimal
    qty_sold: Decimal
