"""Realized P&L read model.

One row per SELL, built from the disposals the lot matcher records while
replaying the ledger.
"""

import logging
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from wealth.services.ledger.ledger_store import LedgerStore
from wealth.services.ledger.lot_matcher import replay
from wealth.services.portfolio.holdings_projector import sort_key_symbol
from wealth.services.portfolio.valuation_types import (
    ConsumedLot,
    RealizedRow,
    RealizedSummary,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class RealizedPnlService:
    """Computes realized gains from FIFO lot consumption.

    Example usage:
        service = RealizedPnlService(SqlLedgerStore(db))
        rows = service.compute_realized_pnl(start_date=date(2024, 1, 1))
        for summary in summarize(rows):
            print(summary.symbol, summary.realized)
    """

    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def compute_realized_pnl(
        self, as_of: date | None = None, start_date: date | None = None
    ) -> list[RealizedRow]:
        """Realized rows for SELLs dated ``start_date``..``as_of`` (both optional).

        Lots are always matched from the start of the ledger, so a window
        only filters which SELLs are reported.
        """
        entries = self.store.read_all(as_of=as_of)
        by_id = {entry.id: entry for entry in entries}
        matcher = replay(entries, self.store.read_corporate_actions(), as_of=as_of)

        rows = []
        for disposal in matcher.disposals:
            if start_date is not None and disposal.trade_date < start_date:
                continue
            sell = by_id[disposal.sell_transaction_id]
            rows.append(
                RealizedRow(
                    sell_transaction_id=sell.id,
                    trade_date=disposal.trade_date,
                    account_id=sell.account_id,
                    account_name=sell.account_name,
                    security_id=sell.security_id,
                    symbol=sell.symbol,
                    isin=sell.isin,
                    name=sell.name,
                    quantity=disposal.quantity,
                    sell_price=disposal.sell_price,
                    sell_value=disposal.sell_value,
                    cost_basis=disposal.cost_basis,
                    fees=disposal.fees,
                    realized=disposal.realized,
                    lots=[
                        ConsumedLot(
                            buy_transaction_id=c.lot_transaction_id,
                            buy_date=c.lot_trade_date,
                            quantity=c.quantity,
                            unit_cost=c.unit_cost,
                            cost_basis=c.cost_basis,
                            fees=c.fees,
                        )
                        for c in disposal.consumptions
                    ],
                )
            )

        rows.sort(key=lambda r: (r.trade_date, r.sell_transaction_id), reverse=True)
        return rows


def summarize(rows: Iterable[RealizedRow]) -> list[RealizedSummary]:
    """Realized gain and quantity sold per security, sorted by symbol."""
    totals: dict[int, RealizedSummary] = {}
    isins: dict[int, str | None] = {}
    for row in rows:
        summary = totals.get(row.security_id)
        if summary is None:
            summary = totals[row.security_id] = RealizedSummary(
                security_id=row.security_id, symbol=row.symbol, realized=ZERO, qty_sold=ZERO
            )
            isins[row.security_id] = row.isin
        summary.realized += row.realized
        summary.qty_sold += row.quantity

    return sorted(
        totals.values(), key=lambda s: sort_key_symbol(s.symbol, isins[s.security_id])
    )
