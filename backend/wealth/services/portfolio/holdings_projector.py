"""Holdings read model.

Replays the ledger through the lot matcher and values the open lots with
the latest stored close price.
"""

import logging
from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Protocol

from wealth.services.ledger.ledger_store import LedgerEntry, LedgerStore
from wealth.services.ledger.lot_matcher import replay
from wealth.services.portfolio.valuation_types import HoldingView

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class PriceLookup(Protocol):
    """Source of closing prices. ``PriceRepository`` implements it."""

    def find_latest_by_securities(
        self, security_ids: list[int], as_of: date | None = None
    ) -> dict[int, Decimal]:
        """Latest close on or before ``as_of`` per security; unknown ones are absent."""
        ...


def security_labels(entries: Iterable[LedgerEntry]) -> dict[int, tuple[str | None, str | None, str | None]]:
    """security_id -> (symbol, isin, name), from the ledger's denormalized fields."""
    labels = {}
    for entry in entries:
        if entry.security_id is not None:
            labels[entry.security_id] = (entry.symbol, entry.isin, entry.name)
    return labels


def sort_key_symbol(symbol: str | None, isin: str | None) -> tuple[str, str]:
    return ((symbol or "").upper(), (isin or "").upper())


class HoldingsProjector:
    """Computes current holdings from the ledger.

    Example usage:
        projector = HoldingsProjector(SqlLedgerStore(db), PriceRepository(db))
        for holding in projector.compute_holdings(as_of=date.today()):
            print(holding.symbol, holding.quantity, holding.total_pnl)
    """

    def __init__(self, store: LedgerStore, prices: PriceLookup) -> None:
        self.store = store
        self.prices = prices

    def compute_holdings(
        self, as_of: date | None = None, account_id: int | None = None
    ) -> list[HoldingView]:
        """Open holdings on ``as_of`` (default: today), sorted by symbol."""
        as_of = as_of or date.today()
        entries = self.store.read_all(as_of=as_of)
        matcher = replay(entries, self.store.read_corporate_actions(), as_of=as_of)
        labels = security_labels(entries)

        totals: dict[int, dict] = {}
        for snapshot in matcher.snapshot_holdings():
            snapshot_account, security_id = snapshot.position_key
            if account_id is not None and snapshot_account != account_id:
                continue
            bucket = totals.setdefault(
                security_id, {"quantity": ZERO, "buy_value": ZERO, "accounts": set()}
            )
            bucket["quantity"] += snapshot.quantity
            bucket["buy_value"] += snapshot.buy_value
            bucket["accounts"].add(snapshot_account)

        prices = self.prices.find_latest_by_securities(list(totals), as_of)

        holdings = []
        for security_id, bucket in totals.items():
            quantity = bucket["quantity"]
            buy_value = bucket["buy_value"]
            symbol, isin, name = labels.get(security_id, (None, None, None))
            holding = HoldingView(
                security_id=security_id,
                symbol=symbol,
                isin=isin,
                name=name,
                quantity=quantity,
                avg_cost=buy_value / quantity,
                buy_value=buy_value,
                account_count=len(bucket["accounts"]),
            )

            price = prices.get(security_id)
            if price is not None:
                holding.current_price = price
                holding.current_value = quantity * price
                holding.total_pnl = holding.current_value - buy_value
                if buy_value > 0:
                    holding.change_pct = holding.total_pnl / buy_value * HUNDRED
            holdings.append(holding)

        holdings.sort(key=lambda h: sort_key_symbol(h.symbol, h.isin))
        logger.debug(f"Projected {len(holdings)} holdings as of {as_of}")
        return holdings
