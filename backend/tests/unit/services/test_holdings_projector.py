"""Tests for the holdings read model."""

import threading
from datetime import date
from decimal import Decimal

import pytest

from wealth.services.imports.transaction_import_service import TransactionImportService
from wealth.services.ledger.ledger_store import CorporateActionEvent
from wealth.services.portfolio.holdings_projector import HoldingsProjector

HEADER = "tdate,ttype,isin,symbol,name,qty,price,fees,account\n"


class FakePrices:
    """Price lookup backed by a dict of security_id -> [(date, close)]."""

    def __init__(self, closes=None):
        self.closes = closes or {}
        self.calls = []

    def find_latest_by_securities(self, security_ids, as_of=None):
        self.calls.append((list(security_ids), as_of))
        latest = {}
        for security_id in security_ids:
            eligible = [
                (day, close)
                for day, close in self.closes.get(security_id, [])
                if as_of is None or day <= as_of
            ]
            if eligible:
                latest[security_id] = max(eligible)[1]
        return latest


def load(store, rows):
    service = TransactionImportService(store, lock=threading.Lock())
    outcome = service.import_transactions(HEADER + "".join(rows), dry_run=False)
    assert outcome.errors == []
    return outcome


@pytest.fixture
def ledger(store):
    load(
        store,
        [
            "2024-01-10,BUY,US0378331005,AAPL,Apple,10,100,1,Broker\n",
            "2024-02-10,SELL,US0378331005,AAPL,Apple,4,120,1,Broker\n",
            "2024-01-15,BUY,US5949181045,MSFT,Microsoft,2,300,0,Broker\n",
            "2024-01-20,BUY,US5949181045,MSFT,Microsoft,3,310,0,Pension\n",
        ],
    )
    return store


def security_id(store, symbol):
    return store.find_security(None, symbol).id


class TestComputeHoldings:
    """Quantities, average cost and valuation."""

    def test_fifo_remainder_and_average_cost(self, ledger):
        holdings = HoldingsProjector(ledger, FakePrices()).compute_holdings(as_of=date(2024, 6, 1))

        aapl = holdings[0]
        assert aapl.symbol == "AAPL"
        assert aapl.quantity == Decimal("6")
        assert aapl.avg_cost == Decimal("100.1")
        assert aapl.buy_value == Decimal("600.6")

    def test_sorted_by_symbol(self, ledger):
        holdings = HoldingsProjector(ledger, FakePrices()).compute_holdings(as_of=date(2024, 6, 1))

        assert [h.symbol for h in holdings] == ["AAPL", "MSFT"]

    def test_positions_aggregate_across_accounts(self, ledger):
        holdings = HoldingsProjector(ledger, FakePrices()).compute_holdings(as_of=date(2024, 6, 1))

        msft = holdings[1]
        assert msft.quantity == Decimal("5")
        assert msft.buy_value == Decimal("1530")
        assert msft.avg_cost == Decimal("306")
        assert msft.account_count == 2

    def test_account_filter(self, ledger):
        pension = ledger.find_account_id("Pension")

        holdings = HoldingsProjector(ledger, FakePrices()).compute_holdings(
            as_of=date(2024, 6, 1), account_id=pension
        )

        assert [(h.symbol, h.quantity) for h in holdings] == [("MSFT", Decimal("3"))]

    def test_without_price_valuation_is_empty(self, ledger):
        holdings = HoldingsProjector(ledger, FakePrices()).compute_holdings(as_of=date(2024, 6, 1))

        assert holdings[0].current_price is None
        assert holdings[0].current_value is None
        assert holdings[0].total_pnl is None
        assert holdings[0].change_pct is None

    def test_valuation_uses_latest_close(self, ledger):
        aapl = security_id(ledger, "AAPL")
        prices = FakePrices({aapl: [(date(2024, 5, 1), Decimal("110")), (date(2024, 7, 1), Decimal("90"))]})

        holding = HoldingsProjector(ledger, prices).compute_holdings(as_of=date(2024, 6, 1))[0]

        assert holding.current_price == Decimal("110")
        assert holding.current_value == Decimal("660")
        assert holding.total_pnl == Decimal("59.4")
        assert holding.change_pct == Decimal("59.4") / Decimal("600.6") * 100

    def test_as_of_excludes_later_trades(self, ledger):
        holdings = HoldingsProjector(ledger, FakePrices()).compute_holdings(as_of=date(2024, 1, 12))

        assert [(h.symbol, h.quantity) for h in holdings] == [("AAPL", Decimal("10"))]

    def test_closed_positions_are_omitted(self, store):
        load(
            store,
            [
                "2024-01-10,BUY,,TSLA,,5,200,0,Broker\n",
                "2024-02-10,SELL,,TSLA,,5,210,0,Broker\n",
            ],
        )

        assert HoldingsProjector(store, FakePrices()).compute_holdings() == []

    def test_empty_ledger(self, store):
        prices = FakePrices()

        assert HoldingsProjector(store, prices).compute_holdings(as_of=date(2024, 1, 1)) == []
        assert prices.calls == [([], date(2024, 1, 1))]

    def test_corporate_split_adjusts_quantity_and_cost(self, ledger):
        aapl = security_id(ledger, "AAPL")
        ledger.add_corporate_action(
            CorporateActionEvent(
                security_id=aapl, action_date=date(2024, 3, 1), action_type="SPLIT", ratio=Decimal("2")
            )
        )

        holding = HoldingsProjector(ledger, FakePrices()).compute_holdings(as_of=date(2024, 6, 1))[0]

        assert holding.quantity == Decimal("12")
        assert holding.buy_value == Decimal("600.6")
        assert holding.avg_cost == Decimal("50.05")
