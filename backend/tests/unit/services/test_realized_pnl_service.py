"""Tests for the realized P&L read model."""

import threading
from datetime import date
from decimal import Decimal

import pytest

from wealth.services.imports.transaction_import_service import TransactionImportService
from wealth.services.portfolio.realized_pnl_service import RealizedPnlService, summarize

HEADER = "tdate,ttype,isin,symbol,name,qty,price,fees,account\n"


@pytest.fixture
def ledger(store):
    service = TransactionImportService(store, lock=threading.Lock())
    outcome = service.import_transactions(
        HEADER
        + "2024-01-10,BUY,US0378331005,AAPL,Apple,5,10,0,Broker\n"
        + "2024-01-11,BUY,US0378331005,AAPL,Apple,5,12,0,Broker\n"
        + "2024-02-10,SELL,US0378331005,AAPL,Apple,7,15,1,Broker\n"
        + "2024-01-15,BUY,,MSFT,Microsoft,10,100,1,Broker\n"
        + "2024-03-01,SELL,,MSFT,Microsoft,4,120,1,Broker\n",
        dry_run=False,
    )
    assert outcome.errors == []
    return store


class TestComputeRealizedPnl:
    """One row per SELL with its consumed lots."""

    def test_fifo_cost_basis(self, ledger):
        rows = RealizedPnlService(ledger).compute_realized_pnl()

        aapl = next(r for r in rows if r.symbol == "AAPL")
        assert aapl.quantity == Decimal("7")
        assert aapl.sell_value == Decimal("105")
        assert aapl.cost_basis == Decimal("74")
        assert aapl.fees == Decimal("1")
        assert aapl.realized == Decimal("30")
        assert [(lot.quantity, lot.unit_cost) for lot in aapl.lots] == [
            (Decimal("5"), Decimal("10")),
            (Decimal("2"), Decimal("12")),
        ]

    def test_sell_fees_are_spread_over_lots(self, ledger):
        aapl = next(r for r in RealizedPnlService(ledger).compute_realized_pnl() if r.symbol == "AAPL")

        assert sum(lot.fees for lot in aapl.lots) == Decimal("1")

    def test_buy_fees_reduce_realized_gain(self, ledger):
        msft = next(r for r in RealizedPnlService(ledger).compute_realized_pnl() if r.symbol == "MSFT")

        assert msft.sell_value == Decimal("480")
        assert msft.cost_basis == Decimal("400.4")
        assert msft.fees == Decimal("1")
        assert msft.realized == Decimal("78.6")

    def test_rows_are_newest_first(self, ledger):
        rows = RealizedPnlService(ledger).compute_realized_pnl()

        assert [r.trade_date for r in rows] == [date(2024, 3, 1), date(2024, 2, 10)]

    def test_start_date_filters_sells_only(self, ledger):
        rows = RealizedPnlService(ledger).compute_realized_pnl(start_date=date(2024, 2, 15))

        assert [r.symbol for r in rows] == ["MSFT"]
        assert rows[0].cost_basis == Decimal("400.4")

    def test_as_of_excludes_later_sells(self, ledger):
        rows = RealizedPnlService(ledger).compute_realized_pnl(as_of=date(2024, 2, 28))

        assert [r.symbol for r in rows] == ["AAPL"]

    def test_rows_carry_account_and_security(self, ledger):
        row = RealizedPnlService(ledger).compute_realized_pnl()[0]

        assert row.account_id == ledger.find_account_id("Broker")
        assert row.account_name == "Broker"
        assert row.security_id == ledger.find_security(None, "MSFT").id

    def test_empty_ledger(self, store):
        assert RealizedPnlService(store).compute_realized_pnl() == []


class TestSummarize:
    """Per-security totals."""

    def test_totals_per_security_sorted_by_symbol(self, ledger):
        summaries = summarize(RealizedPnlService(ledger).compute_realized_pnl())

        assert [(s.symbol, s.realized, s.qty_sold) for s in summaries] == [
            ("AAPL", Decimal("30"), Decimal("7")),
            ("MSFT", Decimal("78.6"), Decimal("4")),
        ]

    def test_multiple_sells_accumulate(self, store):
        TransactionImportService(store, lock=threading.Lock()).import_transactions(
            HEADER
            + "2024-01-10,BUY,,AAPL,,10,10,0,Broker\n"
            + "2024-02-10,SELL,,AAPL,,3,12,0,Broker\n"
            + "2024-03-10,SELL,,AAPL,,2,15,0,Broker\n",
            dry_run=False,
        )

        summaries = summarize(RealizedPnlService(store).compute_realized_pnl())

        assert len(summaries) == 1
        assert summaries[0].qty_sold == Decimal("5")
        assert summaries[0].realized == Decimal("16")
