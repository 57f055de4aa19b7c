"""Tests for FIFO lot matching."""

from datetime import date
from decimal import Decimal

import pytest

from wealth.services.ledger.errors import OversellError
from wealth.services.ledger.ledger_store import CorporateActionEvent, LedgerEntry
from wealth.services.ledger.lot_matcher import LotMatcher, ordered_events, replay

ACCOUNT = 1
SECURITY = 10


def entry(seq, trade_date, txn_type, qty, price="0", fees="0", account=ACCOUNT, security=SECURITY,
          **kwargs):
    return LedgerEntry(
        id=seq,
        seq=seq,
        trade_date=trade_date,
        type=txn_type,
        quantity=Decimal(qty),
        price=Decimal(price),
        fees=Decimal(fees),
        account_id=account,
        security_id=security,
        **kwargs,
    )


class TestBuyAndSell:
    """FIFO consumption of BUY lots."""

    def test_sell_consumes_oldest_lots_first(self):
        matcher = replay([
            entry(1, date(2024, 1, 1), "BUY", "5", "10"),
            entry(2, date(2024, 1, 2), "BUY", "5", "12"),
            entry(3, date(2024, 1, 3), "SELL", "7", "15"),
        ])

        disposal = matcher.disposals[0]
        assert [c.quantity for c in disposal.consumptions] == [Decimal("5"), Decimal("2")]
        assert disposal.cost_basis == Decimal("74")
        assert matcher.open_quantity((ACCOUNT, SECURITY)) == Decimal("3")

    def test_buy_fees_are_part_of_unit_cost(self):
        matcher = replay([entry(1, date(2024, 1, 1), "BUY", "10", "100", "1")])

        snapshot = matcher.snapshot_holdings()[0]
        assert snapshot.quantity == Decimal("10")
        assert snapshot.avg_cost == Decimal("100.1")
        assert snapshot.buy_value == Decimal("1001")

    def test_realized_gain_is_net_of_fees(self):
        matcher = replay([
            entry(1, date(2024, 1, 1), "BUY", "10", "100", "1"),
            entry(2, date(2024, 2, 1), "SELL", "4", "120", "1"),
        ])

        disposal = matcher.disposals[0]
        assert disposal.sell_value == Decimal("480")
        assert disposal.cost_basis == Decimal("400.4")
        assert disposal.fees == Decimal("1")
        assert disposal.realized == Decimal("78.6")
        assert matcher.snapshot_holdings()[0].avg_cost == Decimal("100.1")

    def test_consumed_quantity_equals_sell_quantity(self):
        matcher = replay([
            entry(1, date(2024, 1, 1), "BUY", "3", "10"),
            entry(2, date(2024, 1, 2), "BUY", "4", "11"),
            entry(3, date(2024, 1, 3), "BUY", "5", "12"),
            entry(4, date(2024, 1, 4), "SELL", "9", "20", "3"),
        ])

        disposal = matcher.disposals[0]
        assert sum(c.quantity for c in disposal.consumptions) == Decimal("9")
        assert sum(c.fees for c in disposal.consumptions) == Decimal("3")

    def test_sell_fees_allocated_by_quantity(self):
        matcher = replay([
            entry(1, date(2024, 1, 1), "BUY", "6", "10"),
            entry(2, date(2024, 1, 2), "BUY", "6", "10"),
            entry(3, date(2024, 1, 3), "SELL", "8", "12", "4"),
        ])

        fees = [c.fees for c in matcher.disposals[0].consumptions]
        assert fees == [Decimal("3"), Decimal("1")]

    def test_fully_sold_lot_leaves_queue(self):
        matcher = replay([
            entry(1, date(2024, 1, 1), "BUY", "5", "10"),
            entry(2, date(2024, 1, 2), "SELL", "5", "11"),
        ])

        assert matcher.snapshot_holdings() == []
        assert matcher.open_quantity((ACCOUNT, SECURITY)) == Decimal("0")

    def test_positions_are_independent(self):
        matcher = replay([
            entry(1, date(2024, 1, 1), "BUY", "5", "10", account=1),
            entry(2, date(2024, 1, 1), "BUY", "5", "20", account=2),
            entry(3, date(2024, 1, 2), "SELL", "5", "30", account=2),
        ])

        assert matcher.open_quantity((1, SECURITY)) == Decimal("5")
        assert matcher.open_quantity((2, SECURITY)) == Decimal("0")
        assert matcher.disposals[0].cost_basis == Decimal("100")

    def test_cash_events_do_not_touch_lots(self):
        matcher = replay([
            entry(1, date(2024, 1, 1), "BUY", "5", "10"),
            entry(2, date(2024, 1, 2), "DIVIDEND", "0", "0"),
            entry(3, date(2024, 1, 3), "FEE", "0", "0", "2"),
            entry(4, date(2024, 1, 4), "OTHER", "0"),
        ])

        assert matcher.open_quantity((ACCOUNT, SECURITY)) == Decimal("5")
        assert matcher.disposals == []


class TestOversell:
    """A SELL never consumes more than is open."""

    def test_oversell_raises_and_leaves_lots_untouched(self):
        matcher = LotMatcher()
        matcher.apply(entry(1, date(2024, 1, 1), "BUY", "5", "10"))

        with pytest.raises(OversellError) as exc_info:
            matcher.apply(entry(2, date(2024, 1, 2), "SELL", "6", "11"))

        assert exc_info.value.requested == Decimal("6")
        assert exc_info.value.available == Decimal("5")
        assert exc_info.value.seq == 2
        assert matcher.open_quantity((ACCOUNT, SECURITY)) == Decimal("5")
        assert matcher.disposals == []

    def test_sell_before_buy_date_is_oversell(self):
        with pytest.raises(OversellError):
            replay([
                entry(1, date(2024, 2, 1), "BUY", "5", "10"),
                entry(2, date(2024, 1, 1), "SELL", "1", "11"),
            ])

    def test_oversell_message(self):
        with pytest.raises(OversellError, match="Sell of 3 on 2024-01-02 exceeds open quantity 0"):
            replay([entry(1, date(2024, 1, 2), "SELL", "3", "10")])

    def test_copy_is_independent(self):
        matcher = replay([entry(1, date(2024, 1, 1), "BUY", "5", "10")])
        clone = matcher.copy()
        clone.apply(entry(2, date(2024, 1, 2), "SELL", "5", "11"))

        assert matcher.open_quantity((ACCOUNT, SECURITY)) == Decimal("5")
        assert clone.open_quantity((ACCOUNT, SECURITY)) == Decimal("0")


class TestSplitsAndCorporateActions:
    """Share-count changes keep the cost basis."""

    def test_split_entry_scales_position(self):
        matcher = replay([
            entry(1, date(2024, 1, 1), "BUY", "10", "100"),
            entry(2, date(2024, 6, 1), "SPLIT", "4"),
        ])

        snapshot = matcher.snapshot_holdings()[0]
        assert snapshot.quantity == Decimal("40")
        assert snapshot.avg_cost == Decimal("25")
        assert snapshot.buy_value == Decimal("1000")

    def test_split_entry_only_affects_its_account(self):
        matcher = replay([
            entry(1, date(2024, 1, 1), "BUY", "10", "100", account=1),
            entry(2, date(2024, 1, 1), "BUY", "10", "100", account=2),
            entry(3, date(2024, 6, 1), "SPLIT", "2", account=1),
        ])

        assert matcher.open_quantity((1, SECURITY)) == Decimal("20")
        assert matcher.open_quantity((2, SECURITY)) == Decimal("10")

    def test_corporate_split_affects_every_account(self):
        action = CorporateActionEvent(
            id=1, security_id=SECURITY, action_date=date(2024, 6, 1), action_type="SPLIT",
            ratio=Decimal("2"),
        )
        matcher = replay(
            [
                entry(1, date(2024, 1, 1), "BUY", "10", "100", account=1),
                entry(2, date(2024, 1, 1), "BUY", "5", "100", account=2),
            ],
            [action],
        )

        assert matcher.open_quantity((1, SECURITY)) == Decimal("20")
        assert matcher.open_quantity((2, SECURITY)) == Decimal("10")

    def test_bonus_issue_adds_shares_per_share_held(self):
        action = CorporateActionEvent(
            id=1, security_id=SECURITY, action_date=date(2024, 6, 1), action_type="BONUS",
            ratio=Decimal("0.5"),
        )
        matcher = replay([entry(1, date(2024, 1, 1), "BUY", "10", "30")], [action])

        snapshot = matcher.snapshot_holdings()[0]
        assert snapshot.quantity == Decimal("15")
        assert snapshot.buy_value == Decimal("300")

    def test_recorded_only_actions_do_not_adjust(self):
        action = CorporateActionEvent(
            id=1, security_id=SECURITY, action_date=date(2024, 6, 1), action_type="DIVIDEND",
            ratio=Decimal("3"),
        )
        matcher = replay([entry(1, date(2024, 1, 1), "BUY", "10", "30")], [action])

        assert matcher.open_quantity((ACCOUNT, SECURITY)) == Decimal("10")

    def test_reverse_split_can_uncover_later_sell(self):
        action = CorporateActionEvent(
            id=1, security_id=SECURITY, action_date=date(2024, 6, 1), action_type="SPLIT",
            ratio=Decimal("0.1"),
        )
        with pytest.raises(OversellError):
            replay(
                [
                    entry(1, date(2024, 1, 1), "BUY", "10", "30"),
                    entry(2, date(2024, 7, 1), "SELL", "5", "300"),
                ],
                [action],
            )


class TestReplayOrdering:
    """Replay order, reversals and as-of cut-off."""

    def test_corporate_action_applies_before_same_day_trades(self):
        action = CorporateActionEvent(
            id=1, security_id=SECURITY, action_date=date(2024, 6, 1), action_type="SPLIT",
            ratio=Decimal("2"),
        )
        matcher = replay(
            [
                entry(1, date(2024, 1, 1), "BUY", "10", "100"),
                entry(2, date(2024, 6, 1), "BUY", "10", "50"),
            ],
            [action],
        )

        assert matcher.open_quantity((ACCOUNT, SECURITY)) == Decimal("30")

    def test_same_day_ties_broken_by_sequence(self):
        events = ordered_events([
            entry(5, date(2024, 1, 1), "SELL", "1", "10"),
            entry(2, date(2024, 1, 1), "BUY", "1", "10"),
        ])

        assert [e.seq for e in events] == [2, 5]

    def test_reversed_entries_are_excluded(self):
        matcher = replay([
            entry(1, date(2024, 1, 1), "BUY", "5", "10"),
            entry(2, date(2024, 1, 2), "BUY", "5", "12"),
            entry(3, date(2024, 1, 3), "BUY", "5", "12", reverses_id=2),
        ])

        assert matcher.open_quantity((ACCOUNT, SECURITY)) == Decimal("5")

    def test_as_of_cuts_off_later_events(self):
        matcher = replay(
            [
                entry(1, date(2024, 1, 1), "BUY", "5", "10"),
                entry(2, date(2024, 3, 1), "SELL", "5", "12"),
            ],
            as_of=date(2024, 2, 1),
        )

        assert matcher.open_quantity((ACCOUNT, SECURITY)) == Decimal("5")
        assert matcher.disposals == []
