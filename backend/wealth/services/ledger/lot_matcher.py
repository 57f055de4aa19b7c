"""FIFO lot matching.

Replays ledger entries per position (account + security) and keeps a queue of
open BUY lots ordered by trade date, ties broken by ledger sequence. SELLs
consume the oldest lots first and produce a RealizedDisposal per sell.

All arithmetic is Decimal; QUANTITY_EPSILON is only used where repeated
split divisions make an exact zero check unsafe.
"""

import copy
import logging
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal

from wealth.constants import QUANTITY_EPSILON, CorporateActionType, TransactionType
from wealth.services.ledger.errors import OversellError
from wealth.services.ledger.ledger_store import (
    CorporateActionEvent,
    LedgerEntry,
    effective_entries,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass
class Lot:
    """An open BUY tranche."""

    transaction_id: int | None
    position_key: tuple
    trade_date: date
    seq: int
    original_quantity: Decimal
    remaining_quantity: Decimal
    unit_cost: Decimal  # price + allocated buy fees, per unit

    @property
    def remaining_cost(self) -> Decimal:
        return self.remaining_quantity * self.unit_cost


@dataclass(frozen=True)
class LotConsumption:
    """Quantity taken from one lot by one SELL."""

    lot_transaction_id: int | None
    lot_trade_date: date
    quantity: Decimal
    unit_cost: Decimal
    fees: Decimal  # share of the sell fees allocated to this lot

    @property
    def cost_basis(self) -> Decimal:
        return self.quantity * self.unit_cost


@dataclass
class RealizedDisposal:
    """One SELL's consumption of one or more lots."""

    sell_transaction_id: int | None
    position_key: tuple
    trade_date: date
    quantity: Decimal
    sell_price: Decimal
    fees: Decimal
    consumptions: list[LotConsumption] = field(default_factory=list)

    @property
    def sell_value(self) -> Decimal:
        return self.quantity * self.sell_price

    @property
    def cost_basis(self) -> Decimal:
        return sum((c.cost_basis for c in self.consumptions), ZERO)

    @property
    def realized(self) -> Decimal:
        return self.sell_value - self.cost_basis - self.fees


@dataclass
class PositionSnapshot:
    """Open lots of one position, aggregated."""

    position_key: tuple
    quantity: Decimal
    buy_value: Decimal
    lots: list[Lot]

    @property
    def avg_cost(self) -> Decimal:
        if self.quantity <= QUANTITY_EPSILON:
            return ZERO
        return self.buy_value / self.quantity


class LotMatcher:
    """FIFO engine over ledger entries.

    Example usage:
        matcher = replay(store.read_all(), store.read_corporate_actions())
        for snapshot in matcher.snapshot_holdings():
            ...
    """

    def __init__(self) -> None:
        self._queues: dict[tuple, deque[Lot]] = {}
        self.disposals: list[RealizedDisposal] = []

    def copy(self) -> "LotMatcher":
        """Independent copy; mutating it never affects this matcher."""
        return copy.deepcopy(self)

    def open_quantity(self, position_key: tuple) -> Decimal:
        return sum((lot.remaining_quantity for lot in self._queues.get(position_key, ())), ZERO)

    def apply(self, entry: LedgerEntry) -> RealizedDisposal | None:
        """Apply one ledger entry according to its type."""
        if entry.type == TransactionType.BUY:
            self.apply_buy(entry)
        elif entry.type == TransactionType.SELL:
            return self.apply_sell(entry)
        elif entry.type == TransactionType.SPLIT:
            self.apply_split(entry)
        # DIVIDEND, FEE and OTHER are cash events; they leave lots untouched
        return None

    def apply_buy(self, entry: LedgerEntry) -> Lot:
        quantity = entry.quantity
        unit_cost = (entry.price * quantity + entry.fees) / quantity
        lot = Lot(
            transaction_id=entry.id,
            position_key=entry.position_key,
            trade_date=entry.trade_date,
            seq=entry.seq,
            original_quantity=quantity,
            remaining_quantity=quantity,
            unit_cost=unit_cost,
        )
        self._queues.setdefault(entry.position_key, deque()).append(lot)
        return lot

    def apply_sell(self, entry: LedgerEntry) -> RealizedDisposal:
        """Consume the oldest lots first.

        Raises:
            OversellError: open quantity is short; no lot is touched
        """
        quantity = abs(entry.quantity)
        queue = self._queues.setdefault(entry.position_key, deque())
        available = self.open_quantity(entry.position_key)
        if quantity > available + QUANTITY_EPSILON:
            raise OversellError(
                entry.position_key,
                entry.trade_date,
                requested=quantity,
                available=available,
                transaction_id=entry.id,
                seq=entry.seq,
            )

        disposal = RealizedDisposal(
            sell_transaction_id=entry.id,
            position_key=entry.position_key,
            trade_date=entry.trade_date,
            quantity=quantity,
            sell_price=entry.price,
            fees=entry.fees,
        )

        remaining_to_sell = quantity
        while queue and remaining_to_sell > 0:
            lot = queue[0]
            taken = min(lot.remaining_quantity, remaining_to_sell)
            remaining_to_sell -= taken
            disposal.consumptions.append(
                LotConsumption(
                    lot_transaction_id=lot.transaction_id,
                    lot_trade_date=lot.trade_date,
                    quantity=taken,
                    unit_cost=lot.unit_cost,
                    fees=entry.fees * taken / quantity,
                )
            )
            lot.remaining_quantity -= taken
            if lot.remaining_quantity <= QUANTITY_EPSILON:
                queue.popleft()

        if disposal.consumptions:
            # Division residue goes to the last lot so allocated fees sum to the sell fees
            allocated = sum((c.fees for c in disposal.consumptions[:-1]), ZERO)
            disposal.consumptions[-1] = replace(
                disposal.consumptions[-1], fees=entry.fees - allocated
            )

        if remaining_to_sell > 0:
            # Within epsilon of the open quantity; absorb the rounding residue
            logger.debug(f"Sell {entry.id} left {remaining_to_sell} unmatched within tolerance")

        self.disposals.append(disposal)
        return disposal

    def apply_split(self, entry: LedgerEntry) -> None:
        """Scale one position's open lots by ``entry.quantity`` (new shares per old)."""
        self._scale_queue(entry.position_key, entry.quantity)

    def apply_corporate_action(self, action: CorporateActionEvent) -> None:
        """Apply a SPLIT/BONUS to every position of the security."""
        if action.action_type not in CorporateActionType.LOT_ADJUSTING or not action.ratio:
            logger.debug(f"Corporate action {action.action_type} does not adjust lots")
            return

        factor = action.ratio
        if action.action_type == CorporateActionType.BONUS:
            factor = Decimal("1") + action.ratio

        for position_key in list(self._queues):
            if position_key[1] == action.security_id:
                self._scale_queue(position_key, factor)

    def _scale_queue(self, position_key: tuple, factor: Decimal) -> None:
        queue = self._queues.get(position_key)
        if not queue:
            return
        for lot in queue:
            lot.original_quantity *= factor
            lot.remaining_quantity *= factor
            lot.unit_cost /= factor
        self._queues[position_key] = deque(
            lot for lot in queue if lot.remaining_quantity > QUANTITY_EPSILON
        )

    def snapshot_holdings(self) -> list[PositionSnapshot]:
        """Open positions with weighted-average cost; closed positions are omitted."""
        snapshots = []
        for position_key, queue in self._queues.items():
            lots = [lot for lot in queue if lot.remaining_quantity > QUANTITY_EPSILON]
            quantity = sum((lot.remaining_quantity for lot in lots), ZERO)
            if quantity <= QUANTITY_EPSILON:
                continue
            buy_value = sum((lot.remaining_cost for lot in lots), ZERO)
            snapshots.append(
                PositionSnapshot(
                    position_key=position_key,
                    quantity=quantity,
                    buy_value=buy_value,
                    lots=[copy.copy(lot) for lot in lots],
                )
            )
        return snapshots


def ordered_events(
    entries: Iterable[LedgerEntry],
    corporate_actions: Iterable[CorporateActionEvent] = (),
    as_of: date | None = None,
) -> list[LedgerEntry | CorporateActionEvent]:
    """Merge effective entries and corporate actions into replay order.

    Order is trade date, then corporate actions before same-day trades, then
    ledger sequence.
    """
    events: list[tuple[tuple, LedgerEntry | CorporateActionEvent]] = []
    for entry in effective_entries(list(entries)):
        if as_of is None or entry.trade_date <= as_of:
            events.append(((entry.trade_date, 1, entry.seq), entry))
    for action in corporate_actions:
        if as_of is None or action.action_date <= as_of:
            events.append(((action.action_date, 0, action.id or 0), action))
    events.sort(key=lambda item: item[0])
    return [event for _, event in events]


def replay(
    entries: Iterable[LedgerEntry],
    corporate_actions: Iterable[CorporateActionEvent] = (),
    as_of: date | None = None,
    matcher: LotMatcher | None = None,
) -> LotMatcher:
    """Replay the ledger into a LotMatcher.

    Raises:
        OversellError: the ledger contains a SELL its position cannot cover
    """
    matcher = matcher or LotMatcher()
    for event in ordered_events(entries, corporate_actions, as_of):
        if isinstance(event, CorporateActionEvent):
            matcher.apply_corporate_action(event)
        else:
            matcher.apply(event)
    return matcher
