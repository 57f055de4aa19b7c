"""Copy-on-write ledger simulation.

Imports, direct entries, reversals and corporate-action edits are all
trial-applied here first. The real store is only written once the
simulation accepted the change, so a dry run and a commit share one code path.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable

from wealth.constants import TransactionType
from wealth.services.ledger.errors import OversellError
from wealth.services.ledger.ledger_store import (
    CorporateActionEvent,
    LedgerEntry,
    effective_entries,
)
from wealth.services.ledger.lot_matcher import replay

logger = logging.getLogger(__name__)


class LedgerSimulation:
    """In-memory working copy of the ledger, grouped by position.

    Positions are independent, so a candidate only replays the entries of
    its own position (plus the corporate actions of its security).
    """

    def __init__(
        self,
        entries: Iterable[LedgerEntry],
        corporate_actions: Iterable[CorporateActionEvent] = (),
    ) -> None:
        self._positions: dict[tuple, list[LedgerEntry]] = defaultdict(list)
        self._actions: dict[int | str, list[CorporateActionEvent]] = defaultdict(list)
        max_seq = 0
        for entry in effective_entries(list(entries)):
            self._positions[entry.position_key].append(entry)
            max_seq = max(max_seq, entry.seq)
        for action in corporate_actions:
            self._actions[action.security_id].append(action)
        self._next_seq = max_seq + 1

    def next_seq(self) -> int:
        """Reserve the next ledger sequence number for a candidate entry."""
        seq = self._next_seq
        self._next_seq += 1
        return seq

    def entries_for(self, position_key: tuple) -> list[LedgerEntry]:
        return list(self._positions.get(position_key, ()))

    def _check(self, position_key: tuple, entries: list[LedgerEntry], actions=None) -> None:
        security_key = position_key[1]
        replay(entries, actions if actions is not None else self._actions.get(security_key, ()))

    def try_add(self, entry: LedgerEntry) -> None:
        """Add a candidate entry.

        Only lot-reducing entries can break a position, so BUY and cash
        entries are accepted without a replay.

        Raises:
            OversellError: the entry (or a later SELL of the same position)
                would need more quantity than is open
        """
        key = entry.position_key
        if entry.type in TransactionType.LOT_REDUCING:
            self._check(key, self._positions.get(key, []) + [entry])
        self._positions[key].append(entry)

    def try_remove(self, entry_id: int) -> LedgerEntry:
        """Remove an existing entry, as a reversal would.

        Raises:
            KeyError: no effective entry with that id
            OversellError: a remaining SELL would no longer be covered
        """
        for key, entries in self._positions.items():
            for entry in entries:
                if entry.id == entry_id:
                    remaining = [e for e in entries if e.id != entry_id]
                    self._check(key, remaining)
                    self._positions[key] = remaining
                    return entry
        raise KeyError(entry_id)

    def try_replace_corporate_actions(
        self, security_id: int, actions: list[CorporateActionEvent]
    ) -> None:
        """Swap the corporate actions of one security.

        Raises:
            OversellError: a reverse split (or removed split) leaves a SELL uncovered
        """
        for key, entries in self._positions.items():
            if key[1] == security_id:
                self._check(key, entries, actions)
        self._actions[security_id] = list(actions)


def describe_oversell(error: OversellError, candidate: LedgerEntry) -> str:
    """Human-readable message for an oversell raised while adding ``candidate``."""
    if error.seq is not None and error.seq != candidate.seq:
        return f"Would leave a later sale uncovered: {error}"
    return str(error)
