"""Service for recording splits, bonus issues and other corporate actions.

A SPLIT or BONUS rescales every open lot of the security during replay, so
adding, changing or removing one can uncover a later SELL (a reverse split
shrinks the position). Every change is checked against a ledger simulation
before it is committed.
"""

import logging

from sqlalchemy.orm import Session

from wealth.models import CorporateAction
from wealth.services.ledger.ledger_store import CorporateActionEvent
from wealth.services.ledger.simulation import LedgerSimulation
from wealth.services.ledger.sql_ledger_store import SqlLedgerStore
from wealth.services.ledger.write_lock import ledger_write_scope
from wealth.services.repositories import CorporateActionRepository, SecurityRepository

logger = logging.getLogger(__name__)


def _event(action: CorporateAction) -> CorporateActionEvent:
    return CorporateActionEvent(
        id=action.id,
        security_id=action.security_id,
        action_date=action.action_date,
        action_type=action.action_type,
        ratio=action.ratio,
    )


class CorporateActionsService:
    """Create, update and delete corporate actions without breaking the ledger.

    Example usage:
        service = CorporateActionsService(db)
        action = service.record(security_id=3, action_date=date(2024, 6, 10),
                                action_type="SPLIT", ratio=Decimal("10"))
    """

    def __init__(self, db: Session) -> None:
        self._db = db
        self._actions = CorporateActionRepository(db)
        self._securities = SecurityRepository(db)
        self._store = SqlLedgerStore(db)

    def _check(self, security_id: int, actions: list[CorporateActionEvent]) -> None:
        """Raises OversellError if the security's positions cannot replay with ``actions``."""
        simulation = LedgerSimulation(self._store.read_all(), self._store.read_corporate_actions())
        simulation.try_replace_corporate_actions(security_id, actions)

    def _others(self, security_id: int, exclude_id: int | None = None) -> list[CorporateActionEvent]:
        return [
            _event(action)
            for action in self._actions.find_by_security(security_id)
            if action.id != exclude_id
        ]

    def record(self, **fields) -> CorporateAction:
        """Record a new corporate action.

        Raises:
            NotFoundError: unknown security
            OversellError: the action would leave a SELL uncovered
        """
        self._securities.get_by_id(fields["security_id"])
        action = CorporateAction(**fields)
        with ledger_write_scope(self._store):
            candidate = _event(action)
            self._check(action.security_id, self._others(action.security_id) + [candidate])
            self._actions.add(action)
            self._db.commit()
        logger.info(
            f"Recorded {action.action_type} for security {action.security_id} on {action.action_date}"
        )
        return action

    def update(self, action_id: int, **fields) -> CorporateAction:
        """Replace all fields of an existing corporate action.

        Raises:
            NotFoundError: unknown action or security
            OversellError: the change would leave a SELL uncovered
        """
        action = self._actions.get_by_id(action_id)
        self._securities.get_by_id(fields["security_id"])
        old_security_id = action.security_id

        with ledger_write_scope(self._store):
            updated = CorporateActionEvent(
                id=action.id,
                security_id=fields["security_id"],
                action_date=fields["action_date"],
                action_type=fields["action_type"],
                ratio=fields.get("ratio"),
            )
            self._check(updated.security_id, self._others(updated.security_id, action.id) + [updated])
            if old_security_id != updated.security_id:
                self._check(old_security_id, self._others(old_security_id, action.id))

            for key, value in fields.items():
                setattr(action, key, value)
            self._db.commit()
        logger.info(f"Updated corporate action {action_id}")
        return action

    def delete(self, action_id: int) -> None:
        """Delete a corporate action.

        Raises:
            NotFoundError: unknown action
            OversellError: removing it would leave a SELL uncovered
        """
        action = self._actions.get_by_id(action_id)
        with ledger_write_scope(self._store):
            self._check(action.security_id, self._others(action.security_id, action.id))
            self._actions.delete(action)
            self._db.commit()
        logger.info(f"Deleted corporate action {action_id}")
