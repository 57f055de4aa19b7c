"""Corporate action data access layer."""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from wealth.models import CorporateAction
from wealth.services.repositories.exceptions import NotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence


class CorporateActionRepository:
    """Centralized corporate action data access."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_id(self, action_id: int) -> CorporateAction | None:
        return self._db.query(CorporateAction).filter(CorporateAction.id == action_id).first()

    def get_by_id(self, action_id: int) -> CorporateAction:
        action = self.find_by_id(action_id)
        if action is None:
            raise NotFoundError("CorporateAction", action_id)
        return action

    def find_all(self) -> "Sequence[CorporateAction]":
        return (
            self._db.query(CorporateAction)
            .order_by(CorporateAction.action_date, CorporateAction.id)
            .all()
        )

    def find_by_security(self, security_id: int) -> "Sequence[CorporateAction]":
        return (
            self._db.query(CorporateAction)
            .filter(CorporateAction.security_id == security_id)
            .order_by(CorporateAction.action_date, CorporateAction.id)
            .all()
        )

    def add(self, action: CorporateAction) -> CorporateAction:
        self._db.add(action)
        self._db.flush()
        return action

    def delete(self, action: CorporateAction) -> None:
        self._db.delete(action)
        self._db.flush()
