"""Corporate actions API router."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from wealth.database import get_db
from wealth.schemas.common import MessageResponse, Page
from wealth.schemas.corporate_action import (
    CorporateAction,
    CorporateActionCreate,
    CorporateActionUpdate,
)
from wealth.services.corporate_actions_service import CorporateActionsService
from wealth.services.repositories import CorporateActionRepository
from wealth.services.shared.pagination import paginate

router = APIRouter(prefix="/api/corporate-actions", tags=["corporate-actions"])


@router.get("", response_model=Page[CorporateAction])
async def list_corporate_actions(
    limit: int | None = Query(None, description="Maximum records to return"),
    offset: int = Query(0, description="Number of records to skip"),
    db: Session = Depends(get_db),
):
    """Get paginated list of corporate actions, oldest first."""
    page = paginate(CorporateActionRepository(db).find_all(), limit, offset)
    return Page[CorporateAction].build(
        page, [CorporateAction.model_validate(a) for a in page.items]
    )


@router.post("", response_model=CorporateAction, status_code=status.HTTP_201_CREATED)
def create_corporate_action(data: CorporateActionCreate, db: Session = Depends(get_db)):
    """
    Record a corporate action.

    SPLIT and BONUS rescale open lots; returns 409 if that would leave a
    later SELL uncovered.
    """
    return CorporateActionsService(db).record(**data.model_dump())


@router.put("/{action_id}", response_model=CorporateAction)
def update_corporate_action(
    action_id: int, data: CorporateActionUpdate, db: Session = Depends(get_db)
):
    """Replace an existing corporate action."""
    return CorporateActionsService(db).update(action_id, **data.model_dump())


@router.delete("/{action_id}", response_model=MessageResponse)
def delete_corporate_action(action_id: int, db: Session = Depends(get_db)):
    """Delete a corporate action."""
    CorporateActionsService(db).delete(action_id)
    return MessageResponse(message=f"Corporate action {action_id} deleted")
