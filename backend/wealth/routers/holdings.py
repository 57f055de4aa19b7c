"""Holdings API router."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from wealth.dependencies.services import get_holdings_projector
from wealth.schemas.common import Page
from wealth.schemas.holding import Holding
from wealth.services.portfolio.holdings_projector import HoldingsProjector
from wealth.services.shared.pagination import paginate

router = APIRouter(prefix="/api/holdings", tags=["holdings"])


@router.get("", response_model=Page[Holding])
async def list_holdings(
    limit: int | None = Query(None, description="Maximum records to return"),
    offset: int = Query(0, description="Number of records to skip"),
    as_of: date | None = Query(None, alias="asOf", description="Valuation date (default today)"),
    account_id: int | None = Query(None, alias="accountId", description="Only this account"),
    projector: HoldingsProjector = Depends(get_holdings_projector),
):
    """
    Get open holdings, sorted by symbol.

    Quantities are aggregated across accounts unless ``accountId`` is given.
    Market fields are null for securities without a stored price.
    """
    holdings = projector.compute_holdings(as_of=as_of, account_id=account_id)
    page = paginate(holdings, limit, offset)
    return Page[Holding].build(page, [Holding.from_view(h) for h in page.items])
