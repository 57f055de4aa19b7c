"""Realized P&L API router."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from wealth.dependencies.services import get_realized_pnl_service
from wealth.schemas.common import Page
from wealth.schemas.realized import RealizedRow, RealizedSummary
from wealth.services.portfolio.realized_pnl_service import RealizedPnlService, summarize
from wealth.services.shared.pagination import paginate

router = APIRouter(prefix="/api/realized", tags=["realized"])


@router.get("", response_model=Page[RealizedRow])
async def list_realized(
    limit: int | None = Query(None, description="Maximum records to return"),
    offset: int = Query(0, description="Number of records to skip"),
    as_of: date | None = Query(None, alias="asOf"),
    start_date: date | None = Query(None, alias="startDate"),
    service: RealizedPnlService = Depends(get_realized_pnl_service),
):
    """Get realized P&L per SELL, newest first."""
    rows = service.compute_realized_pnl(as_of=as_of, start_date=start_date)
    page = paginate(rows, limit, offset)
    return Page[RealizedRow].build(page, [RealizedRow.from_view(r) for r in page.items])


@router.get("/summary", response_model=list[RealizedSummary])
async def realized_summary(
    as_of: date | None = Query(None, alias="asOf"),
    start_date: date | None = Query(None, alias="startDate"),
    service: RealizedPnlService = Depends(get_realized_pnl_service),
):
    """Get realized P&L and quantity sold per security, sorted by symbol."""
    rows = service.compute_realized_pnl(as_of=as_of, start_date=start_date)
    return [RealizedSummary.from_view(s) for s in summarize(rows)]
