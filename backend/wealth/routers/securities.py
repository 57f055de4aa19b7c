"""Securities API router."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from wealth.database import get_db
from wealth.schemas.common import MessageResponse, Page
from wealth.schemas.security import Security, SecurityCreate, SecurityUpdate
from wealth.services.repositories import SecurityRepository
from wealth.services.shared.pagination import paginate

router = APIRouter(prefix="/api/securities", tags=["securities"])


@router.get("", response_model=Page[Security])
async def list_securities(
    limit: int | None = Query(None, description="Maximum records to return"),
    offset: int = Query(0, description="Number of records to skip"),
    db: Session = Depends(get_db),
):
    """Get paginated list of securities, sorted by symbol."""
    page = paginate(SecurityRepository(db).find_all(), limit, offset)
    return Page[Security].build(page, [Security.model_validate(s) for s in page.items])


@router.get("/{security_id}", response_model=Security)
async def get_security(security_id: int, db: Session = Depends(get_db)):
    """Get a specific security by ID."""
    return SecurityRepository(db).get_by_id(security_id)


@router.post("", response_model=Security, status_code=status.HTTP_201_CREATED)
async def create_security(data: SecurityCreate, db: Session = Depends(get_db)):
    """Create a new security. ISINs are unique."""
    security = SecurityRepository(db).create(
        name=data.name, isin=data.isin or None, symbol=data.symbol or None, currency=data.currency
    )
    db.commit()
    db.refresh(security)
    return security


@router.put("/{security_id}", response_model=Security)
async def update_security(security_id: int, data: SecurityUpdate, db: Session = Depends(get_db)):
    """Update an existing security."""
    security = SecurityRepository(db).update(
        security_id, name=data.name, isin=data.isin, symbol=data.symbol, currency=data.currency
    )
    db.commit()
    db.refresh(security)
    return security


@router.delete("/{security_id}", response_model=MessageResponse)
async def delete_security(security_id: int, db: Session = Depends(get_db)):
    """Delete a security and its prices. Securities with transactions cannot be deleted (409)."""
    SecurityRepository(db).delete(security_id)
    db.commit()
    return MessageResponse(message=f"Security {security_id} deleted")
