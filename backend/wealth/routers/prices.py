"""Prices API router - stored closing prices used to value holdings."""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wealth.database import get_db
from wealth.schemas.common import MessageResponse
from wealth.schemas.price import Price, PriceUpsert
from wealth.services.repositories import PriceRepository, SecurityRepository

router = APIRouter(prefix="/api/prices", tags=["prices"])


@router.get("/{security_id}", response_model=list[Price])
async def get_price_history(security_id: int, db: Session = Depends(get_db)):
    """Get the stored closes of a security, newest first."""
    SecurityRepository(db).get_by_id(security_id)
    return PriceRepository(db).find_history(security_id)


@router.put("", response_model=Price)
async def upsert_price(data: PriceUpsert, db: Session = Depends(get_db)):
    """Insert or replace the close of one security on one date."""
    SecurityRepository(db).get_by_id(data.security_id)
    price = PriceRepository(db).upsert(
        data.security_id, data.price_date, data.close_price, source=data.source or "manual"
    )
    db.commit()
    return price


@router.delete("/{security_id}/{price_date}", response_model=MessageResponse)
async def delete_price(security_id: int, price_date: date, db: Session = Depends(get_db)):
    """Delete one stored close."""
    PriceRepository(db).delete(security_id, price_date)
    db.commit()
    return MessageResponse(message=f"Price for security {security_id} on {price_date} deleted")
