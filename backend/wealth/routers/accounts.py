"""Accounts API router."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from wealth.database import get_db
from wealth.schemas.account import Account, AccountCreate, AccountUpdate
from wealth.schemas.common import MessageResponse, Page
from wealth.services.repositories import AccountRepository
from wealth.services.shared.pagination import paginate

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


@router.get("", response_model=Page[Account])
async def list_accounts(
    limit: int | None = Query(None, description="Maximum records to return"),
    offset: int = Query(0, description="Number of records to skip"),
    db: Session = Depends(get_db),
):
    """Get paginated list of accounts, sorted by name."""
    page = paginate(AccountRepository(db).find_all(), limit, offset)
    return Page[Account].build(page, [Account.model_validate(a) for a in page.items])


@router.get("/{account_id}", response_model=Account)
async def get_account(account_id: int, db: Session = Depends(get_db)):
    """Get a specific account by ID."""
    return AccountRepository(db).get_by_id(account_id)


@router.post("", response_model=Account, status_code=status.HTTP_201_CREATED)
async def create_account(data: AccountCreate, db: Session = Depends(get_db)):
    """Create a new account. Names are unique, case-insensitively."""
    account = AccountRepository(db).create(data.name, currency=data.currency)
    account.is_active = data.is_active
    db.commit()
    db.refresh(account)
    return account


@router.put("/{account_id}", response_model=Account)
async def update_account(account_id: int, data: AccountUpdate, db: Session = Depends(get_db)):
    """Update an existing account."""
    account = AccountRepository(db).update(
        account_id, name=data.name, currency=data.currency, is_active=data.is_active
    )
    db.commit()
    db.refresh(account)
    return account


@router.delete("/{account_id}", response_model=MessageResponse)
async def delete_account(account_id: int, db: Session = Depends(get_db)):
    """Delete an account. Accounts with transactions cannot be deleted (409)."""
    AccountRepository(db).delete(account_id)
    db.commit()
    return MessageResponse(message=f"Account {account_id} deleted")
