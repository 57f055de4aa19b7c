"""Transactions API router - ledger listing, direct entry and reversal."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from wealth.database import get_db
from wealth.dependencies.services import get_ledger_service, get_ledger_store
from wealth.schemas.common import Page
from wealth.schemas.transaction import Transaction, TransactionCreate, TransactionReverse
from wealth.services.ledger.ledger_service import LedgerService, TransactionDraft
from wealth.services.ledger.sql_ledger_store import SqlLedgerStore
from wealth.services.repositories import AccountRepository, SecurityRepository
from wealth.services.shared.pagination import paginate

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.get("", response_model=Page[Transaction])
async def list_transactions(
    limit: int | None = Query(None, description="Maximum records to return"),
    offset: int = Query(0, description="Number of records to skip"),
    since: date | None = Query(None, description="Only transactions on or after this date"),
    store: SqlLedgerStore = Depends(get_ledger_store),
):
    """
    Get a page of ledger transactions, newest first.

    Reversed transactions and their reversal entries are included; the
    ``reversesId`` field links them.
    """
    entries = store.read_since(since) if since else store.read_all()
    entries.sort(key=lambda e: (e.trade_date, e.id), reverse=True)
    page = paginate(entries, limit, offset)
    return Page[Transaction].build(page, [Transaction.from_entry(e) for e in page.items])


@router.post("", response_model=Transaction, status_code=status.HTTP_201_CREATED)
def create_transaction(
    data: TransactionCreate,
    db: Session = Depends(get_db),
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Record a single transaction.

    Returns 409 when a SELL (or the split it implies) would oversell.
    """
    account_name = data.account_name
    if data.account_id is not None:
        account_name = AccountRepository(db).get_by_id(data.account_id).name

    isin, symbol, name = data.isin, data.symbol, data.name
    if data.security_id is not None:
        security = SecurityRepository(db).get_by_id(data.security_id)
        isin, symbol, name = security.isin, security.symbol, security.name

    entry = service.record_transaction(
        TransactionDraft(
            trade_date=data.tdate,
            type=data.ttype,
            quantity=data.qty,
            price=data.price,
            fees=data.fees,
            account_name=account_name,
            isin=isin,
            symbol=symbol,
            name=name,
            notes=data.notes,
        )
    )
    return Transaction.from_entry(entry)


@router.post("/{transaction_id}/reverse", response_model=Transaction, status_code=status.HTTP_201_CREATED)
def reverse_transaction(
    transaction_id: int,
    data: TransactionReverse | None = None,
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Cancel a transaction by appending a reversal entry.

    The original row stays in the ledger; both rows drop out of every
    holding and realized P&L calculation.
    """
    entry = service.reverse_transaction(transaction_id, notes=data.notes if data else None)
    return Transaction.from_entry(entry)
