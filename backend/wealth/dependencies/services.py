"""FastAPI dependency providers for the ledger services."""

from fastapi import Depends
from sqlalchemy.orm import Session

from wealth.database import get_db
from wealth.services.imports.transaction_import_service import TransactionImportService
from wealth.services.ledger.ledger_service import LedgerService
from wealth.services.ledger.sql_ledger_store import SqlLedgerStore
from wealth.services.portfolio.holdings_projector import HoldingsProjector
from wealth.services.portfolio.realized_pnl_service import RealizedPnlService
from wealth.services.repositories import PriceRepository


def get_ledger_store(db: Session = Depends(get_db)) -> SqlLedgerStore:
    """Request-scoped ledger store over the request's session."""
    return SqlLedgerStore(db)


def get_import_service(store: SqlLedgerStore = Depends(get_ledger_store)) -> TransactionImportService:
    return TransactionImportService(store)


def get_ledger_service(store: SqlLedgerStore = Depends(get_ledger_store)) -> LedgerService:
    return LedgerService(store)


def get_holdings_projector(
    store: SqlLedgerStore = Depends(get_ledger_store), db: Session = Depends(get_db)
) -> HoldingsProjector:
    return HoldingsProjector(store, PriceRepository(db))


def get_realized_pnl_service(store: SqlLedgerStore = Depends(get_ledger_store)) -> RealizedPnlService:
    return RealizedPnlService(store)
