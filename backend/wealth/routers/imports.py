"""Imports API router - CSV transaction import with dry run and preview."""

from fastapi import APIRouter, Depends, Request

from wealth.config import settings
from wealth.dependencies.services import get_import_service
from wealth.rate_limiter import limiter
from wealth.schemas.imports import ImportResult, TransactionImportRequest
from wealth.services.imports.csv_transaction_parser import ParserOptions
from wealth.services.imports.transaction_import_service import TransactionImportService

router = APIRouter(prefix="/api/imports", tags=["imports"])


@router.post("/transactions", response_model=ImportResult)
@limiter.limit(settings.import_rate_limit)
def import_transactions(
    request: Request,
    data: TransactionImportRequest,
    service: TransactionImportService = Depends(get_import_service),
):
    """
    Import transactions from CSV text.

    With ``dryRun`` (the default) nothing is written; the counts and errors
    are what a real import would produce. Invalid, duplicate and overselling
    rows are skipped and listed in ``errors``; the rest are committed as one
    import batch whose id is returned as ``batchId``.
    """
    options = ParserOptions.from_settings(
        decimal_separator=data.decimal_separator,
        thousands_separator=data.thousands_separator,
    )
    outcome = service.import_transactions(
        data.csv,
        dry_run=data.dry_run,
        preview=data.preview,
        options=options,
        duplicate_policy=data.duplicate_policy,
    )
    return ImportResult.from_outcome(outcome)
