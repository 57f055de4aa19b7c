"""Pydantic schemas for CSV transaction imports."""

from datetime import date
from decimal import Decimal

from pydantic import Field

from wealth.schemas.common import CamelModel
from wealth.services.imports.csv_transaction_parser import ParsedRow
from wealth.services.imports.transaction_import_service import ImportOutcome


class TransactionImportRequest(CamelModel):
    """CSV import request. ``dry_run`` defaults to true so nothing is written by accident."""

    csv: str = Field(..., description="CSV text including the header row")
    dry_run: bool = True
    preview: bool = False
    decimal_separator: str | None = Field(None, description="'.' or ','; settings default")
    thousands_separator: str | None = Field(None, description="Thousands separator; settings default")
    duplicate_policy: str | None = Field(None, description="'reject' or 'allow'; settings default")


class ImportRowError(CamelModel):
    """A skipped row."""

    row: int
    message: str


class PreviewRow(CamelModel):
    """One parsed row as the import saw it."""

    row_number: int
    valid: bool
    error: str | None = None
    tdate: date | None = None
    ttype: str | None = None
    qty: Decimal | None = None
    price: Decimal | None = None
    fees: Decimal | None = None
    isin: str | None = None
    symbol: str | None = None
    name: str | None = None
    notes: str | None = None
    account_name: str | None = None

    @classmethod
    def from_row(cls, row: ParsedRow) -> "PreviewRow":
        return cls(
            row_number=row.row_number,
            valid=row.valid,
            error=row.error,
            tdate=row.trade_date,
            ttype=row.type,
            qty=row.quantity,
            price=row.price,
            fees=row.fees,
            isin=row.isin,
            symbol=row.symbol,
            name=row.name,
            notes=row.notes,
            account_name=row.account_name or None,
        )


class ImportResult(CamelModel):
    """Counts, skipped rows and (optionally) the preview of an import."""

    inserted: int
    parsed: int
    skipped: int
    errors: list[ImportRowError] = []
    preview: list[PreviewRow] | None = None
    batch_id: int | None = None
    dry_run: bool = True

    @classmethod
    def from_outcome(cls, outcome: ImportOutcome) -> "ImportResult":
        return cls(
            inserted=outcome.inserted,
            parsed=outcome.parsed,
            skipped=outcome.skipped,
            errors=[ImportRowError(row=e.row, message=e.message) for e in outcome.errors],
            preview=(
                [PreviewRow.from_row(row) for row in outcome.preview]
                if outcome.preview is not None
                else None
            ),
            batch_id=outcome.batch_id,
            dry_run=outcome.dry_run,
        )
