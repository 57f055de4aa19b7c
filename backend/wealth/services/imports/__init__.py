"""CSV transaction import: parsing, validation and orchestration."""

from .csv_transaction_parser import CsvTransactionParser, ParsedCsv, ParsedRow, ParserOptions
from .transaction_import_service import ImportOutcome, ImportRowError, TransactionImportService

__all__ = [
    "CsvTransactionParser",
    "ImportOutcome",
    "ImportRowError",
    "ParsedCsv",
    "ParsedRow",
    "ParserOptions",
    "TransactionImportService",
]
