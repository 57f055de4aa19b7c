"""CSV parser and row validator for transaction imports.

Accepts a generic transaction CSV (one trade per row) and turns every data row
into a ParsedRow. A bad row is flagged, never raised, so one typo does not
sink a whole import. Only problems with the payload as a whole (no header,
required columns missing, too many rows) raise ImportValidationError.

Expected columns (case-insensitive, spaces/underscores/dashes ignored):
    date, type, qty, price, fees, isin, symbol, name, notes, account, ref
"""

import csv
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from io import StringIO

from wealth.config import settings
from wealth.constants import TransactionType
from wealth.services.ledger.errors import ImportValidationError, RowParseError
from wealth.services.ledger.ledger_store import LedgerEntry

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# Canonical column name -> accepted header spellings (already normalized)
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "date": ("tdate", "date", "tradedate"),
    "type": ("ttype", "type", "action"),
    "qty": ("qty", "quantity", "units", "shares"),
    "price": ("price", "unitprice"),
    "fees": ("fees", "fee", "commission"),
    "isin": ("isin",),
    "symbol": ("symbol", "ticker"),
    "name": ("name", "securityname"),
    "notes": ("notes", "memo"),
    "account": ("accountname", "account"),
    "ref": ("ref", "externalid", "txnid"),
}

TYPE_ALIASES: dict[str, str] = {
    "B": TransactionType.BUY,
    "PURCHASE": TransactionType.BUY,
    "S": TransactionType.SELL,
    "SALE": TransactionType.SELL,
    "DIV": TransactionType.DIVIDEND,
    "FEES": TransactionType.FEE,
    "CHARGE": TransactionType.FEE,
}

CURRENCY_SYMBOLS = "$€£₪¥"
_NUMBER_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")


def normalize_header(name: str) -> str:
    """Lowercase a header cell and drop spaces, underscores and dashes."""
    return re.sub(r"[\s_\-]", "", name or "").lower()


def normalize_type(value: str) -> str | None:
    """Map a type cell to a canonical TransactionType, or None if unknown."""
    upper = value.strip().upper()
    if upper in TransactionType.ALL:
        return upper
    return TYPE_ALIASES.get(upper)


def validate_amounts(
    txn_type: str, quantity: Decimal, price: Decimal, fees: Decimal
) -> str | None:
    """Check the numeric invariants of one transaction.

    Returns:
        An error message, or None when the amounts are consistent
    """
    if quantity < 0:
        return "Quantity must not be negative"
    if price < 0:
        return "Price must not be negative"
    if fees < 0:
        return "Fees must not be negative"
    if txn_type in TransactionType.QUANTITY_REQUIRED and quantity <= 0:
        return f"Quantity must be greater than zero for {txn_type}"
    return None


@dataclass(frozen=True)
class ParserOptions:
    """Locale and limits for one parse.

    The decimal and thousands separators are never guessed from the data.
    """

    decimal_separator: str = "."
    thousands_separator: str = ""
    date_formats: tuple[str, ...] = ("%Y-%m-%d", "%d/%m/%Y", "%d-%b-%Y")
    default_account_name: str = "Default"
    max_rows: int = 5000

    def __post_init__(self):
        if self.decimal_separator not in (".", ","):
            raise ImportValidationError(
                f"Unsupported decimal separator '{self.decimal_separator}'"
            )
        if self.thousands_separator == self.decimal_separator:
            raise ImportValidationError("Thousands and decimal separators must differ")

    @classmethod
    def from_settings(
        cls,
        decimal_separator: str | None = None,
        thousands_separator: str | None = None,
    ) -> "ParserOptions":
        """Options from application settings, with per-request separator overrides."""
        return cls(
            decimal_separator=decimal_separator or settings.csv_decimal_separator,
            thousands_separator=(
                thousands_separator
                if thousands_separator is not None
                else settings.csv_thousands_separator
            ),
            date_formats=tuple(settings.csv_date_formats),
            default_account_name=settings.default_account_name,
            max_rows=settings.import_max_rows,
        )


@dataclass
class ParsedRow:
    """One CSV data row, parsed as far as it validly goes."""

    row_number: int
    raw: dict[str, str] = field(default_factory=dict)
    trade_date: date | None = None
    type: str | None = None
    quantity: Decimal | None = None
    price: Decimal | None = None
    fees: Decimal | None = None
    isin: str | None = None
    symbol: str | None = None
    name: str | None = None
    notes: str | None = None
    account_name: str = ""
    ref: str | None = None
    error: str | None = None

    @property
    def valid(self) -> bool:
        return self.error is None

    @property
    def security_identifier(self) -> str:
        return self.isin or self.symbol or ""

    def to_entry(self, **overrides) -> LedgerEntry:
        """Candidate ledger entry for a valid row."""
        values = {
            "trade_date": self.trade_date,
            "type": self.type,
            "quantity": self.quantity,
            "price": self.price,
            "fees": self.fees,
            "account_name": self.account_name,
            "isin": self.isin,
            "symbol": self.symbol,
            "name": self.name,
            "notes": self.notes,
        }
        values.update(overrides)
        return LedgerEntry(**values)


@dataclass
class ParsedCsv:
    """Result of parsing a whole CSV payload."""

    rows: list[ParsedRow] = field(default_factory=list)
    columns: dict[str, str] = field(default_factory=dict)  # canonical -> header as written

    @property
    def valid_rows(self) -> list[ParsedRow]:
        return [row for row in self.rows if row.valid]

    @property
    def invalid_rows(self) -> list[ParsedRow]:
        return [row for row in self.rows if not row.valid]


class CsvTransactionParser:
    """Parser for generic transaction CSV text.

    Example usage:
        parser = CsvTransactionParser(ParserOptions.from_settings())
        parsed = parser.parse(csv_text)
        for row in parsed.rows:
            if not row.valid:
                print(row.row_number, row.error)
    """

    def __init__(self, options: ParserOptions | None = None) -> None:
        self.options = options or ParserOptions()

    def parse(self, csv_text: str) -> ParsedCsv:
        """Parse CSV text into rows.

        Raises:
            ImportValidationError: empty payload, unusable header, or more
                data rows than ``max_rows``
        """
        if not csv_text or not csv_text.strip():
            raise ImportValidationError("CSV text is empty")

        try:
            records = [
                record
                for record in csv.reader(StringIO(csv_text.lstrip("\ufeff")))
                if any(cell.strip() for cell in record)
            ]
        except csv.Error as e:
            raise ImportValidationError(f"Failed to parse CSV: {e}") from e

        if not records:
            raise ImportValidationError("CSV text is empty")

        header, data = records[0], records[1:]
        columns = self._map_columns(header)

        if len(data) > self.options.max_rows:
            raise ImportValidationError(
                f"CSV has {len(data)} data rows; the limit is {self.options.max_rows}",
                too_large=True,
            )

        rows = []
        for index, record in enumerate(data, start=1):
            raw = {
                canonical: record[position].strip() if position < len(record) else ""
                for canonical, position in columns.items()
            }
            rows.append(self._parse_row(index, raw))

        logger.debug(
            f"Parsed {len(rows)} CSV rows ({sum(1 for r in rows if not r.valid)} invalid)"
        )
        return ParsedCsv(rows=rows, columns={c: header[p].strip() for c, p in columns.items()})

    def _map_columns(self, header: list[str]) -> dict[str, int]:
        """Map canonical column names to their index in the header."""
        lookup = {
            alias: canonical for canonical, aliases in COLUMN_ALIASES.items() for alias in aliases
        }
        columns: dict[str, int] = {}
        for position, cell in enumerate(header):
            canonical = lookup.get(normalize_header(cell))
            if canonical and canonical not in columns:
                columns[canonical] = position

        missing = [name for name in ("date", "type") if name not in columns]
        if "isin" not in columns and "symbol" not in columns:
            missing.append("isin or symbol")
        if missing:
            raise ImportValidationError(
                f"CSV header is missing required column(s): {', '.join(missing)}"
            )
        return columns

    def _parse_row(self, row_number: int, raw: dict[str, str]) -> ParsedRow:
        row = ParsedRow(row_number=row_number, raw=raw)
        try:
            self._fill_row(row, raw)
        except RowParseError as e:
            row.error = e.message
            logger.debug(f"Row {row_number} invalid: {e.message}")
        return row

    def _fill_row(self, row: ParsedRow, raw: dict[str, str]) -> None:
        number = row.row_number

        row.isin = raw.get("isin", "").upper() or None
        row.symbol = raw.get("symbol", "").upper() or None
        row.name = raw.get("name") or None
        row.notes = raw.get("notes") or None
        row.ref = raw.get("ref") or None
        row.account_name = raw.get("account") or self.options.default_account_name

        date_text = raw.get("date", "")
        if not date_text:
            raise RowParseError(number, "Missing date")
        type_text = raw.get("type", "")
        if not type_text:
            raise RowParseError(number, "Missing type")
        if not row.isin and not row.symbol:
            raise RowParseError(number, "Missing security identifier (isin or symbol)")

        row.trade_date = self._parse_date(number, date_text)
        row.type = normalize_type(type_text)
        if row.type is None:
            raise RowParseError(number, f"Unknown transaction type '{type_text}'")

        quantity = self._parse_number(number, "qty", raw.get("qty", ""))
        price = self._parse_number(number, "price", raw.get("price", ""))
        fees = self._parse_number(number, "fees", raw.get("fees", ""))

        if price is None and row.type in (TransactionType.BUY, TransactionType.SELL):
            raise RowParseError(number, f"Missing price for {row.type}")
        if quantity is None and row.type in TransactionType.QUANTITY_REQUIRED:
            raise RowParseError(number, f"Missing qty for {row.type}")

        row.quantity = quantity if quantity is not None else ZERO
        row.price = price if price is not None else ZERO
        row.fees = fees if fees is not None else ZERO

        problem = validate_amounts(row.type, row.quantity, row.price, row.fees)
        if problem:
            raise RowParseError(number, problem)

    def _parse_date(self, row_number: int, value: str) -> date:
        for fmt in self.options.date_formats:
            try:
                return datetime.strptime(value, fmt).date()
            except ValueError:
                continue
        raise RowParseError(row_number, f"Unparsable date '{value}'")

    def _parse_number(self, row_number: int, column: str, value: str) -> Decimal | None:
        """Parse a numeric cell with the configured separators; blank is None."""
        cleaned = value.strip().strip(CURRENCY_SYMBOLS).strip()
        if not cleaned:
            return None

        if self.options.thousands_separator:
            cleaned = cleaned.replace(self.options.thousands_separator, "")
        if self.options.decimal_separator == ",":
            if "." in cleaned:
                raise RowParseError(row_number, f"Invalid number in {column}: '{value}'")
            cleaned = cleaned.replace(",", ".")

        if not _NUMBER_PATTERN.match(cleaned):
            raise RowParseError(row_number, f"Invalid number in {column}: '{value}'")
        try:
            return Decimal(cleaned)
        except InvalidOperation as e:
            raise RowParseError(row_number, f"Invalid number in {column}: '{value}'") from e
