"""
Product import parser for bulk catalog uploads.

Reads a CSV or Excel file, works out from the header row which column holds
which product field, and returns one candidate per data row together with
field-level errors for the rows that cannot be imported as-is.

Only structural problems (unsupported file type, empty file, missing
required columns) raise ImportFileError. Everything wrong with a single row
comes back as data in ProductImportResult.errors.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import Any, Callable, Iterable, Optional
import re
import unicodedata

import pandas as pd
import structlog

from exceptions import ImportFileError
from models.product import MAX_LENGTHS, MAX_PRICE, ProductCreate

logger = structlog.get_logger(__name__)


DELIMITED_EXTENSIONS = (".csv",)
SPREADSHEET_EXTENSIONS = (".xlsx", ".xls")

REQUIRED_FIELDS = ("name", "brand", "category", "price")

# (field, header contains any of, header equals any of)
# A column belongs to the first rule it matches, so order matters.
HEADER_RULES = (
    ("name", ("name", "item"), ("product",)),
    ("brand", ("brand", "make", "manufacturer"), ()),
    ("category", ("category", "type", "group"), ()),
    ("price", ("price", "cost", "amount", "rate"), ()),
    ("image_url", ("image", "url", "photo", "picture"), ()),
    ("description", ("description", "desc", "details", "info"), ()),
)

# Digit group left over when an unquoted "₹1,29,999" is split on commas
DIGIT_GROUP = re.compile(r"^\d{2,3}(\.\d*)?$")

# What is left of a price once currency signs and separators are gone
PLAIN_NUMBER = re.compile(r"^\d+(\.\d+)?$")

DISPLAY_NAMES = {
    "name": "Name",
    "brand": "Brand",
    "category": "Category",
    "price": "Price",
    "image_url": "Image URL",
    "description": "Description",
}


class ImportErrorField(str, Enum):
    """Where a FieldError points."""
    NAME = "name"
    BRAND = "brand"
    CATEGORY = "category"
    PRICE = "price"
    IMAGE_URL = "image_url"
    DESCRIPTION = "description"
    ROW = "row"
    FILE = "file"


REQUIRED_MESSAGES = {
    ImportErrorField.NAME: "Name is required",
    ImportErrorField.BRAND: "Brand is required",
    ImportErrorField.CATEGORY: "Category is required",
    ImportErrorField.PRICE: "Valid price is required",
}


@dataclass(frozen=True)
class ProductCandidate:
    """A parsed row that has not been written anywhere yet."""
    row: int
    name: str
    brand: str
    category: str
    price: Optional[int]
    image_url: Optional[str] = None
    description: Optional[str] = None
    is_valid: bool = False

    def to_product_create(self) -> ProductCreate:
        """Build the creation payload. Only meaningful for valid candidates."""
        return ProductCreate(
            name=self.name,
            brand=self.brand,
            category=self.category,
            price=self.price,
            image_url=self.image_url,
            description=self.description,
        )


@dataclass(frozen=True)
class FieldError:
    """Single validation error from parsing."""
    row: int
    field: ImportErrorField
    message: str


@dataclass
class ProductImportResult:
    """Result of parsing an import file."""
    candidates: list[ProductCandidate] = field(default_factory=list)
    errors: list[FieldError] = field(default_factory=list)

    @property
    def importable(self) -> list[ProductCandidate]:
        """Valid candidates whose row produced no errors, in row order."""
        rows_with_errors = {e.row for e in self.errors}
        return [
            c for c in self.candidates
            if c.is_valid and c.row not in rows_with_errors
        ]

    @property
    def valid_count(self) -> int:
        return len(self.importable)

    @property
    def invalid_count(self) -> int:
        return len(self.candidates) - self.valid_count

    def errors_for_row(self, row: int) -> list[FieldError]:
        """Errors that belong to one row, matched strictly by row number."""
        return [e for e in self.errors if e.row == row]

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "candidates": [
                {
                    "row": c.row,
                    "name": c.name,
                    "brand": c.brand,
                    "category": c.category,
                    "price": c.price,
                    "image_url": c.image_url,
                    "description": c.description,
                    "is_valid": c.is_valid,
                    "errors": [e.message for e in self.errors_for_row(c.row)],
                }
                for c in self.candidates
            ],
            "errors": [
                {
                    "row": e.row,
                    "field": e.field.value,
                    "message": e.message,
                }
                for e in self.errors
            ],
            "valid_count": self.valid_count,
            "invalid_count": self.invalid_count,
        }


def parse_product_import(file_bytes: bytes, file_name: str) -> ProductImportResult:
    """
    Parse a product import file.

    Args:
        file_bytes: Raw upload contents
        file_name: Original file name; its extension selects the reader

    Returns:
        ProductImportResult with candidates and row-level errors

    Raises:
        ImportFileError: Unsupported extension, empty file, unreadable
            workbook, or required columns missing from the header
    """
    extension = Path(file_name or "").suffix.lower()
    logger.info(
        "parsing_product_import",
        file_name=file_name,
        extension=extension,
        size=len(file_bytes)
    )

    try:
        if extension in DELIMITED_EXTENSIONS:
            reader = _parse_delimited
        elif extension in SPREADSHEET_EXTENSIONS:
            reader = _parse_spreadsheet
        else:
            raise ImportFileError(
                "Unsupported file format. Please upload a .csv or .xlsx file.",
                details={"file_name": file_name}
            )

        if not file_bytes:
            raise ImportFileError("File is empty")

        result = reader(file_bytes)

    except ImportFileError as e:
        logger.warning(
            "product_import_rejected",
            file_name=file_name,
            reason=e.message
        )
        raise

    logger.info(
        "product_import_parsed",
        file_name=file_name,
        candidate_count=len(result.candidates),
        valid_count=result.valid_count,
        error_count=len(result.errors)
    )

    return result


# ===================
# READERS
# ===================

def _parse_delimited(file_bytes: bytes) -> ProductImportResult:
    """Comma-separated text. Each line is decoded on its own."""
    lines = [line for line in file_bytes.split(b"\n") if line.strip()]
    if not lines:
        raise ImportFileError("File is empty")

    try:
        header_text = lines[0].decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ImportFileError("File must be UTF-8 encoded text")

    header = split_delimited_line(header_text)
    return _parse_grid(header, lines[1:], _decode_delimited_row)


def _parse_spreadsheet(file_bytes: bytes) -> ProductImportResult:
    """First sheet of an Excel workbook."""
    try:
        excel = pd.ExcelFile(BytesIO(file_bytes), engine="openpyxl")
        if not excel.sheet_names:
            raise ImportFileError("Spreadsheet contains no sheets")
        sheet = excel.parse(excel.sheet_names[0], header=None, dtype=object)
    except ImportFileError:
        raise
    except Exception as e:
        logger.error("excel_read_failed", error=str(e))
        raise ImportFileError(
            f"Failed to parse Excel file: {e}",
            details={"original_error": str(e)}
        ) from e

    grid = [
        [_cell_text(value) for value in row]
        for row in sheet.itertuples(index=False, name=None)
    ]
    if not grid:
        raise ImportFileError("Spreadsheet is empty")

    return _parse_grid(grid[0], grid[1:], list)


def _parse_grid(
    header: list[str],
    raw_rows: Iterable[Any],
    read_row: Callable[[Any], list[str]],
) -> ProductImportResult:
    """Shared header inference, extraction and validation."""
    column_map = map_columns(header)
    missing = [DISPLAY_NAMES[f] for f in REQUIRED_FIELDS if f not in column_map]
    if missing:
        raise ImportFileError(
            f"Missing required columns: {', '.join(missing)}",
            details={"missing_columns": missing, "header": header}
        )

    result = ProductImportResult()

    for offset, raw in enumerate(raw_rows):
        row_number = offset + 2  # header is row 1

        try:
            values = read_row(raw)
            if all(not v.strip() for v in values):
                continue
            values = rejoin_split_price(values, len(header), column_map)
            candidate = extract_candidate(values, column_map, row_number)
        except ValueError as e:
            result.errors.append(FieldError(
                row=row_number,
                field=ImportErrorField.ROW,
                message=_row_failure_message(e)
            ))
            continue

        result.candidates.append(candidate)
        if not candidate.is_valid:
            result.errors.extend(validate_candidate(candidate))

    return result


# ===================
# HELPER FUNCTIONS
# ===================

def split_delimited_line(line: str) -> list[str]:
    """
    Split one CSV line on commas outside double quotes.

    Quote characters toggle the quoted state and are dropped.
    'iPhone 14,"Apple, Inc.",₹69,999' -> ['iPhone 14', 'Apple, Inc.', '₹69', '999']
    """
    values = []
    current = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            values.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    values.append("".join(current).strip())
    return values


def map_columns(header: list[str]) -> dict[str, int]:
    """
    Map semantic fields to column indices by fuzzy header matching.

    Case-insensitive substring match; the leftmost column wins a field.
    "Product Price (₹)" -> price, "Model Name" -> name, "Type" -> category.
    """
    column_map: dict[str, int] = {}

    for idx, col in enumerate(header):
        normalized = str(col).lower().strip()
        for field_name, contains, exact in HEADER_RULES:
            if normalized in exact or any(p in normalized for p in contains):
                column_map.setdefault(field_name, idx)
                break

    return column_map


def rejoin_split_price(
    values: list[str],
    header_width: int,
    column_map: dict[str, int]
) -> list[str]:
    """
    Glue thousands groups back onto the price cell.

    Only applies when the row has more cells than the header and the cells
    right after the price look like digit groups.
    ['iPhone 14', 'Apple', 'Smartphone', '₹69', '999'] with a 4 column
    header -> ['iPhone 14', 'Apple', 'Smartphone', '₹69,999']
    """
    surplus = len(values) - header_width
    idx = column_map.get("price")
    if surplus <= 0 or idx is None or idx >= len(values):
        return values
    if not any(ch.isdigit() for ch in values[idx]):
        return values

    count = 0
    while (
        count < surplus
        and idx + 1 + count < len(values)
        and DIGIT_GROUP.match(values[idx + 1 + count])
    ):
        count += 1

    if count == 0:
        return values

    merged = ",".join(values[idx:idx + 1 + count])
    return values[:idx] + [merged] + values[idx + 1 + count:]


def parse_price(text: str) -> Optional[int]:
    """
    Parse price text to whole rupees.

    Strips currency signs, thousands separators and whitespace, then rounds
    half up. Returns None unless what remains is a plain decimal number that
    rounds to something between 1 and MAX_PRICE. Exponents, NaN and
    Infinity are rejected.
    "₹79,999" -> 79999, "$ 1,299.50" -> 1300, "free" -> None, "1e5" -> None
    """
    cleaned = "".join(
        ch for ch in text
        if not (ch.isspace() or ch == "," or unicodedata.category(ch) == "Sc")
    )
    if not PLAIN_NUMBER.match(cleaned):
        return None

    try:
        value = Decimal(cleaned).to_integral_value(rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None

    if value <= 0 or value > MAX_PRICE:
        return None

    return int(value)


def extract_candidate(
    values: list[str],
    column_map: dict[str, int],
    row_number: int
) -> ProductCandidate:
    """
    Build a candidate from one row of cell values.

    Raises:
        ValueError: A required column lies beyond the end of the row
    """
    name = _cell(values, column_map, "name", required=True)
    brand = _cell(values, column_map, "brand", required=True)
    category = _cell(values, column_map, "category", required=True)
    price = parse_price(_cell(values, column_map, "price", required=True))
    image_url = _cell(values, column_map, "image_url") or None
    description = _cell(values, column_map, "description") or None

    candidate = ProductCandidate(
        row=row_number,
        name=name,
        brand=brand,
        category=category,
        price=price,
        image_url=image_url,
        description=description,
    )
    return replace(candidate, is_valid=not validate_candidate(candidate))


def validate_candidate(candidate: ProductCandidate) -> list[FieldError]:
    """
    Every problem with a candidate, one error per failing field.

    Covers the required fields and the length limits ProductCreate
    enforces, so a candidate with no errors can always be created.
    """
    failing = []
    if not candidate.name:
        failing.append((ImportErrorField.NAME, REQUIRED_MESSAGES[ImportErrorField.NAME]))
    if not candidate.brand:
        failing.append((ImportErrorField.BRAND, REQUIRED_MESSAGES[ImportErrorField.BRAND]))
    if not candidate.category:
        failing.append((ImportErrorField.CATEGORY, REQUIRED_MESSAGES[ImportErrorField.CATEGORY]))
    if candidate.price is None or candidate.price <= 0:
        failing.append((ImportErrorField.PRICE, REQUIRED_MESSAGES[ImportErrorField.PRICE]))

    for field_name, limit in MAX_LENGTHS.items():
        value = getattr(candidate, field_name)
        if value and len(value) > limit:
            failing.append((
                ImportErrorField(field_name),
                f"{DISPLAY_NAMES[field_name]} must be at most {limit} characters"
            ))

    return [
        FieldError(row=candidate.row, field=f, message=message)
        for f, message in failing
    ]


def _cell(
    values: list[str],
    column_map: dict[str, int],
    field_name: str,
    required: bool = False
) -> str:
    """Trimmed cell text for a field; '' when the field has no column."""
    idx = column_map.get(field_name)
    if idx is None:
        return ""
    if idx >= len(values):
        if required:
            raise ValueError(
                f"Row has {len(values)} columns but {DISPLAY_NAMES[field_name]} "
                f"is in column {idx + 1}"
            )
        return ""
    return values[idx].strip()


def _decode_delimited_row(line: bytes) -> list[str]:
    return split_delimited_line(line.decode("utf-8"))


def _cell_text(value: Any) -> str:
    """Spreadsheet cell as trimmed text; empty cells become ''."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if pd.isna(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _row_failure_message(error: ValueError) -> str:
    if isinstance(error, UnicodeDecodeError):
        return "Row contains text that is not valid UTF-8"
    return str(error) or "Failed to parse row"
