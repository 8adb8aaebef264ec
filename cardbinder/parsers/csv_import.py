"""
Parser for scanner-app CSV exports (DelverLens and similar).

Supports:
- Header rows with columns in any order ("Quantity,Name", "Card Name,Set,Qty,Foil")
- Headerless rows in the default order: Quantity, Name, Set, Condition, Finish, Notes
- Quoted fields containing commas ("Fire, Ice") and doubled quotes

Never raises for malformed input. A missing name or quantity column fails
the whole import; a bad row only skips that row.
"""

import csv
import logging
import re
from dataclasses import dataclass, field

from cardbinder.models.import_row import RawImportRow, RowFailure

logger = logging.getLogger(__name__)

# Keywords matched against lowercased header cells, by field
COLUMN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "quantity": ("qty", "quantity", "count"),
    "set": ("set", "edition"),
    "condition": ("condition", "cond"),
    "finish": ("foil", "finish"),
    "notes": ("note", "comment"),
    "name": ("name", "card"),
}

# Header cells that are unambiguously the card name column
EXACT_NAME_HEADERS = frozenset({"name", "card name", "card"})

REQUIRED_COLUMNS = ("name", "quantity")

# Column order assumed when the file has no header
DEFAULT_COLUMN_ORDER = ("quantity", "name", "set", "condition", "finish", "notes")

# Whole header cells that mark a header row
HEADER_CELLS = frozenset(
    {"name", "card", "card name", "quantity", "qty", "count", "set", "edition"}
)

# Condition spellings seen in scanner exports, by code
CONDITION_CODES: dict[str, str] = {
    "nm": "NM",
    "near mint": "NM",
    "mint": "NM",
    "lp": "LP",
    "lightly played": "LP",
    "light played": "LP",
    "excellent": "LP",
    "mp": "MP",
    "moderately played": "MP",
    "played": "MP",
    "hp": "HP",
    "heavily played": "HP",
    "dmg": "DMG",
    "damaged": "DMG",
    "poor": "DMG",
}

# Pattern: "4", "4x", "x4", "4X"
QUANTITY_PATTERN = re.compile(r"^x?\s*(\d+)\s*x?$", re.IGNORECASE)

LINE_SPLIT = re.compile(r"\r?\n")


@dataclass
class IngestResult:
    """Outcome of parsing one CSV payload."""

    rows: list[RawImportRow] = field(default_factory=list)
    failures: list[RowFailure] = field(default_factory=list)

    structural_failure: bool = False
    """True if column detection failed and no rows were parsed."""

    @property
    def errors(self) -> list[str]:
        """Failures as display strings ("Row 3: Card name is required")."""
        return [str(failure) for failure in self.failures]


def parse_csv_line(line: str) -> list[str]:
    """
    Split one CSV line into stripped fields.

    Commas inside double quotes do not split, and a doubled quote inside a
    quoted field is a literal quote. Apostrophes are ordinary characters.

    Raises:
        csv.Error: If the line cannot be tokenized
    """
    reader = csv.reader([line], skipinitialspace=True)
    for fields in reader:
        return [value.strip() for value in fields]
    return []


def parse_quantity(value: str | None) -> int:
    """
    Parse a quantity cell.

    "4x" -> 4, "4" -> 4, "" or unparsable -> 1. Non-positive values -> 1.
    """
    if not value:
        return 1

    match = QUANTITY_PATTERN.match(value.strip())
    if not match:
        return 1

    quantity = int(match.group(1))
    return quantity if quantity > 0 else 1


def parse_finish(value: str | None) -> str:
    """Return "foil" only when the cell says foil, otherwise "nonfoil"."""
    if value and value.strip().lower() == "foil":
        return "foil"
    return "nonfoil"


def parse_condition(value: str | None) -> str:
    """
    Map a condition cell to its code: "Near Mint" -> "NM", "lp" -> "LP".

    Blank cells default to "NM"; unrecognized values are kept as written.
    """
    if not value or not value.strip():
        return "NM"
    value = " ".join(value.split())
    return CONDITION_CODES.get(value.lower().replace("-", " "), value)


def parse_set_name(value: str | None) -> str:
    """Strip whitespace and enclosing parentheses: "(M21)" -> "M21"."""
    if not value:
        return ""
    value = value.strip()
    while value.startswith("(") and value.endswith(")"):
        value = value[1:-1].strip()
    return value


def _looks_like_quantity(cell: str) -> bool:
    return bool(cell) and len(cell) < 15 and QUANTITY_PATTERN.match(cell) is not None


def detect_header(first_row: list[str]) -> bool:
    """
    Decide whether the first row is a header or already data.

    A row with any well-known header cell is a header. Otherwise it is data
    when its first cell looks like a quantity.
    """
    if not first_row:
        return False

    if any(cell.strip().lower() in HEADER_CELLS for cell in first_row):
        return True

    return not _looks_like_quantity(first_row[0].strip())


def detect_columns(header: list[str]) -> dict[str, int]:
    """
    Map field names to column indices by keyword matching.

    Each column is claimed by at most one field. The name column prefers an
    exact header ("Name", "Card Name") so that "Set Name" is not mistaken
    for it.
    """
    lowered = [cell.strip().lower() for cell in header]
    columns: dict[str, int] = {}
    claimed: set[int] = set()

    for index, cell in enumerate(lowered):
        if cell in EXACT_NAME_HEADERS:
            columns["name"] = index
            claimed.add(index)
            break

    for field_name, keywords in COLUMN_KEYWORDS.items():
        if field_name in columns:
            continue
        for index, cell in enumerate(lowered):
            if index in claimed:
                continue
            if any(keyword in cell for keyword in keywords):
                columns[field_name] = index
                claimed.add(index)
                break

    return columns


def _missing_column_errors(columns: dict[str, int]) -> list[str]:
    labels = {"name": "Card name", "quantity": "Quantity"}
    return [
        f"{labels[required]} column not found in header"
        for required in REQUIRED_COLUMNS
        if required not in columns
    ]


def _cell(values: list[str], columns: dict[str, int], field_name: str) -> str:
    index = columns.get(field_name)
    if index is None or index >= len(values):
        return ""
    return values[index]


def ingest_csv(text: str, has_header: bool | None = None) -> IngestResult:
    """
    Parse CSV text into RawImportRows.

    Args:
        text: Raw CSV payload
        has_header: True/False if the format declares it, None to auto-detect

    Returns:
        IngestResult with rows and row-level failures. On a structural failure
        (name or quantity column missing) rows is empty and failures lists the
        missing columns.
    """
    result = IngestResult()

    numbered_lines = [
        (number, line)
        for number, line in enumerate(LINE_SPLIT.split(text or ""), start=1)
        if line.strip()
    ]
    if not numbered_lines:
        result.failures.append(RowFailure(None, "", "CSV must have at least one data row"))
        result.structural_failure = True
        return result

    first_number, first_line = numbered_lines[0]
    try:
        first_row = parse_csv_line(first_line)
    except csv.Error as e:
        result.failures.append(RowFailure(first_number, first_line, str(e)))
        result.structural_failure = True
        return result

    if has_header is None:
        has_header = detect_header(first_row)

    if has_header:
        columns = detect_columns(first_row)
        missing = _missing_column_errors(columns)
        if missing:
            logger.info("CSV import rejected: %s", "; ".join(missing))
            result.failures.extend(RowFailure(None, first_line, error) for error in missing)
            result.structural_failure = True
            return result
        data_lines = numbered_lines[1:]
    else:
        columns = {name: index for index, name in enumerate(DEFAULT_COLUMN_ORDER)}
        data_lines = numbered_lines

    for number, line in data_lines:
        try:
            values = parse_csv_line(line)
        except csv.Error as e:
            result.failures.append(RowFailure(number, line, str(e)))
            continue

        name = _cell(values, columns, "name")
        if not name:
            result.failures.append(RowFailure(number, line, "Card name is required"))
            continue

        result.rows.append(
            RawImportRow(
                row_number=number,
                name=name,
                set_name=parse_set_name(_cell(values, columns, "set")),
                quantity=parse_quantity(_cell(values, columns, "quantity")),
                condition=parse_condition(_cell(values, columns, "condition")),
                finish=parse_finish(_cell(values, columns, "finish")),
                notes=_cell(values, columns, "notes"),
            )
        )

    logger.debug("Parsed %d rows with %d errors", len(result.rows), len(result.failures))
    return result
