from cardbinder.parsers.csv_import import (
    IngestResult,
    detect_columns,
    detect_header,
    ingest_csv,
    parse_condition,
    parse_csv_line,
    parse_quantity,
)

__all__ = [
    "IngestResult",
    "detect_columns",
    "detect_header",
    "ingest_csv",
    "parse_condition",
    "parse_csv_line",
    "parse_quantity",
]
