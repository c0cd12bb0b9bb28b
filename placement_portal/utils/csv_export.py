"""
CSV Export Utility

Rows are dicts; `columns` is a list of (header, key) pairs. Values are
written with csv.QUOTE_MINIMAL, None becomes an empty cell, enums are
written by value and datetimes in ISO format. Text starting with a
spreadsheet formula character is prefixed with a single quote.
"""

import csv
import io
from datetime import date, datetime
from enum import Enum
from typing import Iterable, List, Tuple

FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")


def _text(value: str) -> str:
    if value.startswith(FORMULA_PREFIXES):
        return "'" + value
    return value


def _cell(value):
    if value is None:
        return ""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return _text("; ".join(str(v) for v in value))
    if isinstance(value, str):
        return _text(value)
    return value


def generate_csv(rows: Iterable[dict], columns: List[Tuple[str, str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow([header for header, _ in columns])
    for row in rows:
        writer.writerow([_cell(row.get(key)) for _, key in columns])
    return buffer.getvalue()
