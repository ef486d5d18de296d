# core/processing/date_processing.py

import re
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

import pandas as pd  # type: ignore

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = "dd/MM/yyyy"
SUPPORTED_DATE_FORMATS = ("dd/MM/yyyy", "MM/dd/yyyy", "yyyy-MM-dd")

EXCEL_ORIGIN = "1899-12-30"


@dataclass(frozen=True)
class ParsedDate:
    """Outcome of parsing one date string."""

    is_valid: bool
    day: Optional[int] = None
    month: Optional[int] = None
    year: Optional[int] = None
    error: Optional[str] = None
    warning: Optional[str] = None


def to_timestamp(day: int, month: int, year: int) -> pd.Timestamp:
    """Calendar date as a Timestamp, NaT when the day does not exist in that month."""
    return pd.to_datetime(f"{year:04d}-{month:02d}-{day:02d}", format="%Y-%m-%d", errors="coerce")


def expand_two_digit_year(year_str: str, today: Optional[date] = None) -> int:
    """Two-digit years up to the current one map to this century, later ones to the previous."""
    current = (today or date.today()).year
    century = current // 100
    entered = int(year_str)
    return (century if entered <= current % 100 else century - 1) * 100 + entered


def date_format_from_header(header: str) -> str:
    """
    Infer the day/month/year order from a date column header.

    A format in parentheses wins, then an explicit format name, then loose
    patterns. Defaults to ``dd/MM/yyyy``.
    """
    lower = header.lower()

    match = re.search(r"\((.*?)\)", lower)
    if match and match.group(1):
        inner = match.group(1)
        if "yyyy" in inner and "mm" in inner and inner.index("yyyy") < inner.index("mm"):
            return "yyyy-MM-dd"
        if "mm" in inner and "dd" in inner and inner.index("mm") < inner.index("dd"):
            return "MM/dd/yyyy"
        if "dd" in inner and "mm" in inner and inner.index("dd") < inner.index("mm"):
            return "dd/MM/yyyy"

    if any(p in lower for p in ("yyyy-mm-dd", "yyyy/mm/dd", "yyyymmdd")):
        return "yyyy-MM-dd"
    if any(p in lower for p in ("mm/dd/yyyy", "mm-dd-yyyy", "mmddyyyy")):
        return "MM/dd/yyyy"
    if any(p in lower for p in ("dd/mm/yyyy", "dd-mm-yyyy", "ddmmyyyy")):
        return "dd/MM/yyyy"

    if "yyyy" in lower and "dd/mm" not in lower and "mm/dd" not in lower:
        return "yyyy-MM-dd"
    if "mm/dd" in lower or "mm-dd" in lower:
        return "MM/dd/yyyy"
    if "dd/mm" in lower or "dd-mm" in lower:
        return "dd/MM/yyyy"

    return DEFAULT_DATE_FORMAT


def _excel_serial(value: str) -> Optional[ParsedDate]:
    """Interpret a bare number as an Excel serial date (1900 date system)."""
    text = value.strip()
    if not re.fullmatch(r"\d+(\.0+)?", text):
        return None
    serial = int(float(text))
    if serial < 1 or serial > 100000:
        return None
    parsed = pd.to_datetime(serial, unit="D", origin=EXCEL_ORIGIN)
    if parsed.year < 1900 or parsed.year > 2100:
        return None
    return ParsedDate(True, parsed.day, parsed.month, parsed.year)


def _to_int(part: str) -> Optional[int]:
    match = re.match(r"\s*(\d+)", part)
    return int(match.group(1)) if match else None


def parse_date_string(value: str, date_format: str, today: Optional[date] = None) -> ParsedDate:
    """
    Parse ``value`` under ``date_format`` and validate it.

    Suspicious but valid dates (far past/future, in the future) carry a
    ``warning`` instead of an error.
    """
    today = today or date.today()
    parts = re.sub(r"[-/.]", "/", value).split("/")

    if len(parts) != 3:
        excel = _excel_serial(value)
        if excel is not None:
            return excel
        return ParsedDate(False, error=f'Date "{value}" does not have three parts (day, month, year)')

    fmt = date_format.lower()
    if fmt.startswith("mm"):
        month, day, year = (_to_int(p) for p in parts)
        if month is not None and not 1 <= month <= 12:
            return ParsedDate(False, error=f"Month value {month} is invalid for format {date_format}")
    elif fmt.startswith("yyyy"):
        year, month, day = (_to_int(p) for p in parts)
        if year is not None and not 1000 <= year <= 3000:
            return ParsedDate(False, error=f"Year value {year} appears invalid for format {date_format}")
    else:
        day, month, year = (_to_int(p) for p in parts)
        if day is not None and not 1 <= day <= 31:
            return ParsedDate(False, error=f"Day value {day} is invalid for format {date_format}")

    if day is None or not 1 <= day <= 31:
        return ParsedDate(False, error=f"Invalid day {day}")
    if month is None or not 1 <= month <= 12:
        return ParsedDate(False, error=f"Invalid month {month}")
    if year is None:
        return ParsedDate(False, error=f"Invalid year {year}")

    year_part = (parts[0] if fmt.startswith("yyyy") else parts[2]).strip()
    if year_part.isdigit() and len(year_part) <= 2:
        year = expand_two_digit_year(year_part, today)
    if not pd.Timestamp.min.year < year < pd.Timestamp.max.year:
        return ParsedDate(False, error=f"Invalid year {year}")

    parsed = to_timestamp(day, month, year)
    if pd.isnull(parsed):
        return ParsedDate(False, error=f"Invalid day {day} for month {month}")

    warning = None
    if year < today.year - 100:
        warning = f"Year {year} is very far in the past"
    elif year > today.year + 100:
        warning = f"Year {year} is very far in the future"
    if parsed > pd.Timestamp(today):
        warning = "Date is in the future"

    return ParsedDate(True, day, month, year, warning=warning)


def format_date(day: int, month: int, year: int, date_format: str) -> str:
    """Render a validated date in the given pattern."""
    fmt = date_format.lower()
    if fmt.startswith("mm"):
        return f"{month:02d}/{day:02d}/{year}"
    if fmt.startswith("yyyy"):
        return f"{year}-{month:02d}-{day:02d}"
    return f"{day:02d}/{month:02d}/{year}"
