"""Date parsing utilities."""

from datetime import date, timedelta
import re

from dateutil import parser as date_parser

# Day/month tokens without a year, e.g. "05/01" or "5 Jan".
_NUMERIC_DAY_MONTH = re.compile(r"^(\d{1,2})/(\d{1,2})$")
_TEXT_DAY_MONTH = re.compile(r"^(\d{1,2})\s+([A-Za-z]{3,9})$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date(date_str: str, dayfirst: bool = False) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "15 January 2024", "15/01/2024"
    with ``dayfirst``) and the relative words "today" and "yesterday".

    Args:
        date_str: Date string in various formats
        dayfirst: Interpret ambiguous numeric dates as day/month

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    # ISO dates are year-month-day regardless of dayfirst
    if _ISO_DATE.match(date_str):
        try:
            return date.fromisoformat(date_str)
        except ValueError as e:
            raise ValueError(f"Could not parse date '{date_str}': {e}")

    try:
        dt = date_parser.parse(date_str, dayfirst=dayfirst)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def has_year(date_str: str) -> bool:
    """Return True if the token carries its own year."""
    date_str = date_str.strip()
    return not (_NUMERIC_DAY_MONTH.match(date_str) or _TEXT_DAY_MONTH.match(date_str))


def parse_day_month(date_str: str, year: int) -> date:
    """Parse a year-less "dd/mm" or "dd Mon" token in the given year.

    Raises:
        ValueError: If the token is not a valid day/month
    """
    date_str = date_str.strip()
    numeric = _NUMERIC_DAY_MONTH.match(date_str)
    try:
        if numeric:
            return date(year, int(numeric.group(2)), int(numeric.group(1)))
        dt = date_parser.parse(f"{date_str} {year}", dayfirst=True)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_statement_date(date_str: str, reference: date) -> date:
    """Parse a statement date token, inferring a missing year.

    Year-less tokens take the reference year; a result that lands after the
    reference date belongs to the previous year (statements list activity
    up to their closing date).

    Raises:
        ValueError: If the token cannot be parsed
    """
    if has_year(date_str):
        return parse_date(date_str, dayfirst=True)

    try:
        candidate = parse_day_month(date_str, reference.year)
    except ValueError:
        # 29 February in a non-leap reference year
        return parse_day_month(date_str, reference.year - 1)
    if candidate > reference:
        candidate = parse_day_month(date_str, reference.year - 1)
    return candidate


def shift_into_range(day: date, start: date, end: date) -> date:
    """Move a year-inferred date by one year so it lands inside [start, end].

    Returns the date unchanged when neither neighbouring year fits.
    """
    if start <= day <= end:
        return day
    for offset in (1, -1):
        try:
            shifted = day.replace(year=day.year + offset)
        except ValueError:
            continue
        if start <= shifted <= end:
            return shifted
    return day
