"""
Date helpers shared by the engines.

All year fractions use an Actual/365 day count.
"""

from datetime import date, datetime

from regrisk_core._types import Year

DAYS_PER_YEAR = 365.0


def parse_date(value: date | datetime | str) -> date:
    """
    Normalize a date-like value to ``datetime.date``.

    Parameters
    ----------
    value : date | datetime | str
        A date object or an ISO-8601 string (``YYYY-MM-DD``, optionally
        with a time component)

    Returns
    -------
    date
        Parsed calendar date

    Raises
    ------
    ValueError
        If the string cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        raise ValueError("Empty date string")
    try:
        return date.fromisoformat(text[:10])
    except ValueError as exc:
        raise ValueError(f"Unparseable date: {value!r}") from exc


def year_fraction(start: date, end: date) -> Year:
    """Act/365 year fraction between two dates (negative if end < start)."""
    return (end - start).days / DAYS_PER_YEAR


def residual_maturity(
    maturity_date: date,
    valuation_date: date,
    start_date: date | None = None,
) -> Year:
    """
    Years from max(start, valuation date) to maturity.

    Parameters
    ----------
    maturity_date : date
        Trade maturity
    valuation_date : date
        Calculation date
    start_date : date | None
        Trade start date; forward-starting trades are measured from here

    Returns
    -------
    Year
        Remaining life in years, may be negative for matured trades
    """
    anchor = valuation_date
    if start_date is not None and start_date > valuation_date:
        anchor = start_date
    return year_fraction(anchor, maturity_date)
