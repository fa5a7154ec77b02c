"""
Display formatting for salaries and dates.
"""
import re
from datetime import date, datetime
from typing import Optional, Union

EMPTY_PLACEHOLDER = "—"

_BARE_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _usd(amount: Union[int, float]) -> str:
    return "${:,}".format(int(round(amount)))


def format_salary(minimum: Optional[Union[int, float]], maximum: Optional[Union[int, float]]) -> str:
    """
    Format a salary range in whole US dollars.

    >>> format_salary(80000, 120000)
    '$80,000 - $120,000'
    >>> format_salary(80000, None)
    '$80,000+'
    >>> format_salary(None, 120000)
    'Up to $120,000'
    """
    if minimum is not None and maximum is not None:
        return f"{_usd(minimum)} - {_usd(maximum)}"
    if minimum is not None:
        return f"{_usd(minimum)}+"
    if maximum is not None:
        return f"Up to {_usd(maximum)}"
    return EMPTY_PLACEHOLDER


def format_date(value: Union[str, date, datetime, None]) -> str:
    """
    Format a date as "Feb 22, 2026".

    Accepts date/datetime objects or ISO 8601 strings; returns an empty string
    for empty or unparsable input.
    """
    if not value:
        return ""
    if isinstance(value, str):
        text = value.strip()
        try:
            if _BARE_DATE.match(text):
                value = date.fromisoformat(text)
            else:
                value = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return ""
    if not isinstance(value, date):
        return ""
    return f"{value:%b} {value.day}, {value.year}"
