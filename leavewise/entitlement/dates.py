from __future__ import annotations

import calendar
from datetime import date, datetime

from dateutil.relativedelta import relativedelta


class InvalidDate(ValueError):
    """Onboarding date could not be read as a calendar date."""


def parse_onboard_date(value: str | date | None) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = (value or "").strip()
    if not text:
        raise InvalidDate("onboard_date is empty")
    try:
        return date.fromisoformat(text.replace("/", "-"))
    except ValueError as e:
        raise InvalidDate(f"onboard_date is not a valid YYYY-MM-DD date: {text!r}") from e


def day_count(later: date, earlier: date) -> int:
    """Whole days from ``earlier`` to ``later``; negative when ``later`` comes first."""
    return (later - earlier).days


def add_months(d: date, months: int) -> date:
    # relativedelta clamps to the last day of the target month (Aug 31 + 6 -> Feb 28/29)
    return d + relativedelta(months=months)


def days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def year_of(d: date) -> int:
    return d.year


def jan1(year: int) -> date:
    return date(year, 1, 1)


def dec31(year: int) -> date:
    return date(year, 12, 31)
