import sys
from datetime import date, datetime
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from leavewise.entitlement.dates import InvalidDate, add_months, day_count, days_in_year, parse_onboard_date, year_of


def test_day_count_is_signed():
    assert day_count(date(2024, 4, 1), date(2024, 1, 1)) == 91
    assert day_count(date(2024, 1, 1), date(2024, 4, 1)) == -91
    assert day_count(date(2025, 1, 1), date(2024, 4, 1)) == 275


def test_add_months_clamps_to_month_end():
    assert add_months(date(2024, 4, 1), 6) == date(2024, 10, 1)
    assert add_months(date(2024, 8, 31), 6) == date(2025, 2, 28)
    assert add_months(date(2023, 8, 31), 6) == date(2024, 2, 29)
    assert add_months(date(2024, 10, 1), 6) == date(2025, 4, 1)


def test_days_in_year_follows_gregorian_leap_rule():
    assert days_in_year(2024) == 366
    assert days_in_year(2025) == 365
    assert days_in_year(1900) == 365
    assert days_in_year(2000) == 366


def test_year_of():
    assert year_of(date(2031, 12, 31)) == 2031


def test_parse_onboard_date_accepts_iso_and_slashes():
    assert parse_onboard_date("2024-04-01") == date(2024, 4, 1)
    assert parse_onboard_date(" 2024/04/01 ") == date(2024, 4, 1)
    assert parse_onboard_date(date(2024, 4, 1)) == date(2024, 4, 1)
    assert parse_onboard_date(datetime(2024, 4, 1, 9, 30)) == date(2024, 4, 1)


@pytest.mark.parametrize("raw", ["", None, "abc", "2024-02-30", "2023-13-01"])
def test_parse_onboard_date_rejects_garbage(raw):
    with pytest.raises(InvalidDate):
        parse_onboard_date(raw)
