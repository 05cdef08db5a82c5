from __future__ import annotations

import logging
import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..schemas import CalculationRequest, CalculationResult, EntitlementRecord
from .dates import add_months, day_count, days_in_year, dec31, jan1, parse_onboard_date, year_of
from .tiers import quota_for


logger = logging.getLogger(__name__)

DEFAULT_YEARS_TO_PROJECT = 5
MILESTONE_DAYS = 3
MILESTONE_SOURCE = "滿半年法定特休"
# tenure is measured in fixed 365-day years, leap years included
TENURE_YEAR_DAYS = 365


class InvalidHorizon(ValueError):
    """years_to_project is not a positive integer or runs past the supported date range."""


def _fmt(d: date) -> str:
    return d.strftime("%Y/%m/%d")


def _round2(value: float) -> float:
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _check_horizon(years_to_project) -> int:
    if isinstance(years_to_project, bool) or not isinstance(years_to_project, int):
        raise InvalidHorizon(f"years_to_project must be an integer, got {years_to_project!r}")
    if years_to_project < 1:
        raise InvalidHorizon(f"years_to_project must be positive, got {years_to_project}")
    return years_to_project


def milestone(onboard_date: date) -> EntitlementRecord:
    six_month_date = add_months(onboard_date, 6)
    return EntitlementRecord(
        kind="milestone",
        year=year_of(six_month_date),
        period_start=six_month_date,
        period_end=add_months(six_month_date, 6),
        days=MILESTONE_DAYS,
        source=MILESTONE_SOURCE,
        calculation_details=f"於 {_fmt(six_month_date)} 到職滿6個月，依法給予 {MILESTONE_DAYS} 天",
    )


def tenure_at(onboard_date: date, on: date) -> float:
    return max(0.0, day_count(on, onboard_date) / TENURE_YEAR_DAYS)


def annual_grant(onboard_date: date, grant_year: int) -> EntitlementRecord:
    """Jan 1 grant of ``grant_year``, settling service rendered in the year before.

    The tier is fixed by tenure on Jan 1 of the settlement year. Only the
    onboarding year is prorated by days worked; later years get the full quota
    even when a tier boundary is crossed mid-year.
    """
    calc_year = grant_year - 1
    calc_start = jan1(calc_year)
    calc_days = days_in_year(calc_year)

    years_served = math.floor(tenure_at(onboard_date, calc_start))
    quota = quota_for(years_served)
    source = f"{grant_year}年度 (結算{calc_year}年資)"

    if calc_year == year_of(onboard_date):
        days_missed = day_count(onboard_date, calc_start)
        days_worked = max(0, calc_days - days_missed)
        days = _round2(quota * days_worked / calc_days)
        details = f"[{calc_year}在職{days_worked}天] ÷ {calc_days} × {quota}日 (滿{years_served}年級距)"
    else:
        days = quota
        details = f"[{calc_year}全年都在職] 依 1/1 年資滿 {years_served} 年級距計算 ({quota}日)"

    return EntitlementRecord(
        kind="annual",
        year=grant_year,
        period_start=jan1(grant_year),
        period_end=dec31(grant_year),
        days=days,
        source=source,
        calculation_details=details,
        settlement_year=calc_year,
        total_days_in_year=calc_days,
    )


def project(onboard_date: date, years_to_project: int = DEFAULT_YEARS_TO_PROJECT) -> tuple[EntitlementRecord, ...]:
    years_to_project = _check_horizon(years_to_project)
    # the last grant runs to Dec 31 of its year; that year bounds the milestone window too
    last_grant_year = year_of(onboard_date) + years_to_project
    if last_grant_year > date.max.year:
        raise InvalidHorizon(
            f"projection from {onboard_date.isoformat()} over {years_to_project} years runs past year {date.max.year}"
        )
    first_grant_year = year_of(onboard_date) + 1

    records = [milestone(onboard_date)]
    for i in range(years_to_project):
        records.append(annual_grant(onboard_date, first_grant_year + i))

    logger.debug("projected %d records for onboard=%s", len(records), onboard_date.isoformat())
    # stable: the milestone stays ahead of an annual grant issued in the same year
    return tuple(sorted(records, key=lambda r: r.year))


def calculate(request: CalculationRequest, default_years: Optional[int] = None) -> CalculationResult:
    onboard = parse_onboard_date(request.onboard_date)
    years = request.years_to_project
    if years is None:
        years = default_years if default_years is not None else DEFAULT_YEARS_TO_PROJECT

    records = project(onboard, years)
    half_year = next(r for r in records if r.kind == "milestone")
    return CalculationResult(
        employee_name=request.employee_name,
        onboard_date=onboard,
        six_month_date=half_year.period_start,
        six_month_entitlement=int(half_year.days),
        calendar_year_entitlements=records,
    )
