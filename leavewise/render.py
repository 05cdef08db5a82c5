from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from .schemas import EntitlementRecord


MILESTONE_BADGE = "法定里程碑"
DAYS_UNIT = "天"


def format_date(d: date) -> str:
    return d.strftime("%Y/%m/%d")


def format_days(days: float) -> str:
    # 7 -> "7", 5.26 -> "5.26", 7.0 -> "7"
    if float(days).is_integer():
        return str(int(days))
    return f"{days:.2f}".rstrip("0").rstrip(".")


def render_card(record: EntitlementRecord) -> dict[str, Optional[str]]:
    badge = MILESTONE_BADGE if record.kind == "milestone" else None
    return {
        "title": record.source,
        "period": f"{format_date(record.period_start)} ~ {format_date(record.period_end)}",
        "days": format_days(record.days),
        "unit": DAYS_UNIT,
        "formula": f"計算公式: {record.calculation_details}",
        "badge": badge,
    }


def render_cards(records: Iterable[EntitlementRecord]) -> list[dict[str, Optional[str]]]:
    return [render_card(r) for r in records]
