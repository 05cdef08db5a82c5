import sys
from datetime import date
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from leavewise.entitlement.engine import project
from leavewise.render import format_days, render_cards


def test_cards_for_2024_04_01():
    cards = render_cards(project(date(2024, 4, 1), 2))

    assert cards[0]["badge"] == "法定里程碑"
    assert cards[0]["title"] == "滿半年法定特休"
    assert cards[0]["period"] == "2024/10/01 ~ 2025/04/01"
    assert cards[0]["days"] == "3"

    assert cards[1]["badge"] is None
    assert cards[1]["period"] == "2025/01/01 ~ 2025/12/31"
    assert cards[1]["days"] == "5.26"
    assert cards[1]["unit"] == "天"
    assert cards[1]["formula"].startswith("計算公式: [2024在職275天]")


def test_format_days():
    assert format_days(7) == "7"
    assert format_days(7.0) == "7"
    assert format_days(5.2) == "5.2"
    assert format_days(0.02) == "0.02"
