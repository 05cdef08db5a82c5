import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from leavewise.entitlement.tiers import MAX_QUOTA_DAYS, QUOTA_LADDER, quota_for, tier_for


@pytest.mark.parametrize(
    "years,expected",
    [
        (0, 7),
        (0.99, 7),
        (1, 7),
        (1.5, 7),
        (2, 10),
        (2.9, 10),
        (3, 14),
        (4.99, 14),
        (5, 15),
        (9.99, 15),
        (10, 16),
        (10.5, 16),
        (11, 17),
        (23, 29),
        (24, 30),
        (40, 30),
    ],
)
def test_statutory_ladder(years, expected):
    assert quota_for(years) == expected


def test_ladder_keeps_redundant_first_two_rows():
    assert [(t.lower_bound_years, t.quota_days) for t in QUOTA_LADDER[:2]] == [(0, 7), (1, 7)]
    assert tier_for(0.5) is QUOTA_LADDER[0]
    assert tier_for(1) is QUOTA_LADDER[1]


def test_quota_is_monotonic_and_capped():
    samples = [i / 4 for i in range(0, 160)]
    quotas = [quota_for(t) for t in samples]
    assert quotas == sorted(quotas)
    assert max(quotas) == MAX_QUOTA_DAYS


def test_ten_years_and_more_formula():
    for t in range(10, 40):
        assert quota_for(t + 0.3) == min(30, 16 + t - 10)


def test_negative_tenure_rejected():
    with pytest.raises(ValueError):
        quota_for(-0.1)
