from __future__ import annotations

import math
from dataclasses import dataclass


MAX_QUOTA_DAYS = 30


@dataclass(frozen=True)
class Tier:
    lower_bound_years: int
    quota_days: int
    # extra days per full year above the lower bound, capped at MAX_QUOTA_DAYS
    per_year_increment: int = 0

    def quota(self, years_served: float) -> int:
        if not self.per_year_increment:
            return self.quota_days
        extra = (math.floor(years_served) - self.lower_bound_years) * self.per_year_increment
        return min(MAX_QUOTA_DAYS, self.quota_days + extra)


# Labor Standards Act Art. 38. The first two rows both give 7 days: the
# under-one-year row is the proportional basis for the first partial year.
QUOTA_LADDER: tuple[Tier, ...] = (
    Tier(0, 7),
    Tier(1, 7),
    Tier(2, 10),
    Tier(3, 14),
    Tier(5, 15),
    Tier(10, 16, per_year_increment=1),
)


def tier_for(years_served: float) -> Tier:
    if years_served < 0:
        raise ValueError(f"years_served must be non-negative, got {years_served}")
    matched = QUOTA_LADDER[0]
    for tier in QUOTA_LADDER:
        if years_served >= tier.lower_bound_years:
            matched = tier
        else:
            break
    return matched


def quota_for(years_served: float) -> int:
    """Annual leave days for the given tenure in years."""
    return tier_for(years_served).quota(years_served)
