from __future__ import annotations

from datetime import date
from typing import Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


RecordKind = Literal[
    "milestone",  # 滿半年法定特休
    "annual",     # 1/1 結算前一年度
]


class EntitlementRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: RecordKind = Field(..., description="milestone or annual")
    year: int = Field(..., description="Calendar year the grant is issued in")
    period_start: date
    period_end: date
    days: Union[int, float] = Field(..., description="Granted days; 2 decimals for the first partial year")
    source: str = Field(..., description="Human-readable basis of the grant")
    calculation_details: str = Field("", description="Formula trace, informational only")
    settlement_year: Optional[int] = Field(None, description="Calendar year whose service is settled (annual only)")
    total_days_in_year: Optional[int] = Field(None, description="365/366 of the settlement year (annual only)")

    @field_validator("days")
    @classmethod
    def _days_within_statutory_cap(cls, value):
        if not 0 <= value <= 30:
            raise ValueError(f"days must be within 0..30, got {value}")
        return value


class CalculationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    employee_name: str = Field("", description="Passed through untouched")
    onboard_date: Union[date, str] = Field(..., description="YYYY-MM-DD")
    years_to_project: Optional[StrictInt] = Field(None, description="Number of Jan 1 grants to project; default from settings")


class CalculationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    employee_name: str = ""
    onboard_date: date
    six_month_date: date
    six_month_entitlement: int = 3
    calendar_year_entitlements: Tuple[EntitlementRecord, ...] = Field(default_factory=tuple)


class NotificationDraft(BaseModel):
    text: str
    generated: bool = False
    model: Optional[str] = None
    error_code: Optional[str] = None
    debug_steps: List[str] = Field(default_factory=list)


class Issue(BaseModel):
    severity: Literal["error", "warn", "info"] = "error"
    domain: Literal["engine", "upstream", "system"] = "system"
    category: str = "validation"
    code: str
    message: str
    field: Optional[str] = None
    source: Optional[str] = None
    hint: Optional[str] = None


class Trace(BaseModel):
    request_id: str
    timings_ms: Dict[str, int] = Field(default_factory=dict)
    upstream_request_ids: Dict[str, str] = Field(default_factory=dict)
