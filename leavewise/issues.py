from __future__ import annotations

from typing import Optional

from fastapi import HTTPException

from .entitlement.dates import InvalidDate
from .entitlement.engine import InvalidHorizon
from .schemas import Issue, Trace



def make_issue(
    *,
    code: str,
    message: str,
    domain: str = 'system',
    category: str = 'validation',
    severity: str = 'error',
    field: Optional[str] = None,
    source: Optional[str] = None,
    hint: Optional[str] = None,
) -> Issue:
    return Issue(
        severity=severity,
        domain=domain,
        category=category,
        code=code,
        message=message,
        field=field,
        source=source,
        hint=hint,
    )



def error_to_issue_and_status(err: Exception, where: str) -> tuple[int, Issue]:
    if isinstance(err, InvalidDate):
        return 422, make_issue(
            code='invalid_onboard_date',
            domain='engine',
            category='dates',
            field='onboard_date',
            source=where,
            message='到職日期格式不正確，無法計算特休。',
            hint='請使用 YYYY-MM-DD 格式，例如 2024-04-01。',
        )
    if isinstance(err, InvalidHorizon):
        return 422, make_issue(
            code='invalid_years_to_project',
            domain='engine',
            category='counts',
            field='years_to_project',
            source=where,
            message='試算年數必須是正整數。',
            hint='請輸入 1 以上的整數。',
        )
    if isinstance(err, HTTPException):
        return int(err.status_code), make_issue(
            code='request_validation_error',
            source=where,
            message='輸入資料驗證失敗。',
            hint=str(err.detail or '') or None,
        )
    return 500, make_issue(
        code='internal_error',
        category='unknown',
        source=where,
        message='服務內部錯誤。',
        hint='請稍後再試；若持續發生，請提供 request_id 給管理員。',
    )



def build_trace(request_id: str, timings_ms: dict[str, int], upstream_request_ids: Optional[dict[str, str]] = None) -> Trace:
    return Trace(request_id=request_id, timings_ms=timings_ms, upstream_request_ids=upstream_request_ids or {})
