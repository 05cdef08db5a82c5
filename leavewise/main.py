from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Any

import anthropic
from anthropic import Anthropic
from fastapi import FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from .entitlement.engine import InvalidHorizon, calculate
from .issues import build_trace, error_to_issue_and_status
from .notify import draft_notification
from .render import render_cards
from .schemas import CalculationRequest, CalculationResult
from .settings import get_settings

settings = get_settings()
logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="LeaveWise TW (曆年制特休試算)")


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-Id"] = request_id
    return response


@app.get("/api/health")
async def api_health():
    return {"status": "ok"}


def _anthropic_probe() -> dict:
    model = settings.ANTHROPIC_MODEL
    client = Anthropic(api_key=settings.ANTHROPIC_API_KEY or None)
    msg = client.messages.create(model=model, max_tokens=16, messages=[{"role": "user", "content": "請只回答一個字：ok"}])
    text = ""
    for block in (msg.content or []):
        if getattr(block, "type", None) == "text":
            text += getattr(block, "text", "")
    return {"status": "ok", "model": model, "reply": text.strip()[:80]}


@app.get("/api/health/anthropic")
async def api_health_anthropic():
    if settings.APP_ENV == "dev" and not settings.ANTHROPIC_API_KEY:
        return {"status": "ok", "mode": "dev-no-key"}
    try:
        return await run_in_threadpool(_anthropic_probe)
    except anthropic.APIError as e:
        logger.exception("Anthropic health probe APIError")
        raise HTTPException(status_code=502, detail=f"Anthropic API error: {e}")
    except Exception:
        logger.exception("Anthropic health probe failed")
        raise HTTPException(status_code=500, detail="Anthropic health-check failed.")


def _sanitize_error_message(err: Exception) -> str:
    message = re.sub(r"<[^>]+>", " ", str(err or "")).strip()
    message = re.sub(r"\s+", " ", message).strip(" .,:;-")
    return message[:320] if message else f"Processing error: {type(err).__name__}"


def _build_error_payload(err: Exception, where: str, request_id: str) -> tuple[int, dict[str, Any]]:
    status, issue = error_to_issue_and_status(err, where)
    if status >= 500:
        logger.exception("%s failed", where, exc_info=err)
    trace = build_trace(request_id=request_id, timings_ms={}).model_dump()
    return status, {
        'error': '特休試算失敗。',
        'status': status,
        'detail': _sanitize_error_message(err),
        'issues': [issue.model_dump()],
        'trace': trace,
    }


def _check_horizon_limit(req: CalculationRequest) -> None:
    years = req.years_to_project
    if years is not None and years > settings.MAX_YEARS_TO_PROJECT:
        raise InvalidHorizon(f"years_to_project must be at most {settings.MAX_YEARS_TO_PROJECT}, got {years}")


def _calculate(req: CalculationRequest) -> CalculationResult:
    _check_horizon_limit(req)
    return calculate(req, default_years=settings.DEFAULT_YEARS_TO_PROJECT)


@app.post('/api/calculate')
async def api_calculate(request: Request, body: CalculationRequest):
    started = time.perf_counter()
    try:
        result = _calculate(body)
        trace = build_trace(request_id=request.state.request_id, timings_ms={'total_ms': int((time.perf_counter() - started) * 1000)})
        return {
            'result': result.model_dump(mode='json'),
            'cards': render_cards(result.calendar_year_entitlements),
            'trace': trace.model_dump(),
        }
    except Exception as e:
        status, payload = _build_error_payload(e, 'api_calculate', request.state.request_id)
        return JSONResponse(status_code=status, content=payload)


def _draft_payload(result: CalculationResult) -> dict[str, Any]:
    draft = draft_notification(result, settings=settings)
    payload = draft.model_dump()
    if not settings.DEBUG_STEPS:
        payload.pop('debug_steps', None)
    return payload


@app.post('/api/notification')
async def api_notification(request: Request, body: CalculationResult):
    return await run_in_threadpool(_draft_payload, body)


@app.post('/api/calculate/notification')
async def api_calculate_notification(request: Request, body: CalculationRequest):
    started = time.perf_counter()
    try:
        result = _calculate(body)
    except Exception as e:
        status, payload = _build_error_payload(e, 'api_calculate_notification', request.state.request_id)
        return JSONResponse(status_code=status, content=payload)

    notification = await run_in_threadpool(_draft_payload, result)
    trace = build_trace(request_id=request.state.request_id, timings_ms={'total_ms': int((time.perf_counter() - started) * 1000)})
    return {
        'result': result.model_dump(mode='json'),
        'cards': render_cards(result.calendar_year_entitlements),
        'notification': notification,
        'trace': trace.model_dump(),
    }


@app.get('/api/version')
async def api_version():
    return {
        'APP_ENV': settings.APP_ENV,
        'ANTHROPIC_MODEL': settings.ANTHROPIC_MODEL,
    }
