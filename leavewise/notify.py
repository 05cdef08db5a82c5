from __future__ import annotations

import json
import logging
import os
import queue
import re
import threading
from typing import Any, Callable, List, Optional

import anthropic
from anthropic import Anthropic

from .render import format_date
from .schemas import CalculationResult, NotificationDraft
from .settings import Settings, get_settings


logger = logging.getLogger(__name__)

FALLBACK_NO_KEY = "尚未設定 ANTHROPIC_API_KEY，無法產生說明。"
FALLBACK_EMPTY = "無法產生說明。"
FALLBACK_UNAVAILABLE = "暫時無法使用 AI 說明功能，請稍後再試。"


def _safe_log_debug_message(message: str) -> str:
    return re.sub(r"employee=.*?(, records=|$)", r"employee=<masked>\1", message)


def _add_debug(debug_steps: List[str], message: str, on_debug: Optional[Callable[[str], None]] = None) -> None:
    debug_steps.append(message)
    logger.info("[notify] %s", _safe_log_debug_message(message))
    if on_debug:
        on_debug(message)


def _system_prompt_zh() -> str:
    return (
        "You are an experienced HR assistant in Taiwan.\n"
        "Draft a polite, clear and professional notification to an employee about their annual paid leave (特休).\n"
        "Write in Traditional Chinese (繁體中文).\n\n"
        "Policy: the company uses the Calendar Year System (曆年制 - 結算制).\n"
        "Leave granted on January 1st is sized by service in the previous calendar year only.\n\n"
        "Rate ladder (Labor Standards Act Art. 38), by tenure on January 1st of the settled year:\n"
        "- under 1 year: 7 days, prorated by days worked in the first partial year\n"
        "- 1 to 2 years: 7 days\n"
        "- 2 to 3 years: 10 days\n"
        "- 3 to 5 years: 14 days\n"
        "- 5 to 10 years: 15 days\n"
        "- 10 years and more: 16 days plus 1 per additional year, at most 30\n\n"
        "Explain to the employee:\n"
        "1. Six-month grant: 3 days granted once upon reaching six months of service.\n"
        "2. Annual settlement: each January 1st grant is derived from the previous year's service; "
        "the first partial year is (days worked / days in that year) x rate.\n\n"
        "Output sections: greeting; current status (onboard date, tenure); six-month entitlement "
        "(date and days); January 1st entitlements for the listed years, each stating "
        "\"Derived from 20XX Service\" (結算20XX年資); closing.\n"
        "Use only the figures in the data. Do not invent numbers.\n"
    )


def _data_context(result: CalculationResult) -> str:
    return json.dumps(
        {
            "employee": result.employee_name,
            "onboard": format_date(result.onboard_date),
            "sixMonthDate": format_date(result.six_month_date),
            "entitlements": [
                {
                    "year": e.year,
                    "days": e.days,
                    "source": e.source,
                    "detail": e.calculation_details,
                }
                for e in result.calendar_year_entitlements
            ],
        },
        ensure_ascii=False,
    )


def _user_prompt(result: CalculationResult) -> str:
    return f"Generate a notification for this data: {_data_context(result)}"


def _mock_letter(result: CalculationResult) -> str:
    lines = [f"{result.employee_name or '同仁'} 您好：", ""]
    lines.append(f"您的到職日為 {format_date(result.onboard_date)}。")
    lines.append(f"於 {format_date(result.six_month_date)} 到職滿六個月，可享 {result.six_month_entitlement} 天特休。")
    for e in result.calendar_year_entitlements:
        if e.kind == "annual":
            lines.append(f"{e.source}：{e.days} 天")
    lines.extend(["", "如有疑問，歡迎與人資部門聯繫。"])
    return "\n".join(lines)


def _extract_text_from_msg(msg) -> str:
    out = []
    for blk in getattr(msg, "content", []) or []:
        if getattr(blk, "type", None) == "text":
            out.append(getattr(blk, "text", ""))
        elif isinstance(blk, dict) and blk.get("type") == "text":
            out.append(blk.get("text", ""))
    return "\n".join([t for t in out if t]).strip()


def _run_with_timeout(fn: Callable[[], Any], timeout_s: int, label: str):
    timeout_s = max(1, int(timeout_s))
    result_q: queue.Queue[tuple[bool, Any]] = queue.Queue(maxsize=1)

    def _runner() -> None:
        try:
            result_q.put((True, fn()))
        except Exception as err:  # noqa: BLE001
            result_q.put((False, err))

    t = threading.Thread(target=_runner, daemon=True, name=f"timeout-{label}")
    t.start()

    try:
        ok, payload = result_q.get(timeout=timeout_s)
    except queue.Empty as e:
        raise TimeoutError(f"{label} timed out after {timeout_s}s") from e

    if ok:
        return payload
    raise payload


def _create_anthropic_client(api_key: str, max_retries: int, http_timeout_s: int) -> Anthropic:
    return Anthropic(api_key=api_key, max_retries=max_retries, timeout=max(5, int(http_timeout_s)))


def _request_id_of(obj: Any) -> Optional[str]:
    rid = getattr(obj, "_request_id", None) or getattr(obj, "request_id", None)
    if rid:
        return str(rid)
    return None


def _error_code(err: Exception) -> str:
    if isinstance(err, TimeoutError):
        return "anthropic_timeout"
    status_code = int(getattr(err, "status_code", 0) or 0)
    if status_code == 429 or "overloaded" in type(err).__name__.lower():
        return "anthropic_rate_limited"
    if status_code in (401, 403):
        return "anthropic_auth"
    if status_code >= 500:
        return "anthropic_upstream_error"
    if isinstance(err, anthropic.APIError):
        return "anthropic_api_error"
    return "upstream_unknown"


def draft_notification(
    result: CalculationResult,
    *,
    settings: Optional[Settings] = None,
    on_debug: Optional[Callable[[str], None]] = None,
) -> NotificationDraft:
    """Ask the model for a leave notification letter.

    Never raises: every failure becomes a fallback text with ``generated=False``.
    """
    settings = settings or get_settings()
    debug_steps: List[str] = []
    _add_debug(
        debug_steps,
        f"Draft requested: employee={result.employee_name or '-'}, records={len(result.calendar_year_entitlements)}",
        on_debug,
    )

    if os.getenv("MOCK_MODE", "0").strip() == "1":
        _add_debug(debug_steps, "MOCK_MODE=1, model is not called", on_debug)
        return NotificationDraft(text=_mock_letter(result), generated=True, model="mock", debug_steps=debug_steps)

    if not settings.notify_enabled:
        _add_debug(debug_steps, "ANTHROPIC_API_KEY is not set", on_debug)
        return NotificationDraft(text=FALLBACK_NO_KEY, error_code="anthropic_not_configured", debug_steps=debug_steps)

    model = settings.ANTHROPIC_MODEL
    try:
        client = _create_anthropic_client(
            api_key=settings.ANTHROPIC_API_KEY,
            max_retries=settings.ANTHROPIC_MAX_RETRIES,
            http_timeout_s=max(settings.ANTHROPIC_HTTP_TIMEOUT_S, settings.NOTIFY_TIMEOUT_S + 5),
        )
        _add_debug(debug_steps, f"Sending to model={model}, timeout_s={settings.NOTIFY_TIMEOUT_S}", on_debug)

        def _create_call():
            return client.messages.create(
                model=model,
                max_tokens=settings.NOTIFY_MAX_TOKENS,
                system=_system_prompt_zh(),
                messages=[{"role": "user", "content": _user_prompt(result)}],
            )

        msg = _run_with_timeout(_create_call, settings.NOTIFY_TIMEOUT_S, "notify")
        rid = _request_id_of(msg)
        if rid:
            _add_debug(debug_steps, f"Reply received: request_id={rid}", on_debug)
        text = _extract_text_from_msg(msg)
    except Exception as e:  # noqa: BLE001
        code = _error_code(e)
        logger.warning("notification drafting failed: %s (%s)", type(e).__name__, code)
        _add_debug(debug_steps, f"Drafting failed: {type(e).__name__}, code={code}", on_debug)
        rid = _request_id_of(e)
        if rid:
            _add_debug(debug_steps, f"Drafting failed: error_request_id={rid}", on_debug)
        return NotificationDraft(text=FALLBACK_UNAVAILABLE, model=model, error_code=code, debug_steps=debug_steps)

    if not text:
        _add_debug(debug_steps, "Empty reply from model", on_debug)
        return NotificationDraft(text=FALLBACK_EMPTY, model=model, error_code="empty_reply", debug_steps=debug_steps)

    _add_debug(debug_steps, f"Draft ready: chars={len(text)}", on_debug)
    return NotificationDraft(text=text, generated=True, model=model, debug_steps=debug_steps)
