from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
import logging
import os
from time import perf_counter
from typing import Any, Dict, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from flask import Flask, Response, jsonify, request

from draw_verifier import (
    DailyScheduleCache,
    ScheduleConfigError,
    ScheduleSourceError,
    TicketValidationError,
    create_schedule_source_from_env,
    describe_schedule,
    load_payout_table_from_env,
    load_refresh_seconds_from_env,
    verify_payload,
)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
load_dotenv(os.path.join(BASE_DIR, ".env"), override=False)

logging.basicConfig(
    level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Asia/Manila"


def _resolve_timezone() -> tzinfo:
    name = os.environ.get("SCHEDULE_TIMEZONE", "").strip() or DEFAULT_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        LOGGER.warning("Unknown SCHEDULE_TIMEZONE %r, falling back to UTC+08:00", name)
        return timezone(timedelta(hours=8), "PHT")


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


SCHEDULE_TZ = _resolve_timezone()

app = Flask(__name__)
schedule_cache = DailyScheduleCache(
    create_schedule_source_from_env(),
    SCHEDULE_TZ,
    refresh_seconds=load_refresh_seconds_from_env(),
)
payout_table = load_payout_table_from_env()
exact_game_match = _env_flag("GAME_MATCH_EXACT_FIRST")


def _now() -> datetime:
    return datetime.now(SCHEDULE_TZ)


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "").strip()
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "-"


def _error_response(code: str, message: str, status: int, detail: str = "") -> Tuple[Response, int]:
    error = {"code": code, "message": message, "detail": detail, "retryable": True}
    return jsonify({"error": error}), status


@app.before_request
def _track_request_start() -> None:
    request.environ["draw_verifier.request_start"] = perf_counter()


@app.after_request
def _track_request_end(response: Response) -> Response:
    start = request.environ.get("draw_verifier.request_start")
    duration_ms = int((perf_counter() - start) * 1000) if isinstance(start, float) else 0
    LOGGER.debug(
        "%s %s -> %s in %dms (%s)",
        request.method,
        request.path,
        response.status_code,
        duration_ms,
        _client_ip(),
    )
    return response


@app.get("/schedule")
def schedule() -> Tuple[Response, int]:
    now = _now()
    try:
        current = schedule_cache.get(now)
    except (ScheduleSourceError, ScheduleConfigError) as exc:
        LOGGER.warning("Schedule unavailable: %s", exc)
        return _error_response("schedule_unavailable", "Draw schedule is unavailable.", 503)
    return jsonify(describe_schedule(current, now)), 200


@app.post("/verify")
def verify() -> Tuple[Response, int]:
    raw_payload = request.get_data(as_text=True)
    now = _now()
    try:
        current = schedule_cache.get(now)
    except (ScheduleSourceError, ScheduleConfigError) as exc:
        LOGGER.warning("Schedule unavailable: %s", exc)
        return _error_response("schedule_unavailable", "Draw schedule is unavailable.", 503)

    try:
        outcome = verify_payload(
            raw_payload,
            current,
            now,
            payout_table=payout_table,
            exact_first=exact_game_match,
        )
    except TicketValidationError as exc:
        LOGGER.info("Rejected scan from %s: %s (%s)", _client_ip(), exc.code, exc)
        return _error_response(
            exc.code,
            "Invalid QR code or ticket data. Please try again.",
            400,
            detail=str(exc),
        )

    return jsonify(outcome.to_dict()), 200


@app.get("/health")
def health() -> tuple[Dict[str, Any], int]:
    return {"status": "ok"}, 200


if __name__ == "__main__":
    host = os.environ.get("HOST", "127.0.0.1")
    try:
        port = int(os.environ.get("PORT", "5000"))
    except ValueError:
        port = 5000
    app.run(host=host, port=port, debug=_env_flag("FLASK_DEBUG"))
