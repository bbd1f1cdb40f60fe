from __future__ import annotations

from datetime import date, datetime, tzinfo
import json
import logging
import os
from threading import Lock
from typing import Any, Dict, List, Optional, Tuple

import requests

from .models import DEFAULT_DRAW_TIMES, Schedule
from .schedule import ScheduleConfigError, build_schedule

LOGGER = logging.getLogger(__name__)

DrawTimes = Dict[str, List[str]]
PostedResults = Dict[str, Dict[str, Optional[str]]]

DEFAULT_REFRESH_SECONDS = 60


class ScheduleSourceError(RuntimeError):
    pass


def parse_schedule_document(document: Any) -> Tuple[DrawTimes, PostedResults]:
    if not isinstance(document, dict) or not isinstance(document.get("games"), list):
        raise ScheduleConfigError("Schedule document must contain a 'games' list.")

    draw_times: DrawTimes = {}
    results: PostedResults = {}
    for entry in document["games"]:
        if not isinstance(entry, dict):
            raise ScheduleConfigError("Each schedule game must be an object.")
        name = entry.get("name")
        draws = entry.get("draws")
        if not isinstance(name, str) or not name.strip():
            raise ScheduleConfigError("Schedule game is missing its name.")
        if not isinstance(draws, list):
            raise ScheduleConfigError(f"Schedule game {name} is missing its draws.")
        if name in draw_times:
            raise ScheduleConfigError(f"Duplicate game in schedule: {name}")

        times: List[str] = []
        game_results: Dict[str, Optional[str]] = {}
        for draw in draws:
            if not isinstance(draw, dict) or not isinstance(draw.get("time"), str):
                raise ScheduleConfigError(f"Draw entries for {name} need a 'time' string.")
            times.append(draw["time"])
            result = draw.get("result")
            if result is not None:
                game_results[draw["time"]] = str(result)
        draw_times[name] = times
        results[name] = game_results

    return draw_times, results


class ScheduleSourceClient:
    def __init__(self, url: str, timeout_seconds: int = 10):
        self.url = url
        self._timeout = timeout_seconds
        self._session = requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def fetch_document(self) -> Any:
        try:
            response = self._session.get(self.url, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ScheduleSourceError(f"Failed to fetch schedule: {self.url}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise ScheduleSourceError(f"Schedule source returned invalid JSON: {self.url}") from exc

    def load(self, day: date, tz: tzinfo) -> Schedule:
        draw_times, results = parse_schedule_document(self.fetch_document())
        return build_schedule(draw_times, day, tz, results=results)


class FileScheduleSource:
    def __init__(self, path: str):
        self.path = path

    def load(self, day: date, tz: tzinfo) -> Schedule:
        try:
            with open(self.path, encoding="utf-8") as handle:
                document = json.load(handle)
        except (OSError, ValueError) as exc:
            raise ScheduleSourceError(f"Failed to read schedule file: {self.path}") from exc
        draw_times, results = parse_schedule_document(document)
        return build_schedule(draw_times, day, tz, results=results)


class StaticScheduleSource:
    def __init__(self, draw_times: DrawTimes | None = None, results: PostedResults | None = None):
        self.draw_times = draw_times if draw_times is not None else DEFAULT_DRAW_TIMES
        self.results = results or {}

    def load(self, day: date, tz: tzinfo) -> Schedule:
        return build_schedule(self.draw_times, day, tz, results=self.results)


class DailyScheduleCache:
    """Caches the day's schedule and reloads it when results may have been posted.

    A reload happens on day rollover, when a draw time has passed since the
    last load, and every ``refresh_seconds`` while a completed draw is still
    waiting for its result.
    """

    def __init__(self, source: Any, tz: tzinfo, refresh_seconds: int = DEFAULT_REFRESH_SECONDS) -> None:
        self.source = source
        self.tz = tz
        self.refresh_seconds = max(0, int(refresh_seconds))
        self._lock = Lock()
        self._schedule: Schedule | None = None
        self._loaded_at: datetime | None = None

    def get(self, now: datetime) -> Schedule:
        today = now.astimezone(self.tz).date()
        with self._lock:
            if self._needs_reload(today, now):
                LOGGER.info("Loading draw schedule for %s", today.isoformat())
                self._schedule = self.source.load(today, self.tz)
                self._loaded_at = now
            return self._schedule

    def _needs_reload(self, today: date, now: datetime) -> bool:
        if self._schedule is None or self._loaded_at is None or self._schedule.day != today:
            return True

        loaded_at = self._loaded_at
        awaiting_result = False
        for game in self._schedule.games:
            for draw in game.draws:
                if loaded_at < draw.scheduled_time <= now:
                    return True
                if draw.scheduled_time <= now and draw.result is None:
                    awaiting_result = True

        if not awaiting_result:
            return False
        return (now - loaded_at).total_seconds() >= self.refresh_seconds


def create_schedule_source_from_env() -> Any:
    url = os.environ.get("SCHEDULE_SOURCE_URL", "").strip()
    if url:
        timeout_raw = os.environ.get("SCHEDULE_SOURCE_TIMEOUT", "").strip()
        try:
            timeout_seconds = int(timeout_raw) if timeout_raw else 10
        except ValueError:
            timeout_seconds = 10
        return ScheduleSourceClient(url, timeout_seconds=max(1, timeout_seconds))

    path = os.environ.get("SCHEDULE_FILE", "").strip()
    if path:
        return FileScheduleSource(path)

    LOGGER.warning("No schedule source configured; using built-in draw times without results")
    return StaticScheduleSource()


def load_refresh_seconds_from_env() -> int:
    raw = os.environ.get("SCHEDULE_REFRESH_SECONDS", "").strip()
    try:
        return max(0, int(raw)) if raw else DEFAULT_REFRESH_SECONDS
    except ValueError:
        LOGGER.warning("Ignoring SCHEDULE_REFRESH_SECONDS=%r", raw)
        return DEFAULT_REFRESH_SECONDS
