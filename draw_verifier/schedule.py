from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .models import DRAW_COMPLETED, DRAW_UPCOMING, Draw, Game, Schedule

DRAW_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


class ScheduleConfigError(ValueError):
    pass


def draw_status(draw: Draw, now: datetime) -> str:
    if now >= draw.scheduled_time:
        return DRAW_COMPLETED
    return DRAW_UPCOMING


def is_completed(draw: Draw, now: datetime) -> bool:
    return draw_status(draw, now) == DRAW_COMPLETED


def next_upcoming_draw(game: Game, now: datetime) -> Draw | None:
    upcoming = [draw for draw in game.draws if draw_status(draw, now) == DRAW_UPCOMING]
    if not upcoming:
        return None
    return min(upcoming, key=lambda draw: draw.scheduled_time)


def parse_draw_time(raw_time: str, day: date, tz: tzinfo) -> datetime:
    match = DRAW_TIME_PATTERN.match(raw_time) if isinstance(raw_time, str) else None
    if not match:
        raise ScheduleConfigError(f"Invalid draw time (expected HH:MM): {raw_time!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ScheduleConfigError(f"Draw time out of range: {raw_time!r}")
    return datetime.combine(day, time(hour, minute), tzinfo=tz)


def build_schedule(
    draw_times: Mapping[str, Iterable[str]],
    day: date,
    tz: tzinfo,
    results: Mapping[str, Mapping[str, Optional[str]]] | None = None,
) -> Schedule:
    posted = results or {}
    games: List[Game] = []
    seen_names: set[str] = set()

    for name, times in draw_times.items():
        if not isinstance(name, str) or not name.strip():
            raise ScheduleConfigError("Game name must be a non-empty string.")
        if name in seen_names:
            raise ScheduleConfigError(f"Duplicate game in schedule: {name}")
        seen_names.add(name)

        game_results = posted.get(name) or {}
        draws: List[Draw] = []
        seen_times: set[datetime] = set()
        for raw_time in times:
            scheduled = parse_draw_time(raw_time, day, tz)
            if scheduled in seen_times:
                raise ScheduleConfigError(f"Duplicate draw time {raw_time} for {name}")
            seen_times.add(scheduled)
            draws.append(Draw(scheduled_time=scheduled, result=_clean_result(game_results.get(raw_time))))
        games.append(Game(name=name, draws=tuple(draws)))

    schedule = Schedule(day=day, games=tuple(games))
    validate_schedule(schedule)
    return schedule


def validate_schedule(schedule: Schedule) -> None:
    names = schedule.game_names()
    if len(set(names)) != len(names):
        raise ScheduleConfigError("Game names must be unique within a schedule.")

    for game in schedule.games:
        times = [draw.scheduled_time for draw in game.draws]
        if len(set(times)) != len(times):
            raise ScheduleConfigError(f"Draw times must be distinct for {game.name}")
        outside = [t for t in times if t.date() != schedule.day]
        if outside:
            raise ScheduleConfigError(
                f"Draws for {game.name} fall outside {schedule.day.isoformat()}: {outside}"
            )


def _clean_result(raw_result: Any) -> str | None:
    if raw_result is None:
        return None
    text = str(raw_result).strip()
    return text or None


def format_draw_time(moment: datetime) -> str:
    # Not strftime: %p follows the process locale.
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour:02d}:{moment.minute:02d} {suffix}"


def format_countdown(remaining: timedelta) -> str:
    total_seconds = int(remaining.total_seconds())
    if total_seconds <= 0:
        return "00:00:00"
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def describe_schedule(schedule: Schedule, now: datetime) -> Dict[str, Any]:
    """Serializable view of the day's draws as seen at ``now``.

    A result is only shown for draws that have completed, so a result posted
    early never leaks to the schedule display.
    """
    games: List[Dict[str, Any]] = []
    for game in schedule.games:
        upcoming = next_upcoming_draw(game, now)
        draws = []
        for draw in game.draws:
            status = draw_status(draw, now)
            draws.append(
                {
                    "time": format_draw_time(draw.scheduled_time),
                    "status": status,
                    "result": draw.result if status == DRAW_COMPLETED else None,
                    "next": draw is upcoming,
                }
            )

        next_draw = None
        if upcoming is not None:
            next_draw = {
                "time": format_draw_time(upcoming.scheduled_time),
                "countdown": format_countdown(upcoming.scheduled_time - now),
            }
        games.append({"name": game.name, "draws": draws, "nextDraw": next_draw})

    return {"day": schedule.day.isoformat(), "games": games}
