from .checker import (
    is_winning_combo,
    normalize_combo,
    resolve_game,
    verify_payload,
    verify_ticket,
)
from .errors import InvalidAmount, InvalidTicketStructure, MalformedPayload, TicketValidationError
from .models import (
    DRAW_COMPLETED,
    DRAW_UPCOMING,
    Bet,
    Draw,
    Game,
    Schedule,
    Ticket,
    VerificationOutcome,
    WinningCheckResult,
)
from .payload import parse_ticket_payload
from .payout import PayoutTable, load_payout_table_from_env, parse_multiplier
from .schedule import (
    ScheduleConfigError,
    build_schedule,
    describe_schedule,
    draw_status,
    format_countdown,
    format_draw_time,
    next_upcoming_draw,
)
from .schedule_source import (
    DailyScheduleCache,
    ScheduleSourceError,
    create_schedule_source_from_env,
    load_refresh_seconds_from_env,
)

__all__ = [
    "Bet",
    "DRAW_COMPLETED",
    "DRAW_UPCOMING",
    "DailyScheduleCache",
    "Draw",
    "Game",
    "InvalidAmount",
    "InvalidTicketStructure",
    "MalformedPayload",
    "PayoutTable",
    "Schedule",
    "ScheduleConfigError",
    "ScheduleSourceError",
    "Ticket",
    "TicketValidationError",
    "VerificationOutcome",
    "WinningCheckResult",
    "build_schedule",
    "create_schedule_source_from_env",
    "describe_schedule",
    "draw_status",
    "format_countdown",
    "format_draw_time",
    "is_winning_combo",
    "load_payout_table_from_env",
    "load_refresh_seconds_from_env",
    "next_upcoming_draw",
    "normalize_combo",
    "parse_multiplier",
    "parse_ticket_payload",
    "resolve_game",
    "verify_payload",
    "verify_ticket",
]
