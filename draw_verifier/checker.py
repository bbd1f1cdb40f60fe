from __future__ import annotations

from datetime import datetime
import logging
import re
from typing import List

from .models import Bet, Game, Schedule, Ticket, VerificationOutcome, WinningCheckResult
from .payload import parse_ticket_payload
from .payout import PayoutTable
from .schedule import format_draw_time, is_completed

LOGGER = logging.getLogger(__name__)

COMBO_SEPARATORS = re.compile(r"[\s.\-]+")


def normalize_combo(combo: str) -> str:
    return COMBO_SEPARATORS.sub("", combo).casefold()


def is_winning_combo(bet_combo: str, draw_result: str) -> bool:
    # Order matters: "1-2-3" and "3-2-1" are different combinations.
    return normalize_combo(bet_combo) == normalize_combo(draw_result)


def resolve_game(label: str, schedule: Schedule, exact_first: bool = False) -> Game | None:
    """Find the schedule game a bet's free-text label refers to.

    A game matches when either its name contains the label or the label
    contains its name, ignoring case. The first match in schedule order wins,
    so overlapping names such as "Swer2" and "Swer3" resolve to whichever is
    listed first. With ``exact_first`` an exact (case-insensitive) name match
    is preferred before falling back to that rule.
    """
    needle = label.casefold()
    if not needle.strip():
        return None

    if exact_first:
        for game in schedule.games:
            if game.name.casefold() == needle:
                return game

    for game in schedule.games:
        name = game.name.casefold()
        if needle in name or name in needle:
            return game
    return None


def _check_bet(
    bet: Bet,
    game: Game,
    now: datetime,
    payout_table: PayoutTable,
) -> List[WinningCheckResult]:
    results: List[WinningCheckResult] = []
    for draw in game.draws:
        if not is_completed(draw, now) or not draw.result:
            continue
        winning = is_winning_combo(bet.combo, draw.result)
        payout = payout_table.payout(bet.amount, game.name) if winning else 0
        results.append(
            WinningCheckResult(
                game=bet.game,
                combo=bet.combo,
                amount=bet.amount,
                draw_time=format_draw_time(draw.scheduled_time),
                draw_result=draw.result,
                is_winner=winning,
                payout=payout,
            )
        )
    return results


def verify_ticket(
    ticket: Ticket,
    schedule: Schedule,
    now: datetime,
    payout_table: PayoutTable | None = None,
    exact_first: bool = False,
) -> VerificationOutcome:
    table = payout_table or PayoutTable()
    results: List[WinningCheckResult] = []

    for bet in ticket.bets:
        game = resolve_game(bet.game, schedule, exact_first=exact_first)
        if game is None:
            LOGGER.info("Ticket %s: no scheduled game matches %r", ticket.id, bet.game)
            continue
        results.extend(_check_bet(bet, game, now, table))

    outcome = VerificationOutcome(authentic=ticket.verified, results=results, ticket_id=ticket.id)
    LOGGER.info(
        "Ticket %s verified: authentic=%s checked=%d winners=%d",
        ticket.id,
        outcome.authentic,
        len(results),
        outcome.winning_count,
    )
    return outcome


def verify_payload(
    raw: str,
    schedule: Schedule,
    now: datetime,
    payout_table: PayoutTable | None = None,
    exact_first: bool = False,
) -> VerificationOutcome:
    ticket = parse_ticket_payload(raw)
    return verify_ticket(ticket, schedule, now, payout_table=payout_table, exact_first=exact_first)
