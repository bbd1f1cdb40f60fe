from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
import math
from typing import Any, List, Mapping

from .errors import InvalidTicketStructure, MalformedPayload
from .models import Amount, Bet, Ticket

LOGGER = logging.getLogger(__name__)


def parse_ticket_payload(raw: str) -> Ticket:
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedPayload("Scan payload is empty.")

    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except ValueError as exc:
        raise MalformedPayload("Scan payload is not valid JSON.") from exc

    if not isinstance(data, Mapping):
        raise InvalidTicketStructure("Ticket payload must be a JSON object.")

    ticket_id = data.get("id")
    if not isinstance(ticket_id, str) or not ticket_id.strip():
        raise InvalidTicketStructure("Ticket is missing its id.")

    if "verified" not in data or not isinstance(data["verified"], bool):
        raise InvalidTicketStructure("Ticket is missing the verified flag.")

    raw_bets = data.get("bets")
    if not isinstance(raw_bets, list):
        raise InvalidTicketStructure("Ticket is missing its bets.")
    bets = [_parse_bet(index, item) for index, item in enumerate(raw_bets, start=1)]

    total = _parse_total(data.get("total"), bets)
    timestamp = _parse_timestamp(data.get("timestamp"))

    ticket = Ticket(
        id=ticket_id,
        verified=data["verified"],
        bets=tuple(bets),
        total=total,
        timestamp=timestamp,
    )
    LOGGER.debug("Parsed ticket %s with %d bet(s)", ticket.id, len(ticket.bets))
    return ticket


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Unsupported JSON constant: {name}")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _parse_bet(index: int, item: Any) -> Bet:
    if not isinstance(item, Mapping):
        raise InvalidTicketStructure(f"Bet #{index} must be an object.")

    game = item.get("game")
    combo = item.get("combo")
    amount = item.get("amount")
    if not isinstance(game, str):
        raise InvalidTicketStructure(f"Bet #{index} is missing its game.")
    if not isinstance(combo, str):
        raise InvalidTicketStructure(f"Bet #{index} is missing its combo.")
    if not _is_number(amount):
        raise InvalidTicketStructure(f"Bet #{index} has a non-numeric amount.")
    return Bet(game=game, combo=combo, amount=amount)


def _parse_total(value: Any, bets: List[Bet]) -> Amount:
    if value is None:
        return sum(bet.amount for bet in bets)
    if not _is_number(value) or value < 0:
        raise InvalidTicketStructure("Ticket total must be a non-negative number.")
    return value


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None:
        return None

    if _is_number(value):
        return _from_epoch(value)

    if not isinstance(value, str) or not value.strip():
        raise InvalidTicketStructure("Ticket timestamp must be ISO-8601 or epoch seconds.")

    text = value.strip()
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            raise InvalidTicketStructure(f"Unreadable ticket timestamp: {text}")
        return _from_epoch(seconds)

    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise InvalidTicketStructure(f"Unreadable ticket timestamp: {value}") from exc


def _from_epoch(seconds: float) -> datetime:
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise InvalidTicketStructure(f"Ticket timestamp out of range: {seconds}") from exc
