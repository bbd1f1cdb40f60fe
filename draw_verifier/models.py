from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple, Union

Amount = Union[int, float]

DRAW_UPCOMING = "upcoming"
DRAW_COMPLETED = "completed"


@dataclass(frozen=True)
class Draw:
    scheduled_time: datetime
    result: Optional[str] = None


@dataclass(frozen=True)
class Game:
    name: str
    draws: Tuple[Draw, ...] = ()


@dataclass(frozen=True)
class Schedule:
    day: date
    games: Tuple[Game, ...] = ()

    def game_names(self) -> List[str]:
        return [game.name for game in self.games]


@dataclass(frozen=True)
class Bet:
    game: str
    combo: str
    amount: Amount


@dataclass(frozen=True)
class Ticket:
    id: str
    verified: bool
    bets: Tuple[Bet, ...]
    total: Amount = 0
    timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class WinningCheckResult:
    game: str
    combo: str
    amount: Amount
    draw_time: str
    draw_result: str
    is_winner: bool
    payout: Amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "game": self.game,
            "combo": self.combo,
            "amount": self.amount,
            "drawTime": self.draw_time,
            "drawResult": self.draw_result,
            "isWinner": self.is_winner,
            "payout": self.payout,
        }


@dataclass(frozen=True)
class VerificationOutcome:
    authentic: bool
    results: List[WinningCheckResult] = field(default_factory=list)
    ticket_id: str = ""

    @property
    def winning_count(self) -> int:
        return sum(1 for row in self.results if row.is_winner)

    @property
    def total_payout(self) -> Amount:
        return sum(row.payout for row in self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "authentic": self.authentic,
            "results": [row.to_dict() for row in self.results],
            "ticketId": self.ticket_id,
            "winningCount": self.winning_count,
            "totalPayout": self.total_payout,
        }


DEFAULT_DRAW_TIMES: Dict[str, List[str]] = {
    "Swertres": ["14:00", "17:00", "21:00"],
    "Last 2": ["15:00", "19:00"],
    "STL Pares": ["10:30", "16:00", "20:00"],
}

DEFAULT_PAYOUT_MULTIPLIERS: Dict[str, Amount] = {
    "STL Pares": 700,
    "Last 2": 80,
    "Last 3": 500,
    "Swer3": 500,
    "Swertres": 500,
}

DEFAULT_FALLBACK_MULTIPLIER: Amount = 20
