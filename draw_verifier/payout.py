from __future__ import annotations

import json
import logging
import math
import os
import re
from typing import Any, Dict, Mapping

from .errors import InvalidAmount
from .models import DEFAULT_FALLBACK_MULTIPLIER, DEFAULT_PAYOUT_MULTIPLIERS, Amount

LOGGER = logging.getLogger(__name__)

RATIO_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*:\s*(\d+(?:\.\d+)?)\s*$")


def parse_multiplier(value: Any) -> Amount:
    """Read a multiplier written as a number, ``"500"`` or the ratio ``"1:700"``."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid payout multiplier: {value!r}")
    if isinstance(value, (int, float)):
        multiplier: Amount = value
    elif isinstance(value, str):
        ratio = RATIO_PATTERN.match(value)
        if ratio:
            stake, prize = float(ratio.group(1)), float(ratio.group(2))
            if stake == 0:
                raise ValueError(f"Invalid payout ratio: {value!r}")
            multiplier = prize / stake
        else:
            multiplier = float(value.strip())
        if float(multiplier).is_integer():
            multiplier = int(multiplier)
    else:
        raise ValueError(f"Invalid payout multiplier: {value!r}")

    if not math.isfinite(multiplier) or multiplier < 0:
        raise ValueError(f"Payout multiplier must be a non-negative number: {value!r}")
    return multiplier


class PayoutTable:
    def __init__(
        self,
        multipliers: Mapping[str, Any] | None = None,
        default_multiplier: Any = DEFAULT_FALLBACK_MULTIPLIER,
    ) -> None:
        source = DEFAULT_PAYOUT_MULTIPLIERS if multipliers is None else multipliers
        self._multipliers: Dict[str, Amount] = {
            str(name): parse_multiplier(value) for name, value in source.items()
        }
        self.default_multiplier = parse_multiplier(default_multiplier)

    def multiplier_for(self, canonical_game: str) -> Amount:
        return self._multipliers.get(canonical_game, self.default_multiplier)

    def payout(self, amount: Amount, canonical_game: str) -> Amount:
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            raise InvalidAmount(f"Bet amount must be a number, got {amount!r}")
        if not math.isfinite(amount) or amount <= 0:
            raise InvalidAmount(f"Bet amount must be positive, got {amount!r}")
        return amount * self.multiplier_for(canonical_game)

    def as_dict(self) -> Dict[str, Amount]:
        return dict(self._multipliers)


def load_payout_table_from_env() -> PayoutTable:
    default_raw = os.environ.get("DEFAULT_PAYOUT_MULTIPLIER", "").strip()
    try:
        default_multiplier = parse_multiplier(default_raw) if default_raw else DEFAULT_FALLBACK_MULTIPLIER
    except ValueError:
        LOGGER.warning("Ignoring DEFAULT_PAYOUT_MULTIPLIER=%r", default_raw)
        default_multiplier = DEFAULT_FALLBACK_MULTIPLIER

    table_raw = os.environ.get("PAYOUT_MULTIPLIERS", "").strip()
    if not table_raw:
        return PayoutTable(default_multiplier=default_multiplier)

    try:
        configured = json.loads(table_raw)
        if not isinstance(configured, dict):
            raise ValueError("PAYOUT_MULTIPLIERS must be a JSON object")
        return PayoutTable(configured, default_multiplier=default_multiplier)
    except ValueError as exc:
        LOGGER.warning("Invalid PAYOUT_MULTIPLIERS, using built-in table: %s", exc)
        return PayoutTable(default_multiplier=default_multiplier)
