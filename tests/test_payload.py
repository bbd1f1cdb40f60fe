import json
from datetime import datetime, timezone

import pytest

from draw_verifier.errors import InvalidTicketStructure, MalformedPayload
from draw_verifier.payload import parse_ticket_payload


def _payload(**overrides) -> str:  # type: ignore[no-untyped-def]
    data = {
        "id": "TKT12345678",
        "timestamp": "2025-01-15T06:00:00.000Z",
        "total": 30,
        "verified": True,
        "bets": [
            {"game": "Swertres", "combo": "1-2-3", "amount": 10},
            {"game": "STL Pares", "combo": "01.15", "amount": 20},
        ],
    }
    data.update(overrides)
    return json.dumps({key: value for key, value in data.items() if value is not ...})


def test_parse_full_ticket() -> None:
    ticket = parse_ticket_payload(_payload())
    assert ticket.id == "TKT12345678"
    assert ticket.verified is True
    assert ticket.total == 30
    assert ticket.timestamp == datetime(2025, 1, 15, 6, 0, tzinfo=timezone.utc)
    assert [(bet.game, bet.combo, bet.amount) for bet in ticket.bets] == [
        ("Swertres", "1-2-3", 10),
        ("STL Pares", "01.15", 20),
    ]


def test_parse_keeps_bet_fields_verbatim() -> None:
    ticket = parse_ticket_payload(_payload(bets=[{"game": " swer ", "combo": "1 - 2.3", "amount": 5}]))
    assert ticket.bets[0].game == " swer "
    assert ticket.bets[0].combo == "1 - 2.3"


def test_parse_carries_unverified_flag() -> None:
    ticket = parse_ticket_payload(_payload(verified=False))
    assert ticket.verified is False


def test_total_defaults_to_sum_of_bets() -> None:
    ticket = parse_ticket_payload(_payload(total=..., timestamp=...))
    assert ticket.total == 30
    assert ticket.timestamp is None


def test_epoch_timestamps() -> None:
    assert parse_ticket_payload(_payload(timestamp=1736920800)).timestamp == datetime(
        2025, 1, 15, 6, 0, tzinfo=timezone.utc
    )
    assert parse_ticket_payload(_payload(timestamp="1736920800")).timestamp == datetime(
        2025, 1, 15, 6, 0, tzinfo=timezone.utc
    )


@pytest.mark.parametrize(
    "text, expected",
    [
        ("-5", datetime(1969, 12, 31, 23, 59, 55, tzinfo=timezone.utc)),
        ("1e9", datetime(2001, 9, 9, 1, 46, 40, tzinfo=timezone.utc)),
        (" +1736920800.5 ", datetime(2025, 1, 15, 6, 0, 0, 500000, tzinfo=timezone.utc)),
    ],
)
def test_signed_and_exponent_epoch_strings(text: str, expected: datetime) -> None:
    assert parse_ticket_payload(_payload(timestamp=text)).timestamp == expected


def test_empty_bets_is_structurally_valid() -> None:
    ticket = parse_ticket_payload(_payload(bets=[], total=...))
    assert ticket.bets == ()
    assert ticket.total == 0


@pytest.mark.parametrize("raw", ["", "   ", "not json", "{'id': 1}", '{"id": "T1", "bets": [', '{"total": NaN}'])
def test_malformed_payloads(raw: str) -> None:
    with pytest.raises(MalformedPayload):
        parse_ticket_payload(raw)


def test_non_string_payload_is_malformed() -> None:
    with pytest.raises(MalformedPayload):
        parse_ticket_payload(None)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "overrides",
    [
        {"bets": ...},
        {"id": ...},
        {"verified": ...},
        {"id": ""},
        {"id": 12345678},
        {"verified": "true"},
        {"verified": 1},
        {"bets": {"game": "Swertres"}},
        {"bets": ["Swertres 1-2-3"]},
        {"bets": [{"game": "Swertres", "combo": 123, "amount": 10}]},
        {"bets": [{"game": "Swertres", "combo": "123"}]},
        {"bets": [{"game": "Swertres", "combo": "123", "amount": "10"}]},
        {"bets": [{"game": "Swertres", "combo": "123", "amount": True}]},
        {"bets": [{"combo": "123", "amount": 10}]},
        {"total": -1},
        {"total": "30"},
        {"timestamp": "yesterday"},
        {"timestamp": ""},
        {"timestamp": "nan"},
        {"timestamp": "-inf"},
    ],
)
def test_invalid_structures(overrides: dict) -> None:
    with pytest.raises(InvalidTicketStructure):
        parse_ticket_payload(_payload(**overrides))


def test_non_object_payload_is_invalid_structure() -> None:
    with pytest.raises(InvalidTicketStructure):
        parse_ticket_payload("[1, 2, 3]")
