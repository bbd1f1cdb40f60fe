import pytest

from draw_verifier.errors import InvalidAmount
from draw_verifier.models import DEFAULT_FALLBACK_MULTIPLIER
from draw_verifier.payout import PayoutTable, load_payout_table_from_env, parse_multiplier


def test_payout_uses_configured_multiplier() -> None:
    table = PayoutTable({"Swertres": 500, "Last 2": 80}, default_multiplier=20)
    assert table.payout(10, "Swertres") == 5000
    assert table.payout(3, "Last 2") == 240


def test_payout_falls_back_to_default_multiplier() -> None:
    table = PayoutTable({"Swertres": 500}, default_multiplier=20)
    assert table.payout(10, "Last 3") == 200


def test_payout_is_proportional_to_amount() -> None:
    table = PayoutTable()
    for game in ["STL Pares", "Last 2", "Swertres", "Unknown"]:
        for amount in [1, 7, 12.5, 499]:
            assert table.payout(2 * amount, game) == 2 * table.payout(amount, game)


@pytest.mark.parametrize("amount", [0, -10, -0.5, float("nan"), "10", None, True])
def test_payout_rejects_invalid_amounts(amount) -> None:  # type: ignore[no-untyped-def]
    with pytest.raises(InvalidAmount):
        PayoutTable().payout(amount, "Swertres")


def test_default_table_matches_game_configuration() -> None:
    table = PayoutTable()
    assert table.multiplier_for("STL Pares") == 700
    assert table.multiplier_for("Last 2") == 80
    assert table.multiplier_for("Last 3") == 500
    assert table.multiplier_for("Swer3") == 500
    assert table.multiplier_for("Swertres") == 500
    assert table.multiplier_for("Something else") == DEFAULT_FALLBACK_MULTIPLIER


def test_parse_multiplier_formats() -> None:
    assert parse_multiplier(500) == 500
    assert parse_multiplier(" 80 ") == 80
    assert parse_multiplier("1:700") == 700
    assert parse_multiplier("2:5") == 2.5
    assert parse_multiplier(1.5) == 1.5


@pytest.mark.parametrize("value", ["0:700", "abc", "-5", -1, None, True, "nan"])
def test_parse_multiplier_rejects_bad_values(value) -> None:  # type: ignore[no-untyped-def]
    with pytest.raises(ValueError):
        parse_multiplier(value)


def test_load_from_env(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setenv("PAYOUT_MULTIPLIERS", '{"Swertres": "1:450", "Pick 6": 1000}')
    monkeypatch.setenv("DEFAULT_PAYOUT_MULTIPLIER", "30")
    table = load_payout_table_from_env()
    assert table.as_dict() == {"Swertres": 450, "Pick 6": 1000}
    assert table.default_multiplier == 30


def test_load_from_env_without_configuration(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.delenv("PAYOUT_MULTIPLIERS", raising=False)
    monkeypatch.delenv("DEFAULT_PAYOUT_MULTIPLIER", raising=False)
    table = load_payout_table_from_env()
    assert table.multiplier_for("STL Pares") == 700
    assert table.default_multiplier == DEFAULT_FALLBACK_MULTIPLIER


def test_load_from_env_ignores_bad_configuration(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setenv("PAYOUT_MULTIPLIERS", "[1, 2]")
    monkeypatch.setenv("DEFAULT_PAYOUT_MULTIPLIER", "lots")
    table = load_payout_table_from_env()
    assert table.multiplier_for("Last 2") == 80
    assert table.default_multiplier == DEFAULT_FALLBACK_MULTIPLIER
