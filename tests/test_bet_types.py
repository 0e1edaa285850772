import pytest

from craps_engine.bet_types import (
    MAX_BET_CODE,
    ONE_ROLL,
    SERIES_SCOPED,
    BetCategory,
    BetType,
    bet_name,
    category_of,
    coerce_bet_type,
    is_valid_bet_type,
    normalize_bet_type,
    odds_type_for,
    target_number,
)
from craps_engine.errors import InvalidBetType


def test_catalog_has_64_codes_with_one_reserved():
    assert MAX_BET_CODE == 63
    assert len(BetType) == 64
    valid = [c for c in range(64) if is_valid_bet_type(c)]
    assert len(valid) == 63
    assert 42 not in valid


def test_invalid_codes_rejected():
    for bad in (-1, 42, 64, 100, True, "5", None, 2.0):
        assert not is_valid_bet_type(bad)
    with pytest.raises(InvalidBetType):
        coerce_bet_type(42)
    with pytest.raises(InvalidBetType):
        coerce_bet_type(64)


def test_category_ranges():
    assert category_of(0) is BetCategory.LINE
    assert category_of(3) is BetCategory.LINE
    assert category_of(4) is BetCategory.FIELD
    assert category_of(5) is BetCategory.YES
    assert category_of(24) is BetCategory.NO
    assert category_of(25) is BetCategory.HARDWAY
    assert category_of(32) is BetCategory.ODDS
    assert category_of(33) is BetCategory.BONUS
    assert category_of(43) is BetCategory.NEXT
    assert category_of(63) is BetCategory.REPEATER
    with pytest.raises(InvalidBetType):
        category_of(64)


def test_target_numbers():
    assert target_number(BetType.YES_2) == 2
    assert target_number(BetType.YES_8) == 8
    assert target_number(BetType.NO_12) == 12
    assert target_number(BetType.HARD_10) == 10
    assert target_number(BetType.NEXT_7) == 7
    assert int(BetType.NEXT_7) == 48
    assert target_number(BetType.REPEATER_6) == 6
    assert target_number(BetType.PASS) is None
    assert target_number(BetType.FIRE) is None


def test_names_and_odds_pairing():
    assert bet_name(BetType.HARD_8) == "Hard 8"
    assert bet_name(BetType.YES_6) == "Yes 6"
    assert bet_name(BetType.PASS) == "Pass Line"
    assert bet_name(BetType.MUGGSY) == "Muggsy's Corner"
    assert odds_type_for(BetType.DONT_COME) is BetType.ODDS_DONT_COME
    with pytest.raises(InvalidBetType):
        odds_type_for(BetType.FIELD)


@pytest.mark.parametrize(
    "raw,expected",
    [
        (5, BetType.YES_2),
        ("5", BetType.YES_2),
        ("Place 6", BetType.YES_6),
        ("yes6", BetType.YES_6),
        ("YES_6", BetType.YES_6),
        ("Don't Pass", BetType.DONT_PASS),
        ("dp", BetType.DONT_PASS),
        ("Hard 8", BetType.HARD_8),
        ("hardway eight", BetType.HARD_8),
        ("Lay 10", BetType.NO_10),
        ("yo", BetType.NEXT_11),
        ("next 7", BetType.NEXT_7),
        ("repeater_6", BetType.REPEATER_6),
        ("Muggsy's Corner", BetType.MUGGSY),
        ("odds_dont_come", BetType.ODDS_DONT_COME),
    ],
)
def test_normalize_bet_type(raw, expected):
    assert normalize_bet_type(raw) is expected


def test_normalize_rejects_unknown_and_reserved():
    for raw in ("banana", "42", "reserved_42", "hard 5", 42):
        with pytest.raises(InvalidBetType):
            normalize_bet_type(raw)


def test_scope_groups():
    assert BetType.FIELD in ONE_ROLL
    assert BetType.NEXT_12 in ONE_ROLL
    assert len(ONE_ROLL) == 12
    assert BetType.RESERVED_42 not in SERIES_SCOPED
    assert BetType.REPEATER_8 in SERIES_SCOPED
    assert len(SERIES_SCOPED) == 19
