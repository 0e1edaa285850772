import pytest

from craps_engine.bet_types import BetType
from craps_engine.payouts import (
    FIRE_LADDER,
    apply_multiplier,
    calculate_payout,
    field_payout,
    ladder_multiplier,
)


def test_field_payouts():
    assert field_payout(2) == 200
    assert field_payout(3) == 100
    assert field_payout(7) == 0
    assert field_payout(12) == 300
    with pytest.raises(ValueError):
        field_payout(13)


def test_line_and_pass_odds():
    assert calculate_payout(BetType.PASS, 1000) == 2000
    assert calculate_payout(BetType.ODDS_PASS, 1000, point=4) == 3000
    assert calculate_payout(BetType.ODDS_PASS, 1000, point=6) == 2200
    assert calculate_payout(BetType.ODDS_PASS, 1000, point=5) == 2500
    assert calculate_payout(BetType.ODDS_COME, 1000, point=10) == 3000


def test_dont_odds_use_lay_ratios():
    assert calculate_payout(BetType.ODDS_DONT_PASS, 1500, point=5) == 2505
    assert calculate_payout(BetType.ODDS_DONT_PASS, 1200, point=6) == 2196
    assert calculate_payout(BetType.ODDS_DONT_COME, 1000, point=4) == 1500


def test_odds_need_a_point():
    with pytest.raises(ValueError):
        calculate_payout(BetType.ODDS_PASS, 100)


def test_number_bets():
    # 7:6 on a six
    assert calculate_payout(BetType.YES_6, 6) == 13
    # 9:5 on a four
    assert calculate_payout(BetType.YES_4, 5) == 14
    assert calculate_payout(BetType.NO_4, 100) == 156
    assert calculate_payout(BetType.HARD_8, 10) == 100
    assert calculate_payout(BetType.HARD_4, 10) == 80
    assert calculate_payout(BetType.NEXT_7, 100) == 590
    assert calculate_payout(BetType.REPEATER_2, 10) == 410


def test_fixed_point_floors():
    assert apply_multiplier(1, 117) == 2
    assert apply_multiplier(3, 67) == 5
    assert apply_multiplier(0, 900) == 0


def test_ladders():
    assert ladder_multiplier(FIRE_LADDER, 2) is None
    assert ladder_multiplier(FIRE_LADDER, 3) == 700
    assert ladder_multiplier(FIRE_LADDER, 4) == 2400
    assert ladder_multiplier(FIRE_LADDER, 7) == 99900
    assert calculate_payout(BetType.FIRE, 10) == 80


def test_negative_amount_rejected():
    with pytest.raises(ValueError):
        calculate_payout(BetType.PASS, -1)
