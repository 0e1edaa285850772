"""
Fixed-point payout tables.

Every multiplier is an integer number of hundredths of the stake paid as
winnings (``PAYOUT_SCALE``). A winning bet returns
``stake + stake * multiplier // PAYOUT_SCALE``; no floating point anywhere, so
results are reproducible bit for bit.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from .bet_types import BetCategory, BetType, category_of, coerce_bet_type, target_number

PAYOUT_SCALE = 100

LINE_PAYOUT = 100

# Field: winnings per total (0 = the bet loses).
FIELD_PAYOUTS: Mapping[int, int] = {
    2: 200, 3: 100, 4: 100, 5: 0, 6: 0, 7: 0,
    8: 0, 9: 100, 10: 100, 11: 100, 12: 300,
}

# Yes (place): 9:5, 7:5, 7:6; 2/12 and 3/11 at true odds less 2%.
YES_PAYOUTS: Mapping[int, int] = {
    2: 588, 3: 294, 4: 180, 5: 140, 6: 117,
    8: 117, 9: 140, 10: 180, 11: 294, 12: 588,
}

# No (lay): the inverse ratio of the matching Yes bet.
NO_PAYOUTS: Mapping[int, int] = {
    2: 17, 3: 34, 4: 56, 5: 71, 6: 86,
    8: 86, 9: 71, 10: 56, 11: 34, 12: 17,
}

HARDWAY_PAYOUTS: Mapping[int, int] = {4: 700, 6: 900, 8: 900, 10: 700}

# Odds keyed by the point locked at placement.
PASS_ODDS_PAYOUTS: Mapping[int, int] = {4: 200, 5: 150, 6: 120, 8: 120, 9: 150, 10: 200}
DONT_ODDS_PAYOUTS: Mapping[int, int] = {4: 50, 5: 67, 6: 83, 8: 83, 9: 67, 10: 50}

# Next (one roll): true odds less a built-in edge.
NEXT_PAYOUTS: Mapping[int, int] = {
    2: 3430, 3: 1667, 4: 1078, 5: 784, 6: 608, 7: 490,
    8: 608, 9: 784, 10: 1078, 11: 1667, 12: 3430,
}

# Repeater: hits required before a seven-out, and winnings once reached.
REPEATER_REQUIRED: Mapping[int, int] = {
    2: 2, 3: 3, 4: 4, 5: 5, 6: 6, 8: 6, 9: 5, 10: 4, 11: 3, 12: 2,
}
REPEATER_PAYOUTS: Mapping[int, int] = {
    2: 4000, 3: 5000, 4: 6500, 5: 8000, 6: 9000,
    8: 9000, 9: 8000, 10: 6500, 11: 5000, 12: 4000,
}

# Bonus ladders: progress count → winnings. Below the lowest rung the bet loses.
FIRE_LADDER: Mapping[int, int] = {3: 700, 4: 2400, 5: 24900, 6: 99900}
RIDE_LINE_LADDER: Mapping[int, int] = {3: 300, 4: 500, 5: 1000, 6: 2500}
DIFFERENT_DOUBLES_LADDER: Mapping[int, int] = {3: 400, 4: 800, 5: 1500, 6: 10000}
REPLAY_LADDERS: Mapping[int, Mapping[int, int]] = {
    4: {3: 12000, 4: 100000},
    10: {3: 12000, 4: 100000},
    5: {3: 9500, 4: 50000},
    9: {3: 9500, 4: 50000},
    6: {4: 7000, 5: 20000},
    8: {4: 7000, 5: 20000},
}

SMALL_PAYOUT = 3400
TALL_PAYOUT = 3400
ALL_PAYOUT = 17500
HOT_ROLLER_PAYOUT = 20000
MUGGSY_COMEOUT_PAYOUT = 200
MUGGSY_POINT_PAYOUT = 300


def field_payout(total: int) -> int:
    """Field winnings multiplier for a roll total; 0 means the bet loses."""
    if total not in FIELD_PAYOUTS:
        raise ValueError(f"roll total must be in 2..12, got {total!r}")
    return FIELD_PAYOUTS[total]


def apply_multiplier(amount: int, multiplier: int) -> int:
    """Total return on a win: principal plus scaled winnings (floor)."""
    return int(amount) + int(amount) * int(multiplier) // PAYOUT_SCALE


def ladder_multiplier(ladder: Mapping[int, int], count: int) -> Optional[int]:
    """Highest rung reached by ``count``; counts past the top use the top rung."""
    reached = [rung for rung in ladder if count >= rung]
    if not reached:
        return None
    return ladder[max(reached)]


def odds_multiplier(bet_type: int, point: int) -> int:
    table = PASS_ODDS_PAYOUTS
    if bet_type in (BetType.ODDS_DONT_PASS, BetType.ODDS_DONT_COME):
        table = DONT_ODDS_PAYOUTS
    try:
        return table[point]
    except KeyError:
        raise ValueError(f"odds need a point in 4,5,6,8,9,10, got {point!r}") from None


_BONUS_BASE: Dict[BetType, int] = {
    BetType.FIRE: FIRE_LADDER[3],
    BetType.SMALL: SMALL_PAYOUT,
    BetType.TALL: TALL_PAYOUT,
    BetType.ALL: ALL_PAYOUT,
    BetType.HOT_ROLLER: HOT_ROLLER_PAYOUT,
    BetType.RIDE_LINE: RIDE_LINE_LADDER[3],
    BetType.MUGGSY: MUGGSY_COMEOUT_PAYOUT,
    BetType.REPLAY: REPLAY_LADDERS[6][4],
    BetType.DIFFERENT_DOUBLES: DIFFERENT_DOUBLES_LADDER[3],
}


def base_multiplier(bet_type: int, point: int = 0) -> int:
    """Standard winnings multiplier for a bet type (lowest tier for ladders)."""
    bt = coerce_bet_type(bet_type)
    cat = category_of(bt)
    n = target_number(bt)
    if cat is BetCategory.LINE:
        return LINE_PAYOUT
    if cat is BetCategory.FIELD:
        # base field win; 2 and 12 pay more, see field_payout
        return FIELD_PAYOUTS[3]
    if cat is BetCategory.YES:
        return YES_PAYOUTS[n]
    if cat is BetCategory.NO:
        return NO_PAYOUTS[n]
    if cat is BetCategory.HARDWAY:
        return HARDWAY_PAYOUTS[n]
    if cat is BetCategory.ODDS:
        return odds_multiplier(bt, point)
    if cat is BetCategory.NEXT:
        return NEXT_PAYOUTS[n]
    if cat is BetCategory.REPEATER:
        return REPEATER_PAYOUTS[n]
    return _BONUS_BASE[bt]


def calculate_payout(bet_type: int, amount: int, point: int = 0) -> int:
    """
    Total return for a winning bet at its standard multiplier.

    >>> calculate_payout(BetType.PASS, 1000)
    2000
    >>> calculate_payout(BetType.ODDS_PASS, 1000, 6)
    2200
    """
    if amount < 0:
        raise ValueError("amount must be >= 0")
    return apply_multiplier(amount, base_multiplier(bet_type, point))
