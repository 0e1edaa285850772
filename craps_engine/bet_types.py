"""
bet_types.py -- the 64-code bet catalog.

Public API:
    BetType, BetCategory
    category_of(code) -> BetCategory
    target_number(code) -> int | None
    is_valid_bet_type(code) -> bool
    coerce_bet_type(code) -> BetType          (raises InvalidBetType)
    normalize_bet_type(raw: str | int) -> BetType
"""

from __future__ import annotations

import re
from enum import Enum, IntEnum
from typing import Dict, FrozenSet, Optional, Union

from .errors import InvalidBetType

# Numbers carried by the Yes / No / Repeater families, in code order.
BOX_NUMBERS = (2, 3, 4, 5, 6, 8, 9, 10, 11, 12)
HARD_NUMBERS = (4, 6, 8, 10)


class BetType(IntEnum):
    PASS = 0
    DONT_PASS = 1
    COME = 2
    DONT_COME = 3
    FIELD = 4

    YES_2 = 5
    YES_3 = 6
    YES_4 = 7
    YES_5 = 8
    YES_6 = 9
    YES_8 = 10
    YES_9 = 11
    YES_10 = 12
    YES_11 = 13
    YES_12 = 14

    NO_2 = 15
    NO_3 = 16
    NO_4 = 17
    NO_5 = 18
    NO_6 = 19
    NO_8 = 20
    NO_9 = 21
    NO_10 = 22
    NO_11 = 23
    NO_12 = 24

    HARD_4 = 25
    HARD_6 = 26
    HARD_8 = 27
    HARD_10 = 28

    ODDS_PASS = 29
    ODDS_DONT_PASS = 30
    ODDS_COME = 31
    ODDS_DONT_COME = 32

    FIRE = 33
    SMALL = 34
    TALL = 35
    ALL = 36
    HOT_ROLLER = 37
    RIDE_LINE = 38
    MUGGSY = 39
    REPLAY = 40
    DIFFERENT_DOUBLES = 41
    RESERVED_42 = 42

    NEXT_2 = 43
    NEXT_3 = 44
    NEXT_4 = 45
    NEXT_5 = 46
    NEXT_6 = 47
    NEXT_7 = 48
    NEXT_8 = 49
    NEXT_9 = 50
    NEXT_10 = 51
    NEXT_11 = 52
    NEXT_12 = 53

    REPEATER_2 = 54
    REPEATER_3 = 55
    REPEATER_4 = 56
    REPEATER_5 = 57
    REPEATER_6 = 58
    REPEATER_8 = 59
    REPEATER_9 = 60
    REPEATER_10 = 61
    REPEATER_11 = 62
    REPEATER_12 = 63


class BetCategory(str, Enum):
    LINE = "line"
    FIELD = "field"
    YES = "yes"
    NO = "no"
    HARDWAY = "hardway"
    ODDS = "odds"
    BONUS = "bonus"
    NEXT = "next"
    REPEATER = "repeater"


MAX_BET_CODE = 63
RESERVED_BET_CODES: FrozenSet[int] = frozenset({BetType.RESERVED_42})

LINE_BETS = frozenset({BetType.PASS, BetType.DONT_PASS, BetType.COME, BetType.DONT_COME})
ODDS_BETS = frozenset(
    {BetType.ODDS_PASS, BetType.ODDS_DONT_PASS, BetType.ODDS_COME, BetType.ODDS_DONT_COME}
)
# Come-family bets keep one sub-bet per travelled point.
STACKABLE = frozenset(
    {BetType.COME, BetType.DONT_COME, BetType.ODDS_COME, BetType.ODDS_DONT_COME}
)
# Placeable only while a point is on.
POINT_ONLY = frozenset({BetType.COME, BetType.DONT_COME}) | ODDS_BETS
# Bets on the "don't" side of the line.
DARK_SIDE = frozenset(
    {BetType.DONT_PASS, BetType.DONT_COME, BetType.ODDS_DONT_PASS, BetType.ODDS_DONT_COME}
)
# Decided by the very next roll.
ONE_ROLL = frozenset({BetType.FIELD} | {BetType(c) for c in range(BetType.NEXT_2, BetType.NEXT_12 + 1)})
# Decided with the series (or the shooter's hand) rather than by a number.
SERIES_SCOPED = frozenset(
    {BetType(c) for c in range(BetType.FIRE, BetType.DIFFERENT_DOUBLES + 1)}
    | {BetType(c) for c in range(BetType.REPEATER_2, BetType.REPEATER_12 + 1)}
)

_ODDS_FOR_LINE: Dict[BetType, BetType] = {
    BetType.PASS: BetType.ODDS_PASS,
    BetType.DONT_PASS: BetType.ODDS_DONT_PASS,
    BetType.COME: BetType.ODDS_COME,
    BetType.DONT_COME: BetType.ODDS_DONT_COME,
}
_LINE_FOR_ODDS: Dict[BetType, BetType] = {v: k for k, v in _ODDS_FOR_LINE.items()}


def category_of(code: int) -> BetCategory:
    c = int(code)
    if 0 <= c <= 3:
        return BetCategory.LINE
    if c == 4:
        return BetCategory.FIELD
    if 5 <= c <= 14:
        return BetCategory.YES
    if 15 <= c <= 24:
        return BetCategory.NO
    if 25 <= c <= 28:
        return BetCategory.HARDWAY
    if 29 <= c <= 32:
        return BetCategory.ODDS
    if 33 <= c <= 42:
        return BetCategory.BONUS
    if 43 <= c <= 53:
        return BetCategory.NEXT
    if 54 <= c <= MAX_BET_CODE:
        return BetCategory.REPEATER
    raise InvalidBetType(f"bet type {code} outside 0..{MAX_BET_CODE}")


def target_number(code: int) -> Optional[int]:
    """Number a Yes/No/Hardway/Next/Repeater bet is on; None for other families."""
    c = int(code)
    cat = category_of(c)
    if cat is BetCategory.YES:
        return BOX_NUMBERS[c - 5]
    if cat is BetCategory.NO:
        return BOX_NUMBERS[c - 15]
    if cat is BetCategory.HARDWAY:
        return HARD_NUMBERS[c - 25]
    if cat is BetCategory.NEXT:
        return c - 41
    if cat is BetCategory.REPEATER:
        return BOX_NUMBERS[c - 54]
    return None


def is_valid_bet_type(code: object) -> bool:
    if isinstance(code, bool) or not isinstance(code, int):
        return False
    return 0 <= code <= MAX_BET_CODE and code not in RESERVED_BET_CODES


def coerce_bet_type(code: object) -> BetType:
    if not is_valid_bet_type(code):
        raise InvalidBetType(f"invalid bet type: {code!r}")
    return BetType(code)


def odds_type_for(line_type: int) -> BetType:
    try:
        return _ODDS_FOR_LINE[BetType(line_type)]
    except (KeyError, ValueError):
        raise InvalidBetType(f"bet type {line_type!r} takes no odds") from None


def line_type_for(odds_type: int) -> BetType:
    return _LINE_FOR_ODDS[BetType(odds_type)]


def bet_name(code: int) -> str:
    """Human label, e.g. ``Yes 6``, ``Hard 8``, ``Don't Pass Odds``."""
    bt = BetType(code)
    n = target_number(bt)
    cat = category_of(bt)
    if n is not None:
        return f"{_FAMILY_LABELS[cat]} {n}"
    return _PLAIN_NAMES.get(bt, bt.name.replace("_", " ").title())


_FAMILY_LABELS: Dict[BetCategory, str] = {
    BetCategory.YES: "Yes",
    BetCategory.NO: "No",
    BetCategory.HARDWAY: "Hard",
    BetCategory.NEXT: "Next",
    BetCategory.REPEATER: "Repeater",
}

_PLAIN_NAMES: Dict[BetType, str] = {
    BetType.PASS: "Pass Line",
    BetType.DONT_PASS: "Don't Pass",
    BetType.COME: "Come",
    BetType.DONT_COME: "Don't Come",
    BetType.FIELD: "Field",
    BetType.ODDS_PASS: "Pass Odds",
    BetType.ODDS_DONT_PASS: "Don't Pass Odds",
    BetType.ODDS_COME: "Come Odds",
    BetType.ODDS_DONT_COME: "Don't Come Odds",
    BetType.RIDE_LINE: "Ride the Line",
    BetType.MUGGSY: "Muggsy's Corner",
}


# ---------------------------------------------------------------------------
# Alias normalization
# ---------------------------------------------------------------------------

# Simple alias table → canonical code
_ALIASES: Dict[str, BetType] = {
    # Line / come families
    "pass": BetType.PASS,
    "pass line": BetType.PASS,
    "pl": BetType.PASS,
    "dont pass": BetType.DONT_PASS,
    "don t pass": BetType.DONT_PASS,
    "dp": BetType.DONT_PASS,
    "come": BetType.COME,
    "dont come": BetType.DONT_COME,
    "don t come": BetType.DONT_COME,
    "dc": BetType.DONT_COME,
    # Odds
    "odds": BetType.ODDS_PASS,
    "pass odds": BetType.ODDS_PASS,
    "dont pass odds": BetType.ODDS_DONT_PASS,
    "don t pass odds": BetType.ODDS_DONT_PASS,
    "lay odds": BetType.ODDS_DONT_PASS,
    "come odds": BetType.ODDS_COME,
    "dont come odds": BetType.ODDS_DONT_COME,
    "don t come odds": BetType.ODDS_DONT_COME,
    # Field / bonus
    "field": BetType.FIELD,
    "fire": BetType.FIRE,
    "fire bet": BetType.FIRE,
    "small": BetType.SMALL,
    "tall": BetType.TALL,
    "all": BetType.ALL,
    "make em all": BetType.ALL,
    "hot roller": BetType.HOT_ROLLER,
    "ride the line": BetType.RIDE_LINE,
    "ride line": BetType.RIDE_LINE,
    "muggsy": BetType.MUGGSY,
    "muggsy s corner": BetType.MUGGSY,
    "replay": BetType.REPLAY,
    "different doubles": BetType.DIFFERENT_DOUBLES,
    # One-roll nicknames
    "snake eyes": BetType.NEXT_2,
    "aces": BetType.NEXT_2,
    "ace deuce": BetType.NEXT_3,
    "any seven": BetType.NEXT_7,
    "any 7": BetType.NEXT_7,
    "big red": BetType.NEXT_7,
    "yo": BetType.NEXT_11,
    "yo leven": BetType.NEXT_11,
    "boxcars": BetType.NEXT_12,
    "midnight": BetType.NEXT_12,
}

# family word → (first code, numbers in code order)
_FAMILIES = {
    "yes": (BetType.YES_2, BOX_NUMBERS),
    "place": (BetType.YES_2, BOX_NUMBERS),
    "no": (BetType.NO_2, BOX_NUMBERS),
    "lay": (BetType.NO_2, BOX_NUMBERS),
    "hard": (BetType.HARD_4, HARD_NUMBERS),
    "hardway": (BetType.HARD_4, HARD_NUMBERS),
    "next": (BetType.NEXT_2, tuple(range(2, 13))),
    "hop": (BetType.NEXT_2, tuple(range(2, 13))),
    "repeater": (BetType.REPEATER_2, BOX_NUMBERS),
    "rep": (BetType.REPEATER_2, BOX_NUMBERS),
}

_NUMBER_WORDS = {
    "two": 2, "three": 3, "four": 4, "five": 5, "six": 6, "seven": 7,
    "eight": 8, "nine": 9, "ten": 10, "eleven": 11, "twelve": 12,
}


def _clean(s: str) -> str:
    s = s.strip().lower()
    # normalize punctuation to spaces, then squeeze
    s = re.sub(r"[^a-z0-9]+", " ", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def normalize_bet_type(raw: Union[str, int]) -> BetType:
    """
    Resolve a bet code or human label to a BetType.

    Examples:
      5 / "5"                        → YES_2
      "Place 6" / "yes_6" / "YES6"   → YES_6
      "Don't Pass" / "dp"            → DONT_PASS
      "Hard 8" / "hardway eight"     → HARD_8
      "Lay 10"                       → NO_10
      "yo" / "next 11"               → NEXT_11
    """
    if isinstance(raw, int) and not isinstance(raw, bool):
        return coerce_bet_type(raw)

    text = str(raw or "")
    if text.strip().isdigit():
        return coerce_bet_type(int(text.strip()))

    base = _clean(text)
    # "yes6" → "yes 6"
    base = re.sub(r"([a-z])(\d)", r"\1 \2", base)
    if base in _ALIASES:
        return _ALIASES[base]

    toks = base.split()
    if len(toks) >= 2:
        family = " ".join(toks[:-1])
        word = toks[-1]
        n = _NUMBER_WORDS.get(word)
        if n is None and word.isdigit():
            n = int(word)
        if family in _FAMILIES and n is not None:
            first, numbers = _FAMILIES[family]
            if n in numbers:
                return BetType(int(first) + numbers.index(n))

    # Enum member names: "odds_dont_come", "repeater_6"
    name = base.replace(" ", "_").upper()
    if name in BetType.__members__ and BetType[name] not in RESERVED_BET_CODES:
        return BetType[name]

    raise InvalidBetType(f"unknown bet type: {raw!r}")
