# craps_engine/events.py
from __future__ import annotations

"""
events.py -- canonical roll outcomes and number groups.

A roll processed by GameState yields exactly one Transition describing what the
roll did to the series. SettlementEngine reads these, never the raw phase.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Set, Tuple

# ---------------------------------------------------------------------------
# Number groups
# ---------------------------------------------------------------------------

POINT_NUMS: Set[int] = {4, 5, 6, 8, 9, 10}
CRAPS_NUMS: Set[int] = {2, 3, 12}
NATURAL_NUMS: Set[int] = {7, 11}
HARDWAY_NUMS: Set[int] = {4, 6, 8, 10}

DIE_FACES = range(1, 7)


class TransitionKind(str, Enum):
    POINT_ESTABLISHED = "point_established"
    NATURAL = "natural"
    CRAPS = "craps"
    POINT_MADE = "point_made"
    SEVEN_OUT = "seven_out"
    NO_DECISION = "no_decision"
    FORCED_END = "forced_end"
    # dice passed to a new shooter without a seven-out; closes the carried hand
    HAND_END = "hand_end"

    @property
    def terminating(self) -> bool:
        return self in _TERMINATING


_TERMINATING = {
    TransitionKind.NATURAL,
    TransitionKind.CRAPS,
    TransitionKind.POINT_MADE,
    TransitionKind.SEVEN_OUT,
    TransitionKind.FORCED_END,
}


@dataclass(frozen=True)
class Roll:
    """Two die faces and their total; ``index`` is the table-wide roll counter."""

    d1: int
    d2: int
    index: int = 0

    @property
    def total(self) -> int:
        return self.d1 + self.d2

    @property
    def dice(self) -> Tuple[int, int]:
        return (self.d1, self.d2)

    @property
    def is_double(self) -> bool:
        return self.d1 == self.d2


@dataclass(frozen=True)
class Transition:
    """
    Result of one state-machine step.

    point    : point in force when the roll landed; for POINT_ESTABLISHED the
               newly set point; 0 on come-out decisions
    outcome  : terminal roll total when ``completed`` (7 for a forced end)
    """

    series_id: int
    kind: TransitionKind
    roll: Optional[Roll]
    point: int = 0
    completed: bool = False
    outcome: Optional[int] = None

    @property
    def total(self) -> Optional[int]:
        return self.roll.total if self.roll is not None else None

    @property
    def sevens_out(self) -> bool:
        """True when the shooter loses the dice (seven-out or operator end)."""
        return self.kind in (TransitionKind.SEVEN_OUT, TransitionKind.FORCED_END)


# ---------------------------------------------------------------------------
# Classification helpers
# ---------------------------------------------------------------------------

def is_hardway(d1: int, d2: int, total: int) -> bool:
    return d1 == d2 and d1 + d2 == total and total in HARDWAY_NUMS


def classify_roll(point: int, total: int) -> TransitionKind:
    """Classify a roll total given the point in force (0 means come-out)."""
    if not point:
        if total in NATURAL_NUMS:
            return TransitionKind.NATURAL
        if total in CRAPS_NUMS:
            return TransitionKind.CRAPS
        return TransitionKind.POINT_ESTABLISHED
    if total == point:
        return TransitionKind.POINT_MADE
    if total == 7:
        return TransitionKind.SEVEN_OUT
    return TransitionKind.NO_DECISION
