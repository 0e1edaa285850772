from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import InvalidPhaseTransition, InvalidRoll
from .events import DIE_FACES, Roll, Transition, TransitionKind, classify_roll
from .tracker import SeriesTrackers

log = logging.getLogger(__name__)


class Phase(str, Enum):
    IDLE = "idle"
    COME_OUT = "come_out"
    POINT = "point"


# Completions after which the shooter keeps the dice.
_SHOOTER_KEEPS_DICE = {TransitionKind.NATURAL, TransitionKind.CRAPS, TransitionKind.POINT_MADE}


@dataclass
class Series:
    """One shooter's turn from come-out to resolution. Mutated only by GameState."""

    series_id: int
    shooter: str
    point: int = 0
    rolls: List[Roll] = field(default_factory=list)
    completed: bool = False
    outcome: Optional[int] = None
    end_kind: Optional[TransitionKind] = None
    hand_continues: bool = False
    carried: bool = False
    trackers: SeriesTrackers = field(default_factory=SeriesTrackers)

    @property
    def history(self) -> Tuple[int, ...]:
        return tuple(r.total for r in self.rolls)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "series_id": self.series_id,
            "shooter": self.shooter,
            "point": self.point,
            "history": list(self.history),
            "dice": [list(r.dice) for r in self.rolls],
            "completed": self.completed,
            "outcome": self.outcome,
            "end_kind": self.end_kind.value if self.end_kind else None,
            "carried": self.carried,
            "trackers": self.trackers.snapshot(),
        }


@dataclass(frozen=True)
class SeriesRecord:
    """
    Immutable view of a series. The canonical JSON text is computed once, so
    every read of the same record yields byte-identical output.
    """

    series_id: int
    shooter: str
    point: int
    history: Tuple[int, ...]
    completed: bool
    outcome: Optional[int]
    canonical_json: str

    @classmethod
    def from_series(cls, series: Series) -> "SeriesRecord":
        data = series.to_dict()
        return cls(
            series_id=series.series_id,
            shooter=series.shooter,
            point=series.point,
            history=series.history,
            completed=series.completed,
            outcome=series.outcome,
            canonical_json=json.dumps(data, sort_keys=True, separators=(",", ":")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return json.loads(self.canonical_json)

    def to_json(self) -> str:
        return self.canonical_json

    @property
    def trackers(self) -> Dict[str, Any]:
        return self.to_dict()["trackers"]


class SeriesArchive:
    """Append-only store of completed series, keyed by sequential id."""

    def __init__(self) -> None:
        self._records: Dict[int, SeriesRecord] = {}

    def append(self, record: SeriesRecord) -> None:
        if not record.completed:
            raise ValueError("only completed series are archived")
        if record.series_id in self._records:
            raise ValueError(f"series {record.series_id} already archived")
        self._records[record.series_id] = record

    def get(self, series_id: int) -> Optional[SeriesRecord]:
        return self._records.get(series_id)

    def ids(self) -> List[int]:
        return sorted(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def _truncate_to(self, ids: List[int]) -> None:
        keep = set(ids)
        for sid in [s for s in self._records if s not in keep]:
            del self._records[sid]


class GameState:
    """
    Phase state machine: IDLE → COME_OUT → (POINT) → IDLE.

    Knows nothing about bets or money. ``carry_shooter_trackers`` lets a shooter
    who keeps the dice start the next series with the previous bonus trackers.
    """

    def __init__(self, *, carry_shooter_trackers: bool = False) -> None:
        self.carry_shooter_trackers = bool(carry_shooter_trackers)
        self.archive = SeriesArchive()
        self._phase = Phase.IDLE
        self._current: Optional[Series] = None
        self._last: Optional[Series] = None
        self._series_seq = 0
        self._roll_index = 0

    # ----- Accessors ---------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def point(self) -> int:
        if self._phase is Phase.POINT and self._current is not None:
            return self._current.point
        return 0

    @property
    def current_series(self) -> Optional[Series]:
        return self._current

    @property
    def last_series(self) -> Optional[Series]:
        return self._last

    @property
    def roll_index(self) -> int:
        """Table-wide count of processed rolls."""
        return self._roll_index

    @property
    def series_active(self) -> bool:
        return self._phase is not Phase.IDLE

    def get_series(self, series_id: int) -> Optional[SeriesRecord]:
        rec = self.archive.get(series_id)
        if rec is not None:
            return rec
        if self._current is not None and self._current.series_id == series_id:
            return SeriesRecord.from_series(self._current)
        return None

    # ----- Transitions -------------------------------------------------------

    def start_new_series(self, shooter: str) -> Series:
        if self._phase is not Phase.IDLE:
            raise InvalidPhaseTransition(
                f"cannot start a series while phase is {self._phase.value}"
            )
        self._series_seq += 1
        series = Series(series_id=self._series_seq, shooter=str(shooter))

        prev = self._last
        if (
            self.carry_shooter_trackers
            and prev is not None
            and prev.hand_continues
            and prev.shooter == series.shooter
        ):
            series.trackers = prev.trackers.copy()
            series.trackers.point_rolls = 0
            series.carried = True

        self._current = series
        self._phase = Phase.COME_OUT
        log.info("series %d started (shooter=%s carried=%s)", series.series_id, series.shooter, series.carried)
        return series

    def closes_hand(self, shooter: str) -> bool:
        """True when starting a series for ``shooter`` would cut off a carried hand."""
        prev = self._last
        return (
            self._phase is Phase.IDLE
            and prev is not None
            and prev.hand_continues
            and prev.shooter != str(shooter)
        )

    def end_hand(self) -> Transition:
        """
        Close the previous shooter's hand when the dice pass without a seven-out.
        Hand-scoped bonus bets are then decided against that series' trackers.
        """
        prev = self._last
        if self._phase is not Phase.IDLE or prev is None or not prev.hand_continues:
            raise InvalidPhaseTransition("no carried hand to close")
        prev.hand_continues = False
        log.info("series %d: hand of %s closed", prev.series_id, prev.shooter)
        return Transition(prev.series_id, TransitionKind.HAND_END, None)

    def process_roll(self, d1: int, d2: int) -> Transition:
        _check_die(d1)
        _check_die(d2)
        series = self._current
        if series is None or self._phase is Phase.IDLE:
            raise InvalidPhaseTransition("no active series to roll for")

        point_before = series.point if self._phase is Phase.POINT else 0
        self._roll_index += 1
        roll = Roll(d1, d2, self._roll_index)
        total = roll.total
        kind = classify_roll(point_before, total)

        series.rolls.append(roll)
        tr = series.trackers
        tr.on_roll(d1, d2, total)
        if point_before:
            tr.on_point_roll()
        log.debug("series %d roll %d: %d+%d=%d (%s)", series.series_id, roll.index, d1, d2, total, kind.value)

        if kind is TransitionKind.POINT_ESTABLISHED:
            series.point = total
            self._phase = Phase.POINT
            tr.on_point_established(total)
            return Transition(series.series_id, kind, roll, point=total)

        if kind is TransitionKind.NO_DECISION:
            return Transition(series.series_id, kind, roll, point=point_before)

        if kind is TransitionKind.NATURAL:
            tr.on_natural()
        elif kind is TransitionKind.POINT_MADE:
            tr.on_point_made(total)
        return self._complete(series, kind, roll, outcome=total, point=point_before)

    def end_current_series(self) -> Transition:
        """Operator override: resolve the series as a seven-out without a roll."""
        series = self._current
        if series is None or self._phase is Phase.IDLE:
            raise InvalidPhaseTransition("no active series to end")
        log.warning("series %d force-ended by operator", series.series_id)
        return self._complete(series, TransitionKind.FORCED_END, None, outcome=7, point=self.point)

    # ----- Rollback ----------------------------------------------------------

    def checkpoint(self) -> Dict[str, Any]:
        return copy.deepcopy({
            "phase": self._phase,
            "current": self._current,
            "last": self._last,
            "series_seq": self._series_seq,
            "roll_index": self._roll_index,
            "archived": self.archive.ids(),
        })

    def restore(self, token: Dict[str, Any]) -> None:
        self._phase = token["phase"]
        self._current = token["current"]
        self._last = token["last"]
        self._series_seq = token["series_seq"]
        self._roll_index = token["roll_index"]
        self.archive._truncate_to(token["archived"])

    # ----- Internals ---------------------------------------------------------

    def _complete(
        self,
        series: Series,
        kind: TransitionKind,
        roll: Optional[Roll],
        *,
        outcome: int,
        point: int,
    ) -> Transition:
        series.completed = True
        series.outcome = outcome
        series.end_kind = kind
        series.hand_continues = self.carry_shooter_trackers and kind in _SHOOTER_KEEPS_DICE
        self.archive.append(SeriesRecord.from_series(series))
        self._last = series
        self._current = None
        self._phase = Phase.IDLE
        log.info("series %d completed: %s (outcome=%d)", series.series_id, kind.value, outcome)
        return Transition(
            series.series_id,
            kind,
            roll,
            point=point,
            completed=True,
            outcome=outcome,
        )


def _check_die(value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value not in DIE_FACES:
        raise InvalidRoll(f"die value must be an integer in 1..6, got {value!r}")
