# -*- coding: utf-8 -*-
from __future__ import annotations

import copy
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, DefaultDict, Dict, Set

from .events import POINT_NUMS

SMALL_NUMBERS = frozenset({2, 3, 4, 5, 6})
TALL_NUMBERS = frozenset({8, 9, 10, 11, 12})
ALL_NUMBERS = SMALL_NUMBERS | TALL_NUMBERS


@dataclass
class SeriesTrackers:
    """
    Bonus-bet progress for one series. Owned by the Series, mutated only while
    GameState processes a roll, reset (or carried, see TableRules) at series start.

    fire_points      distinct point values made
    small_set/tall   numbers from SMALL_NUMBERS / TALL_NUMBERS seen at least once
    repeater_counts  hits per total
    doubles          distinct paired faces seen (1..6)
    points_made      times each point value was made
    point_numbers    point numbers rolled at all (Hot Roller)
    line_wins        naturals + points made (Ride the Line)
    point_rolls      rolls since the current point was established (Muggsy)
    """

    fire_points: Set[int] = field(default_factory=set)
    small_set: Set[int] = field(default_factory=set)
    tall_set: Set[int] = field(default_factory=set)
    repeater_counts: DefaultDict[int, int] = field(default_factory=lambda: defaultdict(int))
    doubles: Set[int] = field(default_factory=set)
    points_made: DefaultDict[int, int] = field(default_factory=lambda: defaultdict(int))
    point_numbers: Set[int] = field(default_factory=set)
    line_wins: int = 0
    point_rolls: int = 0

    # -----------------------------
    # Events
    # -----------------------------
    def on_roll(self, d1: int, d2: int, total: int) -> None:
        self.repeater_counts[total] += 1
        if total in SMALL_NUMBERS:
            self.small_set.add(total)
        if total in TALL_NUMBERS:
            self.tall_set.add(total)
        if total in POINT_NUMS:
            self.point_numbers.add(total)
        if d1 == d2:
            self.doubles.add(d1)

    def on_point_established(self, point: int) -> None:
        self.point_rolls = 0

    def on_point_roll(self) -> None:
        self.point_rolls += 1

    def on_point_made(self, point: int) -> None:
        # set membership keeps fire_points distinct
        self.fire_points.add(point)
        self.points_made[point] += 1
        self.line_wins += 1

    def on_natural(self) -> None:
        self.line_wins += 1

    # -----------------------------
    # Queries
    # -----------------------------
    def fire_count(self) -> int:
        return len(self.fire_points)

    def small_complete(self) -> bool:
        return self.small_set >= SMALL_NUMBERS

    def tall_complete(self) -> bool:
        return self.tall_set >= TALL_NUMBERS

    def all_complete(self) -> bool:
        return self.small_complete() and self.tall_complete()

    def hits(self, number: int) -> int:
        return self.repeater_counts.get(number, 0)

    def copy(self) -> "SeriesTrackers":
        return copy.deepcopy(self)

    # -----------------------------
    # Snapshots
    # -----------------------------
    def snapshot(self) -> Dict[str, Any]:
        return {
            "fire_points": sorted(self.fire_points),
            "small_set": sorted(self.small_set),
            "tall_set": sorted(self.tall_set),
            "repeater_counts": {str(k): v for k, v in sorted(self.repeater_counts.items()) if v},
            "doubles": sorted(self.doubles),
            "points_made": {str(k): v for k, v in sorted(self.points_made.items()) if v},
            "point_numbers": sorted(self.point_numbers),
            "line_wins": self.line_wins,
            "point_rolls": self.point_rolls,
        }
