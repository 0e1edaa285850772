# craps_engine/csv_journal.py
from __future__ import annotations

import csv
import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, TextIO

JOURNAL_SCHEMA_VERSION = "1.0"

JOURNAL_COLUMNS: List[str] = [
    "ts",
    "run_id",
    "series_id",
    "roll_index",
    "dice",
    "total",
    "transition",
    "player",
    "bet_id",
    "bet_type",
    "bet_name",
    "amount",
    "point",
    "outcome",
    "credit",
    "extra",
]


def _iso_now() -> str:
    # UTC keeps journals sortable across machines
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _as_str(x: Any) -> str:
    if x is None:
        return ""
    if isinstance(x, (dict, list, tuple)):
        return json.dumps(x, ensure_ascii=False, separators=(",", ":"), sort_keys=True)
    return str(x)


def _write_csv_header(fh: TextIO, headers: List[str]) -> None:
    fh.write(f"# journal_schema_version: {JOURNAL_SCHEMA_VERSION}\n")
    fh.write(",".join(headers) + "\n")


@dataclass
class SettlementJournal:
    """
    Append-only CSV record of every settlement the table commits.

    One row per decided bet (a come bet travelling to a point is journaled with
    outcome ``travel``). Forced and hand ends have no dice: ``dice`` and ``total`` are blank.

      append=True  → always append
      append=False → truncate on the first write of this run, then append
    """

    path: str | os.PathLike[str]
    append: bool = True
    run_id: Optional[str] = None

    _first_write_done: bool = field(default=False, init=False)

    @property
    def path_str(self) -> str:
        return str(Path(self.path))

    def _open_mode(self) -> str:
        if self.append:
            return "a"
        return "w" if not self._first_write_done else "a"

    def _needs_header(self) -> bool:
        p = Path(self.path)
        if not self.append and not self._first_write_done:
            return True
        return not p.exists() or p.stat().st_size == 0

    def write_settlements(self, transition: Any, settlements: Iterable[Any]) -> int:
        """Append one row per settlement; returns the number of rows written."""
        rows = list(settlements or [])
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        write_header = self._needs_header()

        roll = getattr(transition, "roll", None)
        with open(self.path, self._open_mode(), newline="", encoding="utf-8") as f:
            if write_header:
                _write_csv_header(f, JOURNAL_COLUMNS)
            writer = csv.DictWriter(f, fieldnames=JOURNAL_COLUMNS, extrasaction="ignore")
            for s in rows:
                bet = s.bet
                writer.writerow({
                    "ts": _iso_now(),
                    "run_id": _as_str(self.run_id),
                    "series_id": transition.series_id,
                    "roll_index": roll.index if roll is not None else "",
                    "dice": f"{roll.d1}-{roll.d2}" if roll is not None else "",
                    "total": roll.total if roll is not None else "",
                    "transition": transition.kind.value,
                    "player": bet.player,
                    "bet_id": bet.bet_id,
                    "bet_type": int(bet.bet_type),
                    "bet_name": bet.name,
                    "amount": bet.amount,
                    "point": bet.point or "",
                    "outcome": s.outcome.value if s.outcome is not None else "travel",
                    "credit": s.credit,
                    "extra": _as_str({"new_point": s.new_point}) if s.new_point else "",
                })

        self._first_write_done = True
        return len(rows)


def read_journal(path: str | os.PathLike[str]) -> List[Dict[str, str]]:
    """Rows of a settlement journal as dicts (comment lines skipped)."""
    p = Path(path)
    if not p.exists():
        return []
    with p.open("r", newline="", encoding="utf-8") as f:
        lines = [ln for ln in f if not ln.startswith("#")]
    return list(csv.DictReader(lines))
