"""
table.py -- the single-writer facade over GameState, BetRegistry and SettlementEngine.

Rolls use a two-step protocol: ``request_roll`` opens a pending request (and
asks the attached RandomSource for dice); ``fulfill_roll`` later supplies the
dice and processes the roll to completion. Only one request may be
outstanding. Bets may be placed and removed while a roll is pending.

A roll is all-or-nothing: the game state is checkpointed, the roll processed,
the settlements computed and custody credited. Any failure there debits back
the credits already made, restores the checkpoint and leaves the request
pending. Only then are the registry and journal touched.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .bet_registry import Bet, BetRegistry
from .bet_types import BetType, normalize_bet_type
from .csv_journal import SettlementJournal
from .errors import (
    InsufficientFunds,
    InvalidBetType,
    InvalidPhaseTransition,
    Unauthorized,
    UnknownRollRequest,
    UnresolvedPendingRoll,
)
from .events import Transition
from .game_state import GameState, Phase, Series, SeriesRecord
from .interfaces import (
    OP_END_SERIES,
    OP_MANAGE_BETS,
    OP_REQUEST_ROLL,
    OP_START_SERIES,
    AccessPolicy,
    Custody,
    RandomSource,
)
from .settlement import Settlement, SettlementEngine
from .table_rules import TableRules

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RollRequest:
    request_id: int
    actor: str
    series_id: int


@dataclass(frozen=True)
class RollResult:
    transition: Transition
    settlements: Tuple[Settlement, ...]
    series: Optional[SeriesRecord] = None
    request_id: Optional[int] = None

    @property
    def completed(self) -> bool:
        return self.transition.completed

    def credits(self) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for s in self.settlements:
            if s.credit:
                out[s.bet.player] = out.get(s.bet.player, 0) + s.credit
        return out

    def to_dict(self) -> Dict[str, Any]:
        roll = self.transition.roll
        return {
            "request_id": self.request_id,
            "series_id": self.transition.series_id,
            "transition": self.transition.kind.value,
            "dice": list(roll.dice) if roll is not None else None,
            "total": roll.total if roll is not None else None,
            "point": self.transition.point,
            "completed": self.completed,
            "settlements": [s.to_dict() for s in self.settlements],
        }


class CrapsTable:
    def __init__(
        self,
        custody: Custody,
        *,
        rules: Optional[TableRules] = None,
        access: Optional[AccessPolicy] = None,
        journal: Optional[SettlementJournal] = None,
        random_source: Optional[RandomSource] = None,
    ) -> None:
        self.rules = rules or TableRules()
        self.custody = custody
        self.access = access
        self.journal = journal
        self.random_source = random_source

        self.state = GameState(carry_shooter_trackers=self.rules.carry_shooter_trackers)
        self.registry = BetRegistry(self.rules)
        self.engine = SettlementEngine(self.rules)

        self._lock = threading.RLock()
        self._pending: Optional[RollRequest] = None
        self._request_seq = itertools.count(1)
        self.last_hand_end: Optional[RollResult] = None

    # ----- Reads -------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def point(self) -> int:
        return self.state.point

    @property
    def pending_request(self) -> Optional[RollRequest]:
        return self._pending

    def get_series(self, series_id: int) -> Optional[SeriesRecord]:
        return self.state.get_series(series_id)

    def has_active_bet(self, player: str, bet_type: Any) -> bool:
        bt = _lookup_type(bet_type)
        return bt is not None and self.registry.has_active_bet(player, bt)

    def get_bet(self, player: str, bet_type: Any, *, point: Optional[int] = None) -> Optional[Bet]:
        bt = _lookup_type(bet_type)
        return self.registry.get_bet(player, bt, point=point) if bt is not None else None

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            current = self.state.current_series
            return {
                "phase": self.phase.value,
                "point": self.point,
                "roll_index": self.state.roll_index,
                "series": current.to_dict() if current is not None else None,
                "pending_request": self._pending.request_id if self._pending else None,
                "bets": self.registry.snapshot(),
                "rules": self.rules.to_dict(),
            }

    # ----- Series ------------------------------------------------------------

    def start_new_series(self, actor: str, shooter: str) -> Series:
        """
        A new shooter cuts off a carried hand; its hand-scoped bets are settled
        (``last_hand_end``) before the series opens.
        """
        with self._lock:
            self._authorize(actor, OP_START_SERIES)
            if self.state.closes_hand(shooter):
                self.last_hand_end = self._commit(self.state.end_hand)
            return self.state.start_new_series(shooter)

    def end_current_series(self, actor: str) -> RollResult:
        """Operator override; not allowed while a roll is outstanding."""
        with self._lock:
            self._authorize(actor, OP_END_SERIES)
            if self._pending is not None:
                raise UnresolvedPendingRoll(
                    f"roll request {self._pending.request_id} must be fulfilled first"
                )
            return self._commit(lambda: self.state.end_current_series())

    # ----- Bets --------------------------------------------------------------

    def place_bet(self, actor: str, player: str, bet_type: Any, amount: int) -> Bet:
        with self._lock:
            self._authorize(actor, OP_MANAGE_BETS)
            bt = self.registry.validate_bet(player, normalize_bet_type(bet_type), amount, self.phase)
            self._debit(player, amount)
            return self.registry.place_bet(
                player,
                bt,
                amount,
                self.phase,
                series_id=self._series_id(),
                placed_roll=self.state.roll_index,
            )

    def place_odds_bet(
        self,
        actor: str,
        player: str,
        line_type: Any,
        amount: int,
        *,
        come_point: Optional[int] = None,
    ) -> Bet:
        with self._lock:
            self._authorize(actor, OP_MANAGE_BETS)
            lt = normalize_bet_type(line_type)
            self.registry.validate_odds_bet(player, lt, amount, self.phase, self.point, come_point=come_point)
            self._debit(player, amount)
            return self.registry.place_odds_bet(
                player,
                lt,
                amount,
                self.phase,
                self.point,
                come_point=come_point,
                series_id=self._series_id(),
                placed_roll=self.state.roll_index,
            )

    def remove_bet(self, actor: str, player: str, bet_type: Any, *, point: Optional[int] = None) -> List[Bet]:
        """Take bets down and return their stakes to custody."""
        with self._lock:
            self._authorize(actor, OP_MANAGE_BETS)
            removed = self.registry.remove_bet(player, normalize_bet_type(bet_type), self.phase, point=point)
            for b in removed:
                self.custody.credit(b.player, b.amount)
            return removed

    # ----- Rolls -------------------------------------------------------------

    def request_roll(self, actor: str) -> RollRequest:
        with self._lock:
            req = self._open_request(actor)
            if self.random_source is not None:
                self.random_source.request_dice(req.request_id)
            return req

    def fulfill_roll(self, request_id: int, d1: int, d2: int) -> RollResult:
        with self._lock:
            pending = self._pending
            if pending is None or pending.request_id != request_id:
                raise UnknownRollRequest(f"no pending roll request {request_id!r}")
            result = self._commit(lambda: self.state.process_roll(d1, d2))
            return RollResult(result.transition, result.settlements, result.series, request_id)

    def roll(self, actor: str, d1: int, d2: int) -> RollResult:
        """Request and fulfil in one call (dice supplied by the caller)."""
        with self._lock:
            req = self._open_request(actor)
            try:
                return self.fulfill_roll(req.request_id, d1, d2)
            except Exception:
                self._pending = None
                raise

    # ----- Internals ---------------------------------------------------------

    def _authorize(self, actor: str, operation: str) -> None:
        if self.access is not None and not self.access.authorized(actor, operation):
            raise Unauthorized(f"{actor!r} may not {operation}")

    def _debit(self, player: str, amount: int) -> None:
        if not self.custody.debit(player, amount):
            raise InsufficientFunds(f"custody refused {amount} from {player}")

    def _series_id(self) -> Optional[int]:
        cur = self.state.current_series
        return cur.series_id if cur is not None else None

    def _open_request(self, actor: str) -> RollRequest:
        self._authorize(actor, OP_REQUEST_ROLL)
        if self._pending is not None:
            raise UnresolvedPendingRoll(f"roll request {self._pending.request_id} is still pending")
        series = self.state.current_series
        if series is None:
            raise InvalidPhaseTransition("no active series to roll for")
        self._pending = RollRequest(next(self._request_seq), actor, series.series_id)
        log.debug("roll request %d opened by %s", self._pending.request_id, actor)
        return self._pending

    def _commit(self, step) -> RollResult:
        token = self.state.checkpoint()
        try:
            transition = step()
            series = self.state.current_series
            if series is None or series.series_id != transition.series_id:
                series = self.state.last_series
            settlements = self.engine.settle(transition, series, self.registry.active_bets())
            self._pay(settlements)
        except Exception:
            self.state.restore(token)
            raise

        # registry changes only once every credit has landed
        self._pending = None
        self.registry.apply(settlements)
        if self.journal is not None and settlements:
            self.journal.write_settlements(transition, settlements)

        record = self.state.get_series(transition.series_id) if transition.completed else None
        return RollResult(transition, tuple(settlements), record)

    def _pay(self, settlements: List[Settlement]) -> None:
        """Credit custody; a failed credit takes back the ones already made."""
        paid: List[Settlement] = []
        try:
            for s in settlements:
                if s.credit:
                    self.custody.credit(s.bet.player, s.credit)
                    paid.append(s)
        except Exception:
            log.error("custody credit failed after %d of %d payouts; reversing", len(paid), len(settlements))
            for s in reversed(paid):
                self.custody.debit(s.bet.player, s.credit)
            raise


def _lookup_type(bet_type: Any) -> Optional[BetType]:
    try:
        return normalize_bet_type(bet_type)
    except InvalidBetType:
        return None
