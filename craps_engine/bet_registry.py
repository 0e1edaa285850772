# bet_registry.py -- active bets per (player, bet type)
from __future__ import annotations

import itertools
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .bet_types import (
    LINE_BETS,
    POINT_ONLY,
    STACKABLE,
    BetCategory,
    BetType,
    bet_name,
    category_of,
    coerce_bet_type,
    is_valid_bet_type,
    odds_type_for,
)
from .errors import (
    BetNotAllowedInPhase,
    BetNotFound,
    BetNotRemovable,
    DuplicateBet,
    InvalidAmount,
    NoLineBet,
)
from .game_state import Phase
from .table_rules import TableRules

log = logging.getLogger(__name__)

BetKey = Tuple[str, BetType]


@dataclass
class Bet:
    """
    One active wager.

    point        odds bets: the point locked at placement (never changes);
                 come / don't come: the point the bet travelled to (0 until then)
    placed_roll  table roll index at placement; a come bet's first decision is
                 the first roll with a higher index
    """

    bet_id: int
    player: str
    bet_type: BetType
    amount: int
    point: int = 0
    series_id: Optional[int] = None
    placed_roll: int = 0

    @property
    def category(self) -> BetCategory:
        return category_of(self.bet_type)

    @property
    def name(self) -> str:
        return bet_name(self.bet_type)

    def snapshot(self) -> Dict[str, Any]:
        d = asdict(self)
        d["bet_type"] = int(self.bet_type)
        d["name"] = self.name
        d["category"] = self.category.value
        return d


class BetRegistry:
    """
    Active bets keyed by (player, bet type):
      - phase policy for which bet types may be placed
      - one instance per key, except the come family (one sub-bet per point)
      - odds bets lock the point they were placed against
    Money never passes through here; the table debits/credits custody.
    """

    def __init__(self, rules: Optional[TableRules] = None) -> None:
        self.rules = rules or TableRules()
        self._bets: Dict[BetKey, List[Bet]] = {}
        self._id_seq = itertools.count(1)

    # ----- Policy ------------------------------------------------------------

    @staticmethod
    def can_place_bet(bet_type: object, phase: Phase) -> bool:
        if not is_valid_bet_type(bet_type):
            return False
        if phase is Phase.IDLE:
            return False
        if BetType(bet_type) in POINT_ONLY:
            return phase is Phase.POINT
        return phase in (Phase.COME_OUT, Phase.POINT)

    def check_amount(self, amount: object) -> int:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidAmount(f"amount must be an integer, got {amount!r}")
        if amount <= 0:
            raise InvalidAmount("amount must be > 0")
        if amount < self.rules.min_bet:
            raise InvalidAmount(f"amount {amount} below table minimum {self.rules.min_bet}")
        if self.rules.max_bet is not None and amount > self.rules.max_bet:
            raise InvalidAmount(f"amount {amount} above table maximum {self.rules.max_bet}")
        return amount

    # ----- Placement ---------------------------------------------------------

    def validate_bet(self, player: str, bet_type: object, amount: object, phase: Phase) -> BetType:
        """All placement checks, no mutation. Returns the coerced bet type."""
        bt = coerce_bet_type(bet_type)
        if bt in (BetType.ODDS_PASS, BetType.ODDS_DONT_PASS, BetType.ODDS_COME, BetType.ODDS_DONT_COME):
            raise BetNotAllowedInPhase(f"{bet_name(bt)} must be placed with place_odds_bet")
        if not self.can_place_bet(bt, phase):
            raise BetNotAllowedInPhase(f"{bet_name(bt)} cannot be placed during {phase.value}")
        self.check_amount(amount)
        if bt not in STACKABLE and self.has_active_bet(player, bt):
            raise DuplicateBet(f"{player} already has an active {bet_name(bt)} bet")
        return bt

    def place_bet(
        self,
        player: str,
        bet_type: object,
        amount: int,
        phase: Phase,
        *,
        series_id: Optional[int] = None,
        placed_roll: int = 0,
    ) -> Bet:
        bt = self.validate_bet(player, bet_type, amount, phase)
        return self._add(player, bt, amount, point=0, series_id=series_id, placed_roll=placed_roll)

    def validate_odds_bet(
        self,
        player: str,
        line_type: object,
        amount: object,
        phase: Phase,
        point: int,
        *,
        come_point: Optional[int] = None,
    ) -> Tuple[BetType, int]:
        """Returns (odds bet type, point to lock). No mutation."""
        lt = coerce_bet_type(line_type)
        if lt not in LINE_BETS:
            raise NoLineBet(f"{bet_name(lt)} takes no odds")
        odds_type = odds_type_for(lt)
        if phase is not Phase.POINT:
            raise BetNotAllowedInPhase("odds can only be placed while a point is on")
        self.check_amount(amount)

        if lt in (BetType.PASS, BetType.DONT_PASS):
            if not self.has_active_bet(player, lt):
                raise NoLineBet(f"{player} has no {bet_name(lt)} bet to back")
            if self.has_active_bet(player, odds_type):
                raise DuplicateBet(f"{player} already has {bet_name(odds_type)}")
            return odds_type, int(point)

        travelled = [b for b in self.get_bets(player, lt) if b.point]
        if come_point is not None:
            travelled = [b for b in travelled if b.point == come_point]
        backed = {b.point for b in self.get_bets(player, odds_type)}
        if not travelled:
            raise NoLineBet(f"{player} has no {bet_name(lt)} bet on a point to back")
        free = [b for b in travelled if b.point not in backed]
        if not free:
            raise DuplicateBet(f"{player} already has {bet_name(odds_type)} on every {bet_name(lt)} point")
        # most recent travelled sub-bet first
        return odds_type, free[-1].point

    def place_odds_bet(
        self,
        player: str,
        line_type: object,
        amount: int,
        phase: Phase,
        point: int,
        *,
        come_point: Optional[int] = None,
        series_id: Optional[int] = None,
        placed_roll: int = 0,
    ) -> Bet:
        odds_type, locked = self.validate_odds_bet(
            player, line_type, amount, phase, point, come_point=come_point
        )
        return self._add(player, odds_type, amount, point=locked, series_id=series_id, placed_roll=placed_roll)

    # ----- Removal -----------------------------------------------------------

    def check_removal(
        self,
        player: str,
        bet_type: object,
        phase: Phase,
        *,
        point: Optional[int] = None,
    ) -> List[Bet]:
        """Bets that ``remove_bet`` would take down (odds riding on them included)."""
        bt = coerce_bet_type(bet_type)
        bets = self.get_bets(player, bt)
        if point is not None:
            bets = [b for b in bets if b.point == point]
        if not bets:
            raise BetNotFound(f"{player} has no active {bet_name(bt)} bet")

        allow_contract = self.rules.line_bets_removable_after_point
        if bt in (BetType.PASS, BetType.DONT_PASS):
            if phase is Phase.POINT and not allow_contract:
                raise BetNotRemovable(f"{bet_name(bt)} cannot be taken down once a point is on")
        elif bt in (BetType.COME, BetType.DONT_COME):
            pending = [b for b in bets if not b.point]
            if pending:
                bets = pending
            elif not allow_contract:
                raise BetNotRemovable(f"{bet_name(bt)} on a point cannot be taken down")

        out = list(bets)
        if bt in LINE_BETS:
            odds_type = odds_type_for(bt)
            points = {b.point for b in bets}
            for o in self.get_bets(player, odds_type):
                if bt in (BetType.PASS, BetType.DONT_PASS) or o.point in points:
                    out.append(o)
        return out

    def remove_bet(
        self,
        player: str,
        bet_type: object,
        phase: Phase,
        *,
        point: Optional[int] = None,
    ) -> List[Bet]:
        removed = self.check_removal(player, bet_type, phase, point=point)
        for b in removed:
            self._discard(b)
        log.debug("removed %s", [b.bet_id for b in removed])
        return removed

    # ----- Reads -------------------------------------------------------------

    def has_active_bet(self, player: str, bet_type: object) -> bool:
        if not is_valid_bet_type(bet_type):
            return False
        return bool(self._bets.get((player, BetType(bet_type))))

    def get_bet(self, player: str, bet_type: object, *, point: Optional[int] = None) -> Optional[Bet]:
        bets = self.get_bets(player, bet_type)
        if point is not None:
            bets = [b for b in bets if b.point == point]
        return bets[0] if bets else None

    def get_bets(self, player: str, bet_type: object) -> List[Bet]:
        if not is_valid_bet_type(bet_type):
            return []
        return list(self._bets.get((player, BetType(bet_type)), []))

    def player_bets(self, player: str) -> List[Bet]:
        return [b for b in self.active_bets() if b.player == player]

    def active_bets(self) -> List[Bet]:
        """Every active bet in placement order."""
        out: List[Bet] = []
        for bets in self._bets.values():
            out.extend(bets)
        return sorted(out, key=lambda b: b.bet_id)

    def __len__(self) -> int:
        return sum(len(v) for v in self._bets.values())

    # ----- Settlement hooks --------------------------------------------------

    def apply(self, settlements: Iterable[Any]) -> None:
        """Drop resolved bets and move come bets to the points they travelled to."""
        for s in settlements:
            if s.resolved:
                self._discard(s.bet)
            elif s.new_point:
                for b in self._bets.get((s.bet.player, s.bet.bet_type), []):
                    if b.bet_id == s.bet.bet_id:
                        b.point = s.new_point

    def snapshot(self) -> Dict[str, Any]:
        bets = [b.snapshot() for b in self.active_bets()]
        exposure: Dict[str, int] = {}
        for b in bets:
            exposure[b["player"]] = exposure.get(b["player"], 0) + b["amount"]
        return {"active_count": len(bets), "exposure": exposure, "bets": bets}

    # ----- Internals ---------------------------------------------------------

    def _add(
        self,
        player: str,
        bet_type: BetType,
        amount: int,
        *,
        point: int,
        series_id: Optional[int],
        placed_roll: int,
    ) -> Bet:
        bet = Bet(
            bet_id=next(self._id_seq),
            player=player,
            bet_type=bet_type,
            amount=int(amount),
            point=int(point),
            series_id=series_id,
            placed_roll=int(placed_roll),
        )
        self._bets.setdefault((player, bet_type), []).append(bet)
        log.debug("placed %s #%d for %s: %d", bet.name, bet.bet_id, player, bet.amount)
        return bet

    def _discard(self, bet: Bet) -> None:
        key = (bet.player, bet.bet_type)
        bets = self._bets.get(key) or []
        remaining = [b for b in bets if b.bet_id != bet.bet_id]
        if remaining:
            self._bets[key] = remaining
        else:
            self._bets.pop(key, None)
