"""
settlement.py -- resolve active bets against one state-machine transition.

``SettlementEngine.settle`` is a pure function of (transition, series, bets):
it never touches the registry, custody or the series. The table applies the
returned settlements afterwards, which keeps a roll all-or-nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .bet_registry import Bet
from .bet_types import DARK_SIDE, SERIES_SCOPED, BetCategory, BetType, target_number
from .events import CRAPS_NUMS, NATURAL_NUMS, POINT_NUMS, Transition, TransitionKind, is_hardway
from .game_state import Series
from .payouts import (
    ALL_PAYOUT,
    DIFFERENT_DOUBLES_LADDER,
    FIRE_LADDER,
    HARDWAY_PAYOUTS,
    HOT_ROLLER_PAYOUT,
    LINE_PAYOUT,
    MUGGSY_COMEOUT_PAYOUT,
    MUGGSY_POINT_PAYOUT,
    NEXT_PAYOUTS,
    NO_PAYOUTS,
    REPEATER_PAYOUTS,
    REPEATER_REQUIRED,
    REPLAY_LADDERS,
    RIDE_LINE_LADDER,
    SMALL_PAYOUT,
    TALL_PAYOUT,
    YES_PAYOUTS,
    apply_multiplier,
    field_payout,
    ladder_multiplier,
    odds_multiplier,
)
from .table_rules import BAR12_HOLD, TableRules

log = logging.getLogger(__name__)


class Outcome(str, Enum):
    WIN = "win"
    LOSS = "loss"
    PUSH = "push"


@dataclass(frozen=True)
class Settlement:
    """
    One decision for one bet.

    credit     total to credit custody: payout on a win, principal on a push, 0 on a loss
    new_point  set (with outcome None) when an unresolved come bet travels to a point
    """

    bet: Bet
    outcome: Optional[Outcome]
    credit: int = 0
    new_point: int = 0

    @property
    def resolved(self) -> bool:
        return self.outcome is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bet_id": self.bet.bet_id,
            "player": self.bet.player,
            "bet_type": int(self.bet.bet_type),
            "name": self.bet.name,
            "amount": self.bet.amount,
            "point": self.bet.point,
            "outcome": self.outcome.value if self.outcome else None,
            "credit": self.credit,
            "new_point": self.new_point,
        }


def _win(bet: Bet, multiplier: int) -> Settlement:
    return Settlement(bet, Outcome.WIN, apply_multiplier(bet.amount, multiplier))


def _loss(bet: Bet) -> Settlement:
    return Settlement(bet, Outcome.LOSS, 0)


def _push(bet: Bet) -> Settlement:
    return Settlement(bet, Outcome.PUSH, bet.amount)


def _seven_out(bet: Bet) -> Settlement:
    """Line or odds bet against a seven with a point on: dark side wins."""
    if bet.bet_type not in DARK_SIDE:
        return _loss(bet)
    if bet.category is BetCategory.ODDS:
        return _win(bet, odds_multiplier(bet.bet_type, bet.point))
    return _win(bet, LINE_PAYOUT)


# Bonus bets that run over a shooter's whole hand when trackers are carried.
_HAND_SCOPED = frozenset({
    BetType.FIRE,
    BetType.SMALL,
    BetType.TALL,
    BetType.ALL,
    BetType.HOT_ROLLER,
    BetType.RIDE_LINE,
    BetType.REPLAY,
    BetType.DIFFERENT_DOUBLES,
})


class SettlementEngine:
    def __init__(self, rules: Optional[TableRules] = None) -> None:
        self.rules = rules or TableRules()

    def settle(self, transition: Transition, series: Series, bets: Iterable[Bet]) -> List[Settlement]:
        """Decisions for every bet this transition decides, in bet order."""
        out: List[Settlement] = []
        for bet in bets:
            s = self._settle_one(transition, series, bet)
            if s is not None:
                out.append(s)
        for s in out:
            log.debug(
                "series %d: %s #%d (%s) -> %s credit=%d",
                transition.series_id, s.bet.name, s.bet.bet_id, s.bet.player,
                s.outcome.value if s.outcome else f"travel {s.new_point}", s.credit,
            )
        return out

    # ----- Dispatch ----------------------------------------------------------

    def _settle_one(self, tr: Transition, series: Series, bet: Bet) -> Optional[Settlement]:
        cat = bet.category
        if tr.kind is TransitionKind.FORCED_END:
            return self._forced_end(tr, series, bet)
        if tr.kind is TransitionKind.HAND_END:
            if cat is BetCategory.REPEATER:
                return self._repeater(tr, series, bet)
            if bet.bet_type in _HAND_SCOPED:
                return self._bonus(tr, series, bet)
            return None

        if tr.roll is None or bet.placed_roll >= tr.roll.index:
            return None

        if bet.bet_type in (BetType.PASS, BetType.DONT_PASS):
            return self._pass_line(tr, bet)
        if bet.bet_type in (BetType.COME, BetType.DONT_COME):
            return self._come(tr, bet)
        if cat is BetCategory.ODDS:
            return self._odds(tr, bet)
        if cat is BetCategory.FIELD:
            mult = field_payout(tr.roll.total)
            return _win(bet, mult) if mult else _loss(bet)
        if cat is BetCategory.YES:
            return self._yes_no(tr, bet, YES_PAYOUTS, wins_on_number=True)
        if cat is BetCategory.NO:
            return self._yes_no(tr, bet, NO_PAYOUTS, wins_on_number=False)
        if cat is BetCategory.HARDWAY:
            return self._hardway(tr, bet)
        if cat is BetCategory.NEXT:
            n = target_number(bet.bet_type)
            return _win(bet, NEXT_PAYOUTS[n]) if tr.roll.total == n else _loss(bet)
        if cat is BetCategory.REPEATER:
            return self._repeater(tr, series, bet)
        if cat is BetCategory.BONUS and tr.completed:
            return self._bonus(tr, series, bet)
        return None

    # ----- Line family -------------------------------------------------------

    def _pass_line(self, tr: Transition, bet: Bet) -> Optional[Settlement]:
        dark = bet.bet_type in DARK_SIDE
        total = tr.roll.total
        kind = tr.kind
        if kind is TransitionKind.NATURAL or kind is TransitionKind.POINT_MADE:
            return _loss(bet) if dark else _win(bet, LINE_PAYOUT)
        if kind is TransitionKind.SEVEN_OUT:
            return _win(bet, LINE_PAYOUT) if dark else _loss(bet)
        if kind is TransitionKind.CRAPS:
            if not dark:
                return _loss(bet)
            if total == 12:
                return self._bar12(bet)
            return _win(bet, LINE_PAYOUT)
        return None

    def _come(self, tr: Transition, bet: Bet) -> Optional[Settlement]:
        dark = bet.bet_type in DARK_SIDE
        total = tr.roll.total
        if bet.point:
            if total == bet.point:
                return _loss(bet) if dark else _win(bet, LINE_PAYOUT)
            if total == 7:
                return _win(bet, LINE_PAYOUT) if dark else _loss(bet)
            return None

        # first roll after placement acts as this bet's come-out
        if total in NATURAL_NUMS:
            return _loss(bet) if dark else _win(bet, LINE_PAYOUT)
        if total in CRAPS_NUMS:
            if not dark:
                return _loss(bet)
            if total == 12:
                return self._bar12(bet)
            return _win(bet, LINE_PAYOUT)
        return Settlement(bet, None, 0, new_point=total)

    def _forced_end(self, tr: Transition, series: Series, bet: Bet) -> Optional[Settlement]:
        # no dice: series-scoped bets close, and a point in force sevens out
        if bet.bet_type in SERIES_SCOPED:
            if bet.category is BetCategory.REPEATER:
                return self._repeater(tr, series, bet)
            return self._bonus(tr, series, bet)
        if bet.bet_type in (BetType.PASS, BetType.DONT_PASS, BetType.ODDS_PASS, BetType.ODDS_DONT_PASS):
            return _seven_out(bet) if tr.point else None
        if bet.bet_type in (BetType.COME, BetType.DONT_COME, BetType.ODDS_COME, BetType.ODDS_DONT_COME):
            # a come bet still waiting for its own come-out rides on
            return _seven_out(bet) if bet.point else None
        return None

    def _bar12(self, bet: Bet) -> Optional[Settlement]:
        if self.rules.bar12_push == BAR12_HOLD:
            return None
        return _push(bet)

    def _odds(self, tr: Transition, bet: Bet) -> Optional[Settlement]:
        dark = bet.bet_type in DARK_SIDE
        total = tr.roll.total
        if bet.bet_type in (BetType.ODDS_PASS, BetType.ODDS_DONT_PASS):
            if tr.kind is TransitionKind.POINT_MADE:
                return _loss(bet) if dark else _win(bet, odds_multiplier(bet.bet_type, bet.point))
            if tr.kind is TransitionKind.SEVEN_OUT:
                return _seven_out(bet)
            return None

        if total == bet.point:
            return _loss(bet) if dark else _win(bet, odds_multiplier(bet.bet_type, bet.point))
        if total == 7:
            return _win(bet, odds_multiplier(bet.bet_type, bet.point)) if dark else _loss(bet)
        return None

    # ----- Multi-roll number bets --------------------------------------------

    @staticmethod
    def _yes_no(tr: Transition, bet: Bet, table: Mapping[int, int], *, wins_on_number: bool) -> Optional[Settlement]:
        n = target_number(bet.bet_type)
        total = tr.roll.total
        if total == n:
            return _win(bet, table[n]) if wins_on_number else _loss(bet)
        if total == 7:
            return _loss(bet) if wins_on_number else _win(bet, table[n])
        return None

    @staticmethod
    def _hardway(tr: Transition, bet: Bet) -> Optional[Settlement]:
        n = target_number(bet.bet_type)
        roll = tr.roll
        if roll.total == 7:
            return _loss(bet)
        if roll.total != n:
            return None
        if is_hardway(roll.d1, roll.d2, roll.total):
            return _win(bet, HARDWAY_PAYOUTS[n])
        return _loss(bet)

    # ----- Series-scoped bets ------------------------------------------------

    @staticmethod
    def _repeater(tr: Transition, series: Series, bet: Bet) -> Optional[Settlement]:
        n = target_number(bet.bet_type)
        if tr.roll is not None and tr.roll.total == n:
            if series.trackers.hits(n) >= REPEATER_REQUIRED[n]:
                return _win(bet, REPEATER_PAYOUTS[n])
        closes = tr.completed or tr.kind is TransitionKind.HAND_END
        if closes and not series.hand_continues:
            return _loss(bet)
        return None

    def _bonus(self, tr: Transition, series: Series, bet: Bet) -> Optional[Settlement]:
        bt = bet.bet_type
        tk = series.trackers
        if bt is BetType.MUGGSY:
            # decided every series, whoever keeps the dice
            if tr.kind is TransitionKind.NATURAL and tr.roll.total == 7:
                return _win(bet, MUGGSY_COMEOUT_PAYOUT)
            if tr.kind is TransitionKind.SEVEN_OUT and tk.point_rolls == 1:
                return _win(bet, MUGGSY_POINT_PAYOUT)
            return _loss(bet)

        if bt in _HAND_SCOPED and series.hand_continues:
            return None

        mult: Optional[int] = None
        if bt is BetType.FIRE:
            mult = ladder_multiplier(FIRE_LADDER, tk.fire_count())
        elif bt is BetType.SMALL:
            mult = SMALL_PAYOUT if tk.small_complete() else None
        elif bt is BetType.TALL:
            mult = TALL_PAYOUT if tk.tall_complete() else None
        elif bt is BetType.ALL:
            mult = ALL_PAYOUT if tk.all_complete() else None
        elif bt is BetType.HOT_ROLLER:
            mult = HOT_ROLLER_PAYOUT if tk.point_numbers >= POINT_NUMS else None
        elif bt is BetType.RIDE_LINE:
            mult = ladder_multiplier(RIDE_LINE_LADDER, tk.line_wins)
        elif bt is BetType.REPLAY:
            tiers = [
                m for m in (
                    ladder_multiplier(REPLAY_LADDERS[p], tk.points_made.get(p, 0))
                    for p in REPLAY_LADDERS
                )
                if m is not None
            ]
            mult = max(tiers) if tiers else None
        elif bt is BetType.DIFFERENT_DOUBLES:
            mult = ladder_multiplier(DIFFERENT_DOUBLES_LADDER, len(tk.doubles))

        if mult is None:
            return _loss(bet)
        return _win(bet, mult)
