import pytest

from craps_engine.adapters import InMemoryCustody, RoleAccessPolicy, ScriptedDice, SeededDice
from craps_engine.bet_types import BetType
from craps_engine.csv_journal import SettlementJournal, read_journal
from craps_engine.errors import (
    BetNotAllowedInPhase,
    InsufficientFunds,
    InvalidPhaseTransition,
    InvalidRoll,
    Unauthorized,
    UnknownRollRequest,
    UnresolvedPendingRoll,
)
from craps_engine.events import TransitionKind
from craps_engine.game_state import Phase
from craps_engine.settlement import Outcome
from craps_engine.table import CrapsTable
from craps_engine.table_rules import TableRules

D = "dealer"


def _table(balances=None, **kw):
    custody = InMemoryCustody(balances or {"amy": 100})
    return CrapsTable(custody, **kw), custody


def test_request_fulfil_natural():
    table, custody = _table()
    table.start_new_series(D, "amy")
    table.place_bet(D, "amy", BetType.PASS, 10)
    assert custody.balance("amy") == 90

    req = table.request_roll(D)
    assert table.pending_request == req
    with pytest.raises(UnresolvedPendingRoll):
        table.request_roll(D)

    # bets may still be placed while the roll is outstanding
    table.place_bet(D, "amy", "field", 5)

    with pytest.raises(UnknownRollRequest):
        table.fulfill_roll(req.request_id + 1, 3, 4)

    res = table.fulfill_roll(req.request_id, 3, 4)
    assert res.request_id == req.request_id
    assert res.completed
    assert res.series.outcome == 7
    assert res.credits() == {"amy": 20}
    assert custody.balance("amy") == 105
    assert table.pending_request is None
    assert table.phase is Phase.IDLE

    with pytest.raises(UnknownRollRequest):
        table.fulfill_roll(req.request_id, 3, 4)


def test_insufficient_funds_places_nothing():
    table, custody = _table({"amy": 5})
    table.start_new_series(D, "amy")
    with pytest.raises(InsufficientFunds):
        table.place_bet(D, "amy", BetType.PASS, 10)
    assert not table.has_active_bet("amy", BetType.PASS)
    assert custody.balance("amy") == 5


def test_validation_happens_before_debit():
    table, custody = _table()
    table.start_new_series(D, "amy")
    with pytest.raises(BetNotAllowedInPhase):
        table.place_bet(D, "amy", BetType.COME, 10)
    assert custody.balance("amy") == 100


def test_removal_round_trip():
    table, custody = _table()
    table.start_new_series(D, "amy")
    table.place_bet(D, "amy", BetType.FIELD, 10)
    removed = table.remove_bet(D, "amy", BetType.FIELD)
    assert len(removed) == 1
    assert not table.has_active_bet("amy", BetType.FIELD)
    assert custody.balance("amy") == 100

    res = table.roll(D, 1, 1)
    assert res.settlements == ()
    assert custody.balance("amy") == 100


def test_failed_settlement_rolls_back(monkeypatch):
    table, custody = _table()
    table.start_new_series(D, "amy")
    table.place_bet(D, "amy", BetType.PASS, 10)
    req = table.request_roll(D)

    def boom(*args, **kwargs):
        raise RuntimeError("payout backend down")

    monkeypatch.setattr(table.engine, "settle", boom)
    with pytest.raises(RuntimeError):
        table.fulfill_roll(req.request_id, 3, 4)

    assert table.phase is Phase.COME_OUT
    assert table.state.roll_index == 0
    assert table.get_series(1).completed is False
    assert table.pending_request == req
    assert table.has_active_bet("amy", BetType.PASS)
    assert custody.balance("amy") == 90

    monkeypatch.undo()
    res = table.fulfill_roll(req.request_id, 3, 4)
    assert res.completed
    assert custody.balance("amy") == 110


def test_bad_dice_keep_request_pending():
    table, _ = _table()
    table.start_new_series(D, "amy")
    req = table.request_roll(D)
    with pytest.raises(InvalidRoll):
        table.fulfill_roll(req.request_id, 7, 1)
    assert table.pending_request == req
    assert table.state.roll_index == 0


def test_roll_needs_an_active_series():
    table, _ = _table()
    with pytest.raises(InvalidPhaseTransition):
        table.request_roll(D)
    with pytest.raises(InvalidPhaseTransition):
        table.roll(D, 3, 4)
    assert table.pending_request is None


def test_access_policy_gates_mutations():
    access = RoleAccessPolicy({"boss": "dealer", "amy": "player"})
    table, _ = _table(access=access)
    with pytest.raises(Unauthorized):
        table.start_new_series("amy", "amy")
    table.start_new_series("boss", "amy")
    table.place_bet("amy", "amy", BetType.PASS, 10)
    with pytest.raises(Unauthorized):
        table.request_roll("amy")
    with pytest.raises(Unauthorized):
        table.end_current_series("amy")
    with pytest.raises(Unauthorized):
        table.place_bet("mallory", "amy", BetType.FIELD, 10)

    access.paused = True
    with pytest.raises(Unauthorized):
        table.request_roll("boss")


def test_forced_end_blocked_while_roll_pending():
    table, custody = _table()
    table.start_new_series(D, "amy")
    table.place_bet(D, "amy", BetType.FIRE, 10)
    table.request_roll(D)
    with pytest.raises(UnresolvedPendingRoll):
        table.end_current_series(D)


def test_forced_end_settles_bonus_bets():
    table, custody = _table()
    table.start_new_series(D, "amy")
    table.place_bet(D, "amy", BetType.FIRE, 10)
    table.place_bet(D, "amy", BetType.PASS, 10)
    res = table.end_current_series(D)
    assert res.completed
    assert [s.bet.bet_type for s in res.settlements] == [BetType.FIRE]
    assert table.has_active_bet("amy", BetType.PASS)
    assert table.phase is Phase.IDLE


def test_random_source_answers_later():
    dice = SeededDice(seed=7)
    table, _ = _table(random_source=dice)
    table.start_new_series(D, "amy")
    req = table.request_roll(D)
    assert dice.pending == [req.request_id]
    results = dice.deliver(table)
    assert len(results) == 1
    assert results[0].request_id == req.request_id
    assert table.pending_request is None
    assert dice.pending == []


def test_seeded_sessions_are_reproducible():
    def session():
        dice = SeededDice(seed=42)
        table, custody = _table({"amy": 10_000}, random_source=dice)
        history = []
        for _ in range(30):
            if table.phase is Phase.IDLE:
                table.start_new_series(D, "amy")
                table.place_bet(D, "amy", BetType.PASS, 10)
            table.request_roll(D)
            for res in dice.deliver(table):
                history.append((res.transition.roll.dice, res.transition.kind))
        return history, custody.balance("amy")

    assert session() == session()


def test_odds_and_come_through_the_table():
    dice = ScriptedDice([(3, 3), (2, 3), (1, 4), (3, 4)])
    table, custody = _table({"amy": 1000}, random_source=dice)
    table.start_new_series(D, "amy")
    table.place_bet(D, "amy", BetType.PASS, 10)
    table.request_roll(D)
    dice.deliver(table)
    assert table.point == 6

    table.place_odds_bet(D, "amy", BetType.PASS, 10)
    table.place_bet(D, "amy", BetType.COME, 10)
    table.request_roll(D)
    dice.deliver(table)
    assert table.get_bet("amy", BetType.COME).point == 5

    table.place_odds_bet(D, "amy", "come", 10)
    table.request_roll(D)
    (res,) = dice.deliver(table)
    assert res.credits() == {"amy": 45}

    table.request_roll(D)
    (res,) = dice.deliver(table)
    assert res.transition.sevens_out
    # 1000 - 10 pass - 10 odds - 10 come - 10 come odds + 45
    assert custody.balance("amy") == 1005
    assert dice.remaining == 0


def test_completed_series_reads_are_stable():
    table, _ = _table()
    table.start_new_series(D, "amy")
    table.roll(D, 2, 2)
    table.roll(D, 1, 3)
    a = table.get_series(1).to_json()
    table.start_new_series(D, "amy")
    table.roll(D, 5, 6)
    assert table.get_series(1).to_json() == a


def test_journal_rows(tmp_path):
    path = tmp_path / "journal.csv"
    table, _ = _table(journal=SettlementJournal(path))
    table.start_new_series(D, "amy")
    table.place_bet(D, "amy", BetType.PASS, 10)
    table.place_bet(D, "amy", BetType.FIELD, 5)
    table.roll(D, 3, 4)

    assert path.read_text(encoding="utf-8").startswith("# journal_schema_version")
    rows = read_journal(path)
    assert [r["bet_name"] for r in rows] == ["Pass Line", "Field"]
    assert rows[0]["outcome"] == "win"
    assert rows[0]["credit"] == "20"
    assert rows[1]["outcome"] == "loss"
    assert rows[0]["dice"] == "3-4"
    assert rows[0]["transition"] == "natural"


def test_snapshot_shape():
    table, _ = _table()
    table.start_new_series(D, "amy")
    table.place_bet(D, "amy", BetType.HARD_6, 5)
    snap = table.snapshot()
    assert snap["phase"] == "come_out"
    assert snap["bets"]["active_count"] == 1
    assert snap["series"]["shooter"] == "amy"
    assert snap["rules"]["bar12_push"] == "refund"


def test_forced_end_with_point_on_sevens_out_line_bets():
    table, custody = _table({"amy": 100, "bob": 100})
    table.start_new_series(D, "amy")
    table.place_bet(D, "amy", BetType.PASS, 10)
    table.place_bet(D, "bob", BetType.DONT_PASS, 10)
    table.roll(D, 2, 2)
    res = table.end_current_series(D)
    assert res.series.outcome == 7
    assert res.credits() == {"bob": 20}
    assert not table.has_active_bet("amy", BetType.PASS)
    assert not table.has_active_bet("bob", BetType.DONT_PASS)

    table.start_new_series(D, "amy")
    res = table.roll(D, 3, 4)
    assert res.settlements == ()
    assert custody.balance("amy") == 90
    assert custody.balance("bob") == 110


def test_new_shooter_settles_carried_hand_bets():
    table, custody = _table(rules=TableRules(carry_shooter_trackers=True))
    table.start_new_series(D, "amy")
    table.place_bet(D, "amy", BetType.FIRE, 10)
    table.roll(D, 2, 2)
    table.roll(D, 1, 3)
    assert table.has_active_bet("amy", BetType.FIRE)

    series = table.start_new_series(D, "bob")
    assert not series.carried
    assert not table.has_active_bet("amy", BetType.FIRE)
    hand = table.last_hand_end
    assert hand.transition.kind is TransitionKind.HAND_END
    assert [s.outcome for s in hand.settlements] == [Outcome.LOSS]
    assert custody.balance("amy") == 90


def test_bet_reads_never_raise():
    table, _ = _table()
    table.start_new_series(D, "amy")
    table.place_bet(D, "amy", "hard 8", 5)
    assert table.has_active_bet("amy", "Hard 8")
    assert table.get_bet("amy", "Hard 8").amount == 5
    for bad in (42, 64, -1, "banana", None):
        assert table.has_active_bet("amy", bad) is False
        assert table.get_bet("amy", bad) is None


class _FlakyCustody(InMemoryCustody):
    def __init__(self, balances, refuse):
        super().__init__(balances)
        self.refuse = refuse

    def credit(self, player, amount):
        if player == self.refuse:
            raise RuntimeError("ledger offline")
        super().credit(player, amount)


def test_failed_credit_reverses_payouts_and_rolls_back():
    custody = _FlakyCustody({"amy": 100, "bob": 100}, refuse="bob")
    table = CrapsTable(custody)
    table.start_new_series(D, "amy")
    table.place_bet(D, "amy", BetType.PASS, 10)
    table.place_bet(D, "bob", BetType.PASS, 10)
    req = table.request_roll(D)

    with pytest.raises(RuntimeError):
        table.fulfill_roll(req.request_id, 3, 4)
    assert custody.balance("amy") == 90
    assert custody.balance("bob") == 90
    assert table.has_active_bet("amy", BetType.PASS)
    assert table.has_active_bet("bob", BetType.PASS)
    assert table.pending_request == req
    assert table.phase is Phase.COME_OUT

    custody.refuse = None
    res = table.fulfill_roll(req.request_id, 3, 4)
    assert res.credits() == {"amy": 20, "bob": 20}
    assert custody.balance("amy") == 110
    assert custody.balance("bob") == 110
