import pytest

from craps_engine.errors import RulesConfigError
from craps_engine.table_rules import TableRules, coerce_flag, get_table_rules, validate_table_rules


def test_defaults():
    res = validate_table_rules(None)
    assert res.errors == []
    assert res.rules == TableRules()
    assert res.rules.bar12_push == "refund"
    assert res.rules.line_bets_removable_after_point is False
    assert res.rules.carry_shooter_trackers is False


def test_profile_with_override():
    rules = get_table_rules({"profile": "hand_bonus", "bar12_push": "HOLD"})
    assert rules.carry_shooter_trackers is True
    assert rules.bar12_push == "hold"


def test_wrapped_mapping_and_loose_flags():
    res = validate_table_rules({"table_rules": {"line_bets_removable_after_point": "yes", "min_bet": "5"}})
    assert res.errors == []
    assert res.rules.line_bets_removable_after_point is True
    assert res.rules.min_bet == 5


def test_errors_and_warnings():
    res = validate_table_rules({"bar12_push": "maybe", "carry_shooter_trackers": "sometimes", "colour": "red"})
    assert res.rules is None
    assert any("bar12_push" in e for e in res.errors)
    assert any("carry_shooter_trackers" in e for e in res.errors)
    assert any("colour" in w for w in res.warnings)

    res = validate_table_rules({"min_bet": 10, "max_bet": 5})
    assert any("max_bet" in e for e in res.errors)

    res = validate_table_rules({"profile": "nope"})
    assert res.errors == []
    assert any("nope" in w for w in res.warnings)

    with pytest.raises(RulesConfigError):
        get_table_rules({"min_bet": 0})


def test_coerce_flag():
    assert coerce_flag("on") == (True, True)
    assert coerce_flag("0") == (False, True)
    assert coerce_flag(None, default=True) == (True, True)
    assert coerce_flag("auto", default=False) == (False, True)
    assert coerce_flag(2) == (None, False)
    assert coerce_flag([]) == (None, False)
