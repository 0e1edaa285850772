import json
from pathlib import Path

import pytest

from craps_engine.errors import RulesConfigError
from craps_engine.rules_loader import check_rules_file, load_rules_file, normalize_deprecated_keys


def test_yaml_rules(tmp_path):
    p = tmp_path / "rules.yaml"
    p.write_text(
        "table_rules:\n"
        "  profile: bar12_hold\n"
        "  line_bets_removable_after_point: on\n"
        "  max_bet: 500\n",
        encoding="utf-8",
    )
    rules = load_rules_file(p)
    assert rules.bar12_push == "hold"
    assert rules.line_bets_removable_after_point is True
    assert rules.max_bet == 500


def test_json_rules_with_legacy_keys(tmp_path):
    p = tmp_path / "rules.json"
    p.write_text(json.dumps({"bar_12": "hold", "carry_trackers": True}), encoding="utf-8")
    rules = load_rules_file(p)
    assert rules.bar12_push == "hold"
    assert rules.carry_shooter_trackers is True


def test_deprecated_keys_prefer_new_spelling():
    raw, notes = normalize_deprecated_keys({"bar_12": "hold", "bar12_push": "refund"})
    assert raw == {"bar12_push": "refund"}
    assert notes[0]["action"] == "kept_new_dropped_old"


def test_empty_file_gives_defaults(tmp_path):
    p = tmp_path / "empty.yaml"
    p.write_text("", encoding="utf-8")
    res = check_rules_file(p)
    assert res.errors == []
    assert res.rules.bar12_push == "refund"


def test_unreadable_and_malformed_files(tmp_path):
    with pytest.raises(RulesConfigError):
        load_rules_file(tmp_path / "missing.yaml")

    bad = tmp_path / "bad.yaml"
    bad.write_text("bar12_push: [unclosed\n", encoding="utf-8")
    with pytest.raises(RulesConfigError):
        load_rules_file(bad)

    listy = tmp_path / "list.json"
    listy.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(RulesConfigError):
        load_rules_file(listy)

    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps({"bar12_push": "sometimes"}), encoding="utf-8")
    with pytest.raises(RulesConfigError):
        load_rules_file(invalid)


def test_shipped_examples_load():
    root = Path(__file__).resolve().parent.parent / "examples"
    rules = load_rules_file(root / "table_rules.yaml")
    assert rules.min_bet == 5
    assert rules.max_bet == 1000
    hand = load_rules_file(root / "hand_bonus.json")
    assert hand.carry_shooter_trackers is True
    assert hand.bar12_push == "hold"
