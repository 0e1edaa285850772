"""Table rules file loading (JSON or YAML)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from .errors import RulesConfigError
from .table_rules import TableRules, TableRulesResult, validate_table_rules

# Legacy spellings seen in hand-written rules files.
DEPRECATED_KEY_MAP: Dict[str, str] = {
    "bar_12": "bar12_push",
    "removable_line_bets": "line_bets_removable_after_point",
    "carry_trackers": "carry_shooter_trackers",
}


def normalize_deprecated_keys(raw: Dict[str, Any]) -> Tuple[Dict[str, Any], List[Dict[str, str]]]:
    """Rename legacy keys in place; returns the mapping and what was done."""

    deprecations: List[Dict[str, str]] = []
    for old_key, new_key in DEPRECATED_KEY_MAP.items():
        if old_key not in raw:
            continue
        if new_key in raw:
            raw.pop(old_key, None)
            deprecations.append({"old": old_key, "new": new_key, "action": "kept_new_dropped_old"})
        else:
            raw[new_key] = raw.pop(old_key)
            deprecations.append({"old": old_key, "new": new_key, "action": "migrated"})
    return raw, deprecations


def read_rules_file(path: str | Path) -> Dict[str, Any]:
    """Read a JSON/YAML rules file into a mapping (``table_rules`` unwrapped)."""

    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise RulesConfigError(f"cannot read rules file {p}: {e}") from e

    try:
        if p.suffix.lower() in {".yaml", ".yml"}:
            data: Any = yaml.safe_load(text) or {}
        else:
            data = json.loads(text or "{}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise RulesConfigError(f"cannot parse rules file {p}: {e}") from e

    if not isinstance(data, dict):
        raise RulesConfigError("Rules root must be a JSON/YAML object (mapping).")
    if isinstance(data.get("table_rules"), dict):
        data = data["table_rules"]

    data, _ = normalize_deprecated_keys(dict(data))
    return data


def check_rules_file(path: str | Path) -> TableRulesResult:
    return validate_table_rules(read_rules_file(path))


def load_rules_file(path: str | Path) -> TableRules:
    res = check_rules_file(path)
    if res.errors or res.rules is None:
        raise RulesConfigError("; ".join(res.errors) or f"invalid rules file {path}")
    return res.rules
