"""Table policy flags, named profiles and validation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .errors import RulesConfigError

BAR12_REFUND = "refund"
BAR12_HOLD = "hold"
BAR12_MODES = (BAR12_REFUND, BAR12_HOLD)

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}
_DEFAULT_STRINGS = {"default", "auto", "inherit"}


@dataclass(frozen=True)
class TableRules:
    """
    Policy knobs the engine consults; none of them change the phase machine.

    bar12_push                       "refund": Don't Pass/Don't Come on a come-out 12
                                     get their principal back; "hold": the bet stays up
    line_bets_removable_after_point  allow taking a line bet down once a point governs it
    carry_shooter_trackers           a shooter who keeps the dice carries bonus progress
                                     (and pending bonus/repeater bets) into the next series
    min_bet / max_bet                per-bet stake limits (max_bet None = unlimited)
    """

    bar12_push: str = BAR12_REFUND
    line_bets_removable_after_point: bool = False
    carry_shooter_trackers: bool = False
    min_bet: int = 1
    max_bet: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------
# Built-in preset profiles
# ---------------------------

DEFAULT_PROFILES: Dict[str, Dict[str, Any]] = {
    "standard": {},
    # Don't bets ride through a come-out 12 instead of being paid back.
    "bar12_hold": {"bar12_push": BAR12_HOLD},
    # Fire / Replay / Ride the Line played over the shooter's whole hand.
    "hand_bonus": {"carry_shooter_trackers": True},
}


@dataclass
class TableRulesResult:
    errors: List[str]
    warnings: List[str]
    rules: Optional[TableRules] = field(default=None)


def coerce_flag(value: Any, *, default: Optional[bool] = None) -> Tuple[Optional[bool], bool]:
    """Coerce a loosely-typed flag value into ``True``/``False``/``None``.

    ``default`` is returned when ``value`` is ``None`` or explicitly requests
    inheritance (``"default"``/``"auto"``). The boolean in the return tuple
    indicates whether the coercion succeeded.
    """

    if isinstance(value, bool):
        return value, True
    if value is None:
        return default, True
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True, True
        if text in _FALSE_STRINGS:
            return False, True
        if default is not None and text in _DEFAULT_STRINGS:
            return default, True
        return None, False
    if isinstance(value, (int, float)):
        if value == 1:
            return True, True
        if value == 0:
            return False, True
        return None, False
    return None, False


# ---------------------------
# Public helpers
# ---------------------------


def merge_profile(raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Merge user-specified keys with a named profile if provided.
    User values override profile defaults.
    """
    raw = dict(raw or {})
    profile_name = raw.pop("profile", None)
    base: Dict[str, Any] = {}
    if isinstance(profile_name, str) and profile_name in DEFAULT_PROFILES:
        base = dict(DEFAULT_PROFILES[profile_name])
    return {**base, **raw}


def validate_table_rules(raw: Optional[Dict[str, Any]]) -> TableRulesResult:
    """
    Validate a rules mapping (optionally wrapped in a ``table_rules`` key).
    Returns the parsed TableRules when there are no errors.
    """
    errors: List[str] = []
    warnings: List[str] = []

    if raw is None:
        return TableRulesResult(errors, warnings, TableRules())
    if not isinstance(raw, dict):
        return TableRulesResult(["table_rules must be an object"], warnings, None)
    if "table_rules" in raw:
        raw = raw.get("table_rules") or {}
        if not isinstance(raw, dict):
            return TableRulesResult(["table_rules must be an object"], warnings, None)

    prof = raw.get("profile")
    if prof is not None and not isinstance(prof, str):
        errors.append("table_rules.profile must be a string")
    if isinstance(prof, str) and prof not in DEFAULT_PROFILES:
        warnings.append(f"Unknown table_rules.profile '{prof}' (using only explicit values)")

    merged = merge_profile(raw)
    known = set(TableRules.__dataclass_fields__)
    for key in sorted(set(merged) - known):
        warnings.append(f"Unknown table_rules key '{key}' ignored")

    values: Dict[str, Any] = {}

    bar12 = merged.get("bar12_push", BAR12_REFUND)
    if isinstance(bar12, str) and bar12.strip().lower() in BAR12_MODES:
        values["bar12_push"] = bar12.strip().lower()
    else:
        errors.append("table_rules.bar12_push must be 'refund' or 'hold'")

    for key in ("line_bets_removable_after_point", "carry_shooter_trackers"):
        flag, ok = coerce_flag(merged.get(key), default=getattr(TableRules, key))
        if not ok:
            errors.append(f"table_rules.{key} must be a boolean")
        else:
            values[key] = bool(flag)

    min_bet = merged.get("min_bet", 1)
    if not _is_positive_int(min_bet):
        errors.append("table_rules.min_bet must be a positive integer")
    else:
        values["min_bet"] = int(min_bet)

    max_bet = merged.get("max_bet")
    if max_bet is not None:
        if not _is_positive_int(max_bet):
            errors.append("table_rules.max_bet must be a positive integer")
        else:
            values["max_bet"] = int(max_bet)
            if _is_positive_int(min_bet) and int(max_bet) < int(min_bet):
                errors.append("table_rules.max_bet must be >= min_bet")

    if errors:
        return TableRulesResult(errors, warnings, None)
    return TableRulesResult(errors, warnings, TableRules(**values))


def get_table_rules(raw: Optional[Dict[str, Any]]) -> TableRules:
    """Parse a rules mapping, raising ``RulesConfigError`` on invalid input."""
    res = validate_table_rules(raw)
    if res.errors or res.rules is None:
        raise RulesConfigError("; ".join(res.errors) or "invalid table rules")
    return res.rules


# ---------------------------
# internals
# ---------------------------


def _is_positive_int(x: Any) -> bool:
    if isinstance(x, bool):
        return False
    if isinstance(x, int):
        return x > 0
    if isinstance(x, str) and x.strip().isdigit():
        return int(x.strip()) > 0
    return False
