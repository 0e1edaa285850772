# craps_engine/__init__.py
"""
craps-engine: deterministic craps rules engine. Phase state machine, 64-code
bet catalog, fixed-point settlement and a single-writer table facade.
"""

from .errors import (
    CrapsEngineError,
    InvalidPhaseTransition,
    InvalidRoll,
    InvalidBetType,
    BetNotAllowedInPhase,
    DuplicateBet,
    InvalidAmount,
    NoLineBet,
    BetNotFound,
    BetNotRemovable,
    InsufficientFunds,
    UnresolvedPendingRoll,
    UnknownRollRequest,
    Unauthorized,
    RulesConfigError,
)
from .bet_types import BetType, BetCategory, category_of, is_valid_bet_type, normalize_bet_type
from .events import Roll, Transition, TransitionKind, is_hardway
from .game_state import GameState, Phase, Series, SeriesRecord
from .payouts import calculate_payout, field_payout
from .bet_registry import Bet, BetRegistry
from .settlement import Outcome, Settlement, SettlementEngine
from .table_rules import TableRules, get_table_rules, validate_table_rules
from .rules_loader import load_rules_file
from .table import CrapsTable, RollRequest, RollResult
from .adapters import AllowAll, InMemoryCustody, RoleAccessPolicy, ScriptedDice, SeededDice
from .csv_journal import SettlementJournal, read_journal

__version__ = "0.4.0"

__all__ = [
    # Errors
    "CrapsEngineError",
    "InvalidPhaseTransition",
    "InvalidRoll",
    "InvalidBetType",
    "BetNotAllowedInPhase",
    "DuplicateBet",
    "InvalidAmount",
    "NoLineBet",
    "BetNotFound",
    "BetNotRemovable",
    "InsufficientFunds",
    "UnresolvedPendingRoll",
    "UnknownRollRequest",
    "Unauthorized",
    "RulesConfigError",
    # Catalog
    "BetType",
    "BetCategory",
    "category_of",
    "is_valid_bet_type",
    "normalize_bet_type",
    # State machine
    "Roll",
    "Transition",
    "TransitionKind",
    "is_hardway",
    "GameState",
    "Phase",
    "Series",
    "SeriesRecord",
    # Bets / settlement
    "calculate_payout",
    "field_payout",
    "Bet",
    "BetRegistry",
    "Outcome",
    "Settlement",
    "SettlementEngine",
    # Config
    "TableRules",
    "get_table_rules",
    "validate_table_rules",
    "load_rules_file",
    # Table + collaborators
    "CrapsTable",
    "RollRequest",
    "RollResult",
    "AllowAll",
    "InMemoryCustody",
    "RoleAccessPolicy",
    "ScriptedDice",
    "SeededDice",
    "SettlementJournal",
    "read_journal",
    "__version__",
]
