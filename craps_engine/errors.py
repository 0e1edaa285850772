class CrapsEngineError(Exception):
    """Base class for rules-engine errors."""


class InvalidPhaseTransition(CrapsEngineError):
    """Raised when a series/roll operation is not valid in the current phase."""


class InvalidRoll(CrapsEngineError, ValueError):
    """Raised when a die face is outside 1..6."""


class InvalidBetType(CrapsEngineError):
    """Raised for bet codes outside 0..63 or reserved slots."""


class BetNotAllowedInPhase(CrapsEngineError):
    """Raised when a bet type cannot be placed in the current phase."""


class DuplicateBet(CrapsEngineError):
    """Raised on a second instance of a non-stackable bet."""


class InvalidAmount(CrapsEngineError, ValueError):
    """Raised for zero, negative or out-of-limit stakes."""


class NoLineBet(CrapsEngineError):
    """Raised when an odds bet has no line bet to back."""


class BetNotFound(CrapsEngineError, KeyError):
    """Raised when removing or reading a bet that is not active."""


class BetNotRemovable(CrapsEngineError):
    """Raised when table policy forbids taking a bet down."""


class InsufficientFunds(CrapsEngineError):
    """Raised when the custody collaborator rejects a debit."""


class UnresolvedPendingRoll(CrapsEngineError):
    """Raised when a roll is requested while another one is outstanding."""


class UnknownRollRequest(CrapsEngineError):
    """Raised when fulfilling a roll request that is not the pending one."""


class Unauthorized(CrapsEngineError, PermissionError):
    """Raised when the access policy denies an operation."""


class RulesConfigError(CrapsEngineError, ValueError):
    """Raised when a table rules file cannot be read or is malformed."""
