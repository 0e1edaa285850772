"""
Reference collaborators: in-memory custody, queued dice sources and access policies.

Dice sources answer asynchronously: ``request_dice`` only queues the request
id, ``deliver(table)`` later fulfils every queued request in order.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from typing import Any, Deque, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from .events import DIE_FACES
from .interfaces import OPERATIONS

log = logging.getLogger(__name__)

Dice = Tuple[int, int]


# ---------------------------------------------------------------------------
# Custody
# ---------------------------------------------------------------------------

class InMemoryCustody:
    """Balances per player; debits that would go negative are refused."""

    def __init__(self, balances: Optional[Mapping[str, int]] = None) -> None:
        self._balances: Dict[str, int] = {str(k): int(v) for k, v in (balances or {}).items()}
        self.debits = 0
        self.credits = 0

    def balance(self, player: str) -> int:
        return self._balances.get(player, 0)

    def deposit(self, player: str, amount: int) -> None:
        self._balances[player] = self.balance(player) + int(amount)

    def debit(self, player: str, amount: int) -> bool:
        amount = int(amount)
        if amount < 0 or self.balance(player) < amount:
            log.debug("debit refused: %s %d (balance %d)", player, amount, self.balance(player))
            return False
        self._balances[player] = self.balance(player) - amount
        self.debits += amount
        return True

    def credit(self, player: str, amount: int) -> None:
        self._balances[player] = self.balance(player) + int(amount)
        self.credits += int(amount)

    def snapshot(self) -> Dict[str, int]:
        return dict(sorted(self._balances.items()))


# ---------------------------------------------------------------------------
# Dice sources
# ---------------------------------------------------------------------------

class _QueuedDice:
    def __init__(self) -> None:
        self._pending: Deque[int] = deque()

    def request_dice(self, request_id: int) -> None:
        self._pending.append(int(request_id))

    @property
    def pending(self) -> List[int]:
        return list(self._pending)

    def _next_dice(self) -> Dice:  # pragma: no cover - overridden
        raise NotImplementedError

    def deliver(self, table: Any) -> List[Any]:
        """Fulfil every queued request on ``table``; returns the roll results."""
        results = []
        while self._pending:
            rid = self._pending.popleft()
            d1, d2 = self._next_dice()
            results.append(table.fulfill_roll(rid, d1, d2))
        return results


class SeededDice(_QueuedDice):
    """Reproducible fair dice from ``random.Random(seed)``."""

    def __init__(self, seed: Optional[int] = None) -> None:
        super().__init__()
        self.seed = seed
        self._rng = random.Random(seed)

    def _next_dice(self) -> Dice:
        return self._rng.randint(1, 6), self._rng.randint(1, 6)


class ScriptedDice(_QueuedDice):
    """Plays back a fixed list of dice pairs; IndexError once exhausted."""

    def __init__(self, script: Iterable[Dice]) -> None:
        super().__init__()
        self._script: Deque[Dice] = deque((int(a), int(b)) for a, b in script)

    @property
    def remaining(self) -> int:
        return len(self._script)

    def _next_dice(self) -> Dice:
        if not self._script:
            raise IndexError("dice script exhausted")
        return self._script.popleft()


def parse_dice_script(tokens: Iterable[str]) -> List[Dice]:
    """``["3,4", "6-6", "2 5"]`` -> ``[(3, 4), (6, 6), (2, 5)]``."""
    out: List[Dice] = []
    for tok in tokens:
        parts = tok.replace("-", ",").replace(" ", ",").split(",")
        parts = [p for p in parts if p]
        if len(parts) != 2 or not all(p.isdigit() for p in parts):
            raise ValueError(f"bad dice pair {tok!r} (expected e.g. 3,4)")
        d1, d2 = int(parts[0]), int(parts[1])
        if d1 not in DIE_FACES or d2 not in DIE_FACES:
            raise ValueError(f"bad dice pair {tok!r}: faces must be 1..6")
        out.append((d1, d2))
    return out


# ---------------------------------------------------------------------------
# Access policies
# ---------------------------------------------------------------------------

class AllowAll:
    def authorized(self, actor: str, operation: str) -> bool:
        return True


class RoleAccessPolicy:
    """
    Actor -> role -> permitted operations. Unknown actors get ``default_role``.

    Paused tables refuse every operation except for the ``admin`` role.
    """

    ROLE_OPERATIONS: Dict[str, Set[str]] = {
        "admin": set(OPERATIONS),
        "dealer": set(OPERATIONS),
        "player": {"manage_bets"},
    }

    def __init__(self, roles: Optional[Mapping[str, str]] = None, *, default_role: Optional[str] = None) -> None:
        self.roles: Dict[str, str] = dict(roles or {})
        self.default_role = default_role
        self.paused = False

    def authorized(self, actor: str, operation: str) -> bool:
        role = self.roles.get(actor, self.default_role)
        if role is None:
            return False
        if self.paused and role != "admin":
            return False
        return operation in self.ROLE_OPERATIONS.get(role, set())
