"""Collaborator protocols consumed by the table."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

# Operation names passed to AccessPolicy.authorized
OP_START_SERIES = "start_new_series"
OP_REQUEST_ROLL = "request_roll"
OP_END_SERIES = "end_current_series"
OP_MANAGE_BETS = "manage_bets"

OPERATIONS = (OP_START_SERIES, OP_REQUEST_ROLL, OP_END_SERIES, OP_MANAGE_BETS)


@runtime_checkable
class Custody(Protocol):
    """Holds player funds. The engine debits before a bet exists and credits after settlement."""

    def debit(self, player: str, amount: int) -> bool:
        """Take ``amount`` from ``player``; False when it cannot be covered."""

    def credit(self, player: str, amount: int) -> None:
        """Pay ``amount`` to ``player``. A payout that fails partway is reversed with ``debit``."""


@runtime_checkable
class RandomSource(Protocol):
    """Supplies dice for a roll request, answering later through ``CrapsTable.fulfill_roll``."""

    def request_dice(self, request_id: int) -> None:
        """Ask for two dice for ``request_id``."""


@runtime_checkable
class AccessPolicy(Protocol):
    """Gate consulted before every mutating table operation."""

    def authorized(self, actor: str, operation: str) -> bool:
        """True when ``actor`` may perform ``operation``."""
