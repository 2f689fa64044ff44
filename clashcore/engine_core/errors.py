"""
Error taxonomy for the combat core.

- IllegalAction: a declaration fails a restriction, targeting or cost check.
  Raised before any mutation; the reducer reports it as a no-op.
- DataIntegrityError: authored data is malformed. Fatal at load time.
- NonDeterminismDetected: a replay diverged from its transcript.
"""

from __future__ import annotations
from enum import Enum
from typing import Any


class IllegalReason(str, Enum):
    """Reason codes attached to IllegalAction."""
    MATCH_OVER = "MATCH_OVER"
    WRONG_PHASE = "WRONG_PHASE"
    NOT_ACTIVE_TEAM = "NOT_ACTIVE_TEAM"
    UNKNOWN_ACTOR = "UNKNOWN_ACTOR"
    ACTOR_DEFEATED = "ACTOR_DEFEATED"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
    CARD_COMMITTED = "CARD_COMMITTED"
    NOT_OWNER = "NOT_OWNER"
    NOT_ULTIMATE = "NOT_ULTIMATE"
    ROUND_LOCKED = "ROUND_LOCKED"
    PLAY_BLOCKED = "PLAY_BLOCKED"
    RESTRICTION_FAILED = "RESTRICTION_FAILED"
    ILLEGAL_TARGET = "ILLEGAL_TARGET"
    ILLEGAL_ZONE = "ILLEGAL_ZONE"
    INSUFFICIENT_ENERGY = "INSUFFICIENT_ENERGY"
    INSUFFICIENT_ULTIMATE = "INSUFFICIENT_ULTIMATE"
    INVALID_SPEND = "INVALID_SPEND"
    ROOTED = "ROOTED"
    NOT_ADJACENT = "NOT_ADJACENT"
    QUEUE_NOT_EMPTY = "QUEUE_NOT_EMPTY"
    COUNTER_TARGET = "COUNTER_TARGET"


class ClashCoreError(Exception):
    """Base class for engine errors."""


class IllegalAction(ClashCoreError):
    """Raised when a declared action is not legal in the current state."""

    def __init__(self, reason: IllegalReason, message: str):
        self.reason = reason
        self.message = message
        super().__init__(message)

    @property
    def reason_code(self) -> str:
        return self.reason.value


class DataIntegrityError(ClashCoreError):
    """Raised when authored game data fails load-time integrity checks."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Game data failed integrity checks with {len(errors)} error(s)")


class NonDeterminismDetected(ClashCoreError):
    """Raised when a replay produces a different event log than recorded."""

    def __init__(self, index: int, expected: Any, actual: Any, message: str = ""):
        self.index = index
        self.expected = expected
        self.actual = actual
        super().__init__(message or f"Replay diverged at action {index}")
