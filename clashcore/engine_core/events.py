"""
Resolution Events - The explainable output of the engine.

Every observable mutation emits exactly one ResolutionEvent. Events nest
under a parent (the card play or use that caused them) and carry a
lifecycle tag so a UI can explain why something happened.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

from .state import Match


class EventKind(Enum):
    # Match flow
    MATCH_STARTED = "match_started"
    TURN_STARTED = "turn_started"
    PHASE_CHANGED = "phase_changed"
    PASSED = "passed"
    ROUND_ENDED = "round_ended"
    TURN_ENDED = "turn_ended"
    MATCH_WON = "match_won"

    # Action lifecycle
    CARD_PLAYED = "card_played"
    CARD_TRANSFORMED = "card_transformed"
    POWER_ROLLED = "power_rolled"
    ZONE_ASSIGNED = "zone_assigned"
    CLASH = "clash"
    CARD_USED = "card_used"
    CANCELLED = "cancelled"
    NEGATED = "negated"
    MISSED = "missed"
    TARGET_REDIRECTED = "target_redirected"
    CARD_REUSED = "card_reused"
    COUNTER_OPENED = "counter_opened"

    # Numeric
    DAMAGE_APPLIED = "damage_applied"
    DAMAGE_PREVENTED = "damage_prevented"
    SHIELD_ABSORB = "shield_absorb"
    THORNS_REFLECT = "thorns_reflect"
    SHIELD_GAINED = "shield_gained"
    HEALED = "healed"
    ENERGY_SPENT = "energy_spent"
    ENERGY_GAINED = "energy_gained"
    ULTIMATE_CHANGED = "ultimate_changed"
    CHARACTER_DEFEATED = "character_defeated"

    # Statuses
    STATUS_APPLIED = "status_applied"
    STATUS_CHANGED = "status_changed"
    STATUS_EXPIRED = "status_expired"
    SPEND_SKIPPED = "spend_skipped"

    # Cards
    CARD_DRAWN = "card_drawn"
    DECK_RESHUFFLED = "deck_reshuffled"
    CARD_MOVED = "card_moved"
    CARD_CREATED = "card_created"

    # Match-level effects
    PLAY_LOCKED = "play_locked"
    CHARACTER_MOVED = "character_moved"
    CHOICE_RESOLVED = "choice_resolved"
    UNMODELED_EFFECT = "unmodeled_effect"


class Lifecycle(Enum):
    PLAYED = "played"
    USED = "used"
    CANCELLED = "cancelled"
    NEGATED = "negated"
    SYSTEM = "system"


@dataclass(frozen=True)
class ResolutionEvent:
    event_id: int
    kind: EventKind
    lifecycle: Lifecycle
    actor: str | None = None
    target: str | None = None
    magnitude: int | None = None
    parent_id: int | None = None
    detail: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "kind": self.kind.value,
            "lifecycle": self.lifecycle.value,
            "actor": self.actor,
            "target": self.target,
            "magnitude": self.magnitude,
            "parent_id": self.parent_id,
            "detail": self.detail,
        }


class EventRecorder:
    """
    Appends events to the match log.

    A scope stack supplies the default parent and lifecycle, so effect
    code emits events without threading parent ids around.
    """

    def __init__(self, match: Match):
        self.match = match
        self._scopes: list[tuple[int, Lifecycle]] = []

    def emit(
        self,
        kind: EventKind,
        actor: str | None = None,
        target: str | None = None,
        magnitude: int | None = None,
        detail: str = "",
        lifecycle: Lifecycle | None = None,
        parent_id: int | None = None,
    ) -> ResolutionEvent:
        if self._scopes:
            scope_parent, scope_lifecycle = self._scopes[-1]
        else:
            scope_parent, scope_lifecycle = None, Lifecycle.SYSTEM
        event = ResolutionEvent(
            event_id=len(self.match.events) + 1,
            kind=kind,
            lifecycle=lifecycle or scope_lifecycle,
            actor=actor,
            target=target,
            magnitude=magnitude,
            parent_id=parent_id if parent_id is not None else scope_parent,
            detail=detail,
        )
        self.match.events.append(event)
        return event

    @contextmanager
    def scope(self, event: ResolutionEvent, lifecycle: Lifecycle | None = None) -> Iterator[None]:
        """Nest subsequent events under `event`."""
        with self.scope_id(event.event_id, lifecycle or event.lifecycle):
            yield

    @contextmanager
    def scope_id(self, parent_id: int, lifecycle: Lifecycle) -> Iterator[None]:
        self._scopes.append((parent_id, lifecycle))
        try:
            yield
        finally:
            self._scopes.pop()


def events_to_dicts(events: list[ResolutionEvent]) -> list[dict[str, Any]]:
    return [event.to_dict() for event in events]
