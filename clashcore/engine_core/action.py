"""
Action System - Declared actions and their results.

Actions represent:
1. Card plays (including ultimates played from the roster)
2. Movement swaps during the movement round
3. Passing priority and ending the turn

All state changes flow through actions, and every action is recorded in
the transcript for replay.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..spec_schema.game_data import Speed


class ActionType(Enum):
    """Types of actions in the system."""
    PLAY_CARD = "play_card"
    MOVE_SWAP = "move_swap"
    PASS = "pass"
    END_TURN = "end_turn"


@dataclass(frozen=True)
class Action:
    """
    A declared action. Immutable once declared.

    `choice_answers` maps a choice kind ("scry", "redirect", ...) to the
    answers the declaring player picked for the card's own effects, one
    list of option ids per time that kind is asked, in order.

    `responses` holds what the responder answered while this action was
    applied (None where it gave nothing usable). The reducer fills it in
    on the recorded action so replay needs no responder.
    """
    action_type: ActionType
    team_id: str
    actor_id: str | None = None
    card_instance_id: str | None = None
    card_id: str | None = None  # Ultimates only
    declared_zone: Speed | None = None
    targets: tuple[str, ...] = ()
    spend_amount: int | None = None
    choice_answers: dict[str, list[list[str]]] = field(default_factory=dict)
    responses: dict[str, list[list[str] | None]] = field(default_factory=dict)
    swap_with: str | None = None

    @classmethod
    def play(
        cls,
        team_id: str,
        actor_id: str,
        card_instance_id: str,
        targets: list[str] | None = None,
        zone: Speed | None = None,
        spend_amount: int | None = None,
        choice_answers: dict[str, list[list[str]]] | None = None,
    ) -> Action:
        """Factory for playing a card from hand."""
        return cls(
            action_type=ActionType.PLAY_CARD,
            team_id=team_id,
            actor_id=actor_id,
            card_instance_id=card_instance_id,
            declared_zone=zone,
            targets=tuple(targets or ()),
            spend_amount=spend_amount,
            choice_answers=_copy_answers(choice_answers or {}),
        )

    @classmethod
    def ultimate(
        cls,
        team_id: str,
        actor_id: str,
        card_id: str,
        targets: list[str] | None = None,
        zone: Speed | None = None,
        spend_amount: int | None = None,
        choice_answers: dict[str, list[list[str]]] | None = None,
    ) -> Action:
        """Factory for playing an ultimate straight from the roster."""
        return cls(
            action_type=ActionType.PLAY_CARD,
            team_id=team_id,
            actor_id=actor_id,
            card_id=card_id,
            declared_zone=zone,
            targets=tuple(targets or ()),
            spend_amount=spend_amount,
            choice_answers=_copy_answers(choice_answers or {}),
        )

    @classmethod
    def swap(cls, team_id: str, actor_id: str, other_id: str) -> Action:
        """Factory for a movement-round swap."""
        return cls(
            action_type=ActionType.MOVE_SWAP,
            team_id=team_id,
            actor_id=actor_id,
            swap_with=other_id,
        )

    @classmethod
    def pass_priority(cls, team_id: str) -> Action:
        return cls(action_type=ActionType.PASS, team_id=team_id)

    @classmethod
    def end_turn(cls, team_id: str) -> Action:
        return cls(action_type=ActionType.END_TURN, team_id=team_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "action_type": self.action_type.value,
            "team_id": self.team_id,
            "actor_id": self.actor_id,
            "card_instance_id": self.card_instance_id,
            "card_id": self.card_id,
            "declared_zone": self.declared_zone.value if self.declared_zone else None,
            "targets": list(self.targets),
            "spend_amount": self.spend_amount,
            "choice_answers": _copy_answers(self.choice_answers),
            "responses": _copy_answers(self.responses),
            "swap_with": self.swap_with,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Action:
        zone = data.get("declared_zone")
        return cls(
            action_type=ActionType(data["action_type"]),
            team_id=data["team_id"],
            actor_id=data.get("actor_id"),
            card_instance_id=data.get("card_instance_id"),
            card_id=data.get("card_id"),
            declared_zone=Speed(zone) if zone else None,
            targets=tuple(data.get("targets") or ()),
            spend_amount=data.get("spend_amount"),
            choice_answers=_copy_answers(data.get("choice_answers") or {}),
            responses=_copy_answers(data.get("responses") or {}),
            swap_with=data.get("swap_with"),
        )


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New match state (if succeeded)
    - Reason code (if rejected)
    - Events emitted by this action, in order
    - The action as recorded, with any responder answers attached
    """
    success: bool
    new_state: Any | None = None  # Match
    error: str | None = None
    error_code: str | None = None
    events: list[Any] = field(default_factory=list)
    recorded_action: Action | None = None

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        events: list[Any] | None = None,
        recorded_action: Action | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            events=events or [],
            recorded_action=recorded_action,
        )


def _copy_answers(answers: dict[str, list]) -> dict[str, list]:
    """Sorted deep copy of per-kind answer queues."""
    return {
        kind: [list(answer) if answer is not None else None for answer in queue]
        for kind, queue in sorted(answers.items())
    }
