"""
Match State - Runtime containers for one match.

Design principles:
- Mutable inside one atomic resolution: the reducer clones the match,
  mutates the clone, and hands it back only if the action was legal
- Serializable: every field is plain data, so deepcopy is a full clone
- Definitions are never stored here; cards and statuses reference
  authored data by id
"""

from __future__ import annotations
from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..spec_schema.game_data import CardCategory, CardDefinition, Speed
from .rng import RngStream


class GamePhase(Enum):
    """High-level match phases."""
    MOVEMENT = "movement"
    COMBAT = "combat"
    FINISHED = "finished"


class ZoneName(Enum):
    DECK = "deck"
    HAND = "hand"
    DISCARD = "discard"
    EXHAUST = "exhaust"


TEAM_IDS = ("p1", "p2")


@dataclass(frozen=True)
class RulesOptions:
    """Rule parameters frozen into a match at setup."""
    hand_size: int = 5
    energy_per_turn: int = 5
    line_size: int = 3
    move_cost: int = 1
    movement_enabled: bool = True

    @classmethod
    def from_settings(cls, settings: Any) -> RulesOptions:
        return cls(
            hand_size=settings.hand_size,
            energy_per_turn=settings.energy_per_turn,
            line_size=settings.line_size,
            move_cost=settings.move_cost,
            movement_enabled=settings.movement_enabled,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "hand_size": self.hand_size,
            "energy_per_turn": self.energy_per_turn,
            "line_size": self.line_size,
            "move_cost": self.move_cost,
            "movement_enabled": self.movement_enabled,
        }


@dataclass
class CardInstance:
    """
    A concrete copy of a card definition.

    Note: This is a runtime instance, not the definition.
    The definition lives in GameData under the owner's character.
    """
    instance_id: str  # "ci-N", unique within the match
    card_id: str
    owner_id: str  # Match character id

    def __hash__(self):
        return hash(self.instance_id)

    def __eq__(self, other):
        if not isinstance(other, CardInstance):
            return False
        return self.instance_id == other.instance_id


@dataclass
class StatusInstance:
    """A status on a character. Dimensions are clamped by the status engine."""
    kind: str
    potency: int = 0
    count: int = 0
    stack: int = 0
    value: int = 0

    def get(self, stat) -> int:
        return getattr(self, stat.value)

    def put(self, stat, amount: int):
        setattr(self, stat.value, amount)

    def dimensions(self) -> dict[str, int]:
        return {
            "potency": self.potency,
            "count": self.count,
            "stack": self.stack,
            "value": self.value,
        }


@dataclass
class Character:
    character_id: str  # "<team>:<definition id>"
    definition_id: str
    team_id: str
    name: str
    hp: int
    max_hp: int
    slot: int
    shield: int = 0
    defeated: bool = False
    statuses: dict[str, StatusInstance] = field(default_factory=dict)

    def status(self, kind: str) -> StatusInstance | None:
        return self.statuses.get(kind)


@dataclass
class Team:
    team_id: str
    characters: list[Character] = field(default_factory=list)
    deck: list[CardInstance] = field(default_factory=list)  # Top of deck is the end
    hand: list[CardInstance] = field(default_factory=list)
    discard: list[CardInstance] = field(default_factory=list)
    exhaust: list[CardInstance] = field(default_factory=list)
    energy: int = 0
    ultimate: int = 0
    committed: set[str] = field(default_factory=set)  # Declared, unresolved hand cards

    def zone(self, name: ZoneName) -> list[CardInstance]:
        return {
            ZoneName.DECK: self.deck,
            ZoneName.HAND: self.hand,
            ZoneName.DISCARD: self.discard,
            ZoneName.EXHAUST: self.exhaust,
        }[name]

    def all_instances(self) -> list[CardInstance]:
        return self.deck + self.hand + self.discard + self.exhaust

    def locate(self, instance_id: str) -> ZoneName | None:
        for name in ZoneName:
            if any(c.instance_id == instance_id for c in self.zone(name)):
                return name
        return None

    def find_in_hand(self, instance_id: str) -> CardInstance | None:
        for card in self.hand:
            if card.instance_id == instance_id:
                return card
        return None

    def get_character(self, character_id: str) -> Character | None:
        for character in self.characters:
            if character.character_id == character_id:
                return character
        return None

    def living(self) -> list[Character]:
        return sorted(
            (c for c in self.characters if not c.defeated),
            key=lambda c: c.slot,
        )

    def at_slot(self, slot: int) -> Character | None:
        for character in self.characters:
            if character.slot == slot:
                return character
        return None

    @property
    def is_defeated(self) -> bool:
        return all(c.defeated for c in self.characters)


@dataclass
class QueuedAction:
    """
    A declared play waiting in its speed zone.

    Holds the effective definition (after transform) so later phases
    never re-run transform selection.
    """
    sequence: int
    team_id: str
    actor_id: str
    definition: CardDefinition
    zone: Speed
    targets: tuple[str, ...]
    x: int
    instance_id: str | None
    played_event_id: int
    power: int
    power_locked: bool = False
    cancelled: bool = False
    negated: bool = False
    hit: bool = True
    evaded: bool = False
    uses: int = 0
    retained: bool = False
    choice_answers: dict[str, list[list[str]]] = field(default_factory=dict)

    @property
    def category(self) -> CardCategory:
        return self.definition.category

    @property
    def primary_target(self) -> str | None:
        return self.targets[0] if self.targets else None

    @property
    def halted(self) -> bool:
        return self.cancelled or self.negated


@dataclass
class DelayedHook:
    """Turn End effects registered by a resolved card."""
    sequence: int
    team_id: str
    actor_id: str
    definition: CardDefinition
    targets: tuple[str, ...]
    power: int
    x: int
    choice_answers: dict[str, list[list[str]]] = field(default_factory=dict)


@dataclass
class CounterWindow:
    """Out-of-turn play granted by a Counter defense, valid for the next action only."""
    team_id: str
    attacker_id: str


@dataclass
class Match:
    """Complete state of one match."""
    seed: int
    rng: RngStream
    rules: RulesOptions
    rosters: dict[str, list[str]]
    teams: dict[str, Team] = field(default_factory=dict)

    phase: GamePhase = GamePhase.COMBAT
    turn: int = 1
    round: int = 1
    initiative: str = "p1"
    active_team: str = "p1"
    passes: int = 0

    round_locks: set[str] = field(default_factory=set)
    queue: list[QueuedAction] = field(default_factory=list)
    delayed: list[DelayedHook] = field(default_factory=list)
    next_sequence: int = 1
    next_instance: int = 1

    winner: str | None = None
    pending_choice: Any | None = None  # PendingChoice while a choice is asked
    counter_window: CounterWindow | None = None
    events: list[Any] = field(default_factory=list)  # ResolutionEvent log

    def clone(self) -> Match:
        """Deep copy for atomic application. Logged events are immutable and shared."""
        memo = {id(event): event for event in self.events}
        return deepcopy(self, memo)

    def get_team(self, team_id: str) -> Team:
        return self.teams[team_id]

    def opponent_of(self, team_id: str) -> str:
        return TEAM_IDS[1] if team_id == TEAM_IDS[0] else TEAM_IDS[0]

    def get_character(self, character_id: str) -> Character | None:
        for team in self.teams.values():
            found = team.get_character(character_id)
            if found:
                return found
        return None

    def all_characters(self) -> list[Character]:
        return [c for team_id in TEAM_IDS for c in self.teams[team_id].characters]

    def allocate_instance_id(self) -> str:
        instance_id = f"ci-{self.next_instance}"
        self.next_instance += 1
        return instance_id

    def allocate_sequence(self) -> int:
        sequence = self.next_sequence
        self.next_sequence += 1
        return sequence

    @property
    def is_finished(self) -> bool:
        return self.phase == GamePhase.FINISHED
