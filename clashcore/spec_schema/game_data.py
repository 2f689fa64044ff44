"""
Game Data - Immutable authored definitions for characters, cards,
statuses and keywords.

A GameData instance is a versioned snapshot loaded once at match setup
and passed by reference into every engine component. Nothing in the
engine mutates it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .effect_dsl import Condition, Effect, StatusStat


class Speed(Enum):
    """Speed zones, fastest first."""
    FAST = "fast"
    NORMAL = "normal"
    SLOW = "slow"

    @property
    def rank(self) -> int:
        return {Speed.SLOW: 0, Speed.NORMAL: 1, Speed.FAST: 2}[self]

    @classmethod
    def from_rank(cls, rank: int) -> Speed:
        rank = max(0, min(rank, 2))
        return {0: cls.SLOW, 1: cls.NORMAL, 2: cls.FAST}[rank]

    def legal_zones(self) -> tuple[Speed, ...]:
        """A card may be declared into its own zone or any slower one."""
        return tuple(zone for zone in ZONE_ORDER if zone.rank <= self.rank)


ZONE_ORDER: tuple[Speed, ...] = (Speed.FAST, Speed.NORMAL, Speed.SLOW)


class CardCategory(Enum):
    ATTACK = "attack"
    DEFENSE = "defense"
    SPECIAL = "special"


class TargetPattern(Enum):
    SELF = "self"
    ENEMY = "enemy"
    ALLY = "ally"
    ALL_ENEMIES = "all_enemies"
    ALL_ALLIES = "all_allies"
    RANDOM_ENEMY = "random_enemy"
    OPPOSED = "opposed"

    @property
    def takes_declared_target(self) -> bool:
        return self in (TargetPattern.SELF, TargetPattern.ENEMY, TargetPattern.ALLY)


# Tags that exempt a single-target enemy attack from Taunt and Cover
AREA_TAGS = frozenset({"random", "aoe", "splash", "bounce"})


class StatusMode(Enum):
    POTENCY_COUNT = "potency_count"
    STACK = "stack"
    VALUE = "value"

    @property
    def primary_stat(self) -> StatusStat:
        return {
            StatusMode.POTENCY_COUNT: StatusStat.POTENCY,
            StatusMode.STACK: StatusStat.STACK,
            StatusMode.VALUE: StatusStat.VALUE,
        }[self]


class TurnEndBehavior(Enum):
    PERSIST = "persist"
    DECREMENT_COUNT = "decrement_count"
    DECREMENT_STACK = "decrement_stack"
    DECREMENT_VALUE = "decrement_value"
    HALVE_COUNT = "halve_count"
    EXPIRE = "expire"


class TickKind(Enum):
    """What a status does at Turn End before it decays."""
    NONE = "none"
    DAMAGE = "damage"
    HEAL = "heal"


class Disposition(Enum):
    """Whether a status helps or hinders its bearer. Purge effects read it."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class ModifierTarget(Enum):
    COST = "cost"
    SPEED = "speed"
    POWER = "power"
    DAMAGE_TAKEN = "damage_taken"


class CoverScope(Enum):
    ALL = "all"
    ADJACENT = "adjacent"


class RestrictionKind(Enum):
    REQUIRE = "require"
    FORBID = "forbid"


class RestrictionSubject(Enum):
    SELF = "self"
    TARGET = "target"


class MatchMode(Enum):
    ANY = "any"
    ALL = "all"


class KeywordTier(Enum):
    CORE = "core"
    ADVANCED = "advanced"


# =============================================================================
# Cards
# =============================================================================

@dataclass(frozen=True)
class CardCost:
    """
    Base cost plus an optional variable (X) component.

    The base part is a hard precondition for play. The variable part is
    paid on top in the named resource and never replaces the base.
    """
    energy: int = 0
    ultimate: int = 0
    variable: str | None = None  # "energy" or "ultimate"
    variable_max: int | None = None


@dataclass(frozen=True)
class StatusRequirement:
    status: str
    minimum: int = 1


@dataclass(frozen=True)
class Restriction:
    """Structured play restriction. `text` is kept for audit only."""
    kind: RestrictionKind
    subject: RestrictionSubject
    statuses: tuple[StatusRequirement, ...]
    mode: MatchMode = MatchMode.ANY
    text: str = ""


@dataclass(frozen=True)
class CardTransform:
    """A transform candidate: becomes `into` while `condition` holds."""
    into: str
    condition: Condition
    text: str = ""


@dataclass(frozen=True)
class CardDefinition:
    id: str
    name: str
    category: CardCategory
    speed: Speed
    target: TargetPattern
    cost: CardCost = field(default_factory=CardCost)
    power: int = 0
    power_max: int | None = None  # rolled in [power, power_max] at declaration
    tags: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    effects: tuple[Effect, ...] = ()
    restrictions: tuple[Restriction, ...] = ()
    transforms: tuple[CardTransform, ...] = ()
    transform_only: bool = False
    bounce: int = 0
    text: str = ""

    @property
    def is_ultimate(self) -> bool:
        return self.cost.ultimate > 0

    def has_keyword(self, keyword: str) -> bool:
        return keyword in self.keywords

    def matches(self, criteria: str) -> bool:
        """Seek/search filter: id, category or tag."""
        if not criteria:
            return True
        return criteria in (self.id, self.category.value) or criteria in self.tags


# =============================================================================
# Statuses and keywords
# =============================================================================

@dataclass(frozen=True)
class StatusModifier:
    """
    Additive modifier contributed by each point of a status.

    For POWER and DAMAGE_TAKEN the unit is percent, for COST and SPEED
    it is a flat step. An empty `categories` applies to every card.
    """
    target: ModifierTarget
    per_point: int
    categories: tuple[CardCategory, ...] = ()


@dataclass(frozen=True)
class HealingReduction:
    percent_per_point: int = 0
    flat_per_point: int = 0


@dataclass(frozen=True)
class StatusDefinition:
    kind: str
    mode: StatusMode
    potency_max: int = 0
    count_max: int = 0
    stack_max: int = 0
    value_max: int = 0
    turn_end: TurnEndBehavior = TurnEndBehavior.PERSIST
    tick: TickKind = TickKind.NONE
    disposition: Disposition = Disposition.NEUTRAL
    modifiers: tuple[StatusModifier, ...] = ()
    healing_reduction: HealingReduction | None = None
    blocks_tags: tuple[str, ...] = ()
    blocks_all: bool = False
    cancels_defense: bool = False
    taunt: bool = False
    cover: CoverScope | None = None
    invulnerable: bool = False
    absorbs: bool = False
    reflects: bool = False
    immobilizes: bool = False
    damages_on_play: bool = False
    description: str = ""

    @property
    def primary_stat(self) -> StatusStat:
        return self.mode.primary_stat

    def cap(self, stat: StatusStat) -> int:
        return {
            StatusStat.POTENCY: self.potency_max,
            StatusStat.COUNT: self.count_max,
            StatusStat.STACK: self.stack_max,
            StatusStat.VALUE: self.value_max,
        }[stat]


@dataclass(frozen=True)
class KeywordDefinition:
    id: str
    name: str
    tier: KeywordTier = KeywordTier.CORE
    description: str = ""


# =============================================================================
# Characters and the snapshot
# =============================================================================

@dataclass(frozen=True)
class CharacterDefinition:
    id: str
    name: str
    max_hp: int = 100
    cards: tuple[CardDefinition, ...] = ()

    def get_card(self, card_id: str) -> CardDefinition | None:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None


@dataclass(frozen=True)
class GameData:
    """Versioned, immutable snapshot of all authored data."""
    version: str
    characters: tuple[CharacterDefinition, ...]
    statuses: tuple[StatusDefinition, ...]
    keywords: tuple[KeywordDefinition, ...] = ()

    _characters_by_id: dict[str, CharacterDefinition] = field(
        init=False, repr=False, compare=False,
    )
    _statuses_by_kind: dict[str, StatusDefinition] = field(
        init=False, repr=False, compare=False,
    )

    def __post_init__(self):
        object.__setattr__(self, "_characters_by_id", {c.id: c for c in self.characters})
        object.__setattr__(self, "_statuses_by_kind", {s.kind: s for s in self.statuses})

    def get_character(self, character_id: str) -> CharacterDefinition | None:
        return self._characters_by_id.get(character_id)

    def get_status(self, kind: str) -> StatusDefinition | None:
        return self._statuses_by_kind.get(kind)

    def get_card(self, character_id: str, card_id: str) -> CardDefinition | None:
        character = self.get_character(character_id)
        if not character:
            return None
        return character.get_card(card_id)

    def keyword_ids(self) -> set[str]:
        return {k.id for k in self.keywords}
