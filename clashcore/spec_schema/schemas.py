"""
Pydantic Schemas for authored game data.

These models define the exact JSON contract consumed from the external
data-export collaborator. They parse and type-check the raw document and
convert it into the frozen dataclasses of game_data. Structural problems
surface as DataIntegrityError, never as a half-built snapshot.
"""

from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from ..engine_core.errors import DataIntegrityError
from .effect_dsl import (
    Amount,
    AmountKind,
    CardDestination,
    Condition,
    ConditionKind,
    Effect,
    EffectType,
    PurgeKind,
    Recipient,
    SpendResource,
    StatusStat,
    Timing,
)
from .game_data import (
    CardCategory,
    CardCost,
    CardDefinition,
    CardTransform,
    CharacterDefinition,
    CoverScope,
    Disposition,
    GameData,
    HealingReduction,
    KeywordDefinition,
    KeywordTier,
    MatchMode,
    ModifierTarget,
    Restriction,
    RestrictionKind,
    RestrictionSubject,
    Speed,
    StatusDefinition,
    StatusMode,
    StatusModifier,
    StatusRequirement,
    TargetPattern,
    TickKind,
    TurnEndBehavior,
)
from .validation import require_valid


# =============================================================================
# Effects
# =============================================================================

class AmountModel(BaseModel):
    kind: AmountKind = AmountKind.FLAT
    value: int = 0

    def to_definition(self) -> Amount:
        return Amount(kind=self.kind, value=self.value)


class ConditionModel(BaseModel):
    kind: ConditionKind
    status: str = ""
    minimum: int = Field(default=1, ge=0)
    description: str = ""

    def to_definition(self) -> Condition:
        return Condition(
            kind=self.kind,
            status=self.status,
            minimum=self.minimum,
            description=self.description,
        )


class EffectModel(BaseModel):
    type: EffectType
    timing: Timing = Timing.ON_USE
    recipient: Recipient = Recipient.TARGET
    amount: Optional[AmountModel] = None
    status: str = ""
    stat: Optional[StatusStat] = None
    floor: int = Field(default=0, ge=0)
    purge: Optional[PurgeKind] = None
    condition: Optional[ConditionModel] = None
    children: list[EffectModel] = Field(default_factory=list)
    hits: Optional[AmountModel] = None
    options: list[list[EffectModel]] = Field(default_factory=list)
    resource: Optional[SpendResource] = None
    allow_partial: bool = False
    card_id: str = ""
    destination: CardDestination = CardDestination.HAND
    criteria: str = ""
    text: str = ""

    def to_definition(self) -> Effect:
        return Effect(
            effect_type=self.type,
            timing=self.timing,
            recipient=self.recipient,
            amount=self.amount.to_definition() if self.amount else None,
            status=self.status,
            stat=self.stat,
            floor=self.floor,
            purge=self.purge,
            condition=self.condition.to_definition() if self.condition else None,
            children=tuple(child.to_definition() for child in self.children),
            hits=self.hits.to_definition() if self.hits else None,
            options=tuple(
                tuple(effect.to_definition() for effect in option) for option in self.options
            ),
            resource=self.resource,
            allow_partial=self.allow_partial,
            card_id=self.card_id,
            destination=self.destination,
            criteria=self.criteria,
            text=self.text,
        )


EffectModel.model_rebuild()


# =============================================================================
# Cards
# =============================================================================

class CostModel(BaseModel):
    energy: int = Field(default=0, ge=0)
    ultimate: int = Field(default=0, ge=0)
    variable: Optional[str] = None
    variable_max: Optional[int] = Field(default=None, ge=0)


class StatusRequirementModel(BaseModel):
    name: str
    min: int = Field(default=1, ge=0)


class RestrictionModel(BaseModel):
    kind: RestrictionKind
    subject: RestrictionSubject
    statuses: list[StatusRequirementModel]
    mode: MatchMode = MatchMode.ANY
    text: str = ""

    def to_definition(self) -> Restriction:
        return Restriction(
            kind=self.kind,
            subject=self.subject,
            statuses=tuple(StatusRequirement(s.name, s.min) for s in self.statuses),
            mode=self.mode,
            text=self.text,
        )


class TransformModel(BaseModel):
    into: str
    condition: ConditionModel
    text: str = ""


class CardModel(BaseModel):
    id: str
    name: str
    category: CardCategory
    speed: Speed
    target: TargetPattern
    cost: CostModel = Field(default_factory=CostModel)
    power: int = Field(default=0, ge=0)
    power_max: Optional[int] = Field(default=None, ge=0)
    tags: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    effects: list[EffectModel] = Field(default_factory=list)
    restrictions: list[RestrictionModel] = Field(default_factory=list)
    transforms: list[TransformModel] = Field(default_factory=list)
    transform_only: bool = False
    bounce: int = Field(default=0, ge=0)
    text: str = ""

    def to_definition(self) -> CardDefinition:
        return CardDefinition(
            id=self.id,
            name=self.name,
            category=self.category,
            speed=self.speed,
            target=self.target,
            cost=CardCost(
                energy=self.cost.energy,
                ultimate=self.cost.ultimate,
                variable=self.cost.variable,
                variable_max=self.cost.variable_max,
            ),
            power=self.power,
            power_max=self.power_max,
            tags=tuple(self.tags),
            keywords=tuple(self.keywords),
            effects=tuple(e.to_definition() for e in self.effects),
            restrictions=tuple(r.to_definition() for r in self.restrictions),
            transforms=tuple(
                CardTransform(t.into, t.condition.to_definition(), t.text) for t in self.transforms
            ),
            transform_only=self.transform_only,
            bounce=self.bounce,
            text=self.text,
        )


class CharacterModel(BaseModel):
    id: str
    name: str
    max_hp: int = Field(default=100, gt=0)
    cards: list[CardModel] = Field(default_factory=list)

    def to_definition(self) -> CharacterDefinition:
        return CharacterDefinition(
            id=self.id,
            name=self.name,
            max_hp=self.max_hp,
            cards=tuple(card.to_definition() for card in self.cards),
        )


# =============================================================================
# Statuses and keywords
# =============================================================================

class ModifierModel(BaseModel):
    target: ModifierTarget
    per_point: int
    categories: list[CardCategory] = Field(default_factory=list)


class HealingReductionModel(BaseModel):
    percent_per_point: int = Field(default=0, ge=0)
    flat_per_point: int = Field(default=0, ge=0)


class StatusModel(BaseModel):
    kind: str
    mode: StatusMode
    potency_max: int = Field(default=0, ge=0)
    count_max: int = Field(default=0, ge=0)
    stack_max: int = Field(default=0, ge=0)
    value_max: int = Field(default=0, ge=0)
    turn_end: TurnEndBehavior = TurnEndBehavior.PERSIST
    tick: TickKind = TickKind.NONE
    disposition: Disposition = Disposition.NEUTRAL
    modifiers: list[ModifierModel] = Field(default_factory=list)
    healing_reduction: Optional[HealingReductionModel] = None
    blocks_tags: list[str] = Field(default_factory=list)
    blocks_all: bool = False
    cancels_defense: bool = False
    taunt: bool = False
    cover: Optional[CoverScope] = None
    invulnerable: bool = False
    absorbs: bool = False
    reflects: bool = False
    immobilizes: bool = False
    damages_on_play: bool = False
    description: str = ""

    def to_definition(self) -> StatusDefinition:
        reduction = None
        if self.healing_reduction:
            reduction = HealingReduction(
                self.healing_reduction.percent_per_point,
                self.healing_reduction.flat_per_point,
            )
        return StatusDefinition(
            kind=self.kind,
            mode=self.mode,
            potency_max=self.potency_max,
            count_max=self.count_max,
            stack_max=self.stack_max,
            value_max=self.value_max,
            turn_end=self.turn_end,
            tick=self.tick,
            disposition=self.disposition,
            modifiers=tuple(
                StatusModifier(m.target, m.per_point, tuple(m.categories)) for m in self.modifiers
            ),
            healing_reduction=reduction,
            blocks_tags=tuple(self.blocks_tags),
            blocks_all=self.blocks_all,
            cancels_defense=self.cancels_defense,
            taunt=self.taunt,
            cover=self.cover,
            invulnerable=self.invulnerable,
            absorbs=self.absorbs,
            reflects=self.reflects,
            immobilizes=self.immobilizes,
            damages_on_play=self.damages_on_play,
            description=self.description,
        )


class KeywordModel(BaseModel):
    id: str
    name: str
    tier: KeywordTier = KeywordTier.CORE
    description: str = ""


class GameDataModel(BaseModel):
    """Top-level authored data document."""
    version: str
    characters: list[CharacterModel]
    statuses: list[StatusModel]
    keywords: list[KeywordModel] = Field(default_factory=list)

    def to_definition(self) -> GameData:
        return GameData(
            version=self.version,
            characters=tuple(c.to_definition() for c in self.characters),
            statuses=tuple(s.to_definition() for s in self.statuses),
            keywords=tuple(
                KeywordDefinition(k.id, k.name, k.tier, k.description) for k in self.keywords
            ),
        )


# =============================================================================
# Loading
# =============================================================================

def load_game_data(raw: dict[str, Any]) -> GameData:
    """
    Parse, convert and integrity-check an authored data document.

    Raises DataIntegrityError if the document is structurally invalid or
    fails the reference checks.
    """
    try:
        model = GameDataModel.model_validate(raw)
    except ValidationError as e:
        raise DataIntegrityError(
            [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        ) from e
    data = model.to_definition()
    require_valid(data)
    return data


def load_game_data_file(path: str | Path) -> GameData:
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise DataIntegrityError([f"{path}: invalid JSON ({e})"]) from e
    return load_game_data(raw)
