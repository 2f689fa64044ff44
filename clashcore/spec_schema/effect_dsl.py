"""
Effect DSL - Structured effect trees for card behaviour.

Effects are:
- Tagged variants: a closed set of EffectType values, no free text
- Composable: Condition, Multihit, Spend and Choose carry child effects
- Phase-bound: each top-level effect declares the Timing it fires in
- Deterministic: given the same state and choices, produce the same result

Mechanics the engine does not model yet are written as an explicit
UNMODELED effect that keeps its authored text for audit and never
mutates state.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class Timing(Enum):
    """Named phases of an action's lifecycle, in firing order."""
    ON_PLAY = "on_play"
    BEFORE_CLASH = "before_clash"
    AFTER_CLASH = "after_clash"
    BEFORE_USE = "before_use"
    ON_USE = "on_use"
    ON_HIT = "on_hit"
    AFTER_USE = "after_use"
    ALWAYS = "always"
    TURN_END = "turn_end"


PHASE_ORDER: tuple[Timing, ...] = tuple(Timing)


class EffectType(Enum):
    """Closed set of effect variants."""
    # Control flow
    CONDITION = "condition"
    MULTIHIT = "multihit"
    SPEND = "spend"
    CHOOSE = "choose"

    # Numeric
    DAMAGE = "damage"
    SHIELD = "shield"
    HEAL = "heal"
    GAIN_ULTIMATE = "gain_ultimate"
    GAIN_ENERGY = "gain_energy"

    # Status
    APPLY_STATUS = "apply_status"
    SET_STATUS = "set_status"
    REDUCE_STATUS = "reduce_status"
    PURGE = "purge"

    # Cards
    DRAW = "draw"
    CREATE_CARD = "create_card"
    SCRY = "scry"
    SEEK = "seek"
    SEARCH = "search"

    # Match
    BLOCK_PLAY = "block_play"
    PUSH = "push"

    UNMODELED = "unmodeled"


class StatusStat(Enum):
    """The four numeric dimensions a status may track."""
    POTENCY = "potency"
    COUNT = "count"
    STACK = "stack"
    VALUE = "value"


class Recipient(Enum):
    """Who an effect lands on."""
    SELF = "self"
    TARGET = "target"
    ALL_ALLIES = "all_allies"
    ALL_ENEMIES = "all_enemies"


class AmountKind(Enum):
    FLAT = "flat"
    POWER = "power"
    POWER_DIV = "power_div"
    X = "x"
    X_PLUS = "x_plus"
    X_MINUS = "x_minus"
    X_TIMES = "x_times"


class SpendResource(Enum):
    ENERGY = "energy"
    ULTIMATE = "ultimate"
    CARD = "card"
    STATUS = "status"


class ConditionKind(Enum):
    SELF_HAS_STATUS = "self_has_status"
    SELF_MISSING_STATUS = "self_missing_status"
    TARGET_HAS_STATUS = "target_has_status"
    TARGET_MISSING_STATUS = "target_missing_status"
    SELF_HP_AT_MOST = "self_hp_at_most"


class PurgeKind(Enum):
    """Which status dispositions a purge effect removes."""
    CLEANSE = "cleanse"  # negative
    DISPEL = "dispel"  # positive
    PURGE = "purge"  # both


class CardDestination(Enum):
    HAND = "hand"
    DISCARD = "discard"
    DECK = "deck"


@dataclass(frozen=True)
class Amount:
    """
    A numeric amount resolved against the action's power and X.

    Examples:
    - Amount.flat(3)           -> 3
    - Amount(AmountKind.POWER) -> action power
    - Amount(AmountKind.X_TIMES, 2) -> 2 * X
    """
    kind: AmountKind = AmountKind.FLAT
    value: int = 0

    @classmethod
    def flat(cls, value: int) -> Amount:
        return cls(AmountKind.FLAT, value)

    @classmethod
    def of_power(cls) -> Amount:
        return cls(AmountKind.POWER)

    def resolve(self, power: int, x: int) -> int:
        if self.kind == AmountKind.FLAT:
            result = self.value
        elif self.kind == AmountKind.POWER:
            result = power
        elif self.kind == AmountKind.POWER_DIV:
            result = power // self.value if self.value else 0
        elif self.kind == AmountKind.X:
            result = x
        elif self.kind == AmountKind.X_PLUS:
            result = x + self.value
        elif self.kind == AmountKind.X_MINUS:
            result = x - self.value
        else:
            result = x * self.value
        return max(0, result)


@dataclass(frozen=True)
class Condition:
    """A predicate over current match state."""
    kind: ConditionKind
    status: str = ""
    minimum: int = 1
    description: str = ""


@dataclass(frozen=True)
class Effect:
    """
    One node of a structured effect tree.

    Only the fields relevant to the effect_type are read by the engine;
    validation checks the required ones are present.
    """
    effect_type: EffectType
    timing: Timing = Timing.ON_USE
    recipient: Recipient = Recipient.TARGET
    amount: Amount | None = None

    # Status effects
    status: str = ""
    stat: StatusStat | None = None
    floor: int = 0
    purge: PurgeKind | None = None

    # Control flow
    condition: Condition | None = None
    children: tuple[Effect, ...] = ()
    hits: Amount | None = None
    options: tuple[tuple[Effect, ...], ...] = ()

    # Spend
    resource: SpendResource | None = None
    allow_partial: bool = False

    # Cards
    card_id: str = ""
    destination: CardDestination = CardDestination.HAND
    criteria: str = ""

    # Audit text (the only content of UNMODELED effects)
    text: str = ""


# =============================================================================
# Factory functions for common effects
# =============================================================================

def damage(amount: Amount | int, timing: Timing = Timing.ON_HIT,
           recipient: Recipient = Recipient.TARGET) -> Effect:
    """Deal damage through the mitigation pipeline. Lands On Hit by default."""
    return Effect(EffectType.DAMAGE, timing=timing, recipient=recipient, amount=_amount(amount))


def shield(amount: Amount | int, timing: Timing = Timing.ON_USE,
           recipient: Recipient = Recipient.SELF) -> Effect:
    return Effect(EffectType.SHIELD, timing=timing, recipient=recipient, amount=_amount(amount))


def heal(amount: Amount | int, timing: Timing = Timing.ON_USE,
         recipient: Recipient = Recipient.SELF) -> Effect:
    return Effect(EffectType.HEAL, timing=timing, recipient=recipient, amount=_amount(amount))


def apply_status(status: str, amount: Amount | int, stat: StatusStat | None = None,
                 recipient: Recipient = Recipient.TARGET,
                 timing: Timing = Timing.ON_USE) -> Effect:
    """Gain (recipient SELF) or inflict (recipient TARGET) a status."""
    return Effect(
        EffectType.APPLY_STATUS,
        timing=timing,
        recipient=recipient,
        amount=_amount(amount),
        status=status,
        stat=stat,
    )


def set_status(status: str, value: int, stat: StatusStat | None = None,
               recipient: Recipient = Recipient.TARGET,
               timing: Timing = Timing.ON_USE) -> Effect:
    return Effect(
        EffectType.SET_STATUS,
        timing=timing,
        recipient=recipient,
        amount=Amount.flat(value),
        status=status,
        stat=stat,
    )


def reduce_status(status: str, amount: Amount | int, stat: StatusStat | None = None,
                  floor: int = 0, recipient: Recipient = Recipient.TARGET,
                  timing: Timing = Timing.ON_USE) -> Effect:
    return Effect(
        EffectType.REDUCE_STATUS,
        timing=timing,
        recipient=recipient,
        amount=_amount(amount),
        status=status,
        stat=stat,
        floor=floor,
    )


def purge(kind: PurgeKind, status: str = "", amount: Amount | int | None = None,
          recipient: Recipient = Recipient.TARGET,
          timing: Timing = Timing.ON_USE) -> Effect:
    """
    Remove statuses by disposition.

    An empty `status` means every matching status. Without an amount the
    status is removed outright, otherwise its primary stat is reduced.
    Neutral statuses are never touched.
    """
    return Effect(
        EffectType.PURGE,
        timing=timing,
        recipient=recipient,
        amount=_amount(amount) if amount is not None else None,
        status=status,
        purge=kind,
    )


def spend(resource: SpendResource, amount: Amount | int, children: list[Effect],
          status: str = "", allow_partial: bool = False,
          timing: Timing = Timing.ON_USE) -> Effect:
    """Optional payment gating child effects."""
    return Effect(
        EffectType.SPEND,
        timing=timing,
        recipient=Recipient.SELF,
        amount=_amount(amount),
        resource=resource,
        status=status,
        allow_partial=allow_partial,
        children=tuple(children),
    )


def conditional(condition: Condition, children: list[Effect],
                timing: Timing = Timing.ON_USE) -> Effect:
    return Effect(
        EffectType.CONDITION,
        timing=timing,
        condition=condition,
        children=tuple(children),
    )


def multihit(hits: Amount | int, children: list[Effect],
             timing: Timing = Timing.ON_USE) -> Effect:
    return Effect(
        EffectType.MULTIHIT,
        timing=timing,
        hits=_amount(hits),
        children=tuple(children),
    )


def choose(*options: list[Effect], timing: Timing = Timing.ON_USE) -> Effect:
    return Effect(
        EffectType.CHOOSE,
        timing=timing,
        options=tuple(tuple(option) for option in options),
    )


def draw(count: int = 1, timing: Timing = Timing.ON_USE) -> Effect:
    return Effect(EffectType.DRAW, timing=timing, recipient=Recipient.SELF, amount=Amount.flat(count))


def create_card(card_id: str, destination: CardDestination = CardDestination.HAND,
                count: int = 1, timing: Timing = Timing.ON_USE) -> Effect:
    return Effect(
        EffectType.CREATE_CARD,
        timing=timing,
        recipient=Recipient.SELF,
        amount=Amount.flat(count),
        card_id=card_id,
        destination=destination,
    )


def scry(count: int, timing: Timing = Timing.ON_USE) -> Effect:
    return Effect(EffectType.SCRY, timing=timing, recipient=Recipient.SELF, amount=Amount.flat(count))


def seek(count: int, criteria: str, timing: Timing = Timing.ON_USE) -> Effect:
    return Effect(
        EffectType.SEEK,
        timing=timing,
        recipient=Recipient.SELF,
        amount=Amount.flat(count),
        criteria=criteria,
    )


def search(criteria: str, timing: Timing = Timing.ON_USE) -> Effect:
    return Effect(EffectType.SEARCH, timing=timing, recipient=Recipient.SELF, criteria=criteria)


def block_play(timing: Timing = Timing.ON_USE) -> Effect:
    """Lock the target's team out of declaring cards for the rest of the round."""
    return Effect(EffectType.BLOCK_PLAY, timing=timing)


def push(timing: Timing = Timing.ON_HIT) -> Effect:
    return Effect(EffectType.PUSH, timing=timing)


def gain_ultimate(amount: Amount | int, timing: Timing = Timing.ON_USE) -> Effect:
    return Effect(EffectType.GAIN_ULTIMATE, timing=timing, recipient=Recipient.SELF, amount=_amount(amount))


def gain_energy(amount: Amount | int, timing: Timing = Timing.ON_USE) -> Effect:
    return Effect(EffectType.GAIN_ENERGY, timing=timing, recipient=Recipient.SELF, amount=_amount(amount))


def unmodeled(text: str, timing: Timing = Timing.ON_USE) -> Effect:
    return Effect(EffectType.UNMODELED, timing=timing, text=text)


def _amount(value: Amount | int) -> Amount:
    if isinstance(value, Amount):
        return value
    return Amount.flat(value)


def walk_effects(effects: tuple[Effect, ...] | list[Effect]):
    """Yield every effect in a tree, depth first."""
    for effect in effects:
        yield effect
        yield from walk_effects(effect.children)
        for option in effect.options:
            yield from walk_effects(option)
