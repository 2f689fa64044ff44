"""
Standard Statuses - The status and keyword catalogue.

Families:
- Damage over time (Bleed on play, Burn and Poison at Turn End)
- Heal over time (Regen, Renewal)
- Power, cost, speed and damage-taken modifiers
- Play blockers (Disarm, Silence, Seal, Stun) and Stagger
- Targeting (Taunt, Cover, Adjacent Cover) and Root
- Healing reduction (Wound, Wither)
- Mitigation (Barrier, Invulnerable) and Thorns

Every status carries a disposition; Taunt and the Cover family are neutral
and survive every purge.
"""

from ...spec_schema.game_data import (
    CardCategory,
    CoverScope,
    Disposition,
    HealingReduction,
    KeywordDefinition,
    KeywordTier,
    ModifierTarget,
    StatusDefinition,
    StatusMode,
    StatusModifier,
    TickKind,
    TurnEndBehavior,
)

ATTACKS = (CardCategory.ATTACK,)
DEFENSES = (CardCategory.DEFENSE,)
GOOD = Disposition.POSITIVE
BAD = Disposition.NEGATIVE


def _over_time(kind: str, tick: TickKind, turn_end: TurnEndBehavior, description: str,
               disposition: Disposition) -> StatusDefinition:
    return StatusDefinition(
        kind=kind,
        mode=StatusMode.POTENCY_COUNT,
        potency_max=20,
        count_max=10,
        turn_end=turn_end,
        tick=tick,
        disposition=disposition,
        description=description,
    )


def _stacking(kind: str, stack_max: int, description: str, **flags) -> StatusDefinition:
    """Decrement-by-one-stack-then-expire family."""
    return StatusDefinition(
        kind=kind,
        mode=StatusMode.STACK,
        stack_max=stack_max,
        turn_end=TurnEndBehavior.DECREMENT_STACK,
        description=description,
        **flags,
    )


def _modifier(kind: str, target: ModifierTarget, per_point: int, stack_max: int, disposition: Disposition,
              description: str, categories: tuple[CardCategory, ...] = ()) -> StatusDefinition:
    return _stacking(
        kind,
        stack_max,
        description,
        modifiers=(StatusModifier(target, per_point, categories),),
        disposition=disposition,
    )


STANDARD_STATUSES: tuple[StatusDefinition, ...] = (
    # Damage and healing over time
    StatusDefinition(
        kind="bleed",
        mode=StatusMode.POTENCY_COUNT,
        potency_max=20,
        count_max=10,
        turn_end=TurnEndBehavior.DECREMENT_COUNT,
        damages_on_play=True,
        disposition=BAD,
        description="Take potency damage whenever this character plays a card",
    ),
    _over_time("burn", TickKind.DAMAGE, TurnEndBehavior.HALVE_COUNT, "Take potency damage at Turn End", BAD),
    _over_time("poison", TickKind.DAMAGE, TurnEndBehavior.HALVE_COUNT, "Take potency damage at Turn End", BAD),
    _over_time("regen", TickKind.HEAL, TurnEndBehavior.DECREMENT_COUNT, "Heal potency at Turn End", GOOD),
    _over_time("renewal", TickKind.HEAL, TurnEndBehavior.HALVE_COUNT, "Heal potency at Turn End", GOOD),

    # Modifiers
    _modifier("strength", ModifierTarget.POWER, 10, 10, GOOD, "+10% attack power per stack", ATTACKS),
    _modifier("weak", ModifierTarget.POWER, -10, 5, BAD, "-10% attack power per stack", ATTACKS),
    _modifier("dexterity", ModifierTarget.POWER, 10, 10, GOOD, "+10% defense power per stack", DEFENSES),
    _modifier("frail", ModifierTarget.POWER, -10, 5, BAD, "-10% defense power per stack", DEFENSES),
    _modifier("vulnerable", ModifierTarget.DAMAGE_TAKEN, 10, 5, BAD, "+10% damage taken per stack"),
    _modifier("fortified", ModifierTarget.DAMAGE_TAKEN, -10, 5, GOOD, "-10% damage taken per stack"),
    _modifier("strain", ModifierTarget.COST, 1, 3, BAD, "Cards cost 1 more energy per stack"),
    _modifier("focus", ModifierTarget.COST, -1, 3, GOOD, "Cards cost 1 less energy per stack"),
    _modifier("haste", ModifierTarget.SPEED, 1, 2, GOOD, "Cards are one zone faster per stack"),
    _modifier("slow", ModifierTarget.SPEED, -1, 2, BAD, "Cards are one zone slower per stack"),

    # Blockers
    _stacking("disarm", 3, "Cannot play physical cards", disposition=BAD, blocks_tags=("physical",)),
    _stacking("silence", 3, "Cannot play magical cards", disposition=BAD, blocks_tags=("magical",)),
    _stacking("seal", 3, "Cannot play special cards", disposition=BAD, blocks_tags=("special",)),
    _stacking("stun", 1, "Cannot play any card", disposition=BAD, blocks_all=True),
    _stacking("stagger", 3, "The next defense is cancelled", disposition=BAD, cancels_defense=True),

    # Targeting and position
    _stacking("taunt", 3, "Single-target enemy attacks must target this character", taunt=True),
    _stacking("root", 3, "Cannot swap or be pushed", disposition=BAD, immobilizes=True),
    StatusDefinition(
        kind="cover",
        mode=StatusMode.VALUE,
        value_max=3,
        turn_end=TurnEndBehavior.EXPIRE,
        cover=CoverScope.ALL,
        description="Intercept single-target attacks aimed at any ally",
    ),
    StatusDefinition(
        kind="adjacent_cover",
        mode=StatusMode.VALUE,
        value_max=3,
        turn_end=TurnEndBehavior.EXPIRE,
        cover=CoverScope.ADJACENT,
        description="Intercept single-target attacks aimed at an adjacent ally",
    ),

    # Healing reduction
    _stacking(
        "wound", 10, "Healing received is reduced by 10% per stack", disposition=BAD,
        healing_reduction=HealingReduction(percent_per_point=10),
    ),
    _stacking(
        "wither", 10, "Healing received is reduced by 1 per stack", disposition=BAD,
        healing_reduction=HealingReduction(flat_per_point=1),
    ),

    # Mitigation
    StatusDefinition(
        kind="barrier",
        mode=StatusMode.VALUE,
        value_max=99,
        turn_end=TurnEndBehavior.PERSIST,
        absorbs=True,
        disposition=GOOD,
        description="Absorbs damage until its value is consumed",
    ),
    StatusDefinition(
        kind="invulnerable",
        mode=StatusMode.VALUE,
        value_max=3,
        turn_end=TurnEndBehavior.DECREMENT_VALUE,
        invulnerable=True,
        disposition=GOOD,
        description="Prevents all damage for value turns",
    ),
    StatusDefinition(
        kind="thorns",
        mode=StatusMode.STACK,
        stack_max=10,
        turn_end=TurnEndBehavior.DECREMENT_STACK,
        reflects=True,
        disposition=GOOD,
        description="Reflect stack damage to the attacker after each connecting hit",
    ),
)


STANDARD_KEYWORDS: tuple[KeywordDefinition, ...] = (
    KeywordDefinition("innate", "Innate", description="Starts the match in hand"),
    KeywordDefinition("retain", "Retain", description="Stays in hand at Turn End"),
    KeywordDefinition("ethereal", "Ethereal", description="Exhausted if still in hand at Turn End"),
    KeywordDefinition("exhaust", "Exhaust", description="Exhausted after use"),
    KeywordDefinition(
        "evade", "Evade", KeywordTier.ADVANCED,
        "An attack clashing into this defense misses when it is not stronger; the defense then stays for one more step",
    ),
    KeywordDefinition(
        "negate", "Negate", KeywordTier.ADVANCED,
        "Negates a clashing card that lacks Negate",
    ),
    KeywordDefinition(
        "counter", "Counter", KeywordTier.ADVANCED,
        "A defense that fully blocks a clashing attack lets its team answer out of turn against the attacker",
    ),
    KeywordDefinition(
        "reuse", "Reuse", KeywordTier.ADVANCED,
        "Stays in its zone after use and resolves once more in the next step",
    ),
)


def standard_statuses() -> tuple[tuple[StatusDefinition, ...], tuple[KeywordDefinition, ...]]:
    """The status and keyword catalogue."""
    return STANDARD_STATUSES, STANDARD_KEYWORDS
