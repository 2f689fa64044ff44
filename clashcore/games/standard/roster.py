"""
Standard Roster - Character and card definitions.

Six characters, three per side in the demo match. Cards are written in
the effect DSL; nothing here is executable per-card code.

Card structure:
- Category (attack, defense, special), speed and target pattern
- Cost (energy, ultimate, optional variable X)
- Power, tags (physical, magical, area tags) and keywords
- Effect tree, restrictions and transforms
"""

from ...spec_schema.effect_dsl import (
    Amount,
    AmountKind,
    CardDestination,
    Condition,
    ConditionKind,
    PurgeKind,
    Recipient,
    SpendResource,
    StatusStat,
    Timing,
    apply_status,
    choose,
    conditional,
    create_card,
    damage,
    draw,
    gain_energy,
    gain_ultimate,
    heal,
    multihit,
    purge,
    push,
    reduce_status,
    scry,
    search,
    seek,
    set_status,
    shield,
    spend,
    unmodeled,
    block_play,
)
from ...spec_schema.game_data import (
    CardCategory,
    CardCost,
    CardDefinition,
    CardTransform,
    CharacterDefinition,
    MatchMode,
    Restriction,
    RestrictionKind,
    RestrictionSubject,
    Speed,
    StatusRequirement,
    TargetPattern,
)

ATTACK = CardCategory.ATTACK
DEFENSE = CardCategory.DEFENSE
SPECIAL = CardCategory.SPECIAL

POWER = Amount.of_power()


# ============================================================================
# Vanguard
# ============================================================================

VANGUARD = CharacterDefinition(
    id="vanguard",
    name="Vanguard",
    max_hp=120,
    cards=(
        CardDefinition(
            id="strike",
            name="Strike",
            category=ATTACK,
            speed=Speed.NORMAL,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=1),
            power=8,
            tags=("physical",),
            effects=(damage(POWER),),
        ),
        CardDefinition(
            id="shoulder_charge",
            name="Shoulder Charge",
            category=ATTACK,
            speed=Speed.NORMAL,
            target=TargetPattern.OPPOSED,
            cost=CardCost(energy=1),
            power=7,
            tags=("physical",),
            effects=(damage(POWER),),
            text="Deal 7 damage to the enemy opposite",
        ),
        CardDefinition(
            id="shield_wall",
            name="Shield Wall",
            category=DEFENSE,
            speed=Speed.NORMAL,
            target=TargetPattern.SELF,
            cost=CardCost(energy=1),
            power=6,
            tags=("physical",),
            effects=(shield(POWER),),
        ),
        CardDefinition(
            id="provoke",
            name="Provoke",
            category=SPECIAL,
            speed=Speed.FAST,
            target=TargetPattern.SELF,
            cost=CardCost(energy=1),
            effects=(apply_status("taunt", 1, recipient=Recipient.SELF),),
        ),
        CardDefinition(
            id="guardian_stance",
            name="Guardian Stance",
            category=SPECIAL,
            speed=Speed.NORMAL,
            target=TargetPattern.SELF,
            cost=CardCost(energy=2),
            keywords=("retain",),
            effects=(apply_status("cover", 1, recipient=Recipient.SELF),),
        ),
        CardDefinition(
            id="crushing_blow",
            name="Crushing Blow",
            category=ATTACK,
            speed=Speed.SLOW,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=2),
            power=14,
            tags=("physical",),
            effects=(damage(POWER), apply_status("stagger", 1, timing=Timing.ON_HIT)),
            transforms=(
                CardTransform(
                    into="crushing_blow_empowered",
                    condition=Condition(ConditionKind.SELF_HAS_STATUS, "strength", 3),
                    text="With 3+ Strength this becomes Crushing Blow+",
                ),
            ),
        ),
        CardDefinition(
            id="crushing_blow_empowered",
            name="Crushing Blow+",
            category=ATTACK,
            speed=Speed.SLOW,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=2),
            power=18,
            tags=("physical",),
            effects=(
                damage(POWER),
                apply_status("stagger", 1, timing=Timing.ON_HIT),
                apply_status("vulnerable", 2, timing=Timing.ON_HIT),
            ),
            transform_only=True,
        ),
        CardDefinition(
            id="last_bastion",
            name="Last Bastion",
            category=SPECIAL,
            speed=Speed.FAST,
            target=TargetPattern.ALL_ALLIES,
            cost=CardCost(ultimate=8),
            effects=(apply_status("barrier", 10, recipient=Recipient.ALL_ALLIES),),
        ),
    ),
)


# ============================================================================
# Mystic
# ============================================================================

MYSTIC = CharacterDefinition(
    id="mystic",
    name="Mystic",
    max_hp=90,
    cards=(
        CardDefinition(
            id="arcane_bolt",
            name="Arcane Bolt",
            category=ATTACK,
            speed=Speed.FAST,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=1),
            power=6,
            tags=("magical",),
            effects=(damage(POWER),),
        ),
        CardDefinition(
            id="wild_surge",
            name="Wild Surge",
            category=ATTACK,
            speed=Speed.NORMAL,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=1),
            power=2,
            power_max=10,
            tags=("magical",),
            effects=(damage(POWER),),
            text="Deal 2-10 damage",
        ),
        CardDefinition(
            id="flame_lance",
            name="Flame Lance",
            category=ATTACK,
            speed=Speed.NORMAL,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=2),
            power=7,
            tags=("magical",),
            effects=(
                damage(POWER),
                apply_status("burn", 3, timing=Timing.ON_HIT),
                apply_status("burn", 1, stat=StatusStat.COUNT, timing=Timing.ON_HIT),
            ),
        ),
        CardDefinition(
            id="chain_lightning",
            name="Chain Lightning",
            category=ATTACK,
            speed=Speed.NORMAL,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=2),
            power=5,
            tags=("magical", "bounce"),
            bounce=2,
            effects=(damage(POWER),),
        ),
        CardDefinition(
            id="mana_surge",
            name="Mana Surge",
            category=SPECIAL,
            speed=Speed.NORMAL,
            target=TargetPattern.SELF,
            keywords=("exhaust",),
            effects=(gain_energy(1), draw(1)),
        ),
        CardDefinition(
            id="foresight",
            name="Foresight",
            category=SPECIAL,
            speed=Speed.FAST,
            target=TargetPattern.SELF,
            cost=CardCost(energy=1),
            keywords=("innate",),
            effects=(scry(3), draw(1)),
        ),
        CardDefinition(
            id="hex",
            name="Hex",
            category=SPECIAL,
            speed=Speed.NORMAL,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=1),
            tags=("magical",),
            effects=(apply_status("weak", 2), apply_status("wither", 3)),
        ),
        CardDefinition(
            id="meteor",
            name="Meteor",
            category=ATTACK,
            speed=Speed.SLOW,
            target=TargetPattern.ALL_ENEMIES,
            cost=CardCost(ultimate=10, variable="ultimate", variable_max=5),
            power=12,
            tags=("magical", "aoe"),
            effects=(damage(Amount(AmountKind.X_PLUS, 12)),),
            text="Deal 12 + X damage to all enemies",
        ),
    ),
)


# ============================================================================
# Warden
# ============================================================================

WARDEN = CharacterDefinition(
    id="warden",
    name="Warden",
    max_hp=110,
    cards=(
        CardDefinition(
            id="parry",
            name="Parry",
            category=DEFENSE,
            speed=Speed.FAST,
            target=TargetPattern.SELF,
            cost=CardCost(energy=1),
            power=8,
            keywords=("evade",),
            effects=(shield(Amount(AmountKind.POWER_DIV, 2)),),
        ),
        CardDefinition(
            id="riposte",
            name="Riposte",
            category=DEFENSE,
            speed=Speed.NORMAL,
            target=TargetPattern.SELF,
            cost=CardCost(energy=1),
            power=7,
            tags=("physical",),
            keywords=("counter",),
            effects=(shield(POWER),),
            text="Gain 7 shield. Counter",
        ),
        CardDefinition(
            id="counter_ward",
            name="Counter Ward",
            category=DEFENSE,
            speed=Speed.NORMAL,
            target=TargetPattern.SELF,
            cost=CardCost(energy=2),
            power=10,
            tags=("magical",),
            keywords=("negate",),
            effects=(shield(POWER),),
        ),
        CardDefinition(
            id="thorn_mail",
            name="Thorn Mail",
            category=SPECIAL,
            speed=Speed.NORMAL,
            target=TargetPattern.SELF,
            cost=CardCost(energy=1),
            effects=(apply_status("thorns", 2, recipient=Recipient.SELF),),
        ),
        CardDefinition(
            id="thorn_burst",
            name="Thorn Burst",
            category=ATTACK,
            speed=Speed.NORMAL,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=1),
            power=4,
            tags=("physical",),
            effects=(
                damage(POWER),
                spend(SpendResource.STATUS, 2, [damage(6)], status="thorns", timing=Timing.ON_HIT),
            ),
        ),
        CardDefinition(
            id="interpose",
            name="Interpose",
            category=SPECIAL,
            speed=Speed.FAST,
            target=TargetPattern.SELF,
            cost=CardCost(energy=1),
            keywords=("retain",),
            effects=(set_status("adjacent_cover", 2, recipient=Recipient.SELF),),
        ),
        CardDefinition(
            id="rooting_slam",
            name="Rooting Slam",
            category=ATTACK,
            speed=Speed.NORMAL,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=2),
            power=9,
            tags=("physical", "splash"),
            effects=(damage(POWER), apply_status("root", 1, timing=Timing.ON_HIT)),
        ),
        CardDefinition(
            id="aegis",
            name="Aegis",
            category=SPECIAL,
            speed=Speed.FAST,
            target=TargetPattern.ALLY,
            cost=CardCost(ultimate=8),
            effects=(apply_status("invulnerable", 1),),
        ),
    ),
)


# ============================================================================
# Striker
# ============================================================================

STRIKER = CharacterDefinition(
    id="striker",
    name="Striker",
    max_hp=95,
    cards=(
        CardDefinition(
            id="flurry",
            name="Flurry",
            category=ATTACK,
            speed=Speed.FAST,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=2),
            power=3,
            tags=("physical",),
            effects=(multihit(3, [damage(POWER)], timing=Timing.ON_HIT),),
        ),
        CardDefinition(
            id="quick_jab",
            name="Quick Jab",
            category=ATTACK,
            speed=Speed.FAST,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=1),
            power=4,
            tags=("physical",),
            keywords=("ethereal",),
            effects=(damage(POWER), draw(1)),
        ),
        CardDefinition(
            id="twin_fang",
            name="Twin Fang",
            category=ATTACK,
            speed=Speed.NORMAL,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=2),
            power=4,
            tags=("physical",),
            keywords=("reuse",),
            effects=(damage(POWER),),
            text="Deal 4 damage. Reuse",
        ),
        CardDefinition(
            id="bleeding_edge",
            name="Bleeding Edge",
            category=ATTACK,
            speed=Speed.NORMAL,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=1),
            power=6,
            tags=("physical",),
            effects=(
                damage(POWER),
                apply_status("bleed", 2, timing=Timing.ON_HIT),
                apply_status("bleed", 1, stat=StatusStat.COUNT, timing=Timing.ON_HIT),
            ),
        ),
        CardDefinition(
            id="shove",
            name="Shove",
            category=ATTACK,
            speed=Speed.NORMAL,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=1),
            power=4,
            tags=("physical",),
            effects=(damage(POWER), push()),
        ),
        CardDefinition(
            id="adrenaline",
            name="Adrenaline",
            category=SPECIAL,
            speed=Speed.FAST,
            target=TargetPattern.SELF,
            cost=CardCost(energy=1),
            effects=(
                apply_status("strength", 2, recipient=Recipient.SELF),
                spend(SpendResource.ENERGY, 1, [apply_status("haste", 1, recipient=Recipient.SELF)]),
            ),
        ),
        CardDefinition(
            id="finisher",
            name="Finisher",
            category=ATTACK,
            speed=Speed.SLOW,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=2),
            power=10,
            tags=("physical",),
            effects=(
                damage(POWER),
                conditional(
                    Condition(ConditionKind.TARGET_HAS_STATUS, "bleed"),
                    [damage(5)],
                    timing=Timing.ON_HIT,
                ),
            ),
            transforms=(
                CardTransform(
                    into="desperate_finisher",
                    condition=Condition(ConditionKind.SELF_HP_AT_MOST, minimum=30),
                    text="At 30% HP or less this becomes Desperate Finisher",
                ),
            ),
        ),
        CardDefinition(
            id="desperate_finisher",
            name="Desperate Finisher",
            category=ATTACK,
            speed=Speed.NORMAL,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=2),
            power=16,
            tags=("physical",),
            effects=(damage(POWER),),
            transform_only=True,
        ),
        CardDefinition(
            id="war_cry",
            name="War Cry",
            category=SPECIAL,
            speed=Speed.FAST,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=2),
            keywords=("exhaust",),
            effects=(block_play(timing=Timing.ON_PLAY),),
            text="The target's team cannot play cards this round",
        ),
        CardDefinition(
            id="thousand_cuts",
            name="Thousand Cuts",
            category=ATTACK,
            speed=Speed.NORMAL,
            target=TargetPattern.ENEMY,
            cost=CardCost(ultimate=8, variable="energy", variable_max=3),
            power=4,
            tags=("physical",),
            effects=(multihit(Amount(AmountKind.X_PLUS, 3), [damage(POWER)], timing=Timing.ON_HIT),),
        ),
    ),
)


# ============================================================================
# Ranger
# ============================================================================

RANGER = CharacterDefinition(
    id="ranger",
    name="Ranger",
    max_hp=90,
    cards=(
        CardDefinition(
            id="aimed_shot",
            name="Aimed Shot",
            category=ATTACK,
            speed=Speed.SLOW,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=1),
            power=9,
            tags=("physical",),
            effects=(damage(POWER),),
            restrictions=(
                Restriction(
                    kind=RestrictionKind.FORBID,
                    subject=RestrictionSubject.SELF,
                    statuses=(StatusRequirement("slow"), StatusRequirement("root")),
                    mode=MatchMode.ANY,
                    text="Cannot aim while slowed or rooted",
                ),
            ),
        ),
        CardDefinition(
            id="volley",
            name="Volley",
            category=ATTACK,
            speed=Speed.NORMAL,
            target=TargetPattern.RANDOM_ENEMY,
            cost=CardCost(energy=1),
            power=5,
            tags=("physical", "random"),
            effects=(multihit(2, [damage(POWER)], timing=Timing.ON_HIT),),
        ),
        CardDefinition(
            id="poison_arrow",
            name="Poison Arrow",
            category=ATTACK,
            speed=Speed.NORMAL,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=1),
            power=4,
            tags=("physical", "arrow"),
            effects=(
                damage(POWER),
                apply_status("poison", 3, timing=Timing.ON_HIT),
                apply_status("poison", 2, stat=StatusStat.COUNT, timing=Timing.ON_HIT),
            ),
        ),
        CardDefinition(
            id="execute_shot",
            name="Execute Shot",
            category=ATTACK,
            speed=Speed.NORMAL,
            target=TargetPattern.ENEMY,
            cost=CardCost(energy=2),
            power=12,
            tags=("physical", "arrow"),
            effects=(damage(POWER),),
            restrictions=(
                Restriction(
                    kind=RestrictionKind.REQUIRE,
                    subject=RestrictionSubject.TARGET,
                    statuses=(StatusRequirement("poison"),),
                    text="Only against a poisoned target",
                ),
            ),
        ),
        CardDefinition(
            id="scout",
            name="Scout",
            category=SPECIAL,
            speed=Speed.FAST,
            target=TargetPattern.SELF,
            keywords=("exhaust",),
            effects=(seek(3, "attack"),),
        ),
        CardDefinition(
            id="quiver",
            name="Quiver",
            category=SPECIAL,
            speed=Speed.NORMAL,
            target=TargetPattern.SELF,
            cost=CardCost(energy=1),
            effects=(search("arrow"),),
        ),
        CardDefinition(
            id="fletch",
            name="Fletch",
            category=SPECIAL,
            speed=Speed.SLOW,
            target=TargetPattern.SELF,
            cost=CardCost(energy=1),
            effects=(create_card("poison_arrow", CardDestination.HAND),),
        ),
        CardDefinition(
            id="rain_of_arrows",
            name="Rain of Arrows",
            category=ATTACK,
            speed=Speed.FAST,
            target=TargetPattern.ALL_ENEMIES,
            cost=CardCost(ultimate=8),
            power=8,
            tags=("physical", "aoe"),
            effects=(damage(POWER), apply_status("vulnerable", 1, timing=Timing.ON_HIT)),
        ),
    ),
)


# ============================================================================
# Medic
# ============================================================================

MEDIC = CharacterDefinition(
    id="medic",
    name="Medic",
    max_hp=85,
    cards=(
        CardDefinition(
            id="mend",
            name="Mend",
            category=SPECIAL,
            speed=Speed.NORMAL,
            target=TargetPattern.ALLY,
            cost=CardCost(energy=1),
            power=10,
            tags=("magical",),
            effects=(heal(POWER, recipient=Recipient.TARGET),),
        ),
        CardDefinition(
            id="regrowth",
            name="Regrowth",
            category=SPECIAL,
            speed=Speed.NORMAL,
            target=TargetPattern.ALLY,
            cost=CardCost(energy=1),
            tags=("magical",),
            effects=(
                apply_status("regen", 4),
                apply_status("regen", 2, stat=StatusStat.COUNT),
            ),
        ),
        CardDefinition(
            id="purify",
            name="Purify",
            category=SPECIAL,
            speed=Speed.FAST,
            target=TargetPattern.ALLY,
            cost=CardCost(energy=1),
            tags=("magical",),
            effects=(
                choose(
                    [reduce_status("wound", 10), reduce_status("wither", 10)],
                    [reduce_status("poison", 20), reduce_status("burn", 20)],
                ),
            ),
        ),
        CardDefinition(
            id="cleansing_light",
            name="Cleansing Light",
            category=SPECIAL,
            speed=Speed.NORMAL,
            target=TargetPattern.ALLY,
            cost=CardCost(energy=2),
            tags=("magical",),
            effects=(purge(PurgeKind.CLEANSE),),
            text="Remove every negative status from an ally",
        ),
        CardDefinition(
            id="sanctuary",
            name="Sanctuary",
            category=DEFENSE,
            speed=Speed.NORMAL,
            target=TargetPattern.SELF,
            cost=CardCost(energy=2),
            power=5,
            effects=(shield(POWER, recipient=Recipient.ALL_ALLIES),),
        ),
        CardDefinition(
            id="triage",
            name="Triage",
            category=SPECIAL,
            speed=Speed.SLOW,
            target=TargetPattern.ALLY,
            cost=CardCost(energy=1),
            effects=(spend(SpendResource.CARD, 1, [heal(12, recipient=Recipient.TARGET)]),),
        ),
        CardDefinition(
            id="herbal_tea",
            name="Herbal Tea",
            category=SPECIAL,
            speed=Speed.FAST,
            target=TargetPattern.SELF,
            keywords=("exhaust",),
            effects=(apply_status("focus", 1, recipient=Recipient.SELF), gain_ultimate(2)),
        ),
        CardDefinition(
            id="omen",
            name="Omen",
            category=SPECIAL,
            speed=Speed.SLOW,
            target=TargetPattern.SELF,
            keywords=("ethereal",),
            effects=(unmodeled("Reveal the next card the opponent declares"),),
        ),
        CardDefinition(
            id="resurgence",
            name="Resurgence",
            category=SPECIAL,
            speed=Speed.SLOW,
            target=TargetPattern.ALL_ALLIES,
            cost=CardCost(ultimate=10),
            effects=(
                heal(20, recipient=Recipient.ALL_ALLIES),
                apply_status("renewal", 3, recipient=Recipient.ALL_ALLIES),
            ),
        ),
    ),
)


STANDARD_CHARACTERS: tuple[CharacterDefinition, ...] = (
    VANGUARD,
    MYSTIC,
    WARDEN,
    STRIKER,
    RANGER,
    MEDIC,
)

DEMO_ROSTERS: dict[str, list[str]] = {
    "p1": ["vanguard", "mystic", "medic"],
    "p2": ["warden", "striker", "ranger"],
}
