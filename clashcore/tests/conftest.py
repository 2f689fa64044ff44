"""
Pytest fixtures for clashcore tests.
"""

import pytest

from ..spec_schema.effect_dsl import (
    Amount,
    AmountKind,
    Condition,
    ConditionKind,
    PurgeKind,
    Recipient,
    SpendResource,
    Timing,
    apply_status,
    block_play,
    damage,
    draw,
    gain_ultimate,
    heal,
    multihit,
    purge,
    push,
    scry,
    shield,
    spend,
    unmodeled,
)
from ..spec_schema.game_data import (
    CardCategory,
    CardCost,
    CardDefinition,
    CardTransform,
    CharacterDefinition,
    GameData,
    Restriction,
    RestrictionKind,
    RestrictionSubject,
    Speed,
    StatusRequirement,
    TargetPattern,
)
from ..engine_core.action import Action
from ..engine_core.events import EventKind
from ..engine_core.reducer import Reducer
from ..engine_core.runtime import Runtime
from ..engine_core.setup import create_match
from ..engine_core.state import CardInstance, Match, RulesOptions, StatusInstance
from ..games.standard import create_standard_data, standard_statuses

POWER = Amount.of_power()

ROSTERS = {
    "p1": ["alpha", "beta", "gamma"],
    "p2": ["alpha", "beta", "gamma"],
}


def _card(card_id, category, speed, target, power=0, energy=1, **kwargs) -> CardDefinition:
    cost = kwargs.pop("cost", CardCost(energy=energy))
    return CardDefinition(
        id=card_id,
        name=card_id.title(),
        category=category,
        speed=speed,
        target=target,
        cost=cost,
        power=power,
        **kwargs,
    )


ATTACK = CardCategory.ATTACK
DEFENSE = CardCategory.DEFENSE
SPECIAL = CardCategory.SPECIAL

TEST_CARDS = (
    _card("bolt", ATTACK, Speed.FAST, TargetPattern.ENEMY, 10, effects=(damage(POWER),)),
    _card("jab", ATTACK, Speed.NORMAL, TargetPattern.ENEMY, 5, tags=("physical",), effects=(damage(POWER),)),
    _card("heavy", ATTACK, Speed.NORMAL, TargetPattern.ENEMY, 12, energy=2, effects=(damage(POWER),)),
    _card("guard", DEFENSE, Speed.NORMAL, TargetPattern.SELF, 8, effects=(shield(POWER),)),
    _card("brace", DEFENSE, Speed.NORMAL, TargetPattern.SELF, 5,
          effects=(apply_status("barrier", 5, recipient=Recipient.SELF),)),
    _card("dodge", DEFENSE, Speed.NORMAL, TargetPattern.SELF, 8, keywords=("evade",)),
    _card("nullify", DEFENSE, Speed.NORMAL, TargetPattern.SELF, 1, keywords=("negate",)),
    _card("flurry", ATTACK, Speed.NORMAL, TargetPattern.ENEMY, 2,
          effects=(multihit(3, [damage(POWER)], timing=Timing.ON_HIT),)),
    _card("lock", SPECIAL, Speed.FAST, TargetPattern.ENEMY, effects=(block_play(timing=Timing.ON_PLAY),)),
    _card("sweep", ATTACK, Speed.NORMAL, TargetPattern.ALL_ENEMIES, 3, tags=("aoe",), effects=(damage(POWER),)),
    _card("burst", ATTACK, Speed.NORMAL, TargetPattern.ENEMY, 4, tags=("splash",), effects=(damage(POWER),)),
    _card(
        "morph", ATTACK, Speed.NORMAL, TargetPattern.ENEMY, 3,
        effects=(damage(POWER),),
        transforms=(
            CardTransform("morph_burning", Condition(ConditionKind.TARGET_HAS_STATUS, "burn")),
            CardTransform("morph_strong", Condition(ConditionKind.SELF_HAS_STATUS, "strength")),
        ),
    ),
    _card("morph_burning", ATTACK, Speed.NORMAL, TargetPattern.ENEMY, 6,
          effects=(damage(POWER),), transform_only=True),
    _card("morph_strong", ATTACK, Speed.NORMAL, TargetPattern.ENEMY, 9,
          effects=(damage(POWER),), transform_only=True),
    _card("drain", SPECIAL, Speed.NORMAL, TargetPattern.SELF, energy=0,
          effects=(spend(SpendResource.ENERGY, 99, [gain_ultimate(5)]),)),
    _card("riddle", SPECIAL, Speed.NORMAL, TargetPattern.SELF, energy=0,
          effects=(unmodeled("Swap hands with the opponent"),)),
    _card(
        "precise", ATTACK, Speed.NORMAL, TargetPattern.ENEMY, 5,
        effects=(damage(POWER),),
        restrictions=(
            Restriction(
                RestrictionKind.REQUIRE,
                RestrictionSubject.TARGET,
                (StatusRequirement("burn"),),
                text="Target must be burning",
            ),
        ),
    ),
    _card("mend", SPECIAL, Speed.NORMAL, TargetPattern.ALLY, 6,
          effects=(heal(POWER, recipient=Recipient.TARGET),)),
    _card("tempo", SPECIAL, Speed.FAST, TargetPattern.SELF, energy=0, keywords=("exhaust",), effects=(draw(1),)),
    _card("fleeting", SPECIAL, Speed.NORMAL, TargetPattern.SELF, keywords=("ethereal",)),
    _card("keeper", SPECIAL, Speed.NORMAL, TargetPattern.SELF, keywords=("retain",)),
    _card("peek", SPECIAL, Speed.NORMAL, TargetPattern.SELF, energy=0, effects=(scry(1), scry(1))),
    _card("shove", ATTACK, Speed.NORMAL, TargetPattern.ENEMY, 3, effects=(damage(POWER), push())),
    _card("purify", SPECIAL, Speed.NORMAL, TargetPattern.SELF, energy=0,
          effects=(purge(PurgeKind.CLEANSE, recipient=Recipient.SELF),)),
    _card("strip", SPECIAL, Speed.NORMAL, TargetPattern.ENEMY, effects=(purge(PurgeKind.DISPEL),)),
    _card("douse", SPECIAL, Speed.NORMAL, TargetPattern.ALLY, effects=(purge(PurgeKind.PURGE, "burn", 2),)),
    _card("riposte", DEFENSE, Speed.NORMAL, TargetPattern.SELF, 8, keywords=("counter",), effects=(shield(POWER),)),
    _card("echo", ATTACK, Speed.NORMAL, TargetPattern.ENEMY, 4, keywords=("reuse",), effects=(damage(POWER),)),
    _card("wild", ATTACK, Speed.NORMAL, TargetPattern.ENEMY, 2, power_max=8, effects=(damage(POWER),)),
    _card("lunge", ATTACK, Speed.NORMAL, TargetPattern.OPPOSED, 6, effects=(damage(POWER),)),
    _card(
        "ult", ATTACK, Speed.NORMAL, TargetPattern.ENEMY, 10,
        cost=CardCost(ultimate=5, variable="ultimate", variable_max=3),
        effects=(damage(Amount(AmountKind.X_PLUS, 10)),),
    ),
)


def build_data(cards=TEST_CARDS, version: str = "test-1") -> GameData:
    """Three identical test characters sharing the standard status catalogue."""
    statuses, keywords = standard_statuses()
    characters = tuple(
        CharacterDefinition(id=name, name=name.title(), max_hp=100, cards=tuple(cards))
        for name in ("alpha", "beta", "gamma")
    )
    return GameData(version=version, characters=characters, statuses=statuses, keywords=keywords)


def give_card(match: Match, owner_id: str, card_id: str) -> CardInstance:
    """Put a copy of `card_id` owned by `owner_id` in its team's hand."""
    team = match.get_team(owner_id.split(":")[0])
    for card in team.deck:
        if card.owner_id == owner_id and card.card_id == card_id:
            team.deck.remove(card)
            team.hand.append(card)
            return card
    card = CardInstance(match.allocate_instance_id(), card_id, owner_id)
    team.hand.append(card)
    return card


def set_status(match: Match, character_id: str, kind: str, **dimensions) -> StatusInstance:
    """Stage a status directly, without events."""
    character = match.get_character(character_id)
    instance = StatusInstance(kind=kind, **dimensions)
    character.statuses[kind] = instance
    return instance


def play(reducer: Reducer, match: Match, owner_id: str, card_id: str,
         targets: list[str] | None = None, **kwargs) -> Match:
    """Hand `card_id` to its owner and declare it. Fails the test if rejected."""
    card = give_card(match, owner_id, card_id)
    action = Action.play(owner_id.split(":")[0], owner_id, card.instance_id, targets, **kwargs)
    result = reducer.apply(match, action)
    assert result.success, result.error
    return result.new_state


def pass_both(reducer: Reducer, match: Match) -> Match:
    """Both teams pass in priority order."""
    for _ in range(2):
        result = reducer.apply(match, Action.pass_priority(match.active_team))
        assert result.success, result.error
        match = result.new_state
    return match


def of_kind(events, kind: EventKind) -> list:
    return [e for e in events if e.kind == kind]


def kinds(events) -> list[str]:
    return [e.kind.value for e in events]


@pytest.fixture
def test_data() -> GameData:
    """Small data set with one card per mechanic."""
    return build_data()


@pytest.fixture
def standard_data() -> GameData:
    return create_standard_data()


@pytest.fixture
def combat_rules() -> RulesOptions:
    """Straight into combat, empty opening hands."""
    return RulesOptions(hand_size=0, movement_enabled=False)


@pytest.fixture
def match(test_data, combat_rules) -> Match:
    """Fresh test match at turn 1, combat phase, p1 holding priority."""
    return create_match(test_data, ROSTERS, seed=42, rules=combat_rules)


@pytest.fixture
def reducer(test_data) -> Reducer:
    return Reducer(data=test_data)


@pytest.fixture
def runtime(test_data, match) -> Runtime:
    """Runtime bound directly to the fixture match, for component tests."""
    return Runtime(test_data, match)
