"""
Tests for the priority and clash resolver.

Tests:
- Zone ordering
- Attack vs attack, attack vs defense, Evade and Negate
- Declaration order for ties and solo entries
- Counter windows, Reuse and rolled power
"""

from ..spec_schema.game_data import Speed
from ..engine_core.action import Action
from ..engine_core.action_generator import legal_actions
from ..engine_core.errors import IllegalReason
from ..engine_core.events import EventKind
from ..engine_core.setup import create_match
from .conftest import ROSTERS, give_card, of_kind, pass_both, play, set_status


def declare_pair(reducer, match, p1_card, p2_card):
    """p1:alpha attacks p2:alpha and p2:alpha answers, in that order."""
    match = play(reducer, match, "p1:alpha", p1_card, ["p2:alpha"])
    p2_targets = None if p2_card in ("guard", "dodge", "nullify", "brace", "riposte") else ["p1:alpha"]
    return play(reducer, match, "p2:alpha", p2_card, p2_targets)


class TestZoneOrder:
    """Faster zones resolve first regardless of declaration order."""

    def test_fast_before_normal(self, match, reducer):
        match = play(reducer, match, "p1:alpha", "jab", ["p2:gamma"])
        match = play(reducer, match, "p2:beta", "bolt", ["p1:beta"])

        match = pass_both(reducer, match)

        used = of_kind(match.events, EventKind.CARD_USED)
        assert [e.detail for e in used] == ["bolt", "jab"]

    def test_declared_slower_zone(self, match, reducer):
        """A fast card may be held back into a slower zone."""
        match = play(reducer, match, "p1:alpha", "bolt", ["p2:alpha"], zone=Speed.SLOW)
        match = play(reducer, match, "p2:beta", "jab", ["p1:gamma"])
        assert match.queue[0].zone == Speed.SLOW

        match = pass_both(reducer, match)

        used = of_kind(match.events, EventKind.CARD_USED)
        assert [e.detail for e in used] == ["jab", "bolt"]

    def test_queue_empties_after_step(self, match, reducer):
        match = declare_pair(reducer, match, "jab", "guard")

        match = pass_both(reducer, match)

        assert match.queue == []
        assert of_kind(match.events, EventKind.ROUND_ENDED)[-1].magnitude == 1
        assert match.round == 2
        assert match.active_team == match.initiative


class TestAttackVsAttack:
    """Tests for attack clashes."""

    def test_tie_cancels_both(self, match, reducer):
        match = declare_pair(reducer, match, "jab", "jab")

        match = pass_both(reducer, match)

        assert len(of_kind(match.events, EventKind.CLASH)) == 1
        cancelled = of_kind(match.events, EventKind.CANCELLED)
        assert [e.detail for e in cancelled] == ["tie", "tie"]
        assert of_kind(match.events, EventKind.DAMAGE_APPLIED) == []
        assert of_kind(match.events, EventKind.CARD_USED) == []

    def test_higher_power_overpowers(self, match, reducer):
        match = declare_pair(reducer, match, "jab", "heavy")

        match = pass_both(reducer, match)

        cancelled = of_kind(match.events, EventKind.CANCELLED)
        assert [(e.actor, e.detail) for e in cancelled] == [("p1:alpha", "overpowered")]
        damage = of_kind(match.events, EventKind.DAMAGE_APPLIED)
        assert [(e.target, e.magnitude) for e in damage] == [("p1:alpha", 12)]

    def test_cancelled_card_still_leaves_hand(self, match, reducer):
        match = declare_pair(reducer, match, "jab", "jab")

        match = pass_both(reducer, match)

        assert match.get_team("p1").hand == []
        assert len(match.get_team("p1").discard) == 1

    def test_one_sided_attacks_do_not_clash(self, match, reducer):
        """p2 aims elsewhere, so both attacks resolve solo."""
        match = play(reducer, match, "p1:alpha", "jab", ["p2:alpha"])
        match = play(reducer, match, "p2:alpha", "jab", ["p1:beta"])

        match = pass_both(reducer, match)

        assert of_kind(match.events, EventKind.CLASH) == []
        assert len(of_kind(match.events, EventKind.DAMAGE_APPLIED)) == 2


class TestAttackVsDefense:
    """Tests for attack/defense clashes."""

    def test_stronger_defense_goes_first(self, match, reducer):
        match = declare_pair(reducer, match, "jab", "guard")

        match = pass_both(reducer, match)

        used = of_kind(match.events, EventKind.CARD_USED)
        assert [e.detail for e in used] == ["guard", "jab"]
        absorbed = of_kind(match.events, EventKind.SHIELD_ABSORB)
        assert [(e.magnitude, e.detail) for e in absorbed] == [(5, "shield")]
        assert match.get_character("p2:alpha").hp == 100

    def test_stronger_attack_goes_first(self, match, reducer):
        match = declare_pair(reducer, match, "heavy", "guard")

        match = pass_both(reducer, match)

        used = of_kind(match.events, EventKind.CARD_USED)
        assert [e.detail for e in used] == ["heavy", "guard"]
        assert match.get_character("p2:alpha").hp == 88

    def test_evade_makes_attack_miss(self, match, reducer):
        match = declare_pair(reducer, match, "jab", "dodge")

        match = pass_both(reducer, match)

        missed = of_kind(match.events, EventKind.MISSED)
        assert [e.actor for e in missed] == ["p1:alpha"]
        assert of_kind(match.events, EventKind.DAMAGE_APPLIED) == []

    def test_evade_fails_against_stronger_attack(self, match, reducer):
        match = declare_pair(reducer, match, "heavy", "dodge")

        match = pass_both(reducer, match)

        assert of_kind(match.events, EventKind.MISSED) == []
        assert match.get_character("p2:alpha").hp == 88

    def test_negate(self, match, reducer):
        match = declare_pair(reducer, match, "heavy", "nullify")

        match = pass_both(reducer, match)

        negated = of_kind(match.events, EventKind.NEGATED)
        assert [(e.actor, e.target, e.detail) for e in negated] == [("p2:alpha", "p1:alpha", "heavy")]
        assert of_kind(match.events, EventKind.DAMAGE_APPLIED) == []
        used = of_kind(match.events, EventKind.CARD_USED)
        assert [e.detail for e in used] == ["nullify"]


class TestDeclarationOrder:
    """Equal power and solo entries resolve in declaration order."""

    def test_attack_declared_first(self, match, reducer):
        match = declare_pair(reducer, match, "jab", "brace")

        match = pass_both(reducer, match)

        damage = of_kind(match.events, EventKind.DAMAGE_APPLIED)
        assert [(e.target, e.magnitude) for e in damage] == [("p2:alpha", 5)]
        assert of_kind(match.events, EventKind.SHIELD_ABSORB) == []
        assert match.get_character("p2:alpha").status("barrier").value == 5

    def test_defense_declared_first(self, match, reducer):
        match = reducer.apply(match, Action.pass_priority("p1")).new_state
        match = play(reducer, match, "p2:alpha", "brace")
        match = play(reducer, match, "p1:alpha", "jab", ["p2:alpha"])

        match = pass_both(reducer, match)

        absorbed = of_kind(match.events, EventKind.SHIELD_ABSORB)
        assert [(e.magnitude, e.detail) for e in absorbed] == [(5, "barrier")]
        assert of_kind(match.events, EventKind.DAMAGE_APPLIED) == []
        assert match.get_character("p2:alpha").hp == 100

    def test_solo_entries_in_declaration_order(self, match, reducer):
        match = play(reducer, match, "p1:alpha", "guard")
        match = play(reducer, match, "p2:alpha", "guard")

        match = pass_both(reducer, match)

        used = of_kind(match.events, EventKind.CARD_USED)
        assert [e.actor for e in used] == ["p1:alpha", "p2:alpha"]

    def test_solo_entries_reversed(self, match, reducer):
        match = reducer.apply(match, Action.pass_priority("p1")).new_state
        match = play(reducer, match, "p2:alpha", "guard")
        match = play(reducer, match, "p1:alpha", "guard")

        match = pass_both(reducer, match)

        used = of_kind(match.events, EventKind.CARD_USED)
        assert [e.actor for e in used] == ["p2:alpha", "p1:alpha"]

    def test_tie_on_shared_status_follows_declaration(self, match, reducer):
        """Both sides touch p2:alpha's barrier; the earlier declaration goes first."""
        set_status(match, "p2:alpha", "barrier", value=3)
        attack_first = pass_both(reducer, declare_pair(reducer, match, "jab", "brace"))

        match = reducer.apply(match, Action.pass_priority("p1")).new_state
        match = play(reducer, match, "p2:alpha", "brace")
        match = play(reducer, match, "p1:alpha", "jab", ["p2:alpha"])
        defense_first = pass_both(reducer, match)

        target = attack_first.get_character("p2:alpha")
        assert (target.hp, target.status("barrier").value) == (98, 5)
        target = defense_first.get_character("p2:alpha")
        assert (target.hp, target.status("barrier").value) == (100, 3)


class TestCounter:
    """A Counter defense that takes the whole hit lets its team answer out of turn."""

    def open_window(self, reducer, match):
        return pass_both(reducer, declare_pair(reducer, match, "jab", "riposte"))

    def test_full_block_opens_window(self, match, reducer):
        match = self.open_window(reducer, match)

        assert (match.counter_window.team_id, match.counter_window.attacker_id) == ("p2", "p1:alpha")
        opened = of_kind(match.events, EventKind.COUNTER_OPENED)
        assert [(e.actor, e.target, e.detail) for e in opened] == [("p2:alpha", "p1:alpha", "riposte")]
        assert match.active_team == "p1"

    def test_damage_taken_opens_nothing(self, match, reducer):
        match = pass_both(reducer, declare_pair(reducer, match, "heavy", "riposte"))

        assert match.counter_window is None
        assert of_kind(match.events, EventKind.COUNTER_OPENED) == []

    def test_counter_play_keeps_priority(self, match, reducer):
        match = self.open_window(reducer, match)
        card = give_card(match, "p2:beta", "jab")

        result = reducer.apply(match, Action.play("p2", "p2:beta", card.instance_id, ["p1:alpha"]))

        assert result.success, result.error
        assert result.new_state.active_team == "p1"
        assert result.new_state.counter_window is None
        assert [q.actor_id for q in result.new_state.queue] == ["p2:beta"]

    def test_counter_must_target_attacker(self, match, reducer):
        match = self.open_window(reducer, match)
        card = give_card(match, "p2:beta", "jab")

        result = reducer.apply(match, Action.play("p2", "p2:beta", card.instance_id, ["p1:beta"]))

        assert result.error_code == IllegalReason.COUNTER_TARGET.value

    def test_window_closes_after_next_action(self, match, reducer):
        match = self.open_window(reducer, match)
        match = play(reducer, match, "p1:gamma", "guard")
        assert match.counter_window is None
        match = reducer.apply(match, Action.pass_priority("p2")).new_state
        card = give_card(match, "p2:beta", "jab")

        result = reducer.apply(match, Action.play("p2", "p2:beta", card.instance_id, ["p1:alpha"]))

        assert result.error_code == IllegalReason.NOT_ACTIVE_TEAM.value

    def test_counter_plays_are_legal_actions(self, test_data, match, reducer):
        match = self.open_window(reducer, match)
        give_card(match, "p2:beta", "jab")

        actions = legal_actions(test_data, match)

        counters = [(a.actor_id, a.targets) for a in actions if a.team_id == "p2"]
        assert counters == [("p2:beta", ("p1:alpha",))]


class TestReuse:
    """Reuse cards and successful Evades stay declared for one more step."""

    def test_reuse_card_resolves_twice(self, match, reducer):
        match = play(reducer, match, "p1:alpha", "echo", ["p2:alpha"])
        instance_id = match.get_team("p1").hand[0].instance_id

        match = pass_both(reducer, match)

        assert [e.detail for e in of_kind(match.events, EventKind.CARD_REUSED)] == ["echo"]
        assert [q.instance_id for q in match.queue] == [instance_id]
        assert match.get_team("p1").committed == {instance_id}
        assert match.get_character("p2:alpha").hp == 96

        match = pass_both(reducer, match)

        assert len(of_kind(match.events, EventKind.CARD_USED)) == 2
        assert len(of_kind(match.events, EventKind.CARD_REUSED)) == 1
        assert match.queue == []
        assert match.get_team("p1").locate(instance_id).value == "discard"
        assert match.get_character("p2:alpha").hp == 92

    def test_cancelled_reuse_card_is_not_kept(self, match, reducer):
        match = pass_both(reducer, declare_pair(reducer, match, "echo", "jab"))

        assert of_kind(match.events, EventKind.CARD_REUSED) == []
        assert match.queue == []

    def test_successful_evade_resolves_again(self, match, reducer):
        match = pass_both(reducer, declare_pair(reducer, match, "jab", "dodge"))

        assert [q.definition.id for q in match.queue] == ["dodge"]
        assert [e.detail for e in of_kind(match.events, EventKind.CARD_REUSED)] == ["dodge"]

        match = pass_both(reducer, match)

        used = of_kind(match.events, EventKind.CARD_USED)
        assert [e.detail for e in used] == ["dodge", "jab", "dodge"]
        assert match.queue == []
        assert match.get_team("p2").committed == set()

    def test_failed_evade_is_not_kept(self, match, reducer):
        match = pass_both(reducer, declare_pair(reducer, match, "heavy", "dodge"))

        assert match.queue == []


class TestPowerRange:
    """Ranged power is rolled once, at declaration."""

    def test_roll_is_within_range(self, match, reducer):
        match = play(reducer, match, "p1:alpha", "wild", ["p2:alpha"])

        rolled = of_kind(match.events, EventKind.POWER_ROLLED)
        assert [e.detail for e in rolled] == ["2-8"]
        power = rolled[0].magnitude
        assert 2 <= power <= 8
        assert match.queue[0].power == power
        assert of_kind(match.events, EventKind.CARD_PLAYED)[0].magnitude == power

        match = pass_both(reducer, match)

        assert match.get_character("p2:alpha").hp == 100 - power

    def test_same_seed_same_roll(self, test_data, combat_rules, reducer):
        rolls = []
        for _ in range(2):
            match = create_match(test_data, ROSTERS, seed=42, rules=combat_rules)
            match = play(reducer, match, "p1:alpha", "wild", ["p2:alpha"])
            rolls.append(match.queue[0].power)

        assert rolls[0] == rolls[1]

    def test_fixed_power_is_not_rolled(self, match, reducer):
        match = play(reducer, match, "p1:alpha", "jab", ["p2:alpha"])

        assert of_kind(match.events, EventKind.POWER_ROLLED) == []
