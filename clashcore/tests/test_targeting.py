"""
Tests for targeting and restrictions.

Tests:
- Taunt forcing and area exemptions
- Cover and adjacent cover redirects
- Structured restrictions
- Area resolution and replacement targets
- Opposed targets and push
"""

from ..engine_core.action import Action
from ..engine_core.events import EventKind
from ..engine_core.errors import IllegalReason
from .conftest import give_card, of_kind, pass_both, play, set_status


class TestTaunt:
    """Tests for Taunt."""

    def test_taunt_forces_target(self, match, reducer):
        set_status(match, "p2:beta", "taunt", stack=1)
        card = give_card(match, "p1:alpha", "jab")

        result = reducer.apply(match, Action.play("p1", "p1:alpha", card.instance_id, ["p2:alpha"]))

        assert not result.success
        assert result.error_code == IllegalReason.ILLEGAL_TARGET.value

    def test_taunting_enemy_is_legal(self, match, reducer):
        set_status(match, "p2:beta", "taunt", stack=1)

        match = play(reducer, match, "p1:alpha", "jab", ["p2:beta"])

        assert match.queue[0].targets == ("p2:beta",)

    def test_area_card_ignores_taunt(self, match, reducer):
        set_status(match, "p2:beta", "taunt", stack=1)

        match = play(reducer, match, "p1:alpha", "burst", ["p2:alpha"])

        assert match.queue[0].primary_target == "p2:alpha"

    def test_legal_targets(self, test_data, match, runtime):
        actor = match.get_character("p1:alpha")
        jab = test_data.get_card("alpha", "jab")
        mend = test_data.get_card("alpha", "mend")

        assert [c.character_id for c in runtime.targeting.legal_targets(actor, jab)] == [
            "p2:alpha", "p2:beta", "p2:gamma",
        ]
        assert [c.character_id for c in runtime.targeting.legal_targets(actor, mend)] == [
            "p1:alpha", "p1:beta", "p1:gamma",
        ]


class TestDeclaration:
    """Tests for declared-target validation."""

    def test_attack_on_ally_is_illegal(self, match, reducer):
        card = give_card(match, "p1:alpha", "jab")

        result = reducer.apply(match, Action.play("p1", "p1:alpha", card.instance_id, ["p1:beta"]))

        assert result.error_code == IllegalReason.ILLEGAL_TARGET.value

    def test_area_pattern_takes_no_target(self, match, reducer):
        card = give_card(match, "p1:alpha", "sweep")

        result = reducer.apply(match, Action.play("p1", "p1:alpha", card.instance_id, ["p2:alpha"]))

        assert result.error_code == IllegalReason.ILLEGAL_TARGET.value

    def test_single_target_requires_one(self, match, reducer):
        card = give_card(match, "p1:alpha", "jab")

        result = reducer.apply(match, Action.play("p1", "p1:alpha", card.instance_id))

        assert result.error_code == IllegalReason.ILLEGAL_TARGET.value


class TestRestrictions:
    """Tests for structured play restrictions."""

    def test_requirement_not_met(self, match, reducer):
        card = give_card(match, "p1:alpha", "precise")

        result = reducer.apply(match, Action.play("p1", "p1:alpha", card.instance_id, ["p2:alpha"]))

        assert not result.success
        assert result.error_code == IllegalReason.RESTRICTION_FAILED.value
        assert "Target must be burning" in result.error

    def test_requirement_met(self, match, reducer):
        set_status(match, "p2:alpha", "burn", potency=2, count=1)

        match = play(reducer, match, "p1:alpha", "precise", ["p2:alpha"])

        assert len(match.queue) == 1


class TestCover:
    """Tests for Cover redirects."""

    def test_cover_redirects_attack(self, match, reducer):
        set_status(match, "p2:beta", "cover", value=1)
        match = play(reducer, match, "p1:alpha", "jab", ["p2:alpha"])

        match = pass_both(reducer, match)

        redirect = of_kind(match.events, EventKind.TARGET_REDIRECTED)
        assert len(redirect) == 1
        assert redirect[0].actor == "p2:beta"
        assert redirect[0].target == "p2:alpha"
        damage = of_kind(match.events, EventKind.DAMAGE_APPLIED)
        assert [(e.target, e.magnitude) for e in damage] == [("p2:beta", 5)]
        assert match.get_character("p2:alpha").hp == 100
        assert "cover" not in match.get_character("p2:beta").statuses

    def test_adjacent_cover_needs_adjacency(self, match, reducer):
        """Gamma sits two slots from alpha and cannot cover it."""
        set_status(match, "p2:gamma", "adjacent_cover", value=1)
        match = play(reducer, match, "p1:alpha", "jab", ["p2:alpha"])

        match = pass_both(reducer, match)

        assert of_kind(match.events, EventKind.TARGET_REDIRECTED) == []
        assert match.get_character("p2:alpha").hp == 95
        assert match.get_character("p2:gamma").status("adjacent_cover").value == 1

    def test_adjacent_cover_for_neighbour(self, match, reducer):
        set_status(match, "p2:beta", "adjacent_cover", value=2)
        match = play(reducer, match, "p1:alpha", "jab", ["p2:alpha"])

        match = pass_both(reducer, match)

        assert match.get_character("p2:beta").hp == 95
        assert match.get_character("p2:beta").status("adjacent_cover").value == 1

    def test_area_attack_is_not_covered(self, match, reducer):
        set_status(match, "p2:beta", "cover", value=1)
        match = play(reducer, match, "p1:alpha", "sweep")

        match = pass_both(reducer, match)

        assert of_kind(match.events, EventKind.TARGET_REDIRECTED) == []
        assert [c.hp for c in match.get_team("p2").characters] == [97, 97, 97]


class TestUseTargets:
    """Tests for target expansion at use time."""

    def test_splash_hits_neighbours(self, match, reducer):
        match = play(reducer, match, "p1:alpha", "burst", ["p2:beta"])

        match = pass_both(reducer, match)

        damage = of_kind(match.events, EventKind.DAMAGE_APPLIED)
        assert [e.target for e in damage] == ["p2:beta", "p2:alpha", "p2:gamma"]

    def test_fallen_target_is_replaced(self, match, reducer):
        """If the declared target falls before use, the first legal enemy takes it."""
        match = play(reducer, match, "p1:alpha", "jab", ["p2:alpha"])
        match.get_character("p2:alpha").defeated = True

        match = pass_both(reducer, match)

        damage = of_kind(match.events, EventKind.DAMAGE_APPLIED)
        assert [e.target for e in damage] == ["p2:beta"]


class TestOpposed:
    """Opposed cards land on the enemy facing the actor."""

    def test_hits_the_facing_enemy(self, match, reducer):
        match = play(reducer, match, "p1:beta", "lunge")

        match = pass_both(reducer, match)

        damage = of_kind(match.events, EventKind.DAMAGE_APPLIED)
        assert [(e.target, e.magnitude) for e in damage] == [("p2:beta", 6)]

    def test_fallen_opposite_is_not_replaced(self, match, reducer):
        match = play(reducer, match, "p1:gamma", "lunge")
        match.get_character("p2:gamma").defeated = True

        match = pass_both(reducer, match)

        assert of_kind(match.events, EventKind.DAMAGE_APPLIED) == []
        assert of_kind(match.events, EventKind.CANCELLED) == []

    def test_takes_no_declared_target(self, match, reducer):
        card = give_card(match, "p1:alpha", "lunge")

        result = reducer.apply(match, Action.play("p1", "p1:alpha", card.instance_id, ["p2:beta"]))

        assert result.error_code == IllegalReason.ILLEGAL_TARGET.value


class TestPush:
    """Shove pushes its target along the line after hitting."""

    def slots(self, match):
        return [match.get_character(f"p2:{name}").slot for name in ("alpha", "beta", "gamma")]

    def test_declared_direction(self, match, reducer):
        match = play(reducer, match, "p1:alpha", "shove", ["p2:beta"], choice_answers={"push": [["left"]]})

        match = pass_both(reducer, match)

        resolved = of_kind(match.events, EventKind.CHOICE_RESOLVED)
        assert [(e.actor, e.detail) for e in resolved] == [("p1", "push:answer:left")]
        moved = of_kind(match.events, EventKind.CHARACTER_MOVED)
        assert [(e.target, e.detail) for e in moved] == [("p2:beta", "slot 1->0"), ("p2:alpha", "slot 0->1")]
        assert self.slots(match) == [1, 0, 2]

    def test_other_direction(self, match, reducer):
        match = play(reducer, match, "p1:alpha", "shove", ["p2:beta"], choice_answers={"push": [["right"]]})

        match = pass_both(reducer, match)

        assert self.slots(match) == [0, 2, 1]

    def test_fallback_draws_a_direction(self, match, reducer):
        match = play(reducer, match, "p1:alpha", "shove", ["p2:beta"])

        first = pass_both(reducer, match)
        second = pass_both(reducer, match)

        resolved = of_kind(first.events, EventKind.CHOICE_RESOLVED)
        assert len(resolved) == 1
        direction = resolved[0].detail.removeprefix("push:fallback:")
        assert direction in ("left", "right")
        assert self.slots(first) == ([1, 0, 2] if direction == "left" else [0, 2, 1])
        assert self.slots(second) == self.slots(first)

    def test_edge_slot_has_one_direction(self, match, reducer):
        match = play(reducer, match, "p1:alpha", "shove", ["p2:alpha"])

        match = pass_both(reducer, match)

        resolved = of_kind(match.events, EventKind.CHOICE_RESOLVED)
        assert [e.detail for e in resolved] == ["push:fallback:right"]
        assert self.slots(match) == [1, 0, 2]

    def test_root_stops_push(self, match, reducer):
        set_status(match, "p2:beta", "root", stack=1)
        match = play(reducer, match, "p1:alpha", "shove", ["p2:beta"], choice_answers={"push": [["left"]]})

        match = pass_both(reducer, match)

        assert of_kind(match.events, EventKind.CHOICE_RESOLVED) == []
        assert of_kind(match.events, EventKind.CHARACTER_MOVED) == []
        assert self.slots(match) == [0, 1, 2]
