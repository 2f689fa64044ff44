"""
Tests for the effect resolver.

Tests:
- Transform selection
- Spend, choose and multihit control flow
- Thorns across a multihit attack
- Unmodeled effects
"""

from ..spec_schema.effect_dsl import Timing, choose, shield
from ..engine_core.action import Action
from ..engine_core.effect_resolver import EffectContext
from ..engine_core.events import EventKind
from ..engine_core.runtime import Runtime
from .conftest import of_kind, pass_both, play, set_status


class TestTransforms:
    """Tests for transform selection at declaration."""

    def test_no_condition_keeps_base(self, match, reducer):
        match = play(reducer, match, "p1:alpha", "morph", ["p2:alpha"])

        assert match.queue[0].definition.id == "morph"
        assert of_kind(match.events, EventKind.CARD_TRANSFORMED) == []

    def test_single_match(self, match, reducer):
        set_status(match, "p2:alpha", "burn", potency=1, count=1)

        match = play(reducer, match, "p1:alpha", "morph", ["p2:alpha"])

        assert match.queue[0].definition.id == "morph_burning"

    def test_last_matching_transform_wins(self, match, reducer):
        """Both conditions hold; the later candidate is used."""
        set_status(match, "p2:alpha", "burn", potency=1, count=1)
        set_status(match, "p1:alpha", "strength", stack=1)

        match = play(reducer, match, "p1:alpha", "morph", ["p2:alpha"])

        queued = match.queue[0]
        assert queued.definition.id == "morph_strong"
        transformed = of_kind(match.events, EventKind.CARD_TRANSFORMED)
        assert [e.detail for e in transformed] == ["morph->morph_strong"]
        played = of_kind(match.events, EventKind.CARD_PLAYED)[-1]
        assert played.detail == "morph"
        assert played.magnitude == 9

    def test_transform_is_not_reselected(self, match, reducer):
        """The effective definition is fixed once declared."""
        set_status(match, "p2:alpha", "burn", potency=1, count=1)
        match = play(reducer, match, "p1:alpha", "morph", ["p2:alpha"])
        del match.get_character("p2:alpha").statuses["burn"]

        match = pass_both(reducer, match)

        used = of_kind(match.events, EventKind.CARD_USED)
        assert [e.detail for e in used] == ["morph_burning"]
        assert match.get_character("p2:alpha").hp == 94


class TestControlFlow:
    """Tests for spend, choose and multihit."""

    def test_unpaid_spend_is_skipped(self, match, reducer):
        match = play(reducer, match, "p1:alpha", "drain")

        match = pass_both(reducer, match)

        skipped = of_kind(match.events, EventKind.SPEND_SKIPPED)
        assert len(skipped) == 1
        assert skipped[0].magnitude == 99
        assert skipped[0].detail == "energy"
        assert match.get_team("p1").ultimate == 0

    def test_paid_spend_runs_children(self, match, reducer):
        match.get_team("p1").energy = 100
        match = play(reducer, match, "p1:alpha", "drain")

        match = pass_both(reducer, match)

        team = match.get_team("p1")
        assert team.energy == 1
        assert team.ultimate == 5
        assert of_kind(match.events, EventKind.SPEND_SKIPPED) == []

    def _choose_context(self, match, data):
        actor = match.get_character("p1:alpha")
        return EffectContext(
            actor=actor,
            definition=data.get_card("alpha", "riddle"),
            timing=Timing.ON_USE,
            targets=[actor],
            power=0,
            x=0,
        )

    def test_choose_fallback_is_first_option(self, test_data, match, runtime):
        effect = choose([shield(3)], [shield(7)])

        runtime.effects.evaluate(effect, self._choose_context(match, test_data))

        assert match.get_character("p1:alpha").shield == 3
        assert of_kind(match.events, EventKind.CHOICE_RESOLVED)[0].detail == "choose:fallback:0"

    def test_choose_with_answer(self, test_data, match, runtime):
        effect = choose([shield(3)], [shield(7)])

        with runtime.choices.declared_by("p1", {"choose": [["1"]]}):
            runtime.effects.evaluate(effect, self._choose_context(match, test_data))

        assert match.get_character("p1:alpha").shield == 7

    def test_invalid_answer_falls_back(self, test_data, match, runtime):
        effect = choose([shield(3)], [shield(7)])

        with runtime.choices.declared_by("p1", {"choose": [["5"]]}):
            runtime.effects.evaluate(effect, self._choose_context(match, test_data))

        assert match.get_character("p1:alpha").shield == 3

    def test_responder_is_asked_again_for_a_repeat_choice(self, test_data, match):
        asked = []

        def responder(pending):
            asked.append(pending.choice_id)
            return [str(len(asked) % 2)]

        runtime = Runtime(test_data, match, responder=responder)
        effect = choose([shield(3)], [shield(7)])

        runtime.effects.evaluate(effect, self._choose_context(match, test_data))
        runtime.effects.evaluate(effect, self._choose_context(match, test_data))

        assert len(asked) == 2
        assert match.get_character("p1:alpha").shield == 10
        assert runtime.choices.recorded == {"choose": [["1"], ["0"]]}

    def test_multihit_stops_on_defeat(self, match, reducer):
        """Hits re-resolve targets; a fallen target is replaced."""
        match.get_character("p2:alpha").hp = 3
        match = play(reducer, match, "p1:alpha", "flurry", ["p2:alpha"])

        match = pass_both(reducer, match)

        damage = of_kind(match.events, EventKind.DAMAGE_APPLIED)
        assert [e.target for e in damage] == ["p2:alpha", "p2:alpha", "p2:beta"]
        assert match.get_character("p2:alpha").defeated

    def test_lethal_hit_reports_hp_lost(self, match, reducer):
        match.get_character("p2:alpha").hp = 3
        match = play(reducer, match, "p1:alpha", "jab", ["p2:alpha"])

        match = pass_both(reducer, match)

        damage = of_kind(match.events, EventKind.DAMAGE_APPLIED)
        assert [(e.magnitude, e.detail) for e in damage] == [(3, "overkill=2")]
        assert match.get_character("p2:alpha").defeated


class TestThornsMultihit:
    """Thorns reflects once per connecting hit and decays only at Turn End."""

    def test_each_hit_reflects(self, match, reducer):
        set_status(match, "p2:alpha", "thorns", stack=2)
        match = play(reducer, match, "p1:alpha", "flurry", ["p2:alpha"])

        match = pass_both(reducer, match)

        reflects = of_kind(match.events, EventKind.THORNS_REFLECT)
        assert len(reflects) == 3
        assert all(e.target == "p1:alpha" and e.magnitude == 2 for e in reflects)
        assert match.get_character("p1:alpha").hp == 94
        assert match.get_character("p2:alpha").hp == 94
        assert match.get_character("p2:alpha").status("thorns").stack == 2

        result = reducer.apply(match, Action.end_turn(match.active_team))

        assert result.success
        assert result.new_state.get_character("p2:alpha").status("thorns").stack == 1
        decayed = [e for e in of_kind(result.events, EventKind.STATUS_CHANGED) if e.target == "p2:alpha"]
        assert [(e.magnitude, e.detail) for e in decayed] == [(-1, "decay thorns.stack=1")]


class TestOtherEffects:
    """Tests for heal, unmodeled and block-play effects."""

    def test_heal_ally(self, match, reducer):
        match.get_character("p1:beta").hp = 90
        match = play(reducer, match, "p1:alpha", "mend", ["p1:beta"])

        match = pass_both(reducer, match)

        healed = of_kind(match.events, EventKind.HEALED)
        assert [(e.target, e.magnitude) for e in healed] == [("p1:beta", 6)]
        assert match.get_character("p1:beta").hp == 96

    def test_unmodeled_effect_changes_nothing(self, match, reducer):
        match = play(reducer, match, "p1:alpha", "riddle")
        hand_before = [c.instance_id for c in match.get_team("p2").hand]

        match = pass_both(reducer, match)

        unmodeled = of_kind(match.events, EventKind.UNMODELED_EFFECT)
        assert len(unmodeled) == 1
        assert unmodeled[0].detail == "Swap hands with the opponent"
        assert [c.instance_id for c in match.get_team("p2").hand] == hand_before

    def test_variable_ultimate_damage(self, match, reducer):
        """X is paid on top of the base ultimate cost and adds to damage."""
        match.get_team("p1").ultimate = 7
        action = Action.ultimate("p1", "p1:alpha", "ult", ["p2:alpha"], spend_amount=2)

        result = reducer.apply(match, action)
        assert result.success
        assert result.new_state.get_team("p1").ultimate == 0

        match = pass_both(reducer, result.new_state)

        assert match.get_character("p2:alpha").hp == 88
