"""
Timing Window Dispatcher - fires hooks at each named phase.

For every phase the dispatcher runs status hooks first, then the card's
own effects declared for that phase:
- On Play: statuses that damage their owner whenever a card is played
- Before Clash / Before Use: power modifiers are locked in once
- Before Use: a defense-cancelling status (Stagger) cancels a defense

Always fires even for cancelled or negated actions; every other phase
is skipped once an action is halted. Turn End card effects are
registered as delayed hooks and fire at the next Turn End.
"""

from __future__ import annotations
import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from ..spec_schema.effect_dsl import Timing
from ..spec_schema.game_data import CardCategory
from .effect_resolver import EffectContext
from .events import EventKind, Lifecycle
from .state import DelayedHook

if TYPE_CHECKING:
    from .runtime import Runtime

logger = logging.getLogger(__name__)


class TimingDispatcher:
    def __init__(self, runtime: Runtime):
        self.runtime = runtime

    def dispatch(self, timing: Timing, ctx: EffectContext):
        queued = ctx.queued
        if timing != Timing.ALWAYS and queued is not None and queued.halted:
            return
        ctx = replace(ctx, timing=timing)
        self._status_hooks(timing, ctx)
        if timing != Timing.ALWAYS and queued is not None and queued.halted:
            return
        if queued is None:
            self.runtime.effects.run_phase(ctx)
            return
        ctx.power = queued.power
        with self.runtime.choices.declared_by(queued.team_id, queued.choice_answers):
            self.runtime.effects.run_phase(ctx)

    def _status_hooks(self, timing: Timing, ctx: EffectContext):
        statuses = self.runtime.statuses
        actor = ctx.actor
        queued = ctx.queued

        if timing == Timing.ON_PLAY:
            for instance, definition in statuses.active(actor):
                if definition.damages_on_play:
                    statuses.deal_damage(actor, instance.potency)

        if timing in (Timing.BEFORE_CLASH, Timing.BEFORE_USE) and queued and not queued.power_locked:
            queued.power = statuses.modified_power(actor, queued.definition, queued.power)
            queued.power_locked = True

        if (
            timing == Timing.BEFORE_USE
            and queued is not None
            and queued.category == CardCategory.DEFENSE
        ):
            staggered = statuses.has_flag(actor, "cancels_defense")
            if staggered is not None:
                statuses.reduce(actor, staggered.kind, 1, source=actor.character_id)
                self.cancel(queued, staggered.kind)

    def cancel(self, queued, reason: str):
        queued.cancelled = True
        self.runtime.recorder.emit(
            EventKind.CANCELLED,
            actor=queued.actor_id,
            target=queued.primary_target,
            detail=reason,
            lifecycle=Lifecycle.CANCELLED,
            parent_id=queued.played_event_id,
        )

    def negate(self, queued, source: str):
        queued.negated = True
        self.runtime.recorder.emit(
            EventKind.NEGATED,
            actor=source,
            target=queued.actor_id,
            detail=queued.definition.id,
            lifecycle=Lifecycle.NEGATED,
            parent_id=queued.played_event_id,
        )

    # =========================================================================
    # Delayed Turn End hooks
    # =========================================================================

    def register_turn_end(self, queued, targets: list):
        if not any(e.timing == Timing.TURN_END for e in queued.definition.effects):
            return
        self.runtime.match.delayed.append(
            DelayedHook(
                sequence=queued.sequence,
                team_id=queued.team_id,
                actor_id=queued.actor_id,
                definition=queued.definition,
                targets=tuple(t.character_id for t in targets),
                power=queued.power,
                x=queued.x,
                choice_answers=queued.choice_answers,
            )
        )

    def fire_turn_end(self):
        match = self.runtime.match
        hooks, match.delayed = match.delayed, []
        for hook in hooks:
            actor = match.get_character(hook.actor_id)
            if actor is None or actor.defeated or match.is_finished:
                continue
            targets = [match.get_character(t) for t in hook.targets]
            ctx = EffectContext(
                actor=actor,
                definition=hook.definition,
                timing=Timing.TURN_END,
                targets=[t for t in targets if t is not None and not t.defeated],
                power=hook.power,
                x=hook.x,
            )
            logger.debug("Firing turn-end hook of %s for %s", hook.definition.id, hook.actor_id)
            with self.runtime.choices.declared_by(hook.team_id, hook.choice_answers):
                self.runtime.effects.run_phase(ctx)
