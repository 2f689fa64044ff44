"""
Priority & Clash Resolver - resolves one step of declared actions.

Zones resolve fastest first. Inside a zone, entries of opposing teams
that engage each other pair into a clash; everything else resolves solo.
Groups resolve in order of their earliest declaration.

Clash rules:
- Status levels are snapshotted before either side acts, and both sides'
  conditions read the snapshot
- Negate beats a card without Negate
- attack vs attack: higher power is used, lower is cancelled, a tie
  cancels both
- attack vs defense: both are used, higher power first, a tie in
  declaration order; an Evade defense at least as strong makes the
  attack miss; a Counter defense that takes no HP loss opens a counter
  window against the attacker
- anything else: both used in declaration order

A Reuse card, or an Evade defense that made an attack miss, stays
queued and committed after its first use and resolves again in the next
step. It retires after the second use.
"""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING

from ..spec_schema.effect_dsl import Timing
from ..spec_schema.game_data import ZONE_ORDER, CardCategory
from .effect_resolver import EffectContext
from .events import EventKind, Lifecycle
from .state import CounterWindow, QueuedAction

if TYPE_CHECKING:
    from .runtime import Runtime

logger = logging.getLogger(__name__)

NEGATE = "negate"
EVADE = "evade"
COUNTER = "counter"
REUSE = "reuse"


class ClashResolver:
    def __init__(self, runtime: Runtime):
        self.runtime = runtime

    def resolve_step(self):
        """Resolve every queued action, then empty the queue of all but retained cards."""
        match = self.runtime.match
        queue = sorted(match.queue, key=lambda q: q.sequence)
        logger.debug("Resolving step of %d action(s) on turn %d", len(queue), match.turn)

        for zone in ZONE_ORDER:
            for group in self.schedule([q for q in queue if q.zone == zone]):
                if match.is_finished:
                    break
                if len(group) == 1:
                    self.use(group[0])
                else:
                    self.clash(group[0], group[1])

        kept = [q for q in queue if q.retained and not match.is_finished]
        for queued in kept:
            queued.retained = False
            queued.evaded = False
            queued.hit = True
        match.queue = kept
        for team in match.teams.values():
            team.committed = {
                q.instance_id for q in kept if q.team_id == team.team_id and q.instance_id is not None
            }

    # =========================================================================
    # Scheduling
    # =========================================================================

    @staticmethod
    def engages(a: QueuedAction, b: QueuedAction) -> bool:
        if a.primary_target is None:
            return False
        if a.primary_target == b.actor_id:
            return True
        involves_defense = CardCategory.DEFENSE in (a.category, b.category)
        return involves_defense and a.primary_target == b.primary_target

    def schedule(self, entries: list[QueuedAction]) -> list[tuple[QueuedAction, ...]]:
        """Pair mutually engaging opposing entries, earliest partner first."""
        groups: list[tuple[QueuedAction, ...]] = []
        taken: set[int] = set()
        for entry in entries:
            if entry.sequence in taken:
                continue
            taken.add(entry.sequence)
            partner = None
            for other in entries:
                if (
                    other.sequence not in taken
                    and other.team_id != entry.team_id
                    and self.engages(entry, other)
                    and self.engages(other, entry)
                ):
                    partner = other
                    break
            if partner is None:
                groups.append((entry,))
            else:
                taken.add(partner.sequence)
                groups.append((entry, partner))
        return groups

    # =========================================================================
    # Clash
    # =========================================================================

    def clash(self, a: QueuedAction, b: QueuedAction):
        runtime = self.runtime
        event = runtime.recorder.emit(
            EventKind.CLASH,
            actor=a.actor_id,
            target=b.actor_id,
            detail=a.zone.value,
            lifecycle=Lifecycle.SYSTEM,
        )
        snapshot = runtime.statuses.snapshot()
        with runtime.recorder.scope(event):
            for queued in (a, b):
                runtime.dispatcher.dispatch(Timing.BEFORE_CLASH, self._context(queued, snapshot))
            order = self._compare(a, b)
            logger.debug(
                "Clash %s(%d) vs %s(%d) -> %s",
                a.definition.id, a.power, b.definition.id, b.power,
                [q.definition.id for q in order],
            )
            for queued in (a, b):
                runtime.dispatcher.dispatch(Timing.AFTER_CLASH, self._context(queued, snapshot))
        start = len(runtime.match.events)
        for queued in order:
            if runtime.match.is_finished:
                break
            self.use(queued, snapshot)

        if {a.category, b.category} == {CardCategory.ATTACK, CardCategory.DEFENSE}:
            attack, defense = (a, b) if a.category == CardCategory.ATTACK else (b, a)
            if defense.definition.has_keyword(COUNTER) and self._fully_blocked(attack, defense, start):
                self._open_counter(attack, defense)

    def _fully_blocked(self, attack: QueuedAction, defense: QueuedAction, start: int) -> bool:
        """The attack was used and took no HP from the character the defense protects."""
        match = self.runtime.match
        if attack.halted or defense.halted or match.is_finished:
            return False
        protected = defense.primary_target or defense.actor_id
        return not any(
            e.kind == EventKind.DAMAGE_APPLIED and e.actor == attack.actor_id and e.target == protected
            for e in match.events[start:]
        )

    def _open_counter(self, attack: QueuedAction, defense: QueuedAction):
        match = self.runtime.match
        attacker = match.get_character(attack.actor_id)
        if attacker is None or attacker.defeated:
            return
        match.counter_window = CounterWindow(team_id=defense.team_id, attacker_id=attack.actor_id)
        self.runtime.recorder.emit(
            EventKind.COUNTER_OPENED,
            actor=defense.actor_id,
            target=attack.actor_id,
            detail=defense.definition.id,
        )
        logger.debug("%s may counter %s out of turn", defense.team_id, attack.actor_id)

    def _compare(self, a: QueuedAction, b: QueuedAction) -> list[QueuedAction]:
        dispatcher = self.runtime.dispatcher
        a_negates = a.definition.has_keyword(NEGATE)
        b_negates = b.definition.has_keyword(NEGATE)
        if a_negates and not b_negates and not a.halted:
            dispatcher.negate(b, a.actor_id)
        elif b_negates and not a_negates and not b.halted:
            dispatcher.negate(a, b.actor_id)
        if a.halted or b.halted:
            return [a, b]

        categories = (a.category, b.category)
        if categories == (CardCategory.ATTACK, CardCategory.ATTACK):
            if a.power > b.power:
                dispatcher.cancel(b, "overpowered")
            elif b.power > a.power:
                dispatcher.cancel(a, "overpowered")
            else:
                dispatcher.cancel(a, "tie")
                dispatcher.cancel(b, "tie")
            return [a, b]

        if set(categories) == {CardCategory.ATTACK, CardCategory.DEFENSE}:
            attack, defense = (a, b) if a.category == CardCategory.ATTACK else (b, a)
            if defense.definition.has_keyword(EVADE) and defense.power >= attack.power:
                attack.hit = False
                defense.evaded = True
            if attack.power > defense.power:
                return [attack, defense]
            if defense.power > attack.power:
                return [defense, attack]
        return [a, b]

    # =========================================================================
    # Use
    # =========================================================================

    def _context(self, queued: QueuedAction, snapshot=None, targets=None) -> EffectContext:
        match = self.runtime.match
        if targets is None:
            targets = [match.get_character(t) for t in queued.targets]
            targets = [t for t in targets if t is not None]
        return EffectContext(
            actor=match.get_character(queued.actor_id),
            definition=queued.definition,
            timing=Timing.ON_USE,
            targets=targets,
            power=queued.power,
            x=queued.x,
            queued=queued,
            snapshot=snapshot,
        )

    def use(self, queued: QueuedAction, snapshot=None):
        """Drive one action through its use phases, then retire its card."""
        runtime = self.runtime
        match = runtime.match
        dispatcher = runtime.dispatcher
        actor = match.get_character(queued.actor_id)
        if actor.defeated and not queued.halted:
            dispatcher.cancel(queued, "actor defeated")

        targets = []
        if queued.halted:
            lifecycle = Lifecycle.NEGATED if queued.negated else Lifecycle.CANCELLED
            scope = runtime.recorder.scope_id(queued.played_event_id, lifecycle)
        else:
            event = runtime.recorder.emit(
                EventKind.CARD_USED,
                actor=queued.actor_id,
                target=queued.primary_target,
                magnitude=queued.power,
                detail=queued.definition.id,
                lifecycle=Lifecycle.USED,
                parent_id=queued.played_event_id,
            )
            scope = runtime.recorder.scope(event)

        with scope:
            if not queued.halted:
                targets = self._use_targets(queued, actor)
                ctx = self._context(queued, snapshot, targets)
                dispatcher.dispatch(Timing.BEFORE_USE, ctx)
                ctx.power = queued.power
                if (
                    not queued.halted
                    and queued.definition.target.takes_declared_target
                    and not targets
                ):
                    dispatcher.cancel(queued, "no legal target")
                dispatcher.dispatch(Timing.ON_USE, ctx)
                if queued.hit:
                    dispatcher.dispatch(Timing.ON_HIT, ctx)
                elif not queued.halted:
                    runtime.recorder.emit(
                        EventKind.MISSED, actor=queued.actor_id, target=queued.primary_target,
                    )
                dispatcher.dispatch(Timing.AFTER_USE, ctx)
            ctx = self._context(queued, snapshot, targets)
            dispatcher.dispatch(Timing.ALWAYS, ctx)
            if not queued.halted:
                dispatcher.register_turn_end(queued, targets)

        queued.uses += 1
        if self._retains(queued):
            queued.retained = True
            runtime.recorder.emit(
                EventKind.CARD_REUSED,
                actor=queued.actor_id,
                detail=queued.definition.id,
                parent_id=queued.played_event_id,
            )
        elif queued.instance_id is not None:
            team = match.get_team(queued.team_id)
            runtime.zones.finalize_play(team, queued.instance_id, queued.definition)

    def _retains(self, queued: QueuedAction) -> bool:
        """A Reuse card, or an Evade defense that made an attack miss, resolves once more."""
        if queued.halted or queued.uses > 1 or self.runtime.match.is_finished:
            return False
        return queued.definition.has_keyword(REUSE) or queued.evaded

    def _use_targets(self, queued: QueuedAction, actor):
        targeting = self.runtime.targeting
        primary_id = queued.primary_target
        if queued.definition.target.takes_declared_target and primary_id:
            primary = self.runtime.match.get_character(primary_id)
            if primary is not None and not primary.defeated:
                redirected = targeting.cover_redirect(queued, primary)
                if redirected is not primary:
                    queued.targets = (redirected.character_id,) + queued.targets[1:]
        return targeting.resolve_targets(queued, actor)
