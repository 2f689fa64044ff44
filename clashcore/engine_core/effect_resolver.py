"""
Effect Resolver - Structured effect-tree interpreter.

This module evaluates card effects against match state:
- Control flow variants (condition, multihit, spend, choose)
- Numeric effects routed through the status engine's pipelines
- Status set/reduce/apply with clamping, and purges by disposition
- Card movement (draw, create, scry, seek, search)
- Match-level effects (block_play, push)
- Transform selection at declaration time

Dispatch is a closed table keyed by EffectType; there is no per-card code.
Every primitive mutation emits one ResolutionEvent.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Callable, TYPE_CHECKING

from ..spec_schema.effect_dsl import (
    Condition,
    ConditionKind,
    Effect,
    EffectType,
    Recipient,
    SpendResource,
    Timing,
)
from ..spec_schema.game_data import CardDefinition
from .choices import ChoiceKind
from .events import EventKind
from .state import Character, QueuedAction, Team

if TYPE_CHECKING:
    from .runtime import Runtime


@dataclass
class EffectContext:
    """
    Context for resolving one phase of one action.

    `snapshot` holds pre-clash status levels; when set, conditions read
    it instead of live state.
    """
    actor: Character
    definition: CardDefinition
    timing: Timing
    targets: list[Character]
    power: int
    x: int
    queued: QueuedAction | None = None
    snapshot: dict[str, dict[str, int]] | None = None

    @property
    def primary_target(self) -> Character | None:
        return self.targets[0] if self.targets else None


class EffectResolver:
    def __init__(self, runtime: Runtime):
        self.runtime = runtime
        self._handlers: dict[EffectType, Callable[[Effect, EffectContext], None]] = {
            EffectType.CONDITION: self._condition,
            EffectType.MULTIHIT: self._multihit,
            EffectType.SPEND: self._spend,
            EffectType.CHOOSE: self._choose,
            EffectType.DAMAGE: self._damage,
            EffectType.SHIELD: self._shield,
            EffectType.HEAL: self._heal,
            EffectType.GAIN_ULTIMATE: self._gain_ultimate,
            EffectType.GAIN_ENERGY: self._gain_energy,
            EffectType.APPLY_STATUS: self._apply_status,
            EffectType.SET_STATUS: self._set_status,
            EffectType.REDUCE_STATUS: self._reduce_status,
            EffectType.PURGE: self._purge,
            EffectType.DRAW: self._draw,
            EffectType.CREATE_CARD: self._create_card,
            EffectType.SCRY: self._scry,
            EffectType.SEEK: self._seek,
            EffectType.SEARCH: self._search,
            EffectType.BLOCK_PLAY: self._block_play,
            EffectType.PUSH: self._push,
            EffectType.UNMODELED: self._unmodeled,
        }

    def run_phase(self, ctx: EffectContext):
        """Evaluate the card's top-level effects declared for ctx.timing."""
        for effect in ctx.definition.effects:
            if effect.timing == ctx.timing:
                self.evaluate(effect, ctx)

    def evaluate(self, effect: Effect, ctx: EffectContext):
        if self.runtime.match.is_finished:
            return
        self._handlers[effect.effect_type](effect, ctx)

    def _evaluate_all(self, effects: tuple[Effect, ...], ctx: EffectContext):
        for effect in effects:
            self.evaluate(effect, ctx)

    # =========================================================================
    # Conditions and transforms
    # =========================================================================

    def condition_holds(
        self,
        condition: Condition,
        actor: Character,
        target: Character | None,
        snapshot: dict[str, dict[str, int]] | None = None,
    ) -> bool:
        kind = condition.kind
        if kind == ConditionKind.SELF_HP_AT_MOST:
            return actor.hp * 100 <= actor.max_hp * condition.minimum

        subject = actor if kind in (
            ConditionKind.SELF_HAS_STATUS, ConditionKind.SELF_MISSING_STATUS,
        ) else target
        if subject is None:
            level = 0
        elif snapshot is not None:
            level = snapshot.get(subject.character_id, {}).get(condition.status, 0)
        else:
            level = self.runtime.statuses.level(subject, condition.status)

        present = level >= max(condition.minimum, 1)
        if kind in (ConditionKind.SELF_HAS_STATUS, ConditionKind.TARGET_HAS_STATUS):
            return present
        return not present

    def select_transform(
        self,
        definition: CardDefinition,
        actor: Character,
        target: Character | None,
    ) -> CardDefinition:
        """The last transform candidate whose condition holds wins."""
        chosen = definition
        for transform in definition.transforms:
            if self.condition_holds(transform.condition, actor, target):
                candidate = self.runtime.data.get_card(actor.definition_id, transform.into)
                if candidate is not None:
                    chosen = candidate
        return chosen

    # =========================================================================
    # Helpers
    # =========================================================================

    def _team(self, ctx: EffectContext) -> Team:
        return self.runtime.match.get_team(ctx.actor.team_id)

    def _recipients(self, effect: Effect, ctx: EffectContext) -> list[Character]:
        if effect.recipient == Recipient.SELF:
            return [] if ctx.actor.defeated else [ctx.actor]
        if effect.recipient == Recipient.ALL_ALLIES:
            return self.runtime.targeting.allies(ctx.actor)
        if effect.recipient == Recipient.ALL_ENEMIES:
            return self.runtime.targeting.enemies(ctx.actor)
        return [t for t in ctx.targets if not t.defeated]

    def _amount(self, effect: Effect, ctx: EffectContext) -> int:
        if effect.amount is None:
            return 0
        return effect.amount.resolve(ctx.power, ctx.x)

    # =========================================================================
    # Control flow
    # =========================================================================

    def _condition(self, effect: Effect, ctx: EffectContext):
        if self.condition_holds(effect.condition, ctx.actor, ctx.primary_target, ctx.snapshot):
            self._evaluate_all(effect.children, ctx)

    def _multihit(self, effect: Effect, ctx: EffectContext):
        """Each hit re-resolves targets; mitigation and Thorns run per hit."""
        hits = effect.hits.resolve(ctx.power, ctx.x) if effect.hits else 0
        targets = ctx.targets
        for _ in range(hits):
            targets = self.runtime.targeting.refresh(ctx.actor, ctx.definition, targets)
            if not targets or ctx.actor.defeated:
                break
            self._evaluate_all(effect.children, replace(ctx, targets=targets))

    def _spend(self, effect: Effect, ctx: EffectContext):
        """Optional payment. Unpaid spends skip their children silently."""
        amount = self._amount(effect, ctx)
        team = self._team(ctx)
        actor_id = ctx.actor.character_id
        paid = False

        if effect.resource == SpendResource.ENERGY:
            if team.energy >= amount or (effect.allow_partial and team.energy > 0):
                spent = min(team.energy, amount)
                team.energy -= spent
                paid = True
                self.runtime.recorder.emit(EventKind.ENERGY_SPENT, actor=actor_id, magnitude=spent)
        elif effect.resource == SpendResource.ULTIMATE:
            if team.ultimate >= amount or (effect.allow_partial and team.ultimate > 0):
                spent = min(team.ultimate, amount)
                team.ultimate -= spent
                paid = True
                self.runtime.recorder.emit(EventKind.ULTIMATE_CHANGED, actor=actor_id, magnitude=-spent)
        elif effect.resource == SpendResource.CARD:
            paid = self.runtime.zones.discard_for_cost(team, amount)
        elif effect.resource == SpendResource.STATUS:
            paid = self.runtime.statuses.spend(
                ctx.actor, effect.status, amount, effect.allow_partial,
            ) is not None

        if paid:
            self._evaluate_all(effect.children, ctx)
        else:
            self.runtime.recorder.emit(
                EventKind.SPEND_SKIPPED,
                actor=actor_id,
                magnitude=amount,
                detail=effect.status or effect.resource.value,
            )

    def _choose(self, effect: Effect, ctx: EffectContext):
        options = [str(i) for i in range(len(effect.options))]
        picked = self.runtime.choices.ask(
            ChoiceKind.CHOOSE,
            ctx.actor.team_id,
            options,
            prompt=f"Choose an option for {ctx.definition.id}",
        )[0]
        self._evaluate_all(effect.options[int(picked)], ctx)

    # =========================================================================
    # Numeric effects
    # =========================================================================

    def _damage(self, effect: Effect, ctx: EffectContext):
        amount = self._amount(effect, ctx)
        for target in self._recipients(effect, ctx):
            self.runtime.statuses.deal_damage(
                target,
                amount,
                source=ctx.actor,
                attack=target.team_id != ctx.actor.team_id,
            )

    def _shield(self, effect: Effect, ctx: EffectContext):
        amount = self._amount(effect, ctx)
        for target in self._recipients(effect, ctx):
            self.runtime.statuses.gain_shield(target, amount, source=ctx.actor.character_id)

    def _heal(self, effect: Effect, ctx: EffectContext):
        amount = self._amount(effect, ctx)
        for target in self._recipients(effect, ctx):
            self.runtime.statuses.heal(target, amount, source=ctx.actor.character_id)

    def _gain_ultimate(self, effect: Effect, ctx: EffectContext):
        amount = self._amount(effect, ctx)
        self._team(ctx).ultimate += amount
        self.runtime.recorder.emit(
            EventKind.ULTIMATE_CHANGED, actor=ctx.actor.character_id, magnitude=amount,
        )

    def _gain_energy(self, effect: Effect, ctx: EffectContext):
        amount = self._amount(effect, ctx)
        self._team(ctx).energy += amount
        self.runtime.recorder.emit(
            EventKind.ENERGY_GAINED, actor=ctx.actor.character_id, magnitude=amount,
        )

    # =========================================================================
    # Status effects
    # =========================================================================

    def _apply_status(self, effect: Effect, ctx: EffectContext):
        amount = self._amount(effect, ctx)
        for target in self._recipients(effect, ctx):
            self.runtime.statuses.apply(
                target, effect.status, amount, effect.stat, source=ctx.actor.character_id,
            )

    def _set_status(self, effect: Effect, ctx: EffectContext):
        value = self._amount(effect, ctx)
        for target in self._recipients(effect, ctx):
            self.runtime.statuses.set(
                target, effect.status, value, effect.stat, source=ctx.actor.character_id,
            )

    def _reduce_status(self, effect: Effect, ctx: EffectContext):
        amount = self._amount(effect, ctx)
        for target in self._recipients(effect, ctx):
            self.runtime.statuses.reduce(
                target,
                effect.status,
                amount,
                effect.stat,
                floor=effect.floor,
                source=ctx.actor.character_id,
            )

    def _purge(self, effect: Effect, ctx: EffectContext):
        amount = self._amount(effect, ctx) if effect.amount is not None else None
        for target in self._recipients(effect, ctx):
            self.runtime.statuses.purge(
                target, effect.purge, effect.status, amount, source=ctx.actor.character_id,
            )

    # =========================================================================
    # Card effects
    # =========================================================================

    def _draw(self, effect: Effect, ctx: EffectContext):
        self.runtime.zones.draw(self._team(ctx), self._amount(effect, ctx))

    def _create_card(self, effect: Effect, ctx: EffectContext):
        team = self._team(ctx)
        for _ in range(self._amount(effect, ctx)):
            self.runtime.zones.create(team, ctx.actor, effect.card_id, effect.destination)

    def _scry(self, effect: Effect, ctx: EffectContext):
        self.runtime.zones.scry(self._team(ctx), self._amount(effect, ctx))

    def _seek(self, effect: Effect, ctx: EffectContext):
        self.runtime.zones.seek(self._team(ctx), self._amount(effect, ctx), effect.criteria)

    def _search(self, effect: Effect, ctx: EffectContext):
        self.runtime.zones.search(self._team(ctx), effect.criteria)

    # =========================================================================
    # Match effects
    # =========================================================================

    def _block_play(self, effect: Effect, ctx: EffectContext):
        match = self.runtime.match
        target = ctx.primary_target
        team_id = target.team_id if target else match.opponent_of(ctx.actor.team_id)
        if team_id == ctx.actor.team_id:
            team_id = match.opponent_of(ctx.actor.team_id)
        match.round_locks.add(team_id)
        self.runtime.recorder.emit(
            EventKind.PLAY_LOCKED, actor=ctx.actor.character_id, target=team_id,
        )

    def _push(self, effect: Effect, ctx: EffectContext):
        for target in self._recipients(effect, ctx):
            self.runtime.positions.push(target)

    def _unmodeled(self, effect: Effect, ctx: EffectContext):
        """Documented fallback: record the authored text, change nothing."""
        self.runtime.recorder.emit(
            EventKind.UNMODELED_EFFECT,
            actor=ctx.actor.character_id,
            detail=effect.text,
        )
