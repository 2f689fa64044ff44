"""
Status Engine - Status bookkeeping, mitigation and healing pipelines.

Each StatusInstance tracks potency/count/stack/value, every dimension
clamped to [0, cap] from its definition. Behaviour is data-driven from
StatusDefinition flags: Turn End decay and ticks, modifier hooks, play
blocking, Taunt/Cover, Invulnerable/Barrier/Thorns and healing reduction.

Damage pipeline, in order:
1. Invulnerable prevents the hit entirely
2. Damage-taken modifiers (Vulnerable, Fortified)
3. Shield pool, then absorbing statuses (Barrier)
4. HP loss and defeat
5. Thorns reflection onto the attacker
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..spec_schema.effect_dsl import PurgeKind, StatusStat
from ..spec_schema.game_data import (
    CardCategory,
    CardDefinition,
    Disposition,
    ModifierTarget,
    StatusDefinition,
    StatusMode,
    TickKind,
    TurnEndBehavior,
)
from .events import EventKind, Lifecycle
from .state import Character, GamePhase, StatusInstance

if TYPE_CHECKING:
    from .runtime import Runtime

logger = logging.getLogger(__name__)

DECAY_STATS = {
    TurnEndBehavior.DECREMENT_COUNT: StatusStat.COUNT,
    TurnEndBehavior.DECREMENT_STACK: StatusStat.STACK,
    TurnEndBehavior.DECREMENT_VALUE: StatusStat.VALUE,
    TurnEndBehavior.HALVE_COUNT: StatusStat.COUNT,
}

PURGE_DISPOSITIONS = {
    PurgeKind.CLEANSE: {Disposition.NEGATIVE},
    PurgeKind.DISPEL: {Disposition.POSITIVE},
    PurgeKind.PURGE: {Disposition.NEGATIVE, Disposition.POSITIVE},
}


@dataclass
class DamageOutcome:
    dealt: int = 0
    absorbed: int = 0
    prevented: bool = False

    @property
    def connected(self) -> bool:
        return not self.prevented


def clamp(value: int, cap: int) -> int:
    return max(0, min(value, cap))


class StatusEngine:
    def __init__(self, runtime: Runtime):
        self.runtime = runtime

    @property
    def _recorder(self):
        return self.runtime.recorder

    def definition(self, kind: str) -> StatusDefinition:
        definition = self.runtime.data.get_status(kind)
        if definition is None:
            raise KeyError(f"Unknown status: {kind}")
        return definition

    # =========================================================================
    # Queries
    # =========================================================================

    def is_active(self, instance: StatusInstance, definition: StatusDefinition) -> bool:
        if definition.mode == StatusMode.POTENCY_COUNT:
            return instance.potency > 0 and instance.count > 0
        return instance.get(definition.primary_stat) > 0

    def level(self, character: Character, kind: str) -> int:
        """Primary stat of an active status, else 0."""
        instance = character.status(kind)
        if instance is None:
            return 0
        definition = self.definition(kind)
        if not self.is_active(instance, definition):
            return 0
        return instance.get(definition.primary_stat)

    def active(self, character: Character) -> list[tuple[StatusInstance, StatusDefinition]]:
        """Active statuses sorted by kind for a stable hook order."""
        result = []
        for kind in sorted(character.statuses):
            instance = character.statuses[kind]
            definition = self.definition(kind)
            if self.is_active(instance, definition):
                result.append((instance, definition))
        return result

    def snapshot(self) -> dict[str, dict[str, int]]:
        """Status levels of every character, for clash evaluation."""
        return {
            c.character_id: {kind: self.level(c, kind) for kind in sorted(c.statuses)}
            for c in self.runtime.match.all_characters()
        }

    def modifier_total(
        self,
        character: Character,
        target: ModifierTarget,
        category: CardCategory | None = None,
    ) -> int:
        total = 0
        for instance, definition in self.active(character):
            for modifier in definition.modifiers:
                if modifier.target != target:
                    continue
                if modifier.categories and category not in modifier.categories:
                    continue
                total += modifier.per_point * instance.get(definition.primary_stat)
        return total

    def modified_power(self, character: Character, card: CardDefinition, power: int) -> int:
        percent = self.modifier_total(character, ModifierTarget.POWER, card.category)
        return max(0, power * (100 + percent) // 100)

    def speed_shift(self, character: Character) -> int:
        return max(-2, min(2, self.modifier_total(character, ModifierTarget.SPEED)))

    def cost_adjustment(self, character: Character, card: CardDefinition) -> int:
        return self.modifier_total(character, ModifierTarget.COST, card.category)

    def blocking_status(self, character: Character, card: CardDefinition) -> str | None:
        """Kind of the status that forbids playing `card`, if any."""
        for _, definition in self.active(character):
            if definition.blocks_all:
                return definition.kind
            if any(tag in card.tags for tag in definition.blocks_tags):
                return definition.kind
            if card.category.value in definition.blocks_tags:
                return definition.kind
        return None

    def has_flag(self, character: Character, flag: str) -> StatusDefinition | None:
        for _, definition in self.active(character):
            if getattr(definition, flag):
                return definition
        return None

    # =========================================================================
    # Mutation
    # =========================================================================

    def apply(
        self,
        character: Character,
        kind: str,
        amount: int,
        stat: StatusStat | None = None,
        source: str | None = None,
    ) -> StatusInstance | None:
        """Add to a status, clamping every dimension to its cap."""
        if character.defeated or amount <= 0:
            return None
        definition = self.definition(kind)
        instance = character.statuses.get(kind)
        if instance is None:
            instance = StatusInstance(kind=kind)
            character.statuses[kind] = instance

        target_stat = stat or definition.primary_stat
        instance.put(
            target_stat, clamp(instance.get(target_stat) + amount, definition.cap(target_stat))
        )
        if (
            definition.mode == StatusMode.POTENCY_COUNT
            and stat is None
            and instance.count == 0
        ):
            instance.count = clamp(1, definition.count_max)

        self._recorder.emit(
            EventKind.STATUS_APPLIED,
            actor=source,
            target=character.character_id,
            magnitude=amount,
            detail=f"{kind}.{target_stat.value}={instance.get(target_stat)}",
        )
        self.prune(character)
        return instance

    def set(
        self,
        character: Character,
        kind: str,
        value: int,
        stat: StatusStat | None = None,
        source: str | None = None,
    ):
        if character.defeated:
            return
        definition = self.definition(kind)
        target_stat = stat or definition.primary_stat
        instance = character.statuses.setdefault(kind, StatusInstance(kind=kind))
        instance.put(target_stat, clamp(value, definition.cap(target_stat)))
        if definition.mode == StatusMode.POTENCY_COUNT and stat is None and instance.count == 0:
            instance.count = clamp(1, definition.count_max)
        self._recorder.emit(
            EventKind.STATUS_CHANGED,
            actor=source,
            target=character.character_id,
            magnitude=instance.get(target_stat),
            detail=f"set {kind}.{target_stat.value}",
        )
        self.prune(character)

    def reduce(
        self,
        character: Character,
        kind: str,
        amount: int,
        stat: StatusStat | None = None,
        floor: int = 0,
        source: str | None = None,
    ) -> int:
        """Decrement a dimension, never below `floor`. Returns the amount removed."""
        instance = character.status(kind)
        if instance is None or amount <= 0:
            return 0
        definition = self.definition(kind)
        target_stat = stat or definition.primary_stat
        current = instance.get(target_stat)
        new_value = max(min(current, floor), current - amount)
        removed = current - new_value
        if removed <= 0:
            return 0
        instance.put(target_stat, clamp(new_value, definition.cap(target_stat)))
        self._recorder.emit(
            EventKind.STATUS_CHANGED,
            actor=source,
            target=character.character_id,
            magnitude=-removed,
            detail=f"reduce {kind}.{target_stat.value}={new_value}",
        )
        self.prune(character)
        return removed

    def spend(
        self,
        character: Character,
        kind: str,
        amount: int,
        allow_partial: bool = False,
    ) -> int | None:
        """Consume a status's primary stat. Returns the amount paid, None if unpaid."""
        available = self.level(character, kind)
        if available <= 0 or (available < amount and not allow_partial):
            return None
        paid = min(available, amount)
        self.reduce(character, kind, paid, source=character.character_id)
        return paid

    def purge(
        self,
        character: Character,
        kind: PurgeKind,
        status: str = "",
        amount: int | None = None,
        source: str | None = None,
    ) -> list[str]:
        """
        Remove statuses whose disposition `kind` covers.

        Without an amount each status is removed outright; with one its
        primary stat is reduced. Returns the kinds that were touched.
        """
        dispositions = PURGE_DISPOSITIONS[kind]
        touched = []
        for instance, definition in self.active(character):
            if definition.disposition not in dispositions:
                continue
            if status and definition.kind != status:
                continue
            if amount is None:
                level = instance.get(definition.primary_stat)
                instance.potency = instance.count = instance.stack = instance.value = 0
                self._recorder.emit(
                    EventKind.STATUS_CHANGED,
                    actor=source,
                    target=character.character_id,
                    magnitude=-level,
                    detail=f"{kind.value} {definition.kind}",
                )
                touched.append(definition.kind)
            elif self.reduce(character, definition.kind, amount, source=source):
                touched.append(definition.kind)
        self.prune(character)
        return touched

    def prune(self, character: Character):
        """Drop statuses whose governing dimension reached zero."""
        for kind in sorted(character.statuses):
            instance = character.statuses[kind]
            if not self.is_active(instance, self.definition(kind)):
                del character.statuses[kind]
                self._recorder.emit(
                    EventKind.STATUS_EXPIRED,
                    target=character.character_id,
                    detail=kind,
                )

    # =========================================================================
    # Damage and healing
    # =========================================================================

    def deal_damage(
        self,
        target: Character,
        amount: int,
        source: Character | None = None,
        attack: bool = False,
    ) -> DamageOutcome:
        """
        Run damage through the mitigation pipeline.

        `attack` marks a hit from an enemy card; only those trigger Thorns.
        """
        outcome = DamageOutcome()
        if target.defeated:
            return outcome
        source_id = source.character_id if source else None

        if self.has_flag(target, "invulnerable"):
            outcome.prevented = True
            self._recorder.emit(
                EventKind.DAMAGE_PREVENTED,
                actor=source_id,
                target=target.character_id,
                magnitude=amount,
                detail="invulnerable",
            )
            return outcome

        percent = self.modifier_total(target, ModifierTarget.DAMAGE_TAKEN)
        remaining = max(0, amount * (100 + percent) // 100)

        if remaining > 0 and target.shield > 0:
            absorbed = min(target.shield, remaining)
            target.shield -= absorbed
            remaining -= absorbed
            outcome.absorbed += absorbed
            self._recorder.emit(
                EventKind.SHIELD_ABSORB,
                actor=source_id,
                target=target.character_id,
                magnitude=absorbed,
                detail="shield",
            )

        for instance, definition in self.active(target):
            if remaining <= 0:
                break
            if not definition.absorbs:
                continue
            stat = definition.primary_stat
            absorbed = min(instance.get(stat), remaining)
            instance.put(stat, instance.get(stat) - absorbed)
            remaining -= absorbed
            outcome.absorbed += absorbed
            self._recorder.emit(
                EventKind.SHIELD_ABSORB,
                actor=source_id,
                target=target.character_id,
                magnitude=absorbed,
                detail=definition.kind,
            )
        self.prune(target)

        if remaining > 0:
            dealt = min(remaining, target.hp)
            target.hp -= dealt
            outcome.dealt = dealt
            self._recorder.emit(
                EventKind.DAMAGE_APPLIED,
                actor=source_id,
                target=target.character_id,
                magnitude=dealt,
                detail=f"overkill={remaining - dealt}" if dealt < remaining else "",
            )
            if target.hp <= 0:
                self.defeat(target)

        if attack and source is not None and not target.defeated:
            self._reflect(target, source)
        return outcome

    def _reflect(self, defender: Character, attacker: Character):
        for instance, definition in self.active(defender):
            if not definition.reflects or attacker.defeated:
                continue
            amount = instance.get(definition.primary_stat)
            self._recorder.emit(
                EventKind.THORNS_REFLECT,
                actor=defender.character_id,
                target=attacker.character_id,
                magnitude=amount,
                detail=definition.kind,
            )
            self.deal_damage(attacker, amount, source=defender, attack=False)

    def heal(self, target: Character, amount: int, source: str | None = None) -> int:
        """
        The single healing path. Every heal, including Regen/Renewal ticks,
        is reduced by the target's healing-reduction statuses.
        """
        if target.defeated or amount <= 0:
            return 0
        percent = 0
        flat = 0
        for instance, definition in self.active(target):
            if definition.healing_reduction is None:
                continue
            points = instance.get(definition.primary_stat)
            percent += definition.healing_reduction.percent_per_point * points
            flat += definition.healing_reduction.flat_per_point * points
        adjusted = max(0, amount - amount * min(percent, 100) // 100 - flat)
        healed = min(adjusted, target.max_hp - target.hp)
        target.hp += healed
        self._recorder.emit(
            EventKind.HEALED,
            actor=source,
            target=target.character_id,
            magnitude=healed,
            detail=f"base={amount}",
        )
        return healed

    def gain_shield(self, target: Character, amount: int, source: str | None = None):
        if target.defeated or amount <= 0:
            return
        target.shield += amount
        self._recorder.emit(
            EventKind.SHIELD_GAINED,
            actor=source,
            target=target.character_id,
            magnitude=amount,
        )

    def defeat(self, character: Character):
        match = self.runtime.match
        character.hp = 0
        character.defeated = True
        character.shield = 0
        character.statuses.clear()
        self._recorder.emit(EventKind.CHARACTER_DEFEATED, target=character.character_id)
        self.runtime.zones.retire(character)

        team = match.get_team(character.team_id)
        if team.is_defeated and match.winner is None:
            match.winner = match.opponent_of(team.team_id)
            match.phase = GamePhase.FINISHED
            self._recorder.emit(
                EventKind.MATCH_WON,
                actor=match.winner,
                lifecycle=Lifecycle.SYSTEM,
            )
            logger.info("Match won by %s on turn %d", match.winner, match.turn)

    # =========================================================================
    # Turn End
    # =========================================================================

    def turn_end(self, character: Character):
        """Ticks, then decay, then prune and shield reset."""
        if character.defeated:
            return
        for kind in sorted(character.statuses):
            instance = character.statuses.get(kind)
            if instance is None or character.defeated:
                continue
            definition = self.definition(kind)
            if not self.is_active(instance, definition):
                continue

            if definition.tick == TickKind.DAMAGE:
                self.deal_damage(character, instance.potency)
            elif definition.tick == TickKind.HEAL:
                self.heal(character, instance.potency, source=character.character_id)
            if character.defeated:
                return

            self._decay(character, instance, definition)

        self.prune(character)
        character.shield = 0

    def _decay(self, character: Character, instance: StatusInstance, definition: StatusDefinition):
        """Apply the Turn End decay rule. Expiry itself is reported by prune."""
        behavior = definition.turn_end
        if behavior == TurnEndBehavior.EXPIRE:
            instance.potency = instance.count = instance.stack = instance.value = 0
            return
        stat = DECAY_STATS.get(behavior)
        if stat is None:
            return
        current = instance.get(stat)
        if behavior == TurnEndBehavior.HALVE_COUNT:
            new_value = current // 2
        else:
            new_value = max(0, current - 1)
        if new_value == current:
            return
        instance.put(stat, new_value)
        self._recorder.emit(
            EventKind.STATUS_CHANGED,
            target=character.character_id,
            magnitude=new_value - current,
            detail=f"decay {definition.kind}.{stat.value}={new_value}",
        )
