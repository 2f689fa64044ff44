"""
Targeting & Restriction Engine.

- Legal-target enumeration by target pattern
- Taunt: single-target enemy cards must pick a Taunting enemy when one exists
  (cards tagged random, aoe, splash or bounce are exempt)
- Cover: a covering ally takes a qualifying single-target attack,
  consuming one Cover charge per redirect
- Structured play restrictions, checked at declaration
- Area resolution (all, random, opposed, splash, bounce) at use time
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from ..spec_schema.game_data import (
    AREA_TAGS,
    CardCategory,
    CardDefinition,
    CoverScope,
    MatchMode,
    Restriction,
    RestrictionKind,
    RestrictionSubject,
    TargetPattern,
)
from .choices import ChoiceKind
from .errors import IllegalAction, IllegalReason
from .events import EventKind
from .state import Character, QueuedAction

if TYPE_CHECKING:
    from .runtime import Runtime


class TargetingEngine:
    def __init__(self, runtime: Runtime):
        self.runtime = runtime

    @property
    def _match(self):
        return self.runtime.match

    def allies(self, actor: Character) -> list[Character]:
        return self._match.get_team(actor.team_id).living()

    def enemies(self, actor: Character) -> list[Character]:
        return self._match.get_team(self._match.opponent_of(actor.team_id)).living()

    @staticmethod
    def is_area(definition: CardDefinition) -> bool:
        return bool(AREA_TAGS.intersection(definition.tags))

    def taunt_applies(self, definition: CardDefinition) -> bool:
        return definition.target == TargetPattern.ENEMY and not self.is_area(definition)

    def legal_targets(self, actor: Character, definition: CardDefinition) -> list[Character]:
        pattern = definition.target
        if pattern == TargetPattern.SELF:
            return [actor]
        if pattern == TargetPattern.ALLY:
            return self.allies(actor)
        if pattern == TargetPattern.ENEMY:
            enemies = self.enemies(actor)
            if self.taunt_applies(definition):
                taunters = [e for e in enemies if self.runtime.statuses.has_flag(e, "taunt")]
                if taunters:
                    return taunters
            return enemies
        return []

    def validate_declaration(
        self,
        actor: Character,
        definition: CardDefinition,
        targets: tuple[str, ...],
    ) -> tuple[str, ...]:
        """Check declared targets; returns the normalized target tuple."""
        if not definition.target.takes_declared_target:
            if targets:
                raise IllegalAction(
                    IllegalReason.ILLEGAL_TARGET,
                    f"{definition.id} targets {definition.target.value} and takes no declared target",
                )
            return ()

        if definition.target == TargetPattern.SELF and not targets:
            return (actor.character_id,)
        if len(targets) != 1:
            raise IllegalAction(
                IllegalReason.ILLEGAL_TARGET, f"{definition.id} requires exactly one target"
            )
        legal_ids = [c.character_id for c in self.legal_targets(actor, definition)]
        if targets[0] not in legal_ids:
            raise IllegalAction(
                IllegalReason.ILLEGAL_TARGET,
                f"{targets[0]} is not a legal target for {definition.id} (legal: {legal_ids})",
            )
        return targets

    def check_restrictions(
        self,
        actor: Character,
        definition: CardDefinition,
        target: Character | None,
    ):
        for restriction in definition.restrictions:
            subject = actor if restriction.subject == RestrictionSubject.SELF else target
            matched = subject is not None and self._restriction_matches(restriction, subject)
            if restriction.kind == RestrictionKind.REQUIRE and not matched:
                raise IllegalAction(
                    IllegalReason.RESTRICTION_FAILED,
                    f"{definition.id}: requirement not met ({restriction.text or restriction.subject.value})",
                )
            if restriction.kind == RestrictionKind.FORBID and matched:
                raise IllegalAction(
                    IllegalReason.RESTRICTION_FAILED,
                    f"{definition.id}: forbidden ({restriction.text or restriction.subject.value})",
                )

    def _restriction_matches(self, restriction: Restriction, subject: Character) -> bool:
        checks = [
            self.runtime.statuses.level(subject, req.status) >= req.minimum
            for req in restriction.statuses
        ]
        if restriction.mode == MatchMode.ALL:
            return all(checks)
        return any(checks)

    # =========================================================================
    # Use-time resolution
    # =========================================================================

    def cover_redirect(self, queued: QueuedAction, target: Character) -> Character:
        """Divert a qualifying single-target attack onto a covering ally."""
        definition = queued.definition
        if (
            definition.target != TargetPattern.ENEMY
            or definition.category != CardCategory.ATTACK
            or self.is_area(definition)
        ):
            return target

        candidates = []
        for ally in self.allies(target):
            if ally.character_id == target.character_id:
                continue
            cover = self.runtime.statuses.has_flag(ally, "cover")
            if cover is None:
                continue
            if cover.cover == CoverScope.ADJACENT and not self.runtime.positions.are_adjacent(ally, target):
                continue
            candidates.append((ally, cover.kind))
        if not candidates:
            return target

        chosen = candidates[0]
        if len(candidates) > 1:
            picked = self.runtime.choices.ask(
                ChoiceKind.REDIRECT,
                target.team_id,
                [ally.character_id for ally, _ in candidates],
                prompt=f"Choose who covers {target.character_id}",
            )[0]
            chosen = next(c for c in candidates if c[0].character_id == picked)

        coverer, kind = chosen
        self.runtime.recorder.emit(
            EventKind.TARGET_REDIRECTED,
            actor=coverer.character_id,
            target=target.character_id,
            detail=kind,
        )
        self.runtime.statuses.reduce(coverer, kind, 1, source=coverer.character_id)
        return coverer

    def resolve_targets(self, queued: QueuedAction, actor: Character) -> list[Character]:
        """Expand the declared target into the characters an action lands on."""
        definition = queued.definition
        pattern = definition.target
        if pattern == TargetPattern.SELF:
            return [] if actor.defeated else [actor]
        if pattern == TargetPattern.ALL_ENEMIES:
            return self.enemies(actor)
        if pattern == TargetPattern.ALL_ALLIES:
            return self.allies(actor)
        if pattern == TargetPattern.RANDOM_ENEMY:
            enemies = self.enemies(actor)
            return [self.runtime.rng.pick(enemies)] if enemies else []
        if pattern == TargetPattern.OPPOSED:
            opposed = self.runtime.positions.opposed(actor)
            return [opposed] if opposed is not None and not opposed.defeated else []

        primary = self._match.get_character(queued.primary_target) if queued.primary_target else None
        if primary is None or primary.defeated:
            primary = self.replacement(actor, definition)
        if primary is None:
            return []

        targets = [primary]
        if "splash" in definition.tags:
            targets.extend(self.runtime.positions.adjacent(primary))
        if "bounce" in definition.tags:
            pool = self.runtime.positions.adjacent(primary)
            for _ in range(min(definition.bounce or 1, len(pool))):
                targets.append(pool.pop(self.runtime.rng.next_int(0, len(pool) - 1)))
        return targets

    def replacement(self, actor: Character, definition: CardDefinition) -> Character | None:
        """First legal living target by slot, used when the original fell."""
        legal = self.legal_targets(actor, definition)
        return legal[0] if legal else None

    def refresh(
        self,
        actor: Character,
        definition: CardDefinition,
        targets: list[Character],
    ) -> list[Character]:
        """Re-resolve targets between hits of a multihit effect."""
        if all(not t.defeated for t in targets):
            return targets
        if definition.target.takes_declared_target and targets and targets[0].defeated:
            replacement = self.replacement(actor, definition)
            rest = [t for t in targets[1:] if not t.defeated]
            return ([replacement] if replacement else []) + rest
        return [t for t in targets if not t.defeated]
