"""
Game Data Validation - Load-time integrity checks for authored data.

Validates that:
1. Identifiers are unique (characters, cards within a character)
2. References resolve (statuses, keywords, transform and created cards)
3. Transform graphs are acyclic
4. Effect trees are well-formed for their variant
5. Status caps are usable for the status's mode
"""

from __future__ import annotations
from dataclasses import dataclass

from ..engine_core.errors import DataIntegrityError
from .effect_dsl import Effect, EffectType, SpendResource, walk_effects
from .game_data import CardDefinition, CharacterDefinition, GameData, StatusDefinition


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_game_data(data: GameData) -> ValidationResult:
    """
    Validate a complete game data snapshot.

    Returns ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not data.version:
        errors.append("version is required")

    status_kinds = _unique([s.kind for s in data.statuses], "status", errors)
    keyword_ids = _unique([k.id for k in data.keywords], "keyword", errors)
    _unique([c.id for c in data.characters], "character", errors)

    for status in data.statuses:
        errors.extend(_validate_status(status))

    for character in data.characters:
        card_ids = _unique(
            [card.id for card in character.cards], f"card in character '{character.id}'", errors,
        )
        for card in character.cards:
            errors.extend(_validate_card(card, card_ids, status_kinds, keyword_ids))
            warnings.extend(_card_warnings(card))
        errors.extend(_validate_transform_graph(character))

        referenced = {t.into for card in character.cards for t in card.transforms}
        for card in character.cards:
            if card.transform_only and card.id not in referenced:
                warnings.append(
                    f"Card '{character.id}/{card.id}' is transform-only but no transform targets it"
                )

    return ValidationResult(valid=len(errors) == 0, errors=errors, warnings=warnings)


def require_valid(data: GameData) -> ValidationResult:
    """Validate and raise DataIntegrityError on any error."""
    result = validate_game_data(data)
    if not result.valid:
        raise DataIntegrityError(result.errors)
    return result


def _unique(ids: list[str], label: str, errors: list[str]) -> set[str]:
    seen: set[str] = set()
    for item in ids:
        if not item:
            errors.append(f"Empty {label} id")
        elif item in seen:
            errors.append(f"Duplicate {label} id: {item}")
        seen.add(item)
    return seen


def _validate_status(status: StatusDefinition) -> list[str]:
    errors = []
    if status.cap(status.primary_stat) <= 0:
        errors.append(
            f"Status '{status.kind}' has no cap for its primary stat {status.primary_stat.value}"
        )
    if status.mode.value == "potency_count" and status.count_max <= 0:
        errors.append(f"Status '{status.kind}' is potency_count but count_max is 0")
    for modifier in status.modifiers:
        if modifier.per_point == 0:
            errors.append(f"Status '{status.kind}' has a zero modifier for {modifier.target.value}")
    return errors


def _validate_card(
    card: CardDefinition,
    card_ids: set[str],
    status_kinds: set[str],
    keyword_ids: set[str],
) -> list[str]:
    errors = []
    prefix = f"Card '{card.id}'"

    if card.cost.energy < 0 or card.cost.ultimate < 0:
        errors.append(f"{prefix}: cost must be non-negative")
    if card.cost.variable not in (None, "energy", "ultimate"):
        errors.append(f"{prefix}: unknown variable cost resource '{card.cost.variable}'")
    if card.power_max is not None and card.power_max < card.power:
        errors.append(f"{prefix}: power range {card.power}-{card.power_max} is empty")

    for keyword in card.keywords:
        if keyword not in keyword_ids:
            errors.append(f"{prefix}: references missing keyword '{keyword}'")

    for restriction in card.restrictions:
        if not restriction.statuses:
            errors.append(f"{prefix}: restriction has no statuses")
        for requirement in restriction.statuses:
            if requirement.status not in status_kinds:
                errors.append(f"{prefix}: restriction references missing status '{requirement.status}'")

    for transform in card.transforms:
        if transform.into not in card_ids:
            errors.append(f"{prefix}: transform target '{transform.into}' does not exist")
        if transform.condition.status and transform.condition.status not in status_kinds:
            errors.append(
                f"{prefix}: transform condition references missing status '{transform.condition.status}'"
            )

    for effect in walk_effects(card.effects):
        errors.extend(_validate_effect(effect, prefix, card_ids, status_kinds))

    return errors


def _validate_effect(
    effect: Effect,
    prefix: str,
    card_ids: set[str],
    status_kinds: set[str],
) -> list[str]:
    errors = []
    kind = effect.effect_type

    needs_amount = {
        EffectType.DAMAGE, EffectType.SHIELD, EffectType.HEAL,
        EffectType.APPLY_STATUS, EffectType.SET_STATUS, EffectType.REDUCE_STATUS,
        EffectType.SPEND, EffectType.GAIN_ULTIMATE, EffectType.GAIN_ENERGY,
        EffectType.DRAW, EffectType.SCRY, EffectType.SEEK,
    }
    if kind in needs_amount and effect.amount is None:
        errors.append(f"{prefix}: {kind.value} effect requires an amount")

    status_effects = {EffectType.APPLY_STATUS, EffectType.SET_STATUS, EffectType.REDUCE_STATUS}
    if kind in status_effects or (kind == EffectType.SPEND and effect.resource == SpendResource.STATUS):
        if effect.status not in status_kinds:
            errors.append(f"{prefix}: {kind.value} references missing status '{effect.status}'")

    if kind == EffectType.PURGE:
        if effect.purge is None:
            errors.append(f"{prefix}: purge effect requires a purge kind")
        if effect.status and effect.status not in status_kinds:
            errors.append(f"{prefix}: purge references missing status '{effect.status}'")

    if kind == EffectType.CONDITION:
        if effect.condition is None:
            errors.append(f"{prefix}: condition effect requires a condition")
        elif effect.condition.status and effect.condition.status not in status_kinds:
            errors.append(f"{prefix}: condition references missing status '{effect.condition.status}'")
        if not effect.children:
            errors.append(f"{prefix}: condition effect has no children")

    if kind == EffectType.MULTIHIT and (effect.hits is None or not effect.children):
        errors.append(f"{prefix}: multihit effect requires hits and children")

    if kind == EffectType.SPEND and effect.resource is None:
        errors.append(f"{prefix}: spend effect requires a resource")

    if kind == EffectType.CHOOSE and not effect.options:
        errors.append(f"{prefix}: choose effect has no options")

    if kind == EffectType.CREATE_CARD and effect.card_id not in card_ids:
        errors.append(f"{prefix}: create_card references missing card '{effect.card_id}'")

    if kind == EffectType.UNMODELED and not effect.text:
        errors.append(f"{prefix}: unmodeled effect must keep its authored text")

    return errors


def _card_warnings(card: CardDefinition) -> list[str]:
    warnings = []
    for effect in walk_effects(card.effects):
        if effect.effect_type == EffectType.UNMODELED:
            warnings.append(f"Card '{card.id}' has an unmodeled effect: {effect.text}")
    if card.bounce and "bounce" not in card.tags:
        warnings.append(f"Card '{card.id}' sets bounce without the bounce tag")
    return warnings


def _validate_transform_graph(character: CharacterDefinition) -> list[str]:
    """Detect transform cycles with a depth-first walk."""
    edges = {card.id: [t.into for t in card.transforms] for card in character.cards}
    errors = []
    visiting: set[str] = set()
    done: set[str] = set()

    def visit(card_id: str, path: list[str]):
        if card_id in done:
            return
        if card_id in visiting:
            cycle = path[path.index(card_id):] + [card_id]
            errors.append(
                f"Character '{character.id}': transform cycle {' -> '.join(cycle)}"
            )
            return
        visiting.add(card_id)
        for target in edges.get(card_id, []):
            visit(target, path + [card_id])
        visiting.discard(card_id)
        done.add(card_id)

    for card_id in edges:
        visit(card_id, [])
    return errors
