"""
Match Setup - Creates the initial match state.

This module handles:
- Placing each roster's characters on its line
- Building one shared deck per team (ultimates and transform-only
  cards are never dealt)
- Innate cards starting in hand
- Shuffling with the match RNG for determinism
- The opening turn (energy and draw to hand size)
"""

from __future__ import annotations
import logging

from ..spec_schema.game_data import GameData
from .events import EventKind
from .reducer import start_turn
from .rng import RngStream
from .runtime import Runtime
from .state import TEAM_IDS, CardInstance, Character, Match, RulesOptions, Team
from .zones import INNATE

logger = logging.getLogger(__name__)


def create_match(
    data: GameData,
    rosters: dict[str, list[str]],
    seed: int,
    rules: RulesOptions | None = None,
) -> Match:
    """
    Set up a new match.

    Args:
        data: Immutable game data snapshot
        rosters: Character definition ids per team, in slot order
        seed: Seed for the match RNG stream
        rules: Rule options (defaults to RulesOptions())

    Returns:
        Match at the start of turn 1
    """
    rules = rules or RulesOptions()
    if set(rosters) != set(TEAM_IDS):
        raise ValueError(f"Rosters must be given for exactly {TEAM_IDS}")
    for team_id, roster in rosters.items():
        if len(roster) != rules.line_size:
            raise ValueError(f"Team {team_id} needs {rules.line_size} characters, got {len(roster)}")
        for character_id in roster:
            if data.get_character(character_id) is None:
                raise ValueError(f"Unknown character: {character_id}")

    match = Match(
        seed=seed,
        rng=RngStream(seed),
        rules=rules,
        rosters={team_id: list(rosters[team_id]) for team_id in TEAM_IDS},
    )
    runtime = Runtime(data, match)
    runtime.recorder.emit(EventKind.MATCH_STARTED, magnitude=seed, detail=data.version)

    for team_id in TEAM_IDS:
        match.teams[team_id] = _build_team(data, match, team_id, rosters[team_id])

    start_turn(runtime)
    logger.info(
        "Match started with seed %d: %s vs %s",
        seed, ",".join(rosters["p1"]), ",".join(rosters["p2"]),
    )
    return match


def _build_team(data: GameData, match: Match, team_id: str, roster: list[str]) -> Team:
    team = Team(team_id=team_id)
    for slot, definition_id in enumerate(roster):
        definition = data.get_character(definition_id)
        character = Character(
            character_id=f"{team_id}:{definition_id}",
            definition_id=definition_id,
            team_id=team_id,
            name=definition.name,
            hp=definition.max_hp,
            max_hp=definition.max_hp,
            slot=slot,
        )
        team.characters.append(character)

        for card in definition.cards:
            if card.transform_only or card.is_ultimate:
                continue
            instance = CardInstance(
                instance_id=match.allocate_instance_id(),
                card_id=card.id,
                owner_id=character.character_id,
            )
            if card.has_keyword(INNATE):
                team.hand.append(instance)
            else:
                team.deck.append(instance)

    match.rng.shuffle(team.deck)
    return team
