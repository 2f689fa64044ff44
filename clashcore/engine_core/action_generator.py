"""
Action Generator - Generates all legal actions from a match state.

The action generator is used by:
1. The auto-pilot to enumerate possible moves
2. Sessions to show available actions
3. Validation (is this action in legal_actions?)

Design: candidates are fully specified Action objects, and each one is
checked by applying it through the Reducer on a throwaway copy. The
generator never re-implements legality rules.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..spec_schema.game_data import GameData, TargetPattern
from .action import Action
from .reducer import Reducer
from .state import GamePhase, Match, Team


@dataclass
class ActionGenerator:
    """
    Generates legal actions for the active team, plus counter plays
    while a counter window is open for the other team.

    Zones are left undeclared so every play lands in its default zone.
    """
    data: GameData

    def generate(self, match: Match) -> list[Action]:
        """
        Generate all legal actions for the team holding priority.

        Returns a list of fully-specified Action objects.
        """
        if match.is_finished:
            return []

        team = match.get_team(match.active_team)
        candidates = [Action.pass_priority(team.team_id)]
        if match.phase == GamePhase.MOVEMENT:
            candidates.extend(self._swap_candidates(team))
        else:
            candidates.extend(self._play_candidates(match, team))
            if not match.queue:
                candidates.append(Action.end_turn(team.team_id))
            window = match.counter_window
            if window is not None and window.team_id != team.team_id:
                counter_team = match.get_team(window.team_id)
                candidates.extend(
                    a for a in self._play_candidates(match, counter_team)
                    if a.targets == (window.attacker_id,)
                )

        reducer = Reducer(data=self.data)
        return [a for a in candidates if reducer.apply(match, a).success]

    def _swap_candidates(self, team: Team) -> list[Action]:
        living = team.living()
        return [
            Action.swap(team.team_id, a.character_id, b.character_id)
            for a, b in zip(living, living[1:])
        ]

    def _play_candidates(self, match: Match, team: Team) -> list[Action]:
        actions = []
        for card in team.hand:
            if card.instance_id in team.committed:
                continue
            actor = team.get_character(card.owner_id)
            if actor is None or actor.defeated:
                continue
            definition = self.data.get_card(actor.definition_id, card.card_id)
            for targets in self._target_options(match, definition.target):
                actions.append(Action.play(team.team_id, actor.character_id, card.instance_id, targets))

        for actor in team.living():
            character = self.data.get_character(actor.definition_id)
            for definition in character.cards:
                if not definition.is_ultimate or definition.transform_only:
                    continue
                for targets in self._target_options(match, definition.target):
                    actions.append(Action.ultimate(team.team_id, actor.character_id, definition.id, targets))
        return actions

    @staticmethod
    def _target_options(match: Match, pattern: TargetPattern) -> list[list[str]]:
        if not pattern.takes_declared_target or pattern == TargetPattern.SELF:
            return [[]]
        return [[c.character_id] for c in match.all_characters() if not c.defeated]


def legal_actions(data: GameData, match: Match) -> list[Action]:
    """Convenience function to generate legal actions."""
    generator = ActionGenerator(data=data)
    return generator.generate(match)
