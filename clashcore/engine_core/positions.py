"""
Positional Model - a line of slots per team.

Adjacency is ±1 slot. The opposed slot of a character is the same index
on the other team's line (the lines face each other). Root prevents
the owner from being swapped or pushed.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from .choices import ChoiceKind
from .errors import IllegalAction, IllegalReason
from .events import EventKind
from .state import Character, Team

if TYPE_CHECKING:
    from .runtime import Runtime


def adjacent_slots(slot: int, line_size: int) -> list[int]:
    return [s for s in (slot - 1, slot + 1) if 0 <= s < line_size]


def opposed_slot(slot: int) -> int:
    return slot


class PositionalModel:
    def __init__(self, runtime: Runtime):
        self.runtime = runtime

    @property
    def line_size(self) -> int:
        return self.runtime.match.rules.line_size

    def _team(self, character: Character) -> Team:
        return self.runtime.match.get_team(character.team_id)

    def adjacent(self, character: Character) -> list[Character]:
        """Living neighbours, lowest slot first."""
        team = self._team(character)
        result = []
        for slot in adjacent_slots(character.slot, self.line_size):
            neighbour = team.at_slot(slot)
            if neighbour and not neighbour.defeated:
                result.append(neighbour)
        return result

    def are_adjacent(self, a: Character, b: Character) -> bool:
        return a.team_id == b.team_id and abs(a.slot - b.slot) == 1

    def opposed(self, character: Character) -> Character | None:
        enemy = self.runtime.match.get_team(self.runtime.match.opponent_of(character.team_id))
        return enemy.at_slot(opposed_slot(character.slot))

    def can_move(self, character: Character) -> bool:
        return self.runtime.statuses.has_flag(character, "immobilizes") is None

    def swap(self, a: Character, b: Character):
        """Swap two adjacent allies. Raises IllegalAction if either is rooted."""
        if not self.are_adjacent(a, b):
            raise IllegalAction(
                IllegalReason.NOT_ADJACENT, f"{a.character_id} is not adjacent to {b.character_id}"
            )
        for character in (a, b):
            if not self.can_move(character):
                raise IllegalAction(IllegalReason.ROOTED, f"{character.character_id} is rooted")
        self._exchange(a, b)

    def push(self, character: Character) -> bool:
        """
        Shift a character one slot along its line, swapping with the
        occupant. Direction is a choice; Root on either side stops it.
        """
        if character.defeated or not self.can_move(character):
            return False
        team = self._team(character)
        options = []
        if character.slot > 0:
            options.append("left")
        if character.slot < self.line_size - 1:
            options.append("right")
        if not options:
            return False
        direction = self.runtime.choices.ask(
            ChoiceKind.PUSH,
            self.runtime.match.opponent_of(character.team_id),
            options,
            prompt=f"Push {character.character_id}",
        )[0]
        other = team.at_slot(character.slot + (-1 if direction == "left" else 1))
        if other is not None and not self.can_move(other):
            return False
        if other is None:
            old = character.slot
            character.slot += -1 if direction == "left" else 1
            self._emit_move(character, old)
        else:
            self._exchange(character, other)
        return True

    def _exchange(self, a: Character, b: Character):
        a_slot, b_slot = a.slot, b.slot
        a.slot, b.slot = b_slot, a_slot
        self._emit_move(a, a_slot)
        self._emit_move(b, b_slot)

    def _emit_move(self, character: Character, old_slot: int):
        self.runtime.recorder.emit(
            EventKind.CHARACTER_MOVED,
            target=character.character_id,
            magnitude=character.slot,
            detail=f"slot {old_slot}->{character.slot}",
        )
