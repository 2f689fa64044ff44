"""
Card Zone Manager - deck/hand/discard/exhaust lifecycle per team.

Every CardInstance of a team lives in exactly one of the four zones.
Cards declared but not yet resolved stay in hand, marked committed.
"""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING

from ..spec_schema.effect_dsl import CardDestination
from ..spec_schema.game_data import CardDefinition
from .choices import ChoiceKind
from .events import EventKind
from .state import CardInstance, Character, Team, ZoneName

if TYPE_CHECKING:
    from .runtime import Runtime

logger = logging.getLogger(__name__)

INNATE = "innate"
RETAIN = "retain"
ETHEREAL = "ethereal"
EXHAUST = "exhaust"


class CardZoneManager:
    def __init__(self, runtime: Runtime):
        self.runtime = runtime

    @property
    def _recorder(self):
        return self.runtime.recorder

    def definition_of(self, card: CardInstance) -> CardDefinition:
        owner = self.runtime.match.get_character(card.owner_id)
        definition = self.runtime.data.get_card(owner.definition_id, card.card_id)
        if definition is None:
            raise KeyError(f"Unknown card {card.card_id} for {card.owner_id}")
        return definition

    # =========================================================================
    # Draw and reshuffle
    # =========================================================================

    def draw(self, team: Team, count: int) -> list[CardInstance]:
        """Draw from the top of the deck, reshuffling the discard when empty."""
        drawn = []
        for _ in range(count):
            if not team.deck:
                if not team.discard:
                    break
                self.reshuffle(team)
            card = team.deck.pop()
            team.hand.append(card)
            drawn.append(card)
            self._recorder.emit(
                EventKind.CARD_DRAWN,
                actor=card.owner_id,
                detail=card.instance_id,
            )
        return drawn

    def draw_to_hand_size(self, team: Team, hand_size: int) -> list[CardInstance]:
        return self.draw(team, max(0, hand_size - len(team.hand)))

    def reshuffle(self, team: Team):
        """Discard becomes the new deck, shuffled via the match RNG."""
        cards = list(team.discard)
        team.discard.clear()
        self.runtime.rng.shuffle(cards)
        team.deck.extend(cards)
        self._recorder.emit(
            EventKind.DECK_RESHUFFLED,
            actor=team.team_id,
            magnitude=len(cards),
        )
        logger.debug("Reshuffled %d cards into %s deck", len(cards), team.team_id)

    # =========================================================================
    # Movement between zones
    # =========================================================================

    def move(self, team: Team, card: CardInstance, destination: ZoneName) -> bool:
        source = team.locate(card.instance_id)
        if source is None or source == destination:
            return False
        team.zone(source).remove(card)
        team.zone(destination).append(card)
        self._recorder.emit(
            EventKind.CARD_MOVED,
            actor=card.owner_id,
            detail=f"{card.instance_id}:{source.value}->{destination.value}",
        )
        return True

    def finalize_play(self, team: Team, instance_id: str, definition: CardDefinition):
        """A resolved card leaves hand for exhaust or discard."""
        team.committed.discard(instance_id)
        card = team.find_in_hand(instance_id)
        if card is None:
            return
        destination = ZoneName.EXHAUST if definition.has_keyword(EXHAUST) else ZoneName.DISCARD
        self.move(team, card, destination)

    def end_of_turn_cleanup(self, team: Team):
        """Ethereal cards exhaust, Retain cards stay, the rest are discarded."""
        for card in list(team.hand):
            if card.instance_id in team.committed:
                continue
            definition = self.definition_of(card)
            if definition.has_keyword(ETHEREAL):
                self.move(team, card, ZoneName.EXHAUST)
            elif not definition.has_keyword(RETAIN):
                self.move(team, card, ZoneName.DISCARD)

    def retire(self, character: Character):
        """A defeated character's cards become inert in the exhaust zone."""
        team = self.runtime.match.get_team(character.team_id)
        for zone in (ZoneName.DECK, ZoneName.HAND, ZoneName.DISCARD):
            for card in list(team.zone(zone)):
                if card.owner_id == character.character_id:
                    team.committed.discard(card.instance_id)
                    self.move(team, card, ZoneName.EXHAUST)

    def create(
        self,
        team: Team,
        owner: Character,
        card_id: str,
        destination: CardDestination,
    ) -> CardInstance:
        card = CardInstance(
            instance_id=self.runtime.match.allocate_instance_id(),
            card_id=card_id,
            owner_id=owner.character_id,
        )
        team.zone(ZoneName(destination.value)).append(card)
        self._recorder.emit(
            EventKind.CARD_CREATED,
            actor=owner.character_id,
            detail=f"{card.instance_id}:{card_id}->{destination.value}",
        )
        return card

    # =========================================================================
    # Choice-driven deck manipulation
    # =========================================================================

    def scry(self, team: Team, count: int):
        """Look at the top cards; discard any the player picks, keep the rest in order."""
        top = list(reversed(team.deck[-count:])) if count > 0 else []
        if not top:
            return
        picked = self.runtime.choices.ask(
            ChoiceKind.SCRY,
            team.team_id,
            [c.instance_id for c in top],
            min_choices=0,
            max_choices=len(top),
            prompt=f"Discard any of the top {len(top)} cards",
        )
        for card in top:
            if card.instance_id in picked:
                self.move(team, card, ZoneName.DISCARD)

    def seek(self, team: Team, count: int, criteria: str) -> CardInstance | None:
        """Take one matching card from the top `count` into hand."""
        top = list(reversed(team.deck[-count:])) if count > 0 else []
        matching = [c for c in top if self.definition_of(c).matches(criteria)]
        if not matching:
            return None
        picked = self.runtime.choices.ask(
            ChoiceKind.SEEK,
            team.team_id,
            [c.instance_id for c in matching],
            prompt=f"Take a '{criteria}' card from the top {count}",
        )
        card = next(c for c in matching if c.instance_id == picked[0])
        self.move(team, card, ZoneName.HAND)
        return card

    def search(self, team: Team, criteria: str) -> CardInstance | None:
        """Take one matching card from anywhere in the deck, then shuffle it."""
        matching = [c for c in reversed(team.deck) if self.definition_of(c).matches(criteria)]
        if not matching:
            return None
        picked = self.runtime.choices.ask(
            ChoiceKind.SEARCH,
            team.team_id,
            [c.instance_id for c in matching],
            prompt=f"Search the deck for a '{criteria}' card",
        )
        card = next(c for c in matching if c.instance_id == picked[0])
        self.move(team, card, ZoneName.HAND)
        self.runtime.rng.shuffle(team.deck)
        return card

    def discard_for_cost(self, team: Team, count: int) -> bool:
        """Discard `count` uncommitted hand cards to pay a Spend. False if short."""
        options = [c.instance_id for c in team.hand if c.instance_id not in team.committed]
        if len(options) < count:
            return False
        if count <= 0:
            return True
        picked = self.runtime.choices.ask(
            ChoiceKind.DISCARD,
            team.team_id,
            options,
            min_choices=count,
            max_choices=count,
            prompt=f"Discard {count} card(s)",
        )
        for instance_id in picked:
            card = team.find_in_hand(instance_id)
            self.move(team, card, ZoneName.DISCARD)
        return True
