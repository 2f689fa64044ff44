"""
Runtime - wires the engine components around one match for one action.

A Runtime is built per applied action on the reducer's working copy, so
no component holds match state between actions.
"""

from __future__ import annotations

from ..spec_schema.game_data import GameData
from .choices import ChoiceHooks, Responder, Responses
from .clash_resolver import ClashResolver
from .effect_resolver import EffectResolver
from .events import EventRecorder
from .positions import PositionalModel
from .state import Match
from .statuses import StatusEngine
from .targeting import TargetingEngine
from .timing import TimingDispatcher
from .zones import CardZoneManager


class Runtime:
    def __init__(
        self,
        data: GameData,
        match: Match,
        responses: Responses | None = None,
        responder: Responder | None = None,
    ):
        self.data = data
        self.match = match
        self.rng = match.rng
        self.recorder = EventRecorder(match)
        self.statuses = StatusEngine(self)
        self.zones = CardZoneManager(self)
        self.positions = PositionalModel(self)
        self.targeting = TargetingEngine(self)
        self.choices = ChoiceHooks(self, responses, responder)
        self.effects = EffectResolver(self)
        self.dispatcher = TimingDispatcher(self)
        self.clashes = ClashResolver(self)
