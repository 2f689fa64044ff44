"""
Engine Core - Deterministic match state management and clash resolution.

The engine is the runtime that:
1. Loads validated GameData
2. Manages Match state
3. Generates legal actions
4. Applies actions via the reducer
5. Resolves declared cards zone by zone, clash by clash
6. Records transcripts that replay byte for byte
"""

from .state import Match, Team, Character, CardInstance, StatusInstance, GamePhase, RulesOptions
from .action import Action, ActionType, ActionResult
from .errors import IllegalAction, IllegalReason, DataIntegrityError, NonDeterminismDetected
from .events import EventKind, Lifecycle, ResolutionEvent, events_to_dicts
from .rng import RngStream
from .choices import ChoiceKind, PendingChoice
from .reducer import Reducer, apply_action
from .setup import create_match
from .action_generator import ActionGenerator, legal_actions
from .transcript import Transcript, TranscriptRecorder, replay_transcript, events_digest

__all__ = [
    "Match",
    "Team",
    "Character",
    "CardInstance",
    "StatusInstance",
    "GamePhase",
    "RulesOptions",
    "Action",
    "ActionType",
    "ActionResult",
    "IllegalAction",
    "IllegalReason",
    "DataIntegrityError",
    "NonDeterminismDetected",
    "EventKind",
    "Lifecycle",
    "ResolutionEvent",
    "events_to_dicts",
    "RngStream",
    "ChoiceKind",
    "PendingChoice",
    "Reducer",
    "apply_action",
    "create_match",
    "ActionGenerator",
    "legal_actions",
    "Transcript",
    "TranscriptRecorder",
    "replay_transcript",
    "events_digest",
]
