"""
Replay/Transcript Recorder - the unit of reproducibility.

A Transcript is the seed, the rosters, the rule options, every submitted
action (rejected ones keep their reason code) and the full event log.
Replaying the actions against a fresh match with the same seed must
reproduce the event log byte for byte; any divergence raises
NonDeterminismDetected.
"""

from __future__ import annotations
import hashlib
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..spec_schema.game_data import GameData
from .action import Action, ActionResult
from .choices import Responder
from .errors import NonDeterminismDetected
from .events import events_to_dicts
from .reducer import Reducer
from .setup import create_match
from .state import Match, RulesOptions

logger = logging.getLogger(__name__)

TRANSCRIPT_VERSION = 2


def canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def events_digest(events: list[dict[str, Any]]) -> str:
    """Fingerprint of an event log."""
    return hashlib.sha256(canonical_json(events).encode("utf-8")).hexdigest()


# =============================================================================
# File schema
# =============================================================================

class RulesModel(BaseModel):
    hand_size: int = Field(ge=0)
    energy_per_turn: int = Field(ge=0)
    line_size: int = Field(gt=0)
    move_cost: int = Field(ge=0)
    movement_enabled: bool


class ActionModel(BaseModel):
    action_type: str
    team_id: str
    actor_id: Optional[str] = None
    card_instance_id: Optional[str] = None
    card_id: Optional[str] = None
    declared_zone: Optional[str] = None
    targets: list[str] = Field(default_factory=list)
    spend_amount: Optional[int] = None
    choice_answers: dict[str, list[list[str]]] = Field(default_factory=dict)
    responses: dict[str, list[Optional[list[str]]]] = Field(default_factory=dict)
    swap_with: Optional[str] = None


class EntryModel(BaseModel):
    action: ActionModel
    error_code: Optional[str] = None


class EventModel(BaseModel):
    event_id: int
    kind: str
    lifecycle: str
    actor: Optional[str] = None
    target: Optional[str] = None
    magnitude: Optional[int] = None
    parent_id: Optional[int] = None
    detail: str = ""


class TranscriptModel(BaseModel):
    version: int
    seed: int
    rosters: dict[str, list[str]]
    rules: RulesModel
    actions: list[EntryModel]
    events: list[EventModel]


# =============================================================================
# Transcript
# =============================================================================

@dataclass
class TranscriptEntry:
    action: Action
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.action.to_dict(), "error_code": self.error_code}


@dataclass
class Transcript:
    seed: int
    rosters: dict[str, list[str]]
    rules: RulesOptions
    entries: list[TranscriptEntry] = field(default_factory=list)
    events: list[dict[str, Any]] = field(default_factory=list)
    version: int = TRANSCRIPT_VERSION

    @property
    def actions(self) -> list[Action]:
        return [entry.action for entry in self.entries]

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "seed": self.seed,
            "rosters": self.rosters,
            "rules": self.rules.to_dict(),
            "actions": [entry.to_dict() for entry in self.entries],
            "events": self.events,
        }

    def to_json(self) -> str:
        return canonical_json(self.to_dict())

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Transcript:
        model = TranscriptModel.model_validate(raw)
        return cls(
            seed=model.seed,
            rosters=model.rosters,
            rules=RulesOptions(**model.rules.model_dump()),
            entries=[
                TranscriptEntry(Action.from_dict(e.action.model_dump()), e.error_code)
                for e in model.actions
            ],
            events=[e.model_dump() for e in model.events],
            version=model.version,
        )

    @classmethod
    def from_json(cls, text: str) -> Transcript:
        return cls.from_dict(json.loads(text))

    def save(self, path: str | Path):
        Path(path).write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load(cls, path: str | Path) -> Transcript:
        return cls.from_json(Path(path).read_text(encoding="utf-8"))


class TranscriptRecorder:
    """
    Wraps a match and a reducer; every submitted action is recorded.

    Usage:
        recorder = TranscriptRecorder(data, seed=42, rosters=rosters)
        recorder.submit(Action.pass_priority("p1"))
        transcript = recorder.transcript
    """

    def __init__(
        self,
        data: GameData,
        seed: int,
        rosters: dict[str, list[str]],
        rules: RulesOptions | None = None,
        responder: Responder | None = None,
    ):
        self.data = data
        self.seed = seed
        self.rosters = {k: list(v) for k, v in rosters.items()}
        self.rules = rules or RulesOptions()
        self.reducer = Reducer(data=data, responder=responder)
        self.match: Match = create_match(data, self.rosters, seed, self.rules)
        self.entries: list[TranscriptEntry] = []

    def submit(self, action: Action) -> ActionResult:
        result = self.reducer.apply(self.match, action)
        if result.success:
            self.match = result.new_state
            self.entries.append(TranscriptEntry(result.recorded_action or action))
        else:
            self.entries.append(TranscriptEntry(action, result.error_code))
        return result

    @property
    def transcript(self) -> Transcript:
        return Transcript(
            seed=self.seed,
            rosters=self.rosters,
            rules=self.rules,
            entries=list(self.entries),
            events=events_to_dicts(self.match.events),
        )


def replay_transcript(data: GameData, transcript: Transcript) -> Match:
    """
    Re-run a transcript against a fresh match and verify every event.

    Raises NonDeterminismDetected at the first divergence.
    """
    match = create_match(data, transcript.rosters, transcript.seed, transcript.rules)
    _check_prefix(match, transcript, index=-1)
    reducer = Reducer(data=data)

    for index, entry in enumerate(transcript.entries):
        result = reducer.apply(match, entry.action)
        actual_code = None if result.success else result.error_code
        if actual_code != entry.error_code:
            raise NonDeterminismDetected(
                index,
                entry.error_code,
                actual_code,
                f"Action {index} outcome diverged: recorded {entry.error_code}, replayed {actual_code}",
            )
        if result.success:
            match = result.new_state
        _check_prefix(match, transcript, index)

    if len(match.events) != len(transcript.events):
        raise NonDeterminismDetected(
            len(transcript.entries),
            len(transcript.events),
            len(match.events),
            f"Replay produced {len(match.events)} events, transcript has {len(transcript.events)}",
        )
    logger.info("Replay verified %d actions, %d events", len(transcript.entries), len(match.events))
    return match


def _check_prefix(match: Match, transcript: Transcript, index: int):
    actual = events_to_dicts(match.events)
    expected = transcript.events[:len(actual)]
    if canonical_json(actual) == canonical_json(expected):
        return
    for position, event in enumerate(actual):
        recorded = expected[position] if position < len(expected) else None
        if canonical_json(event) != canonical_json(recorded):
            raise NonDeterminismDetected(
                index,
                recorded,
                event,
                f"Event {position + 1} diverged after action {index}",
            )
    raise NonDeterminismDetected(index, expected, actual, f"Event log diverged after action {index}")
