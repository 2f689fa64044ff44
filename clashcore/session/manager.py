"""
Session Manager - Creates and manages match sessions.

LIFECYCLE:
1. Caller loads validated GameData (standard set or a JSON export)
2. Caller starts a session → ephemeral in-memory match + transcript recorder
3. During the match:
   - Actions are submitted through the session
   - The reducer validates and applies them atomically
   - Every submission is recorded in the transcript
4. Match ends → session is marked over; the transcript can be saved
5. Sessions are removed when ended or stale

PERSISTENCE RULES:
- NO database
- Match state is ephemeral (session-scoped only)
- The transcript is the only artifact worth keeping, and it replays exactly
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import time
import uuid

from ..config import settings
from ..spec_schema.game_data import GameData
from ..engine_core.action import Action, ActionResult
from ..engine_core.choices import Responder
from ..engine_core.state import Match, RulesOptions
from ..engine_core.transcript import Transcript, TranscriptRecorder

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a match session."""
    ACTIVE = "active"  # Match in progress
    MATCH_OVER = "match_over"  # A team was defeated
    ABANDONED = "abandoned"  # Ended before a winner


@dataclass
class MatchSession:
    """
    An ephemeral match session.

    Contains:
    - The game data snapshot
    - The transcript recorder (which owns the current match)
    - Session metadata
    """
    session_id: str
    data: GameData
    recorder: TranscriptRecorder
    created_at: float

    state: SessionState = SessionState.ACTIVE
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def match(self) -> Match:
        return self.recorder.match

    @property
    def transcript(self) -> Transcript:
        return self.recorder.transcript

    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    def submit(self, action: Action) -> ActionResult:
        """Apply an action and record it in the transcript."""
        result = self.recorder.submit(action)
        if result.success and self.match.is_finished:
            self.state = SessionState.MATCH_OVER
            logger.info("Session %s finished, winner %s", self.session_id, self.match.winner)
        return result


class SessionManager:
    """
    Manages match sessions.

    Responsibilities:
    - Create sessions from game data and rosters
    - Track active sessions
    - Clean up completed sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self):
        self._sessions: dict[str, MatchSession] = {}

    def create_session(
        self,
        data: GameData,
        rosters: dict[str, list[str]],
        seed: int | None = None,
        rules: RulesOptions | None = None,
        responder: Responder | None = None,
    ) -> MatchSession:
        """
        Create a new match session.

        Args:
            data: Validated game data
            rosters: Character definition ids per team, in slot order
            seed: Match seed (defaults to the configured default seed)
            rules: Rule options (defaults to the configured rules)
            responder: Optional synchronous choice responder

        Returns:
            New MatchSession at the start of turn 1
        """
        session_id = str(uuid.uuid4())
        recorder = TranscriptRecorder(
            data,
            seed=settings.default_seed if seed is None else seed,
            rosters=rosters,
            rules=rules or RulesOptions.from_settings(settings),
            responder=responder,
        )
        session = MatchSession(
            session_id=session_id,
            data=data,
            recorder=recorder,
            created_at=time.time(),
        )
        self._sessions[session_id] = session
        logger.info("Created session %s with seed %d", session_id, recorder.seed)
        return session

    def get_session(self, session_id: str) -> MatchSession | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> MatchSession | None:
        """
        End a session and remove it from memory.

        Returns the session so the caller can still save its transcript.
        """
        session = self._sessions.pop(session_id, None)
        if session and session.state == SessionState.ACTIVE:
            session.state = SessionState.ABANDONED
            logger.info("Session %s abandoned (%s)", session_id, reason)
        return session

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600):
        """
        Clean up finished sessions older than max_age.

        Called periodically to free memory.
        """
        current_time = time.time()
        to_remove = [
            session_id
            for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds and not session.is_active()
        ]
        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
