"""
Session Module - Manages ephemeral match sessions.

A session represents one match:
- Created when a caller starts a match
- Holds the transcript recorder and the current match
- Can be driven unattended by the AutoPilot
- Destroyed when the match ends

Sessions are EPHEMERAL:
- No persistence to database
- The transcript is the reproducible record
"""

from .manager import SessionManager, MatchSession, SessionState
from .auto_loop import AutoPilot, AutoRunResult, LoopState

__all__ = [
    "SessionManager",
    "MatchSession",
    "SessionState",
    "AutoPilot",
    "AutoRunResult",
    "LoopState",
]
