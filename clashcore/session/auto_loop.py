"""
Auto Loop - Drives a session unattended.

The loop:
1. Enumerate legal actions for the team holding priority
2. Pick one with the policy RNG
3. Submit it through the session (so it is recorded)
4. Repeat until a team is defeated or the turn limit is hit

The policy RNG is a separate random.Random; it never draws from the
match RNG, so a transcript replays without the policy.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import random
from typing import TYPE_CHECKING

from ..config import settings
from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import legal_actions

if TYPE_CHECKING:
    from .manager import MatchSession

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """State of the auto loop."""
    RUNNING = "running"
    MATCH_OVER = "match_over"
    TURN_LIMIT = "turn_limit"
    STUCK = "stuck"


@dataclass
class AutoRunResult:
    """
    Result of an unattended run.

    Contains the submitted actions and how the run stopped.
    """
    success: bool
    loop_state: LoopState
    actions: list[Action] = field(default_factory=list)
    turns: int = 0
    winner: str | None = None
    errors: list[str] = field(default_factory=list)


class AutoPilot:
    """
    Plays both teams of a session with a seeded random policy.

    Usage:
        pilot = AutoPilot(session, policy_seed=7)
        result = pilot.run()
    """

    # Chance of passing while other legal actions exist
    PASS_BIAS = 0.3

    def __init__(self, session: MatchSession, policy_seed: int = 0, max_turns: int | None = None):
        self.session = session
        self.rng = random.Random(policy_seed)
        self.max_turns = settings.max_auto_turns if max_turns is None else max_turns
        self.state = LoopState.RUNNING

    def choose(self, actions: list[Action]) -> Action:
        passes = [a for a in actions if a.action_type == ActionType.PASS]
        others = [a for a in actions if a.action_type != ActionType.PASS]
        if passes and (not others or self.rng.random() < self.PASS_BIAS):
            return passes[0]
        return self.rng.choice(others)

    def step(self) -> Action | None:
        """Submit one action. Returns None when nothing is legal."""
        match = self.session.match
        actions = legal_actions(self.session.data, match)
        if not actions:
            return None
        action = self.choose(actions)
        result = self.session.submit(action)
        if not result.success:
            # Generated actions were checked against this exact state
            raise RuntimeError(f"Generated action rejected: {result.error} ({result.error_code})")
        return action

    def run(self) -> AutoRunResult:
        result = AutoRunResult(success=True, loop_state=LoopState.RUNNING)
        while True:
            match = self.session.match
            if match.is_finished:
                result.loop_state = LoopState.MATCH_OVER
                break
            if match.turn > self.max_turns:
                result.loop_state = LoopState.TURN_LIMIT
                break
            action = self.step()
            if action is None:
                result.success = False
                result.loop_state = LoopState.STUCK
                result.errors.append(f"No legal action for {match.active_team} on turn {match.turn}")
                break
            result.actions.append(action)

        match = self.session.match
        result.turns = match.turn
        result.winner = match.winner
        self.state = result.loop_state
        logger.info(
            "Auto run stopped (%s) after %d actions, turn %d, winner %s",
            result.loop_state.value, len(result.actions), result.turns, result.winner,
        )
        return result
