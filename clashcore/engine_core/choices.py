"""
Choice Resolution Hooks - Optional player decisions with deterministic fallback.

When an effect needs a decision (scry, seek, search, redirect, push,
choose, discard) the resolver builds a PendingChoice and asks, in order:
1. the answers declared with the card whose effect is resolving, but
   only when that card's team is the one being asked
2. responder answers recorded on the action being applied (replay)
3. an optional synchronous responder callable
4. the documented fallback for that kind

Declared answers and recorded responses are per-kind FIFO queues, so a
card that scries twice gets two answers and a second scry in the same
step still reaches the responder.

Fallbacks:
- scry: discard nothing, keep the order
- seek / search: the top-most matching card
- redirect: the lowest-slot candidate
- push: a random legal direction drawn from the match RNG
- choose: the first option
- discard: the first uncommitted cards in hand order

Every responder consultation is recorded (None when it gave nothing
usable) so the transcript replays faithfully.
"""

from __future__ import annotations
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, TYPE_CHECKING

from .events import EventKind

if TYPE_CHECKING:
    from .runtime import Runtime

logger = logging.getLogger(__name__)

Answers = dict[str, list[list[str]]]
Responses = dict[str, list[list[str] | None]]


class ChoiceKind(Enum):
    SCRY = "scry"
    SEEK = "seek"
    SEARCH = "search"
    REDIRECT = "redirect"
    PUSH = "push"
    CHOOSE = "choose"
    DISCARD = "discard"


@dataclass
class PendingChoice:
    """
    A decision the resolver is waiting on.

    Exposed on Match.pending_choice while a responder is consulted.
    """
    choice_id: str
    kind: ChoiceKind
    team_id: str
    prompt: str
    options: list[str]
    min_choices: int = 1
    max_choices: int = 1

    def accepts(self, answer: Any) -> bool:
        if not isinstance(answer, (list, tuple)):
            return False
        if not all(isinstance(item, str) for item in answer):
            return False
        if len(set(answer)) != len(answer):
            return False
        if not self.min_choices <= len(answer) <= self.max_choices:
            return False
        return all(item in self.options for item in answer)


Responder = Callable[[PendingChoice], Any]


class ChoiceHooks:
    def __init__(
        self,
        runtime: Runtime,
        responses: Responses | None = None,
        responder: Responder | None = None,
    ):
        self.runtime = runtime
        self.responses = {kind: list(queue) for kind, queue in (responses or {}).items()}
        self.responder = responder
        self.recorded: Responses = {}
        self._declared: list[tuple[str, Answers]] = []

    @contextmanager
    def declared_by(self, team_id: str, answers: Answers) -> Iterator[None]:
        """Make a declaration's answers available while its effects resolve."""
        self._declared.append((team_id, answers))
        try:
            yield
        finally:
            self._declared.pop()

    def ask(
        self,
        kind: ChoiceKind,
        team_id: str,
        options: list[str],
        min_choices: int = 1,
        max_choices: int = 1,
        prompt: str = "",
    ) -> list[str]:
        match = self.runtime.match
        pending = PendingChoice(
            choice_id=f"{kind.value}-{len(match.events) + 1}",
            kind=kind,
            team_id=team_id,
            prompt=prompt,
            options=list(options),
            min_choices=min_choices,
            max_choices=max_choices,
        )

        source = "answer"
        answer = self._declared_answer(pending)
        if answer is None:
            source = "responder"
            answer = self._responder_answer(pending)
        if answer is None:
            source = "fallback"
            answer = self._fallback(pending)

        self.runtime.recorder.emit(
            EventKind.CHOICE_RESOLVED,
            actor=team_id,
            detail=f"{kind.value}:{source}:{','.join(answer)}",
        )
        return list(answer)

    def _declared_answer(self, pending: PendingChoice) -> list[str] | None:
        if not self._declared:
            return None
        team_id, answers = self._declared[-1]
        queue = answers.get(pending.kind.value)
        if team_id != pending.team_id or not queue:
            return None
        answer = queue.pop(0)
        if not pending.accepts(answer):
            logger.warning("Ignoring invalid %s answer %r", pending.kind.value, answer)
            return None
        return list(answer)

    def _responder_answer(self, pending: PendingChoice) -> list[str] | None:
        kind = pending.kind.value
        replayed = self.responses.get(kind)
        if replayed:
            answer = replayed.pop(0)
            if answer is not None and not pending.accepts(answer):
                logger.warning("Ignoring invalid recorded %s response %r", kind, answer)
                answer = None
            self.recorded.setdefault(kind, []).append(answer)
            return list(answer) if answer is not None else None

        if self.responder is None:
            return None
        self.runtime.match.pending_choice = pending
        try:
            answer = self.responder(pending)
        finally:
            self.runtime.match.pending_choice = None
        if answer is not None and not pending.accepts(answer):
            logger.warning("Ignoring invalid %s responder answer %r", kind, answer)
            answer = None
        answer = list(answer) if answer is not None else None
        self.recorded.setdefault(kind, []).append(answer)
        return answer

    def _fallback(self, pending: PendingChoice) -> list[str]:
        if pending.kind == ChoiceKind.SCRY:
            return []
        if pending.kind == ChoiceKind.PUSH:
            return [self.runtime.rng.pick(pending.options)]
        return pending.options[:max(pending.min_choices, 1)]
