"""
Reducer - Applies actions to match state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Atomic: the match is cloned, the action resolves on the clone, and
  the clone is returned only if the action was legal
- Validates before mutating; IllegalAction becomes a failed ActionResult
  with a reason code and no events
- Delegates step resolution to the ClashResolver and effects to the
  EffectResolver
"""

from __future__ import annotations
import logging
from copy import deepcopy
from dataclasses import dataclass, replace
from typing import Callable

from ..spec_schema.effect_dsl import Timing
from ..spec_schema.game_data import GameData, Speed
from .action import Action, ActionResult, ActionType
from .choices import Responder
from .effect_resolver import EffectContext
from .errors import IllegalAction, IllegalReason
from .events import EventKind, Lifecycle
from .runtime import Runtime
from .state import TEAM_IDS, Character, CounterWindow, GamePhase, Match, QueuedAction, Team

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to match state.

    Stateless - all state is in Match.
    GameData provides the authored definitions.
    """
    data: GameData
    responder: Responder | None = None

    def apply(self, match: Match, action: Action) -> ActionResult:
        """
        Apply an action to the match.

        Returns ActionResult with the new match or a reason code.
        """
        working = match.clone()
        window, working.counter_window = working.counter_window, None
        runtime = Runtime(self.data, working, action.responses, self.responder)
        start = len(working.events)

        try:
            self._validate_action(working, action, window)
            handler = self._get_handler(action.action_type)
            handler(runtime, action)
        except IllegalAction as e:
            logger.info(
                "Rejected %s from %s: %s (%s)",
                action.action_type.value, action.team_id, e.message, e.reason_code,
            )
            return ActionResult.failure(e.message, error_code=e.reason_code)

        recorded = action
        if runtime.choices.recorded:
            recorded = replace(action, responses=runtime.choices.recorded)
        return ActionResult.success_with_state(working, working.events[start:], recorded)

    def _validate_action(self, match: Match, action: Action, window: CounterWindow | None = None):
        if match.is_finished:
            raise IllegalAction(IllegalReason.MATCH_OVER, "Match is over - no actions allowed")
        if action.team_id not in match.teams:
            raise IllegalAction(IllegalReason.NOT_ACTIVE_TEAM, f"Not {action.team_id}'s priority")
        if action.team_id == match.active_team:
            return

        # Out of turn: only a counter play against the attacker
        if (
            window is None
            or window.team_id != action.team_id
            or action.action_type != ActionType.PLAY_CARD
        ):
            raise IllegalAction(
                IllegalReason.NOT_ACTIVE_TEAM, f"Not {action.team_id}'s priority"
            )
        if tuple(action.targets[:1]) != (window.attacker_id,):
            raise IllegalAction(
                IllegalReason.COUNTER_TARGET, f"A counter play must target {window.attacker_id}"
            )

    def _get_handler(self, action_type: ActionType) -> Callable[[Runtime, Action], None]:
        """Get the handler function for an action type."""
        handlers = {
            ActionType.PLAY_CARD: self._handle_play,
            ActionType.MOVE_SWAP: self._handle_swap,
            ActionType.PASS: self._handle_pass,
            ActionType.END_TURN: self._handle_end_turn,
        }
        return handlers[action_type]

    # =========================================================================
    # Handlers
    # =========================================================================

    def _actor(self, team: Team, actor_id: str | None) -> Character:
        actor = team.get_character(actor_id) if actor_id else None
        if actor is None:
            raise IllegalAction(IllegalReason.UNKNOWN_ACTOR, f"No character {actor_id} on {team.team_id}")
        if actor.defeated:
            raise IllegalAction(IllegalReason.ACTOR_DEFEATED, f"{actor_id} is defeated")
        return actor

    def _handle_play(self, runtime: Runtime, action: Action):
        """Declare a card: validate, pay, fire On Play, queue in its zone."""
        match = runtime.match
        if match.phase != GamePhase.COMBAT:
            raise IllegalAction(IllegalReason.WRONG_PHASE, "Cards can only be played in combat")
        if action.team_id in match.round_locks:
            raise IllegalAction(IllegalReason.ROUND_LOCKED, f"{action.team_id} cannot play cards this round")

        team = match.get_team(action.team_id)
        actor = self._actor(team, action.actor_id)

        instance_id = None
        if action.card_instance_id:
            card = team.find_in_hand(action.card_instance_id)
            if card is None:
                raise IllegalAction(IllegalReason.CARD_NOT_IN_HAND, f"{action.card_instance_id} is not in hand")
            if card.instance_id in team.committed:
                raise IllegalAction(IllegalReason.CARD_COMMITTED, f"{card.instance_id} is already declared")
            if card.owner_id != actor.character_id:
                raise IllegalAction(IllegalReason.NOT_OWNER, f"{card.instance_id} belongs to {card.owner_id}")
            base = runtime.zones.definition_of(card)
            instance_id = card.instance_id
        elif action.card_id:
            base = self.data.get_card(actor.definition_id, action.card_id)
            if base is None or not base.is_ultimate:
                raise IllegalAction(IllegalReason.NOT_ULTIMATE, f"{action.card_id} is not an ultimate of {actor.character_id}")
        else:
            raise IllegalAction(IllegalReason.CARD_NOT_IN_HAND, "No card declared")

        declared = match.get_character(action.targets[0]) if action.targets else None
        definition = runtime.effects.select_transform(base, actor, declared)

        blocker = runtime.statuses.blocking_status(actor, definition)
        if blocker:
            raise IllegalAction(IllegalReason.PLAY_BLOCKED, f"{blocker} blocks {definition.id}")

        targets = runtime.targeting.validate_declaration(actor, definition, action.targets)
        target = match.get_character(targets[0]) if targets else None
        runtime.targeting.check_restrictions(actor, definition, target)

        speed = Speed.from_rank(definition.speed.rank + runtime.statuses.speed_shift(actor))
        zone = action.declared_zone or speed
        if zone not in speed.legal_zones():
            raise IllegalAction(
                IllegalReason.ILLEGAL_ZONE, f"{definition.id} at {speed.value} speed cannot use the {zone.value} zone"
            )

        x = action.spend_amount or 0
        cost = definition.cost
        if x < 0 or (x and cost.variable is None) or (cost.variable_max is not None and x > cost.variable_max):
            raise IllegalAction(IllegalReason.INVALID_SPEND, f"Invalid spend amount {x} for {definition.id}")

        energy_cost = max(0, cost.energy + runtime.statuses.cost_adjustment(actor, definition))
        ultimate_cost = cost.ultimate
        if cost.variable == "energy":
            energy_cost += x
        elif cost.variable == "ultimate":
            ultimate_cost += x
        if team.ultimate < ultimate_cost:
            raise IllegalAction(
                IllegalReason.INSUFFICIENT_ULTIMATE,
                f"{definition.id} needs {ultimate_cost} ultimate, team has {team.ultimate}",
            )
        if team.energy < energy_cost:
            raise IllegalAction(
                IllegalReason.INSUFFICIENT_ENERGY,
                f"{definition.id} needs {energy_cost} energy, team has {team.energy}",
            )

        power = definition.power
        if definition.power_max is not None and definition.power_max > power:
            power = runtime.rng.next_int(power, definition.power_max)

        recorder = runtime.recorder
        played = recorder.emit(
            EventKind.CARD_PLAYED,
            actor=actor.character_id,
            target=targets[0] if targets else None,
            magnitude=power,
            detail=base.id,
            lifecycle=Lifecycle.PLAYED,
        )
        with recorder.scope(played):
            if definition is not base:
                recorder.emit(EventKind.CARD_TRANSFORMED, actor=actor.character_id, detail=f"{base.id}->{definition.id}")
            if definition.power_max is not None:
                recorder.emit(
                    EventKind.POWER_ROLLED,
                    actor=actor.character_id,
                    magnitude=power,
                    detail=f"{definition.power}-{definition.power_max}",
                )
            if ultimate_cost:
                team.ultimate -= ultimate_cost
                recorder.emit(EventKind.ULTIMATE_CHANGED, actor=actor.character_id, magnitude=-ultimate_cost)
            if energy_cost:
                team.energy -= energy_cost
                recorder.emit(EventKind.ENERGY_SPENT, actor=actor.character_id, magnitude=energy_cost)
                team.ultimate += energy_cost
                recorder.emit(EventKind.ULTIMATE_CHANGED, actor=actor.character_id, magnitude=energy_cost)
            recorder.emit(EventKind.ZONE_ASSIGNED, actor=actor.character_id, detail=zone.value)

            if instance_id:
                team.committed.add(instance_id)
            queued = QueuedAction(
                sequence=match.allocate_sequence(),
                team_id=team.team_id,
                actor_id=actor.character_id,
                definition=definition,
                zone=zone,
                targets=targets,
                x=x,
                instance_id=instance_id,
                played_event_id=played.event_id,
                power=power,
                choice_answers=deepcopy(action.choice_answers),
            )
            match.queue.append(queued)
            runtime.dispatcher.dispatch(
                Timing.ON_PLAY,
                EffectContext(
                    actor=actor,
                    definition=definition,
                    timing=Timing.ON_PLAY,
                    targets=[target] if target else [],
                    power=queued.power,
                    x=x,
                    queued=queued,
                ),
            )

        if action.team_id == match.active_team:
            self._hand_over(match)
        else:
            logger.debug("%s countered out of turn with %s", action.team_id, definition.id)

    def _handle_swap(self, runtime: Runtime, action: Action):
        """Movement round: swap the actor with an adjacent ally for energy."""
        match = runtime.match
        if match.phase != GamePhase.MOVEMENT:
            raise IllegalAction(IllegalReason.WRONG_PHASE, "Swaps only happen in the movement round")
        team = match.get_team(action.team_id)
        actor = self._actor(team, action.actor_id)
        other = self._actor(team, action.swap_with)
        cost = match.rules.move_cost
        if team.energy < cost:
            raise IllegalAction(IllegalReason.INSUFFICIENT_ENERGY, f"Swapping costs {cost} energy")

        runtime.positions.swap(actor, other)
        if cost:
            team.energy -= cost
            runtime.recorder.emit(EventKind.ENERGY_SPENT, actor=actor.character_id, magnitude=cost)
        self._hand_over(match)

    def _handle_pass(self, runtime: Runtime, action: Action):
        match = runtime.match
        runtime.recorder.emit(EventKind.PASSED, actor=action.team_id)
        match.passes += 1
        match.active_team = match.opponent_of(action.team_id)
        if match.passes < 2:
            return

        match.passes = 0
        if match.phase == GamePhase.MOVEMENT:
            match.phase = GamePhase.COMBAT
            match.active_team = match.initiative
            runtime.recorder.emit(EventKind.PHASE_CHANGED, detail=GamePhase.COMBAT.value)
        elif match.queue:
            runtime.clashes.resolve_step()
            if not match.is_finished:
                end_round(runtime)
        else:
            end_turn(runtime)

    def _handle_end_turn(self, runtime: Runtime, action: Action):
        if runtime.match.queue:
            raise IllegalAction(IllegalReason.QUEUE_NOT_EMPTY, "Resolve declared actions before ending the turn")
        end_turn(runtime)

    @staticmethod
    def _hand_over(match: Match):
        match.passes = 0
        match.active_team = match.opponent_of(match.active_team)


# =============================================================================
# Turn flow
# =============================================================================

def start_turn(runtime: Runtime):
    match = runtime.match
    match.round = 1
    match.round_locks.clear()
    match.passes = 0
    match.active_team = match.initiative
    match.phase = GamePhase.MOVEMENT if match.rules.movement_enabled else GamePhase.COMBAT

    event = runtime.recorder.emit(
        EventKind.TURN_STARTED, actor=match.initiative, magnitude=match.turn, detail=match.phase.value,
    )
    with runtime.recorder.scope(event):
        for team_id in TEAM_IDS:
            team = match.get_team(team_id)
            team.energy = match.rules.energy_per_turn
            runtime.zones.draw_to_hand_size(team, match.rules.hand_size)


def end_round(runtime: Runtime):
    """Close a combat round: round locks lapse and the initiative team acts first."""
    match = runtime.match
    runtime.recorder.emit(EventKind.ROUND_ENDED, magnitude=match.round)
    match.round += 1
    match.round_locks.clear()
    match.passes = 0
    match.active_team = match.initiative


def end_turn(runtime: Runtime):
    """Delayed hooks, status ticks and decay, hand cleanup, then the next turn."""
    match = runtime.match
    event = runtime.recorder.emit(EventKind.TURN_ENDED, magnitude=match.turn)
    with runtime.recorder.scope(event):
        runtime.dispatcher.fire_turn_end()
        for team_id in (match.initiative, match.opponent_of(match.initiative)):
            for character in match.get_team(team_id).living():
                runtime.statuses.turn_end(character)
                if match.is_finished:
                    return
        for team_id in TEAM_IDS:
            runtime.zones.end_of_turn_cleanup(match.get_team(team_id))

    logger.info("Turn %d ended", match.turn)
    match.turn += 1
    match.initiative = match.opponent_of(match.initiative)
    start_turn(runtime)


def apply_action(data: GameData, match: Match, action: Action) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a reducer and applies the action.
    """
    reducer = Reducer(data=data)
    return reducer.apply(match, action)
