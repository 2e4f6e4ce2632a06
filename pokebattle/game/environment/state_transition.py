"""State transition logic for the shared battle record.

This module provides pure functions that move a battle record through its
phases: selecting -> processing -> (forced switch) -> selecting, until the
battle is finished. Every method is static, never mutates its input and
returns the input unchanged when a transition does not apply, so the same
function can safely run again inside a retried store transaction.
"""

import random
from dataclasses import replace
from typing import Optional

from absl import logging

from pokebattle.game.engine.turn_resolver import TurnResolver
from pokebattle.game.exceptions import InvalidActionError
from pokebattle.game.interface.battle_action import BattleAction
from pokebattle.game.schema.battle_state import BattleState
from pokebattle.game.schema.enums import (
    PLAYER_IDS,
    Outcome,
    TurnPhase,
    opponent_of,
)
from pokebattle.game.schema.team_state import TeamState


class StateTransition:
    """Functions for advancing battle records.

    All methods are static and return new states without mutating inputs.
    """

    @staticmethod
    def new_battle(
        team1: TeamState, team2: TeamState, resolver: TurnResolver, now: float
    ) -> BattleState:
        """Create the initial record of a battle.

        Both leads are sent out and their switch-in abilities fire, player 1
        first.

        Args:
            team1: Player 1 team, lead in slot 0
            team2: Player 2 team, lead in slot 0
            resolver: Turn resolver used for entry abilities
            now: Current wall-clock time in seconds

        Returns:
            Battle record in the selecting phase of turn 1
        """
        state = BattleState(
            teams={
                "p1": replace(team1, player_id="p1", active_pokemon_index=0, pending_action=None),
                "p2": replace(team2, player_id="p2", active_pokemon_index=0, pending_action=None),
            },
            phase_started_at=now,
        )
        state = state.with_log(
            f"{team1.name or 'p1'} and {team2.name or 'p2'} started a battle!"
        )
        for player in PLAYER_IDS:
            team = state.get_team(player)
            lead = team.get_active_pokemon()
            state = state.with_log(f"{team.name or player} sent out {lead.display_name()}!")
        for player in PLAYER_IDS:
            state, messages = resolver.apply_entry_abilities(state, player)
            state = state.with_log(*messages)
        return state

    @staticmethod
    def validate_action(state: BattleState, player: str, action: BattleAction) -> None:
        """Check that an action is legal for a player right now.

        Args:
            state: Current battle record
            player: Player submitting the action
            action: Chosen action

        Raises:
            InvalidActionError: If the action cannot be accepted
        """
        if player not in PLAYER_IDS:
            raise InvalidActionError(player, "unknown player")
        if state.is_finished():
            raise InvalidActionError(player, "the battle is over")
        if state.turn_phase == TurnPhase.PROCESSING:
            raise InvalidActionError(player, "the turn is being resolved")

        team = state.get_team(player)
        forced = state.turn_phase == TurnPhase.must_switch(player)
        if not forced and team.pending_action is not None:
            raise InvalidActionError(player, "an action was already submitted this turn")
        if not forced and team.get_active_pokemon().is_fainted():
            raise InvalidActionError(player, "wait for your forced switch")

        if action.is_switch():
            StateTransition._validate_switch(team, player, action.switch_index)
            return

        if forced:
            raise InvalidActionError(player, "the active Pokemon fainted and must be replaced")
        active = team.get_active_pokemon()
        known = active.get_move(action.move_name)
        if known is None:
            raise InvalidActionError(
                player, f"{active.display_name()} does not know {action.move_name}"
            )
        if not known.can_use():
            raise InvalidActionError(player, f"{action.move_name} has no PP left")

    @staticmethod
    def _validate_switch(team: TeamState, player: str, index: Optional[int]) -> None:
        if index is None or not 0 <= index < len(team.pokemon):
            raise InvalidActionError(player, f"no team member in slot {index}")
        if index == team.active_pokemon_index:
            raise InvalidActionError(player, "that Pokemon is already in battle")
        if team.pokemon[index].is_fainted():
            raise InvalidActionError(
                player, f"{team.pokemon[index].display_name()} has fainted"
            )

    @staticmethod
    def submit_action(
        state: BattleState,
        player: str,
        action: BattleAction,
        marker: int,
        resolver: TurnResolver,
        now: float,
    ) -> BattleState:
        """Record a player's action for the current turn.

        During the player's own forced-switch phase the action is applied as
        the forced switch. Otherwise it becomes the pending action; when both
        pending actions are present in the selecting phase the record moves to
        processing and is stamped with marker.

        Args:
            state: Current battle record
            player: Submitting player
            action: Chosen action
            marker: Fresh turn marker from the store
            resolver: Turn resolver, used for forced switches
            now: Current wall-clock time in seconds

        Returns:
            Updated battle record

        Raises:
            InvalidActionError: If the action is not legal
        """
        StateTransition.validate_action(state, player, action)

        if state.turn_phase == TurnPhase.must_switch(player):
            return StateTransition.submit_forced_switch(
                state, player, action.switch_index, resolver, now
            )

        state = state.with_team(player, state.get_team(player).with_pending_action(action))
        if state.turn_phase == TurnPhase.SELECTING and not state.awaiting_actions():
            logging.debug("Both actions in for turn %d, marker %d", state.turn_number, marker)
            state = replace(
                state,
                turn_phase=TurnPhase.PROCESSING,
                last_resolved_timestamp=marker,
                phase_started_at=now,
            )
        return state

    @staticmethod
    def submit_forced_switch(
        state: BattleState,
        player: str,
        index: int,
        resolver: TurnResolver,
        now: float,
    ) -> BattleState:
        """Replace a fainted active Pokemon.

        Args:
            state: Battle record in the player's forced-switch phase
            player: Player replacing their Pokemon
            index: Team slot to send in
            resolver: Turn resolver used for the switch-in
            now: Current wall-clock time in seconds

        Returns:
            Record in the opponent's forced-switch phase if the opponent also
            needs a replacement, otherwise in the selecting phase

        Raises:
            InvalidActionError: If it is not this player's forced switch or the
                slot is not a legal replacement
        """
        if state.turn_phase != TurnPhase.must_switch(player):
            raise InvalidActionError(player, "no forced switch is pending")
        StateTransition._validate_switch(state.get_team(player), player, index)

        state, messages = resolver.switch_in(state, player, index)
        state = state.with_log(*messages)

        opponent = opponent_of(player)
        opponent_team = state.get_team(opponent)
        if opponent_team.get_active_pokemon().is_fainted() and not opponent_team.is_eliminated():
            phase = TurnPhase.must_switch(opponent)
        else:
            phase = TurnPhase.SELECTING
        return replace(state, turn_phase=phase, phase_started_at=now)

    @staticmethod
    def resolve_turn(
        state: BattleState,
        resolver: TurnResolver,
        rng: random.Random,
        marker: int,
        now: float,
    ) -> BattleState:
        """Resolve the turn stamped with marker.

        Does nothing unless the record is processing the turn stamped with
        exactly this marker, so resolving twice never double-applies.

        Args:
            state: Current battle record
            resolver: Turn resolver
            rng: Random source for the turn
            marker: Turn marker stamped when the record entered processing
            now: Current wall-clock time in seconds

        Returns:
            Record after the turn, or state itself if there is nothing to do
        """
        if state.turn_phase != TurnPhase.PROCESSING:
            logging.debug("Turn %d already resolved", state.turn_number)
            return state
        if state.last_resolved_timestamp != marker:
            logging.debug(
                "Marker %s does not match record marker %s",
                marker,
                state.last_resolved_timestamp,
            )
            return state

        result = resolver.resolve(state, rng)
        resolved = result.state
        for player in PLAYER_IDS:
            resolved = resolved.with_team(
                player, resolved.get_team(player).with_pending_action(None)
            )
        resolved = replace(resolved, turn_number=state.turn_number + 1)
        return StateTransition._settle(resolved, now)

    @staticmethod
    def _settle(state: BattleState, now: float) -> BattleState:
        p1_team = state.get_team("p1")
        p2_team = state.get_team("p2")

        if p1_team.is_eliminated() and p2_team.is_eliminated():
            return StateTransition._finish(
                state, Outcome.DRAW, "Both teams are out of usable Pokemon. It's a draw!"
            )
        if p1_team.is_eliminated():
            return StateTransition._finish(
                state, Outcome.PLAYER2_WINS, f"{p2_team.name or 'p2'} won the battle!"
            )
        if p2_team.is_eliminated():
            return StateTransition._finish(
                state, Outcome.PLAYER1_WINS, f"{p1_team.name or 'p1'} won the battle!"
            )

        # Player 1 replaces first when both actives fainted
        if p1_team.get_active_pokemon().is_fainted():
            phase = TurnPhase.P1_MUST_SWITCH
        elif p2_team.get_active_pokemon().is_fainted():
            phase = TurnPhase.P2_MUST_SWITCH
        else:
            phase = TurnPhase.SELECTING
        return replace(state, turn_phase=phase, phase_started_at=now)

    @staticmethod
    def _finish(state: BattleState, outcome: Outcome, message: str) -> BattleState:
        for player in PLAYER_IDS:
            state = state.with_team(player, state.get_team(player).with_pending_action(None))
        state = state.with_log(message)
        return replace(state, turn_phase=TurnPhase.FINISHED, outcome=outcome)

    @staticmethod
    def apply_timeout(state: BattleState, now: float, timeout_seconds: float) -> BattleState:
        """End the battle if the player being waited on ran out of time.

        In the selecting phase a player who did not submit loses, and player 2
        wins when neither did. In a forced-switch phase the switching player
        loses.

        Args:
            state: Current battle record
            now: Current wall-clock time in seconds
            timeout_seconds: Allowed time per phase

        Returns:
            Finished record, or state itself when no deadline has passed
        """
        if state.is_finished() or state.turn_phase == TurnPhase.PROCESSING:
            return state
        if now - state.phase_started_at < timeout_seconds:
            return state

        missing = state.awaiting_actions()
        if not missing:
            return state
        if len(missing) == len(PLAYER_IDS):
            return StateTransition._finish(
                state,
                Outcome.PLAYER2_WINS,
                "Neither player chose in time. "
                f"{state.get_team('p2').name or 'p2'} wins by default!",
            )
        loser = missing[0]
        winner = opponent_of(loser)
        return StateTransition._finish(
            state,
            Outcome.win_for(winner),
            f"{state.get_team(loser).name or loser} ran out of time. "
            f"{state.get_team(winner).name or winner} won the battle!",
        )

    @staticmethod
    def forfeit(state: BattleState, player: str, now: float) -> BattleState:
        """End the battle in the opponent's favour.

        Args:
            state: Current battle record
            player: Player giving up
            now: Current wall-clock time in seconds

        Returns:
            Finished record, or state itself when already finished
        """
        if state.is_finished():
            return state
        winner = opponent_of(player)
        finished = StateTransition._finish(
            state,
            Outcome.win_for(winner),
            f"{state.get_team(player).name or player} forfeited. "
            f"{state.get_team(winner).name or winner} won the battle!",
        )
        return replace(finished, phase_started_at=now)

    @staticmethod
    def rematch(state: BattleState, resolver: TurnResolver, now: float) -> BattleState:
        """Create a fresh record with the same teams fully restored.

        Args:
            state: Finished battle record
            resolver: Turn resolver used for entry abilities
            now: Current wall-clock time in seconds

        Returns:
            New battle record for the rematch
        """
        teams = []
        for player in PLAYER_IDS:
            team = state.get_team(player)
            teams.append(
                replace(
                    team,
                    pokemon=[p.reset_for_rematch() for p in team.pokemon],
                    active_pokemon_index=0,
                    pending_action=None,
                )
            )
        return StateTransition.new_battle(teams[0], teams[1], resolver, now)
