"""Resolution of a full turn once both players have chosen."""

import math
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Tuple

from absl import logging

from pokebattle.game.data.type_chart import TypeChart
from pokebattle.game.engine.damage_calculator import DamageCalculator, apply_stage_change
from pokebattle.game.schema.battle_state import BattleState
from pokebattle.game.schema.enums import (
    PLAYER_IDS,
    AbilityTrigger,
    Stat,
    Status,
    opponent_of,
)
from pokebattle.game.schema.pokemon_state import PokemonState

PARALYSIS_SKIP_CHANCE = 0.25
RESIDUAL_DAMAGE_FRACTION = 8

_RESIDUAL_MESSAGES = {
    Status.POISON: "{name} is hurt by poison!",
    Status.BURN: "{name} is hurt by its burn!",
}


class TurnSignal(Enum):
    """What a side needs after a turn."""

    CONTINUE = "continue"
    MUST_SWITCH = "must_switch"
    FAINTED = "fainted"


@dataclass(frozen=True)
class TurnResult:
    state: BattleState
    messages: List[str] = field(default_factory=list)
    signals: Dict[str, TurnSignal] = field(default_factory=dict)


class TurnResolver:
    """Applies both pending actions of a battle in the correct order.

    A turn runs in phases: switches, then moves in speed order, then
    end-of-turn poison and burn damage. Pending actions are read from the
    teams and left in place; clearing them is up to the caller.
    """

    def __init__(self, type_chart: TypeChart, level: int = 50) -> None:
        self.type_chart = type_chart
        self.calculator = DamageCalculator(type_chart, level)

    def resolve(self, state: BattleState, rng: random.Random) -> TurnResult:
        """Resolve one turn.

        Args:
            state: Battle state with both pending actions set
            rng: Random source for the turn

        Returns:
            TurnResult with the new state, the turn messages and a signal per
            player
        """
        messages: List[str] = []

        for player in PLAYER_IDS:
            action = state.get_team(player).pending_action
            if action is not None and action.is_switch():
                state, switch_messages = self.switch_in(state, player, action.switch_index)
                messages.extend(switch_messages)

        order = self.action_order(state)
        for player in order:
            action = state.get_team(player).pending_action
            if action is None or not action.is_move():
                continue
            if state.get_active_pokemon(player).is_fainted():
                continue
            if state.get_active_pokemon(opponent_of(player)).is_fainted():
                continue
            state, move_messages = self.execute_move(state, player, action.move_name, rng)
            messages.extend(move_messages)

        for player in order:
            state, residual_messages = self.apply_residual_damage(state, player)
            messages.extend(residual_messages)

        return TurnResult(
            state=state.with_log(*messages),
            messages=messages,
            signals=self.signals(state),
        )

    def action_order(self, state: BattleState) -> List[str]:
        """Order players by the effective speed of their active Pokemon.

        Player 1 goes first on a tie.

        Args:
            state: Current battle state

        Returns:
            Player IDs, fastest first
        """
        p1_speed = state.get_active_pokemon("p1").get_effective_stat(Stat.SPE)
        p2_speed = state.get_active_pokemon("p2").get_effective_stat(Stat.SPE)
        if p2_speed > p1_speed:
            return ["p2", "p1"]
        return ["p1", "p2"]

    def switch_in(
        self, state: BattleState, player: str, index: int
    ) -> Tuple[BattleState, List[str]]:
        """Bring a team member into battle and fire its entry abilities.

        Args:
            state: Current battle state
            player: Player switching
            index: Team slot to bring in

        Returns:
            Tuple of the new state and the switch messages
        """
        team = state.get_team(player)
        outgoing = team.get_active_pokemon()
        messages = []
        if outgoing.is_alive() and index != team.active_pokemon_index:
            messages.append(f"{team.name or player}: {outgoing.display_name()}, come back!")
        state = state.with_team(player, replace(team, active_pokemon_index=index))
        incoming = state.get_active_pokemon(player)
        messages.append(f"{team.name or player} sent out {incoming.display_name()}!")

        state, entry_messages = self.apply_entry_abilities(state, player)
        return state, messages + entry_messages

    def apply_entry_abilities(
        self, state: BattleState, player: str
    ) -> Tuple[BattleState, List[str]]:
        """Fire switch-in abilities of a player's active Pokemon.

        Args:
            state: Current battle state
            player: Player whose active Pokemon just entered

        Returns:
            Tuple of the new state and any ability messages
        """
        pokemon = state.get_active_pokemon(player)
        opponent = opponent_of(player)
        messages: List[str] = []
        for ability in pokemon.abilities_with(AbilityTrigger.SWITCH_IN):
            target = state.get_active_pokemon(opponent)
            if target.is_fainted():
                continue
            target, _, stage_message = apply_stage_change(target, Stat.ATK, -1)
            opponent_team = state.get_team(opponent)
            state = state.with_team(opponent, opponent_team.with_active_pokemon(target))
            messages.append(
                f"{pokemon.display_name()}'s {ability.display_name()}! {stage_message}"
            )
        return state, messages

    def execute_move(
        self, state: BattleState, player: str, move_name: str, rng: random.Random
    ) -> Tuple[BattleState, List[str]]:
        """Run one player's move, including the status check before it.

        Args:
            state: Current battle state
            player: Player whose active Pokemon acts
            move_name: Chosen move
            rng: Random source

        Returns:
            Tuple of the new state and the move messages
        """
        opponent = opponent_of(player)
        attacker = state.get_active_pokemon(player)
        name = attacker.display_name()
        messages: List[str] = []

        if attacker.status == Status.SLEEP:
            # status_counter is the number of turns still to be skipped
            if attacker.status_counter > 0:
                attacker = replace(attacker, status_counter=attacker.status_counter - 1)
                state = self._set_active(state, player, attacker)
                messages.append(f"{name} is fast asleep.")
                return state, messages
            attacker = attacker.with_status(Status.NONE)
            messages.append(f"{name} woke up!")
        elif attacker.status == Status.PARALYSIS and rng.random() < PARALYSIS_SKIP_CHANCE:
            messages.append(f"{name} is paralyzed! It can't move!")
            return state, messages

        known = attacker.get_move(move_name)
        if known is None or not known.can_use():
            logging.warning("%s cannot use %s this turn", attacker.name, move_name)
            state = self._set_active(state, player, attacker)
            messages.append(f"{name} has no PP left for {move_name}!")
            return state, messages

        messages.append(f"{name} used {known.move.display_name()}!")
        result = self.calculator.resolve_move(
            attacker, state.get_active_pokemon(opponent), move_name, rng
        )
        messages.extend(result.messages)
        state = self._set_active(state, player, result.attacker)
        state = self._set_active(state, opponent, result.defender)
        state = state.with_revealed_move(player, move_name)

        if result.defender.is_fainted():
            messages.append(f"{result.defender.display_name()} fainted!")
        return state, messages

    def apply_residual_damage(
        self, state: BattleState, player: str
    ) -> Tuple[BattleState, List[str]]:
        """Apply end-of-turn poison or burn damage to a player's active Pokemon.

        Args:
            state: Current battle state
            player: Player whose active Pokemon takes damage

        Returns:
            Tuple of the new state and messages, including a faint message if
            the damage knocked the Pokemon out
        """
        pokemon = state.get_active_pokemon(player)
        if pokemon.is_fainted() or pokemon.status not in _RESIDUAL_MESSAGES:
            return state, []
        damage = math.floor(pokemon.max_hp / RESIDUAL_DAMAGE_FRACTION)
        pokemon = pokemon.take_damage(damage)
        messages = [_RESIDUAL_MESSAGES[pokemon.status].format(name=pokemon.display_name())]
        if pokemon.is_fainted():
            messages.append(f"{pokemon.display_name()} fainted!")
        return self._set_active(state, player, pokemon), messages

    def signals(self, state: BattleState) -> Dict[str, TurnSignal]:
        """Work out what each side needs after a turn.

        Args:
            state: Battle state after resolution

        Returns:
            FAINTED for an eliminated team, MUST_SWITCH when the active
            Pokemon is down but others remain, otherwise CONTINUE
        """
        result = {}
        for player in PLAYER_IDS:
            team = state.get_team(player)
            if team.is_eliminated():
                result[player] = TurnSignal.FAINTED
            elif team.get_active_pokemon().is_fainted():
                result[player] = TurnSignal.MUST_SWITCH
            else:
                result[player] = TurnSignal.CONTINUE
        return result

    @staticmethod
    def _set_active(state: BattleState, player: str, pokemon: PokemonState) -> BattleState:
        return state.with_team(player, state.get_team(player).with_active_pokemon(pokemon))
