"""Unit tests for FirstAvailableAgent."""

import unittest
from typing import List

from pokebattle.agents.first_available_agent import FirstAvailableAgent
from pokebattle.game.data.move import Move
from pokebattle.game.interface.battle_action import ActionType, BattleAction
from pokebattle.game.schema.battle_state import BattleState
from pokebattle.game.schema.enums import MoveCategory
from pokebattle.game.schema.pokemon_state import PokemonMove, PokemonState
from pokebattle.game.schema.team_state import TeamState


def _pokemon(name: str, moves: List[str], hp: int = 100, pp: int = 10) -> PokemonState:
    return PokemonState(
        species_id=1,
        name=name,
        moves=[
            PokemonMove(
                move=Move(name=move, type="normal", category=MoveCategory.STATUS, pp=10),
                current_pp=pp,
                max_pp=10,
            )
            for move in moves
        ],
        current_hp=hp,
    )


def _create_test_state(team: List[PokemonState], active_index: int = 0) -> BattleState:
    return BattleState(
        teams={
            "p1": TeamState(pokemon=team, active_pokemon_index=active_index, player_id="p1"),
            "p2": TeamState(pokemon=[_pokemon("foe", ["growl"])], player_id="p2"),
        }
    )


class FirstAvailableAgentTest(unittest.IsolatedAsyncioTestCase):
    """Test FirstAvailableAgent functionality."""

    def setUp(self) -> None:
        self.agent = FirstAvailableAgent("p1")

    async def test_agent_returns_first_move(self) -> None:
        state = _create_test_state([_pokemon("testmon", ["growl", "leer", "splash"])])

        action = await self.agent.choose_action(state)

        self.assertEqual(action.action_type, ActionType.MOVE)
        self.assertEqual(action.move_name, "growl")

    async def test_agent_skips_moves_without_pp(self) -> None:
        """Test that only moves with PP left count as available."""
        active = _pokemon("testmon", ["growl", "leer"])
        for _ in range(10):
            active = active.with_move_used("growl")
        state = _create_test_state([active])

        action = await self.agent.choose_action(state)

        self.assertEqual(action, BattleAction.move("leer"))

    async def test_agent_prefers_move_over_switch(self) -> None:
        state = _create_test_state(
            [_pokemon("testmon", ["growl"]), _pokemon("benchmon", ["leer"])]
        )

        action = await self.agent.choose_action(state)

        self.assertTrue(action.is_move())

    async def test_agent_with_force_switch(self) -> None:
        """Test that the first healthy bench slot is chosen on a forced switch."""
        state = _create_test_state(
            [
                _pokemon("fainted", ["growl"], hp=0),
                _pokemon("alsofainted", ["growl"], hp=0),
                _pokemon("healthy", ["growl"]),
                _pokemon("healthy2", ["growl"]),
            ]
        )

        action = await self.agent.choose_action(state)

        self.assertEqual(action, BattleAction.switch(2))

    async def test_agent_ignores_active_slot_when_switching(self) -> None:
        state = _create_test_state(
            [_pokemon("bench", ["growl"]), _pokemon("active", ["growl"], pp=0)],
            active_index=1,
        )

        action = await self.agent.choose_action(state)

        self.assertEqual(action, BattleAction.switch(0))

    async def test_agent_raises_error_on_force_switch_with_no_switches(self) -> None:
        state = _create_test_state([_pokemon("fainted", ["growl"], hp=0)])

        with self.assertRaises(ValueError):
            await self.agent.choose_action(state)

    async def test_agent_deterministic_across_calls(self) -> None:
        state = _create_test_state([_pokemon("testmon", ["growl", "leer"])])

        actions = [await self.agent.choose_action(state) for _ in range(5)]

        self.assertEqual(set(actions), {BattleAction.move("growl")})


if __name__ == "__main__":
    unittest.main()
