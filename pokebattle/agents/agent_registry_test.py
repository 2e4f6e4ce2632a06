"""Tests for agent registry."""

import random
import unittest

from pokebattle.agents.agent_interface import Agent
from pokebattle.agents.agent_registry import AgentRegistry
from pokebattle.agents.first_available_agent import FirstAvailableAgent
from pokebattle.agents.random_agent import RandomAgent
from pokebattle.game.interface.battle_action import BattleAction
from pokebattle.game.schema.battle_state import BattleState


class AgentRegistryTest(unittest.TestCase):
    """Test cases for AgentRegistry class."""

    def test_get_available_agents_returns_sorted_list(self) -> None:
        agents = AgentRegistry.get_available_agents()

        self.assertEqual(agents, sorted(agents))
        self.assertIn("random", agents)
        self.assertIn("first_move", agents)

    def test_has_agent(self) -> None:
        self.assertTrue(AgentRegistry.has_agent("random"))
        self.assertTrue(AgentRegistry.has_agent("FIRST_MOVE"))
        self.assertFalse(AgentRegistry.has_agent("nonexistent"))

    def test_create_agent_returns_random_agent(self) -> None:
        """Test that create_agent builds a RandomAgent for the given side."""
        rng = random.Random(3)
        agent = AgentRegistry.create_agent("random", "p2", rng=rng)

        self.assertIsInstance(agent, RandomAgent)
        self.assertEqual(agent.player_id, "p2")
        self.assertIs(agent._rng, rng)

    def test_create_agent_is_case_insensitive(self) -> None:
        agent1 = AgentRegistry.create_agent("Random", "p1")
        agent2 = AgentRegistry.create_agent("First_Move", "p1")

        self.assertIsInstance(agent1, RandomAgent)
        self.assertIsInstance(agent2, FirstAvailableAgent)

    def test_create_agent_raises_value_error_for_unknown_agent(self) -> None:
        with self.assertRaises(ValueError) as context:
            AgentRegistry.create_agent("unknown_agent", "p1")

        self.assertIn("Unknown agent", str(context.exception))
        self.assertIn("Available agents", str(context.exception))

    def test_create_agent_returns_new_instances(self) -> None:
        agent1 = AgentRegistry.create_agent("random", "p1")
        agent2 = AgentRegistry.create_agent("random", "p1")

        self.assertIsNot(agent1, agent2)

    def test_register_agent_adds_new_agent(self) -> None:
        """Test that register_agent adds a new agent to the registry."""

        class TestAgent(Agent):
            async def choose_action(self, state: BattleState) -> BattleAction:
                return BattleAction.move("testmove")

        original_agents = set(AgentRegistry.get_available_agents())

        try:
            AgentRegistry.register_agent(
                "test_agent", lambda player_id, rng: TestAgent(player_id, rng)
            )

            self.assertTrue(AgentRegistry.has_agent("test_agent"))
            agent = AgentRegistry.create_agent("test_agent", "p2")
            self.assertIsInstance(agent, TestAgent)
            self.assertEqual(agent.player_id, "p2")
        finally:
            AgentRegistry._AGENT_MAP.pop("test_agent", None)

        self.assertEqual(original_agents, set(AgentRegistry.get_available_agents()))

    def test_register_agent_raises_error_for_duplicate(self) -> None:
        with self.assertRaises(ValueError) as context:
            AgentRegistry.register_agent(
                "random", lambda player_id, rng: RandomAgent(player_id, rng)
            )

        self.assertIn("already registered", str(context.exception))


if __name__ == "__main__":
    unittest.main()
