"""Agent registry for mapping agent names to agent classes."""

import random
from typing import Callable, Dict, List, Optional

from pokebattle.agents.agent_interface import Agent
from pokebattle.agents.first_available_agent import FirstAvailableAgent
from pokebattle.agents.random_agent import RandomAgent

AgentFactory = Callable[[str, Optional[random.Random]], Agent]


class AgentRegistry:
    """Registry for managing available agent types.

    This registry maps agent names (used in CLI flags) to factory functions
    taking the player ID and an optional random source.

    Example Usage:
        ```python
        agent = AgentRegistry.create_agent("random", "p2", rng=random.Random(3))
        ```

    Attributes:
        _AGENT_MAP: Mapping from agent names to agent factory functions
    """

    _AGENT_MAP: Dict[str, AgentFactory] = {
        "random": lambda player_id, rng: RandomAgent(player_id, rng),
        "first_move": lambda player_id, rng: FirstAvailableAgent(player_id, rng),
    }

    @classmethod
    def get_available_agents(cls) -> List[str]:
        """Get list of all available agent names.

        Returns:
            List of agent names that can be used with create_agent()
        """
        return sorted(cls._AGENT_MAP.keys())

    @classmethod
    def has_agent(cls, agent_name: str) -> bool:
        return agent_name.lower() in cls._AGENT_MAP

    @classmethod
    def create_agent(
        cls, agent_name: str, player_id: str, rng: Optional[random.Random] = None
    ) -> Agent:
        """Create an agent instance by name for one side of a battle.

        Args:
            agent_name: Name of the agent to create (case insensitive)
            player_id: Side the agent plays
            rng: Random source passed to the agent

        Returns:
            Instance of the requested agent

        Raises:
            ValueError: If agent_name is not registered
        """
        normalized_name = agent_name.lower()

        if normalized_name not in cls._AGENT_MAP:
            available = ", ".join(cls.get_available_agents())
            raise ValueError(
                f"Unknown agent: '{agent_name}'. Available agents: {available}"
            )

        return cls._AGENT_MAP[normalized_name](player_id, rng)

    @classmethod
    def register_agent(cls, agent_name: str, agent_factory: AgentFactory) -> None:
        """Register a new agent type.

        Args:
            agent_name: Name to register the agent under (will be lowercased)
            agent_factory: Callable taking a player ID and optional random
                          source and returning an agent

        Raises:
            ValueError: If agent_name is already registered
        """
        normalized_name = agent_name.lower()

        if normalized_name in cls._AGENT_MAP:
            raise ValueError(f"Agent '{agent_name}' is already registered")

        cls._AGENT_MAP[normalized_name] = agent_factory
