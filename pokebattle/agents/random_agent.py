"""Random agent that selects random valid actions."""

import random
from typing import Optional

from pokebattle.agents.agent_interface import Agent
from pokebattle.game.interface.battle_action import BattleAction
from pokebattle.game.schema.battle_state import BattleState


class RandomAgent(Agent):
    """Agent that picks random valid actions from available options.

    This is the CPU opponent of single-player mode:
    - 90% chance to pick a random move (when moves are available)
    - 10% chance to pick a random switch (when switches are available)
    - Always switches when forced or when no moves are available

    Attributes:
        switch_probability: Probability of choosing switch over move (default 0.1)
    """

    def __init__(
        self,
        player_id: str,
        rng: Optional[random.Random] = None,
        switch_probability: float = 0.1,
    ) -> None:
        """Initialize RandomAgent with customizable probabilities.

        Args:
            player_id: Side this agent plays
            rng: Random source
            switch_probability: Probability (0-1) of choosing switch over move
                               when both are available (default 0.1)
        """
        super().__init__(player_id, rng)
        self.switch_probability = switch_probability

    async def choose_action(self, state: BattleState) -> BattleAction:
        """Choose a random action from available moves and switches.

        Args:
            state: Current battle record

        Returns:
            BattleAction with randomly selected move or switch

        Raises:
            ValueError: If no actions are available
        """
        switches = state.get_available_switches(self._player_id)

        if self.must_switch(state):
            if not switches:
                raise ValueError("No available switches when switch is required")
            return BattleAction.switch(self._rng.choice(switches))

        if switches and self._rng.random() < self.switch_probability:
            return BattleAction.switch(self._rng.choice(switches))

        moves = state.get_available_moves(self._player_id)
        return BattleAction.move(self._rng.choice(moves))
