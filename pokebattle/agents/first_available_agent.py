"""First available move agent that always picks the first valid action."""

from pokebattle.agents.agent_interface import Agent
from pokebattle.game.interface.battle_action import BattleAction
from pokebattle.game.schema.battle_state import BattleState


class FirstAvailableAgent(Agent):
    """Agent that always picks the first available move or switch.

    This deterministic behavior makes this agent useful for:
    - Baseline comparisons (simplest possible strategy)
    - Testing and debugging (predictable, reproducible battles)
    """

    async def choose_action(self, state: BattleState) -> BattleAction:
        """Choose the first available action from moves or switches.

        Args:
            state: Current battle record

        Returns:
            BattleAction with the first usable move, or the first legal switch
            when a switch is required

        Raises:
            ValueError: If no actions are available
        """
        if self.must_switch(state):
            switches = state.get_available_switches(self._player_id)
            if not switches:
                raise ValueError("No available switches when switch is required")
            return BattleAction.switch(switches[0])

        return BattleAction.move(state.get_available_moves(self._player_id)[0])
