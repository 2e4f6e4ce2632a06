"""Abstract base class for battle agents."""

import random
from abc import ABC, abstractmethod
from typing import Optional

from pokebattle.game.interface.battle_action import BattleAction
from pokebattle.game.schema.battle_state import BattleState


class Agent(ABC):
    """Abstract base class for all battle agents.

    An agent plays one side of one battle. It receives the shared battle record
    each time the battle waits for its input and returns a BattleAction. The
    built-in agents double as the CPU opponent in single-player mode.

    The agent interface follows these design principles:

    1. **Immutable State**: Agents receive an immutable BattleState snapshot and
       should not attempt to modify it.

    2. **Legal Actions**: BattleState.get_available_moves() and
       get_available_switches() list the legal choices for a player. The
       submitted action is validated again by the synchronizer, so an illegal
       choice is rejected rather than applied.

    3. **Async Interface**: choose_action is async so agents can wait on I/O
       (for example a human player's input).

    4. **Battle-Scoped Lifecycle**: Agents are created per battle and player.

    Example Usage:
        ```python
        agent = RandomAgent("p2", rng=random.Random(7))
        sync = TurnSynchronizer(store, battle_id, "p2", resolver)
        await sync.start()
        while not sync.battle_over:
            if "p2" in sync.state.awaiting_actions():
                await sync.submit_action(await agent.choose_action(sync.state))
            await sync.wait_for_update(timeout=1.0)
        ```
    """

    def __init__(self, player_id: str, rng: Optional[random.Random] = None) -> None:
        """Initialize the agent for one side of a battle.

        Args:
            player_id: Side this agent plays ("p1" or "p2")
            rng: Random source, for reproducible decisions
        """
        self._player_id = player_id
        self._rng = rng or random.Random()

    @property
    def player_id(self) -> str:
        return self._player_id

    def must_switch(self, state: BattleState) -> bool:
        """Check if this agent's next action has to be a switch.

        Args:
            state: Current battle record

        Returns:
            True in this player's forced-switch phase or when no move is usable
        """
        return state.get_active_pokemon(self._player_id).is_fainted() or not (
            state.get_available_moves(self._player_id)
        )

    @abstractmethod
    async def choose_action(self, state: BattleState) -> BattleAction:
        """Choose a battle action based on the current state.

        Args:
            state: Immutable snapshot of the battle record. Both teams are
                visible; agents should only rely on what a player could see.

        Returns:
            A BattleAction for this agent's player

        Raises:
            ValueError: If the player has no legal action at all
        """
