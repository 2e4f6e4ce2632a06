"""Battle record store, state transitions and turn synchronization."""

from pokebattle.game.environment.battle_store import BattleStore, InMemoryBattleStore
from pokebattle.game.environment.state_transition import StateTransition
from pokebattle.game.environment.turn_sync import TurnSynchronizer

__all__ = ["BattleStore", "InMemoryBattleStore", "StateTransition", "TurnSynchronizer"]
