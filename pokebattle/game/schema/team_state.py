"""Team state representation for battle simulation."""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from pokebattle.game.interface.battle_action import BattleAction
from pokebattle.game.schema.pokemon_state import PokemonState


@dataclass(frozen=True)
class TeamState:
    """Immutable state of one player's side during battle.

    This includes all 6 Pokemon, the active Pokemon and the player's pending
    action for the current turn. The active Pokemon is never fainted unless the
    whole team is fainted or the battle is waiting for this player's forced
    switch.
    """

    pokemon: List[PokemonState] = field(default_factory=list)

    active_pokemon_index: int = 0

    player_id: str = ""

    name: str = ""

    pending_action: Optional[BattleAction] = None

    def get_active_pokemon(self) -> PokemonState:
        """Get the currently active Pokemon.

        Returns:
            Active Pokemon

        Raises:
            ValueError: If the active index does not point into the team
        """
        if 0 <= self.active_pokemon_index < len(self.pokemon):
            return self.pokemon[self.active_pokemon_index]
        raise ValueError(f"Active pokemon index {self.active_pokemon_index} is out of bounds")

    def get_fainted_pokemon(self) -> List[PokemonState]:
        return [p for p in self.pokemon if p.is_fainted()]

    def is_eliminated(self) -> bool:
        """Check if every team member is fainted.

        Returns:
            True when no Pokemon can battle any more
        """
        return bool(self.pokemon) and all(p.is_fainted() for p in self.pokemon)

    def get_available_switches(self) -> List[int]:
        """Get team slots that can be switched in.

        Returns:
            Indices of non-fainted Pokemon other than the active one
        """
        return [
            i
            for i, p in enumerate(self.pokemon)
            if i != self.active_pokemon_index and p.is_alive()
        ]

    def with_pokemon(self, index: int, pokemon: PokemonState) -> "TeamState":
        members = list(self.pokemon)
        members[index] = pokemon
        return replace(self, pokemon=members)

    def with_active_pokemon(self, pokemon: PokemonState) -> "TeamState":
        return self.with_pokemon(self.active_pokemon_index, pokemon)

    def with_pending_action(self, action: Optional[BattleAction]) -> "TeamState":
        return replace(self, pending_action=action)

    def to_dict(self) -> Dict[str, Any]:
        """Convert Team state to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the team state
        """
        return {
            "player_id": self.player_id,
            "name": self.name,
            "active_pokemon_index": self.active_pokemon_index,
            "pokemon": [p.to_dict() for p in self.pokemon],
            "pending_action": (
                self.pending_action.to_dict() if self.pending_action else None
            ),
            "fainted_count": len(self.get_fainted_pokemon()),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TeamState":
        pending = data.get("pending_action")
        return cls(
            pokemon=[PokemonState.from_dict(p) for p in data.get("pokemon", [])],
            active_pokemon_index=int(data.get("active_pokemon_index", 0)),
            player_id=data.get("player_id", ""),
            name=data.get("name", ""),
            pending_action=BattleAction.from_dict(pending) if pending else None,
        )

    def __str__(self) -> str:
        """Return JSON representation of Team state.

        Returns:
            JSON string of team state, useful for testing and debugging
        """
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)
