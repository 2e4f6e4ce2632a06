from dataclasses import dataclass, field
from typing import Dict, List

from pokebattle.game.data.base import GameDataObject


@dataclass(frozen=True)
class Species(GameDataObject):
    """Base stat block for one catalog entry.

    base_stats is keyed by data API stat name ("hp", "attack", "defense",
    "special-attack", "special-defense", "speed").
    """

    id: int
    name: str
    types: List[str]
    base_stats: Dict[str, int]
    abilities: List[str] = field(default_factory=list)
    moves: List[str] = field(default_factory=list)

    def display_name(self) -> str:
        return self.name.replace("-", " ").title()
