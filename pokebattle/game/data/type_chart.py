from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from pokebattle.game.data.base import GameDataObject


@dataclass(frozen=True)
class TypeRelations(GameDataObject):
    """Damage relations of one attacking type."""

    name: str
    double_damage_to: List[str] = field(default_factory=list)
    half_damage_to: List[str] = field(default_factory=list)
    no_damage_to: List[str] = field(default_factory=list)

    def multiplier_against(self, defending_type: str) -> float:
        defending_type = defending_type.lower()
        if defending_type in self.no_damage_to:
            return 0.0
        if defending_type in self.double_damage_to:
            return 2.0
        if defending_type in self.half_damage_to:
            return 0.5
        return 1.0


@dataclass(frozen=True)
class TypeChart:
    relations: Dict[str, TypeRelations]

    @classmethod
    def from_relations(cls, relations: Sequence[TypeRelations]) -> "TypeChart":
        return cls(relations={r.name.lower(): r for r in relations})

    def get_effectiveness(
        self, attacking_type: str, defending_types: Sequence[str]
    ) -> float:
        """Get the net damage multiplier of a move type against a defender.

        Multipliers are combined multiplicatively across all defending types.

        Args:
            attacking_type: Type of the move
            defending_types: One or two types of the defender

        Returns:
            Net multiplier (0, 0.25, 0.5, 1, 2 or 4)

        Raises:
            ValueError: If the attacking type is unknown
        """
        attacking_type = attacking_type.lower()
        if attacking_type not in self.relations:
            raise ValueError(f"Unknown attacking type: {attacking_type}")

        relations = self.relations[attacking_type]
        multiplier = 1.0
        for defending_type in defending_types:
            multiplier *= relations.multiplier_against(defending_type)
        return multiplier
