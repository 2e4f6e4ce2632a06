"""Read-only source of species, move, ability and type records."""

from abc import ABC, abstractmethod
from typing import List

from pokebattle.game.data.ability import Ability
from pokebattle.game.data.move import Move
from pokebattle.game.data.species import Species
from pokebattle.game.data.type_chart import TypeChart, TypeRelations

ALL_TYPES = (
    "normal",
    "fire",
    "water",
    "electric",
    "grass",
    "ice",
    "fighting",
    "poison",
    "ground",
    "flying",
    "psychic",
    "bug",
    "rock",
    "ghost",
    "dragon",
    "dark",
    "steel",
    "fairy",
)


class DataProvider(ABC):
    """Abstract provider of immutable Pokemon game data.

    Implementations may hit the network, so every lookup is async. Records
    are immutable and safe to cache. Any failure to produce a record must be
    raised as DataFetchError so battle setup can be retried.
    """

    @abstractmethod
    async def get_species(self, species_id: int) -> Species:
        """Get the stat block of a catalog entry.

        Args:
            species_id: Catalog number, 1-based

        Returns:
            Species record

        Raises:
            DataFetchError: If the record cannot be fetched
        """

    @abstractmethod
    async def get_move(self, ref: str) -> Move:
        """Get a move definition by name or reference URL."""

    @abstractmethod
    async def get_ability(self, name: str) -> Ability:
        """Get an ability definition by name."""

    @abstractmethod
    async def get_type_chart(self, type_name: str) -> TypeRelations:
        """Get the damage relations of one attacking type."""

    async def load_type_chart(self) -> TypeChart:
        """Build the full type chart from every attacking type.

        Returns:
            TypeChart covering all known types
        """
        relations: List[TypeRelations] = []
        for type_name in ALL_TYPES:
            relations.append(await self.get_type_chart(type_name))
        return TypeChart.from_relations(relations)
