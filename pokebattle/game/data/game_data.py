import json
from pathlib import Path
from typing import Callable, Dict, Optional, TypeVar, Union

from pokebattle.game.data.ability import Ability
from pokebattle.game.data.data_provider import DataProvider
from pokebattle.game.data.move import Move
from pokebattle.game.data.species import Species
from pokebattle.game.data.type_chart import TypeRelations
from pokebattle.game.exceptions import DataFetchError

T = TypeVar("T")

DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "catalog"


class GameData(DataProvider):
    """Data provider backed by the JSON catalog shipped with the package.

    This class loads species, moves, abilities and the type chart once and
    provides read-only access. It is used for offline play and as the fixture
    catalog in tests.
    """

    def __init__(self, data_dir: Optional[Union[str, Path]] = None) -> None:
        """Load all catalog files.

        Args:
            data_dir: Directory holding species.json, moves.json,
                abilities.json and type_chart.json (default: bundled catalog)
        """
        self.data_dir = Path(data_dir) if data_dir is not None else DEFAULT_DATA_DIR
        self._species_lookup: Dict[int, Species] = {
            species.id: species
            for species in self._load("species.json", Species.from_dict).values()
        }
        self._moves_lookup = self._load("moves.json", Move.from_dict)
        self._abilities_lookup = self._load("abilities.json", Ability.from_dict)
        self._type_lookup = self._load("type_chart.json", TypeRelations.from_dict)

    def _normalize_key(self, name: str) -> str:
        return name.lower().strip().replace(" ", "-")

    def _load(self, filename: str, factory: Callable[[dict], T]) -> Dict[str, T]:
        with open(self.data_dir / filename, "r") as f:
            data = json.load(f)
        return {self._normalize_key(str(entry["name"])): factory(entry) for entry in data}

    @property
    def catalog_size(self) -> int:
        """Number of species in the catalog (ids run 1..catalog_size)."""
        return len(self._species_lookup)

    async def get_species(self, species_id: int) -> Species:
        if species_id not in self._species_lookup:
            raise DataFetchError(f"species/{species_id}", "not in catalog")
        return self._species_lookup[species_id]

    async def get_move(self, ref: str) -> Move:
        key = self._normalize_key(ref.rstrip("/").split("/")[-1])
        if key not in self._moves_lookup:
            raise DataFetchError(f"move/{ref}", "not in catalog")
        return self._moves_lookup[key]

    async def get_ability(self, name: str) -> Ability:
        key = self._normalize_key(name)
        if key not in self._abilities_lookup:
            return Ability.from_name(key)
        return self._abilities_lookup[key]

    async def get_type_chart(self, type_name: str) -> TypeRelations:
        key = self._normalize_key(type_name)
        if key not in self._type_lookup:
            raise DataFetchError(f"type/{type_name}", "not in catalog")
        return self._type_lookup[key]
