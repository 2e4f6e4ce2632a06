"""Data provider backed by the public PokeAPI REST service."""

from typing import Any, Dict, List, Optional

import httpx
from absl import logging
from pydantic import BaseModel, Field, ValidationError

from pokebattle.game.data.ability import Ability
from pokebattle.game.data.data_provider import DataProvider
from pokebattle.game.data.move import Move, StatChange
from pokebattle.game.data.species import Species
from pokebattle.game.data.type_chart import TypeRelations
from pokebattle.game.exceptions import DataFetchError
from pokebattle.game.schema.enums import MoveCategory, Stat, Status

POKEAPI_BASE_URL = "https://pokeapi.co/api/v2/"


class NamedResource(BaseModel):
    name: str
    url: Optional[str] = None


class TypeSlot(BaseModel):
    slot: int
    type: NamedResource


class BaseStatEntry(BaseModel):
    base_stat: int
    stat: NamedResource


class AbilitySlot(BaseModel):
    ability: NamedResource
    is_hidden: bool = False


class MoveSlot(BaseModel):
    move: NamedResource


class PokemonPayload(BaseModel):
    id: int
    name: str
    types: List[TypeSlot]
    stats: List[BaseStatEntry]
    abilities: List[AbilitySlot] = Field(default_factory=list)
    moves: List[MoveSlot] = Field(default_factory=list)


class StatChangeEntry(BaseModel):
    change: int
    stat: NamedResource


class MoveMeta(BaseModel):
    ailment: NamedResource = Field(default_factory=lambda: NamedResource(name="none"))
    ailment_chance: int = 0
    healing: int = 0


class MovePayload(BaseModel):
    name: str
    power: Optional[int] = None
    pp: Optional[int] = None
    type: NamedResource
    damage_class: NamedResource
    stat_changes: List[StatChangeEntry] = Field(default_factory=list)
    meta: Optional[MoveMeta] = None


class DamageRelations(BaseModel):
    double_damage_to: List[NamedResource] = Field(default_factory=list)
    half_damage_to: List[NamedResource] = Field(default_factory=list)
    no_damage_to: List[NamedResource] = Field(default_factory=list)


class TypePayload(BaseModel):
    name: str
    damage_relations: DamageRelations


class PokeApiProvider(DataProvider):
    """Fetches and caches records from PokeAPI.

    Payloads are validated with pydantic models before being turned into
    immutable game data records. Records are cached for the lifetime of the
    provider since the catalog does not change during a session.

    Example usage:
        ```python
        async with httpx.AsyncClient(base_url=POKEAPI_BASE_URL) as client:
            provider = PokeApiProvider(client)
            species = await provider.get_species(25)
        ```
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = POKEAPI_BASE_URL,
        timeout: float = 10.0,
    ) -> None:
        """Initialize the provider.

        Args:
            client: Optional shared AsyncClient; one is created when omitted
            base_url: API root URL
            timeout: Request timeout in seconds for the owned client
        """
        self._base_url = base_url
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self._species_cache: Dict[int, Species] = {}
        self._move_cache: Dict[str, Move] = {}
        self._type_cache: Dict[str, TypeRelations] = {}

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _url(self, ref: str) -> str:
        if ref.startswith("http://") or ref.startswith("https://"):
            return ref
        return f"{self._base_url.rstrip('/')}/{ref.lstrip('/')}"

    async def _get_json(self, ref: str) -> Dict[str, Any]:
        url = self._url(ref)
        logging.debug("Fetching %s", url)
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise DataFetchError(ref, str(e)) from e
        except ValueError as e:
            raise DataFetchError(ref, f"invalid JSON: {e}") from e

    async def get_species(self, species_id: int) -> Species:
        if species_id in self._species_cache:
            return self._species_cache[species_id]

        ref = f"pokemon/{species_id}"
        data = await self._get_json(ref)
        try:
            payload = PokemonPayload.model_validate(data)
        except ValidationError as e:
            raise DataFetchError(ref, str(e)) from e

        species = Species(
            id=payload.id,
            name=payload.name,
            types=[slot.type.name for slot in sorted(payload.types, key=lambda t: t.slot)],
            base_stats={entry.stat.name: entry.base_stat for entry in payload.stats},
            abilities=[slot.ability.name for slot in payload.abilities],
            moves=[slot.move.url or slot.move.name for slot in payload.moves],
        )
        self._species_cache[species_id] = species
        return species

    async def get_move(self, ref: str) -> Move:
        cache_key = ref.rstrip("/").split("/")[-1]
        if cache_key in self._move_cache:
            return self._move_cache[cache_key]

        if not ref.startswith("http"):
            ref = f"move/{ref}"
        data = await self._get_json(ref)
        try:
            payload = MovePayload.model_validate(data)
        except ValidationError as e:
            raise DataFetchError(ref, str(e)) from e

        meta = payload.meta or MoveMeta()
        stat_changes: List[StatChange] = []
        for entry in payload.stat_changes:
            try:
                stat = Stat.from_api_name(entry.stat.name)
            except ValueError:
                # accuracy/evasion changes have no battle effect here
                continue
            stat_changes.append(
                StatChange(
                    stat=stat,
                    change=entry.change,
                    target=StatChange.target_for_change(entry.change),
                )
            )

        move = Move(
            name=payload.name,
            type=payload.type.name,
            category=MoveCategory(payload.damage_class.name),
            pp=payload.pp or 0,
            power=payload.power,
            stat_changes=stat_changes,
            ailment=Status.from_ailment(meta.ailment.name),
            ailment_chance=meta.ailment_chance,
            healing=max(0, meta.healing),
        )
        self._move_cache[cache_key] = move
        self._move_cache[payload.name] = move
        return move

    async def get_ability(self, name: str) -> Ability:
        # Battle effects are keyed by name; the API's prose adds nothing usable
        return Ability.from_name(name)

    async def get_type_chart(self, type_name: str) -> TypeRelations:
        if type_name in self._type_cache:
            return self._type_cache[type_name]

        ref = f"type/{type_name}"
        data = await self._get_json(ref)
        try:
            payload = TypePayload.model_validate(data)
        except ValidationError as e:
            raise DataFetchError(ref, str(e)) from e

        relations = payload.damage_relations
        type_relations = TypeRelations(
            name=payload.name,
            double_damage_to=[r.name for r in relations.double_damage_to],
            half_damage_to=[r.name for r in relations.half_damage_to],
            no_damage_to=[r.name for r in relations.no_damage_to],
        )
        self._type_cache[type_name] = type_relations
        return type_relations
