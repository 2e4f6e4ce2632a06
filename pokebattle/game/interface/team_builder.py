"""Random team construction from a game data provider."""

import asyncio
import math
import random
from typing import List, Optional, Tuple

from absl import logging

from pokebattle.game.data.ability import Ability
from pokebattle.game.data.data_provider import DataProvider
from pokebattle.game.data.move import Move
from pokebattle.game.data.species import Species
from pokebattle.game.exceptions import DataFetchError
from pokebattle.game.schema.battle_config import BattleConfig
from pokebattle.game.schema.enums import BOOSTABLE_STATS, Stat
from pokebattle.game.schema.pokemon_state import PokemonMove, PokemonState
from pokebattle.game.schema.team_state import TeamState


def max_hp_for(base_hp: int, level: int) -> int:
    """Compute maximum HP from the base HP stat.

    Args:
        base_hp: Species base HP
        level: Battle level

    Returns:
        floor(2 * base_hp * level / 100 + level + 10)

    Example:
        >>> max_hp_for(35, 50)
        95
    """
    return math.floor(2 * base_hp * level / 100 + level + 10)


def build_combatant(
    species: Species, moves: List[Move], abilities: List[Ability], level: int = 50
) -> PokemonState:
    """Create a fresh combatant from a species and its chosen moves.

    Args:
        species: Species stat block
        moves: Chosen move definitions, each starting at full PP
        abilities: Ability records for the species' abilities
        level: Battle level

    Returns:
        PokemonState at full HP with no status and neutral stages
    """
    base_stats = {
        Stat.from_api_name(name): value for name, value in species.base_stats.items()
    }
    max_hp = max_hp_for(species.base_stats.get("hp", 0), level)
    return PokemonState(
        species_id=species.id,
        name=species.name,
        level=level,
        types=[t.lower() for t in species.types],
        base_stats=base_stats,
        abilities=list(abilities),
        moves=[PokemonMove(move=m, current_pp=m.pp, max_pp=m.pp) for m in moves],
        current_hp=max_hp,
        max_hp=max_hp,
        stat_boosts={stat: 0 for stat in BOOSTABLE_STATS},
    )


class TeamBuilder:
    """Builds two random teams of distinct species for a new battle."""

    def __init__(
        self,
        provider: DataProvider,
        config: Optional[BattleConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.provider = provider
        self.config = config or BattleConfig()
        self.rng = rng or random.Random()

    async def build_teams(self) -> Tuple[List[PokemonState], List[PokemonState]]:
        """Draw 2 * team_size distinct species and build both teams.

        Species ids are drawn in a random order. A species that cannot learn
        a single usable move is replaced by the next id in that order.

        Returns:
            Tuple of (player 1 team, player 2 team)

        Raises:
            DataFetchError: If any lookup fails or the catalog runs out of
                species with usable moves
        """
        team_size = self.config.team_size
        wanted = 2 * team_size
        candidates = self.rng.sample(
            range(1, self.config.catalog_size + 1), self.config.catalog_size
        )

        members: List[PokemonState] = []
        drawn = 0
        while len(members) < wanted:
            batch = candidates[drawn : drawn + wanted - len(members)]
            if not batch:
                raise DataFetchError(
                    "species",
                    f"only {len(members)} of {wanted} species have usable moves",
                )
            drawn += len(batch)
            logging.info("Building team members from species %s", batch)
            built = await asyncio.gather(*(self.build_pokemon(i) for i in batch))
            for pokemon in built:
                if pokemon.moves:
                    members.append(pokemon)
                else:
                    logging.warning(
                        "%s has no usable moves, drawing another species", pokemon.name
                    )
        return members[:team_size], members[team_size:]

    async def build_pokemon(self, species_id: int) -> PokemonState:
        species = await self.provider.get_species(species_id)
        moves = await self.choose_moves(species)
        abilities = await asyncio.gather(
            *(self.provider.get_ability(name) for name in species.abilities)
        )
        return build_combatant(species, moves, list(abilities), self.config.level)

    async def choose_moves(self, species: Species) -> List[Move]:
        """Pick up to moves_per_pokemon usable moves at random.

        A random sample of move_sample_size learnable moves is fetched first.
        If it holds too few usable moves, the remaining learnable moves are
        fetched one at a time until the move-set is full or the list runs out.

        Args:
            species: Species whose learnable moves are drawn from

        Returns:
            Usable moves, at most moves_per_pokemon of them
        """
        wanted = self.config.moves_per_pokemon
        refs = list(species.moves)
        self.rng.shuffle(refs)
        sample = refs[: self.config.move_sample_size]
        remaining = refs[self.config.move_sample_size :]

        fetched = await asyncio.gather(*(self.provider.get_move(ref) for ref in sample))
        chosen = [move for move in fetched if move.is_usable()][:wanted]

        for ref in remaining:
            if len(chosen) >= wanted:
                break
            move = await self.provider.get_move(ref)
            if move.is_usable():
                chosen.append(move)
        return chosen


def make_team(player_id: str, name: str, pokemon: List[PokemonState]) -> TeamState:
    return TeamState(pokemon=list(pokemon), player_id=player_id, name=name)
