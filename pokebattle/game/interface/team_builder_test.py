"""Unit tests for TeamBuilder."""

import random
import unittest
from unittest import mock

from absl.testing import parameterized

from pokebattle.game.data.ability import Ability
from pokebattle.game.data.game_data import GameData
from pokebattle.game.data.move import Move
from pokebattle.game.data.species import Species
from pokebattle.game.exceptions import DataFetchError
from pokebattle.game.interface.team_builder import (
    TeamBuilder,
    build_combatant,
    make_team,
    max_hp_for,
)
from pokebattle.game.schema.battle_config import BattleConfig
from pokebattle.game.schema.enums import AbilityTrigger, MoveCategory, Stat, Status

PIKACHU = Species(
    id=1,
    name="pikachu",
    types=["electric"],
    base_stats={
        "hp": 35,
        "attack": 55,
        "defense": 40,
        "special-attack": 50,
        "special-defense": 50,
        "speed": 90,
    },
    abilities=["static"],
    moves=["seismic-toss", "night-shade", "thunderbolt", "growl", "tackle", "surf"],
)

STATIC = Ability("static", AbilityTrigger.CONTACT, effect="paralysis")


class MaxHpTest(parameterized.TestCase):
    @parameterized.parameters((35, 50, 95), (160, 50, 220), (1, 50, 61), (100, 100, 310))
    def test_max_hp_for(self, base_hp: int, level: int, expected: int) -> None:
        self.assertEqual(max_hp_for(base_hp, level), expected)


class BuildCombatantTest(unittest.TestCase):
    def test_fresh_combatant(self) -> None:
        thunderbolt = Move(
            name="thunderbolt", type="electric", category=MoveCategory.SPECIAL, pp=15, power=90
        )

        pokemon = build_combatant(PIKACHU, [thunderbolt], [STATIC])

        self.assertEqual(pokemon.max_hp, 95)
        self.assertEqual(pokemon.current_hp, 95)
        self.assertEqual(pokemon.base_stats[Stat.SPA], 50)
        self.assertEqual(pokemon.status, Status.NONE)
        self.assertEqual(pokemon.get_stat_boost(Stat.ATK), 0)
        self.assertEqual(pokemon.get_move("thunderbolt").current_pp, 15)
        self.assertEqual(pokemon.abilities, [STATIC])


class TeamBuilderTest(unittest.IsolatedAsyncioTestCase):
    """Test team construction from the bundled catalog."""

    def setUp(self) -> None:
        self.provider = GameData()
        self.config = BattleConfig(team_size=6, catalog_size=self.provider.catalog_size)

    async def test_build_teams_distinct_species(self) -> None:
        builder = TeamBuilder(self.provider, self.config, rng=random.Random(42))

        team1, team2 = await builder.build_teams()

        self.assertEqual(len(team1), 6)
        self.assertEqual(len(team2), 6)
        species_ids = [p.species_id for p in team1 + team2]
        self.assertEqual(len(set(species_ids)), 12)
        for pokemon in team1 + team2:
            self.assertEqual(pokemon.current_hp, pokemon.max_hp)
            self.assertLessEqual(len(pokemon.moves), 4)
            self.assertTrue(all(m.move.is_usable() for m in pokemon.moves))

    async def test_build_teams_reproducible_with_seed(self) -> None:
        first = await TeamBuilder(self.provider, self.config, random.Random(5)).build_teams()
        second = await TeamBuilder(self.provider, self.config, random.Random(5)).build_teams()

        self.assertEqual(first, second)

    async def test_unusable_moves_filtered(self) -> None:
        """Test that damaging moves without power never make the move-set."""
        builder = TeamBuilder(self.provider, self.config, rng=random.Random(1))

        pokemon = await builder.build_pokemon(1)

        self.assertEqual(len(pokemon.moves), 4)
        self.assertNotIn("seismic-toss", [m.name for m in pokemon.moves])

    async def test_abilities_come_from_provider(self) -> None:
        """Test that combatants carry the provider's ability records."""
        provider = mock.Mock(wraps=self.provider)
        builder = TeamBuilder(provider, self.config, rng=random.Random(1))

        pokemon = await builder.build_pokemon(1)

        self.assertEqual(pokemon.abilities[0], STATIC)
        self.assertEqual(pokemon.abilities[1].trigger, AbilityTrigger.NONE)
        self.assertEqual(
            [c.args[0] for c in provider.get_ability.call_args_list],
            ["static", "lightning-rod"],
        )

    async def test_species_without_usable_moves_redrawn(self) -> None:
        """Test that a species with an empty move-set is replaced by another."""
        builder = TeamBuilder(
            self.provider, BattleConfig(team_size=2, catalog_size=5), rng=random.Random(3)
        )
        choose_moves = builder.choose_moves

        async def no_moves_for_charizard(species: Species):
            if species.id == 2:
                return []
            return await choose_moves(species)

        with mock.patch.object(builder, "choose_moves", side_effect=no_moves_for_charizard):
            team1, team2 = await builder.build_teams()

        self.assertCountEqual([p.species_id for p in team1 + team2], [1, 3, 4, 5])
        self.assertTrue(all(p.moves for p in team1 + team2))

    async def test_too_few_species_with_moves_raises(self) -> None:
        builder = TeamBuilder(
            self.provider, BattleConfig(team_size=2, catalog_size=4), rng=random.Random(3)
        )

        with mock.patch.object(builder, "choose_moves", return_value=[]):
            with self.assertRaises(DataFetchError):
                await builder.build_teams()

    async def test_choose_moves_falls_back_past_sample(self) -> None:
        """Test that remaining moves are fetched when the sample is mostly unusable."""
        rng = mock.Mock(spec=random.Random)
        rng.shuffle.side_effect = lambda refs: None
        provider = mock.Mock(wraps=self.provider)
        builder = TeamBuilder(
            provider, BattleConfig(moves_per_pokemon=3, move_sample_size=2), rng=rng
        )

        moves = await builder.choose_moves(PIKACHU)

        self.assertEqual([m.name for m in moves], ["thunderbolt", "growl", "tackle"])
        fetched = [c.args[0] for c in provider.get_move.call_args_list]
        self.assertNotIn("surf", fetched)

    async def test_provider_failure_propagates(self) -> None:
        provider = mock.Mock(wraps=self.provider)
        provider.get_species = mock.AsyncMock(
            side_effect=DataFetchError("species/3", "timed out")
        )
        builder = TeamBuilder(provider, self.config, rng=random.Random(0))

        with self.assertRaises(DataFetchError):
            await builder.build_teams()

    def test_make_team(self) -> None:
        pokemon = [build_combatant(PIKACHU, [], [])]

        team = make_team("p2", "Blue", pokemon)

        self.assertEqual(team.player_id, "p2")
        self.assertEqual(team.name, "Blue")
        self.assertEqual(team.active_pokemon_index, 0)
        self.assertIsNot(team.pokemon, pokemon)


if __name__ == "__main__":
    unittest.main()
