import asyncio
import unittest
from typing import List

from absl.testing import parameterized

from pokebattle.game.data.game_data import GameData
from pokebattle.game.exceptions import DataFetchError
from pokebattle.game.schema.enums import (
    AbilityTrigger,
    MoveCategory,
    Stat,
    StatChangeTarget,
    Status,
)


class GameDataTest(parameterized.TestCase):
    def setUp(self) -> None:
        self.game_data = GameData()

    @parameterized.parameters(
        (1, "pikachu", ["electric"], 35),
        (2, "charizard", ["fire", "flying"], 78),
        (5, "gengar", ["ghost", "poison"], 60),
        (9, "snorlax", ["normal"], 160),
    )
    def test_get_species(
        self, species_id: int, name: str, types: List[str], hp: int
    ) -> None:
        species = asyncio.run(self.game_data.get_species(species_id))

        self.assertEqual(species.name, name)
        self.assertEqual(species.types, types)
        self.assertEqual(species.base_stats["hp"], hp)
        self.assertLen(species.moves, 8)

    @parameterized.parameters(
        ("thunderbolt", "electric", MoveCategory.SPECIAL, 90),
        ("earthquake", "ground", MoveCategory.PHYSICAL, 100),
        ("swords-dance", "normal", MoveCategory.STATUS, None),
        ("seismic-toss", "fighting", MoveCategory.PHYSICAL, None),
    )
    def test_get_move(
        self, name: str, move_type: str, category: MoveCategory, power
    ) -> None:
        move = asyncio.run(self.game_data.get_move(name))

        self.assertEqual(move.type, move_type)
        self.assertEqual(move.category, category)
        self.assertEqual(move.power, power)

    def test_move_effects(self) -> None:
        thunderbolt = asyncio.run(self.game_data.get_move("thunderbolt"))
        growl = asyncio.run(self.game_data.get_move("growl"))
        recover = asyncio.run(self.game_data.get_move("recover"))

        self.assertEqual(thunderbolt.ailment, Status.PARALYSIS)
        self.assertEqual(thunderbolt.ailment_chance, 10)
        self.assertEqual(growl.stat_changes[0].stat, Stat.ATK)
        self.assertEqual(growl.stat_changes[0].target, StatChangeTarget.OPPONENT)
        self.assertEqual(recover.healing, 50)

    def test_get_move_by_url_and_display_name(self) -> None:
        """Test that URL refs and spaced names resolve to the same move."""
        by_url = asyncio.run(
            self.game_data.get_move("https://pokeapi.co/api/v2/move/body-slam/")
        )
        by_name = asyncio.run(self.game_data.get_move("Body Slam"))

        self.assertEqual(by_url, by_name)

    def test_damaging_move_without_power_is_unusable(self) -> None:
        self.assertFalse(asyncio.run(self.game_data.get_move("seismic-toss")).is_usable())
        self.assertTrue(asyncio.run(self.game_data.get_move("growl")).is_usable())

    def test_get_ability(self) -> None:
        levitate = asyncio.run(self.game_data.get_ability("levitate"))
        blaze = asyncio.run(self.game_data.get_ability("Blaze"))

        self.assertEqual(levitate.trigger, AbilityTrigger.IMMUNITY)
        self.assertEqual(levitate.element, "ground")
        self.assertEqual(blaze.trigger, AbilityTrigger.NONE)

    def test_unknown_ability_has_no_effect(self) -> None:
        ability = asyncio.run(self.game_data.get_ability("run-away"))

        self.assertEqual(ability.trigger, AbilityTrigger.NONE)

    def test_get_species_not_found(self) -> None:
        with self.assertRaises(DataFetchError) as context:
            asyncio.run(self.game_data.get_species(999))
        self.assertEqual(context.exception.source, "species/999")

    def test_get_move_not_found(self) -> None:
        with self.assertRaises(DataFetchError):
            asyncio.run(self.game_data.get_move("nonexistent-move"))

    def test_catalog_size(self) -> None:
        self.assertEqual(self.game_data.catalog_size, 16)

    def test_every_species_move_is_in_catalog(self) -> None:
        for species_id in range(1, self.game_data.catalog_size + 1):
            species = asyncio.run(self.game_data.get_species(species_id))
            for ref in species.moves:
                asyncio.run(self.game_data.get_move(ref))


if __name__ == "__main__":
    unittest.main()
