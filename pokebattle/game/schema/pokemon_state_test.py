"""Unit tests for PokemonState."""

import json
import unittest

from absl.testing import parameterized

from pokebattle.game.data.ability import Ability
from pokebattle.game.data.move import Move
from pokebattle.game.schema.enums import AbilityTrigger, MoveCategory, Stat, Status
from pokebattle.game.schema.pokemon_state import (
    PokemonMove,
    PokemonState,
    stage_multiplier,
)

SURF = Move(name="surf", type="water", category=MoveCategory.SPECIAL, pp=15, power=90)


def _pokemon() -> PokemonState:
    return PokemonState(
        species_id=3,
        name="blastoise",
        types=["water"],
        base_stats={Stat.HP: 79, Stat.ATK: 83, Stat.DEF: 100, Stat.SPE: 78},
        abilities=[
            Ability("torrent"),
            Ability("water-absorb", AbilityTrigger.ABSORB, element="water"),
        ],
        moves=[PokemonMove(move=SURF, current_pp=2, max_pp=15)],
        current_hp=154,
        max_hp=154,
    )


class PokemonStateTest(parameterized.TestCase):
    """Test PokemonState functionality."""

    @parameterized.parameters(
        (-6, 0.25),
        (-3, 0.4),
        (-2, 0.5),
        (-1, 2.0 / 3.0),
        (0, 1.0),
        (1, 1.5),
        (3, 2.5),
        (4, 3.0),
        (6, 4.0),
        (9, 4.0),
        (-9, 0.25),
    )
    def test_stage_multiplier(self, stage: int, expected: float) -> None:
        self.assertAlmostEqual(stage_multiplier(stage), expected)

    def test_effective_stat_with_boost(self) -> None:
        """Test that the stage multiplier is applied to the base stat unrounded."""
        pokemon = _pokemon().with_stat_boost(Stat.ATK, -1)

        self.assertAlmostEqual(pokemon.get_effective_stat(Stat.ATK), 83 * 2 / 3)
        self.assertEqual(pokemon.get_effective_stat(Stat.DEF), 100)

    def test_stat_boosts_clamped(self) -> None:
        pokemon = _pokemon().with_stat_boost(Stat.SPE, 8)

        self.assertEqual(pokemon.get_stat_boost(Stat.SPE), 6)
        self.assertEqual(pokemon.with_stat_boost(Stat.SPE, -7).get_stat_boost(Stat.SPE), -6)

    def test_hp_updates_and_fainted_state(self) -> None:
        pokemon = _pokemon()

        hurt = pokemon.take_damage(100)
        self.assertEqual(hurt.current_hp, 54)
        self.assertTrue(hurt.is_alive())
        self.assertEqual(hurt.heal(500).current_hp, 154)

        fainted = hurt.take_damage(999)
        self.assertEqual(fainted.current_hp, 0)
        self.assertTrue(fainted.is_fainted())
        self.assertEqual(pokemon.current_hp, 154)

    def test_status_condition(self) -> None:
        pokemon = _pokemon().with_status(Status.SLEEP, 2)

        self.assertEqual(pokemon.status, Status.SLEEP)
        self.assertEqual(pokemon.status_counter, 2)

    def test_pp_never_negative(self) -> None:
        pokemon = _pokemon()
        for _ in range(3):
            pokemon = pokemon.with_move_used("surf")

        self.assertEqual(pokemon.get_move("surf").current_pp, 0)
        self.assertEqual(pokemon.get_usable_moves(), [])
        self.assertIsNone(pokemon.get_move("tackle"))

    def test_reset_for_rematch(self) -> None:
        pokemon = (
            _pokemon()
            .take_damage(50)
            .with_status(Status.BURN)
            .with_stat_boost(Stat.ATK, 2)
            .with_move_used("surf")
        )

        reset = pokemon.reset_for_rematch()

        self.assertEqual(reset.current_hp, 154)
        self.assertEqual(reset.status, Status.NONE)
        self.assertEqual(reset.get_stat_boost(Stat.ATK), 0)
        self.assertEqual(reset.get_move("surf").current_pp, 15)

    def test_type_and_ability_checks(self) -> None:
        pokemon = _pokemon()

        self.assertTrue(pokemon.has_type("Water"))
        self.assertFalse(pokemon.has_type("fire"))
        self.assertEqual(
            [a.name for a in pokemon.abilities_with(AbilityTrigger.ABSORB)], ["water-absorb"]
        )
        self.assertEqual(pokemon.abilities_with(AbilityTrigger.CONTACT), [])
        self.assertEqual(pokemon.display_name(), "Blastoise")

    def test_json_serialization(self) -> None:
        pokemon = _pokemon().with_status(Status.PARALYSIS).with_stat_boost(Stat.SPE, -1)

        data = json.loads(str(pokemon))

        self.assertEqual(data["hp"], {"current": 154, "max": 154})
        self.assertEqual(data["status"], "par")
        self.assertFalse(data["fainted"])
        self.assertEqual(data["stat_boosts"], {"spe": -1})
        self.assertEqual(data["abilities"][1]["trigger"], "absorb")
        self.assertEqual(PokemonState.from_dict(pokemon.to_dict()), pokemon)


if __name__ == "__main__":
    unittest.main()
