"""Tests for Matchmaker."""

import asyncio
import random
import unittest
from unittest.mock import AsyncMock, MagicMock

from pokebattle.battle.matchmaker import Matchmaker
from pokebattle.game.data.game_data import GameData
from pokebattle.game.engine.turn_resolver import TurnResolver
from pokebattle.game.environment.battle_store import InMemoryBattleStore
from pokebattle.game.exceptions import DataFetchError
from pokebattle.game.interface.team_builder import TeamBuilder
from pokebattle.game.schema.battle_config import BattleConfig
from pokebattle.game.schema.enums import TurnPhase


class MatchmakerTest(unittest.IsolatedAsyncioTestCase):
    """Tests for Matchmaker class."""

    async def asyncSetUp(self) -> None:
        provider = GameData()
        self.resolver = TurnResolver(await provider.load_type_chart())
        self.store = InMemoryBattleStore()
        self.team_builder = TeamBuilder(
            provider,
            BattleConfig(team_size=3, catalog_size=provider.catalog_size),
            rng=random.Random(11),
        )
        self.matchmaker = Matchmaker(
            self.store, self.team_builder, self.resolver, clock=lambda: 500.0
        )

    async def test_single_participant_waits(self) -> None:
        await self.matchmaker.join_queue("ash", "Ash")

        self.assertEqual(self.matchmaker.waiting_count(), 1)
        self.assertIsNone(self.matchmaker.player_id_for("ash"))

    async def test_two_participants_are_paired(self) -> None:
        """Test that a pair shares one new battle record."""
        await self.matchmaker.join_queue("ash", "Ash")
        await self.matchmaker.join_queue("gary", "Gary")

        ash_battle = await self.matchmaker.on_paired("ash")
        gary_battle = await self.matchmaker.on_paired("gary")

        self.assertEqual(ash_battle, gary_battle)
        self.assertEqual(self.matchmaker.player_id_for("ash"), "p1")
        self.assertEqual(self.matchmaker.player_id_for("gary"), "p2")
        state = await self.store.get_battle(ash_battle)
        self.assertEqual(state.turn_phase, TurnPhase.SELECTING)
        self.assertEqual(state.phase_started_at, 500.0)
        self.assertEqual(state.get_team("p1").name, "Ash")
        self.assertEqual(len(state.get_team("p2").pokemon), 3)
        self.assertEqual(state.log[0], "Ash and Gary started a battle!")

    async def test_oldest_participants_paired_first(self) -> None:
        await self.matchmaker.join_queue("ash", "Ash")
        await self.matchmaker.join_queue("gary", "Gary")
        await self.matchmaker.join_queue("misty", "Misty")

        self.assertEqual(self.matchmaker.waiting_count(), 1)
        self.assertIsNone(self.matchmaker.player_id_for("misty"))

    async def test_on_paired_fires_once(self) -> None:
        await self.matchmaker.join_queue("ash", "Ash")
        await self.matchmaker.join_queue("gary", "Gary")
        await self.matchmaker.on_paired("ash")

        with self.assertRaises(ValueError):
            await self.matchmaker.on_paired("ash")

    async def test_pairing_awaited_before_second_join(self) -> None:
        await self.matchmaker.join_queue("ash", "Ash")
        waiter = asyncio.create_task(self.matchmaker.on_paired("ash"))
        await asyncio.sleep(0)
        self.assertFalse(waiter.done())

        await self.matchmaker.join_queue("gary", "Gary")
        battle_id = await waiter

        self.assertEqual((await self.store.get_battle(battle_id)).turn_number, 1)

    async def test_duplicate_join_rejected(self) -> None:
        await self.matchmaker.join_queue("ash", "Ash")

        with self.assertRaises(ValueError):
            await self.matchmaker.join_queue("ash", "Ash")

    async def test_leave_queue(self) -> None:
        await self.matchmaker.join_queue("ash", "Ash")
        waiter = asyncio.create_task(self.matchmaker.on_paired("ash"))
        await asyncio.sleep(0)

        self.assertTrue(self.matchmaker.leave_queue("ash"))
        with self.assertRaises(asyncio.CancelledError):
            await waiter
        self.assertFalse(self.matchmaker.leave_queue("ash"))
        self.assertEqual(self.matchmaker.waiting_count(), 0)

    async def test_data_fetch_error_fails_both_pairings(self) -> None:
        """Test that a provider failure fails both participants and starts nothing."""
        team_builder = MagicMock(spec=TeamBuilder)
        team_builder.build_teams = AsyncMock(
            side_effect=DataFetchError("species/25", "timed out")
        )
        store = MagicMock(spec=InMemoryBattleStore)
        matchmaker = Matchmaker(store, team_builder, self.resolver)

        await matchmaker.join_queue("ash", "Ash")
        await matchmaker.join_queue("gary", "Gary")

        for participant in ("ash", "gary"):
            with self.assertRaises(DataFetchError):
                await matchmaker.on_paired(participant)
        store.create_battle.assert_not_called()
        self.assertIsNone(matchmaker.player_id_for("ash"))


if __name__ == "__main__":
    unittest.main()
