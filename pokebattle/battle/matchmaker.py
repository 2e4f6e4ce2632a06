"""Matchmaker that pairs waiting participants into new battles."""

import asyncio
import time
from collections import OrderedDict
from typing import Callable, Dict, Optional, Tuple

from absl import logging

from pokebattle.game.engine.turn_resolver import TurnResolver
from pokebattle.game.environment.battle_store import BattleStore
from pokebattle.game.environment.state_transition import StateTransition
from pokebattle.game.exceptions import DataFetchError
from pokebattle.game.interface.team_builder import TeamBuilder, make_team


class Matchmaker:
    """Pairs queued participants and creates a battle record for each pair.

    The two participants that have waited longest are paired first. The
    earlier of the two plays as p1. Each participant learns its battle id by
    awaiting on_paired, which resolves exactly once.
    """

    def __init__(
        self,
        store: BattleStore,
        team_builder: TeamBuilder,
        resolver: TurnResolver,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize matchmaker.

        Args:
            store: Store new battle records are created in
            team_builder: Builds both teams for each pairing
            resolver: Turn resolver used for the battle's opening entry abilities
            clock: Wall-clock source in seconds
        """
        self._store = store
        self._team_builder = team_builder
        self._resolver = resolver
        self._clock = clock

        self._waiting: "OrderedDict[str, str]" = OrderedDict()  # participant -> name
        self._pairings: Dict[str, "asyncio.Future[str]"] = {}
        self._player_ids: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def join_queue(self, participant_id: str, name: str) -> None:
        """Add a participant to the queue, starting a battle if one is waiting.

        Args:
            participant_id: Unique participant identifier
            name: Display name used for the participant's team

        Raises:
            ValueError: If the participant is already queued or paired
        """
        async with self._lock:
            if participant_id in self._pairings:
                raise ValueError(f"{participant_id} is already in the queue")
            self._waiting[participant_id] = name
            self._pairings[participant_id] = asyncio.get_running_loop().create_future()
            logging.info(
                "[Matchmaker] %s joined the queue (waiting: %d)",
                participant_id,
                self.waiting_count(),
            )
            if len(self._waiting) < 2:
                return
            first = self._waiting.popitem(last=False)
            second = self._waiting.popitem(last=False)

        await self._start_battle(first, second)

    def leave_queue(self, participant_id: str) -> bool:
        """Remove a participant that has not been paired yet.

        Args:
            participant_id: Participant to remove

        Returns:
            True if the participant was waiting and has been removed
        """
        if participant_id not in self._waiting:
            return False
        del self._waiting[participant_id]
        self._pairings.pop(participant_id).cancel()
        logging.info("[Matchmaker] %s left the queue", participant_id)
        return True

    async def on_paired(self, participant_id: str) -> str:
        """Wait until the participant has been paired.

        Args:
            participant_id: Participant that joined the queue

        Returns:
            Id of the battle record created for the pairing

        Raises:
            ValueError: If the participant is not queued or was already told
            DataFetchError: If building the teams for the pairing failed
            asyncio.CancelledError: If the participant left the queue
        """
        future = self._pairings.get(participant_id)
        if future is None:
            raise ValueError(f"{participant_id} is not waiting for a pairing")
        try:
            return await future
        finally:
            self._pairings.pop(participant_id, None)

    def player_id_for(self, participant_id: str) -> Optional[str]:
        """Get the side ("p1" or "p2") a paired participant plays."""
        return self._player_ids.get(participant_id)

    def waiting_count(self) -> int:
        return len(self._waiting)

    async def _start_battle(self, first: Tuple[str, str], second: Tuple[str, str]) -> None:
        (first_id, first_name), (second_id, second_name) = first, second
        futures = [self._pairings[first_id], self._pairings[second_id]]
        logging.info("[Matchmaker] Pairing %s with %s", first_id, second_id)

        try:
            team1, team2 = await self._team_builder.build_teams()
        except DataFetchError as e:
            logging.error(
                "[Matchmaker] Could not build teams for %s vs %s: %s",
                first_id,
                second_id,
                e,
            )
            for future in futures:
                if not future.done():
                    future.set_exception(e)
            return

        state = StateTransition.new_battle(
            make_team("p1", first_name, team1),
            make_team("p2", second_name, team2),
            self._resolver,
            self._clock(),
        )
        battle_id = await self._store.create_battle(state)
        self._player_ids[first_id] = "p1"
        self._player_ids[second_id] = "p2"
        logging.info(
            "[Matchmaker] Started battle %s: %s vs %s", battle_id, first_id, second_id
        )
        for future in futures:
            if not future.done():
                future.set_result(battle_id)
