"""Client-side turn synchronization over a shared battle record."""

import asyncio
import inspect
import random
import time
from typing import Awaitable, Callable, List, Optional

from absl import logging

from pokebattle.game.engine.turn_resolver import TurnResolver
from pokebattle.game.environment.battle_store import BattleStore, Unsubscribe
from pokebattle.game.environment.state_transition import StateTransition
from pokebattle.game.exceptions import BattleNotFoundError, InvalidActionError
from pokebattle.game.interface.battle_action import BattleAction
from pokebattle.game.schema.battle_config import BattleConfig
from pokebattle.game.schema.battle_state import BattleState
from pokebattle.game.schema.enums import Outcome, TurnPhase

# Resolves turns left in processing longer than resolver_grace_seconds
FALLBACK_RESOLVER = "p1"

BattleEndCallback = Callable[[Optional[BattleState]], Optional[Awaitable[None]]]


class TurnSynchronizer:
    """One player's view of a battle, kept in step with the shared record.

    The synchronizer submits the player's actions, resolves a turn when its
    own submission completed the pair, and reacts to change notifications
    from the store. Turn resolution is keyed by the turn marker on the
    record, so a turn is applied once no matter how many clients or
    notifications try.

    Example usage:
        ```python
        sync = TurnSynchronizer(store, battle_id, "p1", resolver)
        state = await sync.start()
        while not sync.battle_over:
            if "p1" in sync.state.awaiting_actions():
                await sync.submit_action(await agent.choose_action(sync.state))
            await sync.wait_for_update(timeout=1.0)
        ```
    """

    def __init__(
        self,
        store: BattleStore,
        battle_id: str,
        player_id: str,
        resolver: TurnResolver,
        config: Optional[BattleConfig] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
        on_battle_end: Optional[BattleEndCallback] = None,
    ) -> None:
        """Initialize the synchronizer.

        Args:
            store: Coordination store holding the record
            battle_id: Record to follow
            player_id: "p1" or "p2"
            resolver: Turn resolver shared with the opponent's client
            config: Battle configuration (timeouts, retries)
            rng: Random source for turns this client resolves
            clock: Wall-clock function returning seconds
            on_battle_end: Called once with the final record, or None when the
                record disappeared before a result was seen
        """
        self._store = store
        self._battle_id = battle_id
        self._player_id = player_id
        self._resolver = resolver
        self._config = config or BattleConfig()
        self._rng = rng or random.Random()
        self._clock = clock
        self._on_battle_end = on_battle_end

        self._state: Optional[BattleState] = None
        self._unsubscribe: Optional[Unsubscribe] = None
        self._last_handled_marker: Optional[int] = None
        self._battle_over = False
        self._updated = asyncio.Event()

    @property
    def battle_id(self) -> str:
        return self._battle_id

    @property
    def player_id(self) -> str:
        return self._player_id

    @property
    def state(self) -> BattleState:
        if self._state is None:
            raise RuntimeError("Synchronizer has not been started")
        return self._state

    @property
    def battle_over(self) -> bool:
        return self._battle_over

    @property
    def outcome(self) -> Outcome:
        if self._state is None:
            return Outcome.ONGOING
        return self._state.outcome

    def _log_prefix(self) -> str:
        return f"[{self._battle_id}:{self._player_id}]"

    async def start(self) -> BattleState:
        """Load the record and subscribe to its changes.

        Returns:
            Current battle record

        Raises:
            BattleNotFoundError: If the battle does not exist
        """
        self._state = await self._store.get_battle(self._battle_id)
        self._unsubscribe = self._store.subscribe(self._battle_id, self._on_change)
        logging.info("%s Joined battle as %s", self._log_prefix(), self._player_id)
        return self._state

    async def wait_for_update(self, timeout: Optional[float] = None) -> bool:
        """Wait for the next change to the local view of the record.

        Args:
            timeout: Seconds to wait, or None to wait indefinitely

        Returns:
            True if a change arrived, False on timeout
        """
        try:
            await asyncio.wait_for(self._updated.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        self._updated.clear()
        return True

    async def submit_action(self, action: BattleAction) -> Optional[BattleState]:
        """Submit this player's action, or forced switch, for the current turn.

        The action is checked against the local view first and then applied
        inside a store transaction. If this submission moved the record to
        processing, this client resolves the turn right away.

        Args:
            action: Chosen action

        Returns:
            The record after submission (and resolution, if it happened here),
            or None if the battle no longer exists

        Raises:
            InvalidActionError: If the action is not legal
        """
        if self._battle_over:
            raise InvalidActionError(self._player_id, "the battle is over")
        StateTransition.validate_action(self.state, self._player_id, action)

        markers: List[int] = []

        def submit(state: BattleState) -> BattleState:
            marker = self._store.new_marker()
            markers.append(marker)
            return StateTransition.submit_action(
                state, self._player_id, action, marker, self._resolver, self._clock()
            )

        logging.info("%s Submitting %s", self._log_prefix(), action)
        new_state = await self._transact(submit)
        if new_state is None:
            return None

        if (
            new_state.turn_phase == TurnPhase.PROCESSING
            and markers
            and new_state.last_resolved_timestamp == markers[-1]
        ):
            return await self.resolve_turn(markers[-1])
        return new_state

    async def resolve_turn(self, marker: int) -> Optional[BattleState]:
        """Resolve the turn stamped with marker, at most once per marker.

        Args:
            marker: Turn marker read from the record

        Returns:
            The record after resolution, or None if the battle no longer exists
        """
        self._last_handled_marker = marker

        def resolve(state: BattleState) -> BattleState:
            return StateTransition.resolve_turn(
                state, self._resolver, self._rng, marker, self._clock()
            )

        new_state = await self._transact(resolve)
        if new_state is not None:
            logging.debug(
                "%s Turn marker %d handled, phase now %s",
                self._log_prefix(),
                marker,
                new_state.turn_phase.value,
            )
        return new_state

    async def check_timeout(self) -> Optional[BattleState]:
        """Act on any deadline the record has passed.

        A turn left in processing past the grace period is resolved by the
        fallback resolver. Otherwise the battle ends if the player being
        waited on missed the turn deadline.

        Returns:
            The current record, or None if the battle no longer exists
        """
        if self._battle_over:
            return self._state
        if self._should_take_over(self.state):
            logging.warning(
                "%s Turn %d stalled in processing, resolving it",
                self._log_prefix(),
                self.state.turn_number,
            )
            return await self.resolve_turn(self.state.last_resolved_timestamp)
        timeout = self._config.turn_timeout_seconds

        def timeout_fn(state: BattleState) -> BattleState:
            return StateTransition.apply_timeout(state, self._clock(), timeout)

        return await self._transact(timeout_fn)

    async def forfeit(self) -> Optional[BattleState]:
        """Give up the battle.

        Returns:
            The finished record, or None if the battle no longer exists
        """
        if self._battle_over:
            return self._state
        logging.info("%s Forfeiting", self._log_prefix())

        def forfeit_fn(state: BattleState) -> BattleState:
            return StateTransition.forfeit(state, self._player_id, self._clock())

        return await self._transact(forfeit_fn)

    async def leave(self) -> None:
        """Leave the battle, forfeiting it if it is still running."""
        if not self._battle_over and self._state is not None:
            await self.forfeit()
        self._close()

    async def _transact(self, fn: Callable[[BattleState], BattleState]) -> Optional[BattleState]:
        try:
            new_state = await self._store.run_transaction(self._battle_id, fn)
        except BattleNotFoundError:
            if self._unsubscribe is None:
                await self._record_gone()
            else:
                # The deletion notification is still queued behind the final record
                logging.debug("%s Record deleted during transaction", self._log_prefix())
            return None
        await self._apply(new_state)
        return new_state

    async def _on_change(self, state: Optional[BattleState]) -> None:
        if state is None:
            await self._record_gone()
            return
        await self._apply(state)

        if (
            state.turn_phase == TurnPhase.PROCESSING
            and state.last_resolved_timestamp is not None
            and state.last_resolved_timestamp != self._last_handled_marker
        ):
            if self._should_take_over(state):
                await self.resolve_turn(state.last_resolved_timestamp)
            else:
                logging.debug(
                    "%s Turn %d is being resolved by the other client",
                    self._log_prefix(),
                    state.turn_number,
                )

    def _should_take_over(self, state: BattleState) -> bool:
        """Check whether this client should resolve a turn it did not flip."""
        if self._player_id != FALLBACK_RESOLVER:
            return False
        if state.turn_phase != TurnPhase.PROCESSING or state.last_resolved_timestamp is None:
            return False
        if state.last_resolved_timestamp == self._last_handled_marker:
            return False
        waited = self._clock() - state.phase_started_at
        return waited >= self._config.resolver_grace_seconds

    async def _apply(self, state: BattleState) -> None:
        self._state = state
        self._updated.set()
        if state.is_finished() and not self._battle_over:
            await self._finish(state)

    async def _finish(self, state: BattleState) -> None:
        self._battle_over = True
        winner = state.outcome.winner()
        logging.info(
            "%s Battle finished: %s", self._log_prefix(), state.outcome.value
        )
        self._close()

        if winner != self._player_id and (winner is not None or self._player_id == "p2"):
            # The loser (player 2 on a draw) cleans up the record
            try:
                await self._store.delete_battle(self._battle_id)
            except BattleNotFoundError:
                logging.debug("%s Record already deleted", self._log_prefix())
        await self._notify_end(state)

    async def _record_gone(self) -> None:
        if self._battle_over:
            return
        logging.warning("%s Battle record no longer exists", self._log_prefix())
        self._battle_over = True
        self._updated.set()
        self._close()
        await self._notify_end(None)

    async def _notify_end(self, state: Optional[BattleState]) -> None:
        if self._on_battle_end is None:
            return
        result = self._on_battle_end(state)
        if inspect.isawaitable(result):
            await result

    def _close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
