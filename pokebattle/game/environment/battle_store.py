"""Shared storage for battle records."""

import asyncio
import inspect
import itertools
import uuid
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Dict, List, Optional, Set, Tuple, Union

from absl import logging

from pokebattle.game.exceptions import BattleNotFoundError, TransactionConflictError
from pokebattle.game.schema.battle_state import BattleState

# Receives the new record, or None once the record is deleted
ChangeListener = Callable[[Optional[BattleState]], Union[None, Awaitable[None]]]
# Returns the record to write, or the same object to leave the record untouched
TransactionFn = Callable[[BattleState], BattleState]
Unsubscribe = Callable[[], None]


class BattleStore(ABC):
    """Coordination store holding one record per battle.

    Both clients of a battle read and write the same record. Writes go through
    run_transaction, which re-reads the record and retries fn when another
    writer committed in between, so fn must be a pure function of the record.
    """

    @abstractmethod
    async def create_battle(self, state: BattleState) -> str:
        """Store a new battle record and return its battle ID."""

    @abstractmethod
    async def get_battle(self, battle_id: str) -> BattleState:
        """Read a battle record.

        Raises:
            BattleNotFoundError: If the record does not exist
        """

    @abstractmethod
    async def run_transaction(self, battle_id: str, fn: TransactionFn) -> BattleState:
        """Atomically read, transform and write a battle record.

        Args:
            battle_id: Record to update
            fn: Pure function from the current record to the new one. It may
                raise to abort the transaction without writing.

        Returns:
            The committed record (or the current one if fn made no change)

        Raises:
            BattleNotFoundError: If the record does not exist
            TransactionConflictError: If the write kept conflicting
        """

    @abstractmethod
    def subscribe(self, battle_id: str, listener: ChangeListener) -> Unsubscribe:
        """Register for change notifications on a record.

        Returns:
            Function that cancels the subscription
        """

    @abstractmethod
    async def delete_battle(self, battle_id: str) -> None:
        """Delete a record, notifying subscribers with None."""

    @abstractmethod
    def new_marker(self) -> int:
        """Issue a unique, monotonically increasing turn marker."""


class InMemoryBattleStore(BattleStore):
    """Process-local BattleStore with optimistic concurrency.

    Every record carries a version. A transaction reads the record and its
    version, yields to the event loop (standing in for the network round trip
    of a remote store), runs fn and commits only if the version is unchanged.
    Subscribers are notified in commit order from separate tasks.
    """

    def __init__(self, max_attempts: int = 5, latency: float = 0.0) -> None:
        """Initialize an empty store.

        Args:
            max_attempts: Attempts per transaction before giving up
            latency: Seconds to wait between reading and committing
        """
        self._records: Dict[str, Tuple[int, BattleState]] = {}
        self._listeners: Dict[str, List[ChangeListener]] = {}
        self._markers = itertools.count(1)
        self._max_attempts = max_attempts
        self._latency = latency
        self._pending: Set["asyncio.Task[None]"] = set()
        # One lock per subscription keeps each listener's deliveries in order
        self._delivery_locks: Dict[Tuple[str, ChangeListener], asyncio.Lock] = {}

    async def create_battle(self, state: BattleState) -> str:
        battle_id = f"battle-{uuid.uuid4().hex[:12]}"
        self._records[battle_id] = (1, state)
        logging.info("[%s] Battle record created", battle_id)
        return battle_id

    async def get_battle(self, battle_id: str) -> BattleState:
        if battle_id not in self._records:
            raise BattleNotFoundError(battle_id)
        return self._records[battle_id][1]

    async def run_transaction(self, battle_id: str, fn: TransactionFn) -> BattleState:
        for attempt in range(1, self._max_attempts + 1):
            if battle_id not in self._records:
                raise BattleNotFoundError(battle_id)
            version, state = self._records[battle_id]

            await asyncio.sleep(self._latency)

            new_state = fn(state)
            current = self._records.get(battle_id)
            if current is None:
                raise BattleNotFoundError(battle_id)
            if current[0] != version:
                logging.debug(
                    "[%s] Transaction conflict on attempt %d/%d",
                    battle_id,
                    attempt,
                    self._max_attempts,
                )
                continue
            if new_state is state:
                return state

            self._records[battle_id] = (version + 1, new_state)
            self._notify(battle_id, new_state)
            return new_state

        raise TransactionConflictError(battle_id, self._max_attempts)

    def subscribe(self, battle_id: str, listener: ChangeListener) -> Unsubscribe:
        self._listeners.setdefault(battle_id, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(battle_id, [])
            if listener in listeners:
                listeners.remove(listener)
            self._delivery_locks.pop((battle_id, listener), None)

        return unsubscribe

    async def delete_battle(self, battle_id: str) -> None:
        if self._records.pop(battle_id, None) is None:
            return
        logging.info("[%s] Battle record deleted", battle_id)
        self._notify(battle_id, None)

    def new_marker(self) -> int:
        return next(self._markers)

    def version(self, battle_id: str) -> int:
        if battle_id not in self._records:
            raise BattleNotFoundError(battle_id)
        return self._records[battle_id][0]

    async def flush_notifications(self) -> None:
        """Wait until every scheduled notification, and any it causes, ran."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def _notify(self, battle_id: str, state: Optional[BattleState]) -> None:
        for listener in list(self._listeners.get(battle_id, [])):
            task = asyncio.ensure_future(self._deliver(battle_id, listener, state))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def _deliver(
        self, battle_id: str, listener: ChangeListener, state: Optional[BattleState]
    ) -> None:
        lock = self._delivery_locks.setdefault((battle_id, listener), asyncio.Lock())
        async with lock:
            if listener not in self._listeners.get(battle_id, []):
                return
            try:
                result = listener(state)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logging.error("[%s] Change listener failed: %s", battle_id, e)
