"""Script for running a battle between two agents over a shared battle record.

Two participants join the matchmaking queue, each gets its own turn
synchronizer on the same in-memory record, and the agents play until one
side wins, the battle is drawn, or the turn limit is reached.
"""

import asyncio
import random
import time
from typing import List, Optional

from absl import app, flags, logging

from pokebattle.agents.agent_interface import Agent
from pokebattle.agents.agent_registry import AgentRegistry
from pokebattle.battle.battle_log_writer import BattleLogWriter
from pokebattle.battle.matchmaker import Matchmaker
from pokebattle.game.data.data_provider import DataProvider
from pokebattle.game.data.game_data import GameData
from pokebattle.game.data.pokeapi_provider import PokeApiProvider
from pokebattle.game.engine.turn_resolver import TurnResolver
from pokebattle.game.environment.battle_store import InMemoryBattleStore
from pokebattle.game.environment.turn_sync import TurnSynchronizer
from pokebattle.game.exceptions import (
    DataFetchError,
    InvalidActionError,
    TransactionConflictError,
)
from pokebattle.game.interface.team_builder import TeamBuilder
from pokebattle.game.schema.battle_config import BattleConfig
from pokebattle.game.schema.battle_state import BattleState

FLAGS = flags.FLAGS

flags.DEFINE_integer("seed", None, "Random seed for team building and turns")
flags.DEFINE_enum(
    "data_source",
    "catalog",
    ["catalog", "pokeapi"],
    "Where species and moves come from: the bundled catalog or PokeAPI",
)
flags.DEFINE_integer(
    "catalog_size",
    None,
    "Species ids are drawn from 1..catalog_size (default: whole data source)",
)
flags.DEFINE_integer("team_size", 6, "Number of Pokemon per team")
flags.DEFINE_float(
    "turn_timeout", 30.0, "Seconds a player may take before losing on time"
)
flags.DEFINE_string(
    "agent1",
    "random",
    f"Agent for player 1. Available: {', '.join(AgentRegistry.get_available_agents())}",
)
flags.DEFINE_string(
    "agent2",
    "random",
    f"Agent for player 2. Available: {', '.join(AgentRegistry.get_available_agents())}",
)
flags.DEFINE_integer(
    "max_turns", 200, "Stop the battle without a result after this many turns"
)
flags.DEFINE_bool(
    "log_battle",
    False,
    "Write the battle log to /tmp/logs/<player>_<opponent>_<battle>_<epoch>.jsonl",
)

POKEAPI_CATALOG_SIZE = 898


def create_provider(data_source: str) -> DataProvider:
    if data_source == "pokeapi":
        return PokeApiProvider()
    return GameData()


async def play(
    sync: TurnSynchronizer,
    agent: Agent,
    max_turns: int,
    poll_seconds: float = 1.0,
    writer: Optional[BattleLogWriter] = None,
) -> None:
    """Drive one player's side of the battle until it ends.

    Args:
        sync: Started synchronizer for this player
        agent: Agent choosing this player's actions
        max_turns: Turn number after which this player stops acting
        poll_seconds: How long to wait for a change before checking the turn timer
        writer: Optional log writer fed with every new record
    """
    while not sync.battle_over:
        state = sync.state
        if writer:
            writer.write_state(state)
        if state.turn_number > max_turns:
            logging.info(
                "[%s:%s] Turn limit %d reached", sync.battle_id, sync.player_id, max_turns
            )
            return

        if sync.player_id in state.awaiting_actions():
            try:
                action = await agent.choose_action(state)
                logging.info("[%s:%s] Action selected: %s", sync.battle_id, sync.player_id, action)
                await sync.submit_action(action)
                continue
            except (ValueError, InvalidActionError) as e:
                logging.warning(
                    "[%s:%s] No action submitted: %s", sync.battle_id, sync.player_id, e
                )
            except TransactionConflictError as e:
                logging.warning(
                    "[%s:%s] Submission conflicted, retrying: %s",
                    sync.battle_id,
                    sync.player_id,
                    e,
                )

        if not await sync.wait_for_update(timeout=poll_seconds):
            try:
                await sync.check_timeout()
            except TransactionConflictError as e:
                logging.warning(
                    "[%s:%s] Timeout check conflicted: %s", sync.battle_id, sync.player_id, e
                )

    if writer:
        writer.write_state(sync.state)


def report(state: Optional[BattleState]) -> None:
    if state is None:
        logging.info("Result: battle ended without a recorded result")
        return
    for line in state.log[-3:]:
        logging.info("  %s", line)
    logging.info("Result: %s after %d turns", state.outcome.value, state.turn_number - 1)


async def run_battle() -> None:
    """Pair two agents, run their battle, and report the result."""
    rng = random.Random(FLAGS.seed)
    agent_kinds = [FLAGS.agent1, FLAGS.agent2]
    for kind in agent_kinds:
        if not AgentRegistry.has_agent(kind):
            logging.error(
                "Unknown agent: %s. Available agents: %s",
                kind,
                ", ".join(AgentRegistry.get_available_agents()),
            )
            return

    provider = create_provider(FLAGS.data_source)
    try:
        catalog_size = FLAGS.catalog_size
        if catalog_size is None:
            catalog_size = (
                provider.catalog_size
                if isinstance(provider, GameData)
                else POKEAPI_CATALOG_SIZE
            )
        config = BattleConfig(
            team_size=FLAGS.team_size,
            catalog_size=catalog_size,
            turn_timeout_seconds=FLAGS.turn_timeout,
        )
        resolver = TurnResolver(await provider.load_type_chart(), config.level)
        store = InMemoryBattleStore(max_attempts=config.max_transaction_attempts)
        matchmaker = Matchmaker(
            store, TeamBuilder(provider, config, random.Random(rng.random())), resolver
        )

        names = [f"{FLAGS.agent1}-1", f"{FLAGS.agent2}-2"]
        for name in names:
            await matchmaker.join_queue(name, name)
        battle_id = await matchmaker.on_paired(names[0])
        await matchmaker.on_paired(names[1])
        logging.info("Battle %s started", battle_id)
        # Sides are assigned by the matchmaker in pairing order
        agents = [
            AgentRegistry.create_agent(
                kind, matchmaker.player_id_for(name), random.Random(rng.random())
            )
            for kind, name in zip(agent_kinds, names)
        ]
    except DataFetchError as e:
        logging.error("Could not set up the battle: %s", e)
        return
    finally:
        if isinstance(provider, PokeApiProvider):
            await provider.close()

    results: List[Optional[BattleState]] = []
    syncs: List[TurnSynchronizer] = []
    writers: List[Optional[BattleLogWriter]] = []
    epoch_secs = int(time.time())
    for index, agent in enumerate(agents):
        syncs.append(
            TurnSynchronizer(
                store,
                battle_id,
                agent.player_id,
                resolver,
                config=config,
                rng=random.Random(rng.random()),
                on_battle_end=results.append,
            )
        )
        writers.append(
            BattleLogWriter(names[index], epoch_secs, battle_id, names[1 - index])
            if FLAGS.log_battle
            else None
        )

    try:
        for sync in syncs:
            await sync.start()
        await asyncio.gather(
            *(
                play(sync, agent, FLAGS.max_turns, min(1.0, FLAGS.turn_timeout), writer)
                for sync, agent, writer in zip(syncs, agents, writers)
            )
        )
        if not all(sync.battle_over for sync in syncs):
            logging.info("Battle %s stopped without a result", battle_id)
            await store.delete_battle(battle_id)
        await store.flush_notifications()
    finally:
        for writer in writers:
            if writer:
                writer.close()

    report(results[0] if results else None)


def main(argv: List[str]) -> None:
    """Entry point for the script."""
    del argv
    logging.set_verbosity(logging.INFO)
    logging.info("Starting run_battle script")
    logging.info("Agents: %s vs %s", FLAGS.agent1, FLAGS.agent2)
    logging.info("Data source: %s", FLAGS.data_source)

    asyncio.run(run_battle())


if __name__ == "__main__":
    app.run(main)
