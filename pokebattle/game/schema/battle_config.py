"""Tunable battle rules shared by the engine and synchronization layer."""

from dataclasses import dataclass


@dataclass(frozen=True)
class BattleConfig:
    """Battle rule configuration.

    Attributes:
        level: Level every Pokemon battles at
        team_size: Number of Pokemon per team
        moves_per_pokemon: Size of each move-set
        move_sample_size: Learnable moves sampled per species before filtering
        catalog_size: Species ids are drawn from 1..catalog_size
        turn_timeout_seconds: Time a turn may wait for missing actions
        resolver_grace_seconds: Time a turn may sit in processing before the
            fallback client resolves it
        max_transaction_attempts: Retries for a conflicting record transaction
    """

    level: int = 50
    team_size: int = 6
    moves_per_pokemon: int = 4
    move_sample_size: int = 10
    catalog_size: int = 898
    turn_timeout_seconds: float = 30.0
    resolver_grace_seconds: float = 5.0
    max_transaction_attempts: int = 5
