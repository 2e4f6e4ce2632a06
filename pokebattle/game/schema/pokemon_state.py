"""Pokemon state representation for battle simulation."""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from pokebattle.game.data.ability import Ability
from pokebattle.game.data.move import Move
from pokebattle.game.schema.enums import BOOSTABLE_STATS, AbilityTrigger, Stat, Status

MIN_STAT_STAGE = -6
MAX_STAT_STAGE = 6

# Stat stage multipliers for stages -6 to +6
STAT_STAGE_MULTIPLIERS = {
    -6: 2 / 8,
    -5: 2 / 7,
    -4: 2 / 6,
    -3: 2 / 5,
    -2: 2 / 4,
    -1: 2 / 3,
    0: 1.0,
    1: 3 / 2,
    2: 4 / 2,
    3: 5 / 2,
    4: 6 / 2,
    5: 7 / 2,
    6: 8 / 2,
}


def stage_multiplier(stage: int) -> float:
    """Get the stat multiplier for a stage.

    Args:
        stage: Stat stage, clamped to [-6, 6]

    Returns:
        (2 + stage) / 2 for non-negative stages, 2 / (2 - stage) otherwise

    Example:
        >>> stage_multiplier(-6)
        0.25
    """
    return STAT_STAGE_MULTIPLIERS[clamp_stage(stage)]


def clamp_stage(stage: int) -> int:
    return max(MIN_STAT_STAGE, min(MAX_STAT_STAGE, stage))


@dataclass(frozen=True)
class PokemonMove:
    """A move in a Pokemon's move-set with its remaining PP."""

    move: Move
    current_pp: int
    max_pp: int

    @property
    def name(self) -> str:
        return self.move.name

    def can_use(self) -> bool:
        return self.current_pp > 0

    def use(self) -> "PokemonMove":
        return replace(self, current_pp=max(0, self.current_pp - 1))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "move": self.move.to_dict(),
            "current_pp": self.current_pp,
            "max_pp": self.max_pp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PokemonMove":
        return cls(
            move=Move.from_dict(data["move"]),
            current_pp=int(data["current_pp"]),
            max_pp=int(data["max_pp"]),
        )


@dataclass(frozen=True)
class PokemonState:
    """Immutable state of a single Pokemon during battle.

    This represents a complete snapshot of a Pokemon's state at a specific point
    in battle: HP, stat stages, status condition and move PP. Every update
    returns a new snapshot with HP clamped to [0, max_hp], stages to [-6, 6]
    and PP to [0, max_pp]. A Pokemon is fainted exactly when its HP is 0.
    """

    species_id: int
    name: str
    level: int = 50
    types: List[str] = field(default_factory=list)
    base_stats: Dict[Stat, int] = field(default_factory=dict)
    abilities: List[Ability] = field(default_factory=list)
    moves: List[PokemonMove] = field(default_factory=list)

    current_hp: int = 100
    max_hp: int = 100
    status: Status = Status.NONE
    # Remaining incapacitated turns, only meaningful while asleep
    status_counter: int = 0

    stat_boosts: Dict[Stat, int] = field(default_factory=dict)

    def is_alive(self) -> bool:
        """Check if Pokemon is not fainted.

        Returns:
            True if HP > 0, False otherwise
        """
        return self.current_hp > 0

    def is_fainted(self) -> bool:
        return self.current_hp == 0

    def has_type(self, type_name: str) -> bool:
        return type_name.lower() in self.types

    def abilities_with(self, trigger: AbilityTrigger) -> List[Ability]:
        return [a for a in self.abilities if a.trigger == trigger]

    def get_stat_boost(self, stat: Stat) -> int:
        """Get the current stat boost stage for a stat.

        Args:
            stat: The stat to check

        Returns:
            Integer from -6 to +6 representing the boost stage
        """
        return self.stat_boosts.get(stat, 0)

    def get_stat_multiplier(self, stat: Stat) -> float:
        return stage_multiplier(self.get_stat_boost(stat))

    def get_effective_stat(self, stat: Stat) -> float:
        """Calculate the value of a stat with its stage applied.

        The base stat is used directly as the battle stat. The result is not
        rounded; the damage formula floors only at the end.

        Args:
            stat: The stat to calculate

        Returns:
            Base stat times the stage multiplier

        Example:
            >>> # Base 100 Atk after one Intimidate
            >>> pokemon.get_effective_stat(Stat.ATK)
            66.66666666666667
        """
        return self.base_stats.get(stat, 0) * self.get_stat_multiplier(stat)

    def get_move(self, move_name: str) -> Optional[PokemonMove]:
        for move in self.moves:
            if move.name == move_name:
                return move
        return None

    def get_usable_moves(self) -> List[PokemonMove]:
        return [m for m in self.moves if m.can_use()]

    def with_hp(self, hp: int) -> "PokemonState":
        return replace(self, current_hp=max(0, min(self.max_hp, hp)))

    def take_damage(self, amount: int) -> "PokemonState":
        return self.with_hp(self.current_hp - amount)

    def heal(self, amount: int) -> "PokemonState":
        return self.with_hp(self.current_hp + amount)

    def with_status(self, status: Status, counter: int = 0) -> "PokemonState":
        return replace(self, status=status, status_counter=counter)

    def with_stat_boost(self, stat: Stat, stage: int) -> "PokemonState":
        boosts = dict(self.stat_boosts)
        boosts[stat] = clamp_stage(stage)
        return replace(self, stat_boosts=boosts)

    def with_move_used(self, move_name: str) -> "PokemonState":
        """Spend one PP of a move.

        Args:
            move_name: Name of the move being used

        Returns:
            New state with the move's PP reduced by one (never below 0)
        """
        moves = [m.use() if m.name == move_name else m for m in self.moves]
        return replace(self, moves=moves)

    def reset_for_rematch(self) -> "PokemonState":
        """Restore HP, stages, status and PP keeping species and moves."""
        return replace(
            self,
            current_hp=self.max_hp,
            status=Status.NONE,
            status_counter=0,
            stat_boosts={stat: 0 for stat in BOOSTABLE_STATS},
            moves=[replace(m, current_pp=m.max_pp) for m in self.moves],
        )

    def display_name(self) -> str:
        return self.name.replace("-", " ").title()

    def to_dict(self) -> Dict[str, Any]:
        """Convert Pokemon state to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the Pokemon state
        """
        return {
            "species_id": self.species_id,
            "name": self.name,
            "level": self.level,
            "types": list(self.types),
            "base_stats": {stat.value: value for stat, value in self.base_stats.items()},
            "abilities": [ability.to_dict() for ability in self.abilities],
            "moves": [move.to_dict() for move in self.moves],
            "hp": {"current": self.current_hp, "max": self.max_hp},
            "fainted": self.is_fainted(),
            "status": self.status.value,
            "status_counter": self.status_counter,
            "stat_boosts": {
                stat.value: boost for stat, boost in self.stat_boosts.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PokemonState":
        return cls(
            species_id=int(data["species_id"]),
            name=data["name"],
            level=int(data.get("level", 50)),
            types=list(data.get("types", [])),
            base_stats={Stat(k): int(v) for k, v in data.get("base_stats", {}).items()},
            abilities=[Ability.from_dict(a) for a in data.get("abilities", [])],
            moves=[PokemonMove.from_dict(m) for m in data.get("moves", [])],
            current_hp=int(data["hp"]["current"]),
            max_hp=int(data["hp"]["max"]),
            status=Status(data.get("status", Status.NONE.value)),
            status_counter=int(data.get("status_counter", 0)),
            stat_boosts={
                Stat(k): int(v) for k, v in data.get("stat_boosts", {}).items()
            },
        )

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)
