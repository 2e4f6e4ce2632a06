"""Damage and move effect computation.

Everything here is pure: a move is resolved against attacker and defender
snapshots and the result carries new snapshots plus the battle messages. All
randomness comes from the random.Random passed in, so a seeded generator
reproduces a battle exactly.
"""

import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from pokebattle.game.data.move import REST_MOVE_NAME, Move
from pokebattle.game.data.type_chart import TypeChart
from pokebattle.game.schema.enums import (
    BOOSTABLE_STATS,
    AbilityTrigger,
    MoveCategory,
    Stat,
    StatChangeTarget,
    Status,
)
from pokebattle.game.schema.pokemon_state import PokemonState, clamp_stage

CRITICAL_HIT_CHANCE = 1 / 16
CRITICAL_HIT_MULTIPLIER = 1.5
STAB_MULTIPLIER = 1.5
CONTACT_ABILITY_CHANCE = 0.3
REST_SLEEP_TURNS = 2
SLEEP_TURNS_RANGE = (1, 3)

_STATUS_MESSAGES = {
    Status.POISON: "{name} was poisoned!",
    Status.BURN: "{name} was burned!",
    Status.PARALYSIS: "{name} is paralyzed! It may be unable to move!",
    Status.SLEEP: "{name} fell asleep!",
}


@dataclass(frozen=True)
class AppliedStatus:
    target: StatChangeTarget
    status: Status


@dataclass(frozen=True)
class AppliedStatChange:
    target: StatChangeTarget
    stat: Stat
    change: int


@dataclass(frozen=True)
class MoveResult:
    """Outcome of one move.

    Attributes:
        attacker: Attacker after the move (PP spent, healing, recoil statuses)
        defender: Defender after the move
        damage: HP the defender lost
        messages: Battle log lines in the order they happened
        effectiveness: Net type multiplier, 0 when the hit was nullified
        critical: Whether the hit was critical
        applied_statuses: Status conditions inflicted by the move
        applied_stat_changes: Stage changes that actually took effect
    """

    attacker: PokemonState
    defender: PokemonState
    damage: int = 0
    messages: List[str] = field(default_factory=list)
    effectiveness: float = 1.0
    critical: bool = False
    applied_statuses: List[AppliedStatus] = field(default_factory=list)
    applied_stat_changes: List[AppliedStatChange] = field(default_factory=list)


def base_damage(level: int, power: int, attack: float, defense: float) -> int:
    """Compute the floored base damage of a hit.

    Args:
        level: Attacker level
        power: Move power
        attack: Attacking stat with stages applied
        defense: Defending stat with stages applied

    Returns:
        floor(((2 * level / 5 + 2) * power * attack / defense) / 50 + 2)

    Example:
        >>> base_damage(50, 80, 100, 100)
        37
    """
    defense = max(defense, 1)
    return math.floor((((2 * level / 5) + 2) * power * attack / defense) / 50 + 2)


def effectiveness_message(effectiveness: float, defender_name: str) -> Optional[str]:
    if effectiveness == 0:
        return f"It doesn't affect {defender_name}..."
    if effectiveness > 1:
        return "It's super effective!"
    if effectiveness < 1:
        return "It's not very effective..."
    return None


def inflict_status(
    pokemon: PokemonState, status: Status, rng: random.Random, sleep_turns: Optional[int] = None
) -> Tuple[PokemonState, str]:
    """Give a Pokemon a status condition.

    Sleep lasts sleep_turns turns, or a random 1-3 when not given.

    Args:
        pokemon: Pokemon receiving the condition (must have none)
        status: Condition to inflict
        rng: Random source for the sleep duration
        sleep_turns: Fixed sleep duration

    Returns:
        Tuple of the new Pokemon state and the log message
    """
    counter = 0
    if status == Status.SLEEP:
        counter = sleep_turns if sleep_turns is not None else rng.randint(*SLEEP_TURNS_RANGE)
    message = _STATUS_MESSAGES[status].format(name=pokemon.display_name())
    return pokemon.with_status(status, counter), message


def _stage_message(pokemon: PokemonState, stat: Stat, change: int, applied: int) -> str:
    name = pokemon.display_name()
    if applied == 0:
        direction = "higher" if change > 0 else "lower"
        return f"{name}'s {stat.display_name()} won't go any {direction}!"
    if applied > 0:
        verb = "rose!" if applied == 1 else "sharply rose!"
    else:
        verb = "fell!" if applied == -1 else "harshly fell!"
    return f"{name}'s {stat.display_name()} {verb}"


def apply_stage_change(
    pokemon: PokemonState, stat: Stat, change: int
) -> Tuple[PokemonState, int, str]:
    """Shift a stat stage, clamped to [-6, 6].

    Args:
        pokemon: Pokemon whose stage changes
        stat: Stat to change
        change: Signed number of stages

    Returns:
        Tuple of the new state, the stages actually applied, and the message
    """
    current = pokemon.get_stat_boost(stat)
    new_stage = clamp_stage(current + change)
    applied = new_stage - current
    message = _stage_message(pokemon, stat, change, applied)
    if applied == 0:
        return pokemon, 0, message
    return pokemon.with_stat_boost(stat, new_stage), applied, message


class DamageCalculator:
    """Resolves a single move between two Pokemon."""

    def __init__(self, type_chart: TypeChart, level: int = 50) -> None:
        self._type_chart = type_chart
        self._level = level

    def resolve_move(
        self,
        attacker: PokemonState,
        defender: PokemonState,
        move_name: str,
        rng: random.Random,
    ) -> MoveResult:
        """Resolve one move used by attacker against defender.

        The move's PP is spent first. Rest and other status moves never deal
        damage; damaging moves go through ability checks, the damage formula
        and secondary effects.

        Args:
            attacker: Pokemon using the move
            defender: Opposing active Pokemon
            move_name: Name of a move in attacker's move-set
            rng: Random source for crits and secondary effects

        Returns:
            MoveResult with new snapshots of both Pokemon

        Raises:
            ValueError: If the attacker does not know the move
        """
        known = attacker.get_move(move_name)
        if known is None:
            raise ValueError(f"{attacker.name} does not know {move_name}")

        move = known.move
        attacker = attacker.with_move_used(move.name)

        if move.name == REST_MOVE_NAME:
            return self._resolve_rest(attacker, defender)
        if move.is_status():
            return self._resolve_status_move(attacker, defender, move, rng)
        return self._resolve_damaging_move(attacker, defender, move, rng)

    def _resolve_rest(self, attacker: PokemonState, defender: PokemonState) -> MoveResult:
        rested = attacker.heal(attacker.max_hp).with_status(Status.SLEEP, REST_SLEEP_TURNS)
        for stat in BOOSTABLE_STATS:
            rested = rested.with_stat_boost(stat, 0)
        return MoveResult(
            attacker=rested,
            defender=defender,
            messages=[f"{attacker.display_name()} slept and became healthy!"],
            applied_statuses=[AppliedStatus(StatChangeTarget.SELF, Status.SLEEP)],
        )

    def _resolve_status_move(
        self,
        attacker: PokemonState,
        defender: PokemonState,
        move: Move,
        rng: random.Random,
    ) -> MoveResult:
        messages: List[str] = []
        stat_changes: List[AppliedStatChange] = []
        statuses: List[AppliedStatus] = []

        for stat_change in move.stat_changes:
            if stat_change.target == StatChangeTarget.SELF:
                attacker, applied, message = apply_stage_change(
                    attacker, stat_change.stat, stat_change.change
                )
            else:
                defender, applied, message = apply_stage_change(
                    defender, stat_change.stat, stat_change.change
                )
            messages.append(message)
            if applied:
                stat_changes.append(
                    AppliedStatChange(stat_change.target, stat_change.stat, applied)
                )

        if move.healing > 0:
            if attacker.current_hp == attacker.max_hp:
                messages.append(f"{attacker.display_name()}'s HP is full!")
            else:
                before = attacker.current_hp
                attacker = attacker.heal(math.floor(attacker.max_hp * move.healing / 100))
                messages.append(
                    f"{attacker.display_name()} restored {attacker.current_hp - before} HP."
                )

        if move.ailment != Status.NONE:
            # A chance of 0 marks a guaranteed status move in the data API
            chance = move.ailment_chance or 100
            if defender.status != Status.NONE:
                messages.append(
                    f"{defender.display_name()} is already {defender.status.display_name()}."
                )
            elif rng.random() * 100 < chance:
                defender, message = inflict_status(defender, move.ailment, rng)
                messages.append(message)
                statuses.append(AppliedStatus(StatChangeTarget.OPPONENT, move.ailment))
            else:
                messages.append("But it failed!")

        if not messages:
            messages.append("But nothing happened!")

        return MoveResult(
            attacker=attacker,
            defender=defender,
            messages=messages,
            applied_statuses=statuses,
            applied_stat_changes=stat_changes,
        )

    def _check_defensive_abilities(
        self, attacker: PokemonState, defender: PokemonState, move: Move
    ) -> Optional[MoveResult]:
        for ability in defender.abilities:
            if ability.element != move.type:
                continue
            pretty = ability.display_name()
            if ability.trigger == AbilityTrigger.IMMUNITY:
                return MoveResult(
                    attacker=attacker,
                    defender=defender,
                    effectiveness=0.0,
                    messages=[
                        f"It doesn't affect {defender.display_name()} thanks to {pretty}!"
                    ],
                )
            if ability.trigger == AbilityTrigger.ABSORB:
                healed = defender.heal(math.floor(defender.max_hp / 4))
                gained = healed.current_hp - defender.current_hp
                if gained:
                    message = f"{defender.display_name()} restored {gained} HP with {pretty}!"
                else:
                    message = f"{defender.display_name()}'s {pretty} made the move useless!"
                return MoveResult(
                    attacker=attacker,
                    defender=healed,
                    effectiveness=0.0,
                    messages=[message],
                )
        return None

    def _resolve_damaging_move(
        self,
        attacker: PokemonState,
        defender: PokemonState,
        move: Move,
        rng: random.Random,
    ) -> MoveResult:
        nullified = self._check_defensive_abilities(attacker, defender, move)
        if nullified is not None:
            return nullified

        effectiveness = self._type_chart.get_effectiveness(move.type, defender.types)
        if effectiveness == 0:
            return MoveResult(
                attacker=attacker,
                defender=defender,
                effectiveness=0.0,
                messages=[effectiveness_message(0, defender.display_name()) or ""],
            )

        if move.category == MoveCategory.PHYSICAL:
            attack_stat, defense_stat = Stat.ATK, Stat.DEF
        else:
            attack_stat, defense_stat = Stat.SPA, Stat.SPD

        # Base is floored first, multipliers stay fractional until the end
        damage: float = base_damage(
            self._level,
            move.power or 0,
            attacker.get_effective_stat(attack_stat),
            defender.get_effective_stat(defense_stat),
        )

        messages: List[str] = []
        critical = rng.random() < CRITICAL_HIT_CHANCE
        if critical:
            damage *= CRITICAL_HIT_MULTIPLIER
            messages.append("A critical hit!")
        if attacker.has_type(move.type):
            damage *= STAB_MULTIPLIER
        damage *= effectiveness

        final_damage = max(1, math.floor(damage))
        message = effectiveness_message(effectiveness, defender.display_name())
        if message:
            messages.append(message)

        defender = defender.take_damage(final_damage)
        messages.append(f"{defender.display_name()} took {final_damage} damage!")

        statuses: List[AppliedStatus] = []
        if (
            move.ailment != Status.NONE
            and defender.is_alive()
            and defender.status == Status.NONE
            and rng.random() * 100 < move.ailment_chance
        ):
            defender, status_message = inflict_status(defender, move.ailment, rng)
            messages.append(status_message)
            statuses.append(AppliedStatus(StatChangeTarget.OPPONENT, move.ailment))

        if move.category == MoveCategory.PHYSICAL and attacker.status == Status.NONE:
            attacker, contact = self._contact_abilities(attacker, defender, rng)
            if contact is not None:
                messages.append(contact[1])
                statuses.append(AppliedStatus(StatChangeTarget.SELF, contact[0]))

        return MoveResult(
            attacker=attacker,
            defender=defender,
            damage=final_damage,
            messages=messages,
            effectiveness=effectiveness,
            critical=critical,
            applied_statuses=statuses,
        )

    def _contact_abilities(
        self, attacker: PokemonState, defender: PokemonState, rng: random.Random
    ) -> Tuple[PokemonState, Optional[Tuple[Status, str]]]:
        for ability in defender.abilities_with(AbilityTrigger.CONTACT):
            if ability.effect is None:
                continue
            if rng.random() < CONTACT_ABILITY_CHANCE:
                status = Status.from_ailment(ability.effect)
                attacker, message = inflict_status(attacker, status, rng)
                pretty = ability.display_name()
                return attacker, (status, f"{defender.display_name()}'s {pretty}! {message}")
        return attacker, None
