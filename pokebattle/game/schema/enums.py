"""Enums for battle state representation."""

from enum import Enum
from typing import Optional


class Status(Enum):
    """Pokemon status conditions."""

    NONE = "none"
    BURN = "brn"
    PARALYSIS = "par"
    POISON = "psn"
    SLEEP = "slp"

    @classmethod
    def from_ailment(cls, ailment: str) -> "Status":
        """Parse a status from a move ailment name.

        Ailments that have no battle effect here (freeze, confusion, trap, ...)
        map to NONE.

        Args:
            ailment: Ailment name as published by the data API (e.g., "paralysis")

        Returns:
            Status enum value

        Examples:
            >>> Status.from_ailment("paralysis")
            Status.PARALYSIS
            >>> Status.from_ailment("confusion")
            Status.NONE
        """
        mapping = {
            "poison": cls.POISON,
            "burn": cls.BURN,
            "paralysis": cls.PARALYSIS,
            "sleep": cls.SLEEP,
        }
        return mapping.get(ailment.lower().strip(), cls.NONE)

    def display_name(self) -> str:
        names = {
            Status.NONE: "healthy",
            Status.BURN: "burned",
            Status.PARALYSIS: "paralyzed",
            Status.POISON: "poisoned",
            Status.SLEEP: "asleep",
        }
        return names[self]


class Stat(Enum):
    """Pokemon stats."""

    HP = "hp"
    ATK = "atk"
    DEF = "def"
    SPA = "spa"
    SPD = "spd"
    SPE = "spe"

    @classmethod
    def from_api_name(cls, name: str) -> "Stat":
        """Parse a stat from its data API name.

        Args:
            name: Stat name (e.g., "special-attack", "speed")

        Returns:
            Stat enum value

        Raises:
            ValueError: If the stat name is not recognized
        """
        mapping = {
            "hp": cls.HP,
            "attack": cls.ATK,
            "defense": cls.DEF,
            "special-attack": cls.SPA,
            "special-defense": cls.SPD,
            "speed": cls.SPE,
        }
        normalized = name.lower().strip()
        if normalized not in mapping:
            raise ValueError(f"Unknown stat name: {name}")
        return mapping[normalized]

    def display_name(self) -> str:
        names = {
            Stat.HP: "HP",
            Stat.ATK: "Attack",
            Stat.DEF: "Defense",
            Stat.SPA: "Sp. Atk",
            Stat.SPD: "Sp. Def",
            Stat.SPE: "Speed",
        }
        return names[self]


# Stats that carry a stage modifier in battle
BOOSTABLE_STATS = (Stat.ATK, Stat.DEF, Stat.SPA, Stat.SPD, Stat.SPE)


class MoveCategory(Enum):
    """Damage class of a move."""

    PHYSICAL = "physical"
    SPECIAL = "special"
    STATUS = "status"


class StatChangeTarget(Enum):
    """Who receives a move's stat change."""

    SELF = "self"
    OPPONENT = "opponent"


class AbilityTrigger(Enum):
    """When an ability takes effect during battle."""

    NONE = "none"
    IMMUNITY = "immunity"
    ABSORB = "absorb"
    CONTACT = "contact"
    SWITCH_IN = "switch_in"


class TurnPhase(Enum):
    """Phase of the shared battle record."""

    SELECTING = "selecting"
    PROCESSING = "processing"
    P1_MUST_SWITCH = "player1_must_switch"
    P2_MUST_SWITCH = "player2_must_switch"
    FINISHED = "finished"

    @classmethod
    def must_switch(cls, player_id: str) -> "TurnPhase":
        """Get the forced-switch phase for a player.

        Args:
            player_id: Player ID ("p1" or "p2")

        Returns:
            P1_MUST_SWITCH or P2_MUST_SWITCH
        """
        if player_id == "p1":
            return cls.P1_MUST_SWITCH
        if player_id == "p2":
            return cls.P2_MUST_SWITCH
        raise ValueError(f"Invalid player ID: {player_id}")


class Outcome(Enum):
    """Result of a battle."""

    ONGOING = "ongoing"
    PLAYER1_WINS = "player1_wins"
    PLAYER2_WINS = "player2_wins"
    DRAW = "draw"

    @classmethod
    def win_for(cls, player_id: str) -> "Outcome":
        if player_id == "p1":
            return cls.PLAYER1_WINS
        if player_id == "p2":
            return cls.PLAYER2_WINS
        raise ValueError(f"Invalid player ID: {player_id}")

    def winner(self) -> Optional[str]:
        """Get the winning player ID, if any.

        Returns:
            "p1", "p2", or None for ongoing battles and draws
        """
        if self == Outcome.PLAYER1_WINS:
            return "p1"
        if self == Outcome.PLAYER2_WINS:
            return "p2"
        return None


def opponent_of(player_id: str) -> str:
    """Get the other player's ID.

    Args:
        player_id: Player ID ("p1" or "p2")

    Returns:
        The opposing player ID
    """
    if player_id == "p1":
        return "p2"
    if player_id == "p2":
        return "p1"
    raise ValueError(f"Invalid player ID: {player_id}")


PLAYER_IDS = ("p1", "p2")
