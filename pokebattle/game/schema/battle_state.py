"""Battle state representation for battle simulation."""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from pokebattle.game.schema.enums import PLAYER_IDS, Outcome, TurnPhase
from pokebattle.game.schema.pokemon_state import PokemonState
from pokebattle.game.schema.team_state import TeamState


@dataclass(frozen=True)
class BattleState:
    """Immutable state of an entire battle.

    This is the authoritative battle record shared by both players: both
    teams with their pending actions, the turn phase, the append-only battle
    log and the outcome. last_resolved_timestamp is the turn marker stamped
    when both actions are in; it lets clients recognise a turn they already
    resolved.
    """

    teams: Dict[str, TeamState] = field(
        default_factory=lambda: {
            "p1": TeamState(player_id="p1"),
            "p2": TeamState(player_id="p2"),
        }
    )

    turn_phase: TurnPhase = TurnPhase.SELECTING
    turn_number: int = 1

    log: List[str] = field(default_factory=list)

    outcome: Outcome = Outcome.ONGOING

    last_resolved_timestamp: Optional[int] = None
    # Wall-clock seconds when the current phase began
    phase_started_at: float = 0.0

    # Moves each player has publicly used, for hiding the rest in the UI
    revealed_moves: Dict[str, List[str]] = field(
        default_factory=lambda: {"p1": [], "p2": []}
    )

    def get_team(self, player: str) -> TeamState:
        """Get team state for a player.

        Args:
            player: Player ID ("p1" or "p2")

        Returns:
            TeamState for the specified player
        """
        if player not in self.teams:
            raise ValueError(f"Invalid player ID: {player}")
        return self.teams[player]

    def get_active_pokemon(self, player: str) -> PokemonState:
        """Get active Pokemon for a player.

        Args:
            player: Player ID ("p1" or "p2")

        Returns:
            Active Pokemon for the player
        """
        return self.get_team(player).get_active_pokemon()

    def is_finished(self) -> bool:
        return self.turn_phase == TurnPhase.FINISHED

    def awaiting_actions(self) -> List[str]:
        """Get the players whose input the battle is waiting for.

        Returns:
            Player IDs that still need to submit an action or forced switch
        """
        if self.turn_phase == TurnPhase.SELECTING:
            return [p for p in PLAYER_IDS if self.teams[p].pending_action is None]
        if self.turn_phase == TurnPhase.P1_MUST_SWITCH:
            return ["p1"]
        if self.turn_phase == TurnPhase.P2_MUST_SWITCH:
            return ["p2"]
        return []

    def get_available_moves(self, player: str) -> List[str]:
        """Get moves a player may select this turn.

        Args:
            player: Player ID (p1 or p2)

        Returns:
            Names of the active Pokemon's moves with PP left, or an empty list
            when the active Pokemon is fainted
        """
        active = self.get_active_pokemon(player)
        if active.is_fainted():
            return []
        return [m.name for m in active.get_usable_moves()]

    def get_available_switches(self, player: str) -> List[int]:
        return self.get_team(player).get_available_switches()

    def with_team(self, player: str, team: TeamState) -> "BattleState":
        teams = dict(self.teams)
        teams[player] = team
        return replace(self, teams=teams)

    def with_log(self, *messages: str) -> "BattleState":
        return replace(self, log=list(self.log) + list(messages))

    def with_revealed_move(self, player: str, move_name: str) -> "BattleState":
        revealed = {p: list(moves) for p, moves in self.revealed_moves.items()}
        moves = revealed.setdefault(player, [])
        if move_name not in moves:
            moves.append(move_name)
        return replace(self, revealed_moves=revealed)

    def to_dict(self) -> Dict[str, Any]:
        """Convert battle state to its stored document form.

        Returns:
            Dictionary representation of the battle record
        """
        return {
            "teams": {player: team.to_dict() for player, team in self.teams.items()},
            "turn_phase": self.turn_phase.value,
            "turn_number": self.turn_number,
            "log": list(self.log),
            "outcome": self.outcome.value,
            "last_resolved_timestamp": self.last_resolved_timestamp,
            "phase_started_at": self.phase_started_at,
            "revealed_moves": {p: list(m) for p, m in self.revealed_moves.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BattleState":
        return cls(
            teams={
                player: TeamState.from_dict(team)
                for player, team in data["teams"].items()
            },
            turn_phase=TurnPhase(data["turn_phase"]),
            turn_number=int(data.get("turn_number", 1)),
            log=list(data.get("log", [])),
            outcome=Outcome(data.get("outcome", Outcome.ONGOING.value)),
            last_resolved_timestamp=data.get("last_resolved_timestamp"),
            phase_started_at=float(data.get("phase_started_at", 0.0)),
            revealed_moves={
                p: list(m) for p, m in data.get("revealed_moves", {}).items()
            },
        )

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)
