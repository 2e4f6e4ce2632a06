"""Battle action representation for player decisions."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ActionType(Enum):
    """Type of action a player can take."""

    MOVE = "move"
    SWITCH = "switch"


@dataclass(frozen=True)
class BattleAction:
    """Immutable representation of a player's intent for one turn.

    A pending action on the battle record is either a move reference (by move
    name) or a switch target (by team slot index). Legality is not checked
    here; StateTransition.validate_action does that against a battle state.

    Attributes:
        action_type: Type of action (MOVE or SWITCH)
        move_name: Name of the move to use, required for MOVE actions
        switch_index: Team slot to switch to, required for SWITCH actions

    Examples:
        >>> BattleAction.move("thunderbolt").to_dict()
        {'action_type': 'move', 'move_name': 'thunderbolt'}
        >>> BattleAction.switch(3).to_dict()
        {'action_type': 'switch', 'switch_index': 3}
    """

    action_type: ActionType
    move_name: Optional[str] = None
    switch_index: Optional[int] = None

    def __post_init__(self) -> None:
        if self.action_type == ActionType.MOVE and self.move_name is None:
            raise ValueError("MOVE action requires move_name")
        if self.action_type == ActionType.SWITCH and self.switch_index is None:
            raise ValueError("SWITCH action requires switch_index")

    @classmethod
    def move(cls, move_name: str) -> "BattleAction":
        return cls(action_type=ActionType.MOVE, move_name=move_name)

    @classmethod
    def switch(cls, switch_index: int) -> "BattleAction":
        return cls(action_type=ActionType.SWITCH, switch_index=switch_index)

    def is_move(self) -> bool:
        return self.action_type == ActionType.MOVE

    def is_switch(self) -> bool:
        return self.action_type == ActionType.SWITCH

    def to_dict(self) -> Dict[str, Any]:
        """Convert this action to its stored document form.

        Returns:
            Dictionary tagged by action_type
        """
        if self.action_type == ActionType.MOVE:
            return {"action_type": self.action_type.value, "move_name": self.move_name}
        return {"action_type": self.action_type.value, "switch_index": self.switch_index}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BattleAction":
        action_type = ActionType(data["action_type"])
        if action_type == ActionType.MOVE:
            return cls.move(data["move_name"])
        return cls.switch(int(data["switch_index"]))

    def __str__(self) -> str:
        if self.action_type == ActionType.MOVE:
            return f"move {self.move_name}"
        return f"switch {self.switch_index}"
