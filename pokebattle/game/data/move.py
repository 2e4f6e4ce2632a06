from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pokebattle.game.data.base import GameDataObject
from pokebattle.game.schema.enums import MoveCategory, Stat, StatChangeTarget, Status

REST_MOVE_NAME = "rest"


@dataclass(frozen=True)
class StatChange(GameDataObject):
    """A stage change a status move applies to one side.

    target is explicit on the record. Providers derive it from the sign of
    change (raising moves target the user, lowering moves the opponent).
    """

    stat: Stat
    change: int
    target: StatChangeTarget

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatChange":
        change = int(data["change"])
        target = data.get("target")
        return cls(
            stat=Stat(data["stat"]),
            change=change,
            target=(
                StatChangeTarget(target)
                if target is not None
                else StatChange.target_for_change(change)
            ),
        )

    @staticmethod
    def target_for_change(change: int) -> StatChangeTarget:
        if change > 0:
            return StatChangeTarget.SELF
        return StatChangeTarget.OPPONENT


@dataclass(frozen=True)
class Move(GameDataObject):
    name: str
    type: str
    category: MoveCategory
    pp: int
    power: Optional[int] = None
    stat_changes: List[StatChange] = field(default_factory=list)
    ailment: Status = Status.NONE
    ailment_chance: int = 0
    healing: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Move":
        return cls(
            name=data["name"],
            type=data["type"].lower(),
            category=MoveCategory(data["category"]),
            pp=int(data["pp"]),
            power=data.get("power"),
            stat_changes=[
                StatChange.from_dict(sc) for sc in data.get("stat_changes", [])
            ],
            ailment=Status.from_ailment(data.get("ailment", "none")),
            ailment_chance=int(data.get("ailment_chance", 0)),
            healing=int(data.get("healing", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        # Stored under the data API ailment name so from_dict round-trips
        result["ailment"] = {
            Status.NONE: "none",
            Status.POISON: "poison",
            Status.BURN: "burn",
            Status.PARALYSIS: "paralysis",
            Status.SLEEP: "sleep",
        }[self.ailment]
        return result

    def is_status(self) -> bool:
        return self.category == MoveCategory.STATUS

    def is_usable(self) -> bool:
        """Check if this move can be part of a battle move-set.

        Returns:
            True for status moves and damaging moves with positive power
        """
        if self.is_status():
            return True
        return self.power is not None and self.power > 0

    def display_name(self) -> str:
        return self.name.replace("-", " ")
