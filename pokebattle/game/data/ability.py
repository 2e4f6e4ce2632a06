from dataclasses import dataclass
from typing import Any, Dict, Optional

from pokebattle.game.data.base import GameDataObject
from pokebattle.game.schema.enums import AbilityTrigger

# Abilities with a battle effect, keyed by data API name.
# element is the move type the ability reacts to; effect names the outcome.
KNOWN_ABILITIES: Dict[str, Dict[str, Any]] = {
    "levitate": {"trigger": AbilityTrigger.IMMUNITY, "element": "ground"},
    "flash-fire": {"trigger": AbilityTrigger.IMMUNITY, "element": "fire"},
    "volt-absorb": {"trigger": AbilityTrigger.ABSORB, "element": "electric"},
    "water-absorb": {"trigger": AbilityTrigger.ABSORB, "element": "water"},
    "dry-skin": {"trigger": AbilityTrigger.ABSORB, "element": "water"},
    "static": {"trigger": AbilityTrigger.CONTACT, "effect": "paralysis"},
    "poison-point": {"trigger": AbilityTrigger.CONTACT, "effect": "poison"},
    "intimidate": {"trigger": AbilityTrigger.SWITCH_IN, "effect": "attack-drop"},
}


@dataclass(frozen=True)
class Ability(GameDataObject):
    name: str
    trigger: AbilityTrigger = AbilityTrigger.NONE
    element: Optional[str] = None
    effect: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ability":
        return cls(
            name=data["name"],
            trigger=AbilityTrigger(data.get("trigger", "none")),
            element=data.get("element"),
            effect=data.get("effect"),
        )

    @classmethod
    def from_name(cls, name: str) -> "Ability":
        """Build an ability record from its name alone.

        Abilities without a modelled battle effect get trigger NONE.

        Args:
            name: Data API ability name (e.g., "volt-absorb")

        Returns:
            Ability with its trigger filled in
        """
        known = KNOWN_ABILITIES.get(name, {})
        return cls(
            name=name,
            trigger=known.get("trigger", AbilityTrigger.NONE),
            element=known.get("element"),
            effect=known.get("effect"),
        )

    def display_name(self) -> str:
        return self.name.replace("-", " ").title()
