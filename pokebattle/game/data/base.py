from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, TypeVar

T = TypeVar("T", bound="GameDataObject")


def _to_plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, GameDataObject):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    if isinstance(value, dict):
        return {_to_plain(k): _to_plain(v) for k, v in value.items()}
    return value


@dataclass(frozen=True)
class GameDataObject:
    """Immutable record served by a data provider."""

    @classmethod
    def from_dict(cls: type[T], data: Dict[str, Any]) -> T:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: _to_plain(getattr(self, f.name)) for f in fields(self)}
