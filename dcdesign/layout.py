"""
dcdesign/layout.py
==================
Layout data model: placed modules, the connections between them, and the
history entries the editor undoes and redoes.

All containers are frozen; edits produce new instances via
``dataclasses.replace`` so a history entry can never be changed after it is
recorded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Mapping

from dcdesign.cache import canonical_key

ConnectionType = Literal["power", "network", "cooling"]
Vector3 = tuple[float, float, float]


def _vector(value: Any, default: Vector3) -> Vector3:
    if value is None:
        return default
    x, y, z = value
    return (float(x), float(y), float(z))


@dataclass(frozen=True)
class Module:
    """A 3D object placed in a layout.

    Attributes:
        id:       Unique id within the layout.
        type:     Catalogue type (``"rack"``, ``"ups"``, ``"crah"``, ...).
        position: x, y, z [m].
        rotation: Euler angles [rad].
        scale:    Per-axis scale factors.
        color:    Display colour (hex string).
        selected: Editor selection flag as stored with the layout.
        name:     Optional display name.
    """
    id:       str
    type:     str = "basic"
    position: Vector3 = (0.0, 0.0, 0.0)
    rotation: Vector3 = (0.0, 0.0, 0.0)
    scale:    Vector3 = (1.0, 1.0, 1.0)
    color:    str = "#64748b"
    selected: bool = False
    name:     str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Module":
        return cls(
            id=str(data["id"]),
            type=str(data.get("type", "basic")),
            position=_vector(data.get("position"), (0.0, 0.0, 0.0)),
            rotation=_vector(data.get("rotation"), (0.0, 0.0, 0.0)),
            scale=_vector(data.get("scale"), (1.0, 1.0, 1.0)),
            color=str(data.get("color", "#64748b")),
            selected=bool(data.get("selected", False)),
            name=data.get("name"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "position": list(self.position),
            "rotation": list(self.rotation),
            "scale": list(self.scale),
            "color": self.color,
            "selected": self.selected,
        }
        if self.name is not None:
            data["name"] = self.name
        return data


@dataclass(frozen=True)
class Connection:
    """A power, network or cooling link between two modules."""
    id:               str
    source_module_id: str
    target_module_id: str
    type:             ConnectionType = "power"
    capacity:         float | None = None

    def touches(self, module_id: str) -> bool:
        return module_id in (self.source_module_id, self.target_module_id)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Connection":
        capacity = data.get("capacity")
        return cls(
            id=str(data["id"]),
            source_module_id=str(data.get("sourceModuleId", data.get("source_module_id"))),
            target_module_id=str(data.get("targetModuleId", data.get("target_module_id"))),
            type=data.get("type", "power"),
            capacity=float(capacity) if capacity is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "sourceModuleId": self.source_module_id,
            "targetModuleId": self.target_module_id,
            "type": self.type,
            "capacity": self.capacity,
        }


@dataclass(frozen=True)
class HistoryEntry:
    """One undo/redo step: the layout snapshot plus the selection at that time."""
    modules:            tuple[Module, ...]
    connections:        tuple[Connection, ...]
    selected_module_id: str | None = None
    has_changes:        bool = False


def snapshot_key(modules: tuple[Module, ...], connections: tuple[Connection, ...]) -> str:
    """Canonical serialisation of ``{modules, connections}`` used for change detection."""
    return canonical_key({"modules": modules, "connections": connections})
