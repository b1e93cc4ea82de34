"""Prefab composite object contract.

A PrefabObject is the in-memory target object a strategy hands to the build
allocator. The artifact writer serializes it; strategies never write
artifact files themselves.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class PrefabComponent:
    """A typed component attached to a prefab object."""

    kind: str
    properties: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "properties": dict(self.properties)}


@dataclass(frozen=True, slots=True)
class PrefabObject:
    """Composite object: named node with components and child objects."""

    name: str
    components: tuple[PrefabComponent, ...] = ()
    children: tuple[PrefabObject, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Nested plain-dict form, stable across runs for identical input."""
        return {
            "name": self.name,
            "components": [component.to_dict() for component in self.components],
            "children": [child.to_dict() for child in self.children],
        }
