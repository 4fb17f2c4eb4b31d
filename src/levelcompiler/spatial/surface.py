"""
Surfaces: a facet plus the materials on either side and free-form metadata.

Surfaces are immutable.  Splitting produces new surfaces that copy the
materials and metadata of their parent; an unsplit surface is returned
as-is so callers can rely on reference identity for "nothing changed".
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from ..geometry import Facet, Hyperplane
from .materials import Material, is_two_sided

TRUE_STRINGS = frozenset({"true", "1", "yes"})


@dataclass(frozen=True)
class Surface:
    facet: Facet
    front_material: int = Material.AIR
    back_material: int = Material.SOLID
    metadata: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        if not isinstance(self.metadata, MappingProxyType):
            object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def plane(self) -> Hyperplane:
        return self.facet.plane

    @property
    def is_two_sided(self) -> bool:
        return is_two_sided(self.back_material)

    @property
    def cosurface(self) -> "Surface":
        """The same boundary viewed from the other side."""
        return Surface(
            facet=self.facet.cofacet,
            front_material=self.back_material,
            back_material=self.front_material,
            metadata=self.metadata,
        )

    def fill_front(self, material: int) -> "Surface":
        return replace(self, front_material=material)

    def with_facet(self, facet: Facet) -> "Surface":
        if facet is self.facet:
            return self
        return replace(self, facet=facet)

    def split(self, plane: Hyperplane) -> Tuple[Optional["Surface"], Optional["Surface"]]:
        front, back = self.facet.split(plane)
        return (
            self.with_facet(front) if front is not None else None,
            self.with_facet(back) if back is not None else None,
        )

    # ---------------------------------------------------------------
    # Metadata accessors
    # ---------------------------------------------------------------

    @property
    def room(self) -> Optional[str]:
        return self.metadata.get("room")

    @property
    def is_passage(self) -> bool:
        return str(self.metadata.get("passage", "false")).strip().lower() in TRUE_STRINGS

    @property
    def texture(self) -> Optional[str]:
        return self.metadata.get("texture")
