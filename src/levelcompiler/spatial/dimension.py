"""
Dimension adapters.

The partitioner, CSG, portal and leak code are written once against this
interface; Dimension2D and Dimension3D supply the handful of operations
that depend on how many axes there are.
"""

from __future__ import annotations
from abc import ABC, abstractmethod

from ..geometry import (
    DEFAULT_FACET_SIZE, Facet, Facet2D, Facet3D, Hyperplane,
    facetize_2d, facetize_3d,
)
from .surface import Surface

HINT_METADATA_KEY = "hint"


class Dimension(ABC):
    axes: int = 0

    def __init__(self, facet_size: int = DEFAULT_FACET_SIZE):
        self.facet_size = facet_size

    @abstractmethod
    def facetize(self, plane: Hyperplane) -> Facet:
        """A facet on the plane large enough to cover any input."""

    def is_hint_surface(self, surface: Surface, depth: int) -> bool:
        return surface.metadata.get(HINT_METADATA_KEY) == str(depth)


class Dimension2D(Dimension):
    axes = 2

    def facetize(self, plane: Hyperplane) -> Facet2D:
        return facetize_2d(plane, self.facet_size)


class Dimension3D(Dimension):
    axes = 3

    def facetize(self, plane: Hyperplane) -> Facet3D:
        return facetize_3d(plane, self.facet_size)


def dimension_for(axes: int, facet_size: int = DEFAULT_FACET_SIZE) -> Dimension:
    if axes == 2:
        return Dimension2D(facet_size)
    if axes == 3:
        return Dimension3D(facet_size)
    raise ValueError(f"Unsupported dimension: {axes}")
