"""
Facets: the geometric boundary carried by a surface.

- Facet2D: a directed segment; its plane faces left of travel
- Facet3D: a convex polygon wound counter-clockwise seen from the front

Both are immutable.  Splitting never mutates a facet; when a plane does
not cut a facet, split() hands back the very same object on the side
that contains it.
"""

from __future__ import annotations
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from fractions import Fraction
from typing import List, Optional, Sequence, Tuple

from ..errors import GeometryError
from . import points as vec
from .hyperplane import Hyperplane
from .points import Point

DEFAULT_FACET_SIZE = 100000

SplitResult = Tuple[Optional["Facet"], Optional["Facet"]]


class Facet(ABC):
    """Common interface of 2D and 3D facets."""

    @property
    @abstractmethod
    def plane(self) -> Hyperplane:
        ...

    @property
    @abstractmethod
    def points(self) -> Tuple[Point, ...]:
        ...

    @property
    @abstractmethod
    def cofacet(self) -> "Facet":
        """The same boundary seen from behind (reversed winding)."""

    @abstractmethod
    def split(self, plane: Hyperplane) -> SplitResult:
        ...

    @abstractmethod
    def measure(self) -> float:
        """Length of a segment or area of a polygon."""

    @abstractmethod
    def edge_planes(self) -> List[Hyperplane]:
        """Planes through each edge of the facet, facing away from it."""

    @property
    def dimension(self) -> int:
        return self.plane.dimension

    @property
    def centroid(self) -> Point:
        return vec.centroid(self.points)

    def classify(self, plane: Hyperplane) -> Tuple[int, int]:
        """Return the (min, max) point classification against a plane.

        A facet lying on the plane reports (1, 1); on the coplane (-1, -1).
        """
        if self.plane == plane:
            return 1, 1
        if self.plane == plane.coplane:
            return -1, -1
        signs = [plane.classify(p) for p in self.points]
        return min(signs), max(signs)

    def _trivial_split(self, plane: Hyperplane, signs: Sequence[int]) -> Optional[SplitResult]:
        if self.plane == plane:
            return self, None
        if self.plane == plane.coplane:
            return None, self
        if min(signs) >= 0:
            return self, None
        if max(signs) <= 0:
            return None, self
        return None


# ---------------------------------------------------------------------------
# 2D segments
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Facet2D(Facet):
    start: Point
    end: Point
    _plane: Hyperplane = field(init=False, repr=False, compare=False, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "start", vec.to_point(self.start))
        object.__setattr__(self, "end", vec.to_point(self.end))
        if len(self.start) != 2 or len(self.end) != 2:
            raise GeometryError("Facet2D requires two-dimensional points")
        object.__setattr__(self, "_plane", Hyperplane.through(self.start, self.end))

    @property
    def plane(self) -> Hyperplane:
        return self._plane

    @property
    def points(self) -> Tuple[Point, ...]:
        return (self.start, self.end)

    @property
    def cofacet(self) -> "Facet2D":
        return Facet2D(self.end, self.start)

    def split(self, plane: Hyperplane) -> SplitResult:
        s_start = plane.classify(self.start)
        s_end = plane.classify(self.end)
        trivial = self._trivial_split(plane, (s_start, s_end))
        if trivial is not None:
            return trivial

        middle = plane.intersect_segment(self.start, self.end)
        if s_start > 0:
            return Facet2D(self.start, middle), Facet2D(middle, self.end)
        return Facet2D(middle, self.end), Facet2D(self.start, middle)

    def measure(self) -> float:
        dx, dy = vec.sub(self.end, self.start)
        return math.sqrt(float(dx * dx + dy * dy))

    def edge_planes(self) -> List[Hyperplane]:
        outward_start = vec.sub(self.start, self.end)
        outward_end = vec.sub(self.end, self.start)
        return [
            Hyperplane(outward_start, -vec.dot(outward_start, self.start)),
            Hyperplane(outward_end, -vec.dot(outward_end, self.end)),
        ]


# ---------------------------------------------------------------------------
# 3D polygons
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Facet3D(Facet):
    facet_plane: Hyperplane
    winding: Tuple[Point, ...]

    def __post_init__(self):
        winding = tuple(vec.to_point(p) for p in self.winding)
        if len(winding) < 3:
            raise GeometryError(f"Facet3D needs at least 3 points, got {len(winding)}")
        object.__setattr__(self, "winding", winding)

    @classmethod
    def from_points(cls, pts: Sequence[Sequence]) -> "Facet3D":
        """Build a facet from a convex counter-clockwise winding."""
        winding = [vec.to_point(p) for p in pts]
        if len(winding) < 3:
            raise GeometryError(f"Facet3D needs at least 3 points, got {len(winding)}")
        for k in range(2, len(winding)):
            try:
                plane = Hyperplane.through(winding[0], winding[k - 1], winding[k])
            except GeometryError:
                continue
            return cls(plane, tuple(winding))
        raise GeometryError("Facet points are collinear")

    @property
    def plane(self) -> Hyperplane:
        return self.facet_plane

    @property
    def points(self) -> Tuple[Point, ...]:
        return self.winding

    @property
    def cofacet(self) -> "Facet3D":
        return Facet3D(self.facet_plane.coplane, tuple(reversed(self.winding)))

    def split(self, plane: Hyperplane) -> SplitResult:
        signs = [plane.classify(p) for p in self.winding]
        trivial = self._trivial_split(plane, signs)
        if trivial is not None:
            return trivial

        front: List[Point] = []
        back: List[Point] = []
        count = len(self.winding)
        for i in range(count):
            p, q = self.winding[i], self.winding[(i + 1) % count]
            sp, sq = signs[i], signs[(i + 1) % count]
            if sp >= 0:
                front.append(p)
            if sp <= 0:
                back.append(p)
            if sp * sq < 0:
                middle = plane.intersect_segment(p, q)
                front.append(middle)
                back.append(middle)

        if len(front) < 3 or len(back) < 3:
            raise GeometryError("Degenerate facet produced by split")
        return Facet3D(self.facet_plane, tuple(front)), Facet3D(self.facet_plane, tuple(back))

    def measure(self) -> float:
        origin = self.winding[0]
        total = (Fraction(0), Fraction(0), Fraction(0))
        for i in range(1, len(self.winding) - 1):
            a = vec.sub(self.winding[i], origin)
            b = vec.sub(self.winding[i + 1], origin)
            total = vec.add(total, vec.cross(a, b))
        return 0.5 * math.sqrt(float(vec.dot(total, total)))

    def edge_planes(self) -> List[Hyperplane]:
        normal = self.facet_plane.normal
        result = []
        count = len(self.winding)
        for i in range(count):
            p, q = self.winding[i], self.winding[(i + 1) % count]
            outward = vec.cross(vec.sub(q, p), normal)
            edge_plane = Hyperplane(outward, -vec.dot(outward, p))
            # Flip if the winding runs the other way round
            for other in self.winding:
                side = edge_plane.classify(other)
                if side != 0:
                    if side > 0:
                        edge_plane = edge_plane.coplane
                    break
            result.append(edge_plane)
        return result


# ---------------------------------------------------------------------------
# Facetize: a large facet covering a plane
# ---------------------------------------------------------------------------

def facetize_2d(plane: Hyperplane, size: int = DEFAULT_FACET_SIZE) -> Facet2D:
    a, b = plane.normal
    c = plane.offset
    norm = a * a + b * b
    base = (-a * c / norm, -b * c / norm)
    direction = (b, -a)
    return Facet2D(vec.sub(base, vec.scale(direction, Fraction(size))),
                   vec.add(base, vec.scale(direction, Fraction(size))))


def facetize_3d(plane: Hyperplane, size: int = DEFAULT_FACET_SIZE) -> Facet3D:
    a, b, c = plane.normal
    d = plane.offset
    s = Fraction(size)

    if a != 0:
        sign = 1 if a > 0 else -1
        grid = [(s, s), (-s * sign, s * sign), (-s, -s), (s * sign, -s * sign)]
        winding = [(-(b * y + c * z + d) / a, y, z) for y, z in grid]
    elif b != 0:
        sign = 1 if b > 0 else -1
        grid = [(s, s), (s * sign, -s * sign), (-s, -s), (-s * sign, s * sign)]
        winding = [(x, -(a * x + c * z + d) / b, z) for x, z in grid]
    else:
        sign = 1 if c > 0 else -1
        grid = [(s, s), (-s * sign, s * sign), (-s, -s), (s * sign, -s * sign)]
        winding = [(x, y, -(a * x + b * y + d) / c) for x, y in grid]

    return Facet3D(plane, tuple(winding))
