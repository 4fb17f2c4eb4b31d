"""
Oriented hyperplanes (lines in 2D, planes in 3D) with exact coefficients.

A hyperplane is ``normal . p + offset = 0``.  Points with a positive
determinant are in front, negative behind, zero on the plane.

Coefficients are canonicalised on construction by dividing through by the
largest absolute normal component.  Two hyperplanes describing the same
oriented plane therefore compare (and hash) equal, which the partitioner
relies on when de-duplicating candidate planes.
"""

from __future__ import annotations
from dataclasses import dataclass
from fractions import Fraction
from typing import Sequence, Tuple

from ..errors import GeometryError
from . import points as vec
from .points import Point, to_rational


@dataclass(frozen=True)
class Hyperplane:
    normal: Tuple[Fraction, ...]
    offset: Fraction

    def __post_init__(self):
        normal = tuple(to_rational(c) for c in self.normal)
        offset = to_rational(self.offset)
        largest = max(abs(c) for c in normal)
        if largest == 0:
            raise GeometryError("Hyperplane normal cannot be zero")
        object.__setattr__(self, "normal", tuple(c / largest for c in normal))
        object.__setattr__(self, "offset", offset / largest)

    # ---------------------------------------------------------------
    # Constructors
    # ---------------------------------------------------------------

    @classmethod
    def from_coefficients(cls, *coefficients) -> "Hyperplane":
        """Build from ``(A, B, C)`` in 2D or ``(A, B, C, D)`` in 3D."""
        return cls(tuple(coefficients[:-1]), coefficients[-1])

    @classmethod
    def through(cls, *pts: Sequence[Fraction]) -> "Hyperplane":
        """Hyperplane through two points (2D) or three points (3D).

        In 2D the front side is to the left of the direction of travel
        from the first point to the second.  In 3D the normal is
        ``(p2 - p1) x (p3 - p1)``.
        """
        if len(pts) == 2:
            start, end = vec.to_point(pts[0]), vec.to_point(pts[1])
            a = -(end[1] - start[1])
            b = end[0] - start[0]
            if a == 0 and b == 0:
                raise GeometryError("Points are coincident")
            return cls((a, b), -(a * start[0] + b * start[1]))
        if len(pts) == 3:
            p1, p2, p3 = (vec.to_point(p) for p in pts)
            normal = vec.cross(vec.sub(p2, p1), vec.sub(p3, p1))
            if all(c == 0 for c in normal):
                raise GeometryError("Points are not linearly independent")
            return cls(normal, -vec.dot(normal, p1))
        raise GeometryError(f"Cannot build a hyperplane through {len(pts)} points")

    # ---------------------------------------------------------------
    # Queries
    # ---------------------------------------------------------------

    @property
    def dimension(self) -> int:
        return len(self.normal)

    @property
    def coefficients(self) -> Tuple[Fraction, ...]:
        return self.normal + (self.offset,)

    @property
    def coplane(self) -> "Hyperplane":
        """The same plane facing the opposite way."""
        return Hyperplane(tuple(-c for c in self.normal), -self.offset)

    @property
    def is_axial(self) -> bool:
        return sum(1 for c in self.normal if c != 0) == 1

    def determinant(self, point: Sequence[Fraction]) -> Fraction:
        return vec.dot(self.normal, point) + self.offset

    def classify(self, point: Sequence[Fraction]) -> int:
        det = self.determinant(point)
        if det > 0:
            return 1
        if det < 0:
            return -1
        return 0

    def intersect_segment(self, start: Sequence[Fraction], end: Sequence[Fraction]) -> Point:
        """Exact point where the line through start/end crosses this plane."""
        d_start = self.determinant(start)
        d_end = self.determinant(end)
        if d_start == d_end:
            raise GeometryError("Segment is parallel to the hyperplane")
        return vec.lerp(start, end, d_start / (d_start - d_end))

    def __str__(self) -> str:
        terms = " ".join(f"{c}" for c in self.coefficients)
        return f"[{terms}]"
