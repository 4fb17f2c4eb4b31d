"""Axis-aligned bounds (orthotopes) in any dimension."""

from __future__ import annotations
from dataclasses import dataclass
from fractions import Fraction
from typing import Iterable, List, Sequence

from ..errors import GeometryError
from .hyperplane import Hyperplane
from .points import Point, to_point, to_rational


@dataclass(frozen=True)
class Orthotope:
    mins: Point
    maxs: Point

    @classmethod
    def from_points(cls, points: Iterable[Sequence[Fraction]]) -> "Orthotope":
        pts = [to_point(p) for p in points]
        if not pts:
            raise GeometryError("Cannot bound an empty point set")
        axes = list(zip(*pts))
        return cls(tuple(min(a) for a in axes), tuple(max(a) for a in axes))

    @property
    def dimension(self) -> int:
        return len(self.mins)

    @property
    def center(self) -> Point:
        return tuple((lo + hi) / 2 for lo, hi in zip(self.mins, self.maxs))

    def union(self, other: "Orthotope") -> "Orthotope":
        return Orthotope(
            tuple(min(a, b) for a, b in zip(self.mins, other.mins)),
            tuple(max(a, b) for a, b in zip(self.maxs, other.maxs)),
        )

    def intersects(self, other: "Orthotope") -> bool:
        """Inclusive overlap test; touching bounds count as overlapping."""
        return all(
            lo <= o_hi and o_lo <= hi
            for lo, hi, o_lo, o_hi in zip(self.mins, self.maxs, other.mins, other.maxs)
        )

    def contains(self, point: Sequence[Fraction]) -> bool:
        return all(lo <= c <= hi for lo, hi, c in zip(self.mins, self.maxs, point))

    def padded(self, margin) -> "Orthotope":
        m = to_rational(margin)
        return Orthotope(tuple(c - m for c in self.mins), tuple(c + m for c in self.maxs))

    def inward_planes(self) -> List[Hyperplane]:
        """One plane per face, each facing into the box."""
        planes = []
        for axis in range(self.dimension):
            unit = tuple(Fraction(1 if i == axis else 0) for i in range(self.dimension))
            neg_unit = tuple(-c for c in unit)
            planes.append(Hyperplane(unit, -self.mins[axis]))
            planes.append(Hyperplane(neg_unit, self.maxs[axis]))
        return planes
