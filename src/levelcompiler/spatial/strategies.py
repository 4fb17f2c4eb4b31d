"""
Partition plane selection.

Candidate planes are always the distinct planes of the surfaces being
partitioned; no new planes are invented.  Two strategies:

- ExhaustivePartitioner: scores every candidate, favouring few splits
  over balance, and rejects candidates that would leave a side empty
- AxialPartitioner: cheap; prefers axis-aligned planes near the middle

Ties go to the first candidate in surface order.  That order comes from
the geometry source, so different sources describing the same geometry
may produce differently shaped (but equally valid) trees.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from ..geometry import Hyperplane, Orthotope
from .surface import Surface

DEFAULT_IMBALANCE_WEIGHT = 1
DEFAULT_SPLIT_WEIGHT = 10


@dataclass(frozen=True)
class PlaneScore:
    """Surface counts for one candidate plane."""
    front: int = 0
    back: int = 0
    splits: int = 0

    @property
    def rejected(self) -> bool:
        """True if partitioning on this plane would leave a side empty."""
        return self.splits == 0 and (self.front == 0 or self.back == 0)

    def score(self, imbalance_weight: int = DEFAULT_IMBALANCE_WEIGHT,
              split_weight: int = DEFAULT_SPLIT_WEIGHT) -> int:
        return abs(self.front - self.back) * imbalance_weight + self.splits * split_weight


def score_plane(surfaces: Iterable[Surface], plane: Hyperplane) -> PlaneScore:
    front = back = splits = 0
    for surface in surfaces:
        lo, hi = surface.facet.classify(plane)
        if lo < 0 < hi:
            splits += 1
        elif hi > 0:
            front += 1
        else:
            back += 1
    return PlaneScore(front, back, splits)


def candidate_planes(surfaces: Iterable[Surface]) -> List[Hyperplane]:
    """Distinct surface planes in first-seen order."""
    return list(dict.fromkeys(s.plane for s in surfaces))


class PartitionStrategy(ABC):
    """Chooses the plane a surface set is partitioned on."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def select_plane(self, surfaces: Sequence[Surface]) -> Optional[Hyperplane]:
        """Return the chosen plane, or None if no candidate partitions the set."""
        pass


class ExhaustivePartitioner(PartitionStrategy):

    def __init__(self, imbalance_weight: int = DEFAULT_IMBALANCE_WEIGHT,
                 split_weight: int = DEFAULT_SPLIT_WEIGHT):
        self.imbalance_weight = imbalance_weight
        self.split_weight = split_weight

    @property
    def name(self) -> str:
        return "exhaustive"

    def select_plane(self, surfaces: Sequence[Surface]) -> Optional[Hyperplane]:
        best_plane = None
        best_score = None
        for plane in candidate_planes(surfaces):
            counts = score_plane(surfaces, plane)
            if counts.rejected:
                continue
            score = counts.score(self.imbalance_weight, self.split_weight)
            if best_score is None or score < best_score:
                best_plane, best_score = plane, score
        return best_plane


class AxialPartitioner(PartitionStrategy):
    """Prefers axis-aligned planes closest to the centre of the surfaces.

    Falls back to non-axial planes in surface order.  The first candidate
    with a surface strictly on each side is taken without scoring.
    """

    @property
    def name(self) -> str:
        return "axial"

    def select_plane(self, surfaces: Sequence[Surface]) -> Optional[Hyperplane]:
        options = candidate_planes(surfaces)
        axial = [p for p in options if p.is_axial]
        non_axial = [p for p in options if not p.is_axial]

        if len(axial) > 1:
            center = Orthotope.from_points(
                p for s in surfaces for p in s.facet.points
            ).center
            axial.sort(key=lambda p: abs(p.determinant(center)))

        for plane in axial + non_axial:
            has_front = has_back = False
            for surface in surfaces:
                lo, hi = surface.facet.classify(plane)
                if lo == -1:
                    has_back = True
                if hi == 1:
                    has_front = True
                if has_front and has_back:
                    return plane
        return None


STRATEGIES = {
    "exhaustive": ExhaustivePartitioner,
    "axial": AxialPartitioner,
}


def get_strategy(name: str, **kwargs) -> PartitionStrategy:
    try:
        strategy_cls = STRATEGIES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown partition strategy: {name}") from None
    if strategy_cls is AxialPartitioner:
        return strategy_cls()
    return strategy_cls(**kwargs)
