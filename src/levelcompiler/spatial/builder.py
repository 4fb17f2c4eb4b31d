"""
Recursive BSP tree construction.

Build(surfaces):
- empty input is an InputError
- a mutually convex set becomes a leaf
- otherwise a plane is chosen (hint surface first, then the strategy),
  every surface is split against it, and both halves are built in turn

Construction can be exponential on adversarial input, so the builder
checks a cancellation callback and an optional time limit on every
recursive call.
"""

from __future__ import annotations
import logging
import time
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..errors import (
    BuildCancelledError, ImbalancedPartitionFailure, InputError, PartitionFailure,
)
from ..geometry import Facet, Hyperplane
from .dimension import Dimension
from .strategies import ExhaustivePartitioner, PartitionStrategy, score_plane
from .surface import Surface
from .tree import BspBranch, BspLeaf, BspNode, node_count

logger = logging.getLogger(__name__)


def are_convex(a: Facet, b: Facet) -> bool:
    """True if neither facet lies (even partly) behind the other's plane."""
    a_min, _ = a.classify(b.plane)
    b_min, _ = b.classify(a.plane)
    return a_min >= 0 and b_min >= 0


def all_convex(surfaces: Sequence[Surface]) -> bool:
    for i in range(len(surfaces)):
        for j in range(i + 1, len(surfaces)):
            if not are_convex(surfaces[i].facet, surfaces[j].facet):
                return False
    return True


def partition_surfaces(surfaces: Iterable[Surface],
                       plane: Hyperplane) -> Tuple[List[Surface], List[Surface]]:
    front: List[Surface] = []
    back: List[Surface] = []
    for surface in surfaces:
        front_piece, back_piece = surface.split(plane)
        if front_piece is not None:
            front.append(front_piece)
        if back_piece is not None:
            back.append(back_piece)
    return front, back


class BspBuilder:
    """Builds BSP trees for one dimension with one partition strategy.

    Args:
        dimension: Dimension adapter (hint detection)
        strategy: Plane selection strategy; exhaustive by default
        cancel_check: Called on every recursion; returning True cancels
        time_limit: Seconds allowed for one build, or None
        max_depth: Deepest branch allowed, or None for no limit
    """

    def __init__(self, dimension: Dimension,
                 strategy: Optional[PartitionStrategy] = None,
                 cancel_check: Optional[Callable[[], bool]] = None,
                 time_limit: Optional[float] = None,
                 max_depth: Optional[int] = None):
        self.dimension = dimension
        self.strategy = strategy or ExhaustivePartitioner()
        self.cancel_check = cancel_check
        self.time_limit = time_limit
        self.max_depth = max_depth
        self._deadline: Optional[float] = None
        self.partition_count = 0
        self.split_count = 0

    def build(self, surfaces: Iterable[Surface]) -> BspNode:
        if surfaces is None:
            raise InputError("No surfaces to partition")
        surface_list = list(surfaces)
        if not surface_list:
            raise InputError("No surfaces to partition")

        self.partition_count = 0
        self.split_count = 0
        self._deadline = time.monotonic() + self.time_limit if self.time_limit else None

        start = time.monotonic()
        root = self._build_node(surface_list, 0)
        logger.info("Built BSP tree from %d surfaces: %d nodes, %d partitions, %d splits in %.2fs",
                    len(surface_list), node_count(root), self.partition_count,
                    self.split_count, time.monotonic() - start)
        return root

    def _check_cancellation(self):
        if self.cancel_check is not None and self.cancel_check():
            raise BuildCancelledError("Tree build cancelled")
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise BuildCancelledError(f"Tree build exceeded time limit of {self.time_limit}s")

    def _build_node(self, surfaces: List[Surface], depth: int) -> BspNode:
        self._check_cancellation()

        if all_convex(surfaces):
            return BspLeaf(tuple(surfaces), depth)

        if self.max_depth is not None and depth >= self.max_depth:
            raise PartitionFailure(f"Maximum tree depth {self.max_depth} reached "
                                   f"with {len(surfaces)} non-convex surfaces")

        started = time.perf_counter()
        plane, surfaces = self._choose_plane(surfaces, depth)
        if plane is None:
            raise PartitionFailure(f"Failed to select partition plane for "
                                   f"{len(surfaces)} surfaces at depth {depth}")
        selected = time.perf_counter()

        front, back = partition_surfaces(surfaces, plane)
        splits = len(front) + len(back) - len(surfaces)
        logger.debug("Depth %d: plane %s chosen in %.1fms; %d surfaces -> %d front, %d back (%d split)",
                     depth, plane, (selected - started) * 1000.0, len(surfaces),
                     len(front), len(back), splits)

        if not front or not back:
            raise ImbalancedPartitionFailure(
                f"Partition plane {plane} does not partition surfaces at depth {depth}")

        self.partition_count += 1
        self.split_count += splits
        front_child = self._build_node(front, depth + 1)
        back_child = self._build_node(back, depth + 1)
        return BspBranch(plane, front_child, back_child, depth)

    def _choose_plane(self, surfaces: List[Surface],
                      depth: int) -> Tuple[Optional[Hyperplane], List[Surface]]:
        """Pick the partition plane, honouring a hint surface for this depth.

        A hint surface is consumed: it is removed from the set and its plane
        used directly.  If that plane would leave one side empty the hint is
        ignored and the strategy decides.
        """
        for index, surface in enumerate(surfaces):
            if not self.dimension.is_hint_surface(surface, depth):
                continue
            remaining = surfaces[:index] + surfaces[index + 1:]
            if not score_plane(remaining, surface.plane).rejected:
                logger.debug("Depth %d: using hint plane %s", depth, surface.plane)
                return surface.plane, remaining
            logger.debug("Depth %d: hint plane %s does not partition; ignored",
                         depth, surface.plane)
            break
        return self.strategy.select_plane(surfaces), surfaces


def build_tree(surfaces: Iterable[Surface], dimension: Dimension,
               strategy: Optional[PartitionStrategy] = None, **kwargs) -> BspNode:
    """Convenience wrapper around BspBuilder."""
    return BspBuilder(dimension, strategy, **kwargs).build(surfaces)
