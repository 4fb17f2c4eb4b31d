"""
Leak detection and outside culling.

Leaves of a finished tree are unbounded on the sides their walls face
away from, so they are first refined into cells: each leaf is cut along
the planes of its sealing surfaces, leaving one open cell in front of
all its walls and one carved cell behind each.  Portals between cells
have the sealing facets cut out of them, so a flood fill crosses only
real openings.

Flooding from a point known to be outside the level marks every cell the
outside can reach.  If the flood reaches the cell of a point known to be
inside (a player start, a light), the level boundary has a gap: a leak.
Carved cells that neither the outside nor any open cell can reach are
solid; points in them are ignored.

Two-sided surfaces (water, lava, slime, passages) do not seal; only
surfaces backed by SOLID or SKY stop the flood.
"""

from __future__ import annotations
import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ..errors import LeakError
from ..geometry import Hyperplane, Point, to_point
from .dimension import Dimension
from .portals import DEFAULT_PORTAL_PADDING, Portal, portalize
from .tree import BspBranch, BspLeaf, BspNode, NodeArena, tree_bounds

logger = logging.getLogger(__name__)


def leaf_adjacency(portals: Iterable[Portal]) -> Dict[int, List[int]]:
    adjacency: Dict[int, List[int]] = {}
    for portal in portals:
        adjacency.setdefault(portal.front, []).append(portal.back)
        adjacency.setdefault(portal.back, []).append(portal.front)
    return adjacency


def _flood(adjacency: Dict[int, List[int]], seeds: Iterable[int]) -> FrozenSet[int]:
    reached = set(seeds)
    queue = deque(reached)
    while queue:
        cell = queue.popleft()
        for neighbour in adjacency.get(cell, ()):
            if neighbour not in reached:
                reached.add(neighbour)
                queue.append(neighbour)
    return frozenset(reached)


def default_exterior_point(tree: BspNode, padding=DEFAULT_PORTAL_PADDING) -> Point:
    """A point just outside the geometry: the padded bounds' max corner."""
    return tree_bounds(tree).padded(padding).maxs


@dataclass(frozen=True)
class CellComplex:
    """A tree's leaves refined along their sealing surfaces.

    Attributes:
        source: Arena of the original tree
        arena: Arena of the refined tree; its leaves are the cells
        portals: Cell-to-cell portals with sealing facets removed
        owners: Source leaf index of every cell
        open_cells: Cells in front of every wall of their source leaf
        solid: Carved cells cut off from the outside and from every open cell
    """
    source: NodeArena
    arena: NodeArena
    portals: Tuple[Portal, ...]
    owners: Dict[int, int]
    open_cells: FrozenSet[int]
    solid: FrozenSet[int]

    def locate(self, point: Sequence) -> int:
        return self.arena.locate(to_point(point))

    def is_solid(self, point: Sequence) -> bool:
        return self.locate(point) in self.solid

    def flood(self, seeds: Iterable[int]) -> FrozenSet[int]:
        return _flood(leaf_adjacency(self.portals), seeds)

    def open_leaves(self, cells: Iterable[int]) -> FrozenSet[int]:
        """Source leaves whose open cell is among the given cells."""
        return frozenset(self.owners[c] for c in cells if c in self.open_cells)


def _carve_planes(source: NodeArena) -> Dict[int, List[Hyperplane]]:
    # Planes already bounding a leaf would only carve empty slivers.
    bounding: Dict[int, FrozenSet[Hyperplane]] = {source.root: frozenset()}
    for index in reversed(range(len(source))):
        if source.is_leaf(index):
            continue
        front, back = source.children[index]
        plane = source.nodes[index].plane
        bounding[front] = bounding[index] | {plane}
        bounding[back] = bounding[index] | {plane.coplane}

    carve: Dict[int, List[Hyperplane]] = {}
    for index in source.leaf_indices():
        planes: List[Hyperplane] = []
        for surface in source.nodes[index].surfaces:
            plane = surface.plane
            if surface.is_two_sided or plane in bounding[index] or plane in planes:
                continue
            planes.append(plane)
        carve[index] = planes
    return carve


def _carve_leaf(leaf: BspLeaf, planes: List[Hyperplane]) -> BspNode:
    node: BspNode = replace(leaf, depth=leaf.depth + len(planes))
    for offset in reversed(range(len(planes))):
        depth = leaf.depth + offset
        node = BspBranch(planes[offset], node, BspLeaf((), depth + 1), depth)
    return node


def build_cells(tree: BspNode, dimension: Dimension,
                padding=DEFAULT_PORTAL_PADDING) -> CellComplex:
    """Refine a tree's leaves into cells and portalize the result.

    Each source leaf becomes a chain of branches on its sealing planes.
    The chain's first leaf in post-order is the open cell holding all the
    source leaf's surfaces; the rest are the carved cells behind them.
    """
    source = NodeArena.build(tree)
    carve = _carve_planes(source)

    built: List[BspNode] = []
    for index, node in enumerate(source.nodes):
        if source.is_leaf(index):
            built.append(_carve_leaf(node, carve[index]))
        else:
            front, back = source.children[index]
            built.append(BspBranch(node.plane, built[front], built[back], node.depth))
    refined = built[source.root]
    arena = NodeArena.build(refined)

    owners: Dict[int, int] = {}
    open_cells = set()
    cells = iter(arena.leaf_indices())
    for leaf in source.leaf_indices():
        group = [next(cells) for _ in range(len(carve[leaf]) + 1)]
        open_cells.add(group[0])
        owners.update((cell, leaf) for cell in group)

    portals = tuple(portalize(refined, dimension, padding, arena=arena))
    outside = arena.locate(default_exterior_point(tree, padding))
    reachable = _flood(leaf_adjacency(portals), list(open_cells) + [outside])
    solid = frozenset(arena.leaf_indices()) - reachable
    logger.debug("Refined %d leaves into %d cells (%d solid), %d portals",
                 len(source.leaf_indices()), len(owners), len(solid), len(portals))
    return CellComplex(source, arena, portals, owners, frozenset(open_cells), solid)


@dataclass(frozen=True)
class FloodResult:
    """Outcome of a leak-free exterior flood fill.

    Attributes:
        cells: Refined cells the fill ran over
        exterior_leaf: Index of the source leaf holding the exterior point
        void_leaves: Source leaves whose open cell the outside reaches
    """
    cells: CellComplex
    exterior_leaf: int
    void_leaves: FrozenSet[int]

    @property
    def arena(self) -> NodeArena:
        return self.cells.source

    @property
    def visited_count(self) -> int:
        return len(self.void_leaves)

    @property
    def solid_leaves(self) -> FrozenSet[int]:
        return frozenset(self.arena.leaf_indices()) - self.void_leaves


def _format(point: Point) -> str:
    return " ".join(f"{float(c):g}" for c in point)


def _locate_open(cells: CellComplex, points: Iterable[Sequence]) -> Dict[int, Point]:
    located: Dict[int, Point] = {}
    for raw in points:
        point = to_point(raw)
        cell = cells.locate(point)
        if cell in cells.solid:
            logger.warning("Point (%s) lies inside solid geometry; ignored", _format(point))
            continue
        located.setdefault(cell, point)
    return located


def find_leaks(tree: BspNode, dimension: Dimension, exterior_point: Sequence,
               interior_points: Iterable[Sequence] = (),
               padding=DEFAULT_PORTAL_PADDING) -> FloodResult:
    """Flood fill from outside and fail if any interior point is reached.

    Interior points are checked in the order given; the first one the
    fill reaches is reported.

    Raises:
        LeakError: The fill reached the cell of an interior point
    """
    cells = build_cells(tree, dimension, padding)
    exterior = to_point(exterior_point)
    start = cells.locate(exterior)
    if start in cells.solid:
        logger.warning("Exterior point (%s) lies inside solid geometry", _format(exterior))
    targets = _locate_open(cells, interior_points)

    reached = cells.flood([start])
    void = cells.open_leaves(reached)
    for cell, point in targets.items():
        if cell in reached:
            raise LeakError(exterior, len(void), point, cells.owners[cell])

    logger.info("Flood fill: %d of %d leaves reachable from outside, no leak",
                len(void), len(cells.source.leaf_indices()))
    return FloodResult(cells, cells.owners[start], void)


def cull_outside(tree: BspNode, dimension: Dimension,
                 interior_points: Iterable[Sequence],
                 padding=DEFAULT_PORTAL_PADDING) -> Optional[BspNode]:
    """Drop every leaf not reachable from an interior point.

    Branches left with a single child collapse into that child.  Returns
    a new tree, or None if no leaf is reachable.
    """
    cells = build_cells(tree, dimension, padding)
    keep = cells.open_leaves(cells.flood(_locate_open(cells, interior_points)))
    arena = cells.source

    culled: List[Optional[BspNode]] = []
    for index, node in enumerate(arena.nodes):
        if arena.is_leaf(index):
            culled.append(node if index in keep else None)
            continue
        front_index, back_index = arena.children[index]
        front, back = culled[front_index], culled[back_index]
        if front is None and back is None:
            culled.append(None)
        elif front is None:
            culled.append(replace(back, depth=node.depth))
        elif back is None:
            culled.append(replace(front, depth=node.depth))
        elif front is node.front and back is node.back:
            culled.append(node)
        else:
            culled.append(BspBranch(node.plane, front, back, node.depth))

    result = culled[arena.root]
    logger.info("Outside culling kept %d of %d leaves", len(keep), len(arena.leaf_indices()))
    return result
