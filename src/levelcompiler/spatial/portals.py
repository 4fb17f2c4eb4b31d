"""
Portal calculation.

A portal is the open boundary between two leaves.  Portals are created at
every branch as a large facet on the partition plane, clipped by the
planes above it, and pushed down both subtrees; each branch splits the
portals that touch it and re-assigns them to its children.  When a
portal reaches a leaf it is cut back to the leaf's open region: the part
behind any sealing (one-sided) surface is clipped away, and a sealing
surface lying on the portal's own plane is subtracted from it.

Leaves are identified by their NodeArena index.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..geometry import Facet, Hyperplane
from .dimension import Dimension
from .surface import Surface
from .tree import BspNode, NodeArena, tree_bounds

logger = logging.getLogger(__name__)

DEFAULT_PORTAL_PADDING = 1


@dataclass(frozen=True)
class Portal:
    facet: Facet
    front: int
    back: int

    def other_side(self, leaf: int) -> int:
        return self.back if self.front == leaf else self.front


def portalize(tree: BspNode, dimension: Dimension,
              padding=DEFAULT_PORTAL_PADDING,
              arena: Optional[NodeArena] = None) -> List[Portal]:
    """Compute the leaf-to-leaf portals of a tree.

    Args:
        tree: Root of the tree
        dimension: Dimension adapter used to facetize partition planes
        padding: Margin added around the surface bounds
        arena: Pre-built arena for the tree, if the caller has one

    Returns:
        Portals whose front and back are arena leaf indices
    """
    arena = arena or NodeArena.build(tree)
    bounds = tree_bounds(tree).padded(padding)
    portals = _fragment(arena, arena.root, [], bounds.inward_planes(), dimension)
    logger.debug("Portalized %d leaves into %d portals",
                 len(arena.leaf_indices()), len(portals))
    return portals


def _fragment(arena: NodeArena, index: int, portals: List[Portal],
              parent_planes: List[Hyperplane], dimension: Dimension) -> List[Portal]:
    touching = [p for p in portals if p.front == index or p.back == index]
    untouched = [p for p in portals if p.front != index and p.back != index]
    node = arena.nodes[index]

    if arena.is_leaf(index):
        sealing = [s for s in node.surfaces if not s.is_two_sided]
        remainders: List[Portal] = []
        for portal in touching:
            remainders.extend(_portal_remainder(_face_towards(portal, index), sealing))
        return untouched + remainders

    front_index, back_index = arena.children[index]
    split: List[Portal] = []
    for portal in touching:
        split.extend(_split_and_reassign(portal, index, node.plane, front_index, back_index))

    new_facet: Optional[Facet] = dimension.facetize(node.plane)
    for plane in parent_planes:
        new_facet = _clip(new_facet, plane)
        if new_facet is None:
            break
    if new_facet is not None:
        split.append(Portal(new_facet, front_index, back_index))

    after_front = _fragment(arena, front_index, split + untouched,
                            parent_planes + [node.plane], dimension)
    return _fragment(arena, back_index, after_front,
                     parent_planes + [node.plane.coplane], dimension)


def _face_towards(portal: Portal, leaf: int) -> Portal:
    if portal.back == leaf:
        return Portal(portal.facet.cofacet, portal.back, portal.front)
    return portal


def _split_and_reassign(portal: Portal, index: int, plane: Hyperplane,
                        front_index: int, back_index: int) -> List[Portal]:
    front_facet, back_facet = portal.facet.split(plane)
    result = []
    if front_facet is not None:
        result.append(Portal(
            front_facet,
            front_index if portal.front == index else portal.front,
            front_index if portal.back == index else portal.back,
        ))
    if back_facet is not None:
        result.append(Portal(
            back_facet,
            back_index if portal.front == index else portal.front,
            back_index if portal.back == index else portal.back,
        ))
    return result


def _clip(facet: Facet, plane: Hyperplane) -> Optional[Facet]:
    front, _ = facet.split(plane)
    return front


def _portal_remainder(portal: Portal, sealing: Sequence[Surface]) -> List[Portal]:
    fragments = [portal.facet]
    for surface in sealing:
        clipped: List[Facet] = []
        for fragment in fragments:
            if fragment.plane == surface.plane:
                clipped.extend(subtract_facet(fragment, surface.facet))
            else:
                remainder = _clip(fragment, surface.plane)
                if remainder is not None:
                    clipped.append(remainder)
        fragments = clipped
        if not fragments:
            break
    return [Portal(f, portal.front, portal.back) for f in fragments]


def subtract_facet(facet: Facet, hole: Facet) -> List[Facet]:
    """The parts of a facet outside a coplanar convex hole."""
    pieces: List[Facet] = []
    remainder: Optional[Facet] = facet
    for edge_plane in hole.edge_planes():
        outside, remainder = remainder.split(edge_plane)
        if outside is not None:
            pieces.append(outside)
        if remainder is None:
            break
    return pieces
