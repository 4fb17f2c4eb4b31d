"""
BSP tree model and traversal.

A node is either a BspLeaf (a mutually convex surface set) or a BspBranch
(a partition plane with front and back children).  Trees are immutable
once built.

NodeArena flattens a tree into post-order with integer child indices.
It is the shared indexing used by portals, leak detection and the
serializer, so none of them depends on object identity.
"""

from __future__ import annotations
from dataclasses import dataclass
from fractions import Fraction
from typing import Callable, Iterator, List, Optional, Sequence, Tuple, Union

from ..geometry import Hyperplane, Orthotope
from .surface import Surface


@dataclass(frozen=True)
class BspLeaf:
    surfaces: Tuple[Surface, ...]
    depth: int = 0

    def __post_init__(self):
        object.__setattr__(self, "surfaces", tuple(self.surfaces))

    @property
    def is_leaf(self) -> bool:
        return True

    @property
    def surface_count(self) -> int:
        return len(self.surfaces)


@dataclass(frozen=True)
class BspBranch:
    plane: Hyperplane
    front: "BspNode"
    back: "BspNode"
    depth: int = 0

    @property
    def is_leaf(self) -> bool:
        return False

    @property
    def surface_count(self) -> int:
        return 0


BspNode = Union[BspLeaf, BspBranch]
Visitor = Callable[[BspNode], None]


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------

def node_count(node: BspNode) -> int:
    if node.is_leaf:
        return 1
    return 1 + node_count(node.front) + node_count(node.back)


def pre_order(node: BspNode, callback: Visitor) -> None:
    callback(node)
    if not node.is_leaf:
        pre_order(node.front, callback)
        pre_order(node.back, callback)


def in_order(node: BspNode, callback: Visitor) -> None:
    if node.is_leaf:
        callback(node)
        return
    in_order(node.front, callback)
    callback(node)
    in_order(node.back, callback)


def post_order(node: BspNode, callback: Visitor) -> None:
    if not node.is_leaf:
        post_order(node.front, callback)
        post_order(node.back, callback)
    callback(node)


def iter_leaves(node: BspNode) -> Iterator[BspLeaf]:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.is_leaf:
            yield current
        else:
            stack.append(current.back)
            stack.append(current.front)


def tree_depth(node: BspNode) -> int:
    return max(leaf.depth for leaf in iter_leaves(node))


def find_leaf(node: BspNode, point: Sequence[Fraction]) -> BspLeaf:
    """Descend to the leaf containing a point; points on a plane go front."""
    while not node.is_leaf:
        node = node.front if node.plane.determinant(point) >= 0 else node.back
    return node


def tree_bounds(node: BspNode) -> Orthotope:
    return Orthotope.from_points(
        p for leaf in iter_leaves(node) for s in leaf.surfaces for p in s.facet.points
    )


# ---------------------------------------------------------------------------
# Arena
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NodeArena:
    """A tree flattened into post-order.

    Attributes:
        nodes: Nodes in post-order; the root is last
        children: (front, back) indices for branches, None for leaves
    """
    nodes: Tuple[BspNode, ...]
    children: Tuple[Optional[Tuple[int, int]], ...]

    @classmethod
    def build(cls, root: BspNode) -> "NodeArena":
        nodes: List[BspNode] = []
        children: List[Optional[Tuple[int, int]]] = []
        # Each frame is (node, expanded); finished child indices pile up on results.
        stack: List[Tuple[BspNode, bool]] = [(root, False)]
        results: List[int] = []
        while stack:
            node, expanded = stack.pop()
            if node.is_leaf:
                nodes.append(node)
                children.append(None)
                results.append(len(nodes) - 1)
            elif not expanded:
                stack.append((node, True))
                stack.append((node.back, False))
                stack.append((node.front, False))
            else:
                back = results.pop()
                front = results.pop()
                nodes.append(node)
                children.append((front, back))
                results.append(len(nodes) - 1)
        return cls(tuple(nodes), tuple(children))

    @property
    def root(self) -> int:
        return len(self.nodes) - 1

    def __len__(self) -> int:
        return len(self.nodes)

    def is_leaf(self, index: int) -> bool:
        return self.children[index] is None

    def leaf_indices(self) -> List[int]:
        return [i for i, c in enumerate(self.children) if c is None]

    def locate(self, point: Sequence[Fraction]) -> int:
        """Arena index of the leaf containing a point."""
        index = self.root
        while self.children[index] is not None:
            front, back = self.children[index]
            plane = self.nodes[index].plane
            index = front if plane.determinant(point) >= 0 else back
        return index
