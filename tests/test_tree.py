"""Tests for tree traversal and the post-order arena."""

from fractions import Fraction

import pytest

from levelcompiler.geometry import Orthotope
from levelcompiler.spatial import (
    NodeArena, build_tree, find_leaf, in_order, iter_leaves, node_count, post_order,
    pre_order, tree_bounds, tree_depth,
)


@pytest.fixture
def cross_tree(dim2, wall):
    """Branch(y=0, front=Branch(x=0, leaf, leaf), back=leaf)."""
    return build_tree([wall((-1, 0), (1, 0)), wall((0, -1), (0, 1))], dim2)


def names(tree):
    """Label nodes R, A, L1, L2, L3 by structure."""
    root = tree
    inner = tree.front
    return {
        id(root): "R", id(inner): "A",
        id(inner.front): "L1", id(inner.back): "L2", id(root.back): "L3",
    }


def visit(order, tree):
    labels = names(tree)
    seen = []
    order(tree, lambda node: seen.append(labels[id(node)]))
    return seen


def test_shape(cross_tree):
    assert not cross_tree.front.is_leaf
    assert cross_tree.front.front.is_leaf
    assert cross_tree.front.back.is_leaf
    assert cross_tree.back.is_leaf


def test_traversal_orders(cross_tree):
    assert visit(pre_order, cross_tree) == ["R", "A", "L1", "L2", "L3"]
    assert visit(in_order, cross_tree) == ["L1", "A", "L2", "R", "L3"]
    assert visit(post_order, cross_tree) == ["L1", "L2", "A", "L3", "R"]


def test_counts_and_depth(cross_tree):
    assert node_count(cross_tree) == 5
    assert len(list(iter_leaves(cross_tree))) == 3
    assert tree_depth(cross_tree) == 2
    assert cross_tree.front.depth == 1


def test_bounds(cross_tree):
    assert tree_bounds(cross_tree) == Orthotope((-1, -1), (1, 1))


def test_find_leaf(cross_tree):
    half = Fraction(1, 2)
    assert find_leaf(cross_tree, (-half, half)) is cross_tree.front.front
    assert find_leaf(cross_tree, (half, half)) is cross_tree.front.back
    assert find_leaf(cross_tree, (half, -half)) is cross_tree.back
    # on both planes: front each time
    assert find_leaf(cross_tree, (0, 0)) is cross_tree.front.front


class TestNodeArena:

    def test_post_order_layout(self, cross_tree):
        arena = NodeArena.build(cross_tree)
        assert len(arena) == 5
        assert arena.root == 4
        assert arena.nodes[arena.root] is cross_tree
        assert arena.children == (None, None, (0, 1), None, (2, 3))
        assert arena.leaf_indices() == [0, 1, 3]
        assert arena.is_leaf(3) and not arena.is_leaf(2)

    def test_matches_post_order_traversal(self, cross_tree):
        seen = []
        post_order(cross_tree, seen.append)
        arena = NodeArena.build(cross_tree)
        assert all(a is b for a, b in zip(arena.nodes, seen))

    def test_locate(self, cross_tree):
        arena = NodeArena.build(cross_tree)
        half = Fraction(1, 2)
        assert arena.locate((-half, half)) == 0
        assert arena.locate((half, half)) == 1
        assert arena.locate((half, -half)) == 3

    def test_single_leaf(self, dim2, wall):
        tree = build_tree([wall((0, 0), (1, 0))], dim2)
        arena = NodeArena.build(tree)
        assert arena.root == 0
        assert arena.children == (None,)
        assert arena.locate((5, 5)) == 0
