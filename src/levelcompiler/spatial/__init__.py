"""
Binary space partitioning over exact surfaces.

Provides:
- Surface and Material: the partitioned boundary and its side densities
- BspBuilder / build_tree: recursive tree construction
- ExhaustivePartitioner / AxialPartitioner: partition plane strategies
- construct_solid_geometry: brush CSG
- portalize / find_leaks / cull_outside: leaf connectivity and leak checks
"""

from .materials import Material, is_two_sided
from .surface import Surface
from .dimension import Dimension, Dimension2D, Dimension3D, dimension_for
from .tree import (
    BspLeaf, BspBranch, BspNode, NodeArena,
    node_count, pre_order, in_order, post_order, iter_leaves, find_leaf,
    tree_bounds, tree_depth,
)
from .strategies import (
    PartitionStrategy, ExhaustivePartitioner, AxialPartitioner, PlaneScore,
    score_plane, get_strategy,
)
from .builder import BspBuilder, build_tree, are_convex, all_convex, partition_surfaces
from .csg import Brush, make_brush, construct_solid_geometry, visible_surfaces
from .portals import Portal, portalize
from .leaks import CellComplex, build_cells, FloodResult, find_leaks, cull_outside, default_exterior_point

__all__ = [
    'Material', 'is_two_sided', 'Surface',
    'Dimension', 'Dimension2D', 'Dimension3D', 'dimension_for',
    'BspLeaf', 'BspBranch', 'BspNode', 'NodeArena',
    'node_count', 'pre_order', 'in_order', 'post_order', 'iter_leaves', 'find_leaf',
    'tree_bounds', 'tree_depth',
    'PartitionStrategy', 'ExhaustivePartitioner', 'AxialPartitioner', 'PlaneScore',
    'score_plane', 'get_strategy',
    'BspBuilder', 'build_tree', 'are_convex', 'all_convex', 'partition_surfaces',
    'Brush', 'make_brush', 'construct_solid_geometry', 'visible_surfaces',
    'Portal', 'portalize',
    'CellComplex', 'build_cells', 'FloodResult', 'find_leaks', 'cull_outside', 'default_exterior_point',
]
