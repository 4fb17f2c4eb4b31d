"""
Tree export utilities for partition debugging.

Provides export functions to inspect a compiled tree in:
- DOT format (Graphviz) for visual inspection of the partition
- JSON format for programmatic analysis and regression diffs

Nodes are labelled by their post-order arena index.
"""

from typing import Any, Dict, List, Optional
import json

from ...geometry import format_point
from ...spatial import BspNode, Material, NodeArena, node_count, tree_depth


def _plane_label(plane) -> str:
    return " ".join(f"{float(c):g}" for c in plane.coefficients)


def export_tree_dot(tree: BspNode, name: str = "BspTree") -> str:
    """Export a tree as Graphviz DOT format.

    Args:
        tree: Root of a compiled tree
        name: Graph name

    Returns:
        DOT format string for visualization with Graphviz or online viewers
    """
    arena = NodeArena.build(tree)
    lines = [f'digraph {name} {{']
    lines.append('  node [shape=box, style=filled];')
    lines.append('')

    for index, node in enumerate(arena.nodes):
        if arena.is_leaf(index):
            rooms = sorted({s.room for s in node.surfaces if s.room is not None})
            label_lines = [f"LEAF {index}", f"surfaces: {node.surface_count}"]
            if rooms:
                label_lines.append(f"room: {', '.join(rooms)}")
            label = '\\n'.join(label_lines)
            lines.append(f'  node_{index} [label="{label}" fillcolor="#90EE90"];')
        else:
            label = f"BRANCH {index}\\nplane: {_plane_label(node.plane)}"
            lines.append(f'  node_{index} [label="{label}" fillcolor="#D3D3D3"];')

    lines.append('')

    for index, children in enumerate(arena.children):
        if children is None:
            continue
        front, back = children
        lines.append(f'  node_{index} -> node_{front} [label="front"];')
        lines.append(f'  node_{index} -> node_{back} [label="back", style=dashed];')

    lines.append('}')
    return '\n'.join(lines)


def _surface_dict(surface) -> Dict[str, Any]:
    return {
        'points': [format_point(p) for p in surface.facet.points],
        'front_material': Material(surface.front_material).name,
        'back_material': Material(surface.back_material).name,
        'metadata': dict(surface.metadata),
    }


def export_tree_json(tree: BspNode, metadata: Optional[Dict[str, Any]] = None) -> str:
    """Export a tree as JSON with statistics.

    Plane coefficients are written as exact fraction strings.

    Args:
        tree: Root of a compiled tree
        metadata: Extra values for the metadata section (level name etc.)

    Returns:
        JSON string with the nodes and summary statistics
    """
    arena = NodeArena.build(tree)
    nodes: List[Dict[str, Any]] = []
    for index, node in enumerate(arena.nodes):
        if arena.is_leaf(index):
            nodes.append({
                'index': index,
                'kind': 'leaf',
                'depth': node.depth,
                'surfaces': [_surface_dict(s) for s in node.surfaces],
            })
        else:
            front, back = arena.children[index]
            nodes.append({
                'index': index,
                'kind': 'branch',
                'depth': node.depth,
                'plane': [str(c) for c in node.plane.coefficients],
                'front': front,
                'back': back,
            })

    output = {
        'metadata': {
            'version': '1.0',
            'generator': 'levelcompiler',
            **(metadata or {}),
        },
        'statistics': {
            'node_count': node_count(tree),
            'leaf_count': len(arena.leaf_indices()),
            'depth': tree_depth(tree),
            'root': arena.root,
        },
        'nodes': nodes,
    }
    return json.dumps(output, indent=2)
