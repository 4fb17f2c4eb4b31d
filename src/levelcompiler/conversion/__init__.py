"""
Level sources and outputs.

Reads 2D annotated graphs and Quake MAP files into surfaces, and writes
compiled trees as binary level data or OBJ for inspection.
"""

from .graph_format import Graph2D, graph_from_dict, parse_graph, load_graph, surfaces_from_graph
from .map_format import (
    MapPlane, MapBrush, MapEntity, MapWriter, parse_map, load_map, format_map,
)
from .brush_geometry import (
    QuakeDimension, material_from_texture, brush_facets, brush_surfaces,
    world_brushes, entity_origins,
)
from .level_data import (
    IdTable, LevelData, SurfaceRecord, BranchRecord, LeafRecord,
    assign_ids, serialize, serialize_to_bytes, deserialize, write_level, read_level,
)
from .obj_writer import ObjWriter

__all__ = [
    'Graph2D', 'graph_from_dict', 'parse_graph', 'load_graph', 'surfaces_from_graph',
    'MapPlane', 'MapBrush', 'MapEntity', 'MapWriter', 'parse_map', 'load_map', 'format_map',
    'QuakeDimension', 'material_from_texture', 'brush_facets', 'brush_surfaces',
    'world_brushes', 'entity_origins',
    'IdTable', 'LevelData', 'SurfaceRecord', 'BranchRecord', 'LeafRecord',
    'assign_ids', 'serialize', 'serialize_to_bytes', 'deserialize', 'write_level', 'read_level',
    'ObjWriter',
]
