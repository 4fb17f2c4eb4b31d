"""
2D annotated graph source.

Reads and writes the JSON graph format used for 2D levels:

    {
      "structure": {"directed": false, "vertex_count": 3, "edges": [[0, 1], [1, 2]]},
      "graph_metadata": {},
      "vertex_metadata": [{"xy": "0,0"}, {"xy": "4,0"}, {"xy": "4,3"}],
      "edge_metadata": [{"room": "hall"}, {"passage": "true"}]
    }

Every edge becomes a wall surface running from its first vertex to its
second.  Edge metadata is carried onto the surface; the reserved keys are
"room" (which room the wall bounds) and "passage" (an open doorway rather
than a wall).
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from ..errors import GeometryError, InputError
from ..geometry import Facet2D, Point, format_point, parse_point
from ..spatial import Material, Surface

logger = logging.getLogger(__name__)

VERTEX_LOCATION_KEY = "xy"


@dataclass
class Graph2D:
    directed: bool = False
    vertices: List[Point] = field(default_factory=list)
    edges: List[Tuple[int, int]] = field(default_factory=list)
    graph_metadata: Dict[str, str] = field(default_factory=dict)
    vertex_metadata: List[Dict[str, str]] = field(default_factory=list)
    edge_metadata: List[Dict[str, str]] = field(default_factory=list)

    def add_vertex(self, point: Point, **metadata: str) -> int:
        self.vertices.append(point)
        self.vertex_metadata.append(dict(metadata))
        return len(self.vertices) - 1

    def add_edge(self, start: int, end: int, **metadata: str) -> int:
        self.edges.append((start, end))
        self.edge_metadata.append(dict(metadata))
        return len(self.edges) - 1

    def to_dict(self) -> Dict[str, Any]:
        vertex_metadata = []
        for point, meta in zip(self.vertices, self.vertex_metadata):
            entry = dict(meta)
            entry[VERTEX_LOCATION_KEY] = format_point(point)
            vertex_metadata.append(entry)
        return {
            "structure": {
                "directed": self.directed,
                "vertex_count": len(self.vertices),
                "edges": [list(e) for e in self.edges],
            },
            "graph_metadata": dict(self.graph_metadata),
            "vertex_metadata": vertex_metadata,
            "edge_metadata": [dict(m) for m in self.edge_metadata],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

def _require(data: Dict[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    if not isinstance(value, kind):
        raise InputError(f"Graph JSON: '{key}' missing or not a {kind.__name__}")
    return value


def _string_map(value: Any, what: str) -> Dict[str, str]:
    if not isinstance(value, dict):
        raise InputError(f"Graph JSON: {what} is not an object")
    return {str(k): v if isinstance(v, str) else json.dumps(v) for k, v in value.items()}


def graph_from_dict(data: Any) -> Graph2D:
    """Validate and convert parsed JSON into a Graph2D.

    Raises:
        InputError: On any structural problem (missing sections, null
            entries, count mismatches, bad edge references, bad or
            duplicate vertex coordinates)
    """
    if not isinstance(data, dict):
        raise InputError("Graph JSON: top level is not an object")

    structure = _require(data, "structure", dict)
    graph_metadata = _string_map(_require(data, "graph_metadata", dict), "graph_metadata")
    vertex_metadata = _require(data, "vertex_metadata", list)
    edge_metadata = _require(data, "edge_metadata", list)

    directed = structure.get("directed", False)
    vertex_count = structure.get("vertex_count")
    edges = structure.get("edges")
    if not isinstance(directed, bool) or not isinstance(vertex_count, int) \
            or not isinstance(edges, list):
        raise InputError("Graph JSON: malformed structure section")
    if len(vertex_metadata) != vertex_count:
        raise InputError(f"Graph JSON: {len(vertex_metadata)} vertex metadata entries "
                         f"for {vertex_count} vertices")
    if len(edge_metadata) != len(edges):
        raise InputError(f"Graph JSON: {len(edge_metadata)} edge metadata entries "
                         f"for {len(edges)} edges")

    graph = Graph2D(directed=directed, graph_metadata=graph_metadata)
    seen: Dict[Point, int] = {}
    for index, raw in enumerate(vertex_metadata):
        meta = _string_map(raw, f"vertex_metadata[{index}]")
        location = meta.pop(VERTEX_LOCATION_KEY, None)
        if location is None:
            raise InputError(f"Graph JSON: vertex {index} has no coordinates")
        point = parse_point(location)
        if len(point) != 2:
            raise InputError(f"Graph JSON: vertex {index} is not two-dimensional")
        if point in seen:
            raise InputError(f"Graph JSON: vertices {seen[point]} and {index} "
                             f"share coordinates {location}")
        seen[point] = index
        graph.add_vertex(point, **meta)

    for index, (raw_edge, raw_meta) in enumerate(zip(edges, edge_metadata)):
        if not isinstance(raw_edge, list) or len(raw_edge) != 2 \
                or not all(isinstance(v, int) and not isinstance(v, bool) for v in raw_edge):
            raise InputError(f"Graph JSON: edge {index} is not a vertex pair")
        start, end = raw_edge
        if not (0 <= start < vertex_count and 0 <= end < vertex_count):
            raise InputError(f"Graph JSON: edge {index} references a missing vertex")
        if start == end:
            raise InputError(f"Graph JSON: edge {index} is a loop on vertex {start}")
        graph.add_edge(start, end, **_string_map(raw_meta, f"edge_metadata[{index}]"))

    return graph


def parse_graph(text: str) -> Graph2D:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InputError(f"Graph JSON: {e}") from None
    return graph_from_dict(data)


def load_graph(path: Union[str, Path]) -> Graph2D:
    with open(path, 'r', encoding='utf-8') as f:
        return parse_graph(f.read())


# ---------------------------------------------------------------------------
# Surfaces
# ---------------------------------------------------------------------------

def surfaces_from_graph(graph: Graph2D) -> List[Surface]:
    """One surface per edge; passages are two-sided, walls are solid-backed."""
    surfaces = []
    for index, ((start, end), meta) in enumerate(zip(graph.edges, graph.edge_metadata)):
        try:
            facet = Facet2D(graph.vertices[start], graph.vertices[end])
        except GeometryError as e:
            raise InputError(f"Edge {index}: {e}") from None
        surface = Surface(facet=facet, metadata=meta)
        if surface.is_passage:
            surface = Surface(facet=facet, front_material=Material.AIR,
                              back_material=Material.AIR, metadata=meta)
        surfaces.append(surface)
    logger.info("Graph: %d vertices, %d edges -> %d surfaces",
                len(graph.vertices), len(graph.edges), len(surfaces))
    return surfaces
