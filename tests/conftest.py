"""Shared fixtures for the levelcompiler tests."""

import json

import pytest

from levelcompiler.geometry import Facet2D, Orthotope
from levelcompiler.spatial import Dimension2D, Dimension3D, Material, Surface


def _wall(start, end, room="hall", **metadata):
    if room is not None:
        metadata["room"] = room
    return Surface(facet=Facet2D(start, end), metadata=metadata)


def _box_surfaces(mins, maxs, dimension, drop=(), room="room"):
    """Inward-facing walls of an axis-aligned box; drop lists face indices to omit.

    Face order follows Orthotope.inward_planes(): min x, max x, min y, max y[, min z, max z].
    """
    planes = Orthotope(tuple(mins), tuple(maxs)).inward_planes()
    surfaces = []
    for i, plane in enumerate(planes):
        if i in drop:
            continue
        facet = dimension.facetize(plane)
        for j, other in enumerate(planes):
            if i != j:
                facet, _ = facet.split(other)
        surfaces.append(Surface(facet=facet, front_material=Material.AIR,
                                back_material=Material.SOLID, metadata={"room": room}))
    return surfaces


L_ROOM_OUTLINE = [(0, 0), (8, 0), (8, 4), (4, 4), (4, 8), (0, 8)]


@pytest.fixture
def dim2():
    return Dimension2D()


@pytest.fixture
def dim3():
    return Dimension3D()


@pytest.fixture
def wall():
    """Factory for 2D wall surfaces: wall(start, end, room="hall", **metadata)."""
    return _wall


@pytest.fixture
def box_surfaces():
    return _box_surfaces


@pytest.fixture
def l_room():
    """Counter-clockwise walls of an L-shaped room; the reflex corner is (4, 4)."""
    count = len(L_ROOM_OUTLINE)
    return [_wall(L_ROOM_OUTLINE[i], L_ROOM_OUTLINE[(i + 1) % count]) for i in range(count)]


@pytest.fixture
def l_room_graph_data():
    count = len(L_ROOM_OUTLINE)
    return {
        "structure": {
            "directed": True,
            "vertex_count": count,
            "edges": [[i, (i + 1) % count] for i in range(count)],
        },
        "graph_metadata": {"name": "L room"},
        "vertex_metadata": [{"xy": f"{x},{y}"} for x, y in L_ROOM_OUTLINE],
        "edge_metadata": [{"room": "hall"} for _ in range(count)],
    }


@pytest.fixture
def l_room_graph_file(tmp_path, l_room_graph_data):
    path = tmp_path / "l_room.json"
    path.write_text(json.dumps(l_room_graph_data), encoding="utf-8")
    return path


BOX_MAP = """// a single floor slab with a player start above it
{
"classname" "worldspawn"
"room" "hall"
// floor
{
( -64 -64 -16 ) ( -64 -63 -16 ) ( -64 -64 -15 ) GROUND1_6 0 0 0 1 1
( -64 -64 -16 ) ( -64 -64 -15 ) ( -63 -64 -16 ) GROUND1_6 0 0 0 1 1
( -64 -64 -16 ) ( -63 -64 -16 ) ( -64 -63 -16 ) GROUND1_6 0 0 0 1 1
( 64 64 0 ) ( 64 65 0 ) ( 65 64 0 ) GROUND1_6 0 0 0 1 1
( 64 64 0 ) ( 65 64 0 ) ( 64 64 1 ) GROUND1_6 0 0 0 1 1
( 64 64 0 ) ( 64 64 1 ) ( 64 65 0 ) GROUND1_6 0 0 0 1 1
}
}
{
"classname" "info_player_start"
"origin" "0 0 32"
}
"""


@pytest.fixture
def box_map_text():
    return BOX_MAP


def _brush_text(mins, maxs, texture="CRATE1_5"):
    """Map text for an axis-aligned box brush with outward-facing planes."""
    x0, y0, z0 = mins
    x1, y1, z1 = maxs
    faces = [
        ((x0, y0, z0), (x0, y0 + 1, z0), (x0, y0, z0 + 1)),
        ((x0, y0, z0), (x0, y0, z0 + 1), (x0 + 1, y0, z0)),
        ((x0, y0, z0), (x0 + 1, y0, z0), (x0, y0 + 1, z0)),
        ((x1, y1, z1), (x1, y1 + 1, z1), (x1 + 1, y1, z1)),
        ((x1, y1, z1), (x1 + 1, y1, z1), (x1, y1, z1 + 1)),
        ((x1, y1, z1), (x1, y1, z1 + 1), (x1, y1 + 1, z1)),
    ]
    lines = ["{"]
    for face in faces:
        points = " ".join("( " + " ".join(str(c) for c in p) + " )" for p in face)
        lines.append(f"{points} {texture} 0 0 0 1 1")
    lines.append("}")
    return "\n".join(lines)


@pytest.fixture
def brush_text():
    return _brush_text
