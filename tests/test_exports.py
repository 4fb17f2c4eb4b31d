"""Tests for OBJ output and debug tree dumps."""

import json

import pytest

from levelcompiler.conversion import ObjWriter
from levelcompiler.pipeline.debug import export_tree_dot, export_tree_json
from levelcompiler.spatial import build_tree


@pytest.fixture
def l_tree(dim2, l_room):
    return build_tree(l_room, dim2)


class TestObjWriter:

    def test_2d_tree_writes_lines_per_leaf(self, tmp_path, l_tree):
        writer = ObjWriter()
        writer.add_tree(l_tree)
        assert writer.vertex_count == 7
        assert writer.face_count == 7

        path = tmp_path / "l.obj"
        writer.write(str(path))
        text = path.read_text()
        assert "mtllib l.mtl" in text
        assert "g leaf_0" in text and "g leaf_1" in text
        assert "usemtl hall" in text
        assert text.count("\nl ") == 7
        assert "v 8.0000 0.0000 -4.0000" in text
        assert "newmtl hall" in (tmp_path / "l.mtl").read_text()

    def test_3d_faces_are_y_up(self, tmp_path, dim3, box_surfaces):
        writer = ObjWriter()
        writer.add_surfaces(box_surfaces((0, 0, 0), (1, 2, 3), dim3), group="box")
        writer.write(str(tmp_path / "box.obj"), write_mtl=False)
        text = (tmp_path / "box.obj").read_text()
        assert writer.vertex_count == 8
        assert text.count("\nf ") == 6
        assert "v 1.0000 3.0000 -2.0000" in text
        assert "mtllib" not in text
        assert not (tmp_path / "box.mtl").exists()


class TestTreeExport:

    def test_dot(self, l_tree):
        dot = export_tree_dot(l_tree, name="LRoom")
        assert dot.startswith("digraph LRoom {")
        assert 'node_0 [label="LEAF 0\\nsurfaces: 4\\nroom: hall"' in dot
        assert 'node_2 [label="BRANCH 2\\nplane: 0 -1 4"' in dot
        assert 'node_2 -> node_0 [label="front"];' in dot
        assert 'node_2 -> node_1 [label="back", style=dashed];' in dot
        assert dot.endswith("}")

    def test_json(self, l_tree):
        data = json.loads(export_tree_json(l_tree, {"level": "lroom"}))
        assert data["metadata"]["generator"] == "levelcompiler"
        assert data["metadata"]["level"] == "lroom"
        assert data["statistics"] == {"node_count": 3, "leaf_count": 2, "depth": 1, "root": 2}

        root = data["nodes"][2]
        assert root["kind"] == "branch"
        assert root["plane"] == ["0", "-1", "4"]
        assert (root["front"], root["back"]) == (0, 1)

        leaf = data["nodes"][0]
        assert leaf["kind"] == "leaf"
        assert leaf["surfaces"][0] == {
            "points": ["0,0", "8,0"],
            "front_material": "AIR",
            "back_material": "SOLID",
            "metadata": {"room": "hall"},
        }

    def test_json_keeps_exact_fractions(self, dim2, wall):
        tree = build_tree([wall((0, 0), (3, 1)), wall((3, 1), (0, 2)), wall((1, 0), (1, 2))], dim2)
        data = json.loads(export_tree_json(tree))
        planes = [n["plane"] for n in data["nodes"] if n["kind"] == "branch"]
        assert planes
        assert any("/" in c for plane in planes for c in plane)
