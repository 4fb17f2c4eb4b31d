"""Tests for ID assignment and the binary level-data format."""

import io
import struct

import numpy as np
import pytest

from levelcompiler.conversion import (
    BranchRecord, LeafRecord, SurfaceRecord, assign_ids, deserialize, read_level,
    serialize, serialize_to_bytes, write_level,
)
from levelcompiler.conversion.level_data import MAGIC, NO_ROOM, NO_SURFACE
from levelcompiler.errors import InputError
from levelcompiler.spatial import build_tree


@pytest.fixture
def l_tree(dim2, l_room):
    return build_tree(l_room, dim2)


class TestAssignIds:

    def test_l_room_table(self, l_tree):
        table = assign_ids(l_tree)
        assert table.dimension == 2
        assert table.node_ids == (0, 1, 2)
        assert table.root_id == 2
        assert table.rooms == ("hall",)
        assert table.planes == (l_tree.plane,)
        assert len(table.vertices) == 7
        assert len(table.surfaces) == 7
        assert table.nodes == (
            LeafRecord(0, 4, 0),
            LeafRecord(0, 3, 4),
            BranchRecord(0, 0, 1),
        )
        assert table.surfaces[0] == SurfaceRecord((0, 1), 0)

    def test_leaf_and_branch_ranges_do_not_collide(self, dim2, wall):
        tree = build_tree([wall((-1, 0), (1, 0)), wall((0, -1), (0, 1))], dim2)
        table = assign_ids(tree)
        # post-order: L1, L2, A, L3, R
        assert table.node_ids == (0, 1, 3, 2, 4)
        assert [n.is_leaf for n in table.nodes] == [True, True, True, False, False]
        # the inner branch is met first, so its plane gets id 0
        assert table.nodes[3] == BranchRecord(0, 0, 1)
        assert table.nodes[4] == BranchRecord(1, 3, 2)

    def test_walls_are_contiguous_per_leaf(self, l_tree):
        table = assign_ids(l_tree)
        covered = []
        for record in table.nodes:
            if record.is_leaf:
                covered.extend(range(record.first_surface_id,
                                     record.first_surface_id + record.surface_count))
        assert covered == list(range(len(table.surfaces)))

    def test_missing_room(self, dim2, wall):
        tree = build_tree([wall((0, 0), (1, 0), room=None)], dim2)
        with pytest.raises(InputError, match="Missing room"):
            assign_ids(tree)

    def test_leaf_with_two_rooms(self, dim2, wall):
        tree = build_tree([wall((0, 0), (4, 0), room="a"), wall((4, 0), (4, 4), room="b")], dim2)
        with pytest.raises(InputError, match="several rooms"):
            assign_ids(tree)

    def test_passages_are_not_walls(self, dim2, wall):
        outline = [(0, 0), (8, 0), (8, 4), (4, 4), (4, 8), (0, 8)]
        surfaces = []
        for i, start in enumerate(outline):
            end = outline[(i + 1) % len(outline)]
            if i < 3:
                surfaces.append(wall(start, end))
            else:
                surfaces.append(wall(start, end, room=None, passage="true"))
        table = assign_ids(build_tree(surfaces, dim2))

        front_leaf, back_leaf = table.nodes[0], table.nodes[1]
        assert front_leaf == LeafRecord(0, 3, 0)
        assert back_leaf == LeafRecord(NO_ROOM, 0, NO_SURFACE)
        assert len(table.surfaces) == 3


class TestSerialize:

    def test_layout(self, l_tree):
        data = serialize_to_bytes(l_tree)
        assert len(data) == 294
        assert data[:4] == MAGIC
        assert struct.unpack_from("<HB", data, 4) == (1, 2)
        assert data[-13] == 0x00
        assert data[-26] == 0xFF

    def test_returns_table_and_accepts_one(self, l_tree):
        buffer = io.BytesIO()
        table = serialize(l_tree, buffer)
        assert serialize_to_bytes(table) == buffer.getvalue()

    def test_non_ascii_room(self, dim2, wall):
        tree = build_tree([wall((0, 0), (1, 0), room="café")], dim2)
        with pytest.raises(InputError, match="not ASCII"):
            serialize_to_bytes(tree)


class TestDeserialize:

    def test_l_room(self, l_tree):
        level = deserialize(serialize_to_bytes(l_tree))
        assert level.version == 1
        assert level.dimension == 2
        assert level.vertices.shape == (7, 2)
        assert level.vertices.dtype == np.float64
        np.testing.assert_array_equal(level.planes, [[0.0, -1.0, 4.0]])
        assert level.rooms == ["hall"]
        assert level.root_id == 2
        assert level.nodes[2] == BranchRecord(0, 0, 1)
        assert len(level.leaf_surfaces(0)) == 4
        assert len(level.leaf_surfaces(1)) == 3
        assert level.leaf_surfaces(2) == []

    def test_vertices_match_table(self, l_tree):
        table = assign_ids(l_tree)
        level = deserialize(serialize_to_bytes(table))
        np.testing.assert_array_equal(level.vertices, table.vertex_array())
        assert level.surfaces == list(table.surfaces)

    def test_3d_box(self, dim3, box_surfaces):
        tree = build_tree(box_surfaces((0, 0, 0), (2, 2, 2), dim3), dim3)
        level = deserialize(serialize_to_bytes(tree))
        assert level.dimension == 3
        assert level.vertices.shape == (8, 3)
        assert level.planes.shape == (0, 4)
        assert level.nodes == [LeafRecord(0, 6, 0)]
        assert all(len(s.vertex_ids) == 4 for s in level.surfaces)

    def test_file_round_trip(self, tmp_path, l_tree):
        path = tmp_path / "level.bsp"
        write_level(l_tree, path)
        assert read_level(path).rooms == ["hall"]

    def test_bad_magic(self, l_tree):
        data = serialize_to_bytes(l_tree)
        with pytest.raises(InputError, match="magic"):
            deserialize(b"XXXX" + data[4:])

    def test_bad_version(self, l_tree):
        data = bytearray(serialize_to_bytes(l_tree))
        struct.pack_into("<H", data, 4, 9)
        with pytest.raises(InputError, match="version"):
            deserialize(bytes(data))

    def test_bad_dimension(self, l_tree):
        data = bytearray(serialize_to_bytes(l_tree))
        data[6] = 4
        with pytest.raises(InputError, match="dimension"):
            deserialize(bytes(data))

    def test_truncated(self, l_tree):
        data = serialize_to_bytes(l_tree)
        with pytest.raises(InputError, match="truncated"):
            deserialize(data[:-1])

    def test_unknown_node_tag(self, l_tree):
        data = bytearray(serialize_to_bytes(l_tree))
        data[-13] = 0x07
        with pytest.raises(InputError, match="tag"):
            deserialize(bytes(data))
