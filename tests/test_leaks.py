"""Tests for portals, cell refinement, exterior flood fill and outside culling."""

import logging

import pytest

from levelcompiler.errors import LeakError
from levelcompiler.geometry import Facet2D
from levelcompiler.spatial import (
    Material, Surface, build_cells, build_tree, cull_outside, default_exterior_point,
    find_leaks, portalize,
)


@pytest.fixture
def l_tree(dim2, l_room):
    return build_tree(l_room, dim2)


@pytest.fixture
def open_l_room(l_room):
    """The L room with its right wall (8,0)->(8,4) missing."""
    return [s for i, s in enumerate(l_room) if i != 1]


@pytest.fixture
def pillar(wall):
    """Outward-facing walls of a solid 2x2 pillar."""
    corners = [(0, 0), (0, 2), (2, 2), (2, 0)]
    return [wall(corners[i], corners[(i + 1) % 4]) for i in range(4)]


def square_room(wall, x0, size=2):
    corners = [(x0, 0), (x0 + size, 0), (x0 + size, size), (x0, size)]
    return [wall(corners[i], corners[(i + 1) % 4]) for i in range(4)]


class TestPortals:

    def test_l_room_has_one_portal(self, dim2, l_tree):
        portals = portalize(l_tree, dim2)
        assert len(portals) == 1
        portal = portals[0]
        assert {portal.front, portal.back} == {0, 1}
        assert portal.other_side(portal.front) == portal.back
        assert portal.facet.measure() == pytest.approx(4.0)

    def test_separate_rooms_have_no_portal(self, dim2, wall):
        tree = build_tree(square_room(wall, 0) + square_room(wall, 10), dim2)
        assert portalize(tree, dim2) == []

    def test_single_leaf_has_no_portal(self, dim3, box_surfaces):
        tree = build_tree(box_surfaces((0, 0, 0), (2, 2, 2), dim3), dim3)
        assert portalize(tree, dim3) == []


class TestCells:

    def test_walls_carve_cells_behind_them(self, dim2, l_tree):
        cells = build_cells(l_tree, dim2)
        # y=4 bounds leaf 0 already, so each leaf is cut three times
        assert len(cells.owners) == 8
        assert sorted(cells.owners.values()) == [0] * 4 + [1] * 4
        assert {cells.owners[c] for c in cells.open_cells} == {0, 1}
        assert cells.locate((2, 2)) in cells.open_cells
        assert cells.locate((20, 2)) not in cells.open_cells
        assert cells.solid == frozenset()

    def test_pillar_interior_is_solid(self, dim2, pillar):
        cells = build_cells(build_tree(pillar, dim2), dim2)
        assert cells.is_solid((1, 1))
        assert not cells.is_solid((5, 5))
        assert not cells.is_solid((-1, 1))
        assert len(cells.solid) == 1


def test_default_exterior_point(l_tree):
    assert default_exterior_point(l_tree) == (9, 9)
    assert default_exterior_point(l_tree, padding=4) == (12, 12)


class TestFindLeaks:

    @pytest.mark.parametrize("exterior", [(20, 20), (-5, 2), (2, -5), (6, 6), (2, 20)])
    def test_sealed_room_does_not_leak(self, dim2, l_tree, exterior, caplog):
        with caplog.at_level(logging.WARNING, logger="levelcompiler"):
            result = find_leaks(l_tree, dim2, exterior, [(2, 2), (1, 6)])
        assert result.visited_count == 0
        assert result.solid_leaves == frozenset({0, 1})
        assert "inside solid geometry" not in caplog.text

    def test_open_room_leaks(self, dim2, open_l_room):
        tree = build_tree(open_l_room, dim2)
        with pytest.raises(LeakError) as excinfo:
            find_leaks(tree, dim2, (20, 2), [(1, 6)])
        error = excinfo.value
        assert error.visited_count == 2
        assert error.point == (20, 2)
        assert error.interior_point == (1, 6)
        assert error.leaf_index == 1
        assert str(error).startswith("Leak")

    @pytest.mark.parametrize("exterior", [(-5, 2), (2, -5), (6, 6), (2, 20), (-5, 6)])
    def test_open_room_leaks_from_every_side(self, dim2, open_l_room, exterior):
        tree = build_tree(open_l_room, dim2)
        with pytest.raises(LeakError) as excinfo:
            find_leaks(tree, dim2, exterior, [(1, 6)])
        assert excinfo.value.visited_count == 2

    def test_open_room_without_interior_points(self, dim2, open_l_room):
        tree = build_tree(open_l_room, dim2)
        result = find_leaks(tree, dim2, (20, 2))
        assert result.void_leaves == frozenset({0, 1})
        assert result.exterior_leaf == 0

    def test_first_reached_point_is_reported(self, dim2, open_l_room):
        tree = build_tree(open_l_room, dim2)
        with pytest.raises(LeakError) as excinfo:
            find_leaks(tree, dim2, (20, 2), [(1, 6), (1, 1)])
        assert excinfo.value.interior_point == (1, 6)

    def test_two_sided_wall_does_not_seal(self, dim2, l_room):
        surfaces = list(l_room)
        surfaces[1] = Surface(Facet2D((8, 0), (8, 4)), Material.AIR, Material.WATER,
                              {"room": "hall"})
        tree = build_tree(surfaces, dim2)
        with pytest.raises(LeakError):
            find_leaks(tree, dim2, (20, 2), [(1, 6)])

    def test_point_outside_the_level_leaks(self, dim2, l_tree):
        with pytest.raises(LeakError) as excinfo:
            find_leaks(l_tree, dim2, (20, 20), [(2, 2), (-5, 6)])
        assert excinfo.value.interior_point == (-5, 6)
        assert excinfo.value.visited_count == 0

    def test_interior_point_in_solid_is_ignored(self, dim2, pillar, caplog):
        tree = build_tree(pillar, dim2)
        with caplog.at_level(logging.WARNING, logger="levelcompiler"):
            result = find_leaks(tree, dim2, (5, 5), [(1, 1)])
        assert result.visited_count == 4
        assert "Point (1 1) lies inside solid geometry; ignored" in caplog.text

    def test_exterior_point_in_solid(self, dim2, pillar, caplog):
        tree = build_tree(pillar, dim2)
        with caplog.at_level(logging.WARNING, logger="levelcompiler"):
            result = find_leaks(tree, dim2, (1, 1), [(5, 5)])
        assert result.visited_count == 0
        assert "Exterior point (1 1) lies inside solid geometry" in caplog.text

    @pytest.mark.parametrize("exterior", [(5, 0, 0), (-5, 0, 0), (0, 5, 0), (0, -5, 0),
                                          (0, 0, 5), (0, 0, -5)])
    def test_cube_with_missing_face_leaks(self, dim3, box_surfaces, exterior):
        surfaces = box_surfaces((-1, -1, -1), (1, 1, 1), dim3, drop=(1,))
        tree = build_tree(surfaces, dim3)
        with pytest.raises(LeakError) as excinfo:
            find_leaks(tree, dim3, exterior, [(0, 0, 0)])
        assert excinfo.value.visited_count == 1
        assert excinfo.value.leaf_index == 0

    @pytest.mark.parametrize("exterior", [(5, 0, 0), (-5, 0, 0), (0, 0, -5)])
    def test_closed_cube_does_not_leak(self, dim3, box_surfaces, exterior):
        tree = build_tree(box_surfaces((-1, -1, -1), (1, 1, 1), dim3), dim3)
        result = find_leaks(tree, dim3, exterior, [(0, 0, 0)])
        assert result.visited_count == 0


class TestCullOutside:

    def test_unreachable_room_is_dropped(self, dim2, wall):
        left = square_room(wall, 0)
        right = square_room(wall, 10)
        tree = build_tree(left + right, dim2)
        culled = cull_outside(tree, dim2, [(1, 1)])
        assert culled.is_leaf
        assert culled.depth == 0
        assert culled.surfaces == tuple(left)

    def test_connected_tree_is_unchanged(self, dim2, l_tree):
        assert cull_outside(l_tree, dim2, [(2, 2)]) is l_tree

    def test_nothing_reachable(self, dim2, l_tree):
        assert cull_outside(l_tree, dim2, [(20, 20)]) is None

    def test_point_in_solid_keeps_nothing(self, dim2, pillar):
        assert cull_outside(build_tree(pillar, dim2), dim2, [(1, 1)]) is None
