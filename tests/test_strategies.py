"""Tests for partition plane scoring and selection."""

import pytest

from levelcompiler.spatial import (
    AxialPartitioner, ExhaustivePartitioner, PlaneScore, get_strategy, score_plane,
)
from levelcompiler.spatial.strategies import candidate_planes


class TestPlaneScore:

    def test_rejected_when_one_side_empty_without_splits(self):
        assert PlaneScore(front=3, back=0, splits=0).rejected
        assert PlaneScore(front=0, back=2, splits=0).rejected
        assert not PlaneScore(front=3, back=0, splits=1).rejected
        assert not PlaneScore(front=1, back=1, splits=0).rejected

    def test_score_weights(self):
        counts = PlaneScore(front=5, back=2, splits=1)
        assert counts.score() == 3 * 1 + 1 * 10
        assert counts.score(imbalance_weight=2, split_weight=0) == 6


def test_score_plane_counts(l_room):
    # Plane of the inner wall (8,4)->(4,4): front is y < 4
    plane = l_room[2].plane
    counts = score_plane(l_room, plane)
    assert counts == PlaneScore(front=3, back=2, splits=1)


def test_candidates_are_distinct_in_order(wall):
    surfaces = [wall((0, 0), (1, 0)), wall((2, 0), (3, 0)), wall((0, 1), (0, 0))]
    planes = candidate_planes(surfaces)
    assert planes == [surfaces[0].plane, surfaces[2].plane]


class TestExhaustive:

    def test_cross_ties_go_to_first_candidate(self, wall):
        horizontal = wall((-1, 0), (1, 0))
        vertical = wall((0, -1), (0, 1))
        assert ExhaustivePartitioner().select_plane([horizontal, vertical]) == horizontal.plane
        assert ExhaustivePartitioner().select_plane([vertical, horizontal]) == vertical.plane

    def test_l_room_choice(self, l_room):
        assert ExhaustivePartitioner().select_plane(l_room) == l_room[2].plane

    def test_all_candidates_rejected(self, wall):
        # Two facing walls are convex; neither plane separates them
        surfaces = [wall((0, 0), (4, 0)), wall((4, 2), (0, 2))]
        assert ExhaustivePartitioner().select_plane(surfaces) is None

    def test_weights_change_the_choice(self, wall):
        surfaces = [
            wall((0, 0), (10, 0)),
            wall((0, 1), (0, 5)),
            wall((2, -1), (2, 1)),
            wall((4, 5), (4, 2)),
        ]
        # x=0 splits nothing (1 front, 3 back); x=2 splits one (2 front, 1 back)
        assert score_plane(surfaces, surfaces[1].plane) == PlaneScore(1, 3, 0)
        assert score_plane(surfaces, surfaces[2].plane) == PlaneScore(2, 1, 1)

        default_choice = ExhaustivePartitioner().select_plane(surfaces)
        no_split_penalty = ExhaustivePartitioner(split_weight=0).select_plane(surfaces)
        assert default_choice == surfaces[1].plane
        assert no_split_penalty == surfaces[2].plane


class TestAxial:

    def test_prefers_axial_plane_near_center(self, wall):
        surfaces = [
            wall((0, 0), (1, 1)),
            wall((-10, -5), (-10, 5)),
            wall((0, -5), (0, 5)),
            wall((10, 5), (10, -5)),
        ]
        plane = AxialPartitioner().select_plane(surfaces)
        assert plane == surfaces[2].plane

    def test_none_when_nothing_separates(self, wall):
        surfaces = [wall((0, 0), (4, 0)), wall((4, 2), (0, 2))]
        assert AxialPartitioner().select_plane(surfaces) is None


def test_get_strategy():
    assert get_strategy("Exhaustive", split_weight=3).split_weight == 3
    assert get_strategy("axial").name == "axial"
    with pytest.raises(ValueError):
        get_strategy("random")
