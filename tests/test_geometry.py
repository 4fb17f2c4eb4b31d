"""Tests for exact points, hyperplanes and bounds."""

from fractions import Fraction

import pytest

from levelcompiler.errors import GeometryError, InputError
from levelcompiler.geometry import Hyperplane, Orthotope, parse_point, to_point, to_rational
from levelcompiler.geometry.points import cross, lerp


class TestRationals:

    def test_accepts_ints_strings_and_ratios(self):
        assert to_rational(3) == Fraction(3)
        assert to_rational("0.25") == Fraction(1, 4)
        assert to_rational(" 2/3 ") == Fraction(2, 3)

    def test_float_is_exact(self):
        assert to_rational(0.5) == Fraction(1, 2)
        assert to_rational(0.1) == Fraction(0.1)
        assert to_rational(0.1) != Fraction(1, 10)

    @pytest.mark.parametrize("bad", ["abc", "1/0", float("nan"), float("inf"), True, None])
    def test_rejects_invalid(self, bad):
        with pytest.raises(InputError):
            to_rational(bad)

    def test_parse_point(self):
        assert parse_point("1,-2.5") == (Fraction(1), Fraction(-5, 2))
        assert parse_point("1 2 3", separator=" ") == (1, 2, 3)
        with pytest.raises(InputError):
            parse_point("7")

    def test_vector_helpers(self):
        assert cross((1, 0, 0), (0, 1, 0)) == (0, 0, 1)
        assert lerp(to_point((0, 0)), to_point((4, 2)), Fraction(1, 2)) == (2, 1)


class TestHyperplane:

    def test_canonical_form_compares_equal(self):
        a = Hyperplane((2, 0), -4)
        b = Hyperplane((Fraction(1, 2), 0), -1)
        assert a == b
        assert hash(a) == hash(b)
        assert a.normal == (1, 0)
        assert a.offset == -2

    def test_zero_normal_rejected(self):
        with pytest.raises(GeometryError):
            Hyperplane((0, 0), 1)

    def test_through_two_points_faces_left(self):
        plane = Hyperplane.through((0, 0), (1, 0))
        assert plane.classify((0, 1)) == 1
        assert plane.classify((0, -1)) == -1
        assert plane.classify((5, 0)) == 0

    def test_through_three_points(self):
        plane = Hyperplane.through((0, 0, 0), (1, 0, 0), (0, 1, 0))
        assert plane.normal == (0, 0, 1)
        assert plane.determinant((3, 4, 2)) == 2

    def test_collinear_points_rejected(self):
        with pytest.raises(GeometryError):
            Hyperplane.through((0, 0, 0), (1, 1, 1), (2, 2, 2))
        with pytest.raises(GeometryError):
            Hyperplane.through((1, 1), (1, 1))

    def test_coplane(self):
        plane = Hyperplane.from_coefficients(1, 2, -3)
        assert plane.coplane.coplane == plane
        assert plane.coplane.determinant((0, 0)) == Fraction(3, 2)

    def test_is_axial(self):
        assert Hyperplane((0, 0, -5), 1).is_axial
        assert not Hyperplane((1, 1, 0), 0).is_axial

    def test_intersect_segment_is_exact(self):
        plane = Hyperplane((1, 0), Fraction(-1, 3))
        point = plane.intersect_segment((0, 0), (1, 1))
        assert point == (Fraction(1, 3), Fraction(1, 3))

    def test_intersect_parallel_segment(self):
        plane = Hyperplane((1, 0), 0)
        with pytest.raises(GeometryError):
            plane.intersect_segment((1, 0), (1, 5))


class TestOrthotope:

    def test_from_points_and_center(self):
        box = Orthotope.from_points([(0, 2), (4, -2), (1, 1)])
        assert box.mins == (0, -2)
        assert box.maxs == (4, 2)
        assert box.center == (2, 0)

    def test_intersects_is_inclusive(self):
        a = Orthotope((0, 0), (1, 1))
        assert a.intersects(Orthotope((1, 1), (2, 2)))
        assert not a.intersects(Orthotope((Fraction(3, 2), 0), (2, 1)))

    def test_inward_planes_face_the_interior(self):
        box = Orthotope((0, 0, 0), (2, 2, 2)).padded(1)
        planes = box.inward_planes()
        assert len(planes) == 6
        assert all(p.classify(box.center) == 1 for p in planes)
        assert any(p.classify((4, 1, 1)) == -1 for p in planes)

    def test_union_and_contains(self):
        box = Orthotope((0, 0), (1, 1)).union(Orthotope((2, -1), (3, 0)))
        assert box == Orthotope((0, -1), (3, 1))
        assert box.contains((3, 1))
        assert not box.contains((Fraction(7, 2), 0))

    def test_empty_point_set(self):
        with pytest.raises(GeometryError):
            Orthotope.from_points([])
