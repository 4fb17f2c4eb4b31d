"""
Exact point and vector helpers.

Points are plain tuples of Fraction so that every classification and
intersection downstream is exact.  Split vertices computed from two
different surfaces that share an edge compare equal bit for bit.
"""

from __future__ import annotations
from fractions import Fraction
from numbers import Rational
from typing import Iterable, Sequence, Tuple, Union

from ..errors import InputError

Point = Tuple[Fraction, ...]
Coordinate = Union[int, float, str, Fraction]


def to_rational(value: Coordinate) -> Fraction:
    """Convert a coordinate to an exact Fraction.

    Strings accept integers, decimals and ``p/q`` ratios.  Floats are
    converted exactly (their binary value, not their repr).
    """
    if isinstance(value, Fraction):
        return value
    if isinstance(value, bool):
        raise InputError(f"Invalid coordinate: {value!r}")
    if isinstance(value, (int, Rational)):
        return Fraction(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            raise InputError(f"Invalid coordinate: {value!r}")
        return Fraction(value)
    if isinstance(value, str):
        try:
            return Fraction(value.strip())
        except (ValueError, ZeroDivisionError):
            raise InputError(f"Invalid coordinate: {value!r}") from None
    raise InputError(f"Invalid coordinate: {value!r}")


def to_point(values: Iterable[Coordinate]) -> Point:
    return tuple(to_rational(v) for v in values)


def parse_point(text: str, separator: str = ",") -> Point:
    """Parse ``"x,y"`` (or ``"x,y,z"``) into an exact point."""
    parts = [p for p in text.split(separator)]
    if len(parts) < 2:
        raise InputError(f"Invalid point: {text!r}")
    return to_point(parts)


def format_point(point: Sequence[Fraction], separator: str = ",") -> str:
    return separator.join(str(c) for c in point)


# ---------------------------------------------------------------------------
# Vector math
# ---------------------------------------------------------------------------

def add(a: Sequence[Fraction], b: Sequence[Fraction]) -> Point:
    return tuple(x + y for x, y in zip(a, b))


def sub(a: Sequence[Fraction], b: Sequence[Fraction]) -> Point:
    return tuple(x - y for x, y in zip(a, b))


def scale(v: Sequence[Fraction], s: Fraction) -> Point:
    return tuple(x * s for x in v)


def dot(a: Sequence[Fraction], b: Sequence[Fraction]) -> Fraction:
    return sum((x * y for x, y in zip(a, b)), Fraction(0))


def cross(a: Sequence[Fraction], b: Sequence[Fraction]) -> Point:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def lerp(a: Sequence[Fraction], b: Sequence[Fraction], t: Fraction) -> Point:
    return tuple(x + (y - x) * t for x, y in zip(a, b))


def centroid(points: Sequence[Sequence[Fraction]]) -> Point:
    count = len(points)
    return tuple(sum(axis, Fraction(0)) / count for axis in zip(*points))
