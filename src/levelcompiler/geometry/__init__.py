"""
Exact geometry primitives.

- points: Fraction tuples and vector helpers
- hyperplane: canonical oriented planes
- facet: 2D segments and 3D convex polygons
- bounds: axis-aligned orthotopes
"""

from .points import Point, to_point, to_rational, parse_point, format_point
from .hyperplane import Hyperplane
from .facet import (
    Facet, Facet2D, Facet3D, facetize_2d, facetize_3d, DEFAULT_FACET_SIZE,
)
from .bounds import Orthotope

__all__ = [
    'Point', 'to_point', 'to_rational', 'parse_point', 'format_point',
    'Hyperplane',
    'Facet', 'Facet2D', 'Facet3D', 'facetize_2d', 'facetize_3d', 'DEFAULT_FACET_SIZE',
    'Orthotope',
]
