"""
Constructive solid geometry over brushes.

Each brush is a convex solid whose surfaces face outward.  Where brushes
overlap, the surfaces of one that fall inside another are removed, or
kept facing the other brush's material when the other brush is less
dense (e.g. a wall surface inside a water brush).  Surfaces that end up
two-sided are emitted a second time as their cosurface so the boundary
can be seen from both sides.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from ..geometry import Orthotope
from .materials import SEALING_MATERIALS
from .surface import Surface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Brush:
    surfaces: Tuple[Surface, ...]
    bounds: Orthotope
    material: int


def make_brush(surfaces: Iterable[Surface], material: int) -> Brush:
    surface_tuple = tuple(surfaces)
    bounds = Orthotope.from_points(p for s in surface_tuple for p in s.facet.points)
    return Brush(surface_tuple, bounds, material)


def construct_solid_geometry(brushes: Sequence[Brush]) -> List[Surface]:
    result: List[Surface] = []

    for i, source in enumerate(brushes):
        # Coplanar faces of equal material go to the later brush: once the
        # source brush itself has been passed, ties overwrite.
        overwrite = False
        surfaces = list(source.surfaces)
        for j, clip_brush in enumerate(brushes):
            if i == j:
                overwrite = True
                continue
            if not source.bounds.intersects(clip_brush.bounds):
                continue
            surfaces = _clip_surfaces(surfaces, clip_brush, overwrite)
        result.extend(surfaces)

    cosurfaces = [s.cosurface for s in result if s.is_two_sided]
    result.extend(cosurfaces)
    logger.info("CSG: %d brushes -> %d surfaces (%d two-sided)",
                len(brushes), len(result), len(cosurfaces))
    return result


def _clip_surfaces(surfaces: List[Surface], clip_brush: Brush,
                   overwrite: bool) -> List[Surface]:
    result = []
    for surface in surfaces:
        inside, outside = _clip_surface(surface, clip_brush, overwrite)
        if not inside:
            result.append(surface)
            continue
        result.extend(outside)
        result.extend(piece.fill_front(clip_brush.material)
                      for piece in inside
                      if piece.back_material > clip_brush.material)
    return result


def _clip_surface(surface: Surface, clip_brush: Brush,
                  overwrite: bool) -> Tuple[List[Surface], List[Surface]]:
    inside: List[Surface] = []
    outside: List[Surface] = []
    coplanar = False
    remainder = surface

    for plane in (s.plane for s in clip_brush.surfaces):
        if plane == surface.plane:
            coplanar = True
            continue
        outside_piece, remainder = remainder.split(plane)
        if outside_piece is not None:
            outside.append(outside_piece)
        if remainder is None:
            break

    if remainder is not None:
        if not coplanar:
            inside.append(remainder)
        elif clip_brush.material > remainder.back_material:
            inside.append(remainder)
        elif clip_brush.material < remainder.back_material:
            outside.append(remainder)
        else:
            (inside if overwrite else outside).append(remainder)

    return inside, outside


def visible_surfaces(surfaces: Iterable[Surface]) -> List[Surface]:
    """Drop surfaces facing into solid or sky; nothing can see them."""
    return [s for s in surfaces if s.front_material not in SEALING_MATERIALS]
