"""
Brush geometry for Quake maps.

Turns half-space brushes into explicit facets: each plane is facetized
and clipped to the back of every other plane of the brush.  The
resulting surfaces face out of the brush (AIR in front, the brush's
material behind) and carry their texture and room as metadata.
"""

from __future__ import annotations
import logging
from typing import Iterable, List, Optional, Sequence

from ..errors import GeometryError
from ..geometry import Facet3D, Hyperplane, Point
from ..spatial import Brush, Dimension3D, Material, Surface, make_brush
from .map_format import MapBrush, MapEntity, MapPlane

logger = logging.getLogger(__name__)

MIN_BRUSH_FACETS = 4
WORLDSPAWN = "worldspawn"


class QuakeDimension(Dimension3D):
    """3D dimension whose hint surfaces use HINT<depth> textures."""

    def is_hint_surface(self, surface: Surface, depth: int) -> bool:
        texture = surface.texture
        return texture is not None and texture.upper() == f"HINT{depth}"


def material_from_texture(texture: str) -> Material:
    """Classify a brush by its texture name.

    Liquids are marked with a leading '*'; sky textures start with 'sky'.
    """
    name = texture.lower()
    if name.startswith("*"):
        if "lava" in name:
            return Material.LAVA
        if "slime" in name:
            return Material.SLIME
        return Material.WATER
    if name.startswith("sky"):
        return Material.SKY
    return Material.SOLID


def plane_from_map_plane(plane: MapPlane) -> Hyperplane:
    """Outward-facing plane of a brush face (points taken in reverse order)."""
    return Hyperplane.through(plane.p3, plane.p2, plane.p1)


def brush_facets(brush: MapBrush, dimension: Dimension3D) -> List[Facet3D]:
    """Clip each face plane by all the others.

    Raises:
        GeometryError: If fewer than four faces survive
    """
    planes = [plane_from_map_plane(p) for p in brush.planes]
    facets: List[Facet3D] = []
    for i, plane in enumerate(planes):
        facet: Optional[Facet3D] = dimension.facetize(plane)
        for j, other in enumerate(planes):
            if i == j:
                continue
            _, facet = facet.split(other)
            if facet is None:
                break
        if facet is not None:
            facets.append(facet)

    if len(facets) < MIN_BRUSH_FACETS:
        raise GeometryError(f"Degenerate brush {brush.brush_id}: "
                            f"{len(facets)} facets after clipping")
    return facets


def brush_surfaces(brush: MapBrush, dimension: Dimension3D, room: str) -> Brush:
    """Build a CSG brush from a map brush."""
    if not brush.planes:
        raise GeometryError(f"Degenerate brush {brush.brush_id}: no planes")
    planes = [plane_from_map_plane(p) for p in brush.planes]
    material = material_from_texture(brush.planes[0].texture)

    surfaces = []
    for facet in brush_facets(brush, dimension):
        texture = brush.planes[planes.index(facet.plane)].texture
        surfaces.append(Surface(
            facet=facet,
            front_material=Material.AIR,
            back_material=material,
            metadata={"texture": texture, "room": room},
        ))
    return make_brush(surfaces, material)


def entity_room(entity: MapEntity) -> str:
    return entity.get("room") or entity.classname


def world_brushes(entities: Sequence[MapEntity], dimension: Dimension3D) -> List[Brush]:
    """CSG brushes for every worldspawn brush."""
    brushes: List[Brush] = []
    for entity in entities:
        if entity.classname != WORLDSPAWN:
            if entity.brushes:
                logger.debug("Skipping %d brushes of %s", len(entity.brushes), entity.classname)
            continue
        room = entity_room(entity)
        for brush in entity.brushes:
            brushes.append(brush_surfaces(brush, dimension, room))
    logger.info("Converted %d worldspawn brushes", len(brushes))
    return brushes


def entity_origins(entities: Iterable[MapEntity]) -> List[Point]:
    """Origins of point entities; these lie inside the playable space."""
    return [e.origin for e in entities if not e.brushes and e.origin is not None]
