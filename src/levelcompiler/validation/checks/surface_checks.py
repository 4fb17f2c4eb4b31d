"""
Surface and seed point checks.

Validates compiler input:
- Room metadata on walls (INPUT-001)
- Degenerate surfaces (INPUT-002)
- Duplicate surfaces (INPUT-003)
- Input size (INPUT-004)
- Interior points in solid (INPUT-005)
- ASCII room names (EXPORT-001)
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ...geometry import to_point
from ...spatial import BspNode, Dimension, Surface, dimension_for
from ...spatial.leaks import build_cells
from ...spatial.portals import DEFAULT_PORTAL_PADDING
from ..core import ValidationIssue, ValidationResult, ValidationStage
from ..rules import INPUT_001, INPUT_002, INPUT_003, INPUT_004, INPUT_005, EXPORT_001


def _format_points(surface: Surface) -> str:
    return " ".join(
        "(" + ",".join(f"{float(c):g}" for c in p) + ")" for p in surface.facet.points
    )


def check_rooms(surfaces: Sequence[Surface]) -> List[ValidationIssue]:
    """Walls (non-passage surfaces) must carry a room."""
    issues = []
    for index, surface in enumerate(surfaces):
        if not surface.is_passage and surface.room is None:
            issues.append(INPUT_001.issue(location=f"surface {index}",
                                          points=_format_points(surface)))
    return issues


def check_degenerate_surfaces(surfaces: Sequence[Surface]) -> List[ValidationIssue]:
    issues = []
    for index, surface in enumerate(surfaces):
        measure = surface.facet.measure()
        if measure <= 0:
            issues.append(INPUT_002.issue(location=f"surface {index}", measure=measure,
                                          points=_format_points(surface)))
    return issues


def check_duplicate_surfaces(surfaces: Sequence[Surface]) -> List[ValidationIssue]:
    """Same plane, same vertex set and same materials counts as a duplicate."""
    issues = []
    seen: Dict[Tuple, int] = {}
    for index, surface in enumerate(surfaces):
        key = (surface.plane, frozenset(surface.facet.points),
               surface.front_material, surface.back_material)
        if key in seen:
            issues.append(INPUT_003.issue(location=f"surface {index}",
                                          index=index, first=seen[key]))
        else:
            seen[key] = index
    return issues


def check_surface_limit(surfaces: Sequence[Surface],
                        limit: Optional[int]) -> List[ValidationIssue]:
    if limit is None or len(surfaces) <= limit:
        return []
    return [INPUT_004.issue(count=len(surfaces), limit=limit)]


def check_interior_points(tree: BspNode, points: Iterable[Sequence],
                          dimension: Optional[Dimension] = None,
                          padding=DEFAULT_PORTAL_PADDING) -> List[ValidationIssue]:
    """Interior points must not lie in a cell sealed off behind walls."""
    points = [to_point(p) for p in points]
    if not points:
        return []
    cells = build_cells(tree, dimension or dimension_for(len(points[0])), padding)
    issues = []
    for point in points:
        if cells.is_solid(point):
            text = " ".join(f"{float(c):g}" for c in point)
            issues.append(INPUT_005.issue(location="interior points", point=text))
    return issues


def check_room_names(surfaces: Iterable[Surface]) -> List[ValidationIssue]:
    issues = []
    reported = set()
    for surface in surfaces:
        room = surface.room
        if room is None or room in reported:
            continue
        if not room.isascii():
            reported.add(room)
            issues.append(EXPORT_001.issue(location=f"room {room!r}", room=room))
    return issues


# ---------------------------------------------------------------------------
# Stage entry points
# ---------------------------------------------------------------------------

def validate_input(surfaces: Sequence[Surface],
                   surface_limit: Optional[int] = None) -> ValidationResult:
    """Run all input checks on loaded surfaces.

    Args:
        surfaces: Surfaces about to be partitioned
        surface_limit: Warn when the input exceeds this many surfaces

    Returns:
        ValidationResult for the INPUT stage
    """
    result = ValidationResult(stage=ValidationStage.INPUT)
    result.extend(check_rooms(surfaces))
    result.extend(check_degenerate_surfaces(surfaces))
    result.extend(check_duplicate_surfaces(surfaces))
    result.extend(check_surface_limit(surfaces, surface_limit))
    return result


def validate_partition(tree: BspNode, interior_points: Iterable[Sequence],
                       dimension: Optional[Dimension] = None,
                       padding=DEFAULT_PORTAL_PADDING) -> ValidationResult:
    result = ValidationResult(stage=ValidationStage.PARTITION)
    result.extend(check_interior_points(tree, interior_points, dimension, padding))
    return result


def validate_export(surfaces: Iterable[Surface]) -> ValidationResult:
    result = ValidationResult(stage=ValidationStage.EXPORT)
    result.extend(check_room_names(surfaces))
    return result
