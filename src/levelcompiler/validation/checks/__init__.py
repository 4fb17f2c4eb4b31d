"""
Validation check modules.

- surface_checks: Room metadata, degenerate and duplicate surfaces,
  input size, interior points, room names
"""

from .surface_checks import (
    check_rooms,
    check_degenerate_surfaces,
    check_duplicate_surfaces,
    check_surface_limit,
    check_interior_points,
    check_room_names,
    validate_input,
    validate_partition,
    validate_export,
)

__all__ = [
    'check_rooms',
    'check_degenerate_surfaces',
    'check_duplicate_surfaces',
    'check_surface_limit',
    'check_interior_points',
    'check_room_names',
    'validate_input',
    'validate_partition',
    'validate_export',
]
