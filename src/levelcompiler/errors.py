"""
Error taxonomy for the level compiler.

Every failure is fatal for the current compile; nothing here is retried
and no partial output is produced:
- InputError: empty input, missing room metadata, malformed sources
- GeometryError: degenerate planes, facets or brushes
- PartitionFailure: no plane separates a non-convex surface set
- ImbalancedPartitionFailure: a chosen plane left one side empty
- LeakError: flood fill from outside reached the interior
- BuildCancelledError: the build was cancelled or ran out of time
"""

from typing import Optional, Sequence


class CompilerError(Exception):
    pass


class InputError(CompilerError):
    pass


class GeometryError(CompilerError):
    pass


class PartitionFailure(CompilerError):
    pass


class ImbalancedPartitionFailure(CompilerError):
    pass


class BuildCancelledError(CompilerError):
    pass


class LeakError(CompilerError):
    """Raised when the exterior flood fill reaches an interior leaf.

    Attributes:
        point: The exterior seed point the flood fill started from
        visited_count: Number of leaves visited when the leak was found
        interior_point: The interior point whose leaf was reached
        leaf_index: Arena index of the leaked leaf
    """

    def __init__(self, point: Sequence, visited_count: int,
                 interior_point: Optional[Sequence] = None,
                 leaf_index: Optional[int] = None):
        self.point = tuple(point)
        self.visited_count = visited_count
        self.interior_point = tuple(interior_point) if interior_point is not None else None
        self.leaf_index = leaf_index
        coords = " ".join(_format_coordinate(c) for c in self.point)
        message = f"Leak: flood fill from ({coords}) reached the interior after visiting {visited_count} leaves"
        if self.interior_point is not None:
            target = " ".join(_format_coordinate(c) for c in self.interior_point)
            message += f" (interior point {target})"
        super().__init__(message)


def _format_coordinate(value) -> str:
    as_float = float(value)
    if as_float.is_integer():
        return str(int(as_float))
    return f"{as_float:g}"
