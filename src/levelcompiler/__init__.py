"""
levelcompiler: exact-arithmetic BSP compiler.

Partitions 2D segment levels and 3D polygon (Quake brush) levels into
binary space partitioning trees using rational arithmetic, checks them
for leaks and writes a compact binary level file.

Sub-packages:
- geometry: exact points, hyperplanes, facets and bounds
- spatial: surfaces, materials, tree building, CSG, portals, leaks
- conversion: graph JSON and .map sources, level data, OBJ export
- validation: input checks and gates
- pipeline: staged compilation with settings and progress
"""

import logging

from .errors import (
    CompilerError, InputError, GeometryError, PartitionFailure,
    ImbalancedPartitionFailure, LeakError, BuildCancelledError,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'CompilerError', 'InputError', 'GeometryError', 'PartitionFailure',
    'ImbalancedPartitionFailure', 'LeakError', 'BuildCancelledError',
    '__version__',
]
