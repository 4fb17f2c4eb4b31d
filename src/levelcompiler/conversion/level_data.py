"""
Binary level-data format.

IDs are assigned in one post-order pass over the finished tree:
- leaves are numbered from 0, branches from 1 + node_count // 2, so the
  two ranges never collide (the root is always the last id)
- planes, rooms and vertices are numbered in first-seen order
- wall surfaces (non-passage) are numbered leaf by leaf, so each leaf's
  walls are a contiguous run

Stream layout (little-endian):

    header   : b"BSPL", uint16 version, uint8 dimension
    vertices : int32 count, count * dimension float64
    planes   : int32 count, count * (dimension + 1) float64
    rooms    : int32 count, per room int32 length + ASCII bytes
    surfaces : int32 count, per surface (start, end, room) int32 in 2D,
               or (vertex count, vertex ids..., room) int32 in 3D
    nodes    : int32 count, per node uint8 tag + three int32
               0x00 branch: plane id, front id, back id
               0xFF leaf:   room id, surface count, first surface id
"""

from __future__ import annotations
import io
import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, List, Tuple, Union

import numpy as np

from ..errors import InputError
from ..geometry import Hyperplane, Point
from ..spatial import BspNode, NodeArena

logger = logging.getLogger(__name__)

MAGIC = b"BSPL"
FORMAT_VERSION = 1
BRANCH_TAG = 0x00
LEAF_TAG = 0xFF
NO_ROOM = -1
NO_SURFACE = -1

_HEADER = struct.Struct("<4sHB")
_INT = struct.Struct("<i")
_NODE = struct.Struct("<Biii")
_FLOAT_DTYPE = np.dtype("<f8")


@dataclass(frozen=True)
class SurfaceRecord:
    vertex_ids: Tuple[int, ...]
    room_id: int


@dataclass(frozen=True)
class BranchRecord:
    plane_id: int
    front_id: int
    back_id: int

    is_leaf = False


@dataclass(frozen=True)
class LeafRecord:
    room_id: int
    surface_count: int
    first_surface_id: int

    is_leaf = True


NodeRecord = Union[BranchRecord, LeafRecord]


@dataclass(frozen=True)
class IdTable:
    """Immutable result of ID assignment.

    Attributes:
        dimension: 2 or 3
        vertices: Exact vertices by id
        planes: Partition planes by id
        rooms: Room names by id
        surfaces: Wall surface records by id
        nodes: Node records by id
        node_ids: Node id for each arena index
    """
    dimension: int
    vertices: Tuple[Point, ...]
    planes: Tuple[Hyperplane, ...]
    rooms: Tuple[str, ...]
    surfaces: Tuple[SurfaceRecord, ...]
    nodes: Tuple[NodeRecord, ...]
    node_ids: Tuple[int, ...]

    @property
    def root_id(self) -> int:
        return len(self.nodes) - 1

    def vertex_array(self) -> np.ndarray:
        data = [[float(c) for c in v] for v in self.vertices]
        return np.asarray(data, dtype=_FLOAT_DTYPE).reshape(len(self.vertices), self.dimension)

    def plane_array(self) -> np.ndarray:
        data = [[float(c) for c in p.coefficients] for p in self.planes]
        return np.asarray(data, dtype=_FLOAT_DTYPE).reshape(len(self.planes), self.dimension + 1)


@dataclass
class LevelData:
    """A deserialized level."""
    version: int
    dimension: int
    vertices: np.ndarray
    planes: np.ndarray
    rooms: List[str]
    surfaces: List[SurfaceRecord]
    nodes: List[NodeRecord]

    @property
    def root_id(self) -> int:
        return len(self.nodes) - 1

    def leaf_surfaces(self, node_id: int) -> List[SurfaceRecord]:
        record = self.nodes[node_id]
        if not record.is_leaf or record.surface_count == 0:
            return []
        first = record.first_surface_id
        return self.surfaces[first:first + record.surface_count]


# ---------------------------------------------------------------------------
# ID assignment
# ---------------------------------------------------------------------------

def _name(manifest: Dict, item) -> int:
    if item not in manifest:
        manifest[item] = len(manifest)
    return manifest[item]


def assign_ids(tree: BspNode) -> IdTable:
    """Assign stable IDs to everything the level file references.

    Raises:
        InputError: A wall has no room, or one leaf's walls name
            more than one room
    """
    arena = NodeArena.build(tree)
    count = len(arena)
    next_leaf_id = 0
    next_branch_id = 1 + count // 2

    node_ids: List[int] = []
    records: Dict[int, NodeRecord] = {}
    planes: Dict[Hyperplane, int] = {}
    rooms: Dict[str, int] = {}
    vertices: Dict[Point, int] = {}
    surfaces: List[SurfaceRecord] = []
    dimension = 0

    for index, node in enumerate(arena.nodes):
        if arena.is_leaf(index):
            node_id = next_leaf_id
            next_leaf_id += 1
            walls = [s for s in node.surfaces if not s.is_passage]
            for surface in node.surfaces:
                dimension = dimension or surface.plane.dimension

            names = list(dict.fromkeys(_wall_room(s) for s in walls))
            if len(names) > 1:
                raise InputError(f"Leaf at depth {node.depth} is bounded by walls of "
                                 f"several rooms: {', '.join(names)}")
            room_id = _name(rooms, names[0]) if names else NO_ROOM

            first_surface = len(surfaces) if walls else NO_SURFACE
            for wall in walls:
                ids = tuple(_name(vertices, p) for p in wall.facet.points)
                surfaces.append(SurfaceRecord(ids, room_id))
            records[node_id] = LeafRecord(room_id, len(walls), first_surface)
        else:
            node_id = next_branch_id
            next_branch_id += 1
            front, back = arena.children[index]
            records[node_id] = BranchRecord(_name(planes, node.plane),
                                            node_ids[front], node_ids[back])
            dimension = dimension or node.plane.dimension
        node_ids.append(node_id)

    return IdTable(
        dimension=dimension,
        vertices=tuple(vertices),
        planes=tuple(planes),
        rooms=tuple(rooms),
        surfaces=tuple(surfaces),
        nodes=tuple(records[i] for i in range(count)),
        node_ids=tuple(node_ids),
    )


def _wall_room(surface) -> str:
    room = surface.room
    if room is None:
        raise InputError("Missing room/passage signifier on wall surface "
                         f"{[tuple(float(c) for c in p) for p in surface.facet.points]}")
    return room


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

def serialize(source: Union[BspNode, IdTable], stream: BinaryIO) -> IdTable:
    """Write a tree (or an already assigned table) to a binary stream."""
    table = source if isinstance(source, IdTable) else assign_ids(source)

    stream.write(_HEADER.pack(MAGIC, FORMAT_VERSION, table.dimension))

    stream.write(_INT.pack(len(table.vertices)))
    stream.write(table.vertex_array().tobytes())

    stream.write(_INT.pack(len(table.planes)))
    stream.write(table.plane_array().tobytes())

    stream.write(_INT.pack(len(table.rooms)))
    for room in table.rooms:
        try:
            encoded = room.encode("ascii")
        except UnicodeEncodeError:
            raise InputError(f"Room name is not ASCII: {room!r}") from None
        stream.write(_INT.pack(len(encoded)))
        stream.write(encoded)

    stream.write(_INT.pack(len(table.surfaces)))
    for record in table.surfaces:
        if table.dimension == 2:
            start, end = record.vertex_ids
            stream.write(struct.pack("<iii", start, end, record.room_id))
        else:
            ids = record.vertex_ids
            stream.write(struct.pack(f"<i{len(ids)}ii", len(ids), *ids, record.room_id))

    stream.write(_INT.pack(len(table.nodes)))
    for record in table.nodes:
        if record.is_leaf:
            stream.write(_NODE.pack(LEAF_TAG, record.room_id,
                                    record.surface_count, record.first_surface_id))
        else:
            stream.write(_NODE.pack(BRANCH_TAG, record.plane_id,
                                    record.front_id, record.back_id))

    logger.debug("Serialized %d vertices, %d planes, %d rooms, %d surfaces, %d nodes",
                 len(table.vertices), len(table.planes), len(table.rooms),
                 len(table.surfaces), len(table.nodes))
    return table


def serialize_to_bytes(source: Union[BspNode, IdTable]) -> bytes:
    buffer = io.BytesIO()
    serialize(source, buffer)
    return buffer.getvalue()


def write_level(source: Union[BspNode, IdTable], path: Union[str, Path]) -> IdTable:
    with open(path, 'wb') as f:
        table = serialize(source, f)
    logger.info("Level data written: %s (%d nodes)", path, len(table.nodes))
    return table


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

class _Reader:

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def _take(self, size: int) -> int:
        if size < 0 or self.offset + size > len(self.data):
            raise InputError(f"Level data truncated at byte {self.offset}")
        start = self.offset
        self.offset += size
        return start

    def unpack(self, fmt: struct.Struct) -> Tuple:
        start = self._take(fmt.size)
        return fmt.unpack_from(self.data, start)

    def count(self) -> int:
        (value,) = self.unpack(_INT)
        if value < 0:
            raise InputError(f"Negative count {value} at byte {self.offset - _INT.size}")
        return value

    def ints(self, n: int) -> Tuple[int, ...]:
        fmt = struct.Struct(f"<{n}i")
        return self.unpack(fmt)

    def floats(self, rows: int, columns: int) -> np.ndarray:
        if rows == 0:
            return np.empty((0, columns), dtype=_FLOAT_DTYPE)
        start = self._take(rows * columns * _FLOAT_DTYPE.itemsize)
        return np.frombuffer(self.data, dtype=_FLOAT_DTYPE, count=rows * columns,
                             offset=start).reshape(rows, columns)

    def raw(self, size: int) -> bytes:
        start = self._take(size)
        return self.data[start:start + size]


def deserialize(stream: Union[BinaryIO, bytes]) -> LevelData:
    """Read level data written by serialize().

    Raises:
        InputError: Bad magic, unsupported version or truncated data
    """
    data = stream if isinstance(stream, (bytes, bytearray)) else stream.read()
    reader = _Reader(bytes(data))

    magic, version, dimension = reader.unpack(_HEADER)
    if magic != MAGIC:
        raise InputError(f"Not a level data file (magic {magic!r})")
    if version != FORMAT_VERSION:
        raise InputError(f"Unsupported level data version {version}")
    if dimension not in (2, 3):
        raise InputError(f"Unsupported level dimension {dimension}")

    vertices = reader.floats(reader.count(), dimension)
    planes = reader.floats(reader.count(), dimension + 1)

    rooms = []
    for _ in range(reader.count()):
        raw = reader.raw(reader.count())
        try:
            rooms.append(raw.decode("ascii"))
        except UnicodeDecodeError:
            raise InputError("Room name is not ASCII") from None

    surfaces = []
    for _ in range(reader.count()):
        if dimension == 2:
            start, end, room_id = reader.ints(3)
            surfaces.append(SurfaceRecord((start, end), room_id))
        else:
            n = reader.count()
            *ids, room_id = reader.ints(n + 1)
            surfaces.append(SurfaceRecord(tuple(ids), room_id))

    nodes: List[NodeRecord] = []
    for _ in range(reader.count()):
        tag, a, b, c = reader.unpack(_NODE)
        if tag == LEAF_TAG:
            nodes.append(LeafRecord(a, b, c))
        elif tag == BRANCH_TAG:
            nodes.append(BranchRecord(a, b, c))
        else:
            raise InputError(f"Unknown node tag 0x{tag:02X}")

    return LevelData(version, dimension, vertices, planes, rooms, surfaces, nodes)


def read_level(path: Union[str, Path]) -> LevelData:
    with open(path, 'rb') as f:
        return deserialize(f)
