"""
Quake MAP format reader and writer.

Handles the classic text format:

    {
    "classname" "worldspawn"
    "key" "value"
    {
    ( x1 y1 z1 ) ( x2 y2 z2 ) ( x3 y3 z3 ) TEXTURE x_off y_off rot x_scale y_scale
    ...
    }
    }

Coordinates are read exactly (decimal text becomes a Fraction).  Each
brush plane is three points; the solid lies behind the plane they define.
"""

from __future__ import annotations
import io
import logging
from dataclasses import dataclass, field
from fractions import Fraction
from pathlib import Path
from typing import Dict, Iterator, List, Optional, TextIO, Tuple, Union

from ..errors import InputError
from ..geometry.points import Point, to_rational

logger = logging.getLogger(__name__)


@dataclass
class MapPlane:
    """One brush face: three points plus texture alignment."""
    p1: Point
    p2: Point
    p3: Point
    texture: str = "CRATE1_5"
    x_offset: Fraction = Fraction(0)
    y_offset: Fraction = Fraction(0)
    rotation: Fraction = Fraction(0)
    x_scale: Fraction = Fraction(1)
    y_scale: Fraction = Fraction(1)


@dataclass
class MapBrush:
    planes: List[MapPlane] = field(default_factory=list)
    brush_id: int = 0

    def validate(self) -> bool:
        """A closed brush needs at least four planes."""
        return len(self.planes) >= 4


@dataclass
class MapEntity:
    classname: str
    properties: Dict[str, str] = field(default_factory=dict)
    brushes: List[MapBrush] = field(default_factory=list)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        if key == "classname":
            return self.classname
        return self.properties.get(key, default)

    @property
    def origin(self) -> Optional[Point]:
        value = self.properties.get("origin")
        if value is None:
            return None
        parts = value.split()
        if len(parts) != 3:
            raise InputError(f"Entity '{self.classname}' has malformed origin: {value!r}")
        return tuple(to_rational(p) for p in parts)


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------

_PUNCTUATION = "{}()[]"


class _Tokenizer:
    """Splits map text into (token, quoted, line) triples."""

    def __init__(self, text: str):
        self._tokens = list(self._scan(text))
        self._pos = 0

    @staticmethod
    def _scan(text: str) -> Iterator[Tuple[str, bool, int]]:
        line = 1
        i = 0
        length = len(text)
        while i < length:
            ch = text[i]
            if ch == "\n":
                line += 1
                i += 1
            elif ch.isspace():
                i += 1
            elif text.startswith("//", i):
                end = text.find("\n", i)
                i = length if end < 0 else end
            elif ch == '"':
                end = text.find('"', i + 1)
                if end < 0:
                    raise InputError(f"Line {line}: unterminated string")
                value = text[i + 1:end]
                yield value, True, line
                line += value.count("\n")
                i = end + 1
            elif ch in _PUNCTUATION:
                yield ch, False, line
                i += 1
            else:
                start = i
                while i < length and not text[i].isspace() and text[i] not in _PUNCTUATION \
                        and text[i] != '"':
                    i += 1
                yield text[start:i], False, line

    @property
    def line(self) -> int:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos][2]
        return self._tokens[-1][2] if self._tokens else 1

    def at_end(self) -> bool:
        return self._pos >= len(self._tokens)

    def peek(self) -> Tuple[str, bool]:
        if self.at_end():
            raise InputError(f"Line {self.line}: unexpected end of file")
        token, quoted, _ = self._tokens[self._pos]
        return token, quoted

    def next(self) -> Tuple[str, bool]:
        token = self.peek()
        self._pos += 1
        return token

    def expect(self, symbol: str) -> None:
        line = self.line
        token, quoted = self.next()
        if quoted or token != symbol:
            raise InputError(f"Line {line}: expected '{symbol}', found '{token}'")

    def number(self) -> Fraction:
        line = self.line
        token, quoted = self.next()
        if quoted:
            raise InputError(f"Line {line}: expected a number, found \"{token}\"")
        try:
            return to_rational(token)
        except InputError:
            raise InputError(f"Line {line}: expected a number, found '{token}'") from None


def parse_map(text: str) -> List[MapEntity]:
    """Parse MAP text into entities.

    Raises:
        InputError: If the text is malformed (message names the line)
    """
    tokens = _Tokenizer(text)
    entities: List[MapEntity] = []
    brush_counter = 0
    while not tokens.at_end():
        entity, brush_counter = _parse_entity(tokens, brush_counter)
        entities.append(entity)
    logger.debug("Parsed %d entities, %d brushes", len(entities), brush_counter)
    return entities


def load_map(path: Union[str, Path]) -> List[MapEntity]:
    with open(path, 'r', encoding='utf-8') as f:
        return parse_map(f.read())


def _parse_entity(tokens: _Tokenizer, brush_counter: int) -> Tuple[MapEntity, int]:
    start_line = tokens.line
    tokens.expect("{")
    properties: Dict[str, str] = {}
    brushes: List[MapBrush] = []
    while True:
        token, quoted = tokens.peek()
        if quoted:
            key, _ = tokens.next()
            line = tokens.line
            value, value_quoted = tokens.next()
            if not value_quoted:
                raise InputError(f"Line {line}: expected a quoted value for key '{key}'")
            properties[key] = value
        elif token == "{":
            brushes.append(_parse_brush(tokens, brush_counter))
            brush_counter += 1
        elif token == "}":
            tokens.next()
            break
        else:
            raise InputError(f"Line {tokens.line}: unexpected '{token}' in entity")

    classname = properties.pop("classname", None)
    if classname is None:
        raise InputError(f"Line {start_line}: entity has no classname")
    return MapEntity(classname, properties, brushes), brush_counter


def _parse_brush(tokens: _Tokenizer, brush_id: int) -> MapBrush:
    tokens.expect("{")
    brush = MapBrush(brush_id=brush_id)
    while True:
        token, quoted = tokens.peek()
        if token == "}" and not quoted:
            tokens.next()
            return brush
        brush.planes.append(_parse_plane(tokens))


def _parse_plane(tokens: _Tokenizer) -> MapPlane:
    points = []
    for _ in range(3):
        tokens.expect("(")
        points.append((tokens.number(), tokens.number(), tokens.number()))
        tokens.expect(")")

    line = tokens.line
    texture, _ = tokens.next()
    if texture in _PUNCTUATION:
        raise InputError(f"Line {line}: expected a texture name, found '{texture}'")
    next_token, _ = tokens.peek()
    if next_token == "[":
        raise InputError(f"Line {line}: Valve 220 texture axes are not supported")

    x_offset, y_offset, rotation = tokens.number(), tokens.number(), tokens.number()
    x_scale, y_scale = tokens.number(), tokens.number()
    return MapPlane(points[0], points[1], points[2], texture,
                    x_offset, y_offset, rotation, x_scale, y_scale)


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------

def _format_number(value) -> str:
    value = to_rational(value)
    if value.denominator == 1:
        return str(value.numerator)
    return f"{float(value):g}"


def _format_point(point: Point) -> str:
    return "( " + " ".join(_format_number(c) for c in point) + " )"


class MapWriter:
    """Writes entities back out in MAP format."""

    def __init__(self):
        self.entities: List[MapEntity] = []

    def add_entity(self, entity: MapEntity) -> None:
        self.entities.append(entity)

    def write(self, file: TextIO) -> None:
        total_brushes = sum(len(e.brushes) for e in self.entities)
        file.write(f"// Total entities: {len(self.entities)}\n")
        file.write(f"// Total brushes: {total_brushes}\n")
        for entity in self.entities:
            self._write_entity(entity, file)

    def write_to_file(self, filename: Union[str, Path]) -> None:
        if not self.entities:
            raise InputError("No entities to write. Add at least a worldspawn entity.")
        with open(filename, 'w', encoding='utf-8') as file:
            self.write(file)

    def _write_entity(self, entity: MapEntity, file: TextIO) -> None:
        file.write("{\n")
        file.write(f'"classname" "{entity.classname}"\n')
        for key, value in entity.properties.items():
            file.write(f'"{key}" "{value}"\n')
        for brush in entity.brushes:
            self._write_brush(brush, file)
        file.write("}\n")

    def _write_brush(self, brush: MapBrush, file: TextIO) -> None:
        file.write(f"// brush {brush.brush_id}\n")
        file.write("{\n")
        for plane in brush.planes:
            self._write_plane(plane, file)
        file.write("}\n")

    def _write_plane(self, plane: MapPlane, file: TextIO) -> None:
        points = " ".join(_format_point(p) for p in (plane.p1, plane.p2, plane.p3))
        alignment = " ".join(_format_number(v) for v in (
            plane.x_offset, plane.y_offset, plane.rotation, plane.x_scale, plane.y_scale))
        file.write(f"{points} {plane.texture} {alignment}\n")


def format_map(entities: List[MapEntity]) -> str:
    writer = MapWriter()
    for entity in entities:
        writer.add_entity(entity)
    buffer = io.StringIO()
    writer.write(buffer)
    return buffer.getvalue()
