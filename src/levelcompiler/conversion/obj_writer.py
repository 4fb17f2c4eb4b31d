"""
Wavefront OBJ export for compiled trees.

Leaf surfaces are written as explicit polygons (3D) or line elements (2D),
grouped per leaf so a viewer can toggle the convex cells one at a time.
Materials in the .mtl are the surface textures (or rooms when untextured).
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from ..geometry import Point
from ..spatial import BspNode, Material, Surface, iter_leaves

Vec3 = Tuple[float, float, float]

DEFAULT_MATERIAL = "default"


def _surface_material(surface: Surface) -> str:
    name = surface.texture or surface.room or Material(surface.back_material).name.lower()
    return name.replace(" ", "_")


def _to_vec3(point: Point) -> Vec3:
    # idTech Z is up; OBJ Y is up
    if len(point) == 2:
        return (float(point[0]), 0.0, -float(point[1]))
    return (float(point[0]), float(point[2]), -float(point[1]))


class ObjWriter:
    """Write surface geometry as Wavefront OBJ + optional MTL."""

    def __init__(self):
        self._vertices: List[Vec3] = []
        self._vertex_index: Dict[Point, int] = {}
        # (group, vertex indices 1-based, material, is_line)
        self._elements: List[Tuple[str, List[int], str, bool]] = []
        self._materials: Dict[str, bool] = {}

    def _vertex(self, point: Point) -> int:
        index = self._vertex_index.get(point)
        if index is None:
            self._vertices.append(_to_vec3(point))
            index = len(self._vertices)  # 1-based
            self._vertex_index[point] = index
        return index

    def add_surfaces(self, surfaces: Iterable[Surface], group: str = "surfaces"):
        for surface in surfaces:
            points = surface.facet.points
            indices = [self._vertex(p) for p in points]
            material = _surface_material(surface)
            self._elements.append((group, indices, material, len(points) == 2))
            self._materials[material] = True

    def add_tree(self, tree: BspNode):
        """Add every leaf's surfaces, one group per leaf."""
        for index, leaf in enumerate(iter_leaves(tree)):
            self.add_surfaces(leaf.surfaces, group=f"leaf_{index}")

    def write(self, obj_path: str, write_mtl: bool = True):
        """Write .obj (and optionally .mtl) files."""
        obj_p = Path(obj_path)
        mtl_name = obj_p.stem + ".mtl"

        lines = []
        lines.append("# levelcompiler OBJ export")
        lines.append(f"# {len(self._vertices)} vertices, {len(self._elements)} elements")
        if write_mtl:
            lines.append(f"mtllib {mtl_name}")
        lines.append("")

        for v in self._vertices:
            lines.append(f"v {v[0]:.4f} {v[1]:.4f} {v[2]:.4f}")

        lines.append("")

        current_group: Optional[str] = None
        current_mat: Optional[str] = None
        for group, indices, mat, is_line in self._elements:
            if group != current_group:
                lines.append(f"g {group}")
                current_group = group
                current_mat = None
            if mat != current_mat:
                lines.append(f"usemtl {mat}")
                current_mat = mat
            prefix = "l" if is_line else "f"
            lines.append(f"{prefix} " + " ".join(str(i) for i in indices))

        obj_p.write_text("\n".join(lines) + "\n")

        if write_mtl:
            self._write_mtl(str(obj_p.parent / mtl_name))

    def _write_mtl(self, mtl_path: str):
        lines = ["# levelcompiler MTL", ""]
        for mat in sorted(self._materials.keys() or [DEFAULT_MATERIAL]):
            lines.append(f"newmtl {mat}")
            lines.append("Ka 0.2 0.2 0.2")
            lines.append("Kd 0.8 0.8 0.8")
            lines.append("Ks 0.0 0.0 0.0")
            lines.append("d 1.0")
            lines.append("")
        Path(mtl_path).write_text("\n".join(lines) + "\n")

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def face_count(self) -> int:
        return len(self._elements)
