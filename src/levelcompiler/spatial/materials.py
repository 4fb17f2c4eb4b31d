"""
Material density codes.

Ordered from least to most dense.  A surface separates its front material
from its back material; the back is the denser side for a wall.
"""

from enum import IntEnum


class Material(IntEnum):
    AIR = 0
    WATER = 1
    SLIME = 2
    LAVA = 3
    SKY = 4
    SOLID = 5

    def __str__(self) -> str:
        return self.name


# A surface backed by one of these is opaque from the front.
SEALING_MATERIALS = frozenset({Material.SOLID, Material.SKY})


def is_two_sided(back_material: int) -> bool:
    return back_material not in SEALING_MATERIALS
