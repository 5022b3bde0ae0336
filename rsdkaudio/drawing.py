"""Drawing flags and the graphics surface table."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

SURFACE_COUNT = 32
GFXDATA_SIZE = 0x800 * 0x800
DRAWLAYER_COUNT = 8


class FlipFlags(IntEnum):
    NONE = 0
    X = 1
    Y = 2
    XY = 3


class InkFlags(IntEnum):
    NONE = 0
    BLEND = 1
    ALPHA = 2
    ADD = 3
    SUB = 4


class DrawFXFlags(IntEnum):
    SCALE = 0
    ROTATE = 1
    ROTOZOOM = 2
    INK = 3
    TINT = 4
    FLIP = 5


@dataclass
class GFXSurface:
    file_name: str = ""
    height: int = 0
    width: int = 0
    width_shifted: int = 0
    tex_start_x: int = 0
    tex_start_y: int = 0
    data_position: int = 0


def check_surface_size(size: int) -> bool:
    """True if ``size`` is a power of two from 2 up to 1024."""
    return 2 <= size < 2048 and size & (size - 1) == 0


class GraphicsStore:
    """Surface table and the shared pixel buffer surfaces are stored in."""

    def __init__(self) -> None:
        self.surfaces = [GFXSurface() for _ in range(SURFACE_COUNT)]
        self.data_position = 0
        self.graphic_data = bytearray(GFXDATA_SIZE)

    def clear(self) -> None:
        for surface in self.surfaces:
            surface.file_name = ""
        self.data_position = 0