"""
Tile Layout
===========
Placement origins for tiled and single watermark layouts.

The grid is laid out axis-aligned starting at (margin, margin). Each cell's
placement point is then rotated about that cell's own center; the grid is
not rotated as one rigid body.
"""

import math
from typing import Iterator, Tuple

from ..errors import InvalidOptionsError
from .geometry import anchor_position, rotate_about_unit_center
from .options import WatermarkOptions


class TileGrid:
    """
    Lazy, finite, restartable sequence of tile origins.

    Origins are yielded row-major (outer loop y, inner loop x) while they
    stay strictly inside the base image. Every iter() starts again from
    (margin, margin).
    """

    def __init__(
            self,
            base_w: int,
            base_h: int,
            unit_w: int,
            unit_h: int,
            spacing: float,
            margin: int
    ):
        if not math.isfinite(spacing):
            raise InvalidOptionsError(f"Tile spacing must be finite, got {spacing}")
        gap = int(spacing)
        self.step_x = gap + unit_w
        self.step_y = gap + unit_h

        # A non-positive step would never reach the image edge
        if self.step_x <= 0 or self.step_y <= 0:
            raise InvalidOptionsError(
                f"Tile step must be positive, got ({self.step_x}, {self.step_y}) "
                f"from spacing {spacing} and unit size {unit_w}x{unit_h}"
            )

        self.base_w = base_w
        self.base_h = base_h
        self.margin = margin

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        for y in range(self.margin, self.base_h, self.step_y):
            for x in range(self.margin, self.base_w, self.step_x):
                yield x, y

    def __len__(self) -> int:
        return len(range(self.margin, self.base_w, self.step_x)) * \
            len(range(self.margin, self.base_h, self.step_y))


def placement_origins(
        base_size: Tuple[int, int],
        unit_size: Tuple[int, int],
        options: WatermarkOptions
) -> Iterator[Tuple[int, int]]:
    """
    Rotated top-left origins at which a renderer draws the unit.

    Validation happens here, before the caller touches any pixel.

    Args:
        base_size: (width, height) of the base image.
        unit_size: (width, height) of the watermark unit.
        options: Position, spacing, margin and angle are used.

    Returns:
        Iterator over (x, y) origins.

    Raises:
        InvalidOptionsError: If the tile step is not positive.
    """
    base_w, base_h = base_size
    unit_w, unit_h = unit_size
    angle = options.angle

    if options.is_tiled:
        grid = TileGrid(base_w, base_h, unit_w, unit_h, options.spacing, options.margin)
        return (
            rotate_about_unit_center(x, y, unit_w, unit_h, angle)
            for x, y in grid
        )

    x, y = anchor_position(base_w, base_h, unit_w, unit_h, options.position, options.margin)
    return iter([rotate_about_unit_center(x, y, unit_w, unit_h, angle)])
