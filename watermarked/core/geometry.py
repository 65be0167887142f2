"""
Placement Geometry
==================
Pure functions for anchoring a watermark unit on a base image and for
rotating placement points.

Technical Notes:
- Coordinates are raster coordinates: y grows downward
- No clamping: a unit larger than the base yields negative coordinates
- Rotated coordinates are truncated toward zero, never rounded
"""

import math
from typing import Tuple, Union

from .options import Position


def _half(value: int) -> int:
    """Integer half, truncating toward zero (-5 -> -2)."""
    half = abs(value) // 2
    return half if value >= 0 else -half


def anchor_position(
        base_w: int,
        base_h: int,
        unit_w: int,
        unit_h: int,
        position: Union[Position, str],
        margin: int
) -> Tuple[int, int]:
    """
    Top-left placement of a unit for an anchored position.

    Args:
        base_w, base_h: Base image size.
        unit_w, unit_h: Watermark unit size.
        position: Anchor position or its wire name ("topLeft"). Anything
                  that is not a corner is centered.
        margin: Distance from the image edges (ignored for CENTER).

    Returns:
        (x, y) of the unit's top-left corner before rotation.
    """
    position = Position.parse(position)
    if position is Position.TOP_LEFT:
        return margin, margin
    if position is Position.TOP_RIGHT:
        return base_w - unit_w - margin, margin
    if position is Position.BOTTOM_LEFT:
        return margin, base_h - unit_h - margin
    if position is Position.BOTTOM_RIGHT:
        return base_w - unit_w - margin, base_h - unit_h - margin
    # CENTER, and the default for anything else
    return _half(base_w - unit_w), _half(base_h - unit_h)


def rotate_point(x: int, y: int, cx: int, cy: int, angle: float) -> Tuple[int, int]:
    """
    Rotate (x, y) about the pivot (cx, cy) by angle degrees.

    The rotated offset from the pivot is truncated toward zero before being
    translated back, so rotate_point(10, 0, 0, 0, 90) == (0, 10).
    """
    rad = math.radians(angle)
    cos = math.cos(rad)
    sin = math.sin(rad)

    dx = x - cx
    dy = y - cy

    rx = dx * cos - dy * sin
    ry = dx * sin + dy * cos

    return int(rx) + cx, int(ry) + cy


def unit_pivot(x: int, y: int, unit_w: int, unit_h: int) -> Tuple[int, int]:
    """Center of a unit placed at (x, y), used as its rotation pivot."""
    return x + _half(unit_w), y + _half(unit_h)


def rotate_about_unit_center(
        x: int,
        y: int,
        unit_w: int,
        unit_h: int,
        angle: float
) -> Tuple[int, int]:
    """Rotate a unit's placement point about the unit's own center."""
    cx, cy = unit_pivot(x, y, unit_w, unit_h)
    return rotate_point(x, y, cx, cy, angle)
