"""
Core Module - Watermark Compositing Engine
==========================================
Placement geometry, tile layout, pixel compositing and the text/image
renderers. This module contains no UI or thread dependencies and does no
logging; failures are raised to the caller.
"""

from .compositor import blend
from .engine import Watermarker
from .geometry import anchor_position, rotate_point
from .glyphs import FontResource, PillowGlyphService
from .image import ImageWatermarkRenderer
from .options import Position, TextColor, WatermarkOptions
from .text import TextWatermarkRenderer
from .tiling import TileGrid, placement_origins

__all__ = [
    "Watermarker",
    "WatermarkOptions",
    "Position",
    "TextColor",
    "FontResource",
    "PillowGlyphService",
    "TextWatermarkRenderer",
    "ImageWatermarkRenderer",
    "TileGrid",
    "placement_origins",
    "anchor_position",
    "rotate_point",
    "blend",
]
