"""
Text Watermark Renderer
=======================
Draws a text watermark, once or tiled, onto a copy of the base image.

Technical Notes:
- The unit extent is (measured advance width, floor(text size))
- Text is drawn baseline-anchored: the baseline sits one unit height below
  the rotated placement origin
- The text color's own alpha byte is replaced by 255 * opacity
"""

import math
from typing import Optional

from PIL import Image

from ..errors import InvalidOptionsError
from .glyphs import FontResource, PillowGlyphService
from .options import WatermarkOptions
from .tiling import placement_origins


class TextWatermarkRenderer:
    """Renders text watermarks with a shared font and a glyph service."""

    def __init__(self, font: FontResource, glyphs: Optional[PillowGlyphService] = None):
        self._font = font
        self._glyphs = glyphs if glyphs is not None else PillowGlyphService()

    def render(self, base: Image.Image, options: WatermarkOptions) -> Image.Image:
        """
        Draw options.text onto a copy of base.

        Args:
            base: Base image. Never modified.
            options: Complete watermark options.

        Returns:
            New RGBA image with the text drawn.

        Raises:
            InvalidOptionsError: If the size, opacity or tile step is invalid.
            GlyphRenderError: If any draw fails; no partial image is returned.
        """
        if options.text_size <= 0:
            raise InvalidOptionsError(
                f"Text size must be positive, got {options.text_size}"
            )
        options.check_finite()
        options.check_opacity()

        text = options.text
        size = options.text_size
        fill = options.text_color.with_alpha(int(255 * options.opacity))

        text_width = self._glyphs.measure_text(self._font, text, size)
        text_height = int(math.floor(size))

        origins = placement_origins(base.size, (text_width, text_height), options)

        working = base.convert("RGBA") if base.mode != "RGBA" else base.copy()
        for x, y in origins:
            self._glyphs.draw_text(working, self._font, text, size, fill, (x, y + text_height))

        return working
