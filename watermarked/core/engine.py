"""
Watermark Engine
================
Facade owning the shared font and exposing the two watermark operations.

Usage:
    watermarker = Watermarker()
    result = watermarker.add_text_watermark(image, options)
    result = watermarker.add_image_watermark(image, "logo.png", options)

Both operations return a new image and never modify the caller's image.
"""

from pathlib import Path
from typing import Optional, Union

from PIL import Image

from .glyphs import FontResource, PillowGlyphService, load_font
from .image import ImageWatermarkRenderer, WatermarkSource
from .options import WatermarkOptions
from .text import TextWatermarkRenderer


class Watermarker:
    """
    Adds text or image watermarks to images.

    The font is loaded once here and shared read-only by every call, so one
    instance can serve concurrent callers.
    """

    def __init__(
            self,
            font: Optional[Union[str, Path, FontResource]] = None,
            glyphs: Optional[PillowGlyphService] = None
    ):
        """
        Initialize the Watermarker.

        Args:
            font: Font file path or FontResource. If None, uses the first
                  available system font or Pillow's bundled font.
            glyphs: Optional glyph service used for text watermarks.

        Raises:
            FontLoadError: If no font can be loaded. The engine is unusable
                           without one.
        """
        self._font = load_font(font)
        self._text_renderer = TextWatermarkRenderer(self._font, glyphs)
        self._image_renderer = ImageWatermarkRenderer()

    @property
    def font(self) -> FontResource:
        return self._font

    def add_text_watermark(
            self,
            base_image: Image.Image,
            options: WatermarkOptions
    ) -> Image.Image:
        """
        Draw options.text onto a copy of base_image.

        Raises:
            InvalidOptionsError: If the options are invalid.
            GlyphRenderError: If text rendering fails.
        """
        return self._text_renderer.render(base_image, options)

    def add_image_watermark(
            self,
            base_image: Image.Image,
            watermark_path: WatermarkSource,
            options: WatermarkOptions
    ) -> Image.Image:
        """
        Composite the watermark image onto a copy of base_image.

        Raises:
            InvalidOptionsError: If the options are invalid.
            DecodeError: If the watermark image cannot be decoded.
        """
        return self._image_renderer.render(base_image, watermark_path, options)
