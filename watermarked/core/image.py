"""
Image Watermark Renderer
========================
Scales a watermark image and composites it, once or tiled, onto a copy of
the base image.

Technical Notes:
- Scaling uses bilinear resampling to keep rotated and tiled output smooth
- The scaled extent is floor(size * scale); a zero extent is an error
- Placement is shared with the text renderer (see tiling.placement_origins)
"""

import math
from pathlib import Path
from typing import Tuple, Union

from PIL import Image

from ..errors import DecodeError, InvalidOptionsError
from ..fileio.codec import decode, load_image
from .compositor import blend
from .options import WatermarkOptions
from .tiling import placement_origins

WatermarkSource = Union[str, Path, bytes, Image.Image]


def _decode_watermark(source: WatermarkSource) -> Image.Image:
    try:
        if isinstance(source, Image.Image):
            return source.convert("RGBA")
        if isinstance(source, (bytes, bytearray)):
            return decode(bytes(source))
        return load_image(source)
    except DecodeError as e:
        raise DecodeError(f"Invalid watermark file: {e}") from e


def scaled_extent(size: Tuple[int, int], scale: float) -> Tuple[int, int]:
    """
    Watermark extent after scaling, each side floored.

    Raises:
        InvalidOptionsError: If either side would be zero.
    """
    width = int(math.floor(size[0] * scale))
    height = int(math.floor(size[1] * scale))
    if width <= 0 or height <= 0:
        raise InvalidOptionsError(
            f"Scale {scale} turns a {size[0]}x{size[1]} watermark into "
            f"{width}x{height}"
        )
    return width, height


class ImageWatermarkRenderer:
    """Renders image watermarks with the pixel compositor."""

    def render(
            self,
            base: Image.Image,
            watermark: WatermarkSource,
            options: WatermarkOptions
    ) -> Image.Image:
        """
        Composite a watermark image onto a copy of base.

        Args:
            base: Base image. Never modified.
            watermark: Watermark file path, encoded bytes or decoded image.
            options: Complete watermark options.

        Returns:
            New RGBA image with the watermark composited.

        Raises:
            InvalidOptionsError: If scale, opacity or tile step is invalid.
            DecodeError: If the watermark cannot be decoded.
        """
        if options.scale <= 0:
            raise InvalidOptionsError(f"Scale must be positive, got {options.scale}")
        options.check_finite()
        options.check_opacity()

        mark = _decode_watermark(watermark)
        extent = scaled_extent(mark.size, options.scale)
        origins = placement_origins(base.size, extent, options)

        if extent == mark.size:
            scaled = mark
        else:
            scaled = mark.resize(extent, Image.Resampling.BILINEAR)

        working = base.convert("RGBA") if base.mode != "RGBA" else base.copy()
        for x, y in origins:
            blend(working, scaled, x, y, options.opacity)

        return working
