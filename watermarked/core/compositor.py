"""
Pixel Compositor
================
Writes an opacity-scaled source image into a destination buffer.

Technical Notes:
- The source alpha is scaled at 16-bit precision and reduced to 8 bits
  only when written
- The destination pixel is replaced, not accumulated: overlapping tiles
  each write against the current destination state
- Only the intersection of the source rectangle with the destination is
  written; everything else is dropped
"""

from typing import Optional, Tuple

import numpy as np
from PIL import Image


def clip_rect(
        dst_size: Tuple[int, int],
        src_size: Tuple[int, int],
        origin_x: int,
        origin_y: int
) -> Optional[Tuple[int, int, int, int]]:
    """
    Destination rectangle covered by a source placed at an origin.

    Returns:
        (left, top, right, bottom) inside the destination, or None when the
        source lies entirely outside.
    """
    dst_w, dst_h = dst_size
    src_w, src_h = src_size

    left = max(origin_x, 0)
    top = max(origin_y, 0)
    right = min(origin_x + src_w, dst_w)
    bottom = min(origin_y + src_h, dst_h)

    if left >= right or top >= bottom:
        return None
    return left, top, right, bottom


def scale_alpha(pixels: np.ndarray, opacity: float) -> np.ndarray:
    """
    Scale the alpha channel of an RGBA array by opacity.

    The 8-bit alpha is widened to 16 bits (a * 257), multiplied, truncated
    and narrowed back, so opacity 1.0 leaves alpha unchanged and opaque
    alpha at 0.5 becomes 127.
    """
    scaled = pixels.astype(np.uint32)
    alpha16 = scaled[..., 3] * 257
    scaled[..., 3] = (alpha16 * opacity).astype(np.uint32) >> 8
    return scaled.astype(np.uint8)


def blend(
        dst: Image.Image,
        src: Image.Image,
        origin_x: int,
        origin_y: int,
        opacity: float
) -> None:
    """
    Write src into dst at (origin_x, origin_y) with its alpha scaled.

    dst is modified in place and must be an RGBA image. Writes landing
    outside dst are dropped; a source fully outside leaves dst unchanged.

    Args:
        dst: Destination RGBA buffer.
        src: Source image (converted to RGBA if needed).
        origin_x, origin_y: Destination position of the source's top-left.
        opacity: 0.0-1.0 factor applied to every source alpha value.
    """
    rect = clip_rect(dst.size, src.size, origin_x, origin_y)
    if rect is None:
        return

    left, top, right, bottom = rect
    region = src.crop((left - origin_x, top - origin_y, right - origin_x, bottom - origin_y))
    if region.mode != "RGBA":
        region = region.convert("RGBA")

    pixels = scale_alpha(np.asarray(region), opacity)
    dst.paste(Image.fromarray(pixels), (left, top))
