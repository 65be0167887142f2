"""
Watermarked Package
===================
Text and image watermarks for raster images: single or tiled placement,
rotation, opacity and format-preserving output.

Modules:
    - core: Watermark compositing engine (no UI or thread dependencies)
    - fileio: Image codec, file validation and upload store
    - workers: QThread worker for batch processing

Usage:
    from watermarked.core import Watermarker, WatermarkOptions, Position
    from watermarked.fileio import load_image, save_image
    from watermarked.workers import WatermarkWorker, WatermarkJob
"""

__version__ = "1.0.0"
__app_name__ = "Watermarked"

# Core exports
from .core import Watermarker, WatermarkOptions, Position, TextColor
from .errors import (
    WatermarkError, DecodeError, EncodeError,
    GlyphRenderError, FontLoadError, InvalidOptionsError
)

__all__ = [
    # Version info
    "__version__",
    "__app_name__",

    # Core
    "Watermarker",
    "WatermarkOptions",
    "Position",
    "TextColor",

    # Errors
    "WatermarkError",
    "DecodeError",
    "EncodeError",
    "GlyphRenderError",
    "FontLoadError",
    "InvalidOptionsError",
]
