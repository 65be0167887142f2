"""
Watermark Errors
================
Exception hierarchy shared by the core and its file collaborators.

Every failure aborts the current operation. Messages name the step that
failed so the caller can surface them to the user unchanged.
"""


class WatermarkError(Exception):
    """Base class for all watermarking failures."""


class DecodeError(WatermarkError):
    """Image bytes could not be decoded."""


class EncodeError(WatermarkError):
    """A pixel buffer could not be encoded to the requested format."""


class GlyphRenderError(WatermarkError):
    """The font service failed to rasterize a glyph run."""


class FontLoadError(WatermarkError):
    """No usable font could be loaded for the engine."""


class InvalidOptionsError(WatermarkError, ValueError):
    """Watermark options that would produce no output or never terminate."""
