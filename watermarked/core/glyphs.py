"""
Glyph Service
=============
Font loading, text measurement and glyph-run drawing using PIL/Pillow.

Technical Notes:
- FontResource keeps the raw font bytes; they are parsed once at load time
  to fail early and never change afterwards
- Sized FreeType faces are built once per size and cached; a face is only
  ever read after it is built, so concurrent operations can share it
- Text is drawn through a transparent layer and alpha-composited, which
  gives source-over blending against the current buffer contents
"""

import math
import threading
from io import BytesIO
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from .compositor import clip_rect
from ..errors import FontLoadError, GlyphRenderError

# Size used to validate font data at load time
_VALIDATION_SIZE = 12

# Maximum sized faces kept per font (prevents memory bloat)
MAX_FACE_CACHE_SIZE = 50

# Tried in order when no explicit font path is given
DEFAULT_FONT_CANDIDATES = (
    # Windows
    "C:/Windows/Fonts/msyh.ttc",
    # macOS
    "/System/Library/Fonts/PingFang.ttc",
    # Linux
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
)


class FontResource:
    """
    A scalable font loaded once and shared read-only.

    Use FontResource.from_path() for a TTF/OTF/TTC file or
    FontResource.default() for the first available system font, falling
    back to Pillow's bundled font.
    """

    def __init__(self, data: bytes, name: str = ""):
        """
        Initialize the FontResource.

        Args:
            data: Raw font file bytes.
            name: Human readable origin of the font (path or "default").

        Raises:
            FontLoadError: If the bytes are not a usable scalable font.
        """
        if not data:
            raise FontLoadError(f"Font data is empty: {name or '<bytes>'}")
        self._data = bytes(data)
        self.name = name
        self._cached_faces: Dict[float, ImageFont.FreeTypeFont] = {}
        self._cache_lock = threading.Lock()
        # Parse once so a broken font fails here and not mid-watermark
        self.face(_VALIDATION_SIZE)

    @classmethod
    def from_path(cls, font_path: Union[str, Path]) -> "FontResource":
        font_path = Path(font_path)
        try:
            with open(font_path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise FontLoadError(f"Cannot read font file {font_path}: {e}") from e
        return cls(data, name=str(font_path))

    @classmethod
    def default(cls) -> "FontResource":
        """Load the first installed candidate font, else Pillow's bundled font."""
        for candidate in DEFAULT_FONT_CANDIDATES:
            if Path(candidate).is_file():
                try:
                    return cls.from_path(candidate)
                except FontLoadError:
                    continue

        bundled = ImageFont.load_default(size=_VALIDATION_SIZE)
        data = getattr(bundled, "font_bytes", None)
        if not data:
            raise FontLoadError(
                "No scalable font available. Install a TrueType font or "
                "use a Pillow build with FreeType support."
            )
        return cls(data, name="default")

    def face(self, size: float) -> ImageFont.FreeTypeFont:
        """
        Get or create a cached face for the given size.

        Raises:
            FontLoadError: If FreeType rejects the font data.
        """
        with self._cache_lock:
            cached = self._cached_faces.get(size)
        if cached is not None:
            return cached

        try:
            face = ImageFont.truetype(BytesIO(self._data), size)
        except (OSError, ValueError) as e:
            raise FontLoadError(f"Cannot load font {self.name or '<bytes>'}: {e}") from e

        with self._cache_lock:
            # Another thread may have built the same size meanwhile
            if size in self._cached_faces:
                return self._cached_faces[size]
            # Evict oldest entry if cache is full
            if len(self._cached_faces) >= MAX_FACE_CACHE_SIZE:
                oldest_size = next(iter(self._cached_faces))
                del self._cached_faces[oldest_size]
            self._cached_faces[size] = face
        return face


class PillowGlyphService:
    """Measures and draws text runs with a FontResource."""

    def measure_text(self, font: FontResource, text: str, size: float) -> int:
        """
        Advance width of the rendered text in pixels, rounded half up.

        Raises:
            GlyphRenderError: If the text cannot be laid out.
        """
        try:
            length = font.face(size).getlength(text)
        except (FontLoadError, OSError, ValueError) as e:
            raise GlyphRenderError(f"Cannot measure text {text!r}: {e}") from e
        return int(math.floor(length + 0.5))

    def draw_text(
            self,
            buffer: Image.Image,
            font: FontResource,
            text: str,
            size: float,
            color: Tuple[int, int, int, int],
            position: Tuple[int, int]
    ) -> None:
        """
        Draw a text run onto an RGBA buffer in place.

        Args:
            buffer: RGBA image to draw on.
            font: Shared font resource.
            text: Text to draw.
            size: Font size in pixels.
            color: RGBA fill; the alpha controls blending.
            position: Left end of the text baseline.

        Raises:
            GlyphRenderError: If the glyph run cannot be rasterized.
        """
        try:
            face = font.face(size)
            left, top, right, bottom = ImageDraw.Draw(buffer).textbbox(
                position, text, font=face, anchor="ls"
            )
            rect = clip_rect(buffer.size, (right - left, bottom - top), left, top)
            if rect is None:
                return

            # Only the part of the run inside the buffer is composited
            x0, y0 = rect[:2]
            region = buffer.crop(rect)
            layer = Image.new("RGBA", region.size, (0, 0, 0, 0))
            ImageDraw.Draw(layer).text(
                (position[0] - x0, position[1] - y0), text,
                font=face, fill=color, anchor="ls"
            )
            buffer.paste(Image.alpha_composite(region, layer), (x0, y0))
        except (FontLoadError, OSError, ValueError) as e:
            raise GlyphRenderError(f"Cannot draw text {text!r}: {e}") from e


def load_font(font: Optional[Union[str, Path, FontResource]] = None) -> FontResource:
    """Resolve an engine font argument to a FontResource."""
    if isinstance(font, FontResource):
        return font
    if font is None:
        return FontResource.default()
    return FontResource.from_path(font)
