"""
Tests for the text and image watermark renderers and the engine facade.

Run with: python -m pytest tests/test_renderers.py -v
"""

import sys
import tempfile
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
import pytest
from PIL import Image, ImageFont

from watermarked.core import (
    Watermarker, WatermarkOptions, Position, TextColor,
    TextWatermarkRenderer, ImageWatermarkRenderer, FontResource
)
from watermarked.errors import (
    DecodeError, FontLoadError, GlyphRenderError, InvalidOptionsError
)


class RecordingGlyphs:
    """Glyph service stand-in with a fixed text width that records draws."""

    def __init__(self, width: int, fail_after: int = -1):
        self.width = width
        self.fail_after = fail_after
        self.draws = []

    def measure_text(self, font, text, size):
        return self.width

    def draw_text(self, buffer, font, text, size, color, position):
        if len(self.draws) == self.fail_after:
            raise GlyphRenderError(f"Cannot draw text {text!r}: unsupported glyph")
        self.draws.append((position, color))


def make_options(**overrides) -> WatermarkOptions:
    fields = dict(
        text="WM",
        text_size=12,
        text_color=TextColor(255, 0, 0, 255),
        font_family="",
        scale=1.0,
        opacity=1.0,
        angle=0.0,
        spacing=0.0,
        position=Position.CENTER,
        margin=0,
    )
    fields.update(overrides)
    return WatermarkOptions(**fields)


def noise_image(width: int, height: int, seed: int = 1) -> Image.Image:
    rng = np.random.default_rng(seed)
    return Image.fromarray(rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8))


@pytest.fixture(scope="module")
def watermarker() -> Watermarker:
    return Watermarker()


# ===== Text renderer =====

def test_text_center_anchor():
    glyphs = RecordingGlyphs(width=40)
    renderer = TextWatermarkRenderer(None, glyphs)
    base = Image.new("RGBA", (100, 100), (0, 0, 0, 0))

    renderer.render(base, make_options(text_size=12))

    # Anchor (30, 44); the baseline sits one text height lower
    assert glyphs.draws == [((30, 56), (255, 0, 0, 255))]


def test_text_color_alpha_comes_from_opacity():
    glyphs = RecordingGlyphs(width=40)
    renderer = TextWatermarkRenderer(None, glyphs)
    options = make_options(text_color=TextColor(10, 20, 30, 200), opacity=0.5)

    renderer.render(Image.new("RGBA", (100, 100)), options)

    assert glyphs.draws[0][1] == (10, 20, 30, 127)


def test_text_height_is_floored_size():
    glyphs = RecordingGlyphs(width=40)
    renderer = TextWatermarkRenderer(None, glyphs)

    renderer.render(Image.new("RGBA", (100, 100)), make_options(text_size=12.9))

    assert glyphs.draws[0][0] == (30, 56)


def test_text_tiled_draws_every_cell():
    glyphs = RecordingGlyphs(width=20)
    renderer = TextWatermarkRenderer(None, glyphs)
    options = make_options(position=Position.TILED, text_size=10, spacing=10)

    renderer.render(Image.new("RGBA", (100, 50)), options)

    expected = [(x, y + 10) for y in (0, 20, 40) for x in (0, 30, 60, 90)]
    assert [position for position, _ in glyphs.draws] == expected


def test_text_tiled_invalid_step_draws_nothing():
    glyphs = RecordingGlyphs(width=0)
    renderer = TextWatermarkRenderer(None, glyphs)
    options = make_options(position=Position.TILED, spacing=0)

    with pytest.raises(InvalidOptionsError):
        renderer.render(Image.new("RGBA", (100, 50)), options)
    assert glyphs.draws == []


def test_text_draw_failure_aborts():
    glyphs = RecordingGlyphs(width=20, fail_after=3)
    renderer = TextWatermarkRenderer(None, glyphs)
    options = make_options(position=Position.TILED, text_size=10, spacing=10)

    with pytest.raises(GlyphRenderError):
        renderer.render(Image.new("RGBA", (100, 50)), options)


@pytest.mark.parametrize("overrides", [
    {"text_size": 0},
    {"text_size": -4},
    {"opacity": 1.5},
    {"opacity": -0.1},
])
def test_text_rejects_invalid_options(overrides):
    renderer = TextWatermarkRenderer(None, RecordingGlyphs(width=40))
    with pytest.raises(InvalidOptionsError):
        renderer.render(Image.new("RGBA", (100, 100)), make_options(**overrides))


@pytest.mark.parametrize("overrides", [
    {"text_size": float("nan")},
    {"text_size": float("inf")},
    {"angle": float("inf")},
    {"position": Position.TILED, "spacing": float("inf")},
])
def test_text_rejects_non_finite_options(overrides):
    glyphs = RecordingGlyphs(width=40)
    renderer = TextWatermarkRenderer(None, glyphs)
    with pytest.raises(InvalidOptionsError, match="finite"):
        renderer.render(Image.new("RGBA", (100, 100)), make_options(**overrides))
    assert glyphs.draws == []


def test_text_watermark_draws_pixels(watermarker):
    base = Image.new("RGB", (200, 100), (255, 255, 255))
    options = make_options(text="WM", text_size=40, text_color=TextColor(0, 0, 0, 255))

    result = watermarker.add_text_watermark(base, options)

    assert result is not base
    assert result.mode == "RGBA"
    assert result.size == base.size

    pixels = np.asarray(result)
    assert (pixels[..., :3] < 128).any(), "No text pixels drawn"
    # Corners are far from the centered text
    assert result.getpixel((0, 0)) == (255, 255, 255, 255)

    # Caller's image untouched
    assert base.mode == "RGB"
    assert (np.asarray(base) == 255).all()


def test_text_watermark_tiled_and_rotated(watermarker):
    base = Image.new("RGBA", (300, 200), (255, 255, 255, 255))
    options = make_options(
        text="NightWatch", text_size=20, text_color=TextColor(0, 0, 255, 255),
        opacity=0.6, angle=-30, spacing=15, position=Position.TILED, margin=4
    )

    result = watermarker.add_text_watermark(base, options)

    pixels = np.asarray(result)
    tinted = (pixels[..., 2] > pixels[..., 0]).sum()
    assert tinted > 100
    # Source-over on an opaque base keeps the base opaque
    assert (pixels[..., 3] == 255).all()


def test_text_offscreen_is_noop(watermarker):
    base = Image.new("RGBA", (50, 50), (255, 255, 255, 255))
    options = make_options(position=Position.TOP_LEFT, margin=-500, text_size=20)

    result = watermarker.add_text_watermark(base, options)

    assert result.tobytes() == base.tobytes()


def test_measure_text_with_real_font(watermarker):
    from watermarked.core.glyphs import PillowGlyphService

    glyphs = PillowGlyphService()
    short = glyphs.measure_text(watermarker.font, "W", 30)
    long = glyphs.measure_text(watermarker.font, "WWWW", 30)

    assert short > 0
    assert long > short


# ===== Image renderer =====

def test_image_roundtrip_top_left(watermarker):
    base = Image.new("RGBA", (40, 30), (0, 0, 0, 255))
    mark = noise_image(40, 30)
    options = make_options(position=Position.TOP_LEFT, scale=1.0, opacity=1.0, angle=0, margin=0)

    result = watermarker.add_image_watermark(base, mark, options)

    assert np.array_equal(np.asarray(result), np.asarray(mark))


def test_image_roundtrip_from_png_file(watermarker):
    base = Image.new("RGBA", (32, 24), (0, 0, 0, 255))
    mark = noise_image(32, 24, seed=3)
    with tempfile.TemporaryDirectory() as tmp:
        mark_path = Path(tmp) / "mark.png"
        mark.save(mark_path)
        options = make_options(position=Position.TOP_LEFT)

        result = watermarker.add_image_watermark(base, mark_path, options)

    assert np.array_equal(np.asarray(result), np.asarray(mark))


def test_image_half_opacity(watermarker):
    base = Image.new("RGBA", (4, 4), (255, 255, 255, 255))
    mark = Image.new("RGBA", (2, 2), (255, 0, 0, 255))
    options = make_options(position=Position.TOP_LEFT, opacity=0.5)

    result = watermarker.add_image_watermark(base, mark, options)

    assert result.getpixel((0, 0)) == (255, 0, 0, 127)
    assert result.getpixel((3, 3)) == (255, 255, 255, 255)


def test_image_scaled_extent(watermarker):
    base = Image.new("RGBA", (100, 100), (255, 255, 255, 255))
    mark = Image.new("RGBA", (21, 11), (0, 255, 0, 255))
    options = make_options(position=Position.BOTTOM_RIGHT, scale=0.5)

    result = watermarker.add_image_watermark(base, mark, options)

    # floor(21 * 0.5) x floor(11 * 0.5) = 10x5 placed at (90, 95)
    for corner in [(90, 95), (99, 99)]:
        r, g, b, a = result.getpixel(corner)
        assert g > 200 and r < 50 and b < 50
    assert result.getpixel((89, 99)) == (255, 255, 255, 255)
    assert result.getpixel((99, 94)) == (255, 255, 255, 255)


def test_image_tiled(watermarker):
    base = Image.new("RGBA", (100, 50), (255, 255, 255, 255))
    mark = Image.new("RGBA", (20, 10), (0, 0, 255, 255))
    options = make_options(position=Position.TILED, spacing=10)

    result = watermarker.add_image_watermark(base, mark, options)

    for x in (0, 30, 60, 90):
        for y in (0, 20, 40):
            assert result.getpixel((x, y)) == (0, 0, 255, 255)
    assert result.getpixel((25, 5)) == (255, 255, 255, 255)
    assert result.getpixel((5, 15)) == (255, 255, 255, 255)


@pytest.mark.parametrize("overrides", [
    {"scale": 0},
    {"scale": -1.0},
    {"scale": 0.01},
    {"position": Position.TILED, "spacing": -20},
    {"opacity": 2.0},
    {"scale": float("nan")},
    {"scale": float("inf")},
    {"position": Position.TILED, "spacing": float("inf")},
])
def test_image_invalid_options_leave_base_untouched(watermarker, overrides):
    base = Image.new("RGBA", (50, 50), (255, 255, 255, 255))
    before = base.tobytes()
    mark = Image.new("RGBA", (20, 20), (0, 0, 0, 255))

    with pytest.raises(InvalidOptionsError):
        watermarker.add_image_watermark(base, mark, make_options(**overrides))

    assert base.tobytes() == before


def test_image_invalid_watermark_bytes(watermarker):
    base = Image.new("RGBA", (10, 10))
    with pytest.raises(DecodeError, match="Invalid watermark file"):
        watermarker.add_image_watermark(base, b"not an image", make_options())


def test_image_missing_watermark_file(watermarker):
    base = Image.new("RGBA", (10, 10))
    with pytest.raises(DecodeError):
        watermarker.add_image_watermark(base, Path("/nonexistent/mark.png"), make_options())


def test_image_renderer_does_not_mutate_base():
    base = Image.new("RGBA", (10, 10), (1, 2, 3, 255))
    before = base.tobytes()

    ImageWatermarkRenderer().render(base, Image.new("RGBA", (4, 4), (9, 9, 9, 255)), make_options())

    assert base.tobytes() == before


# ===== Engine / font =====

def test_engine_font_is_shared(watermarker):
    font = watermarker.font
    watermarker.add_text_watermark(Image.new("RGBA", (50, 50)), make_options())
    assert watermarker.font is font


def test_engine_accepts_font_resource(watermarker):
    engine = Watermarker(font=watermarker.font)
    assert engine.font is watermarker.font


def test_engine_missing_font_is_fatal():
    with pytest.raises(FontLoadError):
        Watermarker(font="/nonexistent/font.ttf")


def test_font_resource_rejects_garbage():
    with pytest.raises(FontLoadError):
        FontResource(b"definitely not a font")
    with pytest.raises(FontLoadError):
        FontResource(b"")


def test_font_faces_are_cached_per_size(monkeypatch):
    font = FontResource.default()

    constructions = []
    real_truetype = ImageFont.truetype

    def counting_truetype(*args, **kwargs):
        constructions.append(args[1] if len(args) > 1 else kwargs.get("size"))
        return real_truetype(*args, **kwargs)

    monkeypatch.setattr(ImageFont, "truetype", counting_truetype)

    engine = Watermarker(font=font)
    options = make_options(text="ab", text_size=10, position=Position.TILED, spacing=2.0)
    engine.add_text_watermark(Image.new("RGBA", (300, 300), (255, 255, 255, 255)), options)
    engine.add_text_watermark(Image.new("RGBA", (300, 300), (255, 255, 255, 255)), options)

    # One face for size 10 across every measure and every tile draw
    assert constructions == [10]
    assert font.face(10) is font.face(10)
