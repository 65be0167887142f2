"""
Watermark Options
=================
Per-call configuration values for the watermark engine.

Nothing here is retained between calls: the caller builds a
WatermarkOptions for every invocation and supplies every field.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Tuple, Union

from ..errors import InvalidOptionsError


class Position(Enum):
    """Where a single watermark is anchored, or TILED for a grid."""
    CENTER = "center"
    TOP_LEFT = "topLeft"
    TOP_RIGHT = "topRight"
    BOTTOM_LEFT = "bottomLeft"
    BOTTOM_RIGHT = "bottomRight"
    TILED = "tiled"

    @classmethod
    def parse(cls, value: Union["Position", str, None]) -> "Position":
        """
        Resolve a position tag.

        Unrecognized values fall back to CENTER.
        """
        if isinstance(value, cls):
            return value
        for position in cls:
            if position.value == value:
                return position
        return cls.CENTER


@dataclass(frozen=True)
class TextColor:
    """RGBA text color, each channel 0-255."""
    r: int
    g: int
    b: int
    a: int = 255

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TextColor":
        """Build from the frontend's {R, G, B, A} object."""
        return cls(
            r=int(data.get("R", 0)),
            g=int(data.get("G", 0)),
            b=int(data.get("B", 0)),
            a=int(data.get("A", 255)),
        )

    def with_alpha(self, alpha: int) -> Tuple[int, int, int, int]:
        return self.r, self.g, self.b, alpha


@dataclass(frozen=True)
class WatermarkOptions:
    """
    Complete configuration for one watermark operation.

    Attributes:
        text: Watermark text (text watermarks).
        text_size: Font size in pixels (text watermarks).
        text_color: Text color (text watermarks).
        font_family: Requested font family. The engine draws with the font it
                     loaded at construction.
        scale: Watermark image scale factor (image watermarks).
        opacity: 0.0 (invisible) to 1.0 (opaque).
        angle: Rotation in degrees, counter-clockwise.
        spacing: Gap between tiles in pixels (TILED only).
        position: Anchor position or TILED.
        margin: Distance from the image edges in pixels.
    """
    text: str
    text_size: float
    text_color: TextColor
    font_family: str
    scale: float
    opacity: float
    angle: float
    spacing: float
    position: Position
    margin: int

    def __post_init__(self):
        if not isinstance(self.position, Position):
            object.__setattr__(self, "position", Position.parse(self.position))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WatermarkOptions":
        """
        Build options from the frontend's JSON shape.

        Keys are camelCase (textSize, textColor, fontFamily). The text and
        image specific keys may be absent and are filled with neutral values;
        opacity, angle, spacing, position and margin are required.
        """
        try:
            options = cls(
                text=str(data.get("text", "")),
                text_size=float(data.get("textSize", 0)),
                text_color=TextColor.from_dict(data.get("textColor") or {}),
                font_family=str(data.get("fontFamily", "")),
                scale=float(data.get("scale", 0)),
                opacity=float(data["opacity"]),
                angle=float(data["angle"]),
                spacing=float(data["spacing"]),
                position=Position.parse(data["position"]),
                margin=int(data["margin"]),
            )
        except KeyError as e:
            raise InvalidOptionsError(f"Missing watermark option: {e.args[0]}") from e
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidOptionsError(f"Invalid watermark option: {e}") from e
        options.check_finite()
        return options

    @property
    def is_tiled(self) -> bool:
        return self.position is Position.TILED

    def check_finite(self):
        """Reject infinite or NaN sizes, scale, angle and spacing."""
        for name in ("text_size", "scale", "angle", "spacing"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise InvalidOptionsError(f"{name} must be a finite number, got {value}")

    def check_opacity(self):
        if not 0.0 <= self.opacity <= 1.0:
            raise InvalidOptionsError(
                f"Opacity must be between 0.0 and 1.0, got {self.opacity}"
            )
