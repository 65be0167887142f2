"""
Image Codec
===========
Decoding and encoding of pixel buffers using PIL/Pillow.

Technical Notes:
- Decoded images are always returned in RGBA mode
- JPEG and BMP output drop alpha; the image is flattened on white first
- Unknown output extensions are written as JPEG
"""

import base64
from io import BytesIO
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError

from ..errors import DecodeError, EncodeError

# Output format per file extension
EXTENSION_FORMATS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".bmp": "BMP",
}

DEFAULT_OUTPUT_FORMAT = "JPEG"
DEFAULT_QUALITY = 90

# Formats written without an alpha channel
_OPAQUE_FORMATS = {"JPEG", "BMP"}

_MIME_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "BMP": "image/bmp",
}


def decode(data: bytes) -> Image.Image:
    """
    Decode image bytes into an RGBA image.

    The format is detected from the data (JPEG, PNG, BMP and anything else
    Pillow recognizes).

    Raises:
        DecodeError: If the bytes are not a readable image.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            return img.convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DecodeError(f"Cannot decode image: {e}") from e


def load_image(image_path: Union[str, Path]) -> Image.Image:
    """
    Read and decode an image file.

    Raises:
        DecodeError: If the file cannot be read or decoded.
    """
    image_path = Path(image_path)
    try:
        with open(image_path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise DecodeError(f"Cannot read image {image_path}: {e}") from e

    try:
        return decode(data)
    except DecodeError as e:
        raise DecodeError(f"{image_path.name}: {e}") from e


def _flatten(image: Image.Image) -> Image.Image:
    """Composite an image onto white and drop the alpha channel."""
    if image.mode != "RGBA":
        return image.convert("RGB")
    rgb = Image.new("RGB", image.size, (255, 255, 255))
    rgb.paste(image, mask=image.split()[3])
    return rgb


def encode(image: Image.Image, fmt: str, quality: int = DEFAULT_QUALITY) -> bytes:
    """
    Encode an image to bytes.

    Args:
        image: Image to encode.
        fmt: "JPEG", "PNG" or "BMP" (case-insensitive).
        quality: JPEG quality hint, ignored by lossless formats.

    Raises:
        EncodeError: If the format is unsupported or the encoder fails.
    """
    fmt = fmt.upper()
    if fmt == "JPG":
        fmt = "JPEG"
    if fmt not in _MIME_TYPES:
        raise EncodeError(f"Unsupported output format: {fmt}")

    out = _flatten(image) if fmt in _OPAQUE_FORMATS else image
    buffer = BytesIO()
    try:
        if fmt == "JPEG":
            out.save(buffer, fmt, quality=quality)
        else:
            out.save(buffer, fmt)
    except (OSError, ValueError) as e:
        raise EncodeError(f"Cannot encode image as {fmt}: {e}") from e
    return buffer.getvalue()


def format_for_path(path: Union[str, Path]) -> str:
    """Output format for a file path, JPEG when the extension is unknown."""
    return EXTENSION_FORMATS.get(Path(path).suffix.lower(), DEFAULT_OUTPUT_FORMAT)


def save_image(
        image: Image.Image,
        output_path: Union[str, Path],
        quality: int = DEFAULT_QUALITY
) -> Path:
    """
    Encode an image in the format implied by its path and write it.

    Raises:
        EncodeError: If encoding fails.
        OSError: If the file cannot be written.
    """
    output_path = Path(output_path)
    data = encode(image, format_for_path(output_path), quality)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "wb") as f:
        f.write(data)
    return output_path


def preview_data_url(image_path: Union[str, Path]) -> str:
    """
    Base64 data URL of an image file, for embedding in a web view.

    Raises:
        OSError: If the file cannot be read.
    """
    image_path = Path(image_path)
    with open(image_path, "rb") as f:
        data = f.read()
    mime = _MIME_TYPES[format_for_path(image_path)]
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
