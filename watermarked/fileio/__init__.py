"""
File I/O Module - Codec and Validation
======================================
Everything that touches the filesystem or encoded bytes. The core engine
only ever sees decoded in-memory images.
"""

from .codec import decode, encode, load_image, save_image, preview_data_url
from .validation import (
    SUPPORTED_FORMATS, FileInfo, UploadStore,
    validate_image, output_path_for, get_file_info
)

__all__ = [
    # Codec
    "decode",
    "encode",
    "load_image",
    "save_image",
    "preview_data_url",
    # Validation
    "SUPPORTED_FORMATS",
    "FileInfo",
    "UploadStore",
    "validate_image",
    "output_path_for",
    "get_file_info",
]
