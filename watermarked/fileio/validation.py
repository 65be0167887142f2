"""
File Validation and Uploads
===========================
Checks performed before an image path reaches the watermark engine, the
output naming convention, and a temporary store for uploaded images.

Naming Convention:
- photo.jpg -> photo_watermarked.jpg (same directory, same extension)
"""

import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

SUPPORTED_FORMATS = frozenset({".jpg", ".jpeg", ".png", ".bmp"})

OUTPUT_SUFFIX = "_watermarked"


@dataclass
class FileInfo:
    """Basic information about an image file."""
    name: str
    path: Path
    size: int
    extension: str


def validate_image(image_path: Union[str, Path]) -> Path:
    """
    Validate that a path points to a supported image file.

    Returns:
        The path as a Path object.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        IsADirectoryError: If the path is a directory.
        ValueError: If the extension is not supported.
    """
    image_path = Path(image_path)
    if not image_path.exists():
        raise FileNotFoundError(f"Image not found: {image_path}")

    if image_path.is_dir():
        raise IsADirectoryError(f"Path is a directory, not a file: {image_path}")

    ext = image_path.suffix.lower()
    if ext not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported file format: {ext or '(none)'}")

    return image_path


def output_path_for(image_path: Union[str, Path]) -> Path:
    """Path of the watermarked copy, next to the original."""
    image_path = Path(image_path)
    return image_path.parent / f"{image_path.stem}{OUTPUT_SUFFIX}{image_path.suffix}"


def get_file_info(file_path: Union[str, Path]) -> FileInfo:
    """
    Collect name, size and extension of a file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
    """
    file_path = Path(file_path)
    stat = file_path.stat()
    return FileInfo(
        name=file_path.name,
        path=file_path,
        size=stat.st_size,
        extension=file_path.suffix.lower(),
    )


class UploadStore:
    """
    Temporary directory holding uploaded images until cleanup.

    The directory is created on first use and removed by cleanup() or when
    leaving a with-block.
    """

    def __init__(self, root: Optional[Union[str, Path]] = None):
        """
        Initialize the UploadStore.

        Args:
            root: Directory for uploads. If None, a fresh temporary
                  directory is created on first save.
        """
        self._root = Path(root) if root is not None else None

    @property
    def root(self) -> Path:
        if self._root is None:
            self._root = Path(tempfile.mkdtemp(prefix="watermarked-"))
        self._root.mkdir(parents=True, exist_ok=True)
        return self._root

    def save(self, data: bytes, filename: str) -> FileInfo:
        """
        Store uploaded image bytes and validate the stored file.

        Args:
            data: Raw file contents.
            filename: Original file name; only its final component is used.

        Returns:
            FileInfo of the stored file.

        Raises:
            ValueError: If the file name is empty or the format unsupported.
        """
        name = Path(filename).name
        if not name:
            raise ValueError("Upload file name cannot be empty")

        target = self.root / name
        with open(target, "wb") as f:
            f.write(data)

        try:
            validate_image(target)
        except (OSError, ValueError):
            target.unlink(missing_ok=True)
            raise

        return get_file_info(target)

    def cleanup(self):
        """Remove the upload directory and everything in it."""
        if self._root is not None and self._root.exists():
            shutil.rmtree(self._root, ignore_errors=True)

    def __enter__(self) -> "UploadStore":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cleanup()
