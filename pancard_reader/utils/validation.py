"""
Input validation for uploaded card images.
"""

from pathlib import Path
from typing import Union

from .error_handler import CaptureError

IMAGE_SUFFIXES = frozenset({
    ".jpg", ".jpeg", ".png", ".bmp", ".tif", ".tiff", ".webp", ".gif", ".pbm", ".pgm", ".ppm",
})


def validate_image_path(file_path: Union[str, Path]) -> Path:
    """
    Validate and normalize the path of an uploaded image.

    Args:
        file_path: Path chosen by the user

    Returns:
        Resolved Path object

    Raises:
        CaptureError: If the path does not exist, is not a file, or does not
            look like an image
    """
    path = Path(file_path)

    if not path.exists():
        raise CaptureError(
            f"File does not exist: {path}",
            details={"file_path": str(path)}
        )
    if not path.is_file():
        raise CaptureError(
            f"Not a file: {path}",
            details={"file_path": str(path)}
        )
    if path.suffix.lower() not in IMAGE_SUFFIXES:
        raise CaptureError(
            f"Unsupported image type: {path.suffix or '(none)'}",
            details={"file_path": str(path), "allowed": sorted(IMAGE_SUFFIXES)}
        )

    return path.resolve()
