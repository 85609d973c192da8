"""
Exception taxonomy for the PAN card reader.

Every failure the pipeline can hit is a subclass of ``PanReaderError`` so the
controller can catch them at one boundary and turn them into a single
user-facing error message.
"""

from typing import Any, Dict, Optional


class PanReaderError(Exception):
    """Base exception class for all PAN card reader errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(PanReaderError):
    """Raised when there are configuration or environment issues."""
    pass


class CaptureError(PanReaderError):
    """Raised when an image cannot be acquired from an upload or the camera."""
    pass


class CameraAccessError(CaptureError):
    """Raised when camera permission is denied or the device is unavailable."""
    pass


class CameraRequestSuperseded(CaptureError):
    """Raised when a pending camera request was closed or replaced before it resolved."""
    pass


class RecognitionEngineError(PanReaderError):
    """Raised when the OCR engine fails, times out or cannot read the payload."""
    pass


class IdentifierNotFound(PanReaderError):
    """Raised when recognized text holds no PAN number."""
    pass


class ClipboardError(PanReaderError):
    """Raised when the system clipboard cannot be written."""
    pass
