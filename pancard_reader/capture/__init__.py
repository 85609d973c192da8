"""Capture package for file uploads and live camera streams."""

from .camera import CameraDevice, CameraSession, camera_device
from .source import CaptureSourceManager

__all__ = [
    "CameraDevice",
    "CameraSession",
    "CaptureSourceManager",
    "camera_device",
]
