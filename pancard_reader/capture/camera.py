"""Camera device access for live PAN card capture."""

import asyncio
from typing import List, Optional

import cv2
import numpy as np

from ..utils.config import settings
from ..utils.error_handler import CameraAccessError
from ..utils.log import LoggerMixin


class CameraSession(LoggerMixin):
    """One open video stream.

    ``tracks`` holds every handle that keeps the device busy; ``stop`` releases
    all of them and is safe to call more than once.
    """

    def __init__(self, tracks: List[cv2.VideoCapture], device_index: int = 0):
        self.tracks = list(tracks)
        self.device_index = device_index
        self._stopped = False

    @property
    def is_active(self) -> bool:
        return not self._stopped

    def read_frame(self) -> Optional[np.ndarray]:
        """Return the current frame of the first live track, or None."""
        if self._stopped:
            return None
        for track in self.tracks:
            ok, frame = track.read()
            if ok and frame is not None:
                return frame
        return None

    def stop(self):
        """Stop every underlying track."""
        if self._stopped:
            return
        for track in self.tracks:
            track.release()
        self._stopped = True
        self.logger.info("Camera session stopped",
                         device_index=self.device_index,
                         tracks=len(self.tracks))


class CameraDevice(LoggerMixin):
    """Opens video-only streams from an OpenCV capture device."""

    def __init__(self, camera_index: Optional[int] = None,
                 frame_width: Optional[int] = None,
                 frame_height: Optional[int] = None):
        self.camera_index = settings.CAMERA_INDEX if camera_index is None else camera_index
        self.frame_width = frame_width or settings.CAMERA_FRAME_WIDTH
        self.frame_height = frame_height or settings.CAMERA_FRAME_HEIGHT

    def _open_blocking(self) -> CameraSession:
        cap = cv2.VideoCapture(self.camera_index)
        if not cap.isOpened():
            cap.release()
            raise CameraAccessError(
                "Failed to open camera",
                details={"camera_index": self.camera_index},
            )

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.frame_width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.frame_height)
        cap.set(cv2.CAP_PROP_AUTOFOCUS, 1)

        # Test capture
        ok, frame = cap.read()
        if not ok or frame is None:
            cap.release()
            raise CameraAccessError(
                "Camera opened but produced no frame",
                details={"camera_index": self.camera_index},
            )

        self.logger.info("Camera opened",
                         camera_index=self.camera_index,
                         frame_size=f"{frame.shape[1]}x{frame.shape[0]}")
        return CameraSession([cap], device_index=self.camera_index)

    async def open(self) -> CameraSession:
        """Request a live stream.

        Raises:
            CameraAccessError: If the device is missing, busy or denied
        """
        try:
            return await asyncio.to_thread(self._open_blocking)
        except CameraAccessError:
            raise
        except Exception as e:
            raise CameraAccessError(
                "Camera access failed",
                details={"camera_index": self.camera_index, "error": str(e)},
            ) from e


# Global singleton
camera_device = CameraDevice()
