"""Capture source management: file upload vs. live camera."""

import base64
from pathlib import Path
from typing import Optional, Union

import cv2

from ..core.constants import CAMERA_SOURCE_NAME
from ..core.types import CapturedImage, CaptureMode, CaptureState
from ..utils.config import settings
from ..utils.error_handler import CameraAccessError, CameraRequestSuperseded, CaptureError
from ..utils.log import LoggerMixin
from ..utils.validation import validate_image_path
from .camera import CameraDevice, CameraSession

UploadSource = Union[str, Path, bytes, bytearray, None]


class CaptureSourceManager(LoggerMixin):
    """Mediates the two acquisition paths and owns the camera session.

    At most one camera session is open at a time, and every transition out of
    a live state stops the session before the new state is observable.

    States: IDLE -> CAMERA_REQUESTING -> CAMERA_LIVE -> IMAGE_HELD -> IDLE.
    An upload moves any state to IMAGE_HELD.
    """

    def __init__(self, camera: Optional[CameraDevice] = None):
        self.camera = camera
        self.state = CaptureState.IDLE
        self.session: Optional[CameraSession] = None
        self._request_id = 0

    @property
    def camera_open(self) -> bool:
        return self.state == CaptureState.CAMERA_LIVE

    @property
    def camera_supported(self) -> bool:
        return self.camera is not None

    async def open_camera(self) -> CameraSession:
        """
        Request a video stream and go live.

        Raises:
            CaptureError: If the manager is not IDLE
            CameraAccessError: If no camera is configured or the device refuses
            CameraRequestSuperseded: If the request was closed or replaced
                while it was pending
        """
        if self.state != CaptureState.IDLE:
            raise CaptureError(
                "Camera can only be opened from the idle state",
                details={"state": self.state.value},
            )
        if self.camera is None:
            raise CameraAccessError("No camera device configured")

        # A leftover session must never outlive a new request
        self._stop_session()

        self._request_id += 1
        request_id = self._request_id
        self.state = CaptureState.CAMERA_REQUESTING
        self.logger.info("Camera requested")
        try:
            session = await self.camera.open()
        except CameraAccessError:
            if request_id == self._request_id and self.state == CaptureState.CAMERA_REQUESTING:
                self.state = CaptureState.IDLE
            raise

        if request_id != self._request_id or self.state != CaptureState.CAMERA_REQUESTING:
            # Closed or replaced by an upload while the request was pending
            session.stop()
            raise CameraRequestSuperseded(
                "Camera request superseded",
                details={"state": self.state.value},
            )

        self.session = session
        self.state = CaptureState.CAMERA_LIVE
        self.logger.info("Camera live")
        return session

    def close_camera(self):
        """Stop the live stream. Calling it with no open stream is a no-op."""
        self._stop_session()
        if self.state in (CaptureState.CAMERA_LIVE, CaptureState.CAMERA_REQUESTING):
            self.state = CaptureState.IDLE

    def capture_frame(self) -> CapturedImage:
        """
        Snapshot the current live frame and close the camera.

        Raises:
            CaptureError: If the camera is not live or no frame is available
        """
        if self.state != CaptureState.CAMERA_LIVE or self.session is None:
            raise CaptureError(
                "Capture requires a live camera",
                details={"state": self.state.value},
            )

        frame = self.session.read_frame()
        if frame is None:
            raise CaptureError("No camera frame available")

        frame = frame.copy()
        image = CapturedImage(
            data=frame,
            mode=CaptureMode.CAMERA,
            preview_uri=self._frame_data_uri(frame),
            source_name=CAMERA_SOURCE_NAME,
        )

        self._stop_session()
        self.state = CaptureState.IMAGE_HELD
        self.logger.info("Frame captured",
                         image_id=image.image_id,
                         frame_size=f"{frame.shape[1]}x{frame.shape[0]}")
        return image

    def accept_upload(self, source: UploadSource) -> Optional[CapturedImage]:
        """
        Accept an uploaded image.

        Args:
            source: Path to an image file, raw image bytes, or None when the
                user dismissed the file picker

        Returns:
            The captured image, or None if nothing was chosen

        Raises:
            CaptureError: If the path is invalid or unreadable
        """
        if source is None:
            return None

        if isinstance(source, (bytes, bytearray)):
            if not source:
                return None
            data = bytes(source)
            name = "upload"
            preview = self._bytes_data_uri(data)
        else:
            path = validate_image_path(source)
            try:
                data = path.read_bytes()
            except OSError as e:
                raise CaptureError(
                    f"Could not read {path.name}",
                    details={"file_path": str(path), "error": str(e)},
                ) from e
            name = path.name
            preview = path.as_uri()

        image = CapturedImage(
            data=data,
            mode=CaptureMode.UPLOAD,
            preview_uri=preview,
            source_name=name,
        )

        self.close_camera()
        self.state = CaptureState.IMAGE_HELD
        self.logger.info("Upload accepted",
                         image_id=image.image_id,
                         source=name,
                         size_bytes=len(data))
        return image

    def remove_image(self):
        """Drop the held image and make sure no stream is left open."""
        self._stop_session()
        self.state = CaptureState.IDLE

    def release(self):
        """Teardown: release any device access."""
        self.close_camera()

    def _stop_session(self):
        if self.session is not None:
            self.session.stop()
            self.session = None

    @staticmethod
    def _frame_data_uri(frame) -> str:
        ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, settings.PREVIEW_JPEG_QUALITY])
        if not ok:
            return ""
        return "data:image/jpeg;base64," + base64.b64encode(buf.tobytes()).decode("ascii")

    @staticmethod
    def _bytes_data_uri(data: bytes) -> str:
        return "data:application/octet-stream;base64," + base64.b64encode(data).decode("ascii")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
