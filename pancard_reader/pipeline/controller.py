"""Pipeline controller: acquisition -> recognition -> extraction -> result log."""

from typing import Callable, List, Optional

from ..capture.source import CaptureSourceManager, UploadSource
from ..core.constants import (
    MSG_CAMERA_FAILED,
    MSG_CAMERA_UNSUPPORTED,
    MSG_NO_FRAME,
    MSG_NOT_FOUND_CAPTURE,
    MSG_NOT_FOUND_UPLOAD,
    MSG_RECOGNITION_FAILED,
    MSG_UPLOAD_FAILED,
)
from ..core.types import CapturedImage, CaptureMode, CaptureState, PipelineState, RunOutcome
from ..ocr.recognize import ProgressHook, TesseractRecognizer
from ..ocr.regexes import extract_pan_number, is_valid_pan_number
from ..ui.clipboard import SystemClipboard
from ..ui.notifier import SimpleNotifier
from ..utils.error_handler import (
    CameraAccessError,
    CameraRequestSuperseded,
    CaptureError,
    ClipboardError,
    IdentifierNotFound,
    RecognitionEngineError,
)
from ..utils.log import LoggerMixin

StateListener = Callable[[PipelineState], None]


class PipelineController(LoggerMixin):
    """Single owner of pipeline state and the accumulated PAN numbers.

    Only one run is in flight at a time: a trigger arriving while ``loading``
    is set returns ``RunOutcome.BUSY``. Every run carries a generation token;
    ``remove_image`` advances the generation, so a recognition that finishes
    after its image was removed is discarded instead of appended.
    """

    def __init__(
        self,
        capture: Optional[CaptureSourceManager] = None,
        recognizer: Optional[TesseractRecognizer] = None,
        clipboard: Optional[SystemClipboard] = None,
        notifier: Optional[SimpleNotifier] = None,
        on_change: Optional[StateListener] = None,
        progress: Optional[ProgressHook] = None,
    ):
        if recognizer is None:
            from ..ocr.recognize import recognizer as default_recognizer
            recognizer = default_recognizer
        if clipboard is None:
            from ..ui.clipboard import clipboard as default_clipboard
            clipboard = default_clipboard
        if notifier is None:
            from ..ui.notifier import notifier as default_notifier
            notifier = default_notifier

        self.capture = capture or CaptureSourceManager()
        self.recognizer = recognizer
        self.clipboard = clipboard
        self.notifier = notifier
        self.on_change = on_change
        self.progress = progress

        self._loading = False
        self._error: Optional[str] = None
        self._image: Optional[CapturedImage] = None
        self._results: List[str] = []
        self._generation = 0

    # State

    @property
    def state(self) -> PipelineState:
        return PipelineState(
            loading=self._loading,
            error_message=self._error,
            current_image=self._image,
            camera_open=self.capture.camera_open,
            capture_state=self.capture.state,
            results=tuple(self._results),
        )

    @property
    def results(self):
        return tuple(self._results)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error_message(self) -> Optional[str]:
        return self._error

    @property
    def current_image(self) -> Optional[CapturedImage]:
        return self._image

    def _notify(self):
        if self.on_change is not None:
            self.on_change(self.state)

    def _set_error(self, message: Optional[str]):
        self._error = message
        self._notify()

    # Acquisition triggers

    async def accept_upload(self, source: UploadSource) -> RunOutcome:
        """Run the pipeline on an uploaded file or bytes."""
        if self._loading:
            self.logger.warning("Upload ignored while a run is in flight")
            return RunOutcome.BUSY
        if source is None:
            return RunOutcome.CANCELLED

        try:
            image = self.capture.accept_upload(source)
        except CaptureError as e:
            self.logger.warning("Upload rejected", error=str(e))
            self._set_error(MSG_UPLOAD_FAILED)
            return RunOutcome.FAILED

        if image is None:
            return RunOutcome.CANCELLED
        return await self._run(image)

    async def capture_frame(self) -> RunOutcome:
        """Snapshot the live camera and run the pipeline on the frame."""
        if self._loading:
            self.logger.warning("Capture ignored while a run is in flight")
            return RunOutcome.BUSY

        try:
            image = self.capture.capture_frame()
        except CaptureError as e:
            self.logger.warning("Capture failed", error=str(e))
            self._set_error(MSG_NO_FRAME)
            return RunOutcome.FAILED

        return await self._run(image)

    async def _run(self, image: CapturedImage) -> RunOutcome:
        self._generation += 1
        token = self._generation

        self._loading = True
        self._error = None
        self.capture.close_camera()
        self._image = image
        self._notify()

        context = self.log_start("Pipeline run", run=token, image_id=image.image_id, mode=image.mode.value)
        outcome = RunOutcome.FAILED
        error: Optional[str] = None
        try:
            text = await self.recognizer.recognize(image, progress=self.progress)

            if token != self._generation:
                outcome = RunOutcome.STALE
                return outcome

            pan_number = extract_pan_number(text)
            if pan_number is None:
                raise IdentifierNotFound(
                    "No PAN number in recognized text",
                    details={"mode": image.mode.value, "text_length": len(text)},
                )
            if not is_valid_pan_number(pan_number):
                raise IdentifierNotFound(
                    "Extracted value is not a PAN number",
                    details={"value": pan_number},
                )

            self._results.append(pan_number)
            outcome = RunOutcome.FOUND
            self.log_success(context, pan_number=pan_number, result_count=len(self._results))

        except IdentifierNotFound as e:
            outcome = RunOutcome.NOT_FOUND
            error = MSG_NOT_FOUND_CAPTURE if image.mode == CaptureMode.CAMERA else MSG_NOT_FOUND_UPLOAD
            self.logger.info("PAN number not found", run=token, **e.details)
        except RecognitionEngineError as e:
            error = MSG_RECOGNITION_FAILED
            self.log_error(context, e)
        except Exception as e:
            error = MSG_RECOGNITION_FAILED
            self.logger.error("Unexpected recognition failure", run=token, error=str(e), exc_info=True)
        finally:
            if token == self._generation:
                if error is not None:
                    self._error = error
                self._loading = False
                self._notify()
            else:
                outcome = RunOutcome.STALE
                self.logger.info("Stale recognition result discarded", run=token, current=self._generation)

        return outcome

    # Camera control

    async def open_camera(self) -> bool:
        """Open the live camera. Errors land in ``error_message``."""
        if self._loading:
            self.logger.warning("Camera open ignored while a run is in flight")
            return False
        if self._image is not None:
            self.logger.warning("Camera open ignored while an image is held")
            return False

        if not self.capture.camera_supported:
            self._set_error(MSG_CAMERA_UNSUPPORTED)
            return False

        if self._error is not None:
            self._set_error(None)
        try:
            await self.capture.open_camera()
        except CameraRequestSuperseded as e:
            # Closed, removed or replaced by an upload while pending
            self.logger.info("Camera request superseded", error=str(e))
            return False
        except CameraAccessError as e:
            self.logger.error("Error accessing camera", error=str(e))
            self._set_error(MSG_CAMERA_FAILED)
            return False
        except CaptureError as e:
            self.logger.warning("Camera open rejected", error=str(e))
            self._notify()
            return False

        self._notify()
        return True

    def close_camera(self):
        """Close the live camera; no-op when it is already closed."""
        was_active = self.capture.state in (CaptureState.CAMERA_LIVE, CaptureState.CAMERA_REQUESTING)
        self.capture.close_camera()
        if was_active:
            self._notify()

    # Removal and teardown

    def remove_image(self):
        """Clear the image, the result log and any error, and close the camera."""
        self._generation += 1
        self._image = None
        self._results.clear()
        self._error = None
        self._loading = False
        self.capture.remove_image()
        self.logger.info("Image removed", generation=self._generation)
        self._notify()

    async def shutdown(self):
        """Release the camera before the controller goes away."""
        self.capture.release()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()

    # Clipboard

    async def copy_identifier(self, pan_number: str) -> bool:
        """
        Copy a PAN number to the clipboard.

        Clipboard failure is reported as a soft notification and never
        touches the pipeline error.
        """
        try:
            await self.clipboard.write_text(pan_number)
        except ClipboardError as e:
            self.logger.warning("Clipboard write failed", error=str(e))
            self.notifier.status_toast(f'Could not copy PAN number "{pan_number}" to clipboard.', level="warning")
            return False

        self.notifier.status_toast(f'PAN number "{pan_number}" copied to clipboard.', level="success")
        return True
