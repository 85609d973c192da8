"""OCR recognition of PAN card images using Tesseract."""

import asyncio
from typing import Callable, Optional

import cv2
import numpy as np
import pytesseract

from ..core.constants import STEP_DONE, STEP_LOADING, STEP_RECOGNIZING
from ..core.types import CapturedImage
from ..utils.config import resolve_tesseract_path, settings
from ..utils.error_handler import ConfigurationError, RecognitionEngineError
from ..utils.log import LoggerMixin

ProgressHook = Callable[[str], None]


class TesseractRecognizer(LoggerMixin):
    """Runs Tesseract on a captured image and returns the raw text.

    Uploaded bytes and camera frames go through the same ``recognize`` call.
    The blocking engine call runs in a worker thread so the event loop stays
    responsive while OCR is in flight.
    """

    def __init__(self, language: Optional[str] = None, timeout_s: Optional[float] = None):
        self.language = language or settings.OCR_LANGUAGE
        self.timeout_s = timeout_s if timeout_s is not None else settings.RECOGNITION_TIMEOUT_S
        self.tesseract_path: Optional[str] = None

    def _ensure_engine(self):
        if self.tesseract_path is not None:
            return
        try:
            self.tesseract_path = resolve_tesseract_path()
        except ConfigurationError as e:
            raise RecognitionEngineError(e.message, details=e.details) from e
        pytesseract.pytesseract.tesseract_cmd = self.tesseract_path
        self.logger.info(
            "OCR engine initialized",
            tesseract_path=self.tesseract_path,
            language=self.language,
        )

    def load_image(self, image: CapturedImage) -> np.ndarray:
        """Turn either payload kind into an RGB array Tesseract can read."""
        if image.is_frame:
            frame = image.data
        else:
            buffer = np.frombuffer(image.data, dtype=np.uint8)
            frame = cv2.imdecode(buffer, cv2.IMREAD_COLOR) if buffer.size else None

        if frame is None or frame.size == 0:
            raise RecognitionEngineError(
                "Image payload could not be decoded",
                details={"source": image.source_name, "mode": image.mode.value},
            )

        if frame.ndim == 2:
            return frame
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    def _recognize_blocking(self, image: CapturedImage, progress: Optional[ProgressHook]) -> str:
        self._report(progress, STEP_LOADING)
        rgb = self.load_image(image)

        self._report(progress, STEP_RECOGNIZING)
        try:
            text = pytesseract.image_to_string(rgb, lang=self.language)
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError, RuntimeError) as e:
            raise RecognitionEngineError(
                "OCR engine failed",
                details={"source": image.source_name, "error": str(e)},
            ) from e

        self._report(progress, STEP_DONE)
        return text

    async def recognize(self, image: CapturedImage, progress: Optional[ProgressHook] = None) -> str:
        """
        Recognize the text on a captured image.

        Args:
            image: Uploaded or captured image
            progress: Optional hook receiving step names as recognition advances

        Returns:
            Raw recognized text

        Raises:
            RecognitionEngineError: On any engine, decode or timeout failure
        """
        context = self.log_start(
            "Recognition",
            image_id=image.image_id,
            mode=image.mode.value,
            language=self.language,
        )
        try:
            self._ensure_engine()
            work = asyncio.to_thread(self._recognize_blocking, image, progress)
            if self.timeout_s is not None:
                text = await asyncio.wait_for(work, timeout=self.timeout_s)
            else:
                text = await work
        except RecognitionEngineError as e:
            self.log_error(context, e)
            raise
        except asyncio.TimeoutError as e:
            self.log_error(context, e, timeout_s=self.timeout_s)
            raise RecognitionEngineError(
                "OCR engine timed out",
                details={"timeout_s": self.timeout_s},
            ) from e

        self.log_success(context, text_length=len(text))
        return text

    def _report(self, progress: Optional[ProgressHook], step: str):
        self.logger.debug("Recognition progress", step=step)
        if progress is not None:
            progress(step)


# Global singleton
recognizer = TesseractRecognizer()
