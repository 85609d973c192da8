"""Tests for the Tesseract recognition adapter."""

from unittest.mock import patch

import cv2
import numpy as np
import pytesseract
import pytest

from pancard_reader.core.constants import STEP_DONE, STEP_LOADING, STEP_RECOGNIZING
from pancard_reader.core.types import CapturedImage, CaptureMode
from pancard_reader.ocr.recognize import TesseractRecognizer
from pancard_reader.utils.error_handler import ConfigurationError, RecognitionEngineError


@pytest.fixture
def ready_recognizer():
    """Recognizer whose engine path is already resolved."""
    rec = TesseractRecognizer(language="eng")
    rec.tesseract_path = "/usr/bin/tesseract"
    return rec


def _upload(data: bytes) -> CapturedImage:
    return CapturedImage(data=data, mode=CaptureMode.UPLOAD, preview_uri="", source_name="card.png")


def _frame(frame: np.ndarray) -> CapturedImage:
    return CapturedImage(data=frame, mode=CaptureMode.CAMERA, preview_uri="", source_name="camera")


class TestLoadImage:

    def test_decodes_upload_bytes(self, ready_recognizer, card_frame):
        ok, buf = cv2.imencode(".png", card_frame)
        rgb = ready_recognizer.load_image(_upload(buf.tobytes()))
        assert rgb.shape == card_frame.shape

    def test_frame_converted_to_rgb(self, ready_recognizer):
        frame = np.zeros((4, 4, 3), dtype=np.uint8)
        frame[:, :, 0] = 255  # blue channel in BGR
        rgb = ready_recognizer.load_image(_frame(frame))
        assert rgb[0, 0, 2] == 255
        assert rgb[0, 0, 0] == 0

    def test_undecodable_bytes(self, ready_recognizer):
        with pytest.raises(RecognitionEngineError):
            ready_recognizer.load_image(_upload(b"not an image"))

    def test_empty_bytes(self, ready_recognizer):
        with pytest.raises(RecognitionEngineError):
            ready_recognizer.load_image(_upload(b""))


class TestRecognize:

    @pytest.mark.asyncio
    async def test_returns_engine_text_for_frame(self, ready_recognizer, card_frame):
        with patch("pancard_reader.ocr.recognize.pytesseract.image_to_string",
                   return_value="PAN ABCDE1234F") as mock_ocr:
            text = await ready_recognizer.recognize(_frame(card_frame))

        assert text == "PAN ABCDE1234F"
        args, kwargs = mock_ocr.call_args
        assert kwargs["lang"] == "eng"
        assert isinstance(args[0], np.ndarray)

    @pytest.mark.asyncio
    async def test_upload_and_frame_share_contract(self, ready_recognizer, card_frame):
        ok, buf = cv2.imencode(".png", card_frame)
        with patch("pancard_reader.ocr.recognize.pytesseract.image_to_string", return_value="text"):
            from_upload = await ready_recognizer.recognize(_upload(buf.tobytes()))
            from_frame = await ready_recognizer.recognize(_frame(card_frame))
        assert from_upload == from_frame == "text"

    @pytest.mark.asyncio
    async def test_progress_steps(self, ready_recognizer, card_frame):
        steps = []
        with patch("pancard_reader.ocr.recognize.pytesseract.image_to_string", return_value=""):
            await ready_recognizer.recognize(_frame(card_frame), progress=steps.append)
        assert steps == [STEP_LOADING, STEP_RECOGNIZING, STEP_DONE]

    @pytest.mark.asyncio
    async def test_engine_error_mapped(self, ready_recognizer, card_frame):
        with patch("pancard_reader.ocr.recognize.pytesseract.image_to_string",
                   side_effect=pytesseract.TesseractError(1, "boom")):
            with pytest.raises(RecognitionEngineError):
                await ready_recognizer.recognize(_frame(card_frame))

    @pytest.mark.asyncio
    async def test_missing_binary_mapped(self, card_frame):
        rec = TesseractRecognizer(language="eng")
        with patch("pancard_reader.ocr.recognize.resolve_tesseract_path",
                   side_effect=ConfigurationError("Tesseract not found",
                                                 details={"configured_path": None})):
            with pytest.raises(RecognitionEngineError) as exc_info:
                await rec.recognize(_frame(card_frame))

        assert exc_info.value.message == "Tesseract not found"
        assert "configured_path" in exc_info.value.details

    @pytest.mark.asyncio
    async def test_undecodable_upload_mapped(self, ready_recognizer):
        with pytest.raises(RecognitionEngineError):
            await ready_recognizer.recognize(_upload(b"garbage"))

    @pytest.mark.asyncio
    async def test_timeout_mapped(self, card_frame):
        rec = TesseractRecognizer(language="eng", timeout_s=0.05)
        rec.tesseract_path = "/usr/bin/tesseract"

        def slow_ocr(*args, **kwargs):
            import time
            time.sleep(0.5)
            return "late"

        with patch("pancard_reader.ocr.recognize.pytesseract.image_to_string", side_effect=slow_ocr):
            with pytest.raises(RecognitionEngineError) as exc_info:
                await rec.recognize(_frame(card_frame))

        assert exc_info.value.details["timeout_s"] == 0.05

    @pytest.mark.asyncio
    async def test_engine_path_resolved_once(self, card_frame):
        rec = TesseractRecognizer(language="eng")
        with patch("pancard_reader.ocr.recognize.resolve_tesseract_path",
                   return_value="/opt/tesseract") as mock_resolve, \
             patch("pancard_reader.ocr.recognize.pytesseract.image_to_string", return_value=""):
            await rec.recognize(_frame(card_frame))
            await rec.recognize(_frame(card_frame))

        mock_resolve.assert_called_once()
        assert rec.tesseract_path == "/opt/tesseract"


if __name__ == "__main__":
    pytest.main([__file__])
