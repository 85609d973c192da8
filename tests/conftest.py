"""Pytest configuration and shared fixtures for PAN card reader tests."""

import asyncio
from typing import List, Optional, Union
from unittest.mock import MagicMock

import cv2
import numpy as np
import pytest

from pancard_reader.capture.source import CaptureSourceManager
from pancard_reader.pipeline.controller import PipelineController
from pancard_reader.utils.error_handler import CameraAccessError, ClipboardError, RecognitionEngineError


SAMPLE_CARD_TEXT = "INCOME TAX DEPARTMENT\nName: RAHUL SHARMA PAN: ABCDE1234F DOB: 01/01/1990"


class FakeTrack:
    """Stands in for one cv2.VideoCapture handle."""

    def __init__(self):
        self.stopped = False

    def release(self):
        self.stopped = True


class FakeSession:
    """Camera session yielding a fixed frame until stopped."""

    def __init__(self, frame: Optional[np.ndarray]):
        self.frame = frame
        self.tracks = [FakeTrack(), FakeTrack()]
        self.stop_calls = 0

    @property
    def is_active(self) -> bool:
        return not all(track.stopped for track in self.tracks)

    def read_frame(self) -> Optional[np.ndarray]:
        if not self.is_active:
            return None
        return self.frame

    def stop(self):
        self.stop_calls += 1
        for track in self.tracks:
            track.release()


class FakeCameraDevice:
    """Camera device that grants a FakeSession, or refuses when told to."""

    def __init__(self, frame: Optional[np.ndarray] = None, fail: bool = False):
        self.frame = frame if frame is not None else np.full((120, 160, 3), 200, dtype=np.uint8)
        self.fail = fail
        self.sessions: List[FakeSession] = []
        self.gate: Optional[asyncio.Event] = None

    async def open(self) -> FakeSession:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise CameraAccessError("Permission denied")
        session = FakeSession(self.frame)
        self.sessions.append(session)
        return session


class FakeRecognizer:
    """Recognizer returning queued texts or raising queued exceptions.

    Set ``gate`` to an ``asyncio.Event`` to hold recognition until released.
    """

    def __init__(self, *responses: Union[str, Exception]):
        self.responses = list(responses)
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.gate: Optional[asyncio.Event] = None

    async def recognize(self, image, progress=None):
        self.calls.append(image)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if progress is not None:
                progress("done")
            response = self.responses.pop(0) if self.responses else ""
            if isinstance(response, Exception):
                raise response
            return response
        finally:
            self.in_flight -= 1


class FakeClipboard:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.written: List[str] = []

    async def write_text(self, text: str):
        if self.fail:
            raise ClipboardError("No clipboard command available")
        self.written.append(text)


@pytest.fixture(scope="function")
def card_frame():
    """A small BGR frame standing in for a camera image."""
    frame = np.full((120, 160, 3), 255, dtype=np.uint8)
    cv2.rectangle(frame, (10, 10), (150, 110), (0, 0, 0), 2)
    return frame


@pytest.fixture(scope="function")
def card_image_file(tmp_path, card_frame):
    """A PNG file on disk to upload."""
    path = tmp_path / "pan_card.png"
    ok, buf = cv2.imencode(".png", card_frame)
    assert ok
    path.write_bytes(buf.tobytes())
    return path


@pytest.fixture(scope="function")
def fake_camera(card_frame):
    return FakeCameraDevice(frame=card_frame)


@pytest.fixture(scope="function")
def fake_recognizer():
    return FakeRecognizer()


@pytest.fixture(scope="function")
def fake_clipboard():
    return FakeClipboard()


@pytest.fixture(scope="function")
def mock_notifier():
    return MagicMock()


@pytest.fixture(scope="function")
def capture_manager(fake_camera):
    return CaptureSourceManager(camera=fake_camera)


@pytest.fixture(scope="function")
def controller(capture_manager, fake_recognizer, fake_clipboard, mock_notifier):
    """Controller wired to fakes; state snapshots are recorded in ``controller.snapshots``."""
    snapshots = []
    ctrl = PipelineController(
        capture=capture_manager,
        recognizer=fake_recognizer,
        clipboard=fake_clipboard,
        notifier=mock_notifier,
        on_change=snapshots.append,
    )
    ctrl.snapshots = snapshots
    return ctrl


@pytest.fixture(scope="function")
def engine_error():
    return RecognitionEngineError("OCR engine failed")


# Configure pytest options
def pytest_configure(config):
    """Configure pytest with custom options."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        if "integration" in item.name.lower() or "Integration" in str(item.cls):
            item.add_marker(pytest.mark.integration)

        if not item.get_closest_marker('integration'):
            item.add_marker(pytest.mark.unit)
