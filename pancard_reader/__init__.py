"""PAN Card Reader - read PAN numbers from card images and live camera captures."""

__version__ = "1.0.0"
__author__ = "PAN Card Reader Team"
__description__ = "Acquire a PAN card image by upload or camera, OCR it, and extract the PAN number"

from .capture.source import CaptureSourceManager
from .core.types import CapturedImage, CaptureMode, CaptureState, PipelineState, RunOutcome
from .ocr.recognize import TesseractRecognizer, recognizer
from .ocr.regexes import extract_pan_number, is_valid_pan_number
from .pipeline.controller import PipelineController
from .ui.clipboard import clipboard
from .ui.notifier import notifier
from .utils.config import settings

# Core functionality imports
from .utils.log import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__description__",
    # Core components
    "configure_logging",
    "get_logger",
    "settings",
    "extract_pan_number",
    "is_valid_pan_number",
    "TesseractRecognizer",
    "recognizer",
    "CaptureSourceManager",
    "PipelineController",
    "CapturedImage",
    "CaptureMode",
    "CaptureState",
    "PipelineState",
    "RunOutcome",
    "clipboard",
    "notifier",
]
