"""OCR package for text recognition and PAN number extraction."""

from .recognize import TesseractRecognizer, recognizer
from .regexes import (
    PAN_NUMBER_PATTERN,
    extract_pan_number,
    is_valid_pan_number,
)

__all__ = [
    "TesseractRecognizer",
    "recognizer",
    "extract_pan_number",
    "is_valid_pan_number",
    "PAN_NUMBER_PATTERN",
]
