"""Regex patterns for PAN card text extraction."""

import re
from typing import Optional

from ..core.constants import PAN_NUMBER_REGEX

# Compiled regex pattern for reuse
PAN_NUMBER_PATTERN = re.compile(PAN_NUMBER_REGEX)


def extract_pan_number(text: Optional[str]) -> Optional[str]:
    """
    Extract the first PAN number from recognized text.

    The match is returned verbatim: no case folding, no whitespace stripping.
    Later candidates in the text are ignored.

    Args:
        text: Text produced by OCR

    Returns:
        The first matching substring, or None if there is none

    Examples:
        >>> extract_pan_number("Name: RAHUL SHARMA PAN: ABCDE1234F DOB: 01/01/1990")
        'ABCDE1234F'
        >>> extract_pan_number("no identifier here") is None
        True
    """
    if not text:
        return None

    match = PAN_NUMBER_PATTERN.search(text)
    if match:
        return match.group(0)

    return None


def is_valid_pan_number(value: Optional[str]) -> bool:
    """Check that value is exactly one PAN number and nothing else."""
    if not isinstance(value, str):
        return False
    return PAN_NUMBER_PATTERN.fullmatch(value) is not None
