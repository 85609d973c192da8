from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union
import uuid

import numpy as np


class CaptureMode(str, Enum):
    UPLOAD = "upload"
    CAMERA = "camera"


class CaptureState(str, Enum):
    IDLE = "idle"
    CAMERA_REQUESTING = "camera_requesting"
    CAMERA_LIVE = "camera_live"
    IMAGE_HELD = "image_held"


class RunOutcome(str, Enum):
    """How one acquisition-to-extraction run ended."""
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    BUSY = "busy"
    CANCELLED = "cancelled"
    STALE = "stale"


@dataclass(eq=False)
class CapturedImage:
    data: Union[bytes, np.ndarray]  # encoded file bytes or a BGR frame
    mode: CaptureMode
    preview_uri: str
    source_name: str
    image_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def is_frame(self) -> bool:
        return isinstance(self.data, np.ndarray)


@dataclass(frozen=True)
class PipelineState:
    loading: bool = False
    error_message: Optional[str] = None
    current_image: Optional[CapturedImage] = None
    camera_open: bool = False
    capture_state: CaptureState = CaptureState.IDLE
    results: Tuple[str, ...] = ()
