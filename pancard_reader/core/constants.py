from typing import Final

# PAN number: 5 uppercase letters, 4 digits, 1 uppercase letter
PAN_NUMBER_REGEX: Final[str] = r"[A-Z]{5}[0-9]{4}[A-Z]"

# User-facing messages
MSG_NOT_FOUND_UPLOAD: Final[str] = "PAN number not found in the uploaded image."
MSG_NOT_FOUND_CAPTURE: Final[str] = "PAN number not found in the captured image."
MSG_RECOGNITION_FAILED: Final[str] = "Error reading PAN card. Please try again."
MSG_CAMERA_FAILED: Final[str] = "Error accessing camera. Please try again."
MSG_CAMERA_UNSUPPORTED: Final[str] = "Camera access not supported."
MSG_NO_FRAME: Final[str] = "No camera frame available. Please try again."
MSG_UPLOAD_FAILED: Final[str] = "Could not open the selected image."

# Progress steps reported by the recognizer
STEP_LOADING: Final[str] = "loading image"
STEP_RECOGNIZING: Final[str] = "recognizing text"
STEP_DONE: Final[str] = "done"

CAMERA_SOURCE_NAME: Final[str] = "camera"
