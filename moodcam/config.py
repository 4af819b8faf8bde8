"""
Configuration for the expression detector.
"""
from pydantic import BaseModel
import os

DETECTOR_BACKENDS = ("opencv", "ssd", "mtcnn", "retinaface", "mediapipe", "yunet", "yolov8", "centerface")

class Settings(BaseModel):
    """
    Runtime settings with environment-variable overrides.
    """
    CAMERA_INDEX: int = int(os.getenv("CAMERA_INDEX", "0"))
    VIDEO_WIDTH: int = int(os.getenv("VIDEO_WIDTH", "640"))
    VIDEO_HEIGHT: int = int(os.getenv("VIDEO_HEIGHT", "480"))
    POLL_INTERVAL: float = float(os.getenv("POLL_INTERVAL", "0.5"))
    DETECTOR_BACKEND: str = (os.getenv("DETECTOR_BACKEND", "opencv") or "opencv")
    MIN_FACE_CONFIDENCE: float = float(os.getenv("MIN_FACE_CONFIDENCE", "0.5"))
    MODEL_HOME: str | None = os.getenv("MODEL_HOME") or None
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def __init__(self, **data):
        super().__init__(**data)
        # Normalize DETECTOR_BACKEND: strip comments/extra words, lower-case, validate
        backend = (self.DETECTOR_BACKEND or "opencv").strip().split()[0].lower()
        if backend not in DETECTOR_BACKENDS:
            backend = "opencv"
        object.__setattr__(self, "DETECTOR_BACKEND", backend)
        object.__setattr__(self, "POLL_INTERVAL", max(0.01, float(self.POLL_INTERVAL)))
        object.__setattr__(self, "LOG_LEVEL", (self.LOG_LEVEL or "INFO").upper())

    @property
    def display_size(self) -> tuple[int, int]:
        return self.VIDEO_WIDTH, self.VIDEO_HEIGHT
