"""
Webcam frame source.

Keeps the most recent camera frame in memory and signals "stream is live"
once, when the first frame arrives.
"""
from __future__ import annotations
from typing import Callable, Optional
import logging
import threading
import time

import cv2
import numpy as np

from moodcam.config import Settings

logger = logging.getLogger(__name__)


class VideoSource:
    JOIN_TIMEOUT = 2.0

    def __init__(self, settings: Settings, camera_index: Optional[int] = None):
        self.s = settings
        self.camera_index = settings.CAMERA_INDEX if camera_index is None else camera_index
        self._frame: Optional[np.ndarray] = None
        self._lock = threading.Lock()
        self._run = False
        self._stop: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._on_ready: Optional[Callable[[], None]] = None
        self._live = threading.Event()

    @property
    def live(self) -> bool:
        return self._live.is_set()

    def open(self, on_ready: Optional[Callable[[], None]] = None):
        """Open the camera at the requested resolution and start reading frames."""
        if self._run:
            return
        cap = cv2.VideoCapture(self.camera_index)
        if not cap.isOpened():
            raise RuntimeError(f"Could not open camera index {self.camera_index}")
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.s.VIDEO_WIDTH)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.s.VIDEO_HEIGHT)
        logger.info(f"[video] camera {self.camera_index} opened ({self.s.VIDEO_WIDTH}x{self.s.VIDEO_HEIGHT} requested)")

        self._on_ready = on_ready
        self._live.clear()
        with self._lock:
            self._frame = None
        self._run = True
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._read_loop, args=(cap, self._stop),
                                        name="moodcam-video", daemon=True)
        self._thread.start()

    def read_frame(self) -> Optional[np.ndarray]:
        with self._lock:
            return None if self._frame is None else self._frame.copy()

    def close(self):
        self._run = False
        stop, t = self._stop, self._thread
        if stop is not None:
            stop.set()
        self._stop = None
        self._thread = None
        if t is not None and t is not threading.current_thread():
            t.join(timeout=self.JOIN_TIMEOUT)
            if t.is_alive():
                # reader is blocked in cap.read(); it releases the camera when that returns
                logger.warning("[video] reader thread still busy; camera release deferred")

    def _read_loop(self, cap, stop: threading.Event):
        try:
            while not stop.is_set():
                ok, frame = cap.read()
                if stop.is_set():
                    break
                if not ok or frame is None:
                    time.sleep(0.05)
                    continue
                with self._lock:
                    self._frame = frame
                if not self._live.is_set():
                    self._live.set()
                    logger.debug("[video] first frame received; stream live")
                    if self._on_ready is not None:
                        try:
                            self._on_ready()
                        except Exception:
                            logger.exception("[video] on_ready callback failed")
                time.sleep(0.005)
        finally:
            cap.release()
            logger.info("[video] camera released")
