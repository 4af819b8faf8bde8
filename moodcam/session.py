"""
Wires model loading, the camera and the polling detector into one component.
"""
from __future__ import annotations
from typing import Callable, List, Optional
import logging
import threading
import time

from moodcam.config import Settings
from moodcam.detector import ExpressionDetector
from moodcam.engine import DeepFaceEngine
from moodcam.loader import ModelLoader
from moodcam.models import ExpressionState, SessionStatus
from moodcam.video import VideoSource

logger = logging.getLogger(__name__)


class ExpressionSession:
    """
    start(): kick off model loading and open the camera; the detector is armed
    by the camera's stream-live callback.
    stop(): cancel the detector, release the camera.
    """
    def __init__(self, settings: Settings,
                 engine: Optional[DeepFaceEngine] = None,
                 loader: Optional[ModelLoader] = None,
                 video: Optional[VideoSource] = None):
        self.s = settings
        self.engine = engine or DeepFaceEngine(settings)
        self.loader = loader or ModelLoader(self.engine)
        self.video = video or VideoSource(settings)
        self._listeners: List[Callable[[ExpressionState], None]] = []
        self._listeners_lock = threading.Lock()
        self.detector = self._new_detector()
        self._lock = threading.Lock()
        self._running = False
        self._started_at: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> bool:
        """Returns False when already running."""
        with self._lock:
            if self._running:
                return False
            if self.detector.stopped:
                # a stopped detector never re-arms; restart with a fresh state cell
                self.detector = self._new_detector()
            self.loader.start()
            self.video.open(on_ready=self.detector.start)
            self._running = True
            self._started_at = time.time()
            logger.info("[session] started")
            return True

    def stop(self) -> bool:
        """Returns False when not running."""
        with self._lock:
            if not self._running:
                return False
            self.detector.stop()
            self.video.close()
            self._running = False
            logger.info("[session] stopped")
            return True

    def status(self) -> SessionStatus:
        err = self.loader.error
        return SessionStatus(
            running=self._running,
            started_at=self._started_at,
            models_ready=self.loader.ready,
            load_error=(f"{type(err).__name__}: {err}" if err is not None else None),
            tick_errors=self.detector.tick_errors,
            state=self.detector.snapshot(),
        )

    # ---- subscription that survives restarts ----
    def subscribe(self, listener: Callable[[ExpressionState], None]) -> Callable[[], None]:
        """Receive every snapshot from the current detector and from any detector a restart creates."""
        with self._listeners_lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return unsubscribe

    def _new_detector(self) -> ExpressionDetector:
        det = ExpressionDetector(self.s, self.engine, self.loader, self.video)
        det.subscribe(self._forward)
        return det

    def _forward(self, state: ExpressionState):
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(state)
            except Exception:
                logger.exception("[session] listener failed")
