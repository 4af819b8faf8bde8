# moodcam/detector.py
"""
Polling expression detector.

Every POLL_INTERVAL seconds (once armed):
- pull the latest camera frame
- ask the inference engine for faces + expression scores
- reduce the FIRST face to its dominant expression
- publish an immutable ExpressionState (label, text, color) to subscribers
- redraw the overlay surface (boxes, landmarks, expression labels)

Ticks run on a single polling thread, so a slow inference call delays the
next tick instead of overlapping it; missed periods are skipped.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, List, Optional, Protocol
import logging

import numpy as np

from moodcam.config import Settings
from moodcam.expressions import (
    DEFAULT_COLOR, NO_FACE, color_for, dominant_expression, emoji_for, label_for,
)
from moodcam.models import ExpressionState, FaceResult
from moodcam.visual import compose_view, render_overlay

logger = logging.getLogger(__name__)

Listener = Callable[[ExpressionState], None]


class FrameSource(Protocol):
    def read_frame(self) -> Optional[np.ndarray]: ...


class Engine(Protocol):
    def detect(self, frame: np.ndarray) -> List[FaceResult]: ...


class Readiness(Protocol):
    @property
    def ready(self) -> bool: ...


def reduce_faces(faces: List[FaceResult], now: Optional[float] = None) -> ExpressionState:
    """Turn one tick's detections into a snapshot. Only the first face counts."""
    now = time.time() if now is None else now
    if not faces:
        return ExpressionState(label=NO_FACE, text=label_for(NO_FACE), color=DEFAULT_COLOR,
                               face_count=0, ready=True, updated_at=now)
    first = faces[0]
    label = dominant_expression(first.scores)
    return ExpressionState(
        label=label,
        text=label_for(label),
        color=color_for(label),
        emoji=emoji_for(label),
        face_count=len(faces),
        scores=dict(first.scores),
        ready=True,
        updated_at=now,
    )


class ExpressionDetector:
    """Owns the (label, color) state cell; only the polling thread writes it."""
    def __init__(self, settings: Settings, engine: Engine, readiness: Readiness, source: FrameSource):
        self.s = settings
        self.engine = engine
        self.readiness = readiness
        self.source = source
        self.tick_errors = 0
        self._state = ExpressionState()
        self._overlay: Optional[np.ndarray] = None
        self._frame: Optional[np.ndarray] = None
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()
        self._stop_evt = threading.Event()
        self._stopped = False
        self._thread: Optional[threading.Thread] = None

    # ---- lifecycle ----
    @property
    def armed(self) -> bool:
        return self._thread is not None and not self._stopped

    @property
    def stopped(self) -> bool:
        return self._stopped

    def start(self):
        """Arm the polling timer. Used as the video source's stream-live callback."""
        with self._lock:
            if self._thread is not None or self._stopped:
                return
            logger.info(f"[detector] starting detection every {self.s.POLL_INTERVAL:.3f}s")
            self._thread = threading.Thread(target=self._poll_loop, name="moodcam-detector", daemon=True)
            self._thread.start()

    def stop(self):
        """Cancel the timer. No state change or notification happens after this returns."""
        self._stop_evt.set()
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            self._listeners.clear()
        t = self._thread
        if t is not None and t is not threading.current_thread():
            # An in-flight detect() call is not interrupted; its result is discarded
            t.join(timeout=max(1.0, 2 * self.s.POLL_INTERVAL))
        logger.info("[detector] stopped")

    # ---- read side ----
    def snapshot(self) -> ExpressionState:
        with self._lock:
            state = self._state
        ready = bool(self.readiness.ready)
        if state.ready != ready:
            state = state.model_copy(update={"ready": ready})
        return state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return unsubscribe

    def overlay(self) -> Optional[np.ndarray]:
        with self._lock:
            return self._overlay

    def render_view(self) -> Optional[np.ndarray]:
        """Composed presentation image for the latest tick, or the raw frame before any tick."""
        with self._lock:
            frame, overlay = self._frame, self._overlay
        if frame is None:
            frame = self.source.read_frame()
            if frame is None:
                return None
        return compose_view(frame, overlay, self.snapshot(), self.s.display_size)

    # ---- tick ----
    def tick(self) -> bool:
        """One polling step. Returns True when a new state was published."""
        if self._stopped or not self.readiness.ready:
            return False
        frame = self.source.read_frame()
        if frame is None:
            return False
        try:
            faces = self.engine.detect(frame)
        except Exception:
            self.tick_errors += 1
            logger.exception("[detector] detection failed; skipping tick")
            return False

        h, w = frame.shape[:2]
        overlay = render_overlay(faces, (w, h), self.s.display_size)
        state = reduce_faces(faces)
        logger.debug(f"[detector] faces={len(faces)} label={state.label}")
        return self._publish(state, frame, overlay)

    def _publish(self, state: ExpressionState, frame: np.ndarray, overlay: np.ndarray) -> bool:
        # Held across notification so stop() waits for an in-flight publish
        with self._lock:
            if self._stopped:
                return False
            self._state = state
            self._frame = frame
            self._overlay = overlay
            for listener in list(self._listeners):
                try:
                    listener(state)
                except Exception:
                    logger.exception("[detector] listener failed")
        return True

    def _poll_loop(self):
        interval = self.s.POLL_INTERVAL
        next_t = time.monotonic() + interval
        while not self._stop_evt.wait(max(0.0, next_t - time.monotonic())):
            self.tick()
            now = time.monotonic()
            next_t += interval
            if next_t <= now:
                skipped = int((now - next_t) // interval) + 1
                logger.debug(f"[detector] tick overran; skipping {skipped} period(s)")
                next_t += skipped * interval
