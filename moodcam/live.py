# moodcam/live.py
"""
Live camera window.

Opens the webcam through an ExpressionSession and shows, in an OpenCV window:
- the video with face boxes, landmark points and expression labels
- a band under the video colored by the dominant expression, with its name

Press 'q' to quit; the detector timer is cancelled and the camera released.
"""

from __future__ import annotations

import logging
from typing import Optional

import cv2

from moodcam.config import Settings
from moodcam.session import ExpressionSession

logger = logging.getLogger(__name__)

WINDOW_TITLE = "Mood Detector (q to quit)"


def run_live_overlay(settings: Settings, camera_index: Optional[int] = None,
                     session: Optional[ExpressionSession] = None) -> None:
    """
    Run the detector and display its presentation surface until 'q' is pressed
    or the window loop ends.
    """
    if session is None:
        if camera_index is not None:
            settings = settings.model_copy(update={"CAMERA_INDEX": camera_index})
        session = ExpressionSession(settings)

    session.start()
    logger.info("[live] window open; press 'q' to quit")
    try:
        while True:
            view = session.detector.render_view()
            if view is not None:
                cv2.imshow(WINDOW_TITLE, view)
            # ~30 fps redraw; detection cadence is independent
            if (cv2.waitKey(33) & 0xFF) == ord("q"):
                break
    finally:
        session.stop()
        cv2.destroyAllWindows()
