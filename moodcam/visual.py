"""Overlay and presentation drawing helpers.

- render_overlay: fresh overlay surface with face boxes, landmark points and expression labels
- compose_view: camera frame + overlay + mood band colored by the current expression

Detections are scaled from frame coordinates to the display size before drawing.
"""
from __future__ import annotations
import cv2
import numpy as np
from typing import List, Optional, Sequence, Tuple

from moodcam.expressions import CATEGORIES, hex_to_bgr, label_for
from moodcam.models import ExpressionState, FaceBox, FaceResult

BOX_COLOR = (255, 149, 0)        # BGR
LANDMARK_COLOR = (0, 200, 255)
TEXT_COLOR = (255, 255, 255)
MIN_LABEL_PROB = 0.1
BAND_HEIGHT = 56


def match_dimensions(canvas: Optional[np.ndarray], display_size: Tuple[int, int]) -> np.ndarray:
    """Return a cleared BGRA canvas of display_size (width, height), reusing `canvas` when it matches."""
    w, h = display_size
    if canvas is None or canvas.shape[:2] != (h, w):
        return np.zeros((h, w, 4), dtype=np.uint8)
    canvas[:] = 0
    return canvas


def resize_faces(faces: Sequence[FaceResult],
                 frame_size: Tuple[int, int],
                 display_size: Tuple[int, int]) -> List[FaceResult]:
    """Scale regions and landmarks from frame (w, h) to display (w, h) coordinates."""
    fw, fh = frame_size
    dw, dh = display_size
    sx = dw / float(fw) if fw else 1.0
    sy = dh / float(fh) if fh else 1.0
    out: List[FaceResult] = []
    for f in faces:
        r = f.region
        out.append(f.model_copy(update={
            "region": FaceBox(x=int(r.x * sx), y=int(r.y * sy), w=int(r.w * sx), h=int(r.h * sy)),
            "landmarks": [(int(x * sx), int(y * sy)) for x, y in f.landmarks],
        }))
    return out


def _clamp_box(box: FaceBox, w: int, h: int) -> Tuple[int, int, int, int]:
    x = max(0, min(box.x, w - 1)); y = max(0, min(box.y, h - 1))
    bw = max(0, min(box.w, w - x)); bh = max(0, min(box.h, h - y))
    return x, y, bw, bh


def draw_detections(canvas: np.ndarray, faces: Sequence[FaceResult]) -> np.ndarray:
    h, w = canvas.shape[:2]
    color = BOX_COLOR + (255,) if canvas.shape[2] == 4 else BOX_COLOR
    for face in faces:
        x, y, bw, bh = _clamp_box(face.region, w, h)
        cv2.rectangle(canvas, (x, y), (x + bw, y + bh), color, 2)
        conf = f"{face.confidence:.2f}"
        cv2.putText(canvas, conf, (x, min(h - 1, y + bh + 16)), cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1, cv2.LINE_AA)
    return canvas


def draw_face_landmarks(canvas: np.ndarray, faces: Sequence[FaceResult]) -> np.ndarray:
    color = LANDMARK_COLOR + (255,) if canvas.shape[2] == 4 else LANDMARK_COLOR
    for face in faces:
        for (px, py) in face.landmarks:
            cv2.circle(canvas, (px, py), 2, color, -1, cv2.LINE_AA)
    return canvas


def draw_face_expressions(canvas: np.ndarray, faces: Sequence[FaceResult],
                          min_prob: float = MIN_LABEL_PROB) -> np.ndarray:
    """Write every expression above `min_prob` with its probability below each box."""
    h, w = canvas.shape[:2]
    color = TEXT_COLOR + (255,) if canvas.shape[2] == 4 else TEXT_COLOR
    for face in faces:
        x, y, bw, bh = _clamp_box(face.region, w, h)
        ranked = sorted(((face.scores.get(c, 0.0), c) for c in CATEGORIES), key=lambda t: -t[0])
        line = 0
        for p, cat in ranked:
            if p <= min_prob:
                continue
            ty = y + bh + 36 + 18 * line
            if ty >= h:
                break
            cv2.putText(canvas, f"{cat} ({p:.2f})", (x, ty), cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1, cv2.LINE_AA)
            line += 1
    return canvas


def render_overlay(faces: Sequence[FaceResult],
                   frame_size: Tuple[int, int],
                   display_size: Tuple[int, int],
                   canvas: Optional[np.ndarray] = None) -> np.ndarray:
    """Clear the overlay and draw boxes, landmarks and expressions for every face."""
    canvas = match_dimensions(canvas, display_size)
    resized = resize_faces(faces, frame_size, display_size)
    draw_detections(canvas, resized)
    draw_face_expressions(canvas, resized)
    draw_face_landmarks(canvas, resized)
    return canvas


def compose_view(frame: np.ndarray,
                 overlay: Optional[np.ndarray],
                 state: ExpressionState,
                 display_size: Tuple[int, int]) -> np.ndarray:
    """Build the presentation image: video, overlay on top, mood band below.

    Args:
        frame: BGR camera frame (any size)
        overlay: BGRA overlay from render_overlay, or None
        state: current snapshot; its color fills the band
        display_size: (width, height) of the video area

    Returns:
        BGR image of size (height + BAND_HEIGHT, width)
    """
    w, h = display_size
    video = cv2.resize(frame, (w, h), interpolation=cv2.INTER_AREA) if frame.shape[:2] != (h, w) else frame.copy()
    if overlay is not None and overlay.shape[:2] == (h, w):
        alpha = overlay[:, :, 3:4].astype(np.float32) / 255.0
        video = (overlay[:, :, :3].astype(np.float32) * alpha + video.astype(np.float32) * (1.0 - alpha)).astype(np.uint8)

    band = np.zeros((BAND_HEIGHT, w, 3), dtype=np.uint8)
    band[:] = hex_to_bgr(state.color)
    if state.ready:
        text = f"Detected mood: {state.text or label_for(state.label)}"
    else:
        text = "Loading models, please wait..."
    cv2.putText(band, text, (12, BAND_HEIGHT - 20), cv2.FONT_HERSHEY_SIMPLEX, 0.8, TEXT_COLOR, 2, cv2.LINE_AA)
    return np.vstack([video, band])
