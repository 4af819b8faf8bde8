# moodcam/pipeline.py
from __future__ import annotations
from typing import Dict, Optional
import logging
import os

import cv2

from moodcam.config import Settings
from moodcam.detector import reduce_faces
from moodcam.engine import DeepFaceEngine
from moodcam.loader import ModelLoader
from moodcam.visual import compose_view, render_overlay

logger = logging.getLogger(__name__)

def analyze_image_pipeline(image_path: str, settings: Settings, out_path: Optional[str] = None) -> Dict:
    """
    One detection pass over a still image: load models, detect, reduce the first
    face to its dominant expression. Optionally write the composed view to out_path.
    """
    if not os.path.exists(image_path):
        raise FileNotFoundError(f"Image not found: {image_path}")

    logger.debug(f"[pipeline] analyze_image_pipeline start image_path={image_path}")
    frame = cv2.imread(image_path)
    if frame is None:
        raise RuntimeError(f"Could not decode image: {image_path}")

    engine = DeepFaceEngine(settings)
    loader = ModelLoader(engine)
    loader.load()
    if not loader.ready:
        raise RuntimeError(f"Model loading failed: {loader.error}")

    faces = engine.detect(frame)
    state = reduce_faces(faces)
    logger.debug(f"[pipeline] faces={len(faces)} label={state.label}")

    if out_path:
        h, w = frame.shape[:2]
        overlay = render_overlay(faces, (w, h), (w, h))
        view = compose_view(frame, overlay, state, (w, h))
        out_dir = os.path.dirname(out_path)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        if not cv2.imwrite(out_path, view):
            raise RuntimeError(f"Could not write image: {out_path}")
        logger.debug(f"[pipeline] annotated image written to {out_path}")

    payload = state.model_dump()
    payload["faces"] = [f.model_dump() for f in faces]
    return payload
