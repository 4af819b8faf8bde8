"""
Face + expression inference with DeepFace.
"""
# moodcam/engine.py
from __future__ import annotations
from typing import Dict, List, Optional, Tuple
import logging
import os

import numpy as np

from moodcam.config import Settings
from moodcam.expressions import normalize_scores
from moodcam.models import FaceBox, FaceResult

logger = logging.getLogger(__name__)

# DeepFace emotion scores are percentages
SCORE_SCALE = 100.0

# (bundle name, DeepFace task, model name or None for the configured detector)
MODEL_BUNDLES: Tuple[Tuple[str, str, Optional[str]], ...] = (
    ("face_detector", "face_detector", None),
    ("face_expression", "facial_attribute", "Emotion"),
)


class DeepFaceEngine:
    """Load-then-query wrapper around DeepFace.

    deepface is imported lazily, so importing this module stays cheap and tests
    can inject a fake module through sys.modules['deepface'].
    """

    def __init__(self, settings: Settings):
        self.s = settings
        if settings.MODEL_HOME:
            # DeepFace downloads weights under $DEEPFACE_HOME/.deepface/weights
            os.environ.setdefault("DEEPFACE_HOME", settings.MODEL_HOME)

    def bundles(self) -> List[Tuple[str, str, str]]:
        return [(name, task, model or self.s.DETECTOR_BACKEND) for name, task, model in MODEL_BUNDLES]

    def build_bundle(self, task: str, model_name: str):
        """Build (and download on first use) one pre-trained model."""
        from deepface import DeepFace
        logger.debug(f"[engine] build_model task={task} model={model_name}")
        return DeepFace.build_model(model_name=model_name, task=task)

    def detect(self, frame: np.ndarray) -> List[FaceResult]:
        """
        Run detection + expression classification on one BGR frame.

        Returns faces in library order; an empty list when nothing passes the
        confidence/size filter.
        """
        from deepface import DeepFace
        result = DeepFace.analyze(
            frame,
            actions=["emotion"],
            enforce_detection=False,
            detector_backend=self.s.DETECTOR_BACKEND,
            align=True,
        )
        # DeepFace returns list[dict] or dict depending on version; normalize to list
        if isinstance(result, dict):
            result = [result]
        faces: List[FaceResult] = []
        for r in result or []:
            face = self._to_face(r)
            if face is not None:
                faces.append(face)
        logger.debug(f"[engine] raw={len(result or [])} faces={len(faces)}")
        return faces

    def _to_face(self, r: Dict) -> Optional[FaceResult]:
        reg = (r or {}).get("region") or {}
        w = int(reg.get("w", 0) or 0); h = int(reg.get("h", 0) or 0)
        if w <= 0 or h <= 0:
            return None
        conf = r.get("face_confidence")
        try:
            conf = 1.0 if conf is None else float(conf)
        except (TypeError, ValueError):
            conf = 1.0
        # enforce_detection=False yields a whole-frame region with confidence 0 when no face is found
        if conf < self.s.MIN_FACE_CONFIDENCE:
            return None

        landmarks: List[Tuple[int, int]] = []
        for key in ("left_eye", "right_eye", "nose", "mouth_left", "mouth_right"):
            pt = reg.get(key)
            if pt is not None and len(pt) == 2:
                landmarks.append((int(pt[0]), int(pt[1])))

        em = r.get("emotion")
        if isinstance(em, dict) and em:
            scores = normalize_scores(em, scale=SCORE_SCALE)
        else:
            # Fall back to dominant_emotion as a one-hot score
            dom = r.get("dominant_emotion")
            scores = normalize_scores({dom: SCORE_SCALE} if isinstance(dom, str) and dom else None,
                                      scale=SCORE_SCALE)

        return FaceResult(
            region=FaceBox(x=int(reg.get("x", 0) or 0), y=int(reg.get("y", 0) or 0), w=w, h=h),
            landmarks=landmarks,
            scores=scores,
            confidence=conf,
        )
