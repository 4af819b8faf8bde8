import numpy as np
import pytest

from moodcam.config import Settings
from moodcam.engine import DeepFaceEngine
from fakes import df_face


def test_detect_normalizes_first_face(fake_deepface):
    fake_deepface.results = [
        df_face({"angry": 5.0, "fear": 70.0, "happy": 25.0}),
        df_face({"happy": 100.0}, x=60),
    ]
    eng = DeepFaceEngine(Settings())
    faces = eng.detect(np.zeros((120, 160, 3), dtype=np.uint8))
    assert len(faces) == 2
    f0 = faces[0]
    assert f0.region.x == 10 and f0.region.w == 40
    assert f0.scores["fearful"] == pytest.approx(0.7)
    assert f0.landmarks == [(38, 24), (22, 24)]
    assert faces[1].region.x == 60


def test_detect_drops_whole_frame_pseudo_face(fake_deepface):
    # enforce_detection=False: DeepFace returns the whole image with confidence 0
    fake_deepface.results = [df_face({"neutral": 99.0}, x=0, y=0, w=160, h=120, conf=0, eyes=False)]
    eng = DeepFaceEngine(Settings(MIN_FACE_CONFIDENCE=0.5))
    assert eng.detect(np.zeros((120, 160, 3), dtype=np.uint8)) == []


def test_detect_accepts_dict_and_dominant_only(fake_deepface):
    fake_deepface.results = {"region": {"x": 1, "y": 1, "w": 20, "h": 20}, "dominant_emotion": "surprise"}
    eng = DeepFaceEngine(Settings())
    faces = eng.detect(np.zeros((32, 32, 3), dtype=np.uint8))
    assert len(faces) == 1
    assert faces[0].scores["surprised"] == pytest.approx(1.0)
    assert faces[0].confidence == 1.0


def test_detect_drops_empty_boxes(fake_deepface):
    fake_deepface.results = [{"region": {"x": 0, "y": 0, "w": 0, "h": 0}, "emotion": {"happy": 100.0}}]
    assert DeepFaceEngine(Settings()).detect(np.zeros((8, 8, 3), dtype=np.uint8)) == []


def test_bundles_use_configured_backend():
    eng = DeepFaceEngine(Settings(DETECTOR_BACKEND="ssd"))
    assert ("face_detector", "face_detector", "ssd") in eng.bundles()
    assert ("face_expression", "facial_attribute", "Emotion") in eng.bundles()


def test_build_bundle_does_not_mask_library_errors(monkeypatch):
    import sys, types
    calls = []

    class BrokenDF:
        @staticmethod
        def build_model(model_name, task="facial_recognition"):
            calls.append((task, model_name))
            raise TypeError("bad weights header")

    monkeypatch.setitem(sys.modules, "deepface", types.SimpleNamespace(DeepFace=BrokenDF))
    with pytest.raises(TypeError, match="bad weights header"):
        DeepFaceEngine(Settings()).build_bundle("facial_attribute", "Emotion")
    assert calls == [("facial_attribute", "Emotion")]


def test_model_home_exported(monkeypatch):
    import os
    # setenv first so teardown restores whatever the engine writes
    monkeypatch.setenv("DEEPFACE_HOME", "/tmp/preset")
    DeepFaceEngine(Settings(MODEL_HOME="/tmp/weights"))
    assert os.environ["DEEPFACE_HOME"] == "/tmp/preset"
    monkeypatch.delenv("DEEPFACE_HOME")
    DeepFaceEngine(Settings(MODEL_HOME="/tmp/weights"))
    assert os.environ["DEEPFACE_HOME"] == "/tmp/weights"
