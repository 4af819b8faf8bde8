import sys, types
import numpy as np
import pytest

from moodcam.config import Settings


@pytest.fixture
def fake_deepface(monkeypatch):
    """Inject a fake 'deepface' module so `from deepface import DeepFace` works."""
    class DF:
        results = []
        analyze_calls = 0
        built = []
        fail_model = None

        @staticmethod
        def analyze(img_path, actions=None, enforce_detection=True, detector_backend="opencv", align=True):
            DF.analyze_calls += 1
            return DF.results

        @staticmethod
        def build_model(model_name, task="facial_recognition"):
            if DF.fail_model is not None and model_name == DF.fail_model:
                raise ValueError(f"cannot download {model_name}")
            DF.built.append((task, model_name))
            return object()

    monkeypatch.setitem(sys.modules, "deepface", types.SimpleNamespace(DeepFace=DF))
    return DF


@pytest.fixture
def settings():
    return Settings(POLL_INTERVAL=0.02, VIDEO_WIDTH=64, VIDEO_HEIGHT=48, MIN_FACE_CONFIDENCE=0.5)


@pytest.fixture
def frame():
    return np.zeros((48, 64, 3), dtype=np.uint8)


@pytest.fixture
def ready():
    return types.SimpleNamespace(ready=True)
