from moodcam.config import Settings
from moodcam.engine import DeepFaceEngine
from moodcam.loader import ModelLoader


def test_loader_builds_every_bundle(fake_deepface):
    loader = ModelLoader(DeepFaceEngine(Settings(DETECTOR_BACKEND="opencv")))
    assert loader.ready is False
    loader.start()
    assert loader.wait(timeout=5) is True
    assert loader.ready and not loader.failed
    assert sorted(fake_deepface.built) == [("face_detector", "opencv"), ("facial_attribute", "Emotion")]


def test_loader_failure_keeps_readiness_false(fake_deepface, caplog):
    fake_deepface.fail_model = "Emotion"
    loader = ModelLoader(DeepFaceEngine(Settings()))
    loader.start()
    assert loader.wait(timeout=5) is False
    assert loader.done and loader.failed
    assert isinstance(loader.error, ValueError)
    assert "model loading failed" in caplog.text

    # no retry: a second start() is a no-op
    fake_deepface.fail_model = None
    loader.start()
    loader.wait(timeout=1)
    assert loader.ready is False
