import numpy as np

from moodcam.models import FaceBox, FaceResult
from moodcam.session import ExpressionSession


class FakeVideo:
    def __init__(self):
        self.opened = 0
        self.closed = 0
        self.on_ready = None
        self.frame = np.zeros((48, 64, 3), dtype=np.uint8)
    def open(self, on_ready=None):
        self.opened += 1
        self.on_ready = on_ready
    def read_frame(self):
        return self.frame
    def close(self):
        self.closed += 1


class FakeLoader:
    def __init__(self, ready=True, error=None):
        self.ready = ready
        self.error = error
        self.started = 0
    def start(self):
        self.started += 1


class FakeEngine:
    def detect(self, frame):
        return [FaceResult(region=FaceBox(x=2, y=2, w=10, h=10), scores={"surprised": 0.9})]


def test_session_arms_detector_when_stream_live(settings):
    vid, loader = FakeVideo(), FakeLoader()
    s = ExpressionSession(settings, engine=FakeEngine(), loader=loader, video=vid)
    assert s.start() is True
    assert s.start() is False
    assert loader.started == 1 and vid.opened == 1
    assert not s.detector.armed
    vid.on_ready()                     # stream is live
    assert s.detector.armed
    assert s.detector.tick()
    st = s.status()
    assert st.running and st.models_ready
    assert st.state.label == "surprised"
    assert s.stop() is True
    assert s.stop() is False
    assert vid.closed == 1
    assert s.detector.stopped


def test_session_restart_uses_fresh_detector(settings):
    vid = FakeVideo()
    s = ExpressionSession(settings, engine=FakeEngine(), loader=FakeLoader(), video=vid)
    s.start(); vid.on_ready(); s.stop()
    old = s.detector
    s.start()
    assert s.detector is not old
    vid.on_ready()
    assert s.detector.armed
    s.stop()


def test_session_status_reports_load_error(settings):
    loader = FakeLoader(ready=False, error=ValueError("no weights"))
    s = ExpressionSession(settings, engine=FakeEngine(), loader=loader, video=FakeVideo())
    st = s.status()
    assert st.running is False
    assert st.models_ready is False
    assert st.load_error == "ValueError: no weights"
    assert st.state.label == "pending"


def test_session_listener_survives_restart(settings):
    vid = FakeVideo()
    s = ExpressionSession(settings, engine=FakeEngine(), loader=FakeLoader(), video=vid)
    seen = []
    unsubscribe = s.subscribe(lambda st: seen.append(st.label))
    s.start(); vid.on_ready()
    assert s.detector.tick()
    s.stop(); s.start(); vid.on_ready()
    assert s.detector.tick()
    assert seen == ["surprised", "surprised"]
    unsubscribe()
    assert s.detector.tick()
    assert len(seen) == 2
    s.stop()


def test_session_listener_error_is_contained(settings):
    s = ExpressionSession(settings, engine=FakeEngine(), loader=FakeLoader(), video=FakeVideo())
    seen = []
    s.subscribe(lambda st: 1 / 0)
    s.subscribe(lambda st: seen.append(st.label))
    assert s.detector.tick()
    assert seen == ["surprised"]
