import sys
import types
from types import SimpleNamespace

import numpy as np
import pytest

from hand_breath.frame_gate import CameraUnavailableError
from hand_breath.hand_tracker import HandTracker


def _frame(h=48, w=64):
    return np.zeros((h, w, 3), dtype=np.uint8)


class FakeCapture:
    """Stand-in for cv2.VideoCapture serving queued reads."""

    def __init__(self, index, opened=True, reads=None):
        self.index = index
        self.opened = opened
        self.reads = list(reads) if reads is not None else []
        self.released = False
        self.props = {}

    def isOpened(self):
        return self.opened

    def set(self, prop, value):
        self.props[prop] = value
        return True

    def get(self, prop):
        return self.props.get(prop, 30.0)

    def read(self):
        if self.reads:
            return self.reads.pop(0)
        return True, _frame()

    def release(self):
        self.released = True


class FakeHands:
    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.results = SimpleNamespace(multi_hand_landmarks=None)
        self.error = None
        self.closed = False

    def process(self, rgb):
        if self.error is not None:
            raise self.error
        return self.results

    def close(self):
        self.closed = True


@pytest.fixture
def capture(monkeypatch):
    """Patch cv2.VideoCapture; the created capture is stored on the holder."""
    holder = SimpleNamespace(cap=None, opened=True, reads=None)

    def factory(index):
        holder.cap = FakeCapture(index, opened=holder.opened, reads=holder.reads)
        return holder.cap

    monkeypatch.setattr("hand_breath.hand_tracker.cv2.VideoCapture", factory)
    return holder


@pytest.fixture
def mediapipe(monkeypatch):
    """Install a fake mediapipe whose Hands() is configurable."""
    holder = SimpleNamespace(hands=None, error=None)

    def make_hands(**kwargs):
        if holder.error is not None:
            raise holder.error
        holder.hands = FakeHands(**kwargs)
        return holder.hands

    module = types.ModuleType("mediapipe")
    module.solutions = SimpleNamespace(hands=SimpleNamespace(Hands=make_hands))
    monkeypatch.setitem(sys.modules, "mediapipe", module)
    return holder


def _hand_results(points):
    hand = SimpleNamespace(landmark=[SimpleNamespace(x=x, y=y, z=0.0) for x, y in points])
    return SimpleNamespace(multi_hand_landmarks=[hand])


def test_open_creates_single_hand_detector(capture, mediapipe):
    tracker = HandTracker(camera_index=2)
    tracker.open()

    assert tracker.is_open
    assert capture.cap.index == 2
    assert mediapipe.hands.kwargs["max_num_hands"] == 1
    assert mediapipe.hands.kwargs["model_complexity"] == 0


def test_open_fails_when_camera_cannot_be_opened(capture, mediapipe):
    capture.opened = False
    tracker = HandTracker()

    with pytest.raises(CameraUnavailableError):
        tracker.open()
    assert capture.cap.released
    assert tracker.cap is None
    assert mediapipe.hands is None


def test_open_fails_when_first_read_fails(capture, mediapipe):
    capture.reads = [(False, None)]
    tracker = HandTracker()

    with pytest.raises(CameraUnavailableError):
        tracker.open()
    assert capture.cap.released


def test_detector_failure_releases_camera(capture, mediapipe):
    mediapipe.error = RuntimeError("hand landmark model failed to load")
    tracker = HandTracker()

    with pytest.raises(CameraUnavailableError, match="hand landmark model"):
        tracker.open()
    assert capture.cap.released
    assert tracker.cap is None
    assert not tracker.is_open


def test_missing_mediapipe_releases_camera(capture, monkeypatch):
    monkeypatch.setitem(sys.modules, "mediapipe", None)
    tracker = HandTracker()

    with pytest.raises(CameraUnavailableError):
        tracker.open()
    assert capture.cap.released


def test_read_before_open_returns_none():
    assert HandTracker().read() is None


def test_read_invalid_frame_returns_none(capture, mediapipe):
    capture.reads = [(True, _frame()), (False, None), (True, np.zeros((4, 4), dtype=np.uint8))]
    tracker = HandTracker()
    tracker.open()

    assert tracker.read() is None
    assert tracker.read() is None
    assert tracker.frame_gate.invalid_count == 2
    assert tracker.last_frame is None


def test_read_detector_error_returns_none(capture, mediapipe):
    tracker = HandTracker()
    tracker.open()
    mediapipe.hands.error = RuntimeError("inference failed")

    assert tracker.read() is None
    assert tracker.detector_gate.total_failures == 1


def test_read_without_hand_returns_none(capture, mediapipe):
    tracker = HandTracker()
    tracker.open()

    assert tracker.read() is None
    assert tracker.last_frame is not None


def test_read_returns_first_hand_landmarks(capture, mediapipe, frame_factory):
    points = frame_factory(angle_deg=30.0)
    tracker = HandTracker()
    tracker.open()
    mediapipe.hands.results = _hand_results(points)

    landmarks = tracker.read()
    assert [(p.x, p.y) for p in landmarks] == points
    assert tracker.last_landmarks is landmarks


def test_draw_preview(capture, mediapipe, frame_factory):
    tracker = HandTracker()
    assert tracker.draw_preview() is None

    tracker.open()
    mediapipe.hands.results = _hand_results(frame_factory())
    tracker.read()

    plain = tracker.draw_preview(show_skeleton=False)
    skeleton = tracker.draw_preview(show_skeleton=True)
    assert plain.shape == skeleton.shape == (48, 64, 3)
    assert not plain.any()
    assert skeleton.any()
    # the stored camera frame is never drawn on
    assert not tracker.last_frame.any()


def test_close_releases_camera_and_detector(capture, mediapipe):
    tracker = HandTracker()
    tracker.open()
    hands = mediapipe.hands

    tracker.close()
    assert capture.cap.released
    assert hands.closed
    assert not tracker.is_open
    tracker.close()
