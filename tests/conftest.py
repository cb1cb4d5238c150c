import math
import time
from typing import List, Optional, Tuple

import pytest

from hand_breath.frame_gate import CameraUnavailableError
from hand_breath.landmarks import MIDDLE_MCP, MIDDLE_TIP, NUM_LANDMARKS, WRIST


def make_frame(
    hand_size: float = 0.25,
    angle_deg: float = 0.0,
    wrist: Tuple[float, float] = (0.5, 0.5),
    base_length: float = 0.1,
) -> List[Tuple[float, float]]:
    """Build a 21-point frame with a given wrist->middle-tip length and
    wrist->middle-base direction. Unused points sit on the wrist."""
    wx, wy = wrist
    c, s = math.cos(math.radians(angle_deg)), math.sin(math.radians(angle_deg))
    points = [(wx, wy)] * NUM_LANDMARKS
    points[WRIST] = (wx, wy)
    points[MIDDLE_MCP] = (wx + base_length * c, wy + base_length * s)
    points[MIDDLE_TIP] = (wx + hand_size * c, wy + hand_size * s)
    return points


@pytest.fixture
def frame_factory():
    return make_frame


class FakeTracker:
    """Stand-in for HandTracker that replays a fixed frame."""

    def __init__(self, frame: Optional[list] = None, fail: bool = False, delay: float = 0.002):
        self.frame = frame
        self.fail = fail
        self.delay = delay
        self.opened = False
        self.closed = False
        self.reads = 0

    def open(self) -> None:
        if self.fail:
            raise CameraUnavailableError("permission denied")
        self.opened = True

    def read(self):
        time.sleep(self.delay)
        self.reads += 1
        return self.frame

    def draw_preview(self, show_skeleton: bool = False):
        return None

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_tracker_cls():
    return FakeTracker
