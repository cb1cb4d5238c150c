"""
Signal Conditioning - turns noisy landmark frames into stable control signals.

Two scalars are derived from each frame:
- distance: wrist->middle-tip length (hand size) mapped to [0, 1], 0 = close
- rotation: angle of the wrist->middle-base vector in degrees, (-180, 180]

Both are low-pass filtered with a persistent exponential smoother. Rotation
smoothing is wrap-aware so a hand hovering around +/-180 degrees never causes a
full-circle spin.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import BreathConfig, default_config
from .landmarks import MIDDLE_MCP, MIDDLE_TIP, WRIST, LandmarkFrame, to_landmark_array

logger = logging.getLogger(__name__)


# ============================================================================
# Utility Functions
# ============================================================================

def clamp(v: float, lo: float, hi: float) -> float:
    """Clamp value between lo and hi."""
    return max(lo, min(hi, v))


def normalize_angle_deg(angle: float) -> float:
    """Wrap an angle in degrees into (-180, 180]."""
    wrapped = ((angle + 180.0) % 360.0) - 180.0
    return 180.0 if wrapped == -180.0 else wrapped


def wrap_delta_deg(delta: float) -> float:
    """Fold a difference of two normalized angles into [-180, 180]."""
    if delta > 180.0:
        delta -= 360.0
    if delta < -180.0:
        delta += 360.0
    return delta


def hand_size_to_distance(hand_size: float, far: float = 0.15, near: float = 0.35) -> float:
    """
    Map a raw hand size linearly from [far, near] onto [1, 0], clamped.

    A bigger hand in the image means the hand is closer to the camera, hence a
    smaller distance value.
    """
    distance = 1.0 - (hand_size - far) / (near - far)
    if not math.isfinite(distance):
        return math.nan
    return clamp(distance, 0.0, 1.0)


# ============================================================================
# Control Signal
# ============================================================================

@dataclass(frozen=True)
class ControlSignal:
    """
    Smoothed hand state.

    Attributes:
        distance: 0 (close) .. 1 (far)
        rotation: degrees in (-180, 180]
    """
    distance: float
    rotation: float


class SignalConditioner:
    """
    Persistent exponential smoother for hand distance and rotation.

    ``condition`` is called once per detection frame. Absent or malformed
    frames leave the smoothed values untouched and clear ``detected``.
    """

    def __init__(self, config: BreathConfig = default_config):
        self.config = config
        self.alpha = config.smoothing
        self.distance = clamp(config.initial_distance, 0.0, 1.0)
        self.rotation = normalize_angle_deg(config.initial_rotation)
        self.detected = False

        # Raw (pre-smoothing) values of the last accepted frame, for debugging
        self.raw_distance: Optional[float] = None
        self.raw_rotation: Optional[float] = None

    @property
    def signal(self) -> ControlSignal:
        """Snapshot of the current smoothed state."""
        return ControlSignal(distance=self.distance, rotation=self.rotation)

    def condition(self, landmarks: Optional[LandmarkFrame]) -> ControlSignal:
        """
        Feed one detection frame and return the smoothed signal.

        Args:
            landmarks: 21 normalized landmarks, or None when no hand was found

        Returns:
            ControlSignal snapshot after this frame
        """
        pts = to_landmark_array(landmarks)
        if pts is None:
            self.detected = False
            return self.signal

        self.detected = True
        self._update_distance(pts)
        self._update_rotation(pts)
        return self.signal

    def _update_distance(self, pts: np.ndarray) -> None:
        hand_size = float(np.linalg.norm(pts[MIDDLE_TIP] - pts[WRIST]))
        raw = hand_size_to_distance(
            hand_size, self.config.hand_size_far, self.config.hand_size_near
        )
        if not math.isfinite(raw):
            logger.debug(f"Discarding non-finite distance for hand size {hand_size}")
            return
        self.raw_distance = raw
        self.distance = clamp(self.distance + (raw - self.distance) * self.alpha, 0.0, 1.0)

    def _update_rotation(self, pts: np.ndarray) -> None:
        dx, dy = pts[MIDDLE_MCP] - pts[WRIST]
        if dx == 0.0 and dy == 0.0:
            # wrist and middle base coincide: no direction to measure
            return
        raw = normalize_angle_deg(math.degrees(math.atan2(dy, dx)))
        self.raw_rotation = raw

        delta = wrap_delta_deg(raw - self.rotation)
        self.rotation = normalize_angle_deg(self.rotation + delta * self.alpha)

    def reset(self) -> None:
        """Return to the initial state."""
        self.distance = clamp(self.config.initial_distance, 0.0, 1.0)
        self.rotation = normalize_angle_deg(self.config.initial_rotation)
        self.detected = False
        self.raw_distance = None
        self.raw_rotation = None
