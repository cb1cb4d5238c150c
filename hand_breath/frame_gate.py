"""
Frame Quality Gate - rejects unusable camera frames before detection.

A failed or corrupt read is treated exactly like a frame without a hand. A
long streak of bad frames is reported once so a dead camera shows up in the
logs without flooding them.
"""

import time
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class CameraUnavailableError(RuntimeError):
    """The capture device could not be opened or read."""


@dataclass
class FrameCheck:
    """Result of frame validation."""
    valid: bool
    reason: str
    frame: Optional[np.ndarray] = None


class FrameGate:
    """
    Validates the ``(ok, frame)`` pair returned by ``cv2.VideoCapture.read``.

    Rejects failed reads, empty frames and frames that are not (H, W, 3).
    """

    def __init__(self, invalid_timeout_ms: int = 300):
        self.invalid_timeout_ms = invalid_timeout_ms

        self._invalid_since: Optional[float] = None
        self._stall_reported = False
        self._last_shape: Optional[Tuple[int, ...]] = None
        self.valid_count = 0
        self.invalid_count = 0

    def validate(self, ok: bool, frame: Optional[np.ndarray]) -> FrameCheck:
        if not ok:
            return self._reject("read_failed")
        if frame is None:
            return self._reject("frame_none")
        if frame.size == 0:
            return self._reject("empty_frame")
        if frame.ndim != 3 or frame.shape[2] != 3:
            return self._reject("invalid_shape")

        if self._last_shape is not None and frame.shape != self._last_shape:
            logger.info(f"Frame size changed from {self._last_shape} to {frame.shape}")
        self._last_shape = frame.shape
        self.valid_count += 1
        if self._stall_reported:
            logger.info("Camera frames recovered")
        self._invalid_since = None
        self._stall_reported = False
        return FrameCheck(True, "ok", frame)

    def _reject(self, reason: str) -> FrameCheck:
        now = time.monotonic()
        self.invalid_count += 1
        if self._invalid_since is None:
            self._invalid_since = now
        elif not self._stall_reported and (now - self._invalid_since) * 1000 >= self.invalid_timeout_ms:
            self._stall_reported = True
            logger.warning(
                f"No usable camera frames for {(now - self._invalid_since) * 1000:.0f}ms ({reason})"
            )
        return FrameCheck(False, reason)

    @property
    def stalled(self) -> bool:
        """True once an invalid streak has outlasted the timeout."""
        return self._stall_reported

    def get_stats(self) -> dict:
        total = self.valid_count + self.invalid_count
        return {
            "total_frames": total,
            "valid_frames": self.valid_count,
            "invalid_frames": self.invalid_count,
            "valid_rate": self.valid_count / total if total > 0 else 0.0,
        }


class DetectorGate:
    """
    Wraps the hand detector so a processing exception becomes "no result".
    """

    def __init__(self, max_consecutive_failures: int = 5):
        self.max_consecutive_failures = max_consecutive_failures
        self.consecutive_failures = 0
        self.total_failures = 0

    def process(self, detector, rgb_frame: np.ndarray):
        """
        Run ``detector.process`` on a frame.

        Returns:
            Tuple of (success, results or None)
        """
        try:
            results = detector.process(rgb_frame)
        except Exception as e:
            self.consecutive_failures += 1
            self.total_failures += 1
            if self.consecutive_failures == self.max_consecutive_failures:
                logger.warning(f"Hand detector failing repeatedly: {e}")
            else:
                logger.debug(f"Hand detector error: {e}")
            return False, None
        self.consecutive_failures = 0
        return True, results

    @property
    def problematic(self) -> bool:
        return self.consecutive_failures >= self.max_consecutive_failures
