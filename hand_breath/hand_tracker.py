"""
Hand Tracker - camera capture plus MediaPipe Hands.

Wraps the external detection capability: it owns the capture device and the
detector and hands back the first hand's 21 normalized landmarks per frame, or
None. Nothing else in the package imports mediapipe.
"""

import logging
from typing import Optional

import cv2
import numpy as np

from .frame_gate import CameraUnavailableError, DetectorGate, FrameGate
from .landmarks import HAND_CONNECTIONS, LandmarkFrame, extract_first_hand

logger = logging.getLogger(__name__)

SKELETON_COLOR = (0x40, 0x9F, 0xFF)   # BGR amber
JOINT_COLOR = (0xE1, 0xF5, 0xFF)      # BGR warm white


class HandTracker:
    """
    Single-hand tracker on a local camera.

    ``read`` blocks on the camera and on inference, so the app runs it in an
    executor; everything it returns is plain data.
    """

    def __init__(
        self,
        camera_index: int = 0,
        width: int = 1280,
        height: int = 720,
        invalid_timeout_ms: int = 300,
    ):
        self.camera_index = camera_index
        self.width = width
        self.height = height

        self.frame_gate = FrameGate(invalid_timeout_ms=invalid_timeout_ms)
        self.detector_gate = DetectorGate()

        self.cap: Optional[cv2.VideoCapture] = None
        self.hands = None

        # Last processed frame, kept for the preview window
        self.last_frame: Optional[np.ndarray] = None
        self.last_landmarks: Optional[LandmarkFrame] = None

    @property
    def is_open(self) -> bool:
        return self.cap is not None and self.hands is not None

    def open(self) -> None:
        """
        Open the camera and create the detector.

        Raises:
            CameraUnavailableError: camera missing, busy or permission denied,
                or the hand detector could not be created
        """
        logger.info(f"Opening camera index: {self.camera_index}")
        self.cap = cv2.VideoCapture(self.camera_index)
        if not self.cap.isOpened():
            self._release_camera()
            raise CameraUnavailableError(f"Failed to open camera {self.camera_index}")

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)

        ok, frame = self.cap.read()
        if not ok or frame is None:
            self._release_camera()
            raise CameraUnavailableError(f"Could not read from camera {self.camera_index}")

        try:
            import mediapipe as mp

            self.hands = mp.solutions.hands.Hands(
                static_image_mode=False,
                max_num_hands=1,
                model_complexity=0,
                min_detection_confidence=0.5,
                min_tracking_confidence=0.5,
            )
        except Exception as e:
            self._release_camera()
            raise CameraUnavailableError(f"Failed to create hand detector: {e}") from e

        width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        fps = self.cap.get(cv2.CAP_PROP_FPS)
        logger.info(f"Camera opened: {width}x{height} @ {fps:.1f} fps")

    def read(self) -> Optional[LandmarkFrame]:
        """
        Grab one frame and run detection on it.

        Returns:
            The first hand's landmarks, or None (no hand, bad frame or
            detector failure)
        """
        if not self.is_open:
            return None

        ok, frame = self.cap.read()
        check = self.frame_gate.validate(ok, frame)
        if not check.valid:
            logger.debug(f"Frame invalid: {check.reason}")
            self.last_landmarks = None
            return None

        rgb = cv2.cvtColor(check.frame, cv2.COLOR_BGR2RGB)
        success, results = self.detector_gate.process(self.hands, rgb)
        landmarks = extract_first_hand(results) if success else None

        self.last_frame = check.frame
        self.last_landmarks = landmarks
        return landmarks

    def draw_preview(self, show_skeleton: bool = False) -> Optional[np.ndarray]:
        """
        Render the last camera frame, mirrored, optionally with the hand
        skeleton on top.
        """
        if self.last_frame is None:
            return None
        frame = self.last_frame.copy()
        h, w = frame.shape[:2]

        landmarks = self.last_landmarks
        if show_skeleton and landmarks:
            pts = [(int(p.x * w), int(p.y * h)) for p in landmarks]
            for start, end in HAND_CONNECTIONS:
                cv2.line(frame, pts[start], pts[end], SKELETON_COLOR, 3)
            for pt in pts:
                cv2.circle(frame, pt, 5, JOINT_COLOR, -1)

        return cv2.flip(frame, 1)

    def _release_camera(self) -> None:
        if self.cap is not None:
            self.cap.release()
            self.cap = None

    def close(self) -> None:
        """Release the camera and the detector."""
        self._release_camera()
        if self.hands is not None:
            self.hands.close()
            self.hands = None
        logger.info("Hand tracker closed")
