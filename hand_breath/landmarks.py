"""
Landmark frame helpers.

MediaPipe Hands reports 21 normalized points per hand. This module holds the
index constants, converts the detector output into a plain ``(21, 2)`` array and
rejects frames that cannot be trusted.
"""

import logging
from typing import Any, Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)

# ============================================================================
# MediaPipe Landmark Indices
# ============================================================================

NUM_LANDMARKS = 21

WRIST = 0
THUMB_CMC, THUMB_MCP, THUMB_IP, THUMB_TIP = 1, 2, 3, 4
INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP = 5, 6, 7, 8
MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP = 9, 10, 11, 12
RING_MCP, RING_PIP, RING_DIP, RING_TIP = 13, 14, 15, 16
PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP = 17, 18, 19, 20

# Skeleton connections for the preview overlay
HAND_CONNECTIONS = (
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (0, 9), (9, 10), (10, 11), (11, 12),
    (0, 13), (13, 14), (14, 15), (15, 16),
    (0, 17), (17, 18), (18, 19), (19, 20),
    (5, 9), (9, 13), (13, 17),
)

# A landmark frame: 21 points, each either an (x, y[, z]) sequence or an
# object with .x/.y attributes (MediaPipe NormalizedLandmark).
LandmarkFrame = Sequence[Any]


def _xy(point: Any) -> tuple:
    if hasattr(point, "x") and hasattr(point, "y"):
        return point.x, point.y
    return point[0], point[1]


def to_landmark_array(landmarks: Optional[LandmarkFrame]) -> Optional[np.ndarray]:
    """
    Convert a landmark frame to a ``(21, 2)`` float array.

    Returns None for absent or malformed frames: wrong point count,
    non-numeric, non-finite or outside the normalized [0, 1] square.
    """
    if landmarks is None:
        return None

    try:
        if len(landmarks) != NUM_LANDMARKS:
            logger.debug(f"Malformed frame: {len(landmarks)} landmarks")
            return None
        pts = np.array([_xy(p) for p in landmarks], dtype=np.float64)
    except (TypeError, ValueError, IndexError) as e:
        logger.debug(f"Malformed frame: {e}")
        return None

    if pts.shape != (NUM_LANDMARKS, 2):
        return None
    if not np.all(np.isfinite(pts)):
        logger.debug("Malformed frame: non-finite coordinates")
        return None
    if np.any(pts < 0.0) or np.any(pts > 1.0):
        logger.debug("Malformed frame: coordinates outside [0, 1]")
        return None
    return pts


def extract_first_hand(results) -> Optional[LandmarkFrame]:
    """
    Pull the first hand's landmark list out of MediaPipe Hands results.

    Returns None when no hand was found.
    """
    if results is None:
        return None
    hands = getattr(results, "multi_hand_landmarks", None)
    if not hands:
        return None
    return list(hands[0].landmark)
