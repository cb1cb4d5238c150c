"""
Control authority and target mapping.

Decides whether the live hand or the idle animation governs the scene and maps
the smoothed hand signal onto camera/rotation targets.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .config import BreathConfig, default_config
from .signal_conditioner import ControlSignal


class AuthorityState(str, Enum):
    """Which control source currently drives the transform."""
    HAND_DRIVEN = "HAND_DRIVEN"
    AUTONOMOUS = "AUTONOMOUS"


@dataclass(frozen=True)
class TargetTransform:
    """Desired camera distance and group yaw (radians) for this frame."""
    camera_distance: float
    rotation_y: float


class ControlModeBlender:
    """
    Stateless mapping from (signal, hand present) to targets and authority.

    There is no hysteresis: authority follows the current frame's hand
    presence directly.
    """

    def __init__(self, config: BreathConfig = default_config):
        self.min_distance = config.min_camera_distance
        self.max_distance = config.max_camera_distance
        self.idle_targets = TargetTransform(
            camera_distance=config.idle_camera_distance,
            rotation_y=config.idle_rotation,
        )

    def update(
        self, signal: ControlSignal, hand_present: bool
    ) -> Tuple[TargetTransform, AuthorityState]:
        """
        Compute targets for one detection frame.

        Args:
            signal: Smoothed hand signal
            hand_present: Whether this frame contained a usable hand

        Returns:
            Tuple of (targets, authority)
        """
        if not hand_present:
            return self.idle_targets, AuthorityState.AUTONOMOUS

        camera_distance = self.min_distance + signal.distance * (self.max_distance - self.min_distance)
        rotation_y = math.radians(signal.rotation)
        return TargetTransform(camera_distance, rotation_y), AuthorityState.HAND_DRIVEN
