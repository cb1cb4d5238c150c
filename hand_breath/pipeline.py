"""
Detection pipeline and the shared control slot.

The detection handler writes the slot; the render tick reads it. Both run on
the same asyncio event loop, which is the only guard the slot needs.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .config import BreathConfig, default_config
from .events import EventChannel
from .landmarks import LandmarkFrame
from .message import HandUpdate, create_hand_update
from .mode_blender import AuthorityState, ControlModeBlender, TargetTransform
from .signal_conditioner import ControlSignal, SignalConditioner

logger = logging.getLogger(__name__)


@dataclass
class ControlSlot:
    """Latest blended control state, handed from detection to rendering."""
    signal: ControlSignal
    targets: TargetTransform
    authority: AuthorityState = AuthorityState.AUTONOMOUS
    detected: bool = False
    frames: int = 0


def make_slot(config: BreathConfig = default_config) -> ControlSlot:
    """Create a slot holding the idle defaults."""
    return ControlSlot(
        signal=ControlSignal(config.initial_distance, config.initial_rotation),
        targets=TargetTransform(config.idle_camera_distance, config.idle_rotation),
    )


class DetectionPipeline:
    """
    Runs SignalConditioner then ControlModeBlender for each detection result
    and stores the outcome in the shared slot.
    """

    def __init__(
        self,
        slot: ControlSlot,
        config: BreathConfig = default_config,
        hand_updates: Optional[EventChannel[HandUpdate]] = None,
    ):
        self.slot = slot
        self.config = config
        self.conditioner = SignalConditioner(config)
        self.blender = ControlModeBlender(config)
        self.hand_updates = hand_updates if hand_updates is not None else EventChannel("hand_updates")

    def process(self, landmarks: Optional[LandmarkFrame]) -> HandUpdate:
        """
        Handle one detection callback.

        Args:
            landmarks: First hand's landmarks, or None when nothing was found

        Returns:
            The HandUpdate emitted for this frame
        """
        signal = self.conditioner.condition(landmarks)
        detected = self.conditioner.detected
        targets, authority = self.blender.update(signal, detected)

        if authority is not self.slot.authority:
            logger.info(f"Authority -> {authority.value}")

        slot = self.slot
        slot.signal = signal
        slot.targets = targets
        slot.authority = authority
        slot.detected = detected
        slot.frames += 1

        every = self.config.log_every_n_frames
        if detected and every > 0 and slot.frames % every == 0:
            logger.debug(
                f"Hand state: distance={signal.distance:.2f}, rotation={signal.rotation:.1f} deg"
            )

        update = create_hand_update(detected, signal.distance, signal.rotation)
        self.hand_updates.emit(update)
        return update
