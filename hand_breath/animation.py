"""
Animation Driver - advances the scene transform once per render tick.

Hand-driven: camera distance and group yaw ease exponentially toward the
blender's targets.
Autonomous: a slow "breathing" idle motion (scale pulse, spin, tilt, camera
orbit) computed from an idle clock.

Decorative per-layer spins and pulses run every tick regardless of authority.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional

from .config import BreathConfig, default_config
from .mode_blender import AuthorityState, TargetTransform


def wrap_delta_rad(delta: float) -> float:
    """Shortest signed angular difference in radians, in [-pi, pi)."""
    return ((delta + math.pi) % (2.0 * math.pi)) - math.pi


@dataclass
class ActualTransform:
    """Transform applied to the scene this tick."""
    camera_distance: float = 10.0
    rotation_y: float = 0.0
    group_scale: float = 1.0
    group_rotation_x: float = 0.0
    camera_x: float = 0.0
    camera_y: float = 2.0


@dataclass(frozen=True)
class LayerTransforms:
    """Per-layer decorative state (rotations in radians)."""
    outer_rotation_z: float = 0.0
    middle_rotation_y: float = 0.0
    middle_opacity: float = 0.9
    inner_rotation_x: float = 0.0
    inner_size: float = 0.08


class AnimationDriver:
    """
    Owns the actual transform and the animation clocks.

    Two clocks advance by ``time_step`` per tick: ``elapsed`` always, for the
    decorative layers, and ``idle_elapsed`` only while autonomous, so the idle
    motion resumes where it left off after a hand-driven stretch.
    """

    def __init__(self, config: BreathConfig = default_config):
        self.config = config
        self.transform = ActualTransform(camera_distance=config.idle_camera_distance,
                                         rotation_y=config.idle_rotation,
                                         camera_y=config.orbit_y_center)
        self.authority = AuthorityState.AUTONOMOUS
        self.elapsed = 0.0
        self.idle_elapsed = 0.0
        self.ticks = 0

        middle = config.layers.get("middle")
        inner = config.layers.get("inner")
        self._middle_opacity = middle.opacity if middle else 1.0
        self._inner_size = inner.size if inner else 1.0
        self.layers = LayerTransforms(middle_opacity=self._middle_opacity,
                                      inner_size=self._inner_size)

    def _blend(self, steps: float) -> float:
        if steps == 1.0:
            return self.config.easing
        return 1.0 - (1.0 - self.config.easing) ** steps

    def tick(
        self,
        targets: TargetTransform,
        authority: AuthorityState,
        dt_nominal: Optional[float] = None,
    ) -> ActualTransform:
        """
        Advance one render tick.

        Args:
            targets: Latest targets from the blender
            authority: Latest authority from the blender
            dt_nominal: Clock advance for this tick. None uses the fixed
                ``time_step``; other values scale every per-tick increment.

        Returns:
            Snapshot of the actual transform after this tick
        """
        cfg = self.config
        dt = cfg.time_step if dt_nominal is None else max(0.0, dt_nominal)
        steps = dt / cfg.time_step
        blend = self._blend(steps)

        self.ticks += 1
        self.elapsed += dt
        self.authority = authority
        t = self.transform

        if authority is AuthorityState.HAND_DRIVEN:
            t.camera_distance += (targets.camera_distance - t.camera_distance) * blend
            t.rotation_y += wrap_delta_rad(targets.rotation_y - t.rotation_y) * blend
        else:
            self.idle_elapsed += dt
            s = self.idle_elapsed
            t.camera_distance += (targets.camera_distance - t.camera_distance) * blend
            t.group_scale = 1.0 + math.sin(s * cfg.breath_frequency) * cfg.breath_amplitude
            t.rotation_y += cfg.idle_spin * steps
            t.group_rotation_x = math.sin(s * cfg.tilt_frequency) * cfg.tilt_amplitude
            t.camera_x = math.sin(s * cfg.orbit_x_frequency) * cfg.orbit_x_amplitude
            t.camera_y = cfg.orbit_y_center + math.cos(s * cfg.orbit_y_frequency) * cfg.orbit_y_amplitude

        self._animate_layers(steps)
        return replace(t)

    def _animate_layers(self, steps: float) -> None:
        cfg = self.config
        layers = self.layers
        self.layers = LayerTransforms(
            outer_rotation_z=layers.outer_rotation_z + cfg.outer_spin * steps,
            middle_rotation_y=layers.middle_rotation_y + cfg.middle_spin * steps,
            middle_opacity=self._middle_opacity
            * (1.0 + math.sin(self.elapsed * cfg.pulse_frequency) * cfg.pulse_amplitude),
            inner_rotation_x=layers.inner_rotation_x + cfg.inner_spin * steps,
            inner_size=self._inner_size
            * (1.0 + math.sin(self.elapsed * cfg.glow_frequency) * cfg.glow_amplitude),
        )
