"""
Central configuration for Hand Breath.

Every tunable lives on one frozen ``BreathConfig`` that is injected into all
components. Defaults reproduce the reference motion exactly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class LayerConfig:
    """One particle layer of the ring structure."""
    count: int
    color: Tuple[int, int, int]  # RGB
    size: float
    opacity: float
    radius: float
    flatten: float = 0.5


def _default_layers() -> Dict[str, LayerConfig]:
    return {
        "outer": LayerConfig(count=5000, color=(0x1A, 0x1F, 0x3A), size=0.03, opacity=0.6, radius=4.0),
        "middle": LayerConfig(count=3000, color=(0xFF, 0x9F, 0x40), size=0.05, opacity=0.9, radius=2.5, flatten=0.3),
        "inner": LayerConfig(count=2000, color=(0xFF, 0xF5, 0xE1), size=0.08, opacity=1.0, radius=1.5),
    }


@dataclass(frozen=True)
class BreathConfig:
    """
    All tunables of the signal pipeline, the animation and the runtime.
    """
    # ---- signal conditioning -------------------------------------------
    smoothing: float = 0.3
    hand_size_far: float = 0.15     # raw wrist->middle-tip length mapped to distance 1
    hand_size_near: float = 0.35    # ... mapped to distance 0
    initial_distance: float = 0.5
    initial_rotation: float = 0.0

    # ---- target mapping ------------------------------------------------
    min_camera_distance: float = 3.0
    max_camera_distance: float = 15.0
    idle_camera_distance: float = 10.0
    idle_rotation: float = 0.0

    # ---- animation -----------------------------------------------------
    time_step: float = 0.01
    easing: float = 0.08
    breath_frequency: float = 2.0
    breath_amplitude: float = 0.05
    idle_spin: float = 0.002
    tilt_amplitude: float = 0.1
    tilt_frequency: float = 0.5
    orbit_x_amplitude: float = 1.0
    orbit_x_frequency: float = 0.3
    orbit_y_center: float = 2.0
    orbit_y_amplitude: float = 0.5
    orbit_y_frequency: float = 0.2

    # ---- decorative layers ---------------------------------------------
    outer_spin: float = 0.0003
    middle_spin: float = 0.001
    inner_spin: float = 0.002
    pulse_frequency: float = 3.0
    pulse_amplitude: float = 0.05
    glow_frequency: float = 4.0
    glow_amplitude: float = 0.1
    layers: Mapping[str, LayerConfig] = field(default_factory=_default_layers, hash=False)

    # ---- scene ---------------------------------------------------------
    fov_deg: float = 60.0
    near_plane: float = 0.1
    far_plane: float = 1000.0
    fog_density: float = 0.01
    background: Tuple[int, int, int] = (0x0A, 0x0E, 0x1A)
    width: int = 1280
    height: int = 720
    seed: Optional[int] = None

    # ---- runtime -------------------------------------------------------
    camera_index: int = 0
    render_fps: float = 60.0
    reference_fps: float = 60.0     # tick rate the per-tick constants were tuned at
    wall_clock: bool = False
    invalid_timeout_ms: int = 300
    log_every_n_frames: int = 100

    def __post_init__(self):
        # read-only view over a private copy
        object.__setattr__(self, "layers", MappingProxyType(dict(self.layers)))
        if not 0.0 < self.smoothing <= 1.0:
            raise ValueError(f"smoothing must be in (0, 1], got {self.smoothing}")
        if not 0.0 < self.easing <= 1.0:
            raise ValueError(f"easing must be in (0, 1], got {self.easing}")
        if self.hand_size_far == self.hand_size_near:
            raise ValueError("hand_size_far and hand_size_near must differ")
        if self.min_camera_distance >= self.max_camera_distance:
            raise ValueError(
                f"min_camera_distance ({self.min_camera_distance}) must be below "
                f"max_camera_distance ({self.max_camera_distance})"
            )
        if self.time_step <= 0:
            raise ValueError(f"time_step must be positive, got {self.time_step}")
        if self.render_fps <= 0:
            raise ValueError(f"render_fps must be positive, got {self.render_fps}")

    def with_overrides(self, **overrides) -> "BreathConfig":
        """Return a copy with the given fields replaced (None values ignored)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BreathConfig":
        """
        Build a config from ``HAND_BREATH_*`` environment variables.

        Only scalar fields can be overridden; e.g. ``HAND_BREATH_SMOOTHING=0.4``.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for f in fields(cls):
            raw = environ.get(f"HAND_BREATH_{f.name.upper()}")
            if raw is None:
                continue
            default = getattr(cls, f.name, None)
            if isinstance(default, bool):
                values[f.name] = raw.strip().lower() in ("1", "true", "yes", "on")
            elif isinstance(default, int):
                values[f.name] = int(raw)
            elif isinstance(default, float):
                values[f.name] = float(raw)
            elif f.name == "seed":
                values[f.name] = int(raw)
        return cls(**values)


default_config = BreathConfig()
