"""
Particle scene - geometry, camera math and point rasterisation in numpy.

Three ring-shaped point layers sit inside one group. The group takes the
animation transform, each layer adds its own decorative spin, and the camera
always aims at the origin. Points are splatted additively with exponential
fog, giving a BGR image ready for ``cv2.imshow``.
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from .animation import ActualTransform, LayerTransforms
from .config import BreathConfig, LayerConfig, default_config


@dataclass
class ParticleLayer:
    """Static point positions of one layer in group space."""
    name: str
    config: LayerConfig
    positions: np.ndarray  # (N, 3)


def build_layer(name: str, config: LayerConfig, rng: np.random.Generator) -> ParticleLayer:
    """
    Scatter ``config.count`` points on a flattened sphere shell.

    Radii vary between 0.8 and 1.2 of the layer radius; the vertical axis is
    squashed by ``config.flatten`` to read as a ring.
    """
    n = config.count
    theta = rng.random(n) * 2.0 * math.pi
    phi = np.arccos(2.0 * rng.random(n) - 1.0)
    radius = config.radius * (0.8 + rng.random(n) * 0.4)

    positions = np.empty((n, 3), dtype=np.float64)
    positions[:, 0] = radius * np.sin(phi) * np.cos(theta)
    positions[:, 1] = radius * np.sin(phi) * np.sin(theta) * config.flatten
    positions[:, 2] = radius * np.cos(phi)
    return ParticleLayer(name, config, positions)


# ============================================================================
# Camera math
# ============================================================================

def rotation_x(a: float) -> np.ndarray:
    c, s = math.cos(a), math.sin(a)
    return np.array([[1, 0, 0], [0, c, -s], [0, s, c]], dtype=np.float64)


def rotation_y(a: float) -> np.ndarray:
    c, s = math.cos(a), math.sin(a)
    return np.array([[c, 0, s], [0, 1, 0], [-s, 0, c]], dtype=np.float64)


def rotation_z(a: float) -> np.ndarray:
    c, s = math.cos(a), math.sin(a)
    return np.array([[c, -s, 0], [s, c, 0], [0, 0, 1]], dtype=np.float64)


def look_at(eye: np.ndarray, target: Optional[np.ndarray] = None) -> np.ndarray:
    """
    World-to-camera rotation for a camera at ``eye`` aiming at ``target``.

    Rows are the camera's right, up and forward axes, so ``R @ (p - eye)``
    gives coordinates with positive z in front of the camera.
    """
    target = np.zeros(3) if target is None else target
    forward = target - eye
    norm = np.linalg.norm(forward)
    if norm < 1e-9:
        return np.eye(3)
    forward = forward / norm

    up = np.array([0.0, 1.0, 0.0])
    right = np.cross(forward, up)
    if np.linalg.norm(right) < 1e-9:
        # looking straight up or down
        right = np.array([1.0, 0.0, 0.0])
    right = right / np.linalg.norm(right)
    true_up = np.cross(right, forward)
    return np.vstack([right, true_up, forward])


def project(
    points: np.ndarray,
    eye: np.ndarray,
    fov_deg: float,
    width: int,
    height: int,
    near: float = 0.1,
    far: float = 1000.0,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Perspective-project world points.

    Returns:
        Tuple of (pixel coords (N, 2), depth (N,), visible mask (N,))
    """
    cam = (points - eye) @ look_at(eye).T
    depth = cam[:, 2]
    focal = (height / 2.0) / math.tan(math.radians(fov_deg) / 2.0)

    safe = np.where(depth > near, depth, 1.0)
    u = width / 2.0 + focal * cam[:, 0] / safe
    v = height / 2.0 - focal * cam[:, 1] / safe

    visible = (depth > near) & (depth < far) & (u >= 0) & (u < width) & (v >= 0) & (v < height)
    return np.stack([u, v], axis=1), depth, visible


# ============================================================================
# Renderer
# ============================================================================

class SceneRenderer:
    """Builds the layers once and rasterises them per frame."""

    def __init__(self, config: BreathConfig = default_config, rng: Optional[np.random.Generator] = None):
        self.config = config
        rng = rng if rng is not None else np.random.default_rng(config.seed)
        self.layers: Dict[str, ParticleLayer] = {
            name: build_layer(name, layer_cfg, rng) for name, layer_cfg in config.layers.items()
        }
        self.width = config.width
        self.height = config.height
        self._background = np.array(config.background, dtype=np.float32)

    def resize(self, width: int, height: int) -> None:
        self.width = max(1, int(width))
        self.height = max(1, int(height))

    def _layer_state(self, name: str, layers: LayerTransforms) -> Tuple[np.ndarray, float, float]:
        cfg = self.config.layers[name]
        if name == "outer":
            return rotation_z(layers.outer_rotation_z), cfg.opacity, cfg.size
        if name == "middle":
            return rotation_y(layers.middle_rotation_y), layers.middle_opacity, cfg.size
        if name == "inner":
            return rotation_x(layers.inner_rotation_x), cfg.opacity, layers.inner_size
        return np.eye(3), cfg.opacity, cfg.size

    def render(self, transform: ActualTransform, layers: LayerTransforms) -> np.ndarray:
        """Rasterise the scene into a (H, W, 3) uint8 BGR image."""
        cfg = self.config
        h, w = self.height, self.width
        accum = np.zeros((h, w, 3), dtype=np.float32)

        group = (rotation_x(transform.group_rotation_x) @ rotation_y(transform.rotation_y)) * transform.group_scale
        eye = np.array([transform.camera_x, transform.camera_y, transform.camera_distance])
        half_h = h / 2.0

        for name, layer in self.layers.items():
            local, opacity, size = self._layer_state(name, layers)
            world = layer.positions @ (group @ local).T

            xy, depth, visible = project(world, eye, cfg.fov_deg, w, h, cfg.near_plane, cfg.far_plane)
            if not np.any(visible):
                continue
            xy = xy[visible].astype(np.int64)
            depth = depth[visible]

            # three.js-style size attenuation, then fog
            pixels = size * half_h / depth
            weight = opacity * np.clip(pixels * pixels, 0.25, 4.0) * np.exp(-(cfg.fog_density * depth) ** 2)

            color = np.array(layer.config.color, dtype=np.float32)
            np.add.at(accum, (xy[:, 1], xy[:, 0]), weight[:, None].astype(np.float32) * color)

        image = np.clip(accum + self._background, 0, 255).astype(np.uint8)
        return image[:, :, ::-1].copy()  # RGB -> BGR
