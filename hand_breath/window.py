"""
OpenCV window presenter for the particle scene.
"""

import logging
from typing import Optional

import cv2
import numpy as np

from .animation import ActualTransform, LayerTransforms
from .config import BreathConfig, default_config
from .presenter import NO_KEY
from .scene import SceneRenderer

logger = logging.getLogger(__name__)

STATUS_COLOR = (0x40, 0x9F, 0xFF)   # BGR amber
ERROR_COLOR = (0, 0, 255)


class OpenCVPresenter:
    """
    Draws the particle scene into an OpenCV window.

    The window is resizable; a size change is picked up on the next frame and
    forwarded to the scene renderer.
    """

    def __init__(
        self,
        config: BreathConfig = default_config,
        window_name: str = "Hand Breath",
        camera_window_name: str = "Hand Breath - Camera",
    ):
        self.window_name = window_name
        self.camera_window_name = camera_window_name
        self.scene = SceneRenderer(config)
        self.font = cv2.FONT_HERSHEY_SIMPLEX

        self._transform = ActualTransform()
        self._layers = LayerTransforms()
        self._status = ""
        self._status_ok = True
        self._camera_shown = False

        cv2.namedWindow(self.window_name, cv2.WINDOW_NORMAL)
        cv2.resizeWindow(self.window_name, config.width, config.height)
        total = sum(layer.config.count for layer in self.scene.layers.values())
        logger.info(f"Scene ready: {total} particles in {len(self.scene.layers)} layers")

    def apply(self, transform: ActualTransform, layers: LayerTransforms) -> None:
        self._transform = transform
        self._layers = layers

    def _check_resize(self) -> None:
        try:
            _, _, w, h = cv2.getWindowImageRect(self.window_name)
        except cv2.error:
            return
        if w > 0 and h > 0 and (w, h) != (self.scene.width, self.scene.height):
            self.resize(w, h)

    def render(self) -> int:
        self._check_resize()
        image = self.scene.render(self._transform, self._layers)
        if self._status:
            color = STATUS_COLOR if self._status_ok else ERROR_COLOR
            cv2.putText(image, self._status, (20, 40), self.font, 0.8, color, 2)
        cv2.imshow(self.window_name, image)
        key = cv2.waitKey(1)
        return NO_KEY if key < 0 else key & 0xFF

    def resize(self, width: int, height: int) -> None:
        logger.debug(f"Resize to {width}x{height}")
        self.scene.resize(width, height)

    def show_status(self, text: str, ok: bool = True) -> None:
        self._status = text
        self._status_ok = ok

    def show_camera(self, frame: Optional[np.ndarray]) -> None:
        if frame is None:
            if self._camera_shown:
                cv2.destroyWindow(self.camera_window_name)
                self._camera_shown = False
            return
        cv2.imshow(self.camera_window_name, frame)
        self._camera_shown = True

    def close(self) -> None:
        cv2.destroyAllWindows()
