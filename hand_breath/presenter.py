"""
Presentation adapters.

The app talks to the renderer only through the ``Presenter`` protocol:
apply a transform, render, react to resizes. The OpenCV window lives in
``window.py``; the headless presenter here needs no display.
"""

import logging
from typing import Optional, Protocol

import numpy as np

from .animation import ActualTransform, LayerTransforms

logger = logging.getLogger(__name__)

NO_KEY = -1


class Presenter(Protocol):
    def apply(self, transform: ActualTransform, layers: LayerTransforms) -> None:
        ...

    def render(self) -> int:
        """Draw a frame; return the key pressed since the last frame or -1."""
        ...

    def resize(self, width: int, height: int) -> None:
        ...

    def show_status(self, text: str, ok: bool = True) -> None:
        ...

    def show_camera(self, frame: Optional[np.ndarray]) -> None:
        ...

    def close(self) -> None:
        ...


class HeadlessPresenter:
    """Keeps the last transform without drawing anything."""

    def __init__(self):
        self.transform: Optional[ActualTransform] = None
        self.layers: Optional[LayerTransforms] = None
        self.status = ""
        self.status_ok = True
        self.frames = 0
        self.size = (0, 0)
        self.closed = False

    def apply(self, transform: ActualTransform, layers: LayerTransforms) -> None:
        self.transform = transform
        self.layers = layers

    def render(self) -> int:
        self.frames += 1
        return NO_KEY

    def resize(self, width: int, height: int) -> None:
        self.size = (width, height)

    def show_status(self, text: str, ok: bool = True) -> None:
        if text != self.status:
            logger.info(f"Status: {text}")
        self.status = text
        self.status_ok = ok

    def show_camera(self, frame: Optional[np.ndarray]) -> None:
        pass

    def close(self) -> None:
        self.closed = True
        logger.debug(f"Headless presenter closed after {self.frames} frames")
