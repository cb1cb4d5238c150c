"""
Hand Breath application - ties detection, control and rendering together.

Two cooperative loops share one asyncio event loop:
- detection: camera read + inference in an executor, then the pipeline
  writes the shared control slot
- render: reads the slot, advances the animation, draws

Both only touch the slot on the event-loop thread, so no lock is needed.
"""

import asyncio
import logging
import time
from typing import Optional

from .animation import ActualTransform, AnimationDriver
from .config import BreathConfig, default_config
from .events import EventChannel
from .frame_gate import CameraUnavailableError
from .message import HandUpdate
from .pipeline import DetectionPipeline, make_slot
from .presenter import NO_KEY, Presenter

logger = logging.getLogger(__name__)

KEY_ESC = 27


class HandBreathApp:
    """
    Main application.

    The tracker is optional: without one, or when the camera cannot be
    opened, the scene simply keeps breathing on its own.
    """

    def __init__(
        self,
        presenter: Presenter,
        tracker=None,
        config: BreathConfig = default_config,
        show_skeleton: bool = False,
        show_preview: bool = False,
    ):
        """
        Initialize the app.

        Args:
            presenter: Presentation adapter that draws the scene
            tracker: Hand tracker with open()/read()/close(), or None
            config: Tunables
            show_skeleton: Draw the hand skeleton on the camera preview
            show_preview: Show the camera preview window
        """
        self.presenter = presenter
        self.tracker = tracker
        self.config = config
        self.show_skeleton = show_skeleton
        self.show_preview = show_preview

        # Event channels
        self.hand_updates: EventChannel[HandUpdate] = EventChannel("hand_updates")
        self.camera_ready: EventChannel[bool] = EventChannel("camera_ready")
        self.camera_errors: EventChannel[Exception] = EventChannel("camera_errors")

        # Shared slot and components
        self.slot = make_slot(config)
        self.pipeline = DetectionPipeline(self.slot, config, self.hand_updates)
        self.driver = AnimationDriver(config)

        self.hand_updates.subscribe(self._on_hand_update)

        # State
        self.camera_available = False
        self._running = False
        self._stopped = asyncio.Event()
        self._last_render: Optional[float] = None
        self._tasks = []
        self._stop_task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Open the camera if there is one. Never raises on camera failure."""
        logger.info("Starting Hand Breath...")
        self._running = True
        self._stopped.clear()
        self.presenter.show_status("Initializing camera...")

        if self.tracker is None:
            logger.info("No hand tracker configured, running in idle mode")
            self.presenter.show_status("Idle mode")
            return

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.tracker.open)
        except CameraUnavailableError as e:
            logger.warning(f"Camera unavailable, staying in idle mode: {e}")
            self._enter_idle_mode(e)
            return
        except Exception as e:
            logger.error(f"Hand tracker failed to start, staying in idle mode: {e}")
            # release whatever the tracker managed to acquire
            try:
                await loop.run_in_executor(None, self.tracker.close)
            except Exception as close_error:
                logger.warning(f"Error closing hand tracker: {close_error}")
            self._enter_idle_mode(e)
            return

        self.camera_available = True
        self.presenter.show_status("Show your hand")
        self.camera_ready.emit(True)

    def _enter_idle_mode(self, error: Exception) -> None:
        self.presenter.show_status("Camera access denied or unavailable", ok=False)
        self.camera_errors.emit(error)

    async def run(self) -> None:
        """Run render and detection loops until stop() is called."""
        if not self._running:
            await self.start()

        self._tasks = [asyncio.create_task(self._render_loop())]
        if self.camera_available:
            self._tasks.append(asyncio.create_task(self._detection_loop()))

        await self._stopped.wait()

    async def stop(self, timeout: float = 2.0) -> None:
        """
        Halt both loops, then release the camera and the window.

        The detection loop is allowed to finish its in-flight camera read
        before the device is released.
        """
        if not self._running:
            return
        logger.info("Stopping Hand Breath...")
        self._running = False

        tasks, self._tasks = self._tasks, []
        if tasks:
            _, pending = await asyncio.wait(tasks, timeout=timeout)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        if self.tracker is not None and self.camera_available:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self.tracker.close)
            self.camera_available = False
        self.presenter.close()
        self._stopped.set()
        logger.info("Hand Breath stopped")

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def on_detection(self, landmarks) -> HandUpdate:
        """Detection callback: condition, blend and store into the slot."""
        return self.pipeline.process(landmarks)

    def _on_hand_update(self, update: HandUpdate) -> None:
        if self.camera_available:
            self.presenter.show_status("Hand Detected" if update.detected else "Show Your Hand")

    async def _detection_loop(self) -> None:
        loop = asyncio.get_running_loop()
        while self._running:
            try:
                landmarks = await loop.run_in_executor(None, self.tracker.read)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Error reading hand tracker: {e}")
                landmarks = None
            if not self._running:
                break
            self.on_detection(landmarks)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _tick_dt(self) -> Optional[float]:
        if not self.config.wall_clock:
            return None
        now = time.monotonic()
        last, self._last_render = self._last_render, now
        if last is None:
            return None
        # scale wall time so one reference frame equals one fixed step
        return (now - last) * self.config.reference_fps * self.config.time_step

    def render_tick(self) -> ActualTransform:
        """Advance the animation one frame and draw it."""
        slot = self.slot
        transform = self.driver.tick(slot.targets, slot.authority, self._tick_dt())
        self.presenter.apply(transform, self.driver.layers)

        if self.show_preview and self.camera_available:
            self.presenter.show_camera(self.tracker.draw_preview(self.show_skeleton))

        key = self.presenter.render()
        if key != NO_KEY:
            self._handle_key(key)
        return transform

    def _handle_key(self, key: int) -> None:
        if key in (KEY_ESC, ord("q")):
            logger.info("Quit requested")
            self._stop_task = asyncio.get_running_loop().create_task(self.stop())
        elif key in (ord("s"), ord("S")):
            self.show_skeleton = not self.show_skeleton
            logger.info(f"Skeleton: {'ON' if self.show_skeleton else 'OFF'}")
        elif key in (ord("v"), ord("V")):
            self.show_preview = not self.show_preview
            if not self.show_preview:
                self.presenter.show_camera(None)
            logger.info(f"Camera preview: {'ON' if self.show_preview else 'OFF'}")

    async def _render_loop(self) -> None:
        interval = 1.0 / self.config.render_fps
        while self._running:
            started = time.monotonic()
            try:
                self.render_tick()
            except Exception as e:
                logger.error(f"Error in render loop: {e}")
            elapsed = time.monotonic() - started
            await asyncio.sleep(max(0.0, interval - elapsed))
