#!/usr/bin/env python3
"""
Hand Breath - Main Entry Point

A breathing particle ring whose zoom and rotation follow your hand in front of
the webcam. Without a hand the scene drifts on its own.

Keys (scene window):
    q / ESC   quit
    s         toggle hand skeleton on the camera preview
    v         toggle camera preview window

Usage:
    python -m hand_breath.main --camera 0
    python -m hand_breath.main --preview --skeleton --status-port 8765
    python -m hand_breath.main --headless --status-port 8765 --status-token SECRET
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import Optional

import uvicorn

from .app import HandBreathApp
from .config import BreathConfig
from .status_server import StatusServer

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_app(args: argparse.Namespace, config: BreathConfig) -> HandBreathApp:
    """Wire tracker and presenter according to the CLI flags."""
    tracker = None
    if not args.no_camera:
        from .hand_tracker import HandTracker
        tracker = HandTracker(
            camera_index=config.camera_index,
            invalid_timeout_ms=config.invalid_timeout_ms,
        )

    if args.headless:
        from .presenter import HeadlessPresenter
        presenter = HeadlessPresenter()
    else:
        from .window import OpenCVPresenter
        presenter = OpenCVPresenter(config)

    return HandBreathApp(
        presenter=presenter,
        tracker=tracker,
        config=config,
        show_skeleton=args.skeleton,
        show_preview=args.preview,
    )


def build_status_server(app: HandBreathApp, token: Optional[str]) -> StatusServer:
    """Create the status server and subscribe it to the app's hand updates."""
    server = StatusServer(
        token=token,
        health=lambda: {
            "authority": app.slot.authority.value,
            "frames": app.slot.frames,
            "camera": app.camera_available,
        },
    )
    app.hand_updates.subscribe(server.publish)
    return server


async def run_status_server(server: StatusServer, host: str, port: int) -> None:
    """Serve the status app with uvicorn on the current event loop."""
    config = uvicorn.Config(
        server.app,
        host=host,
        port=port,
        log_level="warning",
    )
    await uvicorn.Server(config).serve()


async def main_async(args: argparse.Namespace) -> None:
    """Async main entry point."""
    config = BreathConfig.from_env().with_overrides(
        camera_index=args.camera,
        render_fps=args.fps,
        seed=args.seed,
        wall_clock=True if args.wall_clock else None,
    )
    app = build_app(args, config)

    # Handle shutdown signals
    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.info("Shutdown signal received")
        asyncio.create_task(app.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    server_task = None
    if args.status_port:
        server = build_status_server(app, args.status_token)
        server_task = asyncio.create_task(
            run_status_server(server, args.status_host, args.status_port)
        )
        # uvicorn may consume SIGINT itself; take the app down with it
        server_task.add_done_callback(lambda _: loop.create_task(app.stop()))
        logger.info(f"Status server on ws://{args.status_host}:{args.status_port}/status")

    try:
        await app.start()
        await app.run()
    except Exception as e:
        logger.error(f"Application error: {e}")
    finally:
        await app.stop()
        if server_task:
            server_task.cancel()
            try:
                await server_task
            except asyncio.CancelledError:
                pass


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Hand Breath - hand-controlled particle ring",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--camera",
        type=int,
        default=None,
        help="Camera device index (default from config)",
    )
    parser.add_argument(
        "--no-camera",
        action="store_true",
        help="Run the idle animation only",
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=None,
        help="Render loop rate (Hz)",
    )
    parser.add_argument(
        "--wall-clock",
        action="store_true",
        help="Scale animation by elapsed time instead of per frame",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for particle placement",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Do not open a window",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show camera preview window",
    )
    parser.add_argument(
        "--skeleton",
        action="store_true",
        help="Draw the hand skeleton on the camera preview",
    )
    parser.add_argument(
        "--status-host",
        type=str,
        default="127.0.0.1",
        help="Status server bind address",
    )
    parser.add_argument(
        "--status-port",
        type=int,
        default=0,
        help="Status server port (0 disables it)",
    )
    parser.add_argument(
        "--status-token",
        type=str,
        default=None,
        help="Bearer token required by the status server",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        asyncio.run(main_async(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
