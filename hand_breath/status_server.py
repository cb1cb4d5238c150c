"""
Status Server - pushes hand status to UI clients over WebSocket.

Handles:
- FastAPI WebSocket endpoint at /status
- Optional Bearer token authentication
- Latest-value snapshot on connect, then one message per detection frame
- /health endpoint for monitoring
"""

import asyncio
import logging
from typing import Callable, Dict, Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect, status
from fastapi.middleware.cors import CORSMiddleware

from .message import HandUpdate

logger = logging.getLogger(__name__)


class StatusServer:
    """
    WebSocket broadcaster for HandUpdate events.

    ``publish`` must be called from the event loop serving the app; it never
    blocks. Each client gets a bounded queue and slow clients lose their
    oldest updates first.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        queue_size: int = 32,
        health: Optional[Callable[[], dict]] = None,
    ):
        """
        Initialize status server.

        Args:
            token: Bearer token required from clients (None disables auth)
            queue_size: Per-client backlog before old updates are dropped
            health: Extra fields merged into the /health response
        """
        self.token = token
        self.queue_size = queue_size
        self.health = health

        self._latest: Optional[HandUpdate] = None
        self._queues: Dict[str, asyncio.Queue] = {}
        self._client_counter = 0
        self._published = 0
        self._dropped = 0

        self.app = FastAPI(title="Hand Breath Status")
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )
        self._setup_routes()

    def _setup_routes(self):
        """Set up FastAPI routes."""

        @self.app.get("/health")
        async def health_check():
            body = {
                "status": "ok",
                "clients": len(self._queues),
                "published": self._published,
                "detected": self._latest.detected if self._latest else False,
            }
            if self.health:
                body.update(self.health())
            return body

        @self.app.websocket("/status")
        async def websocket_status(websocket: WebSocket):
            await self._handle_websocket(websocket)

    def _verify_token(self, auth_header: str) -> bool:
        """Verify Bearer token."""
        if self.token is None:
            return True
        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return False
        return parts[1] == self.token

    async def _handle_websocket(self, websocket: WebSocket) -> None:
        if not self._verify_token(websocket.headers.get("authorization", "")):
            logger.warning(f"Authentication failed from {websocket.client}")
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

        await websocket.accept()
        self._client_counter += 1
        client_id = f"client_{self._client_counter}"
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self._queues[client_id] = queue
        logger.info(f"Status client connected: {client_id}")

        sender = asyncio.create_task(self._send_updates(websocket, queue))
        try:
            await self._receive_messages(websocket, client_id)
        except WebSocketDisconnect:
            logger.info(f"Status client disconnected: {client_id}")
        except Exception as e:
            logger.error(f"Error serving status client {client_id}: {e}")
        finally:
            sender.cancel()
            await asyncio.gather(sender, return_exceptions=True)
            self._queues.pop(client_id, None)

    async def _send_updates(self, websocket: WebSocket, queue: asyncio.Queue) -> None:
        """Send the latest snapshot, then every queued update."""
        if self._latest is not None:
            await websocket.send_text(self._latest.to_json())
        while True:
            update = await queue.get()
            await websocket.send_text(update.to_json())

    async def _receive_messages(self, websocket: WebSocket, client_id: str) -> None:
        """Drain client messages until disconnect. Clients only listen."""
        while True:
            data = await websocket.receive_text()
            logger.debug(f"Ignoring message from {client_id}: {data[:64]}")

    def publish(self, update: HandUpdate) -> None:
        """Queue an update for every connected client."""
        self._latest = update
        self._published += 1
        for queue in self._queues.values():
            if queue.full():
                queue.get_nowait()
                self._dropped += 1
            queue.put_nowait(update)

    @property
    def latest(self) -> Optional[HandUpdate]:
        return self._latest

    def get_stats(self) -> dict:
        return {
            "clients": len(self._queues),
            "published": self._published,
            "dropped": self._dropped,
        }
