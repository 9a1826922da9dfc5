"""
WebSocket fan-out of recognized text.
"""

import asyncio
from typing import Dict, Protocol

from fastapi import WebSocket, status
from starlette.websockets import WebSocketDisconnect
import structlog

from ocrcast.observability.metrics import get_metrics

logger = structlog.get_logger(__name__)


class MessageSink(Protocol):
    def send_message(self, text: str) -> None: ...


class WebSocketBroadcaster:
    """
    Sends each message to every currently connected subscriber.

    ``send_message`` only enqueues, so callers never wait on subscriber I/O.
    Each subscriber has its own bounded queue and sender task, which keeps
    messages in order per subscriber. A subscriber whose queue fills up is
    disconnected. Subscribers that connect later get nothing from before
    they connected.
    """

    def __init__(self, max_pending: int = 1000):
        self.max_pending = max_pending
        self._subscribers: Dict[WebSocket, asyncio.Queue] = {}
        self._senders: Dict[WebSocket, asyncio.Task] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def send_message(self, text: str) -> None:
        for websocket, queue in list(self._subscribers.items()):
            try:
                queue.put_nowait(text)
            except asyncio.QueueFull:
                logger.warning("subscriber_queue_full", max_pending=self.max_pending)
                self._drop(websocket)
                asyncio.create_task(self._close(websocket))
        logger.info("message_broadcast", subscribers=len(self._subscribers), length=len(text))

    async def serve(self, websocket: WebSocket):
        """Register a subscriber and hold it until it disconnects."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_pending)
        # Registered before the handshake completes so nothing sent after
        # the client sees the connection open is missed
        self._subscribers[websocket] = queue
        get_metrics().subscribers.set(len(self._subscribers))
        try:
            await websocket.accept()
            logger.info("subscriber_connected", subscribers=len(self._subscribers))
            if websocket in self._subscribers:
                self._senders[websocket] = asyncio.create_task(self._pump(websocket, queue))
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
        finally:
            self._drop(websocket)
            logger.info("subscriber_disconnected", subscribers=len(self._subscribers))

    def _drop(self, websocket: WebSocket):
        self._subscribers.pop(websocket, None)
        sender = self._senders.pop(websocket, None)
        if sender is not None and sender is not asyncio.current_task():
            sender.cancel()
        get_metrics().subscribers.set(len(self._subscribers))

    async def _close(self, websocket: WebSocket):
        try:
            await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
        except (RuntimeError, OSError) as e:
            logger.warning("subscriber_close_failed", error=str(e))

    async def _pump(self, websocket: WebSocket, queue: asyncio.Queue):
        while True:
            text = await queue.get()
            try:
                await websocket.send_text(text)
            except (WebSocketDisconnect, RuntimeError, OSError) as e:
                logger.warning("subscriber_send_failed", error=str(e))
                self._drop(websocket)
                return
