"""
WebSocket transport: one queued, fire-and-forget sender per client connection
"""

import asyncio
import json
import uuid
from typing import Any, Optional
from fastapi import WebSocket
from .constants import CLOSE_CODE_POLICY_VIOLATION
from .logger import get_logger, log_websocket_event

logger = get_logger()

# Queue item that stops the writer without sending a close frame
_STOP = None


class WebSocketConnection:
    """
    Wraps an accepted WebSocket with an identity and an outbound queue

    send() and close() never block: frames are queued and written by
    run_writer() in the connection's own task, in the order they were queued.
    """

    def __init__(self, websocket: WebSocket, connection_id: Optional[str] = None):
        self.connection_id = connection_id or uuid.uuid4().hex
        self.websocket = websocket
        self.ip_address = websocket.client.host if websocket.client else "unknown"
        self.close_requested = False
        self._outbox: asyncio.Queue = asyncio.Queue()
        self._stopped = False

    def send(self, event: str, data: Any = None):
        """Queue an outbound {"event", "data"} frame"""
        if self._stopped or self.close_requested:
            return
        self._outbox.put_nowait(("event", event, data))

    def close(self, code: int = CLOSE_CODE_POLICY_VIOLATION, reason: str = ""):
        """Flush frames queued so far, then close the socket from the server side"""
        if self.close_requested:
            return
        self.close_requested = True
        self._outbox.put_nowait(("close", code, reason))

    def stop(self):
        """Stop the writer once the client side is already gone"""
        if self._stopped:
            return
        self._stopped = True
        self._outbox.put_nowait(_STOP)

    async def run_writer(self):
        """Drain the outbound queue onto the socket until closed or stopped"""
        while True:
            item = await self._outbox.get()
            if item is _STOP:
                return

            kind, first, second = item
            try:
                if kind == "close":
                    await self.websocket.close(code=first, reason=second)
                    log_websocket_event("closed_by_server", self.connection_id, f"code={first} reason={second}")
                    return

                await self.websocket.send_text(json.dumps({"event": first, "data": second}))
            except Exception as e:
                logger.error(f"Writer for {self.connection_id} stopped: {e}")
                # Nothing drains the queue from here on
                self._stopped = True
                return
