"""WebSocket-backed connection handle.

Each handle owns a bounded send queue and a sender task, so ``deliver``
never awaits network I/O: the comment-post path only enqueues and the
sender task writes frames in order.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from core.config import settings
from core.logging_config import get_logger
from domain.common.exceptions import ConnectionClosedError


logger = get_logger(__name__)

OVERFLOW_POLICIES = {"drop_oldest", "drop_new", "disconnect"}


class WebSocketConnectionHandle:
    """Push text frames to one live WebSocket."""

    def __init__(
        self,
        client_id: str,
        ws: WebSocket,
        *,
        queue_max: Optional[int] = None,
        overflow_policy: Optional[str] = None,
    ) -> None:
        self.client_id = client_id
        self._ws = ws
        maxsize = queue_max if queue_max is not None else settings.realtime.send_queue_max
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max(1, int(maxsize)))
        policy = (overflow_policy or settings.realtime.overflow_policy or "drop_oldest").lower()
        if policy not in OVERFLOW_POLICIES:
            logger.warning("ws_send_queue_policy_invalid", policy=policy, fallback="drop_oldest")
            policy = "drop_oldest"
        self._policy = policy
        self._closed = False
        self._sender: Optional[asyncio.Task] = None
        self._close_task: Optional[asyncio.Task] = None
        self._socket_closing = False

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        if self._sender is None:
            self._sender = asyncio.create_task(self._sender_loop())

    def deliver(self, payload: str) -> None:
        if self._closed:
            raise ConnectionClosedError(self.client_id)
        try:
            self._queue.put_nowait(payload)
        except asyncio.QueueFull:
            self._on_overflow(payload)

    def _on_overflow(self, payload: str) -> None:
        if self._policy == "drop_new":
            logger.warning("ws_send_queue_drop_new", client_id=self.client_id)
            return
        if self._policy == "disconnect":
            logger.warning("ws_send_queue_disconnect", client_id=self.client_id)
            self._closed = True
            self._socket_closing = True
            # 1013: try again later
            self._close_task = asyncio.create_task(self._close_socket(code=1013))
            return
        # drop_oldest
        try:
            self._queue.get_nowait()
            self._queue.task_done()
        except asyncio.QueueEmpty:
            pass
        try:
            self._queue.put_nowait(payload)
        except asyncio.QueueFull:
            logger.warning("ws_send_queue_drop_after_trim", client_id=self.client_id)

    async def flush(self) -> None:
        """Wait until every queued payload has been handed to the socket."""
        await self._queue.join()

    async def close(self, code: int = 1000) -> None:
        """Stop the sender and close the socket unless it is already gone."""
        self._closed = True
        task, self._sender = self._sender, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        # release anyone blocked in flush()
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
        if not self._socket_closing and not self._socket_gone():
            await self._close_socket(code=code)

    def _socket_gone(self) -> bool:
        states = (getattr(self._ws, "client_state", None), getattr(self._ws, "application_state", None))
        return WebSocketState.DISCONNECTED in states

    async def _close_socket(self, code: int) -> None:
        self._socket_closing = True
        try:
            await self._ws.close(code=code)
        except Exception as exc:
            logger.debug("ws_close_failed", client_id=self.client_id, error=str(exc))

    async def _sender_loop(self) -> None:
        try:
            while True:
                payload = await self._queue.get()
                try:
                    await self._ws.send_text(payload)
                except Exception as exc:
                    logger.warning("ws_send_failed", client_id=self.client_id, error=str(exc))
                    self._closed = True
                finally:
                    self._queue.task_done()
                if self._closed:
                    return
        except asyncio.CancelledError:  # graceful exit
            return
