"""Outbound message channels for per-connection single-writer sending.

All frames for a single WebSocket connection are sent by exactly one writer
coroutine, so a presence broadcast and a relayed offer never race on the
same socket. Producers never wait: a full queue drops the frame.
"""

from __future__ import annotations

import asyncio
from typing import Any

from pairsignal.logger import logger
from .utils import is_websocket_closed


class OutboundChannel:
    """Per-connection outbound channel with a single writer task."""

    def __init__(
        self,
        websocket: Any,
        *,
        maxsize: int = 256,
        name: str | None = None,
    ) -> None:
        self.websocket = websocket
        self.queue: asyncio.Queue[str] = asyncio.Queue(maxsize=maxsize)
        self._writer_task: asyncio.Task | None = None
        self._closed = False
        self.name = name or "outbound"
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        if self._writer_task is None or self._writer_task.done():
            self._writer_task = asyncio.create_task(self._writer(), name=f"{self.name}-writer")

    def enqueue(self, frame: str) -> bool:
        """Queue an encoded frame for sending. Returns False if it was dropped."""
        if self._closed:
            return False
        try:
            self.queue.put_nowait(frame)
            return True
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(f"{self.name}: outbound queue full, dropped frame ({self.dropped} total)")
            return False

    async def drain(self) -> None:
        """Wait until every queued frame has been handed to the socket."""
        await self.queue.join()

    async def close(self) -> None:
        self._closed = True
        if self._writer_task is not None:
            self._writer_task.cancel()
            try:
                await self._writer_task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.debug(f"Error awaiting writer task close: {e}")
        # Drop anything still queued
        while not self.queue.empty():
            self.queue.get_nowait()
            self.queue.task_done()

    async def _writer(self) -> None:
        """Single writer that sends all frames on this connection."""
        while not self._closed:
            frame = await self.queue.get()
            try:
                if is_websocket_closed(self.websocket):
                    logger.debug(f"{self.name}: websocket closed, dropping outbound frame")
                else:
                    await self.websocket.send(frame)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # The reader side notices the broken socket and disconnects
                logger.error(f"{self.name}: outbound send failed: {e}")
            finally:
                self.queue.task_done()
