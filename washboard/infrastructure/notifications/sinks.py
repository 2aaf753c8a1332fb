from __future__ import annotations

import asyncio
from typing import Protocol

from loguru import logger


class SinkClosedError(Exception):
    """Raised when writing to a sink whose stream has gone away."""


class Sink(Protocol):
    def send(self, frame: str) -> None:
        """Queue a frame without blocking. Raises if the stream can no longer accept it."""
        raise NotImplementedError


class QueueSink:
    """
    Write handle onto one stream's asyncio queue.

    `send` may be called from any thread (sync endpoints run in the threadpool); it only
    schedules the frame onto the owning loop. A full buffer means the client stopped reading,
    so the sink closes itself and the next `send` fails, which gets it pruned from the hub.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, *, maxsize: int = 256) -> None:
        self._loop = loop
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def empty(self) -> bool:
        return self._queue.empty()

    def send(self, frame: str) -> None:
        if self._closed:
            raise SinkClosedError("Sink is closed")
        try:
            self._loop.call_soon_threadsafe(self.push, frame)
        except RuntimeError as e:
            # Event loop already shut down
            self._closed = True
            raise SinkClosedError(str(e)) from e

    def push(self, frame: str) -> None:
        """Enqueue directly; must run on the owning loop."""
        if self._closed:
            return
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull:
            logger.warning(f"Stream buffer full ({self._queue.maxsize} frames), closing sink")
            self._closed = True

    async def receive(self) -> str:
        return await self._queue.get()

    def close(self) -> None:
        self._closed = True
