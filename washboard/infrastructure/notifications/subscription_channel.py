"""
Subscription Channel

Server side of one long-lived SSE connection: connected envelope, hub registration,
heartbeat, and guaranteed teardown on every exit path.
"""

from __future__ import annotations

import asyncio
import secrets
import string
import time
from collections.abc import AsyncIterator, Callable
from contextlib import suppress

from loguru import logger
from starlette.concurrency import run_in_threadpool

from washboard.infrastructure.notifications.notification_hub import NotificationHub
from washboard.infrastructure.notifications.sinks import QueueSink
from washboard.infrastructure.notifications.sse_codec import connected_frame, heartbeat_frame

_BASE36 = string.digits + string.ascii_lowercase


def new_client_id(prefix: str = "client") -> str:
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"


class SubscriptionChannel:
    """
    One client's event stream.

    The connected envelope is queued before the sink is registered, so it always precedes any
    add/delete envelope. Nothing published before registration is replayed: clients are
    expected to re-fetch the reservation list whenever they (re)connect.
    """

    def __init__(
        self,
        hub: NotificationHub,
        *,
        heartbeat_interval: float = 30.0,
        retry_ms: int | None = 3000,
        buffer_size: int = 256,
        client_id: str | None = None,
        on_close: Callable[[str], None] | None = None,
    ) -> None:
        self.hub = hub
        self.client_id = client_id or new_client_id()
        self._heartbeat_interval = heartbeat_interval
        self._retry_ms = retry_ms
        self._buffer_size = buffer_size
        self._on_close = on_close

    async def stream(self) -> AsyncIterator[str]:
        sink = QueueSink(asyncio.get_running_loop(), maxsize=self._buffer_size)
        sink.push(connected_frame(self.client_id, retry_ms=self._retry_ms))
        subscription_id = self.hub.subscribe(sink)
        heartbeat = asyncio.create_task(self._beat(sink))

        try:
            while True:
                frame = await sink.receive()
                yield frame
                if sink.closed and sink.empty():
                    logger.info(f"Stream {self.client_id} overflowed, ending it")
                    break
        except asyncio.CancelledError:
            logger.info(f"Stream {self.client_id} cancelled by transport")
            raise
        finally:
            heartbeat.cancel()
            with suppress(asyncio.CancelledError):
                await heartbeat
            sink.close()
            self.hub.unsubscribe(subscription_id)
            if self._on_close is not None:
                # on_close may do blocking I/O, keep it off the event loop
                await run_in_threadpool(self._on_close, self.client_id)

    async def _beat(self, sink: QueueSink) -> None:
        frame = heartbeat_frame()
        while True:
            await asyncio.sleep(self._heartbeat_interval)
            sink.push(frame)
