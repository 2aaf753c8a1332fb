"""
SSE frame encoding.

Every frame is a `data:` line carrying compact JSON, terminated by a blank line. The
connected frame may be preceded by a `retry:` line telling EventSource when to reconnect.
"""

from __future__ import annotations

import json
from typing import Any, Final

CONNECTED: Final[str] = "connected"
HEARTBEAT: Final[str] = "heartbeat"

STREAM_HEADERS: Final[dict[str, str]] = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}
MEDIA_TYPE: Final[str] = "text/event-stream"


def encode_frame(payload: dict[str, Any], *, retry_ms: int | None = None) -> str:
    lines = []
    if retry_ms is not None:
        lines.append(f"retry: {retry_ms}")
    lines.append(f"data: {json.dumps(payload, separators=(',', ':'))}")
    return "\n".join(lines) + "\n\n"


def connected_frame(client_id: str, *, retry_ms: int | None = None) -> str:
    return encode_frame({"type": CONNECTED, "clientId": client_id}, retry_ms=retry_ms)


def heartbeat_frame() -> str:
    return encode_frame({"type": HEARTBEAT})


def decode_frame(frame: str) -> dict[str, Any]:
    """Inverse of encode_frame; used by tests and tooling that consume the stream."""
    for line in frame.splitlines():
        if line.startswith("data: "):
            return json.loads(line[len("data: "):])
    raise ValueError(f"Not an SSE data frame: {frame!r}")
