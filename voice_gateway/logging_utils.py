"""Structured logging (one JSON line per request or diagnostic event)."""

from __future__ import annotations

import hashlib
import json
import sys
from datetime import datetime, timezone
from typing import Any


SERVICE_NAME = "voice-gateway"


def _now() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


def text_hash(text: str) -> str:
    """Hash free text for log fields; do not log raw user input."""
    return hashlib.sha256(text.encode()).hexdigest()[:16]


def log_request(
    route: str,
    latency_ms: float,
    request_id: str | None = None,
    error: bool = False,
) -> None:
    """Emit one JSON line with required fields."""
    payload: dict[str, Any] = {
        "ts": _now(),
        "service": SERVICE_NAME,
        "route": route,
        "latency_ms": round(latency_ms, 2),
        "request_id": request_id,
        "error": error,
    }
    print(json.dumps(payload))


def log_event(event: str, level: str = "info", **fields: Any) -> None:
    """Emit one diagnostic JSON line; error level goes to stderr."""
    payload: dict[str, Any] = {
        "ts": _now(),
        "service": SERVICE_NAME,
        "level": level,
        "event": event,
        **fields,
    }
    stream = sys.stderr if level == "error" else sys.stdout
    # details may carry arbitrary upstream JSON
    print(json.dumps(payload, default=str), file=stream)
