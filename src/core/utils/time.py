"""
Time-related utilities for the application.

All timestamps are generated in UTC. Wall-clock ISO strings are used in
API responses; epoch milliseconds are embedded in object storage keys.
"""

import threading
import time
from datetime import datetime, timezone

_millis_lock = threading.Lock()
_last_millis = 0


def utc_now_iso() -> str:
    """Return current UTC time in ISO-8601 format.

    Example:
        2024-01-15T10:42:31.123456+00:00
    """
    return datetime.now(timezone.utc).isoformat()


def utc_now_millis() -> int:
    """Return current UTC time as epoch milliseconds."""
    return time.time_ns() // 1_000_000


def next_unique_millis() -> int:
    """Return epoch milliseconds that never repeat within this process.

    Two callers landing in the same millisecond get consecutive values,
    so keys derived from the result cannot collide.
    """
    global _last_millis

    with _millis_lock:
        now = utc_now_millis()
        _last_millis = now if now > _last_millis else _last_millis + 1
        return _last_millis


def to_iso(value: datetime | None) -> str | None:
    """Serialize an optional datetime to ISO-8601 in UTC."""
    if value is None:
        return None

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    return value.astimezone(timezone.utc).isoformat()
