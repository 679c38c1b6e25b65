from __future__ import annotations

import os
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _unix_ms(at: Optional[datetime]) -> int:
    if at is None:
        return int(time.time() * 1000)
    if at.tzinfo is None:
        at = at.replace(tzinfo=timezone.utc)
    return (at - _EPOCH) // timedelta(milliseconds=1)


def generate_uuid7(at: Optional[datetime] = None) -> str:
    """
    Time-ordered UUIDv7 string: 48-bit millisecond timestamp, version
    nibble 7, variant bits, then random bits.

    Pass `at` to stamp the id with an event time instead of the clock, so a
    history row's id and its created_at agree.
    """
    raw = bytearray(_unix_ms(at).to_bytes(6, "big", signed=False) + os.urandom(10))
    raw[6] = (raw[6] & 0x0F) | 0x70
    raw[8] = (raw[8] & 0x3F) | 0x80
    return str(uuid.UUID(bytes=bytes(raw)))


def uuid7_time(value: str) -> datetime:
    """Millisecond timestamp embedded in a UUIDv7 string, as aware UTC."""
    ms = int.from_bytes(uuid.UUID(value).bytes[:6], "big")
    return _EPOCH + timedelta(milliseconds=ms)
