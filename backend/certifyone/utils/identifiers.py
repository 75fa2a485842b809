from __future__ import annotations

import os
import time
import uuid
from typing import Callable, Container, Optional

MAX_ID_ATTEMPTS = 8


def generate_uuid7(now_ms: Optional[int] = None) -> str:
    """
    Generate a UUIDv7 string (time-ordered).

    Layout:
    - 48-bit Unix timestamp in milliseconds
    - 4-bit version (0b0111)
    - 74-bit randomness
    """
    ts_ms = int(time.time() * 1000) if now_ms is None else now_ms
    ts_bytes = ts_ms.to_bytes(6, "big", signed=False)
    rand_bytes = os.urandom(10)
    raw = bytearray(ts_bytes + rand_bytes)
    raw[6] = (raw[6] & 0x0F) | 0x70
    raw[8] = (raw[8] & 0x3F) | 0x80
    return str(uuid.UUID(bytes=bytes(raw)))


def generate_record_id(
    existing: Container[str] = (),
    *,
    factory: Callable[[], str] = generate_uuid7,
) -> str:
    """
    Return a new id that is not in `existing`.

    Regenerates on a collision with an existing id.
    """
    for _ in range(MAX_ID_ATTEMPTS):
        candidate = factory()
        if candidate not in existing:
            return candidate
    raise RuntimeError(f"Could not generate a unique id after {MAX_ID_ATTEMPTS} attempts")
