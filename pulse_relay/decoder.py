"""Heart-rate measurement payload decoding."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from .core import Sample


def decode_heart_rate(payload: bytes | bytearray | memoryview) -> int:
    """Return the beats-per-minute value carried by a measurement payload.

    Byte 0 holds the measurement flags; byte 1 is read as an unsigned 8-bit
    value. Payloads shorter than two bytes decode to ``0``. The flags byte is
    not interpreted, so 16-bit encodings are truncated to their low byte.
    """

    data = bytes(payload)
    if len(data) < 2:
        return 0
    return data[1]


def decode_sample(
    payload: bytes | bytearray | memoryview, *, timestamp: Optional[datetime] = None
) -> Sample:
    return Sample(
        value=decode_heart_rate(payload),
        timestamp=timestamp or datetime.now(timezone.utc),
    )
