"""Wire format for the telemetry channel.

Messages are JSON objects of the form ``{"type": str, "value": number}``. Only
``heartRate`` envelopes are interpreted; anything else is ignored so newer
producers can add message types without breaking the relay.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Optional

from .constants import ENVELOPE_TYPE_HEART_RATE

LOGGER = logging.getLogger(__name__)


def encode_heart_rate(value: int) -> dict[str, Any]:
    return {"type": ENVELOPE_TYPE_HEART_RATE, "value": value}


def parse_heart_rate(raw: str) -> Optional[int]:
    """Extract the heart rate from a raw text frame, or ``None`` to ignore it."""

    try:
        payload = json.loads(raw)
    except ValueError:
        # JSONDecodeError, or an integer literal past the digit limit.
        LOGGER.debug("Ignoring non-JSON channel frame: %.80s", raw)
        return None

    if not isinstance(payload, dict):
        LOGGER.debug("Ignoring non-object channel frame")
        return None

    if payload.get("type") != ENVELOPE_TYPE_HEART_RATE:
        return None

    value = payload.get("value")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        LOGGER.debug("Ignoring heartRate envelope with value %r", value)
        return None
    if isinstance(value, float) and not math.isfinite(value):
        LOGGER.debug("Ignoring heartRate envelope with value %r", value)
        return None
    if value < 0:
        LOGGER.debug("Ignoring heartRate envelope with value %r", value)
        return None

    return int(value)
