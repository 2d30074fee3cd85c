"""Mapping from heart rate to bulb color."""

from __future__ import annotations

from enum import Enum

from . import constants


class BulbColor(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"

    @property
    def hex(self) -> str:
        return _HEX_CODES[self]


_HEX_CODES = {
    BulbColor.LOW: "#00ff00",
    BulbColor.NORMAL: "#ffff00",
    BulbColor.HIGH: "#ff0000",
}


def color_for(value: int) -> BulbColor:
    """Classify a heart rate; total over all integers."""

    if value < constants.LOW_HEART_RATE_BPM:
        return BulbColor.LOW
    if value < constants.HIGH_HEART_RATE_BPM:
        return BulbColor.NORMAL
    return BulbColor.HIGH
