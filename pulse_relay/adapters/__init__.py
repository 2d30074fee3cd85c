"""Adapter modules for the three external links."""

from .actuator import ActuatorController
from .channel import TelemetryChannel
from .sensor import SensorLink, discover_heart_rate_monitors

__all__ = [
    "ActuatorController",
    "SensorLink",
    "TelemetryChannel",
    "discover_heart_rate_monitors",
]
