"""Error taxonomy for the relay links.

Errors are raised inside a link's own operation and converted to a state
transition at that link's boundary; they never cross into other components.
"""

from __future__ import annotations


class RelayError(RuntimeError):
    """Base class for relay link failures."""


class SensorPairingError(RelayError):
    """Raised when discovery, connection or notification subscription fails."""


class SensorDisconnected(RelayError):
    """Raised when a paired sensor drops its connection."""


class ChannelOpenError(RelayError):
    """Raised when the telemetry websocket cannot be established."""


class ChannelTransportError(RelayError):
    """Raised when an open telemetry websocket fails."""


class ActuatorConnectError(RelayError):
    """Raised when the bulb connect request is rejected or fails."""


class ActuatorCommandError(RelayError):
    """Raised when a color command fails. Never surfaced to the status."""
