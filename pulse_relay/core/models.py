"""Domain models shared by the relay components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union


class Link(str, Enum):
    """The three independently managed connections."""

    SENSOR = "sensor"
    CHANNEL = "channel"
    ACTUATOR = "actuator"


class SensorState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ChannelState(str, Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"
    FAILED = "failed"


class ActuatorState(str, Enum):
    UNCONFIGURED = "unconfigured"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


class SampleOrigin(str, Enum):
    """Where a sample entered the relay."""

    SENSOR = "sensor"
    CHANNEL = "channel"


@dataclass(frozen=True, slots=True)
class Sample:
    value: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    display_time: str
    value: int

    def as_dict(self) -> dict[str, object]:
        return {"time": self.display_time, "heartRate": self.value}


@dataclass(frozen=True, slots=True)
class SampleEvent:
    sample: Sample
    origin: SampleOrigin


@dataclass(frozen=True, slots=True)
class LinkStateEvent:
    """State transition of one link.

    ``detail`` carries the variant payload (device name, bulb address or
    failure reason). ``error`` is set when the transition should overwrite
    the last error; ``clear_error`` resets it after a successful reconnect.
    """

    link: Link
    state: Union[SensorState, ChannelState, ActuatorState]
    detail: Optional[str] = None
    error: Optional[str] = None
    clear_error: bool = False


RelayEvent = Union[SampleEvent, LinkStateEvent]
