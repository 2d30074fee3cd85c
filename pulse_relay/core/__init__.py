"""Core primitives for pulse-relay."""

from .models import (
    ActuatorState,
    ChannelState,
    HistoryEntry,
    Link,
    LinkStateEvent,
    RelayEvent,
    Sample,
    SampleEvent,
    SampleOrigin,
    SensorState,
)
from .protocols import ClientFactory, DeviceFinder, EventSink, NotifyingClient

__all__ = [
    "ActuatorState",
    "ChannelState",
    "ClientFactory",
    "DeviceFinder",
    "EventSink",
    "HistoryEntry",
    "Link",
    "LinkStateEvent",
    "NotifyingClient",
    "RelayEvent",
    "Sample",
    "SampleEvent",
    "SampleOrigin",
    "SensorState",
]
