"""Protocol definitions for event delivery and BLE clients."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, Protocol

from .models import RelayEvent

EventSink = Callable[[RelayEvent], None]

NotificationCallback = Callable[[Any, bytearray], Awaitable[None] | None]


class NotifyingClient(Protocol):
    """Subset of ``bleak.BleakClient`` used by the sensor link."""

    @property
    def is_connected(self) -> bool:
        ...

    async def connect(self, **kwargs: Any) -> Any:
        ...

    async def disconnect(self) -> Any:
        ...

    async def start_notify(
        self, char_specifier: Any, callback: NotificationCallback, **kwargs: Any
    ) -> None:
        ...

    async def stop_notify(self, char_specifier: Any) -> None:
        ...


ClientFactory = Callable[..., NotifyingClient]

DeviceFinder = Callable[[], Awaitable[Optional[Any]]]
