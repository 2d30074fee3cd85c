"""BLE heart-rate sensor link built on bleak."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Optional

from bleak import BleakClient, BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData

from .. import constants
from ..config import SensorConfig
from ..core import (
    ClientFactory,
    DeviceFinder,
    EventSink,
    Link,
    LinkStateEvent,
    NotifyingClient,
    RelayEvent,
    SampleEvent,
    SampleOrigin,
    SensorState,
)
from ..decoder import decode_sample
from ..errors import SensorDisconnected, SensorPairingError

LOGGER = logging.getLogger(__name__)

PAIRING_ERROR_MESSAGE = "Failed to connect to heart rate monitor"
DISCONNECTED_MESSAGE = "Heart rate monitor disconnected"


def advertises_heart_rate(_device: BLEDevice, advertisement: AdvertisementData) -> bool:
    service_uuids = [uuid.lower() for uuid in advertisement.service_uuids or []]
    return constants.HEART_RATE_SERVICE_UUID in service_uuids


async def discover_heart_rate_monitors(
    timeout: float = 10.0,
) -> list[tuple[BLEDevice, AdvertisementData]]:
    """Scan for nearby devices advertising the heart-rate service."""

    found = await BleakScanner.discover(timeout=timeout, return_adv=True)
    return [
        (device, advertisement)
        for device, advertisement in found.values()
        if advertises_heart_rate(device, advertisement)
    ]


class SensorLink:
    """Pairs with a heart-rate monitor and relays its measurement notifications.

    Pairing is always initiated from outside. A dropped link moves back to
    ``DISCONNECTED`` and waits for the next ``pair`` call.
    """

    def __init__(
        self,
        config: SensorConfig,
        *,
        on_event: Optional[EventSink] = None,
        client_factory: Optional[ClientFactory] = None,
        device_finder: Optional[DeviceFinder] = None,
    ) -> None:
        self.config = config
        self._on_event = on_event
        self._client_factory: ClientFactory = client_factory or BleakClient
        self._device_finder = device_finder or self._find_device
        self._state = SensorState.DISCONNECTED
        self._client: Optional[NotifyingClient] = None
        self._device_name: Optional[str] = None
        self._closing = False

    @property
    def state(self) -> SensorState:
        return self._state

    @property
    def device_name(self) -> Optional[str]:
        return self._device_name if self._state == SensorState.CONNECTED else None

    def set_event_sink(self, sink: EventSink) -> None:
        self._on_event = sink

    async def pair(self) -> bool:
        """Discover, connect and subscribe. Returns ``True`` once connected."""

        if self._state != SensorState.DISCONNECTED:
            LOGGER.debug("Sensor pairing ignored while %s", self._state.value)
            return self._state == SensorState.CONNECTED

        self._closing = False
        self._transition(SensorState.CONNECTING)
        client: Optional[NotifyingClient] = None

        try:
            device = await self._device_finder()
            if device is None:
                raise SensorPairingError("no heart rate monitor found")

            client = self._client_factory(
                device, disconnected_callback=self._handle_disconnect
            )
            self._client = client
            await client.connect()
            await client.start_notify(
                constants.HEART_RATE_MEASUREMENT_UUID, self._handle_notification
            )
        except asyncio.CancelledError:
            await self._release(client)
            self._transition(SensorState.DISCONNECTED)
            raise
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
            LOGGER.warning("Heart rate monitor pairing failed: %s", reason)
            await self._release(client)
            self._transition(
                SensorState.DISCONNECTED,
                detail=reason,
                error=f"{PAIRING_ERROR_MESSAGE}: {reason}",
            )
            return False

        if self._state != SensorState.CONNECTING:
            # Dropped or disconnected while subscribing.
            return False

        self._device_name = _describe(device)
        self._transition(
            SensorState.CONNECTED, detail=self._device_name, clear_error=True
        )
        LOGGER.info("Heart rate monitor connected: %s", self._device_name)
        return True

    async def disconnect(self) -> None:
        """Drop the link on request. Safe to call when already disconnected."""

        self._closing = True
        client = self._client
        if client is not None:
            with contextlib.suppress(Exception):
                await client.stop_notify(constants.HEART_RATE_MEASUREMENT_UUID)
            await self._release(client)

        if self._state != SensorState.DISCONNECTED:
            self._transition(SensorState.DISCONNECTED)
            LOGGER.info("Heart rate monitor disconnected on request")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _find_device(self) -> Optional[BLEDevice]:
        timeout = self.config.scan_timeout_seconds
        if self.config.address:
            return await BleakScanner.find_device_by_address(
                self.config.address, timeout=timeout
            )
        return await BleakScanner.find_device_by_filter(
            advertises_heart_rate, timeout=timeout
        )

    def _handle_notification(self, _characteristic: Any, data: bytearray) -> None:
        if self._state != SensorState.CONNECTED:
            return
        self._emit(SampleEvent(sample=decode_sample(data), origin=SampleOrigin.SENSOR))

    def _handle_disconnect(self, _client: Any) -> None:
        self._client = None
        self._device_name = None
        if self._closing or self._state == SensorState.DISCONNECTED:
            return
        exc = SensorDisconnected(DISCONNECTED_MESSAGE)
        LOGGER.warning("%s", exc)
        self._transition(SensorState.DISCONNECTED, detail="dropped", error=str(exc))

    async def _release(self, client: Optional[NotifyingClient]) -> None:
        self._closing = True
        if client is self._client:
            self._client = None
        self._device_name = None
        if client is None:
            return
        try:
            await client.disconnect()
        except Exception as exc:
            LOGGER.debug("Ignoring sensor disconnect failure: %s", exc)

    def _transition(
        self,
        state: SensorState,
        *,
        detail: Optional[str] = None,
        error: Optional[str] = None,
        clear_error: bool = False,
    ) -> None:
        self._state = state
        self._emit(
            LinkStateEvent(
                link=Link.SENSOR,
                state=state,
                detail=detail,
                error=error,
                clear_error=clear_error,
            )
        )

    def _emit(self, event: RelayEvent) -> None:
        if self._on_event is not None:
            self._on_event(event)


def _describe(device: Any) -> str:
    name = getattr(device, "name", None)
    address = getattr(device, "address", None)
    if name and address:
        return f"{name} ({address})"
    return str(name or address or device)
