"""Relay coordinator wiring the sensor, channel, bulb and history together."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

from .adapters import ActuatorController, SensorLink, TelemetryChannel
from .colors import BulbColor, color_for
from .config import PulseRelayConfig
from .core import (
    ActuatorState,
    HistoryEntry,
    Link,
    LinkStateEvent,
    RelayEvent,
    Sample,
    SampleEvent,
    SampleOrigin,
    SensorState,
)
from .dispatch import SinkWorker
from .history import HistoryBuffer
from .status import RelayStatus, StatusStore

LOGGER = logging.getLogger(__name__)


class RelayCoordinator:
    """Single owner of the relay components and of the status snapshot.

    Links report samples and state changes through ``submit``. One task
    consumes those events in arrival order; for each sample it records the
    history entry, forwards sensor-originated samples to the channel, and
    sends the matching color to the bulb. Channel and bulb I/O run on their
    own bounded sink workers so event handling never waits on the network.
    """

    def __init__(
        self,
        config: PulseRelayConfig,
        *,
        sensor: Optional[SensorLink] = None,
        channel: Optional[TelemetryChannel] = None,
        actuator: Optional[ActuatorController] = None,
    ) -> None:
        self._config = config
        self.history = HistoryBuffer(config.relay.history_size)
        self._status = StatusStore()

        self.sensor = sensor or SensorLink(config.sensor)
        self.channel = channel or TelemetryChannel(config.channel)
        self.actuator = actuator or ActuatorController(config.actuator)
        for link in (self.sensor, self.channel, self.actuator):
            link.set_event_sink(self.submit)

        queue_size = config.relay.sink_queue_size
        self._channel_sink: SinkWorker[Sample] = SinkWorker(
            "channel", self.channel.send, maxsize=queue_size
        )
        self._actuator_sink: SinkWorker[BulbColor] = SinkWorker(
            "actuator", self.actuator.set_color, maxsize=queue_size
        )

        self._events: asyncio.Queue[RelayEvent] = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._consumer: Optional[asyncio.Task[None]] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def start(self) -> None:
        if self._consumer is not None:
            raise RuntimeError("RelayCoordinator already started")

        self._loop = asyncio.get_running_loop()
        self._channel_sink.start()
        self._actuator_sink.start()
        self._consumer = asyncio.create_task(self._run(), name="relay-events")
        LOGGER.info(
            "Relay coordinator started (history=%d, sink queue=%d)",
            self.history.capacity,
            self._config.relay.sink_queue_size,
        )

    async def stop(self) -> None:
        await self.close_channel()
        await self.sensor.disconnect()

        if self._consumer is not None:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._events.join(), timeout=1.0)
            self._consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._consumer
            self._consumer = None

        await self._channel_sink.stop()
        await self._actuator_sink.stop()
        await self.actuator.aclose()
        LOGGER.info(
            "Relay coordinator stopped (dropped samples=%d, dropped colors=%d)",
            self.dropped_channel_samples,
            self.dropped_actuator_commands,
        )

    async def __aenter__(self) -> "RelayCoordinator":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Event intake
    # ------------------------------------------------------------------
    def submit(self, event: RelayEvent) -> None:
        """Queue an event for the coordinator. Never blocks; callable from any thread."""

        loop = self._loop
        if loop is None:
            self._events.put_nowait(event)
            return

        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            current_loop = None

        if current_loop is loop:
            self._events.put_nowait(event)
        else:
            loop.call_soon_threadsafe(self._events.put_nowait, event)

    async def drain(self) -> None:
        """Wait until submitted events and the sink work they caused are done."""

        await self._events.join()
        await self._channel_sink.join()
        await self._actuator_sink.join()

    # ------------------------------------------------------------------
    # Link operations
    # ------------------------------------------------------------------
    async def pair_sensor(self) -> bool:
        success = await self.sensor.pair()
        await self._settle()
        return success

    async def disconnect_sensor(self) -> None:
        await self.sensor.disconnect()
        await self._settle()

    async def open_channel(self, url: Optional[str] = None) -> bool:
        success = await self.channel.open(url)
        await self._settle()
        return success

    async def close_channel(self) -> None:
        await self.channel.close()
        await self._settle()

    async def connect_actuator(self, address: str) -> bool:
        success = await self.actuator.connect(address)
        await self._settle()
        return success

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    def status(self) -> RelayStatus:
        return self._status.snapshot()

    def history_snapshot(self) -> tuple[HistoryEntry, ...]:
        return self.history.snapshot()

    @property
    def dropped_channel_samples(self) -> int:
        return self._channel_sink.dropped

    @property
    def dropped_actuator_commands(self) -> int:
        return self._actuator_sink.dropped

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _settle(self) -> None:
        # Let state events raised by the operation land in the status first.
        if self._consumer is not None and not self._consumer.done():
            await self._events.join()

    async def _run(self) -> None:
        while True:
            event = await self._events.get()
            try:
                self._apply(event)
            except Exception:
                LOGGER.exception("Relay event handling failed for %r", event)
            finally:
                self._events.task_done()

    def _apply(self, event: RelayEvent) -> None:
        if isinstance(event, SampleEvent):
            self._handle_sample(event)
        elif isinstance(event, LinkStateEvent):
            self._handle_link_state(event)
        else:
            LOGGER.debug("Ignoring unknown relay event %r", event)

    def _handle_sample(self, event: SampleEvent) -> None:
        sample = event.sample
        self.history.record(sample)
        self._status.update(heart_rate=sample.value)

        # Channel-originated samples are not echoed back to the channel.
        if event.origin == SampleOrigin.SENSOR and self.channel.is_open:
            self._channel_sink.offer(sample)

        if self.actuator.is_connected:
            self._actuator_sink.offer(color_for(sample.value))

    def _handle_link_state(self, event: LinkStateEvent) -> None:
        changes: dict[str, object] = {}

        if event.link == Link.SENSOR:
            changes["sensor_state"] = event.state
            changes["sensor_device"] = (
                event.detail if event.state == SensorState.CONNECTED else None
            )
        elif event.link == Link.CHANNEL:
            changes["channel_state"] = event.state
        elif event.link == Link.ACTUATOR:
            changes["actuator_state"] = event.state
            changes["actuator_address"] = (
                event.detail if event.state == ActuatorState.CONNECTED else None
            )

        if event.error:
            changes["last_error"] = event.error
        elif event.clear_error:
            changes["last_error"] = None

        previous = self._status.snapshot()
        self._status.update(**changes)

        LOGGER.info(
            "%s link -> %s%s",
            event.link.value,
            event.state.value,
            f" ({event.detail})" if event.detail else "",
        )
        if event.error and event.error != previous.last_error:
            LOGGER.warning("Relay error: %s", event.error)
