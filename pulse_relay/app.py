"""Main application entry-point for pulse-relay."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .config import PulseRelayConfig, load_config
from .logging import configure_logging
from .relay import RelayCoordinator
from .status import StatusServer

LOGGER = logging.getLogger(__name__)


class PulseRelayApp:
    """Coordinates application startup and shutdown.

    Startup opens the telemetry channel, connects the configured bulb and
    pairs the sensor when the configuration asks for it. Every link is tried
    once; failures are reported through the status and the relay keeps
    running so the dashboard can trigger another attempt.
    """

    def __init__(
        self,
        config: Optional[PulseRelayConfig] = None,
        *,
        coordinator: Optional[RelayCoordinator] = None,
    ) -> None:
        self._config = config or load_config()
        self._coordinator = coordinator or RelayCoordinator(self._config)
        self._status_server: Optional[StatusServer] = None
        self._shutdown_event: Optional[asyncio.Event] = None

    @property
    def coordinator(self) -> RelayCoordinator:
        return self._coordinator

    async def run(self) -> None:
        self._shutdown_event = asyncio.Event()

        LOGGER.info("pulse-relay starting with config: %s", self._config.path)
        await self._start_services()

        try:
            await self._shutdown_event.wait()
        except asyncio.CancelledError:
            LOGGER.info("pulse-relay received shutdown signal")
            raise
        finally:
            await self._stop_services()

    def request_shutdown(self) -> None:
        if self._shutdown_event is not None:
            self._shutdown_event.set()

    @classmethod
    def start(cls, config: Optional[PulseRelayConfig] = None) -> None:
        instance = cls(config=config)
        configure_logging(
            instance._config.logging.level,
            relay_level=instance._config.logging.relay_level,
            log_path=instance._config.logging.path,
            log_network=instance._config.logging.log_network,
        )
        try:
            asyncio.run(instance.run())
        except KeyboardInterrupt:
            LOGGER.info("pulse-relay received shutdown signal")

    async def _start_services(self) -> None:
        config = self._config
        coordinator = self._coordinator
        await coordinator.start()

        if config.status.enabled:
            self._status_server = StatusServer(
                coordinator, config.status.host, config.status.port
            )
            await self._status_server.start()

        if config.channel.auto_open:
            await coordinator.open_channel()

        if config.actuator.bulb_ip:
            await coordinator.connect_actuator(config.actuator.bulb_ip)

        if config.sensor.auto_pair:
            await coordinator.pair_sensor()

        status = coordinator.status()
        LOGGER.info(
            "pulse-relay running (sensor=%s, device=%s, channel=%s, bulb=%s)",
            status.sensor_state.value,
            coordinator.sensor.device_name or "-",
            status.channel_state.value,
            status.actuator_state.value,
        )

    async def _stop_services(self) -> None:
        if self._status_server is not None:
            await self._status_server.stop()
            self._status_server = None
        await self._coordinator.stop()
