"""Relay status snapshot and the HTTP surface used by the dashboard."""

from __future__ import annotations

import contextlib
import dataclasses
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional

from aiohttp import web

from .colors import color_for
from .core import ActuatorState, ChannelState, SensorState

if TYPE_CHECKING:
    from .relay import RelayCoordinator

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RelayStatus:
    heart_rate: int = 0
    sensor_state: SensorState = SensorState.DISCONNECTED
    sensor_device: Optional[str] = None
    channel_state: ChannelState = ChannelState.CLOSED
    actuator_state: ActuatorState = ActuatorState.UNCONFIGURED
    actuator_address: Optional[str] = None
    last_error: Optional[str] = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> Dict[str, object]:
        return {
            "heartRate": self.heart_rate,
            "sensorState": self.sensor_state.value,
            "sensorDevice": self.sensor_device,
            "channelState": self.channel_state.value,
            "actuatorState": self.actuator_state.value,
            "actuatorAddress": self.actuator_address,
            "lastError": self.last_error,
            "updatedAt": self.updated_at.isoformat(timespec="seconds"),
        }


class StatusStore:
    """Holds the current ``RelayStatus``.

    Writers replace the whole immutable snapshot under a lock, so readers on
    any thread never observe a partial update.
    """

    def __init__(self) -> None:
        self._status = RelayStatus()
        self._lock = threading.Lock()

    def snapshot(self) -> RelayStatus:
        with self._lock:
            return self._status

    def update(self, **changes: Any) -> RelayStatus:
        with self._lock:
            self._status = dataclasses.replace(
                self._status, updated_at=datetime.now(timezone.utc), **changes
            )
            return self._status


class StatusServer:
    """HTTP endpoints exposing status and history, and accepting link requests."""

    def __init__(self, coordinator: RelayCoordinator, host: str, port: int) -> None:
        self._coordinator = coordinator
        self._host = host
        self._port = port
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/status", self._handle_status)
        app.router.add_get("/history", self._handle_history)
        app.router.add_post("/sensor/pair", self._handle_sensor_pair)
        app.router.add_post("/sensor/disconnect", self._handle_sensor_disconnect)
        app.router.add_post("/actuator/connect", self._handle_actuator_connect)
        app.router.add_post("/channel/open", self._handle_channel_open)
        app.router.add_post("/channel/close", self._handle_channel_close)
        return app

    async def start(self) -> None:
        self._runner = web.AppRunner(self.build_app())
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self._host, self._port)
        await self._site.start()
        LOGGER.info("Status endpoint listening on http://%s:%s/status", self._host, self._port)

    async def stop(self) -> None:
        with contextlib.suppress(Exception):
            if self._site is not None:
                await self._site.stop()
        if self._runner is not None:
            await self._runner.cleanup()
        self._site = None
        self._runner = None

    async def _handle_status(self, request: web.Request) -> web.Response:
        return web.json_response(self._status_payload())

    async def _handle_history(self, request: web.Request) -> web.Response:
        return web.json_response(self._coordinator.history.as_chart_data())

    async def _handle_sensor_pair(self, request: web.Request) -> web.Response:
        success = await self._coordinator.pair_sensor()
        return self._result(success)

    async def _handle_sensor_disconnect(self, request: web.Request) -> web.Response:
        await self._coordinator.disconnect_sensor()
        return self._result(True)

    async def _handle_actuator_connect(self, request: web.Request) -> web.Response:
        body = await _read_json(request)
        address = body.get("bulbIP")
        if not isinstance(address, str):
            address = ""
        success = await self._coordinator.connect_actuator(address)
        return self._result(success)

    async def _handle_channel_open(self, request: web.Request) -> web.Response:
        body = await _read_json(request)
        url = body.get("url")
        success = await self._coordinator.open_channel(
            url if isinstance(url, str) and url.strip() else None
        )
        return self._result(success)

    async def _handle_channel_close(self, request: web.Request) -> web.Response:
        await self._coordinator.close_channel()
        return self._result(True)

    def _status_payload(self) -> Dict[str, object]:
        status = self._coordinator.status()
        payload = status.as_dict()
        color = color_for(status.heart_rate)
        payload["color"] = {"level": color.value, "hex": color.hex}
        return payload

    def _result(self, success: bool) -> web.Response:
        return web.json_response({"success": success, "status": self._status_payload()})


async def _read_json(request: web.Request) -> Dict[str, Any]:
    if not request.can_read_body:
        return {}
    try:
        body = await request.json()
    except ValueError:
        raise web.HTTPBadRequest(text="Request body must be JSON")
    return body if isinstance(body, dict) else {}
