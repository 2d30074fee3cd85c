import asyncio
import json
from typing import Any, Awaitable, Callable, Optional

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from pulse_relay.config import PulseRelayConfig, default_config


class FakeDevice:
    def __init__(self, name: str = "Polar H10", address: str = "AA:BB:CC:DD:EE:FF"):
        self.name = name
        self.address = address


class FakeBleClient:
    """Minimal stand-in for ``bleak.BleakClient``."""

    def __init__(
        self,
        device: Any,
        disconnected_callback: Optional[Callable[[Any], None]] = None,
        *,
        connect_error: Optional[Exception] = None,
        notify_error: Optional[Exception] = None,
    ) -> None:
        self.device = device
        self.disconnected_callback = disconnected_callback
        self.connect_error = connect_error
        self.notify_error = notify_error
        self.notify_uuid: Optional[str] = None
        self.callback: Optional[Callable[[Any, bytearray], None]] = None
        self.stopped_uuid: Optional[str] = None
        self.disconnect_call_count = 0
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self, **kwargs: Any) -> bool:
        if self.connect_error is not None:
            raise self.connect_error
        self._connected = True
        return True

    async def start_notify(self, char_specifier: Any, callback: Any, **kwargs: Any) -> None:
        if self.notify_error is not None:
            raise self.notify_error
        self.notify_uuid = char_specifier
        self.callback = callback

    async def stop_notify(self, char_specifier: Any) -> None:
        self.stopped_uuid = char_specifier

    async def disconnect(self) -> bool:
        self.disconnect_call_count += 1
        was_connected = self._connected
        self._connected = False
        if was_connected and self.disconnected_callback is not None:
            self.disconnected_callback(self)
        return True

    def notify(self, payload: bytes) -> None:
        assert self.callback is not None, "notifications not started"
        self.callback(None, bytearray(payload))

    def drop(self) -> None:
        """Simulate the device going out of range."""
        self._connected = False
        if self.disconnected_callback is not None:
            self.disconnected_callback(self)


class FakeBle:
    """Factory and finder pair handed to ``SensorLink``."""

    def __init__(self) -> None:
        self.device: Optional[FakeDevice] = FakeDevice()
        self.connect_error: Optional[Exception] = None
        self.notify_error: Optional[Exception] = None
        self.clients: list[FakeBleClient] = []

    def client_factory(self, device: Any, disconnected_callback=None) -> FakeBleClient:
        client = FakeBleClient(
            device,
            disconnected_callback,
            connect_error=self.connect_error,
            notify_error=self.notify_error,
        )
        self.clients.append(client)
        return client

    async def find_device(self) -> Optional[FakeDevice]:
        return self.device

    @property
    def client(self) -> FakeBleClient:
        return self.clients[-1]


@pytest.fixture
def fake_ble() -> FakeBle:
    return FakeBle()


@pytest.fixture
def relay_config() -> PulseRelayConfig:
    config = default_config()
    config.channel.heartbeat_seconds = 0.0
    config.actuator.request_timeout_seconds = 1.0
    config.status.enabled = False
    return config


class BulbApi:
    """Fake bulb HTTP API recording every request."""

    def __init__(self) -> None:
        self.connect_requests: list[dict[str, Any]] = []
        self.color_requests: list[dict[str, Any]] = []
        self.connect_success = True
        self.connect_status = 200
        self.color_status = 200
        self.color_event = asyncio.Event()
        self.server: Optional[TestServer] = None

    @property
    def base_url(self) -> str:
        assert self.server is not None
        return str(self.server.make_url("/")).rstrip("/")

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/api/bulb/connect", self._handle_connect)
        app.router.add_post("/api/bulb/color", self._handle_color)
        return app

    async def _handle_connect(self, request: web.Request) -> web.StreamResponse:
        self.connect_requests.append(await request.json())
        if self.connect_status >= 400:
            return web.Response(status=self.connect_status, text="bulb unreachable")
        return web.json_response({"success": self.connect_success}, status=self.connect_status)

    async def _handle_color(self, request: web.Request) -> web.StreamResponse:
        self.color_requests.append(await request.json())
        self.color_event.set()
        if self.color_status >= 400:
            return web.Response(status=self.color_status, text="bulb offline")
        return web.json_response({"success": True})


@pytest_asyncio.fixture
async def bulb_api():
    api = BulbApi()
    async with TestServer(api.build_app()) as server:
        api.server = server
        yield api


class RelayEndpoint:
    """Websocket relay endpoint recording inbound envelopes."""

    def __init__(self) -> None:
        self.received: list[dict[str, Any]] = []
        self.sockets: list[web.WebSocketResponse] = []
        self.connected = asyncio.Event()
        self.server: Optional[TestServer] = None

    @property
    def url(self) -> str:
        assert self.server is not None
        return str(self.server.make_url("/ws")).replace("http://", "ws://", 1)

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/ws", self._handle_ws)
        return app

    async def push(self, payload: Any) -> None:
        text = payload if isinstance(payload, str) else json.dumps(payload)
        for ws in list(self.sockets):
            if not ws.closed:
                await ws.send_str(text)

    async def close_all(self) -> None:
        for ws in list(self.sockets):
            await ws.close()

    async def _handle_ws(self, request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        self.sockets.append(ws)
        self.connected.set()
        async for message in ws:
            if message.type == aiohttp.WSMsgType.TEXT:
                self.received.append(json.loads(message.data))
        return ws


@pytest_asyncio.fixture
async def relay_endpoint():
    endpoint = RelayEndpoint()
    async with TestServer(endpoint.build_app()) as server:
        endpoint.server = server
        try:
            yield endpoint
        finally:
            await endpoint.close_all()


WaitUntil = Callable[[Callable[[], bool]], Awaitable[None]]


@pytest.fixture
def wait_until() -> WaitUntil:
    async def _wait(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
        async def _poll() -> None:
            while not predicate():
                await asyncio.sleep(0.01)

        await asyncio.wait_for(_poll(), timeout=timeout)

    return _wait
