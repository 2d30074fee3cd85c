"""Telemetry channel: duplex websocket to the relay endpoint."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

import aiohttp

from ..config import ChannelConfig
from ..core import (
    ChannelState,
    EventSink,
    Link,
    LinkStateEvent,
    RelayEvent,
    Sample,
    SampleEvent,
    SampleOrigin,
)
from ..envelope import encode_heart_rate, parse_heart_rate
from ..errors import ChannelOpenError, ChannelTransportError

LOGGER = logging.getLogger(__name__)

CHANNEL_ERROR_MESSAGE = "WebSocket connection failed"


class TelemetryChannel:
    """Carries samples outward and feeds inbound heart-rate envelopes back.

    ``send`` never waits for the channel to become available: when the
    websocket is not open the sample is dropped. There is no reconnect; a
    failed or closed channel stays that way until ``open`` is called again.
    """

    def __init__(
        self,
        config: ChannelConfig,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        on_event: Optional[EventSink] = None,
    ) -> None:
        self.config = config
        self._session = session
        self._owns_session = session is None
        self._on_event = on_event
        self._state = ChannelState.CLOSED
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._reader_task: Optional[asyncio.Task[None]] = None
        self._closing = False

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == ChannelState.OPEN

    def set_event_sink(self, sink: EventSink) -> None:
        self._on_event = sink

    async def open(self, url: Optional[str] = None) -> bool:
        """Connect to ``url`` (or the configured endpoint). Returns success."""

        if self._state in (ChannelState.OPEN, ChannelState.CONNECTING):
            LOGGER.debug("Telemetry channel already %s", self._state.value)
            return self._state == ChannelState.OPEN

        endpoint = (url or self.config.url).strip()
        self._closing = False
        self._transition(ChannelState.CONNECTING, detail=endpoint)

        try:
            if not endpoint:
                raise ChannelOpenError("no endpoint configured")
            session = await self._ensure_session()
            heartbeat = self.config.heartbeat_seconds or None
            ws = await session.ws_connect(endpoint, heartbeat=heartbeat)
        except asyncio.CancelledError:
            self._transition(ChannelState.CLOSED)
            raise
        except Exception as exc:
            if self._closing:
                LOGGER.debug("Telemetry channel open abandoned by close: %s", exc)
                return False
            LOGGER.warning("Telemetry channel open failed for %s: %s", endpoint, exc)
            self._fail(ChannelOpenError(str(exc) or type(exc).__name__))
            return False

        if self._state != ChannelState.CONNECTING:
            # Closed while the handshake was in flight.
            await ws.close()
            return False

        self._ws = ws
        self._transition(ChannelState.OPEN, detail=endpoint)
        LOGGER.info("Telemetry channel open at %s", endpoint)
        self._reader_task = asyncio.create_task(self._read_loop(ws))
        return True

    async def send(self, sample: Sample) -> bool:
        """Transmit one sample; silently dropped unless the channel is open."""

        ws = self._ws
        if self._state != ChannelState.OPEN or ws is None or ws.closed:
            return False

        try:
            await ws.send_json(encode_heart_rate(sample.value))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            LOGGER.warning("Telemetry channel send failed: %s", exc)
            self._fail(ChannelTransportError(str(exc) or type(exc).__name__))
            await self._discard_ws()
            return False
        return True

    async def close(self) -> None:
        """Release the websocket and session. Safe to call repeatedly."""

        self._closing = True
        reader = self._reader_task
        self._reader_task = None
        if reader is not None and reader is not asyncio.current_task():
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reader

        await self._discard_ws()

        if self._state != ChannelState.CLOSED:
            self._transition(ChannelState.CLOSED)
            LOGGER.info("Telemetry channel closed")

        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=None)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def _discard_ws(self) -> None:
        ws = self._ws
        self._ws = None
        if ws is not None and not ws.closed:
            with contextlib.suppress(Exception):
                await ws.close()

    async def _read_loop(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        try:
            async for message in ws:
                if message.type == aiohttp.WSMsgType.TEXT:
                    self._dispatch(message.data)
                elif message.type == aiohttp.WSMsgType.ERROR:
                    raise ws.exception() or ChannelTransportError("websocket error")
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if self._closing or ws is not self._ws:
                return
            LOGGER.warning("Telemetry channel error: %s", exc)
            self._ws = None
            self._fail(ChannelTransportError(str(exc) or type(exc).__name__))
            with contextlib.suppress(Exception):
                await ws.close()
            return

        if self._closing or ws is not self._ws:
            return
        LOGGER.info("Telemetry channel closed by remote (code=%s)", ws.close_code)
        self._ws = None
        self._transition(ChannelState.CLOSED, detail="closed by remote")

    def _dispatch(self, raw: str) -> None:
        value = parse_heart_rate(raw)
        if value is None:
            return
        self._emit(SampleEvent(sample=Sample(value=value), origin=SampleOrigin.CHANNEL))

    def _fail(self, exc: Exception) -> None:
        reason = str(exc)
        self._transition(
            ChannelState.FAILED,
            detail=reason,
            error=f"{CHANNEL_ERROR_MESSAGE}: {reason}" if reason else CHANNEL_ERROR_MESSAGE,
        )

    def _transition(
        self,
        state: ChannelState,
        *,
        detail: Optional[str] = None,
        error: Optional[str] = None,
    ) -> None:
        self._state = state
        self._emit(
            LinkStateEvent(link=Link.CHANNEL, state=state, detail=detail, error=error)
        )

    def _emit(self, event: RelayEvent) -> None:
        if self._on_event is not None:
            self._on_event(event)
