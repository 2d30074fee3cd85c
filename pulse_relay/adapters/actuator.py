"""Smart bulb controller speaking the bulb HTTP API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from .. import constants
from ..colors import BulbColor
from ..config import ActuatorConfig
from ..core import ActuatorState, EventSink, Link, LinkStateEvent
from ..errors import ActuatorCommandError, ActuatorConnectError

LOGGER = logging.getLogger(__name__)

ACTUATOR_ERROR_MESSAGE = "Failed to connect to smart bulb"


class ActuatorController:
    """Owns the bulb address and connection state; dispatches color commands.

    ``connect`` is a single attempt. ``set_color`` is best-effort: it does
    nothing unless connected, and its failures are logged and swallowed
    without touching the connection state.
    """

    def __init__(
        self,
        config: ActuatorConfig,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        on_event: Optional[EventSink] = None,
    ) -> None:
        self.config = config
        self._base_url = config.base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._on_event = on_event
        self._state = ActuatorState.UNCONFIGURED
        self._address: Optional[str] = None

    @property
    def state(self) -> ActuatorState:
        return self._state

    @property
    def address(self) -> Optional[str]:
        """Bulb address while connected, otherwise ``None``."""

        return self._address if self._state == ActuatorState.CONNECTED else None

    @property
    def is_connected(self) -> bool:
        return self._state == ActuatorState.CONNECTED

    def set_event_sink(self, sink: EventSink) -> None:
        self._on_event = sink

    async def connect(self, address: str) -> bool:
        """Ask the bulb API to connect to ``address``. Returns success."""

        candidate = (address or "").strip()
        if not candidate:
            self._fail("address is empty", f"{ACTUATOR_ERROR_MESSAGE}: address is empty")
            return False

        self._state = ActuatorState.CONNECTING
        self._address = None
        self._emit(ActuatorState.CONNECTING, detail=candidate)

        try:
            payload = await self._post(
                constants.BULB_CONNECT_PATH, {"bulbIP": candidate}
            )
        except asyncio.CancelledError:
            raise
        except ActuatorConnectError as exc:
            LOGGER.warning("Smart bulb connect to %s rejected: %s", candidate, exc)
            self._fail(str(exc), ACTUATOR_ERROR_MESSAGE)
            return False
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
            LOGGER.warning("Smart bulb connect to %s failed: %s", candidate, reason)
            self._fail(reason, f"{ACTUATOR_ERROR_MESSAGE}: {reason}")
            return False

        if not (isinstance(payload, dict) and payload.get("success") is True):
            LOGGER.warning("Smart bulb connect to %s rejected by API", candidate)
            self._fail("connect rejected", ACTUATOR_ERROR_MESSAGE)
            return False

        self._state = ActuatorState.CONNECTED
        self._address = candidate
        self._emit(ActuatorState.CONNECTED, detail=candidate, clear_error=True)
        LOGGER.info("Smart bulb connected at %s", candidate)
        return True

    async def set_color(self, color: BulbColor) -> bool:
        """Send a color command. No-op unless connected; failures are swallowed."""

        address = self.address
        if address is None:
            return False

        try:
            payload = await self._post(
                constants.BULB_COLOR_PATH,
                {"bulbIP": address, "color": color.hex, "level": color.value},
                error_type=ActuatorCommandError,
            )
            if isinstance(payload, dict) and payload.get("success") is False:
                raise ActuatorCommandError("command rejected")
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            LOGGER.warning(
                "Smart bulb color %s for %s failed: %s", color.value, address, exc
            )
            return False

        LOGGER.debug("Smart bulb %s set to %s", address, color.hex)
        return True

    async def aclose(self) -> None:
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

    async def _post(
        self,
        path: str,
        body: dict[str, Any],
        *,
        error_type: type[Exception] = ActuatorConnectError,
    ) -> Any:
        session = await self._ensure_session()
        url = f"{self._base_url}{path}"

        async with asyncio.timeout(self.config.request_timeout_seconds):
            async with session.post(url, json=body) as response:
                if not 200 <= response.status < 300:
                    detail = await response.text()
                    raise error_type(
                        f"status {response.status}: {detail.strip()[:200]}"
                    )
                return await response.json(content_type=None)

    def _fail(self, reason: str, message: str) -> None:
        self._state = ActuatorState.FAILED
        self._address = None
        self._emit(ActuatorState.FAILED, detail=reason, error=message)

    def _emit(
        self,
        state: ActuatorState,
        *,
        detail: Optional[str] = None,
        error: Optional[str] = None,
        clear_error: bool = False,
    ) -> None:
        if self._on_event is None:
            return
        self._on_event(
            LinkStateEvent(
                link=Link.ACTUATOR,
                state=state,
                detail=detail,
                error=error,
                clear_error=clear_error,
            )
        )
