"""Logging configuration helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

RELAY_LOGGER = "pulse_relay"
NETWORK_LOGGERS = ("aiohttp.access", "aiohttp.client", "bleak")


def configure_logging(
    level: str = "INFO",
    *,
    relay_level: Optional[str] = None,
    log_path: Optional[Path] = None,
    log_network: bool = False,
) -> None:
    """Configure root logging handlers and the relay's own logger.

    Parameters
    ----------
    level:
        Root log level name, e.g. "INFO".
    relay_level:
        Level for the ``pulse_relay`` loggers only. Lets link transitions and
        dropped frames be traced at DEBUG while third-party output stays at
        ``level``. When absent the relay loggers follow the root level.
    log_path:
        Optional filesystem path for a file handler. When absent, only console logging is configured.
    log_network:
        When true, keep verbose output from aiohttp and bleak to aid diagnostics.
    """

    logging.captureWarnings(True)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    logging.basicConfig(level=_level(level), format=LOG_FORMAT)

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    logging.getLogger(RELAY_LOGGER).setLevel(
        _level(relay_level) if relay_level else logging.NOTSET
    )

    network_level = logging.NOTSET if log_network else logging.WARNING
    for name in NETWORK_LOGGERS:
        logging.getLogger(name).setLevel(network_level)


def _level(name: str) -> int:
    return getattr(logging, name.strip().upper(), logging.INFO)
