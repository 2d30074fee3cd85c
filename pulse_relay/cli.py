"""Command-line interface for pulse-relay."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from . import constants
from .app import PulseRelayApp
from .config import load_config
from .logging import configure_logging

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pulse-relay",
        description="Relay a BLE heart-rate monitor to a live feed and a smart bulb",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("start", help="Start the relay service")

    scan_parser = subparsers.add_parser(
        "scan", help="List nearby devices advertising the heart rate service"
    )
    scan_parser.add_argument(
        "--timeout", type=float, default=None, help="Scan duration in seconds"
    )

    subparsers.add_parser(
        "show-config", help="Print the resolved configuration and exit"
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)

    if args.command == "start":
        PulseRelayApp.start(config)
        return 0

    if args.command == "scan":
        configure_logging(
            config.logging.level,
            relay_level=config.logging.relay_level,
            log_network=config.logging.log_network,
        )
        timeout = args.timeout or config.sensor.scan_timeout_seconds
        return _scan(timeout)

    if args.command == "show-config":
        print(f"Configuration loaded from {config.path!s}\n")
        for section in config.raw.sections():
            print(f"[{section}]")
            for key, value in config.raw[section].items():
                print(f"{key} = {value}")
            print()
        return 0

    LOGGER.error("Unknown command: %s", args.command)
    return 1


def _scan(timeout: float) -> int:
    from .adapters import discover_heart_rate_monitors

    try:
        found = asyncio.run(discover_heart_rate_monitors(timeout))
    except Exception as exc:
        LOGGER.error("Bluetooth scan failed: %s", exc)
        return 1

    if not found:
        print("No heart rate monitors found")
        return 0

    for device, advertisement in found:
        name = device.name or advertisement.local_name or "(unnamed)"
        print(f"{device.address}  {name}  rssi={advertisement.rssi}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
