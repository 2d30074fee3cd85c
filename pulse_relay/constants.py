"""Constants used across the pulse-relay package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "pulse-relay"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / APP_NAME / DEFAULT_CONFIG_FILENAME

DEFAULT_RELAY_HOST = "localhost:3000"
DEFAULT_CHANNEL_URL = f"ws://{DEFAULT_RELAY_HOST}"
DEFAULT_ACTUATOR_BASE_URL = f"http://{DEFAULT_RELAY_HOST}"

DEFAULT_STATUS_HOST = "127.0.0.1"
DEFAULT_STATUS_PORT = 8765

# Standard GATT heart-rate service and measurement characteristic.
HEART_RATE_SERVICE_UUID = "0000180d-0000-1000-8000-00805f9b34fb"
HEART_RATE_MEASUREMENT_UUID = "00002a37-0000-1000-8000-00805f9b34fb"

HISTORY_CAPACITY = 20

LOW_HEART_RATE_BPM = 60
HIGH_HEART_RATE_BPM = 100

ENVELOPE_TYPE_HEART_RATE = "heartRate"

BULB_CONNECT_PATH = "/api/bulb/connect"
BULB_COLOR_PATH = "/api/bulb/color"
