"""Heart-rate telemetry relay: BLE sensor to websocket feed and smart bulb."""

__version__ = "0.1.0"
