"""Configuration loader for pulse-relay."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import constants


@dataclass(slots=True)
class SensorConfig:
    address: Optional[str] = None
    scan_timeout_seconds: float = 10.0
    auto_pair: bool = False


@dataclass(slots=True)
class ChannelConfig:
    url: str = constants.DEFAULT_CHANNEL_URL
    heartbeat_seconds: float = 30.0
    auto_open: bool = True


@dataclass(slots=True)
class ActuatorConfig:
    base_url: str = constants.DEFAULT_ACTUATOR_BASE_URL
    bulb_ip: Optional[str] = None
    request_timeout_seconds: float = 5.0


@dataclass(slots=True)
class RelayConfig:
    history_size: int = constants.HISTORY_CAPACITY
    sink_queue_size: int = 16


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    relay_level: Optional[str] = None
    path: Optional[Path] = None
    log_network: bool = False


@dataclass(slots=True)
class StatusConfig:
    enabled: bool = True
    host: str = constants.DEFAULT_STATUS_HOST
    port: int = constants.DEFAULT_STATUS_PORT


@dataclass(slots=True)
class PulseRelayConfig:
    sensor: SensorConfig
    channel: ChannelConfig
    actuator: ActuatorConfig
    relay: RelayConfig
    logging: LoggingConfig
    status: StatusConfig
    raw: ConfigParser
    path: Path


def default_config() -> PulseRelayConfig:
    """Return an in-memory configuration populated with defaults."""

    parser = ConfigParser()
    parser.read_dict(_defaults())
    return PulseRelayConfig(
        sensor=SensorConfig(),
        channel=ChannelConfig(),
        actuator=ActuatorConfig(),
        relay=RelayConfig(),
        logging=LoggingConfig(),
        status=StatusConfig(),
        raw=parser,
        path=constants.DEFAULT_CONFIG_PATH,
    )


def load_config(path: Optional[Path] = None) -> PulseRelayConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(_defaults())

    if config_path.exists():
        parser.read(config_path)

    sensor = SensorConfig(
        address=_optional(parser.get("sensor", "address", fallback="")),
        scan_timeout_seconds=max(
            0.1,
            parser.getfloat("sensor", "scan_timeout_seconds", fallback=10.0),
        ),
        auto_pair=parser.getboolean("sensor", "auto_pair", fallback=False),
    )

    channel = ChannelConfig(
        url=parser.get("channel", "url", fallback=constants.DEFAULT_CHANNEL_URL).strip(),
        heartbeat_seconds=max(
            0.0, parser.getfloat("channel", "heartbeat_seconds", fallback=30.0)
        ),
        auto_open=parser.getboolean("channel", "auto_open", fallback=True),
    )

    actuator = ActuatorConfig(
        base_url=parser.get(
            "actuator", "base_url", fallback=constants.DEFAULT_ACTUATOR_BASE_URL
        ).strip(),
        bulb_ip=_optional(parser.get("actuator", "bulb_ip", fallback="")),
        request_timeout_seconds=max(
            0.1,
            parser.getfloat("actuator", "request_timeout_seconds", fallback=5.0),
        ),
    )

    relay = RelayConfig(
        history_size=max(
            1,
            parser.getint(
                "relay", "history_size", fallback=constants.HISTORY_CAPACITY
            ),
        ),
        sink_queue_size=max(
            1, parser.getint("relay", "sink_queue_size", fallback=16)
        ),
    )

    log_path_value = _optional(parser.get("logging", "path", fallback=""))
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        relay_level=_optional(parser.get("logging", "relay_level", fallback="")),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_network=parser.getboolean("logging", "log_network", fallback=False),
    )

    status = StatusConfig(
        enabled=parser.getboolean("status", "enabled", fallback=True),
        host=parser.get("status", "host", fallback=constants.DEFAULT_STATUS_HOST),
        port=parser.getint("status", "port", fallback=constants.DEFAULT_STATUS_PORT),
    )

    return PulseRelayConfig(
        sensor=sensor,
        channel=channel,
        actuator=actuator,
        relay=relay,
        logging=logging_config,
        status=status,
        raw=parser,
        path=config_path,
    )


def save_config(config: PulseRelayConfig) -> None:
    """Persist the current configuration to disk."""

    config_path = config.path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as stream:
        config.raw.write(stream)


def _defaults() -> dict[str, dict[str, str]]:
    return {
        "sensor": {
            "address": "",
            "scan_timeout_seconds": "10.0",
            "auto_pair": "false",
        },
        "channel": {
            "url": constants.DEFAULT_CHANNEL_URL,
            "heartbeat_seconds": "30.0",
            "auto_open": "true",
        },
        "actuator": {
            "base_url": constants.DEFAULT_ACTUATOR_BASE_URL,
            "bulb_ip": "",
            "request_timeout_seconds": "5.0",
        },
        "relay": {
            "history_size": str(constants.HISTORY_CAPACITY),
            "sink_queue_size": "16",
        },
        "logging": {
            "level": "INFO",
            "relay_level": "",
            "path": "",
            "log_network": "false",
        },
        "status": {
            "enabled": "true",
            "host": constants.DEFAULT_STATUS_HOST,
            "port": str(constants.DEFAULT_STATUS_PORT),
        },
    }


def _optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None
