import logging
from pathlib import Path

import pytest

from pulse_relay.logging import RELAY_LOGGER, configure_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    previous = list(root.handlers)
    previous_level = root.level
    touched = [RELAY_LOGGER, "bleak", "aiohttp.access", "aiohttp.client"]
    previous_levels = {name: logging.getLogger(name).level for name in touched}

    yield root

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in previous:
        root.addHandler(handler)
    root.setLevel(previous_level)
    for name, level in previous_levels.items():
        logging.getLogger(name).setLevel(level)


def test_configure_logging_adds_file_handler(tmp_path: Path, restore_logging):
    log_path = tmp_path / "logs" / "pulse-relay.log"

    configure_logging("debug", log_path=log_path)

    root = restore_logging
    assert root.level == logging.DEBUG
    assert log_path.parent.is_dir()
    assert any(isinstance(handler, logging.FileHandler) for handler in root.handlers)
    assert logging.getLogger("bleak").level == logging.WARNING
    assert logging.getLogger(RELAY_LOGGER).level == logging.NOTSET


def test_relay_level_applies_to_package_loggers_only(restore_logging):
    configure_logging("WARNING", relay_level="debug")

    assert restore_logging.level == logging.WARNING
    assert logging.getLogger(RELAY_LOGGER).level == logging.DEBUG
    assert logging.getLogger("pulse_relay.adapters.channel").isEnabledFor(logging.DEBUG)
    assert not logging.getLogger("aiohttp.client").isEnabledFor(logging.INFO)

    configure_logging("WARNING")

    assert logging.getLogger(RELAY_LOGGER).level == logging.NOTSET
    assert not logging.getLogger("pulse_relay.relay").isEnabledFor(logging.INFO)


def test_log_network_keeps_library_output(restore_logging):
    configure_logging("INFO", log_network=True)

    assert logging.getLogger("bleak").level == logging.NOTSET
    assert logging.getLogger("aiohttp.access").isEnabledFor(logging.INFO)
