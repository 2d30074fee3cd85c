from pathlib import Path

import pytest

from pulse_relay import cli


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_show_config_prints_sections(tmp_path: Path, capsys):
    config_path = tmp_path / "pulse-relay.cfg"
    config_path.write_text("[actuator]\nbulb_ip = 10.0.0.9\n", encoding="utf-8")

    exit_code = cli.main(["--config", str(config_path), "show-config"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert f"Configuration loaded from {config_path}" in output
    assert "[actuator]" in output
    assert "bulb_ip = 10.0.0.9" in output


def test_start_runs_app(tmp_path: Path, monkeypatch):
    started = []
    monkeypatch.setattr(cli.PulseRelayApp, "start", classmethod(lambda cls, config: started.append(config)))

    exit_code = cli.main(["--config", str(tmp_path / "missing.cfg"), "start"])

    assert exit_code == 0
    assert started[0].path == tmp_path / "missing.cfg"


def test_scan_prints_devices(tmp_path: Path, monkeypatch, capsys):
    class _Device:
        name = "Polar H10"
        address = "AA:BB:CC:DD:EE:FF"

    class _Advertisement:
        local_name = None
        rssi = -61

    async def _discover(timeout: float):
        assert timeout == 2.5
        return [(_Device(), _Advertisement())]

    monkeypatch.setattr("pulse_relay.adapters.discover_heart_rate_monitors", _discover)
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)

    exit_code = cli.main(["--config", str(tmp_path / "missing.cfg"), "scan", "--timeout", "2.5"])

    assert exit_code == 0
    assert "AA:BB:CC:DD:EE:FF  Polar H10  rssi=-61" in capsys.readouterr().out
