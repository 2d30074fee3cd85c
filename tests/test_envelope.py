import json

import pytest

from pulse_relay.colors import BulbColor, color_for
from pulse_relay.envelope import encode_heart_rate, parse_heart_rate


def test_encode_heart_rate_shape():
    assert json.dumps(encode_heart_rate(75)) == '{"type": "heartRate", "value": 75}'


def test_parse_heart_rate_envelope():
    assert parse_heart_rate('{"type": "heartRate", "value": 82}') == 82
    assert parse_heart_rate('{"type": "heartRate", "value": 82.7}') == 82


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2]",
        '{"type": "spo2", "value": 97}',
        '{"value": 80}',
        '{"type": "heartRate"}',
        '{"type": "heartRate", "value": "80"}',
        '{"type": "heartRate", "value": true}',
        '{"type": "heartRate", "value": -3}',
        '{"type": "heartRate", "value": NaN}',
        '{"type": "heartRate", "value": Infinity}',
        '{"type": "heartRate", "value": 1e400}',
    ],
)
def test_parse_ignores_other_frames(raw):
    assert parse_heart_rate(raw) is None


def test_parse_accepts_oversized_integer():
    raw = '{"type": "heartRate", "value": 1' + "0" * 400 + "}"
    value = parse_heart_rate(raw)
    assert value == 10**400
    assert color_for(value) is BulbColor.HIGH


def test_parse_ignores_integer_past_digit_limit():
    raw = '{"type": "heartRate", "value": ' + "9" * 5000 + "}"
    assert parse_heart_rate(raw) is None
