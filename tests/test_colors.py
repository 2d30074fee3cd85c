import pytest

from pulse_relay.colors import BulbColor, color_for


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (-5, BulbColor.LOW),
        (0, BulbColor.LOW),
        (59, BulbColor.LOW),
        (60, BulbColor.NORMAL),
        (99, BulbColor.NORMAL),
        (100, BulbColor.HIGH),
        (1000, BulbColor.HIGH),
    ],
)
def test_color_thresholds(value, expected):
    assert color_for(value) is expected


def test_color_codes():
    assert BulbColor.LOW.hex == "#00ff00"
    assert BulbColor.NORMAL.hex == "#ffff00"
    assert BulbColor.HIGH.hex == "#ff0000"
    assert BulbColor.NORMAL.value == "normal"
