import pytest

from m65net.memory import Memory
from m65net.targets import Target, detect_target


@pytest.mark.parametrize(
    "target", [Target.MEGA65R3, Target.MEGA65R6, Target.NEXYS4DDR, Target.EMULATION]
)
def test_detect_known_target(target):
    mem = Memory()
    mem.lpoke(0xFFD3629, int(target))
    assert detect_target(mem) is target


def test_detect_blank_register_is_unknown():
    assert detect_target(Memory()) is Target.UNKNOWN


def test_detect_unlisted_value_is_unknown():
    mem = Memory()
    mem.lpoke(0xFFD3629, 0x99)
    assert detect_target(mem) is Target.UNKNOWN


@pytest.mark.parametrize(
    "raw, expected",
    [
        (0xFF, Target.EMULATION),
        (0x21, Target.MEGAPHONER1),
        (0x62, Target.QMTECHA325T),
    ],
)
def test_target_values_from_header(raw, expected):
    mem = Memory()
    mem.lpoke(0xFFD3629, raw)
    assert detect_target(mem) is expected