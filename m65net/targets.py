"""Detection of the hardware target the program runs on."""

from __future__ import annotations

from enum import IntEnum

from .memory import Memory

TARGET_REGISTER = 0xFFD3629


class Target(IntEnum):
    """Known hardware targets."""

    UNKNOWN = 0
    MEGA65R1 = 1
    MEGA65R2 = 2
    MEGA65R3 = 3
    MEGA65R4 = 4
    MEGA65R5 = 5
    MEGA65R6 = 6
    MEGAPHONER1 = 0x21
    MEGAPHONER4 = 0x22
    NEXYS4 = 0x40
    NEXYS4DDR = 0x41
    NEXYS4DDRWIDGET = 0x42
    QMTECHA100T = 0x60
    QMTECHA200T = 0x61
    QMTECHA325T = 0x62
    WUKONG = 0xFD
    SIMULATION = 0xFE
    EMULATION = 0xFF


def detect_target(memory: Memory) -> Target:
    """Read the target identifier register; unknown values map to ``Target.UNKNOWN``."""
    value = memory.lpeek(TARGET_REGISTER)
    try:
        return Target(value)
    except ValueError:
        return Target.UNKNOWN