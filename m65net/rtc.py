"""Real-time clock access for the board revisions that carry one."""

from __future__ import annotations

from dataclasses import dataclass

from .hal import usleep
from .memory import Memory
from .targets import Target, detect_target

I2C_DELAY = 5000

RTC_SECONDS = 0xFFD7110
RTC_MINUTES = 0xFFD7111
RTC_HOURS = 0xFFD7112
RTC_MDAY = 0xFFD7113
RTC_MONTH = 0xFFD7114
RTC_YEAR = 0xFFD7115
RTC_WDAY = 0xFFD7116
RTC_FLAGS = 0xFFD7117
RTC_CONTROL = 0xFFD7118

HOUR_24H = 0x80
HOUR_PM = 0x20
FLAG_DST = 0x20
RTC_UNLOCK = 0x41
RTC_LOCK = 0x01

_LEGACY_READ = frozenset({Target.EMULATION, Target.MEGA65R2, Target.MEGA65R3})
_LEGACY_WRITE = frozenset({Target.MEGA65R2, Target.MEGA65R3})
_SWISS = frozenset({Target.MEGA65R4, Target.MEGA65R5, Target.MEGA65R6})


def to_bcd(value: int) -> int:
    """Encode 0..99 as binary coded decimal; larger byte values give 0."""
    if not 0 <= value <= 0xFF:
        raise ValueError("value must fit in an unsigned byte")
    if value > 99:
        return 0
    tens, units = divmod(value, 10)
    return (tens << 4) | units


def from_bcd(value: int) -> int:
    """Decode a binary coded decimal byte."""
    if not 0 <= value <= 0xFF:
        raise ValueError("value must fit in an unsigned byte")
    return (value >> 4) * 10 + (value & 0x0F)


@dataclass
class RtcTime:
    """Broken-down clock time; ``year`` counts from 1900."""

    second: int = 0
    minute: int = 0
    hour: int = 0
    mday: int = 0
    month: int = 0
    year: int = 0
    wday: int = 0
    yday: int = 0
    isdst: bool = False


def _bcd(value: int) -> int:
    return to_bcd(value & 0xFF)


def get_rtc(memory: Memory) -> RtcTime:
    """Read the clock; targets without a supported clock give an all-zero time."""
    tm = RtcTime()
    target = detect_target(memory)

    def read(address: int) -> int:
        return memory.lpeek_debounced(address)

    if target in _LEGACY_READ:
        tm.second = from_bcd(read(RTC_SECONDS))
        tm.minute = from_bcd(read(RTC_MINUTES))
        hour = read(RTC_HOURS)
        if hour & HOUR_24H:
            tm.hour = from_bcd(hour & 0x3F)
        elif hour & HOUR_PM:
            tm.hour = from_bcd(hour & 0x1F) + 12
        else:
            tm.hour = from_bcd(hour & 0x1F)
        tm.mday = from_bcd(read(RTC_MDAY))
        tm.month = from_bcd(read(RTC_MONTH))
        tm.year = from_bcd(read(RTC_YEAR)) + 100
        tm.wday = from_bcd(read(RTC_WDAY))
        tm.isdst = bool(read(RTC_FLAGS) & FLAG_DST)
    elif target in _SWISS:
        tm.second = from_bcd(read(RTC_SECONDS))
        tm.minute = from_bcd(read(RTC_MINUTES))
        tm.hour = from_bcd(read(RTC_HOURS) & 0x3F)
        tm.mday = from_bcd(read(RTC_MDAY))
        tm.month = from_bcd(read(RTC_MONTH))
        tm.year = from_bcd(read(RTC_YEAR)) + 100
        tm.wday = from_bcd(read(RTC_WDAY))
        tm.isdst = False
    return tm


def _write(memory: Memory, address: int, value: int) -> None:
    usleep(I2C_DELAY)
    memory.lpoke(address, value)


def set_rtc(memory: Memory, tm: RtcTime) -> None:
    """Write the clock; targets without a supported clock are left untouched."""
    target = detect_target(memory)

    if target in _LEGACY_WRITE:
        _write(memory, RTC_CONTROL, RTC_UNLOCK)
        _write(memory, RTC_SECONDS, _bcd(tm.second))
        _write(memory, RTC_MINUTES, _bcd(tm.minute))
        if memory.lpeek_debounced(RTC_HOURS) & HOUR_24H:
            _write(memory, RTC_HOURS, _bcd(tm.hour) | HOUR_24H)
        elif tm.hour >= 12:
            _write(memory, RTC_HOURS, _bcd(tm.hour - 12) | HOUR_PM)
        else:
            _write(memory, RTC_HOURS, _bcd(tm.hour))
        _write(memory, RTC_MDAY, _bcd(tm.mday))
        _write(memory, RTC_MONTH, _bcd(tm.month))
        if 100 <= tm.year <= 199:
            _write(memory, RTC_YEAR, _bcd(tm.year - 100))
        _write(memory, RTC_WDAY, _bcd(tm.wday))
        usleep(I2C_DELAY)
        flags = memory.lpeek_debounced(RTC_FLAGS)
        if tm.isdst:
            memory.lpoke(RTC_FLAGS, flags | FLAG_DST)
        else:
            memory.lpoke(RTC_FLAGS, flags & (0xFF - FLAG_DST))
        _write(memory, RTC_CONTROL, RTC_LOCK)
    elif target in _SWISS:
        _write(memory, RTC_SECONDS, _bcd(tm.second))
        _write(memory, RTC_MINUTES, _bcd(tm.minute))
        _write(memory, RTC_HOURS, _bcd(tm.hour))
        _write(memory, RTC_MDAY, _bcd(tm.mday))
        _write(memory, RTC_MONTH, _bcd(tm.month))
        if 100 <= tm.year <= 199:
            _write(memory, RTC_YEAR, _bcd(tm.year - 100))
        _write(memory, RTC_WDAY, _bcd(tm.wday if tm.wday < 7 else 0))