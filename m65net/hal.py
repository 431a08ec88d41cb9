"""Timing and debug output helpers."""

from __future__ import annotations

import sys
import time
from typing import TextIO

RASTER_LINE_MICROS = 64


def usleep(micros: int) -> int:
    """Sleep in whole raster lines of 64 microseconds; return the microseconds slept."""
    lines = 0
    while micros > RASTER_LINE_MICROS:
        micros -= RASTER_LINE_MICROS
        lines += 1
    slept = lines * RASTER_LINE_MICROS
    if slept:
        time.sleep(slept / 1_000_000)
    return slept


def debug_msg(msg: str, stream: TextIO | None = None) -> None:
    """Write a debug message, preceded by a carriage return."""
    out = sys.stdout if stream is None else stream
    out.write(f"\r{msg}")