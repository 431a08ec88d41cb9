"""Random numbers: hardware-style entropy and a seedable xorshift generator.

Ranged results are scaled with a multiply-high, as the hardware multiplier
does, so no modulus is needed.
"""

from __future__ import annotations

import secrets

_MASK32 = 0xFFFFFFFF


def _check_range(range: int, bits: int) -> None:
    if not 0 <= range < (1 << bits):
        raise ValueError(f"range must fit in {bits} unsigned bits")


def _entropy(bits: int) -> int:
    return secrets.randbits(bits)


def random32(range: int = 0) -> int:
    """A 32-bit entropy value, or one below ``range`` when it is non-zero."""
    _check_range(range, 32)
    value = _entropy(32)
    return value if not range else (value * range) >> 32


def random16(range: int = 0) -> int:
    """A 16-bit entropy value, or one below ``range`` when it is non-zero."""
    _check_range(range, 16)
    value = _entropy(16)
    return value if not range else (value * range) >> 16


def random8(range: int = 0) -> int:
    """An 8-bit entropy value, or one below ``range`` when it is non-zero."""
    _check_range(range, 8)
    value = _entropy(8)
    return value if not range else (value * range) >> 8


class Xorshift32:
    """Marsaglia's 32-bit xorshift generator."""

    def __init__(self, seed: int = 1) -> None:
        self.state = 1
        self.seed(seed)

    def seed(self, seed: int) -> None:
        """Set the state; a zero seed is replaced by a non-zero entropy value."""
        self.state = seed & _MASK32
        while not self.state:
            self.state = random32(0)

    def next(self) -> int:
        """Advance the state and return it."""
        x = self.state
        x ^= (x << 13) & _MASK32
        x ^= x >> 17
        x ^= (x << 5) & _MASK32
        self.state = x
        return x

    def rand32(self, range: int = 0) -> int:
        """A 32-bit value, or one below ``range`` when it is non-zero."""
        _check_range(range, 32)
        value = self.next()
        return value if not range else (value * range) >> 32

    def rand16(self, range: int = 0) -> int:
        """A 16-bit value, or one below ``range`` when it is non-zero."""
        _check_range(range, 16)
        value = self.next()
        if not range:
            return value & 0xFFFF
        return ((value * range) >> 32) & 0xFFFF

    def rand8(self, range: int = 0) -> int:
        """An 8-bit value, or one below ``range`` when it is non-zero."""
        _check_range(range, 8)
        value = self.next() & 0xFF
        return value if not range else (value * range) >> 8