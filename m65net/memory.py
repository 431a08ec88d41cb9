"""A sparse model of the 28-bit address space, with PEEK/POKE and DMA-style block operations."""

from __future__ import annotations

ADDRESS_SPACE = 1 << 28
_LINEAR_MASK = ADDRESS_SPACE - 1

DMA_COPY_CMD = 0x00
DMA_MIX_CMD = 0x01
DMA_SWAP_CMD = 0x02
DMA_FILL_CMD = 0x03

DMA_LINEAR_ADDR = 0x00
DMA_MODULO_ADDR = 0x01
DMA_HOLD_ADDR = 0x02
DMA_XYMOD_ADDR = 0x03


class Memory:
    """Byte-addressed memory. Cells that were never written read as zero."""

    def __init__(self, size: int = ADDRESS_SPACE) -> None:
        if size <= 0:
            raise ValueError("memory size must be positive")
        self.size = size
        self._cells: dict[int, int] = {}

    def _check(self, address: int) -> int:
        if not 0 <= address < self.size:
            raise IndexError(f"address {address:#x} outside memory of {self.size:#x} bytes")
        return address

    # -- single bytes and words -------------------------------------------

    def peek(self, address: int) -> int:
        """Read one byte."""
        return self._cells.get(self._check(address), 0)

    def poke(self, address: int, value: int) -> None:
        """Write one byte; the value is truncated to eight bits."""
        value &= 0xFF
        address = self._check(address)
        if value:
            self._cells[address] = value
        else:
            self._cells.pop(address, None)

    def _peek_le(self, address: int, width: int) -> int:
        return int.from_bytes(self.read(address, width), "little")

    def _poke_le(self, address: int, value: int, width: int) -> None:
        mask = (1 << (8 * width)) - 1
        self.write(address, (value & mask).to_bytes(width, "little"))

    def peek16(self, address: int) -> int:
        """Read a little-endian 16-bit word."""
        return self._peek_le(address, 2)

    def poke16(self, address: int, value: int) -> None:
        """Write a little-endian 16-bit word."""
        self._poke_le(address, value, 2)

    def peek32(self, address: int) -> int:
        """Read a little-endian 32-bit word."""
        return self._peek_le(address, 4)

    def poke32(self, address: int, value: int) -> None:
        """Write a little-endian 32-bit word."""
        self._poke_le(address, value, 4)

    # -- 28-bit linear access ---------------------------------------------

    def lpeek(self, address: int) -> int:
        """Read one byte at a 28-bit linear address."""
        return self.peek(address & _LINEAR_MASK)

    def lpoke(self, address: int, value: int) -> None:
        """Write one byte at a 28-bit linear address."""
        self.poke(address & _LINEAR_MASK, value)

    def lpeek_debounced(self, address: int) -> int:
        """Read a byte until three consecutive reads agree."""
        while True:
            first = self.lpeek(address)
            second = self.lpeek(address)
            third = self.lpeek(address)
            if first == second == third:
                return first

    # -- blocks -------------------------------------------------------------

    def read(self, address: int, count: int) -> bytes:
        """Read ``count`` bytes starting at ``address``."""
        if count < 0:
            raise ValueError("count must not be negative")
        return bytes(self.peek(address + offset) for offset in range(count))

    def write(self, address: int, data: bytes) -> None:
        """Write ``data`` starting at ``address``."""
        for offset, value in enumerate(data):
            self.poke(address + offset, value)

    def lcopy(self, source: int, destination: int, count: int) -> None:
        """Copy ``count`` bytes forward, one byte at a time, as the DMA does."""
        if count < 0:
            raise ValueError("count must not be negative")
        for offset in range(count):
            self.lpoke(destination + offset, self.lpeek(source + offset))

    def lfill(self, destination: int, value: int, count: int) -> None:
        """Fill ``count`` bytes with ``value``."""
        self.lfill_skip(destination, value, count, 1)

    def lfill_skip(self, destination: int, value: int, count: int, skip: int) -> None:
        """Fill ``count`` bytes with ``value``, stepping ``skip`` bytes each time."""
        if count < 0:
            raise ValueError("count must not be negative")
        if skip < 0:
            raise ValueError("skip must not be negative")
        for step in range(count):
            self.lpoke(destination + step * skip, value)

    def io_enable(self) -> None:
        """Unlock the extended I/O registers and select full speed."""
        self.poke(0xD02F, 0x47)
        self.poke(0xD02F, 0x53)
        self.poke(0, 65)