"""Text console on top of the VIC-IV screen and colour RAM."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import IntEnum, IntFlag

from .memory import Memory

VIC_BASE = 0xD000
COLOR_RAM_BASE = 0xFF80000
KEY_REGISTER = 0xD610
KEYMOD_REGISTER = 0xD611
PALETTE_REGISTER = 0xD070

LOWERCASE_CHARSET = 0x2D800
UPPERCASE_CHARSET = 0x2D000

CINPUT_ACCEPT_NUMERIC = 1
CINPUT_ACCEPT_LETTER = 2
CINPUT_ACCEPT_ALL = 4
CINPUT_NO_AUTOTRANSLATE = 8
CINPUT_ACCEPT_ALPHA = CINPUT_ACCEPT_NUMERIC | CINPUT_ACCEPT_LETTER

_HEX_DIGITS = b"0123456789ABCDEF"
_CURSOR_CHAR = 224
_KEY_RETURN = 13
_KEY_DELETE = 20


class Colour(IntEnum):
    """Default palette colours."""

    BLACK = 0
    WHITE = 1
    RED = 2
    CYAN = 3
    PURPLE = 4
    GREEN = 5
    BLUE = 6
    YELLOW = 7
    ORANGE = 8
    BROWN = 9
    PINK = 10
    GREY1 = 11
    DARKGREY = 11
    GREY2 = 12
    GREY = 12
    MEDIUMGREY = 12
    LIGHTGREEN = 13
    LIGHTBLUE = 14
    GREY3 = 15
    LIGHTGREY = 15


class Attribute(IntFlag):
    """Extended text attributes held in the upper nibble of a colour."""

    BLINK = 0x10
    REVERSE = 0x20
    HIGHLIGHT = 0x40
    UNDERLINE = 0x80


class BoxStyle(IntEnum):
    """Border styles for :meth:`Console.box`."""

    NONE = 0
    INNER = 1
    MID = 2
    OUTER = 3
    ROUND = 4


_TOP_LEFT = (0x20, 0x20, 0x70, 0x4F, 0x55)
_TOP_RIGHT = (0x20, 0x20, 0x6E, 0x50, 0x49)
_BOTTOM_LEFT = (0x20, 0x20, 0x6D, 0x4C, 0x4A)
_BOTTOM_RIGHT = (0x20, 0x20, 0x7D, 0x7A, 0x4B)
_HORZ_TOP = (0x20, 0x64, 0x43, 0x77, 0x43)
_HORZ_BOTTOM = (0x20, 0x63, 0x43, 0x6F, 0x43)
_VERT_RIGHT = (0x20, 0x74, 0x5D, 0x6A, 0x5D)
_VERT_LEFT = (0x20, 0x6A, 0x5D, 0x74, 0x5D)


@dataclass
class Rect:
    """A rectangle of character cells, edges inclusive."""

    left: int
    top: int
    right: int
    bottom: int


def petscii_to_screencode(c: int) -> int:
    """Convert one PETSCII code to a screen code."""
    if not 0 <= c <= 0xFF:
        raise ValueError("character code must fit in a byte")
    if 64 <= c <= 95:
        return c - 64
    if c >= 192:
        return c - 128
    if 96 <= c < 192:
        return c - 32
    return c


def petscii_to_screencode_s(s: Iterable[int]) -> bytes:
    """Convert a PETSCII byte string to screen codes."""
    return bytes(petscii_to_screencode(c) for c in s)


def _petscii(text: str | bytes) -> bytes:
    if isinstance(text, (bytes, bytearray)):
        return bytes(text)
    return bytes(ord(c) & 0xFF for c in text.swapcase())


def escape_hash(text: str | bytes) -> int:
    """Hash of a cprintf escape name (text is taken as PETSCII)."""
    h = 277
    for c in _petscii(text):
        h = (h * 33 + c) & 0xFF
    return h


class Console:
    """Console state and drawing operations over a memory model."""

    def __init__(self, memory: Memory) -> None:
        self.memory = memory
        self.on_idle: Callable[[], None] | None = None
        self._colour = int(Colour.WHITE)
        self._x = 0
        self._y = 0
        memory.poke(0xD02F, 0x47)
        memory.poke(0xD02F, 0x53)
        self.set_hotregs(False)
        self.set_lowercase()
        self._width = 80 if self._reg(0x31) & 128 else 40
        self._height = 50 if self._reg(0x31) & 8 else 25
        self.flushkeybuf()
        self._escapes: dict[int, tuple[Callable[[int], None], int]] = {
            1: (self.moveleft, 0),
            7: (self.moveright, 0),
            10: (self.moveup, 0),
            22: (self._clear_home, 0),
            30: (lambda _arg: self.gohome(), 0),
            49: (self.underline, 0),
            57: (self.text_color, Colour.GREY1),
            58: (self.text_color, Colour.GREY2),
            59: (self.text_color, Colour.GREY3),
            64: (self.text_color, Colour.CYAN),
            68: (self.text_color, Colour.LIGHTBLUE),
            72: (self.text_color, Colour.LIGHTGREEN),
            96: (self.blink, 1),
            139: (self.revers, 0),
            140: (self.text_color, Colour.PURPLE),
            147: (self.underline, 1),
            151: (self.text_color, Colour.BROWN),
            158: (self.blink, 0),
            168: (self.text_color, Colour.WHITE),
            173: (self.revers, 1),
            191: (self.text_color, Colour.YELLOW),
            199: (self.text_color, Colour.PINK),
            206: (self.text_color, Colour.BLACK),
            215: (self.text_color, Colour.ORANGE),
            216: (self.text_color, Colour.BLUE),
            220: (self.text_color, Colour.GREEN),
            240: (self.text_color, Colour.RED),
            249: (self.movedown, 0),
        }

    # -- registers -----------------------------------------------------------

    def _reg(self, offset: int) -> int:
        return self.memory.peek(VIC_BASE + offset)

    def _set_reg(self, offset: int, value: int) -> None:
        self.memory.poke(VIC_BASE + offset, value)

    def _set_bits(self, offset: int, mask: int, enabled: bool) -> None:
        value = self._reg(offset)
        self._set_reg(offset, value | mask if enabled else value & ~mask & 0xFF)

    @property
    def current_colour(self) -> int:
        """The current text colour byte, attributes included."""
        return self._colour

    # -- screen configuration ------------------------------------------------

    def set_screen_address(self, address: int) -> None:
        self._set_reg(0x60, address & 0xFF)
        self._set_reg(0x61, (address >> 8) & 0xFF)
        self._set_reg(0x62, (address >> 16) & 0xFF)
        self._set_reg(0x63, (self._reg(0x63) & 0x0F) | ((address & 0xF000000) >> 24))

    def screen_address(self) -> int:
        return (
            (self._reg(0x63) & 7) << 24
            | self._reg(0x62) << 16
            | self._reg(0x61) << 8
            | self._reg(0x60)
        )

    def set_charset_address(self, address: int) -> None:
        self._set_reg(0x68, address & 0xFF)
        self._set_reg(0x69, (address >> 8) & 0xFF)
        self._set_reg(0x6A, (address >> 16) & 0xFF)

    def charset_address(self) -> int:
        return self._reg(0x68) | self._reg(0x69) << 8 | self._reg(0x6A) << 16

    def set_colour_ram_offset(self, offset: int) -> None:
        self._set_reg(0x64, offset & 0xFF)
        self._set_reg(0x65, (offset >> 8) & 0xFF)

    def colour_ram_offset(self) -> int:
        return self._reg(0x64) | self._reg(0x65) << 8

    def set_screen_size(self, width: int, height: int) -> None:
        """Select 40/80 columns and 25/50 rows; other values are ignored."""
        if width == 80:
            self._set_bits(0x31, 128, True)
            self.memory.poke(0xD04C, 0x50)
        elif width == 40:
            self._set_bits(0x31, 128, False)
            self.memory.poke(0xD04C, 0x4E)
        if height == 50:
            self._set_bits(0x31, 8, True)
        elif height == 25:
            self._set_bits(0x31, 8, False)
        if width in (40, 80):
            self._width = width
        if height in (25, 50):
            self._height = height

    def screen_size(self) -> tuple[int, int]:
        return self._width, self._height

    def set_16bit_charmode(self, enabled: bool) -> None:
        self._set_bits(0x54, 1, bool(enabled))

    def set_hotregs(self, enabled: bool) -> None:
        self._set_bits(0x5D, 128, bool(enabled))

    def set_extended_attrib(self, enabled: bool) -> None:
        self._set_bits(0x31, 32, bool(enabled))

    def set_lowercase(self) -> None:
        self.set_charset_address(LOWERCASE_CHARSET)

    def set_uppercase(self) -> None:
        self.set_charset_address(UPPERCASE_CHARSET)

    def toggle_case(self) -> None:
        self.memory.poke(0xD018, self.memory.peek(0xD018) ^ 0x02)

    def clrscr(self) -> None:
        """Clear the screen with spaces in the current colour."""
        count = self._width * self._height * (2 if self._reg(0x54) & 1 else 1)
        self.memory.lfill(self.screen_address(), 0x20, count)
        self.memory.lfill(COLOR_RAM_BASE, self._colour, count)

    def _clear_home(self, _arg: int = 0) -> None:
        self.clrscr()
        self.gohome()

    # -- colours and attributes ----------------------------------------------

    def border_color(self, colour: int) -> None:
        self._set_reg(0x20, colour)

    def bg_color(self, colour: int) -> None:
        self._set_reg(0x21, colour)

    def text_color(self, colour: int) -> None:
        """Set the colour nibble, keeping attributes."""
        self._colour = (self._colour & 0xF0) | (int(colour) & 0x0F)

    def cell_color(self, x: int, y: int, colour: int) -> None:
        self.memory.lpoke(COLOR_RAM_BASE + y * self._width + x, colour)

    def _attribute(self, mask: int, enable: int) -> None:
        if enable:
            self._colour |= mask
        else:
            self._colour &= ~mask & 0xFF

    def revers(self, enable: int) -> None:
        self._attribute(Attribute.REVERSE, enable)

    def highlight(self, enable: int) -> None:
        self._attribute(Attribute.HIGHLIGHT, enable)

    def blink(self, enable: int) -> None:
        self._attribute(Attribute.BLINK, enable)

    def underline(self, enable: int) -> None:
        self._attribute(Attribute.UNDERLINE, enable)

    def altpal(self, enable: int) -> None:
        self._attribute(Attribute.HIGHLIGHT | Attribute.REVERSE, enable)

    def clear_attr(self) -> None:
        self._colour &= 0x0F

    # -- cursor --------------------------------------------------------------

    def gohome(self) -> None:
        self.gotoxy(0, 0)

    def gotoxy(self, x: int, y: int) -> None:
        self._x = x & 0xFF
        self._y = y & 0xFF

    def gotox(self, x: int) -> None:
        self._x = x & 0xFF

    def gotoy(self, y: int) -> None:
        self._y = y & 0xFF

    def moveup(self, count: int) -> None:
        self._y = (self._y - count) & 0xFF

    def movedown(self, count: int) -> None:
        self._y = (self._y + count) & 0xFF

    def moveleft(self, count: int) -> None:
        self._x = (self._x - count) & 0xFF

    def moveright(self, count: int) -> None:
        self._x = (self._x + count) & 0xFF

    def wherex(self) -> int:
        return self._x

    def wherey(self) -> int:
        return self._y

    # -- output --------------------------------------------------------------

    def _offset(self, x: int, y: int) -> int:
        return y * self._width + x

    def cputc(self, c: int) -> None:
        self.cputcxy(self._x, self._y, c)

    def cputnc(self, count: int, c: int) -> None:
        self.cputncxy(self._x, self._y, count, c)

    def cputhex(self, n: int, prec: int) -> None:
        """Write ``$`` and the last ``prec`` hex digits of a 32-bit number."""
        if not 0 <= prec <= 8:
            raise ValueError("precision must be 0..8 digits")
        digits = bytes(_HEX_DIGITS[(n >> shift) & 0xF] for shift in range(28, -4, -4))
        text = b"$" + digits
        self.cputs(b"$" + text[9 - prec:9] if prec else b"$")

    def cputdec(self, n: int, padding: int, leading_zeros: int) -> None:
        """Write a decimal number with extra leading zeros; padding is ignored."""
        digits = str(n & 0xFFFFFFFF).encode()[-10:]
        zeros = min(max(leading_zeros, 0), 10 - len(digits))
        self.cputs(b"0" * zeros + digits)

    def cputs(self, s: bytes) -> None:
        self.cputsxy(self._x, self._y, s)

    def cputsxy(self, x: int, y: int, s: bytes) -> None:
        data = bytes(s)[:0xFF]
        offset = self._offset(x, y)
        self.memory.write(self.screen_address() + offset, data)
        self.memory.lfill(COLOR_RAM_BASE + offset, self._colour, len(data))
        self._y = (y + (x + len(data)) // self._width) & 0xFF
        self._x = ((x + len(data)) % self._width) & 0xFF

    def cputcxy(self, x: int, y: int, c: int) -> None:
        offset = self._offset(x, y)
        self.memory.lpoke(self.screen_address() + offset, c)
        self.memory.lpoke(COLOR_RAM_BASE + offset, self._colour)
        if x == self._width - 1:
            self._x, self._y = 0, (y + 1) & 0xFF
        else:
            self._x, self._y = (x + 1) & 0xFF, y & 0xFF

    def cputncxy(self, x: int, y: int, count: int, c: int) -> None:
        offset = self._offset(x, y)
        self.memory.lfill(self.screen_address() + offset, c, count)
        self.memory.lfill(COLOR_RAM_BASE + offset, self._colour, count)
        self._y = (y + (x + count) // self._width) & 0xFF
        self._x = ((x + count) % self._width) & 0xFF

    def cprintf(self, fmt: str | bytes, translate: bool = False) -> int:
        """Print text with ``{name}`` escapes; ``{{`` prints a literal brace."""
        raw = _petscii(fmt) if isinstance(fmt, str) and translate else (
            bytes(fmt) if isinstance(fmt, (bytes, bytearray)) else bytes(ord(c) & 0xFF for c in fmt)
        )
        names = fmt if isinstance(fmt, (bytes, bytearray)) else _petscii(fmt)
        i = 0
        while i < len(raw):
            ch = raw[i]
            if ch == ord("{"):
                if i + 1 < len(raw) and raw[i + 1] == ord("{"):
                    self.cputc(ord("{"))
                    i += 2
                    continue
                end = raw.find(b"}", i + 1)
                if end < 0:
                    raise ValueError("unterminated escape in format")
                fn, arg = self._escapes.get(escape_hash(names[i + 1:end]), (None, 0))
                if fn is not None:
                    fn(int(arg))
                i = end + 1
                continue
            if ch == ord("\n"):
                self.gotoxy(0, self._y + 1)
            elif ch != ord("\t"):
                self.cputc(petscii_to_screencode(ch) if translate else ch)
            i += 1
        return 0

    # -- drawing -------------------------------------------------------------

    def fillrect(self, rc: Rect, ch: int, colour: int) -> None:
        length = (rc.right - rc.left) & 0xFF
        for row in range(rc.top, rc.bottom + 1):
            offset = self._offset(rc.left, row)
            self.memory.lfill(self.screen_address() + offset, ch, length)
            self.memory.lfill(COLOR_RAM_BASE + offset, colour, length)

    def box(self, rc: Rect, colour: int, style: int, clear: bool, shadow: bool) -> None:
        """Draw a framed box, optionally cleared and with a drop shadow."""
        style = BoxStyle(style)
        length = (rc.right - rc.left) & 0xFF
        previous = self._colour
        self.text_color(colour)
        if clear:
            self.fillrect(rc, 0x20, self._colour)
        self.cputcxy(rc.left, rc.top, _TOP_LEFT[style])
        self.cputcxy(rc.left, rc.bottom, _BOTTOM_LEFT[style])
        self.cputcxy(rc.right, rc.top, _TOP_RIGHT[style])
        self.cputcxy(rc.right, rc.bottom, _BOTTOM_RIGHT[style])
        for i in range(1, length):
            self.cputcxy(rc.left + i, rc.top, _HORZ_TOP[style])
            self.cputcxy(rc.left + i, rc.bottom, _HORZ_BOTTOM[style])
        for row in range(rc.top + 1, rc.bottom):
            self.cputcxy(rc.left, row, _VERT_LEFT[style])
            self.cputcxy(rc.right, row, _VERT_RIGHT[style])
        if shadow and rc.bottom < self._height and rc.right < self._width:
            self.memory.lfill(
                COLOR_RAM_BASE + (rc.bottom + 1) * self._width + 1 + rc.left,
                Colour.DARKGREY,
                length,
            )
            for row in range(rc.top + 1, rc.bottom + 2):
                self.cell_color(rc.right + 1, row, Colour.DARKGREY)
        self.text_color(previous)

    def hline(self, x: int, y: int, length: int, style: int) -> None:
        self.cputncxy(x, y, length, style)

    def vline(self, x: int, y: int, length: int, style: int) -> None:
        for i in range(length):
            self.cputcxy(x, y + i, style)

    # -- keyboard ------------------------------------------------------------

    def cgetc(self) -> int:
        """Wait for a key and take it from the buffer.

        While no key is pending ``on_idle`` is called; without it, EOFError.
        """
        while not (key := self.memory.peek(KEY_REGISTER)):
            if self.on_idle is None:
                raise EOFError("no key pending")
            self.on_idle()
        self.memory.poke(KEY_REGISTER, 0)
        return key

    def kbhit(self) -> int:
        return self.memory.peek(KEY_REGISTER)

    def getkeymodstate(self) -> int:
        return self.memory.peek(KEYMOD_REGISTER)

    def flushkeybuf(self) -> None:
        while self.memory.peek(KEY_REGISTER):
            self.memory.poke(KEY_REGISTER, 0)

    def cinput(self, buflen: int, flags: int = CINPUT_ACCEPT_ALL) -> bytes:
        """Read a line of up to ``buflen - 1`` keys, echoing it at the cursor."""
        if buflen <= 0:
            return b""
        sx, sy = self._x, self._y
        self.flushkeybuf()
        buffer = bytearray()
        while True:
            if buffer:
                self.cputsxy(sx, sy, bytes(buffer))
            self.blink(1)
            self.cputc(_CURSOR_CHAR)
            self.blink(0)
            ch = self.cgetc()
            if ch == _KEY_RETURN:
                break
            if ch == _KEY_DELETE and buffer:
                self.moveleft(1)
                self.cputc(0x20)
                buffer.pop()
            elif len(buffer) < buflen - 1:
                is_letter = chr(ch).isascii() and chr(ch).isalpha()
                is_digit = ord("0") <= ch <= ord("9")
                if (
                    (is_letter and flags & CINPUT_ACCEPT_LETTER)
                    or (is_digit and flags & CINPUT_ACCEPT_NUMERIC)
                    or flags & CINPUT_ACCEPT_ALL
                ):
                    if (
                        0x61 <= ch <= 0x7A
                        and self.memory.peek(0x0D18) & ~2
                        and flags & ~CINPUT_NO_AUTOTRANSLATE
                    ):
                        ch -= 0x20
                    buffer.append(ch)
        return bytes(buffer)

    # -- palettes ------------------------------------------------------------

    def _palette_reg(self) -> int:
        return self.memory.peek(PALETTE_REGISTER)

    def set_palette_bank(self, bank: int) -> None:
        self.memory.poke(PALETTE_REGISTER, (self._palette_reg() & ~0x30) | ((bank & 3) << 4))

    def palette_bank(self) -> int:
        return (self._palette_reg() & 0x30) >> 4

    def set_alt_palette_bank(self, bank: int) -> None:
        self.memory.poke(PALETTE_REGISTER, (self._palette_reg() & ~0x03) | (bank & 3))

    def alt_palette_bank(self) -> int:
        return self._palette_reg() & 0x03

    def set_mapped_palette(self, bank: int) -> None:
        self.memory.poke(PALETTE_REGISTER, (self._palette_reg() & ~0xC0) | ((bank & 3) << 6))

    def mapped_palette(self) -> int:
        return self._palette_reg() >> 6

    def set_palette_entry(self, index: int, r: int, g: int, b: int) -> None:
        index &= 0xFF
        self.memory.poke(0xD100 + index, r)
        self.memory.poke(0xD200 + index, g)
        self.memory.poke(0xD300 + index, b)