"""
Memory Subsystem for CHIP-8 VM
==============================

Memory Map:
    $000-$04F  Reserved (unused, zero)
    $050-$09F  Built-in hexadecimal font (16 glyphs x 5 bytes)
    $0A0-$1FF  Reserved (unused, zero)
    $200-$FFF  Program ROM and program data

Everything below $200 belongs to the engine. The running program may read
it (sprites from the font, for instance) but its stores (Fx33, Fx55) are
refused there. The framebuffer is NOT memory-mapped; it lives in
display.py.

All accesses are bounds-checked and raise MemoryBoundsError instead of
wrapping or clamping.
"""

import logging

from ..errors import MemoryBoundsError, RomSizeError


logger = logging.getLogger(__name__)


MEMORY_SIZE = 0x1000
PROGRAM_START = 0x200
FONT_ADDRESS = 0x050
FONT_GLYPH_SIZE = 5

# Hex digit glyphs 0-F, 4 pixels wide (high nibble), 5 rows tall
FONTSET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


def font_address(digit: int) -> int:
    """Address of the 5-byte glyph for hex digit 0-F."""
    return FONT_ADDRESS + (digit & 0xF) * FONT_GLYPH_SIZE


class Memory:
    """
    Flat 4 KB byte-addressable memory.

    Two write paths exist:
    - write()/write_bytes(): engine and host access, anywhere in $000-$FFF
    - store()/store_bytes(): program-visible stores, $200-$FFF only

    Example:
        >>> mem = Memory()
        >>> mem.write_program(bytes([0x60, 0x05]))
        >>> hex(mem.read(0x200))
        '0x60'
    """

    SIZE = MEMORY_SIZE
    PROGRAM_START = PROGRAM_START
    PROGRAM_CAPACITY = MEMORY_SIZE - PROGRAM_START

    def __init__(self):
        self._data = bytearray(self.SIZE)
        self.reset()

    def reset(self) -> None:
        """Zero all memory and reload the built-in font."""
        self._data[:] = bytes(self.SIZE)
        self._data[FONT_ADDRESS:FONT_ADDRESS + len(FONTSET)] = FONTSET

    def write_program(self, data: bytes) -> None:
        """
        Reset memory and copy a ROM image to $200.

        Args:
            data: Raw ROM bytes (no header)

        Raises:
            RomSizeError: If the image is larger than program memory
        """
        if len(data) > self.PROGRAM_CAPACITY:
            raise RomSizeError(len(data), self.PROGRAM_CAPACITY)

        self.reset()
        self._data[PROGRAM_START:PROGRAM_START + len(data)] = data
        logger.debug(f"Loaded {len(data)} byte program at ${PROGRAM_START:03X}")

    def _check_range(self, address: int, count: int = 1) -> None:
        if address < 0 or address + count > self.SIZE:
            # Report the first cell that falls outside
            bad = address if address < 0 or address >= self.SIZE else self.SIZE
            raise MemoryBoundsError(bad)

    def read(self, address: int) -> int:
        """
        Read byte from memory.

        Raises:
            MemoryBoundsError: If address is outside $000-$FFF
        """
        self._check_range(address)
        return self._data[address]

    def write(self, address: int, value: int) -> None:
        """
        Write byte to memory (value masked to 8 bits).

        Raises:
            MemoryBoundsError: If address is outside $000-$FFF
        """
        self._check_range(address)
        self._data[address] = value & 0xFF

    def read_bytes(self, address: int, count: int) -> bytes:
        """Read a block; the whole block must lie inside memory."""
        self._check_range(address, count)
        return bytes(self._data[address:address + count])

    def write_bytes(self, address: int, data: bytes) -> None:
        """Write a block; nothing is written unless the whole block fits."""
        self._check_range(address, len(data))
        self._data[address:address + len(data)] = bytes(b & 0xFF for b in data)

    def store(self, address: int, value: int) -> None:
        """
        Program-visible byte store.

        Raises:
            MemoryBoundsError: If address is outside $200-$FFF
        """
        self.store_bytes(address, bytes([value & 0xFF]))

    def store_bytes(self, address: int, data: bytes) -> None:
        """Program-visible block store into $200-$FFF."""
        if address < PROGRAM_START:
            raise MemoryBoundsError(
                address,
                f"Store into reserved memory at ${address:03X}",
            )
        self.write_bytes(address, data)
