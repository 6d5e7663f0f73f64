"""
chip8_vm - CHIP-8 Virtual Machine
=================================

This package emulates the CHIP-8 virtual machine: a 4 KB address space,
sixteen 8-bit registers, a call stack, delay and sound timers, a 16-key
keypad and a 64x32 monochrome framebuffer, driven by the full CHIP-8
instruction set.

Main Components
---------------
- **emulator**: the virtual machine engine and its host-facing API
- **cli**: `chip8run`, a headless ROM runner for automation and smoke tests
- **errors**: exception hierarchy

Quick Start
-----------
    >>> from chip8_vm import Emulator
    >>> emu = Emulator()
    >>> emu.load_rom(bytes([0x60, 0x05, 0x70, 0x03]))
    >>> emu.run(2)
    2
    >>> emu.registers["V0"]
    8

Or from the command line:
    $ chip8run maze.ch8 --frames 120
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from chip8_vm.emulator import Emulator, EmulatorConfig
from chip8_vm.errors import (
    Chip8Error,
    RomError,
    RomSizeError,
    MachineError,
    MemoryBoundsError,
    StackUnderflowError,
    StackOverflowError,
)

__all__ = [
    "__version__",
    "Emulator",
    "EmulatorConfig",
    "Chip8Error",
    "RomError",
    "RomSizeError",
    "MachineError",
    "MemoryBoundsError",
    "StackUnderflowError",
    "StackOverflowError",
]
