"""
CHIP-8 Virtual Machine
======================

The engine behind a CHIP-8 interpreter: memory, registers, call stack,
timers, keypad, framebuffer and the full instruction set. Windowing, audio
and file dialogs belong to the host; the engine only consumes ROM bytes
and key states and produces a framebuffer and a "beep" flag.

Quick Start
-----------

Basic usage::

    >>> from chip8_vm.emulator import Emulator, EmulatorConfig
    >>> emu = Emulator(EmulatorConfig(instructions_per_frame=11))
    >>> emu.load_rom_file("maze.ch8")
    >>> for _ in range(60):
    ...     emu.run_frame()
    >>> print(emu.display_text)

Driving the engine from a host loop::

    >>> emu.poll_keys({"Q", "W"})       # physical keys held this frame
    >>> emu.run(emu.config.instructions_per_frame)
    >>> emu.tick_timers()
    >>> pixels = emu.framebuffer()      # 2048 cells of 0/1
    >>> beep = emu.sound_active()

Module Structure
----------------

- `emulator.py`: Emulator class and EmulatorConfig (host API)
- `cpu.py`: Instruction engine and register file
- `decoder.py`: Opcode word to Instruction decoding
- `memory.py`: 4 KB address space and built-in font
- `display.py`: 64x32 framebuffer and sprite drawing
- `keypad.py`: 16-key keypad and physical key map
- `timers.py`: Delay and sound timers
"""

# Main entry point
from .emulator import Emulator, EmulatorConfig, DEFAULT_INSTRUCTIONS_PER_FRAME

# Instruction engine
from .cpu import Chip8CPU, CPUState, RunMode, STACK_DEPTH, make_random_source
from .decoder import Instruction, Operation, decode

# Memory subsystem
from .memory import (
    Memory,
    FONTSET,
    FONT_ADDRESS,
    MEMORY_SIZE,
    PROGRAM_START,
    font_address,
)

# I/O state
from .display import Display, DisplayState, WIDTH, HEIGHT
from .keypad import Keypad, KEYMAP, NUM_KEYS
from .timers import Timers

__all__ = [
    # Main API
    "Emulator",
    "EmulatorConfig",
    "DEFAULT_INSTRUCTIONS_PER_FRAME",

    # CPU
    "Chip8CPU",
    "CPUState",
    "RunMode",
    "STACK_DEPTH",
    "make_random_source",
    "Instruction",
    "Operation",
    "decode",

    # Memory
    "Memory",
    "FONTSET",
    "FONT_ADDRESS",
    "MEMORY_SIZE",
    "PROGRAM_START",
    "font_address",

    # Display
    "Display",
    "DisplayState",
    "WIDTH",
    "HEIGHT",

    # Keypad
    "Keypad",
    "KEYMAP",
    "NUM_KEYS",

    # Timers
    "Timers",
]
