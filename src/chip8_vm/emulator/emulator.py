"""
CHIP-8 VM - Main Orchestrator
=============================

This module provides the main `Emulator` class that owns one complete
machine (memory, CPU, framebuffer, keypad, timers) and exposes the API a
host loop needs.

Host contract, once per presentation frame:
    1. poll_keys() / set_keys()   - sample raw key state
    2. step() x instructions_per_frame
    3. keypad snapshot            - previous-frame buffer for edges
    4. tick_timers()              - decay delay and sound once
    5. framebuffer(), sound_active() - present

run_frame() performs steps 1-4 in that order.

Example usage:
    >>> from chip8_vm.emulator import Emulator, EmulatorConfig
    >>> emu = Emulator(EmulatorConfig(instructions_per_frame=11))
    >>> emu.load_rom_file("pong.ch8")
    >>> for _ in range(60):
    ...     emu.run_frame({"1"})
    >>> print(emu.display_text)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from .cpu import Chip8CPU, RunMode, make_random_source
from .decoder import Instruction
from .display import Display
from .keypad import Keypad
from .memory import Memory
from .timers import Timers


logger = logging.getLogger(__name__)


DEFAULT_INSTRUCTIONS_PER_FRAME = 11


@dataclass(frozen=True)
class EmulatorConfig:
    """
    Configuration for emulator initialization.

    Attributes:
        instructions_per_frame: step() calls per run_frame() (clock speed)
        shift_uses_vy: 8XY6/8XYE take their operand from VY (True) or
                       shift VX in place (False)
        seed: Seed for the default CXNN random source (None = unseeded)

    Example:
        >>> config = EmulatorConfig(instructions_per_frame=20, seed=1234)
        >>> config = EmulatorConfig.from_env()
    """
    instructions_per_frame: int = DEFAULT_INSTRUCTIONS_PER_FRAME
    shift_uses_vy: bool = True
    seed: Optional[int] = None

    def __post_init__(self):
        if self.instructions_per_frame < 1:
            raise ValueError(
                f"instructions_per_frame must be >= 1, got {self.instructions_per_frame}"
            )

    @classmethod
    def from_env(cls) -> "EmulatorConfig":
        """
        Create EmulatorConfig from environment variables.

        Environment variables (all optional):
            CHIP8_IPF: Instructions per frame (positive integer)
            CHIP8_SEED: Random seed (integer)
            CHIP8_SHIFT_VY: "0"/"false" to shift VX in place

        Invalid values are logged and the default is kept.
        """
        values: Dict[str, object] = {}

        if ipf := os.environ.get("CHIP8_IPF"):
            try:
                parsed = int(ipf)
            except ValueError:
                logger.warning(f"Ignoring invalid CHIP8_IPF={ipf!r}")
            else:
                if parsed >= 1:
                    values["instructions_per_frame"] = parsed
                else:
                    logger.warning(f"Ignoring non-positive CHIP8_IPF={ipf!r}")

        if seed := os.environ.get("CHIP8_SEED"):
            try:
                values["seed"] = int(seed, 0)
            except ValueError:
                logger.warning(f"Ignoring invalid CHIP8_SEED={seed!r}")

        if shift := os.environ.get("CHIP8_SHIFT_VY"):
            values["shift_uses_vy"] = shift.strip().lower() not in ("0", "false", "no", "off")

        return cls(**values)


class Emulator:
    """
    CHIP-8 virtual machine with a host-facing API.

    Attributes:
        config: The EmulatorConfig used to initialize this instance
        cpu: The instruction engine (registers, PC, stack)
        memory: The 4 KB address space
        display: The 64x32 framebuffer
        keypad: The 16-key keypad state
        timers: Delay and sound timers

    Example:
        >>> emu = Emulator()
        >>> emu.load_rom(bytes([0x60, 0x05, 0x70, 0x03]))
        >>> emu.run(2)
        2
        >>> emu.registers["V0"]
        8
    """

    def __init__(
        self,
        config: Optional[EmulatorConfig] = None,
        random_byte: Optional[Callable[[], int]] = None,
    ):
        """
        Initialize the emulator.

        Args:
            config: EmulatorConfig; defaults to EmulatorConfig()
            random_byte: Injectable CXNN random source. Overrides config.seed.
        """
        self.config = config or EmulatorConfig()

        self.memory = Memory()
        self.display = Display()
        self.keypad = Keypad()
        self.timers = Timers()
        self.cpu = Chip8CPU(
            self.memory,
            self.display,
            self.keypad,
            self.timers,
            random_byte=random_byte or make_random_source(self.config.seed),
            shift_uses_vy=self.config.shift_uses_vy,
        )

        self._rom: bytes = b""
        self._instruction_count = 0
        self._frame_count = 0

    # =========================================================================
    # Program Loading
    # =========================================================================

    def load_rom(self, data: bytes) -> None:
        """
        Reset the whole machine and load a ROM image at $200.

        Raises:
            RomSizeError: If the ROM does not fit in program memory
        """
        data = bytes(data)
        self.memory.write_program(data)
        self._rom = data
        self._reset_machine()
        logger.debug(f"ROM loaded ({len(data)} bytes)")

    def load_rom_file(self, path: Union[str, Path]) -> None:
        """
        Load a ROM image from disk.

        Raises:
            FileNotFoundError: If the file does not exist
            RomSizeError: If the ROM does not fit in program memory
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"ROM file not found: {path}")
        self.load_rom(path.read_bytes())

    def reset(self) -> None:
        """Reload the last ROM into a freshly reset machine."""
        self.load_rom(self._rom)

    def _reset_machine(self) -> None:
        self.cpu.reset()
        self.display.reset()
        self.keypad.clear()
        self.timers.reset()
        self._instruction_count = 0
        self._frame_count = 0

    # =========================================================================
    # Execution Control
    # =========================================================================

    def step(self) -> Optional[Instruction]:
        """
        Execute a single instruction (or re-poll the keypad while waiting).

        Returns:
            The executed Instruction, or None if no instruction ran

        Raises:
            MachineError: On a bounds or call-stack defect
        """
        instruction = self.cpu.step()
        if instruction is not None:
            self._instruction_count += 1
        return instruction

    def run(self, steps: int) -> int:
        """
        Call step() `steps` times.

        Returns:
            Number of instructions actually executed (steps spent waiting
            for a key are not counted)
        """
        executed = 0
        for _ in range(steps):
            if self.step() is not None:
                executed += 1
        return executed

    def run_frame(self, physical_keys: Optional[Iterable[str]] = None) -> int:
        """
        Run one presentation frame.

        Polls the keypad (when physical_keys is given), executes
        instructions_per_frame steps, snapshots the keypad and ticks the
        timers once.

        Args:
            physical_keys: Physical key names currently held, or None to
                           keep the current key state

        Returns:
            Number of instructions executed during the frame
        """
        if physical_keys is not None:
            self.keypad.poll(physical_keys)
        executed = self.run(self.config.instructions_per_frame)
        self.keypad.snapshot_previous()
        self.tick_timers()
        self._frame_count += 1
        return executed

    def tick_timers(self) -> None:
        """Decay delay and sound timers by one tick."""
        self.timers.tick()

    # =========================================================================
    # Frame API
    # =========================================================================

    def sound_active(self) -> bool:
        """True while the host should play its tone."""
        return self.timers.sound_active()

    def framebuffer(self) -> bytes:
        """2048 pixels (0 or 1), index = x + y * 64."""
        return self.display.framebuffer()

    def set_keys(self, states: Sequence[bool]) -> None:
        """Replace all 16 logical key states."""
        self.keypad.set_keys(states)

    def poll_keys(self, physical_keys: Iterable[str]) -> None:
        """Set key states from the physical keys currently held."""
        self.keypad.poll(physical_keys)

    def press_key(self, key: int) -> None:
        """Press a logical key (0-15)."""
        self.keypad.key_down(key)

    def release_key(self, key: int) -> None:
        """Release a logical key (0-15)."""
        self.keypad.key_up(key)

    # =========================================================================
    # Inspection
    # =========================================================================

    @property
    def display_text(self) -> str:
        """Framebuffer as 32 lines of '#' and '.'."""
        return self.display.get_text()

    @property
    def display_lines(self) -> List[str]:
        return self.display.get_text_grid()

    def render_display(self, scale: int = 4) -> bytes:
        """Framebuffer as PNG image bytes."""
        return self.display.render_image(scale)

    def read_byte(self, address: int) -> int:
        return self.memory.read(address)

    def read_bytes(self, address: int, count: int) -> bytes:
        return self.memory.read_bytes(address, count)

    @property
    def registers(self) -> Dict[str, int]:
        """
        Snapshot of the register file.

        Keys: V0-VF, I, PC, SP (stack depth), DT, ST
        """
        regs = {f"V{index:X}": value for index, value in enumerate(self.cpu.v)}
        regs["I"] = self.cpu.i
        regs["PC"] = self.cpu.pc
        regs["SP"] = len(self.cpu.stack)
        regs["DT"] = self.timers.delay
        regs["ST"] = self.timers.sound
        return regs

    @property
    def is_waiting_for_key(self) -> bool:
        return self.cpu.mode is RunMode.WAITING_FOR_KEY

    @property
    def instruction_count(self) -> int:
        """Instructions executed since the last ROM load."""
        return self._instruction_count

    @property
    def frame_count(self) -> int:
        """Frames run since the last ROM load."""
        return self._frame_count

    @property
    def rom(self) -> bytes:
        """The last loaded ROM image."""
        return self._rom

    def __repr__(self) -> str:
        return (
            f"Emulator(pc=${self.cpu.pc:03X}, i=${self.cpu.i:03X}, "
            f"mode={self.cpu.mode.name}, rom={len(self._rom)} bytes)"
        )
