"""
CHIP-8 Instruction Engine
=========================

Fetch, decode and execute for the CHIP-8 instruction set.

Registers:
- V0-VF: 16 general 8-bit registers. VF doubles as the flag register and is
  overwritten by ADD/SUB/SUBN/SHR/SHL/DRW.
- I: 16-bit index register (memory cursor)
- PC: 16-bit program counter, starts at $200
- Call stack of up to 16 return addresses

Execution model:
- step() fetches the big-endian word at PC, decodes it, advances PC by 2
  and only then dispatches, so jumps and calls simply assign PC.
- The Fx0A key wait is an explicit run mode. While WAITING_FOR_KEY, PC
  stays on the Fx0A and every step() only re-polls the keypad.

Flag ordering: each flag-producing handler writes its result register
first and VF last, so VF always holds the flag even when X is F.
"""

import logging
import random
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, List, Optional

from ..errors import (
    MemoryBoundsError,
    StackOverflowError,
    StackUnderflowError,
)
from .decoder import Instruction, Operation, decode
from .display import Display
from .keypad import Keypad
from .memory import Memory, PROGRAM_START, font_address
from .timers import Timers


logger = logging.getLogger(__name__)


STACK_DEPTH = 16
NUM_REGISTERS = 16


class RunMode(Enum):
    """Engine run mode."""
    RUNNING = auto()
    WAITING_FOR_KEY = auto()


@dataclass
class CPUState:
    """
    Complete register-file state.

    - v: 16 registers, each 0-255
    - i, pc: 16-bit unsigned
    - stack: return addresses, most recent last
    - wait_register: register receiving the key while WAITING_FOR_KEY
    """
    v: List[int] = field(default_factory=lambda: [0] * NUM_REGISTERS)
    i: int = 0
    pc: int = PROGRAM_START
    stack: List[int] = field(default_factory=list)
    mode: RunMode = RunMode.RUNNING
    wait_register: int = 0


def make_random_source(seed: Optional[int] = None) -> Callable[[], int]:
    """Random byte source for CXNN; a fixed seed makes runs reproducible."""
    rng = random.Random(seed)
    return lambda: rng.randrange(256)


class Chip8CPU:
    """
    CHIP-8 instruction engine.

    The CPU owns the register file and drives the memory, display, keypad
    and timers it is constructed with. It performs no I/O and never
    blocks.

    Example:
        >>> cpu = Chip8CPU(Memory(), Display(), Keypad(), Timers())
        >>> cpu.memory.write_program(bytes([0x60, 0x05, 0x70, 0x03]))
        >>> _ = cpu.step(); _ = cpu.step()
        >>> cpu.v[0], hex(cpu.pc)
        (8, '0x204')
    """

    def __init__(
        self,
        memory: Memory,
        display: Display,
        keypad: Keypad,
        timers: Timers,
        random_byte: Optional[Callable[[], int]] = None,
        shift_uses_vy: bool = True,
    ):
        """
        Initialize CPU.

        Args:
            memory: 4 KB address space
            display: Framebuffer drawn by 00E0/DXYN
            keypad: Key state read by EX9E/EXA1/FX0A
            timers: Delay and sound timers
            random_byte: Source of random bytes for CXNN (default: random module)
            shift_uses_vy: 8XY6/8XYE shift VY into VX (True) or VX in place (False)
        """
        self.memory = memory
        self.display = display
        self.keypad = keypad
        self.timers = timers
        self.random_byte = random_byte or make_random_source()
        self.shift_uses_vy = shift_uses_vy
        self.state = CPUState()

        # Fired before each executed instruction: on_instruction(pc, instruction)
        self.on_instruction: Optional[Callable[[int, Instruction], None]] = None

        self._handlers: Dict[Operation, Callable[[Instruction], None]] = {
            Operation.CLS: self._op_cls,
            Operation.RET: self._op_ret,
            Operation.SYS: self._op_sys,
            Operation.JP: self._op_jp,
            Operation.CALL: self._op_call,
            Operation.SE_BYTE: self._op_se_byte,
            Operation.SNE_BYTE: self._op_sne_byte,
            Operation.SE_REG: self._op_se_reg,
            Operation.LD_BYTE: self._op_ld_byte,
            Operation.ADD_BYTE: self._op_add_byte,
            Operation.LD_REG: self._op_ld_reg,
            Operation.OR: self._op_or,
            Operation.AND: self._op_and,
            Operation.XOR: self._op_xor,
            Operation.ADD_REG: self._op_add_reg,
            Operation.SUB: self._op_sub,
            Operation.SHR: self._op_shr,
            Operation.SUBN: self._op_subn,
            Operation.SHL: self._op_shl,
            Operation.SNE_REG: self._op_sne_reg,
            Operation.LD_I: self._op_ld_i,
            Operation.JP_V0: self._op_jp_v0,
            Operation.RND: self._op_rnd,
            Operation.DRW: self._op_drw,
            Operation.SKP: self._op_skp,
            Operation.SKNP: self._op_sknp,
            Operation.LD_VX_DT: self._op_ld_vx_dt,
            Operation.LD_KEY: self._op_ld_key,
            Operation.LD_DT: self._op_ld_dt,
            Operation.LD_ST: self._op_ld_st,
            Operation.ADD_I: self._op_add_i,
            Operation.LD_FONT: self._op_ld_font,
            Operation.BCD: self._op_bcd,
            Operation.STORE: self._op_store,
            Operation.LOAD: self._op_load,
            Operation.UNKNOWN: self._op_unknown,
        }

    # ========================================
    # Register Properties
    # ========================================

    @property
    def v(self) -> List[int]:
        """General registers V0-VF (mutable list)."""
        return self.state.v

    @property
    def i(self) -> int:
        """Index register (16-bit)."""
        return self.state.i

    @i.setter
    def i(self, value: int) -> None:
        self.state.i = value & 0xFFFF

    @property
    def pc(self) -> int:
        """Program counter (16-bit)."""
        return self.state.pc

    @pc.setter
    def pc(self, value: int) -> None:
        self.state.pc = value & 0xFFFF

    @property
    def stack(self) -> List[int]:
        """Call stack, most recent return address last."""
        return self.state.stack

    @property
    def mode(self) -> RunMode:
        return self.state.mode

    @property
    def waiting_for_key(self) -> bool:
        return self.state.mode is RunMode.WAITING_FOR_KEY

    def set_register(self, index: int, value: int) -> None:
        """Set a V register, masked to 8 bits."""
        self.state.v[index & 0xF] = value & 0xFF

    def reset(self) -> None:
        """Clear registers and stack, PC to $200, run mode RUNNING."""
        self.state = CPUState()

    # ========================================
    # Fetch / Execute
    # ========================================

    def fetch(self) -> int:
        """
        Read the opcode word at PC without advancing.

        Raises:
            MemoryBoundsError: If PC or PC+1 lies outside memory
        """
        pc = self.state.pc
        if pc + 1 >= Memory.SIZE:
            raise MemoryBoundsError(
                pc + 1 if pc < Memory.SIZE else pc,
                f"Instruction fetch past end of memory at ${pc:X}",
                pc=pc,
            )
        high, low = self.memory.read_bytes(pc, 2)
        return (high << 8) | low

    def step(self) -> Optional[Instruction]:
        """
        Execute exactly one instruction.

        While waiting for a key this only re-polls the keypad.

        Returns:
            The instruction executed, or None when no instruction ran
            (still waiting, or the wait just completed)

        Raises:
            MachineError: On a memory-bounds or call-stack defect
        """
        if self.state.mode is RunMode.WAITING_FOR_KEY:
            self._poll_key_wait()
            return None

        pc = self.state.pc
        instruction = decode(self.fetch())
        if self.on_instruction is not None:
            self.on_instruction(pc, instruction)

        self.pc = pc + 2
        try:
            self._handlers[instruction.operation](instruction)
        except MemoryBoundsError as e:
            if e.pc is None:
                raise MemoryBoundsError(e.address, str(e), pc=pc) from None
            raise
        return instruction

    def execute(self, instruction: Instruction) -> None:
        """Dispatch an already-decoded instruction against the current state."""
        self._handlers[instruction.operation](instruction)

    def _poll_key_wait(self) -> None:
        key = self.keypad.first_pressed()
        if key is None:
            return
        self.set_register(self.state.wait_register, key)
        self.keypad.consume(key)
        self.state.mode = RunMode.RUNNING
        self.pc = self.state.pc + 2
        logger.debug(f"Key wait satisfied by key {key:X}")

    def _skip_if(self, condition: bool) -> None:
        if condition:
            self.pc = self.state.pc + 2

    # ========================================
    # Control Flow
    # ========================================

    def _op_cls(self, ins: Instruction) -> None:
        self.display.clear()

    def _op_ret(self, ins: Instruction) -> None:
        if not self.state.stack:
            raise StackUnderflowError(pc=self.state.pc - 2)
        self.pc = self.state.stack.pop()

    def _op_sys(self, ins: Instruction) -> None:
        # Machine-code routines of the original hardware cannot run here
        logger.debug(f"Ignoring SYS ${ins.nnn:03X}")

    def _op_jp(self, ins: Instruction) -> None:
        self.pc = ins.nnn

    def _op_call(self, ins: Instruction) -> None:
        if len(self.state.stack) >= STACK_DEPTH:
            raise StackOverflowError(len(self.state.stack) + 1, pc=self.state.pc - 2)
        self.state.stack.append(self.state.pc)
        self.pc = ins.nnn

    def _op_se_byte(self, ins: Instruction) -> None:
        self._skip_if(self.v[ins.x] == ins.nn)

    def _op_sne_byte(self, ins: Instruction) -> None:
        self._skip_if(self.v[ins.x] != ins.nn)

    def _op_se_reg(self, ins: Instruction) -> None:
        self._skip_if(self.v[ins.x] == self.v[ins.y])

    def _op_sne_reg(self, ins: Instruction) -> None:
        self._skip_if(self.v[ins.x] != self.v[ins.y])

    def _op_jp_v0(self, ins: Instruction) -> None:
        self.pc = ins.nnn + self.v[0]

    # ========================================
    # Loads and Arithmetic
    # ========================================

    def _op_ld_byte(self, ins: Instruction) -> None:
        self.set_register(ins.x, ins.nn)

    def _op_add_byte(self, ins: Instruction) -> None:
        # No carry flag for the immediate form
        self.set_register(ins.x, self.v[ins.x] + ins.nn)

    def _op_ld_reg(self, ins: Instruction) -> None:
        self.set_register(ins.x, self.v[ins.y])

    def _op_or(self, ins: Instruction) -> None:
        self.set_register(ins.x, self.v[ins.x] | self.v[ins.y])

    def _op_and(self, ins: Instruction) -> None:
        self.set_register(ins.x, self.v[ins.x] & self.v[ins.y])

    def _op_xor(self, ins: Instruction) -> None:
        self.set_register(ins.x, self.v[ins.x] ^ self.v[ins.y])

    def _op_add_reg(self, ins: Instruction) -> None:
        total = self.v[ins.x] + self.v[ins.y]
        self.set_register(ins.x, total)
        self.set_register(0xF, 1 if total > 0xFF else 0)

    def _op_sub(self, ins: Instruction) -> None:
        vx, vy = self.v[ins.x], self.v[ins.y]
        self.set_register(ins.x, vx - vy)
        self.set_register(0xF, 1 if vx >= vy else 0)

    def _op_subn(self, ins: Instruction) -> None:
        vx, vy = self.v[ins.x], self.v[ins.y]
        self.set_register(ins.x, vy - vx)
        self.set_register(0xF, 1 if vy >= vx else 0)

    def _op_shr(self, ins: Instruction) -> None:
        carry = self.v[ins.x] & 0x01
        source = self.v[ins.y] if self.shift_uses_vy else self.v[ins.x]
        self.set_register(ins.x, source >> 1)
        self.set_register(0xF, carry)

    def _op_shl(self, ins: Instruction) -> None:
        carry = (self.v[ins.x] >> 7) & 0x01
        source = self.v[ins.y] if self.shift_uses_vy else self.v[ins.x]
        self.set_register(ins.x, source << 1)
        self.set_register(0xF, carry)

    def _op_rnd(self, ins: Instruction) -> None:
        self.set_register(ins.x, self.random_byte() & ins.nn)

    # ========================================
    # Index Register and Memory
    # ========================================

    def _op_ld_i(self, ins: Instruction) -> None:
        self.i = ins.nnn

    def _op_add_i(self, ins: Instruction) -> None:
        self.i = self.state.i + self.v[ins.x]

    def _op_ld_font(self, ins: Instruction) -> None:
        self.i = font_address(self.v[ins.x])

    def _op_bcd(self, ins: Instruction) -> None:
        value = self.v[ins.x]
        digits = bytes([value // 100, (value // 10) % 10, value % 10])
        self.memory.store_bytes(self.state.i, digits)

    def _op_store(self, ins: Instruction) -> None:
        self.memory.store_bytes(self.state.i, bytes(self.v[:ins.x + 1]))

    def _op_load(self, ins: Instruction) -> None:
        data = self.memory.read_bytes(self.state.i, ins.x + 1)
        for index, value in enumerate(data):
            self.set_register(index, value)

    # ========================================
    # Display
    # ========================================

    def _op_drw(self, ins: Instruction) -> None:
        sprite = self.memory.read_bytes(self.state.i, ins.n)
        collision = self.display.draw_sprite(self.v[ins.x], self.v[ins.y], sprite)
        self.set_register(0xF, 1 if collision else 0)

    # ========================================
    # Keypad and Timers
    # ========================================

    def _op_skp(self, ins: Instruction) -> None:
        self._skip_if(self.keypad.is_pressed(self.v[ins.x] & 0xF))

    def _op_sknp(self, ins: Instruction) -> None:
        self._skip_if(not self.keypad.is_pressed(self.v[ins.x] & 0xF))

    def _op_ld_key(self, ins: Instruction) -> None:
        key = self.keypad.first_pressed()
        if key is not None:
            self.set_register(ins.x, key)
            self.keypad.consume(key)
            return

        # Park PC on this Fx0A until a key arrives
        self.state.mode = RunMode.WAITING_FOR_KEY
        self.state.wait_register = ins.x
        self.pc = self.state.pc - 2
        logger.debug(f"Waiting for key into V{ins.x:X}")

    def _op_ld_vx_dt(self, ins: Instruction) -> None:
        self.set_register(ins.x, self.timers.delay)

    def _op_ld_dt(self, ins: Instruction) -> None:
        self.timers.delay = self.v[ins.x]

    def _op_ld_st(self, ins: Instruction) -> None:
        self.timers.sound = self.v[ins.x]

    def _op_unknown(self, ins: Instruction) -> None:
        logger.warning(
            f"Unknown opcode {ins.opcode:04X} at ${self.state.pc - 2:03X}, ignored"
        )
