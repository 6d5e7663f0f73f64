"""
CHIP-8 VM Error Hierarchy
=========================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from Chip8Error, allowing callers to catch every
machine-related error with a single except clause if desired.

Exception Hierarchy
-------------------
Chip8Error (base)
├── RomError (ROM loading)
│   └── RomSizeError - ROM does not fit in program memory
└── MachineError (fatal defects raised while executing)
    ├── MemoryBoundsError - access outside the 4 KB address space,
    │                       or a program store into reserved memory
    ├── StackUnderflowError - return with an empty call stack
    └── StackOverflowError - call nesting deeper than the stack allows

Design Philosophy
-----------------
A MachineError means the running program did something the machine cannot
represent. The engine never clamps or wraps such accesses silently; it
raises and leaves the machine state as it was just before the faulting
access, so the host can report PC, I and the registers.

Unknown opcodes are NOT errors: the engine logs them and carries on.
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Chip8Error(Exception):
    """
    Base exception for all CHIP-8 VM errors.

        try:
            emu.run(1000)
        except Chip8Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# ROM Exceptions
# =============================================================================

class RomError(Chip8Error):
    """Base exception for ROM loading errors."""
    pass


class RomSizeError(RomError):
    """
    ROM image does not fit in program memory.

    Programs are loaded at $200, leaving 3584 bytes up to the end
    of the 4 KB address space.
    """

    def __init__(self, size: int, capacity: int, message: str = ""):
        self.size = size
        self.capacity = capacity
        if not message:
            message = f"ROM is {size} bytes, program memory holds {capacity}"
        super().__init__(message)


# =============================================================================
# Machine Defects
# =============================================================================

class MachineError(Chip8Error):
    """
    Base exception for fatal defects raised during execution.

    Attributes:
        pc: Program counter of the faulting instruction (when known)
    """

    def __init__(self, message: str, pc: Optional[int] = None):
        self.pc = pc
        if pc is not None:
            message = f"{message} (PC=${pc:03X})"
        super().__init__(message)


class MemoryBoundsError(MachineError):
    """
    Memory access outside the addressable range.

    Raised when:
    - Any read or write targets an address outside $000-$FFF
    - A bulk copy (Fx55/Fx65), BCD store or sprite read runs past $FFF
    - The program counter is fetched past the end of memory
    - A program store (Fx33/Fx55) targets the reserved area below $200
    """

    def __init__(
        self,
        address: int,
        message: str = "",
        pc: Optional[int] = None,
    ):
        self.address = address
        if not message:
            message = f"Memory access out of bounds at ${address:X}"
        super().__init__(message, pc)


class StackUnderflowError(MachineError):
    """Return (00EE) executed with an empty call stack."""

    def __init__(self, message: str = "", pc: Optional[int] = None):
        if not message:
            message = "Return with empty call stack"
        super().__init__(message, pc)


class StackOverflowError(MachineError):
    """Subroutine call (2NNN) nested deeper than the call stack allows."""

    def __init__(self, depth: int, message: str = "", pc: Optional[int] = None):
        self.depth = depth
        if not message:
            message = f"Call stack overflow (depth {depth})"
        super().__init__(message, pc)
