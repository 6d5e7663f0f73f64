"""
CHIP-8 Instruction Decoder
==========================

Turns a 16-bit opcode word into an Instruction: an Operation tag plus the
fixed operand fields every CHIP-8 opcode is built from.

    opcode:  F X Y N
             |  \\__/  N   = low nibble      (count)
             |   NN       = low byte        (immediate)
             \\__NNN__/   = low 12 bits     (address)
             X   = bits 8-11 (register)
             Y   = bits 4-7  (register)

Decoding is pure: it never touches machine state, so each opcode can be
decoded and tested in isolation. Opcodes that match no known pattern
decode to Operation.UNKNOWN rather than raising.
"""

from dataclasses import dataclass
from enum import Enum, auto


class Operation(Enum):
    """Every operation the engine knows how to execute."""
    CLS = auto()        # 00E0
    RET = auto()        # 00EE
    SYS = auto()        # 0NNN
    JP = auto()         # 1NNN
    CALL = auto()       # 2NNN
    SE_BYTE = auto()    # 3XNN
    SNE_BYTE = auto()   # 4XNN
    SE_REG = auto()     # 5XY0
    LD_BYTE = auto()    # 6XNN
    ADD_BYTE = auto()   # 7XNN
    LD_REG = auto()     # 8XY0
    OR = auto()         # 8XY1
    AND = auto()        # 8XY2
    XOR = auto()        # 8XY3
    ADD_REG = auto()    # 8XY4
    SUB = auto()        # 8XY5
    SHR = auto()        # 8XY6
    SUBN = auto()       # 8XY7
    SHL = auto()        # 8XYE
    SNE_REG = auto()    # 9XY0
    LD_I = auto()       # ANNN
    JP_V0 = auto()      # BNNN
    RND = auto()        # CXNN
    DRW = auto()        # DXYN
    SKP = auto()        # EX9E
    SKNP = auto()       # EXA1
    LD_VX_DT = auto()   # FX07
    LD_KEY = auto()     # FX0A
    LD_DT = auto()      # FX15
    LD_ST = auto()      # FX18
    ADD_I = auto()      # FX1E
    LD_FONT = auto()    # FX29
    BCD = auto()        # FX33
    STORE = auto()      # FX55
    LOAD = auto()       # FX65
    UNKNOWN = auto()


_ALU_OPS = {
    0x0: Operation.LD_REG,
    0x1: Operation.OR,
    0x2: Operation.AND,
    0x3: Operation.XOR,
    0x4: Operation.ADD_REG,
    0x5: Operation.SUB,
    0x6: Operation.SHR,
    0x7: Operation.SUBN,
    0xE: Operation.SHL,
}

_KEY_OPS = {
    0x9E: Operation.SKP,
    0xA1: Operation.SKNP,
}

_MISC_OPS = {
    0x07: Operation.LD_VX_DT,
    0x0A: Operation.LD_KEY,
    0x15: Operation.LD_DT,
    0x18: Operation.LD_ST,
    0x1E: Operation.ADD_I,
    0x29: Operation.LD_FONT,
    0x33: Operation.BCD,
    0x55: Operation.STORE,
    0x65: Operation.LOAD,
}


@dataclass(frozen=True)
class Instruction:
    """
    A decoded opcode.

    All operand fields are always populated from the raw word; each
    operation reads only the ones it uses.
    """
    operation: Operation
    opcode: int

    @property
    def nnn(self) -> int:
        return self.opcode & 0x0FFF

    @property
    def nn(self) -> int:
        return self.opcode & 0x00FF

    @property
    def n(self) -> int:
        return self.opcode & 0x000F

    @property
    def x(self) -> int:
        return (self.opcode >> 8) & 0xF

    @property
    def y(self) -> int:
        return (self.opcode >> 4) & 0xF

    def __str__(self) -> str:
        return f"{self.opcode:04X} {self.operation.name}"


def decode(opcode: int) -> Instruction:
    """
    Decode a 16-bit opcode word.

    Args:
        opcode: Big-endian instruction word (0x0000-0xFFFF)

    Returns:
        Instruction tagged with its Operation (UNKNOWN if unrecognized)

    Example:
        >>> decode(0x8124).operation
        <Operation.ADD_REG: 15>
        >>> decode(0x8124).x, decode(0x8124).y
        (1, 2)
    """
    opcode &= 0xFFFF
    family = opcode >> 12
    n = opcode & 0x000F
    nn = opcode & 0x00FF

    match family:
        case 0x0:
            if opcode == 0x00E0:
                op = Operation.CLS
            elif opcode == 0x00EE:
                op = Operation.RET
            else:
                op = Operation.SYS
        case 0x1:
            op = Operation.JP
        case 0x2:
            op = Operation.CALL
        case 0x3:
            op = Operation.SE_BYTE
        case 0x4:
            op = Operation.SNE_BYTE
        case 0x5:
            op = Operation.SE_REG if n == 0 else Operation.UNKNOWN
        case 0x6:
            op = Operation.LD_BYTE
        case 0x7:
            op = Operation.ADD_BYTE
        case 0x8:
            op = _ALU_OPS.get(n, Operation.UNKNOWN)
        case 0x9:
            op = Operation.SNE_REG if n == 0 else Operation.UNKNOWN
        case 0xA:
            op = Operation.LD_I
        case 0xB:
            op = Operation.JP_V0
        case 0xC:
            op = Operation.RND
        case 0xD:
            op = Operation.DRW
        case 0xE:
            op = _KEY_OPS.get(nn, Operation.UNKNOWN)
        case _:
            op = _MISC_OPS.get(nn, Operation.UNKNOWN)

    return Instruction(op, opcode)
