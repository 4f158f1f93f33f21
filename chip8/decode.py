"""Instruction decoding.

A 16-bit word is matched against a table of (mask, pattern) rows and
turned into an :class:`Instruction` carrying its operation tag plus every
operand field.  Words that match no row are illegal.
"""

from enum import Enum
from typing import NamedTuple

from .errors import IllegalInstruction


class Op(Enum):
    CLS = "00E0"
    RET = "00EE"
    JP = "1NNN"
    CALL = "2NNN"
    SE_Vx_kk = "3XNN"
    SNE_Vx_kk = "4XNN"
    SE_Vx_Vy = "5XY0"
    LD_Vx_kk = "6XNN"
    ADD_Vx_kk = "7XNN"
    LD_Vx_Vy = "8XY0"
    OR = "8XY1"
    AND = "8XY2"
    XOR = "8XY3"
    ADD = "8XY4"
    SUB = "8XY5"
    SHR = "8XY6"
    SUBN = "8XY7"
    SHL = "8XYE"
    SNE_Vx_Vy = "9XY0"
    LD_I = "ANNN"
    JP_V0 = "BNNN"
    RND = "CXNN"
    DRW = "DXYN"
    SKP = "EX9E"
    SKNP = "EXA1"
    LD_Vx_DT = "FX07"
    WAITKEY = "FX0A"
    LD_DT_Vx = "FX15"
    LD_ST_Vx = "FX18"
    ADD_I_Vx = "FX1E"
    FONT = "FX29"
    BCD = "FX33"
    STORE = "FX55"
    LOAD = "FX65"


class Instruction(NamedTuple):
    op: Op
    word: int
    x: int
    y: int
    n: int
    nn: int
    nnn: int

    def __str__(self):
        return f"{self.word:04X} {self.op.name}"


# dispatch table
OPCODES = [
    (0xFFFF, 0x00E0, Op.CLS),
    (0xFFFF, 0x00EE, Op.RET),

    (0xF000, 0x1000, Op.JP),
    (0xF000, 0x2000, Op.CALL),
    (0xF000, 0x3000, Op.SE_Vx_kk),
    (0xF000, 0x4000, Op.SNE_Vx_kk),
    (0xF00F, 0x5000, Op.SE_Vx_Vy),
    (0xF000, 0x6000, Op.LD_Vx_kk),
    (0xF000, 0x7000, Op.ADD_Vx_kk),

    (0xF00F, 0x8000, Op.LD_Vx_Vy),
    (0xF00F, 0x8001, Op.OR),
    (0xF00F, 0x8002, Op.AND),
    (0xF00F, 0x8003, Op.XOR),
    (0xF00F, 0x8004, Op.ADD),
    (0xF00F, 0x8005, Op.SUB),
    (0xF00F, 0x8006, Op.SHR),
    (0xF00F, 0x8007, Op.SUBN),
    (0xF00F, 0x800E, Op.SHL),

    (0xF00F, 0x9000, Op.SNE_Vx_Vy),
    (0xF000, 0xA000, Op.LD_I),
    (0xF000, 0xB000, Op.JP_V0),
    (0xF000, 0xC000, Op.RND),
    (0xF000, 0xD000, Op.DRW),

    (0xF0FF, 0xE09E, Op.SKP),
    (0xF0FF, 0xE0A1, Op.SKNP),

    (0xF0FF, 0xF007, Op.LD_Vx_DT),
    (0xF0FF, 0xF00A, Op.WAITKEY),
    (0xF0FF, 0xF015, Op.LD_DT_Vx),
    (0xF0FF, 0xF018, Op.LD_ST_Vx),
    (0xF0FF, 0xF01E, Op.ADD_I_Vx),
    (0xF0FF, 0xF029, Op.FONT),
    (0xF0FF, 0xF033, Op.BCD),
    (0xF0FF, 0xF055, Op.STORE),
    (0xF0FF, 0xF065, Op.LOAD),
]


def decode(word: int) -> Instruction:
    for mask, pattern, op in OPCODES:
        if (word & mask) == pattern:
            return Instruction(
                op=op,
                word=word,
                x=(word >> 8) & 0xF,
                y=(word >> 4) & 0xF,
                n=word & 0xF,
                nn=word & 0xFF,
                nnn=word & 0x0FFF,
            )
    raise IllegalInstruction(word)
