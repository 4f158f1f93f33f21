# CHIP-8 virtual machine
# Memory - 4096 bytes: fonts at 0x050, program from 0x200.
# CPU - 16 8-bit registers (VF doubles as a flag), 16-bit I and PC, a call stack,
#       a delay timer and a sound timer decremented by the host at 60Hz.
# Display - 64x32 framebuffer, sprites are XORed on with wraparound.
# Input - 16-key hex keypad, polled by the host before each cycle.
#----------------------------------------------------------------------------------------------
# Each cycle fetches a word, advances PC by 2, decodes it into an Instruction and
# dispatches on the instruction's Op.  Faults propagate to the host as Chip8Error.

import logging
import random
from typing import NamedTuple, Optional, Tuple

from .config import (FONT_BASE, FONT_HEIGHT, NUM_REGISTERS, PROGRAM_START,
                     Quirks)
from .decode import Instruction, Op, decode
from .display import Display
from .errors import Chip8Error, ROMTooLarge, StackOverflow, StackUnderflow
from .keypad import Keypad
from .memory import Memory

log = logging.getLogger(__name__)

# set fonts (binary pixel patterns)
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
])  # notice 80 bytes


class DebugState(NamedTuple):
    """Register dump for hosts and debuggers."""
    pc: int
    i: int
    v: Tuple[int, ...]
    delay_timer: int
    sound_timer: int
    stack: Tuple[int, ...]

    def __str__(self):
        lines = [f"{'PC:':<5}  {self.pc:#x}", f"{'I:':<5}  {self.i:#x}"]
        lines += [f"{f'V{r:X}:':<5}  {val:#x}" for r, val in enumerate(self.v)]
        lines.append(f"{'ST:':<5}  {self.sound_timer:#x}")
        lines.append(f"{'DT:':<5}  {self.delay_timer:#x}")
        lines.append(f"{'SP:':<5}  {len(self.stack)}")
        return "\n".join(lines)


class VM:
    def __init__(self, quirks: Optional[Quirks] = None,
                 rng: Optional[random.Random] = None):
        self.quirks = quirks or Quirks()
        self.rng = rng or random.Random()

        self.memory = Memory()
        self.display = Display()
        self.keypad = Keypad()

        # Prepare opcode function map
        self.setup_funcmap()
        self.reset()

    def reset(self):
        """Return to power-on state; the loaded program is discarded."""
        self.memory.clear()
        self.memory.map_range(FONT_BASE, FONTSET)
        self.display.clear()
        self.keypad.reset_keys()

        self.V = bytearray(NUM_REGISTERS)
        self.I = 0
        self.pc = PROGRAM_START
        self.stack = []
        self.delay_timer = 0
        self.sound_timer = 0
        self.redraw = False
        log.info("VM reset (%s)", self.quirks)

    # ---- Host interface ----
    def load_program(self, data: bytes):
        limit = self.memory.capacity - PROGRAM_START
        if len(data) > limit:
            raise ROMTooLarge(len(data), limit)
        self.memory.map_range(PROGRAM_START, data)
        log.info("Loaded %d byte program at %#05x", len(data), PROGRAM_START)

    def set_key(self, index: int, pressed: bool):
        self.keypad.set_key(index, pressed)

    def set_keys(self, mask: int):
        self.keypad.set_keys(mask)

    def get_display(self):
        return self.display.snapshot()

    def clear_redraw(self):
        self.redraw = False

    def debug_snapshot(self) -> DebugState:
        return DebugState(
            pc=self.pc,
            i=self.I,
            v=tuple(self.V),
            delay_timer=self.delay_timer,
            sound_timer=self.sound_timer,
            stack=tuple(self.stack),
        )

    # ---- timers ----
    def decrement_timers(self) -> bool:
        """Tick both timers once (60Hz).  True while the buzzer should sound."""
        if self.delay_timer > 0:
            self.delay_timer -= 1

        if self.sound_timer > 0:
            self.sound_timer -= 1
            return True
        return False

    # ---- Cycle ----
    def emulate_cycle(self) -> Instruction:
        pc = self.pc
        try:
            word = self.memory.fetch_instruction(pc)
            self.pc += 2
            ins = decode(word)
            log.debug("%03X: %s", pc, ins)
            self.funcmap[ins.op](ins)
        except Chip8Error as e:
            e.pc = pc
            raise
        return ins

    def run(self, cycles: int) -> int:
        """Execute ``cycles`` cycles; returns how many ran."""
        for _ in range(cycles):
            self.emulate_cycle()
        return cycles

    # ---- Opcode function map ----
    def setup_funcmap(self):
        self.funcmap = {
            Op.CLS: self.op_CLS,              # 00E0 - Clear the screen
            Op.RET: self.op_RET,              # 00EE - Return from a subroutine
            Op.JP: self.op_JP,                # 1nnn - Jump to address nnn
            Op.CALL: self.op_CALL,            # 2nnn - Call subroutine at nnn
            Op.SE_Vx_kk: self.op_SE_Vx_kk,    # 3xkk - Skip if Vx == kk
            Op.SNE_Vx_kk: self.op_SNE_Vx_kk,  # 4xkk - Skip if Vx != kk
            Op.SE_Vx_Vy: self.op_SE_Vx_Vy,    # 5xy0 - Skip if Vx == Vy
            Op.LD_Vx_kk: self.op_LD_Vx_kk,    # 6xkk - Vx = kk
            Op.ADD_Vx_kk: self.op_ADD_Vx_kk,  # 7xkk - Vx += kk, no carry
            Op.LD_Vx_Vy: self.op_LD_Vx_Vy,    # 8xy0 - Vx = Vy
            Op.OR: self.op_OR,                # 8xy1 - Vx |= Vy
            Op.AND: self.op_AND,              # 8xy2 - Vx &= Vy
            Op.XOR: self.op_XOR,              # 8xy3 - Vx ^= Vy
            Op.ADD: self.op_ADD,              # 8xy4 - Vx += Vy, VF = carry
            Op.SUB: self.op_SUB,              # 8xy5 - Vx -= Vy, VF = NOT borrow
            Op.SHR: self.op_SHR,              # 8xy6 - shift right, VF = old LSB
            Op.SUBN: self.op_SUBN,            # 8xy7 - Vx = Vy - Vx, VF = NOT borrow
            Op.SHL: self.op_SHL,              # 8xyE - shift left, VF = old MSB
            Op.SNE_Vx_Vy: self.op_SNE_Vx_Vy,  # 9xy0 - Skip if Vx != Vy
            Op.LD_I: self.op_LD_I,            # Annn - I = nnn
            Op.JP_V0: self.op_JP_V0,          # Bnnn - Jump to nnn + V0
            Op.RND: self.op_RND,              # Cxkk - Vx = random & kk
            Op.DRW: self.op_DRW,              # Dxyn - Draw sprite, VF = collision
            Op.SKP: self.op_SKP,              # Ex9E - Skip if key Vx pressed
            Op.SKNP: self.op_SKNP,            # ExA1 - Skip if key Vx not pressed
            Op.LD_Vx_DT: self.op_LD_Vx_DT,    # Fx07 - Vx = delay timer
            Op.WAITKEY: self.op_WAITKEY,      # Fx0A - Wait for a key press
            Op.LD_DT_Vx: self.op_LD_DT_Vx,    # Fx15 - delay timer = Vx
            Op.LD_ST_Vx: self.op_LD_ST_Vx,    # Fx18 - sound timer = Vx
            Op.ADD_I_Vx: self.op_ADD_I_Vx,    # Fx1E - I += Vx
            Op.FONT: self.op_FONT,            # Fx29 - I = glyph for digit Vx
            Op.BCD: self.op_BCD,              # Fx33 - BCD of Vx at I..I+2
            Op.STORE: self.op_STORE,          # Fx55 - memory[I..] = V0..Vx
            Op.LOAD: self.op_LOAD,            # Fx65 - V0..Vx = memory[I..]
        }

    # ---- Opcode Handlers ----

    # 00E0 - CLS
    def op_CLS(self, ins):
        self.display.clear()
        self.redraw = True

    # 00EE - RET
    def op_RET(self, ins):
        if not self.stack:
            raise StackUnderflow()
        self.pc = self.stack.pop()

    # 1nnn - Jump to address nnn
    def op_JP(self, ins):
        self.pc = ins.nnn

    # 2nnn - Call subroutine at nnn
    def op_CALL(self, ins):
        limit = self.quirks.stack_limit
        if limit is not None and len(self.stack) >= limit:
            raise StackOverflow(limit)
        self.stack.append(self.pc)
        self.pc = ins.nnn

    # 3xkk - Skip next instruction if Vx == kk
    def op_SE_Vx_kk(self, ins):
        if self.V[ins.x] == ins.nn:
            self.pc += 2

    # 4xkk - Skip next instruction if Vx != kk
    def op_SNE_Vx_kk(self, ins):
        if self.V[ins.x] != ins.nn:
            self.pc += 2

    # 5xy0 - Skip next instruction if Vx == Vy
    def op_SE_Vx_Vy(self, ins):
        if self.V[ins.x] == self.V[ins.y]:
            self.pc += 2

    # 6xkk - Set Vx = kk
    def op_LD_Vx_kk(self, ins):
        self.V[ins.x] = ins.nn

    # 7xkk - Add immediate, VF untouched
    def op_ADD_Vx_kk(self, ins):
        self.V[ins.x] = (self.V[ins.x] + ins.nn) & 0xFF

    def op_LD_Vx_Vy(self, ins):
        self.V[ins.x] = self.V[ins.y]

    def op_OR(self, ins):
        self.V[ins.x] |= self.V[ins.y]
        if self.quirks.logic_resets_vf:
            self.V[0xF] = 0

    def op_AND(self, ins):
        self.V[ins.x] &= self.V[ins.y]
        if self.quirks.logic_resets_vf:
            self.V[0xF] = 0

    def op_XOR(self, ins):
        self.V[ins.x] ^= self.V[ins.y]
        if self.quirks.logic_resets_vf:
            self.V[0xF] = 0

    # The arithmetic ops below write Vx first and the flag last, so when
    # x == F the flag is what remains in VF.

    def op_ADD(self, ins):
        s = self.V[ins.x] + self.V[ins.y]
        self.V[ins.x] = s & 0xFF
        self.V[0xF] = 1 if s > 0xFF else 0

    def op_SUB(self, ins):
        vx, vy = self.V[ins.x], self.V[ins.y]
        self.V[ins.x] = (vx - vy) & 0xFF
        self.V[0xF] = 1 if vx >= vy else 0

    def op_SUBN(self, ins):
        vx, vy = self.V[ins.x], self.V[ins.y]
        self.V[ins.x] = (vy - vx) & 0xFF
        self.V[0xF] = 1 if vy >= vx else 0

    def _shift_source(self, ins):
        return self.V[ins.y] if self.quirks.shift_uses_vy else self.V[ins.x]

    def op_SHR(self, ins):
        src = self._shift_source(ins)
        self.V[ins.x] = src >> 1
        self.V[0xF] = src & 1

    def op_SHL(self, ins):
        src = self._shift_source(ins)
        self.V[ins.x] = (src << 1) & 0xFF
        self.V[0xF] = (src >> 7) & 1

    # 9xy0 - Skip next instruction if Vx != Vy
    def op_SNE_Vx_Vy(self, ins):
        if self.V[ins.x] != self.V[ins.y]:
            self.pc += 2

    # Annn - Set I = nnn
    def op_LD_I(self, ins):
        self.I = ins.nnn

    # Bnnn - Jump to nnn plus V0 (or Vx on CHIP-48)
    def op_JP_V0(self, ins):
        offset = self.V[ins.x] if self.quirks.jump_uses_vx else self.V[0]
        self.pc = ins.nnn + offset

    # Cxkk - RND Vx, byte
    def op_RND(self, ins):
        self.V[ins.x] = self.rng.getrandbits(8) & ins.nn

    # Dxyn - DRW Vx, Vy, nibble
    def op_DRW(self, ins):
        sprite = self.memory.get_range(self.I, ins.n)
        self.V[0xF] = self.display.draw(self.V[ins.x], self.V[ins.y], ins.n, sprite)
        self.redraw = True

    # Ex9E / ExA1 - SKP / SKNP
    def op_SKP(self, ins):
        if self.keypad.is_pressed(self.V[ins.x] & 0xF):
            self.pc += 2

    def op_SKNP(self, ins):
        if not self.keypad.is_pressed(self.V[ins.x] & 0xF):
            self.pc += 2

    # Fx07..Fx65 - timers, memory, I, and key input
    def op_LD_Vx_DT(self, ins):
        self.V[ins.x] = self.delay_timer

    def op_WAITKEY(self, ins):
        # stall: PC will re-execute this instruction next cycle
        if self.keypad.no_keys_pressed():
            self.pc -= 2
        else:
            self.V[ins.x] = self.keypad.get_first_key_pressed()

    def op_LD_DT_Vx(self, ins):
        self.delay_timer = self.V[ins.x]

    def op_LD_ST_Vx(self, ins):
        self.sound_timer = self.V[ins.x]

    def op_ADD_I_Vx(self, ins):
        total = self.I + self.V[ins.x]
        self.I = total & 0xFFFF
        if self.quirks.index_overflow_sets_vf:
            self.V[0xF] = 1 if total > 0xFFF else 0

    def op_FONT(self, ins):
        self.I = FONT_BASE + FONT_HEIGHT * self.V[ins.x]

    def op_BCD(self, ins):
        val = self.V[ins.x]
        self.memory.map_range(self.I, bytes([val // 100 % 10, val // 10 % 10, val % 10]))

    def op_STORE(self, ins):
        self.memory.map_range(self.I, self.V[:ins.x + 1])
        if self.quirks.memory_increments_index:
            self.I = (self.I + ins.x + 1) & 0xFFFF

    def op_LOAD(self, ins):
        self.V[:ins.x + 1] = self.memory.get_range(self.I, ins.x + 1)
        if self.quirks.memory_increments_index:
            self.I = (self.I + ins.x + 1) & 0xFFFF
