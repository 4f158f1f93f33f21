"""CHIP-8 virtual machine."""

from .config import Quirks
from .decode import Instruction, Op, decode
from .display import Display
from .errors import (Chip8Error, IllegalInstruction, MemoryOutOfBounds,
                     ROMTooLarge, StackOverflow, StackUnderflow)
from .keypad import Keypad
from .memory import Memory
from .vm import FONTSET, VM, DebugState

__version__ = "0.1.0"
