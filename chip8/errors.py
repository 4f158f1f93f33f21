"""Faults raised by the CHIP-8 core.

Every fault stops the current cycle and propagates to the host.  The VM
tags the exception with ``pc`` (address of the faulting instruction) before
re-raising, so hosts can report where it happened.
"""


class Chip8Error(Exception):
    """Base for all emulator faults."""
    pc = None


class IllegalInstruction(Chip8Error):
    def __init__(self, word: int):
        self.word = word
        super().__init__(f"Illegal instruction {word:04X}")


class StackUnderflow(Chip8Error):
    def __init__(self):
        super().__init__("Return with empty call stack")


class StackOverflow(Chip8Error):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Call stack exceeded {limit} entries")


class MemoryOutOfBounds(Chip8Error):
    def __init__(self, start: int, length: int, capacity: int):
        self.start = start
        self.length = length
        self.capacity = capacity
        super().__init__(
            f"Access [{start:#05x}, {start + length:#05x}) outside "
            f"memory of {capacity} bytes")


class ROMTooLarge(Chip8Error):
    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"ROM too large: {size} bytes (max {limit})")
