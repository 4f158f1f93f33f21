from .config import MEMORY_SIZE
from .errors import MemoryOutOfBounds


class Memory:
    """Flat byte store.  Every access is bounds-checked, nothing wraps."""

    def __init__(self, capacity: int = MEMORY_SIZE):
        self.capacity = capacity
        self.data = bytearray(capacity)

    def _check(self, start: int, length: int):
        if start < 0 or length < 0 or start + length > self.capacity:
            raise MemoryOutOfBounds(start, length, self.capacity)

    def get(self, addr: int) -> int:
        self._check(addr, 1)
        return self.data[addr]

    def set(self, addr: int, value: int):
        self._check(addr, 1)
        self.data[addr] = value

    def get_range(self, start: int, length: int) -> bytes:
        self._check(start, length)
        return bytes(self.data[start:start + length])

    def map_range(self, start: int, target):
        """Copy ``target`` into memory at ``start``; writes nothing on failure."""
        self._check(start, len(target))
        self.data[start:start + len(target)] = target

    def fetch_instruction(self, pc: int) -> int:
        # big-endian word
        self._check(pc, 2)
        return (self.data[pc] << 8) | self.data[pc + 1]

    def clear(self):
        self.data[:] = bytes(self.capacity)
