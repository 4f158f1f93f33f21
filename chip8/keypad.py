from typing import Optional

from .config import NUM_KEYS


class Keypad:
    """16-key hex keypad state, bit i set while key i is held."""

    def __init__(self):
        self.keys = 0

    @property
    def mask(self) -> int:
        return self.keys

    def _check(self, index: int):
        if not 0 <= index < NUM_KEYS:
            raise ValueError(f"key index out of range: {index}")

    def reset_keys(self):
        self.keys = 0

    def set_keys(self, mask: int):
        # host refresh replaces the whole state
        self.keys = mask & 0xFFFF

    def set_key(self, index: int, pressed: bool):
        self._check(index)
        if pressed:
            self.keys |= 1 << index
        else:
            self.keys &= ~(1 << index)

    def is_pressed(self, index: int) -> bool:
        self._check(index)
        return bool(self.keys & (1 << index))

    def no_keys_pressed(self) -> bool:
        return self.keys == 0

    def get_first_key_pressed(self) -> Optional[int]:
        if not self.keys:
            return None
        # isolate the lowest set bit
        return (self.keys & -self.keys).bit_length() - 1
