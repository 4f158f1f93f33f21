"""Machine constants, host clock rates and interpreter quirks."""

from dataclasses import dataclass, replace
from typing import Optional

# ---- Machine ----
MEMORY_SIZE = 4096
PROGRAM_START = 0x200
FONT_BASE = 0x050
FONT_HEIGHT = 5
DISPLAY_WIDTH, DISPLAY_HEIGHT = 64, 32
NUM_REGISTERS = 16
NUM_KEYS = 16
STACK_DEPTH = 16

# ---- Host ----
CPU_HZ = 500
TIMER_HZ = 60
SCALE = 10


@dataclass(frozen=True)
class Quirks:
    """Behaviour that differs between historical CHIP-8 interpreters.

    The defaults are the "modern" profile most current ROMs expect:

    * ``shift_uses_vy``: 8XY6/8XYE shift VY into VX (COSMAC VIP) instead of
      shifting VX in place.
    * ``jump_uses_vx``: BNNN adds VX, X being the top nibble of NNN
      (CHIP-48), instead of V0.
    * ``index_overflow_sets_vf``: FX1E sets VF when I passes 0xFFF
      (Amiga interpreter; Spaceflight 2091! relies on it).
    * ``logic_resets_vf``: 8XY1/8XY2/8XY3 clear VF (COSMAC VIP).
    * ``memory_increments_index``: FX55/FX65 leave I pointing past the last
      byte touched (COSMAC VIP).
    * ``stack_limit``: maximum call depth; ``None`` lets the stack grow.
    """
    shift_uses_vy: bool = False
    jump_uses_vx: bool = False
    index_overflow_sets_vf: bool = False
    logic_resets_vf: bool = False
    memory_increments_index: bool = False
    stack_limit: Optional[int] = STACK_DEPTH

    @classmethod
    def modern(cls) -> "Quirks":
        return cls()

    @classmethod
    def cosmac_vip(cls) -> "Quirks":
        return cls(shift_uses_vy=True, logic_resets_vf=True,
                   memory_increments_index=True)

    @classmethod
    def chip48(cls) -> "Quirks":
        return cls(jump_uses_vx=True)

    def with_overrides(self, **changes) -> "Quirks":
        # None means "keep the preset's value"
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


PRESETS = {
    "modern": Quirks.modern,
    "vip": Quirks.cosmac_vip,
    "chip48": Quirks.chip48,
}
