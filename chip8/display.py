"""64x32 monochrome framebuffer."""

import numpy as np

from .config import DISPLAY_WIDTH, DISPLAY_HEIGHT


class Display:
    def __init__(self, width: int = DISPLAY_WIDTH, height: int = DISPLAY_HEIGHT):
        self.width = width
        self.height = height
        # row-major, one byte per pixel (0 or 1)
        self.pixels = np.zeros((height, width), dtype=np.uint8)

    def clear(self):
        self.pixels.fill(0)

    def draw(self, x: int, y: int, height: int, sprite) -> int:
        """XOR an 8-pixel-wide sprite onto the screen at (x, y).

        Rows and columns wrap around both edges.  Returns 1 if any lit
        pixel was turned off, else 0.
        """
        if len(sprite) < height:
            raise ValueError(f"sprite has {len(sprite)} rows, need {height}")
        if height == 0:
            return 0

        rows = (y + np.arange(height)) % self.height
        cols = (x + np.arange(8)) % self.width
        # MSB first -> column 0
        bits = np.unpackbits(np.frombuffer(bytes(sprite[:height]), dtype=np.uint8)
                             .reshape(height, 1), axis=1)

        area = np.ix_(rows, cols)
        region = self.pixels[area]
        collision = 1 if np.any(region & bits) else 0
        self.pixels[area] = region ^ bits
        return collision

    def snapshot(self) -> np.ndarray:
        frame = self.pixels.copy()
        frame.flags.writeable = False
        return frame


def render_text(frame, on: str = "#", off: str = " ") -> str:
    return "\n".join("".join(on if px else off for px in row) for row in frame)
