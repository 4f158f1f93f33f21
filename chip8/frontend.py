# pyglet host for the VM: window, keyboard, beep and the two clocks.
# The CPU clock runs at cpu_hz and the timer clock at a fixed 60Hz; they are
# scheduled separately and never share a cadence.

import logging
import random

import numpy as np
import pyglet
from pyglet.media import synthesis
from pyglet.window import key

from .config import CPU_HZ, DISPLAY_HEIGHT, DISPLAY_WIDTH, SCALE, TIMER_HZ
from .errors import Chip8Error

log = logging.getLogger(__name__)

# map binding keys
#  1 2 3 C        1 2 3 4
#  4 5 6 D   <-   Q W E R
#  7 8 9 E        A S D F
#  A 0 B F        Z X C V
KEYMAP = {
    key._1: 0x1, key._2: 0x2, key._3: 0x3, key._4: 0xC,
    key.Q: 0x4, key.W: 0x5, key.E: 0x6, key.R: 0xD,
    key.A: 0x7, key.S: 0x8, key.D: 0x9, key.F: 0xE,
    key.Z: 0xA, key.X: 0x0, key.C: 0xB, key.V: 0xF,
}


class Chip8Window(pyglet.window.Window):

    def __init__(self, vm, cpu_hz=CPU_HZ, scale=SCALE, caption="CHIP-8 Emulator"):
        self.scale = scale
        self.window_width = DISPLAY_WIDTH * scale
        self.window_height = DISPLAY_HEIGHT * scale
        super().__init__(
            width=self.window_width,
            height=self.window_height,
            caption=caption,
            vsync=False
        )

        self.vm = vm
        self.cpu_hz = cpu_hz
        self.fault = None
        self.sound_playing = False
        self._cycle_debt = 0.0

        # Pre-allocated small framebuffer (64x32 RGBA), upscaled with numpy.repeat
        self._small_framebuf = np.zeros((DISPLAY_HEIGHT, DISPLAY_WIDTH, 4), dtype=np.uint8)
        self._small_framebuf[..., 3] = 255
        self.image = pyglet.image.ImageData(
            self.window_width,
            self.window_height,
            'RGBA',
            bytes(self.window_width * self.window_height * 4)
        )

        # Performance tracking
        self._fps_counter = 0
        self._cps_counter = 0
        self.fps_label = self._label("FPS: 0", 15)
        self.cps_label = self._label("Cycles/s: 0", 30)

        # Schedule the loops
        pyglet.clock.schedule_interval(self._cpu_tick, 1 / cpu_hz)
        pyglet.clock.schedule_interval(self._timer_tick, 1 / TIMER_HZ)
        pyglet.clock.schedule_interval(self._update_bench, 1.0)

    def _label(self, text, offset):
        return pyglet.text.Label(
            text,
            font_size=12,
            x=5,
            y=self.window_height - offset,
            anchor_x='left',
            anchor_y='center',
            color=(255, 255, 255, 255)
        )

    # ---- CPU cycle ----
    def _cpu_tick(self, dt):
        if self.fault is not None:
            return
        # pyglet rarely calls back at the requested rate; run the cycles owed
        self._cycle_debt += dt * self.cpu_hz
        cycles = int(self._cycle_debt)
        self._cycle_debt -= cycles
        try:
            for _ in range(cycles):
                self.vm.emulate_cycle()
                self._cps_counter += 1
        except Chip8Error as e:
            self.fault = e
            log.error("Emulation halted at %s: %s\n%s",
                      hex(e.pc) if e.pc is not None else "?", e,
                      self.vm.debug_snapshot())
            self.close()

    # ---- timers ----
    def _timer_tick(self, dt):
        if self.vm.decrement_timers():
            # Play beep only if it hasn't started yet
            if not self.sound_playing:
                self._play_beep()
        else:
            self.sound_playing = False

    # ---- sound ----
    def _play_beep(self, duration=0.2, frequency=440, pitch_variation=15):
        freq = frequency + random.randint(-pitch_variation, pitch_variation)
        wave = synthesis.Sine(duration=duration, frequency=freq, sample_rate=44100)
        player = pyglet.media.Player()
        player.queue(wave)
        player.play()
        self.sound_playing = True

        def on_eos():
            self.sound_playing = False
            player.delete()

        player.on_eos = on_eos

    # ---- FPS / CPS ----
    def _update_bench(self, dt):
        self.fps_label.text = f"FPS: {self._fps_counter / dt:.1f}"
        self.cps_label.text = f"Cycles/s: {self._cps_counter / dt:.0f}"
        self._fps_counter = 0
        self._cps_counter = 0

    # ---- Drawing ----
    def on_draw(self):
        self.clear()

        if self.vm.redraw:
            # pyglet's origin is bottom-left, the VM's is top-left
            frame = self.vm.get_display()[::-1]
            self._small_framebuf[..., :3] = frame[..., None] * 255
            self.vm.clear_redraw()

        if self.scale != 1:
            scaled = np.repeat(np.repeat(self._small_framebuf, self.scale, axis=0), self.scale, axis=1)
        else:
            scaled = self._small_framebuf

        # updates existing image without creating new object
        self.image.set_data('RGBA', self.window_width * 4, scaled.tobytes())
        self.image.blit(0, 0)

        self.fps_label.draw()
        self.cps_label.draw()
        self._fps_counter += 1

    # ---- Input ----
    def on_key_press(self, symbol, modifiers):
        if symbol == key.ESCAPE:
            self.close()
        elif symbol == key.F1:
            chip8_log = logging.getLogger("chip8")
            debug = chip8_log.getEffectiveLevel() > logging.DEBUG
            chip8_log.setLevel(logging.DEBUG if debug else logging.INFO)
            log.info("Instruction logging %s", "on" if debug else "off")
        elif symbol in KEYMAP:
            self.vm.set_key(KEYMAP[symbol], True)

    def on_key_release(self, symbol, modifiers):
        if symbol in KEYMAP:
            self.vm.set_key(KEYMAP[symbol], False)

    def close(self):
        pyglet.clock.unschedule(self._cpu_tick)
        pyglet.clock.unschedule(self._timer_tick)
        pyglet.clock.unschedule(self._update_bench)
        super().close()


def run(vm, cpu_hz=CPU_HZ, scale=SCALE, caption="CHIP-8 Emulator"):
    """Open a window on ``vm`` and block until it closes.

    Returns the fault that stopped emulation, or None.
    """
    window = Chip8Window(vm, cpu_hz=cpu_hz, scale=scale, caption=caption)
    pyglet.app.run()
    return window.fault
