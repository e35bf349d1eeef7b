# Presentation layer and host loop.
# We subclass the pyglet window (it handles graphics and keyboard input) and
# override the event handlers we need. The interpreter is stepped from the
# pyglet clock; the window only converts its pixel buffer into an image and
# feeds it the pressed key before every step.

import logging

import pyglet
from pyglet.window import key

from . import config
from .host import step_budget, run_steps
from .interpreter import Chip8
from .keypad import KeyLatch

logger = logging.getLogger(__name__)

# map binding keys
keymap = {
    key._1: 0x1, key._2: 0x2, key._3: 0x3, key._4: 0xC,
    key.Q: 0x4, key.W: 0x5, key.E: 0x6, key.R: 0xD,
    key.A: 0x7, key.S: 0x8, key.D: 0x9, key.F: 0xE,
    key.Z: 0xA, key.X: 0x0, key.C: 0xB, key.V: 0xF,
}

interpreter_logger = logging.getLogger("chip8emu.interpreter")


class Chip8Window(pyglet.window.Window):

    def __init__(self, program, scale=config.scale, cpu_hz=config.cpu_hz,
                 timer_hz=0, key_hold=config.key_hold, caption="CHIP-8 Emulator"):
        self.scale = scale
        self.window_width = config.width * scale
        self.window_height = config.height * scale
        self._closed = False
        super().__init__(
            width=self.window_width,
            height=self.window_height,
            caption=caption,
            resizable=False,
            vsync=False
        )

        self.chip8 = Chip8(timers_per_step=timer_hz <= 0)
        self.chip8.load_program(program)
        self.keys = KeyLatch(hold=key_hold)
        self.error = None
        self.cpu_hz = cpu_hz
        self._owed = 0.0

        # logs toggle with F1
        self._log_level = interpreter_logger.level

        self.image = pyglet.image.ImageData(
            self.window_width,
            self.window_height,
            'RGBA',
            self.chip8.display.to_rgba(scale)
        )

        # Performance counters
        self.cycle_count = 0
        self.cps_label = pyglet.text.Label(
            "Cycles/s: 0",
            font_size=12,
            x=5,
            y=self.window_height - 15,
            anchor_x='left',
            anchor_y='center',
            color=(255, 255, 255, 255)
        )

        # Schedule CPU ticks, timer ticks and the CPS counter
        pyglet.clock.schedule_interval(self._cpu_tick, 1.0 / cpu_hz)
        if timer_hz > 0:
            pyglet.clock.schedule_interval(self._timer_tick, 1.0 / timer_hz)
        pyglet.clock.schedule_interval(self._update_cps, 1.0)
        logger.info("Emulation started: %d Hz CPU, timers %s", cpu_hz,
                    "%d Hz" % timer_hz if timer_hz > 0 else "per instruction")

    # ---- CPU cycle ----
    def _cpu_tick(self, dt):
        if self.error is not None:
            return
        steps, self._owed = step_budget(self._owed, dt, self.cpu_hz)
        executed, self.error = run_steps(self.chip8, self.keys, steps)
        self.cycle_count += executed
        if self.error is not None:
            self.close()

    # ---- timers ----
    def _timer_tick(self, dt):
        self.chip8.tick_timers()

    def _update_cps(self, dt):
        self.cps_label.text = "Cycles/s: %d" % self.cycle_count
        self.cycle_count = 0

    # ---- Drawing ----
    def on_draw(self):
        if self.chip8.needs_redraw:
            self.image.set_data('RGBA', self.window_width * 4, self.chip8.display.to_rgba(self.scale))
            self.chip8.acknowledge_redraw()
        self.clear()
        self.image.blit(0, 0)
        self.cps_label.draw()

    # ---- Input ----
    def on_key_press(self, symbol, modifiers):
        if symbol == key.ESCAPE:
            self.close()
        elif symbol == key.F1:
            self.toggle_logs()
        elif symbol in keymap:
            self.keys.press(keymap[symbol])

    def on_key_release(self, symbol, modifiers):
        if symbol in keymap:
            self.keys.release(keymap[symbol])

    def toggle_logs(self):
        if interpreter_logger.level == logging.DEBUG:
            interpreter_logger.setLevel(self._log_level)
        else:
            interpreter_logger.setLevel(logging.DEBUG)
        logger.info("Instruction logs %s",
                    "on" if interpreter_logger.level == logging.DEBUG else "off")

    def close(self):
        # reached from Escape, a fatal error and the default on_close; runs once
        if self._closed:
            return
        self._closed = True
        pyglet.clock.unschedule(self._cpu_tick)
        pyglet.clock.unschedule(self._timer_tick)
        pyglet.clock.unschedule(self._update_cps)
        logger.info("Emulation stopped")
        super().close()


def run(program, **options):
    """Open the window and run until it is closed. Returns the fatal error, if any."""
    window = Chip8Window(program, **options)
    pyglet.app.run()
    return window.error
