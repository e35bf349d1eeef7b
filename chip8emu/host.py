# Host loop pacing, kept free of pyglet so it runs without a display.

import logging

from .errors import Chip8Error

logger = logging.getLogger(__name__)


def step_budget(owed, dt, cpu_hz):
    """Instructions to run for a clock tick of `dt` seconds.

    The clock rarely fires at exactly cpu_hz, so fractional steps carry over
    in `owed`. At most one second's worth of steps runs per tick; whole steps
    beyond that are dropped. Returns (steps, owed).
    """
    owed += dt * cpu_hz
    whole = int(owed)
    return min(whole, cpu_hz), owed - whole


def run_steps(chip8, keys, steps):
    """Advance the interpreter `steps` times, feeding the latched key first.

    Returns (executed, error); error is the Chip8Error that stopped the run,
    or None.
    """
    executed = 0
    try:
        for _ in range(steps):
            chip8.set_pressed_key(keys.current())
            chip8.advance()
            executed += 1
    except Chip8Error as e:
        logger.error("Emulation error: %s", e)
        return executed, e
    return executed, None
