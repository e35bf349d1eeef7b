# Input - the interpreter sees at most one pressed key per step. The latch
# collapses the physical keys held down into that single key and keeps
# reporting a released key for a short hold period, so a quick tap is not
# missed between two interpreter steps.

import logging
import time

from .config import key_hold

logger = logging.getLogger(__name__)


def is_key(value):
    """True for an int in 0..15. bool and float values are rejected."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 0xF


class KeyLatch:

    def __init__(self, hold=key_hold, clock=time.monotonic):
        if hold < 0:
            raise ValueError("hold must not be negative")
        self.hold = hold
        self.clock = clock
        self.held = set()
        self.latched = None
        self.updated = clock()

    def press(self, key):
        if not is_key(key):
            raise ValueError("key must be an int in range 0..15, got %r" % (key,))
        self.held.add(key)

    def release(self, key):
        self.held.discard(key)

    def current(self, now=None):
        """Key to hand to the interpreter for the next step, or None."""
        if now is None:
            now = self.clock()
        key = min(self.held) if self.held else None
        if key is not None or now - self.updated >= self.hold:
            if key != self.latched:
                logger.debug("Key latch: %s -> %s", self.latched, key)
            self.latched = key
            self.updated = now
        return self.latched
