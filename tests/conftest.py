import random

import pytest

from chip8emu.interpreter import Chip8


def assemble(*words):
    """Pack 16-bit instruction words into a big-endian program image."""
    program = bytearray()
    for word in words:
        program += bytes([(word >> 8) & 0xFF, word & 0xFF])
    return bytes(program)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def machine(rng):
    """Factory: a Chip8 with the given instruction words loaded at 0x200."""
    def _machine(*words, **kwargs):
        chip8 = Chip8(random_source=rng, **kwargs)
        chip8.load_program(assemble(*words))
        return chip8
    return _machine


def run(chip8, steps):
    for _ in range(steps):
        chip8.advance()
    return chip8
