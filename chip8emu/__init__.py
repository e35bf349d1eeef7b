"""CHIP-8 interpreter with a pyglet front end."""

from .display import DisplayBuffer
from .errors import (Chip8Error, IllegalInstruction, StackOverflow, StackUnderflow,
                     MemoryAccessError, RomLoadError)
from .interpreter import Chip8
from .opcode import Opcode, decode, fetch
from .rom import load_rom

__version__ = "0.1.0"
