# Opcode decoding
# Every CHIP-8 instruction is 2 bytes, stored big-endian. The fields below are
# the ones Cowgod's reference uses to describe the instruction set:
#   nnn - lowest 12 bits (address)
#   n   - lowest 4 bits (nibble)
#   x   - lower 4 bits of the high byte (register)
#   y   - upper 4 bits of the low byte (register)
#   kk  - lowest 8 bits (byte)
# Any 16-bit word decodes; whether it is a legal instruction is decided by the
# interpreter's dispatch tables.

from collections import namedtuple

from .errors import MemoryAccessError


class Opcode(namedtuple("Opcode", "word leading x y n kk nnn")):
    __slots__ = ()

    def __str__(self):
        return "%04X" % self.word


def decode(word):
    word &= 0xFFFF
    return Opcode(
        word=word,
        leading=(word & 0xF000) >> 12,
        x=(word & 0x0F00) >> 8,
        y=(word & 0x00F0) >> 4,
        n=word & 0x000F,
        kk=word & 0x00FF,
        nnn=word & 0x0FFF,
    )


def fetch(memory, pc):
    """Read the instruction word at pc and decode it."""
    # guard pc bounds
    if pc < 0 or pc + 1 >= len(memory):
        raise MemoryAccessError(pc, 2)
    return decode((memory[pc] << 8) | memory[pc + 1])
