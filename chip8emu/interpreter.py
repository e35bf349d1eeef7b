# CHIP8 Virtual Machine
# CPU - Cowgod's CHIP8 Technical reference http://devernay.free.fr/hacks/chip8/C8TECH10.HTM#0.0
#----------------------------------------------------------------------------------------------
# Registers are 16 bytes (V0..VF, VF doubling as the carry/borrow/collision flag), plus the
# 16-bit I register. The stack holds 16 return addresses. Two timers count down once per
# executed instruction unless the host drives them from its own clock.
# Each call to advance() fetches, decodes and executes exactly one instruction; nothing in
# here blocks, "wait for key" simply re-runs the same instruction on the next call.
#----------------------------------------------------------------------------------------------

import logging
import random

from .config import (MEMORY_SIZE, PROGRAM_START, REGISTER_COUNT, STACK_DEPTH,
                     FLAG_REGISTER, GLYPH_SIZE, fontset)
from .display import DisplayBuffer
from .errors import (Chip8Error, IllegalInstruction, StackOverflow, StackUnderflow,
                     MemoryAccessError)
from .keypad import is_key
from .opcode import fetch

logger = logging.getLogger(__name__)


class Chip8:

    def __init__(self, random_source=None, timers_per_step=True):
        self.random = random_source if random_source is not None else random.Random()
        self.timers_per_step = timers_per_step
        self.display = DisplayBuffer()

        # Prepare opcode function maps
        self.setup_funcmap()
        self.reset()

    def reset(self):
        # ---- CPU state ----
        self.memory = bytearray(MEMORY_SIZE)
        self.registers = bytearray(REGISTER_COUNT)
        self.index = 0                  # I register (memory pointer)
        self.pc = PROGRAM_START         # program counter starts at 0x200
        self.stack = [0] * STACK_DEPTH
        self.sp = 0
        self.delay_timer = 0
        self.sound_timer = 0
        self.pressed_key = None
        self.needs_redraw = False
        self.display.clear()

        self.load_fonts(fontset)

    # ---- Opcode function maps ----
    def setup_funcmap(self):
        self.sys_table = {
            0x0E0: self.op_CLS,
            0x0EE: self.op_RET,
        }

        self.logic_table = {
            0x0: self.op_LD_Vx_Vy,
            0x1: self.op_OR,
            0x2: self.op_AND,
            0x3: self.op_XOR,
            0x4: self.op_ADD,
            0x5: self.op_SUB,
            0x6: self.op_SHR,
            0x7: self.op_SUBN,
            0xE: self.op_SHL,
        }

        self.key_table = {
            0x9E: self.op_SKP,
            0xA1: self.op_SKNP,
        }

        self.misc_table = {
            0x07: self.op_LD_Vx_DT,
            0x0A: self.op_WAITKEY,
            0x15: self.op_LD_DT_Vx,
            0x18: self.op_LD_ST_Vx,
            0x1E: self.op_ADD_I_Vx,
            0x29: self.op_FONT,
            0x33: self.op_BCD,
            0x55: self.op_STORE,
            0x65: self.op_LOAD,
        }

        # families 0x0, 0x8, 0xE and 0xF select a handler from a sub-table
        self.funcmap = {
            0x0: self.sys_table,     # 00E0 / 00EE / 0nnn - clear screen, return, SYS (ignored)
            0x1: self.op_JP,         # 1nnn - Jump to address nnn
            0x2: self.op_CALL,       # 2nnn - Call subroutine at nnn
            0x3: self.op_SE_Vx_kk,   # 3xkk - Skip next instruction if Vx == kk
            0x4: self.op_SNE_Vx_kk,  # 4xkk - Skip next instruction if Vx != kk
            0x5: self.op_SE_Vx_Vy,   # 5xy0 - Skip next instruction if Vx == Vy
            0x6: self.op_LD_Vx_kk,   # 6xkk - Vx = kk
            0x7: self.op_ADD_Vx_kk,  # 7xkk - Vx += kk, no carry
            0x8: self.logic_table,   # 8xy0..8xyE - math and logic between two registers
            0x9: self.op_SNE_Vx_Vy,  # 9xy0 - Skip next instruction if Vx != Vy
            0xA: self.op_LD_I,       # Annn - I = nnn
            0xB: self.op_JP_V0,      # Bnnn - Jump to nnn + V0
            0xC: self.op_RND,        # Cxkk - Vx = random byte AND kk
            0xD: self.op_DRW,        # Dxyn - Draw n-byte sprite at (Vx, Vy)
            0xE: self.key_table,     # Ex9E / ExA1 - key skips
            0xF: self.misc_table,    # Fx07..Fx65 - timers, memory, I and key input
        }
        self.selectors = {0x0: "nnn", 0x8: "n", 0xE: "kk", 0xF: "kk"}

    # ---- Loading ----
    def load_fonts(self, fonts):
        fonts = bytes(fonts)
        if len(fonts) > PROGRAM_START:
            raise MemoryAccessError(0, len(fonts))
        self.memory[:len(fonts)] = fonts

    def load_program(self, data):
        data = bytes(data)
        end = PROGRAM_START + len(data)
        if end > MEMORY_SIZE:
            raise MemoryAccessError(PROGRAM_START, len(data))
        self.memory[PROGRAM_START:end] = data
        logger.info("Loaded %d byte program at 0x%03X", len(data), PROGRAM_START)

    # ---- Input ----
    def set_pressed_key(self, key):
        if key is not None and not is_key(key):
            raise ValueError("key must be None or in range 0..15, got %r" % (key,))
        self.pressed_key = key

    # ---- Output ----
    def acknowledge_redraw(self):
        self.needs_redraw = False

    @property
    def sound_active(self):
        return self.sound_timer > 0

    # ---- Cycle ----
    def advance(self):
        """Execute one instruction and tick the timers.

        Returns the decoded opcode. A Chip8Error leaves the machine as it was
        before the instruction.
        """
        address = self.pc
        op = fetch(self.memory, address)
        handler = self.lookup(op)

        # Default PC increment; jumps overwrite it, skips add to it
        self.pc = address + 2
        try:
            handler(op)
        except Chip8Error:
            self.pc = address
            raise
        logger.debug("0x%03X: %s %s", address, op, handler.__name__)

        if self.timers_per_step:
            self.tick_timers()
        return op

    def lookup(self, op):
        """Find the handler for a decoded opcode, or raise IllegalInstruction."""
        handler = self.funcmap[op.leading]
        if isinstance(handler, dict):
            selector = getattr(op, self.selectors[op.leading])
            default = self.op_SYS if op.leading == 0x0 else None
            handler = handler.get(selector, default)
        if handler is None:
            raise IllegalInstruction(op.word, self.pc)
        return handler

    # ---- Timers ----
    def tick_timers(self):
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1

    def _check_range(self, start, length=1):
        if start < 0 or start + length > MEMORY_SIZE:
            raise MemoryAccessError(start, length)

    # ---- Opcode Handlers ----

    # 0nnn - SYS addr, machine code routines are ignored by modern interpreters
    def op_SYS(self, op):
        logger.debug("SYS call ignored (0nnn)")

    # 00E0 - CLS
    def op_CLS(self, op):
        self.display.clear()
        self.needs_redraw = True

    # 00EE - RET
    def op_RET(self, op):
        if self.sp == 0:
            raise StackUnderflow("Stack underflow on 00EE at 0x%03X" % (self.pc - 2))
        self.sp -= 1
        # the stack holds the call site, resume past it
        self.pc = self.stack[self.sp] + 2

    # 1nnn - JP addr
    def op_JP(self, op):
        self.pc = op.nnn

    # 2nnn - CALL addr
    def op_CALL(self, op):
        if self.sp >= STACK_DEPTH:
            raise StackOverflow("Stack overflow on CALL at 0x%03X" % (self.pc - 2))
        self.stack[self.sp] = self.pc - 2
        self.sp += 1
        self.pc = op.nnn

    # 3xkk - SE Vx, byte
    def op_SE_Vx_kk(self, op):
        if self.registers[op.x] == op.kk:
            self.pc += 2

    # 4xkk - SNE Vx, byte
    def op_SNE_Vx_kk(self, op):
        if self.registers[op.x] != op.kk:
            self.pc += 2

    # 5xy0 - SE Vx, Vy
    def op_SE_Vx_Vy(self, op):
        if self.registers[op.x] == self.registers[op.y]:
            self.pc += 2

    # 6xkk - LD Vx, byte
    def op_LD_Vx_kk(self, op):
        self.registers[op.x] = op.kk

    # 7xkk - ADD Vx, byte (wraps, VF untouched)
    def op_ADD_Vx_kk(self, op):
        self.registers[op.x] = (self.registers[op.x] + op.kk) & 0xFF

    # 8xy0 - LD Vx, Vy
    def op_LD_Vx_Vy(self, op):
        self.registers[op.x] = self.registers[op.y]

    # 8xy1 - OR Vx, Vy
    def op_OR(self, op):
        self.registers[op.x] |= self.registers[op.y]

    # 8xy2 - AND Vx, Vy
    def op_AND(self, op):
        self.registers[op.x] &= self.registers[op.y]

    # 8xy3 - XOR Vx, Vy
    def op_XOR(self, op):
        self.registers[op.x] ^= self.registers[op.y]

    # 8xy4 - ADD Vx, Vy, VF = carry
    def op_ADD(self, op):
        total = self.registers[op.x] + self.registers[op.y]
        self.registers[op.x] = total & 0xFF
        self.registers[FLAG_REGISTER] = 1 if total > 0xFF else 0

    # 8xy5 - SUB Vx, Vy, VF = borrow
    def op_SUB(self, op):
        diff = self.registers[op.x] - self.registers[op.y]
        self.registers[op.x] = diff & 0xFF
        self.registers[FLAG_REGISTER] = 1 if diff < 0 else 0

    # 8xy6 - SHR Vx, VF = bit shifted out
    def op_SHR(self, op):
        self.registers[FLAG_REGISTER] = self.registers[op.x] & 1
        self.registers[op.x] >>= 1

    # 8xy7 - SUBN Vx, Vy, VF = borrow
    def op_SUBN(self, op):
        diff = self.registers[op.y] - self.registers[op.x]
        self.registers[op.x] = diff & 0xFF
        self.registers[FLAG_REGISTER] = 1 if diff < 0 else 0

    # 8xyE - SHL Vx, VF = bit shifted out
    def op_SHL(self, op):
        self.registers[FLAG_REGISTER] = self.registers[op.x] >> 7
        self.registers[op.x] = (self.registers[op.x] << 1) & 0xFF

    # 9xy0 - SNE Vx, Vy
    def op_SNE_Vx_Vy(self, op):
        if self.registers[op.x] != self.registers[op.y]:
            self.pc += 2

    # Annn - LD I, addr
    def op_LD_I(self, op):
        self.index = op.nnn

    # Bnnn - JP V0, addr
    def op_JP_V0(self, op):
        self.pc = op.nnn + self.registers[0]

    # Cxkk - RND Vx, byte
    def op_RND(self, op):
        self.registers[op.x] = self.random.getrandbits(8) & op.kk

    # Dxyn - DRW Vx, Vy, nibble
    def op_DRW(self, op):
        # zero rows read no memory, so I may point anywhere
        if op.n:
            self._check_range(self.index, op.n)
        px = self.registers[op.x]
        py = self.registers[op.y]
        rows = self.memory[self.index:self.index + op.n]
        collision = self.display.draw_sprite(px, py, rows)
        self.registers[FLAG_REGISTER] = 1 if collision else 0
        self.needs_redraw = True

    # Ex9E - SKP Vx
    def op_SKP(self, op):
        if self.pressed_key is not None and self.registers[op.x] == self.pressed_key:
            self.pc += 2

    # ExA1 - SKNP Vx, only fires while some other key is held
    def op_SKNP(self, op):
        if self.pressed_key is not None and self.registers[op.x] != self.pressed_key:
            self.pc += 2

    # Fx07 - LD Vx, DT
    def op_LD_Vx_DT(self, op):
        self.registers[op.x] = self.delay_timer

    # Fx0A - LD Vx, K: stall on this instruction until a key is pressed
    def op_WAITKEY(self, op):
        if self.pressed_key is None:
            self.pc -= 2
            self.needs_redraw = True
            return
        self.registers[op.x] = self.pressed_key

    # Fx15 - LD DT, Vx
    def op_LD_DT_Vx(self, op):
        self.delay_timer = self.registers[op.x]

    # Fx18 - LD ST, Vx
    def op_LD_ST_Vx(self, op):
        self.sound_timer = self.registers[op.x]

    # Fx1E - ADD I, Vx, VF = 1 when I moves past 0xF00
    def op_ADD_I_Vx(self, op):
        self.index = (self.index + self.registers[op.x]) & 0xFFFF
        self.registers[FLAG_REGISTER] = 1 if self.index > 0x0F00 else 0

    # Fx29 - LD F, Vx
    def op_FONT(self, op):
        self.index = self.registers[op.x] * GLYPH_SIZE

    # Fx33 - LD B, Vx
    def op_BCD(self, op):
        self._check_range(self.index, 3)
        value = self.registers[op.x]
        self.memory[self.index] = value // 100
        self.memory[self.index + 1] = (value // 10) % 10
        self.memory[self.index + 2] = value % 10

    # Fx55 - LD [I], Vx
    def op_STORE(self, op):
        self._check_range(self.index, op.x + 1)
        self.memory[self.index:self.index + op.x + 1] = self.registers[:op.x + 1]

    # Fx65 - LD Vx, [I]
    def op_LOAD(self, op):
        self._check_range(self.index, op.x + 1)
        self.registers[:op.x + 1] = self.memory[self.index:self.index + op.x + 1]
