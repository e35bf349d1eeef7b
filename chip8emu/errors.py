class Chip8Error(Exception):
    """Base class for fatal interpreter conditions."""


class IllegalInstruction(Chip8Error):
    def __init__(self, opcode, address):
        self.opcode = opcode
        self.address = address
        super().__init__("Unknown opcode: %04X at 0x%03X" % (opcode, address))


class StackOverflow(Chip8Error):
    pass


class StackUnderflow(Chip8Error):
    pass


class MemoryAccessError(Chip8Error):
    def __init__(self, address, length=1):
        self.address = address
        self.length = length
        if length == 1:
            msg = "Memory access out of bounds: 0x%03X" % address
        else:
            msg = "Memory access out of bounds: 0x%03X..0x%03X" % (address, address + length - 1)
        super().__init__(msg)


class RomLoadError(Chip8Error):
    pass
