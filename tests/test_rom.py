import pytest

from chip8emu.errors import Chip8Error, RomLoadError
from chip8emu.rom import load_rom


class TestLoadRom:
    def test_reads_bytes(self, tmp_path):
        path = tmp_path / "PONG"
        path.write_bytes(b"\x6A\x02\x6B\x0C")
        assert load_rom(path) == b"\x6A\x02\x6B\x0C"

    def test_accepts_str_path(self, tmp_path):
        path = tmp_path / "rom.ch8"
        path.write_bytes(b"\x00\xE0")
        assert load_rom(str(path)) == b"\x00\xE0"

    def test_missing_file(self, tmp_path):
        with pytest.raises(RomLoadError) as excinfo:
            load_rom(tmp_path / "nope.ch8")
        assert "nope.ch8" in str(excinfo.value)
        assert isinstance(excinfo.value.__cause__, OSError)

    def test_directory(self, tmp_path):
        with pytest.raises(RomLoadError):
            load_rom(tmp_path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.ch8"
        path.write_bytes(b"")
        with pytest.raises(RomLoadError):
            load_rom(path)

    def test_is_chip8_error(self):
        assert issubclass(RomLoadError, Chip8Error)
