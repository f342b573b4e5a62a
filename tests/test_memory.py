"""
LC-3 VM: Memory, Keyboard Registers and Image Loader Tests
"""
import sys
import os
import struct
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from lc3vm.emu import LC3Emulator
from lc3vm.errors import ImageLoadError
from lc3vm.cpu.regs import R_R0, FL_NEG
from lc3vm.mem.memory import Memory, MR_KBSR, MR_KBDR, MEMORY_MAX
from lc3vm.mem.image import parse_image, read_image, load_image
from lc3vm.periph.console import BufferedConsole


def write_image(path, origin, words):
    path.write_bytes(struct.pack(f'>{len(words) + 1}H', origin, *words))
    return path


class TestMemory:

    def test_zero_filled(self):
        mem = Memory()
        assert len(mem) == MEMORY_MAX
        assert mem.read(0x0000) == 0
        assert mem.read(0xFFFF) == 0

    def test_write_read(self):
        mem = Memory()
        mem.write(0x3000, 0x1234)
        assert mem.read(0x3000) == 0x1234

    def test_values_and_addresses_truncate(self):
        mem = Memory()
        mem.write(0x13000, 0x1ABCD)
        assert mem.read(0x3000) == 0xABCD

    def test_write_to_kbdr_is_plain_storage(self):
        mem = Memory()
        mem.write(MR_KBDR, 0x0041)
        assert mem.read(MR_KBDR) == 0x0041

    def test_load_words_stops_at_top(self):
        mem = Memory()
        count = mem.load_words(0xFFFE, [1, 2, 3, 4])
        assert count == 2
        assert mem.peek(0xFFFE) == 1
        assert mem.peek(0xFFFF) == 2
        assert mem.peek(0x0000) == 0


class TestKeyboardRegisters:

    def test_no_key_pending(self):
        mem = Memory(keyboard=BufferedConsole())
        mem.write(MR_KBSR, 0x8000)
        assert mem.read(MR_KBSR) == 0
        assert mem.peek(MR_KBSR) == 0

    def test_key_pending(self):
        console = BufferedConsole()
        console.feed(b'A')
        mem = Memory(keyboard=console)
        assert mem.read(MR_KBSR) & 0x8000
        assert mem.read(MR_KBDR) == 0x41
        assert not console.key_available()

    def test_no_keyboard_attached(self):
        mem = Memory()
        assert mem.read(MR_KBSR) == 0

    def test_kbdr_read_does_not_poll(self):
        console = BufferedConsole(b'Z')
        mem = Memory(keyboard=console)
        assert mem.read(MR_KBDR) == 0
        assert console.key_available()

    def test_program_polls_status_through_ldi(self):
        """LDI R0,#1 with pointer xFE00 -> R0 = x8000 when a key waits."""
        emu = LC3Emulator(console=BufferedConsole(b'q'))
        emu.load_words(0x3000, [0xA001, 0xF025, MR_KBSR])
        emu.step()
        assert emu.regs.get(R_R0) == 0x8000
        assert emu.regs.cond == FL_NEG
        assert emu.mem.peek(MR_KBDR) == ord('q')


class TestImageLoader:

    def test_parse_big_endian(self):
        origin, words = parse_image(bytes([0x30, 0x00, 0x12, 0x34, 0xAB, 0xCD]))
        assert origin == 0x3000
        assert words == [0x1234, 0xABCD]

    def test_trailing_odd_byte_ignored(self):
        origin, words = parse_image(bytes([0x30, 0x00, 0x12, 0x34, 0x56]))
        assert words == [0x1234]

    def test_truncated_at_top_of_memory(self):
        origin, words = parse_image(struct.pack('>4H', 0xFFFE, 1, 2, 3))
        assert origin == 0xFFFE
        assert words == [1, 2]

    def test_origin_only(self):
        assert parse_image(b'\x30\x00') == (0x3000, [])

    def test_too_short(self):
        with pytest.raises(ImageLoadError):
            parse_image(b'\x30')

    def test_read_image_file(self, tmp_path):
        path = write_image(tmp_path / "prog.obj", 0x3000, [0xF025])
        assert read_image(path) == (0x3000, [0xF025])

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageLoadError) as exc_info:
            read_image(tmp_path / "nope.obj")
        assert exc_info.value.path.endswith("nope.obj")
        assert "failed to load image" in str(exc_info.value)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.obj"
        path.write_bytes(b'')
        with pytest.raises(ImageLoadError):
            read_image(path)

    def test_load_into_memory(self, tmp_path):
        mem = Memory()
        path = write_image(tmp_path / "prog.obj", 0x4000, [0x1111, 0x2222])
        assert load_image(mem, path) == (0x4000, 2)
        assert mem.peek(0x4000) == 0x1111
        assert mem.peek(0x4001) == 0x2222

    def test_later_image_overwrites_earlier(self, tmp_path):
        emu = LC3Emulator()
        emu.load_image(write_image(tmp_path / "a.obj", 0x3000, [1, 2, 3]))
        emu.load_image(write_image(tmp_path / "b.obj", 0x3001, [9]))
        assert [emu.mem.peek(a) for a in range(0x3000, 0x3003)] == [1, 9, 3]
