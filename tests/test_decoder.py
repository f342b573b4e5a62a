"""
Decoder and bit-field tests for the LC-3 VM.

Instruction words are hand-assembled from the LC-3 ISA encoding table;
each test names the assembly it stands for.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from lc3vm.cpu.alu import sign_extend, to_signed16, wrap16, field
from lc3vm.cpu.decoder import (
    decode, Add, And, Not, Br, Jmp, Jsr, Ld, Ldi, Ldr, Lea, St, Sti, Str,
    Trap, Illegal, OP_RTI, OP_RES,
)


class TestSignExtend:
    """sign_extend must agree with the n-bit two's complement value."""

    @pytest.mark.parametrize("bits", [5, 6, 9, 11])
    def test_every_pattern_preserves_signed_value(self, bits):
        for pattern in range(1 << bits):
            expected = pattern - (1 << bits) if pattern >> (bits - 1) else pattern
            assert to_signed16(sign_extend(pattern, bits)) == expected

    def test_imm5_minus_one(self):
        assert sign_extend(0b11111, 5) == 0xFFFF

    def test_imm5_fifteen(self):
        assert sign_extend(0b01111, 5) == 15

    def test_ignores_bits_above_field(self):
        """Upper bits of the instruction word must not leak into the result."""
        assert sign_extend(0x1061, 5) == 0x0001
        assert sign_extend(0x0FFF, 9) == 0xFFFF

    def test_offset11_most_negative(self):
        assert sign_extend(0b10000000000, 11) == 0xFC00


class TestWordHelpers:

    def test_wrap16(self):
        assert wrap16(0x10000) == 0
        assert wrap16(-1) == 0xFFFF

    def test_to_signed16(self):
        assert to_signed16(0x7FFF) == 32767
        assert to_signed16(0x8000) == -32768

    def test_field(self):
        assert field(0x1042, 15, 12) == 0x1
        assert field(0x1042, 11, 9) == 0
        assert field(0x1042, 8, 6) == 1
        assert field(0x1042, 2, 0) == 2


class TestDecodeOperate:

    def test_add_register_mode(self):
        """ADD R0, R1, R2 = 0x1042"""
        instr = decode(0x1042)
        assert instr == Add(0x1042, dr=0, sr1=1, imm=False, sr2=2)
        assert instr.mnemonic == 'ADD'

    def test_add_immediate_mode(self):
        """ADD R0, R1, #-1 = 0x107F"""
        instr = decode(0x107F)
        assert isinstance(instr, Add)
        assert instr.imm is True
        assert instr.imm5 == 0xFFFF

    def test_and_immediate_zero(self):
        """AND R0, R0, #0 = 0x5020"""
        instr = decode(0x5020)
        assert instr == And(0x5020, dr=0, sr1=0, imm=True, imm5=0)

    def test_not(self):
        """NOT R0, R1 = 0x907F"""
        assert decode(0x907F) == Not(0x907F, dr=0, sr=1)


class TestDecodeControl:

    def test_br_condition_and_offset(self):
        """BRnzp #-1 = 0x0FFF"""
        instr = decode(0x0FFF)
        assert instr == Br(0x0FFF, cond=0b111, offset=0xFFFF)

    def test_br_zero_only(self):
        """BRz #2 = 0x0402"""
        instr = decode(0x0402)
        assert instr.cond == 0b010
        assert instr.offset == 2

    def test_jmp_and_ret(self):
        """JMP R2 = 0xC080, RET = 0xC1C0"""
        assert decode(0xC080) == Jmp(0xC080, base=2)
        assert decode(0xC1C0) == Jmp(0xC1C0, base=7)

    def test_jsr_offset_mode(self):
        """JSR #-1 = 0x4FFF"""
        instr = decode(0x4FFF)
        assert instr == Jsr(0x4FFF, long=True, offset=0xFFFF)

    def test_jsrr_register_mode(self):
        """JSRR R3 = 0x40C0"""
        assert decode(0x40C0) == Jsr(0x40C0, long=False, base=3)

    def test_trap_vector(self):
        """TRAP x25 = 0xF025"""
        assert decode(0xF025) == Trap(0xF025, vector=0x25)


class TestDecodeMemory:

    def test_pc_relative_forms(self):
        """LD/LDI/LEA/ST/STI R3, #-2 share one layout."""
        assert decode(0x27FE) == Ld(0x27FE, dr=3, offset=0xFFFE)
        assert decode(0xA7FE) == Ldi(0xA7FE, dr=3, offset=0xFFFE)
        assert decode(0xE7FE) == Lea(0xE7FE, dr=3, offset=0xFFFE)
        assert decode(0x37FE) == St(0x37FE, sr=3, offset=0xFFFE)
        assert decode(0xB7FE) == Sti(0xB7FE, sr=3, offset=0xFFFE)

    def test_ldr_negative_offset6(self):
        """LDR R0, R1, #-2 = 0x607E"""
        assert decode(0x607E) == Ldr(0x607E, dr=0, base=1, offset=0xFFFE)

    def test_str_positive_offset6(self):
        """STR R0, R1, #4 = 0x7044"""
        assert decode(0x7044) == Str(0x7044, sr=0, base=1, offset=4)


class TestDecodeIllegal:

    def test_rti_is_illegal(self):
        instr = decode(0x8000)
        assert instr == Illegal(0x8000, opcode=OP_RTI)

    def test_reserved_is_illegal(self):
        instr = decode(0xDABC)
        assert isinstance(instr, Illegal)
        assert instr.opcode == OP_RES
        assert instr.mnemonic == 'RES'

    def test_every_word_decodes(self):
        """No word crashes the decoder; only RTI/RES are Illegal."""
        for opcode in range(16):
            instr = decode((opcode << 12) | 0x0ABC)
            assert isinstance(instr, Illegal) == (opcode in (OP_RTI, OP_RES))
