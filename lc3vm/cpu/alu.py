"""
LC-3 Virtual Machine: Bit-Field and Word Arithmetic Helpers

Every register, address and memory cell is an unsigned 16-bit word.
Arithmetic is done on Python ints and truncated with wrap16(); the
signed view (two's complement) is only needed for flags and display.

Sign extension widths used by the instruction set:
  imm5      ADD / AND immediate
  offset6   LDR / STR
  PCoffset9 BR, LD, LDI, LEA, ST, STI
  PCoffset11 JSR
"""

WORD_MASK = 0xFFFF
SIGN_BIT = 0x8000


def wrap16(value: int) -> int:
    """Truncate to 16 bits (modulo 65,536)."""
    return value & WORD_MASK


def sign_extend(value: int, bit_count: int) -> int:
    """Extend the low ``bit_count`` bits of ``value`` to a 16-bit word.

    If bit ``bit_count - 1`` is set, bits ``bit_count``..15 are filled
    with ones; otherwise they stay zero.

        sign_extend(0b11111, 5) == 0xFFFF   # -1
        sign_extend(0b01111, 5) == 0x000F   # 15
    """
    value &= (1 << bit_count) - 1
    if (value >> (bit_count - 1)) & 1:
        value |= (WORD_MASK << bit_count) & WORD_MASK
    return value


def to_signed16(word: int) -> int:
    """Interpret a 16-bit word as a two's complement integer."""
    word &= WORD_MASK
    return word - 0x10000 if word & SIGN_BIT else word


def field(word: int, hi: int, lo: int) -> int:
    """Extract bits hi..lo (inclusive) of ``word``."""
    return (word >> lo) & ((1 << (hi - lo + 1)) - 1)
