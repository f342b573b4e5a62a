"""
LC-3 Virtual Machine: Register File + Condition Codes

Register model:
  R0-R7 general purpose, 16-bit
  PC    program counter, 16-bit
  COND  condition code register, exactly one of:
        bit 2: N (negative)
        bit 1: Z (zero)
        bit 0: P (positive)

Only update_flags() changes COND during execution. It derives the flag
from the register that was just written, so after every flag-setting
instruction exactly one of N/Z/P is set and it matches that value.
"""

from .alu import wrap16, to_signed16, SIGN_BIT

# Register indices
R_R0 = 0
R_R1 = 1
R_R2 = 2
R_R3 = 3
R_R4 = 4
R_R5 = 5
R_R6 = 6
R_R7 = 7
R_PC = 8
R_COND = 9
R_COUNT = 10

# Condition flags
FL_POS = 1 << 0
FL_ZRO = 1 << 1
FL_NEG = 1 << 2

# Programs are loaded at x3000 by convention
PC_START = 0x3000

REGISTER_NAMES = ('R0', 'R1', 'R2', 'R3', 'R4', 'R5', 'R6', 'R7', 'PC', 'COND')


class Registers:
    """LC-3 register file: eight general registers, PC and COND."""

    __slots__ = ('_reg',)

    def __init__(self):
        self._reg = [0] * R_COUNT
        self.reset()

    # --- Indexed access ---

    def get(self, index: int) -> int:
        return self._reg[index]

    def set(self, index: int, value: int):
        self._reg[index] = wrap16(value)

    # --- Named access ---

    @property
    def pc(self) -> int:
        return self._reg[R_PC]

    @pc.setter
    def pc(self, value: int):
        self._reg[R_PC] = wrap16(value)

    @property
    def cond(self) -> int:
        return self._reg[R_COND]

    # --- Flags ---

    def update_flags(self, index: int):
        """Recompute COND from the current value of register ``index``."""
        value = self._reg[index]
        if value == 0:
            self._reg[R_COND] = FL_ZRO
        elif value & SIGN_BIT:
            self._reg[R_COND] = FL_NEG
        else:
            self._reg[R_COND] = FL_POS

    @property
    def positive(self) -> bool:
        return bool(self._reg[R_COND] & FL_POS)

    @property
    def zero(self) -> bool:
        return bool(self._reg[R_COND] & FL_ZRO)

    @property
    def negative(self) -> bool:
        return bool(self._reg[R_COND] & FL_NEG)

    # --- Display ---

    def display(self) -> str:
        """Format register state for trace output."""
        gprs = ' '.join(f"R{i}={self._reg[i]:04X}" for i in range(8))
        nzp = ''.join(c if self._reg[R_COND] & bit else '.'
                      for c, bit in (('N', FL_NEG), ('Z', FL_ZRO), ('P', FL_POS)))
        return f"PC={self.pc:04X} {gprs} CC=[{nzp}]"

    def dump(self) -> dict:
        """Register name -> value, general registers also as signed ints."""
        return {
            name: (to_signed16(self._reg[i]) if i < 8 else self._reg[i])
            for i, name in enumerate(REGISTER_NAMES)
        }

    def reset(self):
        """Power-on state: R0-R7 cleared, PC at x3000, Z flag set."""
        for i in range(R_COUNT):
            self._reg[i] = 0
        self._reg[R_PC] = PC_START
        self._reg[R_COND] = FL_ZRO
