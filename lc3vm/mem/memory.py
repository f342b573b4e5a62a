"""
LC-3 Virtual Machine: 64K Word Memory with Keyboard Device Registers

Memory map:
  x0000-x2FFF  Trap vector table, OS, supervisor stack (unused here:
               traps are built into the emulator)
  x3000-xFDFF  User program space
  xFE00        KBSR - keyboard status register (bit 15 = key ready)
  xFE02        KBDR - keyboard data register (last key code)

Memory is a flat array of 65,536 unsigned 16-bit words. Reading KBSR
is not a pure observation: it polls the keyboard and may rewrite both
KBSR and KBDR before returning. Every other address is plain storage
with no write protection.
"""

from array import array
from typing import Iterable, Optional

from ..cpu.alu import wrap16

MEMORY_MAX = 1 << 16

# Memory-mapped keyboard registers
MR_KBSR = 0xFE00
MR_KBDR = 0xFE02

KBSR_READY = 0x8000


class Memory:
    """65,536-word LC-3 memory.

    The keyboard capability is injected at construction. It must provide
    ``key_available() -> bool`` (non-blocking) and ``read_char() -> int``.
    With ``keyboard=None`` no key is ever pending.
    """

    def __init__(self, keyboard=None):
        self._mem = array('H', bytes(2 * MEMORY_MAX))
        self.keyboard = keyboard

    # --- Core read/write ---

    def read(self, address: int) -> int:
        """Read the word at ``address``.

        A read of KBSR first samples the keyboard: a pending key sets
        bit 15 of KBSR and stores its code in KBDR, otherwise KBSR is
        cleared.
        """
        address = wrap16(address)
        if address == MR_KBSR:
            self._poll_keyboard()
        return self._mem[address]

    def write(self, address: int, value: int):
        """Store ``value`` at ``address`` unconditionally."""
        self._mem[wrap16(address)] = wrap16(value)

    def _poll_keyboard(self):
        if self.keyboard is not None and self.keyboard.key_available():
            self._mem[MR_KBSR] = KBSR_READY
            self._mem[MR_KBDR] = wrap16(self.keyboard.read_char())
        else:
            self._mem[MR_KBSR] = 0

    # --- Bulk load ---

    def load_words(self, origin: int, words: Iterable[int]) -> int:
        """Store ``words`` sequentially from ``origin``.

        Stops at the top of the address space. Returns the number of
        words stored.
        """
        address = wrap16(origin)
        count = 0
        for word in words:
            if address >= MEMORY_MAX:
                break
            self._mem[address] = wrap16(word)
            address += 1
            count += 1
        return count

    def peek(self, address: int) -> int:
        """Raw cell value, without keyboard side effects."""
        return self._mem[wrap16(address)]

    def __len__(self) -> int:
        return MEMORY_MAX
