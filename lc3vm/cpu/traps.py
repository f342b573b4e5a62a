"""
LC-3 Virtual Machine: Trap Routines

The LC-3 OS services reached through TRAP, implemented in Python
instead of as LC-3 code in low memory:

  x20  GETC   read one character, no echo -> R0
  x21  OUT    write low byte of R0
  x22  PUTS   write a null-terminated string, one char per word, at [R0]
  x23  IN     prompt, read one character with echo -> R0
  x24  PUTSP  write a null-terminated string, two chars per word, at [R0]
  x25  HALT   print a notice and stop the machine

R7 already holds the return address when a routine runs (the executor
saves it). GETC and IN set the condition codes from R0; the others
leave them alone.
"""

import logging

from ..errors import UnknownTrapVector
from .regs import R_R0

log = logging.getLogger(__name__)

# Trap vectors
TRAP_GETC  = 0x20
TRAP_OUT   = 0x21
TRAP_PUTS  = 0x22
TRAP_IN    = 0x23
TRAP_PUTSP = 0x24
TRAP_HALT  = 0x25

IN_PROMPT = "Enter a character: "
HALT_NOTICE = "HALT\n"


class TrapDispatcher:
    """Routes a trap vector to its built-in routine."""

    def __init__(self):
        self._routines = {
            TRAP_GETC:  self._trap_getc,
            TRAP_OUT:   self._trap_out,
            TRAP_PUTS:  self._trap_puts,
            TRAP_IN:    self._trap_in,
            TRAP_PUTSP: self._trap_putsp,
            TRAP_HALT:  self._trap_halt,
        }

    def dispatch(self, machine, vector: int, address: int):
        """Run the routine for ``vector``.

        ``address`` is where the TRAP instruction was fetched; it is only
        used to report an unknown vector.
        """
        routine = self._routines.get(vector)
        if routine is None:
            raise UnknownTrapVector(address, vector)
        routine(machine)

    # ── Input ──

    def _trap_getc(self, machine):
        machine.regs.set(R_R0, machine.console.read_char())
        machine.regs.update_flags(R_R0)

    def _trap_in(self, machine):
        console = machine.console
        _write_text(console, IN_PROMPT)
        console.flush()
        char = console.read_char()
        console.write_char(char)
        console.flush()
        machine.regs.set(R_R0, char)
        machine.regs.update_flags(R_R0)

    # ── Output ──

    def _trap_out(self, machine):
        machine.console.write_char(machine.regs.get(R_R0) & 0xFF)
        machine.console.flush()

    def _trap_puts(self, machine):
        address = machine.regs.get(R_R0)
        word = machine.mem.read(address)
        while word:
            machine.console.write_char(word & 0xFF)
            address += 1
            word = machine.mem.read(address)
        machine.console.flush()

    def _trap_putsp(self, machine):
        address = machine.regs.get(R_R0)
        word = machine.mem.read(address)
        while word:
            machine.console.write_char(word & 0xFF)
            high = word >> 8
            if high:
                machine.console.write_char(high)
            address += 1
            word = machine.mem.read(address)
        machine.console.flush()

    # ── Control ──

    def _trap_halt(self, machine):
        _write_text(machine.console, HALT_NOTICE)
        machine.console.flush()
        machine.halt()


def _write_text(console, text: str):
    for ch in text:
        console.write_char(ord(ch))
