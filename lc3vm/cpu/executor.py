"""
LC-3 Virtual Machine: Instruction Executor

Applies a decoded instruction to the machine state. PC has already been
advanced past the instruction when a handler runs, so every
PC-relative address is computed from the incremented PC.

Flag behaviour:
  ADD AND NOT LD LDI LDR LEA   set N/Z/P from the destination register
  BR JMP JSR ST STI STR        leave COND alone
  TRAP                         routine-dependent (GETC and IN set flags)

All address and result arithmetic wraps modulo 2^16; nothing overflows.
"""

from ..errors import IllegalOpcode
from .alu import wrap16
from .decoder import (
    Add, And, Not, Br, Jmp, Jsr, Ld, Ldi, Ldr, Lea, St, Sti, Str, Trap, Illegal,
)
from .regs import R_R7
from .traps import TrapDispatcher


class Executor:
    """Executes decoded instructions against a machine.

    Handler signature: handler(machine, instruction, address), where
    ``address`` is the location the instruction was fetched from.
    """

    def __init__(self, traps: TrapDispatcher = None):
        self.traps = traps if traps is not None else TrapDispatcher()
        self._dispatch = self._build_dispatch()

    def _build_dispatch(self) -> dict:
        return {
            Add:     self._op_add,
            And:     self._op_and,
            Not:     self._op_not,
            Br:      self._op_br,
            Jmp:     self._op_jmp,
            Jsr:     self._op_jsr,
            Ld:      self._op_ld,
            Ldi:     self._op_ldi,
            Ldr:     self._op_ldr,
            Lea:     self._op_lea,
            St:      self._op_st,
            Sti:     self._op_sti,
            Str:     self._op_str,
            Trap:    self._op_trap,
            Illegal: self._op_illegal,
        }

    def execute(self, machine, instr, address: int):
        handler = self._dispatch[type(instr)]
        handler(machine, instr, address)

    # ── Operate ──

    def _op_add(self, machine, instr: Add, address):
        regs = machine.regs
        operand = instr.imm5 if instr.imm else regs.get(instr.sr2)
        regs.set(instr.dr, regs.get(instr.sr1) + operand)
        regs.update_flags(instr.dr)

    def _op_and(self, machine, instr: And, address):
        regs = machine.regs
        operand = instr.imm5 if instr.imm else regs.get(instr.sr2)
        regs.set(instr.dr, regs.get(instr.sr1) & operand)
        regs.update_flags(instr.dr)

    def _op_not(self, machine, instr: Not, address):
        regs = machine.regs
        regs.set(instr.dr, ~regs.get(instr.sr))
        regs.update_flags(instr.dr)

    # ── Control ──

    def _op_br(self, machine, instr: Br, address):
        if instr.cond & machine.regs.cond:
            machine.regs.pc = machine.regs.pc + instr.offset

    def _op_jmp(self, machine, instr: Jmp, address):
        machine.regs.pc = machine.regs.get(instr.base)

    def _op_jsr(self, machine, instr: Jsr, address):
        regs = machine.regs
        return_pc = regs.pc
        if instr.long:
            target = return_pc + instr.offset
        else:
            # read BaseR before R7 is overwritten: JSRR R7 jumps to old R7
            target = regs.get(instr.base)
        regs.set(R_R7, return_pc)
        regs.pc = target

    def _op_trap(self, machine, instr: Trap, address):
        machine.regs.set(R_R7, machine.regs.pc)
        self.traps.dispatch(machine, instr.vector, address)

    # ── Load ──

    def _op_ld(self, machine, instr: Ld, address):
        regs = machine.regs
        regs.set(instr.dr, machine.mem.read(wrap16(regs.pc + instr.offset)))
        regs.update_flags(instr.dr)

    def _op_ldi(self, machine, instr: Ldi, address):
        regs, mem = machine.regs, machine.mem
        pointer = mem.read(wrap16(regs.pc + instr.offset))
        regs.set(instr.dr, mem.read(pointer))
        regs.update_flags(instr.dr)

    def _op_ldr(self, machine, instr: Ldr, address):
        regs = machine.regs
        regs.set(instr.dr, machine.mem.read(wrap16(regs.get(instr.base) + instr.offset)))
        regs.update_flags(instr.dr)

    def _op_lea(self, machine, instr: Lea, address):
        regs = machine.regs
        regs.set(instr.dr, regs.pc + instr.offset)
        regs.update_flags(instr.dr)

    # ── Store ──

    def _op_st(self, machine, instr: St, address):
        regs = machine.regs
        machine.mem.write(wrap16(regs.pc + instr.offset), regs.get(instr.sr))

    def _op_sti(self, machine, instr: Sti, address):
        regs, mem = machine.regs, machine.mem
        pointer = mem.read(wrap16(regs.pc + instr.offset))
        mem.write(pointer, regs.get(instr.sr))

    def _op_str(self, machine, instr: Str, address):
        regs = machine.regs
        machine.mem.write(wrap16(regs.get(instr.base) + instr.offset), regs.get(instr.sr))

    # ── Reserved ──

    def _op_illegal(self, machine, instr: Illegal, address):
        raise IllegalOpcode(address, instr.opcode)
