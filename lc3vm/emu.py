"""
LC-3 Virtual Machine: Main Emulator Class

Integrates:
  - Register file (cpu/regs.py)
  - Word memory + keyboard registers (mem/memory.py)
  - Instruction decoder (cpu/decoder.py)
  - Executor and trap routines (cpu/executor.py, cpu/traps.py)
  - Console capability (periph/console.py)

Execution model, one instruction per step:
  1. Fetch the word at PC
  2. Increment PC
  3. Decode into an instruction variant
  4. Execute against the machine state
  5. Check the run state

Termination:
  - HALT:     TRAP x25 executed
  - TIMEOUT:  optional cycle limit reached
  - IllegalOpcode raised: RTI, reserved opcode or unknown trap vector
"""

import logging
from enum import Enum
from typing import Iterable, Optional

from .cpu.decoder import decode
from .cpu.executor import Executor
from .cpu.regs import Registers
from .mem.image import load_image
from .mem.memory import Memory
from .periph.console import BufferedConsole

log = logging.getLogger(__name__)


class RunState(Enum):
    RUNNING = 'RUNNING'
    HALTED = 'HALTED'


class StopReason(Enum):
    HALT = 'HALT'
    TIMEOUT = 'TIMEOUT'


class Machine:
    """The complete mutable state of one LC-3: registers, memory, console.

    Created once and owned by the emulator; handed to the executor and
    trap routines on every instruction.
    """

    __slots__ = ('regs', 'mem', 'console', 'state', 'cycles')

    def __init__(self, console=None):
        self.console = console if console is not None else BufferedConsole()
        self.regs = Registers()
        self.mem = Memory(keyboard=self.console)
        self.state = RunState.RUNNING
        self.cycles = 0

    @property
    def running(self) -> bool:
        return self.state is RunState.RUNNING

    def halt(self):
        self.state = RunState.HALTED


class LC3Emulator:
    """LC-3 virtual machine.

    Usage:
        emu = LC3Emulator(console=BufferedConsole())
        emu.load_image('hello.obj')
        emu.run()
        print(emu.console.output)   # "Hello World!HALT\\n"
    """

    DEFAULT_MAX_CYCLES = None

    def __init__(self, console=None):
        self.machine = Machine(console)
        self.executor = Executor()
        self._trace = False

    # Shortcuts onto the machine state

    @property
    def regs(self) -> Registers:
        return self.machine.regs

    @property
    def mem(self) -> Memory:
        return self.machine.mem

    @property
    def console(self):
        return self.machine.console

    @property
    def state(self) -> RunState:
        return self.machine.state

    @property
    def cycles(self) -> int:
        return self.machine.cycles

    # ══════════════════════════════════════════════
    # Loading
    # ══════════════════════════════════════════════

    def load_image(self, path):
        """Load an LC-3 object image. Returns (origin, word_count)."""
        return load_image(self.mem, path)

    def load_words(self, origin: int, words: Iterable[int]) -> int:
        """Store raw words from ``origin``, e.g. hand-assembled code."""
        return self.mem.load_words(origin, words)

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self):
        """Execute one instruction.

        Raises IllegalOpcode (or its UnknownTrapVector subclass) when the
        fetched instruction cannot run; PC is then already past it.
        """
        machine = self.machine
        if not machine.running:
            raise RuntimeError("Machine is halted")

        address = machine.regs.pc
        word = machine.mem.read(address)
        machine.regs.pc = address + 1
        instr = decode(word)

        if self._trace:
            log.debug("x%04X: %04X %-4s %s",
                      address, word, instr.mnemonic, machine.regs.display())

        self.executor.execute(machine, instr, address)
        machine.cycles += 1

    def run(self, max_cycles: Optional[int] = None) -> StopReason:
        """Run until HALT or until ``max_cycles`` instructions have run.

        IllegalOpcode propagates to the caller.
        """
        if max_cycles is None:
            max_cycles = self.DEFAULT_MAX_CYCLES

        executed = 0
        while self.machine.running:
            if max_cycles is not None and executed >= max_cycles:
                log.info("Cycle limit %d reached at x%04X", max_cycles, self.regs.pc)
                return StopReason.TIMEOUT
            self.step()
            executed += 1

        log.info("Halted after %d instructions, PC=x%04X", self.cycles, self.regs.pc)
        return StopReason.HALT

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Log every executed instruction at DEBUG level."""
        self._trace = enable

    def reset(self):
        """Registers to power-on state, run state RUNNING. Memory is kept."""
        self.machine.regs.reset()
        self.machine.state = RunState.RUNNING
        self.machine.cycles = 0
