# LC-3 Virtual Machine: pure-software LC-3 CPU emulator
#
# Layout mirrors the hardware it models:
#   cpu/     registers, bit-field helpers, decoder, executor, trap routines
#   mem/     64K word memory with keyboard device registers, image loader
#   periph/  console capability (terminal and in-memory)
#   emu.py   machine state aggregate + fetch/decode/execute run loop
"""LC-3 virtual machine."""

__version__ = "0.1.0"

from .errors import (
    LC3Error, UsageError, ImageLoadError, IllegalOpcode, UnknownTrapVector,
)
from .emu import LC3Emulator, Machine, RunState, StopReason

__all__ = [
    "LC3Emulator", "Machine", "RunState", "StopReason",
    "LC3Error", "UsageError", "ImageLoadError", "IllegalOpcode",
    "UnknownTrapVector",
]
