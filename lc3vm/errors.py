"""
LC-3 Virtual Machine: Error Taxonomy

Every error is terminal for the current run. Nothing here is retried;
the CLI maps each class to a message and an exit status.

  LC3Error
    UsageError          no image path supplied
    ImageLoadError      image missing, unreadable or shorter than one word
    IllegalOpcode       RTI / reserved opcode fetched
      UnknownTrapVector TRAP with a vector outside x20-x25
"""


class LC3Error(Exception):
    """Base class for all LC-3 VM errors."""
    pass


class UsageError(LC3Error):
    """Raised when the runner is invoked without an image."""
    pass


class ImageLoadError(LC3Error):
    """Raised when an image file cannot be loaded."""

    def __init__(self, path, reason: str = ""):
        self.path = str(path)
        self.reason = reason
        msg = f"failed to load image: {self.path}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class IllegalOpcode(LC3Error):
    """Raised when the machine fetches an instruction it cannot execute.

    ``address`` is where the offending word was fetched from, so embedders
    can report the location without inspecting machine state.
    """

    def __init__(self, address: int, opcode: int, message: str = None):
        self.address = address & 0xFFFF
        self.opcode = opcode
        if message is None:
            message = f"Illegal opcode {opcode:#x} at x{self.address:04X}"
        super().__init__(message)


class UnknownTrapVector(IllegalOpcode):
    """Raised for a TRAP whose vector has no built-in routine."""

    def __init__(self, address: int, vector: int):
        self.vector = vector & 0xFF
        super().__init__(
            address, 0xF,
            f"Unknown trap vector x{self.vector:02X} at x{address & 0xFFFF:04X}")
