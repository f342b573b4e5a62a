"""
LC-3 Virtual Machine: Console Capability

The machine reaches the outside world through three operations:

  key_available()  non-blocking: is a keystroke waiting?
  read_char()      blocking: return the next character code
  write_char(c)    emit the low byte of c as one raw byte

plus flush(), called by the trap routines after each output burst.

Two implementations:

  TerminalConsole  stdin/stdout of the process. As a context manager it
                   puts a TTY into no-echo, non-canonical mode so single
                   keystrokes reach the program, and restores the saved
                   attributes on exit. Echo is never done by the terminal;
                   the IN trap writes the character back itself.
  BufferedConsole  in-memory input queue and output buffer, for tests and
                   for embedding the VM in another program.
"""

import logging
import os
import select
import sys
from collections import deque

try:
    import termios
    import tty
except ImportError:  # Windows: no POSIX terminal control
    termios = None
    tty = None

log = logging.getLogger(__name__)


class BufferedConsole:
    """Console backed by an input queue and an output buffer.

    Input is injected with feed(); reading past the end of the queue
    raises EOFError, since nothing else could ever arrive.
    """

    def __init__(self, input_data=b''):
        self._rx_queue: deque = deque()
        self.tx_buffer: bytearray = bytearray()
        self.feed(input_data)

    def feed(self, data):
        """Queue characters for the program to read."""
        if isinstance(data, str):
            data = data.encode('latin-1')
        for byte in data:
            self._rx_queue.append(byte & 0xFF)

    def key_available(self) -> bool:
        return bool(self._rx_queue)

    def read_char(self) -> int:
        if not self._rx_queue:
            raise EOFError("console input exhausted")
        return self._rx_queue.popleft()

    def write_char(self, char: int):
        self.tx_buffer.append(char & 0xFF)

    def flush(self):
        pass

    @property
    def output(self) -> str:
        """Everything written so far, decoded as Latin-1."""
        return self.tx_buffer.decode('latin-1')


class TerminalConsole:
    """Console on the process's stdin/stdout file descriptors."""

    def __init__(self, stdin=None, stdout=None):
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._saved_attrs = None

    # --- Terminal mode ---

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def open(self):
        """Disable echo and line buffering if stdin is a terminal."""
        if termios is None or not self._stdin.isatty():
            return
        fd = self._stdin.fileno()
        self._saved_attrs = termios.tcgetattr(fd)
        tty.setcbreak(fd)
        attrs = termios.tcgetattr(fd)
        attrs[3] &= ~termios.ECHO
        termios.tcsetattr(fd, termios.TCSANOW, attrs)
        log.debug("Terminal switched to cbreak/no-echo mode")

    def close(self):
        """Restore the terminal attributes saved by open()."""
        self.flush()
        if self._saved_attrs is not None:
            termios.tcsetattr(self._stdin.fileno(), termios.TCSADRAIN,
                              self._saved_attrs)
            self._saved_attrs = None
            log.debug("Terminal attributes restored")

    # --- Console operations ---

    def key_available(self) -> bool:
        readable, _, _ = select.select([self._stdin], [], [], 0)
        return bool(readable)

    def read_char(self) -> int:
        self._stdout.flush()
        data = os.read(self._stdin.fileno(), 1)
        if not data:
            raise EOFError("end of input on stdin")
        return data[0]

    def write_char(self, char: int):
        """Emit the low byte of ``char`` as one raw byte, whatever the
        text encoding of stdout."""
        data = bytes((char & 0xFF,))
        raw = getattr(self._stdout, 'buffer', None)
        if raw is not None:
            raw.write(data)
        else:
            os.write(self._stdout.fileno(), data)

    def flush(self):
        self._stdout.flush()
