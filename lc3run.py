#!/usr/bin/env python3
"""
lc3run: LC-3 virtual machine runner

Usage:
    python lc3run.py <image.obj> [more.obj ...] [--max-cycles N] [--trace]
                                                [--verbose] [--log-dir DIR]

Images are loaded in order; a later image overwrites any cells an
earlier one shares. Execution starts at x3000.

Exit status:
    0    program executed TRAP HALT
    1    illegal opcode, unknown trap vector, cycle limit, end of input
    2    usage error or unloadable image
    130  interrupted (Ctrl-C)

Examples:
    python lc3run.py 2048.obj
    python lc3run.py rogue.obj --log-dir logs
    python lc3run.py test.obj --max-cycles 100000 --trace --log-dir logs
"""

import argparse
import logging
import os
import sys

# Allow running from the project root without installing
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from lc3vm import __version__
from lc3vm.emu import LC3Emulator, StopReason
from lc3vm.errors import ImageLoadError, IllegalOpcode, UsageError
from lc3vm.log_setup import setup_logging
from lc3vm.periph.console import TerminalConsole

log = logging.getLogger("lc3vm.run")


def parse_int_arg(value: str) -> int:
    """Parse an integer that may be hex (0x..., x...) or decimal."""
    value = value.strip()
    if value[:2].lower() == "0x":
        return int(value, 16)
    if value[:1].lower() == "x":
        return int(value[1:], 16)  # LC-3 assembler hex convention
    return int(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lc3run",
        description="LC-3 virtual machine",
    )
    parser.add_argument("images", nargs="*", metavar="image",
                        help="LC-3 object image(s), origin word first")
    parser.add_argument("--max-cycles", type=parse_int_arg, default=None,
                        help="Stop after N instructions (default: no limit)")
    parser.add_argument("--trace", action="store_true",
                        help="Log every executed instruction (DEBUG)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log loads and stop reason to stderr")
    parser.add_argument("--log-dir", default=None,
                        help="Also write a timestamped log file into DIR")
    parser.add_argument("--version", action="version",
                        version=f"lc3run {__version__}")
    return parser


def require_images(args) -> list:
    if not args.images:
        raise UsageError("at least one image is required")
    return list(args.images)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        images = require_images(args)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {e}", file=sys.stderr)
        return 2

    if args.trace:
        console_level = logging.DEBUG
    elif args.verbose:
        console_level = logging.INFO
    else:
        console_level = logging.WARNING
    setup_logging(console_level=console_level, log_dir=args.log_dir)

    emu = LC3Emulator(console=TerminalConsole())
    emu.enable_trace(args.trace)

    for path in images:
        try:
            emu.load_image(path)
        except ImageLoadError as e:
            log.info("%s", e)
            print(f"failed to load image: {path}", file=sys.stderr)
            return 2

    try:
        with emu.console:
            reason = emu.run(max_cycles=args.max_cycles)
    except IllegalOpcode as e:
        log.info("Stopped: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except EOFError as e:
        log.info("Input closed at x%04X: %s", emu.regs.pc, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        log.warning("Interrupted at x%04X", emu.regs.pc)
        return 130

    if args.verbose or args.trace:
        log.info("Final state: %s", emu.regs.display())

    if reason is StopReason.TIMEOUT:
        print(f"Error: cycle limit ({args.max_cycles}) reached at x{emu.regs.pc:04X}",
              file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
