"""
LC-3 Virtual Machine: Program Image Loader

Image format (output of the LC-3 assembler, ``.obj``):
  word 0       origin address
  word 1..n    program words, stored from origin upward

All words are big-endian on disk. At most ``65536 - origin`` words are
loaded; anything past the top of memory is dropped, as is a trailing
odd byte.
"""

import logging
import struct
from pathlib import Path
from typing import List, Tuple

from ..errors import ImageLoadError
from .memory import MEMORY_MAX

log = logging.getLogger(__name__)


def parse_image(data: bytes, source: str = "<bytes>") -> Tuple[int, List[int]]:
    """Split raw image bytes into (origin, words)."""
    if len(data) < 2:
        raise ImageLoadError(source, "image shorter than one word")

    (origin,) = struct.unpack_from('>H', data, 0)
    max_read = MEMORY_MAX - origin
    count = min((len(data) - 2) // 2, max_read)
    words = list(struct.unpack_from(f'>{count}H', data, 2))
    return origin, words


def read_image(path) -> Tuple[int, List[int]]:
    """Read an image file and return (origin, words)."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ImageLoadError(path, e.strerror or str(e)) from e
    return parse_image(data, str(path))


def load_image(memory, path) -> Tuple[int, int]:
    """Load an image file into ``memory``.

    Returns (origin, word_count). Cells already holding data from an
    earlier image are overwritten without notice.
    """
    origin, words = read_image(path)
    count = memory.load_words(origin, words)
    log.info("Loaded %s: %d words at x%04X", path, count, origin)
    return origin, count
