"""Cell layer codec: raw, run-length and all-zero byte grids."""
from __future__ import annotations

import logging

from .exceptions import BadInput, BufferOverrun, TruncatedStream
from .leio import BoundedCursor

logger = logging.getLogger(__name__)

MODE_RAW = 0
MODE_RLE = 1
MODE_ZERO = 2


def decode_rle(stream: bytes, size: int) -> bytes:
    """
    Expand a run-length stream into ``size`` bytes.

    Control byte with the high bit set: the low 7 bits + 1 give a repeat
    count for the byte that follows. High bit clear: the control byte is a
    literal copied once. Cells the stream never reaches stay zero.
    """
    out = bytearray(size)
    dest = 0
    pos = 0
    end = len(stream)
    while pos < end:
        ctrl = stream[pos]
        if ctrl & 0x80:
            pos += 1
            count = (ctrl & 0x7F) + 1
            if dest + count > size:
                raise BufferOverrun(
                    f"run of {count} at cell {dest} passes layer size {size}"
                )
            if pos == end:
                raise TruncatedStream(f"run-length stream ends inside a run at byte {pos}")
            out[dest : dest + count] = bytes((stream[pos],)) * count
            dest += count
            pos += 1
        else:
            if dest + 1 > size:
                raise BufferOverrun(f"literal at cell {dest} passes layer size {size}")
            out[dest] = ctrl
            dest += 1
            pos += 1
    if dest < size:
        logger.debug("run-length stream filled %d of %d cells", dest, size)
    return bytes(out)


def decode_cell_layer(r: BoundedCursor, size: int) -> bytes:
    mode = r.u8()
    if mode == MODE_RAW:
        return r.bytes(size)
    if mode == MODE_RLE:
        compressed_len = r.u32()
        return decode_rle(r.bytes(compressed_len), size)
    if mode == MODE_ZERO:
        return bytes(size)
    raise BadInput(f"unknown cell layer compression mode {mode}")
