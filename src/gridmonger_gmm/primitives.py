from __future__ import annotations

import struct

from .exceptions import BufferTooSmall
from .leio import BoundedCursor

# Byte-exact little-endian layouts, no padding between fields.
COORDS = struct.Struct("<BBBHH")         # origin, row_style, column_style, row_start, column_start
LEVEL_PROPS = struct.Struct("<hHHB")     # elevation, num_rows, num_columns, override_coord_opts
ANNOTATION_HEAD = struct.Struct("<HHB")  # row, column, kind
INDEXED = struct.Struct("<HB")           # index, index_color
REGIONS_HEAD = struct.Struct("<BHHBH")   # enable, rows/region, columns/region, per-region coords, count
LINK = struct.Struct("<6H")              # src level/row/column, dest level/row/column


def decode_prefixed_text(r: BoundedCursor, width: int) -> str:
    """Reads: little-endian length of ``width`` bytes, then that many UTF-8 bytes."""
    if width == 2:
        n = r.u16()
    elif width == 1:
        n = r.u8()
    else:
        raise ValueError(f"length prefix must be 1 or 2 bytes, not {width}")
    if n > r.remain():
        raise BufferTooSmall(f"string length {n} exceeds remaining {r.remain()} at offset {r.tell()}")
    raw = r.bytes(n)
    # stored text is not NUL-terminated, but an embedded NUL still ends it
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def decode_wstr(r: BoundedCursor) -> str:
    return decode_prefixed_text(r, 2)


def decode_bstr(r: BoundedCursor) -> str:
    return decode_prefixed_text(r, 1)


def decode_record(r: BoundedCursor, layout: struct.Struct) -> tuple:
    return r.unpack(layout)
