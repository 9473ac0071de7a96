from __future__ import annotations

import struct

from .exceptions import NotAGmmFile, Truncated

_RIFF_HEADER = struct.Struct("<4sI4s")


def unwrap_riff(blob: bytes) -> bytes:
    """
    Validates the outer RIFF header of a GMM file and returns the chunk payload.

    Layout: "RIFF", u32 size (form type + payload), "GRMM", payload. The payload
    length includes the pad byte when the RIFF size is odd.
    """
    if len(blob) < _RIFF_HEADER.size:
        raise Truncated(f"file holds {len(blob)} bytes, RIFF header needs {_RIFF_HEADER.size}")
    magic, size, form_type = _RIFF_HEADER.unpack_from(blob, 0)
    if magic != b"RIFF":
        raise NotAGmmFile("not a RIFF file")
    if form_type != b"GRMM":
        raise NotAGmmFile(f"RIFF form type is {form_type!r}, expected b'GRMM'")
    if size < 4:
        raise Truncated(f"RIFF size {size} is smaller than its form type")
    payload_len = size - 4 + size % 2
    payload = blob[_RIFF_HEADER.size : _RIFF_HEADER.size + payload_len]
    if len(payload) != payload_len:
        raise Truncated(f"expected to read {payload_len} bytes, read only {len(payload)} bytes")
    return payload


def read_riff(path: str) -> bytes:
    """Reads a .gmm file and returns the payload handed to ``GmmParser.parse``."""
    with open(path, "rb") as f:
        return unwrap_riff(f.read())
