from __future__ import annotations

import struct

from .exceptions import BufferTooSmall, Truncated

_U16 = struct.Struct("<H")
_S16 = struct.Struct("<h")
_U32 = struct.Struct("<I")


class BoundedCursor:
    """
    Little-endian reader over a byte buffer with a remaining-length budget.

    A cursor made by ``subview`` shares its position with its parent: every
    byte it consumes is also taken from the parent's budget (and from the
    parent's parent, and so on), so a nested read can never pass the end of
    any enclosing chunk.
    """

    def __init__(
        self,
        data: bytes,
        off: int = 0,
        length: int | None = None,
        parent: BoundedCursor | None = None,
    ) -> None:
        self.data = data
        self.off = off
        self.remaining = len(data) - off if length is None else length
        self.parent = parent

    def tell(self) -> int:
        return self.off

    def remain(self) -> int:
        return self.remaining

    def advance(self, n: int) -> None:
        if n > self.remaining:
            raise Truncated(f"need {n} bytes at offset {self.off}, only {self.remaining} left")
        cur: BoundedCursor | None = self
        while cur is not None:
            cur.off += n
            cur.remaining -= n
            cur = cur.parent

    def subview(self, length: int) -> BoundedCursor:
        if length > self.remaining:
            raise BufferTooSmall(
                f"inner length {length} exceeds remaining {self.remaining} at offset {self.off}"
            )
        return BoundedCursor(self.data, self.off, length, parent=self)

    def bytes(self, n: int) -> bytes:
        start = self.off
        self.advance(n)
        return bytes(self.data[start : start + n])

    def unpack(self, st: struct.Struct) -> tuple:
        start = self.off
        self.advance(st.size)
        return st.unpack_from(self.data, start)

    def u8(self) -> int:
        start = self.off
        self.advance(1)
        return self.data[start]

    def u16(self) -> int:
        return self.unpack(_U16)[0]

    def s16(self) -> int:
        return self.unpack(_S16)[0]

    def u32(self) -> int:
        return self.unpack(_U32)[0]

    def tag(self) -> str:
        # latin-1 keeps all four characters even for non-ASCII junk
        return self.bytes(4).decode("latin-1")


_HEADER = struct.Struct("<4sI")


def read_chunk_header(r: BoundedCursor) -> tuple[str, int]:
    """
    Read a chunk header and return (tag, declared_size).

    The declared size counts the chunk body only, not the 8-byte header and
    not the padding byte that follows an odd-sized body.
    """
    if r.remain() < _HEADER.size:
        raise Truncated(f"chunk header needs 8 bytes at offset {r.tell()}, only {r.remain()} left")
    raw_tag, size = r.unpack(_HEADER)
    return raw_tag.decode("latin-1"), size
