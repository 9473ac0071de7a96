from __future__ import annotations

from typing import Optional


class GmmError(Exception):
    """Base exception for GMM decoding errors."""

    def __init__(self, message: str, *, tag: Optional[str] = None, offset: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.tag = tag
        self.offset = offset

    def __str__(self) -> str:
        if self.tag is None:
            return self.message
        where = f"chunk {self.tag!r}"
        if self.offset is not None:
            where += f" at offset {self.offset}"
        return f"{self.message} ({where})"


class Truncated(GmmError):
    """Fewer bytes remain than a fixed-width read requires."""


class BufferTooSmall(GmmError):
    """A declared inner length exceeds the enclosing budget."""


class Overrun(GmmError):
    """More bytes consumed than a chunk declared."""


class BufferOverrun(Overrun):
    """Run-length stream would write past the end of a cell layer."""


class BadInput(GmmError):
    """Unrecognized compression mode or other invalid discriminator."""


class MissingGridSize(BadInput):
    """Cell layers found before any level properties in the same scope."""


class TruncatedStream(GmmError):
    """Run-length stream exhausted in the middle of a run."""


class NotAGmmFile(GmmError):
    """Outer RIFF/GRMM framing not found."""
