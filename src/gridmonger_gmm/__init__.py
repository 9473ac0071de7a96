"""Gridmonger GMM map file decoder."""
from .exceptions import GmmError
from .export import chunk_to_dict, export_chunks
from .models import Chunk, ListChunk
from .parser import DecodeContext, GmmParser
from .riff import read_riff, unwrap_riff

__all__ = [
    "Chunk",
    "DecodeContext",
    "GmmError",
    "GmmParser",
    "ListChunk",
    "chunk_to_dict",
    "export_chunks",
    "read_riff",
    "unwrap_riff",
]
