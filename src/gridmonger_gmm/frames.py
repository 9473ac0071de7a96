from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from .models import Chunk, ListChunk


@dataclass
class ChunkNode:
    """Flattened view of one decoded chunk (for diagnostics/UI)."""
    tag: str
    size: int
    depth: int
    list_type: Optional[str] = None  # LIST chunks only
    children_count: int = 0


class ChunkWalker:
    """Pre-order walk over a decoded chunk forest."""

    def walk(self, chunks: Sequence[Chunk], depth: int = 0) -> Iterator[ChunkNode]:
        for chunk in chunks:
            if isinstance(chunk, ListChunk):
                yield ChunkNode(chunk.tag, chunk.size, depth, chunk.list_type, len(chunk.children))
                yield from self.walk(chunk.children, depth + 1)
            else:
                yield ChunkNode(chunk.tag, chunk.size, depth)


def format_tree(chunks: Sequence[Chunk]) -> str:
    """
    Render the chunk outline, one line per chunk, e.g.:

        'LIST' riff chunk of size 40 bytes.
          LIST chunk type: 'map '
        --'prop' riff chunk of size 20 bytes.
    """
    lines: List[str] = []
    for node in ChunkWalker().walk(chunks):
        lines.append(f"{'--' * node.depth}'{node.tag}' riff chunk of size {node.size} bytes.")
        if node.list_type is not None:
            lines.append(f"{'  ' * node.depth}LIST chunk type: '{node.list_type}'")
    return "\n".join(lines)
