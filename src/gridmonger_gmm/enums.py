from __future__ import annotations

from enum import IntEnum


class ChunkKind(IntEnum):
    """Decoded chunk discriminator."""
    LIST = 0
    MAP_PROP = 1
    MAP_COOR = 2
    LVL_PROP = 3
    LVL_COOR = 4
    LVL_CELL = 5
    LVL_ANNO = 6
    LVL_REGN = 7
    MAP_LINKS = 8
    UNKNOWN = 255

    @property
    def label(self) -> str:
        """Name used in exported JSON (``chunk_type``)."""
        return "TYPE_UNKNOWN" if self is ChunkKind.UNKNOWN else self.name


class AnnotationKind(IntEnum):
    """Annotation discriminator; selects the record's payload."""
    COMMENT = 0
    INDEXED = 1
    CUSTOM = 2
    ICON = 3
    LABEL = 4


class CoordinateOrigin(IntEnum):
    NORTH_WEST = 0
    SOUTH_WEST = 1


class CoordinateStyle(IntEnum):
    """Row/column label style."""
    NUMBER = 0
    LETTER = 1
