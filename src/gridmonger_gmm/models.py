from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union

from .enums import AnnotationKind, ChunkKind, CoordinateOrigin, CoordinateStyle


@dataclass(frozen=True)
class Chunk:
    """
    One decoded chunk.

    Notes
    -----
    - ``tag`` and ``size`` are the raw header fields, kept for diagnostics.
    - ``size`` is the declared body size (header and padding excluded).
    - Subclasses form a closed set, one per ``ChunkKind``.
    """

    kind: ClassVar[ChunkKind] = ChunkKind.UNKNOWN

    tag: str
    size: int


@dataclass(frozen=True)
class UnknownChunk(Chunk):
    kind: ClassVar[ChunkKind] = ChunkKind.UNKNOWN


@dataclass(frozen=True)
class ListChunk(Chunk):
    kind: ClassVar[ChunkKind] = ChunkKind.LIST

    list_type: str                 # e.g. "map " or "lvl "
    children: Tuple[Chunk, ...] = ()


@dataclass(frozen=True)
class MapProperties(Chunk):
    kind: ClassVar[ChunkKind] = ChunkKind.MAP_PROP

    version: int
    title: str = ""
    game: str = ""
    author: str = ""
    creation_time: str = ""
    notes: str = ""


Origin = Union[CoordinateOrigin, int]
Style = Union[CoordinateStyle, int]


@dataclass(frozen=True)
class CoordsChunk(Chunk):
    """Coordinate options; shared layout of the map and level variants."""

    origin: Origin
    row_style: Style
    column_style: Style
    row_start: int
    column_start: int


@dataclass(frozen=True)
class MapCoords(CoordsChunk):
    kind: ClassVar[ChunkKind] = ChunkKind.MAP_COOR


@dataclass(frozen=True)
class LevelCoords(CoordsChunk):
    """Per-level override of the map coordinate options; same layout."""
    kind: ClassVar[ChunkKind] = ChunkKind.LVL_COOR


@dataclass(frozen=True)
class LevelProperties(Chunk):
    kind: ClassVar[ChunkKind] = ChunkKind.LVL_PROP

    location_name: str
    level_name: str
    elevation: int                 # signed
    num_rows: int
    num_columns: int
    override_coord_opts: int
    notes: str = ""

    @property
    def grid_size(self) -> int:
        """Cell count of each layer in this level."""
        return (self.num_columns + 1) * (self.num_rows + 1)


@dataclass(frozen=True)
class LevelCellLayers(Chunk):
    kind: ClassVar[ChunkKind] = ChunkKind.LVL_CELL

    floor: bytes
    floor_orientation: bytes
    floor_color: bytes
    wall_north: bytes
    wall_west: bytes
    trail: bytes
    cells_count: int

    LAYERS: ClassVar[Tuple[str, ...]] = (
        "floor",
        "floor_orientation",
        "floor_color",
        "wall_north",
        "wall_west",
        "trail",
    )


@dataclass(frozen=True)
class IndexedPayload:
    index: int
    index_color: int


@dataclass(frozen=True)
class CustomIdPayload:
    custom_id: str


@dataclass(frozen=True)
class IconPayload:
    icon: int


@dataclass(frozen=True)
class LabelPayload:
    label_color: int


AnnotationPayload = Union[IndexedPayload, CustomIdPayload, IconPayload, LabelPayload]


@dataclass(frozen=True)
class AnnotationRecord:
    row: int
    column: int
    kind: AnnotationKind
    text: str
    payload: Optional[AnnotationPayload] = None   # None only for COMMENT


@dataclass(frozen=True)
class LevelAnnotations(Chunk):
    kind: ClassVar[ChunkKind] = ChunkKind.LVL_ANNO

    records: Tuple[AnnotationRecord, ...] = ()

    @property
    def num_annotations(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class RegionRecord:
    name: str
    notes: str


@dataclass(frozen=True)
class LevelRegions(Chunk):
    kind: ClassVar[ChunkKind] = ChunkKind.LVL_REGN

    enable_regions: int
    rows_per_region: int
    columns_per_region: int
    per_region_coords: int
    records: Tuple[RegionRecord, ...] = ()

    @property
    def num_regions(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class MapLinkRecord:
    src_level_index: int
    src_row: int
    src_column: int
    dest_level_index: int
    dest_row: int
    dest_column: int


@dataclass(frozen=True)
class MapLinks(Chunk):
    kind: ClassVar[ChunkKind] = ChunkKind.MAP_LINKS

    records: Tuple[MapLinkRecord, ...] = ()

    @property
    def num_links(self) -> int:
        return len(self.records)
