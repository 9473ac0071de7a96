from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple, Type

from .codec import decode_cell_layer
from .enums import AnnotationKind, CoordinateOrigin, CoordinateStyle
from .exceptions import BadInput, BufferTooSmall, GmmError, MissingGridSize, Overrun
from .leio import BoundedCursor, read_chunk_header
from .models import (
    AnnotationPayload,
    AnnotationRecord,
    Chunk,
    CoordsChunk,
    CustomIdPayload,
    IconPayload,
    IndexedPayload,
    LabelPayload,
    LevelAnnotations,
    LevelCellLayers,
    LevelCoords,
    LevelProperties,
    LevelRegions,
    ListChunk,
    MapCoords,
    MapLinkRecord,
    MapLinks,
    MapProperties,
    RegionRecord,
    UnknownChunk,
)
from .primitives import (
    ANNOTATION_HEAD,
    COORDS,
    INDEXED,
    LEVEL_PROPS,
    LINK,
    REGIONS_HEAD,
    decode_bstr,
    decode_record,
    decode_wstr,
)

logger = logging.getLogger(__name__)

DEFAULT_IGNORED_TAGS: FrozenSet[str] = frozenset({"disp", "opts", "tool", "notl"})

LIST_TAG = "LIST"
MAP_LIST = "map "
LEVEL_LIST = "lvl "


@dataclass(frozen=True)
class DecodeContext:
    """
    State handed down the recursion.

    Each LIST gets a copy with its own ``list_type``; a level ``prop`` chunk
    replaces ``grid_size`` for the siblings that follow it in the same scope
    only.
    """
    list_type: Optional[str] = None
    grid_size: Optional[int] = None


class GmmParser:
    """
    Chunk decoder for the payload of a Gridmonger GMM file.

    - Walks the chunk headers of a scope and recurses into LIST chunks
    - Dispatches ``prop``/``coor`` on the enclosing list type ("map " or "lvl ")
    - Carries the grid size from a level's properties to its ``cell`` chunk
    - Skips unread chunk bytes (size defect) and padding, fails on overrun
    - Skips the editor-only chunks in ``ignore_tags`` without recording them
    """

    def __init__(self, cast_enums: bool = True, ignore_tags: Iterable[str] = DEFAULT_IGNORED_TAGS) -> None:
        self._cast_enums = cast_enums
        self._ignore_tags = frozenset(ignore_tags)
        self._decoders: Dict[Tuple[str, Optional[str]], Callable[[BoundedCursor, str, int], Chunk]] = {
            ("prop", MAP_LIST): self._decode_map_properties,
            ("coor", MAP_LIST): self._decode_map_coords,
            ("coor", LEVEL_LIST): self._decode_level_coords,
            ("anno", None): self._decode_annotations,
            ("regn", None): self._decode_regions,
            ("lnks", None): self._decode_links,
        }

    # ---------- Public API ----------

    def parse(self, payload: bytes) -> List[Chunk]:
        """Decode the bytes that follow the RIFF/GRMM header into a chunk forest."""
        return self._decode_chunks(BoundedCursor(payload), DecodeContext())

    # ---------- Internal: chunk loop ----------

    def _decode_chunks(self, r: BoundedCursor, ctx: DecodeContext) -> List[Chunk]:
        out: List[Chunk] = []
        while r.remain() > 0:
            start = r.tell()
            tag, size = read_chunk_header(r)
            try:
                if tag in self._ignore_tags:
                    logger.debug("skipping %r chunk of %d bytes at offset %d", tag, size, start)
                    r.advance(size)
                else:
                    chunk, ctx = self._decode_chunk(r, ctx, tag, size)
                    out.append(chunk)
                self._skip_padding(r, size)
            except GmmError as exc:
                # innermost chunk wins
                if exc.tag is None:
                    exc.tag = tag
                    exc.offset = start
                raise
        return out

    def _decode_chunk(
        self, r: BoundedCursor, ctx: DecodeContext, tag: str, size: int
    ) -> Tuple[Chunk, DecodeContext]:
        body_start = r.remain()

        # LIST, level "prop" and "cell" read or replace the context; the table holds the rest
        if tag == LIST_TAG:
            chunk = self._decode_list(r, ctx, size)
        elif tag == "prop" and ctx.list_type == LEVEL_LIST:
            chunk = self._decode_level_properties(r, tag, size)
            ctx = replace(ctx, grid_size=chunk.grid_size)
        elif tag == "cell":
            chunk = self._decode_cell_layers(r, tag, size, ctx)
        else:
            decoder = self._decoders.get((tag, ctx.list_type)) or self._decoders.get((tag, None))
            if decoder is None:
                logger.debug("no decoder for %r under list type %r", tag, ctx.list_type)
                chunk = UnknownChunk(tag=tag, size=size)
            else:
                chunk = decoder(r, tag, size)

        consumed = body_start - r.remain()
        if consumed > size:
            raise Overrun(f"decoded {consumed} bytes from a chunk declaring {size}")
        if consumed < size:
            logger.debug("%d bytes remain undecoded in chunk %r, skipping", size - consumed, tag)
            r.advance(size - consumed)
        return chunk, ctx

    def _decode_list(self, r: BoundedCursor, ctx: DecodeContext, size: int) -> ListChunk:
        if size < 4:
            raise BufferTooSmall(f"LIST chunk declares {size} bytes, too small for its type tag")
        list_type = r.tag()
        nested = r.subview(size - 4)
        children = self._decode_chunks(nested, replace(ctx, list_type=list_type))
        return ListChunk(tag=LIST_TAG, size=size, list_type=list_type, children=tuple(children))

    @staticmethod
    def _skip_padding(r: BoundedCursor, size: int) -> None:
        # chunks are word aligned; the last one in a scope may lack its pad byte
        if size % 2 == 1 and r.remain() > 0:
            r.advance(1)

    # ---------- Per-kind decoders ----------

    def _decode_map_properties(self, r: BoundedCursor, tag: str, size: int) -> MapProperties:
        version = r.u16()
        return MapProperties(
            tag=tag,
            size=size,
            version=version,
            title=decode_wstr(r),
            game=decode_wstr(r),
            author=decode_wstr(r),
            creation_time=decode_bstr(r),
            notes=decode_wstr(r),
        )

    def _decode_coords(self, r: BoundedCursor, cls: Type[CoordsChunk], tag: str, size: int) -> CoordsChunk:
        origin, row_style, column_style, row_start, column_start = decode_record(r, COORDS)
        return cls(
            tag=tag,
            size=size,
            origin=self._cast(CoordinateOrigin, origin),
            row_style=self._cast(CoordinateStyle, row_style),
            column_style=self._cast(CoordinateStyle, column_style),
            row_start=row_start,
            column_start=column_start,
        )

    def _decode_map_coords(self, r: BoundedCursor, tag: str, size: int) -> CoordsChunk:
        return self._decode_coords(r, MapCoords, tag, size)

    def _decode_level_coords(self, r: BoundedCursor, tag: str, size: int) -> CoordsChunk:
        return self._decode_coords(r, LevelCoords, tag, size)

    def _decode_level_properties(self, r: BoundedCursor, tag: str, size: int) -> LevelProperties:
        location_name = decode_wstr(r)
        level_name = decode_wstr(r)
        elevation, num_rows, num_columns, override_coord_opts = decode_record(r, LEVEL_PROPS)
        notes = decode_wstr(r)
        return LevelProperties(
            tag=tag,
            size=size,
            location_name=location_name,
            level_name=level_name,
            elevation=elevation,
            num_rows=num_rows,
            num_columns=num_columns,
            override_coord_opts=override_coord_opts,
            notes=notes,
        )

    def _decode_cell_layers(
        self, r: BoundedCursor, tag: str, size: int, ctx: DecodeContext
    ) -> LevelCellLayers:
        if ctx.grid_size is None:
            raise MissingGridSize("cell layers appear before any level properties in this scope")
        cells = ctx.grid_size
        layers = {name: decode_cell_layer(r, cells) for name in LevelCellLayers.LAYERS}
        return LevelCellLayers(tag=tag, size=size, cells_count=cells, **layers)

    def _decode_annotations(self, r: BoundedCursor, tag: str, size: int) -> LevelAnnotations:
        count = r.u16()
        records: List[AnnotationRecord] = []
        for _ in range(count):
            row, column, kind_val = decode_record(r, ANNOTATION_HEAD)
            try:
                kind = AnnotationKind(kind_val)
            except ValueError:
                raise BadInput(f"unknown annotation kind {kind_val} at row {row}, column {column}") from None

            payload: Optional[AnnotationPayload] = None
            if kind is AnnotationKind.INDEXED:
                index, index_color = decode_record(r, INDEXED)
                payload = IndexedPayload(index=index, index_color=index_color)
            elif kind is AnnotationKind.CUSTOM:
                payload = CustomIdPayload(custom_id=decode_bstr(r))
            elif kind is AnnotationKind.ICON:
                payload = IconPayload(icon=r.u8())
            elif kind is AnnotationKind.LABEL:
                payload = LabelPayload(label_color=r.u8())

            text = decode_wstr(r)
            records.append(AnnotationRecord(row=row, column=column, kind=kind, text=text, payload=payload))
        return LevelAnnotations(tag=tag, size=size, records=tuple(records))

    def _decode_regions(self, r: BoundedCursor, tag: str, size: int) -> LevelRegions:
        enable, rows_per, columns_per, per_region_coords, count = decode_record(r, REGIONS_HEAD)
        records = tuple(RegionRecord(name=decode_wstr(r), notes=decode_wstr(r)) for _ in range(count))
        return LevelRegions(
            tag=tag,
            size=size,
            enable_regions=enable,
            rows_per_region=rows_per,
            columns_per_region=columns_per,
            per_region_coords=per_region_coords,
            records=records,
        )

    def _decode_links(self, r: BoundedCursor, tag: str, size: int) -> MapLinks:
        count = r.u16()
        records = tuple(MapLinkRecord(*decode_record(r, LINK)) for _ in range(count))
        return MapLinks(tag=tag, size=size, records=records)

    # ---------- Helpers ----------

    def _cast(self, enum_cls, value: int):
        """Enum member when known and enabled, otherwise the raw int."""
        if not self._cast_enums:
            return value
        try:
            return enum_cls(value)
        except ValueError:
            return value
