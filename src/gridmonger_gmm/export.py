from __future__ import annotations

from dataclasses import asdict, fields
from enum import IntEnum
from typing import Any, Dict, List, Sequence

from .models import (
    AnnotationRecord,
    Chunk,
    CoordsChunk,
    LevelAnnotations,
    LevelCellLayers,
    LevelProperties,
    LevelRegions,
    ListChunk,
    MapLinks,
    MapProperties,
    UnknownChunk,
)


def _coerce_enums(obj: Any) -> Any:
    """Convert IntEnum (and nested structures) to plain int for stable JSON."""
    if isinstance(obj, IntEnum):
        return int(obj)
    if isinstance(obj, dict):
        return {k: _coerce_enums(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_coerce_enums(v) for v in obj]
    return obj


def _body_fields(chunk: Chunk) -> Dict[str, Any]:
    # every dataclass field except the header
    return {f.name: getattr(chunk, f.name) for f in fields(chunk) if f.name not in ("tag", "size")}


def _annotation_to_dict(record: AnnotationRecord) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "row": record.row,
        "column": record.column,
        "kind": record.kind,
        "text": record.text,
    }
    if record.payload is not None:
        out.update(asdict(record.payload))
    return out


def chunk_to_dict(chunk: Chunk) -> Dict[str, Any]:
    """JSON-ready dict for one chunk, recursing into LIST children."""
    out: Dict[str, Any] = {"chunk_type": chunk.kind.label}

    if isinstance(chunk, ListChunk):
        out["list_type"] = chunk.list_type
        out["children"] = [chunk_to_dict(c) for c in chunk.children]
    elif isinstance(chunk, (MapProperties, CoordsChunk, LevelProperties)):
        out.update(_body_fields(chunk))
    elif isinstance(chunk, LevelCellLayers):
        for name in LevelCellLayers.LAYERS:
            out[name] = list(getattr(chunk, name))
    elif isinstance(chunk, LevelAnnotations):
        out["num_annotations"] = chunk.num_annotations
        out["records"] = [_annotation_to_dict(rec) for rec in chunk.records]
    elif isinstance(chunk, LevelRegions):
        out.update({k: v for k, v in _body_fields(chunk).items() if k != "records"})
        out["num_regions"] = chunk.num_regions
        out["records"] = [asdict(rec) for rec in chunk.records]
    elif isinstance(chunk, MapLinks):
        out["num_links"] = chunk.num_links
        out["records"] = [asdict(rec) for rec in chunk.records]
    elif not isinstance(chunk, UnknownChunk):
        raise TypeError(f"unsupported chunk type {type(chunk).__name__}")

    return _coerce_enums(out)


def export_chunks(chunks: Sequence[Chunk]) -> List[Dict[str, Any]]:
    return [chunk_to_dict(c) for c in chunks]
