import struct

import pytest

from gmm_bytes import (
    bstr,
    cell,
    chunk,
    coords,
    layer_raw,
    layer_rle,
    layer_zero,
    links,
    list_chunk,
    lvl_prop,
    map_prop,
    wstr,
)
from gridmonger_gmm.enums import AnnotationKind, ChunkKind, CoordinateOrigin, CoordinateStyle
from gridmonger_gmm.exceptions import (
    BadInput,
    BufferTooSmall,
    MissingGridSize,
    Overrun,
    Truncated,
)
from gridmonger_gmm.leio import BoundedCursor
from gridmonger_gmm.models import (
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
    UnknownChunk,
)
from gridmonger_gmm.parser import GmmParser
from gridmonger_gmm.primitives import decode_prefixed_text


def _sample_map() -> bytes:
    level = list_chunk(
        "lvl ",
        lvl_prop(rows=1, columns=2, elevation=-3, notes="cold"),
        coords(origin=1, row_style=1, column_style=0, row_start=5, column_start=7),
        cell(
            layer_raw(bytes([1, 2, 3, 4, 5, 6])),
            layer_rle(bytes([0x85, 0x09])),
            layer_zero(),
            layer_zero(),
            layer_rle(bytes([0x01, 0x82, 0x00, 0x03])),
            layer_zero(),
        ),
    )
    return list_chunk(
        "map ",
        map_prop(title="Abyss", author="Jo", notes="x"),
        coords(),
        chunk("disp", b"\x01\x02\x03"),
        list_chunk("lvls", level),
        links((0, 1, 2, 0, 3, 4)),
    )


def test_parse_sample_map():
    chunks = GmmParser().parse(_sample_map())
    assert len(chunks) == 1
    root = chunks[0]
    assert isinstance(root, ListChunk)
    assert root.list_type == "map "
    # the ignored "disp" chunk leaves no trace
    assert [c.kind for c in root.children] == [
        ChunkKind.MAP_PROP,
        ChunkKind.MAP_COOR,
        ChunkKind.LIST,
        ChunkKind.MAP_LINKS,
    ]

    props = root.children[0]
    assert isinstance(props, MapProperties)
    assert (props.version, props.title, props.game, props.author) == (4, "Abyss", "Eye", "Jo")
    assert props.creation_time == "2025-01-01"
    assert props.notes == "x"

    map_coords = root.children[1]
    assert isinstance(map_coords, MapCoords)
    assert map_coords.column_style is CoordinateStyle.LETTER
    assert map_coords.row_start == 1

    level = root.children[2].children[0]
    assert level.list_type == "lvl "
    lp, lc, cells = level.children
    assert isinstance(lp, LevelProperties)
    assert (lp.location_name, lp.level_name, lp.elevation) == ("Keep", "Level 1", -3)
    assert lp.grid_size == 6
    assert isinstance(lc, LevelCoords)
    assert lc.origin is CoordinateOrigin.SOUTH_WEST
    assert (lc.row_start, lc.column_start) == (5, 7)

    assert isinstance(cells, LevelCellLayers)
    assert cells.cells_count == 6
    assert cells.floor == bytes([1, 2, 3, 4, 5, 6])
    assert cells.floor_orientation == b"\x09" * 6
    assert cells.floor_color == bytes(6)
    assert cells.wall_west == bytes([1, 0, 0, 0, 3, 0])

    lnks = root.children[3]
    assert isinstance(lnks, MapLinks)
    assert lnks.records == (MapLinkRecord(0, 1, 2, 0, 3, 4),)


def test_parse_is_deterministic():
    data = _sample_map()
    assert GmmParser().parse(data) == GmmParser().parse(data)


def test_size_defect_is_skipped():
    # regions header (8) + "r1" (4) + "note" (6) = 18 bytes read of 20 declared
    body = struct.pack("<BHHBH", 1, 4, 4, 0, 1) + wstr("r1") + wstr("note") + b"\xee\xee"
    data = list_chunk("lvl ", chunk("regn", body), coords())
    level = GmmParser().parse(data)[0]
    regn, lc = level.children
    assert isinstance(regn, LevelRegions)
    assert regn.size == 20
    assert (regn.enable_regions, regn.rows_per_region, regn.columns_per_region) == (1, 4, 4)
    assert regn.num_regions == 1
    assert (regn.records[0].name, regn.records[0].notes) == ("r1", "note")
    assert isinstance(lc, LevelCoords)


def test_overrun_is_fatal():
    # coordinates need 7 bytes; the header claims 4
    bad = b"coor" + struct.pack("<I", 4) + struct.pack("<BBBHH", 0, 0, 0, 1, 1) + b"\0"
    data = list_chunk("map ", bad, coords())
    with pytest.raises(Overrun) as info:
        GmmParser().parse(data)
    assert info.value.tag == "coor"


def test_odd_sized_chunk_is_padded():
    # version (2) + "ab" (4) + 3 empty wide strings (6) + empty byte string (1) = 13
    data = list_chunk("map ", map_prop(title="ab", game="", author="", created="", notes=""), coords())
    root = GmmParser().parse(data)[0]
    assert root.children[0].size == 13
    assert isinstance(root.children[1], MapCoords)


def test_last_chunk_may_lack_padding():
    data = list_chunk("map ", chunk("zzzz", b"abc", pad=False))
    root = GmmParser().parse(data)[0]
    assert root.children == (UnknownChunk(tag="zzzz", size=3),)


def test_unknown_and_context_free_chunks():
    data = map_prop() + coords() + chunk("xyzw", b"1234")
    chunks = GmmParser().parse(data)
    # "prop"/"coor" only have a meaning inside a map or level list
    assert [type(c) for c in chunks] == [UnknownChunk, UnknownChunk, UnknownChunk]
    assert [c.tag for c in chunks] == ["prop", "coor", "xyzw"]


def test_grid_size_does_not_leak_between_sibling_levels():
    first = list_chunk("lvl ", lvl_prop(rows=4, columns=4), cell())
    second = list_chunk("lvl ", cell())
    parser = GmmParser()

    level = parser.parse(first)[0]
    assert level.children[1].cells_count == 25

    with pytest.raises(MissingGridSize) as info:
        parser.parse(first + second)
    assert info.value.tag == "cell"


def test_grid_size_reaches_nested_lists_but_not_back():
    data = list_chunk(
        "lvl ",
        lvl_prop(rows=1, columns=1),
        list_chunk("xtra", cell(), list_chunk("lvl ", lvl_prop(rows=2, columns=2), cell())),
        cell(),
    )
    level = GmmParser().parse(data)[0]
    nested = level.children[1]
    assert nested.children[0].cells_count == 4
    assert nested.children[1].children[1].cells_count == 9
    assert level.children[2].cells_count == 4


def _anno_body() -> bytes:
    head = struct.Struct("<HHB")
    records = [
        head.pack(1, 2, 0) + wstr("note"),
        head.pack(1, 3, 1) + struct.pack("<HB", 7, 2) + wstr("seven"),
        head.pack(2, 2, 2) + bstr("X1") + wstr("custom"),
        head.pack(3, 0, 3) + b"\x09" + wstr(""),
        head.pack(0, 0, 4) + b"\x05" + wstr("label"),
    ]
    return struct.pack("<H", len(records)) + b"".join(records)


def test_annotation_payloads_are_exclusive():
    level = GmmParser().parse(list_chunk("lvl ", chunk("anno", _anno_body())))[0]
    anno = level.children[0]
    assert isinstance(anno, LevelAnnotations)
    assert anno.num_annotations == 5

    comment, indexed, custom, icon, label = anno.records
    assert comment.kind is AnnotationKind.COMMENT and comment.payload is None
    assert comment.text == "note"
    assert indexed.payload == IndexedPayload(index=7, index_color=2)
    assert indexed.text == "seven"
    assert custom.payload == CustomIdPayload(custom_id="X1")
    assert icon.payload == IconPayload(icon=9)
    assert icon.text == ""
    assert label.payload == LabelPayload(label_color=5)
    assert [r.kind for r in anno.records] == list(AnnotationKind)


def test_unknown_annotation_kind():
    body = struct.pack("<H", 1) + struct.pack("<HHB", 0, 0, 9) + wstr("")
    with pytest.raises(BadInput):
        GmmParser().parse(list_chunk("lvl ", chunk("anno", body)))


def test_bad_compression_mode_names_the_chunk():
    data = list_chunk("lvl ", lvl_prop(rows=0, columns=0), chunk("cell", b"\x07"))
    with pytest.raises(BadInput) as info:
        GmmParser().parse(data)
    assert info.value.tag == "cell"
    assert "cell" in str(info.value)


def test_list_larger_than_enclosing_budget():
    data = b"LIST" + struct.pack("<I", 100) + b"map " + coords()
    with pytest.raises(BufferTooSmall):
        GmmParser().parse(data)


def test_truncated_header():
    with pytest.raises(Truncated):
        GmmParser().parse(b"pro")


def test_string_longer_than_chunk():
    data = list_chunk("lvl ", chunk("prop", struct.pack("<H", 50) + b"ab"))
    with pytest.raises(BufferTooSmall):
        GmmParser().parse(data)


def test_links_and_cast_enums_off():
    data = list_chunk("map ", coords(origin=1, column_style=7), links((1, 2, 3, 4, 5, 6), (6, 5, 4, 3, 2, 1)))
    root = GmmParser(cast_enums=False).parse(data)[0]
    mc, lnks = root.children
    assert type(mc.origin) is int and mc.origin == 1
    assert mc.column_style == 7
    assert lnks.num_links == 2
    assert lnks.records[1].dest_column == 1

    # unknown enum values stay raw even when casting
    mc = GmmParser().parse(data)[0].children[0]
    assert mc.origin is CoordinateOrigin.SOUTH_WEST
    assert mc.column_style == 7


def test_custom_ignore_tags():
    data = list_chunk("map ", chunk("disp", b"\x00\x00"), chunk("tool", b""))
    root = GmmParser(ignore_tags={"tool"}).parse(data)[0]
    assert [c.tag for c in root.children] == ["disp"]


def test_list_too_small_for_its_type_tag():
    with pytest.raises(BufferTooSmall) as info:
        GmmParser().parse(b"LIST" + struct.pack("<I", 2) + b"ab")
    assert info.value.tag == "LIST"


def test_ignored_chunk_longer_than_enclosing_list():
    data = list_chunk("map ", b"disp" + struct.pack("<I", 50) + b"xx")
    with pytest.raises(Truncated) as info:
        GmmParser().parse(data)
    assert info.value.tag == "disp"


def test_size_defect_skip_past_end_of_buffer():
    with pytest.raises(Truncated) as info:
        GmmParser().parse(b"zzzz" + struct.pack("<I", 50) + b"xx")
    assert info.value.tag == "zzzz"


def test_invalid_utf8_text_stays_visible():
    body = struct.pack("<H", 1) + struct.pack("<HHB", 0, 0, 0) + struct.pack("<H", 3) + b"a\xffb"
    level = GmmParser().parse(list_chunk("lvl ", chunk("anno", body)))[0]
    assert level.children[0].records[0].text == "a\ufffdb"


def test_text_prefix_width_must_be_one_or_two():
    with pytest.raises(ValueError):
        decode_prefixed_text(BoundedCursor(b"\x00\x00\x00\x00"), 4)
