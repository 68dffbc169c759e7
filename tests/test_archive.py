"""Tests for the MapArchive binary codec and document form."""

import io
import struct

import pytest

from pydantic import ValidationError

from tilegrid import (
    ArchiveEncodeError,
    ColorMultiplier,
    FixtureSpriteDecoration,
    MalformedArchiveError,
    MapArchive,
    MapGrid,
    TileSpriteDecoration,
    TruncatedStreamError,
    UnsupportedVersionError,
)


def make_grid(map_id: int) -> MapGrid:
    grid = MapGrid.create(
        map_id,
        top_neighbour_id=map_id - 1,
        right_neighbour_id=map_id + 1,
    )
    grid.update_cell(0, 0x0001)
    grid.update_cell(17, 0x8048)  # reserved bit 15 set
    grid.add_tile(
        TileSpriteDecoration(
            id="ground/grass_01",
            position_x=12.5,
            position_y=-3.25,
            scale=0.75,
            order=4,
            flip_x=True,
            color=ColorMultiplier(red=0.5, green=0.25, blue=1.0, alpha=1.0),
        )
    )
    grid.add_tile(TileSpriteDecoration(id="ground/grass_02", order=5))
    grid.add_fixture(
        FixtureSpriteDecoration(
            id="props/tree_é",
            position_x=-100.0,
            position_y=64.0,
            scale_x=1.5,
            scale_y=2.0,
            rotation=90.0,
            order=-2,
        )
    )
    return grid


def make_archive() -> MapArchive:
    archive = MapArchive()
    archive.update_map(make_grid(1000))
    archive.update_map(make_grid(2000))
    archive.update_map(MapGrid(id=3000))
    return archive


def test_round_trip_is_field_for_field():
    archive = make_archive()
    decoded = MapArchive.from_bytes(archive.to_bytes())

    assert decoded == archive
    assert decoded.map_ids() == [1000, 2000, 3000]
    grid = decoded.maps[1000]
    assert [tile.id for tile in grid.tiles] == ["ground/grass_01", "ground/grass_02"]
    assert grid.tiles[0].color.red == 0.5
    assert grid.fixtures[0].id == "props/tree_é"
    assert grid.cells[17] == 0x8048
    assert decoded.maps[3000].cells == {}


def test_encoding_is_deterministic():
    archive = make_archive()
    assert archive.to_bytes() == archive.to_bytes()
    assert MapArchive.from_bytes(archive.to_bytes()).to_bytes() == archive.to_bytes()


def test_stream_encode_and_decode():
    archive = make_archive()
    buffer = io.BytesIO()
    archive.encode(buffer)
    buffer.seek(0)
    assert MapArchive.decode(buffer) == archive


def test_empty_archive_layout():
    assert MapArchive().to_bytes() == b"\x01\x00\x00\x00\x00"


def test_single_map_byte_layout():
    grid = MapGrid(id=5, left_neighbour_id=4, cells={2: 0x0041})
    grid.add_tile(TileSpriteDecoration(id="ab", scale=1.0, order=7))
    archive = MapArchive()
    archive.update_map(grid)

    expected = b"".join(
        [
            b"\x01",
            struct.pack("<i", 1),
            struct.pack("<qqqqq", 5, -1, -1, 4, -1),
            struct.pack("<i", 1),
            struct.pack("<HH", 2, 0x0041),
            struct.pack("<i", 1),
            b"\x02ab",
            struct.pack("<fffi", 0.0, 0.0, 1.0, 7),
            b"\x00",
            struct.pack("<ffff", 1.0, 1.0, 1.0, 1.0),
            struct.pack("<i", 0),
        ]
    )
    assert archive.to_bytes() == expected


def test_long_strings_use_seven_bit_length_prefix():
    grid = MapGrid(id=1)
    grid.add_tile(TileSpriteDecoration(id="x" * 200))
    archive = MapArchive()
    archive.update_map(grid)
    data = archive.to_bytes()

    # Header (5) + ids (40) + cell count (4) + tile count (4)
    assert data[53:55] == b"\xc8\x01"
    assert MapArchive.from_bytes(data).maps[1].tiles[0].id == "x" * 200


def test_update_map_deep_copies_source():
    grid = make_grid(1)
    archive = MapArchive()
    archive.update_map(grid)

    grid.update_cell(5, 0x0001)
    grid.tiles[0].order = 99
    grid.add_fixture(FixtureSpriteDecoration(id="late"))

    stored = archive.maps[1]
    assert stored.cells[5] == 0x0040
    assert stored.tiles[0].order == 4
    assert len(stored.fixtures) == 1


def test_update_map_replaces_in_place():
    archive = make_archive()
    replacement = MapGrid(id=1000, bottom_neighbour_id=77)
    archive.update_map(replacement)

    assert archive.map_ids() == [1000, 2000, 3000]
    assert archive.maps[1000].bottom_neighbour_id == 77
    assert archive.maps[1000].cells == {}


def test_get_and_remove_map():
    archive = make_archive()
    copy = archive.get_map(2000)
    copy.clear_all_cells()
    assert len(archive.maps[2000].cells) == 560

    assert archive.get_map(42) is None
    assert 2000 in archive
    assert archive.remove_map(2000) is True
    assert archive.remove_map(2000) is False
    assert len(archive) == 2


def test_unknown_version_is_rejected():
    data = bytearray(make_archive().to_bytes())
    data[0] = 2
    with pytest.raises(UnsupportedVersionError) as excinfo:
        MapArchive.from_bytes(bytes(data))
    assert excinfo.value.version == 2


def test_truncated_cell_list_fails():
    data = make_archive().to_bytes()
    # Cut inside the first map's cell list.
    cut = 5 + 40 + 4 + 4 * 100 + 2
    with pytest.raises(TruncatedStreamError):
        MapArchive.from_bytes(data[:cut])


@pytest.mark.parametrize("length", [0, 1, 3, 4])
def test_truncated_header_fails(length):
    data = make_archive().to_bytes()[:length]
    with pytest.raises(TruncatedStreamError):
        MapArchive.from_bytes(data)


def test_every_strict_prefix_fails_with_typed_error():
    data = make_archive().to_bytes()
    for length in range(0, len(data), 97):
        with pytest.raises(TruncatedStreamError):
            MapArchive.from_bytes(data[:length])


def test_negative_count_is_malformed():
    data = b"\x01" + struct.pack("<i", -1)
    with pytest.raises(MalformedArchiveError):
        MapArchive.from_bytes(data)


def test_out_of_range_cell_id_is_malformed():
    data = b"".join(
        [
            b"\x01",
            struct.pack("<i", 1),
            struct.pack("<qqqqq", 1, -1, -1, -1, -1),
            struct.pack("<i", 1),
            struct.pack("<HH", 600, 0),
            struct.pack("<ii", 0, 0),
        ]
    )
    with pytest.raises(MalformedArchiveError):
        MapArchive.from_bytes(data)


def test_duplicate_map_id_is_malformed():
    one_map = MapArchive(maps={1: MapGrid(id=1)}).to_bytes()
    body = one_map[5:]
    data = b"\x01" + struct.pack("<i", 2) + body + body
    with pytest.raises(MalformedArchiveError):
        MapArchive.from_bytes(data)


def test_trailing_bytes_are_malformed():
    with pytest.raises(MalformedArchiveError):
        MapArchive.from_bytes(make_archive().to_bytes() + b"\x00")


def test_json_document_round_trip():
    archive = make_archive()
    document = archive.to_json()
    assert '"ground/grass_01"' in document

    restored = MapArchive.from_json(document)
    assert restored == archive
    assert restored.map_ids() == [1000, 2000, 3000]


def test_json_document_errors_are_malformed():
    with pytest.raises(MalformedArchiveError):
        MapArchive.from_json("{not json")
    with pytest.raises(MalformedArchiveError):
        MapArchive.from_json('{"maps": {"1": {"id": 2}}}')


def float32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def test_non_float32_values_round_trip_exactly():
    grid = MapGrid(id=1)
    grid.add_tile(
        TileSpriteDecoration(
            id="t",
            position_x=0.1,
            position_y=1 / 3,
            scale=2.2,
            color=ColorMultiplier(red=0.1, green=0.7),
        )
    )
    grid.add_fixture(FixtureSpriteDecoration(id="f", rotation=1 / 3, scale_y=0.3))
    archive = MapArchive()
    archive.update_map(grid)

    assert archive.maps[1].tiles[0].position_x == float32(0.1)
    decoded = MapArchive.from_bytes(archive.to_bytes())
    assert decoded == archive
    assert MapArchive.from_json(archive.to_json()) == archive


def test_float_assignment_is_rounded_to_float32():
    tile = TileSpriteDecoration()
    tile.position_y = 0.2
    tile.color.blue = 0.9
    assert tile.position_y == float32(0.2)
    assert tile.color.blue == float32(0.9)


@pytest.mark.parametrize("value", [float("nan"), 1e39, -1e39])
def test_unstorable_floats_are_rejected(value):
    with pytest.raises(ValidationError):
        TileSpriteDecoration(scale=value)
    with pytest.raises(ValidationError):
        ColorMultiplier(alpha=value)


@pytest.mark.parametrize("order", [2**31, -(2**31) - 1])
def test_order_outside_int32_is_rejected(order):
    with pytest.raises(ValidationError):
        TileSpriteDecoration(order=order)
    fixture = FixtureSpriteDecoration()
    with pytest.raises(ValidationError):
        fixture.order = order


def test_int_extremes_round_trip():
    grid = MapGrid(id=2**63 - 1, top_neighbour_id=-(2**63))
    grid.add_tile(TileSpriteDecoration(order=2**31 - 1))
    grid.add_fixture(FixtureSpriteDecoration(order=-(2**31)))
    archive = MapArchive()
    archive.update_map(grid)
    assert MapArchive.from_bytes(archive.to_bytes()) == archive


@pytest.mark.parametrize("cell_id, flags", [(600, 0x0040), (5, 0x1_0000), (5, -1)])
def test_encode_refuses_cells_written_directly(cell_id, flags):
    archive = MapArchive()
    archive.update_map(MapGrid.create(1))
    archive.maps[1].cells[cell_id] = flags

    buffer = io.BytesIO()
    with pytest.raises(ArchiveEncodeError):
        archive.encode(buffer)
    assert buffer.getvalue() == b""


def test_decode_builds_the_calling_class():
    class TaggedArchive(MapArchive):
        pass

    decoded = TaggedArchive.from_bytes(make_archive().to_bytes())
    assert isinstance(decoded, TaggedArchive)
    assert decoded.map_ids() == [1000, 2000, 3000]


def test_string_length_above_int32_is_malformed():
    data = b"".join(
        [
            b"\x01",
            struct.pack("<i", 1),
            struct.pack("<qqqqq", 1, -1, -1, -1, -1),
            struct.pack("<ii", 0, 1),
            b"\x80\x80\x80\x80\x08",  # 2**31
        ]
    )
    with pytest.raises(MalformedArchiveError):
        MapArchive.from_bytes(data)
