"""
MapArchive: several map grids persisted as one versioned binary stream.

The binary layout is the format of record (all integers little-endian):

    byte     format version (1)
    int32    map count
    per map:
        int64    id, top, bottom, left, right neighbour ids
        int32    cell count,    then per cell:    uint16 id, uint16 flags
        int32    tile count,    then per tile:    string id, float32 x, y, scale,
                                                  int32 order, bool flip_x,
                                                  float32 r, g, b, a
        int32    fixture count, then per fixture: string id, float32 x, y,
                                                  scale_x, scale_y, rotation,
                                                  int32 order, float32 r, g, b, a

Maps are written in archive insertion order and cells in each grid's mapping
order, so encoding the same archive twice yields identical bytes.

Decoding never returns a partially filled archive. Any failure surfaces as a
subclass of ``ArchiveDecodeError`` and the caller decides whether to retry,
abort, or fall back to ``MapArchive()``.

The archive also has a JSON document form (``to_json``/``from_json``) that
mirrors the same fields for tooling. It is not byte-stable and is not the
format of record.
"""

from __future__ import annotations

import io
from typing import BinaryIO, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from .cells import CELL_COUNT, is_valid_cell_id
from .codec import UINT16_MAX, BinaryReader, BinaryWriter
from .errors import (
    ArchiveDecodeError,
    ArchiveEncodeError,
    MalformedArchiveError,
    UnsupportedVersionError,
)
from .grid import MapGrid
from .logging_utils import log_codec, log_error, log_warning
from .schemas import ColorMultiplier, FixtureSpriteDecoration, TileSpriteDecoration

FORMAT_VERSION = 1
SUPPORTED_VERSIONS: tuple[int, ...] = (1,)


class MapArchive(BaseModel):
    """Ordered container of map grids keyed by map id."""

    maps: Dict[int, MapGrid] = Field(
        default_factory=dict,
        description="Map of map_id → grid, in insertion order",
    )

    # --- Container operations ---
    def update_map(self, grid: MapGrid) -> None:
        """Insert or replace a grid, deep-copying it.

        Later edits to ``grid`` do not reach the archive's copy. Replacing an
        existing id keeps its original position in the encoding order.
        """
        self.maps[grid.id] = grid.model_copy(deep=True)

    def get_map(self, map_id: int) -> Optional[MapGrid]:
        """Return a deep copy of the stored grid, or None when absent."""
        grid = self.maps.get(map_id)
        return None if grid is None else grid.model_copy(deep=True)

    def remove_map(self, map_id: int) -> bool:
        return self.maps.pop(map_id, None) is not None

    def map_ids(self) -> List[int]:
        return list(self.maps)

    def __contains__(self, map_id: object) -> bool:
        return map_id in self.maps

    def __len__(self) -> int:
        return len(self.maps)

    # --- Binary codec ---
    def encode(self, stream: BinaryIO) -> None:
        """Write the archive to ``stream`` using the current format version.

        Nothing reaches ``stream`` unless the whole archive encodes.

        Raises:
            ArchiveEncodeError: A grid holds a cell id or flags value that was
                written to ``cells`` directly and cannot be stored
        """
        stream.write(self.to_bytes())

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        writer = BinaryWriter(buffer)
        writer.write_byte(FORMAT_VERSION)
        writer.write_int32(len(self.maps))
        for grid in self.maps.values():
            _write_grid(writer, grid)
        log_codec(f"Encoded archive v{FORMAT_VERSION} with {len(self.maps)} map(s)")
        return buffer.getvalue()

    @classmethod
    def decode(cls, stream: BinaryIO) -> "MapArchive":
        """Read an archive from ``stream``.

        Raises:
            UnsupportedVersionError: Unknown format version byte
            TruncatedStreamError: Stream ended mid-record
            MalformedArchiveError: Negative counts, bad cell ids, duplicates
        """
        reader = BinaryReader(stream)
        try:
            archive = _read_archive(cls, reader)
        except ArchiveDecodeError as exc:
            log_error(f"Failed to decode map archive: {exc}")
            raise
        log_codec(f"Decoded archive with {len(archive.maps)} map(s) ({reader.offset} bytes)")
        return archive

    @classmethod
    def from_bytes(cls, data: bytes) -> "MapArchive":
        """Decode a complete byte string; trailing bytes are malformed."""
        stream = io.BytesIO(data)
        archive = cls.decode(stream)
        if stream.tell() != len(data):
            message = f"{len(data) - stream.tell()} trailing byte(s) after the last map"
            log_error(f"Failed to decode map archive: {message}")
            raise MalformedArchiveError(message)
        return archive

    # --- Document form ---
    def to_json(self, indent: int | None = 2) -> str:
        return self.model_dump_json(indent=indent)

    @classmethod
    def from_json(cls, text: str | bytes) -> "MapArchive":
        try:
            archive = cls.model_validate_json(text)
        except ValidationError as exc:
            log_error(f"Invalid map archive document: {exc.error_count()} error(s)")
            raise MalformedArchiveError(str(exc)) from exc
        for map_id, grid in archive.maps.items():
            if map_id != grid.id:
                message = f"Map stored under key {map_id} declares id {grid.id}"
                log_error(f"Invalid map archive document: {message}")
                raise MalformedArchiveError(message)
        return archive


def _write_color(writer: BinaryWriter, color: ColorMultiplier) -> None:
    for channel in color.as_tuple():
        writer.write_float32(channel)


def _check_cells(grid: MapGrid) -> None:
    for cell_id, flags in grid.cells.items():
        if not is_valid_cell_id(cell_id):
            raise ArchiveEncodeError(f"Map {grid.id} has out-of-range cell id {cell_id}")
        if not 0 <= flags <= UINT16_MAX:
            raise ArchiveEncodeError(
                f"Map {grid.id} cell {cell_id} has flags {flags:#x} outside 16 bits"
            )


def _write_grid(writer: BinaryWriter, grid: MapGrid) -> None:
    writer.write_int64(grid.id)
    writer.write_int64(grid.top_neighbour_id)
    writer.write_int64(grid.bottom_neighbour_id)
    writer.write_int64(grid.left_neighbour_id)
    writer.write_int64(grid.right_neighbour_id)

    _check_cells(grid)
    writer.write_int32(len(grid.cells))
    for cell_id, flags in grid.cells.items():
        writer.write_uint16(cell_id)
        writer.write_uint16(flags)

    writer.write_int32(len(grid.tiles))
    for tile in grid.tiles:
        writer.write_string(tile.id)
        writer.write_float32(tile.position_x)
        writer.write_float32(tile.position_y)
        writer.write_float32(tile.scale)
        writer.write_int32(tile.order)
        writer.write_bool(tile.flip_x)
        _write_color(writer, tile.color)

    writer.write_int32(len(grid.fixtures))
    for fixture in grid.fixtures:
        writer.write_string(fixture.id)
        writer.write_float32(fixture.position_x)
        writer.write_float32(fixture.position_y)
        writer.write_float32(fixture.scale_x)
        writer.write_float32(fixture.scale_y)
        writer.write_float32(fixture.rotation)
        writer.write_int32(fixture.order)
        _write_color(writer, fixture.color)


def _read_archive(cls: type[MapArchive], reader: BinaryReader) -> MapArchive:
    version = reader.read_byte()
    if version not in SUPPORTED_VERSIONS:
        raise UnsupportedVersionError(version, SUPPORTED_VERSIONS)

    archive = cls()
    map_count = reader.read_count("map")
    for _ in range(map_count):
        grid = _read_grid(reader)
        if grid.id in archive.maps:
            raise MalformedArchiveError(f"Duplicate map id {grid.id}")
        archive.maps[grid.id] = grid
    return archive


def _read_color(reader: BinaryReader) -> ColorMultiplier:
    return ColorMultiplier(
        red=reader.read_float32(),
        green=reader.read_float32(),
        blue=reader.read_float32(),
        alpha=reader.read_float32(),
    )


def _read_grid(reader: BinaryReader) -> MapGrid:
    map_id = reader.read_int64()
    grid = MapGrid(
        id=map_id,
        top_neighbour_id=reader.read_int64(),
        bottom_neighbour_id=reader.read_int64(),
        left_neighbour_id=reader.read_int64(),
        right_neighbour_id=reader.read_int64(),
    )

    cell_count = reader.read_count("cell")
    if cell_count > CELL_COUNT:
        raise MalformedArchiveError(f"Map {map_id} declares {cell_count} cells (max {CELL_COUNT})")
    for _ in range(cell_count):
        cell_id = reader.read_uint16()
        flags = reader.read_uint16()
        if not is_valid_cell_id(cell_id):
            raise MalformedArchiveError(f"Map {map_id} has out-of-range cell id {cell_id}")
        if cell_id in grid.cells:
            raise MalformedArchiveError(f"Map {map_id} has duplicate cell id {cell_id}")
        grid.cells[cell_id] = flags
    if 0 < cell_count < CELL_COUNT:
        log_warning(f"Map {map_id} has {cell_count} of {CELL_COUNT} cells")

    tile_count = reader.read_count("tile")
    for _ in range(tile_count):
        grid.tiles.append(
            TileSpriteDecoration(
                id=reader.read_string(),
                position_x=reader.read_float32(),
                position_y=reader.read_float32(),
                scale=reader.read_float32(),
                order=reader.read_int32(),
                flip_x=reader.read_bool(),
                color=_read_color(reader),
            )
        )

    fixture_count = reader.read_count("fixture")
    for _ in range(fixture_count):
        grid.fixtures.append(
            FixtureSpriteDecoration(
                id=reader.read_string(),
                position_x=reader.read_float32(),
                position_y=reader.read_float32(),
                scale_x=reader.read_float32(),
                scale_y=reader.read_float32(),
                rotation=reader.read_float32(),
                order=reader.read_int32(),
                color=_read_color(reader),
            )
        )

    return grid
