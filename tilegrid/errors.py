"""Exception hierarchy for grid editing and archive decoding.

Query helpers never raise for an off-grid cell id; they return ``None`` or a
sentinel instead, because coordinate math routinely walks off the grid. The
errors below are reserved for mutations with an invalid id and for byte
streams that cannot be decoded.
"""

from __future__ import annotations


class TileGridError(Exception):
    """Base class for all tilegrid errors."""


class CellOutOfRangeError(TileGridError, IndexError):
    """A cell id outside ``[0, CELL_COUNT)`` was used to mutate a grid."""

    def __init__(self, cell_id: int, limit: int):
        super().__init__(f"Cell id {cell_id} is outside [0, {limit})")
        self.cell_id = cell_id
        self.limit = limit


class ArchiveDecodeError(TileGridError):
    """Raised when an archive byte stream or document cannot be decoded."""


class UnsupportedVersionError(ArchiveDecodeError):
    """The archive's format version byte is not one this library can read."""

    def __init__(self, version: int, supported: tuple[int, ...]):
        supported_text = ", ".join(str(v) for v in supported)
        super().__init__(
            f"Unsupported archive format version {version} (supported: {supported_text})"
        )
        self.version = version
        self.supported = supported


class TruncatedStreamError(ArchiveDecodeError):
    """The stream ended in the middle of a record."""

    def __init__(self, needed: int, available: int, offset: int):
        super().__init__(
            f"Stream truncated at offset {offset}: needed {needed} bytes, got {available}"
        )
        self.needed = needed
        self.available = available
        self.offset = offset


class MalformedArchiveError(ArchiveDecodeError):
    """The stream is structurally inconsistent (bad counts, ids, strings)."""


class ArchiveEncodeError(TileGridError, ValueError):
    """A grid holds a value the archive format cannot represent."""
