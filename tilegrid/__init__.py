"""
Tilegrid - tile-grid map data for 2D games.

Edit and persist per-cell passability/visibility flags, map adjacency and
decorative sprites, and answer per-cell movement queries.

No file I/O required. Archives encode to any byte stream; storage backends
are optional and injected by the caller.
"""

__version__ = "0.1.0"

# Cell flags and constants
from .cells import (
    CELL_COUNT,
    DEFAULT_CELL_FLAGS,
    MAP_HEIGHT,
    MAP_WIDTH,
    Cell,
    CellFlag,
    CellFlags,
    clear_flag,
    get_flag,
    set_flag,
)

# Map geometry
from .geometry import EVERY_CELL_ID, cell_id_from_coordinates, coordinates_from_cell_id

# Map data
from .schemas import ColorMultiplier, FixtureSpriteDecoration, TileSpriteDecoration
from .grid import GridState, MapGrid, NeighbourDirection, NO_NEIGHBOUR
from .archive import FORMAT_VERSION, SUPPORTED_VERSIONS, MapArchive

# Movement queries
from .movement import CellTerrain, MovementModel

# Storage backends
from .persistence import (
    ArchiveStore,
    InMemoryArchiveStore,
    BinaryArchiveStore,
    JsonArchiveStore,
)

# Errors
from .errors import (
    TileGridError,
    CellOutOfRangeError,
    ArchiveDecodeError,
    UnsupportedVersionError,
    TruncatedStreamError,
    MalformedArchiveError,
    ArchiveEncodeError,
)

__all__ = [
    # Cells
    "CELL_COUNT",
    "DEFAULT_CELL_FLAGS",
    "MAP_HEIGHT",
    "MAP_WIDTH",
    "Cell",
    "CellFlag",
    "CellFlags",
    "clear_flag",
    "get_flag",
    "set_flag",
    # Geometry
    "EVERY_CELL_ID",
    "cell_id_from_coordinates",
    "coordinates_from_cell_id",
    # Map data
    "ColorMultiplier",
    "FixtureSpriteDecoration",
    "TileSpriteDecoration",
    "GridState",
    "MapGrid",
    "NeighbourDirection",
    "NO_NEIGHBOUR",
    "FORMAT_VERSION",
    "SUPPORTED_VERSIONS",
    "MapArchive",
    # Movement
    "CellTerrain",
    "MovementModel",
    # Storage
    "ArchiveStore",
    "InMemoryArchiveStore",
    "BinaryArchiveStore",
    "JsonArchiveStore",
    # Errors
    "TileGridError",
    "CellOutOfRangeError",
    "ArchiveDecodeError",
    "UnsupportedVersionError",
    "TruncatedStreamError",
    "MalformedArchiveError",
    "ArchiveEncodeError",
]
