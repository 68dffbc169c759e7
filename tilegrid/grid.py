"""
MapGrid: the authoritative in-memory state of one map.

A grid owns:
- identity (``id``) and links to the four neighbouring maps (-1 = none)
- the cell flag mapping, keyed by cell id in ``[0, CELL_COUNT)``
- ordered tile and fixture decoration lists

The cell mapping is the only cell store. Ordered views (``ordered_cells``)
are derived from it on demand, so an editor list can never drift from the
data that gets persisted.

Lifecycle:
    grid = MapGrid(id=42)           # EMPTY: no cells yet
    grid.initialize_all_cells()     # INITIALIZED: 560 visible, walkable cells
    grid.update_cell(12, 0x0041)    # editor toggles a cell
    grid.clear_all_cells()          # back to EMPTY, decorations untouched

Change cells through ``update_cell`` and friends. Direct writes to ``cells``
skip the id and flag checks; ``MapArchive.encode`` refuses such entries.

Mutation methods are not thread-safe. Callers that share a grid between
threads need their own lock or a single-writer discipline.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .cells import CELL_COUNT, DEFAULT_CELL_FLAGS, FLAGS_MASK, CellFlags, is_valid_cell_id
from .codec import INT64_MAX, INT64_MIN
from .errors import CellOutOfRangeError
from .geometry import EVERY_CELL_ID
from .schemas import FixtureSpriteDecoration, TileSpriteDecoration

NO_NEIGHBOUR = -1


class GridState(str, Enum):
    EMPTY = "empty"
    INITIALIZED = "initialized"


class NeighbourDirection(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


class MapGrid(BaseModel):
    """One map: identity, neighbour links, cell flags and decorations."""

    model_config = ConfigDict(validate_assignment=True)

    id: int = Field(..., ge=INT64_MIN, le=INT64_MAX, description="Map id (int64)")
    top_neighbour_id: int = Field(
        NO_NEIGHBOUR, ge=INT64_MIN, le=INT64_MAX, description="Map above; -1 when none"
    )
    bottom_neighbour_id: int = Field(
        NO_NEIGHBOUR, ge=INT64_MIN, le=INT64_MAX, description="Map below; -1 when none"
    )
    left_neighbour_id: int = Field(
        NO_NEIGHBOUR, ge=INT64_MIN, le=INT64_MAX, description="Map to the left; -1 when none"
    )
    right_neighbour_id: int = Field(
        NO_NEIGHBOUR, ge=INT64_MIN, le=INT64_MAX, description="Map to the right; -1 when none"
    )
    cells: Dict[int, int] = Field(
        default_factory=dict,
        description="Map of cell_id → 16-bit flags, in insertion order",
    )
    tiles: List[TileSpriteDecoration] = Field(default_factory=list)
    fixtures: List[FixtureSpriteDecoration] = Field(default_factory=list)

    @field_validator("cells")
    @classmethod
    def _check_cell_ids(cls, cells: Dict[int, int]) -> Dict[int, int]:
        for cell_id in cells:
            if not is_valid_cell_id(cell_id):
                raise ValueError(f"Cell id {cell_id} is outside [0, {CELL_COUNT})")
        return {cell_id: flags & FLAGS_MASK for cell_id, flags in cells.items()}

    @classmethod
    def create(cls, map_id: int, **neighbours: int) -> "MapGrid":
        """Return a fresh grid with every cell visible and walkable."""
        grid = cls(id=map_id, **neighbours)
        grid.initialize_all_cells()
        return grid

    # --- Cell state ---
    @property
    def state(self) -> GridState:
        return GridState.INITIALIZED if self.cells else GridState.EMPTY

    @property
    def is_complete(self) -> bool:
        return len(self.cells) == CELL_COUNT

    def initialize_all_cells(self) -> int:
        """Fill every missing cell id with the default flags.

        Existing cells are never overwritten, so calling this twice is a no-op
        the second time. Returns the number of cells added.
        """
        added = 0
        for cell_id in EVERY_CELL_ID:
            if cell_id not in self.cells:
                self.cells[cell_id] = DEFAULT_CELL_FLAGS
                added += 1
        return added

    def update_cell(self, cell_id: int, flags: int | CellFlags) -> None:
        """Insert or replace one cell's flags.

        Raises:
            CellOutOfRangeError: If ``cell_id`` is outside ``[0, CELL_COUNT)``
        """
        if not is_valid_cell_id(cell_id):
            raise CellOutOfRangeError(cell_id, CELL_COUNT)
        self.cells[cell_id] = int(flags) & FLAGS_MASK

    def clear_all_cells(self) -> None:
        self.cells.clear()

    def get_cell_flags(self, cell_id: int) -> Optional[CellFlags]:
        flags = self.cells.get(cell_id)
        return None if flags is None else CellFlags(flags)

    def ordered_cells(self) -> List[Tuple[int, int]]:
        """Return ``(cell_id, flags)`` pairs sorted by cell id."""
        return sorted(self.cells.items())

    # --- Neighbours ---
    def neighbour(self, direction: NeighbourDirection) -> int:
        return getattr(self, f"{NeighbourDirection(direction).value}_neighbour_id")

    def set_neighbour(self, direction: NeighbourDirection, map_id: int) -> None:
        setattr(self, f"{NeighbourDirection(direction).value}_neighbour_id", map_id)

    def neighbours(self) -> Dict[NeighbourDirection, int]:
        """Return the neighbour links that point at an actual map."""
        links = {direction: self.neighbour(direction) for direction in NeighbourDirection}
        return {direction: map_id for direction, map_id in links.items() if map_id != NO_NEIGHBOUR}

    # --- Decorations ---
    def add_tile(self, tile: TileSpriteDecoration) -> None:
        self.tiles.append(tile)

    def remove_tile(self, tile: TileSpriteDecoration) -> None:
        self.tiles.remove(tile)

    def add_fixture(self, fixture: FixtureSpriteDecoration) -> None:
        self.fixtures.append(fixture)

    def remove_fixture(self, fixture: FixtureSpriteDecoration) -> None:
        self.fixtures.remove(fixture)
