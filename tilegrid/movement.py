"""Per-cell movement queries over a map grid snapshot.

MovementModel answers the questions a pathfinder or AI needs at every step:
is this cell id real, can I step between these two cells, what does entering
this cell cost, and does this step cross a walkable-region boundary. It does
not search for paths and does not know where actors stand; those belong to
the callers that consume these queries.

The model copies the grid's cells when it is built, so later edits to the
grid are not visible to an existing model. Build a new one after editing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional

from .cells import CELL_COUNT, DEFAULT_CELL_FLAGS, Cell, CellFlags
from .cells import is_valid_cell_id as _is_valid_cell_id
from .geometry import EVERY_CELL_ID, cell_id_from_coordinates
from .grid import MapGrid

CellLocator = Callable[[int, int], int]


@dataclass(frozen=True)
class CellTerrain:
    """Terrain attributes that live outside the flag bitfield."""

    floor: int = 0
    move_zone: int = 0
    speed: int = 0


@dataclass
class MovementModel:
    """Read-only movement queries over ``CELL_COUNT`` cells."""

    cells: List[Cell]
    locator: CellLocator = field(default=cell_id_from_coordinates)

    def __post_init__(self) -> None:
        if len(self.cells) != CELL_COUNT:
            raise ValueError(f"MovementModel needs exactly {CELL_COUNT} cells, got {len(self.cells)}")
        for index, cell in enumerate(self.cells):
            if cell.id != index:
                raise ValueError(f"Cell at position {index} has id {cell.id}")

    @classmethod
    def from_grid(
        cls,
        grid: MapGrid,
        terrain: Optional[Mapping[int, CellTerrain]] = None,
        *,
        locator: CellLocator = cell_id_from_coordinates,
    ) -> "MovementModel":
        """Snapshot ``grid`` into a movement model.

        Cells missing from the grid get the default (visible, walkable) flags.
        ``terrain`` supplies floor/move zone/speed per cell id; absent ids use 0.
        """
        terrain = terrain or {}
        cells = []
        for cell_id in EVERY_CELL_ID:
            extra = terrain.get(cell_id, CellTerrain())
            cells.append(
                Cell(
                    id=cell_id,
                    flags=CellFlags(grid.cells.get(cell_id, DEFAULT_CELL_FLAGS)),
                    floor=extra.floor,
                    move_zone=extra.move_zone,
                    speed=extra.speed,
                )
            )
        return cls(cells=cells, locator=locator)

    def is_valid_cell_id(self, cell_id: int) -> bool:
        return _is_valid_cell_id(cell_id)

    def get_cell(self, cell_id: int) -> Optional[Cell]:
        if not self.is_valid_cell_id(cell_id):
            return None
        return self.cells[cell_id]

    def cell_id_from_coordinates(self, x: int, y: int) -> int:
        return self.locator(x, y)

    def can_move_to_cell(self, start_cell_id: int, end_cell_id: int) -> bool:
        """True when both cells exist and are walkable in every mode."""
        start = self.get_cell(start_cell_id)
        end = self.get_cell(end_cell_id)
        if start is None or end is None:
            return False
        return start.flags.is_all_walkable and end.flags.is_all_walkable

    def point_movable(
        self,
        x: int,
        y: int,
        previous_cell_id: int = -1,
        in_fight: bool = False,
    ) -> bool:
        """Check a step onto map coordinates ``(x, y)``.

        Off-grid coordinates are never movable. A step with no valid previous
        cell (e.g. entering the map) is always allowed. Otherwise both cells
        must pass ``can_move_to_cell``, which already rejects cells blocked in
        combat, so ``in_fight`` adds no further restriction.
        """
        end_cell_id = self.cell_id_from_coordinates(x, y)
        if end_cell_id == -1:
            return False
        if not self.is_valid_cell_id(previous_cell_id):
            return True
        return self.can_move_to_cell(previous_cell_id, end_cell_id)

    def point_weight(self, x: int, y: int, allow_through_entity: bool = True) -> float:
        """Cost of entering the cell at ``(x, y)``; 0 when off grid.

        Positive speed lowers the cost linearly from 5. Negative speed marks
        difficult terrain and jumps to ``11 + |speed|``. Occupancy-based
        costing (``allow_through_entity=False``) needs actor positions and
        always yields 0 here.
        """
        cell = self.get_cell(self.cell_id_from_coordinates(x, y))
        if cell is None:
            return 0.0
        if not allow_through_entity:
            return 0.0
        if cell.speed >= 0:
            return float(5 - cell.speed)
        return float(11 + abs(cell.speed))

    def is_change_zone(self, cell_id_1: int, cell_id_2: int) -> bool:
        """True when two cells on the same absolute floor sit in different move zones."""
        first = self.get_cell(cell_id_1)
        second = self.get_cell(cell_id_2)
        if first is None or second is None:
            return False
        floor_difference = abs(abs(first.floor) - abs(second.floor))
        return first.move_zone != second.move_zone and floor_difference == 0
