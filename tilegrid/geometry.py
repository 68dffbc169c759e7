"""Isometric map geometry: cell id <-> map coordinates.

Cells are laid out as 20 double-rows of 14 cells. The second row of each pair
is shifted half a cell to the right, which gives the diamond-shaped isometric
coordinate system below. Movement queries only depend on the contract
(total over integers, ``-1`` off grid), so callers may inject their own
locator instead.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .cells import CELL_COUNT, MAP_HEIGHT, MAP_WIDTH

EVERY_CELL_ID: Tuple[int, ...] = tuple(range(CELL_COUNT))


def _build_cell_coordinates() -> List[Tuple[int, int]]:
    coordinates: List[Tuple[int, int]] = []
    start_x = 0
    start_y = 0
    for _ in range(MAP_HEIGHT):
        for b in range(MAP_WIDTH):
            coordinates.append((start_x + b, start_y + b))
        start_x += 1
        for b in range(MAP_WIDTH):
            coordinates.append((start_x + b, start_y + b))
        start_y -= 1
    return coordinates


_CELL_COORDINATES = _build_cell_coordinates()


def is_in_map(x: int, y: int) -> bool:
    return x + y >= 0 and x - y >= 0 and x - y < MAP_HEIGHT * 2 and x + y < MAP_WIDTH * 2


def cell_id_from_coordinates(x: int, y: int) -> int:
    """Return the cell id at ``(x, y)`` or ``-1`` when off grid."""
    if not is_in_map(x, y):
        return -1
    return (x - y) * MAP_WIDTH + y + (x - y) // 2


def coordinates_from_cell_id(cell_id: int) -> Optional[Tuple[int, int]]:
    if not 0 <= cell_id < CELL_COUNT:
        return None
    return _CELL_COORDINATES[cell_id]
