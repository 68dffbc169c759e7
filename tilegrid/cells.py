"""Per-cell flag bitfield and the cell record used by movement queries.

Cell flags are a 16-bit unsigned value with a fixed bit layout shared with the
binary archive format:

    bit 0  non-walkable (inverted: 0 means walkable)
    bit 1  non-walkable in combat mode
    bit 2  non-walkable in free-roam mode
    bit 3  blocks line of sight
    bit 4  blue team zone
    bit 5  red team zone
    bit 6  visible
    bit 7  farm zone
    bit 8  instanced house (havenbag) zone

Bits 9-15 are reserved. They are never rejected and always survive a
read/modify/write cycle, so archives written by newer editors keep their data.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

FLAGS_MASK = 0xFFFF

# 14 cells per row, 20 double-rows.
MAP_WIDTH = 14
MAP_HEIGHT = 20
CELL_COUNT = MAP_WIDTH * MAP_HEIGHT * 2

# Visible and walkable.
DEFAULT_CELL_FLAGS = 0x0040


class CellFlag(IntEnum):
    """Bit index of each named cell property."""

    NON_WALKABLE = 0
    NON_WALKABLE_FIGHT = 1
    NON_WALKABLE_RP = 2
    LINE_OF_SIGHT = 3
    BLUE = 4
    RED = 5
    VISIBLE = 6
    FARM = 7
    HAVENBAG = 8


def _check_bit(bit: int) -> int:
    bit = int(bit)
    if not 0 <= bit < 16:
        raise ValueError(f"Bit index {bit} is outside the 16-bit flag field")
    return bit


def get_flag(flags: int, bit: int) -> bool:
    """Return whether ``bit`` is set in ``flags``."""
    return bool((int(flags) & FLAGS_MASK) >> _check_bit(bit) & 1)


def set_flag(flags: int, bit: int) -> int:
    """Return ``flags`` with ``bit`` set."""
    return (int(flags) | (1 << _check_bit(bit))) & FLAGS_MASK


def clear_flag(flags: int, bit: int) -> int:
    """Return ``flags`` with ``bit`` cleared."""
    return int(flags) & ~(1 << _check_bit(bit)) & FLAGS_MASK


@dataclass(frozen=True)
class CellFlags:
    """Immutable view over a 16-bit cell flag value."""

    value: int = DEFAULT_CELL_FLAGS

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", int(self.value) & FLAGS_MASK)

    @classmethod
    def compose(
        cls,
        *,
        walkable: bool = True,
        non_walkable_fight: bool = False,
        non_walkable_rp: bool = False,
        line_of_sight: bool = False,
        blue: bool = False,
        red: bool = False,
        visible: bool = True,
        farm: bool = False,
        havenbag: bool = False,
    ) -> "CellFlags":
        """Build flags from named properties, the way the editor's cell panel does."""

        value = 0
        toggles = (
            (not walkable, CellFlag.NON_WALKABLE),
            (non_walkable_fight, CellFlag.NON_WALKABLE_FIGHT),
            (non_walkable_rp, CellFlag.NON_WALKABLE_RP),
            (line_of_sight, CellFlag.LINE_OF_SIGHT),
            (blue, CellFlag.BLUE),
            (red, CellFlag.RED),
            (visible, CellFlag.VISIBLE),
            (farm, CellFlag.FARM),
            (havenbag, CellFlag.HAVENBAG),
        )
        for enabled, bit in toggles:
            if enabled:
                value = set_flag(value, bit)
        return cls(value)

    def get(self, bit: int) -> bool:
        return get_flag(self.value, bit)

    def set(self, bit: int) -> "CellFlags":
        return CellFlags(set_flag(self.value, bit))

    def clear(self, bit: int) -> "CellFlags":
        return CellFlags(clear_flag(self.value, bit))

    @property
    def is_walkable(self) -> bool:
        return not self.get(CellFlag.NON_WALKABLE)

    @property
    def is_non_walkable_fight(self) -> bool:
        return self.get(CellFlag.NON_WALKABLE_FIGHT)

    @property
    def is_non_walkable_rp(self) -> bool:
        return self.get(CellFlag.NON_WALKABLE_RP)

    @property
    def is_line_of_sight(self) -> bool:
        return self.get(CellFlag.LINE_OF_SIGHT)

    @property
    def is_blue(self) -> bool:
        return self.get(CellFlag.BLUE)

    @property
    def is_red(self) -> bool:
        return self.get(CellFlag.RED)

    @property
    def is_visible(self) -> bool:
        return self.get(CellFlag.VISIBLE)

    @property
    def is_farm(self) -> bool:
        return self.get(CellFlag.FARM)

    @property
    def is_havenbag(self) -> bool:
        return self.get(CellFlag.HAVENBAG)

    @property
    def is_all_walkable(self) -> bool:
        """Walkable and not blocked in either combat or free-roam mode."""
        return self.is_walkable and not self.is_non_walkable_fight and not self.is_non_walkable_rp

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True)
class Cell:
    """One grid cell as seen by movement queries.

    ``floor`` and ``move_zone`` group cells into walkable regions; ``speed`` is
    the terrain cost term (negative values mark difficult terrain).
    """

    id: int
    flags: CellFlags = CellFlags()
    floor: int = 0
    move_zone: int = 0
    speed: int = 0


def is_valid_cell_id(cell_id: int) -> bool:
    return 0 <= cell_id < CELL_COUNT
