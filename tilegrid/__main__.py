"""Command-line tools for map archive files.

    python -m tilegrid inspect maps.map
    python -m tilegrid to-json maps.map maps.json
    python -m tilegrid from-json maps.json maps.map
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .archive import MapArchive
from .cells import CELL_COUNT, CellFlags
from .errors import ArchiveDecodeError
from .logging_utils import Color, colored, log_error, log_success


def _load(path: Path) -> MapArchive:
    if path.suffix == ".json":
        return MapArchive.from_json(path.read_text("utf-8"))
    return MapArchive.from_bytes(path.read_bytes())


def summarize(archive: MapArchive) -> str:
    """Return a human-readable summary of every map in ``archive``."""
    lines = [colored(f"Archive: {len(archive)} map(s)", Color.CYAN, bold=True)]
    for grid in archive.maps.values():
        flags = [CellFlags(value) for value in grid.cells.values()]
        blocked = sum(1 for cell in flags if not cell.is_walkable)
        neighbours = ", ".join(
            f"{direction.value}={map_id}" for direction, map_id in grid.neighbours().items()
        ) or "none"
        lines.append(f"  Map {grid.id} [{grid.state.value}]")
        lines.append(f"    Cells: {len(grid.cells)}/{CELL_COUNT} ({blocked} non-walkable)")
        lines.append(f"    Neighbours: {neighbours}")
        lines.append(f"    Tiles: {len(grid.tiles)}  Fixtures: {len(grid.fixtures)}")
    return "\n".join(lines)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="tilegrid", description="Map archive tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    inspect_parser = subparsers.add_parser("inspect", help="Print a summary of an archive")
    inspect_parser.add_argument("path", type=Path, help="Binary (.map) or JSON archive")

    to_json = subparsers.add_parser("to-json", help="Convert a binary archive to JSON")
    to_json.add_argument("source", type=Path)
    to_json.add_argument("destination", type=Path)

    from_json = subparsers.add_parser("from-json", help="Convert a JSON archive to binary")
    from_json.add_argument("source", type=Path)
    from_json.add_argument("destination", type=Path)
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        if args.command == "inspect":
            print(summarize(_load(args.path)))
        elif args.command == "to-json":
            archive = MapArchive.from_bytes(args.source.read_bytes())
            args.destination.write_text(archive.to_json(), "utf-8")
            log_success(f"Wrote {args.destination}")
        elif args.command == "from-json":
            archive = MapArchive.from_json(args.source.read_text("utf-8"))
            args.destination.write_bytes(archive.to_bytes())
            log_success(f"Wrote {args.destination}")
    except ArchiveDecodeError:
        # Already reported by the codec.
        return 1
    except OSError as exc:
        log_error(f"Cannot access archive file: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
