"""Tests for the archive command-line tools."""

from tilegrid import MapArchive, MapGrid
from tilegrid.__main__ import main, summarize


def make_archive() -> MapArchive:
    grid = MapGrid.create(7, right_neighbour_id=8)
    grid.update_cell(1, 0x0001)
    archive = MapArchive()
    archive.update_map(grid)
    return archive


def test_summarize_reports_cells_and_neighbours(monkeypatch):
    monkeypatch.setenv("TILEGRID_NO_COLOR", "1")
    summary = summarize(make_archive())
    assert "Archive: 1 map(s)" in summary
    assert "Map 7 [initialized]" in summary
    assert "Cells: 560/560 (1 non-walkable)" in summary
    assert "right=8" in summary


def test_convert_between_binary_and_json(tmp_path):
    archive = make_archive()
    binary = tmp_path / "maps.map"
    document = tmp_path / "maps.json"
    restored = tmp_path / "restored.map"
    binary.write_bytes(archive.to_bytes())

    assert main(["to-json", str(binary), str(document)]) == 0
    assert MapArchive.from_json(document.read_text("utf-8")) == archive

    assert main(["from-json", str(document), str(restored)]) == 0
    assert restored.read_bytes() == binary.read_bytes()


def test_inspect_reports_decode_failure(tmp_path, capsys):
    broken = tmp_path / "broken.map"
    broken.write_bytes(b"\x01\x02")

    assert main(["inspect", str(broken)]) == 1
    assert "Failed to decode map archive" in capsys.readouterr().out


def test_missing_file_is_an_error(tmp_path):
    assert main(["inspect", str(tmp_path / "absent.map")]) == 1
