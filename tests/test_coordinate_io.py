"""Tests for coordinate export and import."""

import io
from pathlib import Path

import pytest

from py_mosaic.config import settings
from py_mosaic.core.coordinate_io import (
    export_coordinates, import_coordinates, parse_coordinates, resolve_path, write_coordinates
)
from py_mosaic.core.coordinates import SquareCoordinate
from py_mosaic.core.exceptions import CoordinateFormatError
from py_mosaic.core.polisher import Polisher


class TestExport:
    """Test the plain-text layout."""

    def test_layout(self, strip):
        stream = io.StringIO()
        write_coordinates(strip, stream)
        lines = stream.getvalue().splitlines()
        assert lines[0] == "ID 0"
        assert lines[1] == "0 0"
        assert lines[2:6] == ["0 0", "1 0", "2 0", "3 0"]
        assert lines[6] == "ID 1"
        assert len(lines) == 12

    def test_hex_components_are_normalized(self, flower):
        stream = io.StringIO()
        write_coordinates(flower, stream)
        for line in stream.getvalue().splitlines():
            if line.startswith("ID"):
                continue
            components = [int(v) for v in line.split()]
            assert len(components) == 3
            assert components[2] == 0

    def test_creates_parent_directories(self, strip, tmp_path):
        path = export_coordinates(strip, tmp_path / "nested" / "strip.txt")
        assert path.exists()

    def test_bare_name_goes_to_export_dir(self, strip, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "export_dir", str(tmp_path / "exports"))
        path = export_coordinates(strip, "strip.txt")
        assert path == tmp_path / "exports" / "strip.txt"
        assert path.exists()

    def test_explicit_paths_are_kept(self, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "export_dir", str(tmp_path))
        assert resolve_path("sub/strip.txt") == Path("sub/strip.txt")
        assert resolve_path(tmp_path / "strip.txt") == tmp_path / "strip.txt"


class TestImport:
    """Test reading exports back."""

    def test_round_trip(self, flower_factory, tmp_path):
        exported = flower_factory()
        Polisher(exported).polish()
        exported.get_region(2).translate_guiding_shape(exported.lattice.coordinate(1, 0, 0))
        path = export_coordinates(exported, tmp_path / "flower.txt")

        restored = flower_factory()
        assert restored != exported
        import_coordinates(restored, path)
        assert restored == exported
        for before, after in zip(exported.regions(), restored.regions()):
            assert set(after) == set(before)
            assert after.total_translation == before.total_translation
            assert after.hits == before.hits
            assert after.hex_error == before.hex_error
        assert restored.total_hex_error() == 0
        assert restored.is_valid()

    def test_bare_name_is_read_from_export_dir(self, strip_factory, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "export_dir", str(tmp_path))
        export_coordinates(strip_factory(length=2), "short.txt")
        target = import_coordinates(strip_factory(length=4), "short.txt")
        assert target.number_of_cells() == 4

    def test_import_replaces_existing_cells(self, strip_factory, tmp_path):
        source = strip_factory(length=2)
        path = export_coordinates(source, tmp_path / "short.txt")
        target = strip_factory(length=4)
        import_coordinates(target, path)
        assert target.number_of_cells() == 4
        assert target.get_vertex(SquareCoordinate(5, 0)) is None

    def test_blank_lines_are_ignored(self, strip):
        blocks = parse_coordinates(strip, ["ID 0", "", "0 0", "1 0", "", "ID 1", "0 0"])
        assert blocks == [
            (0, SquareCoordinate(0, 0), [SquareCoordinate(1, 0)]),
            (1, SquareCoordinate(0, 0), []),
        ]

    @pytest.mark.parametrize("lines, line_number", [
        (["0 0"], 1),
        (["ID x"], 1),
        (["ID 9"], 1),
        (["ID 0", "0 0", "1 a"], 3),
        (["ID 0", "0 0", "1 2 3"], 3),
        (["ID 0", "ID 1"], 2),
    ])
    def test_malformed_lines(self, strip, lines, line_number):
        with pytest.raises(CoordinateFormatError) as excinfo:
            parse_coordinates(strip, lines)
        assert excinfo.value.line_number == line_number

    def test_missing_translation_at_end(self, strip):
        with pytest.raises(CoordinateFormatError):
            parse_coordinates(strip, ["ID 0"])

    def test_malformed_file_leaves_cartogram_untouched(self, strip, tmp_path):
        path = tmp_path / "broken.txt"
        path.write_text("ID 0\n0 0\n0 0\n1 zero\n", encoding="utf-8")
        before = strip.duplicate()
        with pytest.raises(CoordinateFormatError):
            import_coordinates(strip, path)
        assert strip == before
