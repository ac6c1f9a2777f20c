"""
Plain-text export and import of cartogram cell assignments.

Format, repeated per region::

    ID <vertex id>
    <guiding shape total translation components>
    <cell components>
    ...

Components are integers separated by whitespace.
"""

from pathlib import Path
from typing import List, Optional, TextIO, Tuple, Union

import structlog

from ..config.config import settings
from .cartogram import MosaicCartogram
from .coordinates import Coordinate
from .exceptions import CoordinateFormatError

logger = structlog.get_logger()

PathLike = Union[str, Path]


def _format(c: Coordinate) -> str:
    return " ".join(str(v) for v in c.normalize().components)


def write_coordinates(cartogram: MosaicCartogram, stream: TextIO) -> None:
    for region in cartogram.regions():
        stream.write(f"ID {region.vertex}\n")
        stream.write(_format(region.total_translation) + "\n")
        for c in region:
            stream.write(_format(c) + "\n")


def resolve_path(path: PathLike) -> Path:
    """Place a bare file name inside ``settings.export_dir``; other paths are kept."""
    path = Path(path)
    if not path.is_absolute() and path.parent == Path("."):
        return Path(settings.export_dir) / path
    return path


def export_coordinates(cartogram: MosaicCartogram, path: PathLike) -> Path:
    """Write every region's cells to ``path``.

    A bare file name is written to the configured export directory.
    """
    path = resolve_path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        write_coordinates(cartogram, f)
    logger.info("Coordinates exported", path=str(path), cells=cartogram.number_of_cells(),
                regions=cartogram.number_of_regions())
    return path


def _parse_components(line: str, line_number: int) -> List[int]:
    try:
        return [int(token) for token in line.split()]
    except ValueError:
        raise CoordinateFormatError(f"expected integer components, got '{line}'", line_number) from None


def parse_coordinates(cartogram: MosaicCartogram, lines) -> List[Tuple[int, Coordinate, List[Coordinate]]]:
    """Parse export lines into ``(vertex, translation, cells)`` blocks without touching the cartogram."""
    blocks = []
    vertex: Optional[int] = None
    expect_translation = False
    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue
        if line.startswith("ID"):
            if expect_translation:
                raise CoordinateFormatError("region block without translation line", line_number)
            try:
                vertex = int(line[2:].strip())
            except ValueError:
                raise CoordinateFormatError(f"invalid region id in '{line}'", line_number) from None
            if not 0 <= vertex < cartogram.number_of_regions():
                raise CoordinateFormatError(f"unknown region id {vertex}", line_number)
            expect_translation = True
            continue
        if vertex is None:
            raise CoordinateFormatError("coordinates before the first ID line", line_number)
        try:
            c = cartogram.lattice.coordinate(*_parse_components(line, line_number))
        except ValueError as e:
            raise CoordinateFormatError(str(e), line_number) from None
        if expect_translation:
            blocks.append((vertex, c, []))
            expect_translation = False
        else:
            blocks[-1][2].append(c)
    if expect_translation:
        raise CoordinateFormatError("region block without translation line")
    return blocks


def read_coordinates(cartogram: MosaicCartogram, stream: TextIO) -> None:
    blocks = parse_coordinates(cartogram, stream)
    cartogram.clear()
    for vertex, translation, cells in blocks:
        region = cartogram.get_region(vertex)
        if region.guiding_shape is not None:
            region.translate_guiding_shape(translation.minus(region.total_translation))
        else:
            region.total_translation = translation
        for c in cells:
            cartogram.set_vertex(c, vertex)


def import_coordinates(cartogram: MosaicCartogram, path: PathLike) -> MosaicCartogram:
    """Replace the cartogram's cells with those stored at ``path``.

    The file is parsed completely before the cartogram is cleared, so a
    malformed file leaves the cartogram untouched. A bare file name is read
    from the configured export directory.
    """
    path = resolve_path(path)
    with open(path, "r", encoding="utf-8") as f:
        read_coordinates(cartogram, f)
    logger.info("Coordinates imported", path=str(path), cells=cartogram.number_of_cells())
    return cartogram
