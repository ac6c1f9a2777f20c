"""
Planar geometry helpers.
"""

from typing import Sequence

import numpy as np


def polygon_area(points: Sequence[Sequence[float]]) -> float:
    """Unsigned area of a simple polygon using the shoelace formula.

    A closing point equal to the first one may be present or omitted.
    """
    pts = np.asarray(points, dtype=float)
    if len(pts) < 3:
        return 0.0
    x = pts[:, 0]
    y = pts[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0)


def signed_polygon_area(points: Sequence[Sequence[float]]) -> float:
    """Signed shoelace area; positive for counter-clockwise polygons."""
    pts = np.asarray(points, dtype=float)
    if len(pts) < 3:
        return 0.0
    x = pts[:, 0]
    y = pts[:, 1]
    return float((np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0)
