"""Pattern lock geometry.

Maps pointer coordinates on a square 3x3 dot grid to a dot path. Dots are
numbered 1-9 row-major; the path is sent as "1-5-9" in place of a password.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from preptrack.core.errors import ValidationError

GRID_SIZE = 3
SENSITIVITY_RADIUS = 30
MIN_STORED_DOTS = 4
SEPARATOR = "-"


@dataclass(frozen=True)
class Point:
    """A coordinate inside the pattern widget."""

    x: float
    y: float


def dot_center(index: int, size: float) -> Point:
    """Centre of the dot at zero-based `index` in a widget `size` wide."""
    col = index % GRID_SIZE
    row = index // GRID_SIZE
    spacing = size / (GRID_SIZE + 1)
    return Point(x=(col + 1) * spacing, y=(row + 1) * spacing)


def dot_centers(size: float) -> list[Point]:
    """Centres of all nine dots."""
    return [dot_center(i, size) for i in range(GRID_SIZE * GRID_SIZE)]


def _hits(point: Point, centers: list[Point], path: list[int]) -> list[int]:
    hits = []
    for i, dot in enumerate(centers):
        distance = math.hypot(point.x - dot.x, point.y - dot.y)
        if distance < SENSITIVITY_RADIUS and (i + 1) not in path and (i + 1) not in hits:
            hits.append(i + 1)
    return hits


def trace(points: list[Point], size: float) -> list[int]:
    """Build the dot path for a pointer stroke.

    The first point (press) selects at most one dot. Each following point
    (move) appends every dot within the sensitivity radius that is not
    already part of the path.

    Args:
        points: Pointer positions, press first
        size: Widget width/height in the same units

    Returns:
        Dot numbers 1-9 in the order they were reached
    """
    if not points:
        return []
    centers = dot_centers(size)

    path = _hits(points[0], centers, [])[:1]
    for point in points[1:]:
        path.extend(_hits(point, centers, path))
    return path


def encode(path: list[int]) -> str:
    """Join a dot path into its secret form, e.g. [1, 5, 9] -> "1-5-9"."""
    return SEPARATOR.join(str(dot) for dot in path)


def decode(pattern: str) -> list[int]:
    """Parse and validate a "1-5-9" pattern string.

    Raises:
        ValidationError: Empty pattern, non-digit parts, dots outside 1-9
            or repeated dots
    """
    parts = [p.strip() for p in (pattern or "").split(SEPARATOR) if p.strip()]
    if not parts:
        raise ValidationError("Pattern is required.", {"field": "pattern"})

    path = []
    for part in parts:
        if not part.isdigit() or not 1 <= int(part) <= GRID_SIZE * GRID_SIZE:
            raise ValidationError(f"Invalid dot '{part}' in pattern.", {"field": "pattern"})
        dot = int(part)
        if dot in path:
            raise ValidationError("A pattern cannot visit the same dot twice.", {"field": "pattern"})
        path.append(dot)
    return path


def require_storable(pattern: str) -> list[int]:
    """Validate a pattern chosen as a sign-in secret (at least four dots)."""
    path = decode(pattern)
    if len(path) < MIN_STORED_DOTS:
        raise ValidationError(
            f"Connect at least {MIN_STORED_DOTS} dots.", {"field": "pattern"}
        )
    return path
