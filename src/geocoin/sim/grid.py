from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

DEFAULT_GRID_SIZE = 0.0001
COORD_PRECISION = 10
CELL_INDEX_PRECISION = 8
MAX_ABS_LAT = 90.0
MAX_ABS_LNG = 180.0
DIRECTIONS = ("up", "down", "left", "right")

# (lat steps, lng steps) per direction.
DIRECTION_STEPS: dict[str, tuple[int, int]] = {
    "up": (1, 0),
    "down": (-1, 0),
    "left": (0, -1),
    "right": (0, 1),
}


def _require_number(value: Any, *, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field_name} must be numeric")
    if not math.isfinite(value):
        raise ValueError(f"{field_name} must be finite")
    return float(value)


def _require_int(value: Any, *, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer")
    return value


@dataclass(frozen=True)
class GeoCoord:
    """Continuous (lat, lng) position."""

    lat: float
    lng: float

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, field_name: str = "coord") -> "GeoCoord":
        if not isinstance(data, dict):
            raise ValueError(f"{field_name} must be an object")
        return cls(
            lat=_require_number(data.get("lat"), field_name=f"{field_name}.lat"),
            lng=_require_number(data.get("lng"), field_name=f"{field_name}.lng"),
        )


@dataclass(frozen=True, order=True)
class GridCell:
    """Discrete cell index (i, j); i follows latitude, j longitude."""

    i: int
    j: int

    @property
    def key(self) -> str:
        return cell_key(self)

    def offset(self, di: int, dj: int) -> "GridCell":
        return GridCell(self.i + di, self.j + dj)

    def to_dict(self) -> dict[str, int]:
        return {"i": self.i, "j": self.j}

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, field_name: str = "cell") -> "GridCell":
        if not isinstance(data, dict):
            raise ValueError(f"{field_name} must be an object")
        return cls(
            i=_require_int(data.get("i"), field_name=f"{field_name}.i"),
            j=_require_int(data.get("j"), field_name=f"{field_name}.j"),
        )


def _cell_index(value: float, grid_size: float) -> int:
    # Snap the quotient so grid-aligned coordinates land in the cell they start.
    return math.floor(round(value / grid_size, CELL_INDEX_PRECISION))


def to_cell(coord: GeoCoord, grid_size: float = DEFAULT_GRID_SIZE) -> GridCell:
    return GridCell(i=_cell_index(coord.lat, grid_size), j=_cell_index(coord.lng, grid_size))


def require_location(coord: GeoCoord, *, field_name: str = "location") -> GeoCoord:
    """Reject coordinates that cannot be mapped onto the grid."""
    for axis, limit in (("lat", MAX_ABS_LAT), ("lng", MAX_ABS_LNG)):
        value = _require_number(getattr(coord, axis), field_name=f"{field_name}.{axis}")
        if abs(value) > limit:
            raise ValueError(f"{field_name}.{axis} must be within [-{limit}, {limit}]")
    return coord


def cell_key(cell: GridCell) -> str:
    return f"{cell.i}:{cell.j}"


def parse_cell_key(key: str) -> GridCell:
    if not isinstance(key, str):
        raise ValueError("cell key must be a string")
    parts = key.split(":")
    if len(parts) != 2:
        raise ValueError(f"malformed cell key: {key!r}")
    try:
        cell = GridCell(i=int(parts[0]), j=int(parts[1]))
    except ValueError:
        raise ValueError(f"malformed cell key: {key!r}") from None
    if cell_key(cell) != key:
        raise ValueError(f"non-canonical cell key: {key!r}")
    return cell


def cell_origin(cell: GridCell, grid_size: float = DEFAULT_GRID_SIZE) -> GeoCoord:
    """South-west corner of a cell, used for marker placement."""
    return GeoCoord(
        lat=round(cell.i * grid_size, COORD_PRECISION),
        lng=round(cell.j * grid_size, COORD_PRECISION),
    )


def step(coord: GeoCoord, direction: str, grid_size: float = DEFAULT_GRID_SIZE) -> GeoCoord:
    if direction not in DIRECTION_STEPS:
        raise ValueError(f"unknown direction: {direction}")
    d_lat, d_lng = DIRECTION_STEPS[direction]
    # Rounding keeps n steps followed by n opposite steps exact.
    return GeoCoord(
        lat=round(coord.lat + d_lat * grid_size, COORD_PRECISION),
        lng=round(coord.lng + d_lng * grid_size, COORD_PRECISION),
    )


def chebyshev_distance(a: GridCell, b: GridCell) -> int:
    return max(abs(a.i - b.i), abs(a.j - b.j))


def window_cells(center: GridCell, radius: int) -> list[GridCell]:
    """Cells within Chebyshev ``radius`` of ``center``, row-major over (dx, dy)."""
    if radius < 0:
        raise ValueError("radius must be >= 0")
    return [
        center.offset(dx, dy)
        for dx in range(-radius, radius + 1)
        for dy in range(-radius, radius + 1)
    ]
