"""Static grid island used as the world/map provider for a run."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, NamedTuple

import yaml


class Coordinate(NamedTuple):
    """Grid position: x runs North to South, y runs West to East."""

    x: int
    y: int

    def to_list(self) -> list[int]:
        return [self.x, self.y]


class Direction(str, Enum):
    NORTH = "N"
    SOUTH = "S"
    EAST = "E"
    WEST = "W"

    @property
    def offset(self) -> tuple[int, int]:
        return _OFFSETS[self]


_OFFSETS: dict[Direction, tuple[int, int]] = {
    Direction.NORTH: (-1, 0),
    Direction.SOUTH: (1, 0),
    Direction.EAST: (0, 1),
    Direction.WEST: (0, -1),
}

DIRECTION_ALIASES: dict[str, Direction] = {
    "N": Direction.NORTH,
    "NORTH": Direction.NORTH,
    "S": Direction.SOUTH,
    "SOUTH": Direction.SOUTH,
    "E": Direction.EAST,
    "EAST": Direction.EAST,
    "W": Direction.WEST,
    "WEST": Direction.WEST,
}


@dataclass(frozen=True)
class Tile:
    coordinate: Coordinate
    resources: dict[str, int] = field(default_factory=dict)
    landmark: str | None = None


class GridIsland:
    """Rectangular island with per-tile resource yields and landmark candidates."""

    def __init__(self, rows: int, cols: int, tiles: list[Tile] | None = None, name: str = "island") -> None:
        if rows <= 0 or cols <= 0:
            raise ValueError("island dimensions must be > 0")
        self.rows = rows
        self.cols = cols
        self.name = name
        self._tiles: dict[Coordinate, Tile] = {}
        for tile in tiles or []:
            if not self.contains(tile.coordinate):
                raise ValueError(f"tile {tile.coordinate.to_list()} is outside a {rows}x{cols} island")
            self._tiles[tile.coordinate] = tile
        self._landmarks: dict[Coordinate, str] = {
            coord: tile.landmark for coord, tile in self._tiles.items() if tile.landmark
        }

    def contains(self, coord: Coordinate) -> bool:
        return 0 <= coord.x < self.rows and 0 <= coord.y < self.cols

    def tile(self, coord: Coordinate) -> Tile:
        if not self.contains(coord):
            raise KeyError(coord)
        found = self._tiles.get(coord)
        if found is None:
            return Tile(coord)
        landmark = self._landmarks.get(coord)
        if landmark != found.landmark:
            return Tile(coord, dict(found.resources), landmark)
        return found

    def neighbour(self, coord: Coordinate, direction: Direction) -> Coordinate:
        dx, dy = direction.offset
        return Coordinate(coord.x + dx, coord.y + dy)

    def resource_kinds(self) -> set[str]:
        kinds: set[str] = set()
        for tile in self._tiles.values():
            kinds.update(tile.resources)
        return kinds

    def yield_of(self, coord: Coordinate, kind: str) -> int:
        if not self.contains(coord):
            return 0
        return int(self.tile(coord).resources.get(kind, 0))

    def landmarks(self) -> dict[Coordinate, str]:
        return dict(self._landmarks)

    def place_landmarks(self, count: int, rng: random.Random) -> None:
        """Keep at most ``count`` landmark candidates, chosen with the run RNG."""
        if count < 0:
            raise ValueError("landmark count must be >= 0")
        candidates = sorted(self._landmarks)
        if len(candidates) <= count:
            return
        kept = set(rng.sample(candidates, count))
        self._landmarks = {coord: self._landmarks[coord] for coord in candidates if coord in kept}

    def describe(self) -> dict[str, Any]:
        return {"name": self.name, "rows": self.rows, "cols": self.cols}


def island_from_dict(raw: dict[str, Any]) -> GridIsland:
    rows = raw.get("rows")
    cols = raw.get("cols")
    if not isinstance(rows, int) or not isinstance(cols, int):
        raise ValueError("island map requires integer 'rows' and 'cols'")
    tiles: list[Tile] = []
    for entry in raw.get("tiles") or []:
        at = entry.get("at")
        if not isinstance(at, list) or len(at) != 2:
            raise ValueError(f"tile entry needs 'at: [x, y]', got {at!r}")
        resources = {str(kind).upper(): int(value) for kind, value in (entry.get("resources") or {}).items()}
        landmark = entry.get("landmark")
        tiles.append(Tile(Coordinate(int(at[0]), int(at[1])), resources, str(landmark) if landmark else None))
    return GridIsland(rows, cols, tiles, name=str(raw.get("name", "island")))


def load_island(path: str | Path) -> GridIsland:
    with Path(path).open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError("island map file must contain a mapping")
    return island_from_dict(raw)
