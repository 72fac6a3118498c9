"""Visited and scanned tile tracking."""

from __future__ import annotations

from dataclasses import dataclass

from ..island.grid import Coordinate


@dataclass(frozen=True)
class VisibilitySnapshot:
    visited: frozenset[Coordinate]
    scanned: frozenset[Coordinate]

    def to_dict(self) -> dict[str, list[list[int]]]:
        return {
            "visited": [c.to_list() for c in sorted(self.visited)],
            "scanned": [c.to_list() for c in sorted(self.scanned)],
        }


class VisibilityTracker:
    """Append-only sets of occupied and remotely observed coordinates."""

    def __init__(self) -> None:
        self._visited: set[Coordinate] = set()
        self._scanned: set[Coordinate] = set()

    def mark_visited(self, coord: Coordinate) -> bool:
        if coord in self._visited:
            return False
        self._visited.add(coord)
        return True

    def mark_scanned(self, coord: Coordinate) -> bool:
        if coord in self._scanned:
            return False
        self._scanned.add(coord)
        return True

    def snapshot(self) -> VisibilitySnapshot:
        return VisibilitySnapshot(frozenset(self._visited), frozenset(self._scanned))
