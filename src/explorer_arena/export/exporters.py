"""Post-run exporters writing final run state to the output directory."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol

from ..engine.turns import RunResult
from ..island.grid import GridIsland


class Exporter(Protocol):
    def export(self, result: RunResult, island: GridIsland) -> Path: ...


def _write_json(path: Path, payload: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, ensure_ascii=True, indent=2) + "\n", encoding="utf-8")
    tmp.replace(path)
    return path


class GameLogExporter:
    """One object per event, then a closing sentinel carrying the outcome."""

    def __init__(self, output_dir: str | Path, player: str) -> None:
        self.path = Path(output_dir) / f"{player}.json"

    def export(self, result: RunResult, island: GridIsland) -> Path:
        records: list[dict[str, Any]] = [event.to_dict() for event in result.events]
        records.append(
            {
                "end": True,
                "outcome": result.outcome.to_dict(),
                "turns": len(result.events),
                "contract": dict(result.contract),
                "crew": result.crew,
                "budget": result.initial_budget,
            }
        )
        return _write_json(self.path, records)


class VisitedMapExporter:
    def __init__(self, output_dir: str | Path, player: str) -> None:
        self.path = Path(output_dir) / f"{player}.visibility.json"

    def export(self, result: RunResult, island: GridIsland) -> Path:
        payload = {
            "island": island.describe(),
            "final_position": result.position.to_list(),
            **result.visibility.to_dict(),
        }
        return _write_json(self.path, payload)


class POIsExporter:
    def __init__(self, output_dir: str | Path, player: str) -> None:
        self.path = Path(output_dir) / f"{player}.pois.json"

    def export(self, result: RunResult, island: GridIsland) -> Path:
        available = island.landmarks()
        payload = {
            "available": len(available),
            "found": {name: coord.to_list() for name, coord in sorted(result.landmarks_found.items())},
        }
        return _write_json(self.path, payload)


def read_game_log(path: str | Path) -> tuple[list[dict[str, Any]], dict[str, Any] | None]:
    """Split an exported game log into event records and the closing sentinel."""
    records = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(records, list):
        raise ValueError(f"{path} is not a game log")
    events = [r for r in records if isinstance(r, dict) and not r.get("end")]
    sentinel = next((r for r in records if isinstance(r, dict) and r.get("end")), None)
    return events, sentinel
