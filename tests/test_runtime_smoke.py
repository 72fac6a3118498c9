from __future__ import annotations

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from explorer_arena.analysis import summarize_log
from explorer_arena.arena import Arena, import_agent
from explorer_arena.agents import LumberjackBot, ScoutBot, StopBot
from explorer_arena.config import AppConfig
from explorer_arena.dashboard import create_app
from explorer_arena.export import read_game_log
from explorer_arena.island import Coordinate, GridIsland, Tile


def _make_config(tmp_path) -> AppConfig:
    cfg = AppConfig()
    cfg.run.seed = 0
    cfg.run.budget = 7000
    cfg.run.crew = 15
    cfg.run.contract = {"WOOD": 1000}
    cfg.run.start.x = 1
    cfg.run.start.y = 1
    cfg.run.timeout_ms = 1000
    cfg.run.landmarks = 1

    out = tmp_path / "outputs"
    out.mkdir()
    cfg.export.output_dir = str(out)
    cfg.logging.logs_dir = str(tmp_path / "logs")
    return cfg


def _island() -> GridIsland:
    return GridIsland(
        5,
        5,
        [
            Tile(Coordinate(1, 1), {"WOOD": 100}),
            Tile(Coordinate(0, 1), landmark="creek_a"),
            Tile(Coordinate(2, 1), landmark="creek_b"),
        ],
        name="test_island",
    )


def test_arena_runs_and_exports(tmp_path) -> None:
    cfg = _make_config(tmp_path)
    arena = Arena(cfg, agent_class=LumberjackBot, island=_island(), run_id="test_run")
    result = arena.fire()

    assert result.outcome.is_success
    out = Path(cfg.export.output_dir)
    assert {p.name for p in arena.exported} == {
        "LumberjackBot.json",
        "LumberjackBot.pois.json",
        "LumberjackBot.visibility.json",
    }

    events, sentinel = read_game_log(out / "LumberjackBot.json")
    assert len(events) == 11
    assert sentinel is not None
    assert sentinel["outcome"]["kind"] == "Success"
    assert sentinel["turns"] == 11
    assert sentinel["contract"] == {"WOOD": 1000}
    assert sentinel["crew"] == 15
    assert sentinel["budget"] == 7000

    visibility = json.loads((out / "LumberjackBot.visibility.json").read_text(encoding="utf-8"))
    assert visibility["visited"] == [[1, 1]]
    assert visibility["island"]["name"] == "test_island"

    pois = json.loads((out / "LumberjackBot.pois.json").read_text(encoding="utf-8"))
    assert pois["available"] == 1
    assert pois["found"] == {}


def test_journal_records_lifecycle_and_agent_output(tmp_path) -> None:
    cfg = _make_config(tmp_path)
    Arena(cfg, agent_class=StopBot, island=_island(), run_id="journal_run").fire()

    journal = Path(cfg.logging.logs_dir) / "latest" / cfg.logging.event_file_name
    records = [json.loads(line) for line in journal.read_text(encoding="utf-8").splitlines()]
    event_types = [r["event_type"] for r in records]
    assert event_types[0] == "run_started"
    assert "run_terminated" in event_types
    assert event_types[-1] == "run_exported"

    assert all(r["run_id"] == "journal_run" for r in records)
    assert [r["sequence"] for r in records] == list(range(1, len(records) + 1))
    calls = [r["call"] for r in records if r["event_type"] == "agent_call"]
    assert calls == ["initialize", "take_decision"]
    outputs = " ".join(r["output"] for r in records if r["event_type"] == "agent_output")
    assert "Bravely deciding to stop" in outputs


def test_silent_mode_and_no_logs_skip_exports(tmp_path) -> None:
    cfg = _make_config(tmp_path)
    cfg.export.store_logs = False
    cfg.export.export_map_data = False
    arena = Arena(cfg, agent_class=StopBot, island=_island(), run_id="silent")
    arena.fire()
    assert arena.exported == []
    assert list(Path(cfg.export.output_dir).iterdir()) == []


def test_rerun_replaces_exported_log(tmp_path) -> None:
    cfg = _make_config(tmp_path)
    Arena(cfg, agent_class=ScoutBot, island=_island(), run_id="first").fire()
    path = Path(cfg.export.output_dir) / "ScoutBot.json"
    first, _ = read_game_log(path)

    cfg.run.contract = {"FISH": 1}
    Arena(cfg, agent_class=ScoutBot, island=_island(), run_id="second").fire()
    second, sentinel = read_game_log(path)
    assert len(first) == len(second)
    assert sentinel is not None
    assert sentinel["outcome"]["message"].endswith("FISH 0/1")


def test_arena_checks_required_settings(tmp_path) -> None:
    cfg = _make_config(tmp_path)
    cfg.run.contract = {}
    with pytest.raises(ValueError):
        Arena(cfg, agent_class=StopBot, island=_island()).fire()

    other = tmp_path / "other"
    other.mkdir()
    cfg = _make_config(other)
    cfg.export.output_dir = str(tmp_path / "missing")
    with pytest.raises(ValueError):
        Arena(cfg, agent_class=StopBot, island=_island()).fire()


def test_import_agent_resolves_targets() -> None:
    assert import_agent("explorer_arena.agents.samples:StopBot") is StopBot
    with pytest.raises(ValueError):
        import_agent("explorer_arena.agents.samples")


def test_report_summarizes_exported_log(tmp_path) -> None:
    cfg = _make_config(tmp_path)
    result = Arena(cfg, agent_class=LumberjackBot, island=_island(), run_id="report").fire()

    report = summarize_log(Path(cfg.export.output_dir) / "LumberjackBot.json", {"WOOD": 1000})
    assert report["turns"] == 11
    assert report["actions"] == {"exploit": 10, "stop": 1}
    assert report["collected"] == {"WOOD": 1000}
    assert report["objectives"]["WOOD"]["ratio"] == 1.0
    assert report["total_cost"] == 7000 - result.remaining_budget
    assert report["final_budget"] == result.remaining_budget
    assert report["outcome"]["kind"] == "Success"


def test_dashboard_serves_exported_runs(tmp_path) -> None:
    cfg = _make_config(tmp_path)
    Arena(cfg, agent_class=LumberjackBot, island=_island(), run_id="dash").fire()

    client = TestClient(create_app(output_dir=cfg.export.output_dir))
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/runs").json() == {"runs": ["LumberjackBot"], "count": 1}

    detail = client.get("/runs/LumberjackBot").json()
    assert len(detail["events"]) == 11
    assert detail["outcome"]["kind"] == "Success"

    assert detail["contract"] == {"WOOD": 1000}

    report = client.get("/runs/LumberjackBot/report").json()
    assert report["collected"] == {"WOOD": 1000}
    assert report["objectives"] == {"WOOD": {"required": 1000, "collected": 1000, "ratio": 1.0}}

    assert client.get("/runs/nobody").status_code == 404
    assert client.get("/journal").json()["count"] == 0


class ExploreThenStop:
    def __init__(self) -> None:
        self.plan = ['{"action": "explore"}', '{"action": "stop"}']

    def initialize(self, context: str) -> None:
        pass

    def take_decision(self) -> str:
        return self.plan.pop(0)

    def acknowledge_results(self, results: str) -> None:
        pass


def test_report_uses_stored_contract_and_explored_landmarks(tmp_path) -> None:
    cfg = _make_config(tmp_path)
    island = GridIsland(3, 3, [Tile(Coordinate(1, 1), {"WOOD": 5}, landmark="creek")])
    result = Arena(cfg, agent_class=ExploreThenStop, island=island, run_id="explore").fire()
    assert result.landmarks_found == {"creek": Coordinate(1, 1)}

    report = summarize_log(Path(cfg.export.output_dir) / "ExploreThenStop.json")
    assert report["landmarks"] == {"creek": [1, 1]}
    assert report["objectives"] == {"WOOD": {"required": 1000, "collected": 0, "ratio": 0.0}}

    pois = json.loads((Path(cfg.export.output_dir) / "ExploreThenStop.pois.json").read_text(encoding="utf-8"))
    assert pois["found"] == {"creek": [1, 1]}


def test_journal_records_applied_turns(tmp_path) -> None:
    cfg = _make_config(tmp_path)
    Arena(cfg, agent_class=LumberjackBot, island=_island(), run_id="turns").fire()

    journal = Path(cfg.logging.logs_dir) / "turns" / cfg.logging.event_file_name
    records = [json.loads(line) for line in journal.read_text(encoding="utf-8").splitlines()]
    applied = [r for r in records if r["event_type"] == "turn_applied"]
    assert [r["turn"] for r in applied] == list(range(1, 11))
    assert all(r["cost"] > 0 for r in applied)

    started = next(r for r in records if r["event_type"] == "run_started")
    assert started["contract"] == {"WOOD": 1000}
    terminated = next(r for r in records if r["event_type"] == "run_terminated")
    assert terminated["turns"] == 11
    assert terminated["outcome"]["kind"] == "Success"
    exported = records[-1]
    assert exported["event_type"] == "run_exported"
    assert exported["player"] == "LumberjackBot"
    assert len(exported["files"]) == 3
