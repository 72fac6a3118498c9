from __future__ import annotations

import json
import random
from pathlib import Path

import pytest
from pydantic import ValidationError

from explorer_arena.config import AppConfig, load_config
from explorer_arena.engine.actions import (
    ActionType,
    Exploit,
    Explore,
    MalformedDecision,
    MoveTo,
    Scout,
    Stop,
    parse_decision,
    serialize_decision,
)
from explorer_arena.island import CrewScaledCosts, Direction, FlatCosts, load_island

ROOT = Path(__file__).resolve().parents[1]


def test_config_rejects_unknown_keys(tmp_path) -> None:
    cfg = tmp_path / "bad.yaml"
    cfg.write_text(
        """
run:
  seed: 3
  budget: 100
  crew: 4
  contract:
    WOOD: 10
export:
  output_dir: out
unknown_block:
  should_fail: true
""",
        encoding="utf-8",
    )

    with pytest.raises(ValidationError):
        load_config(cfg)


def test_config_rejects_non_positive_contract_quantity(tmp_path) -> None:
    cfg = tmp_path / "bad_contract.yaml"
    cfg.write_text("run:\n  contract:\n    WOOD: 0\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_config(cfg)


def test_config_rejects_zero_crew() -> None:
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"run": {"crew": 0}})


def test_config_rejects_free_actions() -> None:
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"costs": {"base": {"explore": 0}}})
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"costs": {"per_crew": {"move_to": -0.5}}})
    cfg = AppConfig.model_validate({"costs": {"base": {"explore": 1, "stop": 0}}})
    assert cfg.costs.base == {"explore": 1, "stop": 0}


def test_cost_policies_charge_at_least_one_point_per_action() -> None:
    rng = random.Random(0)
    scaled = CrewScaledCosts(base={"explore": 0}, per_crew={"explore": 0.0}, jitter=0)
    assert scaled.cost_of(Explore(), 15, rng) == 1
    assert scaled.cost_of(Stop(), 15, rng) == 0
    flat = FlatCosts({"scout": 0}, default=0)
    assert flat.cost_of(Scout(Direction.NORTH), 15, rng) == 1
    assert flat.cost_of(Explore(), 15, rng) == 1


def test_config_normalizes_heading_and_contract_kinds() -> None:
    cfg = AppConfig.model_validate({"run": {"start": {"heading": "east"}, "contract": {"wood": 5}}})
    assert cfg.run.start.heading == "E"
    assert cfg.run.contract == {"WOOD": 5}
    assert cfg.run.timeout_ms == 2000


def test_shipped_config_and_island_load() -> None:
    cfg = load_config(ROOT / "config" / "config.yaml")
    assert cfg.run.budget == 7000
    assert cfg.run.crew == 15
    assert cfg.run.contract == {"WOOD": 1000}

    island = load_island(ROOT / "config" / "island.yaml")
    assert island.rows == 8 and island.cols == 8
    assert "WOOD" in island.resource_kinds()
    assert len(island.landmarks()) == 5


def test_stop_decision_parses() -> None:
    assert parse_decision('{ "action": "stop" }') == Stop()


def test_parameters_are_merged_and_aliases_resolved() -> None:
    action = parse_decision(json.dumps({"action": "move", "parameters": {"direction": "north"}}))
    assert isinstance(action, MoveTo)
    assert action.direction is Direction.NORTH

    action = parse_decision(json.dumps({"action_type": "COLLECT", "resource": "wood"}))
    assert isinstance(action, Exploit)
    assert action.resource == "WOOD"
    assert action.kind is ActionType.EXPLOIT


def test_scout_and_explore_parse() -> None:
    assert parse_decision('{"action": "scout", "parameters": {"direction": "W"}}') == Scout(Direction.WEST)
    assert parse_decision('{"action": "explore"}') == Explore()


@pytest.mark.parametrize(
    "raw",
    [
        "not json at all",
        json.dumps(["stop"]),
        json.dumps({"parameters": {}}),
        json.dumps({"action": "fly"}),
        json.dumps({"action": "move_to"}),
        json.dumps({"action": "move_to", "parameters": {"direction": "UP"}}),
        json.dumps({"action": "exploit"}),
        json.dumps({"action": "exploit", "parameters": {"resource": "wo od!"}}),
    ],
)
def test_malformed_decisions_are_rejected(raw: str) -> None:
    with pytest.raises(MalformedDecision):
        parse_decision(raw)


def test_non_string_decision_is_malformed() -> None:
    with pytest.raises(MalformedDecision):
        parse_decision({"action": "stop"})


def test_serialization_is_canonical() -> None:
    text = serialize_decision(parse_decision('{"action":"exploit","parameters":{"resource":"fish"}}'))
    assert text == '{"action":"exploit","parameters":{"resource":"FISH"}}'
    assert serialize_decision(Stop()) == '{"action":"stop"}'
    assert parse_decision(text) == Exploit("FISH")
