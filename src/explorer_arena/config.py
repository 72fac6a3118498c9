"""Configuration loading and strict validation for exploration runs."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

HEADINGS = ("N", "S", "E", "W")
_HEADING_ALIASES = {"NORTH": "N", "SOUTH": "S", "EAST": "E", "WEST": "W"}


class StrictModel(BaseModel):
    """Base model that rejects unknown keys."""

    model_config = ConfigDict(extra="forbid")


class StartConfig(StrictModel):
    x: int = 1
    y: int = 1
    heading: str = "E"

    @field_validator("heading")
    @classmethod
    def _normalize_heading(cls, value: str) -> str:
        heading = value.strip().upper()
        heading = _HEADING_ALIASES.get(heading, heading)
        if heading not in HEADINGS:
            raise ValueError(f"heading must be one of {', '.join(HEADINGS)}")
        return heading


class RunConfig(StrictModel):
    name: str = "Lian_Yu"
    seed: int = 0
    budget: int = Field(default=7000, ge=0)
    crew: int = Field(default=15, gt=0)
    contract: dict[str, int] = Field(default_factory=dict)
    start: StartConfig = Field(default_factory=StartConfig)
    timeout_ms: int = Field(default=2000, gt=0)
    landmarks: int = Field(default=10, ge=0)

    @field_validator("contract")
    @classmethod
    def _check_contract(cls, value: dict[str, int]) -> dict[str, int]:
        normalized: dict[str, int] = {}
        for kind, quantity in value.items():
            key = kind.strip().upper()
            if not key:
                raise ValueError("contract resource kinds must be non-empty")
            if key in normalized:
                raise ValueError(f"duplicate contract entry for {key}")
            if quantity <= 0:
                raise ValueError(f"contract quantity for {key} must be > 0")
            normalized[key] = quantity
        return normalized


class IslandConfig(StrictModel):
    map_file: str = "config/island.yaml"


class CostsConfig(StrictModel):
    base: dict[str, int] = Field(
        default_factory=lambda: {"move_to": 6, "scout": 4, "explore": 3, "exploit": 5, "stop": 0}
    )
    per_crew: dict[str, float] = Field(
        default_factory=lambda: {"move_to": 0.4, "scout": 0.0, "explore": 0.2, "exploit": 0.6, "stop": 0.0}
    )
    jitter: int = Field(default=2, ge=0)

    @field_validator("base")
    @classmethod
    def _check_base(cls, value: dict[str, int]) -> dict[str, int]:
        for kind, cost in value.items():
            if kind != "stop" and cost < 1:
                raise ValueError(f"base cost for {kind} must be >= 1 so every turn spends budget")
        return value

    @field_validator("per_crew")
    @classmethod
    def _check_per_crew(cls, value: dict[str, float]) -> dict[str, float]:
        for kind, weight in value.items():
            if weight < 0:
                raise ValueError(f"per_crew weight for {kind} must be >= 0")
        return value


class AgentConfig(StrictModel):
    target: str = "explorer_arena.agents.samples:LumberjackBot"


class ExportConfig(StrictModel):
    output_dir: str = "outputs"
    store_logs: bool = True
    export_map_data: bool = True


class DashboardConfig(StrictModel):
    host: str = "127.0.0.1"
    port: int = 9000


class LoggingConfig(StrictModel):
    logs_dir: str = "logs"
    event_file_name: str = "events.jsonl"


class AppConfig(StrictModel):
    run: RunConfig = Field(default_factory=RunConfig)
    island: IslandConfig = Field(default_factory=IslandConfig)
    costs: CostsConfig = Field(default_factory=CostsConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: str | Path = "config/config.yaml") -> AppConfig:
    """Load and strictly validate YAML config."""
    path = Path(config_path)
    with path.open("r", encoding="utf-8") as f:
        raw: dict[str, Any] = yaml.safe_load(f) or {}
    return AppConfig.model_validate(raw)

