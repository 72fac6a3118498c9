"""Wires configuration, island and an explorer raid into a single run."""

from __future__ import annotations

import importlib
import os
import random
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from .config import AppConfig
from .engine.ledger import Contract
from .engine.logger import EventLogger
from .engine.turns import RunResult, TurnEngine
from .export.exporters import Exporter, GameLogExporter, POIsExporter, VisitedMapExporter
from .island.costs import CostPolicy, CrewScaledCosts
from .island.grid import DIRECTION_ALIASES, Coordinate, GridIsland, load_island


def import_agent(target: str) -> type:
    """Resolve ``package.module:ClassName`` to the raid class."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"agent target must look like 'module:Class', got {target!r}")
    module = importlib.import_module(module_name)
    agent_class = getattr(module, attr, None)
    if not isinstance(agent_class, type):
        raise ValueError(f"{target} is not a class")
    return agent_class


class Arena:
    def __init__(
        self,
        config: AppConfig,
        *,
        agent_class: type | None = None,
        island: GridIsland | None = None,
        costs: CostPolicy | None = None,
        run_id: str | None = None,
        clock: Callable[[], str] | None = None,
    ) -> None:
        self.config = config
        self.agent_class = agent_class or import_agent(config.agent.target)
        self.island = island if island is not None else load_island(config.island.map_file)
        self.costs = costs or CrewScaledCosts.from_config(config.costs)
        self.run_id = run_id or datetime.now(timezone.utc).strftime("run_%Y%m%d_%H%M%S_%f")
        self.clock = clock
        self.exported: list[Path] = []

    @property
    def player(self) -> str:
        return self.agent_class.__name__

    def required(self) -> None:
        run = self.config.run
        if not run.contract:
            raise ValueError("contract cannot be empty")
        start = Coordinate(run.start.x, run.start.y)
        if not self.island.contains(start):
            raise ValueError(f"start position {start.to_list()} is outside the island")
        if self.config.export.store_logs or self.config.export.export_map_data:
            out = Path(self.config.export.output_dir)
            if not out.is_dir():
                raise ValueError(f"output directory {out} must exist")
            if not os.access(out, os.W_OK):
                raise ValueError(f"output directory {out} must be writable")

    def _exporters(self) -> list[Exporter]:
        out = self.config.export.output_dir
        exporters: list[Exporter] = []
        if self.config.export.store_logs:
            exporters.append(GameLogExporter(out, self.player))
        if self.config.export.export_map_data:
            exporters.append(POIsExporter(out, self.player))
            exporters.append(VisitedMapExporter(out, self.player))
        return exporters

    def fire(self) -> RunResult:
        self.required()
        run = self.config.run
        self.island.place_landmarks(run.landmarks, random.Random(run.seed))

        logger = EventLogger(
            logs_dir=self.config.logging.logs_dir,
            run_id=self.run_id,
            event_file_name=self.config.logging.event_file_name,
        )
        engine = TurnEngine(
            self.agent_class(),
            island=self.island,
            budget=run.budget,
            crew=run.crew,
            contract=Contract(run.contract),
            start=Coordinate(run.start.x, run.start.y),
            heading=DIRECTION_ALIASES[run.start.heading],
            costs=self.costs,
            seed=run.seed,
            timeout_ms=run.timeout_ms,
            logger=logger,
            clock=self.clock,
        )
        result = engine.run()

        self.exported = [exporter.export(result, self.island) for exporter in self._exporters()]
        logger.run_exported(player=self.player, island=run.name, files=self.exported)
        return result
