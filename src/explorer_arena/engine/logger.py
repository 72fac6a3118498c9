"""JSONL run journal: one directory per run, one record per engine milestone."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Sequence


class EventLogger:
    """Append-only journal of agent calls and turn bookkeeping for a single run.

    ``logs/<run_id>/<event_file_name>`` holds the records and ``logs/latest``
    points at the most recent run directory.
    """

    def __init__(
        self,
        *,
        logs_dir: str,
        run_id: str,
        event_file_name: str = "events.jsonl",
    ) -> None:
        self.logs_dir = Path(logs_dir)
        self.run_id = run_id
        self.run_dir = self.logs_dir / run_id
        self.output_path = self.run_dir / event_file_name
        self.sequence = 0

        self.run_dir.mkdir(parents=True, exist_ok=True)
        self.output_path.write_text("", encoding="utf-8")

        latest = self.logs_dir / "latest"
        if latest.exists() or latest.is_symlink():
            latest.unlink()
        latest.symlink_to(self.run_id)

    def log(self, event_type: str, data: Mapping[str, Any]) -> None:
        self.sequence += 1
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "sequence": self.sequence,
            "run_id": self.run_id,
            "event_type": event_type,
            **data,
        }
        with self.output_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=True, sort_keys=True) + "\n")

    def run_started(
        self,
        *,
        seed: int,
        budget: int,
        crew: int,
        contract: Mapping[str, int],
        position: Sequence[int],
        heading: str,
        timeout_ms: int,
    ) -> None:
        self.log(
            "run_started",
            {
                "seed": seed,
                "budget": budget,
                "crew": crew,
                "contract": dict(contract),
                "position": list(position),
                "heading": heading,
                "timeout_ms": timeout_ms,
            },
        )

    def agent_call(
        self,
        *,
        turn: int,
        call: str,
        status: str,
        elapsed_ms: float,
        cause: str | None,
        output: str,
    ) -> None:
        """Record one guarded agent call; captured output gets its own record."""
        self.log(
            "agent_call",
            {
                "turn": turn,
                "call": call,
                "status": status,
                "elapsed_ms": round(elapsed_ms, 3),
                "cause": cause,
                "output_chars": len(output),
            },
        )
        if output:
            self.log("agent_output", {"turn": turn, "call": call, "output": output})

    def turn_applied(self, *, turn: int, action: str, cost: int, budget_after: int) -> None:
        self.log("turn_applied", {"turn": turn, "action": action, "cost": cost, "budget_after": budget_after})

    def run_terminated(
        self,
        *,
        turns: int,
        outcome: Mapping[str, Any],
        remaining_budget: int,
        collected: Mapping[str, int],
    ) -> None:
        self.log(
            "run_terminated",
            {
                "turns": turns,
                "outcome": dict(outcome),
                "remaining_budget": remaining_budget,
                "collected": dict(collected),
            },
        )

    def run_exported(self, *, player: str, island: str, files: Sequence[Path]) -> None:
        self.log("run_exported", {"player": player, "island": island, "files": [str(p) for p in files]})
