"""Summarize an exported game log: resources, objectives and points of interest."""

from __future__ import annotations

import argparse
import json
from collections import Counter
from pathlib import Path
from typing import Any

from ..export.exporters import read_game_log


def summarize_log(path: Path, contract: dict[str, int] | None = None) -> dict[str, Any]:
    """Score a game log; without an explicit contract the one stored with the run is used."""
    events, sentinel = read_game_log(path)
    if contract is None:
        contract = (sentinel or {}).get("contract") or {}

    action_kinds: Counter[str] = Counter()
    errors: Counter[str] = Counter()
    collected: Counter[str] = Counter()
    landmarks: dict[str, list[int]] = {}
    scanned: set[tuple[int, int]] = set()
    total_cost = 0

    for event in events:
        try:
            action = json.loads(event.get("action", ""))
        except json.JSONDecodeError:
            action = {}
        kind = str(action.get("action", "unparsed")) if isinstance(action, dict) else "unparsed"
        action_kinds[kind] += 1

        effect = event.get("effect") or {}
        if not event.get("valid"):
            errors[str(effect.get("error", "unknown"))] += 1
            continue

        total_cost += int(effect.get("cost") or 0)
        for resource, amount in (effect.get("harvested") or {}).items():
            collected[resource] += int(amount)
        target = effect.get("scanned")
        if isinstance(target, list) and len(target) == 2:
            scanned.add((int(target[0]), int(target[1])))
        else:
            # explore reports the tile it was taken on
            target = effect.get("at")
        if effect.get("landmark") and isinstance(target, list):
            landmarks.setdefault(str(effect["landmark"]), target)

    objectives: dict[str, dict[str, Any]] = {}
    for resource, required in contract.items():
        got = collected.get(resource, 0)
        objectives[resource] = {
            "required": required,
            "collected": got,
            "ratio": round(got / required, 4) if required else None,
        }

    return {
        "turns": len(events),
        "actions": dict(sorted(action_kinds.items())),
        "errors": dict(sorted(errors.items())),
        "total_cost": total_cost,
        "final_budget": events[-1].get("budget_after") if events else None,
        "collected": dict(sorted(collected.items())),
        "objectives": objectives,
        "scanned_tiles": len(scanned),
        "landmarks": landmarks,
        "outcome": (sentinel or {}).get("outcome"),
    }


def _parse_contract(items: list[str]) -> dict[str, int]:
    contract: dict[str, int] = {}
    for item in items:
        resource, sep, amount = item.partition("=")
        if not sep or not amount.strip().isdigit():
            raise SystemExit(f"--contract expects RESOURCE=AMOUNT, got {item!r}")
        contract[resource.strip().upper()] = int(amount)
    return contract


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Summarize an exported exploration log")
    parser.add_argument("log", help="Path to <player>.json written by the game log exporter")
    parser.add_argument(
        "--contract",
        nargs="*",
        default=[],
        help="RESOURCE=AMOUNT objectives to score; defaults to the contract stored in the log",
    )
    parser.add_argument("--pretty", action="store_true")
    args = parser.parse_args(argv)

    path = Path(args.log)
    if not path.exists():
        raise SystemExit(f"log file not found: {path}")

    payload = summarize_log(path, _parse_contract(args.contract) or None)
    if args.pretty:
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        print(json.dumps(payload, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
