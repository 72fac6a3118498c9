"""Explorer Arena command-line entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from dotenv import load_dotenv

from .arena import Arena
from .config import AppConfig, load_config
from .dashboard import create_app


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run an explorer raid on an island")
    parser.add_argument("--config", default="config/config.yaml", help="Path to config YAML")
    parser.add_argument("--agent", default=None, help="Override agent target (module:Class)")
    parser.add_argument("--seed", type=int, default=None, help="Override random seed")
    parser.add_argument("--dashboard-only", action="store_true", help="Serve the replay viewer over exported runs")
    parser.add_argument("--host", default=None, help="Dashboard host override")
    parser.add_argument("--port", type=int, default=None, help="Dashboard port override")
    return parser.parse_args()


def _load_runtime_config(path: str, agent_override: str | None, seed_override: int | None) -> AppConfig:
    config = load_config(path)
    if agent_override is not None:
        config.agent.target = agent_override
    if seed_override is not None:
        config.run.seed = seed_override
    return config


async def _serve_dashboard_only(config: AppConfig, host: str | None, port: int | None) -> None:
    import uvicorn

    app = create_app(
        output_dir=config.export.output_dir,
        journal_path=str(Path(config.logging.logs_dir) / "latest" / config.logging.event_file_name),
    )
    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=host or config.dashboard.host,
            port=port or config.dashboard.port,
            log_level="warning",
        )
    )
    await server.serve()


def main() -> int:
    load_dotenv()
    args = _parse_args()

    config = _load_runtime_config(args.config, args.agent, args.seed)

    if args.dashboard_only:
        asyncio.run(_serve_dashboard_only(config, args.host, args.port))
        return 0

    Path(config.export.output_dir).mkdir(parents=True, exist_ok=True)
    arena = Arena(config)
    result = arena.fire()

    summary = result.summary()
    print("=== raid complete ===")
    print(f"player: {arena.player}")
    print(f"outcome: {summary['outcome']['kind']} ({summary['outcome']['message']})")
    print(f"turns: {summary['turns']}")
    print(f"remaining_budget: {summary['remaining_budget']}")
    print(f"collected: {json.dumps(summary['collected'], sort_keys=True)}")
    for path in arena.exported:
        print(f"exported: {path}")
    return 0 if result.outcome.is_success else 1


if __name__ == "__main__":
    raise SystemExit(main())
