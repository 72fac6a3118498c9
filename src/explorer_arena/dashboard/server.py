"""Read-only replay viewer over exported runs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse

from ..analysis.run_report import summarize_log
from ..export.exporters import read_game_log


_DASHBOARD_HTML = """<!doctype html>
<html lang=\"en\">
<head>
  <meta charset=\"utf-8\" />
  <title>Explorer Arena</title>
  <style>
    body { margin: 0; font-family: "IBM Plex Sans", "Segoe UI", sans-serif; background: #0f1420; color: #e8eefc; }
    .wrap { max-width: 1200px; margin: 0 auto; padding: 20px; display: grid; gap: 16px; }
    .panel { background: #171f31; border: 1px solid rgba(255,255,255,.08); border-radius: 14px; padding: 14px; }
    .panel h2 { margin: 0 0 8px; font-size: 15px; color: #9fb1d1; text-transform: uppercase; letter-spacing: .08em; }
    pre { margin: 0; white-space: pre-wrap; font: 12px/1.45 "IBM Plex Mono", "Consolas", monospace; }
    select { font: 13px inherit; padding: 4px 8px; }
  </style>
</head>
<body>
  <div class=\"wrap\">
    <section class=\"panel\">
      <h2>Runs</h2>
      <select id=\"runs\" onchange=\"show(this.value)\"></select>
    </section>
    <section class=\"panel\"><h2>Report</h2><pre id=\"report\">select a run</pre></section>
    <section class=\"panel\"><h2>Events</h2><pre id=\"events\"></pre></section>
  </div>
  <script>
    async function fetchJson(url) { const res = await fetch(url); return await res.json(); }
    async function show(name) {
      if (!name) return;
      document.getElementById('report').textContent = JSON.stringify(await fetchJson(`/runs/${name}/report`), null, 2);
      document.getElementById('events').textContent = JSON.stringify(await fetchJson(`/runs/${name}`), null, 2);
    }
    async function init() {
      const runs = await fetchJson('/runs');
      const select = document.getElementById('runs');
      select.innerHTML = runs.runs.map(r => `<option value="${r}">${r}</option>`).join('');
      if (runs.runs.length) show(runs.runs[0]);
    }
    init();
  </script>
</body>
</html>
"""


def _read_jsonl_tail(path: Path, limit: int) -> list[dict[str, Any]]:
    if limit <= 0 or not path.exists():
        return []
    lines = path.read_text(encoding="utf-8").splitlines()
    selected = lines[-limit:]
    items: list[dict[str, Any]] = []
    for raw in selected:
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            items.append(parsed)
    return items


def _list_runs(output_dir: Path) -> list[str]:
    if not output_dir.is_dir():
        return []
    return sorted(
        p.stem
        for p in output_dir.glob("*.json")
        if not p.name.endswith((".visibility.json", ".pois.json"))
    )


def create_app(*, output_dir: str, journal_path: str | None = None) -> FastAPI:
    """Create the viewer app for exported logs in ``output_dir``."""

    out = Path(output_dir)
    journal = Path(journal_path) if journal_path else None

    app = FastAPI(title="Explorer Arena Replay", version="0.1.0")

    def _log_path(name: str) -> Path:
        if name not in _list_runs(out):
            raise HTTPException(status_code=404, detail=f"no exported run named {name}")
        return out / f"{name}.json"

    @app.get("/", response_class=HTMLResponse)
    async def index() -> str:
        return _DASHBOARD_HTML

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"ok": True}

    @app.get("/runs")
    async def runs() -> dict[str, Any]:
        names = _list_runs(out)
        return {"runs": names, "count": len(names)}

    @app.get("/runs/{name}")
    async def run_detail(name: str) -> dict[str, Any]:
        events, sentinel = read_game_log(_log_path(name))
        closing = sentinel or {}
        return {
            "name": name,
            "events": events,
            "outcome": closing.get("outcome"),
            "contract": closing.get("contract", {}),
        }

    @app.get("/runs/{name}/report")
    async def run_report(name: str) -> dict[str, Any]:
        return summarize_log(_log_path(name))

    @app.get("/journal")
    async def journal_tail(limit: int = Query(default=100, ge=1, le=2000)) -> dict[str, Any]:
        items = _read_jsonl_tail(journal, limit) if journal else []
        return {"success": True, "events": items, "count": len(items)}

    return app
