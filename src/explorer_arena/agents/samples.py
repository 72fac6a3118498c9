"""Reference explorer raids used by the CLI and the test-suite."""

from __future__ import annotations

import json
import time
from typing import Any


class StopBot:
    """Minimal raid: stops on its first decision."""

    def initialize(self, context: str) -> None:
        print("Here goes the initialization code")

    def take_decision(self) -> str:
        print("Bravely deciding to stop")
        return json.dumps({"action": "stop"})

    def acknowledge_results(self, results: str) -> None:
        print("Acknowledging the result of my brave decision")


class LumberjackBot:
    """Exploits the first contracted resource where it stands until the quota is met."""

    def __init__(self) -> None:
        self.resource = "WOOD"
        self.target = 0
        self.collected = 0

    def initialize(self, context: str) -> None:
        data = json.loads(context)
        contracts = data.get("contracts") or []
        if contracts:
            self.resource = contracts[0]["resource"]
            self.target = int(contracts[0]["amount"])

    def take_decision(self) -> str:
        if self.collected >= self.target:
            return json.dumps({"action": "stop"})
        return json.dumps({"action": "exploit", "parameters": {"resource": self.resource}})

    def acknowledge_results(self, results: str) -> None:
        data = json.loads(results)
        self.collected = int(data.get("collected", {}).get(self.resource, 0))


class ScoutBot:
    """Looks around, walks east along its row, then stops."""

    PLAN: list[dict[str, Any]] = [
        {"action": "explore"},
        {"action": "scout", "parameters": {"direction": "N"}},
        {"action": "scout", "parameters": {"direction": "S"}},
        {"action": "move_to", "parameters": {"direction": "E"}},
        {"action": "scout", "parameters": {"direction": "E"}},
        {"action": "move_to", "parameters": {"direction": "E"}},
        {"action": "explore"},
        {"action": "stop"},
    ]

    def __init__(self) -> None:
        self.step = 0
        self.log: list[dict[str, Any]] = []

    def initialize(self, context: str) -> None:
        self.log.append(json.loads(context))

    def take_decision(self) -> str:
        decision = self.PLAN[min(self.step, len(self.PLAN) - 1)]
        self.step += 1
        return json.dumps(decision)

    def acknowledge_results(self, results: str) -> None:
        self.log.append(json.loads(results))


class FaultyBot:
    """Raises from inside its decision call."""

    def initialize(self, context: str) -> None:
        pass

    def take_decision(self) -> str:
        raise RuntimeError("Ooops, something went wrong")

    def acknowledge_results(self, results: str) -> None:
        pass


class SleepyBot:
    """Takes far longer than any sane deadline to decide."""

    delay_seconds = 5.0

    def initialize(self, context: str) -> None:
        pass

    def take_decision(self) -> str:
        time.sleep(self.delay_seconds)
        return json.dumps({"action": "stop"})

    def acknowledge_results(self, results: str) -> None:
        pass
