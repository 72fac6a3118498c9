"""Turn engine driving one explorer raid from initialization to a verdict."""

from __future__ import annotations

import json
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

from ..agents.protocol import ExplorerRaid
from ..island.costs import CostPolicy
from ..island.grid import Coordinate, Direction, GridIsland
from .actions import Action, MalformedDecision, MoveTo, Scout, Explore, Stop, parse_decision, serialize_decision
from .events import Event, EventLog
from .guard import CallReport, TimeoutGuard
from .ledger import Accepted, Contract, Ledger, Rejected, RejectionReason
from .logger import EventLogger
from .outcome import RunOutcome
from .visibility import VisibilitySnapshot, VisibilityTracker


class EngineState(str, Enum):
    INIT = "Init"
    AWAITING_DECISION = "AwaitingDecision"
    VALIDATING = "Validating"
    APPLYING = "Applying"
    ACKNOWLEDGING = "Acknowledging"
    TERMINATED = "Terminated"


@dataclass
class RunResult:
    outcome: RunOutcome
    events: tuple[Event, ...]
    visibility: VisibilitySnapshot
    collected: dict[str, int]
    remaining_budget: int
    position: Coordinate
    landmarks_found: dict[str, Coordinate] = field(default_factory=dict)
    contract: dict[str, int] = field(default_factory=dict)
    crew: int = 0
    initial_budget: int = 0

    def summary(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome.to_dict(),
            "turns": len(self.events),
            "remaining_budget": self.remaining_budget,
            "collected": dict(self.collected),
            "position": self.position.to_list(),
            "visited": len(self.visibility.visited),
            "scanned": len(self.visibility.scanned),
            "landmarks_found": {name: coord.to_list() for name, coord in self.landmarks_found.items()},
            "contract": dict(self.contract),
        }


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class TurnEngine:
    """Sequential decide, validate, apply, acknowledge loop for a single raid.

    The engine owns the ledger, tracker and event log. Agent calls only ever
    receive JSON strings and run through the timeout guard, so an abandoned
    call has nothing it can mutate.
    """

    def __init__(
        self,
        agent: ExplorerRaid,
        *,
        island: GridIsland,
        budget: int,
        crew: int,
        contract: Contract,
        start: Coordinate,
        heading: Direction,
        costs: CostPolicy,
        seed: int = 0,
        timeout_ms: int = 2000,
        logger: EventLogger | None = None,
        clock: Callable[[], str] | None = None,
    ) -> None:
        if not island.contains(start):
            raise ValueError(f"start position {start.to_list()} is outside the island")
        self.agent = agent
        self.island = island
        self.heading = heading
        self.seed = seed
        self.initial_budget = budget
        self.ledger = Ledger(
            budget=budget,
            crew=crew,
            contract=contract,
            island=island,
            costs=costs,
            rng=random.Random(seed),
        )
        self.tracker = VisibilityTracker()
        self.event_log = EventLog()
        self.guard = TimeoutGuard(timeout_ms)
        self.logger = logger
        self.clock = clock or _utc_now

        self.state = EngineState.INIT
        self.position = start
        self.landmarks_found: dict[str, Coordinate] = {}
        self._outcome: RunOutcome | None = None

    @property
    def outcome(self) -> RunOutcome | None:
        return self._outcome

    # ---- payloads handed to the agent ----

    def _context(self) -> str:
        return json.dumps(
            {
                "position": self.position.to_list(),
                "heading": self.heading.value,
                "budget": self.ledger.budget,
                "men": self.ledger.crew,
                "contracts": [
                    {"resource": kind, "amount": amount}
                    for kind, amount in sorted(self.ledger.contract.requirements.items())
                ],
                "island": self.island.describe(),
            },
            ensure_ascii=True,
            sort_keys=True,
        )

    def _results(self, accepted: Accepted) -> str:
        return json.dumps(
            {
                "status": "OK",
                "cost": accepted.cost,
                "budget": self.ledger.budget,
                "position": self.position.to_list(),
                "collected": self.ledger.collected(),
                "extras": accepted.effect,
            },
            ensure_ascii=True,
            sort_keys=True,
        )

    # ---- bookkeeping ----

    def _call(self, name: str, fn: Callable[..., Any], *args: Any) -> CallReport:
        report = self.guard.call(name, fn, *args)
        if self.logger is not None:
            self.logger.agent_call(
                turn=self.event_log.next_turn,
                call=name,
                status=report.status.value,
                elapsed_ms=report.elapsed_ms,
                cause=report.cause,
                output=report.output,
            )
        return report

    def _record(self, action_text: str, valid: bool, effect: dict[str, Any]) -> Event:
        event = Event(
            turn=self.event_log.next_turn,
            action=action_text,
            valid=valid,
            effect=effect,
            budget_after=self.ledger.budget,
            timestamp=self.clock(),
        )
        self.event_log.append(event)
        return event

    def _terminate(self, outcome: RunOutcome) -> RunResult:
        self.state = EngineState.TERMINATED
        self._outcome = outcome
        self.event_log.seal()
        if self.logger is not None:
            self.logger.run_terminated(
                turns=len(self.event_log),
                outcome=outcome.to_dict(),
                remaining_budget=self.ledger.budget,
                collected=self.ledger.collected(),
            )
        return self._result()

    def _result(self) -> RunResult:
        assert self._outcome is not None
        return RunResult(
            outcome=self._outcome,
            events=self.event_log.export(),
            visibility=self.tracker.snapshot(),
            collected=self.ledger.collected(),
            remaining_budget=self.ledger.budget,
            position=self.position,
            landmarks_found=dict(self.landmarks_found),
            contract=self.ledger.contract.to_dict(),
            crew=self.ledger.crew,
            initial_budget=self.initial_budget,
        )

    def _observe(self, action: Action, accepted: Accepted) -> None:
        if isinstance(action, MoveTo):
            self.position = Coordinate(*accepted.effect["position"])
            self.heading = action.direction
            self.tracker.mark_visited(self.position)
        elif isinstance(action, Scout):
            self.tracker.mark_scanned(Coordinate(*accepted.effect["scanned"]))
        landmark = accepted.effect.get("landmark")
        if isinstance(action, (Scout, Explore)) and landmark and landmark not in self.landmarks_found:
            where = accepted.effect["scanned"] if isinstance(action, Scout) else accepted.effect["at"]
            self.landmarks_found[landmark] = Coordinate(*where)

    # ---- state machine ----

    def _stop(self, action: Action) -> RunResult:
        satisfied = self.ledger.contract_satisfied()
        self._record(
            serialize_decision(action),
            True,
            {"stopped": True, "contract_met": satisfied},
        )
        if satisfied:
            return self._terminate(RunOutcome.success(self.ledger.budget, self.ledger.collected()))
        progress = self.ledger.contract.progress(self.ledger.collected())
        missing = ", ".join(
            f"{kind} {p['collected']}/{p['required']}"
            for kind, p in sorted(progress.items())
            if p["collected"] < p["required"]
        )
        return self._terminate(RunOutcome.invalid_decision("ContractUnmet", f"stopped with contract unmet: {missing}"))

    def _reject(self, action: Action, rejected: Rejected) -> RunResult:
        effect: dict[str, Any] = {"error": rejected.reason.value, "message": rejected.message}
        if rejected.cost is not None:
            effect["cost"] = rejected.cost
        self._record(serialize_decision(action), False, effect)
        if rejected.reason is RejectionReason.INSUFFICIENT_BUDGET:
            return self._terminate(RunOutcome.budget_exhausted(rejected.message))
        return self._terminate(RunOutcome.invalid_decision(rejected.reason.value, rejected.message))

    def run(self) -> RunResult:
        """Drive the raid to a terminal outcome. A finished engine cannot be rerun."""
        if self._outcome is not None:
            raise RuntimeError("this engine already produced an outcome")

        self.state = EngineState.INIT
        self.tracker.mark_visited(self.position)
        if self.logger is not None:
            self.logger.run_started(
                seed=self.seed,
                budget=self.ledger.budget,
                crew=self.ledger.crew,
                contract=self.ledger.contract.to_dict(),
                position=self.position.to_list(),
                heading=self.heading.value,
                timeout_ms=self.guard.timeout_ms,
            )
        try:
            report = self._call("initialize", self.agent.initialize, self._context())
            if not report.ok:
                return self._terminate(RunOutcome.agent_failure(report.status.value, report.cause or "initialize failed"))

            while True:
                self.state = EngineState.AWAITING_DECISION
                report = self._call("take_decision", self.agent.take_decision)
                if not report.ok:
                    return self._terminate(
                        RunOutcome.agent_failure(report.status.value, report.cause or "take_decision failed")
                    )

                self.state = EngineState.VALIDATING
                raw = report.value
                try:
                    action = parse_decision(raw)
                except MalformedDecision as exc:
                    text = raw if isinstance(raw, str) else repr(raw)
                    self._record(text, False, {"error": "MalformedDecision", "message": str(exc)})
                    return self._terminate(RunOutcome.invalid_decision("MalformedDecision", str(exc)))

                if isinstance(action, Stop):
                    return self._stop(action)

                self.state = EngineState.APPLYING
                decision = self.ledger.try_apply(action, self.position)
                if isinstance(decision, Rejected):
                    return self._reject(action, decision)

                self._observe(action, decision)
                event = self._record(serialize_decision(action), True, {"cost": decision.cost, **decision.effect})
                if self.logger is not None:
                    self.logger.turn_applied(
                        turn=event.turn, action=event.action, cost=decision.cost, budget_after=event.budget_after
                    )

                self.state = EngineState.ACKNOWLEDGING
                report = self._call("acknowledge_results", self.agent.acknowledge_results, self._results(decision))
                if not report.ok:
                    return self._terminate(
                        RunOutcome.agent_failure(report.status.value, report.cause or "acknowledge_results failed")
                    )
        finally:
            self.event_log.seal()
