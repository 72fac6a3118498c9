"""Terminal verdict of an exploration run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class OutcomeKind(str, Enum):
    SUCCESS = "Success"
    BUDGET_EXHAUSTED = "BudgetExhausted"
    INVALID_DECISION = "InvalidDecision"
    AGENT_FAILURE = "AgentFailure"


@dataclass(frozen=True)
class RunOutcome:
    kind: OutcomeKind
    message: str = ""
    reason: str | None = None
    remaining_budget: int | None = None
    collected: dict[str, int] = field(default_factory=dict)

    @classmethod
    def success(cls, remaining_budget: int, collected: dict[str, int]) -> RunOutcome:
        return cls(
            OutcomeKind.SUCCESS,
            "contract fulfilled",
            remaining_budget=remaining_budget,
            collected=dict(collected),
        )

    @classmethod
    def budget_exhausted(cls, message: str) -> RunOutcome:
        return cls(OutcomeKind.BUDGET_EXHAUSTED, message, reason="InsufficientBudget")

    @classmethod
    def invalid_decision(cls, reason: str, message: str) -> RunOutcome:
        return cls(OutcomeKind.INVALID_DECISION, message, reason=reason)

    @classmethod
    def agent_failure(cls, cause: str, message: str) -> RunOutcome:
        return cls(OutcomeKind.AGENT_FAILURE, message, reason=cause)

    @property
    def is_success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.reason is not None:
            payload["reason"] = self.reason
        if self.kind is OutcomeKind.SUCCESS:
            payload["remaining_budget"] = self.remaining_budget
            payload["collected"] = dict(self.collected)
        return payload
