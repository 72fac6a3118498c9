"""Ledger tracking action points, crew and collected resources against a contract."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from ..island.costs import CostPolicy
from ..island.grid import Coordinate, GridIsland
from .actions import Action, Exploit, Explore, MoveTo, Scout


class RejectionReason(str, Enum):
    INSUFFICIENT_BUDGET = "InsufficientBudget"
    UNKNOWN_RESOURCE = "UnknownResource"
    OUT_OF_BOUNDS = "OutOfBounds"


@dataclass(frozen=True)
class Accepted:
    cost: int
    effect: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason
    message: str
    cost: int | None = None


@dataclass
class Budget:
    """Non-negative action point counter."""

    initial: int
    remaining: int = -1

    def __post_init__(self) -> None:
        if self.initial < 0:
            raise ValueError("budget must be >= 0")
        if self.remaining < 0:
            self.remaining = self.initial

    @property
    def spent(self) -> int:
        return self.initial - self.remaining

    def can_afford(self, amount: int) -> bool:
        return 0 <= amount <= self.remaining

    def spend(self, amount: int) -> bool:
        if not self.can_afford(amount):
            return False
        self.remaining -= amount
        return True


class Contract:
    """Immutable resource kind -> required quantity mapping."""

    def __init__(self, requirements: Mapping[str, int]) -> None:
        normalized: dict[str, int] = {}
        for kind, quantity in requirements.items():
            key = kind.upper()
            if key in normalized:
                raise ValueError(f"duplicate contract entry for {key}")
            if quantity <= 0:
                raise ValueError(f"contract quantity for {key} must be > 0")
            normalized[key] = int(quantity)
        self._requirements = MappingProxyType(normalized)

    @property
    def requirements(self) -> Mapping[str, int]:
        return self._requirements

    def kinds(self) -> set[str]:
        return set(self._requirements)

    def is_met_by(self, collected: Mapping[str, int]) -> bool:
        return all(collected.get(kind, 0) >= needed for kind, needed in self._requirements.items())

    def progress(self, collected: Mapping[str, int]) -> dict[str, dict[str, int]]:
        return {
            kind: {"required": needed, "collected": collected.get(kind, 0)}
            for kind, needed in self._requirements.items()
        }

    def to_dict(self) -> dict[str, int]:
        return dict(self._requirements)


class Ledger:
    def __init__(
        self,
        *,
        budget: int,
        crew: int,
        contract: Contract,
        island: GridIsland,
        costs: CostPolicy,
        rng: random.Random,
    ) -> None:
        if crew <= 0:
            raise ValueError("crew must be > 0")
        self._budget = Budget(budget)
        self._crew = crew
        self.contract = contract
        self.island = island
        self.costs = costs
        self.rng = rng
        self._collected: dict[str, int] = {}

    @property
    def crew(self) -> int:
        return self._crew

    @property
    def budget(self) -> int:
        return self._budget.remaining

    def collected(self) -> dict[str, int]:
        return dict(self._collected)

    def known_resources(self) -> set[str]:
        return self.island.resource_kinds() | self.contract.kinds()

    def contract_satisfied(self) -> bool:
        return self.contract.is_met_by(self._collected)

    def try_apply(self, action: Action, at: Coordinate) -> Accepted | Rejected:
        """Validate and charge one action taken by the crew standing at ``at``.

        Nothing is mutated unless the action is accepted; budget and collected
        resources then change together.
        """
        effect: dict[str, Any]
        if isinstance(action, MoveTo):
            target = self.island.neighbour(at, action.direction)
            if not self.island.contains(target):
                return Rejected(RejectionReason.OUT_OF_BOUNDS, f"cannot move {action.direction.value} from {at.to_list()}")
            effect = {"position": target.to_list()}
        elif isinstance(action, Scout):
            target = self.island.neighbour(at, action.direction)
            if not self.island.contains(target):
                return Rejected(RejectionReason.OUT_OF_BOUNDS, f"cannot scout {action.direction.value} from {at.to_list()}")
            tile = self.island.tile(target)
            effect = {
                "scanned": target.to_list(),
                "resources": sorted(tile.resources),
                "landmark": tile.landmark,
            }
        elif isinstance(action, Explore):
            tile = self.island.tile(at)
            effect = {
                "at": at.to_list(),
                "resources": [{"resource": kind, "yield": amount} for kind, amount in sorted(tile.resources.items())],
                "landmark": tile.landmark,
            }
        elif isinstance(action, Exploit):
            if action.resource not in self.known_resources():
                return Rejected(RejectionReason.UNKNOWN_RESOURCE, f"unknown resource {action.resource}")
            effect = {"harvested": {action.resource: self.island.yield_of(at, action.resource)}}
        else:
            return Rejected(RejectionReason.UNKNOWN_RESOURCE, f"no ledger rule for action {action.kind.value}")

        cost = self.costs.cost_of(action, self._crew, self.rng)
        if not self._budget.spend(cost):
            return Rejected(
                RejectionReason.INSUFFICIENT_BUDGET,
                f"action costs {cost} but only {self._budget.remaining} points remain",
                cost=cost,
            )
        for kind, amount in effect.get("harvested", {}).items():
            self._collected[kind] = self._collected.get(kind, 0) + max(0, int(amount))
        return Accepted(cost=cost, effect=effect)
