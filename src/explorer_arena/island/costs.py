"""Action cost policies supplied alongside the island.

Every action other than stop costs at least one point, so a run always ends.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..config import CostsConfig
    from ..engine.actions import Action


class CostPolicy(Protocol):
    def cost_of(self, action: Action, crew: int, rng: random.Random) -> int: ...


@dataclass
class CrewScaledCosts:
    """base + ceil(crew * per_crew) + seeded jitter, per action kind."""

    base: dict[str, int] = field(default_factory=dict)
    per_crew: dict[str, float] = field(default_factory=dict)
    jitter: int = 0

    @classmethod
    def from_config(cls, config: CostsConfig) -> CrewScaledCosts:
        return cls(base=dict(config.base), per_crew=dict(config.per_crew), jitter=config.jitter)

    def cost_of(self, action: Action, crew: int, rng: random.Random) -> int:
        kind = action.kind.value
        if kind == "stop":
            return 0
        cost = self.base.get(kind, 1) + math.ceil(round(crew * self.per_crew.get(kind, 0.0), 6))
        if self.jitter > 0:
            cost += rng.randint(0, self.jitter)
        return max(1, cost)


@dataclass
class FlatCosts:
    """Fixed cost per action kind regardless of crew size."""

    costs: dict[str, int] = field(default_factory=dict)
    default: int = 1

    def cost_of(self, action: Action, crew: int, rng: random.Random) -> int:
        kind = action.kind.value
        if kind == "stop":
            return 0
        return max(1, self.costs.get(kind, self.default))
