"""Three-call contract between an explorer raid and the engine.

The engine:
  1. builds a fresh raid with no arguments,
  2. describes the starting context with ``initialize``,
  3. repeatedly asks for ``take_decision`` and reports back through
     ``acknowledge_results`` until the raid stops, runs out of action
     points, or takes an invalid decision.

Only a voluntary stop with the contract met counts as a success.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ExplorerRaid(Protocol):
    def initialize(self, context: str) -> None: ...

    def take_decision(self) -> str: ...

    def acknowledge_results(self, results: str) -> None: ...
