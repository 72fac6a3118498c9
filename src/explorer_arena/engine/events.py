"""Ordered, append-only record of a run's turns."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


@dataclass(frozen=True)
class Event:
    turn: int
    action: str
    valid: bool
    effect: Mapping[str, Any] = field(default_factory=dict)
    budget_after: int = 0
    timestamp: str = ""

    def __post_init__(self) -> None:
        # copies nested containers, so the effect shares nothing with its source
        object.__setattr__(self, "effect", _freeze(self.effect))

    def to_dict(self, *, include_timestamp: bool = True) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "turn": self.turn,
            "action": self.action,
            "valid": self.valid,
            "effect": _thaw(self.effect),
            "budget_after": self.budget_after,
        }
        if include_timestamp:
            payload["timestamp"] = self.timestamp
        return payload


class EventLogClosed(RuntimeError):
    pass


class EventLog:
    """Append-only event sequence; readable once the run is sealed."""

    def __init__(self) -> None:
        self._events: list[Event] = []
        self._sealed = False

    def __len__(self) -> int:
        return len(self._events)

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def next_turn(self) -> int:
        return len(self._events) + 1

    def append(self, event: Event) -> None:
        if self._sealed:
            raise EventLogClosed("event log is sealed after termination")
        if event.turn != self.next_turn:
            raise ValueError(f"expected turn {self.next_turn}, got {event.turn}")
        self._events.append(event)

    def seal(self) -> None:
        self._sealed = True

    def export(self) -> tuple[Event, ...]:
        if not self._sealed:
            raise EventLogClosed("event log can only be exported after termination")
        return tuple(self._events)

    def replay_view(self) -> list[dict[str, Any]]:
        """Events without wall-clock timestamps, for replay comparison."""
        return [event.to_dict(include_timestamp=False) for event in self.export()]
