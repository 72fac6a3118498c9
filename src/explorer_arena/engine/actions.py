"""Explorer action definitions and the textual decision codec."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..island.grid import DIRECTION_ALIASES, Direction


class MalformedDecision(ValueError):
    """Raised when agent text does not match the action grammar."""


class ActionType(str, Enum):
    MOVE_TO = "move_to"
    SCOUT = "scout"
    EXPLORE = "explore"
    EXPLOIT = "exploit"
    STOP = "stop"


ACTION_ALIASES: dict[str, ActionType] = {
    "move": ActionType.MOVE_TO,
    "collect": ActionType.EXPLOIT,
}

_RESOURCE_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")


@dataclass(frozen=True)
class Action:
    kind: ActionType

    def parameters(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"action": self.kind.value}
        params = self.parameters()
        if params:
            payload["parameters"] = params
        return payload


@dataclass(frozen=True)
class MoveTo(Action):
    direction: Direction = Direction.NORTH

    def __init__(self, direction: Direction) -> None:
        object.__setattr__(self, "kind", ActionType.MOVE_TO)
        object.__setattr__(self, "direction", direction)

    def parameters(self) -> dict[str, Any]:
        return {"direction": self.direction.value}


@dataclass(frozen=True)
class Scout(Action):
    direction: Direction = Direction.NORTH

    def __init__(self, direction: Direction) -> None:
        object.__setattr__(self, "kind", ActionType.SCOUT)
        object.__setattr__(self, "direction", direction)

    def parameters(self) -> dict[str, Any]:
        return {"direction": self.direction.value}


@dataclass(frozen=True)
class Explore(Action):
    def __init__(self) -> None:
        object.__setattr__(self, "kind", ActionType.EXPLORE)


@dataclass(frozen=True)
class Exploit(Action):
    resource: str = ""

    def __init__(self, resource: str) -> None:
        object.__setattr__(self, "kind", ActionType.EXPLOIT)
        object.__setattr__(self, "resource", resource)

    def parameters(self) -> dict[str, Any]:
        return {"resource": self.resource}


@dataclass(frozen=True)
class Stop(Action):
    def __init__(self) -> None:
        object.__setattr__(self, "kind", ActionType.STOP)


def _normalize_payload(payload: dict[str, Any]) -> dict[str, Any]:
    data = dict(payload)

    parameters = data.get("parameters")
    if isinstance(parameters, dict):
        for key, value in parameters.items():
            data.setdefault(key, value)

    action_raw = data.get("action")
    if not isinstance(action_raw, str):
        action_raw = data.get("action_type")
    if isinstance(action_raw, str):
        name = action_raw.strip().lower()
        alias = ACTION_ALIASES.get(name)
        data["action"] = alias.value if alias is not None else name
    return data


def _parse_direction(data: dict[str, Any], action_name: str) -> Direction:
    raw = data.get("direction")
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedDecision(f"{action_name} requires 'direction'")
    direction = DIRECTION_ALIASES.get(raw.strip().upper())
    if direction is None:
        raise MalformedDecision(f"{action_name} has unknown direction {raw!r}")
    return direction


def parse_decision(text: Any) -> Action:
    """Parse an agent's raw decision text into a typed action."""
    if not isinstance(text, str):
        raise MalformedDecision(f"Decision must be a string, got {type(text).__name__}")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedDecision(f"Invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise MalformedDecision("Decision payload must be a JSON object")

    data = _normalize_payload(data)
    action_name = data.get("action")
    if not isinstance(action_name, str) or not action_name:
        raise MalformedDecision("Decision requires 'action'")

    if action_name == ActionType.STOP.value:
        return Stop()

    if action_name == ActionType.EXPLORE.value:
        return Explore()

    if action_name == ActionType.MOVE_TO.value:
        return MoveTo(_parse_direction(data, action_name))

    if action_name == ActionType.SCOUT.value:
        return Scout(_parse_direction(data, action_name))

    if action_name == ActionType.EXPLOIT.value:
        resource = data.get("resource")
        if not isinstance(resource, str) or not resource.strip():
            raise MalformedDecision("exploit requires 'resource'")
        kind = resource.strip().upper()
        if not _RESOURCE_PATTERN.match(kind):
            raise MalformedDecision(f"exploit has invalid resource identifier {resource!r}")
        return Exploit(kind)

    raise MalformedDecision(
        f"Unknown action: {action_name}. Valid actions: move_to, scout, explore, exploit, stop"
    )


def serialize_decision(action: Action) -> str:
    """Canonical compact JSON text stored in the event log."""
    return json.dumps(action.to_dict(), ensure_ascii=True, sort_keys=True, separators=(",", ":"))
