"""Turn engine package exports."""

from .actions import Action, ActionType, MalformedDecision, parse_decision, serialize_decision
from .events import Event, EventLog
from .guard import CallReport, CallStatus, EngineFault, TimeoutGuard
from .ledger import Accepted, Contract, Ledger, Rejected, RejectionReason
from .outcome import OutcomeKind, RunOutcome
from .turns import EngineState, RunResult, TurnEngine
from .visibility import VisibilitySnapshot, VisibilityTracker

__all__ = [
    "Action",
    "ActionType",
    "MalformedDecision",
    "parse_decision",
    "serialize_decision",
    "Event",
    "EventLog",
    "CallReport",
    "CallStatus",
    "EngineFault",
    "TimeoutGuard",
    "Accepted",
    "Contract",
    "Ledger",
    "Rejected",
    "RejectionReason",
    "OutcomeKind",
    "RunOutcome",
    "EngineState",
    "RunResult",
    "TurnEngine",
    "VisibilitySnapshot",
    "VisibilityTracker",
]
