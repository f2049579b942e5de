"""Scenario execution domain exports."""

from .errors import (
    MaxTimeExceededError,
    RunCancelledError,
    ScenarioInterruptedError,
    TargetNotAvailableError,
)
from .query_target import ExecutionContext, QueryTarget, UnavailableQueryTarget
from .scenario_engine import ScenarioEngine
from .scenario_models import (
    Query,
    QueryResult,
    QueryStatus,
    Scenario,
    ScenarioState,
    Suite,
)

__all__ = [
    "ExecutionContext",
    "MaxTimeExceededError",
    "Query",
    "QueryResult",
    "QueryStatus",
    "QueryTarget",
    "RunCancelledError",
    "Scenario",
    "ScenarioEngine",
    "ScenarioInterruptedError",
    "ScenarioState",
    "Suite",
    "TargetNotAvailableError",
    "UnavailableQueryTarget",
]
