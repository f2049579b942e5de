"""Run execution entities."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from scenario_runner.results.run_result import RunResult
    from scenario_runner.scenario_execution.scenario_models import Scenario


class RunState(str, Enum):
    """Lifecycle of one orchestrator run."""

    NOT_STARTED = "not-started"
    RUNNING = "running"
    FINISHED = "finished"


class RunStateError(RuntimeError):
    """Raised when an operation is not allowed in the current run state."""


class ProgressObserver:
    """Receives run progress notifications. Override the callbacks of interest."""

    def starting(self, scenario_names: list[str]) -> None:
        """Called once with the ordered names of the scenarios about to be attempted."""

    def scenario_started(self, scenario: Scenario) -> None:
        """Called before a built scenario enters its lifecycle."""

    def scenario_finished(self, scenario: Scenario) -> None:
        """Called after a scenario was aggregated and written."""

    def finished(self, result: RunResult) -> None:
        """Called exactly once with the final run result."""
