"""Contract of the system under test that executes suite queries."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from .errors import MaxTimeExceededError, RunCancelledError
from .scenario_models import Scenario, Suite

if TYPE_CHECKING:
    from scenario_runner.plugins.extension_points import ResultMode

_LOGGER = logging.getLogger(__name__)


@dataclass
class ExecutionContext:
    """State shared with the query target while a scenario runs."""

    scenario: Scenario
    result_mode: ResultMode
    cancel_event: threading.Event = field(default_factory=threading.Event)
    deadline: float | None = None

    def check_interrupted(self) -> None:
        """Raise when the run was cancelled or the scenario time limit is spent.

        Long-running targets call this between queries so that cancellation
        takes effect inside a suite.
        """
        if self.cancel_event.is_set():
            raise RunCancelledError(f"Run cancelled during scenario {self.scenario.scenario_id}.")
        if self.deadline is not None and time.monotonic() > self.deadline:
            raise MaxTimeExceededError(
                f"Maximum time for scenario {self.scenario.scenario_id} has been exceeded."
            )


class QueryTarget(Protocol):
    """Readiness probe, suite execution and teardown against the target system."""

    def before(self, scenario: Scenario) -> bool: ...

    def run_suite(self, suite: Suite, context: ExecutionContext) -> None: ...

    def after(self, scenario: Scenario) -> None: ...


class UnavailableQueryTarget:
    """Target used when none was registered; every readiness probe fails."""

    def before(self, scenario: Scenario) -> bool:
        _LOGGER.warning("No query target registered for scenario %s.", scenario.scenario_id)
        return False

    def run_suite(self, suite: Suite, context: ExecutionContext) -> None:
        raise RuntimeError("No query target registered.")

    def after(self, scenario: Scenario) -> None:
        pass
