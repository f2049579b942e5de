"""Registry entry of one run."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from scenario_runner.configuration.property_layers import Configuration
from scenario_runner.results.run_result import RunResult
from scenario_runner.run_execution.run_contracts import RunState
from scenario_runner.run_execution.run_orchestrator import RunOrchestrator


@dataclass(frozen=True)
class RunHandle:
    """Run tracked by the registry: a live orchestrator or a persisted copy."""

    run_id: str
    output_dir: Path
    configuration: Configuration
    orchestrator: RunOrchestrator | None = None
    persisted_result: RunResult | None = None

    @property
    def persisted(self) -> bool:
        return self.orchestrator is None

    @property
    def state(self) -> RunState:
        if self.orchestrator is None:
            return RunState.FINISHED
        return self.orchestrator.state

    @property
    def result(self) -> RunResult | None:
        if self.orchestrator is None:
            return self.persisted_result
        return self.orchestrator.result

    def stop(self) -> None:
        if self.orchestrator is not None:
            self.orchestrator.stop()

    def when_finished(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` after the live run ended, or right away."""
        if self.orchestrator is None:
            callback()
        else:
            self.orchestrator.add_finished_callback(callback)
