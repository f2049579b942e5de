"""Run level result aggregation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import yaml

from scenario_runner.scenario_execution.scenario_models import Scenario, ScenarioState

_LOGGER = logging.getLogger(__name__)

RESULT_FILENAME = "run-result.yaml"


class RunResultFormatError(Exception):
    """Raised when a dumped run result cannot be read back."""


@dataclass(frozen=True)
class ScenarioSummary:
    """Counts of one scenario as folded into the run result."""

    scenario_id: str
    state: str
    suites: int
    total: int
    executed: int
    passed: int
    failed: int

    @property
    def skipped(self) -> int:
        return self.total - self.executed


@dataclass(frozen=True)
class RunResult:  # pylint: disable=too-many-instance-attributes
    """Aggregate of all scenarios of one finished run."""

    scenarios: tuple[ScenarioSummary, ...]
    total: int
    executed: int
    passed: int
    failed: int
    skipped_scenarios: int
    cancelled: bool = False

    @property
    def scenario_count(self) -> int:
        return len(self.scenarios)

    @property
    def skipped(self) -> int:
        return self.total - self.executed

    def to_mapping(self) -> dict[str, Any]:
        return {
            "cancelled": self.cancelled,
            "totals": {
                "scenarios": self.scenario_count,
                "skipped_scenarios": self.skipped_scenarios,
                "queries": self.total,
                "executed": self.executed,
                "passed": self.passed,
                "failed": self.failed,
                "skipped": self.skipped,
            },
            "scenarios": [asdict(summary) for summary in self.scenarios],
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RunResult:
        try:
            totals = data["totals"]
            scenarios = tuple(
                ScenarioSummary(
                    scenario_id=str(item["scenario_id"]),
                    state=str(item["state"]),
                    suites=int(item["suites"]),
                    total=int(item["total"]),
                    executed=int(item["executed"]),
                    passed=int(item["passed"]),
                    failed=int(item["failed"]),
                )
                for item in data.get("scenarios") or ()
            )
            return cls(
                scenarios=scenarios,
                total=int(totals["queries"]),
                executed=int(totals["executed"]),
                passed=int(totals["passed"]),
                failed=int(totals["failed"]),
                skipped_scenarios=int(totals["skipped_scenarios"]),
                cancelled=bool(data.get("cancelled", False)),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise RunResultFormatError(f"Invalid run result document: {exc}") from exc

    def dump_to_dir(self, directory: Path | str | None) -> Path | None:
        """Write ``run-result.yaml`` into ``directory``; failures are logged."""
        if directory is None:
            _LOGGER.warning("Output directory is not set. Run result is not dumped.")
            return None
        destination = Path(directory)
        try:
            destination.mkdir(parents=True, exist_ok=True)
            target = destination / RESULT_FILENAME
            target.write_text(
                yaml.safe_dump(self.to_mapping(), sort_keys=False), encoding="utf-8"
            )
        except OSError as exc:
            _LOGGER.error("Unable to dump run result to %s: %s", destination, exc)
            return None
        return target


def load_run_result(path: Path | str) -> RunResult:
    """Read a run result previously written by ``RunResult.dump_to_dir``."""
    source = Path(path)
    try:
        parsed = yaml.safe_load(source.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise RunResultFormatError(f"Cannot read run result {source}: {exc}") from exc
    if not isinstance(parsed, Mapping):
        raise RunResultFormatError(f"Run result root must be a mapping: {source}")
    return RunResult.from_mapping(parsed)


class ResultAggregator:
    """Folds scenario counts into run totals.

    Skipped scenarios contribute their loaded queries to ``total`` (all of
    them skipped) and nothing to ``executed``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._summaries: list[ScenarioSummary] = []
        self._result: RunResult | None = None

    def collect(self, scenario: Scenario) -> ScenarioSummary:
        summary = ScenarioSummary(
            scenario_id=scenario.scenario_id,
            state=scenario.state.value,
            suites=len(scenario.suites),
            total=scenario.total_count,
            executed=scenario.executed_count,
            passed=scenario.passed_count,
            failed=scenario.failed_count,
        )
        with self._lock:
            if self._result is not None:
                raise RuntimeError("Run result is already finalized.")
            self._summaries.append(summary)
        return summary

    def finalize(self, *, cancelled: bool = False) -> RunResult:
        with self._lock:
            if self._result is not None:
                raise RuntimeError("Run result is already finalized.")
            summaries = tuple(self._summaries)
            self._result = RunResult(
                scenarios=summaries,
                total=sum(summary.total for summary in summaries),
                executed=sum(summary.executed for summary in summaries),
                passed=sum(summary.passed for summary in summaries),
                failed=sum(summary.failed for summary in summaries),
                skipped_scenarios=sum(
                    1 for summary in summaries if summary.state == ScenarioState.ABORTED.value
                ),
                cancelled=cancelled,
            )
            return self._result
