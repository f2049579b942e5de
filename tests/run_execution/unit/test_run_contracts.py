"""Tests for run execution contracts."""

from __future__ import annotations

from scenario_runner.configuration import Configuration
from scenario_runner.results import ResultAggregator
from scenario_runner.run_execution import ProgressObserver, RunState, RunStateError
from scenario_runner.scenario_execution import Scenario


def test_run_states_have_stable_values() -> None:
    assert [state.value for state in RunState] == ["not-started", "running", "finished"]


def test_run_state_error_is_a_runtime_error() -> None:
    assert issubclass(RunStateError, RuntimeError)


def test_progress_observer_callbacks_default_to_no_ops() -> None:
    observer = ProgressObserver()
    scenario = Scenario(scenario_id="s", configuration=Configuration())

    observer.starting(["s"])
    observer.scenario_started(scenario)
    observer.scenario_finished(scenario)
    observer.finished(ResultAggregator().finalize())
