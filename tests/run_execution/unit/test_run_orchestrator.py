"""Run orchestrator tests."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest
import yaml
from scenario_runner.configuration import Configuration
from scenario_runner.plugins import PluginRegistry
from scenario_runner.run_execution import (
    ProgressObserver,
    RunOrchestrator,
    RunState,
    RunStateError,
)
from scenario_runner.scenario_execution import (
    ExecutionContext,
    QueryResult,
    Scenario,
    ScenarioState,
    Suite,
)

_SUITE = '<suite><query name="q1">SELECT 1</query><query name="q2">SELECT 2</query></suite>'


class PassingTarget:
    def __init__(self, not_ready: tuple[str, ...] = ()) -> None:
        self.not_ready = not_ready
        self.executed: list[str] = []

    def before(self, scenario: Scenario) -> bool:
        return scenario.scenario_id not in self.not_ready

    def run_suite(self, suite: Suite, context: ExecutionContext) -> None:
        self.executed.append(f"{context.scenario.scenario_id}/{suite.suite_id}")
        for query in suite.queries:
            query.result = QueryResult.success()

    def after(self, scenario: Scenario) -> None:
        pass


class BlockingTarget(PassingTarget):
    def __init__(self) -> None:
        super().__init__()
        self.entered = threading.Event()
        self.release = threading.Event()

    def run_suite(self, suite: Suite, context: ExecutionContext) -> None:
        self.entered.set()
        self.release.wait(timeout=5)
        super().run_suite(suite, context)


class RecordingWriter:
    def __init__(self, events: list[str], fail_on: str | None = None) -> None:
        self.events = events
        self.fail_on = fail_on

    def init(self, configuration: Configuration) -> bool:
        self.events.append("init")
        return True

    def write_result_of_scenario(self, scenario: Scenario) -> None:
        if scenario.scenario_id == self.fail_on:
            raise RuntimeError("disk full")
        self.events.append(f"write:{scenario.scenario_id}:{scenario.state.value}")

    def destroy(self) -> None:
        self.events.append("destroy")


class RecordingMode:
    name = "COMPARE"

    def __init__(self, events: list[str]) -> None:
        self.events = events

    def reset_configuration(self, configuration: Configuration) -> None:
        self.events.append(f"reset:{configuration['run.label']}")

    def destroy(self) -> None:
        self.events.append("mode-destroy")


class RecordingObserver(ProgressObserver):
    def __init__(self, events: list[str]) -> None:
        self.events = events

    def starting(self, scenario_names: list[str]) -> None:
        self.events.append(f"starting:{','.join(scenario_names)}")

    def scenario_started(self, scenario: Scenario) -> None:
        self.events.append(f"started:{scenario.scenario_id}")

    def scenario_finished(self, scenario: Scenario) -> None:
        self.events.append(f"finished:{scenario.scenario_id}")

    def finished(self, result: object) -> None:
        self.events.append("run-finished")


class StoppingObserver(RecordingObserver):
    def __init__(self, events: list[str], orchestrator: RunOrchestrator) -> None:
        super().__init__(events)
        self.orchestrator = orchestrator

    def starting(self, scenario_names: list[str]) -> None:
        super().starting(scenario_names)
        self.orchestrator.stop()


def _workspace(tmp_path: Path, *scenario_names: str, **layers: str) -> Configuration:
    scenarios = tmp_path / "scenarios"
    scenarios.mkdir()
    for name in scenario_names:
        (scenarios / f"{name}.properties").write_text(layers.get(name, ""), encoding="utf-8")
    queries = tmp_path / "artifacts" / "set" / "queries"
    queries.mkdir(parents=True)
    (queries / "Suite_A.xml").write_text(_SUITE, encoding="utf-8")
    return Configuration(
        {
            "scenario": str(scenarios),
            "artifacts.dir": str(tmp_path / "artifacts"),
            "query.set.dir": "set",
            "test.queries.dir": "queries",
            "output.dir": str(tmp_path / "out"),
            "result.mode": "compare",
            "run.label": "base",
        }
    )


def _plugins(events: list[str], fail_on: str | None = None) -> PluginRegistry:
    plugins = PluginRegistry()
    plugins.register_result_mode("compare", lambda: RecordingMode(events))
    plugins.register_results_writer(lambda: RecordingWriter(events, fail_on))
    return plugins


def test_synchronous_run_executes_scenarios_in_order_and_notifies(tmp_path: Path) -> None:
    events: list[str] = []
    configuration = _workspace(tmp_path, "s2", "s1", s2="run.label=second\n")
    target = PassingTarget()
    orchestrator = RunOrchestrator(configuration, plugins=_plugins(events), target=target)
    orchestrator.register_progress_observer(RecordingObserver(events))

    result = orchestrator.start(synchronous=True).result()

    assert orchestrator.state is RunState.FINISHED
    assert orchestrator.result == result
    assert target.executed == ["s1/Suite_A", "s2/Suite_A"]
    assert events == [
        "init",
        "starting:s1,s2",
        "started:s1",
        "reset:base",
        "write:s1:DONE",
        "finished:s1",
        "started:s2",
        "reset:second",
        "write:s2:DONE",
        "finished:s2",
        "mode-destroy",
        "run-finished",
        "destroy",
    ]
    assert (result.scenario_count, result.total, result.passed, result.skipped) == (2, 4, 4, 0)


def test_run_dumps_configuration_and_result(tmp_path: Path) -> None:
    configuration = _workspace(tmp_path, "s1")

    RunOrchestrator(configuration, plugins=_plugins([]), target=PassingTarget()).start()

    output_dir = tmp_path / "out"
    assert "result.mode=compare" in (output_dir / "run.properties").read_text(encoding="utf-8")
    document = yaml.safe_load((output_dir / "run-result.yaml").read_text(encoding="utf-8"))
    assert document["totals"]["queries"] == 2
    assert document["cancelled"] is False


def test_skipped_scenario_is_still_aggregated_and_written(tmp_path: Path) -> None:
    events: list[str] = []
    configuration = _workspace(tmp_path, "s1", "s2")
    target = PassingTarget(not_ready=("s1",))
    orchestrator = RunOrchestrator(configuration, plugins=_plugins(events), target=target)

    result = orchestrator.start().result()

    assert "write:s1:ABORTED" in events
    assert target.executed == ["s2/Suite_A"]
    assert result.skipped_scenarios == 1
    assert (result.total, result.executed, result.skipped) == (4, 2, 2)


def test_scenarios_that_cannot_be_built_are_not_reported(tmp_path: Path) -> None:
    events: list[str] = []
    configuration = _workspace(tmp_path, "broken", "s1", broken="a=${b}\nb=${a}\n")

    result = (
        RunOrchestrator(configuration, plugins=_plugins(events), target=PassingTarget())
        .start()
        .result()
    )

    assert [summary.scenario_id for summary in result.scenarios] == ["s1"]
    assert not any("broken" in event for event in events)


def test_stop_before_first_scenario_executes_nothing(tmp_path: Path) -> None:
    events: list[str] = []
    configuration = _workspace(tmp_path, "s1", "s2")
    target = PassingTarget()
    orchestrator = RunOrchestrator(configuration, plugins=_plugins(events), target=target)
    orchestrator.register_progress_observer(StoppingObserver(events, orchestrator))

    result = orchestrator.start().result()

    assert result.scenario_count == 0
    assert result.cancelled
    assert target.executed == []
    assert events.count("run-finished") == 1
    assert events.count("destroy") == 1
    assert events.count("mode-destroy") == 1


def test_writer_failure_does_not_stop_the_run(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    events: list[str] = []
    configuration = _workspace(tmp_path, "s1", "s2")
    plugins = _plugins(events, fail_on="s1")

    orchestrator = RunOrchestrator(configuration, plugins=plugins, target=PassingTarget())

    result = orchestrator.start().result()

    assert result.scenario_count == 2
    assert "write:s2:DONE" in events
    assert "Results writer RecordingWriter failed for scenario s1" in caplog.text


def test_missing_target_skips_every_scenario(tmp_path: Path) -> None:
    configuration = _workspace(tmp_path, "s1")

    result = RunOrchestrator(configuration, plugins=PluginRegistry()).start().result()

    assert result.skipped_scenarios == 1
    assert result.scenarios[0].state == ScenarioState.ABORTED.value


def test_background_run_rejects_observers_and_second_start_until_finished(
    tmp_path: Path,
) -> None:
    configuration = _workspace(tmp_path, "s1")
    target = BlockingTarget()
    orchestrator = RunOrchestrator(configuration, plugins=_plugins([]), target=target)

    future = orchestrator.start(synchronous=False)
    assert target.entered.wait(timeout=5)
    assert orchestrator.state is RunState.RUNNING
    with pytest.raises(RunStateError):
        orchestrator.register_progress_observer(ProgressObserver())
    with pytest.raises(RunStateError):
        orchestrator.start()
    target.release.set()

    result = orchestrator.wait_for(timeout=5)

    assert result is not None
    assert result == future.result()
    assert orchestrator.state is RunState.FINISHED
    orchestrator.register_progress_observer(ProgressObserver())


def test_stop_during_background_run_marks_result_cancelled(tmp_path: Path) -> None:
    configuration = _workspace(tmp_path, "s1", "s2")
    target = BlockingTarget()
    orchestrator = RunOrchestrator(configuration, plugins=_plugins([]), target=target)

    orchestrator.start(synchronous=False)
    assert target.entered.wait(timeout=5)
    orchestrator.stop()
    target.release.set()
    result = orchestrator.wait_for(timeout=5)

    assert result is not None
    assert result.cancelled
    assert [summary.scenario_id for summary in result.scenarios] == ["s1"]


def test_wait_for_without_run_returns_none(tmp_path: Path) -> None:
    orchestrator = RunOrchestrator(Configuration(), plugins=PluginRegistry())

    assert orchestrator.wait_for() is None
    assert orchestrator.state is RunState.NOT_STARTED
    orchestrator.stop()
    assert orchestrator.state is RunState.NOT_STARTED


def test_base_placeholder_defined_by_a_scenario_file_is_resolved_per_scenario(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    class UrlObserver(RecordingObserver):
        def scenario_started(self, scenario: Scenario) -> None:
            super().scenario_started(scenario)
            self.events.append(f"url:{scenario.configuration['db.url']}")

    events: list[str] = []
    configuration = _workspace(tmp_path, "s1", "s2", s1="db.host=alpha\n").with_overrides(
        {"db.url": "jdbc://${db.host}/x"}
    )
    orchestrator = RunOrchestrator(configuration, plugins=_plugins(events), target=PassingTarget())
    orchestrator.register_progress_observer(UrlObserver(events))

    result = orchestrator.start().result()

    assert [summary.scenario_id for summary in result.scenarios] == ["s1"]
    assert "url:jdbc://alpha/x" in events
    assert events[-2:] == ["run-finished", "destroy"]
    assert "Skipping scenario s2" in caplog.text
    assert "db.host" in caplog.text


def test_invalid_run_configuration_finishes_without_scenarios(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    events: list[str] = []
    configuration = _workspace(tmp_path, "s1").with_overrides({"scenarios.include": "(open"})
    target = PassingTarget()
    orchestrator = RunOrchestrator(configuration, plugins=_plugins(events), target=target)
    orchestrator.register_progress_observer(RecordingObserver(events))

    result = orchestrator.start(synchronous=False).result(timeout=5)

    assert result.scenario_count == 0
    assert target.executed == []
    assert events == ["init", "starting:", "mode-destroy", "run-finished", "destroy"]
    assert orchestrator.state is RunState.FINISHED
    assert (tmp_path / "out" / "run-result.yaml").is_file()
    assert "Invalid run configuration" in caplog.text


def test_failing_observer_does_not_affect_other_observers(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    class FailingObserver(ProgressObserver):
        def starting(self, scenario_names: list[str]) -> None:
            raise RuntimeError("starting failed")

        def scenario_finished(self, scenario: Scenario) -> None:
            raise RuntimeError("scenario_finished failed")

        def finished(self, result: object) -> None:
            raise RuntimeError("finished failed")

    events: list[str] = []
    configuration = _workspace(tmp_path, "s1", "s2")
    orchestrator = RunOrchestrator(configuration, plugins=_plugins([]), target=PassingTarget())
    orchestrator.register_progress_observer(FailingObserver())
    orchestrator.register_progress_observer(RecordingObserver(events))

    result = orchestrator.start().result()

    assert result.scenario_count == 2
    assert orchestrator.state is RunState.FINISHED
    assert events == [
        "starting:s1,s2",
        "started:s1",
        "finished:s1",
        "started:s2",
        "finished:s2",
        "run-finished",
    ]
    for callback in ("starting", "scenario_finished", "finished"):
        assert f"failed in {callback}." in caplog.text


def test_finished_callbacks_run_before_the_result_is_available(tmp_path: Path) -> None:
    configuration = _workspace(tmp_path, "s1")
    target = BlockingTarget()
    orchestrator = RunOrchestrator(configuration, plugins=_plugins([]), target=target)
    calls: list[str] = []

    orchestrator.add_finished_callback(lambda: calls.append("idle"))
    orchestrator.start(synchronous=False)
    assert target.entered.wait(timeout=5)
    orchestrator.add_finished_callback(lambda: calls.append("after-run"))
    assert calls == ["idle"]
    target.release.set()
    orchestrator.wait_for(timeout=5)

    assert calls == ["idle", "after-run"]


def test_setup_rejected_scenario_never_reaches_the_target_but_is_written(
    tmp_path: Path,
) -> None:
    class RejectS1:
        def set_up(self, scenario: Scenario) -> bool:
            return scenario.scenario_id != "s1"

    events: list[str] = []
    configuration = _workspace(tmp_path, "s1", "s2")
    plugins = _plugins(events)
    plugins.register_setup_hook(RejectS1())
    target = PassingTarget()
    orchestrator = RunOrchestrator(configuration, plugins=plugins, target=target)

    result = orchestrator.start().result()

    assert target.executed == ["s2/Suite_A"]
    assert "write:s1:ABORTED" in events
    assert result.scenarios[0].executed == 0
    assert result.scenarios[0].total == 2
