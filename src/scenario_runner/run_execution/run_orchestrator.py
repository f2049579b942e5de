"""Run loop over all discovered scenarios."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor

from scenario_runner.configuration.property_layers import Configuration, ConfigurationError
from scenario_runner.configuration.runtime_settings import (
    OUTPUT_DIR_KEY,
    RESULT_MODE_KEY,
    RunSettings,
)
from scenario_runner.plugins.extension_points import NoneResultMode, ResultMode, ResultsWriter
from scenario_runner.plugins.plugin_registry import PluginRegistry
from scenario_runner.results.run_result import ResultAggregator, RunResult
from scenario_runner.scenario_discovery.scenario_source import ScenarioSource
from scenario_runner.scenario_discovery.suite_discovery import SuiteLoader
from scenario_runner.scenario_discovery.xml_suite_loader import XmlSuiteLoader
from scenario_runner.scenario_execution.query_target import QueryTarget, UnavailableQueryTarget
from scenario_runner.scenario_execution.scenario_engine import ScenarioEngine
from scenario_runner.scenario_execution.scenario_models import Scenario

from .run_contracts import ProgressObserver, RunState, RunStateError

_LOGGER = logging.getLogger(__name__)


class RunOrchestrator:
    """Executes one run at a time: every scenario, sequentially, in discovery order.

    ``start`` returns a future of the run result. ``stop`` sets a cancellation
    event that is checked before each scenario and between suites, and that
    query targets can check inside long calls.
    """

    def __init__(
        self,
        configuration: Configuration,
        *,
        plugins: PluginRegistry,
        target: QueryTarget | None = None,
        suite_loader: SuiteLoader | None = None,
    ) -> None:
        self._configuration = configuration.copy()
        self._plugins = plugins
        self._target = target or UnavailableQueryTarget()
        self._suite_loader = suite_loader or XmlSuiteLoader()
        self._lock = threading.Lock()
        self._cancel_event = threading.Event()
        self._state = RunState.NOT_STARTED
        self._observers: list[ProgressObserver] = []
        self._finished_callbacks: list[Callable[[], None]] = []
        self._future: Future[RunResult] | None = None
        self._result: RunResult | None = None

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    @property
    def state(self) -> RunState:
        with self._lock:
            return self._state

    @property
    def result(self) -> RunResult | None:
        with self._lock:
            return self._result

    def register_progress_observer(self, observer: ProgressObserver) -> None:
        with self._lock:
            if self._state is RunState.RUNNING:
                raise RunStateError("Cannot register observer. Run is already in progress.")
            if observer not in self._observers:
                self._observers.append(observer)

    def unregister_progress_observer(self, observer: ProgressObserver) -> None:
        with self._lock:
            if self._state is RunState.RUNNING:
                raise RunStateError("Cannot unregister observer. Run is already in progress.")
            if observer in self._observers:
                self._observers.remove(observer)

    def start(self, synchronous: bool = True) -> Future[RunResult]:
        """Start the run on the calling thread or on a background worker.

        Raises:
          RunStateError: If a run of this orchestrator is already in progress.
        """
        with self._lock:
            if self._state is RunState.RUNNING:
                raise RunStateError("Run is already in progress.")
            self._state = RunState.RUNNING
            self._result = None
            self._cancel_event.clear()
            observers = tuple(self._observers)
            if synchronous:
                future: Future[RunResult] = Future()
                future.set_running_or_notify_cancel()
            else:
                executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="scenario-run")
                future = executor.submit(self._run, observers)
                executor.shutdown(wait=False)
            self._future = future

        if synchronous:
            try:
                future.set_result(self._run(observers))
            except Exception as exc:
                future.set_exception(exc)
                raise
        return future

    def stop(self) -> None:
        """Request cooperative cancellation of the run in progress."""
        with self._lock:
            if self._state is not RunState.RUNNING:
                return
            _LOGGER.info("Cancellation of the run requested.")
            self._cancel_event.set()

    def wait_for(self, timeout: float | None = None) -> RunResult | None:
        """Block until the current run finished and return its result."""
        with self._lock:
            future = self._future
        if future is None:
            return None
        return future.result(timeout=timeout)

    def add_finished_callback(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` once the run in progress wrote its last output.

        Without a run in progress the callback is called right away.
        """
        with self._lock:
            if self._state is RunState.RUNNING:
                self._finished_callbacks.append(callback)
                return
        callback()

    def _run(self, observers: Sequence[ProgressObserver]) -> RunResult:
        try:
            return self._run_scenarios(observers)
        finally:
            with self._lock:
                self._state = RunState.FINISHED
                callbacks, self._finished_callbacks = self._finished_callbacks, []
            for callback in callbacks:
                try:
                    callback()
                except Exception:  # pylint: disable=broad-exception-caught
                    _LOGGER.exception("Finished callback %r failed.", callback)

    def _run_scenarios(self, observers: Sequence[ProgressObserver]) -> RunResult:
        aggregator = ResultAggregator()
        output_dir: str | None = None
        result_mode: ResultMode = NoneResultMode()
        writers: list[ResultsWriter] = []
        try:
            # Placeholders a scenario file defines stay as tokens at this level.
            configuration = self._configuration.resolve(strict=False)
            output_dir = configuration.get(OUTPUT_DIR_KEY) or None
            configuration.dump_to_dir(output_dir)
            result_mode = self._plugins.select_result_mode(configuration.get(RESULT_MODE_KEY))
            writers = self._plugins.initialise_writers(configuration)
            source = self._open_source(configuration, result_mode)
            _notify(observers, "starting", source.scenario_names if source else [])
            engine = ScenarioEngine(
                target=self._target,
                result_mode=result_mode,
                setup_hooks=self._plugins.setup_hooks,
                cancel_event=self._cancel_event,
            )
            for request in source or ():
                if self._cancel_event.is_set():
                    _LOGGER.warning("Run cancelled. Remaining scenarios are not executed.")
                    break
                scenario = request.build()
                if scenario is None:
                    continue
                _notify(observers, "scenario_started", scenario)
                engine.execute(scenario)
                aggregator.collect(scenario)
                _write_scenario(writers, scenario)
                _notify(observers, "scenario_finished", scenario)
        finally:
            result = aggregator.finalize(cancelled=self._cancel_event.is_set())
            with self._lock:
                self._result = result
            result.dump_to_dir(output_dir)
            _destroy_result_mode(result_mode)
            _notify(observers, "finished", result)
            _destroy_writers(writers)
        return result

    def _open_source(
        self, configuration: Configuration, result_mode: ResultMode
    ) -> ScenarioSource | None:
        try:
            settings = RunSettings.from_configuration(configuration)
        except ConfigurationError as exc:
            _LOGGER.error("Invalid run configuration. No scenario is executed. %s", exc)
            return None
        return ScenarioSource(
            self._configuration,
            suite_loader=self._suite_loader,
            result_mode=result_mode,
            settings=settings,
        )


def _notify(observers: Sequence[ProgressObserver], callback: str, argument: object) -> None:
    for observer in observers:
        try:
            getattr(observer, callback)(argument)
        except Exception:  # pylint: disable=broad-exception-caught
            _LOGGER.exception("Progress observer %s failed in %s.", observer, callback)


def _write_scenario(writers: Sequence[ResultsWriter], scenario: Scenario) -> None:
    for writer in writers:
        try:
            writer.write_result_of_scenario(scenario)
        except Exception:  # pylint: disable=broad-exception-caught
            _LOGGER.exception(
                "Results writer %s failed for scenario %s.",
                type(writer).__name__,
                scenario.scenario_id,
            )


def _destroy_result_mode(result_mode: ResultMode) -> None:
    try:
        result_mode.destroy()
    except Exception:  # pylint: disable=broad-exception-caught
        _LOGGER.exception("Result mode %s failed to shut down.", result_mode.name)


def _destroy_writers(writers: Sequence[ResultsWriter]) -> None:
    for writer in writers:
        try:
            writer.destroy()
        except Exception:  # pylint: disable=broad-exception-caught
            _LOGGER.exception("Results writer %s failed to shut down.", type(writer).__name__)
