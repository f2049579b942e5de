"""Scenario lifecycle state machine."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Sequence
from datetime import UTC, datetime

from scenario_runner.configuration.runtime_settings import RunSettings
from scenario_runner.plugins.extension_points import ResultMode, ScenarioSetUp

from .errors import ScenarioInterruptedError, TargetNotAvailableError
from .query_target import ExecutionContext, QueryTarget
from .scenario_models import Scenario, ScenarioState

_LOGGER = logging.getLogger(__name__)


class ScenarioEngine:
    """Drives one scenario at a time through setup, readiness, execution and teardown.

    ``CREATED -> SETUP -> READY_CHECK -> RUNNING -> AFTER -> DONE``, with
    ``ABORTED`` reachable from ``SETUP`` and ``READY_CHECK``. Teardown runs
    only for scenarios that passed the readiness probe.
    """

    def __init__(
        self,
        *,
        target: QueryTarget,
        result_mode: ResultMode,
        setup_hooks: Sequence[ScenarioSetUp] = (),
        cancel_event: threading.Event | None = None,
    ) -> None:
        self._target = target
        self._result_mode = result_mode
        self._setup_hooks = tuple(setup_hooks)
        self._cancel_event = cancel_event or threading.Event()

    def execute(self, scenario: Scenario) -> ScenarioState:
        """Run ``scenario`` to a terminal state and return that state."""
        scenario.transition(ScenarioState.SETUP)
        if not self._set_up(scenario):
            _LOGGER.warning(
                "Skipping scenario %s. One or more set up procedures failed.",
                scenario.scenario_id,
            )
            scenario.transition(ScenarioState.ABORTED)
            return scenario.state

        scenario.transition(ScenarioState.READY_CHECK)
        if not self._is_ready(scenario):
            _LOGGER.warning("Skipping scenario %s. Target is not available.", scenario.scenario_id)
            scenario.transition(ScenarioState.ABORTED)
            return scenario.state

        scenario.transition(ScenarioState.RUNNING)
        try:
            self._run_suites(scenario)
        except ScenarioInterruptedError:
            _LOGGER.exception("Scenario %s has been interrupted.", scenario.scenario_id)
        except Exception:  # pylint: disable=broad-exception-caught
            _LOGGER.exception("Unknown exception thrown in scenario %s.", scenario.scenario_id)
        finally:
            scenario.transition(ScenarioState.AFTER)
            self._tear_down(scenario)
        scenario.transition(ScenarioState.DONE)
        return scenario.state

    def _set_up(self, scenario: Scenario) -> bool:
        proceed = True
        for hook in self._setup_hooks:
            try:
                proceed = bool(hook.set_up(scenario))
            except Exception:  # pylint: disable=broad-exception-caught
                _LOGGER.exception(
                    "Set up hook %s failed for scenario %s.",
                    type(hook).__name__,
                    scenario.scenario_id,
                )
                proceed = False
            if not proceed:
                break
        try:
            self._result_mode.reset_configuration(scenario.configuration)
        except Exception:  # pylint: disable=broad-exception-caught
            _LOGGER.exception(
                "Result mode %s rejected configuration of scenario %s.",
                self._result_mode.name,
                scenario.scenario_id,
            )
            return False
        return proceed

    def _is_ready(self, scenario: Scenario) -> bool:
        try:
            return bool(self._target.before(scenario))
        except TargetNotAvailableError as exc:
            _LOGGER.warning("Target not available for scenario %s: %s", scenario.scenario_id, exc)
        except Exception:  # pylint: disable=broad-exception-caught
            _LOGGER.exception("Readiness probe failed for scenario %s.", scenario.scenario_id)
        return False

    def _run_suites(self, scenario: Scenario) -> None:
        context = ExecutionContext(
            scenario=scenario,
            result_mode=self._result_mode,
            cancel_event=self._cancel_event,
            deadline=_deadline_for(scenario),
        )
        for suite in scenario.suites:
            context.check_interrupted()
            suite.start_time = datetime.now(UTC)
            try:
                self._target.run_suite(suite, context)
            finally:
                suite.end_time = datetime.now(UTC)

    def _tear_down(self, scenario: Scenario) -> None:
        try:
            self._target.after(scenario)
        except Exception:  # pylint: disable=broad-exception-caught
            _LOGGER.exception("Tear down of scenario %s failed.", scenario.scenario_id)


def _deadline_for(scenario: Scenario) -> float | None:
    max_time = RunSettings.from_configuration(scenario.configuration).scenario_max_time_seconds
    if max_time is None:
        return None
    return time.monotonic() + max_time
