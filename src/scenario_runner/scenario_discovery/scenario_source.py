"""Scenario discovery from a definition file or directory."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from scenario_runner.configuration.loader import load_properties_file
from scenario_runner.configuration.property_layers import (
    Configuration,
    ConfigurationError,
    merge_configurations,
)
from scenario_runner.configuration.runtime_settings import SCENARIO_SUFFIX, RunSettings
from scenario_runner.scenario_execution.scenario_models import Scenario

from .naming import strip_extension
from .suite_discovery import SuiteDiscoveryError, SuiteLoader, discover_suites

if TYPE_CHECKING:
    from scenario_runner.plugins.extension_points import ResultMode

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScenarioRequest:
    """Deferred construction of one scenario from its definition file."""

    definition_path: Path
    base_configuration: Configuration
    suite_loader: SuiteLoader
    result_mode: ResultMode

    @property
    def scenario_id(self) -> str:
        return strip_extension(self.definition_path.name.strip())

    def build(self) -> Scenario | None:
        """Load, merge and resolve the scenario layer and attach its suites.

        Returns ``None`` when the scenario cannot be built; the reason is logged
        and the run continues with the next request.
        """
        try:
            layer = load_properties_file(self.definition_path)
            configuration = merge_configurations(self.base_configuration, layer)
            _LOGGER.debug("Properties: %s.", configuration)
            resolved = configuration.resolve()
            _LOGGER.debug("Resolved properties: %s.", resolved)
            settings = RunSettings.from_configuration(resolved)
        except ConfigurationError as exc:
            _LOGGER.warning("Skipping scenario %s. %s", self.scenario_id, exc)
            return None

        scenario = Scenario(scenario_id=self.scenario_id, configuration=resolved)
        try:
            discover_suites(
                scenario, settings, loader=self.suite_loader, result_mode=self.result_mode
            )
        except SuiteDiscoveryError as exc:
            _LOGGER.error("Unable to create scenario %s: %s", self.scenario_id, exc)
            return None
        except Exception:  # pylint: disable=broad-exception-caught
            _LOGGER.exception("Unable to create scenario from file %s", self.definition_path)
            return None
        return scenario


class ScenarioSource(Iterator[ScenarioRequest]):
    """Single-pass iterator of scenario requests in file name order.

    A file path yields exactly that scenario. A directory yields every
    ``*.properties`` entry whose name without suffix fully matches
    ``scenarios.include`` and does not fully match ``scenarios.exclude``.

    Requests carry ``configuration`` unresolved; each scenario resolves it
    together with its own layer.
    """

    def __init__(
        self,
        configuration: Configuration,
        *,
        suite_loader: SuiteLoader,
        result_mode: ResultMode,
        settings: RunSettings | None = None,
    ) -> None:
        self._configuration = configuration.copy()
        self._suite_loader = suite_loader
        self._result_mode = result_mode
        if settings is None:
            settings = RunSettings.from_configuration(configuration.resolve(strict=False))
        self._definitions = _list_scenario_definitions(settings)
        self._position = 0

    @property
    def scenario_names(self) -> list[str]:
        return [strip_extension(path.name.strip()) for path in self._definitions]

    def __iter__(self) -> ScenarioSource:
        return self

    def __next__(self) -> ScenarioRequest:
        if self._position >= len(self._definitions):
            raise StopIteration
        definition = self._definitions[self._position]
        self._position += 1
        return ScenarioRequest(
            definition_path=definition,
            base_configuration=self._configuration,
            suite_loader=self._suite_loader,
            result_mode=self._result_mode,
        )


def _list_scenario_definitions(settings: RunSettings) -> list[Path]:
    scenario_path = settings.scenario_path
    if scenario_path is None or not scenario_path.exists():
        _LOGGER.warning("No scenarios to run [%s].", scenario_path)
        return []
    if scenario_path.is_file():
        return [scenario_path]
    try:
        entries = [
            entry
            for entry in scenario_path.iterdir()
            if entry.is_file()
            and entry.name.strip().endswith(SCENARIO_SUFFIX)
            and settings.include_scenarios.fullmatch(strip_extension(entry.name.strip()))
            and not settings.exclude_scenarios.fullmatch(strip_extension(entry.name.strip()))
        ]
    except OSError as exc:
        _LOGGER.warning("Cannot list scenarios in %s: %s", scenario_path, exc)
        return []
    if not entries:
        _LOGGER.warning("No scenarios to run [%s].", scenario_path)
    return sorted(entries, key=lambda entry: entry.name)
