"""Extension point contracts offered to plugins."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from scenario_runner.configuration.property_layers import Configuration
    from scenario_runner.scenario_execution.scenario_models import Scenario


class ScenarioSetUp(Protocol):  # pylint: disable=too-few-public-methods
    """Hook run before a scenario executes; ``False`` skips the scenario."""

    def set_up(self, scenario: Scenario) -> bool: ...


class ResultMode(Protocol):
    """Comparison strategy shared by all queries of a run."""

    name: str

    def reset_configuration(self, configuration: Configuration) -> None: ...

    def destroy(self) -> None: ...


class ResultsWriter(Protocol):
    """Receives the result of every scenario of one run."""

    def init(self, configuration: Configuration) -> bool: ...

    def write_result_of_scenario(self, scenario: Scenario) -> None: ...

    def destroy(self) -> None: ...


class NoneResultMode:
    """Result mode used when no registered mode matches the configured name."""

    name = "NONE"

    def reset_configuration(self, configuration: Configuration) -> None:
        pass

    def destroy(self) -> None:
        pass
