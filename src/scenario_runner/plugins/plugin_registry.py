"""Explicit registration of plugin implementations."""

from __future__ import annotations

import logging
from collections.abc import Callable

from scenario_runner.configuration.property_layers import Configuration

from .extension_points import NoneResultMode, ResultMode, ResultsWriter, ScenarioSetUp

_LOGGER = logging.getLogger(__name__)

ResultModeFactory = Callable[[], ResultMode]
ResultsWriterFactory = Callable[[], ResultsWriter]


class PluginRegistry:
    """Holds setup hooks, result modes and results writers for runs.

    Result modes and writers are registered as factories because both keep
    per-run state; each run builds its own instances.
    """

    def __init__(self) -> None:
        self._setup_hooks: list[ScenarioSetUp] = []
        self._result_modes: dict[str, ResultModeFactory] = {}
        self._writer_factories: list[ResultsWriterFactory] = []

    def register_setup_hook(self, hook: ScenarioSetUp) -> None:
        self._setup_hooks.append(hook)

    def register_result_mode(self, name: str, factory: ResultModeFactory) -> None:
        key = name.strip().lower()
        if not key:
            raise ValueError("Result mode name must not be empty.")
        if key in self._result_modes:
            raise ValueError(f"Result mode '{name}' is already registered.")
        self._result_modes[key] = factory

    def register_results_writer(self, factory: ResultsWriterFactory) -> None:
        self._writer_factories.append(factory)

    @property
    def setup_hooks(self) -> tuple[ScenarioSetUp, ...]:
        return tuple(self._setup_hooks)

    @property
    def result_mode_names(self) -> tuple[str, ...]:
        return tuple(self._result_modes)

    def select_result_mode(self, name: str | None) -> ResultMode:
        """Build the result mode whose name matches ``name`` case-insensitively."""
        if name is None or not name.strip():
            _LOGGER.warning("No result mode set. Setting to '%s'.", NoneResultMode.name)
            return NoneResultMode()
        factory = self._result_modes.get(name.strip().lower())
        if factory is None:
            _LOGGER.warning(
                "Unknown result mode %s. Result mode set to '%s'.", name, NoneResultMode.name
            )
            return NoneResultMode()
        return factory()

    def initialise_writers(self, configuration: Configuration) -> list[ResultsWriter]:
        """Build every registered writer and keep those accepting ``configuration``."""
        writers: list[ResultsWriter] = []
        for factory in self._writer_factories:
            try:
                writer = factory()
                accepted = writer.init(configuration)
            except Exception:  # pylint: disable=broad-exception-caught
                _LOGGER.exception("Results writer %r failed to initialise.", factory)
                continue
            if accepted:
                writers.append(writer)
            else:
                _LOGGER.info("Results writer %s declined the run.", type(writer).__name__)
        return writers
