"""Suite definition discovery for one scenario."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from scenario_runner.configuration.runtime_settings import RunSettings
from scenario_runner.scenario_execution.scenario_models import Scenario, Suite

if TYPE_CHECKING:
    from scenario_runner.plugins.extension_points import ResultMode

_LOGGER = logging.getLogger(__name__)


class SuiteDiscoveryError(Exception):
    """Raised when the suite definitions directory cannot be listed."""


class SuiteLoader(Protocol):  # pylint: disable=too-few-public-methods
    """Parses one suite definition file and adds its queries to ``suite``."""

    def load(self, definition_path: Path, suite: Suite, result_mode: ResultMode) -> None: ...


def definitions_directory(settings: RunSettings) -> Path:
    """Return ``artifacts.dir / query.set.dir / test.queries.dir``."""
    artifacts_dir = settings.artifacts_dir
    if artifacts_dir is None:
        _LOGGER.warning("Artifacts directory is not set.")
        artifacts_dir = Path("")
    query_set_dir = settings.query_set_dir
    if query_set_dir is None:
        _LOGGER.warning("Query set directory is not defined. Setting to empty string.")
        query_set_dir = ""
    test_queries_dir = settings.test_queries_dir
    if test_queries_dir is None:
        _LOGGER.warning("Test queries directory is not defined. Setting to empty string.")
        test_queries_dir = ""
    return artifacts_dir / query_set_dir / test_queries_dir


def discover_suites(
    scenario: Scenario,
    settings: RunSettings,
    *,
    loader: SuiteLoader,
    result_mode: ResultMode,
) -> list[Suite]:
    """Load matching suite definitions, in file name order, into ``scenario``.

    Raises:
      SuiteDiscoveryError: If the definitions directory is missing or unreadable.
    """
    directory = definitions_directory(settings)
    definitions = _list_definitions(directory, settings.suite_suffix)
    _LOGGER.debug("suite include pattern: %s", settings.include_suites.pattern)
    _LOGGER.debug("suite exclude pattern: %s", settings.exclude_suites.pattern)
    attached: list[Suite] = []
    suffix_length = len(settings.suite_suffix)
    for definition in definitions:
        suite_id = definition.name.strip()[:-suffix_length]
        if not settings.include_suites.fullmatch(suite_id) or settings.exclude_suites.fullmatch(
            suite_id
        ):
            _LOGGER.info("Skipping suite %s", suite_id)
            continue
        suite = Suite(suite_id=suite_id)
        loader.load(definition, suite, result_mode)
        scenario.add_suite(suite)
        attached.append(suite)
    return attached


def _list_definitions(directory: Path, suffix: str) -> list[Path]:
    if not directory.is_dir():
        raise SuiteDiscoveryError(f"Cannot load test queries from directory {directory}")
    try:
        entries = [
            entry
            for entry in directory.iterdir()
            if entry.name.strip().endswith(suffix) and entry.is_file()
        ]
    except OSError as exc:
        raise SuiteDiscoveryError(
            f"Cannot load test queries from directory {directory}: {exc}"
        ) from exc
    return sorted(entries, key=lambda entry: entry.name)
