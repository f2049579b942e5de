"""Typed view over the well-known run configuration keys."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from .property_layers import Configuration, ConfigurationError

SCENARIO_KEY = "scenario"
INCLUDE_SCENARIOS_KEY = "scenarios.include"
EXCLUDE_SCENARIOS_KEY = "scenarios.exclude"
INCLUDE_SUITES_KEY = "suites.include"
EXCLUDE_SUITES_KEY = "suites.exclude"
ARTIFACTS_DIR_KEY = "artifacts.dir"
QUERY_SET_DIR_KEY = "query.set.dir"
TEST_QUERIES_DIR_KEY = "test.queries.dir"
OUTPUT_DIR_KEY = "output.dir"
RESULT_MODE_KEY = "result.mode"
SCENARIO_MAX_TIME_KEY = "scenario.max.time"
SUITE_SUFFIX_KEY = "suite.suffix"
ARTIFACTS_PATH_ABSOLUTE_KEY = "artifacts.path.absolute"
SCENARIOS_PATH_ABSOLUTE_KEY = "scenarios.path.absolute"

SCENARIO_SUFFIX = ".properties"
DEFAULT_SUITE_SUFFIX = ".xml"
DEFAULT_INCLUDE_PATTERN = ".*"
DEFAULT_EXCLUDE_PATTERN = ""


@dataclass(frozen=True)
class RunSettings:  # pylint: disable=too-many-instance-attributes
    """Normalized settings read from a resolved configuration."""

    scenario_path: Path | None
    include_scenarios: re.Pattern[str]
    exclude_scenarios: re.Pattern[str]
    include_suites: re.Pattern[str]
    exclude_suites: re.Pattern[str]
    artifacts_dir: Path | None
    query_set_dir: str | None
    test_queries_dir: str | None
    output_dir: Path | None
    result_mode: str | None
    scenario_max_time_seconds: float | None
    suite_suffix: str

    @classmethod
    def from_configuration(cls, configuration: Configuration) -> RunSettings:
        return cls(
            scenario_path=_optional_path(configuration, SCENARIO_KEY),
            include_scenarios=_pattern(
                configuration, INCLUDE_SCENARIOS_KEY, DEFAULT_INCLUDE_PATTERN
            ),
            exclude_scenarios=_pattern(
                configuration, EXCLUDE_SCENARIOS_KEY, DEFAULT_EXCLUDE_PATTERN
            ),
            include_suites=_pattern(configuration, INCLUDE_SUITES_KEY, DEFAULT_INCLUDE_PATTERN),
            exclude_suites=_pattern(configuration, EXCLUDE_SUITES_KEY, DEFAULT_EXCLUDE_PATTERN),
            artifacts_dir=_optional_path(configuration, ARTIFACTS_DIR_KEY),
            query_set_dir=_optional_string(configuration, QUERY_SET_DIR_KEY),
            test_queries_dir=_optional_string(configuration, TEST_QUERIES_DIR_KEY),
            output_dir=_optional_path(configuration, OUTPUT_DIR_KEY),
            result_mode=_optional_string(configuration, RESULT_MODE_KEY),
            scenario_max_time_seconds=_optional_positive_float(
                configuration, SCENARIO_MAX_TIME_KEY
            ),
            suite_suffix=_optional_string(configuration, SUITE_SUFFIX_KEY) or DEFAULT_SUITE_SUFFIX,
        )


def _optional_string(configuration: Configuration, key: str) -> str | None:
    value = configuration.get(key)
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _optional_path(configuration: Configuration, key: str) -> Path | None:
    value = _optional_string(configuration, key)
    return Path(value) if value else None


def _pattern(configuration: Configuration, key: str, default: str) -> re.Pattern[str]:
    raw = configuration.get(key)
    source = default if raw is None else raw.strip()
    try:
        return re.compile(source)
    except re.error as exc:
        raise ConfigurationError(f"{key} is not a valid pattern: {exc}") from exc


def _optional_positive_float(configuration: Configuration, key: str) -> float | None:
    value = _optional_string(configuration, key)
    if value is None:
        return None
    try:
        number = float(value)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number.") from exc
    if number <= 0:
        raise ConfigurationError(f"{key} must be greater than zero.")
    return number
