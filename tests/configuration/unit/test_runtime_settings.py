"""Run settings view tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from scenario_runner.configuration import Configuration, ConfigurationError, RunSettings


def test_defaults_apply_when_keys_are_missing() -> None:
    settings = RunSettings.from_configuration(Configuration())

    assert settings.scenario_path is None
    assert settings.include_scenarios.fullmatch("anything")
    assert not settings.exclude_scenarios.fullmatch("anything")
    assert settings.suite_suffix == ".xml"
    assert settings.scenario_max_time_seconds is None
    assert settings.result_mode is None


def test_reads_paths_patterns_and_time_limit() -> None:
    settings = RunSettings.from_configuration(
        Configuration(
            {
                "scenario": "/data/scenarios",
                "scenarios.include": "A.*",
                "scenarios.exclude": "A2",
                "artifacts.dir": "/data/artifacts",
                "query.set.dir": "set",
                "test.queries.dir": "queries",
                "output.dir": "/data/out",
                "result.mode": "compare",
                "scenario.max.time": "2.5",
                "suite.suffix": ".suite",
            }
        )
    )

    assert settings.scenario_path == Path("/data/scenarios")
    assert settings.include_scenarios.fullmatch("A1")
    assert settings.exclude_scenarios.fullmatch("A2")
    assert settings.artifacts_dir == Path("/data/artifacts")
    assert settings.output_dir == Path("/data/out")
    assert settings.scenario_max_time_seconds == 2.5
    assert settings.suite_suffix == ".suite"


def test_invalid_pattern_raises_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="suites.include"):
        RunSettings.from_configuration(Configuration({"suites.include": "(unclosed"}))


@pytest.mark.parametrize("value", ["abc", "0", "-1"])
def test_invalid_time_limit_raises_configuration_error(value: str) -> None:
    with pytest.raises(ConfigurationError, match="scenario.max.time"):
        RunSettings.from_configuration(Configuration({"scenario.max.time": value}))
