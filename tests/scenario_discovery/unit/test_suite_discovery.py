"""Suite discovery tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from scenario_runner.configuration import Configuration, RunSettings
from scenario_runner.plugins import NoneResultMode
from scenario_runner.scenario_discovery import SuiteDiscoveryError, discover_suites
from scenario_runner.scenario_execution import Scenario, Suite


class RecordingLoader:
    def __init__(self) -> None:
        self.loaded: list[str] = []

    def load(self, definition_path: Path, suite: Suite, result_mode: object) -> None:
        self.loaded.append(definition_path.name)
        suite.add_query("q1", f"SELECT '{suite.suite_id}'")


def _settings(tmp_path: Path, **overrides: str) -> RunSettings:
    values = {
        "artifacts.dir": str(tmp_path),
        "query.set.dir": "set",
        "test.queries.dir": "queries",
    }
    values.update(overrides)
    return RunSettings.from_configuration(Configuration(values))


def _definitions(tmp_path: Path, *names: str) -> None:
    directory = tmp_path / "set" / "queries"
    directory.mkdir(parents=True)
    for name in names:
        (directory / name).write_text("<suite/>", encoding="utf-8")


def test_discovers_matching_suites_in_file_name_order(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level("INFO")
    _definitions(tmp_path, "Suite_C.xml", "Suite_A.xml", "Other_B.xml", "readme.txt")
    scenario = Scenario(scenario_id="s", configuration=Configuration())
    loader = RecordingLoader()

    suites = discover_suites(
        scenario,
        _settings(tmp_path, **{"suites.include": "Suite_.*", "suites.exclude": "Suite_C"}),
        loader=loader,
        result_mode=NoneResultMode(),
    )

    assert [suite.suite_id for suite in suites] == ["Suite_A"]
    assert [suite.suite_id for suite in scenario.suites] == ["Suite_A"]
    assert loader.loaded == ["Suite_A.xml"]
    assert "Skipping suite Other_B" in caplog.text
    assert "Skipping suite Suite_C" in caplog.text


def test_custom_suite_suffix(tmp_path: Path) -> None:
    _definitions(tmp_path, "b.suite", "a.suite", "c.xml")
    scenario = Scenario(scenario_id="s", configuration=Configuration())

    discover_suites(
        scenario,
        _settings(tmp_path, **{"suite.suffix": ".suite"}),
        loader=RecordingLoader(),
        result_mode=NoneResultMode(),
    )

    assert [suite.suite_id for suite in scenario.suites] == ["a", "b"]


def test_multi_dot_suffix_is_removed_before_matching(tmp_path: Path) -> None:
    _definitions(tmp_path, "Orders.suite.xml", "Billing.suite.xml", "Orders.xml")
    scenario = Scenario(scenario_id="s", configuration=Configuration())
    loader = RecordingLoader()

    discover_suites(
        scenario,
        _settings(tmp_path, **{"suite.suffix": ".suite.xml", "suites.include": "Orders"}),
        loader=loader,
        result_mode=NoneResultMode(),
    )

    assert [suite.suite_id for suite in scenario.suites] == ["Orders"]
    assert loader.loaded == ["Orders.suite.xml"]


def test_missing_definitions_directory_raises(tmp_path: Path) -> None:
    scenario = Scenario(scenario_id="s", configuration=Configuration())

    with pytest.raises(SuiteDiscoveryError, match="Cannot load test queries"):
        discover_suites(
            scenario, _settings(tmp_path), loader=RecordingLoader(), result_mode=NoneResultMode()
        )


def test_unset_directory_parts_are_warned_about(
    tmp_path: Path, caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "top.xml").write_text("<suite/>", encoding="utf-8")
    scenario = Scenario(scenario_id="s", configuration=Configuration())

    discover_suites(
        scenario,
        RunSettings.from_configuration(Configuration()),
        loader=RecordingLoader(),
        result_mode=NoneResultMode(),
    )

    assert [suite.suite_id for suite in scenario.suites] == ["top"]
    assert "Artifacts directory is not set" in caplog.text
    assert "Query set directory is not defined" in caplog.text
    assert "Test queries directory is not defined" in caplog.text
