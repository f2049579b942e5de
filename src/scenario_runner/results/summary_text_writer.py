"""Plain text summary writer."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import TextIO

from scenario_runner.configuration.property_layers import Configuration
from scenario_runner.configuration.runtime_settings import OUTPUT_DIR_KEY
from scenario_runner.scenario_execution.scenario_models import Scenario, Suite

_LOGGER = logging.getLogger(__name__)

NAME_PAD = 50
RESULTS_PAD = 6
TOTALS_FILENAME = "Summary_totals.txt"
ERRORS_FILENAME = "Summary_errors.txt"
TIMESTAMP_FORMAT = "_%Y%m%d_%H%M%S"


class SummaryTextWriter:
    """Writes run totals, failed queries and per-scenario/per-suite summaries.

    Layout of the output directory::

        Summary_totals.txt        one row per scenario
        Summary_errors.txt        failed queries of every scenario
        Summary_<scenario>.txt    suite table of one scenario
        <scenario>/<suite>.txt    executed query results of one suite, every run appended
        <scenario>/<suite>_<YYYYmmdd_HHMMSS>.txt
                                  the same results of this run only
    """

    def __init__(self) -> None:
        self._output_dir: Path | None = None

    def init(self, configuration: Configuration) -> bool:
        raw_dir = (configuration.get(OUTPUT_DIR_KEY) or "").strip()
        if not raw_dir:
            _LOGGER.error("Cannot write results. Output directory is not set.")
            return False
        output_dir = Path(raw_dir)
        if output_dir.exists() and not output_dir.is_dir():
            _LOGGER.error(
                "Cannot write results. Output directory is not a directory [%s].", output_dir
            )
            return False
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            _LOGGER.error(
                "Cannot write results. Output directory cannot be created [%s]: %s",
                output_dir,
                exc,
            )
            return False
        self._output_dir = output_dir
        return True

    def write_result_of_scenario(self, scenario: Scenario) -> None:
        if self._output_dir is None:
            raise RuntimeError("Writer is not initialised.")
        try:
            self._write_totals(scenario)
            self._write_errors(scenario)
            self._write_scenario_summary(scenario)
            scenario_dir = self._output_dir / scenario.scenario_id
            scenario_dir.mkdir(parents=True, exist_ok=True)
            for suite in scenario.suites:
                self._write_suite(scenario_dir, suite)
        except OSError as exc:
            _LOGGER.error("Unable to write result of scenario %s: %s", scenario.scenario_id, exc)

    def destroy(self) -> None:
        self._output_dir = None

    def _write_totals(self, scenario: Scenario) -> None:
        assert self._output_dir is not None
        totals = self._output_dir / TOTALS_FILENAME
        is_new = not totals.exists()
        with totals.open("a", encoding="utf-8") as handle:
            if is_new:
                _write_lines(handle, ("==============", "Summary totals", "=============="))
                _write_lines(handle, (_table_row("Scenario", "Pass", "Fail", "Skip", "Total"),))
            _write_lines(
                handle,
                (
                    _table_row(
                        scenario.scenario_id,
                        scenario.passed_count,
                        scenario.failed_count,
                        scenario.skipped_count,
                        scenario.total_count,
                    ),
                ),
            )

    def _write_errors(self, scenario: Scenario) -> None:
        assert self._output_dir is not None
        errors = self._output_dir / ERRORS_FILENAME
        is_new = not errors.exists()
        with errors.open("a", encoding="utf-8") as handle:
            if is_new:
                _write_lines(handle, ("==============", "Summary errors", "=============="))
            _write_failed_queries(handle, scenario)

    def _write_scenario_summary(self, scenario: Scenario) -> None:
        assert self._output_dir is not None
        summary = self._output_dir / f"Summary_{scenario.scenario_id}.txt"
        with summary.open("w", encoding="utf-8") as handle:
            _write_lines(
                handle,
                (
                    f"Scenario - {scenario.scenario_id}",
                    "======================",
                    f"State:                {scenario.state.value}",
                    f"Start Time:           {_format_time(scenario.start_time)}",
                    f"End Time:             {_format_time(scenario.end_time)}",
                    f"Elapsed:              {format_duration(scenario.duration_seconds)}",
                    "----------------------",
                    f"Number of all suites: {len(scenario.suites)}",
                    _table_row("Name", "Pass", "Fail", "Skip", "Total"),
                ),
            )
            for suite in scenario.suites:
                _write_lines(
                    handle,
                    (
                        _table_row(
                            suite.suite_id,
                            suite.passed_count,
                            suite.failed_count,
                            suite.skipped_count,
                            suite.total_count,
                        ),
                    ),
                )
            _write_lines(
                handle,
                (
                    "----------------------",
                    _table_row(
                        "Totals",
                        scenario.passed_count,
                        scenario.failed_count,
                        scenario.skipped_count,
                        scenario.total_count,
                    ),
                ),
            )
            _write_failed_queries(handle, scenario)

    def _write_suite(self, scenario_dir: Path, suite: Suite) -> None:
        lines = _suite_lines(suite)
        with (scenario_dir / f"{suite.suite_id}.txt").open("a", encoding="utf-8") as handle:
            _write_lines(handle, lines)
            _write_lines(handle, ("", ""))
        stamp = datetime.now(UTC).strftime(TIMESTAMP_FORMAT)
        with (scenario_dir / f"{suite.suite_id}{stamp}.txt").open("w", encoding="utf-8") as handle:
            _write_lines(handle, lines)


def _suite_lines(suite: Suite) -> list[str]:
    lines = [
        f"Suite - {suite.suite_id}",
        "============================",
        f"Start Time:                 {_format_time(suite.start_time)}",
        f"End Time:                   {_format_time(suite.end_time)}",
        f"Elapsed:                    {format_duration(suite.duration_seconds)}",
        f"Number of all queries:      {suite.total_count}",
        f"Number of skipped queries:  {suite.skipped_count}",
        f"Number of executed queries: {suite.executed_count}",
        f"Number of passed queries:   {suite.passed_count}",
        f"Number of failed queries:   {suite.failed_count}",
        "============================",
    ]
    for query in suite.executed_queries:
        assert query.result is not None
        lines.append(f"{query.query_id} - {query.result.describe()}")
    return lines


def format_duration(seconds: float | None) -> str:
    """Render a duration as ``HH:MM:SS.mmm``."""
    if seconds is None:
        return "-"
    if seconds < 0:
        return str(seconds)
    total_ms = int(round(seconds * 1000))
    hours, remainder = divmod(total_ms, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    secs, millis = divmod(remainder, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"


def _write_failed_queries(handle: TextIO, scenario: Scenario) -> None:
    failed = scenario.failed_queries
    if not failed:
        return
    _write_lines(handle, ("", "----------------------", f"Failed queries [{scenario.scenario_id}]"))
    for query in failed:
        assert query.result is not None
        line = f"    {query.suite_id}_{query.query_id} - {query.result.describe()}"
        _write_lines(handle, (line,))


def _table_row(name: object, *columns: object) -> str:
    return str(name).ljust(NAME_PAD) + "".join(str(column).ljust(RESULTS_PAD) for column in columns)


def _format_time(value: datetime | None) -> str:
    return (value or datetime.now(UTC)).isoformat(timespec="seconds")


def _write_lines(handle: TextIO, lines: Iterable[str]) -> None:
    for line in lines:
        handle.write(line + "\n")
