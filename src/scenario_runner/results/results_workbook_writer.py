"""Results workbook writer."""

from __future__ import annotations

import logging
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from scenario_runner.configuration.property_layers import Configuration
from scenario_runner.configuration.runtime_settings import OUTPUT_DIR_KEY
from scenario_runner.scenario_execution.scenario_models import Scenario

_LOGGER = logging.getLogger(__name__)

WORKBOOK_FILENAME = "run-results.xlsx"
SCENARIOS_SHEET_NAME = "Scenarios"
SUITES_SHEET_NAME = "Suites"
SCENARIO_COLUMNS = ("Scenario", "State", "Suites", "Pass", "Fail", "Skip", "Total")
SUITE_COLUMNS = ("Scenario", "Suite", "Pass", "Fail", "Skip", "Total")


class ResultsWorkbookWriter:
    """Collects scenario and suite counts into one workbook saved at run end."""

    def __init__(self) -> None:
        self._workbook: Workbook | None = None
        self._output_path: Path | None = None

    def init(self, configuration: Configuration) -> bool:
        raw_dir = (configuration.get(OUTPUT_DIR_KEY) or "").strip()
        if not raw_dir:
            _LOGGER.error("Cannot write results workbook. Output directory is not set.")
            return False
        workbook = Workbook()
        scenarios_sheet = workbook.active
        scenarios_sheet.title = SCENARIOS_SHEET_NAME
        _write_header(scenarios_sheet, SCENARIO_COLUMNS)
        _write_header(workbook.create_sheet(SUITES_SHEET_NAME), SUITE_COLUMNS)
        self._workbook = workbook
        self._output_path = Path(raw_dir) / WORKBOOK_FILENAME
        return True

    def write_result_of_scenario(self, scenario: Scenario) -> None:
        if self._workbook is None:
            raise RuntimeError("Writer is not initialised.")
        self._workbook[SCENARIOS_SHEET_NAME].append(
            [
                scenario.scenario_id,
                scenario.state.value,
                len(scenario.suites),
                scenario.passed_count,
                scenario.failed_count,
                scenario.skipped_count,
                scenario.total_count,
            ]
        )
        suites_sheet = self._workbook[SUITES_SHEET_NAME]
        for suite in scenario.suites:
            suites_sheet.append(
                [
                    scenario.scenario_id,
                    suite.suite_id,
                    suite.passed_count,
                    suite.failed_count,
                    suite.skipped_count,
                    suite.total_count,
                ]
            )

    def destroy(self) -> None:
        workbook, output_path = self._workbook, self._output_path
        self._workbook = None
        self._output_path = None
        if workbook is None or output_path is None:
            return
        for sheet in workbook.worksheets:
            _autosize_columns(sheet)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            workbook.save(output_path)
        except OSError as exc:
            _LOGGER.error("Unable to save results workbook %s: %s", output_path, exc)


def _write_header(sheet: Worksheet, columns: tuple[str, ...]) -> None:
    sheet.append(list(columns))
    for cell in sheet[1]:
        cell.font = Font(bold=True)
    sheet.freeze_panes = "A2"


def _autosize_columns(sheet: Worksheet) -> None:
    for index, column in enumerate(sheet.iter_cols(values_only=True), start=1):
        width = max((len(str(value)) for value in column if value is not None), default=8)
        sheet.column_dimensions[get_column_letter(index)].width = min(width + 2, 60)
