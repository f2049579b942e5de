"""Results domain exports."""

from .results_workbook_writer import ResultsWorkbookWriter
from .run_result import (
    ResultAggregator,
    RunResult,
    RunResultFormatError,
    ScenarioSummary,
    load_run_result,
)
from .summary_text_writer import SummaryTextWriter

__all__ = [
    "ResultAggregator",
    "ResultsWorkbookWriter",
    "RunResult",
    "RunResultFormatError",
    "ScenarioSummary",
    "SummaryTextWriter",
    "load_run_result",
]
