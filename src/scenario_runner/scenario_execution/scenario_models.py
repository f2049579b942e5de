"""Scenario execution domain entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from scenario_runner.configuration.property_layers import Configuration


class QueryStatus(str, Enum):
    """Outcome of one executed query."""

    PASSED = "passed"
    FAILED_MISMATCH = "failed-mismatch"
    FAILED_ERROR = "failed-error"


class ScenarioState(str, Enum):
    """Lifecycle states of a scenario driven by the scenario engine."""

    CREATED = "CREATED"
    SETUP = "SETUP"
    READY_CHECK = "READY_CHECK"
    RUNNING = "RUNNING"
    AFTER = "AFTER"
    DONE = "DONE"
    ABORTED = "ABORTED"


@dataclass(frozen=True)
class QueryResult:
    """Comparison outcome of one query with its diagnostic text."""

    status: QueryStatus
    diagnostics: tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return self.status is QueryStatus.PASSED

    @staticmethod
    def success() -> QueryResult:
        return QueryResult(status=QueryStatus.PASSED)

    @staticmethod
    def mismatch(*diagnostics: str) -> QueryResult:
        return QueryResult(status=QueryStatus.FAILED_MISMATCH, diagnostics=tuple(diagnostics))

    @staticmethod
    def error(error: Exception | str) -> QueryResult:
        return QueryResult(status=QueryStatus.FAILED_ERROR, diagnostics=(str(error),))

    def describe(self) -> str:
        """Return the first diagnostic line, or the status when there is none."""
        return self.diagnostics[0] if self.diagnostics else self.status.value


@dataclass
class Query:
    """One comparison unit of a suite. ``result`` stays ``None`` until executed."""

    query_id: str
    suite_id: str
    text: str
    result: QueryResult | None = None

    @property
    def executed(self) -> bool:
        return self.result is not None


@dataclass
class Suite:
    """Named group of queries loaded from one suite definition file."""

    suite_id: str
    queries: list[Query] = field(default_factory=list)
    start_time: datetime | None = None
    end_time: datetime | None = None

    def add_query(self, query_id: str, text: str) -> Query:
        query = Query(query_id=query_id, suite_id=self.suite_id, text=text)
        self.queries.append(query)
        return query

    @property
    def total_count(self) -> int:
        return len(self.queries)

    @property
    def executed_queries(self) -> list[Query]:
        return [query for query in self.queries if query.executed]

    @property
    def executed_count(self) -> int:
        return len(self.executed_queries)

    @property
    def passed_count(self) -> int:
        return sum(1 for query in self.queries if query.result is not None and query.result.passed)

    @property
    def failed_count(self) -> int:
        return self.executed_count - self.passed_count

    @property
    def skipped_count(self) -> int:
        return self.total_count - self.executed_count

    @property
    def failed_queries(self) -> list[Query]:
        return [
            query for query in self.queries if query.result is not None and not query.result.passed
        ]

    @property
    def duration_seconds(self) -> float | None:
        if self.start_time is None or self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()


@dataclass
class Scenario:  # pylint: disable=too-many-instance-attributes
    """One complete test attempt against a resolved configuration."""

    scenario_id: str
    configuration: Configuration
    suites: list[Suite] = field(default_factory=list)
    state: ScenarioState = ScenarioState.CREATED
    start_time: datetime | None = None
    end_time: datetime | None = None
    state_history: list[ScenarioState] = field(default_factory=list)

    def add_suite(self, suite: Suite) -> None:
        if any(existing.suite_id == suite.suite_id for existing in self.suites):
            raise ValueError(
                f"Suite '{suite.suite_id}' is already attached to scenario '{self.scenario_id}'."
            )
        self.suites.append(suite)

    def transition(self, state: ScenarioState) -> None:
        if state is ScenarioState.SETUP and self.start_time is None:
            self.start_time = datetime.now(UTC)
        if state in (ScenarioState.DONE, ScenarioState.ABORTED):
            self.end_time = datetime.now(UTC)
        self.state_history.append(state)
        self.state = state

    @property
    def skipped(self) -> bool:
        return self.state is ScenarioState.ABORTED

    @property
    def total_count(self) -> int:
        return sum(suite.total_count for suite in self.suites)

    @property
    def executed_count(self) -> int:
        return sum(suite.executed_count for suite in self.suites)

    @property
    def passed_count(self) -> int:
        return sum(suite.passed_count for suite in self.suites)

    @property
    def failed_count(self) -> int:
        return sum(suite.failed_count for suite in self.suites)

    @property
    def skipped_count(self) -> int:
        return self.total_count - self.executed_count

    @property
    def failed_queries(self) -> list[Query]:
        return [query for suite in self.suites for query in suite.failed_queries]

    @property
    def duration_seconds(self) -> float | None:
        if self.start_time is None or self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()
