"""Scenario execution errors."""

from __future__ import annotations


class ScenarioInterruptedError(Exception):
    """Raised when a running scenario has to stop before all suites were executed."""


class MaxTimeExceededError(ScenarioInterruptedError):
    """Raised when a scenario exceeds its configured time limit."""


class RunCancelledError(ScenarioInterruptedError):
    """Raised when the run was asked to stop while a scenario was running."""


class TargetNotAvailableError(Exception):
    """Raised by a query target whose server cannot be reached."""
