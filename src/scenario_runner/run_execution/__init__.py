"""Run execution domain exports."""

from .run_contracts import ProgressObserver, RunState, RunStateError
from .run_orchestrator import RunOrchestrator

__all__ = [
    "ProgressObserver",
    "RunOrchestrator",
    "RunState",
    "RunStateError",
]
