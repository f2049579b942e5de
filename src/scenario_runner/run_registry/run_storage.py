"""Durable storage collaborators of the run registry."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Protocol

from scenario_runner.configuration.loader import load_properties_file
from scenario_runner.configuration.property_layers import DUMP_FILENAME, ConfigurationError
from scenario_runner.results.run_result import (
    RESULT_FILENAME,
    RunResultFormatError,
    load_run_result,
)

from .run_handle import RunHandle

_LOGGER = logging.getLogger(__name__)


class RunStorage(Protocol):
    """Locations of run output, artifacts and scenarios on durable storage."""

    def result_dir(self, run_id: str) -> Path: ...

    def artifact_dir(self, name: str) -> Path: ...

    def scenario_dir(self, name: str) -> Path: ...

    def delete(self, path: Path) -> None: ...


class PersistedRunStore(Protocol):  # pylint: disable=too-few-public-methods
    """Lookup of runs that are no longer held in memory."""

    def read(self, run_id: str) -> RunHandle | None: ...


class FileSystemRunStorage:
    """Keeps ``results/``, ``artifacts/`` and ``scenarios/`` under one root directory."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def result_dir(self, run_id: str) -> Path:
        return self._root / "results" / run_id

    def artifact_dir(self, name: str) -> Path:
        return self._root / "artifacts" / name

    def scenario_dir(self, name: str) -> Path:
        return self._root / "scenarios" / name

    def delete(self, path: Path) -> None:
        if path.is_dir():
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()


class NoPersistedRuns:  # pylint: disable=too-few-public-methods
    """Persisted store for deployments that keep no run history."""

    def read(self, run_id: str) -> RunHandle | None:
        return None


class ResultDirectoryRunStore:  # pylint: disable=too-few-public-methods
    """Rebuilds finished runs from the files dumped into their result directory."""

    def __init__(self, storage: RunStorage) -> None:
        self._storage = storage

    def read(self, run_id: str) -> RunHandle | None:
        output_dir = self._storage.result_dir(run_id)
        result_path = output_dir / RESULT_FILENAME
        if not result_path.is_file():
            return None
        try:
            result = load_run_result(result_path)
            configuration = load_properties_file(output_dir / DUMP_FILENAME)
        except (RunResultFormatError, ConfigurationError) as exc:
            _LOGGER.warning("Persisted run %s cannot be read: %s", run_id, exc)
            return None
        return RunHandle(
            run_id=run_id,
            output_dir=output_dir,
            configuration=configuration,
            persisted_result=result,
        )
