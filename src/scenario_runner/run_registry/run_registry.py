"""Registry of runs keyed by generated identifiers."""

from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Callable

from scenario_runner.configuration.property_layers import Configuration
from scenario_runner.configuration.runtime_settings import (
    ARTIFACTS_DIR_KEY,
    ARTIFACTS_PATH_ABSOLUTE_KEY,
    OUTPUT_DIR_KEY,
    SCENARIO_KEY,
    SCENARIOS_PATH_ABSOLUTE_KEY,
)
from scenario_runner.run_execution.run_orchestrator import RunOrchestrator

from .read_write_lock import ReadWriteLock
from .run_handle import RunHandle
from .run_identifiers import RunIdentifierCounter
from .run_storage import NoPersistedRuns, PersistedRunStore, RunStorage

_LOGGER = logging.getLogger(__name__)

CACHE_LIMIT = 2 << 12

OrchestratorFactory = Callable[[Configuration], RunOrchestrator]


class RunRegistry:
    """Allocates run identifiers and caches run handles.

    At most ``cache_limit`` handles are cached. Storing a new identifier into
    a full cache evicts the oldest-inserted entries until there is room;
    evicted runs stay reachable through the persisted run store. Lookups share
    the lock, every mutation holds it exclusively.
    """

    def __init__(
        self,
        *,
        storage: RunStorage,
        orchestrator_factory: OrchestratorFactory,
        persisted_store: PersistedRunStore | None = None,
        cache_limit: int = CACHE_LIMIT,
        id_counter: RunIdentifierCounter | None = None,
    ) -> None:
        if cache_limit <= 0:
            raise ValueError("cache_limit must be greater than zero.")
        self._storage = storage
        self._orchestrator_factory = orchestrator_factory
        self._persisted_store = persisted_store or NoPersistedRuns()
        self._cache_limit = cache_limit
        self._id_counter = id_counter or RunIdentifierCounter()
        self._lock = ReadWriteLock()
        self._cache: OrderedDict[str, RunHandle] = OrderedDict()

    @property
    def cached_ids(self) -> tuple[str, ...]:
        with self._lock.read_locked():
            return tuple(self._cache)

    def allocate(self, configuration: Configuration, *, start: bool = True) -> RunHandle:
        """Create a run with a fresh identifier and start it in the background."""
        with self._lock.write_locked():
            run_id = self._next_free_id()
            derived = self._derive_configuration(run_id, configuration)
            handle = RunHandle(
                run_id=run_id,
                output_dir=self._storage.result_dir(run_id).resolve(),
                configuration=derived,
                orchestrator=self._orchestrator_factory(derived),
            )
            self._store_locked(run_id, handle)
        _LOGGER.info("Run %s allocated. Output directory %s.", run_id, handle.output_dir)
        if start and handle.orchestrator is not None:
            handle.orchestrator.start(synchronous=False)
        return handle

    def get(self, run_id: str) -> RunHandle | None:
        with self._lock.read_locked():
            handle = self._cache.get(run_id)
            if handle is not None:
                return handle
            return self._persisted_store.read(run_id)

    def delete(self, run_id: str | None) -> None:
        """Forget a cached run and delete its output directory.

        A live run is stopped first; its directory is deleted once the run
        wrote its last output, so nothing recreates it afterwards.
        """
        if run_id is None:
            return
        with self._lock.write_locked():
            handle = self._cache.pop(run_id, None)
        if handle is None:
            return
        handle.stop()
        handle.when_finished(lambda: self._delete_output(handle))

    def _delete_output(self, handle: RunHandle) -> None:
        with self._lock.write_locked():
            self._storage.delete(handle.output_dir)
        _LOGGER.info("Run %s deleted.", handle.run_id)

    def store(self, run_id: str, handle: RunHandle) -> None:
        with self._lock.write_locked():
            self._store_locked(run_id, handle)

    def _store_locked(self, run_id: str, handle: RunHandle) -> None:
        if run_id not in self._cache:
            while len(self._cache) >= self._cache_limit:
                evicted_id, _ = self._cache.popitem(last=False)
                _LOGGER.debug("Run %s evicted from cache.", evicted_id)
        self._cache[run_id] = handle

    def _next_free_id(self) -> str:
        for _ in range(self._id_counter.capacity):
            run_id = self._id_counter.next_identifier()
            if not self._storage.result_dir(run_id).exists():
                return run_id
        raise RuntimeError("No free run identifier left.")

    def _derive_configuration(self, run_id: str, configuration: Configuration) -> Configuration:
        overrides = {OUTPUT_DIR_KEY: str(self._storage.result_dir(run_id).resolve())}
        if not configuration.get_bool(ARTIFACTS_PATH_ABSOLUTE_KEY):
            artifacts = configuration.get(ARTIFACTS_DIR_KEY, "")
            overrides[ARTIFACTS_DIR_KEY] = str(self._storage.artifact_dir(artifacts).resolve())
        if not configuration.get_bool(SCENARIOS_PATH_ABSOLUTE_KEY):
            scenario = configuration.get(SCENARIO_KEY, "")
            overrides[SCENARIO_KEY] = str(self._storage.scenario_dir(scenario).resolve())
        return configuration.with_overrides(overrides)
