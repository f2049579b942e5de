"""Run registry domain exports."""

from .read_write_lock import ReadWriteLock
from .run_handle import RunHandle
from .run_identifiers import ID_ALPHABET, ID_LENGTH, RunIdentifierCounter
from .run_registry import CACHE_LIMIT, RunRegistry
from .run_storage import (
    FileSystemRunStorage,
    NoPersistedRuns,
    PersistedRunStore,
    ResultDirectoryRunStore,
    RunStorage,
)

__all__ = [
    "CACHE_LIMIT",
    "FileSystemRunStorage",
    "ID_ALPHABET",
    "ID_LENGTH",
    "NoPersistedRuns",
    "PersistedRunStore",
    "ReadWriteLock",
    "ResultDirectoryRunStore",
    "RunHandle",
    "RunIdentifierCounter",
    "RunRegistry",
    "RunStorage",
]
