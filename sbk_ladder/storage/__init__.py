from typing import Optional

from .. import config
from .base import LadderStore, ladder_from_record, ladder_to_record
from .remote_store import RemoteLadderStore, RemoteStoreConfigError
from .sqlite_store import SQLiteLadderStore


def build_store(backend: Optional[str] = None) -> LadderStore:
    """Pick the ladder store named by configuration ('sqlite' or 'remote')."""
    backend = (backend or config.STORAGE_BACKEND).lower().strip()
    if backend == "sqlite":
        return SQLiteLadderStore()
    if backend == "remote":
        return RemoteLadderStore()
    raise ValueError(f"Unknown storage backend: {backend}")


__all__ = [
    "LadderStore",
    "SQLiteLadderStore",
    "RemoteLadderStore",
    "RemoteStoreConfigError",
    "build_store",
    "ladder_from_record",
    "ladder_to_record",
]
