"""Shared plumbing for file-backed record stores."""

import threading
from abc import ABC, abstractmethod
from pathlib import Path

from photo_albums.domain.errors import StoreNotInitializedError


class FileBackedStore(ABC):
    """In-memory record cache backed by files.

    Reads go straight to the cache. Writes hold ``_lock`` for the whole
    persist-then-cache cycle, so they are totally ordered per store.
    """

    def __init__(self, base_path: Path) -> None:
        self.base_path = Path(base_path)
        self._lock = threading.Lock()
        self._ready = False

    @property
    def ready(self) -> bool:
        """Whether :meth:`initialize` has completed."""
        return self._ready

    def initialize(self) -> None:
        """Load every durable record into the cache and mark the store ready."""
        with self._lock:
            self._load()
            self._ready = True

    @abstractmethod
    def _load(self) -> None:
        """Replace the cache with the records found on disk. Lock is held."""

    def _check_ready(self) -> None:
        if not self._ready:
            raise StoreNotInitializedError(
                f"{type(self).__name__} is not initialized"
            )
