"""Registry of live Gemini CLI runs keyed by session."""

import threading
from typing import Generic, TypeVar

T = TypeVar("T")


class ProcessTable(Generic[T]):
    """Maps a session key to the run currently serving it.

    A run is first stored under a provisional key and moved to its real
    session ID once the CLI reports it. Holds at most one entry per key.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: dict[str, T] = {}

    def insert(self, key: str, run: T):
        with self._lock:
            self._entries[key] = run

    def get(self, key: str) -> T | None:
        with self._lock:
            return self._entries.get(key)

    def pop(self, key: str) -> T | None:
        with self._lock:
            return self._entries.pop(key, None)

    def discard(self, key: str, run: T) -> bool:
        """Remove ``key`` only if it still maps to ``run``."""
        with self._lock:
            if self._entries.get(key) is run:
                del self._entries[key]
                return True
            return False

    def rekey(self, old_key: str, new_key: str) -> bool:
        """Move the entry under ``old_key`` to ``new_key``."""
        if old_key == new_key:
            return False
        with self._lock:
            run = self._entries.pop(old_key, None)
            if run is None:
                return False
            self._entries[new_key] = run
            return True

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def values(self) -> list[T]:
        with self._lock:
            return list(self._entries.values())

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
