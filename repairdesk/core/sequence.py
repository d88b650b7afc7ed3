# repairdesk/core/sequence.py
from __future__ import annotations

from repairdesk.core.store import KeyValueStore, StoreError


class SequenceGenerator:
    """Persisted counter; ``next()`` returns 1, 2, 3, ... across restarts."""

    def __init__(self, store: KeyValueStore, key: str = "job_id_counter"):
        self._store = store
        self._key = key

    def current(self) -> int:
        raw = self._store.get(self._key)
        if raw is None or not raw.strip():
            return 0
        try:
            return int(raw.strip())
        except ValueError as e:
            raise StoreError(f"Corrupt sequence counter {self._key!r}: {raw!r}") from e

    def next(self) -> int:
        value = self.current() + 1
        self._store.set(self._key, str(value))
        return value
