from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class RaffleLocks:
    """One mutex per raffle id around registration and draw.

    Check-then-act sequences (duplicate email, winner ceiling, pick-then-mark)
    for the same raffle never interleave inside one process. An id's entry is
    removed once no caller holds or waits for its lock.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        # raffle id -> (lock, number of callers holding or waiting)
        self._locks: dict[str, tuple[threading.Lock, int]] = {}

    def _acquire_entry(self, raffle_id: str) -> threading.Lock:
        with self._guard:
            lock, users = self._locks.get(raffle_id, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._locks[raffle_id] = (lock, users + 1)
            return lock

    def _release_entry(self, raffle_id: str) -> None:
        with self._guard:
            lock, users = self._locks[raffle_id]
            if users <= 1:
                del self._locks[raffle_id]
            else:
                self._locks[raffle_id] = (lock, users - 1)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, raffle_id: str) -> Iterator[None]:
        lock = self._acquire_entry(raffle_id)
        try:
            with lock:
                yield
        finally:
            self._release_entry(raffle_id)
