# app/core/locks.py
import threading
import uuid
from contextlib import contextmanager
from typing import Iterator


class OwnerLocks:
    """
    One mutex per owner id.

    FastAPI runs sync endpoints in a thread pool, so two requests for the
    same owner can interleave a read-modify-write of that owner's cart.
    Holding `OwnerLocks.hold(owner_id)` around the whole operation
    serializes them inside this process; different owners never contend.

    An entry lives only while some thread holds or waits for it, so the
    registry stays as small as the number of owners currently in flight.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        # owner id -> (lock, number of holders plus waiters)
        self._locks: dict[uuid.UUID, tuple[threading.Lock, int]] = {}

    def _acquire_entry(self, owner_id: uuid.UUID) -> threading.Lock:
        with self._guard:
            lock, users = self._locks.get(owner_id, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._locks[owner_id] = (lock, users + 1)
            return lock

    def _release_entry(self, owner_id: uuid.UUID) -> None:
        with self._guard:
            lock, users = self._locks[owner_id]
            if users == 1:
                del self._locks[owner_id]
            else:
                self._locks[owner_id] = (lock, users - 1)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, owner_id: uuid.UUID) -> Iterator[None]:
        lock = self._acquire_entry(owner_id)
        try:
            with lock:
                yield
        finally:
            self._release_entry(owner_id)
