from __future__ import annotations

import logging
import threading
from contextlib import ExitStack, contextmanager
from typing import ContextManager, Iterable, Iterator, Protocol

from ..core.constants import DEFAULT_LOCK_TIMEOUT_SECONDS
from ..core.exceptions import Busy

logger = logging.getLogger(__name__)


def balance_key(employee_id: int, year: int) -> str:
    return f"vacation_balance:{int(employee_id)}:{int(year)}"


class KeyLock(Protocol):
    """Serializes work per key.

    `hold` raises Busy when the key cannot be acquired within the timeout.
    """

    def hold(self, key: str) -> ContextManager[None]:
        raise NotImplementedError


class ThreadingKeyLock(KeyLock):
    """In-process per-key reentrant locks.

    An entry lives only while some thread holds or waits for its key, so the
    table is bounded by the number of concurrent callers.
    """

    def __init__(self, *, timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS):
        self._timeout = float(timeout)
        self._guard = threading.Lock()
        # key -> [lock, holders + waiters]
        self._locks: dict[str, list] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _checkout(self, key: str) -> threading.RLock:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.RLock(), 0]
                self._locks[key] = entry
            entry[1] += 1
            return entry[0]

    def _checkin(self, key: str) -> None:
        with self._guard:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._checkout(key)
        try:
            if not lock.acquire(timeout=self._timeout):
                logger.warning("lock timeout after %.1fs on %s", self._timeout, key)
                raise Busy(key)
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(key)


@contextmanager
def hold_all(lock: KeyLock, keys: Iterable[str]) -> Iterator[None]:
    """Hold several keys at once.

    Keys are taken in sorted order, so two callers sharing keys never wait
    on each other in a cycle.
    """
    with ExitStack() as stack:
        for key in sorted(set(keys)):
            stack.enter_context(lock.hold(key))
        yield
