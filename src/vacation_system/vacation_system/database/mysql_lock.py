from __future__ import annotations

import hashlib
import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from ..common.locks import KeyLock
from ..core.constants import DEFAULT_LOCK_TIMEOUT_SECONDS
from ..core.exceptions import Busy
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

_MAX_LOCK_NAME = 64


def _lock_name(key: str) -> str:
    # MySQL user-level lock names are limited to 64 characters.
    if len(key) <= _MAX_LOCK_NAME:
        return key
    return hashlib.sha1(key.encode("utf-8")).hexdigest()


class MySQLNamedLock(KeyLock):
    """Cross-process key lock built on MySQL GET_LOCK/RELEASE_LOCK.

    The lock lives in a dedicated connection held open for the critical
    section. Nested `hold` calls for a key already held by the current thread
    pass through, so services can wrap ledger calls that lock the same key.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS):
        self._conn_factory = conn_factory
        self._timeout = float(timeout)
        self._local = threading.local()

    def _held(self) -> dict[str, int]:
        held = getattr(self._local, "held", None)
        if held is None:
            held = {}
            self._local.held = held
        return held

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        held = self._held()
        if held.get(key):
            held[key] += 1
            try:
                yield
            finally:
                held[key] -= 1
            return

        name = _lock_name(key)
        conn = self._conn_factory.connect()
        try:
            cur = conn.cursor()
            try:
                # GET_LOCK takes whole seconds; never pass 0 (which would not wait at all).
                cur.execute("SELECT GET_LOCK(%s, %s)", (name, max(1, int(round(self._timeout)))))
                row = cur.fetchone()
                if not row or row[0] != 1:
                    logger.warning("lock timeout after %.1fs on %s", self._timeout, key)
                    raise Busy(key)

                held[key] = 1
                try:
                    yield
                finally:
                    held.pop(key, None)
                    cur.execute("SELECT RELEASE_LOCK(%s)", (name,))
                    cur.fetchone()
            finally:
                cur.close()
        finally:
            conn.close()
