from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import date
from decimal import Decimal

import pytest

from src.vacation_system.vacation_system.common.locks import ThreadingKeyLock, balance_key, hold_all
from src.vacation_system.vacation_system.core.enums import RequestStatus
from src.vacation_system.vacation_system.core.exceptions import Busy


@pytest.fixture
def lock():
    return ThreadingKeyLock(timeout=0.2)


@contextmanager
def held_by_other_thread(lock, key):
    acquired = threading.Event()
    done = threading.Event()

    def worker():
        with lock.hold(key):
            acquired.set()
            done.wait(5)

    t = threading.Thread(target=worker)
    t.start()
    assert acquired.wait(5)
    try:
        yield
    finally:
        done.set()
        t.join(5)


def test_second_holder_times_out_with_busy(lock):
    key = balance_key(3, 2026)

    with held_by_other_thread(lock, key):
        with pytest.raises(Busy) as exc:
            with lock.hold(key):
                pass
    assert exc.value.retryable is True

    # Free again once the other thread lets go
    with lock.hold(key):
        pass


def test_hold_is_reentrant_and_keys_are_independent(lock):
    with lock.hold("a"):
        with lock.hold("a"):
            pass
        with held_by_other_thread(lock, "b"):
            pass


def test_entries_are_dropped_when_no_one_holds_them(lock):
    with lock.hold("a"), lock.hold("b"):
        assert len(lock) == 2
    assert len(lock) == 0

    with held_by_other_thread(lock, "a"):
        with pytest.raises(Busy):
            with lock.hold("a"):
                pass
        assert len(lock) == 1
    assert len(lock) == 0


def test_hold_all_takes_every_key(lock):
    with held_by_other_thread(lock, "k:2027"):
        with pytest.raises(Busy):
            with hold_all(lock, ["k:2026", "k:2027"]):
                pass
    # The key taken before the failure was released
    assert len(lock) == 0


def test_submit_blocked_by_held_balance_leaves_request_and_balance_untouched(container, balances, lock):
    balances.put(employee_id=3, year=2026, allocated="22")
    service = container.request_service
    req = service.create(employee_id=3, start_date=date(2026, 4, 6), end_date=date(2026, 4, 10))

    with held_by_other_thread(lock, balance_key(3, 2026)):
        with pytest.raises(Busy):
            service.submit(req.request_id)

    assert service.get_request(req.request_id).status == RequestStatus.DRAFT
    assert balances.get(3, 2026).used_days == Decimal("0")
    assert service.submit(req.request_id).status == RequestStatus.SUBMITTED


def test_year_spanning_submit_also_holds_the_end_year(container, balances, lock):
    balances.put(employee_id=3, year=2026, allocated="22")
    balances.put(employee_id=3, year=2027, allocated="22")
    service = container.request_service
    req = service.create(employee_id=3, start_date=date(2026, 12, 28), end_date=date(2027, 1, 4))

    with held_by_other_thread(lock, balance_key(3, 2027)):
        with pytest.raises(Busy):
            service.submit(req.request_id)

    assert service.get_request(req.request_id).status == RequestStatus.DRAFT
    assert balances.get(3, 2026).used_days == Decimal("0")
