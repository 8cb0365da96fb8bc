"""Tests for the per-order lock registry."""

import threading

import pytest

from asphalt_orders.application.order_locks import OrderLocks


def test_lock_is_dropped_after_use():
    locks = OrderLocks()
    for order_id in range(100):
        with locks.hold(order_id):
            assert len(locks) == 1
    assert len(locks) == 0


def test_lock_is_dropped_when_body_raises():
    locks = OrderLocks()
    with pytest.raises(RuntimeError):
        with locks.hold(1):
            raise RuntimeError("boom")
    assert len(locks) == 0


def test_waiter_keeps_lock_alive_and_is_serialized():
    locks = OrderLocks()
    entered = threading.Event()
    release = threading.Event()
    order_of_entry = []

    def first():
        with locks.hold(5):
            order_of_entry.append("first")
            entered.set()
            release.wait(timeout=5)

    def second():
        entered.wait(timeout=5)
        with locks.hold(5):
            order_of_entry.append("second")

    t1 = threading.Thread(target=first)
    t2 = threading.Thread(target=second)
    t1.start()
    t2.start()
    entered.wait(timeout=5)
    release.set()
    t1.join(timeout=5)
    t2.join(timeout=5)

    assert order_of_entry == ["first", "second"]
    assert len(locks) == 0


def test_different_orders_do_not_block_each_other():
    locks = OrderLocks()
    with locks.hold(1):
        with locks.hold(2):
            assert len(locks) == 2
    assert len(locks) == 0
