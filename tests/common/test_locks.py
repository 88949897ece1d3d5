import threading

from src.event_attendance.event_attendance.common.locks import KeyedLock


def test_released_keys_are_evicted():
    locks = KeyedLock()

    for i in range(1000):
        with locks.hold(("user", i)):
            assert len(locks) == 1

    assert len(locks) == 0


def test_same_key_is_reentrant():
    locks = KeyedLock()

    with locks.hold("k"):
        with locks.hold("k"):
            assert len(locks) == 1

    assert len(locks) == 0


def test_entry_survives_while_another_thread_waits():
    locks = KeyedLock()
    held = threading.Event()
    order = []

    def waiter():
        held.wait()
        with locks.hold("k"):
            order.append("waiter")

    t = threading.Thread(target=waiter)
    t.start()
    with locks.hold("k"):
        held.set()
        # give the waiter time to block on the same entry
        t.join(timeout=0.1)
        order.append("holder")
    t.join()

    assert order == ["holder", "waiter"]
    assert len(locks) == 0


def test_entry_is_released_when_the_body_raises():
    locks = KeyedLock()

    try:
        with locks.hold("k"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    assert len(locks) == 0
