"""Tests for Signal: synchronous single-channel notifier."""

import pytest

from flucts import Signal


class TestFireSubscribe:
    """Core fire/subscribe behavior."""

    def test_subscribe_receives_fired_values(self):
        signal = Signal()
        received = []
        signal.subscribe(lambda v: received.append(v))
        signal.fire(1)
        signal.fire(2)
        assert received == [1, 2]

    def test_variadic_payload(self):
        signal = Signal()
        received = []
        signal.subscribe(lambda *args: received.append(args))
        signal.fire("a", 2, None)
        signal.fire()
        assert received == [("a", 2, None), ()]

    def test_subscription_order(self):
        signal = Signal()
        order = []
        signal.subscribe(lambda: order.append("first"))
        signal.subscribe(lambda: order.append("second"))
        signal.fire()
        assert order == ["first", "second"]

    def test_same_callback_twice_fires_twice(self):
        signal = Signal()
        received = []
        cb = received.append
        a = signal.subscribe(cb)
        signal.subscribe(cb)
        signal.fire("x")
        assert received == ["x", "x"]
        a.unsubscribe()
        signal.fire("y")
        assert received == ["x", "x", "y"]

    def test_unsubscribe(self):
        signal = Signal()
        received = []
        sub = signal.subscribe(lambda v: received.append(v))
        signal.fire(1)
        sub.unsubscribe()
        signal.fire(2)
        assert received == [1]
        assert not sub.connected

    def test_subscription_is_callable_disposer(self):
        signal = Signal()
        received = []
        unsub = signal.subscribe(lambda v: received.append(v))
        unsub()
        signal.fire(1)
        assert received == []

    def test_unsubscribe_idempotent(self):
        signal = Signal()
        keep = []
        sub = signal.subscribe(lambda v: None)
        signal.subscribe(lambda v: keep.append(v))
        sub.unsubscribe()
        sub.unsubscribe()  # should not raise
        signal.fire(1)
        assert keep == [1]
        assert len(signal) == 1

    def test_unsubscribed_during_fire_is_skipped(self):
        signal = Signal()
        received = []
        subs = []
        subs.append(signal.subscribe(lambda: subs[1].unsubscribe()))
        subs.append(signal.subscribe(lambda: received.append("late")))
        signal.fire()
        assert received == []

    def test_subscribed_during_fire_waits_for_next_fire(self):
        signal = Signal()
        received = []
        signal.subscribe(lambda: signal.subscribe(lambda: received.append("new")))
        signal.fire()
        assert received == []

    def test_error_stops_fire(self):
        signal = Signal()
        received = []

        def _boom():
            raise RuntimeError("boom")

        signal.subscribe(_boom)
        signal.subscribe(lambda: received.append("after"))
        with pytest.raises(RuntimeError):
            signal.fire()
        assert received == []

    def test_always_truthy(self):
        signal = Signal()
        assert len(signal) == 0
        assert signal


class TestBroadcast:
    def test_reaches_every_subscriber(self):
        signal = Signal()
        received = []
        signal.subscribe(received.append)
        signal.subscribe(lambda v: received.append(v * 2))
        signal.broadcast(3)
        assert received == [3, 6]

    def test_error_does_not_stop_delivery(self):
        signal = Signal()
        received = []

        def _boom(v):
            raise RuntimeError(f"first {v}")

        def _also_boom(v):
            raise ValueError("second")

        signal.subscribe(_boom)
        signal.subscribe(_also_boom)
        signal.subscribe(received.append)
        with pytest.raises(RuntimeError, match="first 1"):
            signal.broadcast(1)
        assert received == [1]

    def test_skips_disconnected_mid_broadcast(self):
        signal = Signal()
        received = []
        subs = []
        subs.append(signal.subscribe(lambda: subs[1].unsubscribe()))
        subs.append(signal.subscribe(lambda: received.append("late")))
        signal.broadcast()
        assert received == []
