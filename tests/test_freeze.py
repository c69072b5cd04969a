"""Tests for frozen() and freezing(): batching by halting."""

import pytest

from flucts import Composite, Source, freezing, frozen


def _tracked(default=0, combiner="first_set"):
    c = Composite(default, combiner)
    log = []
    c.value_changed.subscribe(log.append)
    return c, log


class TestFrozen:
    def test_batches_updates(self):
        c, log = _tracked(0, "linear")
        a = Source(1, priority=1, tags={"Operation": "Add"})
        b = Source(1, priority=2, tags={"Operation": "Multiply"})
        c.add_source(a).add_source(b)
        log.clear()

        with frozen(c):
            a.update(4)
            b.update(3)
            assert c.halted
            assert c.read() == 1

        # One resolve, one notification, no intermediate (4 * 1)
        assert log == [12]
        assert not c.halted
        assert not c.dirty

    def test_nested(self):
        c, log = _tracked()
        s = Source(1)
        c.add_source(s)
        log.clear()

        with frozen(c):
            s.update(2)
            with frozen(c):
                s.update(3)
            assert c.halted
            assert log == []
            s.update(4)

        assert log == [4]

    def test_restores_previous_halt(self):
        c, log = _tracked()
        s = Source(1)
        c.add_source(s)
        c.halt()
        with frozen(c):
            s.update(2)
        assert c.halted
        assert c.read() == 1

    def test_duplicate_composite(self):
        c, _ = _tracked()
        with frozen(c, c):
            pass
        assert not c.halted

    def test_settle_false(self):
        c, log = _tracked()
        s = Source(1)
        c.add_source(s)
        log.clear()
        with frozen(c, settle=False):
            s.update(2)
        assert c.dirty
        assert log == []
        assert c.read() == 2
        assert log == [2]

    def test_exception_restores_without_settling(self):
        c, log = _tracked()
        s = Source(1)
        c.add_source(s)
        log.clear()
        with pytest.raises(RuntimeError):
            with frozen(c):
                s.update(2)
                raise RuntimeError("oops")
        assert not c.halted
        assert c.dirty
        assert log == []

    def test_several_composites(self):
        s = Source(5)
        a, log_a = _tracked()
        b, log_b = _tracked(False, "any_true")
        a.add_source(s)
        b.add_source(s)
        log_a.clear()
        log_b.clear()
        with frozen(a, b):
            s.update(0)
            s.update(6)
        assert log_a == [6]
        assert log_b == []


class TestFreezing:
    def test_decorator(self):
        c, log = _tracked(0, "linear")
        a = Source(0, priority=1, tags={"Operation": "Add"})
        b = Source(0, priority=2, tags={"Operation": "Add"})
        c.add_source(a).add_source(b)

        @freezing(c)
        def bump(x, y):
            a.update(x)
            b.update(y)
            return x + y

        assert bump(1, 2) == 3
        assert log == [3]
        assert bump.__name__ == "bump"
