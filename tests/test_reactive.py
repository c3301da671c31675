"""
Tests for the reactive primitives: Observable, ObservableValue,
ObservableList and the ``derived`` memoizing property.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sarif_panel.reactive import Observable, ObservableList, ObservableValue, derived


class TestObservable:
    def test_notify_bumps_revision_and_calls_observers_in_order(self):
        observable = Observable()
        calls = []
        observable.subscribe(lambda: calls.append("first"))
        observable.subscribe(lambda: calls.append("second"))

        observable.notify()

        assert observable.revision == 1
        assert calls == ["first", "second"]

    def test_unsubscribe(self):
        observable = Observable()
        calls = []
        unsubscribe = observable.subscribe(lambda: calls.append(1))
        unsubscribe()
        unsubscribe()  # second call is harmless

        observable.notify()
        assert calls == []

    def test_observer_may_unsubscribe_while_notified(self):
        observable = Observable()
        calls = []
        unsubscribe = None

        def once():
            calls.append(1)
            unsubscribe()

        unsubscribe = observable.subscribe(once)
        observable.notify()
        observable.notify()
        assert calls == [1]


class TestObservableValue:
    def test_set_notifies(self):
        value = ObservableValue("a")
        calls = []
        value.subscribe(lambda: calls.append(value.get()))
        value.set("b")
        assert calls == ["b"]

    def test_setting_same_object_is_noop(self):
        marker = object()
        value = ObservableValue(marker)
        value.set(marker)
        assert value.revision == 0


class TestObservableList:
    def test_mutations_notify_once_each(self):
        items = ObservableList([1])
        items.append(2)
        items.pop(0)
        items.replace([5, 6])
        assert items.revision == 3
        assert items.snapshot() == [5, 6]

    def test_remove(self):
        items = ObservableList(["a", "b", "a"])
        assert items.remove("a") is True
        assert items.snapshot() == ["b", "a"]
        assert items.remove("zzz") is False
        assert items.revision == 1

    def test_sequence_protocol(self):
        items = ObservableList(["x", "y"])
        assert len(items) == 2
        assert items[1] == "y"
        assert "x" in items
        assert list(items) == ["x", "y"]


class _Counter:
    def __init__(self):
        self.items = ObservableList()
        self.computed = 0

    @derived(lambda self: self.items.revision)
    def total(self):
        self.computed += 1
        return sum(self.items)


class TestDerived:
    def test_value_is_cached_until_dependency_moves(self):
        counter = _Counter()
        assert counter.total == 0
        assert counter.total == 0
        assert counter.computed == 1

        counter.items.append(4)
        assert counter.total == 4
        assert counter.computed == 2

    def test_instances_do_not_share_cache(self):
        first, second = _Counter(), _Counter()
        first.items.append(1)
        assert first.total == 1
        assert second.total == 0
