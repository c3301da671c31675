"""
Reactive primitives for the panel stores.

State that other parts of the engine depend on lives in an ``Observable``:
every mutation bumps a revision counter and then calls the subscribers
synchronously, in subscription order.

Derived views (flattened results, visible columns, filtered and grouped
rows) are pull-based: ``derived`` caches a computed property together with
the revisions it was computed from and recomputes on the next read after
any of them moved.  A subscriber that reads a derived view while being
notified therefore always sees a value consistent with the mutation that
triggered it.

Usage:
    class Store:
        def __init__(self):
            self.items = ObservableList()

        @derived(lambda self: (self.items.revision,))
        def total(self):
            return len(self.items)
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Generic, Hashable, Iterable, Iterator, List, Optional, TypeVar

T = TypeVar("T")

Observer = Callable[[], None]


class Observable:
    """Revision counter with synchronous change notification."""

    def __init__(self) -> None:
        self._revision = 0
        self._observers: List[Observer] = []

    @property
    def revision(self) -> int:
        return self._revision

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register *observer*; returns a callable that unregisters it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def notify(self) -> None:
        self._revision += 1
        for observer in list(self._observers):
            observer()


class ObservableValue(Observable, Generic[T]):
    """A single observable slot.  Setting the current value again is a no-op."""

    def __init__(self, value: T) -> None:
        super().__init__()
        self._value = value

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        if value is self._value:
            return
        self._value = value
        self.notify()


class ObservableList(Observable, Generic[T]):
    """Append/remove-only list; each mutation notifies once."""

    def __init__(self, items: Optional[Iterable[T]] = None) -> None:
        super().__init__()
        self._items: List[T] = list(items or [])

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def append(self, item: T) -> None:
        self._items.append(item)
        self.notify()

    def remove(self, item: T) -> bool:
        """Remove the first occurrence of *item*; returns whether it was present."""
        if item not in self._items:
            return False
        self._items.remove(item)
        self.notify()
        return True

    def pop(self, index: int) -> T:
        item = self._items.pop(index)
        self.notify()
        return item

    def replace(self, items: Iterable[T]) -> None:
        self._items = list(items)
        self.notify()

    def snapshot(self) -> List[T]:
        return list(self._items)


def derived(key: Callable[[Any], Hashable]) -> Callable[[Callable[[Any], T]], property]:
    """Turn a method into a read-only property memoized on ``key(self)``.

    *key* must return the revisions (or other hashable state) the value
    depends on.  The cached value is reused while the key is unchanged.
    """

    def decorator(func: Callable[[Any], T]) -> property:
        slot = f"_derived_{func.__name__}"

        @functools.wraps(func)
        def getter(self: Any) -> T:
            current = key(self)
            cached = self.__dict__.get(slot)
            if cached is not None and cached[0] == current:
                return cached[1]
            value = func(self)
            self.__dict__[slot] = (current, value)
            return value

        return property(getter)

    return decorator
