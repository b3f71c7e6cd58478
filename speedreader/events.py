"""Explicit publish/subscribe handles.

A :class:`Signal` replaces free-floating listener lists: ``subscribe`` hands
back a disposer, and whoever owns the signal owns its listeners.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")

Listener = Callable[[T], None]
Disposer = Callable[[], None]


class Signal(Generic[T]):
    def __init__(self) -> None:
        self._listeners: list[Listener[T]] = []

    def subscribe(self, listener: Listener[T]) -> Disposer:
        """Register *listener*; call the returned disposer to remove it."""
        self._listeners.append(listener)

        def dispose() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass  # already disposed

        return dispose

    def emit(self, value: T) -> None:
        # Snapshot so listeners may dispose themselves mid-emit.
        for listener in list(self._listeners):
            listener(value)

    def __len__(self) -> int:
        return len(self._listeners)


class Observable(Generic[T]):
    """A value that notifies subscribers when it changes."""

    def __init__(self, value: T) -> None:
        self._value = value
        self.changed: Signal[T] = Signal()

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        if value == self._value:
            return
        self._value = value
        self.changed.emit(value)

    def subscribe(self, listener: Listener[T]) -> Disposer:
        return self.changed.subscribe(listener)
