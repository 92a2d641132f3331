from __future__ import annotations

from typing import Callable

FragmentListener = Callable[[str], object]


class FragmentHistory:
    """
    In-memory stand-in for ``location.hash`` plus the history stack.

    Listeners fire like ``hashchange``: only when the current fragment
    actually changes, and never twice for the same subscriber.
    """

    def __init__(self, initial: str = "") -> None:
        self._entries: list[str] = [initial]
        self._index = 0
        self._listeners: list[FragmentListener] = []

    @property
    def current(self) -> str:
        return self._entries[self._index]

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def subscribe(self, listener: FragmentListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: FragmentListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def push(self, fragment: str) -> bool:
        """Navigate to *fragment*, dropping any forward entries."""
        if fragment == self.current:
            return False
        del self._entries[self._index + 1:]
        self._entries.append(fragment)
        self._index += 1
        self._notify()
        return True

    def replace(self, fragment: str) -> bool:
        if fragment == self.current:
            return False
        self._entries[self._index] = fragment
        self._notify()
        return True

    def back(self) -> bool:
        if self._index == 0:
            return False
        self._index -= 1
        self._notify()
        return True

    def forward(self) -> bool:
        if self._index >= len(self._entries) - 1:
            return False
        self._index += 1
        self._notify()
        return True

    def _notify(self) -> None:
        fragment = self.current
        for listener in list(self._listeners):
            listener(fragment)
