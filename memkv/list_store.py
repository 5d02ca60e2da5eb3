"""
List store: ordered string lists with optional TTL.

Lists behave as FIFO queues for push/pop: push appends at the tail and pop
takes from the head.
"""

import time
from typing import Callable, List

from memkv.errors import EmptyListError
from memkv.storage_engine import TTLStore


class ListStore(TTLStore[List[str]]):
    """
    Thread-safe store of string lists.

    Example:
        >>> store = ListStore()
        >>> store.set("jobs", ["a", "b"])
        >>> store.push("jobs", "c")
        >>> store.pop("jobs")
        'a'
        >>> store.get("jobs").value
        ['b', 'c']
    """

    name = "lists"

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        super().__init__(clock)
        self._stats.extra.update(pushes=0, pops=0)

    def _own(self, value: List[str]) -> List[str]:
        # Never alias the caller's list.
        return list(value)

    def push(self, key: str, item: str) -> None:
        """
        Append item to the tail of the list under key.

        Raises:
            NotFoundError: key holds no live list (push never creates one)
        """
        with self._lock.write_lock():
            self._live_entry(key).value.append(item)
        self._count("pushes")

    def pop(self, key: str) -> str:
        """
        Remove and return the head of the list under key.

        Raises:
            NotFoundError: key holds no live list
            EmptyListError: the list has no elements
        """
        with self._lock.write_lock():
            items = self._live_entry(key).value
            if not items:
                raise EmptyListError(key)
            head = items.pop(0)
        self._count("pops")
        return head
