"""A doubly ended list: items are added at the head and removed from the tail."""

from __future__ import annotations

import enum
import logging
from collections import deque
from typing import Any, Callable, Deque, Optional, Tuple

logger = logging.getLogger(__name__)

Dealloc = Optional[Callable[[Any], None]]


class LinkedListStatus(enum.IntEnum):
    """Result codes of list operations."""

    SUCCESS = 0
    FAILURE_GENERAL = -1
    INVALID_PARAMETER = -2
    INVALID_HANDLE = -3
    UNAVAILABLE_RESOURCE = -4
    INSUFFICIENT_BUFFER = -5


class LinkedListError(Exception):
    """A list operation failed; ``status`` tells why."""

    def __init__(self, status: LinkedListStatus, message: str = "") -> None:
        super().__init__(message or status.name)
        self.status = status


class ListEmptyError(LinkedListError):
    """The list holds no elements."""

    def __init__(self, message: str = "list is empty") -> None:
        super().__init__(LinkedListStatus.UNAVAILABLE_RESOURCE, message)


class LinkedList:
    """Queue of objects: ``add`` puts at the head, ``remove`` takes from the tail.

    Each element may carry a dealloc callable, run on the element's data
    when the list is flushed.
    """

    def __init__(self) -> None:
        self._items: Deque[Tuple[Any, Dealloc]] = deque()

    def add(self, data: Any, dealloc: Dealloc = None) -> None:
        """Add ``data`` at the head of the list."""
        if data is None:
            logger.error("add: invalid input parameter")
            raise LinkedListError(
                LinkedListStatus.INVALID_PARAMETER, "data must not be None"
            )
        self._items.appendleft((data, dealloc))

    def remove(self) -> Any:
        """Remove and return the element at the tail (the oldest one)."""
        if not self._items:
            raise ListEmptyError()
        data, _ = self._items.pop()
        return data

    def is_empty(self) -> bool:
        """Whether the list holds no elements."""
        return not self._items

    def flush(self) -> None:
        """Remove every element, head first, running each one's dealloc."""
        while self._items:
            data, dealloc = self._items.popleft()
            if dealloc is not None:
                dealloc(data)

    def search(
        self,
        key: Any,
        equal: Callable[[Any, Any], bool],
        remove_if_found: bool = False,
    ) -> Any:
        """Return the first element from the head for which ``equal(key, data)``
        holds, or None if there is none.

        With ``remove_if_found`` the match is taken out of the list; its data
        is handed back to the caller and not deallocated.
        """
        if equal is None:
            logger.error("search: invalid list parameter")
            raise LinkedListError(
                LinkedListStatus.INVALID_HANDLE, "equal must be callable"
            )
        if not self._items:
            raise ListEmptyError()
        for position, (data, _) in enumerate(self._items):
            if equal(key, data):
                if remove_if_found:
                    del self._items[position]
                return data
        return None

    def __len__(self) -> int:
        return len(self._items)