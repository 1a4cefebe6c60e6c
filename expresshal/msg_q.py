"""A blocking FIFO message queue that can be unblocked to release waiters."""

from __future__ import annotations

import enum
import logging
import threading
from typing import Any, Callable, Optional

from expresshal.linked_list import LinkedList, LinkedListError, LinkedListStatus

logger = logging.getLogger(__name__)

Dealloc = Optional[Callable[[Any], None]]


class MsgQStatus(enum.IntEnum):
    """Result codes of message queue operations."""

    SUCCESS = 0
    FAILURE_GENERAL = -1
    INVALID_PARAMETER = -2
    INVALID_HANDLE = -3
    UNAVAILABLE_RESOURCE = -4
    INSUFFICIENT_BUFFER = -5


_LIST_TO_QUEUE = {
    LinkedListStatus.SUCCESS: MsgQStatus.SUCCESS,
    LinkedListStatus.INVALID_PARAMETER: MsgQStatus.INVALID_PARAMETER,
    LinkedListStatus.INVALID_HANDLE: MsgQStatus.INVALID_HANDLE,
    LinkedListStatus.UNAVAILABLE_RESOURCE: MsgQStatus.UNAVAILABLE_RESOURCE,
    LinkedListStatus.INSUFFICIENT_BUFFER: MsgQStatus.INSUFFICIENT_BUFFER,
    LinkedListStatus.FAILURE_GENERAL: MsgQStatus.FAILURE_GENERAL,
}


def status_from_list_status(status: Any) -> MsgQStatus:
    """Map a list status to the matching queue status; unknown ones are general failures."""
    try:
        return _LIST_TO_QUEUE[LinkedListStatus(status)]
    except (ValueError, KeyError):
        return MsgQStatus.FAILURE_GENERAL


class MsgQueueError(Exception):
    """A queue operation failed; ``status`` tells why."""

    def __init__(self, status: MsgQStatus, message: str = "") -> None:
        super().__init__(message or status.name)
        self.status = status


class QueueUnblockedError(MsgQueueError):
    """The queue has been unblocked and can no longer be used."""

    def __init__(self, message: str = "message queue has been unblocked") -> None:
        super().__init__(MsgQStatus.UNAVAILABLE_RESOURCE, message)


class MessageQueue:
    """Thread-safe FIFO queue; ``receive`` blocks until a message arrives
    or the queue is unblocked."""

    def __init__(self) -> None:
        self._list = LinkedList()
        self._cond = threading.Condition()
        self._unblocked = False

    def send(self, msg: Any, dealloc: Dealloc = None) -> None:
        """Put ``msg`` on the queue and wake one waiting receiver.

        ``dealloc`` is run on the message if the queue is flushed.
        """
        if msg is None:
            logger.error("send: invalid msg_obj parameter")
            raise MsgQueueError(MsgQStatus.INVALID_PARAMETER, "message must not be None")
        with self._cond:
            if self._unblocked:
                logger.error("send: message queue has been unblocked")
                raise QueueUnblockedError()
            try:
                self._list.add(msg, dealloc)
            except LinkedListError as exc:
                raise MsgQueueError(status_from_list_status(exc.status), str(exc)) from exc
            finally:
                self._cond.notify()

    def receive(self) -> Any:
        """Take the oldest message, waiting for one if the queue is empty.

        Raises QueueUnblockedError if the queue is or becomes unblocked
        while nothing is waiting to be received.
        """
        with self._cond:
            if self._unblocked:
                logger.error("receive: message queue has been unblocked")
                raise QueueUnblockedError()
            while self._list.is_empty() and not self._unblocked:
                self._cond.wait()
            try:
                return self._list.remove()
            except LinkedListError as exc:
                status = status_from_list_status(exc.status)
                if status is MsgQStatus.UNAVAILABLE_RESOURCE:
                    raise QueueUnblockedError() from exc
                raise MsgQueueError(status, str(exc)) from exc

    def flush(self) -> None:
        """Drop every queued message, running each one's dealloc."""
        with self._cond:
            self._list.flush()

    def unblock(self) -> None:
        """Stop the queue for good and wake every waiting receiver."""
        with self._cond:
            if self._unblocked:
                logger.error("unblock: message queue has been unblocked")
                raise QueueUnblockedError()
            self._unblocked = True
            self._cond.notify_all()