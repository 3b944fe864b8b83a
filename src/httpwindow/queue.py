# src/httpwindow/queue.py
"""FIFO queue of requests that have not been started yet."""

from __future__ import annotations

import weakref
from collections import deque

from httpwindow.errors import DuplicateRequestError
from httpwindow.request import Request


class PendingQueue:
    """Ordered, not-yet-started requests in submission order.

    Each pushed request is assigned its submission index, which the
    in-flight table later uses to map a transport handle back to it. A
    request object may be pushed only once; popped requests are never
    re-queued. Pushed requests are tracked weakly, so a request is released
    once its caller and the scheduler drop it.
    """

    def __init__(self) -> None:
        self._entries: deque[tuple[int, Request]] = deque()
        self._seen: weakref.WeakSet[Request] = weakref.WeakSet()
        self._next_index = 0

    def push(self, request: Request) -> int:
        """Append a request and return its submission index.

        Raises:
            DuplicateRequestError: If this exact object was already pushed
        """
        if request in self._seen:
            raise DuplicateRequestError(f"Request for {request.url} was already submitted")
        self._seen.add(request)
        index = self._next_index
        self._entries.append((index, request))
        self._next_index += 1
        return index

    def pop_front(self) -> tuple[int, Request] | None:
        """Remove and return ``(index, request)`` at the head, or None when empty."""
        if not self._entries:
            return None
        return self._entries.popleft()

    def is_empty(self) -> bool:
        return not self._entries

    @property
    def submitted(self) -> int:
        """Total requests ever pushed."""
        return self._next_index

    def __len__(self) -> int:
        return len(self._entries)
