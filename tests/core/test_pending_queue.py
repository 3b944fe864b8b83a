"""Tests for PendingQueue."""

import gc
import weakref

import pytest

from httpwindow.errors import DuplicateRequestError
from httpwindow.queue import PendingQueue
from httpwindow.request import Request


class TestPendingQueue:
    def test_fifo_order_with_submission_indices(self) -> None:
        queue = PendingQueue()
        requests = [Request(f"https://example.com/{i}") for i in range(3)]

        indices = [queue.push(request) for request in requests]

        assert indices == [0, 1, 2]
        assert [queue.pop_front() for _ in range(3)] == list(enumerate(requests))

    def test_pop_from_empty_returns_none(self) -> None:
        assert PendingQueue().pop_front() is None

    def test_len_and_is_empty(self) -> None:
        queue = PendingQueue()
        assert queue.is_empty()
        assert len(queue) == 0

        queue.push(Request("https://example.com/"))

        assert not queue.is_empty()
        assert len(queue) == 1

    def test_same_object_rejected_twice(self) -> None:
        queue = PendingQueue()
        request = Request("https://example.com/")
        queue.push(request)

        with pytest.raises(DuplicateRequestError):
            queue.push(request)

    def test_equal_but_distinct_requests_accepted(self) -> None:
        queue = PendingQueue()
        queue.push(Request("https://example.com/"))
        queue.push(Request("https://example.com/"))

        assert len(queue) == 2

    def test_popped_request_not_requeued(self) -> None:
        """A dequeued request cannot come back, even after popping."""
        queue = PendingQueue()
        request = Request("https://example.com/")
        queue.push(request)
        queue.pop_front()

        with pytest.raises(DuplicateRequestError):
            queue.push(request)

    def test_released_request_not_kept_alive(self) -> None:
        """Once popped and dropped by the caller, the queue holds no reference."""
        queue = PendingQueue()
        queue.push(Request("https://example.com/"))
        entry = queue.pop_front()
        assert entry is not None
        ref = weakref.ref(entry[1])

        del entry
        gc.collect()

        assert ref() is None

    def test_submitted_counts_all_pushes(self) -> None:
        queue = PendingQueue()
        for i in range(4):
            queue.push(Request(f"https://example.com/{i}"))
        queue.pop_front()

        assert queue.submitted == 4
        assert len(queue) == 3
