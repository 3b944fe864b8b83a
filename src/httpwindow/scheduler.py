# src/httpwindow/scheduler.py
"""Window scheduler: bounded-concurrency control loop.

Keeps at most ``window_size`` operations resident on the transport:
- Fills the window from the pending queue
- Blocks on the transport until at least one operation finishes
- Resolves each finished handle back to its request and classifies it
- Invokes the completion handler exactly once per request
- Refills one slot per finished operation while requests remain

The loop is single-threaded; concurrency comes from the transport
multiplexing outstanding operations. Handler exceptions are not isolated
and abort the run.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import Any

import structlog

from httpwindow.errors import WindowSizeError
from httpwindow.inflight import InFlightTable
from httpwindow.options import PreparedRequest
from httpwindow.queue import PendingQueue
from httpwindow.records import CompletionRecord, build_completion_record
from httpwindow.request import Request
from httpwindow.transport.base import Transport, TransportCompletion

logger = structlog.get_logger(__name__)

CompletionHandler = Callable[[bytes, CompletionRecord, Request], None]
RequestPreparer = Callable[[Request], PreparedRequest]

MIN_WINDOW_SIZE = 2


class SchedulerState(StrEnum):
    """Lifecycle of one scheduler run."""

    IDLE = "idle"
    FILLING = "filling"
    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"


def effective_window(window_size: int, request_count: int) -> int:
    """Clamp the configured window to the number of requests.

    Raises:
        WindowSizeError: If the clamped window is below MIN_WINDOW_SIZE
    """
    effective = min(window_size, request_count)
    if effective < MIN_WINDOW_SIZE:
        raise WindowSizeError(window_size, effective)
    return effective


def _record_for(completion: TransportCompletion, request: Request, index: int) -> CompletionRecord:
    return build_completion_record(
        request=request,
        request_index=index,
        body=completion.body,
        info=completion.info,
        code=completion.code,
        host_failure=completion.host_failure,
        detail=completion.detail,
    )


class WindowScheduler:
    """Drives a pending queue through a transport with a fixed window.

    Usage:
        scheduler = WindowScheduler(
            transport,
            queue,
            handler,
            window_size=5,
            poll_timeout=10.0,
            prepare=lambda request: prepare_request(request, headers, options),
        )
        scheduler.run()
        stats = scheduler.get_stats()

    The window is validated at construction, before any operation starts.
    """

    def __init__(
        self,
        transport: Transport,
        queue: PendingQueue,
        handler: CompletionHandler | None,
        *,
        window_size: int,
        poll_timeout: float,
        prepare: RequestPreparer,
    ) -> None:
        """Initialize scheduler.

        Args:
            transport: Transport that performs the operations
            queue: Requests to dispatch, consumed in FIFO order
            handler: Called once per finished request; None discards results
            window_size: Maximum operations in flight (clamped to queue length)
            poll_timeout: Seconds to block per poll before re-polling
            prepare: Resolves a Request against dispatcher defaults

        Raises:
            WindowSizeError: If the effective window is below 2
        """
        self._window_size = window_size
        self._effective_window = effective_window(window_size, len(queue))
        self._transport = transport
        self._queue = queue
        self._handler = handler
        self._poll_timeout = poll_timeout
        self._prepare = prepare
        self._table = InFlightTable(self._effective_window)
        # Requests bound to in-flight operations, by submission index
        self._resident: dict[int, Request] = {}
        self._state = SchedulerState.IDLE

        self._completed = 0
        self._failed = 0
        self._polls = 0
        self._empty_polls = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def effective_window(self) -> int:
        return self._effective_window

    @property
    def in_flight(self) -> int:
        return len(self._table)

    def get_stats(self) -> dict[str, Any]:
        """Counters for the current or last run."""
        return {
            "window_size": self._window_size,
            "effective_window": self._effective_window,
            "submitted": self._queue.submitted,
            "completed": self._completed,
            "failed": self._failed,
            "max_in_flight": self._table.peak,
            "polls": self._polls,
            "empty_polls": self._empty_polls,
        }

    def run(self) -> None:
        """Dispatch every queued request and wait for all of them.

        Raises:
            ContractViolationError: If the transport reports an unknown handle
            Exception: Whatever the completion handler raises
        """
        if self._state is not SchedulerState.IDLE:
            raise RuntimeError(f"Scheduler already ran (state={self._state})")

        self._state = SchedulerState.FILLING
        while not self._table.is_full() and not self._queue.is_empty():
            self._start_next()
        logger.debug(
            "window_filled",
            in_flight=len(self._table),
            pending=len(self._queue),
            window_size=self._effective_window,
        )

        self._state = SchedulerState.RUNNING if self._queue else SchedulerState.DRAINING
        while not self._table.is_empty():
            completions = self._transport.poll_completions(self._poll_timeout)
            self._polls += 1
            if not completions:
                # Liveness bound only; stalled transfers are the transport's concern
                self._empty_polls += 1
                logger.debug("poll_timeout_elapsed", in_flight=len(self._table), timeout=self._poll_timeout)
                continue
            for completion in completions:
                self._finish(completion)

        self._state = SchedulerState.DONE
        logger.info(
            "dispatch_complete",
            completed=self._completed,
            failed=self._failed,
            max_in_flight=self._table.peak,
        )

    def _start_next(self) -> None:
        entry = self._queue.pop_front()
        if entry is None:
            return
        index, request = entry
        handle = self._transport.start(self._prepare(request))
        self._table.register(handle, index)
        self._resident[index] = request

    def _finish(self, completion: TransportCompletion) -> None:
        index = self._table.pop(completion.handle)
        request = self._resident.pop(index)
        record = _record_for(completion, request, index)

        self._completed += 1
        if not record.success:
            self._failed += 1
            logger.info(
                "request_failed",
                url=request.url,
                request_index=index,
                outcome=record.outcome,
                error_code=record.error_code,
                error=record.error_message,
            )
        else:
            logger.debug(
                "operation_finished",
                url=request.url,
                request_index=index,
                status_code=record.status_code,
                total_time=record.info.total_time,
            )

        _deliver(self._handler, record, request)

        if not self._queue.is_empty():
            self._start_next()
        elif self._state is SchedulerState.RUNNING:
            self._state = SchedulerState.DRAINING


def _deliver(handler: CompletionHandler | None, record: CompletionRecord, request: Request) -> None:
    if handler is None:
        return
    try:
        handler(record.body, record, request)
    except Exception as e:
        logger.error(
            "completion_handler_failed",
            url=request.url,
            request_index=record.request_index,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise


def run_single(
    transport: Transport,
    request: Request,
    handler: CompletionHandler | None,
    *,
    prepare: RequestPreparer,
    request_index: int = 0,
) -> bytes | None:
    """Execute exactly one request without windowing.

    Returns:
        The raw response body when no handler is configured, otherwise None
        after the handler ran
    """
    completion = transport.perform(prepare(request))
    record = _record_for(completion, request, request_index)
    if not record.success:
        logger.info(
            "request_failed",
            url=request.url,
            request_index=request_index,
            outcome=record.outcome,
            error_code=record.error_code,
            error=record.error_message,
        )
    if handler is None:
        return record.body
    _deliver(handler, record, request)
    return None
