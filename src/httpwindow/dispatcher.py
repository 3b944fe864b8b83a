# src/httpwindow/dispatcher.py
"""Rolling dispatcher: the submission API.

Collects requests, then runs them through either the single-shot path (one
request) or the window scheduler (two or more).

Example:
    def on_complete(body: bytes, record: CompletionRecord, request: Request) -> None:
        print(request.url, record.outcome, record.status_code)

    dispatcher = RollingDispatcher(DispatcherSettings(window_size=10), handler=on_complete)
    for url in urls:
        dispatcher.get(url)
    dispatcher.execute()
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import structlog

from httpwindow.config import DispatcherSettings
from httpwindow.options import PreparedRequest, merge_options, prepare_request
from httpwindow.queue import PendingQueue
from httpwindow.request import HeadersInput, HttpMethod, Request, RequestBody, normalize_headers
from httpwindow.scheduler import CompletionHandler, WindowScheduler, effective_window, run_single
from httpwindow.transport.base import Transport
from httpwindow.transport.httpx_transport import HttpxTransport

logger = structlog.get_logger(__name__)

TransportFactory = Callable[[int], Transport]


class RollingDispatcher:
    """Runs queued HTTP requests with a bounded number in flight.

    Defaults (headers and transport options) are fixed at construction;
    per-request values override them. Each ``execute()`` consumes the queue,
    so requests added afterwards form a new run.
    """

    def __init__(
        self,
        settings: DispatcherSettings | None = None,
        *,
        handler: CompletionHandler | None = None,
        transport_factory: TransportFactory | None = None,
    ) -> None:
        """Initialize dispatcher.

        Args:
            settings: Window, timeout and default settings (defaults if None)
            handler: Called as ``handler(body, record, request)`` once per finished request
            transport_factory: Builds a transport for a given worker count;
                defaults to HttpxTransport. The dispatcher shuts down every
                transport it builds.
        """
        self._settings = settings or DispatcherSettings()
        self._handler = handler
        self._transport_factory: TransportFactory = transport_factory or HttpxTransport
        self._default_headers = self._settings.header_pairs
        self._queue = PendingQueue()
        self._last_stats: dict[str, Any] = {}

    @property
    def settings(self) -> DispatcherSettings:
        return self._settings

    @property
    def pending(self) -> int:
        """Requests queued for the next execute()."""
        return len(self._queue)

    @property
    def last_stats(self) -> dict[str, Any]:
        """Scheduler statistics from the most recent multi-request run."""
        return dict(self._last_stats)

    def add(self, request: Request) -> int:
        """Queue a prebuilt request and return its submission index.

        Raises:
            ConfigurationError: If the request's option overrides are invalid
            DuplicateRequestError: If this request object is already queued
        """
        # Reject bad overrides now rather than mid-run
        merge_options(self._settings.default_options, request.options)
        return self._queue.push(request)

    def request(
        self,
        url: str,
        method: str = HttpMethod.GET,
        body: RequestBody | None = None,
        headers: HeadersInput | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> int:
        """Build a request and queue it."""
        return self.add(Request(url, method, body, normalize_headers(headers), options or {}))

    def get(
        self,
        url: str,
        headers: HeadersInput | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> int:
        """Queue a GET request."""
        return self.add(Request.get(url, headers, options))

    def post(
        self,
        url: str,
        body: RequestBody | None = None,
        headers: HeadersInput | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> int:
        """Queue a POST request."""
        return self.add(Request.post(url, body, headers, options))

    def _prepare(self, request: Request) -> PreparedRequest:
        return prepare_request(request, self._default_headers, self._settings.default_options)

    def execute(self, window_size: int | None = None) -> bytes | None:
        """Run every queued request to completion.

        Args:
            window_size: Override the configured window for this run

        Returns:
            The response body when exactly one request was queued and no
            handler is configured; otherwise None. Per-request failures are
            reported only through the completion records.

        Raises:
            WindowSizeError: If two or more requests are queued and the
                effective window is below 2; nothing is started
            Exception: Whatever the completion handler raises
        """
        count = len(self._queue)
        size = window_size if window_size is not None else self._settings.window_size
        workers = 1
        if count > 1:
            # Validate before the transport exists; the queue is kept on failure
            workers = effective_window(size, count)

        queue, self._queue = self._queue, PendingQueue()
        if count == 0:
            logger.debug("dispatch_skipped_empty_queue")
            return None

        if count == 1:
            entry = queue.pop_front()
            if entry is None:
                return None
            index, request = entry
            transport = self._transport_factory(1)
            try:
                return run_single(transport, request, self._handler, prepare=self._prepare, request_index=index)
            finally:
                transport.shutdown()

        transport = self._transport_factory(workers)
        scheduler = WindowScheduler(
            transport,
            queue,
            self._handler,
            window_size=size,
            poll_timeout=self._settings.poll_timeout,
            prepare=self._prepare,
        )
        logger.info("dispatch_started", requests=count, window_size=workers)
        try:
            scheduler.run()
        finally:
            transport.shutdown()
            self._last_stats = scheduler.get_stats()
        return None
