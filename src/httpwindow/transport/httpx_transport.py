# src/httpwindow/transport/httpx_transport.py
"""httpx-backed transport.

Operations run on a thread pool sized to the dispatch window; the polling
primitive is ``concurrent.futures.wait(..., return_when=FIRST_COMPLETED)``.
httpx exceptions are translated into TransportErrorCode values inside the
worker, so a finished future always carries a completion. Any other
exception raised in a worker is a bug and propagates out of
``poll_completions``.
"""

from __future__ import annotations

import itertools
import time
from collections.abc import Mapping
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

import httpx
import structlog

from httpwindow.classify import TransportErrorCode
from httpwindow.options import PreparedRequest, TransportOptions
from httpwindow.records import HostFailure, TransferInfo
from httpwindow.transport.base import OperationHandle, TransportCompletion

logger = structlog.get_logger(__name__)

# Substrings of resolver errors across glibc, musl, macOS and Windows.
_RESOLVE_MARKERS: tuple[str, ...] = (
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "no address associated with hostname",
    "getaddrinfo failed",
    "name resolution",
)

_SSL_MARKERS: tuple[str, ...] = ("ssl", "tls", "certificate")

# Checked in order; subclasses must precede their bases.
_EXCEPTION_CODES: tuple[tuple[type[Exception], TransportErrorCode], ...] = (
    (httpx.UnsupportedProtocol, TransportErrorCode.UNSUPPORTED_PROTOCOL),
    (httpx.ProxyError, TransportErrorCode.COULDNT_RESOLVE_PROXY),
    (httpx.TimeoutException, TransportErrorCode.OPERATION_TIMEDOUT),
    (httpx.TooManyRedirects, TransportErrorCode.TOO_MANY_REDIRECTS),
    (httpx.DecodingError, TransportErrorCode.BAD_CONTENT_ENCODING),
    (httpx.RemoteProtocolError, TransportErrorCode.GOT_NOTHING),
    (httpx.LocalProtocolError, TransportErrorCode.SEND_ERROR),
    (httpx.WriteError, TransportErrorCode.SEND_ERROR),
    (httpx.ReadError, TransportErrorCode.RECV_ERROR),
    (httpx.InvalidURL, TransportErrorCode.URL_MALFORMAT),
)

# Not a TransportErrorCode member; classifies as UNKNOWN_TRANSPORT_ERROR.
_UNMAPPED_ERROR_CODE = -1


@dataclass(frozen=True, slots=True)
class _Outcome:
    body: bytes
    info: TransferInfo | None
    code: int
    host_failure: HostFailure | None = None
    detail: str = ""


def classify_connect_error(exc: httpx.ConnectError) -> tuple[int, HostFailure | None]:
    """Split httpx.ConnectError into resolve, TLS and plain connect failures."""
    message = str(exc).lower()
    if any(marker in message for marker in _RESOLVE_MARKERS):
        return TransportErrorCode.COULDNT_RESOLVE_HOST, HostFailure.RESOLVE
    if any(marker in message for marker in _SSL_MARKERS):
        if "certificate" in message:
            return TransportErrorCode.SSL_CACERT, None
        return TransportErrorCode.SSL_CONNECT_ERROR, None
    return TransportErrorCode.COULDNT_CONNECT, HostFailure.CONNECT


def exception_code(exc: Exception) -> tuple[int, HostFailure | None]:
    """Map an httpx exception to a transport outcome code."""
    if isinstance(exc, httpx.ConnectError):
        return classify_connect_error(exc)
    for exc_type, code in _EXCEPTION_CODES:
        if isinstance(exc, exc_type):
            return code, None
    return _UNMAPPED_ERROR_CODE, None


def _body_kwargs(body: Any) -> dict[str, Any]:
    if body is None:
        return {}
    if isinstance(body, Mapping):
        return {"data": dict(body)}
    return {"content": body}


class HttpxTransport:
    """Transport running each operation through a shared ``httpx.Client``.

    Clients are cached per (verify, max_redirects) pair because httpx fixes
    those at client construction; timeouts and redirect following are set per
    request.

    Example:
        transport = HttpxTransport(max_workers=5)
        handle = transport.start(prepared)
        for completion in transport.poll_completions(timeout=10.0):
            ...
        transport.shutdown()
    """

    def __init__(
        self,
        max_workers: int,
        *,
        http_transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize transport.

        Args:
            max_workers: Thread pool size; should equal the dispatch window
            http_transport: Optional httpx transport for every client
                (e.g. ``httpx.MockTransport`` in tests)
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="httpwindow")
        self._http_transport = http_transport
        self._clients: dict[tuple[bool, int], httpx.Client] = {}
        self._futures: dict[Future[_Outcome], OperationHandle] = {}
        self._tokens = itertools.count(1)
        self._closed = False

    @property
    def outstanding(self) -> int:
        """Operations started and not yet reported."""
        return len(self._futures)

    def _client_for(self, options: TransportOptions) -> httpx.Client:
        key = (options.verify, options.max_redirects)
        client = self._clients.get(key)
        if client is None:
            client = httpx.Client(
                verify=options.verify,
                max_redirects=options.max_redirects,
                transport=self._http_transport,
            )
            self._clients[key] = client
        return client

    def _next_handle(self) -> OperationHandle:
        return OperationHandle(next(self._tokens))

    def start(self, request: PreparedRequest) -> OperationHandle:
        if self._closed:
            raise RuntimeError("Transport has been shut down")
        client = self._client_for(request.options)
        handle = self._next_handle()
        future = self._executor.submit(self._run, client, request)
        self._futures[future] = handle
        logger.debug("operation_started", handle=str(handle), method=request.method, url=request.url)
        return handle

    def poll_completions(self, timeout: float) -> list[TransportCompletion]:
        if not self._futures:
            return []
        done, _ = wait(list(self._futures), timeout=timeout, return_when=FIRST_COMPLETED)
        completions: list[TransportCompletion] = []
        for future in done:
            handle = self._futures.pop(future)
            # Worker bugs re-raise here and abort the run
            outcome = future.result()
            completions.append(_to_completion(handle, outcome))
        return completions

    def perform(self, request: PreparedRequest) -> TransportCompletion:
        if self._closed:
            raise RuntimeError("Transport has been shut down")
        handle = self._next_handle()
        return _to_completion(handle, self._run(self._client_for(request.options), request))

    def cancel(self, handle: OperationHandle) -> None:
        for future, registered in list(self._futures.items()):
            if registered == handle:
                future.cancel()
                del self._futures[future]
                return

    def shutdown(self) -> None:
        """Cancel queued work, wait for running transfers, close clients."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=True, cancel_futures=True)
        self._futures.clear()
        for client in self._clients.values():
            client.close()
        self._clients.clear()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def _run(self, client: httpx.Client, request: PreparedRequest) -> _Outcome:
        """Perform one transfer; httpx failures become outcome codes."""
        options = request.options
        start = time.perf_counter()
        # httpx timeouts bound each read, not the whole transfer
        deadline = start + options.timeout
        try:
            with client.stream(
                request.method,
                request.url,
                headers=list(request.headers),
                timeout=httpx.Timeout(options.timeout, connect=options.connect_timeout),
                follow_redirects=options.follow_redirects,
                **_body_kwargs(request.body),
            ) as response:
                body, truncated = _read_body(response, options.max_response_bytes, deadline)
                elapsed = time.perf_counter() - start
                info = TransferInfo(
                    url=request.url,
                    effective_url=str(response.url),
                    method=request.method,
                    status_code=response.status_code,
                    content_type=response.headers.get("content-type", "").lower(),
                    headers=MappingProxyType(dict(response.headers)),
                    size_download=len(body),
                    total_time=elapsed,
                    redirect_count=len(response.history),
                    http_version=response.http_version,
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            code, host_failure = exception_code(e)
            logger.debug(
                "operation_transport_error",
                url=request.url,
                error=str(e),
                error_type=type(e).__name__,
                code=code,
            )
            info = TransferInfo(
                url=request.url,
                effective_url=request.url,
                method=request.method,
                total_time=time.perf_counter() - start,
            )
            return _Outcome(b"", info, code, host_failure, f"{type(e).__name__}: {e}")

        if truncated:
            return _Outcome(
                body,
                info,
                TransportErrorCode.FILESIZE_EXCEEDED,
                detail=f"Response exceeds {options.max_response_bytes} bytes",
            )
        if options.fail_on_http_error and response.status_code >= 400:
            return _Outcome(body, info, TransportErrorCode.HTTP_RETURNED_ERROR, detail=f"HTTP {response.status_code}")
        return _Outcome(body, info, TransportErrorCode.OK)


def _read_body(response: httpx.Response, limit: int | None, deadline: float) -> tuple[bytes, bool]:
    """Read a streamed body, stopping once ``limit`` bytes are exceeded.

    Raises:
        httpx.ReadTimeout: If the body is still arriving at ``deadline``
            (a ``time.perf_counter()`` value)
    """
    if limit is not None:
        declared = response.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > limit:
            return b"", True

    chunks: list[bytes] = []
    size = 0
    for chunk in response.iter_bytes():
        if time.perf_counter() > deadline:
            raise httpx.ReadTimeout("Transfer exceeded total timeout", request=response.request)
        chunks.append(chunk)
        size += len(chunk)
        if limit is not None and size > limit:
            return b"".join(chunks)[:limit], True
    return b"".join(chunks), False


def _to_completion(handle: OperationHandle, outcome: _Outcome) -> TransportCompletion:
    return TransportCompletion(
        handle=handle,
        body=outcome.body,
        info=outcome.info,
        code=int(outcome.code),
        host_failure=outcome.host_failure,
        detail=outcome.detail,
    )
