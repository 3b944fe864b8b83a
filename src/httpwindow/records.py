# src/httpwindow/records.py
"""Transfer metadata and completion records."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType

from httpwindow.classify import TransportErrorCode, classify_outcome, is_success
from httpwindow.request import Request

OUTCOME_SUCCESS = "OK"


class HostFailure(StrEnum):
    """Why a transport could not reach the remote host at all."""

    RESOLVE = "resolve"
    CONNECT = "connect"


@dataclass(frozen=True, slots=True)
class TransferInfo:
    """Facts the transport reports about one finished transfer.

    Attributes:
        url: URL the operation was started with
        effective_url: Final URL after redirects
        method: HTTP verb sent
        status_code: HTTP status, 0 when no response was received
        content_type: Response Content-Type, lower-cased
        headers: Response headers
        size_download: Body size in bytes
        total_time: Wall-clock seconds from start to finish
        redirect_count: Number of redirects followed
        http_version: Protocol version string, e.g. "HTTP/1.1"
    """

    url: str
    effective_url: str
    method: str
    status_code: int = 0
    content_type: str = ""
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    size_download: int = 0
    total_time: float = 0.0
    redirect_count: int = 0
    http_version: str = ""


@dataclass(frozen=True, slots=True)
class CompletionRecord:
    """Outcome of one finished operation, handed to the completion handler.

    ``outcome`` is ``"OK"`` on success, otherwise the classified failure name.
    ``error_code`` and ``error_message`` are None/empty on success.
    """

    body: bytes
    info: TransferInfo
    outcome: str
    error_code: int | None = None
    error_message: str = ""
    request_index: int = 0

    @property
    def success(self) -> bool:
        return self.error_code is None

    @property
    def status_code(self) -> int:
        return self.info.status_code

    @property
    def text(self) -> str:
        """Body decoded as UTF-8, undecodable bytes replaced."""
        return self.body.decode("utf-8", errors="replace")


def build_completion_record(
    *,
    request: Request,
    request_index: int,
    body: bytes,
    info: TransferInfo | None,
    code: int,
    host_failure: HostFailure | None = None,
    detail: str = "",
) -> CompletionRecord:
    """Classify one finished operation into a CompletionRecord.

    Host resolution and connection failures take precedence over the
    transport's own code. Otherwise the code goes through the classifier;
    the success code yields empty error fields.

    Args:
        request: Request the operation was started for
        request_index: Submission index of the request
        body: Response body (possibly empty)
        info: Transfer metadata, None when the transport produced none
        code: Transport outcome code
        host_failure: Set when the host could not be reached
        detail: Transport-provided error text, appended to the message
    """
    if info is None:
        info = TransferInfo(url=request.url, effective_url=request.url, method=request.method)

    if host_failure is HostFailure.RESOLVE:
        code = TransportErrorCode.COULDNT_RESOLVE_HOST
    elif host_failure is HostFailure.CONNECT:
        code = TransportErrorCode.COULDNT_CONNECT

    if is_success(code):
        return CompletionRecord(
            body=body,
            info=info,
            outcome=OUTCOME_SUCCESS,
            request_index=request_index,
        )

    name = classify_outcome(code)
    return CompletionRecord(
        body=body,
        info=info,
        outcome=name,
        error_code=int(code),
        error_message=f"{name}: {detail}" if detail else name,
        request_index=request_index,
    )
