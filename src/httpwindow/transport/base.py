# src/httpwindow/transport/base.py
"""Transport contract used by the scheduler.

A transport performs the network I/O for individual requests and
multiplexes many outstanding operations behind one polling call. The
scheduler never touches the wire; it only starts operations, polls for
completions and shuts the transport down.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from httpwindow.options import PreparedRequest
from httpwindow.records import HostFailure, TransferInfo


@dataclass(frozen=True, slots=True, order=True)
class OperationHandle:
    """Opaque token issued by a transport for one started operation.

    Compared and hashed by token, never by request content.
    """

    token: int

    def __str__(self) -> str:
        return f"op-{self.token}"


@dataclass(frozen=True, slots=True)
class TransportCompletion:
    """One finished operation as reported by ``poll_completions``.

    Attributes:
        handle: Handle returned by ``start``
        body: Response body (empty when nothing was received)
        info: Transfer metadata, None when the transport produced none
        code: TransportErrorCode value, 0 on success
        host_failure: Set when the host could not be resolved or reached
        detail: Human-readable error detail from the underlying client
    """

    handle: OperationHandle
    body: bytes
    info: TransferInfo | None
    code: int
    host_failure: HostFailure | None = None
    detail: str = ""


@runtime_checkable
class Transport(Protocol):
    """Network collaborator driven by the window scheduler."""

    def start(self, request: PreparedRequest) -> OperationHandle:
        """Begin one operation without waiting for it."""
        ...

    def poll_completions(self, timeout: float) -> list[TransportCompletion]:
        """Block until at least one operation finished or ``timeout`` elapsed.

        Returns an empty list on timeout. Each handle is reported exactly once.
        """
        ...

    def perform(self, request: PreparedRequest) -> TransportCompletion:
        """Run one operation to completion on the calling thread."""
        ...

    def cancel(self, handle: OperationHandle) -> None:
        """Abandon an operation if it has not finished."""
        ...

    def shutdown(self) -> None:
        """Release connections and worker resources."""
        ...
