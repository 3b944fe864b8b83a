"""Transports: the network collaborators driven by the window scheduler."""

from httpwindow.transport.base import OperationHandle, Transport, TransportCompletion
from httpwindow.transport.httpx_transport import HttpxTransport

__all__ = [
    "HttpxTransport",
    "OperationHandle",
    "Transport",
    "TransportCompletion",
]
