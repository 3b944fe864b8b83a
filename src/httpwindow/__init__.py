"""
httpwindow: bounded-concurrency HTTP request dispatching.

Runs an ordered collection of requests against a transport while keeping at
most ``window_size`` of them in flight, delivering each outcome to a
completion handler as soon as it is known.
"""

from httpwindow.classify import TransportErrorCode, classify_outcome
from httpwindow.dispatcher import RollingDispatcher
from httpwindow.errors import (
    ConfigurationError,
    ContractViolationError,
    DuplicateRequestError,
    HttpwindowError,
    InFlightCapacityError,
    UnknownHandleError,
    WindowSizeError,
)
from httpwindow.records import CompletionRecord, TransferInfo
from httpwindow.request import HttpMethod, Request

__version__ = "0.1.0"

__all__ = [
    "CompletionRecord",
    "ConfigurationError",
    "ContractViolationError",
    "DuplicateRequestError",
    "HttpMethod",
    "HttpwindowError",
    "InFlightCapacityError",
    "Request",
    "RollingDispatcher",
    "TransferInfo",
    "TransportErrorCode",
    "UnknownHandleError",
    "WindowSizeError",
    "__version__",
    "classify_outcome",
]
