# src/httpwindow/errors.py
"""Exception taxonomy for httpwindow.

Per-request transport failures are never raised; they are reported through
the CompletionRecord. The exceptions here cover the conditions that stop a
run: bad configuration (raised before any operation starts) and contract
violations between the scheduler and its transport (bugs, never caught).
"""

from __future__ import annotations


class HttpwindowError(Exception):
    """Base class for all httpwindow errors."""


class ConfigurationError(HttpwindowError, ValueError):
    """Invalid dispatcher or request configuration."""


class WindowSizeError(ConfigurationError):
    """Effective window is too small for the multi-request path.

    Attributes:
        window_size: Window size requested by the caller
        effective_window: Window after clamping to the number of requests
    """

    def __init__(self, window_size: int, effective_window: int) -> None:
        super().__init__(
            f"Window size must be greater than 1 (configured={window_size}, effective={effective_window})"
        )
        self.window_size = window_size
        self.effective_window = effective_window


class DuplicateRequestError(HttpwindowError, ValueError):
    """The same Request object was submitted twice into one queue."""


class ContractViolationError(HttpwindowError, RuntimeError):
    """The scheduler and transport disagree about in-flight operations."""


class InFlightCapacityError(ContractViolationError):
    """Registration attempted on a full in-flight table, or a handle reused."""


class UnknownHandleError(ContractViolationError, KeyError):
    """A transport handle was resolved that was never registered."""

    def __str__(self) -> str:
        # KeyError.__str__ quotes the message
        return str(self.args[0]) if self.args else ""
