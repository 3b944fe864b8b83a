# src/httpwindow/inflight.py
"""Table of operations currently running on the transport."""

from __future__ import annotations

from httpwindow.errors import InFlightCapacityError, UnknownHandleError
from httpwindow.transport.base import OperationHandle


class InFlightTable:
    """Maps transport handles to the submission index of their request.

    Invariants:
    - ``len(table) <= capacity`` at all times
    - every registered handle is an operation the transport is running
    - a handle is removed as soon as its operation is reported finished

    Violations are contract errors between scheduler and transport, not
    runtime conditions, so they raise ContractViolationError subclasses.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"In-flight capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._entries: dict[OperationHandle, int] = {}
        self._peak = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def peak(self) -> int:
        """Largest size the table has reached."""
        return self._peak

    def register(self, handle: OperationHandle, request_index: int) -> None:
        """Bind a newly started operation to its request.

        Raises:
            InFlightCapacityError: If the table is full or the handle is already bound
        """
        if handle in self._entries:
            raise InFlightCapacityError(f"Handle {handle} is already in flight")
        if len(self._entries) >= self._capacity:
            raise InFlightCapacityError(
                f"In-flight table full ({self._capacity}); cannot register handle {handle}"
            )
        self._entries[handle] = request_index
        self._peak = max(self._peak, len(self._entries))

    def resolve(self, handle: OperationHandle) -> int:
        """Return the request index bound to a handle.

        Raises:
            UnknownHandleError: If the handle was never registered or already removed
        """
        try:
            return self._entries[handle]
        except KeyError:
            raise UnknownHandleError(f"Transport reported unknown handle {handle}") from None

    def remove(self, handle: OperationHandle) -> None:
        """Unbind a finished operation.

        Raises:
            UnknownHandleError: If the handle is not registered
        """
        if self._entries.pop(handle, None) is None:
            raise UnknownHandleError(f"Transport reported unknown handle {handle}")

    def pop(self, handle: OperationHandle) -> int:
        """Resolve and remove in one step."""
        index = self.resolve(handle)
        del self._entries[handle]
        return index

    def is_full(self) -> bool:
        return len(self._entries) >= self._capacity

    def is_empty(self) -> bool:
        return not self._entries

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, handle: object) -> bool:
        return handle in self._entries
