# src/httpwindow/request.py
"""Request value type.

A Request describes one desired call. It is immutable after construction;
the scheduler only moves it between containers (pending queue, in-flight
table) and hands it back to the completion handler untouched.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any

HeaderPairs = tuple[tuple[str, str], ...]
HeadersInput = Mapping[str, str] | Iterable[str] | Iterable[tuple[str, str]]
RequestBody = str | bytes | Mapping[str, Any]


class HttpMethod(StrEnum):
    """Common HTTP verbs. Any other verb string is accepted as-is."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


def normalize_headers(headers: HeadersInput | None) -> HeaderPairs:
    """Convert any accepted header form into ordered name/value pairs.

    Accepts a mapping, an iterable of ``(name, value)`` pairs, or an iterable
    of curl-style ``"Name: value"`` strings.

    Raises:
        ValueError: If a header string has no ``:`` separator or a name is empty
    """
    if headers is None:
        return ()
    items: Iterable[Any] = headers.items() if isinstance(headers, Mapping) else headers

    pairs: list[tuple[str, str]] = []
    for item in items:
        if isinstance(item, str):
            name, sep, value = item.partition(":")
            if not sep:
                raise ValueError(f"Header line must be 'Name: value', got {item!r}")
        else:
            name, value = item
        name = name.strip()
        if not name:
            raise ValueError("Header name must not be empty")
        pairs.append((name, str(value).strip()))
    return tuple(pairs)


@dataclass(frozen=True, slots=True, eq=False, weakref_slot=True)
class Request:
    """One HTTP call to be dispatched.

    Requests compare and hash by identity: two calls with the same fields are
    still two requests.

    Attributes:
        url: Absolute URL to call
        method: HTTP verb, upper-cased on construction
        body: Payload; mappings are form-encoded, str/bytes sent raw
        headers: Ordered name/value pairs overriding dispatcher defaults
        options: Transport setting overrides (see TransportOptions); request wins
    """

    url: str
    method: str = HttpMethod.GET
    body: RequestBody | None = None
    headers: HeaderPairs = ()
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("Request url must not be empty")
        if not self.method:
            raise ValueError("Request method must not be empty")
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "method", str(self.method).upper())
        object.__setattr__(self, "headers", normalize_headers(self.headers))
        object.__setattr__(self, "options", MappingProxyType(dict(self.options or {})))
        if isinstance(self.body, Mapping):
            object.__setattr__(self, "body", MappingProxyType(dict(self.body)))

    @property
    def has_body(self) -> bool:
        return self.body is not None

    @classmethod
    def get(
        cls,
        url: str,
        headers: HeadersInput | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> Request:
        """Build a GET request."""
        return cls(url, HttpMethod.GET, None, normalize_headers(headers), options or {})

    @classmethod
    def post(
        cls,
        url: str,
        body: RequestBody | None = None,
        headers: HeadersInput | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> Request:
        """Build a POST request."""
        return cls(url, HttpMethod.POST, body, normalize_headers(headers), options or {})
