# src/httpwindow/options.py
"""Transport settings and the default/request merge rule.

Dispatcher defaults are fixed at construction. Each Request may override
individual settings and headers; the request always wins on conflict.
Header names are compared case-insensitively and the default ordering is
kept, with request-only headers appended in their own order.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from httpwindow.errors import ConfigurationError
from httpwindow.request import HeaderPairs, Request, RequestBody


class TransportOptions(BaseModel):
    """Per-operation transport settings.

    Attributes:
        timeout: Total time allowed for one transfer in seconds
        connect_timeout: Time allowed for establishing the connection
        follow_redirects: Follow 3xx responses
        max_redirects: Redirect limit when following
        verify: Verify TLS certificates
        fail_on_http_error: Report status >= 400 as HTTP_RETURNED_ERROR
        max_response_bytes: Larger bodies are reported as FILESIZE_EXCEEDED
        user_agent: User-Agent header applied unless a header sets one
    """

    model_config = {"frozen": True, "extra": "forbid"}

    timeout: float = Field(30.0, gt=0, description="Total transfer timeout in seconds")
    connect_timeout: float = Field(30.0, gt=0, description="Connect timeout in seconds")
    follow_redirects: bool = Field(True, description="Follow redirects")
    max_redirects: int = Field(5, ge=0, description="Maximum redirects to follow")
    verify: bool = Field(True, description="Verify TLS certificates")
    fail_on_http_error: bool = Field(False, description="Treat HTTP status >= 400 as a transport failure")
    max_response_bytes: int | None = Field(None, gt=0, description="Maximum accepted body size")
    user_agent: str | None = Field(None, description="Default User-Agent")


def merge_options(defaults: TransportOptions, overrides: Mapping[str, Any] | None) -> TransportOptions:
    """Apply request-level overrides on top of dispatcher defaults.

    Raises:
        ConfigurationError: If an override names an unknown setting or has an invalid value
    """
    if not overrides:
        return defaults
    try:
        return TransportOptions.model_validate({**defaults.model_dump(), **dict(overrides)})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid transport options {dict(overrides)!r}: {e}") from e


def merge_headers(defaults: HeaderPairs, overrides: HeaderPairs) -> HeaderPairs:
    """Merge header pairs, request values replacing defaults of the same name."""
    if not overrides:
        return defaults
    override_names = {name.lower() for name, _ in overrides}
    kept = tuple((name, value) for name, value in defaults if name.lower() not in override_names)
    return kept + overrides


@dataclass(frozen=True, slots=True)
class PreparedRequest:
    """What a transport needs to start one operation: merged and final."""

    method: str
    url: str
    body: RequestBody | None
    headers: HeaderPairs
    options: TransportOptions


def prepare_request(
    request: Request,
    default_headers: HeaderPairs,
    default_options: TransportOptions,
) -> PreparedRequest:
    """Resolve a Request against dispatcher defaults."""
    options = merge_options(default_options, request.options)
    headers = merge_headers(default_headers, request.headers)
    if options.user_agent and not any(name.lower() == "user-agent" for name, _ in headers):
        headers = (*headers, ("User-Agent", options.user_agent))
    return PreparedRequest(
        method=request.method,
        url=request.url,
        body=request.body,
        headers=headers,
        options=options,
    )
