"""Replaceable HTTP fetch function used for every call to Apple.

The fetch function takes a ``FetchRequest`` and returns the raw response
body. HTTP status codes are not interpreted: Apple reports OAuth errors as
JSON bodies and those are handed back to the caller.
"""

import json
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from pydantic import BaseModel, Field

HTTP_TIMEOUT_DEFAULT = 10.0


class FetchRequest(BaseModel):
    """A single outbound request to an Apple endpoint."""

    method: str
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    data: dict[str, str] | None = None


FetchFn = Callable[[FetchRequest], Awaitable[str]]


def make_httpx_fetch(
    transport: httpx.AsyncBaseTransport | None = None,
    timeout: float = HTTP_TIMEOUT_DEFAULT,
) -> FetchFn:
    """Build a fetch function backed by ``httpx.AsyncClient``."""

    async def fetch(request: FetchRequest) -> str:
        async with httpx.AsyncClient(transport=transport, timeout=timeout) as client:
            response = await client.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.data,
            )
        return response.text

    return fetch


_default_fetch: FetchFn = make_httpx_fetch()
_fetch: FetchFn = _default_fetch


def get_fetch() -> FetchFn:
    """Return the process-wide fetch function."""
    return _fetch


def set_fetch(fetch_fn: FetchFn) -> None:
    """Replace the process-wide fetch function for all subsequent calls.

    Useful for proxying requests or overriding headers, and for tests.
    """
    global _fetch
    _fetch = fetch_fn


def reset_fetch() -> None:
    """Restore the default ``httpx`` fetch function."""
    global _fetch
    _fetch = _default_fetch


def parse_json_body(body: str) -> Any:
    """Parse a response body as JSON; an empty body is returned as ``""``."""
    if not body:
        return body
    return json.loads(body)
