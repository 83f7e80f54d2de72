"""
HTTP session — one httpx.Client per pipeline run, plus the response checks
every hop shares.

The client owns the cookie jar that ties the login page to the credential
POST, so it is scoped to a single run and closed on every exit path.
No retries here: a timeout or connection error becomes TRANSPORT_FAILURE
and the caller decides whether the whole pipeline is worth running again.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import httpx
import structlog

from mc_bearer.railway import ErrorCode, Result

log = structlog.get_logger()

SESSION_TIMEOUT_SECONDS = 5.0


@contextmanager
def open_session() -> Iterator[httpx.Client]:
    """Yield a fresh client with its own cookie jar and a fixed 5 s timeout."""
    client = httpx.Client(timeout=SESSION_TIMEOUT_SECONDS, follow_redirects=True)
    log.debug("session.opened", timeout_s=SESSION_TIMEOUT_SECONDS)
    try:
        yield client
    finally:
        client.close()
        log.debug("session.closed")


def send(request: Callable[[], httpx.Response], description: str) -> Result[httpx.Response]:
    """Issue a request; network errors and timeouts land on the failure track."""
    return Result.from_computation(
        request,
        ErrorCode.TRANSPORT_FAILURE,
        f"{description} request failed",
    )


def require_status(
    response: httpx.Response,
    description: str,
    expected: int = 200,
) -> Result[httpx.Response]:
    """Fail with TRANSPORT_FAILURE carrying the status unless it is `expected`."""
    if response.status_code == expected:
        return Result.success(response)
    return Result.failure(
        ErrorCode.TRANSPORT_FAILURE,
        f"{description} returned status {response.status_code}",
        status=response.status_code,
    )


def json_body(response: httpx.Response, description: str) -> Result[dict[str, Any]]:
    """Decode a JSON object body; anything else is a PARSE_FAILURE."""
    return Result.from_computation(
        response.json,
        ErrorCode.PARSE_FAILURE,
        f"{description} response is not valid JSON",
    ).flat_map(
        lambda body: Result.success(body)
        if isinstance(body, dict)
        else Result.failure(
            ErrorCode.PARSE_FAILURE,
            f"{description} response is not a JSON object",
        )
    )


def lookup(document: Any, *path: str | int) -> Any:
    """Walk nested dicts/lists; None as soon as a step is missing."""
    current = document
    for key in path:
        try:
            current = current[key]
        except (KeyError, IndexError, TypeError):
            return None
    return current


def require_text(document: dict[str, Any], *path: str | int, description: str) -> Result[str]:
    """
    Extract a non-empty string at `path`.

    A missing or non-string field on a success response is protocol drift,
    reported as UNEXPECTED_RESPONSE rather than a crash.
    """
    value = lookup(document, *path)
    if isinstance(value, str) and value:
        return Result.success(value)
    dotted = ".".join(str(step) for step in path)
    return Result.failure(
        ErrorCode.UNEXPECTED_RESPONSE,
        f"{description} response has no {dotted}",
    )
