"""
Execution contexts — separate WHAT (the pipeline) from HOW it is run.

The pipeline describes the hops and returns Result[T]; an execution
context wraps that computation with observability without the hops
knowing about it.

Usage:
    ctx = LoggingExecutionContext(operation="BearerExchange", position=1)
    result = ctx.execute(lambda: acquire_bearer_token(credentials))
"""

from __future__ import annotations

import time
from typing import Any, Callable, Protocol, TypeVar, runtime_checkable

import structlog

from mc_bearer.railway.failure import ErrorCode, FailureDescription
from mc_bearer.railway.result import Failure, Result

T = TypeVar("T")
log = structlog.get_logger()


@runtime_checkable
class ExecutionContext(Protocol):
    """
    Protocol for execution contexts.

    Any class implementing execute(computation) satisfies this protocol
    via Python's structural typing — no explicit inheritance needed.
    """

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        """Execute a Result-returning computation within this context."""
        ...


class NoOpExecutionContext:
    """Passthrough execution context — runs computation without any wrapper."""

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        return computation()


class LoggingExecutionContext:
    """
    Execution context that logs entry, exit, duration, and result state.

    Wraps another context (decorator pattern) to add observability. Extra
    keyword arguments are bound onto every event, so callers can tag a run
    with its batch position. Success values and credentials are never logged.
    """

    def __init__(
        self,
        inner: ExecutionContext | None = None,
        operation: str = "unknown",
        **bindings: Any,
    ) -> None:
        self._inner = inner or NoOpExecutionContext()
        self._operation = operation
        self._log = log.bind(operation=operation, **bindings)

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        self._log.info("execution.started")
        start = time.monotonic()

        try:
            result = self._inner.execute(computation)
        except Exception as e:
            elapsed = time.monotonic() - start
            self._log.error("execution.crashed", elapsed_s=round(elapsed, 3), error=str(e))
            # Unclassified crash inside a hop; surfaced on the same track as
            # any other failure so a batch keeps going.
            return Failure(
                FailureDescription(
                    ErrorCode.UNEXPECTED_RESPONSE,
                    f"Execution failed: {e}",
                    e,
                )
            )

        elapsed = time.monotonic() - start
        if result.is_success():
            self._log.info("execution.completed", elapsed_s=round(elapsed, 3), state="SUCCESS")
        else:
            self._log.warning(
                "execution.completed",
                elapsed_s=round(elapsed, 3),
                state="FAILURE",
                failure=result.error().describe(),
            )
        return result
