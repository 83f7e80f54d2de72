"""
Railway-Oriented Programming primitives for the token-exchange pipeline.

Explicit, composable error handling — no exceptions cross a hop boundary.

    from mc_bearer.railway import ErrorCode, Result

    def require_token(body: dict) -> Result[str]:
        return Result.from_optional(body.get("Token"), "response has no Token")
"""

from mc_bearer.railway.result import Result, Success, Failure
from mc_bearer.railway.failure import ErrorCode, FailureDescription, PipelineStage
from mc_bearer.railway.execution import (
    ExecutionContext,
    NoOpExecutionContext,
    LoggingExecutionContext,
)
from mc_bearer.railway.assertions import ResultAssertions

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "PipelineStage",
    "ExecutionContext",
    "NoOpExecutionContext",
    "LoggingExecutionContext",
    "ResultAssertions",
]
