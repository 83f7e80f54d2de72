"""
Batch runner — sequential loop of whole-pipeline runs, one per account.

Each account gets its own pipeline run (and therefore its own session).
A failure is recorded against that account and the loop moves on; it
never aborts the siblings.

Retry lives here, not in the pipeline: tenacity re-runs the complete
exchange for an account when it ended in TRANSPORT_FAILURE, because the
PPFT value and login cookies are single-use and a mid-chain retry cannot
succeed.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import structlog
from tenacity import RetryCallState, Retrying, retry_if_result, stop_after_attempt, wait_fixed

from mc_bearer.config import RetrySettings
from mc_bearer.domain.models import Credentials
from mc_bearer.railway import ErrorCode, LoggingExecutionContext, Result

log = structlog.get_logger()

type PipelineRunner = Callable[[Credentials], Result[str]]


@dataclass(frozen=True, slots=True)
class BatchItem:
    """Outcome of one account's run."""

    identity: str
    result: Result[str] = field(repr=False)


@dataclass(frozen=True, slots=True)
class BatchReport:
    """All outcomes, in input order."""

    items: list[BatchItem] = field(default_factory=list)

    @property
    def bearer_tokens(self) -> list[str]:
        return [item.result.value() for item in self.items if item.result.is_success()]

    @property
    def failures(self) -> list[BatchItem]:
        return [item for item in self.items if item.result.is_failure()]

    @property
    def all_succeeded(self) -> bool:
        return not self.failures


def _is_transport_failure(result: Result[str]) -> bool:
    return result.is_failure() and result.error().code is ErrorCode.TRANSPORT_FAILURE


def _last_result(state: RetryCallState) -> Result[str]:
    """Hand back the final attempt's Result instead of raising RetryError."""
    assert state.outcome is not None
    return state.outcome.result()


def run_with_retry(
    credentials: Credentials,
    runner: PipelineRunner,
    retry: RetrySettings | None = None,
) -> Result[str]:
    """
    Run the pipeline for one account, restarting it on transport failures.

    Every attempt is a complete, independent run; the final attempt's
    Result is returned whatever it is.
    """
    retry = retry or RetrySettings()

    def _before_sleep(state: RetryCallState) -> None:
        log.warning(
            "pipeline.retrying",
            attempt=state.attempt_number,
            max_attempts=retry.attempts,
        )

    retrying = Retrying(
        stop=stop_after_attempt(retry.attempts),
        wait=wait_fixed(retry.wait_seconds),
        retry=retry_if_result(_is_transport_failure),
        retry_error_callback=_last_result,
        before_sleep=_before_sleep,
    )
    return retrying(runner, credentials)


def run_batch(
    accounts: Sequence[Credentials],
    runner: PipelineRunner,
    retry: RetrySettings | None = None,
) -> BatchReport:
    """
    Run every account in order and collect the outcomes.

    Each run is wrapped in a LoggingExecutionContext, so an unexpected
    exception inside one run becomes that account's failure.
    """
    items: list[BatchItem] = []
    for index, credentials in enumerate(accounts, start=1):
        ctx = LoggingExecutionContext(
            operation="BearerExchange",
            position=index,
        )
        result = ctx.execute(lambda: run_with_retry(credentials, runner, retry))
        result.peek_failure(
            lambda err: log.error(
                "batch.item_failed",
                position=index,
                failure=err.describe(),
            )
        )
        items.append(BatchItem(identity=credentials.identity, result=result))

    report = BatchReport(items=items)
    log.info(
        "batch.completed",
        total=len(report.items),
        succeeded=len(report.bearer_tokens),
        failed=len(report.failures),
    )
    return report
