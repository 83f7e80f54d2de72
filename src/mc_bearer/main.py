"""
Application entry point — wires settings, logging and the pipeline.

Composition root: the only place that picks concrete adapters and decides
how results are delivered.

Modes:
  mc-bearer --email E --password P          print one bearer token
  mc-bearer --batch [--accounts A] [--output B]
                                            accounts file in, bearer file out

Exit codes: 0 all tokens acquired, 1 configuration or input error,
2 at least one account failed.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import structlog
from pydantic import ValidationError

from mc_bearer import __version__
from mc_bearer.accounts import read_accounts, write_bearers
from mc_bearer.batch import run_batch, run_with_retry
from mc_bearer.config import AppSettings
from mc_bearer.domain.models import Credentials
from mc_bearer.pipeline import acquire_bearer_token
from mc_bearer.railway import FailureDescription, LoggingExecutionContext

EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_AUTH_FAILED = 2


def configure_structlog(log_level: str = "INFO") -> None:
    """
    Configure structlog for human-readable console output on stderr.

    stdout is reserved for the bearer token in single-account mode.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="mc-bearer",
        description=(
            "Retrieve a Minecraft account's bearer token through the "
            "Microsoft → Xbox Live → Minecraft services login chain"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    single = parser.add_argument_group("single account")
    single.add_argument("-e", "--email", help="Email address of the account to authenticate")
    single.add_argument("-p", "--password", help="Password of the account to authenticate")

    batch = parser.add_argument_group("batch")
    batch.add_argument(
        "--batch",
        action="store_true",
        help="Read identity:secret lines from the accounts file, write bearers to the output file",
    )
    batch.add_argument(
        "--accounts", type=Path, help="Accounts file (default: settings files.accounts_path)"
    )
    batch.add_argument(
        "--output", type=Path, help="Bearer output file (default: settings files.bearers_path)"
    )

    parser.add_argument("--log-level", help="Override the configured log level")

    args = parser.parse_args(argv)
    if not args.batch and not (args.email and args.password):
        parser.error("either --batch or both --email and --password are required")
    if args.batch and (args.email or args.password):
        parser.error("--batch cannot be combined with --email/--password")
    return args


def _run_single(args: argparse.Namespace, settings: AppSettings) -> int:
    credentials = Credentials(identity=args.email, secret=args.password)
    ctx = LoggingExecutionContext(operation="BearerExchange")
    result = ctx.execute(lambda: run_with_retry(credentials, acquire_bearer_token, settings.retry))

    def _print_failure(err: FailureDescription) -> int:
        print(f"Error getting bearer token: {err.describe()}", file=sys.stderr)  # noqa: T201
        return EXIT_AUTH_FAILED

    def _print_token(token: str) -> int:
        print(token)  # noqa: T201
        return EXIT_SUCCESS

    return result.either(on_success=_print_token, on_failure=_print_failure)


def _run_batch(args: argparse.Namespace, settings: AppSettings) -> int:
    accounts_path = settings.files.accounts_path if args.accounts is None else args.accounts
    output_path = settings.files.bearers_path if args.output is None else args.output

    accounts = read_accounts(accounts_path)
    if accounts.is_failure():
        print(f"FATAL: {accounts.error().describe()}", file=sys.stderr)  # noqa: T201
        return EXIT_CONFIG_ERROR

    report = run_batch(accounts.value(), acquire_bearer_token, settings.retry)

    written = write_bearers(output_path, report.bearer_tokens)
    if written.is_failure():
        print(f"FATAL: {written.error().describe()}", file=sys.stderr)  # noqa: T201
        return EXIT_CONFIG_ERROR

    for item in report.failures:
        print(f"{item.identity}: {item.result.error().describe()}", file=sys.stderr)  # noqa: T201
    return EXIT_SUCCESS if report.all_succeeded else EXIT_AUTH_FAILED


def main(argv: Sequence[str] | None = None) -> int:
    """Load settings, configure logging, and run the selected mode."""
    args = parse_args(argv)

    try:
        settings = AppSettings()
    except ValidationError as e:
        print(f"FATAL: Configuration error — {e}", file=sys.stderr)  # noqa: T201
        return EXIT_CONFIG_ERROR

    log_level = args.log_level or settings.log_level
    configure_structlog(log_level)
    log = structlog.get_logger()
    log.info("app.starting", version=__version__, mode="batch" if args.batch else "single")

    if args.batch:
        return _run_batch(args, settings)
    return _run_single(args, settings)


if __name__ == "__main__":
    sys.exit(main())
