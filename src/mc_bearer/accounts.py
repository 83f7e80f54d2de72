"""
Account and bearer files — the plain-text edges of batch mode.

  accounts.txt  identity:secret, one per line, exactly one colon per line
  bearers.txt   bearer tokens, newline-joined, in input order

A malformed line aborts the whole batch before any network call.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import structlog

from mc_bearer.domain.models import Credentials
from mc_bearer.railway import ErrorCode, Result

log = structlog.get_logger()


def parse_accounts(text: str) -> Result[list[Credentials]]:
    """
    Parse identity:secret lines.

    Lines end at "\\n" with an optional "\\r" before it. A single trailing
    newline is tolerated; any other line without exactly
    one colon fails the whole input. The error names the line number but
    never echoes the line, which holds a password.
    """
    # Only \n and \r\n end a line; other separators may appear in a secret.
    lines = [line.removesuffix("\r") for line in text.split("\n")]
    if lines[-1] == "":
        lines.pop()
    accounts: list[Credentials] = []
    for number, line in enumerate(lines, start=1):
        if line.count(":") != 1:
            return Result.failure(
                ErrorCode.INPUT_FORMAT_ERROR,
                f"Line {number} must be identity:secret with exactly one colon. "
                "Identities or secrets containing a colon are not supported",
            )
        identity, secret = line.split(":")
        accounts.append(Credentials(identity=identity, secret=secret))
    return Result.success(accounts)


def read_accounts(path: Path) -> Result[list[Credentials]]:
    """Read and parse the accounts file."""
    return (
        Result.from_computation(
            lambda: path.read_text(encoding="utf-8"),
            ErrorCode.INPUT_FORMAT_ERROR,
            f"Unable to read accounts file {path}",
        )
        .flat_map(parse_accounts)
        .peek(lambda accounts: log.info("accounts.loaded", path=str(path), count=len(accounts)))
    )


def write_bearers(path: Path, bearers: Iterable[str]) -> Result[int]:
    """Write tokens newline-joined; returns how many were written."""
    tokens = list(bearers)

    def _write() -> int:
        path.write_text("\n".join(tokens), encoding="utf-8")
        return len(tokens)

    return Result.from_computation(
        _write,
        ErrorCode.CONFIGURATION_ERROR,
        f"Unable to write bearer file {path}",
    ).peek(lambda count: log.info("bearers.written", path=str(path), count=count))
