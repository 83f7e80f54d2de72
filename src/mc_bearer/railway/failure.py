"""
Failure description — structured error information for the failure track.

Every failure carries an ErrorCode from the token-exchange taxonomy, a
human-readable message, and optionally the hop that failed and the HTTP
status observed there.

Enum + frozen dataclass gives us __eq__, __hash__ and __repr__ for free,
and Enum members are singleton-comparable with `is`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum, unique
from typing import Optional


@unique
class ErrorCode(Enum):
    """
    Failure kinds surfaced by the token-exchange pipeline.

    The first eight are produced by the network hops; the last two belong
    to the surrounding CLI (account file and settings).
    """

    PARSE_FAILURE = "PARSE_FAILURE"
    """Upstream markup or JSON no longer has the expected shape."""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    """The login page was served again: wrong identity or secret."""

    UNSUPPORTED_TWO_FACTOR = "UNSUPPORTED_TWO_FACTOR"
    """Two-factor authentication is enabled on the account."""

    ACCOUNT_NOT_GAME_LINKED = "ACCOUNT_NOT_GAME_LINKED"
    """No Xbox profile exists for the account (XErr 2148916233)."""

    ACCOUNT_IS_MINOR = "ACCOUNT_IS_MINOR"
    """Child account without family consent (XErr 2148916238)."""

    AUTHORIZATION_REJECTED = "AUTHORIZATION_REJECTED"
    """XSTS returned 401 with an unrecognised XErr."""

    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    """Non-success HTTP status, timeout, or connection error."""

    UNEXPECTED_RESPONSE = "UNEXPECTED_RESPONSE"
    """Success status but an expected field is missing."""

    INPUT_FORMAT_ERROR = "INPUT_FORMAT_ERROR"
    """Malformed account file line."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Invalid settings."""


@unique
class PipelineStage(Enum):
    """
    The network hops of one pipeline run, in order.

    A failure tagged with a stage means the run reached that hop and stopped
    there: Start → Bootstrapped → CredentialsExchanged → FederationAcquired
    → SecurityAcquired → BearerAcquired.
    """

    BOOTSTRAP = "bootstrap"
    CREDENTIAL_EXCHANGE = "credential_exchange"
    FEDERATION_TOKEN = "federation_token"
    SECURITY_TOKEN = "security_token"
    SERVICE_BEARER = "service_bearer"


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor carrying error code, message, hop context,
    optional HTTP status, optional exception, and timestamp.

    >>> desc = FailureDescription(ErrorCode.INVALID_CREDENTIALS, "Incorrect credentials")
    >>> desc.code
    <ErrorCode.INVALID_CREDENTIALS: 'INVALID_CREDENTIALS'>
    >>> desc.hop is None
    True
    """

    code: ErrorCode
    message: str
    exception: Optional[BaseException] = field(default=None, repr=False)
    hop: Optional[PipelineStage] = None
    status: Optional[int] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def with_hop(self, hop: PipelineStage) -> FailureDescription:
        """Attach the failing hop, keeping one already set by a deeper stage."""
        if self.hop is not None:
            return self
        return replace(self, hop=hop)

    def describe(self) -> str:
        """One-line summary for CLI output: `[hop] CODE (HTTP nnn): message`."""
        prefix = f"[{self.hop.value}] " if self.hop is not None else ""
        status = f" (HTTP {self.status})" if self.status is not None else ""
        return f"{prefix}{self.code.value}{status}: {self.message}"
