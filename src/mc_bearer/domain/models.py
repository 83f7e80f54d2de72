"""
Domain models — immutable values threaded between the pipeline hops.

Each value lives for exactly one pipeline run and flows forward only.
Secrets and tokens are excluded from repr so they can never leak into
log lines or tracebacks by accident.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Credentials:
    """
    A Microsoft account identity (email) and its password.

    Supplied once by the caller; the pipeline never logs or stores the secret.
    """

    identity: str
    secret: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class BootstrapData:
    """
    Ephemeral values scraped from the interactive login page.

      - csrf_value — the PPFT anti-forgery token from the hidden form field
      - post_url   — the urlPost target the credentials must be submitted to
    """

    csrf_value: str = field(repr=False)
    post_url: str


@dataclass(frozen=True, slots=True)
class FederationTokenSet:
    """
    Xbox Live user token plus the user hash (uhs) returned alongside it.

    The token feeds the XSTS call; the user hash is carried to the final
    identity token.
    """

    token: str = field(repr=False)
    user_hash: str


@dataclass(frozen=True, slots=True)
class SecurityGrant:
    """XSTS token for the Minecraft relying party, paired with the user hash."""

    user_hash: str
    security_token: str = field(repr=False)

    @property
    def identity_token(self) -> str:
        """Composite credential accepted by login_with_xbox."""
        return f"XBL3.0 x={self.user_hash};{self.security_token}"
